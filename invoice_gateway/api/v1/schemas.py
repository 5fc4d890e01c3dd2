"""Pydantic schemas for API request/response validation"""

import datetime
from typing import List, Optional
from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel
from invoice_gateway.config import settings


class CamelModel(BaseModel):
    """Snake_case in Python, camelCase on the wire"""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class MismatchRecord(CamelModel):
    """Transaction filed under the wrong invoice"""

    id: str
    description: str
    amount: int = Field(..., description="Amount in cents")
    date: datetime.date
    card_name: str
    closing_day: int
    due_day: int
    current_invoice_month: int
    current_invoice_year: int
    corrected_invoice_month: int
    corrected_invoice_year: int


class AllocationPreviewResponse(CamelModel):
    """Response for GET /v1/credit-card-invoices/allocation-preview"""

    data: List[MismatchRecord]
    total: int


class CorrectionResponse(CamelModel):
    """Response for POST /v1/credit-card-invoices/correct-allocations"""

    corrected: int
    total: int
    message: str


class OrphanCountResponse(CamelModel):
    """Response for GET /v1/credit-card-invoices/orphans/count"""

    orphan_count: int


class OrphanCorrectRequest(CamelModel):
    """Request body for POST /v1/credit-card-invoices/orphans/correct"""

    batch_size: int = Field(default=settings.orphan_batch_size, description="Orphans to fix in this call")


class OrphanCorrectResponse(CamelModel):
    """Response for POST /v1/credit-card-invoices/orphans/correct"""

    corrected: int
    has_more: bool


class CardValidationItem(CamelModel):
    """Cached vs. recomputed current invoice for one card (cents)"""

    card_id: str
    card_name: str
    previous_value: int
    new_value: int
    difference: int
    needs_correction: bool


class ValidationResponse(CamelModel):
    """Response for POST /v1/credit-card-invoices/validate-invoices"""

    cards: List[CardValidationItem]
    total_corrected: int


class InvoiceTransactionSchema(CamelModel):
    """Member transaction of an invoice"""

    id: str
    description: str
    amount: int
    date: datetime.date
    type: str
    is_paid: bool
    current_installment: Optional[int] = None
    total_installments: Optional[int] = None


class InvoiceResponse(CamelModel):
    """Computed invoice for a card and billing period (amounts in cents)"""

    card_id: str
    card_name: str
    month: int
    year: int
    closing_date: datetime.date
    due_date: datetime.date
    total_amount: int
    paid_amount: int
    transaction_count: int
    is_paid: bool
    status: str
    transactions: List[InvoiceTransactionSchema] = []
