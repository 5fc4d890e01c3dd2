"""Domain models - pure Python dataclasses representing business entities"""

import uuid
from dataclasses import dataclass, field
from datetime import date
from typing import List, Optional


# Transaction types that never belong to an invoice period
NON_INVOICE_TYPES = frozenset({"INVOICE_PAYMENT", "TRANSFER"})


@dataclass(frozen=True, order=True)
class InvoicePeriod:
    """Billing cycle bucket, ordered chronologically"""

    year: int
    month: int

    def next(self) -> "InvoicePeriod":
        if self.month == 12:
            return InvoicePeriod(year=self.year + 1, month=1)
        return InvoicePeriod(year=self.year, month=self.month + 1)


@dataclass
class CardProfile:
    """Credit card billing settings"""

    card_id: uuid.UUID
    name: str
    closing_day: int
    due_day: int


@dataclass
class CardTransaction:
    """Card transaction as seen by the reconciliation passes"""

    transaction_id: uuid.UUID
    date: date
    amount_cents: int
    description: str
    type: str  # INCOME | EXPENSE | TRANSFER | INVOICE_PAYMENT
    invoice_period: Optional[InvoicePeriod] = None
    is_paid: bool = False
    current_installment: Optional[int] = None
    total_installments: Optional[int] = None

    @property
    def signed_amount_cents(self) -> int:
        """Refunds (INCOME on a card) reduce the invoice"""
        return -self.amount_cents if self.type == "INCOME" else self.amount_cents


@dataclass
class AllocationMismatch:
    """Transaction stored under the wrong invoice period"""

    transaction_id: uuid.UUID
    description: str
    amount_cents: int
    date: date
    card_name: str
    closing_day: int
    due_day: int
    current_period: InvoicePeriod
    corrected_period: InvoicePeriod


@dataclass
class OrphanAssignment:
    """Invoice period chosen for a transaction that had none"""

    transaction_id: uuid.UUID
    period: InvoicePeriod


@dataclass
class CardTotalCheck:
    """Cached vs. recomputed open-invoice total for one card"""

    card_id: uuid.UUID
    card_name: str
    previous_cents: int
    new_cents: int

    @property
    def difference_cents(self) -> int:
        return self.new_cents - self.previous_cents

    @property
    def needs_correction(self) -> bool:
        return self.previous_cents != self.new_cents


@dataclass
class InvoiceSummary:
    """Computed invoice for a card and period"""

    card_id: uuid.UUID
    card_name: str
    period: InvoicePeriod
    closing_date: date
    due_date: date
    total_cents: int = 0
    paid_cents: int = 0
    transaction_count: int = 0
    paid_count: int = 0
    status: str = "OPEN"
    transactions: List[CardTransaction] = field(default_factory=list)

    @property
    def is_paid(self) -> bool:
        return self.transaction_count > 0 and self.paid_count == self.transaction_count
