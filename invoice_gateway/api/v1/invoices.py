"""GET /v1/credit-card-invoices - computed invoices per card"""

import uuid
import logging
from datetime import date
from typing import List, Optional
from fastapi import APIRouter, Depends, HTTPException, Query, Request
from sqlalchemy.orm import Session

from invoice_gateway.api.v1.schemas import InvoiceResponse, InvoiceTransactionSchema
from invoice_gateway.api.dependencies import get_request_id, get_today
from invoice_gateway.infrastructure.database.session import get_db
from invoice_gateway.infrastructure.database.repositories import (
    CardRepository,
    CardTransactionRepository,
    to_card_profile,
)
from invoice_gateway.domain.billing_cycle import compute_invoice_period
from invoice_gateway.domain.exceptions import CardNotFoundError, DomainException
from invoice_gateway.domain.invoice_totals import empty_invoice, invoice_status, summarize_invoices
from invoice_gateway.domain.models import InvoiceSummary

router = APIRouter()


def to_invoice_response(summary: InvoiceSummary) -> InvoiceResponse:
    return InvoiceResponse(
        card_id=str(summary.card_id),
        card_name=summary.card_name,
        month=summary.period.month,
        year=summary.period.year,
        closing_date=summary.closing_date,
        due_date=summary.due_date,
        total_amount=summary.total_cents,
        paid_amount=summary.paid_cents,
        transaction_count=summary.transaction_count,
        is_paid=summary.is_paid,
        status=summary.status,
        transactions=[
            InvoiceTransactionSchema(
                id=str(txn.transaction_id),
                description=txn.description,
                amount=txn.amount_cents,
                date=txn.date,
                type=txn.type,
                is_paid=txn.is_paid,
                current_installment=txn.current_installment,
                total_installments=txn.total_installments,
            )
            for txn in summary.transactions
        ],
    )


def parse_card_id(card_id: str) -> uuid.UUID:
    try:
        return uuid.UUID(card_id)
    except ValueError:
        raise HTTPException(status_code=400, detail="Invalid card ID format")


def to_http_error(error: Exception, request_id: str) -> HTTPException:
    """Map a failed invoice read to an HTTP error"""
    if isinstance(error, CardNotFoundError):
        return HTTPException(status_code=404, detail="Card not found")
    if isinstance(error, DomainException):
        logging.warning(f"Invoice read rejected: {error}", extra={"request_id": request_id})
        return HTTPException(status_code=422, detail=str(error))
    logging.error(f"Unexpected error: {error}", extra={"request_id": request_id})
    return HTTPException(status_code=500, detail="Internal server error")


def collect_invoices(db: Session, card_id: Optional[uuid.UUID], today: date) -> List[InvoiceSummary]:
    """Invoices of one card, or of every card, oldest first per card"""
    card_repo = CardRepository(db)
    txn_repo = CardTransactionRepository(db)

    cards = [card_repo.require_card(card_id)] if card_id is not None else card_repo.list_cards()

    invoices = []
    for card in cards:
        invoices.extend(summarize_invoices(to_card_profile(card), txn_repo.list_for_card(card.id), today))
    return invoices


@router.get("", response_model=List[InvoiceResponse])
def list_invoices(
    request: Request,
    card_id: Optional[str] = Query(None, alias="cardId", description="Restrict to one card"),
    status: Optional[str] = Query(None, description="OPEN | CLOSED | OVERDUE | PARTIAL | PAID"),
    db: Session = Depends(get_db),
    today: date = Depends(get_today),
):
    """
    List invoices derived from allocated card transactions, oldest first per card.
    """
    card_uuid = parse_card_id(card_id) if card_id is not None else None

    try:
        invoices = collect_invoices(db, card_uuid, today)
    except Exception as e:
        raise to_http_error(e, get_request_id(request))

    if status:
        invoices = [inv for inv in invoices if inv.status == status.upper()]

    return [to_invoice_response(inv) for inv in invoices]


@router.get("/pending", response_model=List[InvoiceResponse])
def list_pending_invoices(
    request: Request,
    db: Session = Depends(get_db),
    today: date = Depends(get_today),
):
    """Invoices across all cards that still have something left to pay"""
    try:
        invoices = collect_invoices(db, None, today)
    except Exception as e:
        raise to_http_error(e, get_request_id(request))

    return [to_invoice_response(inv) for inv in invoices if not inv.is_paid]


@router.get("/current/{card_id}", response_model=InvoiceResponse)
def get_current_invoice(
    card_id: str,
    request: Request,
    db: Session = Depends(get_db),
    today: date = Depends(get_today),
):
    """
    Invoice a purchase made today would land in.

    Returns zero totals when the card has nothing allocated to that period yet.
    """
    card_uuid = parse_card_id(card_id)

    try:
        card = CardRepository(db).require_card(card_uuid)
        profile = to_card_profile(card)
        period = compute_invoice_period(today, profile.closing_day)
        summaries = summarize_invoices(profile, CardTransactionRepository(db).list_for_card(card.id), today)

        current = next((s for s in summaries if s.period == period), None)
        if current is None:
            current = empty_invoice(profile, period)
            current.status = invoice_status(current, today)
    except Exception as e:
        raise to_http_error(e, get_request_id(request))

    return to_invoice_response(current)
