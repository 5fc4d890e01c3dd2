"""POST /v1/credit-card-invoices/validate-invoices - heal cached current invoice totals"""

import time
import logging
from fastapi import APIRouter, Depends, HTTPException, Request
from sqlalchemy.orm import Session

from invoice_gateway.api.v1.schemas import CardValidationItem, ValidationResponse
from invoice_gateway.api.dependencies import get_request_id
from invoice_gateway.infrastructure.database.session import get_db
from invoice_gateway.infrastructure.database.repositories import (
    CardRepository,
    CardTransactionRepository,
    to_card_profile,
)
from invoice_gateway.domain.invoice_totals import check_card_total
from invoice_gateway.infrastructure.observability.metrics import record_invoice_drift, record_reconciliation
from invoice_gateway.infrastructure.observability.logging import log_reconciliation_pass

router = APIRouter()


@router.post("/validate-invoices", response_model=ValidationResponse)
def validate_invoices(request: Request, db: Session = Depends(get_db)):
    """
    Recompute every card's current invoice from its open invoice periods.

    Cards whose cached value drifted are overwritten. Drift is expected after
    allocation or orphan corrections and is reported, not treated as an error.
    """
    start_time = time.time()
    request_id = get_request_id(request)

    try:
        card_repo = CardRepository(db)
        txn_repo = CardTransactionRepository(db)

        checks = []
        for card in card_repo.list_cards(lock=True):
            check = check_card_total(to_card_profile(card), card.current_invoice_cents, txn_repo.list_for_card(card.id))
            if check.needs_correction:
                card_repo.set_current_invoice(card, check.new_cents)
                record_invoice_drift(check.difference_cents)
            checks.append(check)

        db.commit()

    except Exception as e:
        db.rollback()
        logging.error(f"Invoice validation failed: {e}", extra={"request_id": request_id})
        raise HTTPException(status_code=500, detail="Internal server error")

    total_corrected = sum(1 for c in checks if c.needs_correction)

    duration_ms = (time.time() - start_time) * 1000
    record_reconciliation("validate_invoices")
    log_reconciliation_pass(request_id, "validate_invoices", total_corrected, len(checks), duration_ms)

    return ValidationResponse(
        cards=[
            CardValidationItem(
                card_id=str(c.card_id),
                card_name=c.card_name,
                previous_value=c.previous_cents,
                new_value=c.new_cents,
                difference=c.difference_cents,
                needs_correction=c.needs_correction,
            )
            for c in checks
        ],
        total_corrected=total_corrected,
    )
