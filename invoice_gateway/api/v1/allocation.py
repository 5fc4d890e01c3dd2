"""Invoice allocation audit and bulk correction endpoints"""

import time
import logging
from typing import List
from fastapi import APIRouter, Depends, HTTPException, BackgroundTasks, Request
from sqlalchemy.orm import Session

from invoice_gateway.api.v1.schemas import AllocationPreviewResponse, CorrectionResponse, MismatchRecord
from invoice_gateway.api.dependencies import get_forecast_client, get_request_id
from invoice_gateway.infrastructure.database.session import get_db
from invoice_gateway.infrastructure.database.repositories import (
    CardRepository,
    CardTransactionRepository,
    to_card_profile,
)
from invoice_gateway.infrastructure.clients.forecast import ForecastClient
from invoice_gateway.domain.allocation import audit_allocations, correction_message
from invoice_gateway.domain.exceptions import DomainException
from invoice_gateway.domain.models import AllocationMismatch
from invoice_gateway.infrastructure.observability.metrics import record_reconciliation
from invoice_gateway.infrastructure.observability.logging import log_reconciliation_pass

router = APIRouter()


def collect_mismatches(db: Session, lock: bool = False) -> List[AllocationMismatch]:
    """Audit every card's allocated transactions"""
    card_repo = CardRepository(db)
    txn_repo = CardTransactionRepository(db)

    mismatches = []
    for card in card_repo.list_cards(lock=lock):
        mismatches.extend(audit_allocations(to_card_profile(card), txn_repo.list_for_card(card.id)))
    return mismatches


def to_mismatch_record(mismatch: AllocationMismatch) -> MismatchRecord:
    return MismatchRecord(
        id=str(mismatch.transaction_id),
        description=mismatch.description,
        amount=mismatch.amount_cents,
        date=mismatch.date,
        card_name=mismatch.card_name,
        closing_day=mismatch.closing_day,
        due_day=mismatch.due_day,
        current_invoice_month=mismatch.current_period.month,
        current_invoice_year=mismatch.current_period.year,
        corrected_invoice_month=mismatch.corrected_period.month,
        corrected_invoice_year=mismatch.corrected_period.year,
    )


@router.get("/allocation-preview", response_model=AllocationPreviewResponse)
def preview_allocations(request: Request, db: Session = Depends(get_db)):
    """
    List card transactions stored under the wrong invoice.

    Read-only. An empty list means every allocation is already correct.
    """
    request_id = get_request_id(request)

    try:
        mismatches = collect_mismatches(db)
    except DomainException as e:
        logging.warning(f"Allocation preview failed: {e}", extra={"request_id": request_id})
        raise HTTPException(status_code=422, detail=str(e))
    except Exception as e:
        logging.error(f"Unexpected error: {e}", extra={"request_id": request_id})
        raise HTTPException(status_code=500, detail="Internal server error")

    record_reconciliation("allocation_preview")
    return AllocationPreviewResponse(
        data=[to_mismatch_record(m) for m in mismatches],
        total=len(mismatches),
    )


@router.post("/correct-allocations", response_model=CorrectionResponse)
def correct_allocations(
    background_tasks: BackgroundTasks,
    request: Request,
    db: Session = Depends(get_db),
    forecast_client: ForecastClient = Depends(get_forecast_client),
):
    """
    Move every mismatched transaction to its correct invoice.

    Flow:
    1. Re-run the allocation audit with card rows locked
    2. Conditionally update each mismatched transaction (no-op when already correct)
    3. Commit all updates together
    4. Notify the forecast service when anything moved
    """
    start_time = time.time()
    request_id = get_request_id(request)

    try:
        mismatches = collect_mismatches(db, lock=True)

        txn_repo = CardTransactionRepository(db)
        corrected = sum(
            1 for m in mismatches
            if txn_repo.assign_invoice_period(m.transaction_id, m.corrected_period)
        )

        db.commit()

    except DomainException as e:
        db.rollback()
        logging.warning(f"Allocation correction rejected: {e}", extra={"request_id": request_id})
        raise HTTPException(status_code=422, detail=str(e))

    except Exception as e:
        db.rollback()
        logging.error(f"Allocation correction failed: {e}", extra={"request_id": request_id})
        raise HTTPException(status_code=500, detail="Internal server error")

    if corrected > 0:
        background_tasks.add_task(
            forecast_client.invalidate_forecasts,
            "allocation_correct",
            corrected,
            request_id,
        )

    duration_ms = (time.time() - start_time) * 1000
    record_reconciliation("allocation_correct", corrected)
    log_reconciliation_pass(request_id, "allocation_correct", corrected, len(mismatches), duration_ms)

    return CorrectionResponse(
        corrected=corrected,
        total=len(mismatches),
        message=correction_message(corrected, len(mismatches)),
    )
