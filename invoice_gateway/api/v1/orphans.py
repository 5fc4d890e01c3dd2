"""Orphan transaction endpoints - card transactions never assigned to an invoice"""

import time
import logging
from typing import Optional
from fastapi import APIRouter, Depends, HTTPException, BackgroundTasks, Request
from sqlalchemy.orm import Session

from invoice_gateway.api.v1.schemas import OrphanCountResponse, OrphanCorrectRequest, OrphanCorrectResponse
from invoice_gateway.api.dependencies import get_forecast_client, get_request_id
from invoice_gateway.config import settings
from invoice_gateway.infrastructure.database.session import get_db
from invoice_gateway.infrastructure.database.repositories import CardTransactionRepository
from invoice_gateway.infrastructure.clients.forecast import ForecastClient
from invoice_gateway.domain.orphans import assign_orphans, validate_batch_size
from invoice_gateway.domain.exceptions import DomainException
from invoice_gateway.infrastructure.observability.metrics import record_reconciliation
from invoice_gateway.infrastructure.observability.logging import log_reconciliation_pass

router = APIRouter()


@router.get("/orphans/count", response_model=OrphanCountResponse)
def count_orphans(request: Request, db: Session = Depends(get_db)):
    """Number of card transactions without an invoice period"""
    try:
        orphan_count = CardTransactionRepository(db).count_orphans()
    except Exception as e:
        logging.error(f"Orphan count failed: {e}", extra={"request_id": get_request_id(request)})
        raise HTTPException(status_code=500, detail="Internal server error")

    return OrphanCountResponse(orphan_count=orphan_count)


@router.post("/orphans/correct", response_model=OrphanCorrectResponse)
def correct_orphans(
    background_tasks: BackgroundTasks,
    request: Request,
    request_body: Optional[OrphanCorrectRequest] = None,
    db: Session = Depends(get_db),
    forecast_client: ForecastClient = Depends(get_forecast_client),
):
    """
    Assign invoice periods to one batch of orphans.

    The client calls repeatedly until hasMore is false. Each call commits its
    own batch, so an interrupted loop resumes where it stopped.
    """
    start_time = time.time()
    request_id = get_request_id(request)
    batch_size = request_body.batch_size if request_body else settings.orphan_batch_size

    try:
        validate_batch_size(batch_size, settings.max_orphan_batch_size)

        txn_repo = CardTransactionRepository(db)
        assignments = assign_orphans(txn_repo.fetch_orphans(batch_size))
        corrected = sum(
            1 for a in assignments
            if txn_repo.assign_orphan_period(a.transaction_id, a.period)
        )
        has_more = txn_repo.count_orphans() > 0

        db.commit()

    except DomainException as e:
        db.rollback()
        logging.warning(f"Orphan correction rejected: {e}", extra={"request_id": request_id})
        raise HTTPException(status_code=422, detail=str(e))

    except Exception as e:
        db.rollback()
        logging.error(f"Orphan correction failed: {e}", extra={"request_id": request_id})
        raise HTTPException(status_code=500, detail="Internal server error")

    if corrected > 0:
        background_tasks.add_task(
            forecast_client.invalidate_forecasts,
            "orphan_correct",
            corrected,
            request_id,
        )

    duration_ms = (time.time() - start_time) * 1000
    record_reconciliation("orphan_correct", corrected)
    log_reconciliation_pass(request_id, "orphan_correct", corrected, len(assignments), duration_ms)

    return OrphanCorrectResponse(corrected=corrected, has_more=has_more)
