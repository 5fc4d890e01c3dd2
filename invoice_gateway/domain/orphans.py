"""Orphan allocation - assigns invoice periods to card transactions that never got one"""

from typing import Iterable, List, Tuple
from invoice_gateway.domain.models import CardProfile, CardTransaction, OrphanAssignment
from invoice_gateway.domain.billing_cycle import compute_invoice_period
from invoice_gateway.domain.exceptions import InvalidBatchSizeError


def validate_batch_size(batch_size: int, max_batch_size: int) -> None:
    if batch_size <= 0 or batch_size > max_batch_size:
        raise InvalidBatchSizeError(f"batch_size must be between 1 and {max_batch_size}, got {batch_size}")


def assign_orphans(orphans: Iterable[Tuple[CardProfile, CardTransaction]]) -> List[OrphanAssignment]:
    """
    Compute an invoice period for each orphan from its own card's closing day.

    Later installments are allocated by their own date, so a 3x purchase
    spreads across three consecutive invoices.
    """
    return [
        OrphanAssignment(
            transaction_id=txn.transaction_id,
            period=compute_invoice_period(txn.date, card.closing_day),
        )
        for card, txn in orphans
        if txn.invoice_period is None
    ]


def orphan_progress(corrected_so_far: int, initial_count: int) -> float:
    """Progress percentage for a client looping over orphan batches"""
    if initial_count <= 0:
        return 100.0
    return min(100.0, corrected_so_far / initial_count * 100)
