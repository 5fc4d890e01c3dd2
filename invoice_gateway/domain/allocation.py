"""Invoice allocation audit - finds card transactions filed under the wrong invoice"""

from typing import Iterable, List
from invoice_gateway.domain.models import (
    AllocationMismatch,
    CardProfile,
    CardTransaction,
    NON_INVOICE_TYPES,
)
from invoice_gateway.domain.billing_cycle import compute_invoice_period


def is_allocatable(transaction: CardTransaction) -> bool:
    """Invoice payments and transfers settle invoices, they never belong to one"""
    return transaction.type not in NON_INVOICE_TYPES


def audit_allocations(card: CardProfile, transactions: Iterable[CardTransaction]) -> List[AllocationMismatch]:
    """
    Compare each transaction's stored invoice period with the one its date implies.

    Transactions without a stored period are orphans and are left to the
    orphan pass. An empty result means the card is fully consistent.
    """
    mismatches = []
    for txn in transactions:
        if txn.invoice_period is None or not is_allocatable(txn):
            continue

        correct = compute_invoice_period(txn.date, card.closing_day)
        if correct == txn.invoice_period:
            continue

        mismatches.append(
            AllocationMismatch(
                transaction_id=txn.transaction_id,
                description=txn.description,
                amount_cents=txn.amount_cents,
                date=txn.date,
                card_name=card.name,
                closing_day=card.closing_day,
                due_day=card.due_day,
                current_period=txn.invoice_period,
                corrected_period=correct,
            )
        )

    return mismatches


def correction_message(corrected: int, total: int) -> str:
    """Operator-facing summary of a correction run"""
    if total == 0:
        return "All invoice allocations are already correct"
    if corrected == total:
        return f"{corrected} transaction(s) moved to the correct invoice"
    return f"{corrected} of {total} transaction(s) moved to the correct invoice"
