"""Invoice totals - recompute cached card aggregates and build invoice summaries"""

from collections import defaultdict
from datetime import date
from typing import Dict, Iterable, List
from invoice_gateway.domain.models import (
    CardProfile,
    CardTotalCheck,
    CardTransaction,
    InvoicePeriod,
    InvoiceSummary,
)
from invoice_gateway.domain.allocation import is_allocatable
from invoice_gateway.domain.billing_cycle import closing_date, due_date


def group_by_period(transactions: Iterable[CardTransaction]) -> Dict[InvoicePeriod, List[CardTransaction]]:
    """Allocated, invoice-eligible transactions keyed by invoice period"""
    members: Dict[InvoicePeriod, List[CardTransaction]] = defaultdict(list)
    for txn in transactions:
        if txn.invoice_period is None or not is_allocatable(txn):
            continue
        members[txn.invoice_period].append(txn)
    return members


def open_invoice_total(transactions: Iterable[CardTransaction]) -> int:
    """
    Authoritative amount owed across a card's open invoices.

    An invoice stays open until every member transaction is paid, and an open
    invoice counts in full. Orphans are excluded until the orphan pass gives
    them a period.
    """
    return sum(
        txn.signed_amount_cents
        for members in group_by_period(transactions).values()
        if not all(txn.is_paid for txn in members)
        for txn in members
    )


def check_card_total(card: CardProfile, cached_cents: int, transactions: Iterable[CardTransaction]) -> CardTotalCheck:
    """Compare the cached current invoice against the recomputed open total"""
    return CardTotalCheck(
        card_id=card.card_id,
        card_name=card.name,
        previous_cents=cached_cents,
        new_cents=open_invoice_total(transactions),
    )


def invoice_status(summary: InvoiceSummary, today: date) -> str:
    if summary.is_paid:
        return "PAID"
    if summary.paid_count > 0:
        return "PARTIAL"
    if today > summary.due_date:
        return "OVERDUE"
    if today > summary.closing_date:
        return "CLOSED"
    return "OPEN"


def empty_invoice(card: CardProfile, period: InvoicePeriod) -> InvoiceSummary:
    return InvoiceSummary(
        card_id=card.card_id,
        card_name=card.name,
        period=period,
        closing_date=closing_date(period, card.closing_day),
        due_date=due_date(period, card.closing_day, card.due_day),
    )


def summarize_invoices(card: CardProfile, transactions: Iterable[CardTransaction], today: date) -> List[InvoiceSummary]:
    """Group a card's allocated transactions into invoices, oldest first"""
    members = group_by_period(transactions)

    summaries = []
    for period in sorted(members):
        summary = empty_invoice(card, period)
        for txn in members[period]:
            summary.total_cents += txn.signed_amount_cents
            summary.transaction_count += 1
            if txn.is_paid:
                summary.paid_cents += txn.signed_amount_cents
                summary.paid_count += 1
        summary.transactions = members[period]
        summary.status = invoice_status(summary, today)
        summaries.append(summary)

    return summaries
