"""Unit tests for invoice totals and summaries"""

import uuid
from datetime import date
from invoice_gateway.domain.invoice_totals import check_card_total, open_invoice_total, summarize_invoices
from invoice_gateway.domain.models import CardProfile, CardTransaction, InvoicePeriod


CARD = CardProfile(card_id=uuid.uuid4(), name="Visa", closing_day=3, due_day=10)
FEBRUARY = InvoicePeriod(year=2024, month=2)
MARCH = InvoicePeriod(year=2024, month=3)
APRIL = InvoicePeriod(year=2024, month=4)


def make_txn(amount_cents, period, type="EXPENSE", is_paid=False, txn_date=date(2024, 3, 1)):
    return CardTransaction(
        transaction_id=uuid.uuid4(),
        date=txn_date,
        amount_cents=amount_cents,
        description="Purchase",
        type=type,
        invoice_period=period,
        is_paid=is_paid,
    )


def test_open_invoice_total_counts_unpaid_allocated_expenses():
    transactions = [
        make_txn(10000, MARCH),
        make_txn(2550, APRIL),
        make_txn(99999, FEBRUARY, is_paid=True),  # paid invoice
        make_txn(7777, None),  # orphan
        make_txn(50000, MARCH, type="INVOICE_PAYMENT"),
    ]
    assert open_invoice_total(transactions) == 12550


def test_open_invoice_total_counts_partially_paid_invoice_in_full():
    """An invoice with one paid member is still open, so every member counts"""
    transactions = [
        make_txn(2000, MARCH),
        make_txn(3000, MARCH, is_paid=True),
        make_txn(4000, FEBRUARY, is_paid=True),
        make_txn(1000, FEBRUARY, is_paid=True),
    ]

    assert open_invoice_total(transactions) == 5000

    open_summaries = [s for s in summarize_invoices(CARD, transactions, today=date(2024, 3, 2)) if not s.is_paid]
    assert open_invoice_total(transactions) == sum(s.total_cents for s in open_summaries)


def test_open_invoice_total_subtracts_refunds():
    transactions = [make_txn(10000, MARCH), make_txn(1500, MARCH, type="INCOME")]
    assert open_invoice_total(transactions) == 8500


def test_check_card_total_detects_drift():
    check = check_card_total(CARD, cached_cents=5000, transactions=[make_txn(12345, MARCH)])

    assert check.previous_cents == 5000
    assert check.new_cents == 12345
    assert check.difference_cents == 7345
    assert check.needs_correction is True


def test_check_card_total_consistent_cache():
    check = check_card_total(CARD, cached_cents=12345, transactions=[make_txn(12345, MARCH)])

    assert check.difference_cents == 0
    assert check.needs_correction is False


def test_summarize_invoices_groups_by_period():
    transactions = [
        make_txn(10000, APRIL),
        make_txn(2000, MARCH),
        make_txn(3000, MARCH, is_paid=True),
    ]

    summaries = summarize_invoices(CARD, transactions, today=date(2024, 3, 2))

    assert [s.period for s in summaries] == [MARCH, APRIL]
    march, april = summaries
    assert march.total_cents == 5000
    assert march.paid_cents == 3000
    assert march.transaction_count == 2
    assert march.status == "PARTIAL"
    assert len(march.transactions) == 2
    assert march.closing_date == date(2024, 3, 3)
    assert march.due_date == date(2024, 3, 10)
    assert april.status == "OPEN"


def test_invoice_status_progression():
    txn = make_txn(10000, MARCH)

    def status_on(today):
        return summarize_invoices(CARD, [txn], today)[0].status

    assert status_on(date(2024, 3, 3)) == "OPEN"
    assert status_on(date(2024, 3, 4)) == "CLOSED"
    assert status_on(date(2024, 3, 11)) == "OVERDUE"


def test_fully_paid_invoice():
    summary = summarize_invoices(CARD, [make_txn(10000, MARCH, is_paid=True)], today=date(2024, 5, 1))[0]
    assert summary.is_paid is True
    assert summary.status == "PAID"
