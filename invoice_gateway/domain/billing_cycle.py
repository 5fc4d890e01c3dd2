"""Billing cycle arithmetic - maps card transactions to invoice periods"""

from datetime import date
from invoice_gateway.domain.models import InvoicePeriod
from invoice_gateway.domain.exceptions import InvalidClosingDayError
from invoice_gateway.utils.date_utils import clamp_day, days_in_month


def validate_day_of_month(day: int, field_name: str = "closing_day") -> None:
    if not 1 <= day <= 31:
        raise InvalidClosingDayError(f"{field_name} must be between 1 and 31, got {day}")


def compute_invoice_period(transaction_date: date, closing_day: int) -> InvoicePeriod:
    """
    Determine which monthly invoice a card transaction belongs to.

    Rules:
    - Purchases on or before the closing day stay in the transaction's own month
    - Purchases after the closing day roll into the next month (December -> January)
    - A closing day past the end of a short month closes on that month's last day,
      so the last day of February never rolls forward because day 30 doesn't exist

    Examples:
        closing 3,  2024-03-04 -> 2024-04
        closing 3,  2024-03-03 -> 2024-03
        closing 25, 2024-12-31 -> 2025-01
        closing 30, 2023-02-28 -> 2023-02
    """
    validate_day_of_month(closing_day)

    effective_closing = min(closing_day, days_in_month(transaction_date.year, transaction_date.month))
    period = InvoicePeriod(year=transaction_date.year, month=transaction_date.month)

    if transaction_date.day > effective_closing:
        return period.next()
    return period


def closing_date(period: InvoicePeriod, closing_day: int) -> date:
    """Date the invoice closes, clamped to the period's month length"""
    validate_day_of_month(closing_day)
    return clamp_day(period.year, period.month, closing_day)


def due_date(period: InvoicePeriod, closing_day: int, due_day: int) -> date:
    """
    Date the invoice is due.

    A due day after the closing day falls in the same month as the closing;
    otherwise payment is due the following month.
    """
    validate_day_of_month(closing_day)
    validate_day_of_month(due_day, "due_day")

    due_period = period if due_day > closing_day else period.next()
    return clamp_day(due_period.year, due_period.month, due_day)
