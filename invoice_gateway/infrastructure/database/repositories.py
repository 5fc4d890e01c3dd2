"""Data access layer for cards and card transactions"""

import uuid
from typing import List, Optional, Tuple
from sqlalchemy import or_
from sqlalchemy.orm import Session
from invoice_gateway.infrastructure.database.models import CreditCard, TransactionRecord
from invoice_gateway.domain.models import CardProfile, CardTransaction, InvoicePeriod, NON_INVOICE_TYPES
from invoice_gateway.domain.exceptions import CardNotFoundError


def to_card_profile(card: CreditCard) -> CardProfile:
    return CardProfile(
        card_id=card.id,
        name=card.name,
        closing_day=card.closing_day,
        due_day=card.due_day,
    )


def to_card_transaction(record: TransactionRecord) -> CardTransaction:
    period = None
    if record.invoice_month is not None and record.invoice_year is not None:
        period = InvoicePeriod(year=record.invoice_year, month=record.invoice_month)

    return CardTransaction(
        transaction_id=record.id,
        date=record.date,
        amount_cents=record.amount_cents,
        description=record.description,
        type=record.type,
        invoice_period=period,
        is_paid=record.is_paid,
        current_installment=record.current_installment,
        total_installments=record.total_installments,
    )


class CardRepository:
    """Repository for credit cards"""

    def __init__(self, db: Session):
        self.db = db

    def list_cards(self, lock: bool = False) -> List[CreditCard]:
        """Fetch all cards; lock=True holds row locks until commit"""
        query = self.db.query(CreditCard).order_by(CreditCard.name, CreditCard.id)
        if lock:
            query = query.with_for_update()
        return query.all()

    def get_card(self, card_id: uuid.UUID) -> Optional[CreditCard]:
        return (
            self.db.query(CreditCard)
            .filter(CreditCard.id == card_id)
            .first()
        )

    def require_card(self, card_id: uuid.UUID) -> CreditCard:
        """
        Fetch a card that must exist.

        Raises:
            CardNotFoundError: No card with this ID
        """
        card = self.get_card(card_id)
        if card is None:
            raise CardNotFoundError(f"Card {card_id} not found")
        return card

    def set_current_invoice(self, card: CreditCard, amount_cents: int) -> None:
        """Overwrite the cached open-invoice total"""
        card.current_invoice_cents = amount_cents
        self.db.flush()


class CardTransactionRepository:
    """Repository for transactions attached to credit cards"""

    def __init__(self, db: Session):
        self.db = db

    def _eligible(self):
        return (
            self.db.query(TransactionRecord)
            .filter(TransactionRecord.card_id.isnot(None))
            .filter(TransactionRecord.type.notin_(sorted(NON_INVOICE_TYPES)))
        )

    def _orphan_filter(self):
        return or_(TransactionRecord.invoice_month.is_(None), TransactionRecord.invoice_year.is_(None))

    def list_for_card(self, card_id: uuid.UUID) -> List[CardTransaction]:
        """All invoice-eligible transactions of a card, oldest first"""
        records = (
            self._eligible()
            .filter(TransactionRecord.card_id == card_id)
            .order_by(TransactionRecord.date, TransactionRecord.id)
            .all()
        )
        return [to_card_transaction(r) for r in records]

    def assign_invoice_period(self, transaction_id: uuid.UUID, period: InvoicePeriod) -> bool:
        """
        Move a transaction to the given invoice.

        Conditional on the stored period differing, so repeating the same
        correction is a no-op. Returns True when a row actually changed.
        """
        updated = (
            self.db.query(TransactionRecord)
            .filter(TransactionRecord.id == transaction_id)
            .filter(
                or_(
                    TransactionRecord.invoice_month != period.month,
                    TransactionRecord.invoice_year != period.year,
                    self._orphan_filter(),
                )
            )
            .update(
                {
                    TransactionRecord.invoice_month: period.month,
                    TransactionRecord.invoice_year: period.year,
                },
                synchronize_session=False,
            )
        )
        return updated > 0

    def assign_orphan_period(self, transaction_id: uuid.UUID, period: InvoicePeriod) -> bool:
        """Give an orphan its period, only while it is still unassigned"""
        updated = (
            self.db.query(TransactionRecord)
            .filter(TransactionRecord.id == transaction_id)
            .filter(self._orphan_filter())
            .update(
                {
                    TransactionRecord.invoice_month: period.month,
                    TransactionRecord.invoice_year: period.year,
                },
                synchronize_session=False,
            )
        )
        return updated > 0

    def count_orphans(self) -> int:
        """Card transactions with no invoice period"""
        return self._eligible().filter(self._orphan_filter()).count()

    def fetch_orphans(self, limit: int) -> List[Tuple[CardProfile, CardTransaction]]:
        """Oldest orphans first, paired with their owning card"""
        rows = (
            self.db.query(TransactionRecord, CreditCard)
            .join(CreditCard, TransactionRecord.card_id == CreditCard.id)
            .filter(TransactionRecord.type.notin_(sorted(NON_INVOICE_TYPES)))
            .filter(self._orphan_filter())
            .order_by(TransactionRecord.date, TransactionRecord.id)
            .limit(limit)
            .all()
        )
        return [(to_card_profile(card), to_card_transaction(record)) for record, card in rows]
