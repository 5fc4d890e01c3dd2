"""SQLAlchemy ORM models for cards and their transactions"""

import uuid
from sqlalchemy import Column, String, BigInteger, Boolean, DateTime, Date, Integer, ForeignKey, Text, Uuid, Index
from sqlalchemy.orm import declarative_base, relationship
from sqlalchemy.sql import func

Base = declarative_base()


class CreditCard(Base):
    """Credit card with cached invoice aggregates"""

    __tablename__ = "credit_card"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    name = Column(Text, nullable=False)
    closing_day = Column(Integer, nullable=False)
    due_day = Column(Integer, nullable=False)
    credit_limit_cents = Column(BigInteger, nullable=False, default=0)
    current_invoice_cents = Column(BigInteger, nullable=False, default=0)
    limit_used_cents = Column(BigInteger, nullable=False, default=0)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())

    transactions = relationship("TransactionRecord", back_populates="card")


class TransactionRecord(Base):
    """Financial transaction; card_id is null for account transactions"""

    __tablename__ = "transactions"
    __table_args__ = (
        Index("ix_transactions_card_invoice", "card_id", "invoice_year", "invoice_month"),
    )

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    type = Column(String(32), nullable=False, default="EXPENSE")
    description = Column(Text, nullable=False)
    amount_cents = Column(BigInteger, nullable=False)
    date = Column(Date, nullable=False)
    card_id = Column(Uuid(as_uuid=True), ForeignKey("credit_card.id", ondelete="CASCADE"), nullable=True, index=True)
    invoice_month = Column(Integer, nullable=True)
    invoice_year = Column(Integer, nullable=True)
    current_installment = Column(Integer, nullable=True)
    total_installments = Column(Integer, nullable=True)
    is_paid = Column(Boolean, nullable=False, default=False)
    paid_date = Column(Date, nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())

    card = relationship("CreditCard", back_populates="transactions")
