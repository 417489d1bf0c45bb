"""
Transaction model: the append-only audit trail of payments.
"""
from sqlalchemy import Column, String, Numeric, DateTime, ForeignKey, Integer, Text
from sqlalchemy.sql import func
from splitledger.db.base import Base


class Transaction(Base):
    """Immutable record of one payment applied to a Split.

    ``event_id`` and ``debitor_id`` are plain columns rather than foreign keys:
    history outlives a deleted event and its splits.
    """
    __tablename__ = "transactions"

    id = Column(Integer, primary_key=True, index=True)
    ts = Column(DateTime(timezone=True), server_default=func.now(), nullable=False, index=True)
    from_user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    to_user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    amount = Column(Numeric(12, 2), nullable=False)
    event_id = Column(Integer, nullable=False, index=True)
    debitor_id = Column(Integer, nullable=False, index=True)
    note = Column(Text, nullable=True)
    idempotency_key = Column(String(255), unique=True, nullable=True)
