"""
Pydantic schemas for payments and transactions.
"""
from pydantic import BaseModel
from typing import Optional
from datetime import datetime
from decimal import Decimal
from splitledger.schemas.event import SplitResponse


class PaymentCreate(BaseModel):
    """Schema for paying (part of) a debitor's share."""
    debitor_id: int
    amount: Decimal
    payer_user_id: Optional[int] = None  # Defaults to the caller
    note: Optional[str] = None
    idempotency_key: Optional[str] = None  # May also be sent as the Idempotency-Key header


class TransactionResponse(BaseModel):
    """Schema for an immutable payment record."""
    id: int
    ts: datetime
    from_user: int
    to_user: int
    amount: Decimal
    event_id: int
    debitor_id: int
    note: Optional[str] = None

    class Config:
        from_attributes = True

    @classmethod
    def from_model(cls, tx) -> "TransactionResponse":
        return cls(
            id=tx.id,
            ts=tx.ts,
            from_user=tx.from_user_id,
            to_user=tx.to_user_id,
            amount=tx.amount,
            event_id=tx.event_id,
            debitor_id=tx.debitor_id,
            note=tx.note,
        )


class PaymentResponse(BaseModel):
    """Schema for a recorded payment and the split it updated."""
    transaction: TransactionResponse
    split: SplitResponse
    replayed: bool = False
