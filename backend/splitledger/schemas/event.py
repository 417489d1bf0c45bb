"""
Pydantic schemas for Event and Split (debitor) entities.
"""
from pydantic import BaseModel
from typing import List, Optional
from datetime import datetime
from decimal import Decimal


class ParticipantIn(BaseModel):
    """One participant of a new event."""
    user_id: int
    included: bool = True


class EventCreate(BaseModel):
    """Schema for event creation. The caller becomes the creator."""
    title: str
    total: Decimal
    participant_ids: List[int] = []  # Shorthand for included participants
    participants: List[ParticipantIn] = []

    def participant_specs(self):
        specs = [(uid, True) for uid in self.participant_ids]
        specs.extend((p.user_id, p.included) for p in self.participants)
        return specs


class DebitorCreate(BaseModel):
    """Schema for adding a participant to an existing event."""
    user_id: int
    included: bool = True
    deb_amount: Optional[Decimal] = None  # Defaults to an equal share of the total


class SplitResponse(BaseModel):
    """Schema for split (debitor) response."""
    id: int
    event_id: int
    user_id: int
    username: Optional[str] = None
    deb_amount: Decimal
    amount_paid: Decimal
    remaining: Decimal
    included: bool
    settled: bool

    class Config:
        from_attributes = True


class EventResponse(BaseModel):
    """Schema for event response with its splits."""
    id: int
    title: str
    total: Decimal
    creator_id: int
    cancelled: bool
    created_at: datetime
    splits: List[SplitResponse] = []

    class Config:
        from_attributes = True
