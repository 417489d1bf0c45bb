"""
Event and Split models.

An Event is one shared expense; each participant's share of it is a Split
(called a debitor by API clients).
"""
from sqlalchemy import Column, String, Numeric, Boolean, ForeignKey, Integer, UniqueConstraint
from sqlalchemy.orm import relationship
from splitledger.core.money import remaining, ZERO
from splitledger.db.base import BaseModel


class Event(BaseModel):
    """Shared expense. ``total`` and ``creator_id`` never change after creation."""
    __tablename__ = "events"

    title = Column(String(200), nullable=False)
    total = Column(Numeric(12, 2), nullable=False)
    creator_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    cancelled = Column(Boolean, default=False, nullable=False)

    # Relationships
    creator = relationship("User", back_populates="events_created")
    splits = relationship(
        "Split",
        back_populates="event",
        cascade="all, delete-orphan",
        order_by="Split.id",
    )


class Split(BaseModel):
    """One participant's share of an Event and its payment progress."""
    __tablename__ = "splits"
    __table_args__ = (
        UniqueConstraint("event_id", "user_id", name="uq_splits_event_user"),
    )

    event_id = Column(Integer, ForeignKey("events.id", ondelete="CASCADE"), nullable=False, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    deb_amount = Column(Numeric(12, 2), nullable=False)
    amount_paid = Column(Numeric(12, 2), nullable=False, default=ZERO)
    included = Column(Boolean, default=True, nullable=False)
    settled = Column(Boolean, default=False, nullable=False)
    version = Column(Integer, nullable=False)  # Optimistic lock counter, bumped on every UPDATE

    __mapper_args__ = {"version_id_col": version}

    # Relationships
    event = relationship("Event", back_populates="splits")
    user = relationship("User", back_populates="splits")

    @property
    def remaining(self):
        return remaining(self.amount_paid or ZERO, self.deb_amount)

    @property
    def username(self):
        return self.user.username if self.user is not None else None
