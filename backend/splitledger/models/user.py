"""
User model for ledger participants.
"""
from sqlalchemy import Column, String, Boolean
from sqlalchemy.orm import relationship
from splitledger.db.base import BaseModel


class User(BaseModel):
    """User known to the ledger. Balances are derived, never stored."""
    __tablename__ = "users"

    username = Column(String(50), unique=True, nullable=False, index=True)
    email = Column(String(100), unique=True, nullable=False, index=True)
    is_active = Column(Boolean, default=True, nullable=False)

    # Relationships
    events_created = relationship("Event", back_populates="creator")
    splits = relationship("Split", back_populates="user")
