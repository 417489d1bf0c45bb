"""Models package - Import all models for SQLAlchemy registration."""
from splitledger.models.user import User
from splitledger.models.event import Event, Split
from splitledger.models.transaction import Transaction

__all__ = [
    "User",
    "Event",
    "Split",
    "Transaction",
]
