"""
Balance aggregator.

Balances are recomputed from splits and events on every call; nothing is
cached between requests, so there is no running total to drift.
"""
from dataclasses import dataclass
from decimal import Decimal

from sqlalchemy.orm import Session

from splitledger.core.money import ZERO, money_sum, round2, to_money
from splitledger.services import store


@dataclass(frozen=True)
class UserBalances:
    user_id: int
    you_owe: Decimal
    owed_to_you: Decimal
    net: Decimal


def you_owe(db: Session, user_id: int) -> Decimal:
    """Unpaid remainder of the user's included, unsettled splits."""
    return money_sum(
        to_money(s.deb_amount) - to_money(s.amount_paid or ZERO)
        for s in store.list_splits_for_user(db, user_id)
        if s.included and not s.settled
    )


def owed_to_you(db: Session, user_id: int) -> Decimal:
    """Unpaid part of every active event the user created."""
    return money_sum(
        to_money(e.total) - money_sum(s.amount_paid or ZERO for s in e.splits)
        for e in store.list_events_created_by(db, user_id, include_cancelled=False)
    )


def net_balance(db: Session, user_id: int) -> Decimal:
    return round2(owed_to_you(db, user_id) - you_owe(db, user_id))


def get_user_balances(db: Session, user_id: int) -> UserBalances:
    store.get_user(db, user_id)
    owe = you_owe(db, user_id)
    owed = owed_to_you(db, user_id)
    return UserBalances(user_id=user_id, you_owe=owe, owed_to_you=owed, net=round2(owed - owe))
