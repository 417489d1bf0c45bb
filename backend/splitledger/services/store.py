"""
Entity store: CRUD and referential integrity for users, events, splits and
transactions.

The store trusts its caller. Authorization belongs to the lifecycle and
payment services, which pass the resolved caller identity explicitly.
Functions here only stage changes; the calling service finishes its unit of
work with exactly one ``commit``.
"""
import logging
from typing import List, Optional

from sqlalchemy import or_
from sqlalchemy.exc import IntegrityError, OperationalError
from sqlalchemy.orm import Session, selectinload

from splitledger.core.errors import Conflict, NotFound, Unavailable
from splitledger.core.money import ZERO, is_settled
from splitledger.models.event import Event, Split
from splitledger.models.transaction import Transaction
from splitledger.models.user import User

logger = logging.getLogger(__name__)


def commit(db: Session) -> None:
    """Commit the current unit of work, surfacing store failures as Unavailable."""
    try:
        db.commit()
    except OperationalError as e:
        db.rollback()
        logger.error(f"Store unavailable during commit: {e}")
        raise Unavailable("Ledger store is unavailable, try again later") from e


# Users

def create_user(db: Session, username: str, email: str) -> User:
    if db.query(User).filter(User.username == username).first():
        raise Conflict("Username already exists")
    if db.query(User).filter(User.email == email).first():
        raise Conflict("Email already exists")
    user = User(username=username, email=email)
    db.add(user)
    db.flush()
    return user


def get_user(db: Session, user_id: int) -> User:
    user = db.query(User).filter(User.id == user_id).first()
    if not user:
        raise NotFound("User not found")
    return user


def get_user_by_username(db: Session, username: str) -> Optional[User]:
    return db.query(User).filter(User.username == username).first()


def list_users(db: Session) -> List[User]:
    return db.query(User).order_by(User.id).all()


def update_user(db: Session, user: User, username: Optional[str] = None, email: Optional[str] = None) -> User:
    if username is not None and username != user.username:
        if db.query(User).filter(User.username == username, User.id != user.id).first():
            raise Conflict("Username already exists")
        user.username = username
    if email is not None and email != user.email:
        if db.query(User).filter(User.email == email, User.id != user.id).first():
            raise Conflict("Email already exists")
        user.email = email
    db.flush()
    return user


def user_is_referenced(db: Session, user_id: int) -> bool:
    """True while any event, split or transaction points at the user."""
    if db.query(Event.id).filter(Event.creator_id == user_id).first():
        return True
    if db.query(Split.id).filter(Split.user_id == user_id).first():
        return True
    return db.query(Transaction.id).filter(
        or_(Transaction.from_user_id == user_id, Transaction.to_user_id == user_id)
    ).first() is not None


def delete_user(db: Session, user: User) -> None:
    if user_is_referenced(db, user.id):
        raise Conflict("User is referenced by events, splits or transactions and cannot be deleted")
    db.delete(user)
    db.flush()


# Events

def create_event(db: Session, title: str, total, creator_id: int) -> Event:
    event = Event(title=title, total=total, creator_id=creator_id, cancelled=False)
    db.add(event)
    db.flush()  # gives event.id
    return event


def get_event(db: Session, event_id: int) -> Event:
    event = db.query(Event).options(
        selectinload(Event.splits).selectinload(Split.user)
    ).filter(Event.id == event_id).first()
    if not event:
        raise NotFound("Event not found")
    return event


def list_events(db: Session) -> List[Event]:
    return db.query(Event).options(
        selectinload(Event.splits).selectinload(Split.user)
    ).order_by(Event.created_at.desc(), Event.id.desc()).all()


def list_events_created_by(db: Session, user_id: int, include_cancelled: bool = True) -> List[Event]:
    query = db.query(Event).options(selectinload(Event.splits)).filter(Event.creator_id == user_id)
    if not include_cancelled:
        query = query.filter(Event.cancelled == False)  # noqa: E712
    return query.all()


def lock_event(db: Session, event_id: int) -> Event:
    """Load an event for update; see ``lock_split`` for backend behaviour."""
    event = db.query(Event).filter(Event.id == event_id).with_for_update().first()
    if not event:
        raise NotFound("Event not found")
    return event


def hold_active_event(db: Session, event_id: int) -> bool:
    """Take the write lock on an event row if it is still active.

    The guarded UPDATE leaves the ledger state as is (only ``updated_at``
    moves), but it serializes with a concurrent cancel on every backend,
    SQLite included. False once the event is cancelled or gone.
    """
    rows = db.query(Event).filter(
        Event.id == event_id, Event.cancelled == False  # noqa: E712
    ).update({Event.cancelled: False}, synchronize_session=False)
    return rows == 1


def delete_event(db: Session, event: Event) -> None:
    """Hard delete; splits go with the event, transactions stay."""
    db.delete(event)
    db.flush()


# Splits

def create_split(db: Session, event_id: int, user_id: int, deb_amount, included: bool = True) -> Split:
    if find_split(db, event_id, user_id) is not None:
        raise Conflict("User is already a participant of this event")
    split = Split(
        event_id=event_id,
        user_id=user_id,
        deb_amount=deb_amount,
        amount_paid=ZERO,
        included=included,
        settled=is_settled(ZERO, deb_amount),
    )
    db.add(split)
    try:
        db.flush()
    except IntegrityError as e:
        db.rollback()
        raise Conflict("User is already a participant of this event") from e
    return split


def find_split(db: Session, event_id: int, user_id: int) -> Optional[Split]:
    return db.query(Split).filter(Split.event_id == event_id, Split.user_id == user_id).first()


def get_split(db: Session, split_id: int) -> Split:
    split = db.query(Split).filter(Split.id == split_id).first()
    if not split:
        raise NotFound("Debitor not found")
    return split


def lock_split(db: Session, split_id: int) -> Split:
    """Load a split for update.

    Backends with row locks (PostgreSQL, MySQL) hold it until commit; SQLite
    ignores FOR UPDATE and relies on the version check at flush instead.
    """
    split = db.query(Split).filter(Split.id == split_id).with_for_update().first()
    if not split:
        raise NotFound("Debitor not found")
    return split


def update_split(db: Session, split: Split, amount_paid, settled: bool) -> Split:
    split.amount_paid = amount_paid
    split.settled = settled
    db.flush()  # raises StaleDataError if another writer bumped the version
    return split


def list_splits_for_event(db: Session, event_id: int) -> List[Split]:
    return db.query(Split).options(selectinload(Split.user)).filter(
        Split.event_id == event_id
    ).order_by(Split.id).all()


def list_splits_for_user(db: Session, user_id: int) -> List[Split]:
    return db.query(Split).filter(Split.user_id == user_id).order_by(Split.id).all()


# Transactions

def append_transaction(
    db: Session,
    from_user_id: int,
    to_user_id: int,
    amount,
    event_id: int,
    debitor_id: int,
    note: Optional[str] = None,
    idempotency_key: Optional[str] = None,
) -> Transaction:
    tx = Transaction(
        from_user_id=from_user_id,
        to_user_id=to_user_id,
        amount=amount,
        event_id=event_id,
        debitor_id=debitor_id,
        note=note,
        idempotency_key=idempotency_key,
    )
    db.add(tx)
    db.flush()
    return tx


def find_transaction_by_key(db: Session, idempotency_key: str) -> Optional[Transaction]:
    return db.query(Transaction).filter(Transaction.idempotency_key == idempotency_key).first()


def list_transactions(db: Session) -> List[Transaction]:
    return db.query(Transaction).order_by(Transaction.ts.desc(), Transaction.id.desc()).all()


def list_user_transactions(db: Session, user_id: int) -> List[Transaction]:
    return db.query(Transaction).filter(
        or_(Transaction.from_user_id == user_id, Transaction.to_user_id == user_id)
    ).order_by(Transaction.ts.desc(), Transaction.id.desc()).all()


def list_event_transactions(db: Session, event_id: int) -> List[Transaction]:
    return db.query(Transaction).filter(
        Transaction.event_id == event_id
    ).order_by(Transaction.ts.desc(), Transaction.id.desc()).all()
