"""
Event lifecycle: creation, participant addition, cancellation and deletion.

State machine: Active --cancel--> Cancelled (one way); either state --delete-->
removed. Only the creator may cancel, delete or add participants.
"""
import logging
from typing import Iterable, List

from sqlalchemy.orm import Session

from splitledger.core.errors import Forbidden, InvalidAmount, InvalidInput
from splitledger.core.money import ZERO, round2
from splitledger.models.event import Event, Split
from splitledger.services import store
from splitledger.services.allocator import ParticipantSpec, allocate, share_for_new_participant

logger = logging.getLogger(__name__)


def _require_creator(event: Event, caller_id: int, action: str) -> None:
    if event.creator_id != caller_id:
        logger.warning(f"User {caller_id} tried to {action} event {event.id} owned by {event.creator_id}")
        raise Forbidden(f"Only the event creator can {action} this event")


def create_event(
    db: Session,
    title: str,
    total,
    creator_id: int,
    participants: Iterable[ParticipantSpec] = (),
) -> Event:
    """
    Create an event and one split per participant, creator included.

    Args:
        title: Non-empty event title
        total: Positive event total
        creator_id: Resolved identity of the caller, becomes the creator
        participants: User ids, or ``(user_id, included)`` pairs

    Returns:
        Event with its splits loaded
    """
    title = (title or "").strip()
    if not title:
        raise InvalidInput("Event title must not be empty")
    total = round2(total)
    if total <= ZERO:
        raise InvalidAmount("Event total must be positive")

    store.get_user(db, creator_id)
    allocations = allocate(total, list(participants), creator_id)
    for allocation in allocations[1:]:
        store.get_user(db, allocation.user_id)

    event = store.create_event(db, title=title, total=total, creator_id=creator_id)
    for allocation in allocations:
        store.create_split(
            db,
            event_id=event.id,
            user_id=allocation.user_id,
            deb_amount=allocation.deb_amount,
            included=allocation.included,
        )
    store.commit(db)
    logger.info(f"Created event {event.id} '{title}' total={total} with {len(allocations)} splits")
    return store.get_event(db, event.id)


def get_event(db: Session, event_id: int) -> Event:
    return store.get_event(db, event_id)


def list_events(db: Session) -> List[Event]:
    return store.list_events(db)


def cancel_event(db: Session, event_id: int, caller_id: int) -> Event:
    event = store.lock_event(db, event_id)
    _require_creator(event, caller_id, "cancel")
    if event.cancelled:
        return store.get_event(db, event_id)
    event.cancelled = True
    store.commit(db)
    logger.info(f"Event {event_id} cancelled by {caller_id}")
    return store.get_event(db, event_id)


def delete_event(db: Session, event_id: int, caller_id: int) -> None:
    event = store.get_event(db, event_id)
    _require_creator(event, caller_id, "delete")
    split_count = len(event.splits)
    store.delete_event(db, event)
    store.commit(db)
    logger.info(f"Event {event_id} deleted by {caller_id} ({split_count} splits removed)")


def add_participant(
    db: Session,
    event_id: int,
    user_id: int,
    caller_id: int,
    included: bool = True,
    deb_amount=None,
) -> Split:
    """
    Add one participant to an existing event.

    The new share is ``round2(total / (included splits + 1))`` unless
    ``deb_amount`` is given. Existing splits are not rebalanced.
    """
    event = store.get_event(db, event_id)
    _require_creator(event, caller_id, "add participants to")
    if event.cancelled:
        raise Forbidden("Cannot add participants to a cancelled event")
    store.get_user(db, user_id)

    if not included:
        amount = ZERO
    elif deb_amount is not None:
        amount = round2(deb_amount)
        if amount < ZERO or amount > round2(event.total):
            raise InvalidAmount("Share must be between 0 and the event total")
    else:
        existing_included = sum(1 for s in event.splits if s.included)
        amount = share_for_new_participant(event.total, existing_included)

    split = store.create_split(db, event_id=event.id, user_id=user_id, deb_amount=amount, included=included)
    store.commit(db)
    logger.info(f"Added user {user_id} to event {event_id} with share {amount}")
    return store.get_split(db, split.id)


def event_splits(db: Session, event_id: int) -> List[Split]:
    """Splits of an existing event, with usernames loaded."""
    store.get_event(db, event_id)
    return store.list_splits_for_event(db, event_id)
