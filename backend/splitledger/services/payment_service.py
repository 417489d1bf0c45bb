"""
Payment processor: applies a payment to a split and appends the matching
transaction as one unit of work.
"""
import logging
from dataclasses import dataclass
from typing import Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session
from sqlalchemy.orm.exc import StaleDataError

from splitledger.core.config import settings
from splitledger.core.errors import Conflict, Forbidden, InvalidAmount, LedgerTimeout
from splitledger.core.money import ZERO, is_settled, remaining, round2, to_money
from splitledger.models.event import Split
from splitledger.models.transaction import Transaction
from splitledger.services import store

logger = logging.getLogger(__name__)


@dataclass
class PaymentResult:
    transaction: Transaction
    split: Split
    replayed: bool = False  # True when an idempotency key matched an earlier payment


def _replay(db: Session, tx: Transaction, debitor_id: int, amount, caller_id: int) -> PaymentResult:
    if caller_id not in (tx.from_user_id, tx.to_user_id):
        raise Forbidden("Only the payer or the event creator can replay this payment")
    if tx.debitor_id != debitor_id or round2(tx.amount) != amount:
        raise Conflict("Idempotency key was already used for a different payment")
    logger.info(f"Replayed payment {tx.id} for idempotency key {tx.idempotency_key!r}")
    return PaymentResult(transaction=tx, split=store.get_split(db, debitor_id), replayed=True)


def _apply(
    db: Session,
    debitor_id: int,
    payer_user_id: int,
    amount,
    caller_id: int,
    note: Optional[str],
    idempotency_key: Optional[str],
) -> PaymentResult:
    split = store.lock_split(db, debitor_id)
    event = split.event

    if caller_id not in (payer_user_id, event.creator_id):
        raise Forbidden("Only the payer or the event creator can record this payment")
    # A cancel committed after our read leaves the guarded update with no row
    if event.cancelled or not store.hold_active_event(db, event.id):
        raise Forbidden("Event is cancelled, its debts are frozen")
    if not split.included:
        raise InvalidAmount("Participant is excluded from this event, nothing is owed")

    owed = round2(split.deb_amount)
    new_paid = round2(to_money(split.amount_paid or ZERO) + amount)
    if new_paid > owed:
        raise InvalidAmount(
            f"Payment of {amount} exceeds the remaining {remaining(split.amount_paid or ZERO, owed)}"
        )

    store.update_split(db, split, amount_paid=new_paid, settled=is_settled(new_paid, owed))
    tx = store.append_transaction(
        db,
        from_user_id=payer_user_id,
        to_user_id=event.creator_id,
        amount=amount,
        event_id=event.id,
        debitor_id=split.id,
        note=note,
        idempotency_key=idempotency_key,
    )
    store.commit(db)
    return PaymentResult(transaction=tx, split=split)


def pay(
    db: Session,
    debitor_id: int,
    payer_user_id: int,
    amount,
    caller_id: int,
    note: Optional[str] = None,
    idempotency_key: Optional[str] = None,
) -> PaymentResult:
    """
    Record a payment of ``amount`` against split ``debitor_id``.

    Partial payments are allowed; overpayment is rejected with InvalidAmount.
    Split update and transaction append commit together. A concurrent writer
    on the same split makes the flush fail its version check; the unit is then
    rolled back and retried from a fresh read, up to PAY_MAX_RETRIES times.

    Args:
        debitor_id: Split being paid
        payer_user_id: User the money comes from
        amount: Positive amount, rounded to cents
        caller_id: Resolved caller identity (payer or event creator)
        note: Optional free text stored on the transaction
        idempotency_key: Optional client key; a repeat returns the first result

    Returns:
        PaymentResult with the transaction and the updated split
    """
    amount = round2(amount)
    if amount <= ZERO:
        raise InvalidAmount("Payment amount must be positive")
    store.get_user(db, payer_user_id)

    if idempotency_key:
        existing = store.find_transaction_by_key(db, idempotency_key)
        if existing is not None:
            return _replay(db, existing, debitor_id, amount, caller_id)

    for attempt in range(1, settings.PAY_MAX_RETRIES + 1):
        try:
            result = _apply(db, debitor_id, payer_user_id, amount, caller_id, note, idempotency_key)
        except StaleDataError:
            db.rollback()
            logger.debug(f"Version conflict paying split {debitor_id}, attempt {attempt}")
            continue
        except IntegrityError:
            db.rollback()
            existing = store.find_transaction_by_key(db, idempotency_key) if idempotency_key else None
            if existing is None:
                raise
            return _replay(db, existing, debitor_id, amount, caller_id)
        except Exception:
            db.rollback()
            raise

        logger.info(
            f"Payment {result.transaction.id}: user {payer_user_id} paid {amount} on split {debitor_id} "
            f"(paid {result.split.amount_paid}/{result.split.deb_amount}, settled={result.split.settled})"
        )
        return result

    logger.warning(f"Gave up paying split {debitor_id} after {settings.PAY_MAX_RETRIES} version conflicts")
    raise LedgerTimeout("Too much contention on this debitor, try again")


def list_transactions(db: Session):
    return store.list_transactions(db)


def list_user_transactions(db: Session, user_id: int):
    """Transactions the user paid or received."""
    store.get_user(db, user_id)
    return store.list_user_transactions(db, user_id)


def list_event_transactions(db: Session, event_id: int):
    # No event lookup: history outlives deleted events
    return store.list_event_transactions(db, event_id)
