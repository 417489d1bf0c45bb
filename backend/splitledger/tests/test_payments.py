"""
Tests for the payment processor.
"""
from decimal import Decimal

import pytest

from splitledger.core.errors import Conflict, Forbidden, InvalidAmount, NotFound
from splitledger.services import event_service, payment_service, store


@pytest.fixture
def dinner(db, user_ids):
    """alice pays 100.00 for alice, bob and carol."""
    u1, u2, u3, _ = user_ids
    return event_service.create_event(db, "Dinner", Decimal("100.00"), u1, [u2, u3])


def split_of(event, user_id):
    return next(s for s in event.splits if s.user_id == user_id)


def test_exact_payment_settles_split(db, user_ids, dinner):
    """Paying the full share settles it and records payer -> creator."""
    u1, u2, _, _ = user_ids
    split = split_of(dinner, u2)

    result = payment_service.pay(db, split.id, payer_user_id=u2, amount=Decimal("33.33"), caller_id=u2)

    assert result.replayed is False
    assert result.split.amount_paid == Decimal("33.33")
    assert result.split.settled is True
    assert result.split.remaining == Decimal("0.00")
    assert result.transaction.from_user_id == u2
    assert result.transaction.to_user_id == u1
    assert result.transaction.amount == Decimal("33.33")
    assert result.transaction.event_id == dinner.id
    assert result.transaction.debitor_id == split.id


def test_overpayment_is_rejected_and_split_unchanged(db, user_ids, dinner):
    """50.00 against a 33.33 share is InvalidAmount and nothing is written."""
    _, u2, _, _ = user_ids
    split = split_of(dinner, u2)

    with pytest.raises(InvalidAmount):
        payment_service.pay(db, split.id, payer_user_id=u2, amount=Decimal("50.00"), caller_id=u2)

    fresh = store.get_split(db, split.id)
    assert fresh.amount_paid == Decimal("0.00")
    assert fresh.settled is False
    assert store.list_transactions(db) == []


def test_partial_payments_accumulate(db, user_ids, dinner):
    """Partial payments raise amount_paid monotonically until settled."""
    _, _, u3, _ = user_ids
    split = split_of(dinner, u3)

    seen = []
    for amount in ("10.00", "0.335", "22.99"):
        result = payment_service.pay(db, split.id, payer_user_id=u3, amount=Decimal(amount), caller_id=u3)
        seen.append((result.split.amount_paid, result.split.settled))

    # 0.335 rounds half-up to 0.34
    assert seen == [
        (Decimal("10.00"), False),
        (Decimal("10.34"), False),
        (Decimal("33.33"), True),
    ]


def test_partial_payment_then_remaining(db, user_ids, dinner):
    """After a partial payment the split is open with the rest remaining."""
    _, u2, _, _ = user_ids
    split = split_of(dinner, u2)

    result = payment_service.pay(db, split.id, payer_user_id=u2, amount=Decimal("13.33"), caller_id=u2)
    assert result.split.settled is False
    assert result.split.remaining == Decimal("20.00")

    result = payment_service.pay(db, split.id, payer_user_id=u2, amount=Decimal("20"), caller_id=u2)
    assert result.split.settled is True
    assert len(payment_service.list_event_transactions(db, dinner.id)) == 2


@pytest.mark.parametrize("amount", [Decimal("0"), Decimal("-5.00"), Decimal("0.004")])
def test_non_positive_amount_is_rejected(db, user_ids, dinner, amount):
    """Amounts that round to zero or below are InvalidAmount."""
    _, u2, _, _ = user_ids
    with pytest.raises(InvalidAmount):
        payment_service.pay(db, split_of(dinner, u2).id, payer_user_id=u2, amount=amount, caller_id=u2)


def test_cancelled_event_is_frozen(db, user_ids, dinner):
    """Payments against a cancelled event are Forbidden."""
    u1, u2, _, _ = user_ids
    split_id = split_of(dinner, u2).id
    event_service.cancel_event(db, dinner.id, caller_id=u1)

    with pytest.raises(Forbidden):
        payment_service.pay(db, split_id, payer_user_id=u2, amount=Decimal("5.00"), caller_id=u2)
    assert store.get_split(db, split_id).amount_paid == Decimal("0.00")


def test_caller_must_be_payer_or_creator(db, user_ids, dinner):
    """A third party cannot record payments; the creator can on the payer's behalf."""
    u1, u2, u3, _ = user_ids
    split_id = split_of(dinner, u2).id

    with pytest.raises(Forbidden):
        payment_service.pay(db, split_id, payer_user_id=u2, amount=Decimal("5.00"), caller_id=u3)

    result = payment_service.pay(db, split_id, payer_user_id=u2, amount=Decimal("5.00"), caller_id=u1)
    assert result.transaction.from_user_id == u2
    assert result.split.amount_paid == Decimal("5.00")


def test_excluded_split_cannot_be_paid(db, user_ids):
    """Excluded participants owe nothing, so any payment is InvalidAmount."""
    u1, u2, u3, _ = user_ids
    event = event_service.create_event(db, "Cinema", Decimal("30"), u1, [u2, (u3, False)])
    with pytest.raises(InvalidAmount):
        payment_service.pay(db, split_of(event, u3).id, payer_user_id=u3, amount=Decimal("1"), caller_id=u3)


def test_missing_split_and_payer(db, user_ids, dinner):
    """Unknown debitor or payer is NotFound."""
    _, u2, _, _ = user_ids
    with pytest.raises(NotFound):
        payment_service.pay(db, 9999, payer_user_id=u2, amount=Decimal("1"), caller_id=u2)
    with pytest.raises(NotFound):
        payment_service.pay(db, split_of(dinner, u2).id, payer_user_id=9999, amount=Decimal("1"), caller_id=9999)


def test_idempotent_replay(db, user_ids, dinner):
    """Repeating a payment with the same key returns the first result."""
    _, u2, _, _ = user_ids
    split_id = split_of(dinner, u2).id

    first = payment_service.pay(
        db, split_id, payer_user_id=u2, amount=Decimal("10.00"), caller_id=u2, idempotency_key="pay-1"
    )
    second = payment_service.pay(
        db, split_id, payer_user_id=u2, amount=Decimal("10.00"), caller_id=u2, idempotency_key="pay-1"
    )

    assert second.replayed is True
    assert second.transaction.id == first.transaction.id
    assert second.split.amount_paid == Decimal("10.00")
    assert len(store.list_transactions(db)) == 1


def test_idempotency_key_reuse_for_other_payment(db, user_ids, dinner):
    """A key already bound to a different payment is Conflict."""
    u1, u2, u3, _ = user_ids
    payment_service.pay(
        db, split_of(dinner, u2).id, payer_user_id=u2, amount=Decimal("10.00"), caller_id=u2, idempotency_key="k"
    )
    with pytest.raises(Conflict):
        payment_service.pay(
            db, split_of(dinner, u3).id, payer_user_id=u3, amount=Decimal("10.00"), caller_id=u1, idempotency_key="k"
        )
    with pytest.raises(Conflict):
        payment_service.pay(
            db, split_of(dinner, u2).id, payer_user_id=u2, amount=Decimal("11.00"), caller_id=u2, idempotency_key="k"
        )


def test_pay_endpoint(client, auth, user_ids):
    """POST /api/payments/pay records a payment and honours Idempotency-Key."""
    u1, u2, u3, _ = user_ids
    event = client.post(
        "/api/events", json={"title": "Dinner", "total": "100.00", "participant_ids": [u2, u3]}, headers=auth(u1)
    ).json()
    bob_split = next(s for s in event["splits"] if s["user_id"] == u2)
    headers = {**auth(u2), "Idempotency-Key": "abc-123"}

    response = client.post(
        "/api/payments/pay", json={"debitor_id": bob_split["id"], "amount": "33.33", "note": "cash"}, headers=headers
    )
    assert response.status_code == 201
    body = response.json()
    assert body["replayed"] is False
    assert body["split"]["settled"] is True
    assert body["transaction"]["from_user"] == u2
    assert body["transaction"]["to_user"] == u1
    assert body["transaction"]["note"] == "cash"

    again = client.post(
        "/api/payments/pay", json={"debitor_id": bob_split["id"], "amount": "33.33"}, headers=headers
    )
    assert again.status_code == 201
    assert again.json()["replayed"] is True
    assert again.json()["transaction"]["id"] == body["transaction"]["id"]

    over = client.post(
        "/api/payments/pay", json={"debitor_id": bob_split["id"], "amount": "0.01"}, headers=auth(u2)
    )
    assert over.status_code == 400
    assert over.json()["kind"] == "InvalidAmount"

    history = client.get(f"/api/users/{u1}/transactions", headers=auth(u1)).json()
    assert len(history) == 1


def test_replay_requires_payer_or_creator(db, user_ids, dinner):
    """A third party holding someone else's key cannot read their payment."""
    u1, u2, u3, _ = user_ids
    split_id = split_of(dinner, u2).id
    payment_service.pay(
        db, split_id, payer_user_id=u2, amount=Decimal("10.00"), caller_id=u2, idempotency_key="bob-1"
    )

    with pytest.raises(Forbidden):
        payment_service.pay(
            db, split_id, payer_user_id=u2, amount=Decimal("10.00"), caller_id=u3, idempotency_key="bob-1"
        )

    replay = payment_service.pay(
        db, split_id, payer_user_id=u2, amount=Decimal("10.00"), caller_id=u1, idempotency_key="bob-1"
    )
    assert replay.replayed is True


def test_cancel_between_read_and_write_blocks_payment(db, session_factory, user_ids, dinner, monkeypatch):
    """A cancel that commits after the split is read still freezes the payment."""
    u1, u2, _, _ = user_ids
    split_id = split_of(dinner, u2).id
    event_id = dinner.id
    read_split = store.lock_split

    def read_then_cancel(session, debitor_id):
        split = read_split(session, debitor_id)
        assert split.event.cancelled is False
        other = session_factory()
        try:
            event_service.cancel_event(other, event_id, caller_id=u1)
        finally:
            other.close()
        return split

    monkeypatch.setattr(store, "lock_split", read_then_cancel)
    with pytest.raises(Forbidden):
        payment_service.pay(db, split_id, payer_user_id=u2, amount=Decimal("10.00"), caller_id=u2)
    monkeypatch.undo()

    db.expire_all()
    assert store.get_event(db, event_id).cancelled is True
    assert store.get_split(db, split_id).amount_paid == Decimal("0.00")
    assert store.list_event_transactions(db, event_id) == []
