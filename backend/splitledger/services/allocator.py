"""
Split allocator: turns an event total and a participant list into shares.
"""
from dataclasses import dataclass
from decimal import Decimal, ROUND_DOWN
from typing import Iterable, List, Tuple, Union

from splitledger.core.errors import InvalidAmount
from splitledger.core.money import CENTS, ZERO, round2, to_money

ParticipantSpec = Union[int, Tuple[int, bool]]


@dataclass(frozen=True)
class Allocation:
    user_id: int
    deb_amount: Decimal
    included: bool = True


def _normalize(participants: Iterable[ParticipantSpec], creator_id: int) -> List[Tuple[int, bool]]:
    """Deduplicate participants, keep first-seen order, drop the creator."""
    seen = {}
    for p in participants:
        user_id, included = (p, True) if isinstance(p, int) else (int(p[0]), bool(p[1]))
        if user_id == creator_id or user_id in seen:
            continue
        seen[user_id] = included
    return list(seen.items())


def allocate(total, participants: Iterable[ParticipantSpec], creator_id: int) -> List[Allocation]:
    """
    Split ``total`` equally among the included participants and the creator.

    The creator is always an included participant. Each share is
    ``round2(total / n)``; the creator's share absorbs the rounding remainder
    so included shares sum to ``total`` exactly:

        100.00 over 3 -> creator 33.34, others 33.33

    Participants passed as ``(user_id, False)`` get a zero, excluded share.
    The creator comes first in the returned list.
    """
    total = round2(total)
    if total <= ZERO:
        raise InvalidAmount("Event total must be positive")

    others = _normalize(participants, creator_id)
    included_ids = [uid for uid, included in others if included]
    n = len(included_ids) + 1
    share = round2(total / n)
    creator_share = total - share * (n - 1)
    if creator_share < ZERO:
        # Tiny totals over many people: rounding up would overdraw the creator
        share = (total / n).quantize(CENTS, rounding=ROUND_DOWN)
        creator_share = total - share * (n - 1)

    allocations = [Allocation(user_id=creator_id, deb_amount=creator_share)]
    for user_id, included in others:
        if included:
            allocations.append(Allocation(user_id=user_id, deb_amount=share))
        else:
            allocations.append(Allocation(user_id=user_id, deb_amount=ZERO, included=False))
    return allocations


def share_for_new_participant(total, existing_included: int) -> Decimal:
    """Share for a participant added after creation. Existing splits are not rebalanced."""
    return round2(to_money(total) / (existing_included + 1))
