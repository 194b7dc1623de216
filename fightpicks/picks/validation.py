"""Picks validation against an event's fight card.

Validation is stateless and order-independent. A rejection is an expected
outcome and is raised as PicksValidationError carrying the reason.
"""

from __future__ import annotations

from typing import Sequence

from fightpicks.events.models import Event
from fightpicks.shared.errors import PicksValidationError, RejectionReason


def validate_picks(event: Event, picks: Sequence[str]) -> None:
    """Check a set of picked winners against the event's fights.

    Rejects:
    - more picks than fights
    - a name that is not on the card
    - both fighters of the same fight

    An empty pick set is accepted.

    Raises:
        PicksValidationError: with the matching RejectionReason
    """
    if len(picks) > len(event.fights):
        raise PicksValidationError(
            RejectionReason.TOO_MANY_PICKS,
            f"{len(picks)} picks for {len(event.fights)} fights",
        )

    fight_of = event.fighter_index()
    picked_fights: set[int] = set()

    for pick in picks:
        fight_idx = fight_of.get(pick)
        if fight_idx is None:
            raise PicksValidationError(RejectionReason.UNKNOWN_FIGHTER, pick)
        if fight_idx in picked_fights:
            raise PicksValidationError(
                RejectionReason.SAME_FIGHT,
                " vs ".join(event.fights[fight_idx].fighters),
            )
        picked_fights.add(fight_idx)


def is_valid_picks(event: Event, picks: Sequence[str]) -> bool:
    """Non-raising variant of validate_picks."""
    try:
        validate_picks(event, picks)
    except PicksValidationError:
        return False
    return True


__all__ = ["validate_picks", "is_valid_picks"]
