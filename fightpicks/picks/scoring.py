from __future__ import annotations

from typing import Iterable

from fightpicks.events.models import Event


def score_picks(event: Event, picks: Iterable[str]) -> int:
    """Count the fights whose winner was picked.

    Unresolved fights and names not on the card count for nothing, so the
    result does not depend on pick order or duplicates.
    """
    picked = set(picks)
    return sum(1 for fight in event.fights if fight.winner and fight.winner in picked)


__all__ = ["score_picks"]
