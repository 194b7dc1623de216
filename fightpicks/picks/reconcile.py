"""Lazy, at-most-once score computation for picks.

A picks row is scored the first time it is read after its event finishes.
Once `score` is set it is never recomputed. Unlike event cache writes, a
failed score write is surfaced to the caller.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import List, Optional, Sequence

from fightpicks.events.models import Event

from .interfaces import PicksStore
from .models import Picks, PicksRowError
from .scoring import score_picks

_logger = logging.getLogger(__name__)


def is_scoreable(event: Event) -> bool:
    """A finished event with at least one fight.

    An empty card counts as finished, but there is nothing to score it on.
    """
    return bool(event.fights) and event.is_finished()


def needs_score(event: Event, picks: Picks) -> bool:
    return not picks.is_scored and bool(picks.winners) and is_scoreable(event)


async def reconcile_score(
    event: Event,
    picks: Picks,
    store: PicksStore,
    *,
    logger: Optional[logging.Logger] = None,
) -> bool:
    """Score and persist picks if they are due.

    Sets `picks.score` in place once the write succeeds, so a failed write
    leaves the picks due for another attempt.

    Returns:
        True if a score was written, False if nothing was due.

    Raises:
        PersistenceError: if the score cannot be saved.
    """
    if not needs_score(event, picks):
        return False

    log = logger or _logger
    score = score_picks(event, picks.winners)
    await store.set_score(picks.user_id, event.id, score)
    picks.score = score
    log.info({"picks_scored": {"user_id": picks.user_id, "event_id": event.id, "score": score}})
    return True


@dataclass
class BatchScoreResult:
    event_id: str
    scored: int = 0
    failures: List[PicksRowError] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.failures


async def reconcile_batch(
    event: Event,
    picks: Sequence[Picks],
    store: PicksStore,
    *,
    logger: Optional[logging.Logger] = None,
) -> BatchScoreResult:
    """Score every unscored picks row for a finished event in one pass.

    Rows succeed or fail independently; failures are collected in the
    result and logged, never raised.
    """
    log = logger or _logger
    result = BatchScoreResult(event_id=event.id)
    if not is_scoreable(event):
        return result

    due = [p for p in picks if not p.is_scored and p.event_id == event.id]
    if not due:
        return result

    written = [p.model_copy(update={"score": score_picks(event, p.winners)}) for p in due]
    failures = await store.batch_set_score(written)
    result.failures = list(failures)
    result.scored = len(due) - len(result.failures)

    # only rows that were saved carry their score back to the caller
    failed = {(f.user_id, f.event_id) for f in result.failures}
    for p, w in zip(due, written):
        if (p.user_id, p.event_id) not in failed:
            p.score = w.score

    if result.failures:
        log.warning({
            "batch_score_partial_failure": {
                "event_id": event.id,
                "failed": len(result.failures),
                "errors": [f"{f.user_id}: {f.error}" for f in result.failures],
            }
        })
    log.info({"batch_scored": {"event_id": event.id, "scored": result.scored, "total": len(due)}})
    return result


__all__ = ["BatchScoreResult", "is_scoreable", "needs_score", "reconcile_score", "reconcile_batch"]
