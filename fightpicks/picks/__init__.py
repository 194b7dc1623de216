"""User picks: validation, scoring and score reconciliation."""

from .interfaces import PicksStore
from .models import Picks, PicksFilter, PicksRowError, PicksWithEvent
from .reconcile import BatchScoreResult, reconcile_batch, reconcile_score
from .scoring import score_picks
from .service import PicksService
from .validation import validate_picks

__all__ = [
    "PicksStore",
    "Picks",
    "PicksFilter",
    "PicksRowError",
    "PicksWithEvent",
    "BatchScoreResult",
    "reconcile_batch",
    "reconcile_score",
    "score_picks",
    "PicksService",
    "validate_picks",
]
