"""Abstract base class for picks persistence."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import List, Optional, Sequence

from .models import Picks, PicksFilter, PicksRowError


class PicksStore(ABC):
    """Relational store for user picks, keyed by (user_id, event_id).

    Every method raises PersistenceError when the store fails, except
    batch_set_score, which reports failures per row.
    """

    @abstractmethod
    async def get_picks(self, user_id: str, event_id: str) -> Optional[Picks]:
        pass

    @abstractmethod
    async def get_all_user_picks(self, user_id: str) -> List[Picks]:
        """All picks of a user, newest submission first."""
        pass

    @abstractmethod
    async def get_picks_by_filter(self, picks_filter: PicksFilter) -> List[Picks]:
        pass

    @abstractmethod
    async def save_winners(self, user_id: str, event_id: str, winners: Sequence[str]) -> None:
        """Insert or overwrite winners; clears any score and refreshes created_at."""
        pass

    @abstractmethod
    async def set_score(self, user_id: str, event_id: str, score: int) -> None:
        pass

    @abstractmethod
    async def batch_set_score(self, picks: Sequence[Picks]) -> List[PicksRowError]:
        """Persist each row's score independently; return the rows that failed."""
        pass


__all__ = ["PicksStore"]
