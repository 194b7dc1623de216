"""Picks models."""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Iterable, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from fightpicks.events.models import Event


def unique_winners(winners: Iterable[str]) -> List[str]:
    """Drop duplicate names, keeping first occurrence order."""
    return list(dict.fromkeys(winners))


class Picks(BaseModel):
    """One user's predictions for one event."""

    model_config = ConfigDict(extra="ignore")

    user_id: str
    event_id: str
    winners: List[str] = Field(default_factory=list)
    score: Optional[int] = None
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    @field_validator("winners")
    @classmethod
    def _dedupe(cls, value: List[str]) -> List[str]:
        return unique_winners(value)

    @property
    def is_scored(self) -> bool:
        return self.score is not None


class PicksWithEvent(BaseModel):
    """A listing row: the picks alongside the event they were made for."""

    picks: Picks
    event: Event


@dataclass
class PicksFilter:
    """Selection for bulk picks queries. Empty event_ids matches every event."""

    event_ids: List[str] = field(default_factory=list)
    has_score: Optional[bool] = None


@dataclass
class PicksRowError:
    """A picks row that failed to persist during a batch write."""

    user_id: str
    event_id: str
    error: Exception


__all__ = ["Picks", "PicksWithEvent", "PicksFilter", "PicksRowError", "unique_winners"]
