"""Event and fight models.

`start_time` keeps the wire format used by cached records: an ISO-8601
timestamp, or the string ``"LIVE"`` while a card is in progress and the
source cannot report a start time. `start_state` and `parsed_start_time`
give the tagged view of the same field.
"""
from __future__ import annotations

from datetime import datetime, timezone
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

LATEST_EVENT_ID = "latest"
LIVE_START_TIME = "LIVE"


class StartState(str, Enum):
    SCHEDULED = "scheduled"
    LIVE = "live"
    UNKNOWN = "unknown"


def parse_start_time(value: str) -> Optional[datetime]:
    """Parse an ISO-8601 timestamp into an aware UTC datetime.

    Returns None for the live sentinel or anything unparsable. Naive
    timestamps are taken to be UTC.
    """
    if not value or value == LIVE_START_TIME:
        return None
    try:
        parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc)


def format_start_time(value: datetime) -> str:
    """Format a datetime the way start times are stored (RFC 3339, UTC, Z suffix)."""
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc).replace(microsecond=0).strftime("%Y-%m-%dT%H:%M:%SZ")


class Fight(BaseModel):
    model_config = ConfigDict(extra="ignore")

    fighters: List[str]
    winner: Optional[str] = None

    @field_validator("fighters")
    @classmethod
    def _two_fighters(cls, value: List[str]) -> List[str]:
        if len(value) != 2:
            raise ValueError(f"a fight needs exactly two fighters, got {len(value)}")
        return value

    @field_validator("winner")
    @classmethod
    def _blank_winner(cls, value: Optional[str]) -> Optional[str]:
        return value or None

    @model_validator(mode="after")
    def _winner_in_fight(self) -> "Fight":
        if self.winner is not None and self.winner not in self.fighters:
            raise ValueError(f"winner {self.winner!r} is not one of {self.fighters}")
        return self

    @property
    def is_resolved(self) -> bool:
        return bool(self.winner)


class Event(BaseModel):
    model_config = ConfigDict(extra="ignore")

    id: str
    name: str = ""
    start_time: str
    fights: List[Fight] = Field(default_factory=list)

    @model_validator(mode="after")
    def _unique_fighters(self) -> "Event":
        seen: set[str] = set()
        for fight in self.fights:
            for fighter in fight.fighters:
                if fighter in seen:
                    raise ValueError(f"fighter {fighter!r} appears in more than one fight")
                seen.add(fighter)
        return self

    @property
    def is_live(self) -> bool:
        return self.start_time == LIVE_START_TIME

    @property
    def start_state(self) -> StartState:
        if self.is_live:
            return StartState.LIVE
        if self.parsed_start_time() is None:
            return StartState.UNKNOWN
        return StartState.SCHEDULED

    def parsed_start_time(self) -> Optional[datetime]:
        return parse_start_time(self.start_time)

    def has_started(self, now: Optional[datetime] = None) -> bool:
        """True once the card is live or its start time is not in the future.

        An unparsable start time counts as started.
        """
        if self.is_live:
            return True
        start = self.parsed_start_time()
        if start is None:
            return True
        now = now or datetime.now(timezone.utc)
        return start <= now

    def is_finished(self) -> bool:
        """True when every fight has a winner (vacuously true with no fights)."""
        return all(fight.is_resolved for fight in self.fights)

    def fighter_index(self) -> dict[str, int]:
        """Map each fighter name to the index of the fight they are in."""
        index: dict[str, int] = {}
        for i, fight in enumerate(self.fights):
            for fighter in fight.fighters:
                index[fighter] = i
        return index


class EventSummary(BaseModel):
    """One row of the upcoming-events schedule."""

    model_config = ConfigDict(extra="ignore")

    id: str
    name: str = ""
    date: datetime


__all__ = [
    "LATEST_EVENT_ID",
    "LIVE_START_TIME",
    "StartState",
    "Fight",
    "Event",
    "EventSummary",
    "parse_start_time",
    "format_start_time",
]
