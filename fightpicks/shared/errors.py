"""Exception hierarchy shared by the events and picks packages.

Failures fall into four groups:

- source failures: the authoritative event data could not be obtained
- store failures: the event cache could not be read or written
- rejections: a picks submission broke a rule (expected, not a fault)
- persistence failures: a picks row could not be saved
"""

from __future__ import annotations

from enum import Enum
from typing import Optional


class FightPicksError(Exception):
    """Base class for all package errors."""

    pass


class SourceError(FightPicksError):
    """Raised when an event cannot be obtained from its source."""

    def __init__(self, event_id: str, message: str = "failed to fetch event"):
        self.event_id = event_id
        super().__init__(f"{message} (event_id={event_id})")


class EventNotFoundError(SourceError):
    """Raised when the source has no event for the requested id."""

    def __init__(self, event_id: str):
        super().__init__(event_id, "event not found")


class StoreUnavailableError(FightPicksError):
    """Raised when the event store cannot be reached."""

    pass


class PersistenceError(FightPicksError):
    """Raised when a picks row cannot be read or written."""

    pass


class RejectionReason(str, Enum):
    TOO_MANY_PICKS = "too_many_picks"
    UNKNOWN_FIGHTER = "unknown_fighter"
    SAME_FIGHT = "same_fight"
    PICKS_CLOSED = "picks_closed"


class PicksValidationError(FightPicksError):
    """Raised when a picks submission is rejected."""

    def __init__(self, reason: RejectionReason, detail: Optional[str] = None):
        self.reason = reason
        self.detail = detail
        message = reason.value if not detail else f"{reason.value}: {detail}"
        super().__init__(message)


class PicksClosedError(PicksValidationError):
    """Raised when picks are submitted for an event that has started."""

    def __init__(self, event_id: str):
        self.event_id = event_id
        super().__init__(RejectionReason.PICKS_CLOSED, f"picks for event {event_id} are closed")


__all__ = [
    "FightPicksError",
    "SourceError",
    "EventNotFoundError",
    "StoreUnavailableError",
    "PersistenceError",
    "RejectionReason",
    "PicksValidationError",
    "PicksClosedError",
]
