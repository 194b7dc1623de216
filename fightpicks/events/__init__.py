"""Event records, their cache lifetimes, and cache-aside resolution."""

from .aggregator import resolve_many
from .freshness import freshness
from .interfaces import EventSource, EventStore
from .models import LATEST_EVENT_ID, LIVE_START_TIME, Event, EventSummary, Fight, StartState
from .resolver import EventResolver

__all__ = [
    "resolve_many",
    "freshness",
    "EventSource",
    "EventStore",
    "LATEST_EVENT_ID",
    "LIVE_START_TIME",
    "Event",
    "EventSummary",
    "Fight",
    "StartState",
    "EventResolver",
]
