"""In-process event store built on TTLCache."""

from __future__ import annotations

from datetime import timedelta
from typing import List, Optional

from fightpicks.utils.cache import TTLCache

from ..interfaces import EventStore
from ..models import Event, EventSummary

SCHEDULE_KEY = "upcoming_events"


class MemoryEventStore(EventStore):
    """EventStore for a single process. Records are copied in and out."""

    def __init__(self, maxsize: int = 1024, cache: Optional[TTLCache] = None) -> None:
        self._events: TTLCache[Event] = cache if cache is not None else TTLCache(maxsize=maxsize)
        self._schedule: TTLCache[List[EventSummary]] = TTLCache(maxsize=1)

    async def get(self, key: str) -> Optional[Event]:
        event = self._events.get(key)
        return event.model_copy(deep=True) if event is not None else None

    async def set(self, key: str, event: Event, ttl: timedelta) -> None:
        self._events.set(key, event.model_copy(deep=True), ttl=ttl.total_seconds())

    async def get_schedule(self) -> Optional[List[EventSummary]]:
        summaries = self._schedule.get(SCHEDULE_KEY)
        return list(summaries) if summaries is not None else None

    async def set_schedule(self, summaries: List[EventSummary], ttl: timedelta) -> None:
        self._schedule.set(SCHEDULE_KEY, list(summaries), ttl=ttl.total_seconds())

    def invalidate(self, key: str) -> bool:
        return self._events.invalidate(key)


__all__ = ["MemoryEventStore"]
