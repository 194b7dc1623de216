"""Cache-aside event resolution.

Flow:
1. Look the id up in the event store (a failing store counts as a miss)
2. On a hit, return the cached record as-is; expiry is left to the store
3. On a miss, fetch from the source (source errors propagate)
4. Write the record back with a ttl from the freshness policy, under the
   event's own id and, for the 'latest' alias, under the alias as well

Cache writes never fail a lookup: the record was already obtained.
"""

from __future__ import annotations

import logging
from datetime import datetime, timedelta
from typing import List, Optional

from fightpicks.config import CacheSettings

from .freshness import freshness, is_cacheable, latest_alias_ttl
from .interfaces import EventSource, EventStore
from .models import LATEST_EVENT_ID, Event, EventSummary


class EventResolver:
    """Resolves event ids to events through the event store.

    There is no locking: concurrent misses for one id may each hit the
    source, and the last cache write wins.
    """

    def __init__(
        self,
        source: EventSource,
        store: EventStore,
        *,
        settings: Optional[CacheSettings] = None,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        self.source = source
        self.store = store
        self.settings = settings or CacheSettings()
        self.logger = logger or logging.getLogger(__name__)

    async def resolve(self, event_id: str, *, now: Optional[datetime] = None) -> Event:
        """Return the event for an id, fetching it on a cache miss.

        Raises:
            SourceError: if the event is not cached and the source fails.
        """
        self.logger.info({"event_resolve": {"event_id": event_id}})

        cached = await self._cache_get(event_id)
        if cached is not None:
            self.logger.info({"event_resolve": {"event_id": event_id, "cache": "hit"}})
            return cached

        self.logger.info({"event_resolve": {"event_id": event_id, "cache": "miss"}})
        event = await self.source.fetch(event_id)

        ttl = freshness(event, now=now, settings=self.settings, log=self.logger)
        await self._store_event(event_id, event, ttl)
        return event

    async def _store_event(self, requested_id: str, event: Event, ttl: timedelta) -> None:
        own_key = event.id or requested_id
        if own_key != LATEST_EVENT_ID:
            if is_cacheable(event, ttl):
                await self._cache_set(own_key, event, ttl)
            else:
                self.logger.info({"event_cache_skip": {"event_id": own_key, "reason": "stale start time"}})

        if requested_id == LATEST_EVENT_ID:
            await self._store_alias(event, ttl)
        elif await self._alias_points_to(event.id):
            # keep the alias in step with the freshly fetched record
            await self._store_alias(event, ttl)

    async def _store_alias(self, event: Event, ttl: timedelta) -> None:
        alias_ttl = latest_alias_ttl(event, ttl, settings=self.settings)
        if is_cacheable(event, alias_ttl):
            await self._cache_set(LATEST_EVENT_ID, event, alias_ttl)

    async def _alias_points_to(self, event_id: str) -> bool:
        if not event_id:
            return False
        latest = await self._cache_get(LATEST_EVENT_ID)
        return latest is not None and latest.id == event_id

    async def _cache_get(self, key: str) -> Optional[Event]:
        try:
            return await self.store.get(key)
        except Exception as e:
            self.logger.warning({"event_cache_read_failed": {"key": key, "error": str(e)}})
            return None

    async def _cache_set(self, key: str, event: Event, ttl: timedelta) -> None:
        try:
            await self.store.set(key, event, ttl)
        except Exception as e:
            self.logger.warning({"event_cache_write_failed": {"key": key, "error": str(e)}})

    async def schedule(self) -> List[EventSummary]:
        """Return the upcoming-events schedule, cached for the schedule window."""
        try:
            cached = await self.store.get_schedule()
        except Exception as e:
            self.logger.warning({"schedule_cache_read_failed": str(e)})
            cached = None

        if cached is not None:
            self.logger.info({"schedule_resolve": {"cache": "hit"}})
            return cached

        self.logger.info({"schedule_resolve": {"cache": "miss"}})
        summaries = await self.source.fetch_schedule()
        summaries = sorted(summaries, key=lambda s: s.date)

        try:
            await self.store.set_schedule(summaries, timedelta(seconds=self.settings.schedule_seconds))
        except Exception as e:
            self.logger.warning({"schedule_cache_write_failed": str(e)})

        return summaries


__all__ = ["EventResolver"]
