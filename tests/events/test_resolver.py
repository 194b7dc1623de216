"""Tests for events/resolver.py - cache-aside event resolution."""

from __future__ import annotations

import logging
from datetime import datetime, timedelta, timezone
from typing import List, Tuple
from unittest.mock import AsyncMock

import pytest

from fightpicks.events.models import LATEST_EVENT_ID, LIVE_START_TIME, Event, EventSummary
from fightpicks.events.resolver import EventResolver
from fightpicks.events.sources.fixture import FixtureEventSource
from fightpicks.events.stores.memory import MemoryEventStore
from fightpicks.shared.errors import EventNotFoundError, SourceError, StoreUnavailableError

NOW = datetime(2025, 3, 1, 20, 0, tzinfo=timezone.utc)


class RecordingStore(MemoryEventStore):
    """Memory store that remembers every write."""

    def __init__(self) -> None:
        super().__init__()
        self.writes: List[Tuple[str, str, timedelta]] = []

    async def set(self, key: str, event: Event, ttl: timedelta) -> None:
        self.writes.append((key, event.id, ttl))
        await super().set(key, event, ttl)

    def ttl_for(self, key: str) -> timedelta:
        return [ttl for k, _, ttl in self.writes if k == key][-1]


class BrokenStore(MemoryEventStore):
    async def get(self, key):
        raise StoreUnavailableError("connection refused")

    async def set(self, key, event, ttl):
        raise StoreUnavailableError("connection refused")

    async def get_schedule(self):
        raise StoreUnavailableError("connection refused")

    async def set_schedule(self, summaries, ttl):
        raise StoreUnavailableError("connection refused")


class TestResolve:
    """Tests for the cache-aside read path."""

    @pytest.mark.asyncio
    async def test_miss_then_hit(self, resolver, source, upcoming_event):
        """Second lookup is served from the cache."""
        first = await resolver.resolve(upcoming_event.id, now=NOW)
        second = await resolver.resolve(upcoming_event.id, now=NOW)

        assert first == upcoming_event
        assert second == upcoming_event
        assert source.fetch_counts[upcoming_event.id] == 1

    @pytest.mark.asyncio
    async def test_hit_skips_freshness_check(self, source, event_store, event_factory):
        """Whatever sits in the store is returned without re-checking it."""
        stale = event_factory("600049999", start=NOW - timedelta(days=30))
        await event_store.set(stale.id, stale, timedelta(0))
        resolver = EventResolver(source, event_store)

        assert await resolver.resolve(stale.id, now=NOW) == stale
        assert stale.id not in source.fetch_counts

    @pytest.mark.asyncio
    async def test_source_error_propagates(self, resolver):
        with pytest.raises(EventNotFoundError):
            await resolver.resolve("does-not-exist", now=NOW)

    @pytest.mark.asyncio
    async def test_source_failure_not_cached(self, event_store):
        source = AsyncMock()
        source.fetch.side_effect = SourceError("600040002", "timeout")
        resolver = EventResolver(source, event_store)

        with pytest.raises(SourceError, match="timeout"):
            await resolver.resolve("600040002", now=NOW)
        assert await event_store.get("600040002") is None

    @pytest.mark.asyncio
    async def test_store_read_failure_is_a_miss(self, source, upcoming_event, caplog):
        """A broken cache degrades to fetching every time, never to an error."""
        resolver = EventResolver(source, BrokenStore())

        with caplog.at_level(logging.WARNING):
            event = await resolver.resolve(upcoming_event.id, now=NOW)
            await resolver.resolve(upcoming_event.id, now=NOW)

        assert event == upcoming_event
        assert source.fetch_counts[upcoming_event.id] == 2
        assert "event_cache_read_failed" in caplog.text
        assert "event_cache_write_failed" in caplog.text

    @pytest.mark.asyncio
    async def test_scheduled_event_cached_until_start(self, source, event_factory):
        store = RecordingStore()
        soon = event_factory("600040010", start=NOW + timedelta(minutes=20))
        source.put(soon)

        await EventResolver(source, store).resolve(soon.id, now=NOW)

        assert store.ttl_for(soon.id) == timedelta(minutes=20)

    @pytest.mark.asyncio
    async def test_overdue_event_is_not_cached(self, source, event_factory):
        """Past start without results: every lookup goes back to the source."""
        store = RecordingStore()
        overdue = event_factory("600040011", start=NOW - timedelta(hours=1), winners=["A", None, None])
        source.put(overdue)
        resolver = EventResolver(source, store)

        await resolver.resolve(overdue.id, now=NOW)
        await resolver.resolve(overdue.id, now=NOW)

        assert store.writes == []
        assert source.fetch_counts[overdue.id] == 2

    @pytest.mark.asyncio
    async def test_finished_event_cached_forever(self, source, finished_event):
        store = RecordingStore()
        await EventResolver(source, store).resolve(finished_event.id, now=NOW)
        assert store.ttl_for(finished_event.id) == timedelta(0)


class TestLatestAlias:
    """Tests for the 'latest' alias bookkeeping."""

    @pytest.mark.asyncio
    async def test_latest_writes_both_keys(self, source, finished_event):
        store = RecordingStore()
        resolver = EventResolver(source, store)

        event = await resolver.resolve(LATEST_EVENT_ID, now=NOW)

        assert event.id == finished_event.id
        assert store.ttl_for(finished_event.id) == timedelta(0)
        assert store.ttl_for(LATEST_EVENT_ID) == timedelta(hours=1)

        # direct lookup by true id is now a hit
        await resolver.resolve(finished_event.id, now=NOW)
        assert finished_event.id not in source.fetch_counts

    @pytest.mark.asyncio
    async def test_live_latest_uses_live_window(self, source, event_factory):
        store = RecordingStore()
        live = event_factory("600040020", start_time=LIVE_START_TIME, winners=["A", None, None])
        source.put(live)
        source.latest_id = live.id

        await EventResolver(source, store).resolve(LATEST_EVENT_ID, now=NOW)

        assert store.ttl_for(live.id) == timedelta(minutes=5)
        assert store.ttl_for(LATEST_EVENT_ID) == timedelta(minutes=5)

    @pytest.mark.asyncio
    async def test_fetch_by_id_refreshes_alias(self, source, event_factory):
        """When the cached alias points at the refetched event, both keys are updated."""
        store = RecordingStore()
        live = event_factory("600040030", start_time=LIVE_START_TIME, winners=["A", None, None])
        source.put(live)
        source.latest_id = live.id
        resolver = EventResolver(source, store)
        await resolver.resolve(LATEST_EVENT_ID, now=NOW)

        # the true-id entry expires while the alias is still cached
        store.invalidate(live.id)
        done = event_factory("600040030", start_time=LIVE_START_TIME, winners=["A", "D", "E"])
        source.put(done)

        await resolver.resolve(live.id, now=NOW)

        alias = await store.get(LATEST_EVENT_ID)
        assert alias.is_finished()
        assert store.ttl_for(LATEST_EVENT_ID) == timedelta(hours=1)

    @pytest.mark.asyncio
    async def test_fetch_by_id_leaves_other_alias_alone(self, source, finished_event, upcoming_event):
        store = RecordingStore()
        resolver = EventResolver(source, store)
        await resolver.resolve(LATEST_EVENT_ID, now=NOW)
        await resolver.resolve(upcoming_event.id, now=NOW)

        alias = await store.get(LATEST_EVENT_ID)
        assert alias.id == finished_event.id
        assert [k for k, _, _ in store.writes].count(LATEST_EVENT_ID) == 1


class TestSchedule:
    """Tests for the schedule cache-aside."""

    @pytest.mark.asyncio
    async def test_schedule_sorted_and_cached(self, event_store):
        summaries = [
            EventSummary(id="2", name="UFC 312", date=NOW + timedelta(days=14)),
            EventSummary(id="1", name="UFC 311", date=NOW + timedelta(days=7)),
        ]
        source = FixtureEventSource(schedule=summaries)
        source.fetch_schedule = AsyncMock(wraps=source.fetch_schedule)
        resolver = EventResolver(source, event_store)

        first = await resolver.schedule()
        second = await resolver.schedule()

        assert [s.id for s in first] == ["1", "2"]
        assert second == first
        assert source.fetch_schedule.await_count == 1

    @pytest.mark.asyncio
    async def test_schedule_with_broken_store(self):
        source = FixtureEventSource(schedule=[EventSummary(id="1", date=NOW)])
        resolver = EventResolver(source, BrokenStore())

        assert [s.id for s in await resolver.schedule()] == ["1"]
