"""Shared fixtures: sample fight cards, sources, stores and a SQLite database."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import List, Optional, Tuple

import pytest
import pytest_asyncio

from fightpicks.config import Settings, build_sqlite_url
from fightpicks.database import DBM, SqlPicksStore, initialize
from fightpicks.events.models import Event, Fight, format_start_time
from fightpicks.events.resolver import EventResolver
from fightpicks.events.sources.fixture import FixtureEventSource
from fightpicks.events.stores.memory import MemoryEventStore

NOW = datetime(2025, 3, 1, 20, 0, tzinfo=timezone.utc)

CARD: List[Tuple[str, str]] = [("A", "B"), ("C", "D"), ("E", "F")]


def make_event(
    event_id: str = "600041234",
    *,
    start: Optional[datetime] = None,
    start_time: Optional[str] = None,
    winners: Optional[List[Optional[str]]] = None,
    card: Optional[List[Tuple[str, str]]] = None,
    name: str = "UFC Fight Night",
) -> Event:
    """Build an event; winners line up with the card, None for unresolved."""
    card = CARD if card is None else card
    winners = winners or [None] * len(card)
    if start_time is None:
        start_time = format_start_time(start or NOW + timedelta(days=2))
    fights = [Fight(fighters=list(pair), winner=w) for pair, w in zip(card, winners)]
    return Event(id=event_id, name=name, start_time=start_time, fights=fights)


@pytest.fixture
def finished_event() -> Event:
    """Finished card: A, D and E won."""
    return make_event("600040001", start=NOW - timedelta(days=1), winners=["A", "D", "E"])


@pytest.fixture
def upcoming_event() -> Event:
    return make_event("600040002", start=NOW + timedelta(days=7))


@pytest.fixture
def source(finished_event: Event, upcoming_event: Event) -> FixtureEventSource:
    return FixtureEventSource([finished_event, upcoming_event], latest_id=finished_event.id)


@pytest.fixture
def event_store() -> MemoryEventStore:
    return MemoryEventStore()


@pytest.fixture
def resolver(source: FixtureEventSource, event_store: MemoryEventStore) -> EventResolver:
    return EventResolver(source, event_store)


@pytest.fixture
def settings() -> Settings:
    return Settings()


@pytest_asyncio.fixture
async def dbm(tmp_path):
    """Fresh SQLite database with all tables created."""
    manager = DBM(url=build_sqlite_url(str(tmp_path / "fightpicks-test.db")))
    await initialize(manager)
    yield manager
    await manager.dispose()


@pytest.fixture
def picks_store(dbm: DBM) -> SqlPicksStore:
    return SqlPicksStore(dbm)


@pytest.fixture
def event_factory():
    return make_event
