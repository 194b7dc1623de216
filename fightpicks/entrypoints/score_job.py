"""Picks scoring job entrypoint.

Resolves the latest event and, once it is finished, scores every unscored
picks row for it. Runs once by default, or on an interval with --interval.
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import signal
from dataclasses import dataclass
from typing import List, Optional

from fightpicks.config import Settings, load_settings
from fightpicks.database import DBM, SqlPicksStore, initialize
from fightpicks.events.interfaces import EventSource, EventStore
from fightpicks.events.resolver import EventResolver
from fightpicks.events.sources import EspnEventSource, FixtureEventSource
from fightpicks.events.stores import MemoryEventStore, SqlEventStore
from fightpicks.picks.reconcile import BatchScoreResult
from fightpicks.picks.service import PicksService
from fightpicks.shared.errors import FightPicksError
from fightpicks.shared.logging import configure_logging

logger = logging.getLogger("fightpicks.entrypoints.score_job")


@dataclass
class Components:
    dbm: DBM
    source: EventSource
    service: PicksService

    async def close(self) -> None:
        await self.source.close()
        await self.dbm.dispose()


def build_event_store(settings: Settings, dbm: DBM) -> EventStore:
    if settings.cache.backend == "sql":
        return SqlEventStore(dbm)
    return MemoryEventStore(maxsize=settings.cache.memory_maxsize)


async def build_components(
    settings: Settings,
    *,
    source: Optional[EventSource] = None,
    dbm: Optional[DBM] = None,
) -> Components:
    """Wire source, stores, resolver and service from settings."""
    dbm = dbm or DBM(settings.database)
    await initialize(dbm)
    source = source or EspnEventSource(settings.source)
    resolver = EventResolver(source, build_event_store(settings, dbm), settings=settings.cache)
    service = PicksService(resolver, SqlPicksStore(dbm), settings=settings)
    return Components(dbm=dbm, source=source, service=service)


async def run_once(service: PicksService) -> Optional[BatchScoreResult]:
    """Run one sweep. Source failures are logged and retried on the next run."""
    try:
        result = await service.score_latest()
    except FightPicksError as e:
        logger.error({"score_job": {"error": str(e)}})
        return None
    if result is not None:
        logger.info({"score_job": {"event_id": result.event_id, "scored": result.scored, "failed": len(result.failures)}})
    return result


async def run(components: Components, *, interval: Optional[float], stop: asyncio.Event) -> None:
    while True:
        await run_once(components.service)
        if not interval:
            return
        try:
            await asyncio.wait_for(stop.wait(), timeout=interval)
            return
        except asyncio.TimeoutError:
            continue


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Score picks for the latest finished event")
    parser.add_argument("--config", type=str, default=None, help="Path to a fightpicks YAML file")
    parser.add_argument("--interval", type=float, default=None, help="Repeat every N seconds")
    parser.add_argument(
        "--fixture",
        type=str,
        default=None,
        help="Serve events from a JSON fixture file instead of ESPN",
    )
    return parser.parse_args(argv)


def main(argv: Optional[List[str]] = None) -> None:
    args = parse_args(argv)
    settings = load_settings(args.config)
    configure_logging(settings.logging)
    logger.info({"score_job": "starting", "cache_backend": settings.cache.backend})

    loop = asyncio.new_event_loop()
    stop = asyncio.Event()

    def _signal_handler(sig, frame):
        logger.info({"score_job": "shutdown_signal_received"})
        loop.call_soon_threadsafe(stop.set)

    signal.signal(signal.SIGINT, _signal_handler)
    signal.signal(signal.SIGTERM, _signal_handler)

    source = FixtureEventSource.from_json_file(args.fixture) if args.fixture else None
    components = loop.run_until_complete(build_components(settings, source=source))
    try:
        loop.run_until_complete(run(components, interval=args.interval, stop=stop))
    finally:
        loop.run_until_complete(components.close())
        loop.close()
        logger.info({"score_job": "stopped"})


if __name__ == "__main__":
    main()
