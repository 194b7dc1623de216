"""Bounded fan-out over EventResolver.resolve.

Each id runs as its own task. A semaphore caps how many resolutions are in
flight. The first failure is latched: tasks still waiting for a slot skip
their lookup, tasks already running finish but their results are dropped,
and the caller gets that first error with no partial map.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Dict, Iterable, Optional

from fightpicks.config import AggregatorSettings

from .models import Event
from .resolver import EventResolver


async def resolve_many(
    resolver: EventResolver,
    event_ids: Iterable[str],
    *,
    max_concurrency: Optional[int] = None,
    logger: Optional[logging.Logger] = None,
) -> Dict[str, Event]:
    """Resolve many event ids concurrently.

    Args:
        resolver: Cache-aside resolver used for every id
        event_ids: Ids to resolve; duplicates are resolved once
        max_concurrency: In-flight cap (defaults to AggregatorSettings)
        logger: Logger for progress and failures

    Returns:
        Mapping of requested id to event

    Raises:
        The first exception raised by any resolution.
    """
    log = logger or logging.getLogger(__name__)
    limit = max_concurrency if max_concurrency is not None else AggregatorSettings().max_concurrency
    if limit < 1:
        raise ValueError(f"max_concurrency must be >= 1, got {limit}")

    ids = list(dict.fromkeys(event_ids))
    if not ids:
        return {}

    semaphore = asyncio.Semaphore(limit)
    write_lock = asyncio.Lock()
    results: Dict[str, Event] = {}
    failed = asyncio.Event()
    first_error: list[BaseException] = []

    async def _resolve_one(event_id: str) -> None:
        async with semaphore:
            if failed.is_set():
                return
            try:
                event = await resolver.resolve(event_id)
            except Exception as e:
                if not failed.is_set():
                    first_error.append(e)
                    failed.set()
                    log.warning({"resolve_many_failed": {"event_id": event_id, "error": str(e)}})
                return
            async with write_lock:
                if not failed.is_set():
                    results[event_id] = event

    log.info({"resolve_many": {"count": len(ids), "max_concurrency": limit}})
    await asyncio.gather(*(_resolve_one(event_id) for event_id in ids))

    if first_error:
        raise first_error[0]
    return results


__all__ = ["resolve_many"]
