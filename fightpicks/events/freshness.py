"""How long a fetched event may stay cached.

A zero duration has two readings. For a finished event it means "keep
forever", because the record will never change again. For an unfinished
event it means "do not cache", so the next lookup goes back to the source.
`is_cacheable` tells the two apart.
"""

from __future__ import annotations

import logging
from datetime import datetime, timedelta, timezone
from typing import Optional

from fightpicks.config import CacheSettings

from .models import Event

logger = logging.getLogger(__name__)

NO_EXPIRY = timedelta(0)


def freshness(
    event: Event,
    *,
    now: Optional[datetime] = None,
    settings: Optional[CacheSettings] = None,
    log: Optional[logging.Logger] = None,
) -> timedelta:
    """Return the cache lifetime for an event.

    Finished events are kept forever, live events for the live window.
    Scheduled events are kept until they start, capped at the pre-event
    window. A start time in the past, or one that cannot be parsed, yields
    zero so the record is refetched on every lookup.
    """
    settings = settings or CacheSettings()
    log = log or logger

    if event.is_finished():
        return NO_EXPIRY

    if event.is_live:
        return timedelta(seconds=settings.live_fresh_seconds)

    start = event.parsed_start_time()
    if start is None:
        log.error({"freshness": {"error": "unparsable start time", "event_id": event.id, "start_time": event.start_time}})
        return timedelta(0)

    now = now or datetime.now(timezone.utc)
    if start > now:
        window = timedelta(seconds=settings.pre_event_fresh_seconds)
        until_start = start - now
        return until_start if until_start < window else window

    # should have started but the source has no results yet
    return timedelta(0)


def latest_alias_ttl(event: Event, ttl: timedelta, *, settings: Optional[CacheSettings] = None) -> timedelta:
    """Lifetime for the 'latest' alias key.

    A finished card must not pin the alias forever, otherwise the next
    event would never replace it.
    """
    settings = settings or CacheSettings()
    if event.is_finished():
        return timedelta(seconds=settings.latest_finished_seconds)
    return ttl


def is_cacheable(event: Event, ttl: timedelta) -> bool:
    """A zero ttl only means 'forever' for finished events."""
    if ttl > timedelta(0):
        return True
    return event.is_finished()


__all__ = ["NO_EXPIRY", "freshness", "latest_alias_ttl", "is_cacheable"]
