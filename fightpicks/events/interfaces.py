"""Abstract base classes for event sources and event stores."""

from __future__ import annotations

from abc import ABC, abstractmethod
from datetime import timedelta
from typing import List, Optional

from .models import Event, EventSummary


class EventSource(ABC):
    """Authoritative provider of event records.

    The id ``"latest"`` means "the most current event"; only the source
    knows which event that is.
    """

    @abstractmethod
    async def fetch(self, event_id: str) -> Event:
        """Fetch the current record for an event.

        Raises:
            SourceError: if the event cannot be obtained.
        """
        pass

    @abstractmethod
    async def fetch_schedule(self) -> List[EventSummary]:
        """Fetch upcoming events, earliest first.

        Raises:
            SourceError: if the schedule cannot be obtained.
        """
        pass

    async def close(self) -> None:
        """Release any held resources."""
        return None


class EventStore(ABC):
    """Key/value cache for event records with per-key expiry.

    A ttl of zero stores the value without expiry.
    """

    @abstractmethod
    async def get(self, key: str) -> Optional[Event]:
        """Return the cached event or None.

        Raises:
            StoreUnavailableError: if the store cannot be read.
        """
        pass

    @abstractmethod
    async def set(self, key: str, event: Event, ttl: timedelta) -> None:
        """Cache an event under key.

        Raises:
            StoreUnavailableError: if the store cannot be written.
        """
        pass

    @abstractmethod
    async def get_schedule(self) -> Optional[List[EventSummary]]:
        pass

    @abstractmethod
    async def set_schedule(self, summaries: List[EventSummary], ttl: timedelta) -> None:
        pass


__all__ = ["EventSource", "EventStore"]
