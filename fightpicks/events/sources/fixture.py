"""In-memory event source for tests and local development."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Dict, Iterable, List, Optional

from fightpicks.shared.errors import EventNotFoundError

from ..interfaces import EventSource
from ..models import LATEST_EVENT_ID, Event, EventSummary


class FixtureEventSource(EventSource):
    """Serves events from a fixed mapping.

    `latest_id` names the event returned for the 'latest' alias. Every
    fetch is counted per requested id so callers can assert cache behaviour.
    """

    def __init__(
        self,
        events: Iterable[Event] = (),
        *,
        latest_id: Optional[str] = None,
        schedule: Iterable[EventSummary] = (),
    ) -> None:
        self.events: Dict[str, Event] = {event.id: event for event in events}
        self.latest_id = latest_id
        self.schedule = list(schedule)
        self.fetch_counts: Dict[str, int] = {}

    @classmethod
    def from_json_file(cls, path: str | Path) -> "FixtureEventSource":
        """Load a fixture file shaped as {"latest": id, "events": [...], "schedule": [...]}."""
        with Path(path).open("r", encoding="utf-8") as f:
            data = json.load(f)
        return cls(
            [Event.model_validate(e) for e in data.get("events", [])],
            latest_id=data.get("latest"),
            schedule=[EventSummary.model_validate(s) for s in data.get("schedule", [])],
        )

    def put(self, event: Event) -> None:
        """Replace the record the source reports for an event."""
        self.events[event.id] = event

    async def fetch(self, event_id: str) -> Event:
        self.fetch_counts[event_id] = self.fetch_counts.get(event_id, 0) + 1
        lookup_id = self.latest_id if event_id == LATEST_EVENT_ID else event_id
        event = self.events.get(lookup_id) if lookup_id else None
        if event is None:
            raise EventNotFoundError(event_id)
        return event.model_copy(deep=True)

    async def fetch_schedule(self) -> List[EventSummary]:
        return [summary.model_copy() for summary in self.schedule]


__all__ = ["FixtureEventSource"]
