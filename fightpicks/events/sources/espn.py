"""ESPN public API event source.

Uses ESPN's public (unofficial) JSON endpoints for MMA. No API key
required. Scoreboard payloads look like:

    {
      "leagues": [{"calendar": [{"label": ..., "startDate": ..., "event": {"$ref": ".../events/<id>?..."}}]}],
      "events": [{
        "id": "600041234", "name": "UFC 310", "date": "2024-12-07T23:00Z",
        "status": {"type": {"state": "pre" | "in" | "post"}},
        "competitions": [{"date": ..., "competitors": [{"athlete": {"displayName": ...}, "winner": bool}, ...]}]
      }]
    }
"""

from __future__ import annotations

import logging
import re
from datetime import datetime
from typing import Any, Dict, List, Optional

import httpx
from pydantic import ValidationError

from fightpicks.config import SourceSettings
from fightpicks.shared.errors import EventNotFoundError, SourceError

from ..interfaces import EventSource
from ..models import (
    LATEST_EVENT_ID,
    LIVE_START_TIME,
    Event,
    EventSummary,
    Fight,
    format_start_time,
    parse_start_time,
)

_EVENT_REF_ID = re.compile(r"/events/(\d+)")


class EspnEventSource(EventSource):
    """Fetches UFC event cards from ESPN's scoreboard API.

    Example:
        async with EspnEventSource() as source:
            event = await source.fetch("latest")
            print(event.name, len(event.fights))
    """

    def __init__(
        self,
        settings: Optional[SourceSettings] = None,
        *,
        client: Optional[httpx.AsyncClient] = None,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        self.settings = settings or SourceSettings()
        self.logger = logger or logging.getLogger(__name__)
        self._client = client or httpx.AsyncClient(timeout=self.settings.timeout_seconds)

    async def close(self) -> None:
        await self._client.aclose()

    async def __aenter__(self) -> "EspnEventSource":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.close()

    # ------------------------------------------------------------------
    # EventSource implementation
    # ------------------------------------------------------------------
    async def fetch(self, event_id: str) -> Event:
        if event_id == LATEST_EVENT_ID:
            url = self.settings.latest_url
        else:
            url = self.settings.event_url.replace("{EVENT_ID}", event_id)

        payload = await self._get_json(url, event_id)
        raw = self._select_event(payload, event_id)
        try:
            event = self._parse_event(raw)
        except (KeyError, TypeError, ValueError, ValidationError) as e:
            raise SourceError(event_id, f"malformed event payload: {e}") from e

        self.logger.debug({"espn_event": {"requested": event_id, "event_id": event.id, "fights": len(event.fights)}})
        return event

    async def fetch_schedule(self) -> List[EventSummary]:
        payload = await self._get_json(self.settings.schedule_url, "schedule")
        try:
            summaries = self._parse_calendar(payload)
        except (KeyError, TypeError, ValueError, ValidationError) as e:
            raise SourceError("schedule", f"malformed schedule payload: {e}") from e
        summaries.sort(key=lambda s: s.date)
        return summaries

    # ------------------------------------------------------------------
    # HTTP
    # ------------------------------------------------------------------
    async def _get_json(self, url: str, event_id: str) -> Dict[str, Any]:
        try:
            response = await self._client.get(url)
            response.raise_for_status()
            data = response.json()
        except httpx.HTTPError as e:
            raise SourceError(event_id, f"request to {url} failed: {e}") from e
        except ValueError as e:
            raise SourceError(event_id, f"invalid JSON from {url}") from e
        if not isinstance(data, dict):
            raise SourceError(event_id, f"unexpected payload type {type(data).__name__}")
        return data

    # ------------------------------------------------------------------
    # Parsing
    # ------------------------------------------------------------------
    def _select_event(self, payload: Dict[str, Any], event_id: str) -> Dict[str, Any]:
        """Pick the requested event out of a scoreboard or single-event payload."""
        if "competitions" in payload:
            if event_id != LATEST_EVENT_ID and str(payload.get("id")) != event_id:
                raise EventNotFoundError(event_id)
            return payload

        events = payload.get("events") or []
        if not events:
            raise EventNotFoundError(event_id)
        if event_id == LATEST_EVENT_ID:
            return events[0]
        for raw in events:
            if str(raw.get("id")) == event_id:
                return raw
        # the upstream may ignore the event filter and answer with the current card
        raise EventNotFoundError(event_id)

    def _parse_event(self, raw: Dict[str, Any]) -> Event:
        competitions = raw.get("competitions") or []
        fights = [fight for fight in (self._parse_fight(c) for c in competitions) if fight is not None]
        return Event(
            id=str(raw["id"]),
            name=raw.get("name") or raw.get("shortName") or "",
            start_time=self._start_time(raw, competitions),
            fights=fights,
        )

    def _parse_fight(self, competition: Dict[str, Any]) -> Optional[Fight]:
        competitors = competition.get("competitors") or []
        if len(competitors) != 2:
            return None

        fighters: List[str] = []
        winner: Optional[str] = None
        for competitor in competitors:
            athlete = competitor.get("athlete") or {}
            name = athlete.get("displayName") or competitor.get("displayName")
            if not name:
                return None
            fighters.append(name)
            if competitor.get("winner") is True:
                winner = name
        return Fight(fighters=fighters, winner=winner)

    def _start_time(self, raw: Dict[str, Any], competitions: List[Dict[str, Any]]) -> str:
        """Earliest bout time, or LIVE while the card is running or undated."""
        state = (((raw.get("status") or {}).get("type") or {}).get("state") or "").lower()
        if state == "in":
            return LIVE_START_TIME

        candidates: List[datetime] = []
        for value in [c.get("date") for c in competitions] + [raw.get("date")]:
            parsed = parse_start_time(value) if isinstance(value, str) else None
            if parsed is not None:
                candidates.append(parsed)
        if not candidates:
            return LIVE_START_TIME
        return format_start_time(min(candidates))

    def _parse_calendar(self, payload: Dict[str, Any]) -> List[EventSummary]:
        summaries: List[EventSummary] = []
        for league in payload.get("leagues") or []:
            for entry in league.get("calendar") or []:
                summary = self._parse_calendar_entry(entry)
                if summary is not None:
                    summaries.append(summary)

        if summaries:
            return summaries

        # no calendar block: fall back to the events on the scoreboard
        for raw in payload.get("events") or []:
            date = parse_start_time(raw.get("date") or "")
            if raw.get("id") and date is not None:
                summaries.append(EventSummary(id=str(raw["id"]), name=raw.get("name") or "", date=date))
        return summaries

    def _parse_calendar_entry(self, entry: Any) -> Optional[EventSummary]:
        if not isinstance(entry, dict):
            return None
        ref = (entry.get("event") or {}).get("$ref") or ""
        match = _EVENT_REF_ID.search(ref)
        date = parse_start_time(entry.get("startDate") or "")
        if match is None or date is None:
            return None
        return EventSummary(id=match.group(1), name=entry.get("label") or "", date=date)


__all__ = ["EspnEventSource"]
