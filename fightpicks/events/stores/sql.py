"""Event store backed by the `cached_event` table.

Shares one cache across processes. Expiry is checked on read against
`expires_at`; rows with a NULL `expires_at` never expire.
"""

from __future__ import annotations

import datetime as dt
from datetime import timedelta
from typing import Any, List, Optional

from pydantic import TypeAdapter, ValidationError
from sqlalchemy import select
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.exc import SQLAlchemyError

from fightpicks.database.dbm import DBM
from fightpicks.database.schema import CachedEventRow
from fightpicks.shared.errors import StoreUnavailableError

from ..interfaces import EventStore
from ..models import Event, EventSummary

SCHEDULE_KEY = "upcoming_events"
KEY_PREFIX = "events#"

_schedule_adapter = TypeAdapter(List[EventSummary])


def _expires_at(ttl: timedelta) -> Optional[dt.datetime]:
    if ttl <= timedelta(0):
        return None
    return dt.datetime.now(dt.timezone.utc) + ttl


def _is_expired(expires_at: Optional[dt.datetime]) -> bool:
    if expires_at is None:
        return False
    if expires_at.tzinfo is None:
        expires_at = expires_at.replace(tzinfo=dt.timezone.utc)
    return expires_at <= dt.datetime.now(dt.timezone.utc)


class SqlEventStore(EventStore):
    def __init__(self, dbm: DBM) -> None:
        self.dbm = dbm

    async def get(self, key: str) -> Optional[Event]:
        payload = await self._get_payload(KEY_PREFIX + key)
        if payload is None:
            return None
        try:
            return Event.model_validate(payload)
        except ValidationError as e:
            raise StoreUnavailableError(f"corrupt cache entry {key}: {e}") from e

    async def set(self, key: str, event: Event, ttl: timedelta) -> None:
        await self._put_payload(KEY_PREFIX + key, event.model_dump(mode="json", exclude_none=True), ttl)

    async def get_schedule(self) -> Optional[List[EventSummary]]:
        payload = await self._get_payload(SCHEDULE_KEY)
        if payload is None:
            return None
        try:
            return _schedule_adapter.validate_python(payload)
        except ValidationError as e:
            raise StoreUnavailableError(f"corrupt schedule entry: {e}") from e

    async def set_schedule(self, summaries: List[EventSummary], ttl: timedelta) -> None:
        await self._put_payload(SCHEDULE_KEY, _schedule_adapter.dump_python(summaries, mode="json"), ttl)

    async def _get_payload(self, key: str) -> Any:
        stmt = select(CachedEventRow.payload, CachedEventRow.expires_at).where(CachedEventRow.key == key)
        try:
            rows = await self.dbm.read(stmt)
        except SQLAlchemyError as e:
            raise StoreUnavailableError(f"event cache read failed: {e}") from e
        if not rows or _is_expired(rows[0]["expires_at"]):
            return None
        return rows[0]["payload"]

    async def _put_payload(self, key: str, payload: Any, ttl: timedelta) -> None:
        now = dt.datetime.now(dt.timezone.utc)
        expires_at = _expires_at(ttl)
        insert = pg_insert if self.dbm.dialect == "postgresql" else sqlite_insert
        stmt = insert(CachedEventRow).values(key=key, payload=payload, expires_at=expires_at, updated_at=now)
        stmt = stmt.on_conflict_do_update(
            index_elements=[CachedEventRow.key],  # type: ignore[arg-type]
            set_={"payload": payload, "expires_at": expires_at, "updated_at": now},
        )
        try:
            await self.dbm.write(stmt)
        except SQLAlchemyError as e:
            raise StoreUnavailableError(f"event cache write failed: {e}") from e


__all__ = ["SqlEventStore"]
