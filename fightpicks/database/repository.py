from __future__ import annotations

import datetime as dt
import logging
from typing import Any, List, Optional, Sequence

from sqlalchemy import select, update
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.exc import SQLAlchemyError

from fightpicks.picks.interfaces import PicksStore
from fightpicks.picks.models import Picks, PicksFilter, PicksRowError, unique_winners
from fightpicks.shared.errors import PersistenceError

from .dbm import DBM
from .schema import PicksRow


def _upsert(dialect: str):
    return pg_insert if dialect == "postgresql" else sqlite_insert


def _as_utc(value: dt.datetime) -> dt.datetime:
    # sqlite hands back naive datetimes
    if value.tzinfo is None:
        return value.replace(tzinfo=dt.timezone.utc)
    return value


def _to_picks(row: PicksRow) -> Picks:
    return Picks(
        user_id=row.user_id,
        event_id=row.event_id,
        winners=list(row.winners or []),
        score=row.score,
        created_at=_as_utc(row.created_at),
    )


class SqlPicksStore(PicksStore):
    """PicksStore backed by the `picks` table."""

    def __init__(self, dbm: DBM, *, logger: Optional[logging.Logger] = None) -> None:
        self.dbm = dbm
        self.logger = logger or logging.getLogger(__name__)

    async def get_picks(self, user_id: str, event_id: str) -> Optional[Picks]:
        stmt = select(PicksRow).where(PicksRow.user_id == user_id, PicksRow.event_id == event_id)
        rows = await self._select(stmt)
        return rows[0] if rows else None

    async def get_all_user_picks(self, user_id: str) -> List[Picks]:
        stmt = (
            select(PicksRow)
            .where(PicksRow.user_id == user_id)
            .order_by(PicksRow.created_at.desc())
        )
        return await self._select(stmt)

    async def get_picks_by_filter(self, picks_filter: PicksFilter) -> List[Picks]:
        stmt = select(PicksRow)
        if picks_filter.event_ids:
            stmt = stmt.where(PicksRow.event_id.in_(picks_filter.event_ids))
        if picks_filter.has_score is True:
            stmt = stmt.where(PicksRow.score.is_not(None))
        elif picks_filter.has_score is False:
            stmt = stmt.where(PicksRow.score.is_(None))
        return await self._select(stmt.order_by(PicksRow.created_at.desc()))

    async def save_winners(self, user_id: str, event_id: str, winners: Sequence[str]) -> None:
        now = dt.datetime.now(dt.timezone.utc)
        names = unique_winners(winners)
        stmt = _upsert(self.dbm.dialect)(PicksRow).values(
            user_id=user_id,
            event_id=event_id,
            winners=names,
            score=None,
            created_at=now,
        )
        stmt = stmt.on_conflict_do_update(
            index_elements=[PicksRow.user_id, PicksRow.event_id],  # type: ignore[arg-type]
            set_={"winners": names, "score": None, "created_at": now},
        )
        await self._execute(stmt, f"save picks for user {user_id} event {event_id}")

    async def set_score(self, user_id: str, event_id: str, score: int) -> None:
        stmt = (
            update(PicksRow)
            .where(PicksRow.user_id == user_id, PicksRow.event_id == event_id)
            .values(score=score)
        )
        await self._execute(stmt, f"score picks for user {user_id} event {event_id}")

    async def batch_set_score(self, picks: Sequence[Picks]) -> List[PicksRowError]:
        """One transaction per row so a bad row cannot take the others down."""
        errors: List[PicksRowError] = []
        for p in picks:
            if p.score is None:
                errors.append(PicksRowError(p.user_id, p.event_id, PersistenceError("picks row has no score")))
                continue
            try:
                await self.set_score(p.user_id, p.event_id, p.score)
            except PersistenceError as e:
                errors.append(PicksRowError(p.user_id, p.event_id, e))
        return errors

    async def _select(self, stmt: Any) -> List[Picks]:
        try:
            async with self.dbm.session() as session:
                result = await session.execute(stmt)
                return [_to_picks(row) for row in result.scalars().all()]
        except SQLAlchemyError as e:
            raise PersistenceError(f"picks query failed: {e}") from e

    async def _execute(self, stmt: Any, action: str) -> None:
        try:
            await self.dbm.write(stmt)
        except SQLAlchemyError as e:
            self.logger.error({"picks_write_failed": {"action": action, "error": str(e)}})
            raise PersistenceError(f"failed to {action}: {e}") from e


__all__ = ["SqlPicksStore"]
