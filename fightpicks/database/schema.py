"""Tables for user picks and the SQL-backed event cache."""

from __future__ import annotations

import datetime as dt
from typing import Any, Optional

from sqlalchemy import JSON, DateTime, Index, Integer, MetaData, String
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column

naming_convention = {
    "ix": "ix_%(column_0_label)s",
    "uq": "uq_%(table_name)s_%(column_0_name)s",
    "ck": "ck_%(table_name)s_%(constraint_name)s",
    "pk": "pk_%(table_name)s",
}
metadata = MetaData(naming_convention=naming_convention)


def _utcnow() -> dt.datetime:
    return dt.datetime.now(dt.timezone.utc)


class Base(DeclarativeBase):
    metadata = metadata


class PicksRow(Base):
    __tablename__ = "picks"

    user_id: Mapped[str] = mapped_column(
        String(255),
        primary_key=True,
        comment="Owner of the picks",
    )
    event_id: Mapped[str] = mapped_column(
        String(64),
        primary_key=True,
        comment="True event id (never the 'latest' alias)",
    )
    winners: Mapped[list[str]] = mapped_column(
        JSON,
        nullable=False,
        default=list,
        comment="Fighter names predicted to win",
    )
    score: Mapped[Optional[int]] = mapped_column(
        Integer,
        nullable=True,
        comment="Number of correct picks, set once the event is finished",
    )
    created_at: Mapped[dt.datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=_utcnow,
        comment="Time of the last submission (UTC)",
    )

    __table_args__ = (
        Index("ix_picks_event_score", "event_id", "score"),
        Index("ix_picks_user_created", "user_id", "created_at"),
    )


class CachedEventRow(Base):
    __tablename__ = "cached_event"

    key: Mapped[str] = mapped_column(String(64), primary_key=True)
    payload: Mapped[Any] = mapped_column(JSON, nullable=False)
    expires_at: Mapped[Optional[dt.datetime]] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
        comment="NULL means the entry never expires",
    )
    updated_at: Mapped[dt.datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=_utcnow,
        onupdate=_utcnow,
    )


__all__ = ["Base", "metadata", "PicksRow", "CachedEventRow"]
