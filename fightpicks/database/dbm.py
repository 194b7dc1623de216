"""
Database manager.

SQLite (aiosqlite) by default, PostgreSQL (asyncpg) when a postgres URL is
configured. Both the picks table and the SQL event cache go through here.
"""
from __future__ import annotations

import sqlite3
from contextlib import asynccontextmanager
from typing import Any, AsyncIterator

from sqlalchemy import event
from sqlalchemy.engine import Engine, Result
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.sql.elements import ClauseElement, TextClause

from fightpicks.config import DatabaseSettings


# Enable WAL mode for aiosqlite connections
# This is a per-connection pragma, so we need to set it on each connect.
@event.listens_for(Engine, "connect")
def set_sqlite_pragma(dbapi_connection: Any, connection_record: Any):
    # Only run this for sqlite connections
    if not isinstance(dbapi_connection, sqlite3.Connection):
        return
    cursor = dbapi_connection.cursor()
    try:
        cursor.execute("PRAGMA journal_mode=WAL")
    finally:
        cursor.close()


class DBM:
    def __init__(self, settings: DatabaseSettings | None = None, *, url: str | None = None):
        self.settings = settings or DatabaseSettings()
        self.url = url or self.settings.resolved_url()

        self.engine: AsyncEngine = create_async_engine(
            self.url,
            echo=self.settings.echo,
            future=True,
        )

        self.session_maker: async_sessionmaker[AsyncSession] = async_sessionmaker(
            bind=self.engine,
            expire_on_commit=False,
            autocommit=False,
            autoflush=False,
        )

    @property
    def dialect(self) -> str:
        return self.engine.dialect.name

    @asynccontextmanager
    async def session(self) -> AsyncIterator[AsyncSession]:
        async with self.session_maker() as session:
            yield session

    async def read(self, query: Any, params: dict | None = None) -> list[Any]:
        """Execute a read-only statement and return all rows as mappings."""
        if isinstance(query, str):
            raise TypeError("Raw SQL strings are disallowed. Use sqlalchemy.text().")
        if not isinstance(query, (TextClause, ClauseElement)):
            raise TypeError("Query must be a SQLAlchemy TextClause or ClauseElement.")

        async with self.session() as session:
            result: Result = await session.execute(query, params or {})
            return result.mappings().all()

    async def write(self, query: Any, params: dict | None = None) -> int:
        """Execute a write statement inside a transaction and return row count."""
        if isinstance(query, str):
            raise TypeError("Raw SQL strings are disallowed. Use sqlalchemy.text().")
        if not isinstance(query, (TextClause, ClauseElement)):
            raise TypeError("Query must be a SQLAlchemy TextClause or ClauseElement.")

        async with self.session() as session:
            async with session.begin():
                result: Result = await session.execute(query, params or {})
                return result.rowcount or 0

    async def dispose(self) -> None:
        await self.engine.dispose()
