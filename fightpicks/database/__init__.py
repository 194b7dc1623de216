"""
Database access for fightpicks.

Holds the picks table, the SQL event cache table, and the async engine
wrapper both of them share.
"""
from .dbm import DBM
from .repository import SqlPicksStore
from .schema import Base


async def initialize(dbm: DBM) -> None:
    """Create any missing tables."""
    async with dbm.engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


__all__ = ["initialize", "DBM", "SqlPicksStore"]
