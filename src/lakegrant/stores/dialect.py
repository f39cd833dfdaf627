"""Dialect-aware SQL helpers — upsert and SQLite connection setup."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from sqlalchemy import event

if TYPE_CHECKING:
    from sqlalchemy import URL, Engine
    from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession

logger = logging.getLogger(__name__)

SUPPORTED_DIALECTS = ("sqlite", "postgresql")


def dialect_of_url(url: URL) -> str:
    """Normalized dialect name of a URL, without loading its driver."""
    name = url.get_backend_name()
    if name in ("postgresql", "postgres"):
        return "postgresql"
    return name


def is_memory_sqlite(url: URL) -> bool:
    """True for SQLite URLs whose database lives only inside one connection pool."""
    if url.get_backend_name() != "sqlite":
        return False
    database = url.database or ""
    return not database or ":memory:" in database or url.query.get("mode") == "memory"


def get_dialect(engine: Engine | AsyncEngine) -> str:
    """Return 'sqlite', 'postgresql', or the raw dialect name."""
    # AsyncEngine wraps a sync engine
    sync_engine = getattr(engine, "sync_engine", engine)
    name = sync_engine.dialect.name
    if name in ("postgresql", "postgres"):
        return "postgresql"
    return name


def configure_sqlite(engine: AsyncEngine) -> None:
    """Enable WAL and a busy timeout on every new SQLite connection.

    Background tasks open their own engines on the same database file,
    so writers must wait for each other instead of failing on a lock.
    """

    @event.listens_for(engine.sync_engine, "connect")
    def _set_sqlite_pragma(dbapi_connection: object, connection_record: object) -> None:
        cursor = dbapi_connection.cursor()  # type: ignore[union-attr]
        cursor.execute("PRAGMA journal_mode=WAL")
        result = cursor.fetchone()
        if result[0].lower() != "wal":
            logger.warning("WAL mode not active, got: %s", result[0])
        cursor.execute("PRAGMA busy_timeout=5000")
        cursor.close()


async def upsert_row(
    session: AsyncSession,
    dialect: str,
    model: type,
    values: dict[str, Any],
    conflict_keys: list[str],
    update_keys: list[str] | None = None,
) -> int:
    """Dialect-aware upsert into *model*'s table. Returns rowcount.

    SQLite and PostgreSQL only: INSERT ... ON CONFLICT DO UPDATE.
    """
    if dialect == "postgresql":
        from sqlalchemy.dialects import postgresql as dialect_module
    elif dialect == "sqlite":
        from sqlalchemy.dialects import sqlite as dialect_module
    else:
        raise NotImplementedError(f"Upsert not supported for dialect: {dialect}")

    stmt = dialect_module.insert(model).values(**values)

    # Columns to update on conflict
    if update_keys is not None:
        update_cols = {k: v for k, v in values.items() if k in update_keys}
    else:
        update_cols = {k: v for k, v in values.items() if k not in conflict_keys}

    if update_cols:
        stmt = stmt.on_conflict_do_update(index_elements=conflict_keys, set_=update_cols)
    else:
        stmt = stmt.on_conflict_do_nothing(index_elements=conflict_keys)

    result = await session.execute(stmt)
    return result.rowcount  # type: ignore[return-value]
