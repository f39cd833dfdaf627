"""Store selection from a source string."""

from __future__ import annotations

import logging

from sqlalchemy import make_url
from sqlalchemy.exc import ArgumentError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from lakegrant.exceptions import StoreError

from .database import DatabaseLakeStore
from .dialect import SUPPORTED_DIALECTS, configure_sqlite, dialect_of_url, is_memory_sqlite
from .local_disk import LocalDiskLakeStore

logger = logging.getLogger(__name__)


async def open_store(
    source: str,
    *,
    create_tables: bool = True,
) -> DatabaseLakeStore | LocalDiskLakeStore:
    """Open the store described by *source*.

    A source containing ``://`` is a SQLAlchemy async URL and yields a
    :class:`DatabaseLakeStore` owning a fresh engine; anything else is a
    local directory.  The caller must ``close()`` the returned store.

    Every call builds its own engine, so in-memory SQLite URLs are
    rejected: each session would see a different, empty database.
    Only SQLite and PostgreSQL URLs are accepted.
    """
    store: DatabaseLakeStore | LocalDiskLakeStore
    if "://" in source:
        try:
            url = make_url(source)
        except ArgumentError as e:
            raise StoreError(f"Invalid database URL {source!r}: {e}") from e

        dialect = dialect_of_url(url)
        if dialect not in SUPPORTED_DIALECTS:
            raise StoreError(
                f"Unsupported database dialect {dialect!r}; "
                f"expected one of {', '.join(SUPPORTED_DIALECTS)}"
            )
        if is_memory_sqlite(url):
            raise StoreError(
                "In-memory SQLite cannot be shared between sessions; "
                "use a database file instead"
            )

        engine = create_async_engine(url, echo=False)
        if dialect == "sqlite":
            configure_sqlite(engine)
        session_factory = async_sessionmaker(
            engine,
            class_=AsyncSession,
            expire_on_commit=False,
        )
        store = DatabaseLakeStore(session_factory, dialect, engine=engine)
        if create_tables:
            await store.create_tables()
    else:
        store = LocalDiskLakeStore(source, create_tables=create_tables)

    await store.open()
    logger.debug("Opened %s for %s", type(store).__name__, source)
    return store
