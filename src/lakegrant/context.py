"""StoreContext — passed-by-value reference to a lake account."""

from __future__ import annotations

import os
from contextlib import asynccontextmanager
from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import AsyncIterator

    from .stores import DatabaseLakeStore, LocalDiskLakeStore

SOURCE_ENV = "LAKEGRANT_SOURCE"


def default_source(account: str) -> str:
    """``$LAKEGRANT_SOURCE``, or a SQLite database named after *account*."""
    return os.environ.get(SOURCE_ENV) or f"sqlite+aiosqlite:///{account}.db"


@dataclass(frozen=True)
class StoreContext:
    """Everything a task needs to open its own session on an account.

    Immutable and cheap to copy.  Background tasks receive the context,
    never an open store, and each acquires and releases its own
    session through :meth:`session`.
    """

    account: str
    source: str

    @classmethod
    def for_account(cls, account: str, source: str | None = None) -> StoreContext:
        return cls(account=account, source=source or default_source(account))

    @asynccontextmanager
    async def session(
        self, *, create_tables: bool = False
    ) -> AsyncIterator[DatabaseLakeStore | LocalDiskLakeStore]:
        """Open a store for this account; it is closed on exit, even on error."""
        from .stores import open_store

        store = await open_store(self.source, create_tables=create_tables)
        try:
            yield store
        finally:
            await store.close()
