"""LocalDiskLakeStore — directory tree from local disk, ACLs in a SQLite ledger."""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path
from typing import TYPE_CHECKING

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from lakegrant.exceptions import StoreError
from lakegrant.types import DirectoryEntry, EntryKind
from lakegrant.utils import normalize_path

from .dialect import configure_sqlite
from .ledger import AclLedger

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncEngine

    from lakegrant.models.acl import AclRecordBase

logger = logging.getLogger(__name__)

DATA_DIR_NAME = ".lakegrant"
LEDGER_FILENAME = "acl.db"


def _kind_of(item: Path) -> EntryKind:
    if item.is_symlink():
        return EntryKind.SYMLINK
    if item.is_dir():
        return EntryKind.DIRECTORY
    if item.is_file():
        return EntryKind.FILE
    return EntryKind.OTHER


class LocalDiskLakeStore:
    """Lake account mirrored by a local directory.

    The tree is read straight from disk.  Symlinks are reported as
    ``SYMLINK`` and never followed; sockets, fifos and devices are
    reported as ``OTHER``.  Applied entries are recorded in a SQLite
    ledger under *data_dir* (default ``<root>/.lakegrant``), which is
    hidden from listings.

    Implements ``DirectoryProvider``, ``AclSetter`` and ``LakeStore``.
    """

    def __init__(
        self,
        root: Path | str,
        data_dir: Path | str | None = None,
        *,
        create_tables: bool = True,
        record_model: type[AclRecordBase] | None = None,
    ) -> None:
        from lakegrant.models.acl import AclRecord

        self.root = Path(root).resolve()
        if not self.root.exists():
            raise StoreError(f"Root directory does not exist: {self.root}")
        if not self.root.is_dir():
            raise StoreError(f"Root path is not a directory: {self.root}")

        self.data_dir = Path(data_dir).resolve() if data_dir else self.root / DATA_DIR_NAME
        self._create_tables = create_tables
        self._record_model: type[AclRecordBase] = record_model or AclRecord  # type: ignore[assignment]
        self.ledger = AclLedger(self._record_model, "sqlite")

        self._engine: AsyncEngine | None = None
        self._session_factory: async_sessionmaker[AsyncSession] | None = None
        self._init_lock = asyncio.Lock()

    # ------------------------------------------------------------------
    # Ledger database
    # ------------------------------------------------------------------

    async def _ensure_db(self) -> async_sessionmaker[AsyncSession]:
        """Initialize the ledger database if needed."""
        if self._session_factory is not None:
            return self._session_factory
        async with self._init_lock:
            if self._session_factory is not None:
                return self._session_factory

            await asyncio.to_thread(self.data_dir.mkdir, parents=True, exist_ok=True)
            db_path = self.data_dir / LEDGER_FILENAME
            self._engine = create_async_engine(f"sqlite+aiosqlite:///{db_path}", echo=False)
            configure_sqlite(self._engine)

            if self._create_tables:
                record_table = self._record_model.__table__  # type: ignore[unresolved-attribute]
                async with self._engine.begin() as conn:
                    await conn.run_sync(lambda c: record_table.create(c, checkfirst=True))

            self._session_factory = async_sessionmaker(
                self._engine,
                class_=AsyncSession,
                expire_on_commit=False,
            )
            return self._session_factory

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    async def open(self) -> None:
        """Initialize the ledger database."""
        await self._ensure_db()

    async def close(self) -> None:
        """Close the ledger engine and release resources."""
        if self._engine is not None:
            await self._engine.dispose()
            self._engine = None
            self._session_factory = None

    # ------------------------------------------------------------------
    # Path resolution
    # ------------------------------------------------------------------

    def _resolve_path(self, lake_path: str) -> Path:
        """Map a lake path onto disk.  ``..`` is collapsed by normalization."""
        rel = normalize_path(lake_path).lstrip("/")
        return self.root / rel if rel else self.root

    def _is_hidden(self, item: Path) -> bool:
        return item == self.data_dir

    # ------------------------------------------------------------------
    # DirectoryProvider
    # ------------------------------------------------------------------

    async def exists(self, path: str) -> bool:
        target = self._resolve_path(path)
        if self._is_hidden(target):
            return False
        return await asyncio.to_thread(target.exists)

    async def list_children(self, path: str) -> list[DirectoryEntry]:
        target = self._resolve_path(path)

        def _scan_dir() -> list[DirectoryEntry]:
            return [
                DirectoryEntry(name=item.name, kind=_kind_of(item))
                for item in target.iterdir()
                if not self._is_hidden(item)
            ]

        # FileNotFoundError / NotADirectoryError propagate as provider errors
        return await asyncio.to_thread(_scan_dir)

    # ------------------------------------------------------------------
    # AclSetter
    # ------------------------------------------------------------------

    async def set_entry(self, path: str, acl_spec: str) -> None:
        path = normalize_path(path)
        target = self._resolve_path(path)
        if self._is_hidden(target) or not await asyncio.to_thread(target.exists):
            raise StoreError(f"Path not found: {path}")

        factory = await self._ensure_db()
        async with factory() as session:
            await self.ledger.record(session, path, acl_spec)
            await session.commit()
        logger.debug("Recorded %s on %s", acl_spec, path)

    async def list_entries(
        self,
        path: str | None = None,
        identity_id: str | None = None,
    ) -> list[AclRecordBase]:
        """Entries recorded so far, ordered by path."""
        factory = await self._ensure_db()
        async with factory() as session:
            return await self.ledger.list_entries(session, path, identity_id)
