"""DatabaseLakeStore — a lake account emulated in SQL tables."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from sqlmodel import select

from lakegrant.exceptions import StoreError
from lakegrant.types import DirectoryEntry, EntryKind
from lakegrant.utils import ancestors, normalize_path, split_path

from .ledger import AclLedger

if TYPE_CHECKING:
    from collections.abc import Callable

    from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession

    from lakegrant.models.acl import AclRecordBase
    from lakegrant.models.nodes import LakeNodeBase

logger = logging.getLogger(__name__)


class DatabaseLakeStore:
    """Lake account whose tree and ACLs live in a database.

    Each operation opens its own session from *session_factory* and
    commits before returning, so the store can be driven from several
    coroutines at once.  The root ``/`` always exists.

    Implements ``DirectoryProvider``, ``AclSetter`` and ``LakeStore``.
    """

    def __init__(
        self,
        session_factory: Callable[..., AsyncSession],
        dialect: str = "sqlite",
        *,
        node_model: type[LakeNodeBase] | None = None,
        record_model: type[AclRecordBase] | None = None,
        engine: AsyncEngine | None = None,
    ) -> None:
        from lakegrant.models.acl import AclRecord
        from lakegrant.models.nodes import LakeNode

        self._session_factory = session_factory
        self._node_model: type[LakeNodeBase] = node_model or LakeNode  # type: ignore[assignment]
        self._record_model: type[AclRecordBase] = record_model or AclRecord  # type: ignore[assignment]
        self._engine = engine
        self.dialect = dialect
        self.ledger = AclLedger(self._record_model, dialect)

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    async def create_tables(self) -> None:
        """Create the node and record tables if missing.  Needs an engine."""
        if self._engine is None:
            raise StoreError("DatabaseLakeStore has no engine to create tables on")
        node_table = self._node_model.__table__  # type: ignore[unresolved-attribute]
        record_table = self._record_model.__table__  # type: ignore[unresolved-attribute]
        async with self._engine.begin() as conn:
            await conn.run_sync(lambda c: node_table.create(c, checkfirst=True))
            await conn.run_sync(lambda c: record_table.create(c, checkfirst=True))

    async def open(self) -> None:
        """No-op — sessions are opened per operation."""

    async def close(self) -> None:
        """Dispose the engine if this store owns one."""
        if self._engine is not None:
            await self._engine.dispose()
            self._engine = None

    # ------------------------------------------------------------------
    # DirectoryProvider
    # ------------------------------------------------------------------

    async def _get_node(self, session: AsyncSession, path: str) -> LakeNodeBase | None:
        model = self._node_model
        result = await session.execute(select(model).where(model.path == path))
        return result.scalar_one_or_none()

    async def exists(self, path: str) -> bool:
        path = normalize_path(path)
        if path == "/":
            return True
        async with self._session_factory() as session:
            return await self._get_node(session, path) is not None

    async def list_children(self, path: str) -> list[DirectoryEntry]:
        path = normalize_path(path)
        model = self._node_model
        async with self._session_factory() as session:
            if path != "/":
                node = await self._get_node(session, path)
                if node is None:
                    raise StoreError(f"Path not found: {path}")
                if node.kind != EntryKind.DIRECTORY.value:
                    raise StoreError(f"Not a directory: {path}")
            result = await session.execute(select(model).where(model.parent_path == path))
            return [DirectoryEntry(name=n.name, kind=n.kind) for n in result.scalars().all()]

    # ------------------------------------------------------------------
    # AclSetter
    # ------------------------------------------------------------------

    async def set_entry(self, path: str, acl_spec: str) -> None:
        path = normalize_path(path)
        async with self._session_factory() as session:
            if path != "/" and await self._get_node(session, path) is None:
                raise StoreError(f"Path not found: {path}")
            await self.ledger.record(session, path, acl_spec)
            await session.commit()
        logger.debug("Recorded %s on %s", acl_spec, path)

    async def list_entries(
        self,
        path: str | None = None,
        identity_id: str | None = None,
    ) -> list[AclRecordBase]:
        """Entries recorded so far, ordered by path."""
        async with self._session_factory() as session:
            return await self.ledger.list_entries(session, path, identity_id)

    # ------------------------------------------------------------------
    # Tree building
    # ------------------------------------------------------------------

    async def add_node(self, path: str, kind: EntryKind | str) -> None:
        """Add *path* with *kind*, creating missing parents as directories.

        Re-adding an existing path with the same kind is a no-op.
        """
        path = normalize_path(path)
        if path == "/":
            raise StoreError("Cannot add the root path")
        kind_value = kind.value if isinstance(kind, EntryKind) else str(kind)

        async with self._session_factory() as session:
            for ancestor in ancestors(path)[1:]:
                wanted = kind_value if ancestor == path else EntryKind.DIRECTORY.value
                node = await self._get_node(session, ancestor)
                if node is not None:
                    if node.kind != wanted:
                        raise StoreError(f"{ancestor} already exists as {node.kind}")
                    continue
                parent, name = split_path(ancestor)
                session.add(
                    self._node_model(path=ancestor, parent_path=parent, name=name, kind=wanted)
                )
                await session.flush()
            await session.commit()

    async def add_directory(self, path: str) -> None:
        await self.add_node(path, EntryKind.DIRECTORY)

    async def add_file(self, path: str) -> None:
        await self.add_node(path, EntryKind.FILE)
