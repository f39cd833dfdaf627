"""Tests for the bundled stores — DatabaseLakeStore, LocalDiskLakeStore, open_store."""

from __future__ import annotations

import os
import socket
from typing import TYPE_CHECKING

import pytest

from lakegrant.acl import format_acl_spec
from lakegrant.exceptions import AclSpecError, StoreError
from lakegrant.protocol import AclSetter, DirectoryProvider, LakeStore
from lakegrant.stores import DatabaseLakeStore, LocalDiskLakeStore, open_store
from lakegrant.types import AclPermission, DirectoryEntry, EntryKind

if TYPE_CHECKING:
    from pathlib import Path

    from lakegrant.types import Identity


# ---------------------------------------------------------------------------
# DatabaseLakeStore
# ---------------------------------------------------------------------------


class TestDatabaseLakeStoreTree:
    async def test_satisfies_protocols(self, db_store: DatabaseLakeStore):
        assert isinstance(db_store, DirectoryProvider)
        assert isinstance(db_store, AclSetter)
        assert isinstance(db_store, LakeStore)

    async def test_root_always_exists(self, db_store: DatabaseLakeStore):
        assert await db_store.exists("/")
        assert await db_store.list_children("/") == []

    async def test_add_file_creates_parents(self, db_store: DatabaseLakeStore):
        await db_store.add_file("/system/jobservice/log.txt")

        assert await db_store.exists("/system")
        assert await db_store.exists("/system/jobservice")
        assert await db_store.list_children("/system") == [
            DirectoryEntry(name="jobservice", kind="directory")
        ]
        assert await db_store.list_children("/system/jobservice") == [
            DirectoryEntry(name="log.txt", kind="file")
        ]

    async def test_readding_same_kind_is_noop(self, db_store: DatabaseLakeStore):
        await db_store.add_directory("/system")
        await db_store.add_directory("/system")
        assert len(await db_store.list_children("/")) == 1

    async def test_conflicting_kind_raises(self, db_store: DatabaseLakeStore):
        await db_store.add_file("/system/thing")
        with pytest.raises(StoreError, match="already exists"):
            await db_store.add_directory("/system/thing")
        with pytest.raises(StoreError):
            await db_store.add_file("/system/thing/child")

    async def test_cannot_add_root(self, db_store: DatabaseLakeStore):
        with pytest.raises(StoreError):
            await db_store.add_directory("/")

    async def test_custom_kind_listed_verbatim(self, db_store: DatabaseLakeStore):
        await db_store.add_node("/system/odd", "socket")
        assert await db_store.list_children("/system") == [DirectoryEntry("odd", "socket")]

    async def test_missing_path(self, db_store: DatabaseLakeStore):
        assert not await db_store.exists("/nope")
        with pytest.raises(StoreError, match="Path not found"):
            await db_store.list_children("/nope")

    async def test_list_file_raises(self, db_store: DatabaseLakeStore):
        await db_store.add_file("/a.txt")
        with pytest.raises(StoreError, match="Not a directory"):
            await db_store.list_children("/a.txt")


class TestDatabaseLakeStoreEntries:
    async def test_default_spec_records_two_entries(
        self, db_store: DatabaseLakeStore, user: Identity
    ):
        await db_store.add_directory("/system")
        await db_store.set_entry("/system", format_acl_spec(user, AclPermission.ALL, True))

        records = await db_store.list_entries("/system")
        assert [(r.entity, r.identity_id, r.mode, r.is_default) for r in records] == [
            ("user", str(user.id), "rwx", False),
            ("user", str(user.id), "rwx", True),
        ]

    async def test_set_entry_is_idempotent(self, db_store: DatabaseLakeStore, user: Identity):
        spec = format_acl_spec(user, AclPermission.ALL, True)
        await db_store.set_entry("/", spec)
        await db_store.set_entry("/", spec)
        assert len(await db_store.list_entries("/")) == 2

    async def test_mode_is_replaced(self, db_store: DatabaseLakeStore, group: Identity):
        await db_store.set_entry("/", format_acl_spec(group, AclPermission.EXECUTE))
        await db_store.set_entry("/", format_acl_spec(group, AclPermission.ALL))

        records = await db_store.list_entries("/")
        assert [r.mode for r in records] == ["rwx"]

    async def test_identities_kept_apart(
        self, db_store: DatabaseLakeStore, user: Identity, group: Identity
    ):
        await db_store.set_entry("/", format_acl_spec(user))
        await db_store.set_entry("/", format_acl_spec(group, AclPermission.EXECUTE))

        assert len(await db_store.list_entries("/")) == 2
        assert [r.mode for r in await db_store.list_entries(identity_id=str(group.id))] == ["--x"]

    async def test_missing_path_raises(self, db_store: DatabaseLakeStore, user: Identity):
        with pytest.raises(StoreError, match="Path not found"):
            await db_store.set_entry("/nope", format_acl_spec(user))

    async def test_malformed_spec_raises(self, db_store: DatabaseLakeStore):
        with pytest.raises(AclSpecError):
            await db_store.set_entry("/", "user:bob:rwx")
        assert await db_store.list_entries() == []


# ---------------------------------------------------------------------------
# LocalDiskLakeStore
# ---------------------------------------------------------------------------


@pytest.fixture
def disk_root(tmp_path: Path) -> Path:
    root = tmp_path / "lake"
    (root / "system" / "jobservice").mkdir(parents=True)
    (root / "system" / "readme.txt").write_text("hi")
    return root


@pytest.fixture
async def disk_store(disk_root: Path):
    store = LocalDiskLakeStore(disk_root)
    await store.open()
    yield store
    await store.close()


class TestLocalDiskLakeStore:
    async def test_satisfies_protocol(self, disk_store: LocalDiskLakeStore):
        assert isinstance(disk_store, LakeStore)

    async def test_exists(self, disk_store: LocalDiskLakeStore):
        assert await disk_store.exists("/")
        assert await disk_store.exists("/system/readme.txt")
        assert not await disk_store.exists("/system/nope")

    async def test_list_children_kinds(self, disk_store: LocalDiskLakeStore):
        children = sorted(await disk_store.list_children("/system"), key=lambda e: e.name)
        assert children == [
            DirectoryEntry("jobservice", EntryKind.DIRECTORY),
            DirectoryEntry("readme.txt", EntryKind.FILE),
        ]

    async def test_symlink_reported_not_followed(
        self, disk_store: LocalDiskLakeStore, disk_root: Path
    ):
        os.symlink(disk_root / "system" / "jobservice", disk_root / "system" / "alias")
        kinds = {e.name: e.kind for e in await disk_store.list_children("/system")}
        assert kinds["alias"] is EntryKind.SYMLINK

    @pytest.mark.skipif(not hasattr(socket, "AF_UNIX"), reason="needs unix sockets")
    async def test_socket_reported_as_other(self, tmp_path: Path):
        # Short path: unix socket names are length-limited
        root = tmp_path / "s"
        root.mkdir()
        sock = socket.socket(socket.AF_UNIX)
        try:
            sock.bind(str(root / "x"))
        except OSError:
            sock.close()
            pytest.skip("cannot bind a unix socket here")
        try:
            store = LocalDiskLakeStore(root)
            assert await store.list_children("/") == [DirectoryEntry("x", EntryKind.OTHER)]
        finally:
            sock.close()

    async def test_data_dir_hidden(self, disk_store: LocalDiskLakeStore, user: Identity):
        await disk_store.set_entry("/", format_acl_spec(user))
        assert disk_store.data_dir.exists()
        names = [e.name for e in await disk_store.list_children("/")]
        assert names == ["system"]
        assert not await disk_store.exists("/.lakegrant")

    async def test_set_entry_recorded(self, disk_store: LocalDiskLakeStore, group: Identity):
        await disk_store.set_entry("/system", format_acl_spec(group, AclPermission.ALL, True))
        await disk_store.set_entry("/system", format_acl_spec(group, AclPermission.ALL, True))

        records = await disk_store.list_entries("/system")
        assert [(r.entity, r.is_default) for r in records] == [("group", False), ("group", True)]

    async def test_set_entry_missing_path(self, disk_store: LocalDiskLakeStore, user: Identity):
        with pytest.raises(StoreError, match="Path not found"):
            await disk_store.set_entry("/system/nope", format_acl_spec(user))

    async def test_list_missing_raises(self, disk_store: LocalDiskLakeStore):
        with pytest.raises(FileNotFoundError):
            await disk_store.list_children("/nope")

    def test_missing_root(self, tmp_path: Path):
        with pytest.raises(StoreError, match="does not exist"):
            LocalDiskLakeStore(tmp_path / "absent")

    def test_root_is_file(self, tmp_path: Path):
        (tmp_path / "f").write_text("")
        with pytest.raises(StoreError, match="not a directory"):
            LocalDiskLakeStore(tmp_path / "f")


# ---------------------------------------------------------------------------
# open_store
# ---------------------------------------------------------------------------


class TestOpenStore:
    async def test_url_gives_database_store(self, db_source: str):
        store = await open_store(db_source)
        try:
            assert isinstance(store, DatabaseLakeStore)
            assert store.dialect == "sqlite"
            assert await store.list_entries() == []
        finally:
            await store.close()

    async def test_directory_gives_disk_store(self, disk_root: Path):
        store = await open_store(str(disk_root))
        try:
            assert isinstance(store, LocalDiskLakeStore)
            assert await store.exists("/system")
        finally:
            await store.close()

    async def test_missing_directory_raises(self, tmp_path: Path):
        with pytest.raises(StoreError):
            await open_store(str(tmp_path / "absent"))

    @pytest.mark.parametrize(
        "source",
        [
            pytest.param("sqlite+aiosqlite://", id="no-database"),
            pytest.param("sqlite+aiosqlite:///:memory:", id="memory"),
            pytest.param("sqlite+aiosqlite:///file:lake?mode=memory&uri=true", id="uri-memory"),
        ],
    )
    async def test_in_memory_sqlite_rejected(self, source: str):
        with pytest.raises(StoreError, match="In-memory SQLite"):
            await open_store(source)

    async def test_unsupported_dialect_rejected(self):
        # Rejected from the URL alone, before any driver is imported
        with pytest.raises(StoreError, match="Unsupported database dialect 'mysql'"):
            await open_store("mysql+aiomysql://lake@localhost/lake")

    async def test_malformed_url_rejected(self):
        with pytest.raises(StoreError, match="Invalid database URL"):
            await open_store("not a url://")
