"""Shared fixtures for lakegrant tests."""

from __future__ import annotations

import uuid
from typing import TYPE_CHECKING

import pytest

from lakegrant.stores import open_store
from lakegrant.types import DirectoryEntry, EntryKind, Identity, IdentityKind
from lakegrant.utils import ancestors, normalize_path, split_path

if TYPE_CHECKING:
    from collections.abc import AsyncIterator
    from pathlib import Path

    from lakegrant.stores import DatabaseLakeStore

USER_ID = uuid.UUID("3f2b8c1e-9a47-4d0e-b5a1-7c2e6f4d9a10")
GROUP_ID = uuid.UUID("a1b2c3d4-e5f6-4789-8abc-def012345678")


class FakeLake:
    """In-memory provider/setter that records every call in order.

    ``events`` holds ``("list", path)`` and ``("set", path, spec)``
    tuples so tests can assert on ordering.
    """

    def __init__(self) -> None:
        self.children: dict[str, list[DirectoryEntry]] = {"/": []}
        self.files: set[str] = set()
        self.events: list[tuple[str, ...]] = []

    def add(self, path: str, kind: EntryKind | str = EntryKind.DIRECTORY) -> FakeLake:
        path = normalize_path(path)
        for ancestor in ancestors(path)[1:-1]:
            if ancestor not in self.children:
                self.add(ancestor)
        parent, name = split_path(path)
        self.children[parent].append(DirectoryEntry(name=name, kind=kind))
        if kind == EntryKind.DIRECTORY:
            self.children[path] = []
        else:
            self.files.add(path)
        return self

    @property
    def set_calls(self) -> list[tuple[str, str]]:
        return [(e[1], e[2]) for e in self.events if e[0] == "set"]

    async def exists(self, path: str) -> bool:
        path = normalize_path(path)
        return path in self.children or path in self.files

    async def list_children(self, path: str) -> list[DirectoryEntry]:
        self.events.append(("list", path))
        if path not in self.children:
            raise FileNotFoundError(path)
        return list(self.children[path])

    async def set_entry(self, path: str, acl_spec: str) -> None:
        self.events.append(("set", path, acl_spec))


@pytest.fixture
def user() -> Identity:
    return Identity(id=USER_ID, kind=IdentityKind.USER)


@pytest.fixture
def group() -> Identity:
    return Identity(id=GROUP_ID, kind=IdentityKind.GROUP)


@pytest.fixture
def fake_lake() -> FakeLake:
    return FakeLake()


@pytest.fixture
def db_source(tmp_path: Path) -> str:
    """SQLAlchemy URL of a SQLite file in the test's temp dir."""
    return f"sqlite+aiosqlite:///{tmp_path / 'lake.db'}"


@pytest.fixture
async def db_store(db_source: str) -> AsyncIterator[DatabaseLakeStore]:
    """DatabaseLakeStore on a fresh SQLite file, tables created."""
    store = await open_store(db_source)
    yield store  # type: ignore[misc]
    await store.close()
