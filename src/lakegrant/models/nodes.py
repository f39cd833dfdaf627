"""LakeNode model — one row per file or directory of an emulated lake account.

Provides ``LakeNodeBase`` (non-table) and ``LakeNode`` (concrete table).
Subclass ``LakeNodeBase`` with ``table=True`` and a custom ``__tablename__``
to use a different table name.
"""

from __future__ import annotations

import uuid
from datetime import UTC, datetime

from sqlalchemy import DateTime
from sqlmodel import Field, SQLModel


class LakeNodeBase(SQLModel):
    """Base fields for a lake path. Subclass with ``table=True`` for a concrete table."""

    id: str = Field(default_factory=lambda: str(uuid.uuid4()), primary_key=True)
    path: str = Field(index=True, unique=True)
    parent_path: str = Field(default="", index=True)
    name: str = Field(default="")
    kind: str = Field(default="directory")
    created_at: datetime = Field(
        default_factory=lambda: datetime.now(UTC),
        sa_type=DateTime(timezone=True),  # type: ignore[invalid-argument-type]
    )


class LakeNode(LakeNodeBase, table=True):
    """Default node table — ``lakegrant_nodes``."""

    __tablename__ = "lakegrant_nodes"
