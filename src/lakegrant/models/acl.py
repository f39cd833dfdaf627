"""AclRecord model — access entries applied to lake paths.

A record is unique per (path, entity, identity_id, is_default); applying
the same entry again replaces the mode instead of adding a row.
"""

from __future__ import annotations

import uuid
from datetime import UTC, datetime

from sqlalchemy import DateTime, UniqueConstraint
from sqlmodel import Field, SQLModel


class AclRecordBase(SQLModel):
    """Base fields for an applied entry. Subclass with ``table=True`` for a concrete table."""

    id: str = Field(default_factory=lambda: str(uuid.uuid4()), primary_key=True)
    path: str = Field(index=True)
    entity: str = Field(default="user")
    identity_id: str = Field(index=True)
    mode: str = Field(default="rwx")
    is_default: bool = Field(default=False)
    updated_at: datetime = Field(
        default_factory=lambda: datetime.now(UTC),
        sa_type=DateTime(timezone=True),  # type: ignore[invalid-argument-type]
    )


class AclRecord(AclRecordBase, table=True):
    """Default entry table — ``lakegrant_acl_records``."""

    __tablename__ = "lakegrant_acl_records"
    __table_args__ = (
        UniqueConstraint("path", "entity", "identity_id", "is_default"),
    )
