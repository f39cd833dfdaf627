"""AclLedger — records applied access entries.

Stateless service that receives the record model and dialect at
construction and a session at call time.
"""

from __future__ import annotations

import uuid
from datetime import UTC, datetime
from typing import TYPE_CHECKING

from sqlmodel import select

from lakegrant.acl import parse_acl_spec
from lakegrant.utils import normalize_path

from .dialect import upsert_row

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession

    from lakegrant.models.acl import AclRecordBase
    from lakegrant.types import AclSpecEntry

_CONFLICT_KEYS = ["path", "entity", "identity_id", "is_default"]


class AclLedger:
    """Upserts parsed ACL entries, one row per (path, entity, identity, scope).

    Re-recording an identical entry leaves a single row; a different
    mode replaces the stored one.
    """

    def __init__(self, record_model: type[AclRecordBase], dialect: str = "sqlite") -> None:
        self._record_model = record_model
        self.dialect = dialect

    async def record(
        self,
        session: AsyncSession,
        path: str,
        acl_spec: str,
    ) -> list[AclSpecEntry]:
        """Record every entry of *acl_spec* on *path*. Does not commit.

        Raises ``AclSpecError`` for a malformed specifier before touching
        the session.
        """
        entries = parse_acl_spec(acl_spec)
        path = normalize_path(path)
        now = datetime.now(UTC)

        for entry in entries:
            await upsert_row(
                session,
                self.dialect,
                self._record_model,
                {
                    "id": str(uuid.uuid4()),
                    "path": path,
                    "entity": entry.entity,
                    "identity_id": entry.identity_id,
                    "mode": entry.mode,
                    "is_default": entry.is_default,
                    "updated_at": now,
                },
                conflict_keys=_CONFLICT_KEYS,
                update_keys=["mode", "updated_at"],
            )
        return entries

    async def list_entries(
        self,
        session: AsyncSession,
        path: str | None = None,
        identity_id: str | None = None,
    ) -> list[AclRecordBase]:
        """List recorded entries, optionally filtered by path and identity."""
        model = self._record_model
        stmt = select(model)
        if path is not None:
            stmt = stmt.where(model.path == normalize_path(path))
        if identity_id is not None:
            stmt = stmt.where(model.identity_id == str(identity_id).lower())
        stmt = stmt.order_by(model.path, model.is_default)  # type: ignore[arg-type]
        result = await session.execute(stmt)
        return list(result.scalars().all())
