"""ACL specifier formatting/parsing and the ``apply_entry`` wrapper."""

from __future__ import annotations

import logging
import re
from typing import TYPE_CHECKING

from .exceptions import AclSpecError
from .types import AccessEntry, AclPermission, AclSpecEntry, IdentityKind

if TYPE_CHECKING:
    from .protocol import AclSetter
    from .types import Identity

logger = logging.getLogger(__name__)

EXECUTE_MODE = "--x"
FULL_MODE = "rwx"
DEFAULT_PREFIX = "default:"

_CLAUSE_RE = re.compile(
    r"^(?P<default>default:)?"
    r"(?P<entity>user|group):"
    r"(?P<id>[0-9a-fA-F]{8}-[0-9a-fA-F]{4}-[0-9a-fA-F]{4}-[0-9a-fA-F]{4}-[0-9a-fA-F]{12}):"
    r"(?P<mode>[r-][w-][x-])$"
)


def mode_for(permission: AclPermission | str) -> str:
    """Map a permission to its three-character mode.  Only EXECUTE is restricted."""
    if permission == AclPermission.EXECUTE:
        return EXECUTE_MODE
    return FULL_MODE


def format_acl_spec(
    identity: Identity,
    permission: AclPermission | str = AclPermission.ALL,
    is_default: bool = False,
) -> str:
    """Build the ACL specifier for *identity*.

    With *is_default* the explicit entry is followed by the matching
    inheritable one, so a single call covers both on a directory::

        user:<uuid>:rwx,default:user:<uuid>:rwx
    """
    entry = f"{identity.kind.value}:{identity.id}:{mode_for(permission)}"
    if is_default:
        return f"{entry},{DEFAULT_PREFIX}{entry}"
    return entry


def parse_acl_spec(spec: str) -> list[AclSpecEntry]:
    """Parse an ACL specifier into its clauses.  Raises ``AclSpecError``."""
    if not spec or not spec.strip():
        raise AclSpecError("Empty ACL specifier")

    entries: list[AclSpecEntry] = []
    for clause in spec.split(","):
        match = _CLAUSE_RE.match(clause.strip())
        if match is None:
            raise AclSpecError(f"Malformed ACL entry: {clause!r}")
        entries.append(
            AclSpecEntry(
                entity=IdentityKind(match["entity"]).value,
                identity_id=match["id"].lower(),
                mode=match["mode"],
                is_default=match["default"] is not None,
            )
        )
    return entries


async def apply_entry(
    setter: AclSetter,
    path: str,
    identity: Identity,
    permission: AclPermission | str = AclPermission.ALL,
    is_default: bool = False,
) -> AccessEntry:
    """Apply one access entry to *path* through *setter*.

    Awaits the setter directly.  Callers that want the fire-and-forget
    behaviour submit this coroutine to a ``TaskRunner`` and keep the
    returned handle.
    """
    entry = AccessEntry(
        identity=identity,
        permission=AclPermission(permission),
        is_default=is_default,
    )
    spec = entry.to_spec()
    logger.debug("Setting %s on %s", spec, path)
    await setter.set_entry(path, spec)
    return entry
