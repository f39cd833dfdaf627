"""Collaborator protocols — runtime-checkable interfaces.

The propagation core only needs two capabilities from a storage
provider: listing/testing paths (``DirectoryProvider``) and applying an
ACL specifier to a path (``AclSetter``).  ``LakeStore`` bundles both
with a lifecycle so a ``StoreContext`` can open and release it.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from .types import DirectoryEntry


@runtime_checkable
class DirectoryProvider(Protocol):
    """Read-only view of a hierarchical filesystem."""

    async def exists(self, path: str) -> bool: ...

    async def list_children(self, path: str) -> list[DirectoryEntry]:
        """Immediate children of *path*, in no particular order."""
        ...


@runtime_checkable
class AclSetter(Protocol):
    """Applies access-control entries.

    ``acl_spec`` follows ``["default:"]<kind>:<uuid>:<mode>[,...]``.
    """

    async def set_entry(self, path: str, acl_spec: str) -> None: ...


@runtime_checkable
class LakeStore(DirectoryProvider, AclSetter, Protocol):
    """A provider that is also a setter, with an explicit lifecycle."""

    async def open(self) -> None:
        """Acquire resources.  No-op if not needed."""
        ...

    async def close(self) -> None:
        """Release resources."""
        ...
