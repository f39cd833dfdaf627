"""Value types: identities, directory entries, ACL entries and results."""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .tasks import TaskHandle


class EntryKind(str, Enum):
    """Kind of a listed child. Only FILE and DIRECTORY are propagatable."""

    FILE = "file"
    DIRECTORY = "directory"
    SYMLINK = "symlink"
    OTHER = "other"


class IdentityKind(str, Enum):
    """Entity kind of an ACL identity."""

    USER = "user"
    GROUP = "group"

    @classmethod
    def parse(cls, value: str | IdentityKind) -> IdentityKind:
        """Parse ``"User"``, ``"group"`` etc. case-insensitively."""
        if isinstance(value, IdentityKind):
            return value
        try:
            return cls(value.strip().lower())
        except ValueError:
            raise ValueError(
                f"Invalid identity kind: {value!r}. Must be 'User' or 'Group'."
            ) from None


class AclPermission(str, Enum):
    """Permission requested for an entry."""

    EXECUTE = "execute"
    ALL = "all"


class TaskStatus(str, Enum):
    """Lifecycle state of a background task."""

    RUNNING = "running"
    COMPLETED = "completed"
    FAILED = "failed"


@dataclass(frozen=True, slots=True)
class DirectoryEntry:
    """A single child returned by a directory listing."""

    name: str
    kind: EntryKind | str


@dataclass(frozen=True, slots=True)
class Identity:
    """User or security-group identity receiving permissions."""

    id: uuid.UUID
    kind: IdentityKind

    @classmethod
    def parse(cls, identity_id: str | uuid.UUID, kind: str | IdentityKind) -> Identity:
        """Build an identity from raw CLI-style values. Raises ``ValueError``."""
        if not isinstance(identity_id, uuid.UUID):
            try:
                identity_id = uuid.UUID(str(identity_id))
            except ValueError:
                raise ValueError(f"Invalid identity id: {identity_id!r}") from None
        return cls(id=identity_id, kind=IdentityKind.parse(kind))

    def __str__(self) -> str:
        return f"{self.kind.value}:{self.id}"


@dataclass(frozen=True, slots=True)
class AccessEntry:
    """An (identity, permission) binding, optionally inheritable by children."""

    identity: Identity
    permission: AclPermission = AclPermission.ALL
    is_default: bool = False

    @property
    def mode(self) -> str:
        from .acl import mode_for

        return mode_for(self.permission)

    def to_spec(self) -> str:
        from .acl import format_acl_spec

        return format_acl_spec(self.identity, self.permission, self.is_default)


@dataclass(frozen=True, slots=True)
class AclSpecEntry:
    """One parsed clause of an ACL specifier string."""

    entity: str
    identity_id: str
    mode: str
    is_default: bool = False

    def __str__(self) -> str:
        prefix = "default:" if self.is_default else ""
        return f"{prefix}{self.entity}:{self.identity_id}:{self.mode}"


@dataclass
class PropagationStats:
    """Counters collected by a propagation walk."""

    directories: int = 0
    files: int = 0
    entries_applied: int = 0


@dataclass
class GrantResult:
    """Result of a grant run.

    In the default mode ``propagation`` is the handle of the background
    walk and ``entry_handles`` holds the per-path tasks, none of which
    have been awaited.  In full replication mode ``propagation`` is
    ``None`` and ``stats`` reports the finished walk.
    """

    success: bool
    message: str
    identity: Identity | None = None
    full_replication: bool = False
    applied_paths: list[str] = field(default_factory=list)
    skipped_paths: list[str] = field(default_factory=list)
    date_chain: list[str] = field(default_factory=list)
    entry_handles: list[TaskHandle] = field(default_factory=list)
    propagation: TaskHandle | None = None
    stats: PropagationStats | None = None
