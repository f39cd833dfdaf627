"""Custom exception hierarchy for lakegrant."""

from __future__ import annotations


class LakeGrantError(Exception):
    """Base exception for all lakegrant errors."""


class BucketNotFoundError(LakeGrantError):
    """Raised when an existing partition folder has no child within the bound."""

    def __init__(self, bound: int, path: str) -> None:
        super().__init__(f"No partition folder <= {bound} under {path}")
        self.bound = bound
        self.path = path


class UnsupportedEntryKindError(LakeGrantError):
    """Raised when a listing returns an entry that is neither a file nor a directory."""

    def __init__(self, kind: str, path: str) -> None:
        super().__init__(f"Unsupported entry kind {kind!r} at {path}")
        self.kind = kind
        self.path = path


class InvalidEntryNameError(LakeGrantError):
    """Raised when a listing returns a name that is not a single path segment."""

    def __init__(self, name: str, path: str) -> None:
        super().__init__(f"Invalid entry name {name!r} in {path}")
        self.name = name
        self.path = path


class AclSpecError(LakeGrantError):
    """Raised when an ACL specifier string is malformed."""


class StoreError(LakeGrantError):
    """Raised on bundled store failures (missing root, bad source, etc.)."""


class TaskNotFoundError(LakeGrantError):
    """Raised when a task id is not known to the runner."""
