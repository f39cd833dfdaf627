"""lakegrant: grant identities access across a hierarchical data lake.

Date-bucketed partition discovery, recursive ACL propagation, and
background task handles for long-running walks.
"""

__version__ = "0.1.0"

from lakegrant.acl import apply_entry, format_acl_spec, mode_for, parse_acl_spec
from lakegrant.buckets import date_bounds, locate_closest, locate_date_chain
from lakegrant.config import GrantConfig
from lakegrant.context import StoreContext
from lakegrant.exceptions import (
    AclSpecError,
    BucketNotFoundError,
    InvalidEntryNameError,
    LakeGrantError,
    StoreError,
    TaskNotFoundError,
    UnsupportedEntryKindError,
)
from lakegrant.orchestrator import LakeGrant, build_path_list
from lakegrant.propagation import propagate
from lakegrant.protocol import AclSetter, DirectoryProvider, LakeStore
from lakegrant.tasks import TaskHandle, TaskRunner
from lakegrant.types import (
    AccessEntry,
    AclPermission,
    AclSpecEntry,
    DirectoryEntry,
    EntryKind,
    GrantResult,
    Identity,
    IdentityKind,
    PropagationStats,
    TaskStatus,
)

__all__ = [
    "AccessEntry",
    "AclPermission",
    "AclSetter",
    "AclSpecEntry",
    "AclSpecError",
    "BucketNotFoundError",
    "InvalidEntryNameError",
    "DirectoryEntry",
    "DirectoryProvider",
    "EntryKind",
    "GrantConfig",
    "GrantResult",
    "Identity",
    "IdentityKind",
    "LakeGrant",
    "LakeGrantError",
    "LakeStore",
    "PropagationStats",
    "StoreContext",
    "StoreError",
    "TaskHandle",
    "TaskNotFoundError",
    "TaskRunner",
    "TaskStatus",
    "UnsupportedEntryKindError",
    "__version__",
    "apply_entry",
    "build_path_list",
    "date_bounds",
    "format_acl_spec",
    "locate_closest",
    "locate_date_chain",
    "mode_for",
    "parse_acl_spec",
    "propagate",
]
