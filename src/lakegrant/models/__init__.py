"""SQLModel tables for the bundled lake stores."""

from lakegrant.models.acl import AclRecord, AclRecordBase
from lakegrant.models.nodes import LakeNode, LakeNodeBase

__all__ = [
    "AclRecord",
    "AclRecordBase",
    "LakeNode",
    "LakeNodeBase",
]
