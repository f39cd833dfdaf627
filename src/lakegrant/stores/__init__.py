"""Bundled lake stores — SQL emulation and local disk."""

from lakegrant.stores.database import DatabaseLakeStore
from lakegrant.stores.factory import open_store
from lakegrant.stores.ledger import AclLedger
from lakegrant.stores.local_disk import LocalDiskLakeStore

__all__ = [
    "AclLedger",
    "DatabaseLakeStore",
    "LocalDiskLakeStore",
    "open_store",
]
