"""Recursive ACL propagation over a directory tree."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from .acl import apply_entry
from .exceptions import InvalidEntryNameError, UnsupportedEntryKindError
from .types import AclPermission, EntryKind, PropagationStats
from .utils import is_valid_entry_name, join_path, normalize_path

if TYPE_CHECKING:
    from .protocol import AclSetter, DirectoryProvider
    from .types import Identity

logger = logging.getLogger(__name__)


def _entry_kind(kind: EntryKind | str) -> EntryKind | None:
    try:
        return EntryKind(kind)
    except ValueError:
        return None


async def propagate(
    provider: DirectoryProvider,
    setter: AclSetter,
    start_path: str,
    identity: Identity,
    *,
    apply_to_files: bool = False,
) -> PropagationStats:
    """Grant *identity* full access on everything below *start_path*.

    Walks depth-first with an explicit stack.  For every listed child:

    - a file gets a full-access entry, applied to the listed directory
      (or to the file itself with *apply_to_files*);
    - a directory gets a full-access default entry, applied to the
      listed directory, before the child is walked;
    - any other kind raises ``UnsupportedEntryKindError`` and the walk
      stops there.

    A child name that is not a single path segment (empty, ``.``, ``..``
    or holding a separator) raises ``InvalidEntryNameError``.

    Errors from the provider or setter propagate unchanged.  Entries
    already applied are left in place.
    """
    start_path = normalize_path(start_path)
    stats = PropagationStats()
    stack = [start_path]

    logger.info("Propagating %s from %s", identity, start_path)

    while stack:
        path = stack.pop()
        stats.directories += 1
        subdirs: list[str] = []

        for child in await provider.list_children(path):
            if not is_valid_entry_name(child.name):
                raise InvalidEntryNameError(child.name, path)
            kind = _entry_kind(child.kind)
            child_path = join_path(path, child.name)

            if kind is EntryKind.FILE:
                target = child_path if apply_to_files else path
                await apply_entry(setter, target, identity, AclPermission.ALL, False)
                stats.files += 1
            elif kind is EntryKind.DIRECTORY:
                await apply_entry(setter, path, identity, AclPermission.ALL, True)
                subdirs.append(child_path)
            else:
                raise UnsupportedEntryKindError(
                    kind.value if kind is not None else str(child.kind), child_path
                )
            stats.entries_applied += 1

        logger.debug("Applied entries in %s (%d subdirectories)", path, len(subdirs))
        # Reversed so siblings are walked in listing order
        stack.extend(reversed(subdirs))

    logger.info(
        "Propagation from %s finished: %d directories, %d files",
        start_path,
        stats.directories,
        stats.files,
    )
    return stats
