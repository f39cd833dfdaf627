"""Date-bucket locator for job-log partitions.

Job logs are laid out as ``<root>/<year>/<month>/<day>/<hour>/<minute>``
with plain numeric folder names.  The locator walks down that layout
picking, at each level, the largest folder not later than the bound.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from .exceptions import BucketNotFoundError
from .utils import join_path, parse_bucket_name

if TYPE_CHECKING:
    from datetime import datetime

    from .protocol import DirectoryProvider

logger = logging.getLogger(__name__)

HOUR_BUCKET_BOUND = 24
MINUTE_BUCKET_BOUND = 59


def date_bounds(now: datetime) -> tuple[int, int, int, int, int]:
    """Bounds for the five partition levels.

    Hour and minute levels are bounded by the fixed bucket counts, not
    by the current time.
    """
    return (now.year, now.month, now.day, HOUR_BUCKET_BOUND, MINUTE_BUCKET_BOUND)


async def locate_closest(
    provider: DirectoryProvider,
    root_path: str,
    bound: int,
) -> str | None:
    """Return the child of *root_path* with the largest numeric name <= *bound*.

    Returns ``None`` when *root_path* is empty or does not exist.  Raises
    ``BucketNotFoundError`` when it exists but no child qualifies.
    """
    if not root_path or not await provider.exists(root_path):
        return None

    numbered: list[tuple[int, str]] = []
    for child in await provider.list_children(root_path):
        value = parse_bucket_name(child.name)
        if value is not None:
            numbered.append((value, child.name))

    numbered.sort(key=lambda item: item[0], reverse=True)
    for value, name in numbered:
        if value <= bound:
            return join_path(root_path, name)

    raise BucketNotFoundError(bound, root_path)


async def locate_date_chain(
    provider: DirectoryProvider,
    root_path: str,
    now: datetime,
) -> list[str]:
    """Locate the existing partition folders closest to *now*, most general first.

    Stops at the first level whose parent does not exist, so the result
    is always a prefix of the five-level chain.
    """
    chain: list[str] = []
    current = root_path
    for bound in date_bounds(now):
        found = await locate_closest(provider, current, bound)
        if found is None:
            break
        chain.append(found)
        current = found

    logger.debug("Date chain under %s: %s", root_path, chain)
    return chain
