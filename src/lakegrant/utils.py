"""Path utilities for lake paths (always forward-slash separated)."""

from __future__ import annotations

import posixpath


def normalize_path(path: str) -> str:
    """Normalize a lake path.

    - Converts backslashes to forward slashes
    - Ensures leading /
    - Resolves .. and . references
    - Removes double slashes
    - Removes trailing slash (except for root)

    Examples:
        normalize_path("system") -> "/system"
        normalize_path("/system//jobservice/") -> "/system/jobservice"
        normalize_path("\\system\\jobservice") -> "/system/jobservice"
        normalize_path("") -> "/"
    """
    if not path:
        return "/"

    path = path.strip().replace("\\", "/")

    if not path.startswith("/"):
        path = "/" + path

    path = posixpath.normpath(path)

    # posixpath keeps a leading "//" as-is
    if path.startswith("//"):
        path = "/" + path.lstrip("/")

    if path != "/" and path.endswith("/"):
        path = path[:-1]

    return path


def join_path(parent: str, name: str) -> str:
    """Join a child name onto a parent path with a forward slash.

    Examples:
        join_path("/", "2024") -> "/2024"
        join_path("/system/", "jobservice") -> "/system/jobservice"
    """
    return normalize_path(f"{parent.rstrip('/')}/{name}")


def is_valid_entry_name(name: str) -> bool:
    """True if *name* is a single path segment.

    Empty names, ``.``, ``..`` and names holding a separator are rejected
    since joining them would leave the listed directory.
    """
    return bool(name) and name not in (".", "..") and "/" not in name and "\\" not in name


def split_path(path: str) -> tuple[str, str]:
    """Split path into (parent_dir, name).

    Examples:
        split_path("/system/jobservice") -> ("/system", "jobservice")
        split_path("/system") -> ("/", "system")
        split_path("/") -> ("/", "")
    """
    path = normalize_path(path)
    if path == "/":
        return "/", ""
    return posixpath.split(path)


def ancestors(path: str) -> list[str]:
    """Return ``path`` and its ancestors, most general first.

    Examples:
        ancestors("/a/b") -> ["/", "/a", "/a/b"]
    """
    path = normalize_path(path)
    chain = []
    current = path
    while True:
        chain.append(current)
        if current == "/":
            break
        current = current.rsplit("/", 1)[0] or "/"
    chain.reverse()
    return chain


def parse_bucket_name(name: str) -> int | None:
    """Return the integer value of a partition folder name, or None."""
    try:
        return int(name)
    except ValueError:
        return None
