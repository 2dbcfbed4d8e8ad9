"""Path utilities for remote panel paths."""

from __future__ import annotations

import posixpath

# =============================================================================
# Path Utilities
# =============================================================================


def normalize_path(path: str) -> str:
    """Normalize a remote file system path.

    - Ensures leading /
    - Resolves .. and . references
    - Removes double slashes
    - Removes trailing slash (except for root)

    Examples:
        normalize_path("foo.txt") -> "/foo.txt"
        normalize_path("/foo//bar.txt") -> "/foo/bar.txt"
        normalize_path("/foo/../bar.txt") -> "/bar.txt"
        normalize_path("/foo/") -> "/foo"
        normalize_path("") -> "/"
    """
    if not path:
        return "/"

    path = path.strip()

    if not path.startswith("/"):
        path = "/" + path

    path = posixpath.normpath(path)

    # normpath keeps a leading "//" as-is (POSIX allows it to be special)
    if path.startswith("//"):
        path = "/" + path.lstrip("/")

    if path != "/" and path.endswith("/"):
        path = path[:-1]

    return path


def split_path(path: str) -> tuple[str, str]:
    """Split path into (parent_dir, filename).

    Examples:
        split_path("/foo/bar.txt") -> ("/foo", "bar.txt")
        split_path("/foo.txt") -> ("/", "foo.txt")
        split_path("/") -> ("/", "")
    """
    path = normalize_path(path)
    if path == "/":
        return "/", ""
    return posixpath.split(path)


def parent_path(path: str) -> str:
    """Return the parent directory of *path*.  The root is its own parent."""
    return split_path(path)[0]


def leaf_name(path: str) -> str:
    """Return the last path segment, ``""`` for the root."""
    return split_path(path)[1]


def join_path(directory: str, name: str) -> str:
    """Join *name* onto *directory* and normalize the result."""
    return normalize_path(posixpath.join(normalize_path(directory), name))


def strip_leading_slash(path: str) -> str:
    """Root-relative form expected by the rename, delete and copy endpoints."""
    return path[1:] if path.startswith("/") else path


def is_ancestor(ancestor: str, path: str) -> bool:
    """True when *path* lies strictly below *ancestor*."""
    ancestor = normalize_path(ancestor)
    path = normalize_path(path)
    if ancestor == path:
        return False
    if ancestor == "/":
        return True
    return path.startswith(ancestor + "/")


def copied_name(name: str) -> str:
    """Name the panel gives to a copy of *name* in the same directory.

    Examples:
        copied_name("notes.txt") -> "notes copy.txt"
        copied_name("archive.tar.gz") -> "archive.tar copy.gz"
        copied_name("README") -> "README copy"
    """
    stem, dot, extension = name.rpartition(".")
    if not dot:
        return f"{name} copy"
    return f"{stem} copy.{extension}"


def truncate(text: str, limit: int = 50) -> str:
    """Shorten *text* to *limit* characters, marking the cut with ``...``."""
    if len(text) <= limit:
        return text
    return text[:limit] + "..."
