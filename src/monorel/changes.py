from __future__ import annotations

from pathlib import PurePosixPath
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Iterable


def top_level_directory(path: str) -> str | None:
    """Return the first path component of a repo-relative path.

    Files that live directly at the repository root have no directory and
    yield None.
    """
    parts = PurePosixPath(path).parts
    if len(parts) < 2:  # noqa: PLR2004
        return None
    return parts[0]


def top_level_directories(paths: Iterable[str]) -> list[str]:
    """Collect distinct top-level directories in first-seen order.

    Args:
        paths: Repo-relative, forward-slash separated paths as reported by git.

    Returns:
        Each directory exactly once, ordered by its first appearance in `paths`.
    """
    seen: dict[str, None] = {}
    for path in paths:
        directory = top_level_directory(path)
        if directory is not None:
            seen.setdefault(directory, None)
    return list(seen)
