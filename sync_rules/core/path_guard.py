"""Keeps writes and deletes inside the project roots of a run."""

import os
from pathlib import Path
from typing import Iterable

from sync_rules.errors import PathGuardError


def normalize_path(path: str | Path) -> Path:
    """Expand ``~`` and collapse ``..`` without resolving symlinks."""
    return Path(os.path.normpath(os.path.abspath(os.path.expanduser(str(path)))))


class PathGuard:
    """Validates paths against a fixed set of allowed root directories."""

    def __init__(self, allowed_roots: Iterable[str | Path]):
        roots = []
        for root in allowed_roots:
            expanded = os.path.expanduser(str(root))
            if not os.path.isabs(expanded):
                raise PathGuardError(f"Allowed root must be an absolute path: {root}")
            roots.append(normalize_path(expanded))
        self.allowed_roots: tuple[Path, ...] = tuple(roots)

    def is_inside_allowed_root(self, path: str | Path) -> bool:
        candidate = normalize_path(path)
        return any(candidate == root or root in candidate.parents for root in self.allowed_roots)

    def validate_path(self, path: str | Path) -> Path:
        """
        Return the normalized path if it lies inside an allowed root.

        Raises:
            PathGuardError: If the path escapes every allowed root
        """
        candidate = normalize_path(path)
        if not self.is_inside_allowed_root(candidate):
            raise PathGuardError(f"Path is outside the allowed directories: {candidate}")
        return candidate
