"""Filesystem helpers — target path resolution and directory inspection."""

from __future__ import annotations

from pathlib import Path


def resolve_target(path: str | None) -> Path:
    """Return the effective working tree for a path option.

    ``None`` or an empty string means the current directory.
    """
    if not path:
        return Path.cwd()
    return Path(path).expanduser().absolute()


def is_empty_dir(path: Path) -> bool:
    """True if ``path`` is a directory with no entries at all."""
    return path.is_dir() and next(path.iterdir(), None) is None


def has_marker(path: Path, marker: str) -> bool:
    """True if ``marker`` exists directly under ``path``."""
    return (path / marker).exists()
