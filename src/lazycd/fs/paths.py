"""Path utilities for filesystem operations.

This module turns user-facing paths into absolute filesystem paths and
computes the per-job trash and backup locations used by the primitives.
"""

import os
import uuid
from pathlib import Path

from lazycd.core.errors import InvalidPath


def home_dir() -> Path:
    """Return the current user's home directory.

    Raises:
        InvalidPath: If the home directory cannot be determined
    """
    home = os.path.expanduser("~")
    if home.startswith("~") or not home:
        raise InvalidPath("~", "could not determine home directory")
    return Path(home)


def resolve_path(path: str | Path) -> Path:
    """Normalize a user-facing path to an absolute path.

    A leading ``~`` or ``~/`` is expanded to the home directory; anything
    else is made absolute against the current working directory. Symlinks
    are not resolved and the filesystem is not touched.

    Args:
        path: Path as typed by the user

    Returns:
        Absolute, lexically normalized path

    Raises:
        InvalidPath: If the path is empty or the home directory is needed
            but cannot be determined
    """
    raw = os.fspath(path)
    if not raw:
        raise InvalidPath(raw, "path is empty")

    if raw == "~":
        return home_dir()
    if raw.startswith("~/"):
        return Path(os.path.normpath(home_dir() / raw[2:]))

    return Path(os.path.abspath(raw))


def trash_path_for(trash_root: Path, job_id: str, original: Path) -> Path:
    """Return ``<trash_root>/<job_id>/<basename of original>``."""
    return trash_root / job_id / original.name


def backup_path_for(backup_root: Path, job_id: str, original: Path) -> Path:
    """Generate a backup path for an overwritten destination.

    Args:
        backup_root: Root of the backups area
        job_id: Job that displaces the file
        original: Path that needs to be backed up

    Returns:
        Unique path under ``<backup_root>/<job_id>/``
    """
    stem = original.stem
    suffix = original.suffix
    unique_id = uuid.uuid4().hex[:8]

    return backup_root / job_id / f"{stem}.bak{unique_id}{suffix}"
