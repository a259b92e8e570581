"""Destination conflict resolution.

Given a destination path and a policy, decide whether an operation may
proceed and at which final path.
"""

import errno
import os
import stat
from enum import Enum
from pathlib import Path

from lazycd.core.constants import MAX_RENAME_ATTEMPTS
from lazycd.core.errors import DirectoryOverwriteDenied, NoFreeName


class ConflictPolicy(str, Enum):
    """Rule applied when a destination already exists.

    Attributes:
        SKIP: Leave the existing destination alone and skip the item
        OVERWRITE: Replace an existing file (never a directory)
        RENAME: Pick the first free "<name> (n)<ext>" sibling
    """

    SKIP = "skip"
    OVERWRITE = "overwrite"
    RENAME = "rename"


def _lstat_or_none(path: Path) -> os.stat_result | None:
    try:
        return os.lstat(path)
    except OSError as e:
        if e.errno in (errno.ENOENT, errno.ENOTDIR):
            return None
        raise


def destination_exists(dst: Path) -> bool:
    """Return whether ``dst`` exists (a dangling symlink counts).

    Raises:
        OSError: For any stat failure other than "not found"
    """
    return _lstat_or_none(dst) is not None


def find_free_name(path: Path, max_attempts: int = MAX_RENAME_ATTEMPTS) -> Path:
    """Generate ``name (1).ext``, ``name (2).ext`` ... until one is free.

    Raises:
        NoFreeName: If every candidate up to ``max_attempts`` exists
    """
    for n in range(1, max_attempts + 1):
        candidate = path.with_name(f"{path.stem} ({n}){path.suffix}")
        if not destination_exists(candidate):
            return candidate

    raise NoFreeName(path, max_attempts)


def resolve_conflict(
    src: Path, dst: Path, policy: ConflictPolicy = ConflictPolicy.SKIP
) -> Path | None:
    """Return the final destination for ``src`` under ``policy``.

    Args:
        src: Source path (kept for callers that log it; not inspected)
        dst: Desired destination
        policy: Conflict policy to apply when ``dst`` exists

    Returns:
        The destination to use, or ``None`` when the item must be skipped

    Raises:
        OSError: If stat fails for a reason other than "not found"
        DirectoryOverwriteDenied: Overwrite policy on an existing directory
        NoFreeName: Rename policy found no free sibling name
    """
    existing = _lstat_or_none(dst)
    if existing is None:
        return dst

    policy = ConflictPolicy(policy)

    if policy is ConflictPolicy.SKIP:
        return None

    if policy is ConflictPolicy.OVERWRITE:
        if stat.S_ISDIR(existing.st_mode):
            raise DirectoryOverwriteDenied(dst)
        return dst

    return find_free_name(dst)
