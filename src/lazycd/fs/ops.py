"""Primitive filesystem operations.

Copy, move and delete-to-trash against the real filesystem. These
functions know nothing about jobs: they mutate the filesystem, return
where things ended up and raise on the first failure.
"""

import os
import shutil
import stat
import time
from pathlib import Path

from lazycd.core.errors import (
    InvalidPath,
    NotADirectory,
    NotRegularFile,
    TrashCollision,
)
from lazycd.fs.conflict import destination_exists
from lazycd.fs.paths import backup_path_for, trash_path_for
from lazycd.utils.debug import debug

_COPY_BUFSIZE = 1024 * 1024


def copy_file(src: Path, dst: Path) -> None:
    """Copy a regular file or symlink from ``src`` to ``dst``.

    Symlinks are recreated with the same target instead of being followed.
    Regular files are streamed into ``dst`` (created or truncated) with the
    source permission bits, then ``dst`` gets the source modification time.

    Raises:
        NotRegularFile: If ``src`` is neither a regular file nor a symlink
        OSError: On any stat/read/write/create failure, or if setting the
            timestamp fails after the content was written
    """
    src_stat = os.lstat(src)

    if stat.S_ISLNK(src_stat.st_mode):
        os.symlink(os.readlink(src), dst)
        return

    if not stat.S_ISREG(src_stat.st_mode):
        raise NotRegularFile(src)

    mode = stat.S_IMODE(src_stat.st_mode)
    with open(src, "rb") as source:
        fd = os.open(dst, os.O_WRONLY | os.O_CREAT | os.O_TRUNC, mode)
        with os.fdopen(fd, "wb") as destination:
            shutil.copyfileobj(source, destination, _COPY_BUFSIZE)

    os.utime(dst, (time.time(), src_stat.st_mtime))


def copy_tree(src: Path, dst: Path) -> None:
    """Recursively copy the directory ``src`` to ``dst``.

    Directories are created owner-writable and get the source permission
    bits once their entries are copied, so read-only trees can be copied.
    The first failure propagates; a partially copied ``dst`` is left
    behind for the caller to deal with.

    Raises:
        NotADirectory: If ``src`` is not a directory
        OSError: On any filesystem failure
    """
    src_stat = os.stat(src)
    if not stat.S_ISDIR(src_stat.st_mode):
        raise NotADirectory(src)

    mode = stat.S_IMODE(src_stat.st_mode)
    os.makedirs(dst, mode=mode | stat.S_IRWXU, exist_ok=True)

    with os.scandir(src) as entries:
        children = sorted(entries, key=lambda entry: entry.name)

    for entry in children:
        child_src = Path(entry.path)
        child_dst = Path(dst) / entry.name
        if entry.is_dir(follow_symlinks=False):
            copy_tree(child_src, child_dst)
        else:
            copy_file(child_src, child_dst)

    os.chmod(dst, mode)


def remove_path(path: Path) -> None:
    """Remove a file, symlink or directory tree; a missing path is fine."""
    try:
        path_stat = os.lstat(path)
    except FileNotFoundError:
        return

    if stat.S_ISDIR(path_stat.st_mode):
        shutil.rmtree(path)
    else:
        os.unlink(path)


def move(src: Path, dst: Path) -> None:
    """Move ``src`` to ``dst``, preferring an atomic rename.

    If the rename fails for any reason, ``src`` is copied to ``dst`` and
    removed only once the copy has fully succeeded. A failed copy leaves
    ``src`` untouched and re-raises.

    Raises:
        OSError: If both the rename and the copy fallback fail
    """
    try:
        os.rename(src, dst)
        debug(f"Direct rename: {src} -> {dst}")
        return
    except OSError as e:
        debug(f"Rename failed ({e}), falling back to copy+delete: {src} -> {dst}")

    src_stat = os.lstat(src)
    if stat.S_ISDIR(src_stat.st_mode):
        copy_tree(src, dst)
    else:
        copy_file(src, dst)

    remove_path(src)
    debug(f"Copy+delete move: {src} -> {dst}")


def delete_to_trash(src: Path, job_id: str, trash_root: Path) -> Path:
    """Move ``src`` into the per-job trash area and return where it went.

    Args:
        src: Item to delete
        job_id: Job the delete belongs to
        trash_root: Root of the trash area

    Returns:
        ``<trash_root>/<job_id>/<basename>``

    Raises:
        InvalidPath: If the trash area lies inside ``src``
        TrashCollision: If that trash entry already exists
        OSError: If the trash directory cannot be created or the move fails
    """
    trash_path = trash_path_for(trash_root, job_id, Path(src))
    if trash_path == Path(src) or trash_path.is_relative_to(src):
        raise InvalidPath(src, f"trash area {trash_root} is inside it")
    if destination_exists(trash_path):
        raise TrashCollision(src, trash_path)

    trash_path.parent.mkdir(parents=True, exist_ok=True)
    move(src, trash_path)
    debug(f"Moved to trash: {src} -> {trash_path}")
    return trash_path


def make_backup(dst: Path, job_id: str, backup_root: Path) -> Path:
    """Relocate an existing destination out of the way before overwriting it.

    Returns:
        The backup location, needed to restore ``dst`` on undo
    """
    backup_path = backup_path_for(backup_root, job_id, Path(dst))
    backup_path.parent.mkdir(parents=True, exist_ok=True)
    move(dst, backup_path)
    debug(f"Backed up existing file to: {backup_path}")
    return backup_path
