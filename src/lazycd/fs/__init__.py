"""Filesystem primitives for staged copy/move/delete with undo support.

This module provides path resolution, destination conflict handling and
the copy/move/trash primitives the job engine replays.
"""

from lazycd.fs.conflict import ConflictPolicy, destination_exists, resolve_conflict
from lazycd.fs.listing import FileEntry, list_dir
from lazycd.fs.ops import (
    copy_file,
    copy_tree,
    delete_to_trash,
    make_backup,
    move,
    remove_path,
)
from lazycd.fs.paths import resolve_path

__all__ = [
    "ConflictPolicy",
    "FileEntry",
    "copy_file",
    "copy_tree",
    "delete_to_trash",
    "destination_exists",
    "list_dir",
    "make_backup",
    "move",
    "remove_path",
    "resolve_conflict",
    "resolve_path",
]
