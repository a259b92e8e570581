"""Directory listing for display."""

import os
from dataclasses import dataclass
from pathlib import Path

from lazycd.fs.paths import resolve_path


@dataclass(frozen=True)
class FileEntry:
    """A file or directory shown in a listing."""

    name: str
    path: Path
    is_dir: bool
    size: int
    mode: int


def list_dir(path: str | Path) -> list[FileEntry]:
    """List a directory, directories first, each group sorted by name.

    Args:
        path: Directory to list; ``~`` and relative paths are accepted

    Returns:
        Entries of the directory (not recursive)

    Raises:
        InvalidPath: If the path cannot be resolved
        OSError: If the directory cannot be read
    """
    directory = resolve_path(path)

    entries: list[FileEntry] = []
    with os.scandir(directory) as it:
        for entry in it:
            # Follow symlinks so a link to a directory lists as a directory
            try:
                info = entry.stat()
            except OSError:
                info = entry.stat(follow_symlinks=False)
            entries.append(
                FileEntry(
                    name=entry.name,
                    path=directory / entry.name,
                    is_dir=entry.is_dir(),
                    size=info.st_size,
                    mode=info.st_mode,
                )
            )

    entries.sort(key=lambda e: (not e.is_dir, e.name))
    return entries
