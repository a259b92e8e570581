"""Helpers for resolving the lazycd configuration directory."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from lazycd.core.constants import (
    BACKUPS_DIRNAME,
    CONFIG_DIR_ENV,
    DEFAULT_CONFIG_SUBDIR,
    JOBS_DIRNAME,
    STATE_FILENAME,
    TRASH_DIRNAME,
)
from lazycd.fs.paths import home_dir

__all__ = ["LazycdPaths", "resolve_config_root"]


def resolve_config_root(config_root: str | Path | None = None) -> Path:
    """Resolve the on-disk config root.

    Args:
        config_root: Optional explicit directory.

    Returns:
        Absolute path; the argument wins over ``LAZYCD_CONFIG_DIR``, which
        wins over ``~/.config/lazycd``.
    """

    chosen: str | Path | None = config_root
    env_root = os.getenv(CONFIG_DIR_ENV)
    if chosen is None and env_root:
        chosen = env_root
    if chosen is None:
        chosen = home_dir().joinpath(*DEFAULT_CONFIG_SUBDIR)

    return Path(chosen).expanduser().absolute()


@dataclass(frozen=True)
class LazycdPaths:
    """Locations derived from the config root."""

    root: Path
    jobs_dir: Path
    trash_dir: Path
    backups_dir: Path
    state_path: Path

    @classmethod
    def from_root(cls, config_root: str | Path | None = None) -> LazycdPaths:
        root = resolve_config_root(config_root)
        return cls(
            root=root,
            jobs_dir=root / JOBS_DIRNAME,
            trash_dir=root / TRASH_DIRNAME,
            backups_dir=root / BACKUPS_DIRNAME,
            state_path=root / STATE_FILENAME,
        )

    def ensure(self) -> LazycdPaths:
        """Create the config root and the jobs directory if missing.

        Trash and backup directories are created lazily, per job.
        """
        self.jobs_dir.mkdir(parents=True, exist_ok=True)
        return self
