"""Pytest configuration and fixtures for lazycd tests."""

from collections.abc import Iterator
from pathlib import Path

import pytest
import structlog

from lazycd.config import LazycdPaths
from lazycd.jobs.executor import ShelfExecutor
from lazycd.jobs.manager import JobManager
from lazycd.store.state import OpMode, ShelfItem


@pytest.fixture(autouse=True)
def _isolated_config(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> Iterator[None]:
    """Keep every test away from the real ~/.config/lazycd."""
    monkeypatch.setenv("LAZYCD_CONFIG_DIR", str(tmp_path / "config"))
    yield
    structlog.reset_defaults()


@pytest.fixture
def lazycd_paths(tmp_path: Path) -> LazycdPaths:
    return LazycdPaths.from_root(tmp_path / "config").ensure()


@pytest.fixture
def manager(lazycd_paths: LazycdPaths) -> JobManager:
    return JobManager(lazycd_paths.jobs_dir)


@pytest.fixture
def executor(manager: JobManager, lazycd_paths: LazycdPaths) -> ShelfExecutor:
    return ShelfExecutor(
        manager,
        trash_root=lazycd_paths.trash_dir,
        backup_root=lazycd_paths.backups_dir,
    )


@pytest.fixture
def make_shelf_item():
    """Build a shelf item for an existing path."""

    def _make(path: Path, mode: OpMode = OpMode.COPY) -> ShelfItem:
        return ShelfItem.from_path(path, mode=mode)

    return _make


def _write_tree(root: Path, files: dict[str, str]) -> None:
    for rel, content in files.items():
        path = root / rel
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content)


def _read_tree(root: Path) -> dict[str, str]:
    """Return ``{relative path: content}`` for every file under ``root``."""
    return {
        str(p.relative_to(root)): p.read_text()
        for p in sorted(root.rglob("*"))
        if p.is_file()
    }


@pytest.fixture
def write_tree():
    """Create files (and parent directories) under a root."""
    return _write_tree


@pytest.fixture
def read_tree():
    """Snapshot ``{relative path: content}`` of every file under a root."""
    return _read_tree
