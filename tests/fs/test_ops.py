"""Tests for the copy, move and trash primitives."""

import errno
import os
import stat
from pathlib import Path
from unittest.mock import patch

import pytest

from lazycd.core.errors import (
    InvalidPath,
    NotADirectory,
    NotRegularFile,
    TrashCollision,
)
from lazycd.fs.ops import (
    copy_file,
    copy_tree,
    delete_to_trash,
    make_backup,
    move,
    remove_path,
)

CROSS_DEVICE = OSError(errno.EXDEV, "Invalid cross-device link")


class TestCopyFile:
    """Test single file copies."""

    def test_copies_content_mode_and_mtime(self, tmp_path: Path) -> None:
        src = tmp_path / "src.sh"
        dst = tmp_path / "dst.sh"
        src.write_text("#!/bin/sh\necho hi\n")
        src.chmod(0o750)
        os.utime(src, (1_000_000_000, 1_000_000_000))

        copy_file(src, dst)

        assert dst.read_text() == "#!/bin/sh\necho hi\n"
        assert stat.S_IMODE(dst.stat().st_mode) == 0o750 & ~_umask()
        assert dst.stat().st_mtime == pytest.approx(1_000_000_000)

    def test_truncates_existing_destination(self, tmp_path: Path) -> None:
        src = tmp_path / "src.txt"
        dst = tmp_path / "dst.txt"
        src.write_text("short")
        dst.write_text("a much longer previous content")

        copy_file(src, dst)

        assert dst.read_text() == "short"

    def test_symlink_is_recreated_not_followed(self, tmp_path: Path) -> None:
        target = tmp_path / "target.txt"
        target.write_text("data")
        link = tmp_path / "link"
        link.symlink_to("target.txt")
        dst = tmp_path / "copied-link"

        copy_file(link, dst)

        assert dst.is_symlink()
        assert os.readlink(dst) == "target.txt"

    def test_fifo_is_not_a_regular_file(self, tmp_path: Path) -> None:
        fifo = tmp_path / "pipe"
        os.mkfifo(fifo)

        with pytest.raises(NotRegularFile):
            copy_file(fifo, tmp_path / "out")

        assert not (tmp_path / "out").exists()

    def test_missing_source_raises_oserror(self, tmp_path: Path) -> None:
        with pytest.raises(FileNotFoundError):
            copy_file(tmp_path / "missing", tmp_path / "out")

    def test_timestamp_failure_leaves_written_file(self, tmp_path: Path) -> None:
        src = tmp_path / "src.txt"
        dst = tmp_path / "dst.txt"
        src.write_text("payload")

        with patch("lazycd.fs.ops.os.utime", side_effect=PermissionError(1, "nope")):
            with pytest.raises(PermissionError):
                copy_file(src, dst)

        assert dst.read_text() == "payload"


class TestCopyTree:
    """Test recursive directory copies."""

    def test_copies_nested_tree(self, tmp_path: Path, write_tree, read_tree) -> None:
        src = tmp_path / "src"
        write_tree(src, {"a.txt": "A", "sub/b.txt": "B", "sub/deeper/c.txt": "C"})
        (src / "empty").mkdir()

        copy_tree(src, tmp_path / "dst")

        assert read_tree(tmp_path / "dst") == read_tree(src)
        assert (tmp_path / "dst" / "empty").is_dir()

    def test_creates_missing_parents(self, tmp_path: Path, write_tree) -> None:
        src = tmp_path / "src"
        write_tree(src, {"a.txt": "A"})

        copy_tree(src, tmp_path / "x" / "y" / "dst")

        assert (tmp_path / "x" / "y" / "dst" / "a.txt").read_text() == "A"

    def test_symlinked_directory_is_copied_as_link(self, tmp_path: Path) -> None:
        src = tmp_path / "src"
        (src / "real").mkdir(parents=True)
        (src / "alias").symlink_to("real")

        copy_tree(src, tmp_path / "dst")

        assert (tmp_path / "dst" / "alias").is_symlink()
        assert os.readlink(tmp_path / "dst" / "alias") == "real"

    def test_file_source_is_rejected(self, tmp_path: Path) -> None:
        src = tmp_path / "file.txt"
        src.write_text("x")

        with pytest.raises(NotADirectory):
            copy_tree(src, tmp_path / "dst")

    def test_stops_at_first_failure_without_cleanup(
        self, tmp_path: Path, write_tree
    ) -> None:
        src = tmp_path / "src"
        write_tree(src, {"a.txt": "A", "b.txt": "B"})
        real_copy = copy_file

        def fail_on_b(s: Path, d: Path) -> None:
            if Path(s).name == "b.txt":
                raise OSError(errno.ENOSPC, "No space left on device")
            real_copy(s, d)

        with patch("lazycd.fs.ops.copy_file", side_effect=fail_on_b):
            with pytest.raises(OSError, match="No space"):
                copy_tree(src, tmp_path / "dst")

        assert (tmp_path / "dst" / "a.txt").read_text() == "A"
        assert not (tmp_path / "dst" / "b.txt").exists()

    def test_read_only_directories_keep_their_mode(
        self, tmp_path: Path, write_tree, read_tree
    ) -> None:
        src = tmp_path / "src"
        write_tree(src, {"a.txt": "A", "sub/b.txt": "B"})
        (src / "sub").chmod(0o500)
        src.chmod(0o555)
        dst = tmp_path / "dst"

        try:
            copy_tree(src, dst)

            assert read_tree(dst) == read_tree(src)
            assert stat.S_IMODE(dst.stat().st_mode) == 0o555
            assert stat.S_IMODE((dst / "sub").stat().st_mode) == 0o500
        finally:
            for root in (src, dst):
                if root.exists():
                    root.chmod(0o755)
                    (root / "sub").chmod(0o755)


class TestMove:
    """Test rename-or-fallback moves."""

    def test_rename_moves_file(self, tmp_path: Path) -> None:
        src = tmp_path / "a.txt"
        src.write_text("content")

        move(src, tmp_path / "b.txt")

        assert not src.exists()
        assert (tmp_path / "b.txt").read_text() == "content"

    def test_round_trip_with_rename(
        self, tmp_path: Path, write_tree, read_tree
    ) -> None:
        a = tmp_path / "a"
        write_tree(a, {"x.txt": "X", "sub/y.txt": "Y"})
        before = read_tree(a)

        move(a, tmp_path / "b")
        move(tmp_path / "b", a)

        assert read_tree(a) == before
        assert not (tmp_path / "b").exists()

    def test_round_trip_with_copy_fallback(
        self, tmp_path: Path, write_tree, read_tree
    ) -> None:
        a = tmp_path / "a"
        write_tree(a, {"x.txt": "X", "sub/y.txt": "Y"})
        before = read_tree(a)

        with patch("lazycd.fs.ops.os.rename", side_effect=CROSS_DEVICE) as rename:
            move(a, tmp_path / "b")
            assert not a.exists()
            assert read_tree(tmp_path / "b") == before

            move(tmp_path / "b", a)

        assert rename.call_count == 2
        assert read_tree(a) == before
        assert not (tmp_path / "b").exists()

    def test_fallback_moves_single_file(self, tmp_path: Path) -> None:
        src = tmp_path / "a.txt"
        src.write_text("content")

        with patch("lazycd.fs.ops.os.rename", side_effect=PermissionError(1, "x")):
            move(src, tmp_path / "b.txt")

        assert not src.exists()
        assert (tmp_path / "b.txt").read_text() == "content"

    def test_failed_fallback_copy_keeps_source(self, tmp_path: Path) -> None:
        src = tmp_path / "a.txt"
        src.write_text("precious")

        with (
            patch("lazycd.fs.ops.os.rename", side_effect=CROSS_DEVICE),
            patch(
                "lazycd.fs.ops.copy_file",
                side_effect=OSError(errno.EIO, "Input/output error"),
            ),
        ):
            with pytest.raises(OSError, match="Input/output"):
                move(src, tmp_path / "b.txt")

        assert src.read_text() == "precious"

    def test_failed_tree_fallback_keeps_source(
        self, tmp_path: Path, write_tree, read_tree
    ) -> None:
        a = tmp_path / "a"
        write_tree(a, {"x.txt": "X", "y.txt": "Y"})
        before = read_tree(a)

        with (
            patch("lazycd.fs.ops.os.rename", side_effect=CROSS_DEVICE),
            patch(
                "lazycd.fs.ops.copy_tree",
                side_effect=OSError(errno.ENOSPC, "No space left on device"),
            ),
        ):
            with pytest.raises(OSError):
                move(a, tmp_path / "b")

        assert read_tree(a) == before

    def test_missing_source_raises(self, tmp_path: Path) -> None:
        with pytest.raises(FileNotFoundError):
            move(tmp_path / "missing", tmp_path / "dst")


class TestRemovePath:
    def test_removes_tree(self, tmp_path: Path, write_tree) -> None:
        write_tree(tmp_path / "d", {"a/b.txt": "B"})

        remove_path(tmp_path / "d")

        assert not (tmp_path / "d").exists()

    def test_removes_symlink_not_target(self, tmp_path: Path) -> None:
        (tmp_path / "real").mkdir()
        (tmp_path / "real" / "keep.txt").write_text("keep")
        (tmp_path / "link").symlink_to(tmp_path / "real")

        remove_path(tmp_path / "link")

        assert not (tmp_path / "link").is_symlink()
        assert (tmp_path / "real" / "keep.txt").exists()

    def test_missing_path_is_ignored(self, tmp_path: Path) -> None:
        remove_path(tmp_path / "missing")


class TestDeleteToTrash:
    def test_moves_item_into_job_trash(self, tmp_path: Path) -> None:
        src = tmp_path / "a" / "y.txt"
        src.parent.mkdir()
        src.write_text("bye")
        trash_root = tmp_path / "trash"

        trash_path = delete_to_trash(src, "job-1", trash_root)

        assert trash_path == trash_root / "job-1" / "y.txt"
        assert trash_path.read_text() == "bye"
        assert not src.exists()

    def test_same_basename_collision_is_detected(self, tmp_path: Path) -> None:
        first = tmp_path / "one" / "notes.txt"
        second = tmp_path / "two" / "notes.txt"
        for path, text in [(first, "first"), (second, "second")]:
            path.parent.mkdir()
            path.write_text(text)
        trash_root = tmp_path / "trash"

        trash_path = delete_to_trash(first, "job-1", trash_root)
        with pytest.raises(TrashCollision):
            delete_to_trash(second, "job-1", trash_root)

        assert trash_path.read_text() == "first"
        assert second.read_text() == "second"

    def test_different_jobs_do_not_collide(self, tmp_path: Path) -> None:
        trash_root = tmp_path / "trash"
        for job_id in ["job-1", "job-2"]:
            src = tmp_path / "y.txt"
            src.write_text(job_id)
            delete_to_trash(src, job_id, trash_root)

        assert (trash_root / "job-1" / "y.txt").read_text() == "job-1"
        assert (trash_root / "job-2" / "y.txt").read_text() == "job-2"

    def test_trash_inside_source_is_refused(self, tmp_path: Path, write_tree) -> None:
        home = tmp_path / "home"
        write_tree(home, {"notes.txt": "keep"})
        trash_root = home / ".config" / "lazycd" / "trash"

        with pytest.raises(InvalidPath, match="inside"):
            delete_to_trash(home, "job-1", trash_root)

        assert (home / "notes.txt").read_text() == "keep"
        assert not trash_root.exists()


class TestMakeBackup:
    def test_relocates_existing_destination(self, tmp_path: Path) -> None:
        dst = tmp_path / "x.txt"
        dst.write_text("old")

        backup = make_backup(dst, "job-1", tmp_path / "backups")

        assert not dst.exists()
        assert backup.read_text() == "old"
        assert backup.parent == tmp_path / "backups" / "job-1"


def _umask() -> int:
    current = os.umask(0)
    os.umask(current)
    return current
