"""Shelf execution: turn staged items into put and delete jobs.

The executor is the caller side of the engine. For each staged item it
asks the conflict resolver for a destination, runs a primitive operation,
records the outcome as a JobItem and saves the job once at the end.
"""

from collections.abc import Sequence
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import structlog

from lazycd.core.errors import InvalidPath, LazycdError
from lazycd.fs.conflict import (
    ConflictPolicy,
    destination_exists,
    resolve_conflict,
)
from lazycd.fs.ops import (
    copy_file,
    copy_tree,
    delete_to_trash,
    make_backup,
    move,
    remove_path,
)
from lazycd.jobs.manager import JobManager
from lazycd.jobs.schemas import ItemStatus, Job, JobItem, JobKind, OpKind
from lazycd.store.state import OpMode, ShelfItem

# Errors an item can fail with; anything else is a bug and propagates
ItemError = (OSError, LazycdError)


@dataclass
class ItemOutcome:
    """Result of one staged item.

    Attributes:
        shelf_item: The staged item that was processed
        item: The recorded job item
        exception: The structured error behind an ``error`` item
    """

    shelf_item: ShelfItem
    item: JobItem
    exception: Exception | None = None


@dataclass
class ExecutionResult:
    """Summary of a put or delete run.

    Attributes:
        job: The saved job
        outcomes: One outcome per staged item, in execution order
        record_path: Where the job record was written
    """

    job: Job
    outcomes: list[ItemOutcome] = field(default_factory=list)
    record_path: Path | None = None

    def _count(self, status: ItemStatus) -> int:
        return sum(1 for o in self.outcomes if o.item.status is status)

    @property
    def ok_count(self) -> int:
        return self._count(ItemStatus.OK)

    @property
    def skipped_count(self) -> int:
        return self._count(ItemStatus.SKIPPED)

    @property
    def error_count(self) -> int:
        return self._count(ItemStatus.ERROR)


class ShelfExecutor:
    """Runs put and delete jobs over shelf items."""

    def __init__(
        self,
        manager: JobManager,
        trash_root: Path,
        backup_root: Path,
        logger: Any = None,
    ) -> None:
        """Initialize the executor.

        Args:
            manager: Job manager used to create and save jobs
            trash_root: Root of the per-job trash area
            backup_root: Root of the per-job backups of overwritten files
            logger: Optional structlog logger instance
        """
        self.manager = manager
        self.trash_root = Path(trash_root)
        self.backup_root = Path(backup_root)
        self._logger = logger or structlog.get_logger(__name__)

    def put(
        self,
        items: Sequence[ShelfItem],
        target_dir: Path,
        policy: ConflictPolicy = ConflictPolicy.SKIP,
    ) -> ExecutionResult | None:
        """Copy or move each staged item into ``target_dir``.

        Args:
            items: Staged items, processed in order
            target_dir: Existing directory receiving the items
            policy: Conflict policy applied to every item

        Returns:
            The saved job and per-item outcomes, or None if there was
            nothing to do

        Raises:
            InvalidPath: If ``target_dir`` is not an existing directory
        """
        if not items:
            return None

        target_dir = Path(target_dir)
        if not target_dir.is_dir():
            raise InvalidPath(target_dir, "target is not an existing directory")

        policy = ConflictPolicy(policy)
        job = self.manager.create_job(JobKind.PUT)
        result = ExecutionResult(job=job)
        bound_logger = self._logger.bind(
            job_id=job.id, job_type=job.type.value, policy=policy.value
        )

        for shelf_item in items:
            outcome = self._put_one(job, shelf_item, target_dir, policy)
            job.add_item(outcome.item)
            result.outcomes.append(outcome)
            bound_logger.info(
                "put.item",
                src=str(outcome.item.src),
                dst=str(outcome.item.dst) if outcome.item.dst else None,
                op=outcome.item.op.value,
                status=outcome.item.status.value,
                error=outcome.item.error,
            )

        result.record_path = self.manager.save_job(job)
        return result

    def delete(self, items: Sequence[ShelfItem]) -> ExecutionResult | None:
        """Move each staged item to the job's trash area.

        Returns:
            The saved job and per-item outcomes, or None if there was
            nothing to do
        """
        if not items:
            return None

        job = self.manager.create_job(JobKind.DELETE)
        result = ExecutionResult(job=job)
        bound_logger = self._logger.bind(job_id=job.id, job_type=job.type.value)

        for shelf_item in items:
            src = shelf_item.path
            try:
                trash_path = delete_to_trash(src, job.id, self.trash_root)
            except ItemError as e:
                outcome = ItemOutcome(
                    shelf_item, JobItem.failed(src, OpKind.DELETE, e), e
                )
            else:
                outcome = ItemOutcome(
                    shelf_item,
                    JobItem(
                        src=src,
                        op=OpKind.DELETE,
                        status=ItemStatus.OK,
                        trash_path=trash_path,
                    ),
                )

            job.add_item(outcome.item)
            result.outcomes.append(outcome)
            bound_logger.info(
                "delete.item",
                src=str(src),
                status=outcome.item.status.value,
                trash_path=str(outcome.item.trash_path)
                if outcome.item.trash_path
                else None,
                error=outcome.item.error,
            )

        result.record_path = self.manager.save_job(job)
        return result

    def _put_one(
        self,
        job: Job,
        shelf_item: ShelfItem,
        target_dir: Path,
        policy: ConflictPolicy,
    ) -> ItemOutcome:
        src = shelf_item.path
        op = OpKind.MOVE if shelf_item.mode is OpMode.MOVE else OpKind.COPY
        dst = target_dir / src.name

        try:
            final_dst = resolve_conflict(src, dst, policy)
        except ItemError as e:
            return ItemOutcome(shelf_item, JobItem.failed(src, op, e, dst=dst), e)

        if final_dst is None:
            return ItemOutcome(
                shelf_item,
                JobItem(src=src, dst=dst, op=op, status=ItemStatus.SKIPPED),
            )

        if final_dst == src or final_dst.is_relative_to(src):
            exc = InvalidPath(final_dst, f"destination is inside source {src}")
            return ItemOutcome(
                shelf_item, JobItem.failed(src, op, exc, dst=final_dst), exc
            )

        backup_path: Path | None = None
        if policy is ConflictPolicy.OVERWRITE and destination_exists(final_dst):
            try:
                backup_path = make_backup(final_dst, job.id, self.backup_root)
            except ItemError as e:
                return ItemOutcome(
                    shelf_item, JobItem.failed(src, op, e, dst=final_dst), e
                )

        try:
            if op is OpKind.MOVE:
                move(src, final_dst)
            elif shelf_item.kind == "dir":
                copy_tree(src, final_dst)
            else:
                copy_file(src, final_dst)
        except ItemError as e:
            if backup_path is not None:
                self._restore_backup(backup_path, final_dst)
            return ItemOutcome(
                shelf_item, JobItem.failed(src, op, e, dst=final_dst), e
            )

        return ItemOutcome(
            shelf_item,
            JobItem(
                src=src,
                dst=final_dst,
                op=op,
                status=ItemStatus.OK,
                created_path=final_dst,
                backup_path=backup_path,
            ),
        )

    def _restore_backup(self, backup_path: Path, dst: Path) -> None:
        """Put a displaced destination back after a failed overwrite."""
        try:
            remove_path(dst)
            move(backup_path, dst)
        except ItemError as e:
            self._logger.error(
                "put.backup_restore_failed",
                backup_path=str(backup_path),
                dst=str(dst),
                error=str(e),
            )


def remaining_shelf(shelf: Sequence[ShelfItem], job: Job) -> list[ShelfItem]:
    """Return the shelf minus the items this job moved successfully.

    Copied, skipped and failed items stay staged.
    """
    moved = {
        item.src
        for item in job.items
        if item.op is OpKind.MOVE and item.status is ItemStatus.OK
    }
    return [shelf_item for shelf_item in shelf if shelf_item.path not in moved]
