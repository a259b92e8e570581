"""Job persistence and undo.

The JobManager creates jobs, stores one JSON file per job and reverses a
job by replaying its items backwards through the filesystem primitives.
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import structlog

from lazycd.core.constants import JOB_FILE_SUFFIX
from lazycd.core.errors import JobNotFound, LazycdError, SerializationError
from lazycd.fs.ops import move, remove_path
from lazycd.jobs.schemas import ItemStatus, Job, JobItem, JobKind, OpKind


@dataclass
class UndoFailure:
    """An item whose undo step failed."""

    item: JobItem
    error: Exception


@dataclass
class UndoReport:
    """Summary of an undo run.

    Attributes:
        job_id: Job that was undone
        restored: Items whose undo steps all succeeded
        failures: Items with at least one failed undo step
        skipped: Items ignored because they were not performed (status != ok)
        record_removed: Whether the job file was deleted by this run
    """

    job_id: str
    restored: list[JobItem] = field(default_factory=list)
    failures: list[UndoFailure] = field(default_factory=list)
    skipped: int = 0
    record_removed: bool = False

    @property
    def ok(self) -> bool:
        return not self.failures


class JobManager:
    """Creates, persists, lists and undoes jobs."""

    def __init__(self, jobs_dir: Path, logger: Any = None) -> None:
        """Initialize the job manager.

        Args:
            jobs_dir: Directory holding ``<id>.json`` job records
            logger: Optional structlog logger instance
        """
        self.jobs_dir = Path(jobs_dir)
        self._logger = logger or structlog.get_logger(__name__)

    def create_job(self, kind: JobKind) -> Job:
        """Allocate an empty job with a fresh id and timestamp. No I/O."""
        return Job(type=JobKind(kind))

    def job_path(self, job_id: str) -> Path:
        return self.jobs_dir / f"{job_id}{JOB_FILE_SUFFIX}"

    def save_job(self, job: Job) -> Path:
        """Write the job record, replacing any existing file of the same id.

        Returns:
            Path of the written record

        Raises:
            SerializationError: If the job cannot be encoded
            OSError: If the record cannot be written
        """
        payload = job.to_json()
        self.jobs_dir.mkdir(parents=True, exist_ok=True)

        path = self.job_path(job.id)
        path.write_text(payload, encoding="utf-8")

        self._logger.info(
            "job.saved",
            job_id=job.id,
            job_type=job.type.value,
            items=len(job.items),
            path=str(path),
        )
        return path

    def load_job(self, job_id: str) -> Job:
        """Read a single job record.

        Raises:
            JobNotFound: If no record exists for ``job_id``
            SerializationError: If the record is corrupt
        """
        path = self.job_path(job_id)
        try:
            data = path.read_bytes()
        except FileNotFoundError as e:
            raise JobNotFound(job_id) from e
        return Job.from_json(data, path=path)

    def recent_jobs(self, n: int) -> list[Job]:
        """Return up to ``n`` jobs, newest first.

        Files that cannot be read or parsed are skipped so one corrupt
        record never hides the others.
        """
        if n <= 0 or not self.jobs_dir.is_dir():
            return []

        jobs: list[Job] = []
        for path in self.jobs_dir.iterdir():
            if path.suffix != JOB_FILE_SUFFIX or not path.is_file():
                continue
            try:
                jobs.append(Job.from_json(path.read_bytes(), path=path))
            except (OSError, SerializationError) as e:
                self._logger.debug("job.unreadable", path=str(path), error=str(e))

        jobs.sort(key=lambda job: job.created_at, reverse=True)
        return jobs[:n]

    def delete_job(self, job_id: str) -> None:
        """Remove a job record.

        Raises:
            JobNotFound: If no record exists for ``job_id``
        """
        try:
            self.job_path(job_id).unlink()
        except FileNotFoundError as e:
            raise JobNotFound(job_id) from e

    def undo(self, job: Job) -> UndoReport:
        """Reverse a job, newest item first, then delete its record.

        Undo is best effort: a failing item is logged and reported, and the
        walk continues with the remaining items. The record is removed even
        when some items failed, so the same job can never be undone twice.
        """
        bound_logger = self._logger.bind(job_id=job.id, job_type=job.type.value)
        report = UndoReport(job_id=job.id)

        for item in reversed(job.items):
            if item.status is not ItemStatus.OK:
                report.skipped += 1
                continue

            errors = self._undo_item(item)
            if errors:
                for error in errors:
                    report.failures.append(UndoFailure(item=item, error=error))
                    bound_logger.warning(
                        "job.undo.item_failed",
                        src=str(item.src),
                        op=item.op.value,
                        error=str(error),
                    )
            else:
                report.restored.append(item)

        try:
            self.delete_job(job.id)
            report.record_removed = True
        except JobNotFound:
            bound_logger.warning("job.undo.record_missing")
        except OSError as e:
            bound_logger.error("job.undo.record_not_removed", error=str(e))

        bound_logger.info(
            "job.undo.summary",
            restored=len(report.restored),
            failed=len(report.failures),
            skipped=report.skipped,
        )
        return report

    def undo_last(self) -> UndoReport | None:
        """Undo the most recent job, if there is one."""
        jobs = self.recent_jobs(1)
        if not jobs:
            return None
        return self.undo(jobs[0])

    def _undo_item(self, item: JobItem) -> list[Exception]:
        """Run the undo steps for one item and collect their failures."""
        errors: list[Exception] = []

        try:
            if item.op is OpKind.COPY:
                if item.created_path is not None:
                    remove_path(item.created_path)
            elif item.op is OpKind.MOVE:
                if item.created_path is not None:
                    move(item.created_path, item.src)
            elif item.op is OpKind.DELETE:
                if item.trash_path is not None:
                    move(item.trash_path, item.src)
        except (OSError, LazycdError) as e:
            errors.append(e)

        # Restore a destination displaced by the overwrite policy
        if item.backup_path is not None and item.dst is not None:
            try:
                remove_path(item.dst)
                move(item.backup_path, item.dst)
            except (OSError, LazycdError) as e:
                errors.append(e)

        return errors
