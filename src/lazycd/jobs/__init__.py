"""Job log, persistence and undo.

A job records one batch of copy/move/delete operations with enough detail
to reverse each item; the manager stores jobs and replays them backwards.
"""

from lazycd.jobs.executor import (
    ExecutionResult,
    ItemOutcome,
    ShelfExecutor,
    remaining_shelf,
)
from lazycd.jobs.manager import JobManager, UndoReport
from lazycd.jobs.schemas import ItemStatus, Job, JobItem, JobKind, OpKind

__all__ = [
    "ExecutionResult",
    "ItemOutcome",
    "ItemStatus",
    "Job",
    "JobItem",
    "JobKind",
    "JobManager",
    "OpKind",
    "ShelfExecutor",
    "UndoReport",
    "remaining_shelf",
]
