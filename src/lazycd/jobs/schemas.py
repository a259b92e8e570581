"""Pydantic schemas for the job log.

These schemas define the persisted record of a batch of file operations:
- Job: one causal action (a put or a delete) and its items
- JobItem: one reversible unit of work inside a job

All schemas use Pydantic v2. A job file is ``Job.model_dump_json`` with
empty optional fields omitted, so it round-trips exactly.
"""

import re
import uuid
from datetime import UTC, datetime
from enum import Enum
from pathlib import Path
from typing import Any

from pydantic import (
    BaseModel,
    Field,
    ValidationError,
    field_serializer,
    field_validator,
    model_validator,
)

from lazycd.core.errors import SerializationError

# Timestamps written by other tools may carry nanoseconds
_FRACTION_RE = re.compile(r"(\.\d{6})\d+")


class JobKind(str, Enum):
    """Kind of batch a job records."""

    PUT = "put"
    DELETE = "delete"


class OpKind(str, Enum):
    """Operation applied to a single item."""

    COPY = "copy"
    MOVE = "move"
    DELETE = "delete"


class ItemStatus(str, Enum):
    """Outcome of a single item.

    Attributes:
        OK: Operation performed; eligible for undo
        SKIPPED: Not performed because of the conflict policy
        ERROR: Operation failed; ``error`` holds the message
    """

    OK = "ok"
    SKIPPED = "skipped"
    ERROR = "error"


class JobItem(BaseModel):
    """One reversible unit of work.

    Attributes:
        src: Absolute source path
        dst: Absolute destination path (absent for delete)
        op: Operation kind
        status: Outcome, set once when the item is recorded
        error: Error message, present iff status is error
        created_path: Path this item caused to exist (copy/move)
        backup_path: Where an overwritten destination was relocated
        trash_path: Where a deleted original was relocated
    """

    model_config = {"frozen": True}

    src: Path
    dst: Path | None = None
    op: OpKind
    status: ItemStatus
    error: str | None = None
    created_path: Path | None = None
    backup_path: Path | None = None
    trash_path: Path | None = None

    @field_validator(
        "dst", "error", "created_path", "backup_path", "trash_path", mode="before"
    )
    @classmethod
    def empty_as_missing(cls, v: Any) -> Any:
        """Treat empty strings like omitted fields."""
        if v == "":
            return None
        return v

    @model_validator(mode="after")
    def validate_consistency(self) -> "JobItem":
        if (self.status is ItemStatus.ERROR) != bool(self.error):
            raise ValueError("error message must be present iff status is error")
        if self.op is OpKind.DELETE and self.created_path is not None:
            raise ValueError("created_path is not valid for delete items")
        if self.op is not OpKind.DELETE and self.trash_path is not None:
            raise ValueError("trash_path is only valid for delete items")
        return self

    @field_serializer("src", "dst", "created_path", "backup_path", "trash_path")
    def serialize_paths(self, path: Path | None) -> str | None:
        """Serialize Path to string for JSON."""
        return str(path) if path is not None else None

    @classmethod
    def failed(
        cls, src: Path, op: OpKind, exc: BaseException, **fields: Any
    ) -> "JobItem":
        """Build an error item, converting the exception to its message."""
        return cls(
            src=src,
            op=op,
            status=ItemStatus.ERROR,
            error=str(exc) or exc.__class__.__name__,
            **fields,
        )


class Job(BaseModel):
    """An ordered batch of items sharing one causal action.

    Attributes:
        id: Globally unique identifier (uuid4)
        type: Job kind (put or delete)
        created_at: Creation time, timezone-aware
        items: Items in execution order
    """

    id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    type: JobKind
    created_at: datetime = Field(default_factory=lambda: datetime.now(UTC))
    items: list[JobItem] = Field(default_factory=list)

    @field_validator("created_at", mode="before")
    @classmethod
    def trim_fraction(cls, v: Any) -> Any:
        if isinstance(v, str):
            return _FRACTION_RE.sub(r"\1", v)
        return v

    @field_validator("created_at")
    @classmethod
    def ensure_aware(cls, v: datetime) -> datetime:
        """Naive timestamps are taken as UTC so jobs stay comparable."""
        if v.tzinfo is None:
            return v.replace(tzinfo=UTC)
        return v

    def add_item(self, item: JobItem) -> JobItem:
        self.items.append(item)
        return item

    def counts(self) -> dict[str, int]:
        """Number of items per status."""
        result = {status.value: 0 for status in ItemStatus}
        for item in self.items:
            result[item.status.value] += 1
        return result

    def to_json(self) -> str:
        """Encode the job in the job-file format.

        Raises:
            SerializationError: If the job cannot be encoded
        """
        try:
            return self.model_dump_json(indent=2, exclude_none=True)
        except (ValueError, TypeError) as e:
            raise SerializationError(str(e)) from e

    @classmethod
    def from_json(cls, data: str | bytes, path: Path | None = None) -> "Job":
        """Decode a job file.

        Raises:
            SerializationError: If the content is not a valid job record
        """
        try:
            return cls.model_validate_json(data)
        except ValidationError as e:
            raise SerializationError(str(e), path=path) from e
