"""Custom exceptions for lazycd.

This module defines the typed exceptions raised by the file-operations
engine. Plain filesystem failures (stat, read, write, create, remove) are
not wrapped: they surface as the builtin ``OSError`` family.
"""

from pathlib import Path
from typing import Any


class LazycdError(Exception):
    """Base exception for all lazycd errors.

    All custom exceptions inherit from this base class so callers can
    catch engine failures broadly when needed.
    """

    code = "lazycd_error"

    def to_dict(self) -> dict[str, Any]:
        """Convert exception to dictionary for status output.

        Returns:
            Dictionary with the error code and message
        """
        return {"error": self.code, "message": str(self)}


class InvalidPath(LazycdError, ValueError):
    """Raised when a user-facing path cannot be resolved.

    Attributes:
        path: The path as given by the caller
        reason: Human-readable reason
    """

    code = "invalid_path"

    def __init__(self, path: str | Path, reason: str) -> None:
        """Initialize InvalidPath exception.

        Args:
            path: Path as given by the caller
            reason: Why it was rejected
        """
        self.path = str(path)
        self.reason = reason
        super().__init__(f"Invalid path '{path}': {reason}")

    def to_dict(self) -> dict[str, Any]:
        """Convert exception to dictionary for status output."""
        return {"error": self.code, "path": self.path, "reason": self.reason}

    def __repr__(self) -> str:
        """Return repr string for debugging."""
        return f"InvalidPath(path={self.path!r}, reason={self.reason!r})"


class NotRegularFile(LazycdError):
    """Raised when copy_file is given something other than a file or symlink."""

    code = "not_regular_file"

    def __init__(self, path: str | Path) -> None:
        """Initialize NotRegularFile exception.

        Args:
            path: The offending source
        """
        self.path = str(path)
        super().__init__(f"{path} is not a regular file")

    def __repr__(self) -> str:
        """Return repr string for debugging."""
        return f"NotRegularFile(path={self.path!r})"


class NotADirectory(LazycdError, NotADirectoryError):
    """Raised when copy_tree is given a source that is not a directory."""

    code = "not_a_directory"

    def __init__(self, path: str | Path) -> None:
        """Initialize NotADirectory exception.

        Args:
            path: The offending source
        """
        self.path = str(path)
        super().__init__(f"source {path} is not a directory")

    def __str__(self) -> str:
        """Return the message without the OSError errno prefix."""
        return f"source {self.path} is not a directory"

    def __repr__(self) -> str:
        """Return repr string for debugging."""
        return f"NotADirectory(path={self.path!r})"


class DirectoryOverwriteDenied(LazycdError, IsADirectoryError):
    """Raised when the overwrite policy meets an existing directory.

    Replacing a directory would need a recursive delete, which the
    overwrite policy refuses to do.

    Attributes:
        path: The existing destination directory
    """

    code = "directory_overwrite_denied"

    def __init__(self, path: str | Path) -> None:
        """Initialize DirectoryOverwriteDenied exception.

        Args:
            path: Existing destination directory
        """
        self.path = str(path)
        super().__init__(f"cannot overwrite directory '{path}'")

    def __str__(self) -> str:
        """Return the message without the OSError errno prefix."""
        return f"cannot overwrite directory '{self.path}'"

    def __repr__(self) -> str:
        """Return repr string for debugging."""
        return f"DirectoryOverwriteDenied(path={self.path!r})"


class NoFreeName(LazycdError):
    """Raised when the rename policy exhausts its candidate names.

    Attributes:
        path: The colliding destination
        attempts: Number of candidates tried
    """

    code = "no_free_name"

    def __init__(self, path: str | Path, attempts: int) -> None:
        """Initialize NoFreeName exception.

        Args:
            path: Colliding destination
            attempts: Number of candidate names tried
        """
        self.path = str(path)
        self.attempts = attempts
        super().__init__(
            f"failed to find free name for {path} after {attempts} attempts"
        )

    def to_dict(self) -> dict[str, Any]:
        """Convert exception to dictionary for status output."""
        return {"error": self.code, "path": self.path, "attempts": self.attempts}

    def __repr__(self) -> str:
        """Return repr string for debugging."""
        return f"NoFreeName(path={self.path!r}, attempts={self.attempts})"


class TrashCollision(LazycdError, FileExistsError):
    """Raised when a trash entry for the same job and basename already exists.

    Attributes:
        src: The item being deleted
        trash_path: The occupied trash location
    """

    code = "trash_collision"

    def __init__(self, src: str | Path, trash_path: str | Path) -> None:
        """Initialize TrashCollision exception.

        Args:
            src: Item being deleted
            trash_path: Occupied trash location
        """
        self.src = str(src)
        self.trash_path = str(trash_path)
        super().__init__(
            f"trash entry {trash_path} already exists, refusing to delete {src}"
        )

    def __str__(self) -> str:
        """Return the message without the OSError errno prefix."""
        return (
            f"trash entry {self.trash_path} already exists, "
            f"refusing to delete {self.src}"
        )

    def to_dict(self) -> dict[str, Any]:
        """Convert exception to dictionary for status output."""
        return {"error": self.code, "src": self.src, "trash_path": self.trash_path}

    def __repr__(self) -> str:
        """Return repr string for debugging."""
        return f"TrashCollision(src={self.src!r}, trash_path={self.trash_path!r})"


class SerializationError(LazycdError):
    """Raised when a job or state record cannot be encoded or decoded.

    Attributes:
        path: File involved, if any
        reason: Underlying parser/encoder message
    """

    code = "serialization_error"

    def __init__(self, reason: str, path: str | Path | None = None) -> None:
        """Initialize SerializationError exception.

        Args:
            reason: Parser or encoder message
            path: File involved (optional)
        """
        self.reason = reason
        self.path = str(path) if path is not None else None

        message = "Serialization failed"
        if self.path:
            message += f" for {self.path}"
        message += f": {reason}"

        super().__init__(message)

    def to_dict(self) -> dict[str, Any]:
        """Convert exception to dictionary for status output."""
        result: dict[str, Any] = {"error": self.code, "reason": self.reason}
        if self.path is not None:
            result["path"] = self.path
        return result

    def __repr__(self) -> str:
        """Return repr string for debugging."""
        return f"SerializationError(reason={self.reason!r}, path={self.path!r})"


class JobNotFound(LazycdError, LookupError):
    """Raised when a job record does not exist in the jobs directory."""

    code = "job_not_found"

    def __init__(self, job_id: str) -> None:
        """Initialize JobNotFound exception.

        Args:
            job_id: Identifier that was looked up
        """
        self.job_id = job_id
        super().__init__(f"Job '{job_id}' not found")

    def __str__(self) -> str:
        """Return the message without the OSError errno prefix."""
        return f"Job '{self.job_id}' not found"

    def to_dict(self) -> dict[str, Any]:
        """Convert exception to dictionary for status output."""
        return {"error": self.code, "job_id": self.job_id}

    def __repr__(self) -> str:
        """Return repr string for debugging."""
        return f"JobNotFound(job_id={self.job_id!r})"
