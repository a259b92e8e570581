"""Persisted shelf and target-directory state.

The state file keeps what the user staged between runs: the shelf items,
the chosen target directory and the last browsed directory.
"""

import uuid
from datetime import UTC, datetime
from enum import Enum
from pathlib import Path
from typing import Literal

from pydantic import BaseModel, Field, ValidationError, field_serializer

from lazycd.core.errors import SerializationError


class OpMode(str, Enum):
    """Per-item operation used by a put."""

    COPY = "copy"
    MOVE = "move"


class ShelfItem(BaseModel):
    """A path staged on the shelf.

    Attributes:
        id: Stable identifier of the shelf entry
        path: Absolute path of the staged item
        kind: Whether the item is a file or a directory
        mode: Copy or move when put to the target
        added_at: When the item was staged
    """

    id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    path: Path
    kind: Literal["file", "dir"] = "file"
    mode: OpMode = OpMode.COPY
    added_at: datetime = Field(default_factory=lambda: datetime.now(UTC))

    @field_serializer("path")
    def serialize_path(self, path: Path) -> str:
        """Serialize Path to string for JSON."""
        return str(path)

    @classmethod
    def from_path(cls, path: Path, mode: OpMode = OpMode.COPY) -> "ShelfItem":
        """Stage an existing path, recording whether it is a directory."""
        return cls(path=path, kind="dir" if path.is_dir() else "file", mode=mode)


class State(BaseModel):
    """Everything lazycd remembers between runs."""

    last_dir: Path | None = None
    target_dir: Path | None = None
    shelf_items: list[ShelfItem] = Field(default_factory=list)

    @field_serializer("last_dir", "target_dir")
    def serialize_dirs(self, path: Path | None) -> str | None:
        return str(path) if path is not None else None

    def find(self, path: Path) -> ShelfItem | None:
        for item in self.shelf_items:
            if item.path == path:
                return item
        return None

    def add(self, item: ShelfItem) -> bool:
        """Add an item unless its path is already staged.

        Returns:
            True if the item was added
        """
        if self.find(item.path) is not None:
            return False
        self.shelf_items.append(item)
        return True

    def remove(self, paths: list[Path]) -> int:
        """Remove staged paths and return how many were removed."""
        wanted = set(paths)
        before = len(self.shelf_items)
        self.shelf_items = [i for i in self.shelf_items if i.path not in wanted]
        return before - len(self.shelf_items)

    def set_mode(self, paths: list[Path], mode: OpMode) -> int:
        """Change the operation mode of staged paths; returns the count."""
        wanted = set(paths)
        changed = 0
        for item in self.shelf_items:
            if item.path in wanted:
                item.mode = mode
                changed += 1
        return changed


def load_state(path: Path) -> State:
    """Load the state file, or a fresh state if there is none.

    Raises:
        SerializationError: If the file exists but cannot be parsed
    """
    try:
        data = path.read_bytes()
    except FileNotFoundError:
        return State()

    try:
        return State.model_validate_json(data)
    except ValidationError as e:
        raise SerializationError(str(e), path=path) from e


def save_state(state: State, path: Path) -> None:
    """Write the state file, creating its directory if needed."""
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(state.model_dump_json(indent=2), encoding="utf-8")
