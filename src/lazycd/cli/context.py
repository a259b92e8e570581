"""Shared state for CLI commands."""

from __future__ import annotations

import importlib
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:  # pragma: no cover - typing only
    import typer
else:  # pragma: no cover - runtime fallback for typing
    typer = importlib.import_module("typer")

from rich.console import Console
from rich.markup import escape

from lazycd.config import LazycdPaths
from lazycd.core.errors import SerializationError
from lazycd.jobs.executor import ShelfExecutor
from lazycd.jobs.manager import JobManager
from lazycd.jobs.schemas import ItemStatus, JobItem
from lazycd.store.state import State, load_state, save_state


@dataclass
class CliContext:
    """Resolved paths and collaborators for one CLI invocation."""

    paths: LazycdPaths
    console: Console = field(default_factory=lambda: Console(soft_wrap=True))
    err_console: Console = field(
        default_factory=lambda: Console(stderr=True, soft_wrap=True)
    )

    def manager(self) -> JobManager:
        return JobManager(self.paths.jobs_dir)

    def executor(self) -> ShelfExecutor:
        return ShelfExecutor(
            self.manager(),
            trash_root=self.paths.trash_dir,
            backup_root=self.paths.backups_dir,
        )

    def load_state(self) -> State:
        try:
            return load_state(self.paths.state_path)
        except SerializationError as exc:
            self.fail(str(exc))
            raise typer.Exit(code=1) from exc

    def save_state(self, state: State) -> None:
        save_state(state, self.paths.state_path)

    def fail(self, message: str) -> None:
        self.err_console.print(f"[red]{escape(message)}[/red]")


def get_context(ctx: Any) -> CliContext:
    """Return the CliContext stored by the root callback."""
    obj = ctx.find_object(CliContext)
    if obj is None:
        obj = CliContext(paths=LazycdPaths.from_root().ensure())
        ctx.obj = obj
    return obj


def show_item(console: Console, item: JobItem) -> None:
    """Print one job item with a coloured status."""
    src = escape(str(item.src))
    target = item.dst or item.trash_path
    arrow = f" → {escape(str(target))}" if target else ""

    if item.status is ItemStatus.OK:
        console.print(f"[green]OK[/green] {item.op.value} {src}{arrow}")
    elif item.status is ItemStatus.SKIPPED:
        console.print(f"[yellow]SKIPPED[/yellow] {item.op.value} {src}{arrow}")
    else:
        console.print(
            f"[red]ERROR[/red] {item.op.value} {src}{arrow} "
            f"({escape(item.error or '')})"
        )
