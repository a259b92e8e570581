"""CLI commands for managing the shelf and the target directory."""

from __future__ import annotations

import importlib
from pathlib import Path
from typing import TYPE_CHECKING, Annotated, Any

if TYPE_CHECKING:  # pragma: no cover - typing only
    import typer
    from typer import Typer as TyperType
else:  # pragma: no cover - runtime fallback for typing
    typer = importlib.import_module("typer")
    TyperType = Any

from rich.markup import escape

from lazycd.cli.context import get_context
from lazycd.core.errors import LazycdError
from lazycd.fs.paths import resolve_path
from lazycd.store.state import OpMode, ShelfItem

app: TyperType = typer.Typer(help="Stage files and directories on the shelf.")

PathsArgument = Annotated[
    list[str],
    typer.Argument(help="Paths to act on; '~' and relative paths are accepted."),
]
MoveFlag = Annotated[
    bool,
    typer.Option("--move/--copy", help="Operation used when the item is put."),
]


def _resolve_all(paths: list[str]) -> list[Path]:
    return [resolve_path(p) for p in paths]


def add(ctx: typer.Context, paths: PathsArgument, move: MoveFlag = False) -> None:
    """Stage paths on the shelf."""

    cli = get_context(ctx)
    state = cli.load_state()
    mode = OpMode.MOVE if move else OpMode.COPY

    try:
        resolved = _resolve_all(paths)
    except LazycdError as exc:
        cli.fail(str(exc))
        raise typer.Exit(code=1) from exc

    added = 0
    for path in resolved:
        if not path.exists() and not path.is_symlink():
            cli.fail(f"No such file or directory: {path}")
            continue
        if state.add(ShelfItem.from_path(path, mode=mode)):
            added += 1
        else:
            cli.console.print(
                f"[yellow]Already on shelf:[/yellow] {escape(str(path))}"
            )

    cli.save_state(state)
    cli.console.print(f"Shelf: {added} added, {len(state.shelf_items)} staged")


def list_items(ctx: typer.Context) -> None:
    """Show the staged items."""

    cli = get_context(ctx)
    state = cli.load_state()

    if not state.shelf_items:
        cli.console.print("Shelf is empty")
        return

    for item in state.shelf_items:
        marker = "/" if item.kind == "dir" else ""
        cli.console.print(f"{item.mode.value:<4} {escape(str(item.path))}{marker}")

    if state.target_dir is not None:
        cli.console.print(f"Target: {escape(str(state.target_dir))}")


def remove(ctx: typer.Context, paths: PathsArgument) -> None:
    """Unstage paths without touching the filesystem."""

    cli = get_context(ctx)
    state = cli.load_state()
    removed = state.remove(_resolve_all(paths))
    cli.save_state(state)
    cli.console.print(f"Shelf: {removed} removed, {len(state.shelf_items)} staged")


def clear(ctx: typer.Context) -> None:
    """Unstage everything."""

    cli = get_context(ctx)
    state = cli.load_state()
    state.shelf_items = []
    cli.save_state(state)
    cli.console.print("Shelf cleared")


def set_mode(
    ctx: typer.Context, paths: PathsArgument, move: MoveFlag = False
) -> None:
    """Switch staged paths between copy and move."""

    cli = get_context(ctx)
    state = cli.load_state()
    mode = OpMode.MOVE if move else OpMode.COPY
    changed = state.set_mode(_resolve_all(paths), mode)
    cli.save_state(state)
    cli.console.print(f"Shelf: {changed} set to {mode.value}")


def target(
    ctx: typer.Context,
    directory: Annotated[
        str | None, typer.Argument(help="New target directory.")
    ] = None,
) -> None:
    """Show or set the directory items are put into."""

    cli = get_context(ctx)
    state = cli.load_state()

    if directory is None:
        if state.target_dir is None:
            cli.console.print("No target directory set")
        else:
            cli.console.print(f"Target: {escape(str(state.target_dir))}")
        return

    try:
        resolved = resolve_path(directory)
    except LazycdError as exc:
        cli.fail(str(exc))
        raise typer.Exit(code=1) from exc

    if not resolved.is_dir():
        cli.fail(f"Not a directory: {resolved}")
        raise typer.Exit(code=1)

    state.target_dir = resolved
    cli.save_state(state)
    cli.console.print(f"Target: {escape(str(resolved))}")


app.command("add")(add)
app.command("list")(list_items)
app.command("remove")(remove)
app.command("clear")(clear)
app.command("mode")(set_mode)
