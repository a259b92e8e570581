"""CLI entry point: put, delete, job history and undo."""

from __future__ import annotations

import importlib
import stat
from collections.abc import Sequence
from pathlib import Path
from typing import TYPE_CHECKING, Annotated, Any

if TYPE_CHECKING:  # pragma: no cover - typing only
    import typer
    from typer import Typer as TyperType
else:  # pragma: no cover - runtime fallback for typing
    typer = importlib.import_module("typer")
    TyperType = Any

from rich.markup import escape

from lazycd.cli.context import CliContext, get_context, show_item
from lazycd.cli.shelf import app as shelf_app
from lazycd.cli.shelf import target
from lazycd.config import LazycdPaths
from lazycd.core.constants import DEFAULT_RECENT_JOBS
from lazycd.core.errors import LazycdError
from lazycd.fs.conflict import ConflictPolicy
from lazycd.fs.listing import list_dir
from lazycd.fs.paths import resolve_path
from lazycd.jobs.executor import ExecutionResult, remaining_shelf
from lazycd.utils.log import configure_logging

app: TyperType = typer.Typer(
    help="Stage files on a shelf, put or delete them in bulk, undo jobs.",
    no_args_is_help=True,
)

ConfigDirOption = Annotated[
    Path | None,
    typer.Option(
        "--config-dir",
        help="Override the config directory (default: $LAZYCD_CONFIG_DIR "
        "or ~/.config/lazycd).",
    ),
]
VerboseFlag = Annotated[
    bool,
    typer.Option("--verbose", "-v", help="Show structured job logs on stderr."),
]
PolicyOption = Annotated[
    ConflictPolicy,
    typer.Option("--policy", help="What to do when a destination exists."),
]
LimitOption = Annotated[
    int,
    typer.Option("--limit", "-n", min=1, help="Number of jobs to show."),
]


def main(
    ctx: typer.Context,
    config_dir: ConfigDirOption = None,
    verbose: VerboseFlag = False,
) -> None:
    """lazycd: a file shelf with undoable copy, move and delete."""

    configure_logging(verbose)
    try:
        paths = LazycdPaths.from_root(config_dir).ensure()
    except (LazycdError, OSError) as exc:
        typer.secho(f"Cannot use config directory: {exc}", err=True, fg="red")
        raise typer.Exit(code=1) from exc
    ctx.obj = CliContext(paths=paths)


def ls(
    ctx: typer.Context,
    path: Annotated[
        str | None,
        typer.Argument(help="Directory to list (default: the last one listed)."),
    ] = None,
) -> None:
    """List a directory, directories first."""

    cli = get_context(ctx)
    state = cli.load_state()
    if path is None:
        path = str(state.last_dir) if state.last_dir is not None else "."
    try:
        directory = resolve_path(path)
        entries = list_dir(directory)
    except (LazycdError, OSError) as exc:
        cli.fail(str(exc))
        raise typer.Exit(code=1) from exc

    for entry in entries:
        if entry.is_dir:
            cli.console.print(f"[bold blue]{escape(entry.name)}/[/bold blue]")
        else:
            cli.console.print(
                f"{stat.filemode(entry.mode)} {entry.size:>10} {escape(entry.name)}"
            )

    state.last_dir = directory
    cli.save_state(state)


def _report(cli: CliContext, result: ExecutionResult) -> None:
    for outcome in result.outcomes:
        show_item(cli.console, outcome.item)
    cli.console.print(
        f"Job {result.job.id}: {result.ok_count} ok, "
        f"{result.skipped_count} skipped, {result.error_count} failed"
    )


def put(ctx: typer.Context, policy: PolicyOption = ConflictPolicy.SKIP) -> None:
    """Copy or move every shelf item into the target directory."""

    cli = get_context(ctx)
    state = cli.load_state()

    if state.target_dir is None:
        cli.fail("No target directory set (use 'lazycd target DIR')")
        raise typer.Exit(code=1)
    if not state.shelf_items:
        cli.console.print("Shelf is empty, nothing to put")
        return

    try:
        result = cli.executor().put(state.shelf_items, state.target_dir, policy)
    except (LazycdError, OSError) as exc:
        cli.fail(str(exc))
        raise typer.Exit(code=1) from exc

    if result is None:
        return

    _report(cli, result)
    state.shelf_items = remaining_shelf(state.shelf_items, result.job)
    cli.save_state(state)


def delete(ctx: typer.Context) -> None:
    """Move every shelf item to the trash."""

    cli = get_context(ctx)
    state = cli.load_state()

    if not state.shelf_items:
        cli.console.print("Shelf is empty, nothing to delete")
        return

    try:
        result = cli.executor().delete(state.shelf_items)
    except (LazycdError, OSError) as exc:
        cli.fail(str(exc))
        raise typer.Exit(code=1) from exc

    if result is None:
        return

    _report(cli, result)
    # Only failed deletes stay staged
    failed = {o.shelf_item.id for o in result.outcomes if o.exception is not None}
    state.shelf_items = [i for i in state.shelf_items if i.id in failed]
    cli.save_state(state)


def jobs(ctx: typer.Context, limit: LimitOption = DEFAULT_RECENT_JOBS) -> None:
    """Show recent jobs, newest first."""

    cli = get_context(ctx)
    recent = cli.manager().recent_jobs(limit)

    if not recent:
        cli.console.print("No jobs recorded")
        return

    for job in recent:
        counts = job.counts()
        cli.console.print(
            f"[bold]{job.id}[/bold] {job.type.value:<6} "
            f"{job.created_at.isoformat(timespec='seconds')} "
            f"ok={counts['ok']} skipped={counts['skipped']} error={counts['error']}"
        )


def undo(
    ctx: typer.Context,
    job_id: Annotated[
        str | None, typer.Argument(help="Job to undo (default: most recent).")
    ] = None,
) -> None:
    """Reverse a job and forget it."""

    cli = get_context(ctx)
    manager = cli.manager()

    try:
        if job_id is None:
            report = manager.undo_last()
        else:
            report = manager.undo(manager.load_job(job_id))
    except LazycdError as exc:
        cli.fail(str(exc))
        raise typer.Exit(code=1) from exc

    if report is None:
        cli.console.print("Nothing to undo")
        return

    for failure in report.failures:
        cli.fail(f"Undo failed for {failure.item.src}: {failure.error}")

    cli.console.print(
        f"Undid job {report.job_id}: {len(report.restored)} restored, "
        f"{len(report.failures)} failed"
    )
    if not report.ok:
        raise typer.Exit(code=1)


def run_cli(args: Sequence[str] | None = None) -> None:
    app(args=args)


app.callback()(main)
app.command("ls")(ls)
app.command("target")(target)
app.command("put")(put)
app.command("delete")(delete)
app.command("jobs")(jobs)
app.command("undo")(undo)
app.add_typer(shelf_app, name="shelf")
