"""CLI entrypoints for lazycd."""

from lazycd.cli.main import app, run_cli
from lazycd.cli.shelf import app as shelf_app

__all__ = ["app", "run_cli", "shelf_app"]
