"""
CLI entry point using Typer.

Provides commands for building and running a workout:
- parse: Show how a parameter string is understood
- add / edit / remove / list: Manage exercises
- block-add / block-edit / block-remove / group / ungroup: Manage blocks
- move / move-in-block / reorder: Change the order
- progression: Per-round values inside a block
- steps / run / summary: Expand and walk through the session
- export / import / clear: Workout files
"""

import logging
from typing import Annotated

import typer
from rich.logging import RichHandler

from . import views
from .app import app

# Register commands on the shared app
from .commands import blocks, data, exercises, session  # noqa: F401


@app.callback()
def main_callback(
    verbose: Annotated[
        bool,
        typer.Option("--verbose", "-v", help="Show debug logging"),
    ] = False,
) -> None:
    """
    Workout builder: parse exercise notation, group supersets and circuits, run the session.
    """
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=views.console, show_path=False)],
        force=True,
    )


if __name__ == "__main__":
    app()
