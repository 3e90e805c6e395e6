"""Data commands: export, import, clear."""

from pathlib import Path
from typing import Annotated, Optional

import typer

from ...core.workspace import Workspace
from ...io.workout_store import LoadError, WorkoutStore
from .. import views
from ..app import StoreOption, app, get_store, load_workspace, save_workspace


@app.command()
def export(
    directory: Annotated[
        Optional[Path],
        typer.Argument(help="Target directory (default: current directory)"),
    ] = None,
    store_path: StoreOption = None,
) -> None:
    """
    Write the workout to workout-YYYYMMDD-HHMM.json.
    """
    store = get_store(store_path)
    workspace = load_workspace(store)
    target = store.export(workspace.snapshot(), directory or Path.cwd())
    views.print_success(f"Exported to {target}")


@app.command("import")
def import_workout(
    file: Annotated[Path, typer.Argument(help="Exported workout JSON file")],
    force: Annotated[
        bool,
        typer.Option("--force", "-f", help="Skip confirmation prompt"),
    ] = False,
    store_path: StoreOption = None,
) -> None:
    """
    Replace the current workout with an exported one.
    """
    try:
        state = WorkoutStore.import_file(file)
    except (FileNotFoundError, LoadError) as e:
        views.print_error(str(e))
        raise typer.Exit(1)

    store = get_store(store_path)
    if store.exists() and not force and not views.confirm_action("Replace the current workout?"):
        views.print_info("Cancelled.")
        raise typer.Exit(0)

    workspace = Workspace.from_state(state)
    save_workspace(store, workspace)
    views.print_success(
        f"Imported {len(workspace.exercises)} exercise(s) and {len(workspace.blocks)} block(s)"
    )


@app.command()
def clear(
    force: Annotated[
        bool,
        typer.Option("--force", "-f", help="Skip confirmation prompt"),
    ] = False,
    store_path: StoreOption = None,
) -> None:
    """
    Remove every exercise and block.
    """
    store = get_store(store_path)
    if not force and not views.confirm_action("Clear the whole workout?"):
        views.print_info("Cancelled.")
        raise typer.Exit(0)

    store.clear()
    views.print_success("Workout cleared")
