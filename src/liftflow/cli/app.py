"""Shared Typer app object, shared option types, and store utilities."""

from pathlib import Path
from typing import Annotated, Optional

import typer

from ..core.engine.config_loader import Settings, get_default_store_path, load_settings
from ..core.workspace import Workspace
from ..io.workout_store import LoadError, WorkoutStore
from . import views

# Shared --store option type used across all commands
StoreOption = Annotated[
    Optional[Path],
    typer.Option("--store", "-s", help="Path to the workout JSON file"),
]

app = typer.Typer(
    name="liftflow",
    help="Workout builder: parse exercise notation, group supersets and circuits, run the session.",
    no_args_is_help=True,
)


def get_settings() -> Settings:
    return load_settings()


def get_store(store_path: Path | None, settings: Settings | None = None) -> WorkoutStore:
    """Get workout store from path or the default location."""
    if store_path is None:
        store_path = get_default_store_path(settings or get_settings())
    return WorkoutStore(store_path)


def load_workspace(store: WorkoutStore) -> Workspace:
    """
    Open the stored workout for editing.

    An unreadable file is reported and treated as an empty workout.
    """
    try:
        state = store.load()
    except LoadError as e:
        views.print_warning(f"{e}. Starting with an empty workout.")
        return Workspace()
    return Workspace.from_state(state)


def save_workspace(store: WorkoutStore, workspace: Workspace) -> None:
    store.save(workspace.snapshot())


def _resolve(ids: list[str], ref: str, label: str) -> str:
    if ref in ids:
        return ref
    matches = [i for i in ids if i.startswith(ref)]
    if len(matches) == 1:
        return matches[0]
    if not matches:
        views.print_error(f"No {label} with id '{ref}'")
    else:
        views.print_error(f"Ambiguous {label} id '{ref}' ({len(matches)} matches)")
    raise typer.Exit(1)


def resolve_exercise_id(workspace: Workspace, ref: str) -> str:
    """Full exercise id from a full id or a unique prefix; exits with an error otherwise."""
    return _resolve([ex.id for ex in workspace.exercises], ref, "exercise")


def resolve_block_id(workspace: Workspace, ref: str) -> str:
    """Full block id from a full id or a unique prefix; exits with an error otherwise."""
    return _resolve([b.id for b in workspace.blocks], ref, "block")
