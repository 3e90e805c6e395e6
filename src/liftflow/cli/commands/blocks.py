"""Block and ordering commands: block-add, block-edit, block-remove, group, ungroup, move, reorder."""

from enum import Enum
from typing import Annotated, Optional

import typer

from ...core.config import BLOCK_TYPES, DEFAULT_BLOCK_TYPE
from .. import views
from ..app import (
    StoreOption,
    app,
    get_store,
    load_workspace,
    resolve_block_id,
    resolve_exercise_id,
    save_workspace,
)


class Direction(str, Enum):
    up = "up"
    down = "down"


class ItemType(str, Enum):
    exercise = "exercise"
    block = "block"


def _check_block_type(block_type: str) -> str:
    block_type = block_type.lower()
    if block_type not in BLOCK_TYPES:
        views.print_error(f"Invalid block type '{block_type}'. Must be one of: {', '.join(BLOCK_TYPES)}")
        raise typer.Exit(1)
    return block_type


@app.command("block-add")
def block_add(
    name: Annotated[str, typer.Argument(help="Block name")],
    block_type: Annotated[
        str,
        typer.Option("--type", "-t", help="round | superset | circuit"),
    ] = DEFAULT_BLOCK_TYPE,
    rounds: Annotated[
        Optional[int],
        typer.Option("--rounds", "-r", help="Number of rounds (default 1)"),
    ] = None,
    rest: Annotated[
        Optional[str],
        typer.Option("--rest", help="Rest between exercises, e.g. 30s or 1:00"),
    ] = None,
    store_path: StoreOption = None,
) -> None:
    """
    Create an empty block at the end of the workout.
    """
    name = name.strip()
    if not name:
        views.print_error("Block name must not be empty")
        raise typer.Exit(1)
    block_type = _check_block_type(block_type)

    store = get_store(store_path)
    workspace = load_workspace(store)
    block = workspace.add_block(name, block_type, rounds, rest.strip() if rest else None)
    save_workspace(store, workspace)

    views.print_success(f"Added {block.type} '{block.name}' [{views.short_id(block.id)}]")


@app.command("block-edit")
def block_edit(
    block_ref: Annotated[str, typer.Argument(help="Block id or id prefix")],
    name: Annotated[Optional[str], typer.Option("--name", "-n", help="New name")] = None,
    block_type: Annotated[
        Optional[str],
        typer.Option("--type", "-t", help="round | superset | circuit"),
    ] = None,
    rounds: Annotated[
        Optional[int],
        typer.Option("--rounds", "-r", help="Number of rounds"),
    ] = None,
    rest: Annotated[
        Optional[str],
        typer.Option("--rest", help='Rest between exercises ("" clears it)'),
    ] = None,
    store_path: StoreOption = None,
) -> None:
    """
    Change a block's name, type, rounds or rest.
    """
    changes: dict = {}
    if name is not None:
        if not name.strip():
            views.print_error("Block name must not be empty")
            raise typer.Exit(1)
        changes["name"] = name.strip()
    if block_type is not None:
        changes["type"] = _check_block_type(block_type)
    if rounds is not None:
        changes["rounds"] = rounds
    if rest is not None:
        changes["rest_between_exercises"] = rest.strip() or None
    if not changes:
        views.print_error("Nothing to change: pass --name, --type, --rounds or --rest")
        raise typer.Exit(1)

    store = get_store(store_path)
    workspace = load_workspace(store)
    block_id = resolve_block_id(workspace, block_ref)
    block = workspace.update_block(block_id, **changes)
    save_workspace(store, workspace)

    views.print_success(f"Updated block '{block.name}'")


@app.command("block-remove")
def block_remove(
    block_ref: Annotated[str, typer.Argument(help="Block id or id prefix")],
    store_path: StoreOption = None,
) -> None:
    """
    Delete a block. Its exercises stay in the workout as standalone exercises.
    """
    store = get_store(store_path)
    workspace = load_workspace(store)
    block_id = resolve_block_id(workspace, block_ref)
    name = workspace.get_block(block_id).name

    detached = workspace.remove_block(block_id)
    save_workspace(store, workspace)

    views.print_success(f"Removed block '{name}'")
    if detached:
        views.print_info(f"{len(detached)} exercise(s) moved to the end of the workout")


@app.command()
def group(
    exercise_ref: Annotated[str, typer.Argument(help="Exercise id or id prefix")],
    block_ref: Annotated[str, typer.Argument(help="Block id or id prefix")],
    store_path: StoreOption = None,
) -> None:
    """
    Move an exercise into a block (at the end of the block).
    """
    store = get_store(store_path)
    workspace = load_workspace(store)
    exercise_id = resolve_exercise_id(workspace, exercise_ref)
    block_id = resolve_block_id(workspace, block_ref)

    exercise = workspace.group_exercise(exercise_id, block_id)
    save_workspace(store, workspace)

    views.print_success(f"Grouped {exercise.name} into '{workspace.get_block(block_id).name}'")


@app.command()
def ungroup(
    exercise_ref: Annotated[str, typer.Argument(help="Exercise id or id prefix")],
    store_path: StoreOption = None,
) -> None:
    """
    Take an exercise out of its block (it goes to the end of the workout).
    """
    store = get_store(store_path)
    workspace = load_workspace(store)
    exercise_id = resolve_exercise_id(workspace, exercise_ref)

    if workspace.get_exercise(exercise_id).block_id is None:
        views.print_warning("Exercise is not in a block")
        return
    exercise = workspace.ungroup_exercise(exercise_id)
    save_workspace(store, workspace)

    views.print_success(f"Ungrouped {exercise.name}")


@app.command()
def move(
    item_type: Annotated[ItemType, typer.Argument(help="exercise | block")],
    item_ref: Annotated[str, typer.Argument(help="Id or id prefix")],
    direction: Annotated[Direction, typer.Argument(help="up | down")],
    store_path: StoreOption = None,
) -> None:
    """
    Move a standalone exercise or a block one place up or down.
    """
    store = get_store(store_path)
    workspace = load_workspace(store)
    if item_type == ItemType.block:
        item_id = resolve_block_id(workspace, item_ref)
    else:
        item_id = resolve_exercise_id(workspace, item_ref)
        if workspace.get_exercise(item_id).block_id is not None:
            views.print_error("Exercise is inside a block; use move-in-block")
            raise typer.Exit(1)

    offset = -1 if direction == Direction.up else 1
    if not workspace.move_item(item_type.value, item_id, offset):
        views.print_info(f"Already at the {'top' if offset < 0 else 'bottom'}")
        return
    save_workspace(store, workspace)
    views.print_success(f"Moved {item_type.value} {direction.value}")


@app.command("move-in-block")
def move_in_block(
    exercise_ref: Annotated[str, typer.Argument(help="Exercise id or id prefix")],
    direction: Annotated[Direction, typer.Argument(help="up | down")],
    store_path: StoreOption = None,
) -> None:
    """
    Move an exercise one place up or down inside its block.
    """
    store = get_store(store_path)
    workspace = load_workspace(store)
    exercise_id = resolve_exercise_id(workspace, exercise_ref)
    if workspace.get_exercise(exercise_id).block_id is None:
        views.print_error("Exercise is not in a block; use move")
        raise typer.Exit(1)

    offset = -1 if direction == Direction.up else 1
    if not workspace.move_exercise_in_block(exercise_id, offset):
        views.print_info(f"Already at the {'top' if offset < 0 else 'bottom'} of the block")
        return
    save_workspace(store, workspace)
    views.print_success(f"Moved exercise {direction.value}")


@app.command()
def reorder(
    exercise_refs: Annotated[list[str], typer.Argument(help="Exercise ids in the desired order")],
    block: Annotated[
        Optional[str],
        typer.Option("--block", "-b", help="Reorder inside this block (default: standalone exercises)"),
    ] = None,
    store_path: StoreOption = None,
) -> None:
    """
    Set the order of exercises in a block (or of the standalone exercises).

    Exercises not listed keep their relative order after the listed ones.
    """
    store = get_store(store_path)
    workspace = load_workspace(store)
    block_id = resolve_block_id(workspace, block) if block else None
    ids = [resolve_exercise_id(workspace, ref) for ref in exercise_refs]

    try:
        ordered = workspace.reorder(block_id, ids)
    except KeyError as e:
        views.print_error(str(e).strip("'\""))
        raise typer.Exit(1)
    save_workspace(store, workspace)

    views.print_success("New order: " + ", ".join(ex.name for ex in ordered))
