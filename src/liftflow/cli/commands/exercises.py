"""Exercise commands: parse, add, edit, remove, list, progression."""

import json
from typing import Annotated, Optional

import typer

from ...core.parser import parse_exercise_parameters
from ...core.progression import auto_fill_weights, build_progression, descending_reps
from ...io.serializers import params_to_dict, parse_int_list, parse_str_list
from .. import views
from ..app import (
    StoreOption,
    app,
    get_settings,
    get_store,
    load_workspace,
    resolve_block_id,
    resolve_exercise_id,
    save_workspace,
)


@app.command()
def parse(
    text: Annotated[str, typer.Argument(help='Parameter text, e.g. "3x10 @ 135 lbs, 90s rest"')],
    json_out: Annotated[
        bool,
        typer.Option("--json", "-j", help="Output as JSON for machine processing"),
    ] = False,
) -> None:
    """
    Show how a parameter string is understood.
    """
    params = parse_exercise_parameters(text)
    if json_out:
        print(json.dumps(params_to_dict(params), indent=2))
        return
    views.print_parse_result(text, params)


@app.command()
def add(
    name: Annotated[str, typer.Argument(help="Exercise name")],
    params: Annotated[str, typer.Argument(help='Parameters, e.g. "3x10 @ 135 lbs"')] = "",
    block: Annotated[
        Optional[str],
        typer.Option("--block", "-b", help="Add into this block (id or id prefix)"),
    ] = None,
    store_path: StoreOption = None,
) -> None:
    """
    Add an exercise. Standalone exercises go to the top of the workout.
    """
    name = name.strip()
    if not name:
        views.print_error("Exercise name must not be empty")
        raise typer.Exit(1)

    store = get_store(store_path)
    workspace = load_workspace(store)
    block_id = resolve_block_id(workspace, block) if block else None

    exercise = workspace.add_exercise(name, params.strip(), block_id=block_id)
    save_workspace(store, workspace)

    views.print_success(f"Added {exercise.name} [{views.short_id(exercise.id)}]")
    views.print_parse_result(exercise.original_input or "(no parameters)", exercise.params)


@app.command()
def edit(
    exercise_ref: Annotated[str, typer.Argument(help="Exercise id or id prefix")],
    name: Annotated[Optional[str], typer.Option("--name", "-n", help="New name")] = None,
    params: Annotated[
        Optional[str],
        typer.Option("--params", "-p", help="New parameter text (re-parsed)"),
    ] = None,
    store_path: StoreOption = None,
) -> None:
    """
    Rename an exercise or change its parameters.
    """
    if name is None and params is None:
        views.print_error("Nothing to change: pass --name and/or --params")
        raise typer.Exit(1)
    if name is not None and not name.strip():
        views.print_error("Exercise name must not be empty")
        raise typer.Exit(1)

    store = get_store(store_path)
    workspace = load_workspace(store)
    exercise_id = resolve_exercise_id(workspace, exercise_ref)

    exercise = workspace.update_exercise(
        exercise_id,
        name=name.strip() if name is not None else None,
        raw_input=params.strip() if params is not None else None,
    )
    save_workspace(store, workspace)

    views.print_success(f"Updated {exercise.name}: {views.format_params(exercise.params)}")


@app.command()
def remove(
    exercise_ref: Annotated[str, typer.Argument(help="Exercise id or id prefix")],
    store_path: StoreOption = None,
) -> None:
    """
    Delete an exercise.
    """
    store = get_store(store_path)
    workspace = load_workspace(store)
    exercise_id = resolve_exercise_id(workspace, exercise_ref)
    name = workspace.get_exercise(exercise_id).name

    workspace.remove_exercise(exercise_id)
    save_workspace(store, workspace)

    views.print_success(f"Removed {name}")


@app.command("list")
def list_workout(
    store_path: StoreOption = None,
) -> None:
    """
    Show the workout in order, with blocks and their exercises.
    """
    store = get_store(store_path)
    workspace = load_workspace(store)
    views.print_workout(workspace)


@app.command()
def progression(
    exercise_ref: Annotated[str, typer.Argument(help="Block member id or id prefix")],
    weights: Annotated[
        Optional[str],
        typer.Option("--weights", "-w", help="Per-round weights, e.g. 40kg,45kg,50kg"),
    ] = None,
    reps: Annotated[
        Optional[str],
        typer.Option("--reps", "-r", help="Per-round reps, e.g. 12,10,8"),
    ] = None,
    times: Annotated[
        Optional[str],
        typer.Option("--times", "-t", help="Per-round times, e.g. 60s,45s,30s"),
    ] = None,
    distances: Annotated[
        Optional[str],
        typer.Option("--distances", "-d", help="Per-round distances, e.g. 400m,400m,800m"),
    ] = None,
    auto_weights: Annotated[
        bool,
        typer.Option("--auto-weights", help="Ascending weights from the base weight"),
    ] = False,
    auto_reps: Annotated[
        bool,
        typer.Option("--auto-reps", help="Reps decreasing by one each round"),
    ] = False,
    clear: Annotated[
        bool,
        typer.Option("--clear", help="Remove all per-round overrides"),
    ] = False,
    store_path: StoreOption = None,
) -> None:
    """
    Set per-round values for an exercise inside a block.

    Blank list entries keep the exercise's base value for that round.
    Without options, shows what each round resolves to.
    """
    store = get_store(store_path)
    workspace = load_workspace(store)
    exercise_id = resolve_exercise_id(workspace, exercise_ref)
    exercise = workspace.get_exercise(exercise_id)

    if exercise.block_id is None:
        views.print_error(f"{exercise.name} is not in a block; group it first")
        raise typer.Exit(1)
    block = workspace.get_block(exercise.block_id)
    rounds = block.effective_rounds

    changed = clear or any(
        v is not None for v in (weights, reps, times, distances)
    ) or auto_weights or auto_reps
    if not changed:
        views.print_progression(exercise, block)
        return

    if clear:
        workspace.set_progression(exercise_id, None)
    else:
        settings = get_settings()
        weight_list = parse_str_list(weights) if weights is not None else None
        rep_list = parse_int_list(reps) if reps is not None else None

        if auto_weights:
            weight_list = list(
                auto_fill_weights(
                    exercise.params.weight, rounds, settings.kg_increment, settings.lb_increment
                )
            )
            if not weight_list:
                views.print_warning(f"{exercise.name} has no base weight to fill from")
        if auto_reps:
            rep_list = list(descending_reps(exercise.params.reps, rounds))
            if not rep_list:
                views.print_warning(f"{exercise.name} has no base reps to fill from")

        updated = build_progression(
            exercise.block_progression,
            round_weights=weight_list,
            round_reps=rep_list,
            round_times=parse_str_list(times) if times is not None else None,
            round_distances=parse_str_list(distances) if distances is not None else None,
        )
        workspace.set_progression(exercise_id, None if updated.is_empty() else updated)

    save_workspace(store, workspace)
    exercise = workspace.get_exercise(exercise_id)
    views.print_success(f"Updated progression for {exercise.name}")
    views.print_progression(exercise, block)
