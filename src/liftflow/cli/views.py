"""
CLI view formatters using Rich for pretty console output.

Handles table formatting and display of workout data.
"""

from rich.console import Console
from rich.markup import escape
from rich.table import Table

from ..core.expansion import ordered_block_members
from ..core.models import Exercise, ExerciseParams, WorkoutBlock, WorkoutStep, WorkoutSummary
from ..core.parser import describe_params, format_seconds
from ..core.progression import resolve_round
from ..core.runner import SessionRunner
from ..core.workspace import Workspace

console = Console()

SHORT_ID_LEN = 8

_TYPE_STYLES = {
    "strength": "green",
    "cardio": "cyan",
    "time": "magenta",
    "unknown": "dim",
}


def short_id(entity_id: str) -> str:
    return entity_id[:SHORT_ID_LEN]


def format_params(params: ExerciseParams) -> str:
    """One-line parameter summary, e.g. "3 × 10 · 135 lbs · Rest: 90s"."""
    labels = describe_params(params)
    return " · ".join(labels) if labels else "-"


def _type_cell(params: ExerciseParams) -> str:
    style = _TYPE_STYLES.get(params.kind, "white")
    return f"[{style}]{params.kind}[/{style}]"


def _block_header(block: WorkoutBlock, member_count: int) -> str:
    parts = [f"[bold]{block.name}[/bold]", block.type, f"{block.effective_rounds} round(s)"]
    if block.rest_between_exercises:
        parts.append(f"rest {block.rest_between_exercises}")
    parts.append(f"{member_count} exercise(s)")
    return " · ".join(parts)


def format_workout_table(workspace: Workspace) -> Table:
    """
    Create a Rich table of the workout in layout order.

    Block members are listed indented under their block.

    Args:
        workspace: Workout to display

    Returns:
        Rich Table object
    """
    table = Table(title="Workout")

    table.add_column("#", justify="right", style="dim", width=3)
    table.add_column("ID", style="dim")
    table.add_column("Exercise", style="bold")
    table.add_column("Type")
    table.add_column("Parameters")
    table.add_column("Input", style="dim")

    exercises = {ex.id: ex for ex in workspace.exercises}
    blocks = {b.id: b for b in workspace.blocks}

    for i, entry in enumerate(workspace.layout_order, 1):
        if entry.type == "exercise" and entry.id in exercises:
            ex = exercises[entry.id]
            table.add_row(
                str(i), short_id(ex.id), ex.name, _type_cell(ex.params),
                format_params(ex.params), ex.original_input,
            )
        elif entry.type == "block" and entry.id in blocks:
            block = blocks[entry.id]
            members = ordered_block_members(workspace.exercises, block.id)
            table.add_row(
                str(i), short_id(block.id), _block_header(block, len(members)), "[yellow]block[/yellow]", "", ""
            )
            for ex in members:
                marker = "  ↳ " + ex.name
                if ex.block_progression is not None and not ex.block_progression.is_empty():
                    marker += " [dim](progression)[/dim]"
                table.add_row(
                    "", short_id(ex.id), marker, _type_cell(ex.params),
                    format_params(ex.params), ex.original_input,
                )

    return table


def print_workout(workspace: Workspace) -> None:
    """Print the workout, or a hint when it is empty."""
    if not workspace.layout_order:
        console.print("[yellow]No exercises yet.[/yellow] Add one with: liftflow add NAME PARAMS")
        return
    console.print(format_workout_table(workspace))


def print_parse_result(text: str, params: ExerciseParams) -> None:
    console.print(f"[bold]{escape(text)}[/bold] → {_type_cell(params)}")
    for label in describe_params(params):
        console.print(f"  {label}")


def print_progression(exercise: Exercise, block: WorkoutBlock) -> None:
    """
    Print the values each round resolves to for a block member.

    Args:
        exercise: Block member
        block: Its block
    """
    table = Table(title=f"{exercise.name} · {block.name}")
    table.add_column("Round", justify="right", style="cyan")
    table.add_column("Reps", justify="right")
    table.add_column("Weight")
    table.add_column("Time")
    table.add_column("Distance")

    for round_num in range(1, block.effective_rounds + 1):
        values = resolve_round(exercise, round_num)
        table.add_row(
            str(round_num),
            str(values.reps) if values.reps is not None else "-",
            values.weight or "-",
            values.time or "-",
            values.distance or "-",
        )
    console.print(table)


def _step_details(step: WorkoutStep) -> str:
    parts = []
    if step.reps is not None:
        parts.append(f"{step.reps} reps")
    if step.weight:
        parts.append(step.weight)
    if step.time:
        parts.append(step.time)
    if step.distance:
        parts.append(step.distance)
    return " · ".join(parts) if parts else "-"


def format_steps_table(steps: list[WorkoutStep]) -> Table:
    """Create a Rich table of expanded steps."""
    table = Table(title="Session Steps")

    table.add_column("#", justify="right", style="dim", width=4)
    table.add_column("Exercise", style="bold")
    table.add_column("Details")
    table.add_column("Block", style="yellow")
    table.add_column("Round", justify="right")
    table.add_column("Rest")
    table.add_column("Then rest")

    for i, step in enumerate(steps, 1):
        ctx = step.context
        table.add_row(
            str(i),
            step.exercise_name,
            _step_details(step),
            f"{ctx.block_name} ({ctx.block_type})" if ctx else "",
            f"{ctx.current_round}/{ctx.total_rounds}" if ctx else "",
            step.rest_period or "",
            step.rest_after or "",
        )
    return table


def print_steps(steps: list[WorkoutStep]) -> None:
    if not steps:
        console.print("[yellow]Nothing to run: the workout has no exercises.[/yellow]")
        return
    console.print(format_steps_table(steps))


def print_summary(summary: WorkoutSummary) -> None:
    """Print headline numbers for the workout."""
    table = Table(title="Workout Summary", show_header=False)
    table.add_column("Metric", style="cyan")
    table.add_column("Value", justify="right", style="bold")
    table.add_row("Exercises", str(summary.total_exercises))
    table.add_row("Strength", str(summary.strength_exercises))
    table.add_row("Cardio / timed", str(summary.cardio_exercises))
    table.add_row("Blocks", str(summary.block_count))
    table.add_row("Steps", str(summary.total_steps))
    console.print(table)


def print_runner_step(runner: SessionRunner) -> None:
    """Print the current step of a running session."""
    step = runner.current_step
    if step is None:
        return
    console.print()
    console.print(
        f"[dim]Step {runner.index + 1}/{len(runner.steps)} · {runner.progress:.0f}%[/dim]"
    )
    ctx = step.context
    if ctx is not None:
        console.print(
            f"[yellow]{ctx.block_name}[/yellow] ({ctx.block_type}) · "
            f"round {ctx.current_round}/{ctx.total_rounds} · "
            f"exercise {ctx.exercise_in_block}/{ctx.total_exercises_in_block}"
        )
    console.print(f"[bold cyan]{step.exercise_name}[/bold cyan]  {_step_details(step)}")
    rests = runner.available_rests()
    if rests:
        console.print(f"[dim]Rest: {' / '.join(rests)}[/dim]")


def format_countdown(seconds: int) -> str:
    return f"Rest {format_seconds(seconds)}"


def print_success(message: str) -> None:
    """Print a success message."""
    console.print(f"[green]{message}[/green]")


def print_error(message: str) -> None:
    """Print an error message."""
    console.print(f"[red]Error: {message}[/red]")


def print_warning(message: str) -> None:
    """Print a warning message."""
    console.print(f"[yellow]Warning: {message}[/yellow]")


def print_info(message: str) -> None:
    """Print an info message."""
    console.print(f"[blue]{message}[/blue]")


def confirm_action(message: str) -> bool:
    """
    Prompt user for confirmation.

    Args:
        message: Confirmation message

    Returns:
        True if confirmed, False otherwise
    """
    response = console.input(f"{message} [y/N]: ")
    return response.lower() in ("y", "yes")
