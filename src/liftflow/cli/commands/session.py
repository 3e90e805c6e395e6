"""Session commands: steps, run, summary."""

import json
import time
from typing import Annotated

import typer
from rich.live import Live

from ...core.runner import RestTimer, SessionRunner, run_countdown
from ...io.serializers import step_to_dict
from .. import views
from ..app import StoreOption, app, get_settings, get_store, load_workspace

_RUN_HELP = "[dim]n[/dim] next  [dim]p[/dim] previous  [dim]r[/dim] rest  [dim]q[/dim] quit"


def _no_sleep(_seconds: float) -> None:
    return None


def _rest(runner: SessionRunner, wait: bool) -> None:
    """Run the rest countdown for the current step; Ctrl+C pauses it."""
    timer = runner.rest_timer
    if runner.start_rest() <= 0:
        views.print_info("No rest for this exercise")
        return

    sleep = time.sleep if wait else _no_sleep
    while timer.status != "inactive":
        try:
            with Live(views.format_countdown(timer.remaining), console=views.console, transient=True) as live:

                def redraw(t: RestTimer) -> None:
                    live.update(views.format_countdown(t.remaining))

                run_countdown(timer, redraw, sleep=sleep)
        except KeyboardInterrupt:
            timer.pause()
            answer = _read_key(f"Paused at {views.format_countdown(timer.remaining)}. (r)esume or (s)kip: ")
            if answer == "r":
                timer.resume()
                continue
            timer.skip()
            views.print_info("Rest skipped")
            return
    views.print_success("Rest done")


def _read_key(prompt: str) -> str:
    try:
        return views.console.input(prompt).strip().lower()[:1]
    except EOFError:
        return "q"


@app.command()
def steps(
    json_out: Annotated[
        bool,
        typer.Option("--json", "-j", help="Output as JSON for machine processing"),
    ] = False,
    store_path: StoreOption = None,
) -> None:
    """
    Show the workout expanded into the steps of a session.
    """
    store = get_store(store_path)
    workspace = load_workspace(store)
    expanded = workspace.steps()

    if json_out:
        print(json.dumps([step_to_dict(s) for s in expanded], indent=2))
        return
    views.print_steps(expanded)


@app.command()
def summary(
    store_path: StoreOption = None,
) -> None:
    """
    Show exercise, block and step counts.
    """
    store = get_store(store_path)
    workspace = load_workspace(store)
    views.print_summary(workspace.summary())


@app.command()
def run(
    wait: Annotated[
        bool,
        typer.Option("--wait/--no-wait", help="Count rest periods down in real time"),
    ] = True,
    store_path: StoreOption = None,
) -> None:
    """
    Walk through the session step by step.

    Keys: n = next, p = previous, r = start rest, q = quit.
    """
    settings = get_settings()
    store = get_store(store_path, settings)
    workspace = load_workspace(store)

    runner = SessionRunner(workspace.steps(), RestTimer(settings.default_rest_seconds))
    if runner.is_idle:
        views.print_warning("Nothing to run: the workout has no exercises.")
        raise typer.Exit(1)

    views.console.print(_RUN_HELP)
    views.print_runner_step(runner)
    while True:
        key = _read_key("> ")
        if key == "q":
            break
        if key == "n":
            if runner.next():
                views.print_runner_step(runner)
            else:
                views.print_success("Workout complete!")
                break
        elif key == "p":
            if runner.prev():
                views.print_runner_step(runner)
            else:
                views.print_info("Already at the first step")
        elif key == "r":
            _rest(runner, wait)
        else:
            views.console.print(_RUN_HELP)

    views.print_info(f"Finished at step {runner.index + 1}/{len(runner.steps)}")
