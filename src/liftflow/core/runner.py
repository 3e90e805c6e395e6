"""
Session runner and rest timer state machines.

SessionRunner is a cursor over the expanded steps:

    Idle (no steps) | Active(index), 0 <= index < len(steps)

next()/prev() move the cursor (no-op at the ends) and always reset the rest
timer.  There is no explicit "completed" state; the runner stops at the last
step.

RestTimer is an independent sub-state machine per current step:

    Inactive(0) --start--> Running(n) --pause--> Paused(n) --resume--> Running(n)
    Running --tick x n--> Inactive(0);  skip() from any state --> Inactive(0)

Ticking is cooperative: a driver calls tick() once per second.  Every
start/skip/reset bumps a generation token, so ticks scheduled for an earlier
rest period are ignored (cancelled).
"""

import time
from typing import Callable, Literal, Sequence

from .config import DEFAULT_REST_SECONDS, TICK_SECONDS
from .models import WorkoutStep
from .parser import parse_duration_seconds

RestTimerStatus = Literal["inactive", "running", "paused"]


class RestTimer:
    """Countdown for one rest period."""

    def __init__(self, default_seconds: int = DEFAULT_REST_SECONDS):
        self.default_seconds = default_seconds
        self.remaining = 0
        self._running = False
        self._generation = 0

    @property
    def status(self) -> RestTimerStatus:
        if self.remaining <= 0:
            return "inactive"
        return "running" if self._running else "paused"

    @property
    def token(self) -> int:
        """Generation of the current rest period; pass to tick() from a scheduler."""
        return self._generation

    def start(self, duration: str) -> int:
        """
        Start a rest period, cancelling any pending ticks of a previous one.

        Args:
            duration: "MM:SS" or "<number><unit>"; unparseable strings use
                the default duration

        Returns:
            Seconds remaining
        """
        self._generation += 1
        self.remaining = max(0, parse_duration_seconds(duration, self.default_seconds))
        self._running = self.remaining > 0
        return self.remaining

    def pause(self) -> None:
        if self.status == "running":
            self._running = False

    def resume(self) -> None:
        if self.status == "paused":
            self._running = True

    def skip(self) -> None:
        """End the rest period immediately."""
        self.reset()

    def reset(self) -> None:
        self._generation += 1
        self.remaining = 0
        self._running = False

    def tick(self, token: int | None = None) -> RestTimerStatus:
        """
        Advance the countdown by one second.

        Ticks while paused or inactive, or carrying a stale token, do nothing.
        Reaching zero moves the timer to inactive.
        """
        if token is not None and token != self._generation:
            return self.status
        if self.status != "running":
            return self.status
        if self.remaining <= 1:
            self.remaining = 0
            self._running = False
        else:
            self.remaining -= 1
        return self.status


def run_countdown(
    timer: RestTimer,
    on_tick: Callable[[RestTimer], None] | None = None,
    sleep: Callable[[float], None] = time.sleep,
) -> RestTimerStatus:
    """
    Drive a running timer until it completes or stops running.

    Args:
        timer: Timer to drive; must already be started
        on_tick: Called after every tick (e.g. to redraw a countdown)
        sleep: Injected for tests

    Returns:
        Final timer status ("inactive" when completed, "paused" if paused
        by on_tick)
    """
    token = timer.token
    while timer.status == "running" and timer.token == token:
        sleep(TICK_SECONDS)
        timer.tick(token)
        if on_tick is not None:
            on_tick(timer)
    return timer.status


class SessionRunner:
    """Cursor over expanded workout steps, with its rest timer."""

    def __init__(self, steps: Sequence[WorkoutStep], rest_timer: RestTimer | None = None):
        self.steps: tuple[WorkoutStep, ...] = tuple(steps)
        self.rest_timer = rest_timer if rest_timer is not None else RestTimer()
        self.index = 0

    @property
    def is_idle(self) -> bool:
        return not self.steps

    @property
    def current_step(self) -> WorkoutStep | None:
        if self.is_idle:
            return None
        return self.steps[self.index]

    @property
    def is_first(self) -> bool:
        return self.index == 0

    @property
    def is_last(self) -> bool:
        return self.is_idle or self.index == len(self.steps) - 1

    @property
    def progress(self) -> float:
        """Percent of steps reached, counting the current one."""
        if self.is_idle:
            return 0.0
        return (self.index + 1) / len(self.steps) * 100

    def next(self) -> bool:
        """Move to the next step; returns False at the last step."""
        if self.is_last:
            return False
        self.index += 1
        self.rest_timer.reset()
        return True

    def prev(self) -> bool:
        """Move to the previous step; returns False at the first step."""
        if self.is_idle or self.is_first:
            return False
        self.index -= 1
        self.rest_timer.reset()
        return True

    def available_rests(self) -> list[str]:
        """Rest durations offered for the current step: own rest, then rest-after."""
        step = self.current_step
        if step is None:
            return []
        return [r for r in (step.rest_period, step.rest_after) if r]

    def start_rest(self, duration: str | None = None) -> int:
        """
        Start the rest timer for the current step.

        Args:
            duration: Explicit duration; defaults to the step's own rest
                period, then its rest-after

        Returns:
            Seconds remaining (0 when there is nothing to rest)
        """
        if duration is None:
            rests = self.available_rests()
            if not rests:
                return 0
            duration = rests[0]
        return self.rest_timer.start(duration)
