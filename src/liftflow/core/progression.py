"""
Per-round progression for exercises inside blocks.

resolve_round() picks the effective reps/weight/time/distance for one round:

    1. explicit block progression entry for that round (non-empty, non-zero)
    2. weight only: the parsed progressive weight list, clamped to its last entry
    3. the base parsed value, constant across rounds

The auto-fill helpers build the override lists a user would otherwise type
by hand: ascending weights and descending reps.
"""

import re
from dataclasses import dataclass
from typing import Sequence, TypeVar

from .config import KG_INCREMENT, LB_INCREMENT, MIN_AUTO_REPS
from .models import BlockProgression, Exercise

T = TypeVar("T")

_BASE_WEIGHT = re.compile(r"(\d+(?:\.\d+)?)\s*(lbs?|kg)", re.IGNORECASE)


@dataclass(frozen=True)
class RoundValues:
    """Effective parameters of one exercise in one round."""

    reps: int | None
    weight: str | None
    time: str | None
    distance: str | None


def _round_entry(values: Sequence[T], round_index: int) -> T | None:
    """Return the override for a 1-based round, or None when absent/empty/zero."""
    i = round_index - 1
    if i >= len(values):
        return None
    value = values[i]
    return value if value else None


def resolve_round(exercise: Exercise, round_index: int) -> RoundValues:
    """
    Compute the effective parameters of an exercise for one round.

    Args:
        exercise: Exercise with parsed params and optional block progression
        round_index: 1-based round number

    Returns:
        RoundValues for that round

    Raises:
        ValueError: If round_index is below 1
    """
    if round_index < 1:
        raise ValueError(f"round_index must be >= 1, got {round_index}")

    params = exercise.params
    reps = params.reps
    weight = params.weight
    time = params.time
    distance = params.distance

    prog = exercise.block_progression
    if prog is not None:
        reps = _round_entry(prog.round_reps, round_index) or reps
        weight = _round_entry(prog.round_weights, round_index) or weight
        time = _round_entry(prog.round_times, round_index) or time
        distance = _round_entry(prog.round_distances, round_index) or distance

    if not weight and params.progressive_weights:
        weights = params.progressive_weights
        weight = weights[min(round_index - 1, len(weights) - 1)]

    return RoundValues(reps=reps, weight=weight, time=time, distance=distance)


def _format_magnitude(value: float) -> str:
    """Print whole numbers without a trailing .0 ("135", "62.5")."""
    if value == int(value):
        return str(int(value))
    return str(value)


def auto_fill_weights(
    base_weight: str | None,
    rounds: int,
    kg_increment: float = KG_INCREMENT,
    lb_increment: float = LB_INCREMENT,
) -> tuple[str, ...]:
    """
    Ascending per-round weights starting from a base weight.

    Pound units step by ``lb_increment`` (default 10) per round, kilograms
    by ``kg_increment`` (default 5).

    Examples:
        auto_fill_weights("135 lbs", 3) → ("135lbs", "145lbs", "155lbs")
        auto_fill_weights("40kg", 2)    → ("40kg", "45kg")

    Returns:
        One weight per round, or () when the base weight does not parse.
    """
    if not base_weight or rounds <= 0:
        return ()
    m = _BASE_WEIGHT.search(base_weight)
    if m is None:
        return ()

    base = float(m.group(1))
    unit = m.group(2)
    increment = lb_increment if "lb" in unit.lower() else kg_increment
    return tuple(
        f"{_format_magnitude(base + increment * i)}{unit}" for i in range(rounds)
    )


def descending_reps(base_reps: int | None, rounds: int) -> tuple[int, ...]:
    """
    Per-round reps decreasing by one each round, never below MIN_AUTO_REPS.

    descending_reps(10, 4) → (10, 9, 8, 7)
    """
    if not base_reps or rounds <= 0:
        return ()
    return tuple(max(MIN_AUTO_REPS, base_reps - i) for i in range(rounds))


def build_progression(
    current: BlockProgression | None = None,
    *,
    round_weights: Sequence[str] | None = None,
    round_reps: Sequence[int | None] | None = None,
    round_times: Sequence[str] | None = None,
    round_distances: Sequence[str] | None = None,
) -> BlockProgression:
    """
    Return a new progression with the given lists replaced.

    Lists left as None keep the value from ``current``.
    """
    current = current or BlockProgression()
    return BlockProgression(
        round_weights=tuple(round_weights) if round_weights is not None else current.round_weights,
        round_reps=tuple(round_reps) if round_reps is not None else current.round_reps,
        round_times=tuple(round_times) if round_times is not None else current.round_times,
        round_distances=(
            tuple(round_distances) if round_distances is not None else current.round_distances
        ),
    )
