"""
Workout step expansion.

Flattens exercises + blocks + layout order into the ordered list of steps a
session runner walks through.  Pure and deterministic: inputs are never
mutated and identical inputs give identical output.

Traversal order: layout order (outer), round (middle), exercise position
inside the block (inner).  Step counts:

    standalone exercise → sets (absent = 1) steps, "<id>-set-<k>"
    block               → rounds × members steps, "<id>-round-<r>"

Dangling references (layout ids with no entity) are skipped silently.
Rest between rounds is not modelled: the last exercise of every round
carries no rest_after.
"""

from typing import Iterable, Sequence

from .models import (
    Exercise,
    LayoutEntry,
    StepContext,
    WorkoutBlock,
    WorkoutStep,
    WorkoutSummary,
)
from .progression import resolve_round


def ordered_block_members(exercises: Iterable[Exercise], block_id: str) -> list[Exercise]:
    """Exercises whose block_id matches, in block order."""
    return sorted((ex for ex in exercises if ex.block_id == block_id), key=lambda ex: ex.sort_key)


def _standalone_steps(exercise: Exercise) -> list[WorkoutStep]:
    params = exercise.params
    sets = params.sets or 1
    return [
        WorkoutStep(
            id=f"{exercise.id}-set-{k}",
            exercise_id=exercise.id,
            exercise_name=exercise.name,
            reps=params.reps,
            weight=params.weight,
            time=params.time,
            distance=params.distance,
            rest_period=params.rest_period,
        )
        for k in range(1, sets + 1)
    ]


def _block_steps(block: WorkoutBlock, members: list[Exercise]) -> list[WorkoutStep]:
    steps: list[WorkoutStep] = []
    rounds = block.effective_rounds
    last = len(members) - 1

    for round_num in range(1, rounds + 1):
        for i, exercise in enumerate(members):
            values = resolve_round(exercise, round_num)
            steps.append(
                WorkoutStep(
                    id=f"{exercise.id}-round-{round_num}",
                    exercise_id=exercise.id,
                    exercise_name=exercise.name,
                    reps=values.reps,
                    weight=values.weight,
                    time=values.time,
                    distance=values.distance,
                    rest_period=exercise.params.rest_period,
                    context=StepContext(
                        block_name=block.name,
                        block_type=block.type,
                        current_round=round_num,
                        total_rounds=rounds,
                        exercise_in_block=i + 1,
                        total_exercises_in_block=len(members),
                    ),
                    rest_after=block.rest_between_exercises if i < last else None,
                )
            )
    return steps


def expand_workout(
    exercises: Sequence[Exercise],
    blocks: Sequence[WorkoutBlock],
    layout_order: Sequence[LayoutEntry],
) -> list[WorkoutStep]:
    """
    Expand the workout into executable steps.

    Args:
        exercises: All exercises (standalone and block members)
        blocks: All blocks
        layout_order: Top-level order of standalone exercises and blocks

    Returns:
        Ordered list of WorkoutStep
    """
    exercises_by_id = {ex.id: ex for ex in exercises}
    blocks_by_id = {b.id: b for b in blocks}

    steps: list[WorkoutStep] = []
    for entry in layout_order:
        if entry.type == "exercise":
            exercise = exercises_by_id.get(entry.id)
            if exercise is None:
                continue
            steps.extend(_standalone_steps(exercise))
        elif entry.type == "block":
            block = blocks_by_id.get(entry.id)
            if block is None:
                continue
            members = ordered_block_members(exercises, block.id)
            steps.extend(_block_steps(block, members))

    return steps


def summarize_workout(
    exercises: Sequence[Exercise],
    blocks: Sequence[WorkoutBlock],
    layout_order: Sequence[LayoutEntry],
) -> WorkoutSummary:
    """Count exercises by type, blocks and expanded steps."""
    strength = sum(1 for ex in exercises if ex.params.kind == "strength")
    cardio = sum(1 for ex in exercises if ex.params.kind in ("cardio", "time"))
    return WorkoutSummary(
        total_exercises=len(exercises),
        strength_exercises=strength,
        cardio_exercises=cardio,
        block_count=len(blocks),
        total_steps=len(expand_workout(exercises, blocks, layout_order)),
    )
