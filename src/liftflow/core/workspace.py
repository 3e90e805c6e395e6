"""
Workspace: the single owner of the mutable workout state.

Holds exercises, blocks and the layout order, and applies every user action
(add, edit, group, reorder, remove) synchronously.  After each operation the
layout invariant holds:

- every standalone exercise appears exactly once as an "exercise" entry
- every block appears exactly once as a "block" entry
- no block member appears as a standalone entry

Order inside a context (the standalone pool, context id None, or one block)
is carried by Exercise.position; reorder() is the only primitive that
renumbers it.
"""

import copy
import logging
import uuid
from dataclasses import replace
from datetime import datetime, timezone
from typing import Callable, Iterable, Sequence

from .config import DEFAULT_BLOCK_TYPE
from .expansion import expand_workout, ordered_block_members, summarize_workout
from .models import (
    BlockProgression,
    Exercise,
    ExerciseParams,
    LayoutEntry,
    LayoutType,
    StrengthParams,
    WorkoutBlock,
    WorkoutState,
    WorkoutStep,
    WorkoutSummary,
)
from .parser import parse_exercise_parameters

logger = logging.getLogger(__name__)

_BLOCK_FIELDS = frozenset({"name", "type", "rounds", "rest_between_exercises"})


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


def _new_id() -> str:
    return uuid.uuid4().hex


def _block_params(params: ExerciseParams, progression: BlockProgression | None) -> ExerciseParams:
    """
    Adjust parsed params for an exercise that runs inside a block.

    Block members run once per round, so strength sets are forced to 1.
    Non-empty explicit round weights replace the parsed progressive weights.
    """
    if not isinstance(params, StrengthParams):
        return params
    weights = tuple(w for w in (progression.round_weights if progression else ()) if w and w.strip())
    return replace(
        params,
        sets=1,
        progressive_weights=weights or params.progressive_weights,
    )


class Workspace:
    """
    Mutable workout state with its editing operations.

    Unknown ids passed to mutating operations raise KeyError.
    """

    def __init__(
        self,
        exercises: Iterable[Exercise] = (),
        blocks: Iterable[WorkoutBlock] = (),
        layout_order: Iterable[LayoutEntry] = (),
        clock: Callable[[], datetime] = _utc_now,
        id_factory: Callable[[], str] = _new_id,
    ):
        self.exercises: list[Exercise] = list(exercises)
        self.blocks: list[WorkoutBlock] = list(blocks)
        self.layout_order: list[LayoutEntry] = list(layout_order)
        self._clock = clock
        self._id_factory = id_factory

    # ------------------------------------------------------------------
    # Snapshots
    # ------------------------------------------------------------------

    @classmethod
    def from_state(cls, state: WorkoutState, **kwargs) -> "Workspace":
        """Build a workspace from a loaded snapshot, repairing the layout order."""
        workspace = cls(
            copy.deepcopy(state.exercises),
            copy.deepcopy(state.blocks),
            list(state.layout_order),
            **kwargs,
        )
        workspace.normalize_layout()
        return workspace

    def snapshot(self) -> WorkoutState:
        """Independent copy of the current state, ready to serialize."""
        return WorkoutState(
            exercises=copy.deepcopy(self.exercises),
            blocks=copy.deepcopy(self.blocks),
            layout_order=list(self.layout_order),
        )

    # ------------------------------------------------------------------
    # Lookups
    # ------------------------------------------------------------------

    def get_exercise(self, exercise_id: str) -> Exercise:
        for ex in self.exercises:
            if ex.id == exercise_id:
                return ex
        raise KeyError(f"Unknown exercise '{exercise_id}'")

    def get_block(self, block_id: str) -> WorkoutBlock:
        for block in self.blocks:
            if block.id == block_id:
                return block
        raise KeyError(f"Unknown block '{block_id}'")

    def context_members(self, context_id: str | None) -> list[Exercise]:
        """Ordered exercises of a block, or of the standalone pool when None."""
        return sorted(
            (ex for ex in self.exercises if ex.block_id == context_id),
            key=lambda ex: ex.sort_key,
        )

    def standalone_exercises(self) -> list[Exercise]:
        return self.context_members(None)

    def block_exercises(self, block_id: str) -> list[Exercise]:
        self.get_block(block_id)
        return ordered_block_members(self.exercises, block_id)

    def _next_position(self, context_id: str | None) -> int:
        members = self.context_members(context_id)
        return members[-1].position + 1 if members else 0

    def _layout_index(self, entry_type: LayoutType, entry_id: str) -> int:
        for i, entry in enumerate(self.layout_order):
            if entry.type == entry_type and entry.id == entry_id:
                return i
        return -1

    def _drop_layout(self, entry_type: LayoutType, entry_id: str) -> None:
        self.layout_order = [
            e for e in self.layout_order if not (e.type == entry_type and e.id == entry_id)
        ]

    # ------------------------------------------------------------------
    # Exercises
    # ------------------------------------------------------------------

    def add_exercise(self, name: str, raw_input: str, block_id: str | None = None) -> Exercise:
        """
        Parse and add a new exercise.

        Standalone exercises go to the front of the layout order.  With a
        block_id the exercise joins the end of that block instead.
        """
        if block_id is not None:
            self.get_block(block_id)

        params = parse_exercise_parameters(raw_input)
        if block_id is not None:
            params = _block_params(params, None)

        exercise = Exercise(
            id=self._id_factory(),
            name=name,
            original_input=raw_input,
            params=params,
            timestamp=self._clock(),
            block_id=block_id,
            position=self._next_position(block_id),
        )
        self.exercises.append(exercise)
        if block_id is None:
            self.layout_order.insert(0, LayoutEntry("exercise", exercise.id))

        logger.debug("Added exercise %s (%s) as %s", exercise.id, name, params.kind)
        return exercise

    def update_exercise(
        self,
        exercise_id: str,
        name: str | None = None,
        raw_input: str | None = None,
    ) -> Exercise:
        """Rename and/or re-parse an exercise; None leaves a field unchanged."""
        exercise = self.get_exercise(exercise_id)
        if name is not None:
            exercise.name = name
        if raw_input is not None:
            exercise.original_input = raw_input
            exercise.params = parse_exercise_parameters(raw_input)
            if exercise.block_id is not None:
                exercise.params = _block_params(exercise.params, exercise.block_progression)
        return exercise

    def set_progression(self, exercise_id: str, progression: BlockProgression | None) -> Exercise:
        """
        Attach (or clear, with None) the per-round override table.

        Only block members have rounds, so the exercise must be in a block.
        """
        exercise = self.get_exercise(exercise_id)
        if exercise.block_id is None:
            raise ValueError(f"Exercise '{exercise_id}' is not in a block")
        exercise.block_progression = progression
        exercise.params = _block_params(
            parse_exercise_parameters(exercise.original_input), progression
        )
        return exercise

    def remove_exercise(self, exercise_id: str) -> None:
        exercise = self.get_exercise(exercise_id)
        self.exercises.remove(exercise)
        self._drop_layout("exercise", exercise_id)
        logger.debug("Removed exercise %s", exercise_id)

    # ------------------------------------------------------------------
    # Blocks
    # ------------------------------------------------------------------

    def add_block(
        self,
        name: str,
        type: str = DEFAULT_BLOCK_TYPE,
        rounds: int | None = None,
        rest_between_exercises: str | None = None,
    ) -> WorkoutBlock:
        """Create an empty block at the end of the layout order."""
        block = WorkoutBlock(
            id=self._id_factory(),
            name=name,
            type=type,  # type: ignore[arg-type]
            rounds=rounds,
            rest_between_exercises=rest_between_exercises or None,
        )
        self.blocks.append(block)
        self.layout_order.append(LayoutEntry("block", block.id))
        logger.debug("Added block %s (%s)", block.id, name)
        return block

    def update_block(self, block_id: str, **changes) -> WorkoutBlock:
        """
        Edit block fields: name, type, rounds, rest_between_exercises.

        Raises:
            KeyError: Unknown block
            TypeError: Unknown field name
            ValueError: Invalid block type
        """
        unknown = set(changes) - _BLOCK_FIELDS
        if unknown:
            raise TypeError(f"Unknown block fields: {sorted(unknown)}")
        block = self.get_block(block_id)
        updated = replace(block, **changes)
        self.blocks[self.blocks.index(block)] = updated
        return updated

    def remove_block(self, block_id: str) -> list[Exercise]:
        """
        Delete a block; its members become standalone exercises.

        Returns:
            The detached exercises, appended to the layout order in block order
        """
        block = self.get_block(block_id)
        members = ordered_block_members(self.exercises, block_id)

        self.blocks.remove(block)
        self._drop_layout("block", block_id)
        for ex in members:
            ex.position = self._next_position(None)
            ex.block_id = None
            self.layout_order.append(LayoutEntry("exercise", ex.id))

        logger.debug("Removed block %s, detached %d exercises", block_id, len(members))
        return members

    def group_exercise(self, exercise_id: str, block_id: str) -> Exercise:
        """Move an exercise into a block, at the end of the block."""
        exercise = self.get_exercise(exercise_id)
        self.get_block(block_id)
        if exercise.block_id == block_id:
            return exercise
        if exercise.block_id is None:
            self._drop_layout("exercise", exercise_id)
        exercise.position = self._next_position(block_id)
        exercise.block_id = block_id
        return exercise

    def ungroup_exercise(self, exercise_id: str) -> Exercise:
        """Take an exercise out of its block and append it to the layout."""
        exercise = self.get_exercise(exercise_id)
        if exercise.block_id is None:
            return exercise
        exercise.position = self._next_position(None)
        exercise.block_id = None
        self.layout_order.append(LayoutEntry("exercise", exercise_id))
        return exercise

    # ------------------------------------------------------------------
    # Ordering
    # ------------------------------------------------------------------

    def move_item(self, entry_type: LayoutType, entry_id: str, offset: int) -> bool:
        """
        Swap a layout entry with its neighbour.

        Returns:
            False when the move would leave the layout (no-op)
        """
        i = self._layout_index(entry_type, entry_id)
        if i < 0:
            raise KeyError(f"'{entry_id}' is not a top-level {entry_type}")
        j = i + offset
        if j < 0 or j >= len(self.layout_order):
            return False
        order = self.layout_order
        order[i], order[j] = order[j], order[i]
        return True

    def move_item_up(self, entry_type: LayoutType, entry_id: str) -> bool:
        return self.move_item(entry_type, entry_id, -1)

    def move_item_down(self, entry_type: LayoutType, entry_id: str) -> bool:
        return self.move_item(entry_type, entry_id, 1)

    def move_exercise_in_block(self, exercise_id: str, offset: int) -> bool:
        """Swap a block member with its neighbour; False at the ends or outside blocks."""
        exercise = self.get_exercise(exercise_id)
        if exercise.block_id is None:
            return False
        ids = [ex.id for ex in self.context_members(exercise.block_id)]
        i = ids.index(exercise_id)
        j = i + offset
        if j < 0 or j >= len(ids):
            return False
        ids[i], ids[j] = ids[j], ids[i]
        self.reorder(exercise.block_id, ids)
        return True

    def move_exercise_in_block_up(self, exercise_id: str) -> bool:
        return self.move_exercise_in_block(exercise_id, -1)

    def move_exercise_in_block_down(self, exercise_id: str) -> bool:
        return self.move_exercise_in_block(exercise_id, 1)

    def reorder(self, context_id: str | None, ordered_ids: Sequence[str]) -> list[Exercise]:
        """
        Set the order of exercises in a context and renumber positions.

        Args:
            context_id: Block id, or None for the standalone pool
            ordered_ids: Desired order; members not listed keep their
                relative order after the listed ones

        Returns:
            Context members in their new order

        Raises:
            KeyError: Unknown block, or an id that is not in the context
        """
        if context_id is not None:
            self.get_block(context_id)
        members = self.context_members(context_id)
        by_id = {ex.id: ex for ex in members}

        ordered: list[Exercise] = []
        for ex_id in ordered_ids:
            if ex_id not in by_id:
                raise KeyError(f"Exercise '{ex_id}' is not in this context")
            if by_id[ex_id] not in ordered:
                ordered.append(by_id[ex_id])
        ordered.extend(ex for ex in members if ex not in ordered)

        for position, ex in enumerate(ordered):
            ex.position = position

        if context_id is None:
            # Standalone slots in the layout take the new order; blocks stay put
            slots = [i for i, e in enumerate(self.layout_order) if e.type == "exercise"]
            in_layout = {self.layout_order[i].id for i in slots}
            listed = [ex for ex in ordered if ex.id in in_layout]
            for i, ex in zip(slots, listed):
                self.layout_order[i] = LayoutEntry("exercise", ex.id)
        return ordered

    def normalize_layout(self) -> None:
        """
        Re-establish the layout invariant.

        Drops dangling, duplicate and block-member entries, then appends any
        missing standalone exercise or block.
        """
        exercises = {ex.id: ex for ex in self.exercises}
        block_ids = {b.id for b in self.blocks}
        seen: set[tuple[str, str]] = set()
        layout: list[LayoutEntry] = []

        for entry in self.layout_order:
            key = (entry.type, entry.id)
            if key in seen:
                continue
            if entry.type == "exercise":
                ex = exercises.get(entry.id)
                if ex is None or ex.block_id is not None:
                    continue
            elif entry.id not in block_ids:
                continue
            seen.add(key)
            layout.append(entry)

        for ex in self.standalone_exercises():
            if ("exercise", ex.id) not in seen:
                layout.append(LayoutEntry("exercise", ex.id))
        for block in self.blocks:
            if ("block", block.id) not in seen:
                layout.append(LayoutEntry("block", block.id))

        if len(layout) != len(self.layout_order):
            logger.info("Layout order repaired: %d -> %d entries", len(self.layout_order), len(layout))
        self.layout_order = layout

    def clear(self) -> None:
        self.exercises = []
        self.blocks = []
        self.layout_order = []

    # ------------------------------------------------------------------
    # Derived views
    # ------------------------------------------------------------------

    def steps(self) -> list[WorkoutStep]:
        return expand_workout(self.exercises, self.blocks, self.layout_order)

    def summary(self) -> WorkoutSummary:
        return summarize_workout(self.exercises, self.blocks, self.layout_order)
