"""
Data models for liftflow.

All core dataclasses representing exercises, blocks, the layout order and
the derived workout steps.  Parsed parameters are a small tagged family
(StrengthParams, TimeParams, CardioParams, UnknownParams); the flat
``parsedData`` shape only exists at the serialization boundary.

Block membership is carried solely by ``Exercise.block_id``.  Ordering
inside a context (the standalone pool or one block) is ``(position, timestamp)``.
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import ClassVar, Literal

from .config import BLOCK_TYPES, DEFAULT_BLOCK_TYPE, DEFAULT_ROUNDS, STATE_VERSION

ExerciseType = Literal["strength", "cardio", "time", "unknown"]
BlockType = Literal["round", "superset", "circuit"]
LayoutType = Literal["block", "exercise"]


@dataclass(frozen=True)
class ExerciseParams:
    """
    Base of the parsed-parameter variants.

    Every variant carries the independently extracted rest period.  Fields a
    variant does not define read as None through the class attributes below,
    so callers can ask any variant for ``reps`` or ``distance``.
    """

    rest_period: str | None = field(default=None, kw_only=True)

    kind: ClassVar[ExerciseType] = "unknown"

    sets = None
    reps = None
    weight = None
    progressive_weights = None
    time = None
    distance = None


@dataclass(frozen=True)
class StrengthParams(ExerciseParams):
    """Sets x reps, optionally at a single weight or a per-round weight list."""

    sets: int | None = None
    reps: int | None = None
    weight: str | None = None
    progressive_weights: tuple[str, ...] | None = None

    kind: ClassVar[ExerciseType] = "strength"

    def __post_init__(self) -> None:
        """Validate strength parameters."""
        if self.sets is not None and self.sets <= 0:
            raise ValueError("sets must be positive")
        if self.reps is not None and self.reps <= 0:
            raise ValueError("reps must be positive")
        if self.progressive_weights is not None:
            object.__setattr__(self, "progressive_weights", tuple(self.progressive_weights))


@dataclass(frozen=True)
class TimeParams(ExerciseParams):
    """A duration, either "MM:SS" or "<number> <unit>"."""

    time: str | None = None

    kind: ClassVar[ExerciseType] = "time"


@dataclass(frozen=True)
class CardioParams(ExerciseParams):
    """A distance, "<number> <unit>"."""

    distance: str | None = None

    kind: ClassVar[ExerciseType] = "cardio"


@dataclass(frozen=True)
class UnknownParams(ExerciseParams):
    """Nothing recognised; only a rest period may have been extracted."""

    kind: ClassVar[ExerciseType] = "unknown"


@dataclass(frozen=True)
class BlockProgression:
    """
    Per-round override table for an exercise inside a block.

    Each sequence is indexed by round number minus one.  Entries may be
    sparse: "", 0 or None mean "use the base value for that round".
    """

    round_weights: tuple[str, ...] = ()
    round_reps: tuple[int | None, ...] = ()
    round_times: tuple[str, ...] = ()
    round_distances: tuple[str, ...] = ()

    def __post_init__(self) -> None:
        for name in ("round_weights", "round_reps", "round_times", "round_distances"):
            object.__setattr__(self, name, tuple(getattr(self, name) or ()))

    def is_empty(self) -> bool:
        """True when no round carries any override."""
        return not (
            any(self.round_weights)
            or any(self.round_reps)
            or any(self.round_times)
            or any(self.round_distances)
        )


@dataclass
class Exercise:
    """
    A user-entered exercise with its parsed parameters.

    ``timestamp`` is the creation instant; ``position`` is the order key
    inside the exercise's context and is only changed by the workspace.
    """

    id: str
    name: str
    original_input: str
    params: ExerciseParams
    timestamp: datetime
    block_id: str | None = None
    block_progression: BlockProgression | None = None
    position: int = 0

    def __post_init__(self) -> None:
        """Validate exercise data."""
        if not self.id:
            raise ValueError("exercise id must be non-empty")
        if self.timestamp.tzinfo is None:
            self.timestamp = self.timestamp.replace(tzinfo=timezone.utc)

    @property
    def is_standalone(self) -> bool:
        return self.block_id is None

    @property
    def sort_key(self) -> tuple[int, datetime, str]:
        """Ordering key within the exercise's context."""
        return (self.position, self.timestamp, self.id)


@dataclass
class WorkoutBlock:
    """
    A named group of exercises run together for a number of rounds.

    ``type`` is a label only; every block type expands the same way.
    """

    id: str
    name: str
    type: BlockType = DEFAULT_BLOCK_TYPE  # type: ignore[assignment]
    rounds: int | None = None
    rest_between_exercises: str | None = None

    def __post_init__(self) -> None:
        """Validate block data."""
        if not self.id:
            raise ValueError("block id must be non-empty")
        if self.type not in BLOCK_TYPES:
            raise ValueError(f"Invalid block type: {self.type}. Must be one of {BLOCK_TYPES}")

    @property
    def effective_rounds(self) -> int:
        """Rounds to run; absent or non-positive counts as one round."""
        if self.rounds is None or self.rounds <= 0:
            return DEFAULT_ROUNDS
        return self.rounds


@dataclass(frozen=True)
class LayoutEntry:
    """One top-level slot of the workout: a standalone exercise or a block."""

    type: LayoutType
    id: str

    def __post_init__(self) -> None:
        if self.type not in ("block", "exercise"):
            raise ValueError(f"Invalid layout entry type: {self.type}")
        if not self.id:
            raise ValueError("layout entry id must be non-empty")


@dataclass(frozen=True)
class StepContext:
    """Where a block-derived step sits inside its block."""

    block_name: str
    block_type: BlockType
    current_round: int
    total_rounds: int
    exercise_in_block: int
    total_exercises_in_block: int


@dataclass(frozen=True)
class WorkoutStep:
    """
    One executable unit of a session.

    Either one set of a standalone exercise, or one exercise in one round
    of a block (then ``context`` is set and ``rest_after`` may be).
    """

    id: str
    exercise_id: str
    exercise_name: str
    reps: int | None = None
    weight: str | None = None
    time: str | None = None
    distance: str | None = None
    rest_period: str | None = None
    context: StepContext | None = None
    rest_after: str | None = None


@dataclass
class WorkoutState:
    """
    Complete workout snapshot: the unit persisted and restored as a whole.
    """

    exercises: list[Exercise] = field(default_factory=list)
    blocks: list[WorkoutBlock] = field(default_factory=list)
    layout_order: list[LayoutEntry] = field(default_factory=list)
    version: int = STATE_VERSION
    saved_at: datetime | None = None


@dataclass(frozen=True)
class WorkoutSummary:
    """Headline numbers for a workout."""

    total_exercises: int
    strength_exercises: int
    cardio_exercises: int  # cardio and time-based together
    block_count: int
    total_steps: int
