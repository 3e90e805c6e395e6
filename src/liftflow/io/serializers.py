"""
JSON serialization for workout data models.

Handles conversion between dataclasses and the versioned snapshot document:

    {
      "version": 1,
      "savedAt": "2026-10-18T09:30:00.000Z",
      "exercises": [...],
      "blocks": [...],
      "layoutOrder": [{"type": "block", "id": "..."}, ...]
    }

Keys are camelCase and parsed parameters are the flat ``parsedData``
object, so documents written by earlier versions of the app load unchanged.
"""

import json
import math
from datetime import datetime, timezone
from typing import Any

from ..core.config import BLOCK_TYPES, STATE_VERSION
from ..core.expansion import ordered_block_members
from ..core.models import (
    BlockProgression,
    CardioParams,
    Exercise,
    ExerciseParams,
    LayoutEntry,
    StepContext,
    StrengthParams,
    TimeParams,
    UnknownParams,
    WorkoutBlock,
    WorkoutState,
    WorkoutStep,
)

_EXERCISE_TYPES = ("strength", "cardio", "time", "unknown")


class ValidationError(Exception):
    """Raised when data validation fails."""

    pass


# =============================================================================
# Field validators
# =============================================================================


def _require(data: dict[str, Any], key: str, where: str) -> Any:
    if key not in data:
        raise ValidationError(f"{where}: missing field '{key}'")
    return data[key]


def validate_str(value: Any, name: str, optional: bool = False) -> str | None:
    """
    Validate a string field.

    Raises:
        ValidationError: If value is not a string (or None when optional)
    """
    if value is None and optional:
        return None
    if not isinstance(value, str):
        raise ValidationError(f"{name} must be a string, got {type(value).__name__}")
    return value


def validate_number(value: Any, name: str, optional: bool = False) -> int | float | None:
    """
    Validate a numeric field (bool, NaN and infinities are rejected).

    Raises:
        ValidationError: If value is not a finite number (or None when optional)
    """
    if value is None and optional:
        return None
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ValidationError(f"{name} must be a number, got {value!r}")
    if not math.isfinite(value):
        raise ValidationError(f"{name} must be finite, got {value!r}")
    return value


def validate_list(value: Any, name: str, optional: bool = False) -> list | None:
    if value is None and optional:
        return None
    if not isinstance(value, list):
        raise ValidationError(f"{name} must be a list, got {type(value).__name__}")
    return value


def _optional_int(value: Any, name: str) -> int | None:
    """Whole number or None; non-positive counts become None."""
    number = validate_number(value, name, optional=True)
    if number is None:
        return None
    number = int(number)
    return number if number > 0 else None


# =============================================================================
# Timestamps
# =============================================================================


def format_timestamp(value: datetime) -> str:
    """
    Format an instant as ISO-8601 UTC with millisecond precision.

    Example: 2026-10-18T09:30:00.123Z
    """
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    utc = value.astimezone(timezone.utc)
    return utc.strftime("%Y-%m-%dT%H:%M:%S.") + f"{utc.microsecond // 1000:03d}Z"


def parse_timestamp(value: Any, name: str = "timestamp") -> datetime:
    """
    Parse an ISO-8601 string into an aware datetime (naive input is UTC).

    Raises:
        ValidationError: If the string is not a valid ISO-8601 instant
    """
    text = validate_str(value, name) or ""
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    try:
        parsed = datetime.fromisoformat(text)
    except ValueError as e:
        raise ValidationError(f"Invalid {name}: {value!r}") from e
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


# =============================================================================
# Parsed parameters
# =============================================================================


def params_to_dict(params: ExerciseParams) -> dict[str, Any]:
    """
    Convert a parameter variant to the flat ``parsedData`` dict.

    Absent fields are omitted.
    """
    d: dict[str, Any] = {"type": params.kind}
    if params.sets is not None:
        d["sets"] = params.sets
    if params.reps is not None:
        d["reps"] = params.reps
    if params.weight is not None:
        d["weight"] = params.weight
    if params.progressive_weights is not None:
        d["progressiveWeights"] = list(params.progressive_weights)
    if params.time is not None:
        d["time"] = params.time
    if params.distance is not None:
        d["distance"] = params.distance
    if params.rest_period is not None:
        d["restPeriod"] = params.rest_period
    return d


def dict_to_params(data: dict[str, Any]) -> ExerciseParams:
    """
    Convert a flat ``parsedData`` dict to its variant.

    Raises:
        ValidationError: If the type is unknown or a field has the wrong type
    """
    if not isinstance(data, dict):
        raise ValidationError("parsedData must be an object")

    kind = data.get("type")
    if kind not in _EXERCISE_TYPES:
        raise ValidationError(
            f"Invalid parsedData.type: {kind!r}. Must be one of {_EXERCISE_TYPES}"
        )
    rest = validate_str(data.get("restPeriod"), "parsedData.restPeriod", optional=True)

    if kind == "strength":
        weights = validate_list(
            data.get("progressiveWeights"), "parsedData.progressiveWeights", optional=True
        )
        return StrengthParams(
            sets=_optional_int(data.get("sets"), "parsedData.sets"),
            reps=_optional_int(data.get("reps"), "parsedData.reps"),
            weight=validate_str(data.get("weight"), "parsedData.weight", optional=True),
            progressive_weights=(
                tuple(validate_str(w, "parsedData.progressiveWeights[]") for w in weights)  # type: ignore[misc]
                if weights is not None
                else None
            ),
            rest_period=rest,
        )
    if kind == "time":
        return TimeParams(
            time=validate_str(data.get("time"), "parsedData.time", optional=True),
            rest_period=rest,
        )
    if kind == "cardio":
        return CardioParams(
            distance=validate_str(data.get("distance"), "parsedData.distance", optional=True),
            rest_period=rest,
        )
    return UnknownParams(rest_period=rest)


# =============================================================================
# Exercises
# =============================================================================


def progression_to_dict(progression: BlockProgression) -> dict[str, Any]:
    """Convert BlockProgression to a dict, omitting empty lists."""
    d: dict[str, Any] = {}
    if progression.round_weights:
        d["roundWeights"] = list(progression.round_weights)
    if progression.round_reps:
        d["roundReps"] = [r if r is not None else 0 for r in progression.round_reps]
    if progression.round_times:
        d["roundTimes"] = list(progression.round_times)
    if progression.round_distances:
        d["roundDistances"] = list(progression.round_distances)
    return d


def dict_to_progression(data: dict[str, Any]) -> BlockProgression:
    """
    Convert a ``blockProgression`` dict to BlockProgression.

    Raises:
        ValidationError: If a list has the wrong element type
    """
    if not isinstance(data, dict):
        raise ValidationError("blockProgression must be an object")

    def strings(key: str) -> tuple[str, ...]:
        values = validate_list(data.get(key), f"blockProgression.{key}", optional=True) or []
        return tuple(validate_str(v, f"blockProgression.{key}[]") for v in values)  # type: ignore[misc]

    reps = validate_list(data.get("roundReps"), "blockProgression.roundReps", optional=True) or []
    return BlockProgression(
        round_weights=strings("roundWeights"),
        round_reps=tuple(_optional_int(r, "blockProgression.roundReps[]") for r in reps),
        round_times=strings("roundTimes"),
        round_distances=strings("roundDistances"),
    )


def exercise_to_dict(exercise: Exercise) -> dict[str, Any]:
    """
    Convert Exercise to JSON-compatible dict.

    Args:
        exercise: Exercise to convert

    Returns:
        Dict representation
    """
    d: dict[str, Any] = {
        "id": exercise.id,
        "name": exercise.name,
        "originalInput": exercise.original_input,
        "parsedData": params_to_dict(exercise.params),
        "timestamp": format_timestamp(exercise.timestamp),
        "position": exercise.position,
    }
    if exercise.block_id is not None:
        d["blockId"] = exercise.block_id
    if exercise.block_progression is not None:
        d["blockProgression"] = progression_to_dict(exercise.block_progression)
    return d


def dict_to_exercise(data: dict[str, Any]) -> Exercise:
    """
    Convert dict to Exercise.

    Snapshots without ``position`` load with position 0 everywhere, which
    orders each context by timestamp.

    Raises:
        ValidationError: If data is invalid
    """
    if not isinstance(data, dict):
        raise ValidationError("exercise must be an object")
    where = f"exercise {data.get('id', '?')!r}"

    ex_id = validate_str(_require(data, "id", where), "exercise.id")
    if not ex_id:
        raise ValidationError("exercise.id must be non-empty")
    progression = data.get("blockProgression")

    return Exercise(
        id=ex_id,
        name=validate_str(_require(data, "name", where), "exercise.name"),  # type: ignore[arg-type]
        original_input=validate_str(  # type: ignore[arg-type]
            _require(data, "originalInput", where), "exercise.originalInput"
        ),
        params=dict_to_params(_require(data, "parsedData", where)),
        timestamp=parse_timestamp(_require(data, "timestamp", where)),
        block_id=validate_str(data.get("blockId"), "exercise.blockId", optional=True) or None,
        block_progression=dict_to_progression(progression) if progression is not None else None,
        position=int(validate_number(data.get("position", 0), "exercise.position")),  # type: ignore[arg-type]
    )


# =============================================================================
# Blocks and layout
# =============================================================================


def block_to_dict(block: WorkoutBlock, exercises: list[Exercise]) -> dict[str, Any]:
    """
    Convert WorkoutBlock to JSON-compatible dict.

    The ``exercises`` id list is derived from Exercise.block_id on every
    write; it is kept only for readers of the older document shape.
    """
    d: dict[str, Any] = {
        "id": block.id,
        "name": block.name,
        "type": block.type,
        "exercises": [ex.id for ex in ordered_block_members(exercises, block.id)],
    }
    if block.rest_between_exercises is not None:
        d["restBetweenExercises"] = block.rest_between_exercises
    if block.rounds is not None:
        d["rounds"] = block.rounds
    return d


def dict_to_block(data: dict[str, Any]) -> WorkoutBlock:
    """
    Convert dict to WorkoutBlock.  The stored ``exercises`` list is ignored.

    Raises:
        ValidationError: If data is invalid
    """
    if not isinstance(data, dict):
        raise ValidationError("block must be an object")
    where = f"block {data.get('id', '?')!r}"

    block_id = validate_str(_require(data, "id", where), "block.id")
    if not block_id:
        raise ValidationError("block.id must be non-empty")
    block_type = _require(data, "type", where)
    if block_type not in BLOCK_TYPES:
        raise ValidationError(f"Invalid block type: {block_type!r}. Must be one of {BLOCK_TYPES}")
    validate_list(data.get("exercises"), "block.exercises", optional=True)
    rounds = validate_number(data.get("rounds"), "block.rounds", optional=True)

    return WorkoutBlock(
        id=block_id,
        name=validate_str(_require(data, "name", where), "block.name"),  # type: ignore[arg-type]
        type=block_type,
        rounds=int(rounds) if rounds is not None else None,
        rest_between_exercises=validate_str(
            data.get("restBetweenExercises"), "block.restBetweenExercises", optional=True
        ),
    )


def layout_entry_to_dict(entry: LayoutEntry) -> dict[str, Any]:
    return {"type": entry.type, "id": entry.id}


def dict_to_layout_entry(data: dict[str, Any]) -> LayoutEntry:
    if not isinstance(data, dict):
        raise ValidationError("layoutOrder entry must be an object")
    entry_type = data.get("type")
    if entry_type not in ("block", "exercise"):
        raise ValidationError(f"Invalid layoutOrder type: {entry_type!r}")
    entry_id = validate_str(data.get("id"), "layoutOrder.id")
    if not entry_id:
        raise ValidationError("layoutOrder.id must be non-empty")
    return LayoutEntry(type=entry_type, id=entry_id)


# =============================================================================
# Session steps
# =============================================================================


def _step_context_to_dict(context: StepContext) -> dict[str, Any]:
    return {
        "blockName": context.block_name,
        "blockType": context.block_type,
        "currentRound": context.current_round,
        "totalRounds": context.total_rounds,
        "exerciseInBlock": context.exercise_in_block,
        "totalExercisesInBlock": context.total_exercises_in_block,
    }


def step_to_dict(step: WorkoutStep) -> dict[str, Any]:
    """
    Convert an expanded WorkoutStep to a JSON-compatible dict.

    Every key is present; absent values are null.
    """
    return {
        "id": step.id,
        "exerciseId": step.exercise_id,
        "exerciseName": step.exercise_name,
        "reps": step.reps,
        "weight": step.weight,
        "time": step.time,
        "distance": step.distance,
        "restPeriod": step.rest_period,
        "context": _step_context_to_dict(step.context) if step.context is not None else None,
        "restAfter": step.rest_after,
    }


# =============================================================================
# Snapshot document
# =============================================================================


def state_to_dict(state: WorkoutState, saved_at: datetime | None = None) -> dict[str, Any]:
    """
    Convert a full WorkoutState to the snapshot document.

    Args:
        state: State to convert
        saved_at: Save instant; defaults to state.saved_at, then now

    Returns:
        Dict representation
    """
    when = saved_at or state.saved_at or datetime.now(timezone.utc)
    return {
        "version": STATE_VERSION,
        "savedAt": format_timestamp(when),
        "exercises": [exercise_to_dict(ex) for ex in state.exercises],
        "blocks": [block_to_dict(b, state.exercises) for b in state.blocks],
        "layoutOrder": [layout_entry_to_dict(e) for e in state.layout_order],
    }


def dict_to_state(data: dict[str, Any]) -> WorkoutState:
    """
    Convert a snapshot document to WorkoutState.

    Raises:
        ValidationError: If the document is invalid or from a newer version
    """
    if not isinstance(data, dict):
        raise ValidationError("Snapshot must be a JSON object")

    version = validate_number(_require(data, "version", "snapshot"), "version")
    if version > STATE_VERSION:  # type: ignore[operator]
        raise ValidationError(
            f"Snapshot version {version} is newer than supported version {STATE_VERSION}"
        )

    exercises = validate_list(_require(data, "exercises", "snapshot"), "exercises")
    blocks = validate_list(_require(data, "blocks", "snapshot"), "blocks")
    layout = validate_list(_require(data, "layoutOrder", "snapshot"), "layoutOrder")

    try:
        return WorkoutState(
            exercises=[dict_to_exercise(ex) for ex in exercises],  # type: ignore[union-attr]
            blocks=[dict_to_block(b) for b in blocks],  # type: ignore[union-attr]
            layout_order=[dict_to_layout_entry(e) for e in layout],  # type: ignore[union-attr]
            version=int(version),  # type: ignore[arg-type]
            saved_at=parse_timestamp(_require(data, "savedAt", "snapshot"), "savedAt"),
        )
    except (ValueError, OverflowError) as e:
        # Model-level invariants (__post_init__) surface as ValueError
        raise ValidationError(str(e)) from e


def state_to_json(state: WorkoutState, saved_at: datetime | None = None) -> str:
    """Serialize a state to an indented JSON document."""
    return json.dumps(state_to_dict(state, saved_at), indent=2)


def json_to_state(text: str) -> WorkoutState:
    """
    Deserialize a JSON document to WorkoutState.

    Raises:
        ValidationError: If JSON is invalid or data validation fails
    """
    try:
        data = json.loads(text)
    except json.JSONDecodeError as e:
        raise ValidationError(f"Invalid JSON: {e}") from e
    return dict_to_state(data)


def parse_int_list(text: str) -> list[int | None]:
    """
    Parse "12,10,8" into per-round ints.

    Non-numeric or non-positive entries become None ("use base value").
    """
    result: list[int | None] = []
    for part in text.split(","):
        part = part.strip()
        try:
            value = int(part)
        except ValueError:
            result.append(None)
            continue
        result.append(value if value > 0 else None)
    return result


def parse_str_list(text: str) -> list[str]:
    """Parse "40kg,45kg,,50kg" into per-round strings; blanks stay "" (use base)."""
    return [part.strip() for part in text.split(",")]
