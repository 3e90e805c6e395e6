"""
Free-text exercise parameter parser.

Turns strings like "3x10 @ 135lbs", "30 minutes" or
"3x10 @ 40/50/60kg rest 30s" into a parsed-parameter variant.

The grammar is an ordered tuple of small matchers, one per rule; the first
matcher that returns a result wins:

    1. progressive strength   3x10 @ 40/50/60kg
    2. strength               3x10 [@ 135lbs]
    3. time                   30 minutes | 1:30
    4. distance               2 miles | 5km | 100m
    5. sets x reps            3x10
    6. weight                 135lbs

A rest clause ("rest 30s", "2min rest", "rest 1:30") is extracted first and
removed from the text, so it never disturbs the primary match.  Parsing never
fails: unmatched input yields UnknownParams.
"""

import re
from typing import Callable

from .config import DEFAULT_REST_SECONDS
from .models import CardioParams, ExerciseParams, StrengthParams, TimeParams, UnknownParams

_NUM = r"\d+(?:\.\d+)?"
_REST_UNIT = r"s|sec|seconds?|m|min|minutes?"
_WEIGHT_UNIT = r"lbs?|kg|pounds?"

# (pattern, is_clock): clock patterns capture minutes and seconds separately.
_REST_PATTERNS: tuple[tuple[re.Pattern[str], bool], ...] = (
    (re.compile(rf"rest\s+({_NUM})\s*({_REST_UNIT})"), False),
    (re.compile(rf"({_NUM})\s*({_REST_UNIT})\s+rest"), False),
    (re.compile(r"rest\s+(\d+):(\d+)"), True),
    (re.compile(r"(\d+):(\d+)\s+rest"), True),
)

_PROGRESSIVE_STRENGTH = re.compile(
    rf"(\d+)\s*x\s*(\d+)(?:\s*@\s*((?:{_NUM}/)*{_NUM})\s*({_WEIGHT_UNIT}))?"
)
_STRENGTH = re.compile(rf"(\d+)\s*x\s*(\d+)(?:\s*@\s*({_NUM})\s*({_WEIGHT_UNIT}))?")
_TIME = re.compile(
    rf"({_NUM})\s*(seconds?|secs?|minutes?|mins?|hours?|hrs?)|(\d+):(\d+)"
)
_DISTANCE = re.compile(rf"({_NUM})\s*(miles?|km|kilometers?|meters?|m|yards?|yds?)")
_SETS_REPS = re.compile(r"(\d+)\s*x\s*(\d+)")
_WEIGHT = re.compile(rf"({_NUM})\s*({_WEIGHT_UNIT})")

_DURATION = re.compile(rf"({_NUM})\s*({_REST_UNIT})")
_LEADING_INT = re.compile(r"\s*[+-]?(\d+)")

Matcher = Callable[[str, str | None], ExerciseParams | None]


def _positive_int(digits: str) -> int | None:
    """Integer value of a digit run, or None when it is zero."""
    value = int(digits)
    return value if value > 0 else None


def extract_rest_period(text: str) -> tuple[str | None, str]:
    """
    Find the first rest clause in already-folded text.

    Args:
        text: Lower-cased, stripped input

    Returns:
        (rest_period, remaining_text).  rest_period is None when no clause
        matched; remaining_text has the matched clause removed.
    """
    for pattern, is_clock in _REST_PATTERNS:
        m = pattern.search(text)
        if m is None:
            continue
        if is_clock:
            rest = f"{m.group(1)}:{m.group(2)}"
        else:
            rest = f"{m.group(1)}{m.group(2)}"
        # The unit alternation stops early ("30 seconds" matches "30 s");
        # drop the rest of the word along with the clause.
        end = m.end()
        while end < len(text) and text[end].isalpha():
            end += 1
        remaining = (text[: m.start()] + " " + text[end:]).strip()
        return rest, remaining
    return None, text


def _match_progressive_strength(text: str, rest: str | None) -> ExerciseParams | None:
    m = _PROGRESSIVE_STRENGTH.search(text)
    if m is None or m.group(3) is None or "/" not in m.group(3):
        return None
    unit = m.group(4)
    weights = tuple(f"{w.strip()}{unit}" for w in m.group(3).split("/"))
    return StrengthParams(
        sets=_positive_int(m.group(1)),
        reps=_positive_int(m.group(2)),
        progressive_weights=weights,
        rest_period=rest,
    )


def _match_strength(text: str, rest: str | None) -> ExerciseParams | None:
    m = _STRENGTH.search(text)
    if m is None:
        return None
    weight = f"{m.group(3)} {m.group(4)}" if m.group(3) and m.group(4) else None
    return StrengthParams(
        sets=_positive_int(m.group(1)),
        reps=_positive_int(m.group(2)),
        weight=weight,
        rest_period=rest,
    )


def _match_time(text: str, rest: str | None) -> ExerciseParams | None:
    m = _TIME.search(text)
    if m is None:
        return None
    if m.group(3) is not None:
        time = f"{m.group(3)}:{m.group(4)}"
    else:
        time = f"{m.group(1)} {m.group(2)}"
    return TimeParams(time=time, rest_period=rest)


def _match_distance(text: str, rest: str | None) -> ExerciseParams | None:
    m = _DISTANCE.search(text)
    if m is None:
        return None
    return CardioParams(distance=f"{m.group(1)} {m.group(2)}", rest_period=rest)


def _match_sets_reps(text: str, rest: str | None) -> ExerciseParams | None:
    m = _SETS_REPS.search(text)
    if m is None:
        return None
    return StrengthParams(
        sets=_positive_int(m.group(1)),
        reps=_positive_int(m.group(2)),
        rest_period=rest,
    )


def _match_weight(text: str, rest: str | None) -> ExerciseParams | None:
    m = _WEIGHT.search(text)
    if m is None:
        return None
    return StrengthParams(weight=f"{m.group(1)} {m.group(2)}", rest_period=rest)


# Priority order matters: earlier grammars shadow later ones.
MATCHERS: tuple[Matcher, ...] = (
    _match_progressive_strength,
    _match_strength,
    _match_time,
    _match_distance,
    _match_sets_reps,
    _match_weight,
)


def parse_exercise_parameters(text: str) -> ExerciseParams:
    """
    Parse one free-text parameter string.

    Args:
        text: Raw user input, e.g. "3x10 @ 135lbs rest 30s"

    Returns:
        The variant of the first matching grammar, or UnknownParams
        (carrying any extracted rest period) when nothing matches.
    """
    cleaned = (text or "").lower().strip()
    rest, remaining = extract_rest_period(cleaned)

    for matcher in MATCHERS:
        result = matcher(remaining, rest)
        if result is not None:
            return result

    return UnknownParams(rest_period=rest)


def _leading_int(text: str) -> int:
    m = _LEADING_INT.match(text)
    return int(m.group(1)) if m else 0


def parse_duration_seconds(text: str, default: int = DEFAULT_REST_SECONDS) -> int:
    """
    Convert a rest/time string to whole seconds.

    Accepts "MM:SS" or "<number><unit>" with unit s/sec/seconds/m/min/minutes;
    minute units are multiplied by 60.  Anything else returns ``default``.

    Examples:
        "1:30"  → 90
        "30s"   → 30
        "2min"  → 120
        "soon"  → 60
    """
    cleaned = text.lower().strip()

    if ":" in cleaned:
        parts = cleaned.split(":")
        if len(parts) == 2:
            return _leading_int(parts[0]) * 60 + _leading_int(parts[1])

    m = _DURATION.search(cleaned)
    if m:
        value = float(m.group(1))
        if m.group(2).startswith("m"):
            value *= 60
        return int(value)

    return default


def format_seconds(seconds: int) -> str:
    """Format seconds as M:SS for countdown display."""
    return f"{seconds // 60}:{seconds % 60:02d}"


def describe_params(params: ExerciseParams) -> list[str]:
    """Short human-readable labels for a parse result, in display order."""
    labels: list[str] = []
    if params.sets and params.reps:
        labels.append(f"{params.sets} × {params.reps}")
    if params.progressive_weights:
        labels.append(" → ".join(params.progressive_weights))
    elif params.weight:
        labels.append(params.weight)
    if params.time:
        labels.append(params.time)
    if params.distance:
        labels.append(params.distance)
    if params.rest_period:
        labels.append(f"Rest: {params.rest_period}")
    return labels
