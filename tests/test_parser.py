"""
Unit tests for the free-text parameter parser and duration helpers.

Grammar priority: progressive strength > strength > time > distance >
sets x reps > weight, with the rest clause extracted first.
"""

import pytest

from liftflow.core.models import CardioParams, StrengthParams, TimeParams, UnknownParams
from liftflow.core.parser import (
    describe_params,
    extract_rest_period,
    format_seconds,
    parse_duration_seconds,
    parse_exercise_parameters,
)


class TestStrength:
    def test_sets_reps_and_weight(self):
        p = parse_exercise_parameters("3x10 @ 135lbs")
        assert isinstance(p, StrengthParams)
        assert p.kind == "strength"
        assert p.sets == 3
        assert p.reps == 10
        assert p.weight == "135 lbs"
        assert p.progressive_weights is None

    def test_spaces_and_case_are_folded(self):
        p = parse_exercise_parameters("  4 X 8 @ 62.5 KG ")
        assert p.sets == 4
        assert p.reps == 8
        assert p.weight == "62.5 kg"

    def test_sets_reps_without_weight(self):
        p = parse_exercise_parameters("5x5")
        assert p.kind == "strength"
        assert (p.sets, p.reps) == (5, 5)
        assert p.weight is None

    def test_weight_only(self):
        p = parse_exercise_parameters("225 pounds")
        assert p.kind == "strength"
        assert p.weight == "225 pounds"
        assert p.sets is None
        assert p.reps is None

    def test_zero_sets_become_absent(self):
        p = parse_exercise_parameters("0x10")
        assert p.kind == "strength"
        assert p.sets is None
        assert p.reps == 10


class TestProgressiveStrength:
    def test_progressive_weights(self):
        p = parse_exercise_parameters("3x10 @ 40/50/60kg")
        assert p.kind == "strength"
        assert p.progressive_weights == ("40kg", "50kg", "60kg")
        assert p.weight is None

    @pytest.mark.parametrize(
        "text,count",
        [
            ("3x8 @ 40/45kg", 2),
            ("4x6 @ 100/110/120/130 lbs", 4),
            ("5x5 @ 20.5/22.5/25/27.5/30kg", 5),
        ],
    )
    def test_weight_count_matches_slashes(self, text, count):
        p = parse_exercise_parameters(text)
        assert len(p.progressive_weights) == count
        assert p.weight is None

    def test_decimal_weights_keep_unit(self):
        p = parse_exercise_parameters("2x5 @ 22.5/25lb")
        assert p.progressive_weights == ("22.5lb", "25lb")


class TestTimeAndDistance:
    def test_minutes(self):
        p = parse_exercise_parameters("30 minutes")
        assert isinstance(p, TimeParams)
        assert p.kind == "time"
        assert p.time == "30 minutes"

    def test_clock_time(self):
        p = parse_exercise_parameters("1:30")
        assert p.kind == "time"
        assert p.time == "1:30"

    def test_seconds(self):
        assert parse_exercise_parameters("45 sec").time == "45 sec"

    def test_miles(self):
        p = parse_exercise_parameters("2 miles")
        assert isinstance(p, CardioParams)
        assert p.kind == "cardio"
        assert p.distance == "2 miles"

    def test_kilometres_and_metres(self):
        assert parse_exercise_parameters("5km").distance == "5 km"
        assert parse_exercise_parameters("400m").distance == "400 m"

    def test_time_beats_distance(self):
        p = parse_exercise_parameters("20 min 3 miles")
        assert p.kind == "time"
        assert p.time == "20 min"


class TestRestPeriod:
    def test_rest_does_not_corrupt_strength(self):
        p = parse_exercise_parameters("3x10 @ 135lbs rest 30s")
        assert p.kind == "strength"
        assert p.weight == "135 lbs"
        assert p.rest_period == "30s"

    def test_trailing_rest(self):
        p = parse_exercise_parameters("3x10 2min rest")
        assert p.rest_period == "2min"
        assert (p.sets, p.reps) == (3, 10)

    def test_clock_rest(self):
        p = parse_exercise_parameters("4x6 rest 1:30")
        assert p.rest_period == "1:30"
        assert p.kind == "strength"

    def test_rest_word_is_removed_whole(self):
        rest, remaining = extract_rest_period("3x10 rest 90 seconds")
        assert rest == "90s"
        assert remaining == "3x10"

    def test_rest_on_time_exercise(self):
        p = parse_exercise_parameters("30 seconds rest 15s")
        assert p.kind == "time"
        assert p.time == "30 seconds"
        assert p.rest_period == "15s"

    def test_rest_alone_is_unknown(self):
        p = parse_exercise_parameters("1:30 rest")
        assert isinstance(p, UnknownParams)
        assert p.rest_period == "1:30"

    def test_no_rest(self):
        assert extract_rest_period("3x10") == (None, "3x10")


class TestUnknown:
    @pytest.mark.parametrize("text", ["", "   ", "gibberish", "until failure"])
    def test_unmatched_is_unknown(self, text):
        p = parse_exercise_parameters(text)
        assert p.kind == "unknown"
        for field in ("sets", "reps", "weight", "progressive_weights", "time", "distance"):
            assert getattr(p, field) is None
        assert p.rest_period is None

    def test_none_input(self):
        assert parse_exercise_parameters(None).kind == "unknown"


class TestDurations:
    @pytest.mark.parametrize(
        "text,seconds",
        [
            ("1:30", 90),
            ("0:45", 45),
            ("30s", 30),
            ("45 sec", 45),
            ("90 seconds", 90),
            ("2m", 120),
            ("2min", 120),
            ("1.5 minutes", 90),
        ],
    )
    def test_parse(self, text, seconds):
        assert parse_duration_seconds(text) == seconds

    def test_unrecognised_defaults_to_sixty(self):
        assert parse_duration_seconds("soon") == 60
        assert parse_duration_seconds("") == 60

    def test_custom_default(self):
        assert parse_duration_seconds("later", default=75) == 75

    def test_format_seconds(self):
        assert format_seconds(90) == "1:30"
        assert format_seconds(5) == "0:05"
        assert format_seconds(0) == "0:00"


class TestDescribe:
    def test_strength_labels(self):
        labels = describe_params(parse_exercise_parameters("3x10 @ 135lbs rest 30s"))
        assert labels == ["3 × 10", "135 lbs", "Rest: 30s"]

    def test_progressive_labels(self):
        labels = describe_params(parse_exercise_parameters("3x10 @ 40/50/60kg"))
        assert labels == ["3 × 10", "40kg → 50kg → 60kg"]

    def test_unknown_has_no_labels(self):
        assert describe_params(parse_exercise_parameters("whatever")) == []
