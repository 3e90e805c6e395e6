"""Tests for snapshot serialization and the JSON workout store."""

import json
from datetime import datetime, timezone

import pytest

from liftflow.core.models import (
    BlockProgression,
    Exercise,
    LayoutEntry,
    StepContext,
    StrengthParams,
    TimeParams,
    UnknownParams,
    WorkoutBlock,
    WorkoutState,
    WorkoutStep,
)
from liftflow.io import workout_store
from liftflow.io.serializers import (
    ValidationError,
    dict_to_params,
    dict_to_state,
    format_timestamp,
    json_to_state,
    parse_int_list,
    parse_str_list,
    parse_timestamp,
    state_to_dict,
    state_to_json,
    step_to_dict,
)
from liftflow.io.workout_store import LoadError, WorkoutStore, export_filename

T0 = datetime(2026, 2, 3, 4, 5, 6, 789123, tzinfo=timezone.utc)
SAVED = datetime(2026, 2, 3, 5, 0, tzinfo=timezone.utc)


def _state() -> WorkoutState:
    exercises = [
        Exercise(
            id="e1",
            name="Bench",
            original_input="3x10 @ 135lbs rest 90s",
            params=StrengthParams(sets=3, reps=10, weight="135 lbs", rest_period="90s"),
            timestamp=T0,
        ),
        Exercise(
            id="e2",
            name="Plank",
            original_input="1:00",
            params=TimeParams(time="1:00"),
            timestamp=T0,
            block_id="b1",
            block_progression=BlockProgression(round_times=("45s", "", "30s")),
            position=1,
        ),
        Exercise(
            id="e3",
            name="Press",
            original_input="1x8 @ 40/50kg",
            params=StrengthParams(sets=1, reps=8, progressive_weights=("40kg", "50kg")),
            timestamp=T0,
            block_id="b1",
        ),
    ]
    blocks = [WorkoutBlock("b1", "Core", "circuit", rounds=3, rest_between_exercises="30s")]
    layout = [LayoutEntry("exercise", "e1"), LayoutEntry("block", "b1")]
    return WorkoutState(exercises, blocks, layout)


class TestTimestamps:
    def test_millisecond_precision_with_z(self):
        assert format_timestamp(T0) == "2026-02-03T04:05:06.789Z"

    def test_parse_z_suffix(self):
        parsed = parse_timestamp("2026-02-03T04:05:06.789Z")
        assert parsed == T0.replace(microsecond=789000)

    def test_parse_invalid(self):
        with pytest.raises(ValidationError):
            parse_timestamp("yesterday")


class TestSnapshotDocument:
    def test_document_shape(self):
        doc = state_to_dict(_state(), SAVED)
        assert doc["version"] == 1
        assert doc["savedAt"] == "2026-02-03T05:00:00.000Z"
        assert doc["layoutOrder"] == [{"type": "exercise", "id": "e1"}, {"type": "block", "id": "b1"}]
        bench = doc["exercises"][0]
        assert bench["originalInput"] == "3x10 @ 135lbs rest 90s"
        assert bench["parsedData"] == {
            "type": "strength", "sets": 3, "reps": 10, "weight": "135 lbs", "restPeriod": "90s",
        }
        assert "blockId" not in bench

    def test_block_exercises_derived_from_block_id(self):
        doc = state_to_dict(_state(), SAVED)
        # e3 has the lower position, so it comes first
        assert doc["blocks"][0]["exercises"] == ["e3", "e2"]
        assert doc["blocks"][0]["restBetweenExercises"] == "30s"

    def test_round_trip(self):
        state = _state()
        restored = json_to_state(state_to_json(state, SAVED))
        assert restored.saved_at == SAVED
        assert restored.layout_order == state.layout_order
        assert restored.blocks == state.blocks
        for original, loaded in zip(state.exercises, restored.exercises):
            assert loaded.timestamp == original.timestamp.replace(microsecond=789000)
            loaded.timestamp = original.timestamp
            assert loaded == original

    def test_stored_block_exercises_are_ignored(self):
        doc = state_to_dict(_state(), SAVED)
        doc["blocks"][0]["exercises"] = ["e1"]
        state = dict_to_state(doc)
        assert [ex.id for ex in state.exercises if ex.block_id == "b1"] == ["e2", "e3"]
        assert state.exercises[0].block_id is None

    def test_missing_position_defaults_to_zero(self):
        doc = state_to_dict(_state(), SAVED)
        for ex in doc["exercises"]:
            del ex["position"]
        assert {ex.position for ex in dict_to_state(doc).exercises} == {0}

    def test_unknown_params_round_trip(self):
        params = dict_to_params({"type": "unknown", "restPeriod": "1:30"})
        assert params == UnknownParams(rest_period="1:30")


class TestSnapshotValidation:
    def _doc(self):
        return state_to_dict(_state(), SAVED)

    def test_newer_version_rejected(self):
        doc = self._doc()
        doc["version"] = 2
        with pytest.raises(ValidationError, match="newer"):
            dict_to_state(doc)

    @pytest.mark.parametrize("key", ["version", "savedAt", "exercises", "blocks", "layoutOrder"])
    def test_missing_top_level_key(self, key):
        doc = self._doc()
        del doc[key]
        with pytest.raises(ValidationError):
            dict_to_state(doc)

    def test_bad_block_type(self):
        doc = self._doc()
        doc["blocks"][0]["type"] = "pyramid"
        with pytest.raises(ValidationError):
            dict_to_state(doc)

    def test_bad_params_type(self):
        doc = self._doc()
        doc["exercises"][0]["parsedData"]["type"] = "yoga"
        with pytest.raises(ValidationError):
            dict_to_state(doc)

    def test_wrong_field_type(self):
        doc = self._doc()
        doc["exercises"][0]["name"] = 42
        with pytest.raises(ValidationError):
            dict_to_state(doc)

    def test_invalid_json(self):
        with pytest.raises(ValidationError):
            json_to_state("{not json")

    @pytest.mark.parametrize("value", [float("inf"), float("-inf"), float("nan")])
    def test_non_finite_numbers_rejected(self, value):
        doc = self._doc()
        doc["blocks"][0]["rounds"] = value
        with pytest.raises(ValidationError, match="finite"):
            dict_to_state(doc)

    def test_huge_exponent_in_json_text(self):
        # 1e400 parses to float("inf")
        text = json.dumps(self._doc()).replace('"position": 1', '"position": 1e400')
        with pytest.raises(ValidationError, match="exercise.position"):
            json_to_state(text)

    def test_non_finite_sets_rejected(self):
        doc = self._doc()
        doc["exercises"][0]["parsedData"]["sets"] = float("inf")
        with pytest.raises(ValidationError):
            dict_to_state(doc)


class TestStepDict:
    def test_block_step_uses_camel_case(self):
        step = WorkoutStep(
            id="e2-r1",
            exercise_id="e2",
            exercise_name="Plank",
            time="45s",
            context=StepContext("Core", "circuit", 1, 3, 2, 2),
            rest_after="30s",
        )
        assert step_to_dict(step) == {
            "id": "e2-r1",
            "exerciseId": "e2",
            "exerciseName": "Plank",
            "reps": None,
            "weight": None,
            "time": "45s",
            "distance": None,
            "restPeriod": None,
            "context": {
                "blockName": "Core",
                "blockType": "circuit",
                "currentRound": 1,
                "totalRounds": 3,
                "exerciseInBlock": 2,
                "totalExercisesInBlock": 2,
            },
            "restAfter": "30s",
        }

    def test_standalone_step_has_null_context(self):
        d = step_to_dict(WorkoutStep("e1-s1", "e1", "Bench", reps=10, rest_period="90s"))
        assert d["context"] is None
        assert d["restPeriod"] == "90s"
        json.dumps(d)


class TestListParsing:
    def test_int_list(self):
        assert parse_int_list("12, 10,abc,0,8") == [12, 10, None, None, 8]

    def test_str_list_keeps_blanks(self):
        assert parse_str_list("40kg, ,50kg") == ["40kg", "", "50kg"]


class TestWorkoutStore:
    def test_missing_file_is_empty_workout(self, tmp_path):
        store = WorkoutStore(tmp_path / "workout.json")
        assert not store.exists()
        assert store.load() == WorkoutState()

    def test_save_and_load(self, tmp_path):
        store = WorkoutStore(tmp_path / "nested" / "workout.json")
        store.save(_state(), SAVED)
        assert store.exists()
        loaded = store.load()
        assert [ex.id for ex in loaded.exercises] == ["e1", "e2", "e3"]
        assert loaded.saved_at == SAVED
        assert not (tmp_path / "nested" / "workout.json.tmp").exists()

    def test_corrupt_file_raises_load_error(self, tmp_path):
        path = tmp_path / "workout.json"
        path.write_text("{broken")
        store = WorkoutStore(path)
        with pytest.raises(LoadError, match="Invalid workout file format"):
            store.load()
        assert store.load_or_default() == WorkoutState()
        assert path.read_text() == "{broken"

    def test_invalid_document_raises_load_error(self, tmp_path):
        path = tmp_path / "workout.json"
        path.write_text(json.dumps({"version": 1}))
        with pytest.raises(LoadError):
            WorkoutStore(path).load()

    def test_non_utf8_file_raises_load_error(self, tmp_path):
        path = tmp_path / "workout.json"
        path.write_bytes(b"\xff\xfe\x00{\x00}")
        store = WorkoutStore(path)
        with pytest.raises(LoadError, match="not UTF-8"):
            store.load()
        assert store.load_or_default() == WorkoutState()

    def test_out_of_range_rounds_raises_load_error(self, tmp_path):
        path = tmp_path / "workout.json"
        text = json.dumps(state_to_dict(_state(), SAVED))
        path.write_text(text.replace('"rounds": 3', '"rounds": 1e400'))
        store = WorkoutStore(path)
        with pytest.raises(LoadError, match="block.rounds"):
            store.load()
        assert store.load_or_default() == WorkoutState()

    def test_failed_write_removes_temp_file(self, tmp_path, monkeypatch):
        path = tmp_path / "workout.json"
        store = WorkoutStore(path)
        store.save(_state(), SAVED)
        before = path.read_text()

        def broken_dump(*args, **kwargs):
            raise TypeError("not serializable")

        monkeypatch.setattr(workout_store.json, "dump", broken_dump)
        with pytest.raises(TypeError):
            store.save(_state(), SAVED)
        assert not (tmp_path / "workout.json.tmp").exists()
        assert path.read_text() == before

    def test_export_and_import(self, tmp_path):
        store = WorkoutStore(tmp_path / "workout.json")
        target = store.export(_state(), tmp_path / "exports", when=SAVED)
        assert target.name == "workout-20260203-0500.json"
        imported = WorkoutStore.import_file(target)
        assert imported.blocks == _state().blocks

    def test_import_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            WorkoutStore.import_file(tmp_path / "nope.json")

    def test_import_directory_raises_load_error(self, tmp_path):
        with pytest.raises(LoadError, match="Failed to import workout"):
            WorkoutStore.import_file(tmp_path)

    def test_clear(self, tmp_path):
        store = WorkoutStore(tmp_path / "workout.json")
        store.save(_state())
        store.clear()
        assert not store.exists()

    def test_export_filename(self):
        assert export_filename(datetime(2026, 12, 31, 23, 59)) == "workout-20261231-2359.json"
