"""
Tests for the workspace editing operations.

After every operation the layout order must list each standalone exercise
and each block exactly once, and no block member.
"""

import itertools
from datetime import datetime, timedelta, timezone

import pytest

from liftflow.core.models import BlockProgression, LayoutEntry, WorkoutState
from liftflow.core.workspace import Workspace

T0 = datetime(2026, 5, 1, 7, 0, tzinfo=timezone.utc)


@pytest.fixture
def ws():
    counter = itertools.count(1)
    ticks = itertools.count()
    return Workspace(
        clock=lambda: T0 + timedelta(seconds=next(ticks)),
        id_factory=lambda: f"id{next(counter)}",
    )


def _layout(ws):
    return [(e.type, e.id) for e in ws.layout_order]


def _assert_layout_invariant(ws):
    standalone = {ex.id for ex in ws.exercises if ex.block_id is None}
    entries = _layout(ws)
    assert len(entries) == len(set(entries))
    assert {i for t, i in entries if t == "exercise"} == standalone
    assert {i for t, i in entries if t == "block"} == {b.id for b in ws.blocks}


class TestExercises:
    def test_add_goes_to_front(self, ws):
        a = ws.add_exercise("Squat", "5x5 @ 100kg")
        b = ws.add_exercise("Bench", "3x8")
        assert _layout(ws) == [("exercise", b.id), ("exercise", a.id)]
        assert a.params.weight == "100 kg"
        _assert_layout_invariant(ws)

    def test_add_into_block_forces_one_set(self, ws):
        block = ws.add_block("Finisher", "circuit", rounds=3)
        ex = ws.add_exercise("Push-ups", "3x15", block_id=block.id)
        assert ex.block_id == block.id
        assert ex.params.sets == 1
        assert ex.params.reps == 15
        assert _layout(ws) == [("block", block.id)]

    def test_add_into_unknown_block(self, ws):
        with pytest.raises(KeyError):
            ws.add_exercise("Push-ups", "3x15", block_id="nope")

    def test_update_reparses(self, ws):
        ex = ws.add_exercise("Run", "2 miles")
        ws.update_exercise(ex.id, name="Tempo run", raw_input="30 minutes")
        assert ex.name == "Tempo run"
        assert ex.params.kind == "time"
        assert ex.original_input == "30 minutes"

    def test_remove(self, ws):
        ex = ws.add_exercise("Run", "2 miles")
        ws.remove_exercise(ex.id)
        assert ws.exercises == []
        assert ws.layout_order == []
        with pytest.raises(KeyError):
            ws.remove_exercise(ex.id)


class TestBlocks:
    def test_group_and_ungroup(self, ws):
        ex = ws.add_exercise("Row", "3x12")
        block = ws.add_block("Back")
        ws.group_exercise(ex.id, block.id)
        assert ex.block_id == block.id
        assert _layout(ws) == [("block", block.id)]

        ws.ungroup_exercise(ex.id)
        assert ex.block_id is None
        assert _layout(ws) == [("block", block.id), ("exercise", ex.id)]
        _assert_layout_invariant(ws)

    def test_group_appends_to_end_of_block(self, ws):
        block = ws.add_block("B")
        first = ws.add_exercise("First", "1x5", block_id=block.id)
        second = ws.add_exercise("Second", "1x5")
        ws.group_exercise(second.id, block.id)
        assert [e.id for e in ws.block_exercises(block.id)] == [first.id, second.id]

    def test_remove_block_detaches_members_in_order(self, ws):
        block = ws.add_block("B", rounds=2)
        a = ws.add_exercise("A", "1x5", block_id=block.id)
        b = ws.add_exercise("B", "1x5", block_id=block.id)
        solo = ws.add_exercise("Solo", "1x5")
        detached = ws.remove_block(block.id)
        assert [e.id for e in detached] == [a.id, b.id]
        assert ws.blocks == []
        assert _layout(ws) == [("exercise", solo.id), ("exercise", a.id), ("exercise", b.id)]
        assert [e.id for e in ws.standalone_exercises()] == [solo.id, a.id, b.id]
        _assert_layout_invariant(ws)

    def test_update_block(self, ws):
        block = ws.add_block("B")
        updated = ws.update_block(block.id, name="Core", type="round", rounds=4)
        assert (updated.name, updated.type, updated.rounds) == ("Core", "round", 4)
        assert ws.get_block(block.id) is updated

    def test_update_block_rejects_bad_input(self, ws):
        block = ws.add_block("B")
        with pytest.raises(TypeError):
            ws.update_block(block.id, colour="red")
        with pytest.raises(ValueError):
            ws.update_block(block.id, type="pyramid")

    def test_progression_requires_block(self, ws):
        ex = ws.add_exercise("Solo", "3x10")
        with pytest.raises(ValueError):
            ws.set_progression(ex.id, BlockProgression(round_reps=(10,)))

    def test_round_weights_replace_progressive_weights(self, ws):
        block = ws.add_block("B", rounds=3)
        ex = ws.add_exercise("Press", "3x8 @ 40/50/60kg", block_id=block.id)
        assert ex.params.progressive_weights == ("40kg", "50kg", "60kg")
        ws.set_progression(ex.id, BlockProgression(round_weights=("45kg", "55kg")))
        assert ex.params.progressive_weights == ("45kg", "55kg")
        ws.set_progression(ex.id, None)
        assert ex.params.progressive_weights == ("40kg", "50kg", "60kg")


class TestOrdering:
    def test_move_item(self, ws):
        a = ws.add_exercise("A", "1x5")
        block = ws.add_block("B")
        assert _layout(ws) == [("exercise", a.id), ("block", block.id)]
        assert ws.move_item_down("exercise", a.id)
        assert _layout(ws) == [("block", block.id), ("exercise", a.id)]
        assert not ws.move_item_down("exercise", a.id)
        assert ws.move_item_up("exercise", a.id)
        assert not ws.move_item_up("exercise", a.id)

    def test_move_unknown_item(self, ws):
        with pytest.raises(KeyError):
            ws.move_item("block", "missing", 1)

    def test_move_in_block(self, ws):
        block = ws.add_block("B")
        a = ws.add_exercise("A", "1x5", block_id=block.id)
        b = ws.add_exercise("B", "1x5", block_id=block.id)
        assert ws.move_exercise_in_block_up(b.id)
        assert [e.id for e in ws.block_exercises(block.id)] == [b.id, a.id]
        assert not ws.move_exercise_in_block_up(b.id)
        # Reordering never touches creation timestamps
        assert a.timestamp < b.timestamp

    def test_reorder_block(self, ws):
        block = ws.add_block("B")
        ids = [ws.add_exercise(n, "1x5", block_id=block.id).id for n in "ABC"]
        ordered = ws.reorder(block.id, [ids[2], ids[0]])
        assert [e.id for e in ordered] == [ids[2], ids[0], ids[1]]
        assert [e.position for e in ordered] == [0, 1, 2]
        steps = ws.steps()
        assert [s.exercise_id for s in steps] == [ids[2], ids[0], ids[1]]

    def test_reorder_rejects_foreign_ids(self, ws):
        block = ws.add_block("B")
        solo = ws.add_exercise("Solo", "1x5")
        with pytest.raises(KeyError):
            ws.reorder(block.id, [solo.id])

    def test_reorder_standalone_keeps_block_slots(self, ws):
        a = ws.add_exercise("A", "1x5")
        block = ws.add_block("B")
        b = ws.add_exercise("B", "1x5")
        assert _layout(ws) == [("exercise", b.id), ("exercise", a.id), ("block", block.id)]
        ws.move_item_up("block", block.id)
        ws.reorder(None, [a.id, b.id])
        assert _layout(ws) == [("exercise", a.id), ("block", block.id), ("exercise", b.id)]
        _assert_layout_invariant(ws)


class TestSnapshots:
    def test_from_state_repairs_layout(self, ws):
        block = ws.add_block("B")
        member = ws.add_exercise("M", "1x5", block_id=block.id)
        solo = ws.add_exercise("S", "1x5")
        state = ws.snapshot()
        state.layout_order = [
            LayoutEntry("exercise", member.id),
            LayoutEntry("exercise", "ghost"),
            LayoutEntry("block", block.id),
            LayoutEntry("block", block.id),
        ]
        repaired = Workspace.from_state(state)
        assert _layout(repaired) == [("block", block.id), ("exercise", solo.id)]

    def test_snapshot_is_independent(self, ws):
        ex = ws.add_exercise("A", "1x5")
        state = ws.snapshot()
        ws.update_exercise(ex.id, name="Changed")
        assert state.exercises[0].name == "A"

    def test_clear(self, ws):
        ws.add_block("B")
        ws.add_exercise("A", "1x5")
        ws.clear()
        assert ws.snapshot() == WorkoutState()

    def test_summary(self, ws):
        block = ws.add_block("B", rounds=2)
        ws.add_exercise("A", "1x5", block_id=block.id)
        ws.add_exercise("Run", "2 miles")
        summary = ws.summary()
        assert summary.total_exercises == 2
        assert summary.cardio_exercises == 1
        assert summary.total_steps == 3
