"""Tests for the allocation run orchestrator."""

import sys
import os
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

import logging
import random
from datetime import datetime

import pytest

from models.hall import Hall
from models.student import Student
from engine import allocation_engine
from engine.allocation_engine import (
    create_allocation_run,
    generate_seed,
    regenerate_run,
    run_allocation,
)
from engine.conflicts import detect_conflicts
from engine.errors import (
    InsufficientCapacity,
    NoActiveHalls,
    NoStudentsRegistered,
    SeatsExhausted,
)
from data.run_store import InMemoryRunStore, PersistenceError


def make_hall(hall_id="H1", rows=5, columns=5, active=True):
    return Hall(hall_id, f"Hall {hall_id}", rows, columns, active)


def make_roster(counts):
    """counts: list of (class_group, count)."""
    students = []
    n = 1
    for group, count in counts:
        for _ in range(count):
            students.append(Student(f"S{n:03d}", f"Student {n}", group))
            n += 1
    return students


def make_run(seed="fixed-seed", numbering="row_major", strictness="hard"):
    return create_allocation_run(seat_numbering=numbering, adjacency_strictness=strictness, seed=seed)


def layout(result):
    return [(a.hall_id, a.student_id, a.row, a.column, a.seat_number) for a in result.allocations]


class FailingCommitStore(InMemoryRunStore):
    """Stages normally but refuses to publish."""

    def begin(self, run):
        transaction = super().begin(run)

        def commit():
            raise PersistenceError("disk full")

        transaction.commit = commit
        return transaction


class TestCreateRun:
    def test_generated_seed(self):
        seed = generate_seed()
        assert len(seed) == 32
        assert seed.isalnum()

    def test_explicit_seed_kept(self):
        run = make_run(seed="term-1")
        assert run.seed == "term-1"
        assert run.completed_at is None
        assert run.metadata == {}

    def test_seed_too_long(self):
        with pytest.raises(ValueError):
            make_run(seed="x" * 65)

    def test_unknown_options_rejected(self):
        with pytest.raises(ValueError):
            make_run(numbering="diagonal")
        with pytest.raises(ValueError):
            make_run(strictness="strict")

    def test_regenerate_copies_settings_with_new_seed(self):
        run = make_run(numbering="column_major", strictness="soft")
        new_run = regenerate_run(run)
        assert new_run.run_id != run.run_id
        assert new_run.seed != run.seed
        assert new_run.seat_numbering == "column_major"
        assert new_run.adjacency_strictness == "soft"
        assert run.run_id in new_run.notes


class TestRunAllocation:
    def test_basic_run(self):
        halls = [make_hall("H1", 5, 5), make_hall("H2", 4, 4)]
        students = make_roster([("A", 12), ("B", 10), ("C", 8)])
        result = run_allocation(make_run(), halls, students)

        assert result.success
        assert result.stage == "completed"
        assert result.run.is_completed
        assert len(result.allocations) == 30
        assert result.message == "Allocation completed successfully"
        assert len(result.explanation_steps) >= 7

    def test_capacity_respected(self):
        halls = [make_hall("H1", 3, 3), make_hall("H2", 2, 2), make_hall("H3", 9, 9, active=False)]
        students = make_roster([("A", 6), ("B", 5), (None, 2)])
        result = run_allocation(make_run(), halls, students)

        assert result.success
        assert {a.hall_id for a in result.allocations} <= {"H1", "H2"}
        assert len({(a.hall_id, a.row, a.column) for a in result.allocations}) == 13
        assert sorted(a.student_id for a in result.allocations) == sorted(s.student_id for s in students)
        hall_by_id = {h.hall_id: h for h in halls}
        for a in result.allocations:
            assert hall_by_id[a.hall_id].has_position(a.row, a.column)

    def test_same_seed_same_layout(self):
        halls = [make_hall("H1", 6, 6), make_hall("H2", 4, 5)]
        students = make_roster([("A", 20), ("B", 15), ("C", 9)])
        first = run_allocation(make_run(seed="repeat-me"), halls, students)
        second = run_allocation(make_run(seed="repeat-me"), halls, students)

        assert first.run.run_id != second.run.run_id
        assert layout(first) == layout(second)
        assert [c.pair for c in first.conflicts] == [c.pair for c in second.conflicts]
        assert first.resolution_attempts == second.resolution_attempts

    def test_different_seeds_differ(self):
        halls = [make_hall("H1", 8, 8)]
        students = make_roster([("A", 30), ("B", 30)])
        first = run_allocation(make_run(seed="alpha"), halls, students)
        second = run_allocation(make_run(seed="beta"), halls, students)
        assert layout(first) != layout(second)

    def test_global_random_state_untouched(self):
        random.seed(99)
        before = random.getstate()
        run_allocation(make_run(), [make_hall("H1", 3, 3)], make_roster([("A", 5), ("B", 4)]))
        assert random.getstate() == before

    def test_column_major_labels(self):
        result = run_allocation(
            make_run(numbering="column_major"), [make_hall("H1", 3, 4)], make_roster([("A", 1)]),
        )
        a = result.allocations[0]
        assert (a.row, a.column, a.seat_number) == (1, 1, 1)
        assert result.metadata["seat_numbering_used"] == "column_major"

    def test_two_by_two_hard_mode_ends_on_diagonals(self):
        result = run_allocation(
            make_run(strictness="hard"), [make_hall("H1", 2, 2)], make_roster([("A", 2), ("B", 2)]),
        )
        assert result.success
        # Round-robin seats both A students on row 1, so repair is needed
        assert result.initial_conflicts_count == 2
        assert result.conflicts == []
        seats = {a.position: a.class_group for a in result.allocations}
        assert seats[(1, 1)] == seats[(2, 2)]
        assert seats[(1, 2)] == seats[(2, 1)]
        assert seats[(1, 1)] != seats[(1, 2)]

    def test_two_by_two_soft_mode_keeps_round_robin_layout(self):
        result = run_allocation(
            make_run(strictness="soft"), [make_hall("H1", 2, 2)], make_roster([("A", 2), ("B", 2)]),
        )
        assert [(a.class_group, a.seat_number) for a in result.allocations] == [
            ("A", 1), ("B", 4), ("A", 2), ("B", 3),
        ]
        assert len(result.conflicts) == 2
        assert result.resolution_attempts == 0

    def test_soft_mode_reports_adjacent_pair(self):
        result = run_allocation(
            make_run(strictness="soft"), [make_hall("H1", 1, 2)], make_roster([("A", 2)]),
        )
        assert result.success
        assert len(result.conflicts) == 1
        assert result.conflicts[0].conflict_type == "same_class_adjacent"
        assert result.conflicts[0].resolved is False
        assert result.summary["has_unresolved_conflicts"] is True
        assert result.resolution_attempts == 0
        assert "soft adjacency" in result.warnings[0]

    def test_hard_mode_gives_up_after_budget(self):
        result = run_allocation(
            make_run(strictness="hard"), [make_hall("H1", 1, 2)], make_roster([("A", 2)]),
        )
        assert result.success
        assert len(result.conflicts) == 1
        assert result.resolution_attempts == 1000
        assert "could not be resolved" in result.warnings[0]

    def test_rule_config_caps_attempts(self):
        result = run_allocation(
            make_run(), [make_hall("H1", 1, 2)], make_roster([("A", 2)]),
            rule_config={"max_resolution_attempts": 25},
        )
        assert result.resolution_attempts == 25
        assert result.metadata["resolution_attempts"] == 25

    def test_rule_config_cannot_raise_budget(self):
        result = run_allocation(
            make_run(), [make_hall("H1", 1, 2)], make_roster([("A", 2)]),
            rule_config={"max_resolution_attempts": 5000},
        )
        assert result.success
        assert result.resolution_attempts == 1000
        assert len(result.conflicts) == 1

    def test_reported_conflicts_match_final_layout(self):
        halls = [make_hall("H1", 3, 3)]
        students = make_roster([("A", 6), ("B", 3)])
        result = run_allocation(make_run(), halls, students)
        assert [c.pair for c in result.conflicts] == [c.pair for c in detect_conflicts(result.allocations)]

    def test_metadata_and_summary(self):
        halls = [make_hall("H1", 2, 2), make_hall("H2", 2, 2)]
        students = make_roster([("A", 3), ("B", 2), (None, 1)])
        result = run_allocation(make_run(strictness="soft"), halls, students)

        md = result.metadata
        assert md["total_students"] == 6
        assert md["halls_used"] == 2
        assert md["class_distribution"] == {"A": 3, "B": 2, "unassigned": 1}
        assert md["total_conflicts"] == len(result.conflicts)
        assert result.run.metadata == md

        summary = result.summary
        assert summary["allocation_run_id"] == result.run.run_id
        assert summary["allocations_count"] == 6
        assert summary["halls_used"] == 2


class TestRunFailures:
    def test_insufficient_capacity(self):
        halls = [make_hall(f"H{i}", 5, 5) for i in range(1, 4)]
        store = InMemoryRunStore()
        run = make_run()
        result = run_allocation(run, halls, make_roster([("A", 40), ("B", 40)]), store=store)

        assert not result.success
        assert result.status == "failed"
        assert result.stage == "validating"
        assert isinstance(result.error, InsufficientCapacity)
        assert result.error.stage == "validating"
        assert result.allocations == []
        assert result.summary["allocations_count"] == 0
        assert run.completed_at is None
        assert store.list_runs() == []

    def test_no_halls(self):
        result = run_allocation(make_run(), [], make_roster([("A", 3)]))
        assert isinstance(result.error, NoActiveHalls)

    def test_all_halls_inactive(self):
        result = run_allocation(make_run(), [make_hall(active=False)], make_roster([("A", 3)]))
        assert isinstance(result.error, NoActiveHalls)

    def test_empty_roster(self):
        result = run_allocation(make_run(), [make_hall()], [])
        assert isinstance(result.error, NoStudentsRegistered)
        assert result.stage == "validating"

    def test_raise_for_error(self):
        result = run_allocation(make_run(), [make_hall("H1", 1, 1)], make_roster([("A", 2)]))
        with pytest.raises(InsufficientCapacity):
            result.raise_for_error()

    def test_raise_for_error_noop_on_success(self):
        result = run_allocation(make_run(), [make_hall()], make_roster([("A", 2)]))
        result.raise_for_error()

    def test_internal_error_logged_critical(self, monkeypatch, caplog):
        # Capacity check lies, so the allocator runs out of halls
        monkeypatch.setattr(allocation_engine, "validate_capacity", lambda halls, n: 10 ** 6)
        with caplog.at_level(logging.CRITICAL, logger="engine.allocation_engine"):
            result = run_allocation(make_run(), [make_hall("H1", 1, 1)], make_roster([("A", 3)]))

        assert result.stage == "assigning"
        assert isinstance(result.error, SeatsExhausted)
        assert result.error.user_correctable is False
        assert any(r.levelno == logging.CRITICAL for r in caplog.records)

    def test_user_error_logged_as_error(self, caplog):
        with caplog.at_level(logging.ERROR, logger="engine.allocation_engine"):
            run_allocation(make_run(), [], make_roster([("A", 1)]))
        levels = [r.levelno for r in caplog.records if r.name == "engine.allocation_engine"]
        assert levels == [logging.ERROR]


class TestPersistence:
    def test_ids_applied_after_commit(self):
        store = InMemoryRunStore()
        result = run_allocation(
            make_run(strictness="soft"), [make_hall("H1", 1, 3)], make_roster([("A", 3)]), store=store,
        )
        assert result.success
        assert [a.allocation_id for a in result.allocations] == [1, 2, 3]
        for c in result.conflicts:
            assert c.allocation_id == result.allocations[c.allocation_index].allocation_id
            assert c.conflicting_allocation_id == result.allocations[c.conflicting_index].allocation_id

        stored = store.get_run(result.run.run_id)
        assert stored.is_completed
        assert stored.metadata["total_students"] == 3
        assert len(store.get_allocations(result.run.run_id)) == 3
        assert len(store.get_conflicts(result.run.run_id)) == 2

    def test_ids_keep_increasing_across_runs(self):
        store = InMemoryRunStore()
        halls = [make_hall("H1", 2, 2)]
        run_allocation(make_run(), halls, make_roster([("A", 2)]), store=store)
        second = run_allocation(make_run(), halls, make_roster([("A", 2)]), store=store)
        assert [a.allocation_id for a in second.allocations] == [3, 4]

    def test_commit_failure_rolls_back(self):
        store = FailingCommitStore()
        run = make_run()
        result = run_allocation(run, [make_hall()], make_roster([("A", 3)]), store=store)

        assert not result.success
        assert result.stage == "aggregating"
        assert isinstance(result.error, PersistenceError)
        assert str(result.error) == "disk full"
        assert run.completed_at is None
        assert run.metadata == {}
        assert store.list_runs() == []
        assert result.allocations == []

    def test_committing_same_run_twice_fails(self):
        store = InMemoryRunStore()
        run = make_run()
        halls = [make_hall()]
        students = make_roster([("A", 2)])
        assert run_allocation(run, halls, students, store=store).success

        again = run_allocation(run, halls, students, store=store)
        assert not again.success
        assert isinstance(again.error, PersistenceError)

    def test_latest_completed_run(self):
        store = InMemoryRunStore()
        halls = [make_hall()]
        students = make_roster([("A", 2)])
        runs = [make_run() for _ in range(3)]
        for day, run in enumerate(runs, start=1):
            run.created_at = datetime(2025, 3, day)
        first = run_allocation(runs[0], halls, students, store=store)
        last = run_allocation(runs[1], halls, students, store=store)
        run_allocation(runs[2], [], students, store=store)

        assert store.latest_completed_run().run_id == last.run.run_id
        assert first.run.run_id in [r.run_id for r in store.list_runs()]


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
