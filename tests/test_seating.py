"""Tests for seat numbering, checkerboard ordering and round-robin assignment."""

import sys
import os
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

import pytest

from models.hall import Hall, Seat
from models.student import Student
from engine.errors import SeatsExhausted
from engine.grouping import group_students_by_class
from engine.seating import (
    allocate_round_robin,
    generate_hall_seat_orders,
    generate_seat_order,
    sort_halls_by_capacity,
)


def make_hall(hall_id="H1", rows=5, columns=5, active=True):
    return Hall(hall_id, f"Hall {hall_id}", rows, columns, active)


def make_groups(counts):
    """counts: list of (class_group, count). Students are listed group by group."""
    students = []
    n = 1
    for group, count in counts:
        for _ in range(count):
            students.append(Student(f"S{n:03d}", f"Student {n}", group))
            n += 1
    return group_students_by_class(students)


def allocate(counts, halls, numbering="row_major"):
    ordered = sort_halls_by_capacity(halls)
    orders = generate_hall_seat_orders(ordered, numbering)
    return allocate_round_robin(make_groups(counts), ordered, orders, "run-1")


class TestHall:
    def test_non_positive_dimensions_rejected(self):
        with pytest.raises(ValueError):
            make_hall(rows=0)
        with pytest.raises(ValueError):
            make_hall(columns=-2)

    def test_unknown_numbering_rejected(self):
        with pytest.raises(ValueError):
            make_hall().compute_seat_number(1, 1, "serpentine")

    def test_seat_numbers_form_a_bijection(self):
        for rows in range(1, 51):
            for columns in range(1, 51):
                hall = make_hall(rows=rows, columns=columns)
                capacity = rows * columns
                row_major = set()
                col_major = set()
                for r in range(1, rows + 1):
                    for c in range(1, columns + 1):
                        rm = hall.compute_seat_number(r, c, "row_major")
                        cm = hall.compute_seat_number(r, c, "column_major")
                        assert rm == (r - 1) * columns + c
                        assert cm == (c - 1) * rows + r
                        row_major.add(rm)
                        col_major.add(cm)
                assert row_major == set(range(1, capacity + 1))
                assert col_major == set(range(1, capacity + 1))


class TestGenerateSeatOrder:
    def test_two_by_two_order(self):
        order = generate_seat_order(make_hall(rows=2, columns=2))
        assert order == [
            Seat(1, 1, 1),
            Seat(2, 2, 4),
            Seat(1, 2, 2),
            Seat(2, 1, 3),
        ]

    def test_primary_seats_precede_secondary(self):
        order = generate_seat_order(make_hall(rows=5, columns=7))
        parities = [(s.row + s.column) % 2 for s in order]
        first_odd = parities.index(1)
        assert all(p == 0 for p in parities[:first_odd])
        assert all(p == 1 for p in parities[first_odd:])
        assert first_odd == 18  # ceil(35 / 2)

    def test_row_major_scan_within_parity(self):
        order = generate_seat_order(make_hall(rows=4, columns=4))
        primary = [s.position for s in order if s.is_primary]
        assert primary == sorted(primary)

    def test_column_major_changes_labels_not_order(self):
        hall = make_hall(rows=3, columns=4)
        rm = generate_seat_order(hall, "row_major")
        cm = generate_seat_order(hall, "column_major")
        assert [s.position for s in rm] == [s.position for s in cm]
        assert cm[0].seat_number == 1
        # (1, 3) is second in the scan: column-major label is (3-1)*3+1
        assert cm[1].position == (1, 3)
        assert cm[1].seat_number == 7

    def test_single_seat_hall(self):
        assert generate_seat_order(make_hall(rows=1, columns=1)) == [Seat(1, 1, 1)]


class TestSortHallsByCapacity:
    def test_largest_first_and_inactive_skipped(self):
        halls = [
            make_hall("small", 2, 2),
            make_hall("big", 6, 6),
            make_hall("closed", 10, 10, active=False),
            make_hall("mid", 3, 4),
        ]
        assert [h.hall_id for h in sort_halls_by_capacity(halls)] == ["big", "mid", "small"]

    def test_ties_keep_input_order(self):
        halls = [make_hall("X", 2, 3), make_hall("Y", 3, 2), make_hall("Z", 1, 6)]
        assert [h.hall_id for h in sort_halls_by_capacity(halls)] == ["X", "Y", "Z"]


class TestAllocateRoundRobin:
    def test_two_classes_in_two_by_two_hall(self):
        allocations = allocate([("A", 2), ("B", 2)], [make_hall(rows=2, columns=2)])
        assert [(a.class_group, a.seat_number) for a in allocations] == [
            ("A", 1), ("B", 4), ("A", 2), ("B", 3),
        ]

    def test_groups_take_turns_until_exhausted(self):
        allocations = allocate([("A", 3), ("B", 1)], [make_hall(rows=2, columns=2)])
        assert [a.class_group for a in allocations] == ["A", "B", "A", "A"]

    def test_first_placements_use_primary_seats(self):
        allocations = allocate([("A", 5), ("B", 5)], [make_hall(rows=5, columns=5)])
        assert all((a.row + a.column) % 2 == 0 for a in allocations)

    def test_largest_hall_filled_first(self):
        halls = [make_hall("small", 2, 2), make_hall("big", 3, 3)]
        allocations = allocate([("A", 6), ("B", 6)], halls)
        assert [a.hall_id for a in allocations[:9]] == ["big"] * 9
        assert [a.hall_id for a in allocations[9:]] == ["small"] * 3

    def test_every_student_placed_once(self):
        halls = [make_hall("H1", 4, 4), make_hall("H2", 3, 3)]
        allocations = allocate([("A", 10), ("B", 7), (None, 4)], halls)
        assert len(allocations) == 21
        assert len({a.student_id for a in allocations}) == 21
        assert len({(a.hall_id, a.row, a.column) for a in allocations}) == 21
        assert all(a.run_id == "run-1" for a in allocations)

    def test_unassigned_students_stored_with_none(self):
        allocations = allocate([(None, 2)], [make_hall(rows=1, columns=2)])
        assert [a.class_group for a in allocations] == [None, None]

    def test_runs_out_of_seats(self):
        with pytest.raises(SeatsExhausted) as exc:
            allocate([("A", 3), ("B", 3)], [make_hall(rows=2, columns=2)])
        assert exc.value.placed == 4
        assert exc.value.student_count == 6
        assert exc.value.user_correctable is False

    def test_no_halls_with_students(self):
        with pytest.raises(SeatsExhausted):
            allocate_round_robin(make_groups([("A", 1)]), [], {}, "run-1")

    def test_no_students(self):
        assert allocate([], [make_hall()]) == []


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
