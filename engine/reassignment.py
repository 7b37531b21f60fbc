"""Manual seat adjustments and hall layout views over a completed run."""

import logging
from typing import List, Optional

from models.hall import Hall
from models.allocation import Allocation
from models.conflict import SeatConflict
from engine.conflicts import detect_conflicts
from engine.errors import InvalidSeatPosition, NoActiveHalls, SeatOccupied

logger = logging.getLogger(__name__)


def find_student_allocation(allocations: List[Allocation], student_id: str) -> Optional[Allocation]:
    for alloc in allocations:
        if alloc.student_id == student_id:
            return alloc
    return None


def build_hall_grid(hall: Hall, allocations: List[Allocation], seat_numbering: str = "row_major") -> List[List[dict]]:
    """rows x columns grid of seat dicts; student fields are None for empty seats."""
    grid = [
        [
            {
                "row": r,
                "column": c,
                "seat_number": hall.compute_seat_number(r, c, seat_numbering),
                "student_id": None,
                "class_group": None,
            }
            for c in range(1, hall.columns + 1)
        ]
        for r in range(1, hall.rows + 1)
    ]

    for alloc in allocations:
        if alloc.hall_id != hall.hall_id or not hall.has_position(alloc.row, alloc.column):
            continue
        cell = grid[alloc.row - 1][alloc.column - 1]
        cell["student_id"] = alloc.student_id
        cell["class_group"] = alloc.class_group

    return grid


def reassign_student(
    allocations: List[Allocation],
    allocation_index: int,
    hall: Hall,
    new_row: int,
    new_column: int,
    seat_numbering: str = "row_major",
) -> Allocation:
    """Move one student to an empty seat, possibly in another hall."""
    if not hall.has_position(new_row, new_column):
        raise InvalidSeatPosition(hall.hall_id, new_row, new_column)

    for idx, other in enumerate(allocations):
        if idx == allocation_index:
            continue
        if other.hall_id == hall.hall_id and other.row == new_row and other.column == new_column:
            raise SeatOccupied(hall.hall_id, new_row, new_column, other.student_id)

    alloc = allocations[allocation_index]
    old = (alloc.hall_id, alloc.row, alloc.column)

    alloc.hall_id = hall.hall_id
    alloc.row = new_row
    alloc.column = new_column
    alloc.seat_number = hall.compute_seat_number(new_row, new_column, seat_numbering)

    logger.info(
        "Reassigned student %s from %s (%d, %d) to %s (%d, %d)",
        alloc.student_id, old[0], old[1], old[2], hall.hall_id, new_row, new_column,
    )
    return alloc


def refresh_conflicts(allocations: List[Allocation], conflicts: List[SeatConflict]) -> List[SeatConflict]:
    """Re-check after manual edits.

    Known pairs that no longer clash are marked resolved; newly created
    clashes are appended.
    """
    current = {c.pair: c for c in detect_conflicts(allocations)}

    for c in conflicts:
        if c.pair not in current:
            c.mark_resolved()

    known = {c.pair for c in conflicts if not c.resolved}
    added = [c for pair, c in current.items() if pair not in known]
    if added:
        logger.info("Manual edit introduced %d new conflicts", len(added))

    return conflicts + added


def move_student(
    allocations: List[Allocation],
    conflicts: List[SeatConflict],
    allocation_index: int,
    hall: Optional[Hall],
    new_row: int,
    new_column: int,
    seat_numbering: str = "row_major",
    store=None,
) -> List[SeatConflict]:
    """Reassign one student, re-check conflicts and write both back to ``store``.

    Returns the refreshed conflict list.
    """
    if hall is None:
        raise NoActiveHalls()

    alloc = reassign_student(allocations, allocation_index, hall, new_row, new_column, seat_numbering)
    refreshed = refresh_conflicts(allocations, conflicts)

    if store is not None:
        store.update_allocation(alloc.run_id, allocation_index, alloc)
        store.save_conflicts(alloc.run_id, refreshed)
    return refreshed
