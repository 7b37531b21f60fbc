"""Checkerboard seat ordering and round-robin seat assignment."""

import logging
from typing import Dict, List

from models.hall import Hall, Seat
from models.student import Student
from models.allocation import Allocation
from engine.errors import SeatsExhausted

logger = logging.getLogger(__name__)


def generate_seat_order(hall: Hall, seat_numbering: str = "row_major") -> List[Seat]:
    """Seat visiting order for one hall: even-parity seats first, then the rest.

    Seats are enumerated in row-major scan order within each parity class,
    whatever the numbering strategy used for the printed seat number.
    """
    primary: List[Seat] = []
    secondary: List[Seat] = []

    for row in range(1, hall.rows + 1):
        for column in range(1, hall.columns + 1):
            seat = Seat(
                row=row,
                column=column,
                seat_number=hall.compute_seat_number(row, column, seat_numbering),
            )
            if seat.is_primary:
                primary.append(seat)
            else:
                secondary.append(seat)

    return primary + secondary


def generate_hall_seat_orders(halls: List[Hall], seat_numbering: str = "row_major") -> Dict[str, List[Seat]]:
    return {h.hall_id: generate_seat_order(h, seat_numbering) for h in halls}


def sort_halls_by_capacity(halls: List[Hall]) -> List[Hall]:
    """Active halls, largest first. Ties keep their input order."""
    return sorted((h for h in halls if h.is_active), key=lambda h: h.capacity, reverse=True)


def allocate_round_robin(
    groups: Dict[str, List[Student]],
    halls: List[Hall],
    seat_orders: Dict[str, List[Seat]],
    run_id: str,
) -> List[Allocation]:
    """Assign one student per class group per round, filling halls in order.

    ``halls`` must already be sorted (see ``sort_halls_by_capacity``).
    Raises SeatsExhausted if a seat is needed after the last hall is full,
    which means capacity validation was skipped or is inconsistent.
    """
    student_count = sum(len(members) for members in groups.values())
    allocations: List[Allocation] = []

    if not halls:
        if student_count:
            raise SeatsExhausted(0, student_count)
        return allocations

    hall_index = 0
    seat_index = 0
    current_hall = halls[hall_index]
    current_order = seat_orders[current_hall.hall_id]

    group_keys = list(groups.keys())
    cursors = {key: 0 for key in group_keys}

    while True:
        placed_this_round = 0

        for key in group_keys:
            members = groups[key]
            if cursors[key] >= len(members):
                continue  # Group exhausted

            student = members[cursors[key]]
            cursors[key] += 1

            # Advance to the next hall once this one is full
            while seat_index >= len(current_order):
                hall_index += 1
                if hall_index >= len(halls):
                    raise SeatsExhausted(len(allocations), student_count)
                current_hall = halls[hall_index]
                current_order = seat_orders[current_hall.hall_id]
                seat_index = 0

            seat = current_order[seat_index]
            seat_index += 1

            allocations.append(Allocation(
                run_id=run_id,
                hall_id=current_hall.hall_id,
                student_id=student.student_id,
                row=seat.row,
                column=seat.column,
                seat_number=seat.seat_number,
                class_group=student.class_group,
            ))
            placed_this_round += 1

        if placed_this_round == 0:
            break

    logger.debug("Round-robin placed %d students across %d halls", len(allocations), hall_index + 1)
    return allocations
