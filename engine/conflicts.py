"""Same-class adjacency detection and the bounded swap-repair pass."""

import logging
import random
from collections import OrderedDict
from typing import Dict, List, Optional, Tuple

from models.allocation import Allocation
from models.conflict import SeatConflict
from config.defaults import (
    CONFLICT_SAME_CLASS_ADJACENT, CONFLICT_SAME_CLASS_FRONT_BACK,
    MAX_RESOLUTION_ATTEMPTS,
)

logger = logging.getLogger(__name__)

# (row offset, column offset, conflict type) in scan order: left, right, front, back.
# Diagonal neighbours are not examined.
NEIGHBOR_OFFSETS = [
    (0, -1, CONFLICT_SAME_CLASS_ADJACENT),
    (0, 1, CONFLICT_SAME_CLASS_ADJACENT),
    (-1, 0, CONFLICT_SAME_CLASS_FRONT_BACK),
    (1, 0, CONFLICT_SAME_CLASS_FRONT_BACK),
]


def build_position_index(allocations: List[Allocation]) -> Dict[str, Dict[Tuple[int, int], int]]:
    """hall_id -> {(row, column): arena index}, halls in first-appearance order."""
    index: Dict[str, Dict[Tuple[int, int], int]] = OrderedDict()
    for idx, alloc in enumerate(allocations):
        index.setdefault(alloc.hall_id, {})[(alloc.row, alloc.column)] = idx
    return index


def detect_conflicts(allocations: List[Allocation]) -> List[SeatConflict]:
    """Find same-class neighbours (left/right/front/back) within each hall.

    The position index is rebuilt on every call. Each unordered pair is
    reported once, from the seat reached first in (row, column) scan order.
    """
    conflicts: List[SeatConflict] = []
    seen = set()

    for hall_id, positions in build_position_index(allocations).items():
        for (row, column) in sorted(positions):
            idx = positions[(row, column)]
            alloc = allocations[idx]
            if not alloc.class_group:
                continue

            for d_row, d_col, conflict_type in NEIGHBOR_OFFSETS:
                neighbor_pos = (row + d_row, column + d_col)
                neighbor_idx = positions.get(neighbor_pos)
                if neighbor_idx is None:
                    continue

                neighbor = allocations[neighbor_idx]
                if neighbor.class_group != alloc.class_group:
                    continue

                pair = (min(idx, neighbor_idx), max(idx, neighbor_idx))
                if pair in seen:
                    continue
                seen.add(pair)

                conflicts.append(SeatConflict(
                    allocation_index=idx,
                    conflicting_index=neighbor_idx,
                    conflict_type=conflict_type,
                    details={
                        "hall_id": hall_id,
                        "student1": alloc.student_id,
                        "student2": neighbor.student_id,
                        "class": alloc.class_group,
                        "positions": [
                            {"row": row, "col": column},
                            {"row": neighbor_pos[0], "col": neighbor_pos[1]},
                        ],
                    },
                ))

    return conflicts


def swap_candidates(allocations: List[Allocation], conflict: SeatConflict) -> List[int]:
    """Same-hall allocations outside the pair whose class differs from the head student's."""
    idx1 = conflict.allocation_index
    idx2 = conflict.conflicting_index
    target = allocations[idx1]

    return [
        idx for idx, alloc in enumerate(allocations)
        if alloc.hall_id == target.hall_id
        and idx not in (idx1, idx2)
        and alloc.class_group != target.class_group
    ]


def attempt_swap(
    allocations: List[Allocation],
    conflict: SeatConflict,
    rng: random.Random,
) -> Optional[int]:
    """Swap the conflict's first student with a random eligible seat.

    Returns the arena index swapped with, or None when no candidate exists.
    """
    candidates = swap_candidates(allocations, conflict)
    if not candidates:
        return None

    swap_idx = rng.choice(candidates)
    a = allocations[conflict.allocation_index]
    b = allocations[swap_idx]

    a.row, b.row = b.row, a.row
    a.column, b.column = b.column, a.column
    a.seat_number, b.seat_number = b.seat_number, a.seat_number

    return swap_idx


def resolve_conflicts(
    allocations: List[Allocation],
    conflicts: List[SeatConflict],
    rng: random.Random,
    max_attempts: int = MAX_RESOLUTION_ATTEMPTS,
) -> Tuple[List[SeatConflict], int]:
    """Greedy local search: swap, re-detect from scratch, repeat.

    Best effort only. Returns the conflicts still standing once none remain
    or the attempt budget is spent, plus the number of attempts used.
    """
    queue = list(conflicts)
    attempts = 0

    while queue and attempts < max_attempts:
        head = queue[0]

        if attempt_swap(allocations, head, rng) is not None:
            queue = detect_conflicts(allocations)
        else:
            queue = queue[1:] + [head]

        attempts += 1

    if queue:
        logger.warning(
            "Could not resolve all conflicts: %d remaining after %d attempts",
            len(queue), attempts,
        )
    else:
        logger.info("All conflicts resolved after %d attempts", attempts)

    return queue, attempts
