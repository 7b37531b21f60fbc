"""Capacity validation, class grouping and seeded shuffling."""

import logging
import random
import zlib
from collections import OrderedDict
from typing import Dict, List

from models.hall import Hall
from models.student import Student
from engine.errors import InsufficientCapacity, NoActiveHalls

logger = logging.getLogger(__name__)


def validate_capacity(halls: List[Hall], student_count: int) -> int:
    """Check active hall capacity against the roster size. Returns total capacity."""
    active = [h for h in halls if h.is_active]
    if not active:
        raise NoActiveHalls()

    total_capacity = sum(h.capacity for h in active)
    if total_capacity < student_count:
        raise InsufficientCapacity(student_count, total_capacity)

    logger.debug(
        "Capacity ok: %d students, %d seats across %d halls",
        student_count, total_capacity, len(active),
    )
    return total_capacity


def group_students_by_class(students: List[Student]) -> Dict[str, List[Student]]:
    """Partition the roster by class group.

    Groups are ordered by first appearance in the roster and keep roster
    order internally; round-robin fairness depends on both.
    """
    groups: Dict[str, List[Student]] = OrderedDict()
    for student in students:
        groups.setdefault(student.group_key, []).append(student)
    return groups


def derive_seed(seed: str) -> int:
    """Stable unsigned 32-bit seed from the run's string seed (CRC32)."""
    return zlib.crc32(seed.encode("utf-8")) & 0xFFFFFFFF


def make_rng(seed: str) -> random.Random:
    """Run-scoped generator. Never touches the module-level random state."""
    return random.Random(derive_seed(seed))


def shuffle_groups(groups: Dict[str, List[Student]], rng: random.Random) -> Dict[str, List[Student]]:
    """Shuffle every group in place, in group order, with one generator."""
    for students in groups.values():
        rng.shuffle(students)
    return groups
