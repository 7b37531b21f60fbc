"""Persistence collaborator for allocation runs.

A run is written through a transaction: ``write`` stages the batch,
``commit`` publishes it atomically and reports the assigned ids,
``rollback`` discards it. Nothing staged is visible before ``commit``.
"""

import logging
from dataclasses import replace
from typing import Dict, List, Optional

from models.allocation import Allocation, AllocationRun
from models.conflict import SeatConflict

logger = logging.getLogger(__name__)


class PersistenceError(Exception):
    """A batch violated a storage constraint and was rejected."""


class RunTransaction:
    def write(self, allocations: List[Allocation], conflicts: List[SeatConflict]):
        raise NotImplementedError

    def commit(self) -> Dict[int, int]:
        """Publish the batch. Returns arena index -> allocation id."""
        raise NotImplementedError

    def rollback(self):
        raise NotImplementedError


class RunStore:
    def begin(self, run: AllocationRun) -> RunTransaction:
        raise NotImplementedError

    def get_run(self, run_id: str) -> Optional[AllocationRun]:
        raise NotImplementedError

    def list_runs(self, exam_id: Optional[str] = None) -> List[AllocationRun]:
        raise NotImplementedError

    def get_allocations(self, run_id: str) -> List[Allocation]:
        raise NotImplementedError

    def get_conflicts(self, run_id: str) -> List[SeatConflict]:
        raise NotImplementedError

    def update_allocation(self, run_id: str, allocation_index: int, allocation: Allocation):
        """Persist a manual move of the allocation at ``allocation_index``."""
        raise NotImplementedError

    def save_conflicts(self, run_id: str, conflicts: List[SeatConflict]):
        """Persist a refreshed conflict list.

        ``conflicts`` extends the stored list: the stored records keep their
        order and may only change their ``resolved`` flag, new records follow.
        Store ids are filled in on the passed records.
        """
        raise NotImplementedError

    def latest_completed_run(self, exam_id: Optional[str] = None) -> Optional[AllocationRun]:
        runs = [r for r in self.list_runs(exam_id) if r.is_completed]
        if not runs:
            return None
        return max(runs, key=lambda r: r.created_at)


def check_batch(allocations: List[Allocation], conflicts: List[SeatConflict]):
    """Referential checks shared by stores: one student per seat, one seat per student."""
    seats = set()
    students = set()
    for alloc in allocations:
        seat_key = (alloc.hall_id, alloc.row, alloc.column)
        if seat_key in seats:
            raise PersistenceError(
                f"Duplicate seat in run {alloc.run_id}: hall {alloc.hall_id} "
                f"row {alloc.row} column {alloc.column}"
            )
        seats.add(seat_key)

        if alloc.student_id in students:
            raise PersistenceError(
                f"Student {alloc.student_id} allocated twice in run {alloc.run_id}"
            )
        students.add(alloc.student_id)

    for conflict in conflicts:
        for idx in (conflict.allocation_index, conflict.conflicting_index):
            if not 0 <= idx < len(allocations):
                raise PersistenceError(f"Conflict references unknown allocation index {idx}")


class _InMemoryTransaction(RunTransaction):
    def __init__(self, store: "InMemoryRunStore", run: AllocationRun):
        self._store = store
        self._run = run
        self._allocations: Optional[List[Allocation]] = None
        self._conflicts: List[SeatConflict] = []
        self._closed = False

    def write(self, allocations: List[Allocation], conflicts: List[SeatConflict]):
        if self._closed:
            raise PersistenceError("Transaction already closed")
        check_batch(allocations, conflicts)
        # Stored records must not alias the caller's objects
        self._allocations = [replace(a) for a in allocations]
        self._conflicts = [replace(c, details=dict(c.details)) for c in conflicts]

    def commit(self) -> Dict[int, int]:
        if self._closed:
            raise PersistenceError("Transaction already closed")
        id_map = self._store._publish(self._run, self._allocations or [], self._conflicts)
        self._closed = True
        return id_map

    def rollback(self):
        self._allocations = None
        self._conflicts = []
        self._closed = True


class InMemoryRunStore(RunStore):
    """Dict-backed store used by the console and tests."""

    def __init__(self):
        self.runs: Dict[str, AllocationRun] = {}
        self.allocations: Dict[str, List[Allocation]] = {}
        self.conflicts: Dict[str, List[SeatConflict]] = {}
        self._next_allocation_id = 1

    def begin(self, run: AllocationRun) -> RunTransaction:
        return _InMemoryTransaction(self, run)

    def _publish(self, run, allocations, conflicts) -> Dict[int, int]:
        if run.run_id in self.allocations:
            raise PersistenceError(f"Run {run.run_id} has already been committed")

        id_map = {}
        for idx, alloc in enumerate(allocations):
            id_map[idx] = self._next_allocation_id + idx
            alloc.allocation_id = id_map[idx]
        self._next_allocation_id += len(allocations)
        for c in conflicts:
            c.allocation_id = id_map[c.allocation_index]
            c.conflicting_allocation_id = id_map[c.conflicting_index]

        self.runs[run.run_id] = run
        self.allocations[run.run_id] = allocations
        self.conflicts[run.run_id] = conflicts
        logger.info(
            "Committed run %s: %d allocations, %d conflicts",
            run.run_id, len(allocations), len(conflicts),
        )
        return id_map

    def get_run(self, run_id: str) -> Optional[AllocationRun]:
        return self.runs.get(run_id)

    def list_runs(self, exam_id: Optional[str] = None) -> List[AllocationRun]:
        runs = list(self.runs.values())
        if exam_id is not None:
            runs = [r for r in runs if r.exam_id == exam_id]
        return sorted(runs, key=lambda r: r.created_at)

    def get_allocations(self, run_id: str) -> List[Allocation]:
        return [replace(a) for a in self.allocations.get(run_id, [])]

    def get_conflicts(self, run_id: str) -> List[SeatConflict]:
        return [replace(c, details=dict(c.details)) for c in self.conflicts.get(run_id, [])]

    def update_allocation(self, run_id: str, allocation_index: int, allocation: Allocation):
        stored = self.allocations.get(run_id)
        if stored is None or not 0 <= allocation_index < len(stored):
            raise PersistenceError(f"Run {run_id} has no allocation at index {allocation_index}")

        updated = [replace(a) for a in stored]
        current = updated[allocation_index]
        current.hall_id = allocation.hall_id
        current.row = allocation.row
        current.column = allocation.column
        current.seat_number = allocation.seat_number
        check_batch(updated, [])

        self.allocations[run_id] = updated
        logger.info(
            "Updated allocation %s in run %s to %s (%d, %d)",
            current.allocation_id, run_id, current.hall_id, current.row, current.column,
        )

    def save_conflicts(self, run_id: str, conflicts: List[SeatConflict]):
        allocations = self.allocations.get(run_id)
        if allocations is None:
            raise PersistenceError(f"Run {run_id} has not been committed")
        stored = self.conflicts.get(run_id, [])
        if len(conflicts) < len(stored):
            raise PersistenceError(f"Conflict list for run {run_id} is shorter than the stored one")
        check_batch(allocations, conflicts)

        for c in conflicts:
            c.allocation_id = allocations[c.allocation_index].allocation_id
            c.conflicting_allocation_id = allocations[c.conflicting_index].allocation_id
        self.conflicts[run_id] = [replace(c, details=dict(c.details)) for c in conflicts]
        logger.info(
            "Saved %d conflicts for run %s (%d new)",
            len(conflicts), run_id, len(conflicts) - len(stored),
        )
