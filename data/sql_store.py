"""SQLAlchemy-backed run store."""

import logging
from typing import Dict, List, Optional

from models.allocation import Allocation, AllocationRun
from models.conflict import SeatConflict
from data.db_models import AllocationDB, AllocationRunDB, SeatConflictDB
from data.run_store import PersistenceError, RunStore, RunTransaction

logger = logging.getLogger(__name__)


class _SqlTransaction(RunTransaction):
    """One session per run. Constraint violations surface as IntegrityError on write."""

    def __init__(self, session, run: AllocationRun):
        self._session = session
        self._run = run
        self._run_row: Optional[AllocationRunDB] = None
        self._rows: List[AllocationDB] = []

    def write(self, allocations: List[Allocation], conflicts: List[SeatConflict]):
        run = self._run
        self._run_row = AllocationRunDB(
            run_id=run.run_id,
            exam_id=run.exam_id,
            shuffle_seed=run.seed,
            seat_numbering=run.seat_numbering,
            adjacency_strictness=run.adjacency_strictness,
            notes=run.notes,
            created_at=run.created_at,
        )
        self._session.add(self._run_row)

        self._rows = [
            AllocationDB(
                run_id=run.run_id,
                hall_id=a.hall_id,
                student_id=a.student_id,
                row_no=a.row,
                col_no=a.column,
                seat_number=a.seat_number,
                class_group=a.class_group,
            )
            for a in allocations
        ]
        self._session.add_all(self._rows)
        self._session.flush()

        for c in conflicts:
            for idx in (c.allocation_index, c.conflicting_index):
                if not 0 <= idx < len(self._rows):
                    raise PersistenceError(f"Conflict references unknown allocation index {idx}")
            self._session.add(SeatConflictDB(
                allocation_id=self._rows[c.allocation_index].id,
                conflicting_allocation_id=self._rows[c.conflicting_index].id,
                conflict_type=c.conflict_type,
                details=c.details,
                resolved=c.resolved,
            ))
        self._session.flush()

    def commit(self) -> Dict[int, int]:
        if self._run_row is None:
            raise PersistenceError("Nothing written for this run")

        # Metadata and completion are stamped after the rows are staged
        self._run_row.run_metadata = dict(self._run.metadata)
        self._run_row.completed_at = self._run.completed_at

        id_map = {idx: row.id for idx, row in enumerate(self._rows)}
        try:
            self._session.commit()
        finally:
            self._session.close()

        logger.info("Committed run %s: %d allocations", self._run.run_id, len(id_map))
        return id_map

    def rollback(self):
        self._session.rollback()
        self._session.close()


class SqlRunStore(RunStore):
    def __init__(self, session_factory):
        self._session_factory = session_factory

    def begin(self, run: AllocationRun) -> RunTransaction:
        return _SqlTransaction(self._session_factory(), run)

    @staticmethod
    def _to_run(row: AllocationRunDB) -> AllocationRun:
        return AllocationRun(
            run_id=row.run_id,
            seed=row.shuffle_seed,
            seat_numbering=row.seat_numbering,
            adjacency_strictness=row.adjacency_strictness,
            exam_id=row.exam_id,
            notes=row.notes or "",
            metadata=row.run_metadata or {},
            created_at=row.created_at,
            completed_at=row.completed_at,
        )

    def _allocation_rows(self, session, run_id: str) -> List[AllocationDB]:
        return (
            session.query(AllocationDB)
            .filter(AllocationDB.run_id == run_id)
            .order_by(AllocationDB.id)
            .all()
        )

    def get_run(self, run_id: str) -> Optional[AllocationRun]:
        with self._session_factory() as session:
            row = session.get(AllocationRunDB, run_id)
            return self._to_run(row) if row else None

    def list_runs(self, exam_id: Optional[str] = None) -> List[AllocationRun]:
        with self._session_factory() as session:
            query = session.query(AllocationRunDB)
            if exam_id is not None:
                query = query.filter(AllocationRunDB.exam_id == exam_id)
            return [self._to_run(r) for r in query.order_by(AllocationRunDB.created_at).all()]

    def get_allocations(self, run_id: str) -> List[Allocation]:
        with self._session_factory() as session:
            return [
                Allocation(
                    run_id=r.run_id,
                    hall_id=r.hall_id,
                    student_id=r.student_id,
                    row=r.row_no,
                    column=r.col_no,
                    seat_number=r.seat_number,
                    class_group=r.class_group,
                    allocation_id=r.id,
                )
                for r in self._allocation_rows(session, run_id)
            ]

    def get_conflicts(self, run_id: str) -> List[SeatConflict]:
        with self._session_factory() as session:
            # Arena index = position of the allocation within its run, by id
            index_of = {r.id: idx for idx, r in enumerate(self._allocation_rows(session, run_id))}
            rows = (
                session.query(SeatConflictDB)
                .filter(SeatConflictDB.allocation_id.in_(list(index_of)))
                .order_by(SeatConflictDB.id)
                .all()
            )
            return [
                SeatConflict(
                    allocation_index=index_of[r.allocation_id],
                    conflicting_index=index_of[r.conflicting_allocation_id],
                    conflict_type=r.conflict_type,
                    resolved=r.resolved,
                    details=r.details or {},
                    allocation_id=r.allocation_id,
                    conflicting_allocation_id=r.conflicting_allocation_id,
                )
                for r in rows
            ]

    def update_allocation(self, run_id: str, allocation_index: int, allocation: Allocation):
        with self._session_factory() as session:
            rows = self._allocation_rows(session, run_id)
            if not 0 <= allocation_index < len(rows):
                raise PersistenceError(f"Run {run_id} has no allocation at index {allocation_index}")
            row = rows[allocation_index]
            row.hall_id = allocation.hall_id
            row.row_no = allocation.row
            row.col_no = allocation.column
            row.seat_number = allocation.seat_number
            session.commit()
            logger.info(
                "Updated allocation %s in run %s to %s (%d, %d)",
                row.id, run_id, row.hall_id, row.row_no, row.col_no,
            )

    def save_conflicts(self, run_id: str, conflicts: List[SeatConflict]):
        with self._session_factory() as session:
            allocation_ids = [r.id for r in self._allocation_rows(session, run_id)]
            stored = (
                session.query(SeatConflictDB)
                .filter(SeatConflictDB.allocation_id.in_(allocation_ids))
                .order_by(SeatConflictDB.id)
                .all()
            )
            if len(conflicts) < len(stored):
                raise PersistenceError(f"Conflict list for run {run_id} is shorter than the stored one")

            for c in conflicts:
                for idx in (c.allocation_index, c.conflicting_index):
                    if not 0 <= idx < len(allocation_ids):
                        raise PersistenceError(f"Conflict references unknown allocation index {idx}")
                c.allocation_id = allocation_ids[c.allocation_index]
                c.conflicting_allocation_id = allocation_ids[c.conflicting_index]

            for row, c in zip(stored, conflicts):
                row.resolved = c.resolved
            for c in conflicts[len(stored):]:
                session.add(SeatConflictDB(
                    allocation_id=c.allocation_id,
                    conflicting_allocation_id=c.conflicting_allocation_id,
                    conflict_type=c.conflict_type,
                    details=c.details,
                    resolved=c.resolved,
                ))
            session.commit()
            logger.info(
                "Saved %d conflicts for run %s (%d new)",
                len(conflicts), run_id, len(conflicts) - len(stored),
            )
