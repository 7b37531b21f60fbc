"""Allocation run orchestrator: validate, group, shuffle, seat, check, repair, persist."""

import logging
import secrets
import string
import uuid
from dataclasses import dataclass, field
from typing import Dict, List, Optional

from models.hall import Hall
from models.student import Student
from models.allocation import Allocation, AllocationRun
from models.conflict import SeatConflict
from engine.errors import AllocationError, NoStudentsRegistered
from engine.grouping import (
    derive_seed, group_students_by_class, make_rng, shuffle_groups, validate_capacity,
)
from engine.seating import allocate_round_robin, generate_hall_seat_orders, sort_halls_by_capacity
from engine.conflicts import detect_conflicts, resolve_conflicts
from engine.metadata import aggregate_metadata, build_summary
from engine.explainer import explain_run
from data.run_store import RunStore
from config.defaults import (
    DEFAULT_ADJACENCY_STRICTNESS, DEFAULT_SEAT_NUMBERING,
    MAX_RESOLUTION_ATTEMPTS, MAX_SEED_LENGTH, SEED_LENGTH,
    RUN_STATUS_COMPLETED, RUN_STATUS_FAILED,
)

logger = logging.getLogger(__name__)


@dataclass
class AllocationResult:
    status: str  # "completed", "failed"
    run: AllocationRun
    stage: str   # Last stage reached, or the stage that failed
    allocations: List[Allocation] = field(default_factory=list)
    conflicts: List[SeatConflict] = field(default_factory=list)
    summary: dict = field(default_factory=dict)
    metadata: dict = field(default_factory=dict)
    error: Optional[Exception] = None
    message: str = ""
    warnings: List[str] = field(default_factory=list)
    explanation_steps: List[str] = field(default_factory=list)
    initial_conflicts_count: int = 0
    resolution_attempts: int = 0

    @property
    def success(self) -> bool:
        return self.status == RUN_STATUS_COMPLETED

    def raise_for_error(self):
        """Re-raise the error that aborted the run, if any."""
        if self.error is not None:
            raise self.error


def generate_seed(length: int = SEED_LENGTH) -> str:
    alphabet = string.ascii_letters + string.digits
    return "".join(secrets.choice(alphabet) for _ in range(length))


def create_allocation_run(
    exam_id: Optional[str] = None,
    seat_numbering: str = DEFAULT_SEAT_NUMBERING,
    adjacency_strictness: str = DEFAULT_ADJACENCY_STRICTNESS,
    seed: Optional[str] = None,
    notes: str = "",
) -> AllocationRun:
    """Create a new run. A fresh random seed is drawn when none is given."""
    if seed is not None and len(seed) > MAX_SEED_LENGTH:
        raise ValueError(f"Seed must be at most {MAX_SEED_LENGTH} characters")

    return AllocationRun(
        run_id=uuid.uuid4().hex,
        seed=seed if seed is not None else generate_seed(),
        seat_numbering=seat_numbering,
        adjacency_strictness=adjacency_strictness,
        exam_id=exam_id,
        notes=notes,
    )


def regenerate_run(run: AllocationRun) -> AllocationRun:
    """New run with the same settings and a new seed."""
    return create_allocation_run(
        exam_id=run.exam_id,
        seat_numbering=run.seat_numbering,
        adjacency_strictness=run.adjacency_strictness,
        notes=f"Regenerated from run {run.run_id}",
    )


def _apply_ids(allocations: List[Allocation], conflicts: List[SeatConflict], id_map: Dict[int, int]):
    for idx, alloc in enumerate(allocations):
        alloc.allocation_id = id_map.get(idx)
    for c in conflicts:
        c.allocation_id = id_map.get(c.allocation_index)
        c.conflicting_allocation_id = id_map.get(c.conflicting_index)


def _log_failure(run: AllocationRun, stage: str, exc: Exception):
    if isinstance(exc, AllocationError) and exc.user_correctable:
        logger.error("Allocation run %s failed during %s: %s", run.run_id, stage, exc)
    elif isinstance(exc, AllocationError):
        logger.critical(
            "Internal allocation error in run %s during %s: %s",
            run.run_id, stage, exc, exc_info=True,
        )
    else:
        logger.exception("Allocation run %s failed during %s", run.run_id, stage)


def run_allocation(
    run: AllocationRun,
    halls: List[Hall],
    students: List[Student],
    store: Optional[RunStore] = None,
    rule_config: Optional[dict] = None,
) -> AllocationResult:
    """Full allocation pipeline for one run.

    Never raises for run failures: the result carries the error and the
    stage that failed, and nothing from a failed run is persisted. With
    ``store`` set, the batch is staged during ``persisting`` and published
    by a single commit once metadata is aggregated.
    """
    cfg = rule_config or {}
    # Config may lower the repair budget, never raise it
    max_attempts = min(int(cfg.get("max_resolution_attempts", MAX_RESOLUTION_ATTEMPTS)), MAX_RESOLUTION_ATTEMPTS)

    logger.info(
        "Starting allocation run %s: %d students, %d halls, %s numbering, %s adjacency",
        run.run_id, len(students), len(halls), run.seat_numbering, run.adjacency_strictness,
    )

    stage = "validating"
    transaction = None
    try:
        total_capacity = validate_capacity(halls, len(students))
        if not students:
            raise NoStudentsRegistered()

        stage = "grouping"
        groups = group_students_by_class(students)
        group_sizes = {k: len(v) for k, v in groups.items()}

        stage = "shuffling"
        rng = make_rng(run.seed)
        shuffle_groups(groups, rng)

        stage = "assigning"
        ordered_halls = sort_halls_by_capacity(halls)
        seat_orders = generate_hall_seat_orders(ordered_halls, run.seat_numbering)
        allocations = allocate_round_robin(groups, ordered_halls, seat_orders, run.run_id)

        stage = "detecting_conflicts"
        conflicts = detect_conflicts(allocations)
        initial_conflicts = len(conflicts)
        attempts = 0

        if run.adjacency_strictness == "hard" and conflicts:
            stage = "resolving"
            conflicts, attempts = resolve_conflicts(allocations, conflicts, rng, max_attempts)

        stage = "persisting"
        if store is not None:
            transaction = store.begin(run)
            transaction.write(allocations, conflicts)

        stage = "aggregating"
        metadata = aggregate_metadata(allocations, conflicts, run.seat_numbering)
        metadata["initial_conflicts"] = initial_conflicts
        metadata["resolution_attempts"] = attempts
        run.metadata = metadata
        run.mark_completed()

        if transaction is not None:
            id_map = transaction.commit()
            transaction = None
            _apply_ids(allocations, conflicts, id_map)

        stage = "completed"

    except Exception as exc:
        if transaction is not None:
            transaction.rollback()
        run.completed_at = None
        run.metadata = {}
        if isinstance(exc, AllocationError):
            exc.stage = stage
        _log_failure(run, stage, exc)

        return AllocationResult(
            status=RUN_STATUS_FAILED,
            run=run,
            stage=stage,
            summary=build_summary(run.run_id, [], []),
            error=exc,
            message=f"Allocation failed during {stage}: {exc}",
        )

    summary = build_summary(run.run_id, allocations, conflicts, metadata)

    warnings = []
    if conflicts and run.adjacency_strictness == "hard":
        warnings.append(
            f"{len(conflicts)} adjacency conflicts could not be resolved within "
            f"{attempts} attempts."
        )
    elif conflicts:
        warnings.append(
            f"{len(conflicts)} adjacency conflicts reported (soft adjacency, no repair attempted)."
        )

    explanation = explain_run(
        student_count=len(students),
        hall_count=len(ordered_halls),
        total_capacity=total_capacity,
        group_sizes=group_sizes,
        seed=run.seed,
        derived_seed=derive_seed(run.seed),
        seat_numbering=run.seat_numbering,
        allocations_count=len(allocations),
        halls_used=metadata["halls_used"],
        initial_conflicts=initial_conflicts,
        remaining_conflicts=len(conflicts),
        resolution_attempts=attempts,
        adjacency_strictness=run.adjacency_strictness,
    )

    logger.info(
        "Allocation run %s completed: %d allocations, %d conflicts, %d halls used",
        run.run_id, summary["allocations_count"], summary["conflicts_count"], summary["halls_used"],
    )

    return AllocationResult(
        status=RUN_STATUS_COMPLETED,
        run=run,
        stage=stage,
        allocations=allocations,
        conflicts=conflicts,
        summary=summary,
        metadata=metadata,
        message="Allocation completed successfully",
        warnings=warnings,
        explanation_steps=explanation,
        initial_conflicts_count=initial_conflicts,
        resolution_attempts=attempts,
    )
