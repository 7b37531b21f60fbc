from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional

from config.defaults import ADJACENCY_STRICTNESS_OPTIONS, SEAT_NUMBERING_OPTIONS


@dataclass
class AllocationRun:
    run_id: str
    seed: str                       # Deterministic PRNG input
    seat_numbering: str = "row_major"
    adjacency_strictness: str = "hard"
    exam_id: Optional[str] = None
    notes: str = ""
    metadata: dict = field(default_factory=dict)
    created_at: datetime = field(default_factory=datetime.now)
    completed_at: Optional[datetime] = None

    def __post_init__(self):
        if self.seat_numbering not in SEAT_NUMBERING_OPTIONS:
            raise ValueError(
                f"Unknown seat numbering '{self.seat_numbering}'. "
                f"Expected one of {SEAT_NUMBERING_OPTIONS}."
            )
        if self.adjacency_strictness not in ADJACENCY_STRICTNESS_OPTIONS:
            raise ValueError(
                f"Unknown adjacency strictness '{self.adjacency_strictness}'. "
                f"Expected one of {ADJACENCY_STRICTNESS_OPTIONS}."
            )

    @property
    def is_completed(self) -> bool:
        return self.completed_at is not None

    def mark_completed(self):
        self.completed_at = datetime.now()


@dataclass
class Allocation:
    """One student on one physical seat within a run."""
    run_id: str
    hall_id: str
    student_id: str
    row: int
    column: int
    seat_number: int
    class_group: Optional[str]      # None = student has no class group
    allocation_id: Optional[int] = None  # Assigned by the store on commit

    @property
    def position(self):
        return (self.row, self.column)
