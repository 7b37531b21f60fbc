from dataclasses import dataclass, field
from typing import Optional


@dataclass
class SeatConflict:
    allocation_index: int           # Arena index into the run's allocation list
    conflicting_index: int
    conflict_type: str              # "same_class_adjacent", "same_class_front_back", "same_class_diagonal"
    resolved: bool = False
    details: dict = field(default_factory=dict)
    allocation_id: Optional[int] = None
    conflicting_allocation_id: Optional[int] = None

    @property
    def pair(self):
        return tuple(sorted((self.allocation_index, self.conflicting_index)))

    def mark_resolved(self):
        self.resolved = True
