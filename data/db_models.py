from sqlalchemy import Column, DateTime, ForeignKey, Integer, JSON, String, Text, Boolean, UniqueConstraint
from sqlalchemy.orm import relationship

from data.database import Base


class AllocationRunDB(Base):
    __tablename__ = "allocation_runs"

    run_id = Column(String(64), primary_key=True)
    exam_id = Column(String, nullable=True, index=True)
    shuffle_seed = Column(String(64), nullable=False)
    seat_numbering = Column(String, nullable=False, default="row_major")
    adjacency_strictness = Column(String, nullable=False, default="hard")
    run_metadata = Column("metadata", JSON, nullable=True)
    notes = Column(Text, nullable=True)
    created_at = Column(DateTime, nullable=False)
    completed_at = Column(DateTime, nullable=True)

    allocations = relationship("AllocationDB", back_populates="run", cascade="all, delete")


class AllocationDB(Base):
    __tablename__ = "allocations"
    __table_args__ = (
        UniqueConstraint("run_id", "hall_id", "row_no", "col_no", name="uq_allocation_seat"),
        UniqueConstraint("run_id", "student_id", name="uq_allocation_student"),
    )

    id = Column(Integer, primary_key=True, index=True)
    run_id = Column(String(64), ForeignKey("allocation_runs.run_id"), nullable=False, index=True)
    hall_id = Column(String, nullable=False)
    student_id = Column(String, nullable=False, index=True)
    row_no = Column(Integer, nullable=False)
    col_no = Column(Integer, nullable=False)
    seat_number = Column(Integer, nullable=False)
    class_group = Column(String, nullable=True)

    run = relationship("AllocationRunDB", back_populates="allocations")


class SeatConflictDB(Base):
    __tablename__ = "seat_conflicts"

    id = Column(Integer, primary_key=True, index=True)
    allocation_id = Column(Integer, ForeignKey("allocations.id"), nullable=False, index=True)
    conflicting_allocation_id = Column(Integer, ForeignKey("allocations.id"), nullable=False)
    conflict_type = Column(String, nullable=False)
    details = Column(JSON, nullable=True)
    resolved = Column(Boolean, nullable=False, default=False)

    allocation = relationship("AllocationDB", foreign_keys=[allocation_id])
    conflicting_allocation = relationship("AllocationDB", foreign_keys=[conflicting_allocation_id])
