"""Error taxonomy for allocation runs and manual seat adjustments."""


class AllocationError(Exception):
    """Base class for engine failures.

    ``user_correctable`` separates configuration problems an administrator can
    fix (add halls, activate halls) from internal consistency bugs.
    ``stage`` is filled in by the orchestrator when the error aborts a run.
    """

    user_correctable = True

    def __init__(self, message: str):
        super().__init__(message)
        self.stage = None


class NoActiveHalls(AllocationError):
    def __init__(self):
        super().__init__("No active halls available for allocation. Activate or add halls.")


class NoStudentsRegistered(AllocationError):
    def __init__(self):
        super().__init__("No students registered for this exam.")


class InsufficientCapacity(AllocationError):
    def __init__(self, student_count: int, total_capacity: int):
        self.student_count = student_count
        self.total_capacity = total_capacity
        super().__init__(
            f"Insufficient capacity: {student_count} students need seats but only "
            f"{total_capacity} available. Add more halls or increase hall capacity."
        )


class SeatsExhausted(AllocationError):
    """Allocator ran out of halls after capacity validation passed."""

    user_correctable = False

    def __init__(self, placed: int, student_count: int):
        self.placed = placed
        self.student_count = student_count
        super().__init__(
            f"Ran out of seats during allocation after placing {placed} of "
            f"{student_count} students"
        )


class InvalidSeatPosition(AllocationError):
    def __init__(self, hall_id: str, row: int, column: int):
        super().__init__(f"Invalid seat position ({row}, {column}) for hall {hall_id}")


class SeatOccupied(AllocationError):
    def __init__(self, hall_id: str, row: int, column: int, student_id: str):
        self.occupant_id = student_id
        super().__init__(
            f"Seat ({row}, {column}) in hall {hall_id} is already occupied by student {student_id}"
        )
