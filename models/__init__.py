from models.hall import Hall, Seat
from models.student import Student
from models.allocation import Allocation, AllocationRun
from models.conflict import SeatConflict
