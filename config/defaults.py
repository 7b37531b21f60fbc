"""Default configuration constants for the Exam Seat Allocation engine."""

# Seat numbering strategies
SEAT_NUMBERING_OPTIONS = ["row_major", "column_major"]
DEFAULT_SEAT_NUMBERING = "row_major"

# Adjacency strictness: "hard" runs the repair pass, "soft" only reports
ADJACENCY_STRICTNESS_OPTIONS = ["hard", "soft"]
DEFAULT_ADJACENCY_STRICTNESS = "hard"

# Conflict types. same_class_diagonal is part of the schema but never detected.
CONFLICT_SAME_CLASS_ADJACENT = "same_class_adjacent"
CONFLICT_SAME_CLASS_FRONT_BACK = "same_class_front_back"
CONFLICT_SAME_CLASS_DIAGONAL = "same_class_diagonal"
CONFLICT_TYPES = [
    CONFLICT_SAME_CLASS_ADJACENT,
    CONFLICT_SAME_CLASS_FRONT_BACK,
    CONFLICT_SAME_CLASS_DIAGONAL,
]

# Bucket for students without a class group
UNASSIGNED_GROUP = "unassigned"

# Conflict resolver budget (swap attempts per run)
MAX_RESOLUTION_ATTEMPTS = 1000

# Run seeds
SEED_LENGTH = 32
MAX_SEED_LENGTH = 64

RUN_STATUS_COMPLETED = "completed"
RUN_STATUS_FAILED = "failed"

# Hall utilization display thresholds
HALL_FULL_THRESHOLD = 0.95
HALL_UNDERUSED_THRESHOLD = 0.50

# Logging
LOG_LEVEL = "INFO"
LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"

# Persistence: "sql" keeps runs in DATABASE_URL, "memory" keeps them for the session only
RUN_STORE_BACKEND = "sql"
DATABASE_URL = "sqlite:///./seat_allocation.db"
