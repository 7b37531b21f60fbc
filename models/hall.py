from dataclasses import dataclass

from config.defaults import SEAT_NUMBERING_OPTIONS


@dataclass
class Hall:
    hall_id: str
    name: str
    rows: int
    columns: int
    is_active: bool = True

    def __post_init__(self):
        if self.rows <= 0 or self.columns <= 0:
            raise ValueError(
                f"Hall {self.hall_id}: rows and columns must be positive "
                f"(got {self.rows}x{self.columns})"
            )

    @property
    def capacity(self) -> int:
        return self.rows * self.columns

    def compute_seat_number(self, row: int, column: int, numbering: str = "row_major") -> int:
        """Derive the printed seat label for (row, column)."""
        if numbering == "row_major":
            return (row - 1) * self.columns + column
        if numbering == "column_major":
            return (column - 1) * self.rows + row
        raise ValueError(
            f"Unknown seat numbering '{numbering}'. Expected one of {SEAT_NUMBERING_OPTIONS}."
        )

    def has_position(self, row: int, column: int) -> bool:
        return 1 <= row <= self.rows and 1 <= column <= self.columns


@dataclass(frozen=True)
class Seat:
    row: int
    column: int
    seat_number: int

    @property
    def position(self):
        return (self.row, self.column)

    @property
    def is_primary(self) -> bool:
        """Checkerboard parity: even (row + column) seats are filled first."""
        return (self.row + self.column) % 2 == 0
