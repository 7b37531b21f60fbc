"""Schema validation for uploaded hall and roster files."""

from dataclasses import dataclass, field
from typing import List
import pandas as pd


@dataclass
class ValidationResult:
    is_valid: bool = True
    errors: List[str] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)


HALL_REQUIRED_COLUMNS = [
    "Hall ID",
    "Rows",
    "Columns",
]

STUDENT_REQUIRED_COLUMNS = [
    "Student ID",
]


def _check_required_columns(df: pd.DataFrame, required: List[str], file_label: str) -> ValidationResult:
    result = ValidationResult()
    missing = [col for col in required if col not in df.columns]
    if missing:
        result.is_valid = False
        result.errors.append(f"{file_label}: Missing required columns: {', '.join(missing)}")
    if df.empty:
        result.is_valid = False
        result.errors.append(f"{file_label}: File contains no data rows.")
    return result


def _active_mask(df: pd.DataFrame) -> pd.Series:
    if "Active" not in df.columns:
        return pd.Series(True, index=df.index)
    return df["Active"].fillna(True).map(
        lambda v: v.strip().lower() in ("yes", "y", "true", "1", "active") if isinstance(v, str) else bool(v)
    )


def validate_halls(df: pd.DataFrame) -> ValidationResult:
    result = _check_required_columns(df, HALL_REQUIRED_COLUMNS, "Halls")
    if not result.is_valid:
        return result

    if (df["Rows"] <= 0).any() or (df["Columns"] <= 0).any():
        result.is_valid = False
        result.errors.append("Halls: Rows and Columns must be positive.")

    dupes = df.duplicated(subset=["Hall ID"], keep=False)
    if dupes.any():
        result.is_valid = False
        result.errors.append(f"Halls: Duplicate hall IDs: {df[dupes]['Hall ID'].unique().tolist()}")

    if not _active_mask(df).any():
        result.warnings.append("Halls: No hall is marked active. Allocation will fail until one is.")

    return result


def validate_students(df: pd.DataFrame) -> ValidationResult:
    result = _check_required_columns(df, STUDENT_REQUIRED_COLUMNS, "Students")
    if not result.is_valid:
        return result

    dupes = df.duplicated(subset=["Student ID"], keep=False)
    if dupes.any():
        result.is_valid = False
        result.errors.append(
            f"Students: Duplicate student IDs: {df[dupes]['Student ID'].unique().tolist()}"
        )

    if "Class Group" not in df.columns:
        result.warnings.append(
            "Students: No 'Class Group' column. All students will be grouped as 'unassigned' "
            "and adjacency checks will not apply."
        )
    else:
        blank = df["Class Group"].isna().sum()
        if blank:
            result.warnings.append(
                f"Students: {blank} students have no class group and will be seated as 'unassigned'."
            )

    return result


def validate_capacity_preview(halls_df: pd.DataFrame, students_df: pd.DataFrame) -> ValidationResult:
    """Compare active seat supply with roster size before any run."""
    result = ValidationResult()
    active = halls_df[_active_mask(halls_df)]
    capacity = int((active["Rows"] * active["Columns"]).sum())
    roster = len(students_df)

    if capacity < roster:
        result.is_valid = False
        result.errors.append(
            f"Capacity: {roster} students but only {capacity} active seats. "
            "Add or activate halls before generating an allocation."
        )
    elif capacity and roster / capacity > 0.9:
        result.warnings.append(
            f"Capacity: roster fills {roster / capacity:.0%} of {capacity} seats. "
            "Little room to separate same-class students."
        )
    return result
