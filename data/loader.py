"""File upload parsing: CSV/XLSX into typed model lists."""

import pandas as pd
from typing import List, Tuple
from models.hall import Hall
from models.student import Student


def _is_truthy(value) -> bool:
    if isinstance(value, str):
        return value.strip().lower() in ("yes", "y", "true", "1", "active")
    return bool(value)


def parse_halls(df: pd.DataFrame) -> List[Hall]:
    """Convert a halls DataFrame into Hall objects."""
    halls = []
    for _, row in df.iterrows():
        active = True
        if "Active" in df.columns and pd.notna(row.get("Active")):
            active = _is_truthy(row["Active"])
        name = row.get("Hall Name") if "Hall Name" in df.columns else None
        halls.append(Hall(
            hall_id=str(row["Hall ID"]).strip(),
            name=str(name).strip() if pd.notna(name) else str(row["Hall ID"]).strip(),
            rows=int(row["Rows"]),
            columns=int(row["Columns"]),
            is_active=active,
        ))
    return halls


def parse_students(df: pd.DataFrame) -> List[Student]:
    """Convert a roster DataFrame into Student objects, keeping roster order."""
    students = []
    for _, row in df.iterrows():
        class_group = None
        if "Class Group" in df.columns and pd.notna(row.get("Class Group")):
            class_group = str(row["Class Group"]).strip() or None
        name = row.get("Student Name") if "Student Name" in df.columns else None
        students.append(Student(
            student_id=str(row["Student ID"]).strip(),
            name=str(name).strip() if pd.notna(name) else "",
            class_group=class_group,
        ))
    return students


def load_file(uploaded_file) -> pd.DataFrame:
    """Load an uploaded file (CSV or XLSX) into a DataFrame."""
    name = uploaded_file.name.lower()
    if name.endswith(".csv"):
        return pd.read_csv(uploaded_file)
    elif name.endswith(".xlsx") or name.endswith(".xls"):
        return pd.read_excel(uploaded_file, engine="openpyxl")
    else:
        raise ValueError(f"Unsupported file format: {name}. Use CSV or XLSX.")


# Expected sheet names for multi-tab Excel (case-insensitive matching)
SHEET_ALIASES = {
    "halls": ["halls", "hall", "exam halls", "hall master", "rooms", "venues"],
    "students": ["students", "student", "roster", "candidates", "student roster"],
}


def _match_sheet(sheet_names: List[str], category: str) -> str:
    """Find a sheet name matching the given category. Returns the matched name or raises."""
    aliases = SHEET_ALIASES[category]
    lower_map = {s.lower().strip(): s for s in sheet_names}
    for alias in aliases:
        if alias in lower_map:
            return lower_map[alias]
    raise ValueError(
        f"Could not find a sheet for '{category}'. "
        f"Expected one of: {aliases}. "
        f"Found sheets: {sheet_names}"
    )


def load_multi_sheet_excel(uploaded_file) -> Tuple[pd.DataFrame, pd.DataFrame]:
    """Load a single Excel file with 2 tabs: Halls, Students.

    Sheet names are matched case-insensitively ('Rooms', 'Roster', etc. also work).
    Returns (halls_df, students_df).
    """
    xl = pd.ExcelFile(uploaded_file, engine="openpyxl")
    sheet_names = xl.sheet_names

    halls_df = pd.read_excel(xl, sheet_name=_match_sheet(sheet_names, "halls"))
    students_df = pd.read_excel(xl, sheet_name=_match_sheet(sheet_names, "students"))

    return halls_df, students_df
