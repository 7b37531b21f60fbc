"""Dataframe builders and display helpers for allocations and conflicts."""

import streamlit as st
import pandas as pd
from typing import Dict, List

from models.allocation import Allocation
from models.conflict import SeatConflict
from models.hall import Hall


def allocations_frame(allocations: List[Allocation], halls: List[Hall], names: Dict[str, str] = None) -> pd.DataFrame:
    hall_names = {h.hall_id: h.name for h in halls}
    names = names or {}
    df = pd.DataFrame([{
        "Hall": hall_names.get(a.hall_id, a.hall_id),
        "Seat": a.seat_number,
        "Row": a.row,
        "Column": a.column,
        "Student ID": a.student_id,
        "Student": names.get(a.student_id, ""),
        "Class Group": a.class_group or "—",
    } for a in allocations])
    if df.empty:
        return df
    return df.sort_values(["Hall", "Seat"]).reset_index(drop=True)


def conflicts_frame(conflicts: List[SeatConflict], allocations: List[Allocation]) -> pd.DataFrame:
    rows = []
    for c in conflicts:
        a = allocations[c.allocation_index]
        b = allocations[c.conflicting_index]
        rows.append({
            "Type": c.conflict_type.replace("_", " "),
            "Hall": a.hall_id,
            "Class Group": a.class_group,
            "Student A": f"{a.student_id} (seat {a.seat_number})",
            "Student B": f"{b.student_id} (seat {b.seat_number})",
            "Status": "Resolved" if c.resolved else "Open",
        })
    return pd.DataFrame(rows)


def render_conflict_table(df: pd.DataFrame, status_column: str = "Status"):
    """Render a conflict table with open conflicts highlighted."""
    def color_status(val):
        if val == "Open":
            return "background-color: #ffcccc; color: #cc0000; font-weight: bold"
        elif val == "Resolved":
            return "background-color: #d4edda; color: #155724"
        return ""

    if status_column in df.columns:
        styled = df.style.map(color_status, subset=[status_column])
        st.dataframe(styled, use_container_width=True)
    else:
        st.dataframe(df, use_container_width=True)
