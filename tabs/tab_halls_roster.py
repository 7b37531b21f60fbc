"""Tab 1: Halls & Roster. Data upload, validation and capacity health check."""

import streamlit as st
import pandas as pd

from data.loader import load_file, load_multi_sheet_excel, parse_halls, parse_students
from data.validator import validate_halls, validate_students, validate_capacity_preview
from data.sample_data import generate_halls_df, generate_students_df
from data.session_store import set_halls, set_students, set_data_loaded, get_halls, get_students, is_data_loaded


def _load_and_validate(halls_df: pd.DataFrame, students_df: pd.DataFrame) -> bool:
    """Validate and store uploaded data."""
    errors = []
    warnings = []

    for r in [validate_halls(halls_df), validate_students(students_df)]:
        errors.extend(r.errors)
        warnings.extend(r.warnings)

    if not errors:
        cap = validate_capacity_preview(halls_df, students_df)
        warnings.extend(cap.warnings)
        # Capacity shortfalls are reported but data is still loaded so halls can be edited
        warnings.extend(cap.errors)

    if errors:
        for e in errors:
            st.error(e)
        return False

    for w in warnings:
        st.warning(w)

    halls = parse_halls(halls_df)
    students = parse_students(students_df)

    set_halls(halls)
    set_students(students)
    set_data_loaded(True)

    st.success(f"Data loaded: {len(halls)} halls, {len(students)} students")
    return True


def _render_health_check():
    halls = get_halls()
    students = get_students()
    active = [h for h in halls if h.is_active]
    capacity = sum(h.capacity for h in active)

    st.subheader("Capacity Health Check")
    col1, col2, col3, col4 = st.columns(4)
    col1.metric("Active Halls", len(active))
    col2.metric("Active Seats", f"{capacity:,}")
    col3.metric("Students", f"{len(students):,}")
    col4.metric("Spare Seats", f"{capacity - len(students):,}")

    if not active:
        st.error("No active halls. Allocation will fail with 'no active halls'.")
    elif len(students) > capacity:
        st.error(
            f"Roster ({len(students):,}) exceeds active capacity ({capacity:,}) by "
            f"{len(students) - capacity:,} seats. Allocation will fail."
        )
    else:
        st.success(f"Roster fills {len(students) / capacity:.0%} of active seats.")

    hall_rows = [{
        "Hall ID": h.hall_id,
        "Name": h.name,
        "Rows": h.rows,
        "Columns": h.columns,
        "Capacity": h.capacity,
        "Active": "Yes" if h.is_active else "No",
    } for h in halls]
    st.dataframe(pd.DataFrame(hall_rows), use_container_width=True)

    counts = {}
    for s in students:
        counts[s.group_key] = counts.get(s.group_key, 0) + 1
    st.caption("Class groups (roster order): " + ", ".join(f"{k}: {v}" for k, v in counts.items()))


def render(sidebar_state):
    """Render the Halls & Roster tab."""
    st.header("Halls & Roster")

    upload_mode = st.radio(
        "Upload mode",
        ["Single Excel file (2 tabs)", "Two separate files"],
        horizontal=True,
        key="upload_mode",
    )

    if upload_mode == "Single Excel file (2 tabs)":
        st.caption("Upload one `.xlsx` file with sheets named **Halls** and **Students**.")
        single_file = st.file_uploader("Excel workbook", type=["xlsx"], key="upload_single")

        col_upload, col_sample = st.columns(2)
        with col_upload:
            if st.button("Upload & Validate", type="primary", key="btn_upload_single"):
                if single_file:
                    try:
                        h_df, s_df = load_multi_sheet_excel(single_file)
                        _load_and_validate(h_df, s_df)
                    except ValueError as e:
                        st.error(f"Error loading file: {e}")
                else:
                    st.warning("Please upload an Excel file.")
        with col_sample:
            if st.button("Load Sample Data", key="btn_sample_single"):
                _load_and_validate(generate_halls_df(), generate_students_df())

    else:
        col1, col2 = st.columns(2)
        with col1:
            halls_file = st.file_uploader("Hall Master", type=["csv", "xlsx"], key="upload_halls")
        with col2:
            students_file = st.file_uploader("Student Roster", type=["csv", "xlsx"], key="upload_students")

        col_upload, col_sample = st.columns(2)
        with col_upload:
            if st.button("Upload & Validate", type="primary", key="btn_upload_multi"):
                if halls_file and students_file:
                    try:
                        _load_and_validate(load_file(halls_file), load_file(students_file))
                    except ValueError as e:
                        st.error(f"Error loading files: {e}")
                else:
                    st.warning("Please upload both files.")
        with col_sample:
            if st.button("Load Sample Data", key="btn_sample_multi"):
                _load_and_validate(generate_halls_df(), generate_students_df())

    if is_data_loaded():
        st.divider()
        _render_health_check()
