"""Tab 3: Hall Viewer. Seat maps, conflicts, student lookup and manual moves."""

import streamlit as st

from data.run_store import PersistenceError
from data.session_store import get_active_result, get_halls, get_run_store, get_students
from engine.errors import AllocationError
from engine.metadata import conflict_report
from engine.reassignment import build_hall_grid, find_student_allocation, move_student
from components.charts import seat_grid_heatmap
from components.tables import allocations_frame, conflicts_frame, render_conflict_table


def _render_lookup(result, halls_by_id):
    st.subheader("Find a Student")
    student_id = st.text_input("Student ID", key="lookup_student_id").strip()
    if not student_id:
        return
    alloc = find_student_allocation(result.allocations, student_id)
    if alloc is None:
        st.warning(f"Student {student_id} is not allocated in this run.")
        return
    hall = halls_by_id.get(alloc.hall_id)
    st.info(
        f"**{student_id}** sits in **{hall.name if hall else alloc.hall_id}**, "
        f"seat **{alloc.seat_number}** (row {alloc.row}, column {alloc.column})."
    )


def _render_reassign(result, halls):
    st.subheader("Move a Student")
    active_halls = [h for h in halls if h.is_active]
    if not active_halls:
        st.info("No active halls to move students into. Activate a hall in the Halls & Roster tab.")
        return

    col1, col2, col3, col4 = st.columns(4)
    with col1:
        student_id = st.text_input("Student ID", key="move_student_id").strip()
    with col2:
        hall_id = st.selectbox(
            "Target Hall", [h.hall_id for h in active_halls],
            format_func=lambda hid: next(h.name for h in active_halls if h.hall_id == hid),
            key="move_hall",
        )
        hall = next((h for h in active_halls if h.hall_id == hall_id), None)
    with col3:
        new_row = st.number_input("Row", min_value=1, value=1, step=1, key="move_row")
    with col4:
        new_col = st.number_input("Column", min_value=1, value=1, step=1, key="move_col")

    if st.button("Move Student", key="btn_move"):
        idx = next(
            (i for i, a in enumerate(result.allocations) if a.student_id == student_id),
            None,
        )
        if idx is None:
            st.error(f"Student {student_id} is not allocated in this run.")
            return
        try:
            result.conflicts = move_student(
                result.allocations, result.conflicts, idx, hall, int(new_row), int(new_col),
                result.run.seat_numbering, store=get_run_store(),
            )
        except (AllocationError, PersistenceError) as e:
            st.error(str(e))
            return
        st.success(f"Moved {student_id} to {hall.name} row {new_row}, column {new_col}.")


def render(sidebar_state):
    """Render the Hall Viewer tab."""
    st.header("Hall Viewer")

    result = get_active_result()
    if not result or not result.success:
        st.info("No completed allocation yet. Generate one in the Generate Allocation tab.")
        return

    halls = get_halls()
    halls_by_id = {h.hall_id: h for h in halls}
    used_ids = []
    for a in result.allocations:
        if a.hall_id not in used_ids:
            used_ids.append(a.hall_id)
    used_halls = [halls_by_id[hid] for hid in used_ids if hid in halls_by_id]

    hall_id = st.selectbox(
        "Hall", [h.hall_id for h in used_halls],
        format_func=lambda hid: f"{halls_by_id[hid].name} ({hid})",
        key="viewer_hall",
    )
    hall = halls_by_id[hall_id]

    hall_conflicts = [
        c for c in result.conflicts
        if not c.resolved and result.allocations[c.allocation_index].hall_id == hall.hall_id
    ]
    conflict_positions = set()
    for c in hall_conflicts:
        for idx in (c.allocation_index, c.conflicting_index):
            conflict_positions.add(result.allocations[idx].position)

    grid = build_hall_grid(hall, result.allocations, result.run.seat_numbering)
    st.plotly_chart(seat_grid_heatmap(grid, hall.name, list(conflict_positions)), use_container_width=True)

    st.divider()
    report = conflict_report(result.conflicts)
    st.subheader(f"Conflicts ({report['unresolved']} open of {report['total']})")
    if result.conflicts:
        render_conflict_table(conflicts_frame(result.conflicts, result.allocations))
    else:
        st.success("No same-class neighbours in this run.")

    st.divider()
    _render_lookup(result, halls_by_id)

    st.divider()
    _render_reassign(result, halls)

    st.divider()
    with st.expander("All allocations in this hall"):
        names = {s.student_id: s.name for s in get_students()}
        in_hall = [a for a in result.allocations if a.hall_id == hall.hall_id]
        st.dataframe(allocations_frame(in_hall, halls, names), use_container_width=True)
