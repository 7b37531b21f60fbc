"""Tab 4: Run History. Past runs, failures and regeneration."""

import streamlit as st
import pandas as pd

from data.session_store import (
    add_result, get_active_run_id, get_halls, get_results, get_rule_config,
    get_run_store, get_students, set_active_run_id,
)
from engine.allocation_engine import regenerate_run, run_allocation


def render(sidebar_state):
    """Render the Run History tab."""
    st.header("Run History")

    results = get_results()
    if not results:
        st.info("No runs yet in this session.")
    else:
        _render_session_runs(results)

    st.divider()
    _render_stored_runs()


def _render_session_runs(results):
    rows = []
    for run_id, r in results.items():
        rows.append({
            "Run": run_id[:8],
            "Created": r.run.created_at.strftime("%Y-%m-%d %H:%M:%S"),
            "Status": r.status,
            "Stage": r.stage,
            "Seed": r.run.seed,
            "Numbering": r.run.seat_numbering,
            "Adjacency": r.run.adjacency_strictness,
            "Students": r.summary.get("allocations_count", 0),
            "Open Conflicts": r.summary.get("conflicts_count", 0),
            "Notes": r.run.notes or r.message,
        })
    st.dataframe(pd.DataFrame(rows), use_container_width=True)

    completed = [rid for rid, r in results.items() if r.success]
    if not completed:
        return

    current = get_active_run_id()
    selected = st.selectbox(
        "Active run",
        completed,
        index=completed.index(current) if current in completed else len(completed) - 1,
        format_func=lambda rid: f"{rid[:8]} (seed {results[rid].run.seed})",
        key="history_run",
    )
    if selected != current:
        set_active_run_id(selected)

    if st.button("Regenerate with a new seed", key="btn_regenerate"):
        new_run = regenerate_run(results[selected].run)
        result = run_allocation(
            new_run, get_halls(), get_students(),
            store=get_run_store(), rule_config=get_rule_config(),
        )
        add_result(result)
        if result.success:
            st.success(f"Regenerated as run {new_run.run_id[:8]}.")
        else:
            st.error(result.message)


def _render_stored_runs():
    store = get_run_store()
    stored = store.list_runs()
    st.subheader(f"Stored Runs ({len(stored)})")
    if not stored:
        st.caption("Nothing committed yet.")
        return

    latest = store.latest_completed_run()
    st.dataframe(pd.DataFrame([
        {
            "Run": r.run_id[:8],
            "Exam": r.exam_id or "",
            "Created": r.created_at.strftime("%Y-%m-%d %H:%M:%S"),
            "Completed": r.completed_at.strftime("%Y-%m-%d %H:%M:%S") if r.completed_at else "",
            "Seed": r.seed,
            "Students": r.metadata.get("total_students", 0),
            "Open Conflicts": r.metadata.get("total_conflicts", 0),
            "Latest": "✓" if latest and r.run_id == latest.run_id else "",
        }
        for r in stored
    ]), use_container_width=True)
