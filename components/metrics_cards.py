"""KPI cards for allocation runs."""

import streamlit as st


def render_run_metrics(summary: dict, metadata: dict, resolution_attempts: int = 0):
    """Headline numbers for one completed run."""
    initial = metadata.get("initial_conflicts", summary.get("conflicts_count", 0))
    remaining = summary.get("conflicts_count", 0)

    cols = st.columns(4)
    cols[0].metric("Students Seated", f"{summary.get('allocations_count', 0):,}")
    cols[1].metric("Halls Used", summary.get("halls_used", 0))
    cols[2].metric(
        "Open Conflicts",
        remaining,
        delta=remaining - initial if initial != remaining else None,
        delta_color="inverse",
    )
    cols[3].metric("Repair Attempts", resolution_attempts)


def render_alert_card(message: str, level: str = "warning"):
    if level == "error":
        st.error(message, icon="🔴")
    elif level == "warning":
        st.warning(message, icon="🟡")
    else:
        st.info(message, icon="🔵")
