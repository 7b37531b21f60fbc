"""Tab 2: Generate Allocation. Run the engine and review the outcome."""

import streamlit as st

from data.session_store import (
    add_result, get_active_result, get_halls, get_rule_config, get_run_store,
    get_students, is_data_loaded,
)
from engine.allocation_engine import create_allocation_run, run_allocation
from engine.metadata import get_hall_utilization
from components.charts import class_distribution_bar, hall_utilization_bar, utilization_donut
from components.metrics_cards import render_alert_card, render_run_metrics
from config.defaults import HALL_FULL_THRESHOLD, HALL_UNDERUSED_THRESHOLD


def _render_result(result):
    if not result.success:
        render_alert_card(result.message, level="error")
        return

    run = result.run
    st.success(f"{result.message}: run `{run.run_id[:8]}`, seed `{run.seed}`")
    render_run_metrics(result.summary, result.metadata, result.resolution_attempts)

    for w in result.warnings:
        render_alert_card(w, level="warning")

    halls = get_halls()
    utilization = get_hall_utilization([h for h in halls if h.is_active], result.allocations)

    col1, col2 = st.columns(2)
    with col1:
        st.plotly_chart(class_distribution_bar(result.metadata["class_distribution"]), use_container_width=True)
    with col2:
        used = sum(u["used_seats"] for u in utilization)
        total = sum(u["capacity"] for u in utilization)
        st.plotly_chart(utilization_donut(used, total), use_container_width=True)

    st.plotly_chart(hall_utilization_bar(utilization), use_container_width=True)

    for u in utilization:
        if u["utilization_pct"] >= HALL_FULL_THRESHOLD:
            render_alert_card(
                f"{u['hall_name']} is {u['utilization_pct']:.0%} full, little room to separate classes.",
                level="info",
            )
        elif 0 < u["utilization_pct"] < HALL_UNDERUSED_THRESHOLD:
            render_alert_card(
                f"{u['hall_name']} is only {u['utilization_pct']:.0%} used.",
                level="info",
            )

    with st.expander("How this allocation was produced"):
        for step in result.explanation_steps:
            st.markdown(f"- {step}")


def render(sidebar_state):
    """Render the Generate Allocation tab."""
    st.header("Generate Allocation")

    if not is_data_loaded():
        st.info("No data loaded. Please load halls and a roster in the Halls & Roster tab.")
        return

    st.caption(
        f"Numbering: **{sidebar_state.seat_numbering.replace('_', '-')}** · "
        f"Adjacency: **{sidebar_state.adjacency_strictness}** · "
        f"Seed: **{sidebar_state.seed or 'random'}**"
    )

    if st.button("Generate Seating", type="primary", key="btn_generate"):
        run = create_allocation_run(
            seat_numbering=sidebar_state.seat_numbering,
            adjacency_strictness=sidebar_state.adjacency_strictness,
            seed=sidebar_state.seed or None,
        )
        with st.spinner("Allocating seats..."):
            result = run_allocation(
                run, get_halls(), get_students(),
                store=get_run_store(), rule_config=get_rule_config(),
            )
        add_result(result)
        _render_result(result)
        return

    active = get_active_result()
    if active:
        st.subheader("Latest run")
        _render_result(active)
