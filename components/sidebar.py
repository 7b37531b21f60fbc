"""Global sidebar controls for run configuration."""

import streamlit as st
from dataclasses import dataclass
from data.session_store import (
    get_halls, get_results, get_rule_config, get_students, is_data_loaded, set_rule_config,
)
from config.defaults import (
    ADJACENCY_STRICTNESS_OPTIONS, DEFAULT_ADJACENCY_STRICTNESS,
    DEFAULT_SEAT_NUMBERING, MAX_RESOLUTION_ATTEMPTS, MAX_SEED_LENGTH, SEAT_NUMBERING_OPTIONS,
)


@dataclass
class SidebarState:
    seat_numbering: str
    adjacency_strictness: str
    seed: str  # Empty = draw a fresh random seed per run


def render_sidebar() -> SidebarState:
    """Render the global sidebar controls and return current state."""
    with st.sidebar:
        st.title("Exam Seat Allocation")
        st.divider()

        seat_numbering = st.selectbox(
            "Seat Numbering",
            options=SEAT_NUMBERING_OPTIONS,
            index=SEAT_NUMBERING_OPTIONS.index(DEFAULT_SEAT_NUMBERING),
            format_func=lambda x: x.replace("_", "-"),
            key="sidebar_numbering",
        )

        strictness = st.radio(
            "Adjacency Rules",
            options=ADJACENCY_STRICTNESS_OPTIONS,
            index=ADJACENCY_STRICTNESS_OPTIONS.index(DEFAULT_ADJACENCY_STRICTNESS),
            format_func=lambda x: "Hard (repair conflicts)" if x == "hard" else "Soft (report only)",
            key="sidebar_strictness",
        )

        seed = st.text_input(
            "Shuffle Seed (optional)",
            max_chars=MAX_SEED_LENGTH,
            help="Reuse a previous run's seed to reproduce its seating exactly.",
            key="sidebar_seed",
        )

        with st.expander("Repair Settings"):
            cfg = get_rule_config()
            attempts = st.number_input(
                "Max swap attempts",
                min_value=0,
                max_value=MAX_RESOLUTION_ATTEMPTS,
                value=int(cfg.get("max_resolution_attempts", MAX_RESOLUTION_ATTEMPTS)),
                step=100,
                help="Upper bound on conflict-repair swaps per run (hard adjacency only).",
                key="sidebar_max_attempts",
            )
            if attempts != cfg.get("max_resolution_attempts"):
                set_rule_config({**cfg, "max_resolution_attempts": int(attempts)})

        st.divider()

        if is_data_loaded():
            halls = [h for h in get_halls() if h.is_active]
            st.success("Data loaded")
            st.caption(f"Active halls: {len(halls)} ({sum(h.capacity for h in halls):,} seats)")
            st.caption(f"Students: {len(get_students()):,}")
        else:
            st.warning("No data loaded — go to Halls & Roster tab")

        runs = get_results()
        if runs:
            st.caption(f"Runs this session: {len(runs)}")

    return SidebarState(
        seat_numbering=seat_numbering,
        adjacency_strictness=strictness,
        seed=seed.strip(),
    )
