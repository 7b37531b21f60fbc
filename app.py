"""Exam Seat Allocation console: Streamlit entry point."""

import streamlit as st
import sys
import os

# Add project root to path for imports
sys.path.insert(0, os.path.dirname(os.path.abspath(__file__)))

from components.sidebar import render_sidebar
from config.logging_config import configure_logging
from data.session_store import initialize_session_state
from tabs import (
    tab_halls_roster,
    tab_generate,
    tab_hall_viewer,
    tab_run_history,
)


def main():
    st.set_page_config(
        page_title="Exam Seat Allocation",
        page_icon="🪑",
        layout="wide",
        initial_sidebar_state="expanded",
    )

    configure_logging()
    initialize_session_state()
    sidebar_state = render_sidebar()

    tab1, tab2, tab3, tab4 = st.tabs([
        "🏫 Halls & Roster",
        "🎲 Generate Allocation",
        "🗺️ Hall Viewer",
        "🕘 Run History",
    ])

    with tab1:
        tab_halls_roster.render(sidebar_state)
    with tab2:
        tab_generate.render(sidebar_state)
    with tab3:
        tab_hall_viewer.render(sidebar_state)
    with tab4:
        tab_run_history.render(sidebar_state)


if __name__ == "__main__":
    main()
