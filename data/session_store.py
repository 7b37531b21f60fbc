"""Typed wrapper around st.session_state for application data."""

import streamlit as st
from typing import Dict, List, Optional
from models.hall import Hall
from models.student import Student
from data.database import create_db_engine, create_session_factory
from data.run_store import InMemoryRunStore, RunStore
from data.sql_store import SqlRunStore
from config.defaults import (
    DATABASE_URL, MAX_RESOLUTION_ATTEMPTS, RUN_STORE_BACKEND,
)


def create_run_store(backend: str = RUN_STORE_BACKEND, url: str = DATABASE_URL) -> RunStore:
    if backend == "sql":
        return SqlRunStore(create_session_factory(create_db_engine(url)))
    if backend == "memory":
        return InMemoryRunStore()
    raise ValueError(f"Unknown run store backend '{backend}'. Expected 'sql' or 'memory'.")


def initialize_session_state():
    """Initialize all session state keys with defaults."""
    defaults = {
        "halls": [],
        "students": [],
        "results": {},
        "active_run_id": None,
        "data_loaded": False,
        "rule_config": {
            "max_resolution_attempts": MAX_RESOLUTION_ATTEMPTS,
        },
    }
    for key, default in defaults.items():
        if key not in st.session_state:
            st.session_state[key] = default

    if "run_store" not in st.session_state:
        st.session_state["run_store"] = create_run_store()


# --- Getters ---

def get_halls() -> List[Hall]:
    return st.session_state.get("halls", [])


def get_students() -> List[Student]:
    return st.session_state.get("students", [])


def get_run_store() -> RunStore:
    return st.session_state["run_store"]


def get_results() -> Dict:
    """run_id -> AllocationResult, in creation order."""
    return st.session_state.get("results", {})


def get_active_run_id() -> Optional[str]:
    return st.session_state.get("active_run_id")


def get_active_result():
    return get_results().get(get_active_run_id())


def get_rule_config() -> dict:
    return st.session_state.get("rule_config", {})


def is_data_loaded() -> bool:
    return st.session_state.get("data_loaded", False)


# --- Setters ---

def set_halls(halls: List[Hall]):
    st.session_state["halls"] = halls


def set_students(students: List[Student]):
    st.session_state["students"] = students


def set_data_loaded(loaded: bool):
    st.session_state["data_loaded"] = loaded


def set_active_run_id(run_id: Optional[str]):
    st.session_state["active_run_id"] = run_id


def set_rule_config(config: dict):
    st.session_state["rule_config"] = config


def add_result(result):
    st.session_state["results"][result.run.run_id] = result
    if result.success:
        set_active_run_id(result.run.run_id)
