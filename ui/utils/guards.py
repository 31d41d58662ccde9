# ui/utils/guards.py
"""
Guard utilities for tab rendering to prevent blank tabs and provide clear error messages.
"""

import logging
import traceback

import streamlit as st

import utils.state as USTATE

logger = logging.getLogger(__name__)


def ensure_levels_loaded(tab_name: str) -> bool:
    """
    Ensure a parsed hierarchy is available for tab rendering.

    Args:
        tab_name: Name of the tab for logging purposes

    Returns:
        True if the tab can render
    """
    if USTATE.get_levels():
        return True
    error = USTATE.get_levels_error()
    if error:
        st.error(f"Hierarchy configuration is invalid: {error}")
    else:
        st.warning("No hierarchy loaded. Load a workbook in 📂 Source.")
    logger.debug(f"{tab_name}: no hierarchy loaded")
    return False


def render_guard(label: str, fn):
    """Run a tab render function with visible error reporting (no blank tabs)."""
    try:
        return fn()
    except Exception as e:
        logger.exception(f"Exception in {label}.render()")
        st.error(f"Exception in {label}.render(): {type(e).__name__}: {e}")
        st.code(traceback.format_exc())
        return None
