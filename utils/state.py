# utils/state.py
"""
Unified state management for the loaded hierarchy and the Sankey selections.
All tabs should use these helpers rather than touching st.session_state keys directly.
"""

import logging
from typing import Dict, List, Optional

import pandas as pd
import streamlit as st

from utils.constants import ALL_CATEGORIES

logger = logging.getLogger(__name__)

WORKBOOK_KEY = "workbook"              # Dict[str, pd.DataFrame]
WB_NONCE_KEY = "wb_nonce"              # bumped on every load, for cache keys
LEVELS_KEY = "levels"                  # List[LevelConfig]
LEVELS_ERROR_KEY = "levels_error"      # str, hierarchy parse error
SOURCE_KEY = "workbook_source"         # "upload" | "google"
CATEGORY_KEY = "energy_category"       # "all" | "elec" | "gaz" | "eau" | "air"
PERIOD_START_KEY = "period_start"
PERIOD_END_KEY = "period_end"
SELECTED_NODE_KEY = "selected_node_id"
DISPLAY_MODE_KEY = "display_mode"      # "consumption" | "cost"
CLICKED_ITEM_KEY = "clicked_item"      # last NodeClick

def set_active_workbook(wb: Dict[str, pd.DataFrame], levels: Optional[list] = None,
                        error: Optional[str] = None, source: str = "unspecified"):
    """Store a freshly loaded workbook with its parsed levels and reset the selection."""
    st.session_state[WORKBOOK_KEY] = wb
    st.session_state[LEVELS_KEY] = levels or []
    st.session_state[LEVELS_ERROR_KEY] = error
    st.session_state[SOURCE_KEY] = source
    st.session_state[SELECTED_NODE_KEY] = None
    st.session_state[CLICKED_ITEM_KEY] = None
    st.session_state[WB_NONCE_KEY] = (st.session_state.get(WB_NONCE_KEY) or "") + "•"
    logger.info(f"Active workbook set from {source}: {len(wb or {})} sheet(s), {len(levels or [])} level(s)")

def get_active_workbook() -> Optional[Dict[str, pd.DataFrame]]:
    return st.session_state.get(WORKBOOK_KEY)

def get_levels() -> List:
    return st.session_state.get(LEVELS_KEY) or []

def get_levels_error() -> Optional[str]:
    return st.session_state.get(LEVELS_ERROR_KEY)

def get_workbook_status():
    """(has_workbook, sheet_count, level_count) for UI display."""
    wb = get_active_workbook() or {}
    return bool(wb), len(wb), len(get_levels())

def get_category() -> str:
    return st.session_state.get(CATEGORY_KEY) or ALL_CATEGORIES

def set_category(category: str):
    """Change the energy category; a category change always returns to the overview."""
    if category != st.session_state.get(CATEGORY_KEY):
        st.session_state[SELECTED_NODE_KEY] = None
    st.session_state[CATEGORY_KEY] = category

def get_period():
    return st.session_state.get(PERIOD_START_KEY), st.session_state.get(PERIOD_END_KEY)

def set_period(start, end):
    st.session_state[PERIOD_START_KEY] = start
    st.session_state[PERIOD_END_KEY] = end

def get_selected_node_id() -> Optional[str]:
    return st.session_state.get(SELECTED_NODE_KEY)

def set_selected_node_id(node_id: Optional[str]):
    st.session_state[SELECTED_NODE_KEY] = node_id

def set_clicked_item(click):
    st.session_state[CLICKED_ITEM_KEY] = click

def get_clicked_item():
    return st.session_state.get(CLICKED_ITEM_KEY)

def clear_workbook_state() -> None:
    """Clear all workbook-related state."""
    for key in [WORKBOOK_KEY, WB_NONCE_KEY, LEVELS_KEY, LEVELS_ERROR_KEY, SOURCE_KEY,
                SELECTED_NODE_KEY, CLICKED_ITEM_KEY]:
        if key in st.session_state:
            del st.session_state[key]
