"""
Energy Flow Sankey - Streamlit application
Loads a plant hierarchy workbook and renders its energy flows as a drillable Sankey diagram.
"""

import logging

import streamlit as st

from utils import APP_VERSION, ALL_CATEGORIES, TAB_ICONS
from utils.state import get_workbook_status, clear_workbook_state
from ui.tabs import source, sankey, data
from ui.utils.guards import render_guard

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)


def main():
    """Main application entry point."""
    st.set_page_config(
        page_title=f"Energy Flow Sankey {APP_VERSION}",
        page_icon="⚡",
        layout="wide",
        initial_sidebar_state="expanded"
    )

    _initialize_session_state()
    _render_header()
    _render_sidebar()
    _render_all_tabs()


def _initialize_session_state():
    """Initialize all session state variables."""
    defaults = {
        "workbook": {},
        "wb_nonce": "",
        "levels": [],
        "levels_error": None,
        "energy_category": ALL_CATEGORIES,
        "period_start": None,
        "period_end": None,
        "selected_node_id": None,
        "clicked_item": None,
    }
    for key, value in defaults.items():
        if key not in st.session_state:
            st.session_state[key] = value


def _render_header():
    """Render the application header."""
    col1, col2 = st.columns([3, 1])
    with col1:
        st.title("⚡ Energy Flow Sankey")
    with col2:
        has_wb, sheet_count, level_count = get_workbook_status()
        st.metric("Levels", level_count if has_wb else 0)
        st.caption(f"{APP_VERSION}")


def _render_sidebar():
    with st.sidebar:
        st.markdown("### Session")
        has_wb, sheet_count, level_count = get_workbook_status()
        st.write({
            "workbook_sheets": sheet_count,
            "levels": level_count,
            "category": st.session_state.get("energy_category"),
            "selected_node": st.session_state.get("selected_node_id"),
        })
        if st.button("🧹 Reset workbook"):
            clear_workbook_state()
            logger.info("Workbook state cleared")
            st.rerun()


def _render_all_tabs():
    """Render all tabs with normal error handling."""
    TAB_REGISTRY = [
        (f"{TAB_ICONS['source']} Source", source.render),
        (f"{TAB_ICONS['sankey']} Sankey", sankey.render),
        (f"{TAB_ICONS['data']} Data", data.render),
    ]

    tabs = st.tabs([t[0] for t in TAB_REGISTRY])
    for i, (tab_name, fn) in enumerate(TAB_REGISTRY):
        with tabs[i]:
            clean_tab_name = tab_name.split(" ", 1)[1] if " " in tab_name else tab_name
            render_guard(clean_tab_name, fn)


if __name__ == "__main__":
    main()
