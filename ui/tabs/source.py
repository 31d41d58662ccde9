# ui/tabs/source.py
import logging
from typing import Dict

import streamlit as st
import pandas as pd

from utils.constants import HIERARCHY_SHEET
from utils.state import (
    set_active_workbook, get_active_workbook, get_levels, get_levels_error, get_workbook_status
)
from logic.models import LevelConfigError
from io_utils.sheets import levels_from_workbook, read_google_workbook, read_uploaded_workbook

logger = logging.getLogger(__name__)


def render():
    """Render the Source tab for loading the plant hierarchy."""
    try:
        st.header("📂 Source")
        st.markdown("Load a hierarchy workbook: a **Hierarchy** sheet plus one records sheet per level.")

        # Status badge
        has_wb, sheet_count, level_count = get_workbook_status()
        if has_wb:
            st.caption(f"Workbook: ✅ {sheet_count} sheet(s) • {level_count} level(s)")
        else:
            st.caption("Workbook: ❌ not loaded")

        _render_upload_section()
        st.markdown("---")
        _render_google_sheets_section()
        st.markdown("---")
        _render_hierarchy_summary()

    except Exception as e:
        st.exception(e)


def _activate(wb: Dict[str, pd.DataFrame], source: str) -> bool:
    """Parse levels from the workbook and store both in session state."""
    try:
        levels = levels_from_workbook(wb)
    except LevelConfigError as e:
        logger.warning(f"Workbook from {source} rejected: {e}")
        set_active_workbook(wb, levels=[], error=str(e), source=source)
        st.error(f"Hierarchy configuration is invalid: {e}")
        return False
    set_active_workbook(wb, levels=levels, source=source)
    st.cache_data.clear()
    return True


def _render_upload_section():
    """Render the file upload section."""
    st.subheader("📤 Upload Workbook")
    file = st.file_uploader("Upload XLSX or CSV", type=["xlsx", "xls", "csv"])

    if file is not None:
        wb = read_uploaded_workbook(file)
        if not wb or HIERARCHY_SHEET not in wb:
            st.error(f"Uploaded workbook has no '{HIERARCHY_SHEET}' sheet.")
            return
        st.session_state["upload_filename"] = file.name
        if _activate(wb, "upload"):
            st.success(f"Loaded {len(get_levels())} level(s) from {file.name}.")


def _render_google_sheets_section():
    """Render the Google Sheets loading section."""
    st.subheader("🔄 Google Sheets")

    sid = st.text_input("Spreadsheet ID", value=st.session_state.get("sheet_id", ""))
    if sid:
        st.session_state["sheet_id"] = sid

    if st.button("Load / Refresh from Google Sheets"):
        try:
            if "gcp_service_account" not in st.secrets:
                st.error("Google Sheets not configured. Add your service account JSON under [gcp_service_account].")
                return
            with st.spinner("Loading hierarchy..."):
                wb = read_google_workbook(sid, st.secrets["gcp_service_account"])
            if not wb:
                st.warning("Spreadsheet is empty, not found or not shared with the service account.")
                return
            if _activate(wb, "google"):
                st.success(f"Loaded {len(get_levels())} level(s) from Google Sheets.")
        except Exception as e:
            st.error(f"Google Sheets error: {e}")


def _render_hierarchy_summary():
    st.subheader("🏭 Hierarchy")
    error = get_levels_error()
    if error:
        st.error(error)
        return
    levels = get_levels()
    if not levels:
        st.info("No active workbook. Upload a file or load a Google Sheet.")
        return
    summary = pd.DataFrame([
        {
            "Order": lv.order,
            "Level ID": lv.level_id,
            "Level Name": lv.level_name,
            "Records": len(lv.records),
            "Parent columns": ", ".join(lv.parent_columns[k] for k in sorted(lv.parent_columns)),
        }
        for lv in sorted(levels, key=lambda lv: lv.order)
    ])
    st.dataframe(summary, use_container_width=True, hide_index=True)

    wb = get_active_workbook() or {}
    sheet = st.selectbox("Preview sheet", list(wb.keys()), key="source_preview_sheet")
    if sheet:
        st.dataframe(wb[sheet].head(20), use_container_width=True)
