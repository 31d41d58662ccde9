# ui/tabs/data.py
import streamlit as st

import utils.state as USTATE
from logic import Period, SankeyInputs, build_sankey
from io_utils.sheets import (
    export_dataframe_to_csv_bytes, export_graph_to_excel_bytes, graph_to_frames,
    push_graph_to_google_sheets
)
from ui.utils.guards import ensure_levels_loaded


def render():
    """Render the Data tab: node and link tables of the filtered graph, with exports."""
    try:
        st.header("📋 Data")

        if not ensure_levels_loaded("Data"):
            return
        levels = USTATE.get_levels()

        start, end = USTATE.get_period()
        result = build_sankey(SankeyInputs(
            levels=levels,
            category=USTATE.get_category(),
            period=Period(start, end),
            selected_node_id=USTATE.get_selected_node_id(),
        ))
        if result.graph is None:
            st.info("⏳ Loading…")
            return

        scope = st.radio("Scope", ["Current view", "Whole hierarchy"], horizontal=True)
        graph = result.graph if scope == "Current view" else result.full_graph
        nodes, links = graph_to_frames(graph)

        col1, col2 = st.columns(2)
        with col1:
            st.subheader("Nodes")
            st.dataframe(nodes, use_container_width=True, hide_index=True)
        with col2:
            st.subheader("Links")
            st.dataframe(links, use_container_width=True, hide_index=True)

        _render_exports(graph, nodes, links)

    except Exception as e:
        st.exception(e)


def _render_exports(graph, nodes, links):
    st.subheader("📤 Export")
    col1, col2, col3 = st.columns(3)
    with col1:
        st.download_button(
            "Nodes (CSV)", data=export_dataframe_to_csv_bytes(nodes),
            file_name="sankey_nodes.csv", mime="text/csv"
        )
    with col2:
        st.download_button(
            "Links (CSV)", data=export_dataframe_to_csv_bytes(links),
            file_name="sankey_links.csv", mime="text/csv"
        )
    with col3:
        st.download_button(
            "Workbook (XLSX)", data=export_graph_to_excel_bytes(graph),
            file_name="sankey.xlsx",
            mime="application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"
        )

    sid = st.session_state.get("sheet_id")
    if sid and "gcp_service_account" in st.secrets:
        if st.button("Push to Google Sheets"):
            with st.spinner("Writing to Google Sheets..."):
                ok = push_graph_to_google_sheets(sid, graph, st.secrets["gcp_service_account"])
            if ok:
                st.success("Wrote 'Sankey Nodes' and 'Sankey Links' worksheets.")
            else:
                st.error("Push failed. See the application log for details.")
