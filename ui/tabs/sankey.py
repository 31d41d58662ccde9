# ui/tabs/sankey.py
import logging

import streamlit as st

from utils.constants import ALL_CATEGORIES, FIRST_LEVEL
import utils.state as USTATE
from logic import Category, Period, SankeyInputs, build_sankey, handle_node_click, parse_category_selection
from logic.levels import sort_levels
from logic.models import LevelConfigError
from logic.pipeline import STATUS_ALL_ZERO, STATUS_ERROR, STATUS_INVALID_CONFIG, STATUS_NO_DATA
from io_utils.sheets import prices_from_workbook
from ui.utils.guards import ensure_levels_loaded
from ui.sankey_chart import DISPLAY_CONSUMPTION, DISPLAY_COST, build_sankey_figure

logger = logging.getLogger(__name__)

CATEGORY_OPTIONS = [ALL_CATEGORIES] + [c.value for c in Category]
NO_CHOICE = ""
CATEGORY_LABELS = {ALL_CATEGORIES: "All energies", **{c.value: c.title for c in Category}}


def render():
    """Render the Sankey tab: filters, breadcrumbs and the flow diagram."""
    try:
        st.header("🔀 Energy flows")

        if not ensure_levels_loaded("Sankey"):
            return
        levels = USTATE.get_levels()

        category, period, display_mode = _render_filters()
        result = build_sankey(SankeyInputs(
            levels=levels,
            category=category,
            period=period,
            selected_node_id=USTATE.get_selected_node_id(),
        ))

        if result.status == STATUS_INVALID_CONFIG:
            st.error("Hierarchy configuration is invalid (level orders must run 0..N without gaps).")
            return
        if result.status == STATUS_ERROR or result.graph is None:
            st.info("⏳ Loading…")
            return

        _render_breadcrumbs(result.graph)

        if result.status in (STATUS_NO_DATA, STATUS_ALL_ZERO):
            st.info("No data for the selected period.")

        selected_category = parse_category_selection(category)
        if not result.graph.is_empty():
            prices = prices_from_workbook(USTATE.get_active_workbook())
            fig = build_sankey_figure(result.graph, selected_category, display_mode, prices, period)
            st.plotly_chart(fig, use_container_width=True, key="energy_sankey")

        st.markdown("---")
        _render_drilldown(result.graph, levels)

    except Exception as e:
        st.exception(e)


def _render_filters():
    """Category radio, period inputs and display mode. Returns (category, period, mode)."""
    col1, col2, col3 = st.columns([2, 2, 1])
    with col1:
        current = USTATE.get_category()
        category = st.radio(
            "Energy",
            CATEGORY_OPTIONS,
            index=CATEGORY_OPTIONS.index(current) if current in CATEGORY_OPTIONS else 0,
            format_func=lambda c: CATEGORY_LABELS.get(c, c),
            horizontal=True,
        )
        USTATE.set_category(category)
    with col2:
        start, end = USTATE.get_period()
        picked = st.date_input("Period", value=(start, end) if start and end else (), key="period_input")
        if isinstance(picked, (list, tuple)) and len(picked) == 2:
            USTATE.set_period(picked[0], picked[1])
    with col3:
        display_mode = st.selectbox(
            "Display",
            [DISPLAY_CONSUMPTION, DISPLAY_COST],
            format_func=lambda m: m.capitalize(),
            key=USTATE.DISPLAY_MODE_KEY,
        )
    start, end = USTATE.get_period()
    return category, Period(start, end), display_mode


def _render_breadcrumbs(graph):
    selected = USTATE.get_selected_node_id()
    if not selected:
        st.caption("Overview")
        return
    node = graph.node_by_id().get(selected)
    name = node.name if node else selected
    col1, col2 = st.columns([4, 1])
    with col1:
        st.caption(f"Overview › **{name}**")
    with col2:
        if st.button("⬅️ Back to overview"):
            USTATE.set_selected_node_id(None)
            st.rerun()


def _render_drilldown(graph, levels):
    """Selectbox standing in for clicks on first-level nodes."""
    candidates = [n for n in graph.nodes if n.level == FIRST_LEVEL]
    if not candidates:
        return
    names = {n.id: n.name for n in candidates}
    choice = st.selectbox(
        "Drill into",
        [NO_CHOICE] + list(names),
        format_func=lambda node_id: names.get(node_id, "Select a node"),
        key="drilldown_choice",
    )
    if choice != NO_CHOICE and st.button("🔍 Open"):
        node = graph.node_by_id()[choice]
        try:
            click = handle_node_click(node, USTATE.get_selected_node_id(), sort_levels(levels))
        except LevelConfigError as e:
            st.error(str(e))
            return
        USTATE.set_selected_node_id(click.selected_node_id)
        USTATE.set_clicked_item(click)
        logger.info(f"Node clicked: {click.name} ({click.level_id})")
        st.rerun()

    clicked = USTATE.get_clicked_item()
    if clicked is not None:
        label = clicked.category.title if clicked.category is not None else "all energies"
        st.caption(f"Last selection: **{clicked.name}** • {label}")
