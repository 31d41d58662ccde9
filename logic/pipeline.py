# logic/pipeline.py
"""
One complete, synchronous rebuild of the Sankey graph.

build_sankey() is a pure function of SankeyInputs: the hierarchy snapshot, the
category selection, the reporting period and the selected node. Callers
re-invoke it whenever any of those change; nothing is cached between calls.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, List, Optional

import pandas as pd

from utils.constants import ALL_CATEGORIES
from utils.helpers import coerce_timestamp
from .energy_filter import apply_energy_filter
from .graph import build_graph, drop_dangling_links
from .levels import sort_levels
from .models import Graph, LevelConfig, LevelConfigError, Period, parse_category_selection
from .no_data import synthesize_no_data_graph
from .view import scope_view

logger = logging.getLogger(__name__)

STATUS_OK = "ok"
STATUS_EMPTY = "empty"
STATUS_NO_DATA = "no_data"
STATUS_ALL_ZERO = "all_zero"
STATUS_INVALID_CONFIG = "invalid_config"
STATUS_ERROR = "error"


@dataclass
class SankeyInputs:
    levels: List[LevelConfig] = field(default_factory=list)
    category: Any = ALL_CATEGORIES
    period: Optional[Period] = None
    selected_node_id: Optional[str] = None


@dataclass
class SankeyResult:
    # Scoped graph for display; None means "still loading" to the presentation layer
    graph: Optional[Graph] = None
    has_data_for_period: bool = False
    is_non_empty: bool = False
    status: str = STATUS_OK
    # Filtered graph before view scoping, used for tables and exports
    full_graph: Optional[Graph] = None


def filter_records_by_period(level: LevelConfig, period: Period) -> LevelConfig:
    """
    Restrict a level's records to the period, inclusive at both ends.

    Levels without a date column are left untouched. Records whose date is
    missing or unparseable are treated as not yet available and dropped.
    """
    bounds = period.bounds()
    records = level.records
    if bounds is None or not level.date_column or not isinstance(records, pd.DataFrame):
        return level
    if level.date_column not in records.columns or records.empty:
        return level

    dates = records[level.date_column].map(coerce_timestamp)
    mask = dates.map(period.contains).astype(bool)
    kept = records[mask.values].copy()
    logger.debug(f"Level '{level.level_id}': {len(kept)}/{len(records)} record(s) in period")
    return level.with_records(kept)


def build_sankey(inputs: SankeyInputs) -> SankeyResult:
    """
    Rebuild the scoped Sankey graph from scratch.

    Args:
        inputs: Hierarchy snapshot, category, period and selected node

    Returns:
        SankeyResult. A malformed hierarchy or an unexpected failure yields a
        result whose graph is None; nothing partially built is ever returned.
    """
    try:
        try:
            sorted_levels = sort_levels(inputs.levels)
        except LevelConfigError as e:
            logger.warning(f"Invalid hierarchy configuration: {e}")
            return SankeyResult(graph=None, status=STATUS_INVALID_CONFIG)

        category = parse_category_selection(inputs.category)
        period = inputs.period or Period()
        period_is_valid = period.is_valid()
        if period_is_valid:
            sorted_levels = [filter_records_by_period(lv, period) for lv in sorted_levels]

        built = build_graph(sorted_levels)
        graph = built.graph

        if graph.is_empty():
            has_data = False
            if period_is_valid:
                graph = synthesize_no_data_graph(sorted_levels, category)
                status = STATUS_NO_DATA
            else:
                status = STATUS_EMPTY
        elif not built.has_positive_values:
            logger.info("Every node value is zero; treating the period as having no data")
            has_data = False
            status = STATUS_ALL_ZERO
        else:
            has_data = True
            status = STATUS_OK

        filtered = apply_energy_filter(graph, category)
        scoped = drop_dangling_links(
            scope_view(filtered, category, inputs.selected_node_id, sorted_levels)
        )
        return SankeyResult(
            graph=scoped,
            has_data_for_period=has_data,
            is_non_empty=not scoped.is_empty(),
            status=status,
            full_graph=filtered,
        )

    except Exception:
        logger.exception("Sankey rebuild failed")
        return SankeyResult(graph=None, status=STATUS_ERROR)
