# ui/sankey_chart.py
"""Plotly figure for a scoped Sankey graph. No Streamlit dependencies."""

from typing import Dict, List, Optional

import pandas as pd
import plotly.graph_objects as go

from utils.constants import LEVEL_COLORS, LINK_COLOR
from logic.models import Category, Graph, Node, Period
from logic.pricing import compute_cost
from ui.format import format_cost, format_energy_value, format_percentage, format_value, node_padding

DISPLAY_CONSUMPTION = "consumption"
DISPLAY_COST = "cost"


def node_color(node: Node, category: Optional[Category]) -> str:
    if category is not None:
        return category.color
    if node.category is not None:
        return node.category.color
    return LEVEL_COLORS[node.level % len(LEVEL_COLORS)]


def node_label(node: Node, category: Optional[Category], display_mode: str = DISPLAY_CONSUMPTION,
               prices: Optional[pd.DataFrame] = None, period: Optional[Period] = None) -> str:
    """Node name with its value, or its cost when a price covers the period."""
    if display_mode == DISPLAY_COST:
        quote = compute_cost(node.value, category or node.category, prices, period)
        if quote is not None:
            return f"{node.name} ({format_cost(quote.cost, quote.currency)})"
    value, unit = format_energy_value(node.value, category or node.category)
    return f"{node.name} ({format_value(value)} {unit})"


def _parent_totals(graph: Graph) -> Dict[str, float]:
    nodes = graph.node_by_id()
    return {l.target: nodes[l.source].value for l in graph.links if l.source in nodes}


def build_sankey_figure(graph: Graph, category: Optional[Category],
                        display_mode: str = DISPLAY_CONSUMPTION,
                        prices: Optional[pd.DataFrame] = None,
                        period: Optional[Period] = None,
                        height: int = 600) -> go.Figure:
    """
    Lay the graph out as a Plotly Sankey.

    Args:
        graph: Scoped graph from build_sankey
        category: Selected category, None for "all"
        display_mode: "consumption" or "cost"
        prices: Optional price table for cost labels
        period: Reporting period used to pick a price

    Returns:
        go.Figure
    """
    index = {n.id: i for i, n in enumerate(graph.nodes)}
    parents = _parent_totals(graph)
    total = sum(n.value for n in graph.nodes if n.level == min((x.level for x in graph.nodes), default=0))

    labels: List[str] = []
    hover: List[str] = []
    for n in graph.nodes:
        labels.append(node_label(n, category, display_mode, prices, period))
        share = format_percentage(n.value, parents.get(n.id, total))
        hover.append(f"{n.name}<br>{share} of parent flow")

    sources, targets, values = [], [], []
    for l in graph.links:
        if l.source in index and l.target in index:
            sources.append(index[l.source])
            targets.append(index[l.target])
            values.append(l.value)

    fig = go.Figure(go.Sankey(
        arrangement="snap",
        node=dict(
            pad=node_padding(len(graph.nodes)),
            thickness=20,
            line=dict(color="rgba(255,255,255,0.3)", width=1),
            label=labels,
            color=[node_color(n, category) for n in graph.nodes],
            customdata=hover,
            hovertemplate="<b>%{label}</b><br>%{customdata}<extra></extra>",
        ),
        link=dict(
            source=sources,
            target=targets,
            value=values,
            color=LINK_COLOR,
            hovertemplate="<b>%{source.label}</b> → <b>%{target.label}</b><br>%{value:,.2f}<extra></extra>",
        ),
    ))
    fig.update_layout(
        margin=dict(l=20, r=20, t=20, b=20),
        height=height,
        font=dict(size=11),
    )
    return fig
