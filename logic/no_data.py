# logic/no_data.py
"""Placeholder graph for a selected period that produced no records."""

import logging
from typing import List, Optional

from utils.constants import NO_DATA_LABEL, NO_DATA_SUFFIX
from .levels import level_at, level_infos
from .models import Category, Graph, LevelConfig, Link, Node, make_node_id

logger = logging.getLogger(__name__)


def synthesize_no_data_graph(sorted_levels: List[LevelConfig],
                             category: Optional[Category] = None) -> Graph:
    """
    Build one zero-value placeholder node per level, chained level to level by
    zero-value links, so layout always receives a navigable graph.

    Args:
        sorted_levels: Level configurations sorted by order
        category: Selected category, copied onto every placeholder (None for "all")

    Returns:
        Graph with len(sorted_levels) nodes and len(sorted_levels) - 1 links
    """
    nodes: List[Node] = []
    links: List[Link] = []
    for level in sorted_levels:
        node_id = make_node_id(level.level_id, NO_DATA_SUFFIX)
        nodes.append(Node(
            id=node_id,
            name=NO_DATA_LABEL.format(level_name=level.level_name),
            value=0.0,
            level=level.order,
            category=category,
            level_id=level.level_id,
            index=0,
        ))
        next_level = level_at(sorted_levels, level.order + 1)
        if next_level is not None:
            links.append(Link(
                source=node_id,
                target=make_node_id(next_level.level_id, NO_DATA_SUFFIX),
                value=0.0,
            ))

    logger.info(f"No records for the selected period; synthesized {len(nodes)} placeholder node(s)")
    return Graph(nodes=nodes, links=links, levels=level_infos(sorted_levels))
