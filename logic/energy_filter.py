# logic/energy_filter.py
"""
Global single-category recompute of ancestor values.

Bottom-up sweep over levels leaf-1 .. 0: a non-leaf node's value becomes the
sum of its direct children, counting leaf children only when they carry the
selected category and non-leaf children at their already recomputed value.
For the root this covers both its first-level children and any leaves
attached to it by skip links. Only direct children are considered; the
recursive descendant search belongs to the view stage.
"""

import logging
from typing import Dict, List, Optional, Set

from utils.constants import ROOT_LEVEL
from .graph import incoming_index, outgoing_index
from .models import Category, Graph, Link, Node

logger = logging.getLogger(__name__)


def qualifying_leaf_ids(graph: Graph, category: Category, leaf_order: int) -> Set[str]:
    """Ids of leaf-level nodes tagged with ``category``."""
    return {
        n.id for n in graph.nodes
        if n.level == leaf_order and n.category is category
    }


def _filtered_children_sum(node: Node, outgoing: Dict[str, List[Link]],
                           by_id: Dict[str, Node], qualifying: Set[str],
                           leaf_order: int) -> float:
    total = 0.0
    for link in outgoing.get(node.id, []):
        child = by_id.get(link.target)
        if child is None:
            continue
        if child.level == leaf_order:
            if child.id in qualifying:
                total += child.value
        else:
            total += child.value
    return total


def apply_energy_filter(graph: Graph, category: Optional[Category]) -> Graph:
    """
    Recompute every non-leaf node's value for a single selected category.

    Args:
        graph: Graph from the builder (not modified)
        category: Selected category; None means "all" and returns an unchanged copy

    Returns:
        A new graph whose non-leaf values (and the links feeding them) reflect
        only the qualifying leaves
    """
    result = graph.copy()
    if category is None or result.is_empty():
        return result

    leaf_order = result.leaf_order()
    by_id = result.node_by_id()
    qualifying = qualifying_leaf_ids(result, category, leaf_order)
    outgoing = outgoing_index(result.links)
    incoming = incoming_index(result.links)
    logger.info(f"Filtering on '{category.value}': {len(qualifying)} qualifying leaf node(s)")

    for level in range(leaf_order - 1, ROOT_LEVEL - 1, -1):
        for node in result.nodes_at(level):
            new_value = _filtered_children_sum(node, outgoing, by_id, qualifying, leaf_order)
            if new_value != node.value:
                logger.debug(f"Recomputed {node.id}: {node.value} -> {new_value}")
                node.value = new_value
                # The edge feeding this node must carry the filtered flow too
                for link in incoming.get(node.id, []):
                    link.value = new_value

    return result
