# logic/view.py
"""
Projection of the (possibly filtered) flow graph into the displayed view.

Two views exist:
  - overview: every root node, the first-level nodes fed by the root, and the
    leaves attached straight to a root by skip links; only root-originating
    links are shown.
  - detail: one selected node and its qualifying direct children.

Before projecting, a view-level category filter drops the branches that lead
to no qualifying leaf and re-derives ancestor totals from what remains, with
a recursive descendant fallback when a node's direct flows sum to zero.
This pass is intentionally separate from the global filter in
logic/energy_filter.py and keeps its own rules.
"""

import logging
from dataclasses import replace
from typing import List, Optional

from utils.constants import FIRST_LEVEL, ROOT_LEVEL
from .energy_filter import qualifying_leaf_ids
from .graph import collect_descendants, outgoing_index
from .levels import first_level, leaf_level, root_level
from .models import Category, Graph, LevelConfig, Node, NodeClick

logger = logging.getLogger(__name__)


def filter_view_by_energy(graph: Graph, category: Optional[Category]) -> Graph:
    """
    Keep only nodes on a path to a qualifying leaf and recompute their values.

    Args:
        graph: Graph after the global filter (not modified)
        category: Selected category, None for "all"

    Returns:
        Filtered copy of the graph. Unchanged copy when no category is selected
        or no node carries a category at all.
    """
    result = graph.copy()
    if category is None or result.is_empty():
        return result
    if not any(n.category is not None for n in result.nodes):
        logger.info("No node carries an energy category; view left unfiltered")
        return result

    leaf_order = result.leaf_order()
    keep = qualifying_leaf_ids(result, category, leaf_order)
    all_outgoing = outgoing_index(result.links)
    for level in range(leaf_order - 1, ROOT_LEVEL - 1, -1):
        for node in result.nodes_at(level):
            if any(link.target in keep for link in all_outgoing.get(node.id, [])):
                keep.add(node.id)

    nodes = [n for n in result.nodes if n.id in keep]
    links = [l for l in result.links if l.source in keep and l.target in keep]
    outgoing = outgoing_index(links)
    by_id = {n.id: n for n in nodes}

    for node in nodes:
        if node.level == leaf_order:
            continue
        new_value = sum(link.value for link in outgoing.get(node.id, []))
        if new_value == 0:
            descendants = collect_descendants(node.id, outgoing)
            new_value = sum(
                by_id[d].value for d in descendants
                if d in by_id and by_id[d].level == leaf_order and by_id[d].category is category
            )
        if new_value > 0:
            node.value = new_value

    logger.info(f"View filter kept {len(nodes)} node(s), {len(links)} link(s)")
    return replace(result, nodes=nodes, links=links)


def _repair_overview_values(graph: Graph, category: Category, leaf_order: int) -> None:
    """Re-derive first-level then root totals from matching children, in place on a copy."""
    by_id = graph.node_by_id()
    outgoing = outgoing_index(graph.links)

    for node in graph.nodes_at(FIRST_LEVEL):
        new_value = 0.0
        for link in outgoing.get(node.id, []):
            child = by_id.get(link.target)
            if child is not None and child.category is category:
                new_value += child.value
        if new_value > 0:
            node.value = new_value

    for node in graph.nodes_at(ROOT_LEVEL):
        from_first_level = 0.0
        from_skip_links = 0.0
        for link in outgoing.get(node.id, []):
            child = by_id.get(link.target)
            if child is None:
                continue
            if child.level == FIRST_LEVEL:
                from_first_level += child.value
            elif leaf_order > FIRST_LEVEL and child.level == leaf_order and child.category is category:
                from_skip_links += child.value
        new_value = from_first_level + from_skip_links
        if new_value > 0:
            node.value = new_value


def overview_view(graph: Graph, category: Optional[Category],
                  sorted_levels: List[LevelConfig]) -> Graph:
    """Root-level overview of the graph."""
    root = root_level(sorted_levels)
    if root is None:
        return graph.copy()
    leaf = leaf_level(sorted_levels)
    leaf_order = leaf.order if leaf is not None else ROOT_LEVEL
    first = first_level(sorted_levels)

    result = graph.copy()
    if category is not None:
        _repair_overview_values(result, category, leaf_order)

    root_prefix = f"{root.level_id}_"
    root_links = [l for l in result.links if l.source.startswith(root_prefix)]
    root_targets = {l.target for l in root_links}
    first_targets = set()
    if first is not None:
        first_prefix = f"{first.level_id}_"
        first_targets = {l.target for l in result.links if l.source.startswith(first_prefix)}

    def _shown(node: Node) -> bool:
        if node.level == ROOT_LEVEL:
            return True
        if node.level == FIRST_LEVEL:
            return node.id in root_targets
        if leaf_order > FIRST_LEVEL and node.level == leaf_order:
            return node.id in root_targets and node.id not in first_targets
        return False

    return replace(result, nodes=[n for n in result.nodes if _shown(n)], links=root_links)


def detail_view(graph: Graph, category: Optional[Category], selected_node_id: str,
                sorted_levels: List[LevelConfig]) -> Optional[Graph]:
    """
    The selected node and its qualifying direct children.

    Returns None when the selected node is not part of the graph.
    """
    by_id = graph.node_by_id()
    selected = by_id.get(selected_node_id)
    if selected is None:
        return None
    leaf = leaf_level(sorted_levels)
    leaf_order = leaf.order if leaf is not None else graph.leaf_order()

    node_links = [l for l in graph.links if l.source == selected_node_id]
    child_ids = {l.target for l in node_links}

    def _qualifies(node: Node) -> bool:
        if node.level != leaf_order:
            return True
        return category is None or node.category is category

    children = [replace(n) for n in graph.nodes if n.id in child_ids and _qualifies(n)]
    selected_copy = replace(selected)
    if children:
        total = sum(c.value for c in children)
        if total > 0:
            selected_copy.value = total

    shown_ids = {c.id for c in children}
    links = [replace(l) for l in node_links if l.target in shown_ids]
    return replace(graph, nodes=[selected_copy, *children], links=links,
                   levels=[replace(lv) for lv in graph.levels])


def scope_view(graph: Graph, category: Optional[Category], selected_node_id: Optional[str],
               sorted_levels: List[LevelConfig]) -> Graph:
    """
    Project the graph into the current navigational view.

    Args:
        graph: Graph after the global filter (not modified)
        category: Selected category, None for "all"
        selected_node_id: Node id of the detail view, None for the overview
        sorted_levels: Level configurations sorted by order

    Returns:
        The scoped graph
    """
    filtered = filter_view_by_energy(graph, category)
    if selected_node_id is not None:
        detail = detail_view(filtered, category, selected_node_id, sorted_levels)
        if detail is not None:
            return detail
        logger.warning(f"Selected node '{selected_node_id}' is not in the graph; showing overview")
    return overview_view(filtered, category, sorted_levels)


def handle_node_click(node: Node, selected_node_id: Optional[str],
                      sorted_levels: List[LevelConfig]) -> NodeClick:
    """
    Selection transition for a click on ``node``.

    Clicking the selected node returns to the overview, clicking a first-level
    node opens its detail view, any other click keeps the current selection.
    The owning level's click callback, if any, receives the outcome.
    """
    if node.id == selected_node_id:
        next_selection = None
    elif node.level == FIRST_LEVEL:
        next_selection = node.id
    else:
        next_selection = selected_node_id

    outcome = NodeClick(
        selected_node_id=next_selection,
        name=node.name,
        category=node.category,
        level_id=node.level_id,
    )
    for level in sorted_levels:
        if level.level_id == node.level_id and level.on_item_click is not None:
            level.on_item_click(outcome)
    return outcome
