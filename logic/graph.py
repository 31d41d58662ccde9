# logic/graph.py
"""
Raw flow graph construction from per-level records, plus the adjacency and
descendant helpers shared by the filter and view stages.

DUPLICATE RECORDS POLICY:
Records sharing (level, name) are one node; their values are summed. Records
sharing (parent, child) are one link; their values are summed too, so a
(source, target) pair appears at most once per build.

PARENT RESOLUTION:
Intermediate levels link to their immediate parent level only. The leaf level
links to its penultimate-level parent when that parent exists, otherwise
directly to its root-level parent (a "skip link"), otherwise not at all.
Only the leaf level may skip a level.
"""

import logging
from collections import OrderedDict
from dataclasses import dataclass
from typing import Any, Dict, Iterator, List, Optional, Set, Tuple

import pandas as pd

from utils.constants import ROOT_LEVEL
from utils.helpers import coerce_number, is_missing_parent, normalize_text
from .levels import leaf_level, level_at, level_infos
from .models import Category, Graph, LevelConfig, Link, Node, make_node_id

logger = logging.getLogger(__name__)


@dataclass
class BuildResult:
    graph: Graph
    # True once any record brought a node's value above zero
    has_positive_values: bool = False


def _iter_records(level: LevelConfig) -> Iterator[Dict[str, Any]]:
    records = level.records
    if not isinstance(records, pd.DataFrame) or records.empty:
        return iter(())
    return iter(records.to_dict("records"))


def _record_name_value(level: LevelConfig, row: Dict[str, Any]) -> Optional[Tuple[str, float]]:
    """Return (name, value) for a usable record, None when either is unavailable."""
    name = normalize_text(row.get(level.name_column))
    if not name:
        return None
    value = coerce_number(row.get(level.value_column))
    if value is None:
        return None
    return name, value


def _record_category(level: LevelConfig, row: Dict[str, Any], name: str,
                     leaf_order: int) -> Optional[Category]:
    if level.category_column:
        explicit = Category.from_tag(row.get(level.category_column))
        if explicit is not None:
            return explicit
    # Only leaf nodes may have their category guessed from the name
    if level.order == leaf_order:
        return Category.infer_from_name(name)
    return None


def _parent_node_id(level: LevelConfig, row: Dict[str, Any],
                    parent_level: Optional[LevelConfig],
                    nodes: Dict[str, Node]) -> Optional[str]:
    """Node id of the record's parent at ``parent_level`` if it exists in this build."""
    if parent_level is None:
        return None
    column = level.parent_column_for(parent_level.order)
    if column is None:
        return None
    raw = row.get(column)
    if is_missing_parent(raw):
        return None
    parent_id = make_node_id(parent_level.level_id, normalize_text(raw))
    return parent_id if parent_id in nodes else None


def _resolve_parent(level: LevelConfig, row: Dict[str, Any],
                    sorted_levels: List[LevelConfig], nodes: Dict[str, Node],
                    leaf_order: int) -> Optional[str]:
    immediate = level_at(sorted_levels, level.order - 1)
    parent_id = _parent_node_id(level, row, immediate, nodes)
    if parent_id is not None:
        return parent_id
    if level.order == leaf_order and level.order - 1 > ROOT_LEVEL:
        root = level_at(sorted_levels, ROOT_LEVEL)
        return _parent_node_id(level, row, root, nodes)
    return None


def build_graph(sorted_levels: List[LevelConfig]) -> BuildResult:
    """
    Build the raw node/link graph from sorted level configurations.

    Args:
        sorted_levels: Level configurations sorted by order (see sort_levels)

    Returns:
        BuildResult with the graph (nodes in first-seen order) and whether any
        positive value was seen
    """
    leaf = leaf_level(sorted_levels)
    leaf_order = leaf.order if leaf is not None else ROOT_LEVEL

    nodes: "OrderedDict[str, Node]" = OrderedDict()
    has_positive_values = False
    skipped = 0

    for level in sorted_levels:
        for row in _iter_records(level):
            parsed = _record_name_value(level, row)
            if parsed is None:
                skipped += 1
                continue
            name, value = parsed
            node_id = make_node_id(level.level_id, name)
            node = nodes.get(node_id)
            if node is None:
                nodes[node_id] = Node(
                    id=node_id,
                    name=name,
                    value=value,
                    level=level.order,
                    category=_record_category(level, row, name, leaf_order),
                    level_id=level.level_id,
                    index=len(nodes),
                )
                if value > 0:
                    has_positive_values = True
            else:
                node.value += value
                if node.category is None:
                    node.category = _record_category(level, row, name, leaf_order)
                if node.value > 0:
                    has_positive_values = True

    if skipped:
        logger.debug(f"Skipped {skipped} record(s) with unavailable name or value")

    links: "OrderedDict[Tuple[str, str], Link]" = OrderedDict()
    if nodes:
        for level in sorted_levels:
            if level.order == ROOT_LEVEL:
                continue
            for row in _iter_records(level):
                parsed = _record_name_value(level, row)
                if parsed is None:
                    continue
                name, value = parsed
                child_id = make_node_id(level.level_id, name)
                parent_id = _resolve_parent(level, row, sorted_levels, nodes, leaf_order)
                if parent_id is None:
                    continue
                key = (parent_id, child_id)
                if key in links:
                    links[key].value += value
                else:
                    links[key] = Link(source=parent_id, target=child_id, value=value)

    graph = Graph(
        nodes=list(nodes.values()),
        links=list(links.values()),
        levels=level_infos(sorted_levels),
    )
    logger.info(f"Built graph: {len(graph.nodes)} node(s), {len(graph.links)} link(s)")
    return BuildResult(graph=graph, has_positive_values=has_positive_values)


def outgoing_index(links: List[Link]) -> Dict[str, List[Link]]:
    """Map each source id to its outgoing links, in link order."""
    index: Dict[str, List[Link]] = {}
    for link in links:
        index.setdefault(link.source, []).append(link)
    return index


def incoming_index(links: List[Link]) -> Dict[str, List[Link]]:
    """Map each target id to its incoming links, in link order."""
    index: Dict[str, List[Link]] = {}
    for link in links:
        index.setdefault(link.target, []).append(link)
    return index


def collect_descendants(node_id: str, outgoing: Dict[str, List[Link]]) -> Set[str]:
    """
    All node ids reachable from ``node_id`` through outgoing links, at any depth.

    Uses an explicit stack and a visited set, so cycles in dirty input cannot
    loop forever. The start node itself is not included.
    """
    visited: Set[str] = {node_id}
    stack = [node_id]
    while stack:
        current = stack.pop()
        for link in outgoing.get(current, []):
            if link.target not in visited:
                visited.add(link.target)
                stack.append(link.target)
    visited.discard(node_id)
    return visited


def drop_dangling_links(graph: Graph) -> Graph:
    """Copy of graph keeping only links whose endpoints are both present."""
    result = graph.copy()
    ids = {n.id for n in result.nodes}
    result.links = [l for l in result.links if l.source in ids and l.target in ids]
    return result
