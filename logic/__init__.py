# logic package
from .models import (
    Category,
    Graph,
    LevelConfig,
    LevelConfigError,
    LevelInfo,
    Link,
    Node,
    NodeClick,
    Period,
    parse_category_selection
)
from .levels import sort_levels
from .graph import build_graph, collect_descendants
from .no_data import synthesize_no_data_graph
from .energy_filter import apply_energy_filter
from .view import scope_view, handle_node_click
from .pipeline import SankeyInputs, SankeyResult, build_sankey
from .pricing import find_price, compute_cost

__all__ = [
    'Category',
    'Graph',
    'LevelConfig',
    'LevelConfigError',
    'LevelInfo',
    'Link',
    'Node',
    'NodeClick',
    'Period',
    'parse_category_selection',
    'sort_levels',
    'build_graph',
    'collect_descendants',
    'synthesize_no_data_graph',
    'apply_energy_filter',
    'scope_view',
    'handle_node_click',
    'SankeyInputs',
    'SankeyResult',
    'build_sankey',
    'find_price',
    'compute_cost'
]
