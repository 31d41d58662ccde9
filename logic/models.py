# logic/models.py
"""
Data model shared by every stage of the Sankey rebuild.

Stages never mutate a graph they received: each one works on ``Graph.copy()``
and returns the result, so the graph handed to the presentation layer is
never touched again.
"""

from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Any, Callable, Dict, List, Optional, Tuple

import pandas as pd

from utils.constants import (
    ALL_CATEGORIES, CATEGORY_COL, DATE_COL, NAME_COL, PARENT_COL_PREFIX, VALUE_COL
)
from utils.helpers import coerce_timestamp, normalize_text


class LevelConfigError(ValueError):
    """Raised when the configured hierarchy levels are malformed."""


class Category(Enum):
    """Energy categories. Each variant knows its keywords, unit and price column."""

    ELEC = "elec"
    GAZ = "gaz"
    EAU = "eau"
    AIR = "air"

    @property
    def keywords(self) -> Tuple[str, ...]:
        return _CATEGORY_KEYWORDS[self]

    @property
    def unit(self) -> str:
        return "kWh" if self is Category.ELEC else "m³"

    @property
    def price_column(self) -> str:
        return f"Price {self.value.capitalize()}"

    @property
    def color(self) -> str:
        return _CATEGORY_COLORS[self]

    @property
    def title(self) -> str:
        return _CATEGORY_TITLES[self]

    @classmethod
    def from_tag(cls, tag) -> Optional["Category"]:
        """Resolve an explicit tag (case-insensitive); unknown tags give None."""
        text = normalize_text(tag).lower()
        for category in cls:
            if category.value == text:
                return category
        return None

    @classmethod
    def infer_from_name(cls, name: str) -> Optional["Category"]:
        """Guess the category of a leaf node from keywords in its name."""
        lowered = normalize_text(name).lower()
        for category in cls:
            if any(keyword in lowered for keyword in category.keywords):
                return category
        return None


_CATEGORY_KEYWORDS = {
    Category.ELEC: ("elec", "électr", "electr"),
    Category.GAZ: ("gaz", "gas"),
    Category.EAU: ("eau", "water"),
    Category.AIR: ("air", "compress"),
}

_CATEGORY_COLORS = {
    Category.ELEC: "#38a13c",
    Category.GAZ: "#F9BE01",
    Category.EAU: "#3293f3",
    Category.AIR: "#66D8E6",
}

_CATEGORY_TITLES = {
    Category.ELEC: "Electricity flow distribution",
    Category.GAZ: "Gas flow distribution",
    Category.EAU: "Water flow distribution",
    Category.AIR: "Compressed air flow distribution",
}


def parse_category_selection(selection) -> Optional[Category]:
    """
    Turn the global category selection into a Category.

    ``"all"`` (or a blank selection) means no filter and yields None. Any other
    value must name one of the categories.
    """
    if isinstance(selection, Category):
        return selection
    text = normalize_text(selection).lower()
    if text in ("", ALL_CATEGORIES):
        return None
    category = Category.from_tag(text)
    if category is None:
        raise ValueError(f"Unknown category selection: {selection!r}")
    return category


def parent_column(order: int) -> str:
    """Canonical column holding the parent name at ancestor level ``order``."""
    return f"{PARENT_COL_PREFIX}{order}"


@dataclass
class LevelConfig:
    """One rank of the hierarchy and its records."""

    level_id: str
    level_name: str
    order: int
    records: pd.DataFrame = field(default_factory=pd.DataFrame)
    name_column: str = NAME_COL
    value_column: str = VALUE_COL
    category_column: Optional[str] = CATEGORY_COL
    date_column: Optional[str] = DATE_COL
    parent_columns: Dict[int, str] = field(default_factory=dict)
    on_item_click: Optional[Callable[["NodeClick"], None]] = None

    def parent_column_for(self, order: int) -> Optional[str]:
        """Column with the parent name at ``order``, if this level defines one."""
        column = self.parent_columns.get(order)
        if column is None:
            candidate = parent_column(order)
            if isinstance(self.records, pd.DataFrame) and candidate in self.records.columns:
                column = candidate
        return column

    def with_records(self, records: pd.DataFrame) -> "LevelConfig":
        return replace(self, records=records)


@dataclass
class Node:
    id: str
    name: str
    value: float
    level: int
    category: Optional[Category] = None
    level_id: str = ""
    index: int = 0


@dataclass
class Link:
    source: str
    target: str
    value: float


@dataclass
class LevelInfo:
    level: int
    name: str


@dataclass
class Graph:
    nodes: List[Node] = field(default_factory=list)
    links: List[Link] = field(default_factory=list)
    levels: List[LevelInfo] = field(default_factory=list)

    def copy(self) -> "Graph":
        """Copy nodes and links so the copy can be rewritten freely."""
        return Graph(
            nodes=[replace(n) for n in self.nodes],
            links=[replace(l) for l in self.links],
            levels=[replace(lv) for lv in self.levels],
        )

    def node_by_id(self) -> Dict[str, Node]:
        return {n.id: n for n in self.nodes}

    def nodes_at(self, level: int) -> List[Node]:
        return [n for n in self.nodes if n.level == level]

    def leaf_order(self) -> Optional[int]:
        if not self.nodes:
            return None
        return max(n.level for n in self.nodes)

    def is_empty(self) -> bool:
        return not self.nodes


def make_node_id(level_id: str, name: str) -> str:
    return f"{level_id}_{name}"


@dataclass
class Period:
    """Reporting period; valid only when both ends are known and ordered."""

    start: Any = None
    end: Any = None

    def bounds(self) -> Optional[Tuple[pd.Timestamp, pd.Timestamp]]:
        start = coerce_timestamp(self.start)
        end = coerce_timestamp(self.end)
        if start is None or end is None or start > end:
            return None
        return start, end

    def is_valid(self) -> bool:
        return self.bounds() is not None

    def contains(self, ts: pd.Timestamp) -> bool:
        """Inclusive membership; an end without a time part covers that whole day."""
        bounds = self.bounds()
        if bounds is None or ts is None:
            return False
        start, end = bounds
        if end == end.normalize():
            return start <= ts < end + pd.Timedelta(days=1)
        return start <= ts <= end


@dataclass
class NodeClick:
    """Outcome of a click: the next selection and what is reported back."""

    selected_node_id: Optional[str]
    name: str
    category: Optional[Category]
    level_id: str
