# ui/format.py
"""Value, percentage and cost formatting for labels and tooltips."""

from typing import Optional, Tuple

from utils.constants import DEFAULT_CURRENCY, NODE_PADDING_MIN, NODE_PADDING_STEPS
from logic.models import Category


def format_energy_value(value: float, category: Optional[Category],
                        custom_unit: Optional[str] = None) -> Tuple[float, str]:
    """
    Scale a value for display.

    Electricity steps up kWh -> MWh -> GWh; every other category is shown in m³.
    With no category ("all") values are shown in m³, as for non-electric categories.
    """
    if custom_unit:
        return value, custom_unit
    if category is Category.ELEC:
        if value >= 1_000_000:
            return value / 1_000_000, "GWh"
        if value >= 1_000:
            return value / 1_000, "MWh"
        return value, "kWh"
    return value, category.unit if category is not None else "m³"


def format_value(value: float) -> str:
    """At most two decimals, trailing zeros dropped."""
    if value == 0:
        return "0"
    return _trim(f"{value:.2f}")


def format_percentage(value: float, total: float) -> str:
    if not total:
        return "0%"
    return _trim(f"{value / total * 100:.1f}") + "%"


def _trim(text: str) -> str:
    text = text.rstrip("0").rstrip(".") if "." in text else text
    return "0" if text in ("", "-0") else text


def format_cost(cost: float, currency: str = DEFAULT_CURRENCY) -> str:
    return f"{round(cost, 2):,.2f} {currency}"


def node_padding(node_count: int) -> int:
    """Vertical gap between nodes; denser diagrams get tighter padding."""
    for limit, padding in NODE_PADDING_STEPS:
        if node_count <= limit:
            return padding
    return NODE_PADDING_MIN
