# logic/levels.py
"""
Ordering and validation of the configured hierarchy levels.
No Streamlit dependencies - can be imported by both logic and UI modules.
"""

import logging
from numbers import Integral
from typing import Iterable, List, Optional

from utils.constants import FIRST_LEVEL, ROOT_LEVEL
from .models import LevelConfig, LevelConfigError, LevelInfo

logger = logging.getLogger(__name__)


def sort_levels(levels: Iterable[LevelConfig]) -> List[LevelConfig]:
    """
    Sort hierarchy levels ascending by their ``order``.

    Args:
        levels: Unordered level configurations

    Returns:
        The same configurations sorted by order

    Raises:
        LevelConfigError: If there are no levels, or the orders are not distinct
            non-negative integers forming the dense sequence 0..n-1
    """
    levels = list(levels or [])
    if not levels:
        raise LevelConfigError("No hierarchy levels configured")

    for level in levels:
        if isinstance(level.order, bool) or not isinstance(level.order, Integral):
            raise LevelConfigError(
                f"Level '{level.level_id}' has a non-integer order: {level.order!r}"
            )
        if level.order < 0:
            raise LevelConfigError(f"Level '{level.level_id}' has a negative order: {level.order}")

    orders = [int(level.order) for level in levels]
    if len(set(orders)) != len(orders):
        raise LevelConfigError(f"Duplicate level orders: {sorted(orders)}")
    if sorted(orders) != list(range(len(orders))):
        raise LevelConfigError(f"Level orders must be contiguous from 0, got {sorted(orders)}")

    sorted_levels = sorted(levels, key=lambda lv: lv.order)
    logger.debug(f"Sorted levels: {[(lv.level_id, lv.order) for lv in sorted_levels]}")
    return sorted_levels


def level_at(sorted_levels: List[LevelConfig], order: int) -> Optional[LevelConfig]:
    for level in sorted_levels:
        if level.order == order:
            return level
    return None


def root_level(sorted_levels: List[LevelConfig]) -> Optional[LevelConfig]:
    return level_at(sorted_levels, ROOT_LEVEL)


def first_level(sorted_levels: List[LevelConfig]) -> Optional[LevelConfig]:
    return level_at(sorted_levels, FIRST_LEVEL)


def leaf_level(sorted_levels: List[LevelConfig]) -> Optional[LevelConfig]:
    if not sorted_levels:
        return None
    return max(sorted_levels, key=lambda lv: lv.order)


def level_infos(sorted_levels: List[LevelConfig]) -> List[LevelInfo]:
    return [LevelInfo(level=lv.order, name=lv.level_name) for lv in sorted_levels]
