# logic/pricing.py
"""
Energy price lookup for a reporting period.

A price row applies only when its validity window covers the whole period;
the price column is chosen by the category itself (Category.price_column).
"""

import logging
from dataclasses import dataclass
from typing import Optional

import pandas as pd

from utils.constants import DEFAULT_CURRENCY, PRICE_END_COL, PRICE_START_COL
from utils.helpers import coerce_number, coerce_timestamp
from .models import Category, Period

logger = logging.getLogger(__name__)


@dataclass
class PriceQuote:
    price: float
    valid_from: pd.Timestamp
    valid_to: pd.Timestamp


@dataclass
class CostQuote:
    value: float
    price: float
    cost: float
    currency: str


def find_price(prices: Optional[pd.DataFrame], category: Optional[Category],
               period: Optional[Period]) -> Optional[PriceQuote]:
    """
    First price row covering the whole period with a price for the category.

    Args:
        prices: Price table (see PRICE_HEADERS)
        category: Energy category; None ("all") has no price
        period: Reporting period; a missing or invalid period has no price

    Returns:
        PriceQuote, or None when no row qualifies
    """
    if not isinstance(prices, pd.DataFrame) or prices.empty or category is None:
        return None
    bounds = period.bounds() if period is not None else None
    if bounds is None:
        logger.debug("No valid period; cannot pick a price")
        return None
    start, end = bounds

    for row in prices.to_dict("records"):
        valid_from = coerce_timestamp(row.get(PRICE_START_COL))
        valid_to = coerce_timestamp(row.get(PRICE_END_COL))
        if valid_from is None or valid_to is None:
            continue
        if not (valid_from <= start and valid_to >= end):
            logger.debug(f"Price row {valid_from:%Y-%m-%d}..{valid_to:%Y-%m-%d} does not cover the period")
            continue
        price = coerce_number(row.get(category.price_column))
        if price:
            return PriceQuote(price=price, valid_from=valid_from, valid_to=valid_to)
    return None


def compute_cost(value: float, category: Optional[Category], prices: Optional[pd.DataFrame],
                 period: Optional[Period], currency: str = DEFAULT_CURRENCY) -> Optional[CostQuote]:
    """Cost of ``value`` units of ``category`` over the period, None without a valid price."""
    quote = find_price(prices, category, period)
    if quote is None:
        return None
    return CostQuote(value=value, price=quote.price, cost=value * quote.price, currency=currency)
