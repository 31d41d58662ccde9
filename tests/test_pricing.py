import pytest
import pandas as pd

from logic.models import Category, Period
from logic.pricing import compute_cost, find_price


@pytest.fixture
def prices():
    return pd.DataFrame([
        {"Start Date": "2023-01-01", "End Date": "2023-12-31", "Price Elec": 0.15, "Price Gaz": 0.08,
         "Price Eau": 3.1, "Price Air": ""},
        {"Start Date": "2024-01-01", "End Date": "2024-12-31", "Price Elec": 0.2, "Price Gaz": 0,
         "Price Eau": 3.4, "Price Air": 0.05},
    ])


class TestFindPrice:
    """Test price selection by validity window."""

    def test_window_covers_period(self, prices):
        quote = find_price(prices, Category.ELEC, Period("2024-03-01", "2024-03-31"))
        assert quote.price == 0.2
        assert quote.valid_from == pd.Timestamp("2024-01-01")

    def test_earlier_window(self, prices):
        assert find_price(prices, Category.EAU, Period("2023-06-01", "2023-06-30")).price == 3.1

    def test_period_spanning_two_windows(self, prices):
        assert find_price(prices, Category.ELEC, Period("2023-12-15", "2024-01-15")) is None

    def test_zero_or_blank_price_skipped(self, prices):
        assert find_price(prices, Category.GAZ, Period("2024-03-01", "2024-03-31")) is None
        assert find_price(prices, Category.AIR, Period("2023-03-01", "2023-03-31")) is None

    def test_no_period_or_category(self, prices):
        assert find_price(prices, Category.ELEC, None) is None
        assert find_price(prices, Category.ELEC, Period()) is None
        assert find_price(prices, None, Period("2024-03-01", "2024-03-31")) is None
        assert find_price(None, Category.ELEC, Period("2024-03-01", "2024-03-31")) is None


class TestComputeCost:
    """Test compute_cost."""

    def test_cost(self, prices):
        quote = compute_cost(1000, Category.ELEC, prices, Period("2024-03-01", "2024-03-31"))
        assert quote.cost == pytest.approx(200.0)
        assert quote.currency == "€"

    def test_no_price(self, prices):
        assert compute_cost(1000, Category.GAZ, prices, Period("2024-03-01", "2024-03-31")) is None
