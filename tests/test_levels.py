import pytest
import pandas as pd

from logic.levels import sort_levels, leaf_level, level_infos, root_level
from logic.models import Category, LevelConfig, LevelConfigError, Period, parse_category_selection


def _level(level_id, order):
    return LevelConfig(level_id=level_id, level_name=level_id.title(), order=order)


class TestSortLevels:
    """Test sort_levels ordering and validation."""

    def test_sorts_by_order(self):
        levels = [_level("machine", 2), _level("plant", 0), _level("area", 1)]
        result = sort_levels(levels)
        assert [lv.level_id for lv in result] == ["plant", "area", "machine"]
        assert root_level(result).level_id == "plant"
        assert leaf_level(result).level_id == "machine"

    def test_single_level(self):
        result = sort_levels([_level("plant", 0)])
        assert len(result) == 1

    def test_empty_is_invalid(self):
        with pytest.raises(LevelConfigError):
            sort_levels([])

    def test_gap_is_invalid(self):
        with pytest.raises(LevelConfigError):
            sort_levels([_level("plant", 0), _level("machine", 2)])

    def test_duplicate_is_invalid(self):
        with pytest.raises(LevelConfigError):
            sort_levels([_level("plant", 0), _level("area", 1), _level("zone", 1)])

    def test_must_start_at_zero(self):
        with pytest.raises(LevelConfigError):
            sort_levels([_level("area", 1), _level("machine", 2)])

    def test_non_integer_order(self):
        with pytest.raises(LevelConfigError):
            sort_levels([_level("plant", 0), _level("area", 1.5)])
        with pytest.raises(LevelConfigError):
            sort_levels([_level("plant", 0), _level("area", True)])

    def test_level_infos(self):
        infos = level_infos(sort_levels([_level("area", 1), _level("plant", 0)]))
        assert [(i.level, i.name) for i in infos] == [(0, "Plant"), (1, "Area")]


class TestCategory:
    """Test category tags, inference and selection parsing."""

    def test_from_tag(self):
        assert Category.from_tag("ELEC") is Category.ELEC
        assert Category.from_tag(" gaz ") is Category.GAZ
        assert Category.from_tag("") is None
        assert Category.from_tag("steam") is None

    def test_infer_from_name(self):
        assert Category.infer_from_name("Compteur Electricité") is Category.ELEC
        assert Category.infer_from_name("Chaudière gaz") is Category.GAZ
        assert Category.infer_from_name("Pompe eau froide") is Category.EAU
        assert Category.infer_from_name("Compresseur 3") is Category.AIR
        assert Category.infer_from_name("Presse 1") is None

    def test_infer_keyword_precedence(self):
        """The first category in declaration order wins when several keywords match."""
        assert Category.infer_from_name("elec gaz") is Category.ELEC
        assert Category.infer_from_name("gaz eau") is Category.GAZ

    def test_accessors(self):
        assert Category.ELEC.unit == "kWh"
        assert Category.EAU.unit == "m³"
        assert Category.GAZ.price_column == "Price Gaz"

    def test_parse_selection(self):
        assert parse_category_selection("all") is None
        assert parse_category_selection("") is None
        assert parse_category_selection("Eau") is Category.EAU
        assert parse_category_selection(Category.AIR) is Category.AIR
        with pytest.raises(ValueError):
            parse_category_selection("steam")


class TestPeriod:
    """Test Period validity."""

    def test_valid(self):
        period = Period("2024-01-01", "2024-01-31")
        assert period.is_valid()
        assert period.bounds() == (pd.Timestamp("2024-01-01"), pd.Timestamp("2024-01-31"))

    def test_invalid(self):
        assert not Period().is_valid()
        assert not Period("2024-01-01", None).is_valid()
        assert not Period("2024-02-01", "2024-01-01").is_valid()
