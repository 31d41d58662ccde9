import io
import os

import pytest
import pandas as pd

from io_utils.sheets import (
    export_dataframe_to_csv_bytes, export_graph_to_excel_bytes, graph_to_frames,
    levels_from_workbook, prices_from_workbook, read_uploaded_workbook, workbook_from_long_table
)
from logic.graph import build_graph
from logic.levels import sort_levels
from logic.models import LevelConfigError


FIXTURE_PATH = os.path.join(os.path.dirname(__file__), "fixtures", "plant.csv")


class _Upload(io.BytesIO):
    name = "plant.csv"


@pytest.fixture
def plant_workbook():
    """Split the long-table CSV fixture into a workbook."""
    return workbook_from_long_table(pd.read_csv(FIXTURE_PATH))


class TestWorkbookParsing:
    """Test workbook to LevelConfig conversion."""

    def test_long_table_split(self, plant_workbook):
        assert set(plant_workbook) == {"Hierarchy", "plant", "area", "machine"}
        hierarchy = plant_workbook["Hierarchy"]
        assert hierarchy["Level ID"].tolist() == ["plant", "area", "machine"]
        assert len(plant_workbook["machine"]) == 3

    def test_levels_from_workbook(self, plant_workbook):
        levels = sort_levels(levels_from_workbook(plant_workbook))
        assert [(lv.level_id, lv.level_name, lv.order) for lv in levels] == [
            ("plant", "Plant", 0), ("area", "Area", 1), ("machine", "Machine", 2)
        ]
        assert levels[2].parent_columns == {0: "Parent L0", 1: "Parent L1"}
        assert levels[2].records["Name"].tolist() == ["Presse 1", "Four 2", "Eclairage"]

    def test_missing_hierarchy_sheet(self):
        with pytest.raises(LevelConfigError):
            levels_from_workbook({"machine": pd.DataFrame()})

    def test_invalid_order(self):
        wb = {"Hierarchy": pd.DataFrame([{"Level ID": "plant", "Level Name": "Plant", "Order": "first"}])}
        with pytest.raises(LevelConfigError):
            levels_from_workbook(wb)

    def test_missing_level_sheet_has_no_records(self):
        wb = {"Hierarchy": pd.DataFrame([
            {"Level ID": "plant", "Level Name": "Plant", "Order": 0, "Sheet": "Sites"},
        ])}
        levels = levels_from_workbook(wb)
        assert len(levels) == 1
        assert levels[0].records.empty

    def test_read_uploaded_csv(self):
        with open(FIXTURE_PATH, "rb") as f:
            upload = _Upload(f.read())
        wb = read_uploaded_workbook(upload)
        assert "Hierarchy" in wb
        assert len(levels_from_workbook(wb)) == 3

    def test_prices_from_workbook(self, plant_workbook):
        assert prices_from_workbook(plant_workbook) is None
        wb = dict(plant_workbook, Prices=pd.DataFrame([{"Start Date": "2024-01-01", "Price Elec": 0.2}]))
        prices = prices_from_workbook(wb)
        assert "Price Gaz" in prices.columns


class TestGraphExport:
    """Test graph export helpers."""

    def test_graph_to_frames(self, plant_workbook):
        graph = build_graph(sort_levels(levels_from_workbook(plant_workbook))).graph
        nodes, links = graph_to_frames(graph)
        assert len(nodes) == 5
        assert len(links) == 4
        assert nodes.set_index("id").loc["machine_Four 2", "category"] == "gaz"

    def test_graph_to_frames_none(self):
        nodes, links = graph_to_frames(None)
        assert nodes.empty and links.empty
        assert "value" in links.columns

    def test_exports(self, plant_workbook):
        graph = build_graph(sort_levels(levels_from_workbook(plant_workbook))).graph
        nodes, _ = graph_to_frames(graph)
        assert export_dataframe_to_csv_bytes(nodes).startswith(b"id,name,value")
        # XLSX files are zip archives
        assert export_graph_to_excel_bytes(graph)[:2] == b"PK"
