import pytest

from logic.models import Category, Graph, Link, Node
from ui.format import format_cost, format_energy_value, format_percentage, format_value, node_padding
from ui.sankey_chart import DISPLAY_COST, build_sankey_figure, node_label


class TestFormatting:
    """Test value, percentage and cost formatting."""

    def test_electricity_scales(self):
        assert format_energy_value(500, Category.ELEC) == (500, "kWh")
        assert format_energy_value(1500, Category.ELEC) == (1.5, "MWh")
        assert format_energy_value(2_500_000, Category.ELEC) == (2.5, "GWh")

    def test_other_categories_in_cubic_meters(self):
        assert format_energy_value(1500, Category.GAZ) == (1500, "m³")

    def test_all_categories_in_cubic_meters(self):
        assert format_energy_value(1500, None) == (1500, "m³")

    def test_custom_unit(self):
        assert format_energy_value(1500, Category.ELEC, "Nm³") == (1500, "Nm³")

    def test_format_value(self):
        assert format_value(0) == "0"
        assert format_value(1.234) == "1.23"
        assert format_value(2.5) == "2.5"
        assert format_value(123456.0) == "123456"

    def test_format_percentage(self):
        assert format_percentage(25, 200) == "12.5%"
        assert format_percentage(1, 3) == "33.3%"
        assert format_percentage(5, 0) == "0%"

    def test_format_cost(self):
        assert format_cost(1234.5) == "1,234.50 €"

    def test_node_padding(self):
        assert node_padding(5) == 35
        assert node_padding(10) == 35
        assert node_padding(11) == 30
        assert node_padding(20) == 25
        assert node_padding(21) == 20


class TestSankeyFigure:
    """Test the Plotly figure builder."""

    @pytest.fixture
    def graph(self):
        return Graph(
            nodes=[
                Node("site_S", "S", 1500, 0),
                Node("machine_M1", "M1", 1000, 1, Category.ELEC),
                Node("machine_M2", "M2", 500, 1, Category.ELEC),
            ],
            links=[Link("site_S", "machine_M1", 1000), Link("site_S", "machine_M2", 500)],
        )

    def test_figure(self, graph):
        fig = build_sankey_figure(graph, Category.ELEC)
        sankey = fig.data[0]
        assert list(sankey.node.label) == ["S (1.5 MWh)", "M1 (1 MWh)", "M2 (500 kWh)"]
        assert list(sankey.link.source) == [0, 0]
        assert list(sankey.link.target) == [1, 2]
        assert sankey.node.pad == 35

    def test_cost_label_falls_back_without_price(self, graph):
        assert node_label(graph.nodes[1], Category.ELEC, DISPLAY_COST) == "M1 (1 MWh)"
