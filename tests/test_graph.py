import pytest
import pandas as pd

from logic.graph import build_graph, collect_descendants, drop_dangling_links, outgoing_index
from logic.levels import sort_levels
from logic.models import Category, Graph, LevelConfig, Link, Node
from logic.no_data import synthesize_no_data_graph


def _levels(plant_rows, area_rows, machine_rows):
    return sort_levels([
        LevelConfig("plant", "Plant", 0, pd.DataFrame(plant_rows)),
        LevelConfig("area", "Area", 1, pd.DataFrame(area_rows)),
        LevelConfig("machine", "Machine", 2, pd.DataFrame(machine_rows)),
    ])


@pytest.fixture
def plant_levels():
    """Three-level plant with one leaf attached straight to the root."""
    return _levels(
        [{"Name": "P", "Value": 100}],
        [{"Name": "A1", "Value": 70, "Parent L0": "P"}],
        [
            {"Name": "M1", "Value": 50, "Energy": "elec", "Parent L1": "A1", "Parent L0": "P"},
            {"Name": "M3", "Value": 20, "Energy": "gaz", "Parent L1": "A1", "Parent L0": "P"},
            {"Name": "M2", "Value": 30, "Energy": "elec", "Parent L1": "empty", "Parent L0": "P"},
        ],
    )


def _link_map(graph):
    return {(l.source, l.target): l.value for l in graph.links}


class TestBuildGraph:
    """Test build_graph node and link construction."""

    def test_nodes_and_ids(self, plant_levels):
        result = build_graph(plant_levels)
        ids = [n.id for n in result.graph.nodes]
        assert ids == ["plant_P", "area_A1", "machine_M1", "machine_M3", "machine_M2"]
        assert len(set(ids)) == len(ids)
        assert [n.index for n in result.graph.nodes] == [0, 1, 2, 3, 4]
        assert result.has_positive_values

    def test_links(self, plant_levels):
        links = _link_map(build_graph(plant_levels).graph)
        assert links == {
            ("plant_P", "area_A1"): 70,
            ("area_A1", "machine_M1"): 50,
            ("area_A1", "machine_M3"): 20,
            ("plant_P", "machine_M2"): 30,
        }

    def test_leaf_skip_is_exclusive(self, plant_levels):
        """A leaf links to the root only when its penultimate parent is missing."""
        graph = build_graph(plant_levels).graph
        sources = {}
        for l in graph.links:
            sources.setdefault(l.target, []).append(l.source)
        assert sources["machine_M1"] == ["area_A1"]
        assert sources["machine_M2"] == ["plant_P"]

    def test_unknown_parent_gives_no_link(self):
        levels = _levels(
            [{"Name": "P", "Value": 10}],
            [{"Name": "A1", "Value": 10, "Parent L0": "Ghost"}],
            [{"Name": "M1", "Value": 10, "Parent L1": "Nowhere", "Parent L0": "Ghost"}],
        )
        graph = build_graph(levels).graph
        assert len(graph.nodes) == 3
        assert graph.links == []

    def test_intermediate_level_does_not_skip(self):
        """Only the leaf level may fall back to the root parent."""
        levels = sort_levels([
            LevelConfig("plant", "Plant", 0, pd.DataFrame([{"Name": "P", "Value": 10}])),
            LevelConfig("zone", "Zone", 1, pd.DataFrame([{"Name": "Z", "Value": 10, "Parent L0": "P"}])),
            LevelConfig("area", "Area", 2, pd.DataFrame([{"Name": "A", "Value": 10, "Parent L1": "", "Parent L0": "P"}])),
            LevelConfig("machine", "Machine", 3, pd.DataFrame([{"Name": "M", "Value": 10, "Parent L2": "A"}])),
        ])
        links = _link_map(build_graph(levels).graph)
        assert ("plant_P", "area_A") not in links
        assert links[("area_A", "machine_M")] == 10

    def test_duplicate_records_merge_by_sum(self):
        rows = [
            {"Name": "M1", "Value": 5, "Parent L0": "P"},
            {"Name": "M1", "Value": 7, "Parent L0": "P"},
        ]
        levels = sort_levels([
            LevelConfig("plant", "Plant", 0, pd.DataFrame([{"Name": "P", "Value": 12}])),
            LevelConfig("machine", "Machine", 1, pd.DataFrame(rows)),
        ])
        graph = build_graph(levels).graph
        m1 = graph.node_by_id()["machine_M1"]
        assert m1.value == 12
        assert _link_map(graph) == {("plant_P", "machine_M1"): 12}

    def test_merge_is_order_independent(self, plant_levels):
        shuffled = [
            lv.with_records(lv.records.iloc[::-1].reset_index(drop=True)) for lv in plant_levels
        ]
        a = {n.id: n.value for n in build_graph(plant_levels).graph.nodes}
        b = {n.id: n.value for n in build_graph(shuffled).graph.nodes}
        assert a == b

    def test_unavailable_records_are_skipped(self):
        levels = sort_levels([
            LevelConfig("plant", "Plant", 0, pd.DataFrame([
                {"Name": "P", "Value": 10},
                {"Name": "", "Value": 3},
                {"Name": "Q", "Value": "n/a"},
            ])),
        ])
        graph = build_graph(levels).graph
        assert [n.id for n in graph.nodes] == ["plant_P"]

    def test_category_inferred_on_leaves_only(self):
        levels = sort_levels([
            LevelConfig("plant", "Plant", 0, pd.DataFrame([{"Name": "Poste elec", "Value": 10}])),
            LevelConfig("machine", "Machine", 1, pd.DataFrame([
                {"Name": "Pompe eau", "Value": 4, "Parent L0": "Poste elec"},
                {"Name": "Compteur", "Value": 6, "Energy": "GAZ", "Parent L0": "Poste elec"},
            ])),
        ])
        by_id = build_graph(levels).graph.node_by_id()
        assert by_id["plant_Poste elec"].category is None
        assert by_id["machine_Pompe eau"].category is Category.EAU
        assert by_id["machine_Compteur"].category is Category.GAZ

    def test_all_zero_values(self):
        levels = sort_levels([
            LevelConfig("plant", "Plant", 0, pd.DataFrame([{"Name": "P", "Value": 0}])),
        ])
        result = build_graph(levels)
        assert len(result.graph.nodes) == 1
        assert not result.has_positive_values


class TestGraphHelpers:
    """Test collect_descendants and drop_dangling_links."""

    def test_collect_descendants(self, plant_levels):
        graph = build_graph(plant_levels).graph
        outgoing = outgoing_index(graph.links)
        assert collect_descendants("plant_P", outgoing) == {
            "area_A1", "machine_M1", "machine_M3", "machine_M2"
        }
        assert collect_descendants("machine_M1", outgoing) == set()

    def test_collect_descendants_tolerates_cycles(self):
        links = [Link("a", "b", 1), Link("b", "c", 1), Link("c", "a", 1)]
        assert collect_descendants("a", outgoing_index(links)) == {"b", "c"}

    def test_drop_dangling_links(self):
        graph = Graph(nodes=[Node("a", "a", 1, 0)], links=[Link("a", "b", 1)])
        assert drop_dangling_links(graph).links == []
        assert len(graph.links) == 1


class TestNoDataGraph:
    """Test synthesize_no_data_graph."""

    def test_placeholder_chain(self, plant_levels):
        graph = synthesize_no_data_graph(plant_levels, Category.ELEC)
        assert [n.id for n in graph.nodes] == ["plant_No data", "area_No data", "machine_No data"]
        assert [n.name for n in graph.nodes] == ["No data (Plant)", "No data (Area)", "No data (Machine)"]
        assert all(n.value == 0 and n.category is Category.ELEC for n in graph.nodes)
        assert _link_map(graph) == {
            ("plant_No data", "area_No data"): 0,
            ("area_No data", "machine_No data"): 0,
        }
