"""
Unit tests for dependencies/visualization.py

Tests node/edge data, Mermaid output, the networkx view and statistics.
"""

import networkx as nx

from naascalc.dependencies.visualization import (
    export_graph,
    find_circular_dependencies,
    generate_mermaid_diagram,
    generate_visualization_data,
    get_display_name,
    get_statistics,
    to_networkx,
)


def enabled(*component_types):
    return {t: {"enabled": True} for t in component_types}


class TestDisplayNames:
    """Test display name lookup."""

    def test_known(self):
        assert get_display_name("capital") == "Capital Equipment"
        assert get_display_name("naasEnhanced") == "NaaS Enhanced"

    def test_unknown_passthrough(self):
        assert get_display_name("bogus") == "bogus"


class TestVisualizationData:
    """Test generate_visualization_data."""

    def test_full_graph(self, graph):
        data = generate_visualization_data(graph)
        assert len(data["nodes"]) == 15
        assert {"from": "capital", "to": "support", "type": "direct"} in data["edges"]

    def test_enabled_subset(self, graph):
        data = generate_visualization_data(graph, enabled("capital", "support", "naasStandard"))

        assert {n["id"] for n in data["nodes"]} == {"capital", "support", "naasStandard"}
        wildcard_edges = [e for e in data["edges"] if e["type"] == "wildcard"]
        assert {(e["from"], e["to"]) for e in wildcard_edges} == {
            ("capital", "naasStandard"),
            ("support", "naasStandard"),
        }

    def test_node_fields(self, graph):
        node = generate_visualization_data(graph, enabled("support"))["nodes"][0]
        assert node == {
            "id": "support",
            "label": "Support Services",
            "level": 2,
            "category": "services",
            "description": "24/7 support and maintenance services",
            "enabled": True,
        }

    def test_disabled_and_unknown_excluded(self, graph):
        components = {"capital": {"enabled": True}, "prtg": {"enabled": False}, "bogus": {"enabled": True}}
        data = generate_visualization_data(graph, components)
        assert [n["id"] for n in data["nodes"]] == ["capital"]


class TestMermaid:
    """Test generate_mermaid_diagram."""

    def test_header_and_styles(self, graph):
        diagram = generate_mermaid_diagram(graph)
        assert diagram.startswith("graph TD\n")
        assert "classDef level0 fill:#e1f5fe" in diagram

    def test_nodes_and_edges(self, graph):
        diagram = generate_mermaid_diagram(graph, enabled("capital", "support", "dynamics1Year"))
        assert 'capital["Capital Equipment"]' in diagram
        assert "class support level2" in diagram
        assert "capital --> support" in diagram
        assert "support -.->|depends on all| dynamics1Year" in diagram


class TestNetworkx:
    """Test to_networkx and cycle discovery."""

    def test_digraph(self, graph):
        digraph = to_networkx(graph, enabled("capital", "support", "enhancedSupport"))
        assert isinstance(digraph, nx.DiGraph)
        assert list(nx.topological_sort(digraph)) == ["capital", "support", "enhancedSupport"]
        assert digraph.nodes["support"]["level"] == 2
        assert digraph.edges["capital", "support"]["type"] == "direct"

    def test_no_cycles_without_two_wildcards(self, graph):
        assert find_circular_dependencies(graph, enabled("capital", "support", "naasStandard")) == []

    def test_wildcard_pair_cycle(self, graph):
        cycles = find_circular_dependencies(graph, enabled("prtg", "naasStandard", "dynamics1Year"))
        assert cycles == [["dynamics1Year", "naasStandard"]]


class TestStatistics:
    """Test get_statistics and export_graph."""

    def test_statistics(self, graph):
        stats = get_statistics(graph)

        assert stats["total_components"] == 15
        assert stats["max_level"] == 4
        assert stats["level_distribution"]["Level 0"] == 4
        assert stats["level_distribution"]["Level 4"] == 3
        assert stats["category_distribution"]["contracts"] == 3
        assert set(stats["wildcard_components"]) == {
            "naasStandard", "dynamics1Year", "dynamics3Year", "dynamics5Year",
        }
        assert len(stats["circular_dependencies"]) > 0

    def test_edge_count(self, graph):
        # support, enhancedSupport, naasEnhanced(2), naasStandard(*), dynamics x3 (*)
        assert get_statistics(graph)["total_edges"] == 8

    def test_export(self, graph):
        exported = export_graph(graph)
        assert exported["version"] == "1.0"
        assert exported["graph"]["support"]["dependencies"] == ["capital"]
        assert "timestamp" in exported
        assert exported["statistics"]["total_components"] == 15
