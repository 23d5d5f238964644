"""
dependencies/visualization.py - Graph introspection and export.

Node/edge data for front ends, Mermaid diagrams, a networkx view of the
graph, and summary statistics.
"""

from __future__ import annotations
from datetime import datetime, timezone
from typing import Any, Dict, List, Mapping, Optional
import re

import networkx as nx

from naascalc.core.constants import WILDCARD
from naascalc.core.state import is_enabled
from .graph import DependencyGraph

__all__ = [
    "DISPLAY_NAMES",
    "get_display_name",
    "generate_visualization_data",
    "generate_mermaid_diagram",
    "to_networkx",
    "find_circular_dependencies",
    "get_statistics",
    "export_graph",
]

GRAPH_EXPORT_VERSION = "1.0"

DISPLAY_NAMES: Dict[str, str] = {
    "help": "Help & Instructions",
    "prtg": "PRTG Monitoring",
    "capital": "Capital Equipment",
    "support": "Support Services",
    "onboarding": "Onboarding",
    "pbsFoundation": "PBS Foundation",
    "assessment": "Platform Assessment",
    "admin": "Admin Services",
    "otherCosts": "Other Costs",
    "enhancedSupport": "Enhanced Support",
    "dynamics1Year": "Dynamics 1 Year",
    "dynamics3Year": "Dynamics 3 Year",
    "dynamics5Year": "Dynamics 5 Year",
    "naasStandard": "NaaS Standard",
    "naasEnhanced": "NaaS Enhanced",
}

LEVEL_STYLES = {
    0: "#e1f5fe",
    1: "#f3e5f5",
    2: "#e8f5e8",
    3: "#fff3e0",
    4: "#fce4ec",
}


def get_display_name(component_type: str) -> str:
    return DISPLAY_NAMES.get(str(component_type), str(component_type))


def _selected_components(
    graph: DependencyGraph,
    enabled_components: Optional[Mapping[str, Any]],
) -> List[str]:
    if enabled_components is None:
        return graph.get_all_components()
    return [
        str(t) for t, state in enabled_components.items()
        if is_enabled(state) and graph.has_component(t)
    ]


def generate_visualization_data(
    graph: DependencyGraph,
    enabled_components: Optional[Mapping[str, Any]] = None,
) -> Dict[str, List[Dict[str, Any]]]:
    """
    Nodes and edges for the whole graph or for the enabled subset.

    Edges point from dependency to dependent. A wildcard component gets an
    edge from every other selected component.
    """
    selected = _selected_components(graph, enabled_components)
    selected_set = set(selected)

    nodes = []
    for component_type in selected:
        node = graph.get_node(component_type)
        nodes.append({
            "id": component_type,
            "label": get_display_name(component_type),
            "level": node.level,
            "category": node.category.value,
            "description": node.description,
            "enabled": True if enabled_components is None else is_enabled(
                enabled_components.get(component_type)
            ),
        })

    edges = []
    for component_type in selected:
        for dependency in graph.get_dependencies(component_type):
            if dependency == WILDCARD:
                for other in selected:
                    if other != component_type:
                        edges.append({"from": other, "to": component_type, "type": "wildcard"})
            elif dependency in selected_set:
                edges.append({"from": dependency, "to": component_type, "type": "direct"})

    return {"nodes": nodes, "edges": edges}


def _mermaid_id(component_type: str) -> str:
    return re.sub(r"[^a-zA-Z0-9]", "_", component_type)


def generate_mermaid_diagram(
    graph: DependencyGraph,
    enabled_components: Optional[Mapping[str, Any]] = None,
) -> str:
    """Mermaid `graph TD` source, nodes styled by level."""
    data = generate_visualization_data(graph, enabled_components)
    lines = ["graph TD"]

    for level, color in LEVEL_STYLES.items():
        lines.append(f"    classDef level{level} fill:{color}")
    lines.append("")

    for node in data["nodes"]:
        node_id = _mermaid_id(node["id"])
        lines.append(f'    {node_id}["{node["label"]}"]')
        lines.append(f"    class {node_id} level{node['level']}")
    lines.append("")

    for edge in data["edges"]:
        arrow = "-.->|depends on all|" if edge["type"] == "wildcard" else "-->"
        lines.append(f"    {_mermaid_id(edge['from'])} {arrow} {_mermaid_id(edge['to'])}")

    return "\n".join(lines) + "\n"


def to_networkx(
    graph: DependencyGraph,
    enabled_components: Optional[Mapping[str, Any]] = None,
) -> nx.DiGraph:
    """Directed graph with edges dependency -> dependent."""
    data = generate_visualization_data(graph, enabled_components)
    digraph = nx.DiGraph()
    for node in data["nodes"]:
        digraph.add_node(
            node["id"],
            label=node["label"],
            level=node["level"],
            category=node["category"],
        )
    for edge in data["edges"]:
        digraph.add_edge(edge["from"], edge["to"], type=edge["type"])
    return digraph


def find_circular_dependencies(
    graph: DependencyGraph,
    enabled_components: Optional[Mapping[str, Any]] = None,
) -> List[List[str]]:
    """
    Cycles among the selected components, wildcard edges expanded.

    Over the full catalog the wildcard components depend on each other,
    so this is non-empty unless at most one of them is selected.
    """
    digraph = to_networkx(graph, enabled_components)
    cycles = [sorted(cycle) for cycle in nx.simple_cycles(digraph)]
    return sorted(cycles, key=lambda c: (len(c), c))


def get_statistics(graph: DependencyGraph) -> Dict[str, Any]:
    components = graph.get_all_components()
    levels: Dict[str, int] = {}
    categories: Dict[str, int] = {}
    total_edges = 0

    for component_type in components:
        node = graph.get_node(component_type)
        level_label = f"Level {node.level}"
        levels[level_label] = levels.get(level_label, 0) + 1
        categories[node.category.value] = categories.get(node.category.value, 0) + 1
        total_edges += len(node.dependencies)

    return {
        "total_components": len(components),
        "total_edges": total_edges,
        "level_distribution": levels,
        "category_distribution": categories,
        "max_level": max((graph.get_level(c) for c in components), default=0),
        "wildcard_components": [c for c in components if graph.get_node(c).is_wildcard],
        "circular_dependencies": find_circular_dependencies(graph),
    }


def export_graph(graph: DependencyGraph) -> Dict[str, Any]:
    """Versioned export of the definition plus statistics."""
    return {
        "version": GRAPH_EXPORT_VERSION,
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "graph": graph.to_dict(),
        "statistics": get_statistics(graph),
    }
