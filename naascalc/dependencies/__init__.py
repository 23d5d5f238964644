"""
naascalc Dependency Engine

Provides:
- DependencyGraph: static component graph with subset ordering
- ValidationReport: errors/warnings from relationship checks
- Visualization helpers: Mermaid, networkx view, statistics
"""

from .graph import (
    DependencyGraph,
    DependencyNode,
    ValidationReport,
    COMPONENT_DEFINITIONS,
    FIELD_ALIASES,
)
from .visualization import (
    get_display_name,
    generate_visualization_data,
    generate_mermaid_diagram,
    to_networkx,
    find_circular_dependencies,
    get_statistics,
    export_graph,
)

__all__ = [
    # Graph
    "DependencyGraph",
    "DependencyNode",
    "ValidationReport",
    "COMPONENT_DEFINITIONS",
    "FIELD_ALIASES",
    # Visualization
    "get_display_name",
    "generate_visualization_data",
    "generate_mermaid_diagram",
    "to_networkx",
    "find_circular_dependencies",
    "get_statistics",
    "export_graph",
]
