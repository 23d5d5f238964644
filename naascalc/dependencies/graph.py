"""
naascalc Dependency Graph

Declares, for every component type, which components it is computed from
and its level (distance from dependency-free roots). The declaration is
static; ordering and cycle checks are evaluated against whatever subset
of components is enabled at the moment.

A dependency list of ["*"] means "every other enabled component". Contract
pricing uses it because it needs the grand total of the quote.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Mapping, Optional, Set, Tuple, Union
import logging

from naascalc.core.constants import WILDCARD
from naascalc.core.enums import ComponentType, DependencyCategory
from naascalc.core.state import get_params, is_enabled
from naascalc.errors.taxonomy import CycleDetectedError, UnknownComponentError

logger = logging.getLogger(__name__)

ComponentKey = Union[str, ComponentType]


# =============================================================================
# GRAPH DEFINITION
# =============================================================================

COMPONENT_DEFINITIONS: Dict[str, Dict[str, Any]] = {
    # Level 0: independent components
    "help": {
        "dependencies": [],
        "level": 0,
        "category": DependencyCategory.DOCUMENTATION,
        "description": "User guide and calculator instructions",
    },
    "assessment": {
        "dependencies": [],
        "level": 0,
        "category": DependencyCategory.SERVICES,
        "description": "Network assessment and discovery",
    },
    "admin": {
        "dependencies": [],
        "level": 0,
        "category": DependencyCategory.SERVICES,
        "description": "Administrative and review services",
    },
    "otherCosts": {
        "dependencies": [],
        "level": 0,
        "category": DependencyCategory.FLEXIBLE,
        "description": "Additional costs and custom services",
    },

    # Level 1: base infrastructure and core services
    "prtg": {
        "dependencies": [],
        "level": 1,
        "category": DependencyCategory.MONITORING,
        "description": "PRTG network monitoring setup and licensing",
        "provides": ["sensorCount", "monitoringLocations"],
    },
    "capital": {
        "dependencies": [],
        "level": 1,
        "category": DependencyCategory.INFRASTRUCTURE,
        "description": "Capital equipment and hardware costs",
        "provides": ["deviceCount", "equipmentList", "totalCapitalCost"],
    },
    "onboarding": {
        "dependencies": [],
        "level": 1,
        "category": DependencyCategory.SERVICES,
        "description": "Initial setup and implementation services",
        "provides": ["implementationCost", "setupComplexity"],
    },
    "pbsFoundation": {
        "dependencies": [],
        "level": 1,
        "category": DependencyCategory.PLATFORM,
        "description": "PBS foundation platform services",
        "provides": ["platformCost", "userLicenses"],
    },

    # Level 2: services on top of infrastructure
    "support": {
        "dependencies": ["capital"],
        "level": 2,
        "category": DependencyCategory.SERVICES,
        "description": "24/7 support and maintenance services",
        "requires": {"capital": ["deviceCount"]},
        "provides": ["supportLevel", "supportCoverage"],
    },

    # Level 3: enhanced services and packages
    "enhancedSupport": {
        "dependencies": ["support"],
        "level": 3,
        "category": DependencyCategory.SERVICES,
        "description": "Premium support and monitoring services",
        "requires": {"support": ["supportLevel"]},
        "provides": ["enhancedSLA", "premiumFeatures"],
    },
    "naasStandard": {
        "dependencies": [WILDCARD],
        "level": 3,
        "category": DependencyCategory.PACKAGES,
        "description": "Standard NaaS service package",
        "requires": {WILDCARD: ["monthlyTotal", "componentCount"]},
        "provides": ["standardPackageFeatures"],
    },
    "naasEnhanced": {
        "dependencies": ["naasStandard", "enhancedSupport"],
        "level": 3,
        "category": DependencyCategory.PACKAGES,
        "description": "Enhanced NaaS service package",
        "requires": {
            "naasStandard": ["standardPackageFeatures"],
            "enhancedSupport": ["enhancedSLA"],
        },
        "provides": ["enhancedPackageFeatures"],
    },

    # Level 4: contract pricing over everything that is enabled
    "dynamics1Year": {
        "dependencies": [WILDCARD],
        "level": 4,
        "category": DependencyCategory.CONTRACTS,
        "description": "1-year dynamic pricing options",
        "requires": {WILDCARD: ["monthlyTotal", "componentCount"]},
    },
    "dynamics3Year": {
        "dependencies": [WILDCARD],
        "level": 4,
        "category": DependencyCategory.CONTRACTS,
        "description": "3-year dynamic pricing options",
        "requires": {WILDCARD: ["monthlyTotal", "componentCount", "annualTotal"]},
    },
    "dynamics5Year": {
        "dependencies": [WILDCARD],
        "level": 4,
        "category": DependencyCategory.CONTRACTS,
        "description": "5-year dynamic pricing options",
        "requires": {WILDCARD: ["monthlyTotal", "componentCount", "annualTotal"]},
    },
}


# Parameter names that satisfy a field a dependent expects from a dependency
FIELD_ALIASES: Dict[str, List[str]] = {
    "deviceCount": ["deviceCount", "devices", "equipment"],
    "sensorCount": ["sensors", "sensorCount"],
    "supportLevel": ["level", "tier", "supportLevel"],
}


def _key(component_type: ComponentKey) -> str:
    if isinstance(component_type, ComponentType):
        return component_type.value
    return str(component_type)


# =============================================================================
# NODES AND REPORTS
# =============================================================================

@dataclass(frozen=True)
class DependencyNode:
    """A component type and what it is computed from."""
    type: str
    dependencies: Tuple[str, ...]
    level: int
    category: DependencyCategory
    description: str = ""
    requires: Mapping[str, Tuple[str, ...]] = field(default_factory=dict)
    provides: Tuple[str, ...] = ()

    @property
    def is_wildcard(self) -> bool:
        return WILDCARD in self.dependencies

    def to_dict(self) -> Dict[str, Any]:
        return {
            "type": self.type,
            "dependencies": list(self.dependencies),
            "level": self.level,
            "category": self.category.value,
            "description": self.description,
            "requires": {k: list(v) for k, v in self.requires.items()},
            "provides": list(self.provides),
        }


@dataclass
class ValidationReport:
    """Outcome of checking enabled components against the graph."""
    errors: List[str] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)

    @property
    def is_valid(self) -> bool:
        return not self.errors

    def to_dict(self) -> Dict[str, Any]:
        return {
            "errors": list(self.errors),
            "warnings": list(self.warnings),
            "is_valid": self.is_valid,
        }


# =============================================================================
# DEPENDENCY GRAPH
# =============================================================================

class DependencyGraph:
    """
    Static component dependency graph with runtime-subset ordering.

    The graph never changes after construction, so acyclicity results are
    cached per subset and reverse edges are indexed once.
    """

    def __init__(self, definitions: Optional[Mapping[str, Mapping[str, Any]]] = None):
        source = COMPONENT_DEFINITIONS if definitions is None else definitions
        self._nodes: Dict[str, DependencyNode] = {}
        for name, entry in source.items():
            self._nodes[name] = DependencyNode(
                type=name,
                dependencies=tuple(entry.get("dependencies", ())),
                level=int(entry.get("level", 0)),
                category=DependencyCategory(entry.get("category", DependencyCategory.SERVICES)),
                description=entry.get("description", ""),
                requires={k: tuple(v) for k, v in entry.get("requires", {}).items()},
                provides=tuple(entry.get("provides", ())),
            )

        self._direct_dependents: Dict[str, List[str]] = {name: [] for name in self._nodes}
        self._wildcard_nodes: List[str] = []
        for name, node in self._nodes.items():
            for dep in node.dependencies:
                if dep == WILDCARD:
                    self._wildcard_nodes.append(name)
                elif dep in self._direct_dependents:
                    self._direct_dependents[dep].append(name)

        self._validation_cache: Dict[Tuple[str, ...], bool] = {}

        logger.debug(
            f"Dependency graph built: {len(self._nodes)} components, "
            f"{len(self._wildcard_nodes)} wildcard"
        )

    # -------------------------------------------------------------------------
    # Node lookups
    # -------------------------------------------------------------------------

    def _node(self, component_type: ComponentKey) -> DependencyNode:
        node = self._nodes.get(_key(component_type))
        if node is None:
            raise UnknownComponentError(_key(component_type))
        return node

    def has_component(self, component_type: ComponentKey) -> bool:
        return _key(component_type) in self._nodes

    def get_node(self, component_type: ComponentKey) -> Optional[DependencyNode]:
        return self._nodes.get(_key(component_type))

    def get_all_components(self) -> List[str]:
        """All component types in level-then-name order."""
        return self.level_based_sort(self._nodes.keys())

    def get_dependencies(self, component_type: ComponentKey) -> List[str]:
        """Declared dependencies, possibly ["*"]."""
        return list(self._node(component_type).dependencies)

    def get_level(self, component_type: ComponentKey) -> int:
        return self._node(component_type).level

    def get_dependents(self, component_type: ComponentKey) -> List[str]:
        """
        Components that must be recomputed after this one changes.

        Direct dependents plus every wildcard component other than the
        component itself. Unknown keys have only the wildcard dependents.
        """
        key = _key(component_type)
        dependents = list(self._direct_dependents.get(key, []))
        for name in self._wildcard_nodes:
            if name != key and name not in dependents:
                dependents.append(name)
        return dependents

    def depends_on(self, dependent: ComponentKey, dependency: ComponentKey) -> bool:
        """True if `dependent` declares `dependency`, directly or via the wildcard."""
        node = self._nodes.get(_key(dependent))
        if node is None:
            return False
        dep_key = _key(dependency)
        if dep_key in node.dependencies:
            return True
        return node.is_wildcard and dep_key != node.type

    # -------------------------------------------------------------------------
    # Ordering
    # -------------------------------------------------------------------------

    def _expand(self, component_type: str, members: List[str], member_set: Set[str]) -> List[str]:
        """Dependencies of a component restricted to the subset under test."""
        expanded: List[str] = []
        for dep in self.get_dependencies(component_type):
            if dep == WILDCARD:
                expanded.extend(t for t in members if t != component_type)
            elif dep in member_set:
                expanded.append(dep)
        return expanded

    def _sort_key(self, component_type: str) -> Tuple[int, str]:
        return (self.get_level(component_type), component_type)

    def topological_sort(self, component_types: Iterable[ComponentKey]) -> List[str]:
        """
        Order a subset so every component follows its dependencies.

        DFS with a recursion stack over the subset pre-sorted by level (then
        name), so independent components come out in a stable order.

        Raises:
            UnknownComponentError: a key is not in the graph
            CycleDetectedError: the subset contains a cycle
        """
        members: List[str] = []
        for component_type in component_types:
            key = _key(component_type)
            self._node(key)
            if key not in members:
                members.append(key)
        members.sort(key=self._sort_key)
        member_set = set(members)

        visited: Set[str] = set()
        stack: List[str] = []
        on_stack: Set[str] = set()
        result: List[str] = []

        def visit(component_type: str) -> None:
            if component_type in on_stack:
                cycle = stack[stack.index(component_type):] + [component_type]
                raise CycleDetectedError(component_type, cycle)
            if component_type in visited:
                return

            visited.add(component_type)
            stack.append(component_type)
            on_stack.add(component_type)

            for dep in self._expand(component_type, members, member_set):
                visit(dep)

            stack.pop()
            on_stack.discard(component_type)
            result.append(component_type)

        for component_type in members:
            visit(component_type)

        return result

    def is_acyclic(self, component_types: Iterable[ComponentKey]) -> bool:
        """Cycle check over a subset, cached by the sorted subset."""
        cache_key = tuple(sorted({_key(t) for t in component_types}))
        cached = self._validation_cache.get(cache_key)
        if cached is not None:
            return cached

        try:
            self.topological_sort(cache_key)
            acyclic = True
        except CycleDetectedError:
            acyclic = False

        self._validation_cache[cache_key] = acyclic
        return acyclic

    def level_based_sort(self, component_types: Iterable[ComponentKey]) -> List[str]:
        """Deterministic fallback: level, then name."""
        return sorted({_key(t) for t in component_types}, key=self._sort_key)

    def get_calculation_order(self, enabled_components: Mapping[str, Any]) -> List[str]:
        """
        Execution order for the enabled entries of a component map.

        Never raises: a cycle falls back to level order, and keys outside
        the graph are left out.
        """
        enabled: List[str] = []
        for component_type, state in enabled_components.items():
            if not is_enabled(state):
                continue
            key = _key(component_type)
            if key not in self._nodes:
                logger.warning(f"Ignoring unknown component in calculation order: {key}")
                continue
            enabled.append(key)

        if not enabled:
            return []

        try:
            return self.topological_sort(enabled)
        except CycleDetectedError as e:
            logger.warning(f"Topological sort failed ({e}); using level-based order")
            return self.level_based_sort(enabled)

    @property
    def cache_size(self) -> int:
        return len(self._validation_cache)

    def clear_cache(self) -> None:
        self._validation_cache.clear()

    # -------------------------------------------------------------------------
    # Relationship validation
    # -------------------------------------------------------------------------

    def validate_relationships(self, components: Mapping[str, Any]) -> ValidationReport:
        """
        Check enabled components against their declared dependencies.

        Missing hard dependencies are errors. A wildcard component with
        nothing else enabled, or a dependency whose params look like they
        lack a field the dependent reads, only produce warnings.
        """
        report = ValidationReport()
        states = {_key(k): v for k, v in components.items()}

        for component_type, state in states.items():
            if not is_enabled(state):
                continue

            node = self._nodes.get(component_type)
            if node is None:
                report.errors.append(f"Unknown component type: {component_type}")
                continue

            for dependency in node.dependencies:
                if dependency == WILDCARD:
                    others_enabled = any(
                        other != component_type and is_enabled(other_state)
                        for other, other_state in states.items()
                    )
                    if not others_enabled:
                        report.warnings.append(
                            f"{component_type} requires other components to be enabled"
                        )
                elif not is_enabled(states.get(dependency)):
                    report.errors.append(
                        f"{component_type} requires {dependency} to be enabled"
                    )

            for required_from, fields in node.requires.items():
                if required_from == WILDCARD:
                    continue
                required_state = states.get(required_from)
                if not is_enabled(required_state):
                    continue
                for field_name in fields:
                    if not self.has_required_field(required_state, field_name):
                        report.warnings.append(
                            f"{component_type} expects {field_name} from {required_from} "
                            f"but it may not be available"
                        )

        return report

    @staticmethod
    def has_required_field(component_state: Any, field_name: str) -> bool:
        """Heuristic: does the component's params carry the field or an alias of it?"""
        params = get_params(component_state)
        if params.get(field_name) is not None:
            return True
        return any(
            params.get(alias) is not None
            for alias in FIELD_ALIASES.get(field_name, [field_name])
        )

    def to_dict(self) -> Dict[str, Any]:
        """Serialize the static definition."""
        return {name: node.to_dict() for name, node in self._nodes.items()}
