"""
naascalc.core - Shared enums, constants and component state.
"""

from .enums import (
    ComponentType,
    CalculationSource,
    DependencyCategory,
    OrchestratorState,
    NAAS_PACKAGES,
    DYNAMICS_TERMS,
)
from .state import ComponentState, coerce_state, is_enabled, get_params
from .constants import (
    WILDCARD,
    DEFAULT_DEVICE_COUNT,
    UNKNOWN_LEVEL,
    DEPENDENCY_PRIORITY,
)

__all__ = [
    "ComponentType",
    "ComponentState",
    "coerce_state",
    "is_enabled",
    "get_params",
    "CalculationSource",
    "DependencyCategory",
    "OrchestratorState",
    "NAAS_PACKAGES",
    "DYNAMICS_TERMS",
    "WILDCARD",
    "DEFAULT_DEVICE_COUNT",
    "UNKNOWN_LEVEL",
    "DEPENDENCY_PRIORITY",
]
