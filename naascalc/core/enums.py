"""
core/enums.py - Closed enumerations shared across the engine.
"""

from __future__ import annotations
from enum import Enum
from typing import Optional, Union


class ComponentType(str, Enum):
    """Catalog of cost components that can be enabled on a quote."""

    # Level 0: independent
    HELP = "help"
    ASSESSMENT = "assessment"
    ADMIN = "admin"
    OTHER_COSTS = "otherCosts"

    # Level 1: base infrastructure and core services
    PRTG = "prtg"
    CAPITAL = "capital"
    ONBOARDING = "onboarding"
    PBS_FOUNDATION = "pbsFoundation"

    # Level 2-3: services building on infrastructure
    SUPPORT = "support"
    ENHANCED_SUPPORT = "enhancedSupport"

    # Packages (mutually exclusive)
    NAAS_STANDARD = "naasStandard"
    NAAS_ENHANCED = "naasEnhanced"

    # Contract terms (mutually exclusive)
    DYNAMICS_1_YEAR = "dynamics1Year"
    DYNAMICS_3_YEAR = "dynamics3Year"
    DYNAMICS_5_YEAR = "dynamics5Year"

    def __str__(self) -> str:
        return self.value

    @classmethod
    def lookup(cls, value: Union[str, "ComponentType"]) -> Optional["ComponentType"]:
        """Return the member for a raw key, or None if it is not in the catalog."""
        if isinstance(value, cls):
            return value
        try:
            return cls(value)
        except ValueError:
            return None


class CalculationSource(str, Enum):
    """Who asked for a calculation."""
    USER = "user"
    DEPENDENCY = "dependency"
    AUTO = "auto"


class DependencyCategory(str, Enum):
    """Grouping used for statistics and diagrams."""
    DOCUMENTATION = "documentation"
    SERVICES = "services"
    FLEXIBLE = "flexible"
    MONITORING = "monitoring"
    INFRASTRUCTURE = "infrastructure"
    PLATFORM = "platform"
    PACKAGES = "packages"
    CONTRACTS = "contracts"


class OrchestratorState(Enum):
    """Observable scheduler state."""
    IDLE = "idle"
    DEBOUNCING = "debouncing"
    PROCESSING = "processing"


NAAS_PACKAGES = (ComponentType.NAAS_STANDARD, ComponentType.NAAS_ENHANCED)

DYNAMICS_TERMS = (
    ComponentType.DYNAMICS_1_YEAR,
    ComponentType.DYNAMICS_3_YEAR,
    ComponentType.DYNAMICS_5_YEAR,
)
