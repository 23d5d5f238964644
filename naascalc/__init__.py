"""
naascalc - Dependency-ordered cost recalculation for NaaS quotes.

Components of a quote (capital equipment, support, packages, contract
terms, ...) are recalculated in dependency order whenever one of them
changes. See naascalc.orchestration.CalculationOrchestrator.
"""

__version__ = "1.0.0"

from naascalc.core import ComponentType, CalculationSource, ComponentState
from naascalc.calculators import CalculationResult, CalculatorRegistry, CostTotals
from naascalc.dependencies import DependencyGraph
from naascalc.store import InMemoryComponentStore, bind_orchestrator
from naascalc.orchestration import (
    CalculationOrchestrator,
    CalculationsCompleteEvent,
    LoopTimerScheduler,
    VirtualTimerScheduler,
)

__all__ = [
    "__version__",
    "ComponentType",
    "CalculationSource",
    "ComponentState",
    "CalculationResult",
    "CalculatorRegistry",
    "CostTotals",
    "DependencyGraph",
    "InMemoryComponentStore",
    "bind_orchestrator",
    "CalculationOrchestrator",
    "CalculationsCompleteEvent",
    "LoopTimerScheduler",
    "VirtualTimerScheduler",
]
