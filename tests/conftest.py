"""
naascalc Test Configuration and Fixtures

Timer-driven behavior is exercised through VirtualTimerScheduler: tests
move time with `await clock.advance(ms)` or `await clock.run_until_idle()`
instead of sleeping.
"""

import asyncio
from typing import Any, Dict, List

import pytest

from naascalc.bootstrap.config import OrchestratorConfig
from naascalc.calculators.registry import CalculatorRegistry
from naascalc.core.enums import ComponentType
from naascalc.dependencies.graph import DependencyGraph
from naascalc.orchestration.clock import VirtualTimerScheduler
from naascalc.orchestration.orchestrator import CalculationOrchestrator
from naascalc.store.component_store import InMemoryComponentStore


class RecordingCalculators:
    """
    Handler table that records every call.

    Each component's monthly total is read from params["monthly"]
    (default 1.0). Components listed in `failures` raise instead, and
    components with a gate wait for it before returning.
    """

    def __init__(self):
        self.calls: List[str] = []
        self.contexts: Dict[str, Dict[str, Any]] = {}
        self.failures: Dict[str, Exception] = {}
        self.gates: Dict[str, asyncio.Event] = {}
        self.active = 0
        self.max_active = 0

    def handler(self, component_type: str):
        async def calculate(params: Dict[str, Any], context: Dict[str, Any]) -> Dict[str, Any]:
            self.calls.append(component_type)
            self.contexts[component_type] = context
            self.active += 1
            self.max_active = max(self.max_active, self.active)
            try:
                gate = self.gates.get(component_type)
                if gate is not None:
                    await gate.wait()
                if component_type in self.failures:
                    raise self.failures[component_type]
                monthly = float(params.get("monthly", 1.0))
                return {
                    "totals": {
                        "monthly": monthly,
                        "annual": monthly * 12,
                        "threeYear": monthly * 36,
                        "oneTime": 0.0,
                    },
                    "breakdown": {"component": component_type},
                }
            finally:
                self.active -= 1

        return calculate

    def registry(self) -> CalculatorRegistry:
        return CalculatorRegistry({t: self.handler(t.value) for t in ComponentType})


@pytest.fixture
def graph():
    """Graph over the standard component catalog."""
    return DependencyGraph()


@pytest.fixture
def store():
    """Empty component store (everything disabled)."""
    return InMemoryComponentStore()


@pytest.fixture
def clock():
    """Virtual clock starting at t=0."""
    return VirtualTimerScheduler()


@pytest.fixture
def calculators():
    return RecordingCalculators()


@pytest.fixture
def orchestrator_config():
    return OrchestratorConfig()


@pytest.fixture
def orchestrator(calculators, store, graph, clock, orchestrator_config):
    """Orchestrator wired to the recording calculators and virtual clock."""
    return CalculationOrchestrator(
        calculators.registry(),
        store,
        dependency_graph=graph,
        config=orchestrator_config,
        scheduler=clock,
    )

