"""
bootstrap/app.py - Application builder and lifecycle

Wires the engine for one quote: dependency graph, component store,
calculator table and orchestrator, configured from NaaSCalcConfig.
Nothing here is global; build as many apps as there are open quotes.
"""

from __future__ import annotations
from typing import Any, Callable, List, Mapping, Optional
from dataclasses import dataclass, field
from enum import Enum
import inspect
import logging
import time

from naascalc.calculators.registry import CalculatorRegistry
from naascalc.dependencies.graph import DependencyGraph
from naascalc.orchestration.clock import TimerScheduler
from naascalc.orchestration.events import CalculationEventDispatcher, EventHandler
from naascalc.orchestration.orchestrator import CalculationOrchestrator
from naascalc.store.component_store import InMemoryComponentStore, bind_orchestrator
from .config import NaaSCalcConfig, load_config

logger = logging.getLogger("bootstrap.app")


class AppState(Enum):
    """Application lifecycle states."""
    CREATED = "created"
    BUILT = "built"
    RUNNING = "running"
    STOPPED = "stopped"
    FAILED = "failed"


@dataclass
class AppContext:
    """Runtime application context."""
    config: NaaSCalcConfig = None
    state: AppState = AppState.CREATED
    start_time: float = 0
    _unbind: List[Callable[[], None]] = field(default_factory=list)

    def get_uptime(self) -> float:
        """Application uptime in seconds."""
        if self.start_time == 0:
            return 0
        return time.time() - self.start_time


def _as_registry(calculators: Any) -> CalculatorRegistry:
    """Complete handler table from a registry, a mapping, or a calculator object."""
    if isinstance(calculators, CalculatorRegistry):
        return calculators.ensure_complete()
    if isinstance(calculators, Mapping):
        return CalculatorRegistry(calculators).ensure_complete()
    return CalculatorRegistry.from_calculator(calculators)


class NaaSCalcApp:
    """
    One quote's calculation engine.

    Usage:
        app = create_app(PricingCalculator()).build()
        app.on_results(render)
        await app.start()
        app.store.set_component_enabled("capital", True)
    """

    def __init__(
        self,
        calculators: Any,
        config: Optional[NaaSCalcConfig] = None,
        scheduler: Optional[TimerScheduler] = None,
        store: Optional[InMemoryComponentStore] = None,
    ):
        self._calculators = calculators
        self._scheduler = scheduler
        self._context = AppContext(config=config or NaaSCalcConfig())
        self._store = store
        self._graph: Optional[DependencyGraph] = None
        self._orchestrator: Optional[CalculationOrchestrator] = None
        self._startup_hooks: List[Callable] = []
        self._shutdown_hooks: List[Callable] = []

    @property
    def config(self) -> NaaSCalcConfig:
        return self._context.config

    @property
    def context(self) -> AppContext:
        return self._context

    @property
    def state(self) -> AppState:
        return self._context.state

    @property
    def graph(self) -> DependencyGraph:
        self._require_built()
        return self._graph

    @property
    def store(self) -> InMemoryComponentStore:
        self._require_built()
        return self._store

    @property
    def orchestrator(self) -> CalculationOrchestrator:
        self._require_built()
        return self._orchestrator

    def _require_built(self) -> None:
        if self._orchestrator is None:
            raise RuntimeError("Application not built; call build() first")

    def build(self) -> "NaaSCalcApp":
        """Create and wire the engine. Idempotent."""
        if self._orchestrator is not None:
            return self

        try:
            registry = _as_registry(self._calculators)
            self._graph = DependencyGraph()
            if self._store is None:
                self._store = InMemoryComponentStore()

            self._orchestrator = CalculationOrchestrator(
                registry,
                self._store,
                dependency_graph=self._graph,
                config=self.config.orchestrator,
                scheduler=self._scheduler,
                dispatcher=CalculationEventDispatcher(),
            )
        except Exception as e:
            self._context.state = AppState.FAILED
            logger.error(f"Application build failed: {e}")
            raise

        self._context.state = AppState.BUILT
        logger.info("Application built successfully")
        return self

    def on_results(self, handler: EventHandler) -> str:
        """Subscribe to batch completion events."""
        return self.orchestrator.on_complete(handler)

    def on_startup(self, hook: Callable) -> "NaaSCalcApp":
        self._startup_hooks.append(hook)
        return self

    def on_shutdown(self, hook: Callable) -> "NaaSCalcApp":
        self._shutdown_hooks.append(hook)
        return self

    async def start(self) -> None:
        """Start reacting to store edits."""
        self.build()
        if self._context.state == AppState.RUNNING:
            return

        for hook in self._startup_hooks:
            try:
                result = hook()
                if inspect.isawaitable(result):
                    await result
            except Exception as e:
                logger.error(f"Startup hook failed: {e}")
                self._context.state = AppState.FAILED
                raise

        self._context._unbind.append(bind_orchestrator(self._store, self._orchestrator))
        self._context.start_time = time.time()
        self._context.state = AppState.RUNNING
        logger.info("Application started")

    async def stop(self) -> None:
        """Detach from the store and drop any queued work."""
        for unbind in self._context._unbind:
            unbind()
        self._context._unbind.clear()

        if self._orchestrator is not None:
            dropped = self._orchestrator.clear_queue()
            if dropped:
                logger.info(f"Dropped {dropped} queued calculations on shutdown")

        for hook in self._shutdown_hooks:
            try:
                result = hook()
                if inspect.isawaitable(result):
                    await result
            except Exception as e:
                logger.error(f"Shutdown hook failed: {e}")

        self._context.state = AppState.STOPPED
        logger.info("Application stopped")


def create_app(
    calculators: Any,
    config_file: Optional[str] = None,
    scheduler: Optional[TimerScheduler] = None,
) -> NaaSCalcApp:
    """Create an application with configuration loaded from file or environment."""
    return NaaSCalcApp(calculators, config=load_config(config_file), scheduler=scheduler)
