"""
naascalc Calculation Orchestrator

Turns a stream of "component X changed" requests into ordered,
non-overlapping recalculation batches:

- schedule_calculation() queues a component once and (re)starts a shared
  debounce timer, so a burst of edits produces a single drain.
- process_calculation_queue() drains the queue as one batch, in
  dependency order, one calculation at a time. Only one drain runs at a
  time; a second call while one is running schedules a retry instead.
- After each calculation its enabled dependents are queued again, which
  feeds the next batch.

State machine: IDLE -> DEBOUNCING -> PROCESSING -> IDLE, plus
PROCESSING -> PROCESSING (retry) and PROCESSING -> DEBOUNCING (work arrived
during the batch, drained again after queue_check_ms).
"""

from __future__ import annotations
from dataclasses import dataclass
from types import MappingProxyType
from typing import Any, Dict, Iterable, List, Mapping, Optional, Union
import inspect
import logging
import time

from naascalc.bootstrap.config import OrchestratorConfig
from naascalc.calculators.registry import CalculatorFunc, CalculatorRegistry
from naascalc.calculators.results import CalculationResult
from naascalc.core.constants import DEPENDENCY_PRIORITY, UNKNOWN_LEVEL
from naascalc.core.enums import CalculationSource, ComponentType, OrchestratorState
from naascalc.core.state import coerce_state, is_enabled
from naascalc.dependencies.graph import DependencyGraph
from naascalc.errors.taxonomy import (
    CalculationErrorRecord,
    DependencyValidationError,
    ErrorPhase,
    NaaSCalcError,
    UnknownComponentError,
)
from naascalc.store.component_store import ComponentDataStore
from .clock import LoopTimerScheduler, TimerHandle, TimerScheduler
from .context import build_calculation_context, extract_device_count
from .events import CalculationEventDispatcher, CalculationsCompleteEvent, EventHandler
from .history import BatchEntry, BatchHistory, CalculationBatch

logger = logging.getLogger(__name__)

ComponentKey = Union[str, ComponentType]


def _key(component_type: ComponentKey) -> str:
    if isinstance(component_type, ComponentType):
        return component_type.value
    return str(component_type)


# =============================================================================
# QUEUE ENTRIES AND METRICS
# =============================================================================

@dataclass
class ScheduledCalculation:
    """A queued request to recalculate one component."""
    component_type: str
    priority: int = 0
    source: CalculationSource = CalculationSource.USER
    timestamp: float = 0.0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "component_type": self.component_type,
            "priority": self.priority,
            "source": self.source.value,
            "timestamp": self.timestamp,
        }


@dataclass
class SortMetrics:
    """Timing of the ordering step, across batches."""
    total_sorts: int = 0
    total_sort_time_ms: float = 0.0
    average_sort_time_ms: float = 0.0
    last_sort_time_ms: float = 0.0

    def record(self, elapsed_ms: float) -> None:
        self.last_sort_time_ms = elapsed_ms
        self.total_sorts += 1
        self.total_sort_time_ms += elapsed_ms
        self.average_sort_time_ms = self.total_sort_time_ms / self.total_sorts

    def to_dict(self) -> Dict[str, Any]:
        return {
            "total_sorts": self.total_sorts,
            "total_sort_time_ms": self.total_sort_time_ms,
            "average_sort_time_ms": self.average_sort_time_ms,
            "last_sort_time_ms": self.last_sort_time_ms,
        }


# =============================================================================
# ORCHESTRATOR
# =============================================================================

class CalculationOrchestrator:
    """
    Debounced, single-flight, dependency-ordered recalculation.

    Owns the queue, pending set, timers, processing flag and history; no
    other object writes to them.
    """

    def __init__(
        self,
        calculators: Union[CalculatorRegistry, Mapping[ComponentKey, CalculatorFunc]],
        data_store: ComponentDataStore,
        dependency_graph: Optional[DependencyGraph] = None,
        config: Optional[OrchestratorConfig] = None,
        scheduler: Optional[TimerScheduler] = None,
        dispatcher: Optional[CalculationEventDispatcher] = None,
    ):
        if isinstance(calculators, CalculatorRegistry):
            self._calculators = calculators
        else:
            self._calculators = CalculatorRegistry(calculators)
        self._data_store = data_store
        self._graph = dependency_graph or DependencyGraph()
        self._config = config or OrchestratorConfig()
        self._scheduler = scheduler or LoopTimerScheduler()
        self._dispatcher = dispatcher or CalculationEventDispatcher()

        self._queue: List[ScheduledCalculation] = []
        self._pending: set = set()
        self._is_processing = False

        self._debounce_handle: Optional[TimerHandle] = None
        self._retry_handle: Optional[TimerHandle] = None
        self._refill_handle: Optional[TimerHandle] = None

        self._history = BatchHistory(self._config.max_history_size)
        self._errors: List[CalculationErrorRecord] = []
        self._metrics = SortMetrics()

    # -------------------------------------------------------------------------
    # Properties
    # -------------------------------------------------------------------------

    @property
    def dependency_graph(self) -> DependencyGraph:
        return self._graph

    @property
    def dispatcher(self) -> CalculationEventDispatcher:
        return self._dispatcher

    @property
    def config(self) -> OrchestratorConfig:
        return self._config

    @property
    def is_processing(self) -> bool:
        return self._is_processing

    @property
    def queue_length(self) -> int:
        return len(self._queue)

    @property
    def pending(self) -> List[str]:
        return sorted(self._pending)

    @property
    def history(self) -> List[CalculationBatch]:
        return list(self._history)

    @property
    def state(self) -> OrchestratorState:
        if self._is_processing:
            return OrchestratorState.PROCESSING
        if self._timer_armed():
            return OrchestratorState.DEBOUNCING
        return OrchestratorState.IDLE

    def _timer_armed(self) -> bool:
        timers = (self._debounce_handle, self._retry_handle, self._refill_handle)
        return any(h is not None and not h.cancelled() for h in timers)

    def get_queue(self) -> List[ScheduledCalculation]:
        """Copy of the queue in enqueue order."""
        return list(self._queue)

    def on_complete(self, handler: EventHandler) -> str:
        """Subscribe to batch completion."""
        return self._dispatcher.subscribe(handler)

    # -------------------------------------------------------------------------
    # Scheduling
    # -------------------------------------------------------------------------

    def schedule_calculation(
        self,
        component_type: ComponentKey,
        priority: int = 0,
        source: Union[str, CalculationSource] = CalculationSource.USER,
    ) -> bool:
        """
        Queue a component for recalculation.

        Ignored if the component is already queued. Every accepted request
        restarts the debounce timer. A duplicate request for a queue that a
        rejected batch left behind, with no drain running or armed, starts
        the debounce timer again so the queue is retried once the state has
        been corrected. Returns True if the request was queued.
        """
        key = _key(component_type)
        if key in self._pending:
            logger.debug(f"Calculation for {key} already pending, skipping duplicate")
            if not self._is_processing and not self._timer_armed():
                logger.debug(f"Re-arming drain for {len(self._queue)} stranded calculations")
                self._restart_debounce()
            return False

        source = CalculationSource(source)
        logger.debug(f"Scheduling calculation for {key} (priority: {priority}, source: {source.value})")

        self._pending.add(key)
        self._queue.append(ScheduledCalculation(
            component_type=key,
            priority=priority,
            source=source,
            timestamp=self._scheduler.now_ms(),
        ))

        self._restart_debounce()
        return True

    def _restart_debounce(self) -> None:
        if self._debounce_handle is not None:
            self._debounce_handle.cancel()
        self._debounce_handle = self._scheduler.call_later(
            self._config.debounce_ms, self._on_debounce_elapsed
        )

    def _on_debounce_elapsed(self) -> None:
        self._debounce_handle = None
        self._scheduler.spawn(self.process_calculation_queue())

    def _schedule_retry(self) -> None:
        if self._retry_handle is not None and not self._retry_handle.cancelled():
            logger.debug("Retry already scheduled")
            return
        self._retry_handle = self._scheduler.call_later(
            self._config.retry_delay_ms, self._on_retry_elapsed
        )

    def _on_retry_elapsed(self) -> None:
        self._retry_handle = None
        self._scheduler.spawn(self.process_calculation_queue())

    def _schedule_refill(self) -> None:
        if self._refill_handle is not None and not self._refill_handle.cancelled():
            return
        self._refill_handle = self._scheduler.call_later(
            self._config.queue_check_ms, self._on_refill_elapsed
        )

    def _on_refill_elapsed(self) -> None:
        self._refill_handle = None
        self._scheduler.spawn(self.process_calculation_queue())

    def schedule_dependent_calculations(self, changed_component: ComponentKey) -> List[str]:
        """
        Queue every enabled dependent of a component that just finished.

        A dependent that the component itself depends on (two wildcard
        components, or a wildcard component and something that depends on
        it) is not queued: the pair forms a cycle and re-queuing would
        recalculate them against each other forever.

        Returns the components that were queued.
        """
        key = _key(changed_component)
        scheduled: List[str] = []

        for dependent in self._graph.get_dependents(key):
            if self._graph.depends_on(key, dependent):
                logger.debug(f"Not cascading {key} -> {dependent}: mutual dependency")
                continue
            if not is_enabled(self._data_store.get_component(dependent)):
                continue
            if self.schedule_calculation(dependent, DEPENDENCY_PRIORITY, CalculationSource.DEPENDENCY):
                scheduled.append(dependent)

        return scheduled

    # -------------------------------------------------------------------------
    # Draining
    # -------------------------------------------------------------------------

    async def process_calculation_queue(self) -> Optional[Dict[str, CalculationResult]]:
        """
        Drain the queue as one batch.

        Returns the batch results, or None if nothing ran (already
        processing, empty queue, or the batch was rejected by validation).
        Never raises.
        """
        if self._is_processing:
            logger.debug("Calculation queue already processing, scheduling retry")
            self._schedule_retry()
            return None

        if not self._queue:
            return None

        self._is_processing = True
        drained = False
        logger.info(f"Processing calculation queue with {len(self._queue)} items")

        try:
            enabled = self._data_store.get_enabled_components()

            validation = self._graph.validate_relationships(enabled)
            if validation.errors:
                raise DependencyValidationError(validation.errors)
            if validation.warnings:
                logger.warning(f"Dependency warnings: {validation.warnings}")

            calculations = self._sort_queue(enabled)

            # New requests from here on belong to the next batch
            self._queue = []
            self._pending.clear()
            drained = True

            started = time.perf_counter()
            results = await self._execute_batch(calculations)
            duration_ms = (time.perf_counter() - started) * 1000.0

            batch = self._record_calculation_batch(calculations, results, duration_ms)
            self._notify_calculation_complete(results, batch.batch_id)
            return results

        except DependencyValidationError as e:
            logger.error(f"Dependency validation errors: {e.errors}")
            self._record_error(CalculationErrorRecord.from_exception(ErrorPhase.VALIDATION, e))
            return None

        except Exception as e:
            phase = ErrorPhase.EXECUTION if drained else ErrorPhase.ORDERING
            logger.error(f"Error processing calculation queue ({phase.value}): {e}")
            self._record_error(CalculationErrorRecord.from_exception(phase, e))
            return None

        finally:
            self._is_processing = False
            if drained and self._queue:
                logger.debug(f"{len(self._queue)} calculations queued during batch, draining again")
                self._schedule_refill()

    def _sort_queue(self, enabled_components: Mapping[str, Any]) -> List[ScheduledCalculation]:
        """
        Queue in execution order.

        Components in the dependency order come first, by position; the rest
        (disabled or unknown) follow by priority (high first), then age.
        """
        started = time.perf_counter()
        order = self._graph.get_calculation_order(enabled_components)
        positions = {component_type: index for index, component_type in enumerate(order)}

        def sort_key(calculation: ScheduledCalculation):
            position = positions.get(calculation.component_type)
            if position is not None:
                return (0, position, 0, 0.0)
            return (1, 0, -calculation.priority, calculation.timestamp)

        calculations = sorted(self._queue, key=sort_key)

        self._metrics.record((time.perf_counter() - started) * 1000.0)
        logger.debug(
            f"Dependency sort completed in {self._metrics.last_sort_time_ms:.2f}ms "
            f"(avg: {self._metrics.average_sort_time_ms:.2f}ms)"
        )
        return calculations

    async def _execute_batch(self, calculations: List[ScheduledCalculation]) -> Dict[str, CalculationResult]:
        results: Dict[str, CalculationResult] = {}

        for calculation in calculations:
            key = calculation.component_type
            try:
                logger.debug(f"Executing calculation for {key}")
                result = await self.execute_calculation(key)
            except Exception as e:
                logger.error(f"Error calculating {key}: {e}")
                self._record_error(CalculationErrorRecord.from_exception(ErrorPhase.EXECUTION, e, key))
                results[key] = CalculationResult.failed(str(e))
                continue

            results[key] = result

            try:
                self.schedule_dependent_calculations(key)
            except Exception as e:
                logger.error(f"Error scheduling dependents of {key}: {e}")
                self._record_error(CalculationErrorRecord.from_exception(ErrorPhase.CASCADE, e, key))

        return results

    async def execute_calculation(self, component_type: ComponentKey) -> CalculationResult:
        """
        Run the calculator for one component.

        Disabled components yield the zero result without calling anything.

        Raises:
            UnknownComponentError: the key is not a component type
            CalculatorRegistryError: no calculator is registered for it
        """
        key = _key(component_type)
        if not self._graph.has_component(key):
            raise UnknownComponentError(key)

        state = coerce_state(self._data_store.get_component(key))
        if not state.enabled:
            return CalculationResult.zero()

        calculator = self._calculators.get_calculator(key)
        context = self.build_calculation_context(key)

        output = calculator(state.params, context)
        if inspect.isawaitable(output):
            output = await output
        return CalculationResult.coerce(output)

    def build_calculation_context(self, component_type: ComponentKey) -> Dict[str, Any]:
        return build_calculation_context(
            self._graph,
            _key(component_type),
            self._data_store.get_enabled_components(),
            self._scheduler.now_ms(),
        )

    extract_device_count = staticmethod(extract_device_count)

    # -------------------------------------------------------------------------
    # History and notification
    # -------------------------------------------------------------------------

    def get_dependency_level(self, component_type: ComponentKey) -> int:
        """Graph level, or UNKNOWN_LEVEL for keys outside the catalog."""
        try:
            return self._graph.get_level(component_type)
        except UnknownComponentError:
            logger.warning(f"Unknown component type: {_key(component_type)}, using level {UNKNOWN_LEVEL}")
            return UNKNOWN_LEVEL

    def _record_calculation_batch(
        self,
        calculations: List[ScheduledCalculation],
        results: Dict[str, CalculationResult],
        duration_ms: float,
    ) -> CalculationBatch:
        batch = CalculationBatch.create(
            timestamp=self._scheduler.now_ms(),
            calculations=[
                BatchEntry(
                    component=c.component_type,
                    level=self.get_dependency_level(c.component_type),
                    source=c.source.value,
                )
                for c in calculations
            ],
            results={k: r.totals.to_dict() for k, r in results.items()},
            duration_ms=duration_ms,
            errors={k: r.error for k, r in results.items() if r.error is not None},
        )
        self._history.append(batch)

        logger.info(
            f"Calculation batch {batch.batch_id} completed in {duration_ms:.1f}ms: "
            f"{len(calculations)} calculations, {len(batch.errors)} failed"
        )
        return batch

    def _notify_calculation_complete(self, results: Dict[str, CalculationResult], batch_id: str) -> None:
        event = CalculationsCompleteEvent(
            results=MappingProxyType(dict(results)),
            timestamp=self._scheduler.now_ms(),
            batch_id=batch_id,
        )
        self._dispatcher.emit(event)

    def _record_error(self, record: CalculationErrorRecord) -> None:
        self._errors.append(record)
        if len(self._errors) > self._config.max_error_log:
            self._errors = self._errors[-self._config.max_error_log:]

    # -------------------------------------------------------------------------
    # Diagnostics and recovery
    # -------------------------------------------------------------------------

    def get_calculation_stats(self) -> Dict[str, Any]:
        return {
            "state": self.state.value,
            "history_count": len(self._history),
            "pending_calculations": self.pending,
            "queue_length": len(self._queue),
            "is_processing": self._is_processing,
            "recent_batches": [b.to_dict() for b in self._history.recent(self._config.recent_batches)],
            "performance_metrics": self._metrics.to_dict(),
            "recent_errors": [e.to_dict() for e in self._errors[-self._config.recent_batches:]],
        }

    def get_errors(self) -> List[CalculationErrorRecord]:
        return list(self._errors)

    def clear_queue(self) -> int:
        """
        Emergency reset: drop queued work, cancel timers, release the flag.

        Nothing queued is executed. Calling this while a batch is running
        lets a second drain start alongside it.
        """
        logger.warning("Clearing calculation queue - emergency reset")
        dropped = len(self._queue)

        self._queue = []
        self._pending.clear()
        for handle in (self._debounce_handle, self._retry_handle, self._refill_handle):
            if handle is not None:
                handle.cancel()
        self._debounce_handle = None
        self._retry_handle = None
        self._refill_handle = None
        self._is_processing = False

        return dropped

    def validate_calculation_order(self, components: Union[Mapping[str, Any], Iterable[ComponentKey]]) -> bool:
        """True if the given components (or the keys of a component map) are acyclic."""
        try:
            return self._graph.is_acyclic(components)
        except NaaSCalcError as e:
            logger.error(f"Error validating calculation order: {e}")
            return False
