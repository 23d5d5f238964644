"""
naascalc Orchestration

Provides:
- CalculationOrchestrator: debounced, single-flight, dependency-ordered drains
- TimerScheduler implementations for the event loop and for tests
- Batch history and completion events
"""

from .clock import (
    TimerHandle,
    TimerScheduler,
    LoopTimerScheduler,
    VirtualTimerScheduler,
)
from .context import build_calculation_context, extract_device_count
from .events import (
    CALCULATIONS_COMPLETE,
    CalculationEventDispatcher,
    CalculationsCompleteEvent,
    EventHandler,
)
from .history import BatchEntry, BatchHistory, CalculationBatch
from .orchestrator import (
    CalculationOrchestrator,
    ScheduledCalculation,
    SortMetrics,
)

__all__ = [
    # Clock
    "TimerHandle",
    "TimerScheduler",
    "LoopTimerScheduler",
    "VirtualTimerScheduler",
    # Context
    "build_calculation_context",
    "extract_device_count",
    # Events
    "CALCULATIONS_COMPLETE",
    "CalculationEventDispatcher",
    "CalculationsCompleteEvent",
    "EventHandler",
    # History
    "BatchEntry",
    "BatchHistory",
    "CalculationBatch",
    # Orchestrator
    "CalculationOrchestrator",
    "ScheduledCalculation",
    "SortMetrics",
]
