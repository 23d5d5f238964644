"""
orchestration/events.py - Batch completion notifications.

Instance-scoped dispatcher: each orchestrator owns one and emits exactly
one CalculationsCompleteEvent per finished batch. Subscribers that raise
are logged and skipped so they cannot break the batch or each other.
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import Callable, Dict, List, Mapping, TYPE_CHECKING
import logging

if TYPE_CHECKING:
    from naascalc.calculators.results import CalculationResult

logger = logging.getLogger(__name__)

CALCULATIONS_COMPLETE = "calculations_complete"


@dataclass(frozen=True)
class CalculationsCompleteEvent:
    """Results of one drained batch, keyed by component type."""
    results: Mapping[str, "CalculationResult"]
    timestamp: float
    batch_id: str = ""
    event_type: str = CALCULATIONS_COMPLETE

    @property
    def failed_components(self) -> List[str]:
        return [k for k, r in self.results.items() if r.is_error]

    def to_dict(self) -> Dict[str, object]:
        return {
            "event_type": self.event_type,
            "batch_id": self.batch_id,
            "timestamp": self.timestamp,
            "results": {k: r.to_dict() for k, r in self.results.items()},
        }


EventHandler = Callable[[CalculationsCompleteEvent], None]


class CalculationEventDispatcher:
    """
    Observer list for batch completion.

    Usage:
        dispatcher = CalculationEventDispatcher()
        dispatcher.subscribe(lambda event: print(event.results))
    """

    def __init__(self):
        self._handlers: List[EventHandler] = []
        self._subscription_counter = 0

    def subscribe(self, handler: EventHandler) -> str:
        """Register a handler; returns a subscription id ("" if already registered)."""
        if handler in self._handlers:
            return ""
        self._handlers.append(handler)
        self._subscription_counter += 1
        sub_id = f"sub_{self._subscription_counter}"
        logger.debug(f"Subscribed {sub_id}")
        return sub_id

    def unsubscribe(self, handler: EventHandler) -> bool:
        try:
            self._handlers.remove(handler)
            return True
        except ValueError:
            return False

    def emit(self, event: CalculationsCompleteEvent) -> int:
        """Deliver to every handler; returns how many handled it without error."""
        delivered = 0
        for handler in list(self._handlers):
            try:
                handler(event)
                delivered += 1
            except Exception as e:
                logger.error(f"Completion handler failed for batch {event.batch_id}: {e}")
        return delivered

    @property
    def handler_count(self) -> int:
        return len(self._handlers)
