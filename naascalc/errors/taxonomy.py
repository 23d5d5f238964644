"""
errors/taxonomy.py - Error classification for the calculation engine.

Exceptions raised by the graph, registry and configuration layers, plus the
structured record the orchestrator keeps for every failure it swallows.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, List, Optional, Sequence
import uuid


# =============================================================================
# EXCEPTIONS
# =============================================================================

class NaaSCalcError(Exception):
    """Base exception for the calculation engine."""
    pass


class DependencyGraphError(NaaSCalcError):
    """Base exception for dependency graph errors."""
    pass


class UnknownComponentError(DependencyGraphError):
    """Raised when a component key is not part of the static graph."""

    def __init__(self, component_type: str):
        self.component_type = str(component_type)
        super().__init__(f"Unknown component type: {self.component_type}")


class CycleDetectedError(DependencyGraphError):
    """Raised when ordering a subset finds a circular dependency."""

    def __init__(self, component_type: str, cycle: Optional[Sequence[str]] = None):
        self.component_type = str(component_type)
        self.cycle = list(cycle or [])
        if self.cycle:
            detail = " -> ".join(self.cycle)
            message = f"Circular dependency detected involving {self.component_type}: {detail}"
        else:
            message = f"Circular dependency detected involving {self.component_type}"
        super().__init__(message)


class DependencyValidationError(NaaSCalcError):
    """Raised when enabled components miss a hard dependency."""

    def __init__(self, errors: Sequence[str]):
        self.errors = list(errors)
        super().__init__(f"Dependency errors: {', '.join(self.errors)}")


class CalculatorRegistryError(NaaSCalcError):
    """Raised when the handler table is incomplete or malformed."""
    pass


class ConfigurationError(NaaSCalcError):
    """Raised for invalid configuration values."""
    pass


# =============================================================================
# ERROR RECORDS
# =============================================================================

class ErrorPhase(Enum):
    """Stage of a drain in which a failure happened."""
    VALIDATION = "validation"
    ORDERING = "ordering"
    EXECUTION = "execution"
    CASCADE = "cascade"
    NOTIFICATION = "notification"


@dataclass
class CalculationErrorRecord:
    """A failure captured by the orchestrator instead of being raised."""

    phase: ErrorPhase
    message: str
    component: Optional[str] = None
    error_type: str = ""
    details: List[str] = field(default_factory=list)

    error_id: str = field(default_factory=lambda: uuid.uuid4().hex[:8])
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    @classmethod
    def from_exception(
        cls,
        phase: ErrorPhase,
        exc: BaseException,
        component: Optional[str] = None,
    ) -> "CalculationErrorRecord":
        details: List[str] = []
        if isinstance(exc, DependencyValidationError):
            details = list(exc.errors)
        return cls(
            phase=phase,
            message=str(exc),
            component=component,
            error_type=type(exc).__name__,
            details=details,
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "error_id": self.error_id,
            "phase": self.phase.value,
            "component": self.component,
            "message": self.message,
            "error_type": self.error_type,
            "details": list(self.details),
            "created_at": self.created_at.isoformat(),
        }
