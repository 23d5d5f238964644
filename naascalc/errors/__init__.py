"""
naascalc.errors - Exception hierarchy and error records.
"""

from .taxonomy import (
    NaaSCalcError,
    DependencyGraphError,
    UnknownComponentError,
    CycleDetectedError,
    DependencyValidationError,
    CalculatorRegistryError,
    ConfigurationError,
    ErrorPhase,
    CalculationErrorRecord,
)

__all__ = [
    "NaaSCalcError",
    "DependencyGraphError",
    "UnknownComponentError",
    "CycleDetectedError",
    "DependencyValidationError",
    "CalculatorRegistryError",
    "ConfigurationError",
    "ErrorPhase",
    "CalculationErrorRecord",
]
