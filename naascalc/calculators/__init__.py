"""
naascalc.calculators - Calculator boundary (result models, handler table).
"""

from .results import CostTotals, CalculationResult
from .registry import (
    CalculatorRegistry,
    CalculatorFunc,
    CALCULATOR_METHODS,
    VARIANT_METHODS,
    zero_calculator,
)

__all__ = [
    "CostTotals",
    "CalculationResult",
    "CalculatorRegistry",
    "CalculatorFunc",
    "CALCULATOR_METHODS",
    "VARIANT_METHODS",
    "zero_calculator",
]
