"""
calculators/results.py - Pydantic models for calculator output.

Calculators are external code, so their output is validated at the
boundary: totals must be finite numbers and are always present, even on
a failed calculation.
"""

from __future__ import annotations

from typing import Any, Dict, Mapping, Optional

from pydantic import BaseModel, ConfigDict, Field


class CostTotals(BaseModel):
    """Monthly, annual, three-year and one-time totals of a component."""

    model_config = ConfigDict(allow_inf_nan=False, populate_by_name=True)

    monthly: float = Field(default=0.0, description="Recurring monthly cost")
    annual: float = Field(default=0.0, description="Recurring annual cost")
    three_year: float = Field(default=0.0, alias="threeYear", description="Three-year cost")
    one_time: float = Field(default=0.0, alias="oneTime", description="One-off cost")

    def to_dict(self) -> Dict[str, float]:
        return self.model_dump()


class CalculationResult(BaseModel):
    """Output of one component calculation."""

    model_config = ConfigDict(populate_by_name=True)

    totals: CostTotals = Field(default_factory=CostTotals)
    breakdown: Dict[str, Any] = Field(default_factory=dict)
    metadata: Optional[Dict[str, Any]] = None
    error: Optional[str] = None

    @property
    def is_error(self) -> bool:
        return self.error is not None

    @classmethod
    def zero(cls) -> "CalculationResult":
        """Canonical result for a component that contributes nothing."""
        return cls()

    @classmethod
    def failed(cls, message: str) -> "CalculationResult":
        return cls(error=message)

    @classmethod
    def coerce(cls, value: Any) -> "CalculationResult":
        """Accept a model instance or a plain mapping from a calculator."""
        if isinstance(value, cls):
            return value
        if isinstance(value, Mapping):
            return cls.model_validate(dict(value))
        raise TypeError(
            f"Calculator returned {type(value).__name__}, expected a mapping or CalculationResult"
        )

    def to_dict(self) -> Dict[str, Any]:
        return self.model_dump()
