"""
calculators/registry.py - Component type to calculator lookup table.

Each component type maps to exactly one handler taking (params, context).
Handlers may return a CalculationResult, a plain mapping, or an awaitable
of either.
"""

from __future__ import annotations
from typing import Any, Awaitable, Callable, Dict, List, Mapping, Optional, Union
import logging

from naascalc.core.enums import ComponentType
from naascalc.errors.taxonomy import CalculatorRegistryError, UnknownComponentError
from .results import CalculationResult

logger = logging.getLogger(__name__)

HandlerOutput = Union[CalculationResult, Mapping[str, Any]]
CalculatorFunc = Callable[
    [Dict[str, Any], Dict[str, Any]],
    Union[HandlerOutput, Awaitable[HandlerOutput]],
]


def zero_calculator(params: Dict[str, Any], context: Dict[str, Any]) -> CalculationResult:
    """Handler for components that never carry cost."""
    return CalculationResult.zero()


# Method on a calculator object for each component with its own formula
CALCULATOR_METHODS: Dict[ComponentType, str] = {
    ComponentType.PRTG: "calculate_prtg",
    ComponentType.CAPITAL: "calculate_capital",
    ComponentType.SUPPORT: "calculate_support",
    ComponentType.ONBOARDING: "calculate_onboarding",
    ComponentType.PBS_FOUNDATION: "calculate_pbs_foundation",
    ComponentType.ASSESSMENT: "calculate_assessment",
    ComponentType.ADMIN: "calculate_admin",
    ComponentType.OTHER_COSTS: "calculate_other_costs",
    ComponentType.ENHANCED_SUPPORT: "calculate_enhanced_support",
}

# Variants sharing one formula that also receives the component type
VARIANT_METHODS: Dict[ComponentType, str] = {
    ComponentType.DYNAMICS_1_YEAR: "calculate_dynamics",
    ComponentType.DYNAMICS_3_YEAR: "calculate_dynamics",
    ComponentType.DYNAMICS_5_YEAR: "calculate_dynamics",
    ComponentType.NAAS_STANDARD: "calculate_naas",
    ComponentType.NAAS_ENHANCED: "calculate_naas",
}


def _variant_handler(method: Callable[..., Any], component_type: ComponentType) -> CalculatorFunc:
    def handler(params: Dict[str, Any], context: Dict[str, Any]) -> Any:
        return method(params, component_type.value, context)
    handler.__name__ = f"{getattr(method, '__name__', 'calculate')}[{component_type.value}]"
    return handler


class CalculatorRegistry:
    """Lookup table of calculator functions keyed by component type."""

    def __init__(self, handlers: Optional[Mapping[Union[str, ComponentType], CalculatorFunc]] = None):
        self._calculators: Dict[ComponentType, CalculatorFunc] = {}
        for component_type, handler in (handlers or {}).items():
            self.register(component_type, handler)

    def register(self, component_type: Union[str, ComponentType], calculator: CalculatorFunc) -> None:
        member = ComponentType.lookup(component_type)
        if member is None:
            raise UnknownComponentError(str(component_type))
        if not callable(calculator):
            raise CalculatorRegistryError(f"Calculator for {member.value} is not callable")
        self._calculators[member] = calculator

    def has_calculator(self, component_type: Union[str, ComponentType]) -> bool:
        member = ComponentType.lookup(component_type)
        return member is not None and member in self._calculators

    def get_calculator(self, component_type: Union[str, ComponentType]) -> CalculatorFunc:
        """
        Handler for a component type.

        Raises:
            UnknownComponentError: the key is not a component type
            CalculatorRegistryError: the type has no handler registered
        """
        member = ComponentType.lookup(component_type)
        if member is None:
            raise UnknownComponentError(str(component_type))
        calculator = self._calculators.get(member)
        if calculator is None:
            raise CalculatorRegistryError(f"No calculator registered for {member.value}")
        return calculator

    def list_calculators(self) -> List[str]:
        return [c.value for c in self._calculators]

    def missing(self) -> List[str]:
        return [c.value for c in ComponentType if c not in self._calculators]

    def ensure_complete(self) -> "CalculatorRegistry":
        """Raise unless every component type has a handler."""
        missing = self.missing()
        if missing:
            raise CalculatorRegistryError(f"No calculator registered for: {', '.join(missing)}")
        return self

    @classmethod
    def from_calculator(cls, calculator: Any) -> "CalculatorRegistry":
        """
        Build a complete table from an object exposing calculate_* methods.

        `help` always maps to the zero result; dynamics terms and NaaS
        packages share a method that is also passed the component type.
        """
        registry = cls()
        registry.register(ComponentType.HELP, zero_calculator)

        for component_type, method_name in CALCULATOR_METHODS.items():
            method = getattr(calculator, method_name, None)
            if method is None:
                raise CalculatorRegistryError(
                    f"{type(calculator).__name__} has no {method_name}() for {component_type.value}"
                )
            registry.register(component_type, method)

        for component_type, method_name in VARIANT_METHODS.items():
            method = getattr(calculator, method_name, None)
            if method is None:
                raise CalculatorRegistryError(
                    f"{type(calculator).__name__} has no {method_name}() for {component_type.value}"
                )
            registry.register(component_type, _variant_handler(method, component_type))

        logger.debug(f"Calculator registry built from {type(calculator).__name__}")
        return registry.ensure_complete()
