"""
orchestration/context.py - Context handed to calculators.

A calculator receives its own params plus a context dict carrying the
data of the components it depends on:

    timestamp          time the context was built (ms)
    enabledComponents  every enabled component's state
    globalTotals       zero placeholder for quote-wide totals
    <dep>Data          state of each enabled declared dependency
    allComponents      the enabled map, for wildcard dependents
    deviceCount        support only: devices counted from capital equipment
"""

from __future__ import annotations
from typing import Any, Dict, Mapping, Union
import logging

from naascalc.calculators.results import CostTotals
from naascalc.core.constants import DEFAULT_DEVICE_COUNT, WILDCARD
from naascalc.core.enums import ComponentType
from naascalc.core.state import ComponentState
from naascalc.dependencies.graph import DependencyGraph
from naascalc.errors.taxonomy import UnknownComponentError

logger = logging.getLogger(__name__)


def extract_device_count(capital_data: Any) -> Union[int, float]:
    """
    Devices on the quote, summed from capital equipment quantities.

    An item without a quantity counts as one device. Returns
    DEFAULT_DEVICE_COUNT when there is no capital data or no equipment list.
    """
    if isinstance(capital_data, ComponentState):
        params = capital_data.params
    elif isinstance(capital_data, Mapping):
        params = capital_data.get("params")
    else:
        return DEFAULT_DEVICE_COUNT

    if not isinstance(params, Mapping):
        return DEFAULT_DEVICE_COUNT
    equipment = params.get("equipment")
    if equipment is None:
        return DEFAULT_DEVICE_COUNT

    total = 0.0
    for item in equipment:
        quantity = item.get("quantity") if isinstance(item, Mapping) else None
        total += _equipment_quantity(quantity)
    return int(total) if total.is_integer() else total


def _equipment_quantity(quantity: Any) -> float:
    """Numeric quantity of one equipment line; missing or zero counts as one."""
    if not quantity:
        return 1.0
    try:
        return float(quantity)
    except (TypeError, ValueError):
        logger.warning(f"Non-numeric equipment quantity {quantity!r}, counting one device")
        return 1.0


def build_calculation_context(
    graph: DependencyGraph,
    component_type: str,
    enabled_components: Mapping[str, Any],
    timestamp: float,
) -> Dict[str, Any]:
    context: Dict[str, Any] = {
        "timestamp": timestamp,
        "enabledComponents": dict(enabled_components),
        "globalTotals": CostTotals().to_dict(),
    }

    try:
        dependencies = graph.get_dependencies(component_type)
    except UnknownComponentError as e:
        logger.warning(f"Unable to get dependencies for {component_type}: {e}")
        return context

    for dep in dependencies:
        if dep == WILDCARD:
            context["allComponents"] = context["enabledComponents"]
        elif dep in enabled_components:
            context[f"{dep}Data"] = enabled_components[dep]

    capital = ComponentType.CAPITAL.value
    if component_type == ComponentType.SUPPORT.value and capital in dependencies:
        context["deviceCount"] = extract_device_count(enabled_components.get(capital))

    return context
