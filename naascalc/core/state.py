"""
core/state.py - Component state as seen by the engine.

The data store owns writes; everything here is a read-side view of one
component's enable flag and parameters.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from typing import Any, Dict, Mapping, Optional
import copy


@dataclass
class ComponentState:
    """Enable flag and parameters for a single component."""
    enabled: bool = False
    params: Dict[str, Any] = field(default_factory=dict)

    def copy(self) -> "ComponentState":
        return ComponentState(enabled=self.enabled, params=copy.deepcopy(self.params))

    def to_dict(self) -> Dict[str, Any]:
        return {"enabled": self.enabled, "params": copy.deepcopy(self.params)}

    @classmethod
    def from_dict(cls, data: Optional[Mapping[str, Any]]) -> "ComponentState":
        if not data:
            return cls()
        params = data.get("params")
        return cls(
            enabled=bool(data.get("enabled", False)),
            params=dict(params) if isinstance(params, Mapping) else {},
        )


def coerce_state(value: Any) -> ComponentState:
    """Accept a ComponentState, a plain dict, or None."""
    if isinstance(value, ComponentState):
        return value
    if isinstance(value, Mapping):
        return ComponentState.from_dict(value)
    return ComponentState()


def is_enabled(value: Any) -> bool:
    """True if a component entry (state object or dict) is enabled."""
    if value is None:
        return False
    return coerce_state(value).enabled


def get_params(value: Any) -> Dict[str, Any]:
    """Parameters of a component entry, empty if missing."""
    if value is None:
        return {}
    return coerce_state(value).params
