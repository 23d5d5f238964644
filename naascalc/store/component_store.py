"""
store/component_store.py - In-memory component data store.

Holds the enable flag and parameters of every component on a quote. The
orchestrator only reads from it; edits go through update_component(),
which applies the quote's business rules and notifies listeners.
"""

from __future__ import annotations
from typing import Any, Callable, Dict, List, Mapping, Optional, Protocol, Union, TYPE_CHECKING
import copy
import logging

from naascalc.core.enums import ComponentType, DYNAMICS_TERMS, NAAS_PACKAGES, CalculationSource
from naascalc.core.state import ComponentState, coerce_state
from naascalc.errors.taxonomy import UnknownComponentError

if TYPE_CHECKING:
    from naascalc.orchestration.orchestrator import CalculationOrchestrator

logger = logging.getLogger(__name__)

ComponentKey = Union[str, ComponentType]
ChangeListener = Callable[[str, ComponentState], None]


class ComponentDataStore(Protocol):
    """Read interface the orchestrator needs from a data store."""

    def get_component(self, component_type: ComponentKey) -> ComponentState:
        ...

    def get_enabled_components(self) -> Dict[str, ComponentState]:
        ...


class InMemoryComponentStore:
    """
    Component states for one quote, last write wins.

    Business rules applied when a component is enabled:
    - only one NaaS package may be enabled
    - only one dynamics contract term may be enabled
    - enhanced support turns base support on
    """

    def __init__(self, initial: Optional[Mapping[str, Any]] = None):
        self._components: Dict[str, ComponentState] = {
            c.value: ComponentState() for c in ComponentType
        }
        self._listeners: List[ChangeListener] = []

        for component_type, state in (initial or {}).items():
            key = self._require_known(component_type)
            self._components[key] = coerce_state(state).copy()

    @staticmethod
    def _require_known(component_type: ComponentKey) -> str:
        member = ComponentType.lookup(component_type)
        if member is None:
            raise UnknownComponentError(str(component_type))
        return member.value

    # -------------------------------------------------------------------------
    # Reads
    # -------------------------------------------------------------------------

    def get_component(self, component_type: ComponentKey) -> ComponentState:
        """Copy of a component's state; unknown keys read as disabled."""
        member = ComponentType.lookup(component_type)
        if member is None:
            return ComponentState()
        return self._components[member.value].copy()

    def get_all_components(self) -> Dict[str, ComponentState]:
        return {k: v.copy() for k, v in self._components.items()}

    def get_enabled_components(self) -> Dict[str, ComponentState]:
        return {k: v.copy() for k, v in self._components.items() if v.enabled}

    # -------------------------------------------------------------------------
    # Writes
    # -------------------------------------------------------------------------

    def update_component(self, component_type: ComponentKey, data: Mapping[str, Any]) -> ComponentState:
        """
        Apply a partial update ({"enabled": ..., "params": ...}).

        Params are replaced, not merged; use update_component_params() to merge.
        """
        key = self._require_known(component_type)
        current = self._components[key]

        enabled = current.enabled
        if "enabled" in data:
            enabled = bool(data["enabled"])

        params = current.params
        if "params" in data:
            raw = data["params"]
            params = copy.deepcopy(dict(raw)) if isinstance(raw, Mapping) else {}

        touched = [key]
        if enabled:
            touched.extend(self._apply_business_rules(key))

        self._components[key] = ComponentState(enabled=enabled, params=params)

        for changed in touched:
            self._notify(changed)

        return self._components[key].copy()

    def set_component_enabled(self, component_type: ComponentKey, enabled: bool) -> ComponentState:
        return self.update_component(component_type, {"enabled": enabled})

    def update_component_params(self, component_type: ComponentKey, params: Mapping[str, Any]) -> ComponentState:
        current = self.get_component(component_type)
        merged = dict(current.params)
        merged.update(params)
        return self.update_component(component_type, {"params": merged})

    def clear(self) -> None:
        """Reset every component to disabled with no params."""
        for key in self._components:
            self._components[key] = ComponentState()
        for key in self._components:
            self._notify(key)

    def _apply_business_rules(self, key: str) -> List[str]:
        """Side effects of enabling `key`; returns other components that changed."""
        changed: List[str] = []

        exclusive_groups = (NAAS_PACKAGES, DYNAMICS_TERMS)
        for group in exclusive_groups:
            members = [c.value for c in group]
            if key not in members:
                continue
            for other in members:
                if other != key and self._components[other].enabled:
                    logger.warning(f"Disabling {other} as {key} is being enabled")
                    self._components[other].enabled = False
                    changed.append(other)

        support = ComponentType.SUPPORT.value
        if key == ComponentType.ENHANCED_SUPPORT.value and not self._components[support].enabled:
            logger.warning("Enhanced support requires base support - enabling automatically")
            self._components[support].enabled = True
            changed.append(support)

        return changed

    # -------------------------------------------------------------------------
    # Listeners
    # -------------------------------------------------------------------------

    def subscribe(self, listener: ChangeListener) -> Callable[[], None]:
        """Register a change listener; returns a function that removes it."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _notify(self, key: str) -> None:
        state = self._components[key].copy()
        for listener in list(self._listeners):
            try:
                listener(key, state)
            except Exception as e:
                logger.error(f"Component listener failed for {key}: {e}")

    def to_dict(self) -> Dict[str, Any]:
        return {k: v.to_dict() for k, v in self._components.items()}


def bind_orchestrator(
    store: InMemoryComponentStore,
    orchestrator: "CalculationOrchestrator",
) -> Callable[[], None]:
    """Schedule a recalculation for every component edit in the store."""

    def on_change(component_type: str, state: ComponentState) -> None:
        orchestrator.schedule_calculation(component_type, source=CalculationSource.USER)

    return store.subscribe(on_change)
