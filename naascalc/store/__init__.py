"""
naascalc.store - Component data store collaborator.
"""

from .component_store import (
    ComponentDataStore,
    InMemoryComponentStore,
    bind_orchestrator,
)

__all__ = [
    "ComponentDataStore",
    "InMemoryComponentStore",
    "bind_orchestrator",
]
