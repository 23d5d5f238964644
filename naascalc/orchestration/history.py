"""
orchestration/history.py - Record of drained batches.
"""

from __future__ import annotations
from collections import deque
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Deque, Dict, Iterator, List, Mapping, Optional, Tuple
import uuid

from naascalc.errors.taxonomy import ConfigurationError


@dataclass(frozen=True)
class BatchEntry:
    """One calculation as it ran in a batch."""
    component: str
    level: int
    source: str

    def to_dict(self) -> Dict[str, Any]:
        return {"component": self.component, "level": self.level, "source": self.source}


@dataclass(frozen=True)
class CalculationBatch:
    """Immutable snapshot of a finished batch: totals only, plus error messages."""
    timestamp: float
    calculations: Tuple[BatchEntry, ...]
    results: Mapping[str, Mapping[str, float]]
    duration_ms: float
    errors: Mapping[str, str] = field(default_factory=lambda: MappingProxyType({}))
    batch_id: str = field(default_factory=lambda: uuid.uuid4().hex[:8])

    @classmethod
    def create(
        cls,
        timestamp: float,
        calculations: List[BatchEntry],
        results: Dict[str, Dict[str, float]],
        duration_ms: float,
        errors: Dict[str, str],
    ) -> "CalculationBatch":
        return cls(
            timestamp=timestamp,
            calculations=tuple(calculations),
            results=MappingProxyType({k: MappingProxyType(dict(v)) for k, v in results.items()}),
            duration_ms=duration_ms,
            errors=MappingProxyType(dict(errors)),
        )

    @property
    def components(self) -> List[str]:
        return [c.component for c in self.calculations]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "batch_id": self.batch_id,
            "timestamp": self.timestamp,
            "calculations": [c.to_dict() for c in self.calculations],
            "results": {k: dict(v) for k, v in self.results.items()},
            "errors": dict(self.errors),
            "duration_ms": self.duration_ms,
        }


class BatchHistory:
    """Ring buffer of batches; the oldest is dropped once full."""

    def __init__(self, max_size: int):
        if max_size < 1:
            raise ConfigurationError(f"max_history_size must be at least 1, got {max_size}")
        self._batches: Deque[CalculationBatch] = deque(maxlen=max_size)

    @property
    def max_size(self) -> int:
        return self._batches.maxlen

    def append(self, batch: CalculationBatch) -> None:
        self._batches.append(batch)

    def recent(self, count: int) -> List[CalculationBatch]:
        if count <= 0:
            return []
        return list(self._batches)[-count:]

    def latest(self) -> Optional[CalculationBatch]:
        return self._batches[-1] if self._batches else None

    def clear(self) -> None:
        self._batches.clear()

    def __len__(self) -> int:
        return len(self._batches)

    def __iter__(self) -> Iterator[CalculationBatch]:
        return iter(list(self._batches))
