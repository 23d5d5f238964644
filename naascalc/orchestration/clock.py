"""
orchestration/clock.py - Timer scheduling for the orchestrator.

The orchestrator never touches the event loop's timers directly. It asks a
TimerScheduler for the current time, for delayed callbacks (debounce,
retry, refill) and to start background coroutines. Production code uses
the running asyncio loop; tests use VirtualTimerScheduler and move time
forward explicitly.
"""

from __future__ import annotations
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Callable, Coroutine, List, Optional, Set
import asyncio
import heapq
import logging
import time

logger = logging.getLogger(__name__)


class TimerHandle(ABC):
    """A pending delayed callback."""

    @abstractmethod
    def cancel(self) -> None:
        pass

    @abstractmethod
    def cancelled(self) -> bool:
        pass


class TimerScheduler(ABC):
    """Clock, delayed callbacks and background tasks."""

    @abstractmethod
    def now_ms(self) -> float:
        """Current time in milliseconds."""
        pass

    @abstractmethod
    def call_later(self, delay_ms: float, callback: Callable[[], None]) -> TimerHandle:
        """Run `callback` once after `delay_ms`."""
        pass

    @abstractmethod
    def spawn(self, coro: Coroutine[Any, Any, Any]) -> "asyncio.Future[Any]":
        """Run a coroutine in the background."""
        pass


# =============================================================================
# ASYNCIO LOOP
# =============================================================================

class _LoopTimerHandle(TimerHandle):
    def __init__(self, handle: asyncio.TimerHandle):
        self._handle = handle

    def cancel(self) -> None:
        self._handle.cancel()

    def cancelled(self) -> bool:
        return self._handle.cancelled()


class LoopTimerScheduler(TimerScheduler):
    """
    Scheduler backed by an asyncio event loop.

    Uses the loop passed in, or the running loop at call time. Background
    tasks are referenced until they finish so they are not collected early.
    """

    def __init__(self, loop: Optional[asyncio.AbstractEventLoop] = None):
        self._loop = loop
        self._tasks: Set["asyncio.Future[Any]"] = set()

    def _get_loop(self) -> asyncio.AbstractEventLoop:
        if self._loop is not None:
            return self._loop
        try:
            return asyncio.get_running_loop()
        except RuntimeError:
            raise RuntimeError(
                "LoopTimerScheduler needs a running event loop or an explicit loop"
            ) from None

    def now_ms(self) -> float:
        return time.time() * 1000.0

    def call_later(self, delay_ms: float, callback: Callable[[], None]) -> TimerHandle:
        handle = self._get_loop().call_later(max(delay_ms, 0) / 1000.0, callback)
        return _LoopTimerHandle(handle)

    def spawn(self, coro: Coroutine[Any, Any, Any]) -> "asyncio.Future[Any]":
        task = self._get_loop().create_task(coro)
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return task

    @property
    def active_tasks(self) -> int:
        return len(self._tasks)


# =============================================================================
# VIRTUAL TIME
# =============================================================================

@dataclass(order=True)
class _VirtualTimer(TimerHandle):
    due_ms: float
    sequence: int
    callback: Callable[[], None] = field(compare=False)
    _cancelled: bool = field(default=False, compare=False)

    def cancel(self) -> None:
        self._cancelled = True

    def cancelled(self) -> bool:
        return self._cancelled


class VirtualTimerScheduler(TimerScheduler):
    """
    Deterministic scheduler for tests.

    Time only moves inside advance(). Each due timer fires in (due time,
    creation order); coroutines it spawns run to completion before the
    next timer fires. Spawned coroutines must not wait on anything outside
    the scheduler's control.

    Usage:
        clock = VirtualTimerScheduler()
        orchestrator = CalculationOrchestrator(..., scheduler=clock)
        orchestrator.schedule_calculation("capital")
        await clock.advance(50)
    """

    def __init__(self, start_ms: float = 0.0):
        self._now = float(start_ms)
        self._timers: List[_VirtualTimer] = []
        self._sequence = 0
        self._tasks: Set["asyncio.Future[Any]"] = set()
        self.fired_count = 0

    def now_ms(self) -> float:
        return self._now

    def call_later(self, delay_ms: float, callback: Callable[[], None]) -> TimerHandle:
        self._sequence += 1
        timer = _VirtualTimer(self._now + max(delay_ms, 0), self._sequence, callback)
        heapq.heappush(self._timers, timer)
        return timer

    def spawn(self, coro: Coroutine[Any, Any, Any]) -> "asyncio.Future[Any]":
        task = asyncio.ensure_future(coro)
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return task

    @property
    def pending_timers(self) -> int:
        return sum(1 for t in self._timers if not t.cancelled())

    def next_due_ms(self) -> Optional[float]:
        self._discard_cancelled()
        return self._timers[0].due_ms if self._timers else None

    def _discard_cancelled(self) -> None:
        while self._timers and self._timers[0].cancelled():
            heapq.heappop(self._timers)

    async def settle(self) -> None:
        """Wait for every spawned coroutine, including ones spawned meanwhile."""
        while self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)

    async def advance(self, delay_ms: float) -> int:
        """Move time forward, firing due timers; returns how many fired."""
        target = self._now + delay_ms
        fired = 0
        await self.settle()

        while True:
            self._discard_cancelled()
            if not self._timers or self._timers[0].due_ms > target:
                break
            timer = heapq.heappop(self._timers)
            self._now = timer.due_ms
            timer.callback()
            fired += 1
            await self.settle()

        self._now = target
        self.fired_count += fired
        return fired

    async def run_until_idle(self, max_timers: int = 1000) -> int:
        """Fire timers until none are left; returns how many fired."""
        fired = 0
        while fired < max_timers:
            due = self.next_due_ms()
            if due is None:
                break
            fired += await self.advance(due - self._now)
        else:
            logger.warning(f"run_until_idle stopped after {max_timers} timers")
        await self.settle()
        return fired
