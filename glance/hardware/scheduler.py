"""
One-shot timer service for the Glance gesture engine.

The engine needs a millisecond clock and the ability to run a callback once
after a delay (backlight hold repeats, deferred sampling switches). On a real
loop this is asyncio's call_later; the simulated service provides a virtual
clock so gesture timing can be tested deterministically.
"""

import asyncio
import heapq
import itertools
import structlog
from abc import ABC, abstractmethod
from typing import Any, Callable, List, Optional, Tuple

TimerCallback = Callable[[], None]


class TimerService(ABC):
    """Millisecond clock plus one-shot callbacks on the cooperative loop."""

    @abstractmethod
    def now_ms(self) -> int:
        """Current time in milliseconds. Must never go backwards."""
        pass

    @abstractmethod
    def register(self, delay_ms: int, handler: TimerCallback) -> Any:
        """
        Run a handler once after a delay.

        Args:
            delay_ms: Delay in milliseconds
            handler: Callback taking no arguments

        Returns:
            An opaque handle accepted by cancel()
        """
        pass

    @abstractmethod
    def cancel(self, handle: Any) -> None:
        """Cancel a pending callback. Cancelling a fired or cancelled handle is a no-op."""
        pass


class AsyncioTimerService(TimerService):
    """Timer service backed by an asyncio event loop."""

    def __init__(self, loop: Optional[asyncio.AbstractEventLoop] = None):
        self._loop = loop
        self.logger = structlog.get_logger(hardware=self.__class__.__name__)

    @property
    def loop(self) -> asyncio.AbstractEventLoop:
        if self._loop is None:
            self._loop = asyncio.get_running_loop()
        return self._loop

    def now_ms(self) -> int:
        return int(self.loop.time() * 1000)

    def register(self, delay_ms: int, handler: TimerCallback) -> asyncio.TimerHandle:
        return self.loop.call_later(delay_ms / 1000.0, handler)

    def cancel(self, handle: asyncio.TimerHandle) -> None:
        if handle is not None:
            handle.cancel()


class SimulatedTimerHandle:
    """Handle returned by SimulatedTimerService.register."""

    __slots__ = ("due_ms", "handler", "cancelled", "fired")

    def __init__(self, due_ms: int, handler: TimerCallback):
        self.due_ms = due_ms
        self.handler = handler
        self.cancelled = False
        self.fired = False


class SimulatedTimerService(TimerService):
    """
    Deterministic virtual clock.

    Time only moves when advance() or advance_to() is called. Due callbacks
    fire in due-time order (registration order breaks ties), with the clock
    set to each callback's due time while it runs, so callbacks registered
    by a firing callback are honoured within the same advance.
    """

    def __init__(self, start_ms: int = 0):
        self._now = start_ms
        self._queue: List[Tuple[int, int, SimulatedTimerHandle]] = []
        self._counter = itertools.count()

    def now_ms(self) -> int:
        return self._now

    def register(self, delay_ms: int, handler: TimerCallback) -> SimulatedTimerHandle:
        handle = SimulatedTimerHandle(self._now + max(0, int(delay_ms)), handler)
        heapq.heappush(self._queue, (handle.due_ms, next(self._counter), handle))
        return handle

    def cancel(self, handle: SimulatedTimerHandle) -> None:
        if handle is not None:
            handle.cancelled = True

    @property
    def pending(self) -> int:
        """Number of callbacks still waiting to fire."""
        return sum(1 for _, _, h in self._queue if not h.cancelled)

    def advance(self, delta_ms: int) -> None:
        self.advance_to(self._now + delta_ms)

    def advance_to(self, target_ms: int) -> None:
        """
        Move the clock forward, firing every callback due on the way.

        Args:
            target_ms: New current time; earlier values are ignored
        """
        while self._queue and self._queue[0][0] <= target_ms:
            due_ms, _, handle = heapq.heappop(self._queue)
            if handle.cancelled:
                continue
            self._now = max(self._now, due_ms)
            handle.fired = True
            handle.handler()
        self._now = max(self._now, target_ms)
