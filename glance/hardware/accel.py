"""
Accelerometer hardware abstraction for the Glance gesture engine.

The accelerometer delivers raw samples in batches at a configurable rate and
also exposes a tap detector. This module defines the sample type, the
interface a platform must implement, and a simulated sensor that replays
pushed readings for tests and the demo application.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Callable, List, Optional, Sequence, Tuple
from .base import BaseHardware


@dataclass(frozen=True)
class AccelSample:
    """One accelerometer reading in milli-g."""
    x: int
    y: int
    z: int
    timestamp_ms: int = 0


BatchHandler = Callable[[List[AccelSample]], None]
TapHandler = Callable[[str, int], None]  # (axis, direction)


class AccelSensor(BaseHardware, ABC):
    """
    Base class for accelerometer implementations.

    A single batch subscription and a single tap subscription may be active
    at any time. Handlers are invoked on the cooperative loop and must run to
    completion before the next delivery.
    """

    @abstractmethod
    def subscribe(self, batch_size: int, rate_hz: int, handler: BatchHandler) -> None:
        """
        Start delivering batches of samples.

        Args:
            batch_size: Number of samples per delivered batch
            rate_hz: Sampling rate
            handler: Called with each full batch, oldest sample first
        """
        pass

    @abstractmethod
    def unsubscribe(self) -> None:
        """Stop delivering batches."""
        pass

    @abstractmethod
    def set_rate(self, rate_hz: int) -> None:
        pass

    @abstractmethod
    def set_batch_size(self, batch_size: int) -> None:
        pass

    @abstractmethod
    def subscribe_taps(self, handler: TapHandler) -> None:
        """
        Start delivering tap events.

        Args:
            handler: Called with the tap axis ('x', 'y' or 'z') and direction (+1/-1)
        """
        pass

    @abstractmethod
    def unsubscribe_taps(self) -> None:
        pass


class SimulatedAccelSensor(AccelSensor):
    """
    Accelerometer that delivers readings pushed into it.

    Readings accumulate until a full batch is available, then the batch is
    handed to the subscribed handler synchronously. Readings pushed while
    unsubscribed are dropped, as a real sensor would not capture them.
    """

    def __init__(self, name: Optional[str] = None):
        super().__init__(None, name)
        self.rate_hz: Optional[int] = None
        self.batch_size: Optional[int] = None
        self._handler: Optional[BatchHandler] = None
        self._tap_handler: Optional[TapHandler] = None
        self._pending: List[AccelSample] = []
        self.batches_delivered = 0

    def _initialize_impl(self) -> None:
        self._pending.clear()

    def _shutdown_impl(self) -> None:
        self.unsubscribe()
        self.unsubscribe_taps()

    @property
    def is_subscribed(self) -> bool:
        return self._handler is not None

    @property
    def taps_subscribed(self) -> bool:
        return self._tap_handler is not None

    def subscribe(self, batch_size: int, rate_hz: int, handler: BatchHandler) -> None:
        if self._handler is not None:
            self.logger.warning("Replacing existing accelerometer subscription")
        self.batch_size = batch_size
        self.rate_hz = rate_hz
        self._handler = handler
        self._pending.clear()
        self.logger.debug("Accelerometer subscribed", batch_size=batch_size, rate_hz=rate_hz)

    def unsubscribe(self) -> None:
        self._handler = None
        self._pending.clear()
        self.logger.debug("Accelerometer unsubscribed")

    def set_rate(self, rate_hz: int) -> None:
        self.rate_hz = rate_hz
        self.logger.debug("Accelerometer rate changed", rate_hz=rate_hz)

    def set_batch_size(self, batch_size: int) -> None:
        self.batch_size = batch_size
        self.logger.debug("Accelerometer batch size changed", batch_size=batch_size)

    def subscribe_taps(self, handler: TapHandler) -> None:
        self._tap_handler = handler

    def unsubscribe_taps(self) -> None:
        self._tap_handler = None

    def push(self, x: int, y: int, z: int) -> None:
        """Push one raw reading into the sensor buffer."""
        self.push_samples([AccelSample(x, y, z)])

    def push_samples(self, samples: Sequence[AccelSample]) -> None:
        """
        Push several readings, delivering every batch that fills up.

        Args:
            samples: Readings in capture order
        """
        if self._handler is None:
            return
        self._pending.extend(samples)
        self._flush()

    def push_readings(self, readings: Sequence[Tuple[int, int, int]]) -> None:
        self.push_samples([AccelSample(x, y, z) for x, y, z in readings])

    def tap(self, axis: str = "x", direction: int = 1) -> None:
        """Simulate a tap; ignored when nobody listens."""
        if self._tap_handler is not None:
            self._tap_handler(axis, direction)

    def _flush(self) -> None:
        while self._handler is not None and self.batch_size and len(self._pending) >= self.batch_size:
            batch = self._pending[:self.batch_size]
            del self._pending[:self.batch_size]
            self.batches_delivered += 1
            self._handler(batch)
