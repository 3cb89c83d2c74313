"""
Adaptive accelerometer sampling.

The sensor runs in one of two modes: SLOW while nothing is happening, FAST
while the gesture state machine is inside a decision window. Switches are
requested after a batch has been processed and applied a few milliseconds
later from a timer callback, never from inside the sensor's own delivery.
The first sample delivered after a switch is discarded: its position in the
batch cannot be turned into a timestamp because the batch spans two rates.
"""

import structlog
from enum import Enum
from typing import Any, Optional, Tuple
from glance.core.config import SamplingConfig
from glance.hardware.accel import AccelSensor, BatchHandler
from glance.hardware.scheduler import TimerService


class SamplingMode(str, Enum):
    SLOW = "slow"
    FAST = "fast"


class AdaptiveSampler:
    """
    Owns the accelerometer subscription and its rate/batch-size pair.

    Only the gesture state machine's preference drives it, via ``request``.
    """

    def __init__(self,
                 sensor: AccelSensor,
                 timer_service: TimerService,
                 handler: BatchHandler,
                 config: Optional[SamplingConfig] = None):
        """
        Initialize the sampler.

        Args:
            sensor: Accelerometer to subscribe to
            timer_service: Used to defer mode switches
            handler: Batch handler passed to the sensor subscription
            config: Rates and batch sizes of the two modes
        """
        self.sensor = sensor
        self.timer_service = timer_service
        self.handler = handler
        self.config = config or SamplingConfig()
        self.logger = structlog.get_logger(component=self.__class__.__name__)

        self.active_mode: Optional[SamplingMode] = None
        self.pending_mode: Optional[SamplingMode] = None
        self._pending_handle: Any = None
        self.discard_next = False
        self.switch_count = 0

    def profile(self, mode: SamplingMode) -> Tuple[int, int]:
        """Return the (rate_hz, batch_size) pair of a mode."""
        if mode is SamplingMode.FAST:
            return self.config.fast_rate_hz, self.config.fast_batch_size
        return self.config.slow_rate_hz, self.config.slow_batch_size

    @property
    def is_running(self) -> bool:
        return self.active_mode is not None

    @property
    def sample_period_ms(self) -> int:
        if self.active_mode is None:
            return 0
        rate_hz, _ = self.profile(self.active_mode)
        return 1000 // rate_hz

    def start(self) -> None:
        """Subscribe to the sensor in SLOW mode."""
        self._apply(SamplingMode.SLOW)

    def stop(self) -> None:
        """Cancel any pending switch and drop the sensor subscription."""
        self._cancel_pending()
        if self.active_mode is not None:
            self.sensor.unsubscribe()
            self.logger.debug("Sampling stopped", mode=self.active_mode.value)
        self.active_mode = None
        self.discard_next = False

    def request(self, mode: SamplingMode) -> None:
        """
        Ask for a sampling mode.

        Does nothing when the mode is already active (a pending switch away
        from it is cancelled) or already pending.
        """
        if self.active_mode is None:
            return
        if mode is self.active_mode:
            self._cancel_pending()
            return
        if mode is self.pending_mode:
            return

        self._cancel_pending()
        self.pending_mode = mode
        self._pending_handle = self.timer_service.register(
            self.config.switch_delay_ms, lambda: self._on_switch_due(mode)
        )

    def consume_discard(self) -> bool:
        """Return True once for the first sample after a switch."""
        if self.discard_next:
            self.discard_next = False
            return True
        return False

    def _on_switch_due(self, mode: SamplingMode) -> None:
        self.pending_mode = None
        self._pending_handle = None
        if self.active_mode is None:
            return
        self._apply(mode)

    def _cancel_pending(self) -> None:
        if self._pending_handle is not None:
            self.timer_service.cancel(self._pending_handle)
        self._pending_handle = None
        self.pending_mode = None

    def _apply(self, mode: SamplingMode) -> None:
        if mode is self.active_mode:
            return

        rate_hz, batch_size = self.profile(mode)
        previous = self.active_mode
        self.active_mode = mode
        self.discard_next = True
        self.switch_count += 1

        if previous is None:
            self.sensor.subscribe(batch_size, rate_hz, self.handler)
        else:
            self.sensor.set_batch_size(batch_size)
            self.sensor.set_rate(rate_hz)

        self.logger.debug("Sampling mode applied", mode=mode.value,
                          rate_hz=rate_hz, batch_size=batch_size, switches=self.switch_count)
