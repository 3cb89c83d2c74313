"""
Glance engine: the single processing path.

All mutable gesture state (held zone, state machine, timers, sampling mode,
backlight hold) lives in one GlanceEngine instance. It is driven only by
sensor batch deliveries and timer callbacks on one cooperative loop, and
every callback runs to completion.

For each delivered batch of N samples arriving at ``now``, sample i is
stamped ``now - (N - i) * sample_period`` and processed in order. Each
sample is classified, a zone change is fed to the state machine, and then
the four timers are checked (roll, short, long, activation) against the same
timestamp. After the batch the state machine's sampling preference is
forwarded to the sampler.
"""

import structlog
from dataclasses import replace
from typing import Callable, List, Optional
from glance.core.config import ApplicationConfig, TimerConfig
from glance.core.events import GlanceEvent, OutputChangedEvent, OutputState, Zone, ZoneChangedEvent
from glance.core.tracing import EventTracer
from glance.hardware.accel import AccelSample, AccelSensor
from glance.hardware.backlight import Backlight
from glance.hardware.scheduler import TimerService
from .dispatcher import OutputDispatcher
from .sampler import AdaptiveSampler, SamplingMode
from .state_machine import ActivityState, GestureStateMachine
from .zones import ZoneClassifier

EventCallback = Callable[[GlanceEvent], None]


class GlanceEngine:
    """
    Owns the classifier, state machine, sampler and dispatcher.

    Created when a consumer subscribes and stopped when it unsubscribes.
    """

    def __init__(self,
                 sensor: AccelSensor,
                 timer_service: TimerService,
                 backlight: Backlight,
                 callback: EventCallback,
                 config: Optional[ApplicationConfig] = None,
                 tracer: Optional[EventTracer] = None):
        """
        Initialize the engine.

        Args:
            sensor: Accelerometer delivering batches and taps
            timer_service: Clock and one-shot callbacks
            backlight: Backlight primitives
            callback: Receives every ZoneChangedEvent and OutputChangedEvent
            config: Application configuration (defaults if omitted)
            tracer: Optional tracer recording every delivered event
        """
        config = config or ApplicationConfig()
        self.timer_service = timer_service
        self.callback = callback
        self.tracer = tracer
        self.logger = structlog.get_logger(component=self.__class__.__name__)

        self.classifier = ZoneClassifier(config.zone)
        self.fsm = GestureStateMachine(config.timer)
        self.sampler = AdaptiveSampler(sensor, timer_service, self.on_batch, config.sampling)
        self.dispatcher = OutputDispatcher(
            backlight, timer_service, sensor, lambda: self.fsm.is_glancing, config.backlight
        )

        self.zone = Zone.UNKNOWN
        self._running = False

    # --- Lifecycle ---

    @property
    def is_running(self) -> bool:
        return self._running

    def start(self, control_backlight: bool, legacy_flick_to_light: bool) -> None:
        """Reset to IDLE and begin SLOW sampling."""
        if self._running:
            self.logger.warning("Engine already running")
            return
        self.fsm.reset()
        self.zone = Zone.UNKNOWN
        self.sampler.start()
        self.dispatcher.start(control_backlight, legacy_flick_to_light)
        self._running = True
        self.logger.info("Glance engine started",
                         control_backlight=control_backlight,
                         legacy_flick_to_light=legacy_flick_to_light)

    def stop(self) -> None:
        """Drop the sensor and tap subscriptions. Safe to call repeatedly."""
        if not self._running:
            return
        self.sampler.stop()
        self.dispatcher.stop()
        self._running = False
        self.logger.info("Glance engine stopped", sampling_switches=self.sampler.switch_count)

    # --- Live reconfiguration ---

    def update_timers(self, config: TimerConfig) -> None:
        self.fsm.timers.update_durations(config)

    def update_backlight_control(self, control_backlight: bool, legacy_flick_to_light: bool) -> None:
        self.dispatcher.update_control(control_backlight, legacy_flick_to_light)

    # --- Introspection ---

    @property
    def state(self) -> ActivityState:
        return self.fsm.state

    @property
    def output(self) -> OutputState:
        return self.fsm.output

    @property
    def is_glancing(self) -> bool:
        return self.fsm.is_glancing

    @property
    def sampling_mode(self) -> Optional[SamplingMode]:
        return self.sampler.active_mode

    # --- Processing path ---

    def on_batch(self, samples: List[AccelSample]) -> None:
        """
        Handle one sensor delivery.

        Args:
            samples: Samples in capture order; the last was captured at delivery time
        """
        if not self._running:
            self.logger.warning("Batch delivered while stopped", samples=len(samples))
            return

        now_ms = self.timer_service.now_ms()
        period_ms = self.sampler.sample_period_ms
        count = len(samples)

        first = 1 if count and self.sampler.consume_discard() else 0
        for i in range(first, count):
            # The consumer may have unsubscribed from its callback
            if not self._running:
                return
            time_ms = now_ms - (count - i) * period_ms
            self.process_sample(replace(samples[i], timestamp_ms=time_ms))

        # Update the sampling speed
        self.sampler.request(SamplingMode.FAST if self.fsm.prefer_fast else SamplingMode.SLOW)

    def process_sample(self, sample: AccelSample) -> None:
        """Classify one timestamped sample, then check every timer against it."""
        time_ms = sample.timestamp_ms

        zone = self.classifier.classify(sample, self.zone)
        if zone is not self.zone:
            self.zone = zone
            self._emit(ZoneChangedEvent(zone=zone, timestamp_ms=time_ms))
            if not self._running:
                return
            self._dispatch(self.fsm.handle_zone(zone, time_ms), time_ms)

        # Create inputs for timer expiries
        for name in self.fsm.timers.expired(time_ms):
            if not self._running:
                return
            self._dispatch(self.fsm.handle_timer(name, time_ms), time_ms)

    def _dispatch(self, outputs: List[OutputState], time_ms: int) -> None:
        for output in outputs:
            if not self._running:
                return
            self._emit(OutputChangedEvent(output=output, timestamp_ms=time_ms))
            self.dispatcher.on_output(output)

    def _emit(self, event: GlanceEvent) -> None:
        if self.tracer is not None:
            self.tracer.record_event(event)
        self.callback(event)
