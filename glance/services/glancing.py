"""
Glancing service.

The public API of the gesture engine. A consumer subscribes with its
backlight preferences and a callback; the service builds a fresh engine in
IDLE, starts SLOW sampling and delivers ZoneChanged / OutputChanged events
until unsubscribed. Timer durations and backlight flags can be changed live.
"""

import structlog
from typing import Optional
from glance.core.config import ApplicationConfig, GlanceSettings, TimerConfig, get_config
from glance.core.tracing import EventTracer
from glance.gestures.engine import EventCallback, GlanceEngine
from glance.hardware.accel import AccelSensor
from glance.hardware.backlight import Backlight
from glance.hardware.scheduler import TimerService


class GlancingService:
    """Subscription front-end owning at most one running GlanceEngine."""

    def __init__(self,
                 sensor: AccelSensor,
                 timer_service: TimerService,
                 backlight: Backlight,
                 config: Optional[ApplicationConfig] = None,
                 tracer: Optional[EventTracer] = None):
        """
        Initialize the service.

        Args:
            sensor: Accelerometer delivering batches and taps
            timer_service: Clock and one-shot callbacks
            backlight: Backlight primitives
            config: Application configuration (loaded from the environment if omitted)
            tracer: Event tracer; created from the event config when tracing is enabled
        """
        self.sensor = sensor
        self.timer_service = timer_service
        self.backlight = backlight
        self.config = config or get_config()
        self.timer_config = self.config.timer
        self.logger = structlog.get_logger(service=self.__class__.__name__)

        if tracer is None and self.config.event.tracing_enabled:
            tracer = EventTracer(max_events=self.config.event.max_trace_events)
        self.tracer = tracer

        self.engine: Optional[GlanceEngine] = None

    @property
    def is_subscribed(self) -> bool:
        return self.engine is not None

    def subscribe(self, control_backlight: bool, legacy_flick_to_light: bool,
                  callback: EventCallback) -> None:
        """
        Start gesture recognition.

        Args:
            control_backlight: Keep the light on while glancing and listen for taps
            legacy_flick_to_light: Let a tap light the display when not glancing
            callback: Receives every glance event, in order
        """
        if self.engine is not None:
            self.logger.warning("Already subscribed, restarting engine")
            self.unsubscribe()

        config = self.config.model_copy(update={"timer": self.timer_config})
        self.engine = GlanceEngine(
            self.sensor, self.timer_service, self.backlight, callback, config, self.tracer
        )
        self.engine.start(control_backlight, legacy_flick_to_light)
        self.logger.info("Glancing subscribed")

    def unsubscribe(self) -> None:
        """Stop sampling and tap listening. Safe to call when not subscribed."""
        if self.engine is None:
            return
        self.engine.stop()
        self.engine = None
        self.logger.info("Glancing unsubscribed")

    def update_timers(self, activation_ms: int, short_ms: int, long_ms: int, roll_ms: int) -> None:
        """
        Replace the timer durations.

        Timers already running keep their expiry; the new durations apply the
        next time each timer is started. Invalid durations raise before
        anything changes.
        """
        timer_config = TimerConfig(
            activation_ms=activation_ms, short_ms=short_ms, long_ms=long_ms, roll_ms=roll_ms
        )
        self.timer_config = timer_config
        if self.engine is not None:
            self.engine.update_timers(timer_config)
        self.logger.debug("Timers updated", activation_ms=activation_ms, short_ms=short_ms,
                          long_ms=long_ms, roll_ms=roll_ms)

    def update_backlight_control(self, control_backlight: bool, legacy_flick_to_light: bool) -> None:
        """Toggle backlight takeover and the tap listener on the running engine."""
        if self.engine is None:
            self.logger.warning("Backlight control updated while not subscribed")
            return
        self.engine.update_backlight_control(control_backlight, legacy_flick_to_light)

    def apply_settings(self, settings: GlanceSettings) -> None:
        """
        Apply user settings from the companion configuration page.

        The activation debounce is not user-configurable and is kept.
        """
        self.update_timers(
            self.timer_config.activation_ms,
            settings.light_time_s * 1000,
            settings.active_time_s * 1000,
            settings.roll_time_ms,
        )
        if self.engine is not None:
            self.update_backlight_control(settings.backlight, settings.flick_backlight)
