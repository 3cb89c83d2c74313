"""
Output dispatching to the backlight.

The backlight only offers a fixed-length interaction hold, so keeping the
display lit for the whole glance means re-issuing the hold every fade
interval for as long as the state machine still reports glancing. When the
glance ends the light is switched off explicitly, as the platform gives no
control over the fade-out.

While backlight takeover is enabled a tap listener also guards against the
platform's own tap-to-light behaviour: a tap outside a glance either lights
the display (legacy "flick to light") or forces it off.
"""

import structlog
from typing import Any, Callable, Optional
from glance.core.config import BacklightConfig
from glance.core.events import OutputState
from glance.hardware.accel import AccelSensor
from glance.hardware.backlight import Backlight
from glance.hardware.scheduler import TimerService


class RepeatingTask:
    """
    Callback re-armed on the timer service after every successful tick.

    ``on_tick`` returns True to keep running, False to stop.
    """

    def __init__(self, timer_service: TimerService, interval_ms: int, on_tick: Callable[[], bool]):
        self.timer_service = timer_service
        self.interval_ms = interval_ms
        self.on_tick = on_tick
        self.running = False
        self._handle: Any = None

    def start(self) -> None:
        if self.running:
            return
        self.running = True
        self._schedule()

    def cancel(self) -> None:
        if self._handle is not None:
            self.timer_service.cancel(self._handle)
        self._handle = None
        self.running = False

    def _schedule(self) -> None:
        self._handle = self.timer_service.register(self.interval_ms, self._fire)

    def _fire(self) -> None:
        self._handle = None
        if not self.running:
            return
        if self.on_tick():
            self._schedule()
        else:
            self.running = False


class OutputDispatcher:
    """Drives the backlight from output levels and tap events."""

    def __init__(self,
                 backlight: Backlight,
                 timer_service: TimerService,
                 sensor: AccelSensor,
                 is_glancing: Callable[[], bool],
                 config: Optional[BacklightConfig] = None):
        """
        Initialize the dispatcher.

        Args:
            backlight: Backlight primitives
            timer_service: Drives the repeating hold
            sensor: Source of tap events
            is_glancing: Queried at every repeat and on every tap
            config: Initial takeover flags and fade interval
        """
        config = config or BacklightConfig()
        self.backlight = backlight
        self.sensor = sensor
        self.is_glancing = is_glancing
        self.control_backlight = config.control_backlight
        self.legacy_flick_to_light = config.legacy_flick_to_light
        self.logger = structlog.get_logger(component=self.__class__.__name__)
        self._hold_task = RepeatingTask(timer_service, config.fade_interval_ms, self._hold_tick)
        self._tap_listening = False
        self._started = False

    @property
    def holding_light(self) -> bool:
        return self._hold_task.running

    @property
    def tap_listening(self) -> bool:
        return self._tap_listening

    def start(self, control_backlight: bool, legacy_flick_to_light: bool) -> None:
        self._started = True
        self.update_control(control_backlight, legacy_flick_to_light)

    def stop(self) -> None:
        """Stop holding the light and stop listening for taps until the next start."""
        self._started = False
        if self.holding_light:
            self._hold_task.cancel()
            self.backlight.turn_off()
        self._set_tap_listening(False)

    def update_control(self, control_backlight: bool, legacy_flick_to_light: bool) -> None:
        """
        Change the takeover flags live.

        Turning takeover off stops the hold loop and leaves the light to fade
        on its own.
        """
        self.control_backlight = control_backlight
        self.legacy_flick_to_light = legacy_flick_to_light
        if not control_backlight and self.holding_light:
            self._hold_task.cancel()
        self._set_tap_listening(control_backlight and self._started)

    def on_output(self, output: OutputState) -> None:
        if output is OutputState.ACTIVE:
            self.keep_light_on()
        elif output is OutputState.IDLE and self.holding_light:
            self._hold_task.cancel()
            self.backlight.turn_off()
            self.logger.debug("Backlight hold released")

    def keep_light_on(self) -> None:
        """Start the hold loop unless it is already running or takeover is off."""
        if self.holding_light or not self.control_backlight or not self._started:
            return
        if self._hold_tick():
            self._hold_task.start()
            self.logger.debug("Backlight hold started")

    def on_tap(self, axis: str, direction: int) -> None:
        if self.is_glancing():
            return
        # Not glancing, optionally allow "flick backlight" behaviour
        if self.legacy_flick_to_light:
            self.backlight.hold_interaction()
        else:
            self.backlight.turn_off()

    def _hold_tick(self) -> bool:
        if not self.control_backlight or not self._started:
            return False
        if self.is_glancing():
            self.backlight.hold_interaction()
            return True
        self.backlight.turn_off()
        return False

    def _set_tap_listening(self, enabled: bool) -> None:
        if enabled and not self._tap_listening:
            self.sensor.subscribe_taps(self.on_tap)
            self._tap_listening = True
        elif not enabled and self._tap_listening:
            self.sensor.unsubscribe_taps()
            self._tap_listening = False
