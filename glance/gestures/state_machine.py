"""
Gesture State Machine

Consumes zone changes and timer expiries, in sample-timestamp order, and
produces the externally visible output level (IDLE / ACTIVE) plus the ROLL
pulse. It also owns the sampling preference: FAST while a decision window is
open, SLOW otherwise.

States:
- IDLE: nothing running, output IDLE.
- PENDING_ACTIVE: wrist entered the active zone; the activation timer
  debounces transient dips into the box before committing.
- NEW_ACTIVE: the user is looking. Output ACTIVE, short timer running,
  backlight held. This, and a roll started from here, is "glancing".
- OLD_ACTIVE: short timer expired; output stays ACTIVE while the long timer
  runs so a user holding the watch steady does not see it flicker off.
- IDLE_ACTIVE: long timer expired while the wrist was still plausibly
  raised. Output IDLE, but returning to the active zone re-activates
  immediately without the activation debounce.
- ROLL: wrist rotated away from NEW_ACTIVE / OLD_ACTIVE; returning to the
  active zone before the roll timer expires completes a roll gesture. A roll
  started from NEW_ACTIVE still counts as glancing, so the backlight stays
  held through it.
- ROLL_IDLE: same as ROLL but started from IDLE_ACTIVE; completing it
  re-activates without a ROLL pulse.

Entering the inactive zone is a hard reset to IDLE from every state.
"""

import structlog
from enum import Enum, auto
from typing import Callable, Dict, List, Optional
from glance.core.config import TimerConfig
from glance.core.events import OutputState, Zone
from .timers import TimerName, TimerSet


class ActivityState(Enum):
    """States of the gesture state machine."""
    IDLE = auto()            # User is probably not looking at the watch
    PENDING_ACTIVE = auto()  # In the active zone, waiting out the activation debounce
    NEW_ACTIVE = auto()      # User is looking at the watch
    OLD_ACTIVE = auto()      # User might still be looking at the watch
    IDLE_ACTIVE = auto()     # Activity expired, but wrist not yet dropped
    ROLL = auto()            # Part way through a wrist roll from an active state
    ROLL_IDLE = auto()       # Part way through a wrist roll from IDLE_ACTIVE


class GestureInput(Enum):
    """Timestamped inputs of the gesture state machine."""
    ZONE_ACTIVE = auto()
    ZONE_INACTIVE = auto()
    ZONE_ROLL = auto()
    ZONE_UNKNOWN = auto()
    ACTIVATION_EXPIRED = auto()
    SHORT_EXPIRED = auto()
    LONG_EXPIRED = auto()
    ROLL_EXPIRED = auto()


ZONE_INPUTS: Dict[Zone, GestureInput] = {
    Zone.ACTIVE: GestureInput.ZONE_ACTIVE,
    Zone.INACTIVE: GestureInput.ZONE_INACTIVE,
    Zone.ROLL: GestureInput.ZONE_ROLL,
    Zone.UNKNOWN: GestureInput.ZONE_UNKNOWN,
}

INPUT_ZONES: Dict[GestureInput, Zone] = {v: k for k, v in ZONE_INPUTS.items()}

TIMER_INPUTS: Dict[TimerName, GestureInput] = {
    TimerName.ACTIVATION: GestureInput.ACTIVATION_EXPIRED,
    TimerName.SHORT: GestureInput.SHORT_EXPIRED,
    TimerName.LONG: GestureInput.LONG_EXPIRED,
    TimerName.ROLL: GestureInput.ROLL_EXPIRED,
}

Outputs = List[OutputState]


class GestureStateMachine:
    """
    Hierarchical glance/roll state machine driven by absolute timestamps.

    ``handle`` never raises; inputs that mean nothing in the current state
    are ignored. Outputs are returned in emission order after the new state
    has been entered, so a consumer querying ``is_glancing`` sees the result.
    """

    def __init__(self, timer_config: Optional[TimerConfig] = None):
        self.timers = TimerSet(timer_config)
        self.logger = structlog.get_logger(component=self.__class__.__name__)
        self._handlers: Dict[ActivityState, Callable[[GestureInput, int, Outputs], None]] = {
            ActivityState.IDLE: self._on_idle,
            ActivityState.PENDING_ACTIVE: self._on_pending_active,
            ActivityState.NEW_ACTIVE: self._on_new_active,
            ActivityState.OLD_ACTIVE: self._on_old_active,
            ActivityState.IDLE_ACTIVE: self._on_idle_active,
            ActivityState.ROLL: self._on_roll,
            ActivityState.ROLL_IDLE: self._on_roll_idle,
        }
        self.reset()

    def reset(self) -> None:
        """Return to IDLE with every timer cleared."""
        self.state = ActivityState.IDLE
        self.zone = Zone.UNKNOWN
        self.output = OutputState.IDLE
        self.prefer_fast = False
        self.roll_from_glance = False
        self.timers.reset_all()

    @property
    def is_glancing(self) -> bool:
        if self.state is ActivityState.ROLL:
            return self.roll_from_glance
        return self.state is ActivityState.NEW_ACTIVE

    def handle_zone(self, zone: Zone, time_ms: int) -> Outputs:
        return self.handle(ZONE_INPUTS[zone], time_ms)

    def handle_timer(self, name: TimerName, time_ms: int) -> Outputs:
        return self.handle(TIMER_INPUTS[name], time_ms)

    def handle(self, gesture_input: GestureInput, time_ms: int) -> Outputs:
        """
        Feed one input.

        Args:
            gesture_input: The zone change or timer expiry
            time_ms: Timestamp of the sample that produced the input

        Returns:
            Output levels to emit, in order (possibly empty)
        """
        outputs: Outputs = []
        previous = self.state

        if gesture_input in INPUT_ZONES:
            self.zone = INPUT_ZONES[gesture_input]

        if gesture_input is GestureInput.ZONE_INACTIVE:
            self._drop(outputs)
        else:
            self._handlers[self.state](gesture_input, time_ms, outputs)

        if self.state is not previous:
            self.logger.debug("Gesture state changed",
                              input=gesture_input.name,
                              old_state=previous.name,
                              new_state=self.state.name,
                              time_ms=time_ms)
        return outputs

    # --- Output helpers ---

    def _set_output(self, level: OutputState, outputs: Outputs) -> None:
        if level is not self.output:
            self.output = level
            outputs.append(level)

    def _start_active(self, time_ms: int, restart_long: bool = True) -> None:
        self.state = ActivityState.NEW_ACTIVE
        self.timers.start(TimerName.SHORT, time_ms)
        if restart_long:
            self.timers.start(TimerName.LONG, time_ms)
        self.prefer_fast = True

    def _start_roll(self, state: ActivityState, time_ms: int, from_glance: bool = False) -> None:
        self.state = state
        self.roll_from_glance = from_glance
        self.timers.reset(TimerName.SHORT)
        self.timers.reset(TimerName.LONG)
        self.timers.start(TimerName.ROLL, time_ms)
        self.prefer_fast = True

    def _drop(self, outputs: Outputs) -> None:
        # Hand dropped - reset everything
        self.timers.reset_all()
        self.state = ActivityState.IDLE
        self.prefer_fast = False
        self._set_output(OutputState.IDLE, outputs)

    # --- State handlers ---

    def _on_idle(self, gesture_input: GestureInput, time_ms: int, outputs: Outputs) -> None:
        if gesture_input is GestureInput.ZONE_ACTIVE:
            self.state = ActivityState.PENDING_ACTIVE
            self.timers.start(TimerName.ACTIVATION, time_ms)
            self.prefer_fast = True

    def _on_pending_active(self, gesture_input: GestureInput, time_ms: int, outputs: Outputs) -> None:
        if gesture_input in (GestureInput.ZONE_ROLL, GestureInput.ZONE_UNKNOWN):
            self.state = ActivityState.IDLE
            self.timers.reset(TimerName.ACTIVATION)
            self.prefer_fast = False
        elif gesture_input is GestureInput.ACTIVATION_EXPIRED:
            self._start_active(time_ms)
            self._set_output(OutputState.ACTIVE, outputs)

    def _on_new_active(self, gesture_input: GestureInput, time_ms: int, outputs: Outputs) -> None:
        if gesture_input is GestureInput.ZONE_ROLL:
            self._start_roll(ActivityState.ROLL, time_ms, from_glance=True)
        elif gesture_input is GestureInput.SHORT_EXPIRED:
            self.state = ActivityState.OLD_ACTIVE
            self.timers.start(TimerName.LONG, time_ms)
            self.prefer_fast = False

    def _on_old_active(self, gesture_input: GestureInput, time_ms: int, outputs: Outputs) -> None:
        if gesture_input is GestureInput.ZONE_ROLL:
            self._start_roll(ActivityState.ROLL, time_ms)
        elif gesture_input is GestureInput.LONG_EXPIRED:
            if self.zone in (Zone.ACTIVE, Zone.UNKNOWN):
                self.state = ActivityState.IDLE_ACTIVE
            else:
                self.state = ActivityState.IDLE
            self.prefer_fast = False
            self._set_output(OutputState.IDLE, outputs)

    def _on_idle_active(self, gesture_input: GestureInput, time_ms: int, outputs: Outputs) -> None:
        if gesture_input is GestureInput.ZONE_UNKNOWN:
            self.timers.reset_all()
            self.state = ActivityState.IDLE
            self.prefer_fast = False
        elif gesture_input is GestureInput.ZONE_ACTIVE:
            # Recently active, so skip the activation debounce
            self._start_active(time_ms, restart_long=False)
            self._set_output(OutputState.ACTIVE, outputs)
        elif gesture_input is GestureInput.ZONE_ROLL:
            self.state = ActivityState.ROLL_IDLE
            self.timers.start(TimerName.ROLL, time_ms)
            self.prefer_fast = True

    def _on_roll(self, gesture_input: GestureInput, time_ms: int, outputs: Outputs) -> None:
        if gesture_input is GestureInput.ZONE_ACTIVE:
            if not self.timers[TimerName.ROLL].is_pending(time_ms):
                return
            # Complete roll
            self.timers.reset(TimerName.ROLL)
            self._start_active(time_ms)
            outputs.append(OutputState.ROLL)
            self.output = OutputState.ACTIVE
            outputs.append(OutputState.ACTIVE)
        elif gesture_input is GestureInput.ROLL_EXPIRED:
            self.state = ActivityState.OLD_ACTIVE
            self.timers.start(TimerName.LONG, time_ms)
            self.prefer_fast = False

    def _on_roll_idle(self, gesture_input: GestureInput, time_ms: int, outputs: Outputs) -> None:
        if gesture_input is GestureInput.ZONE_ACTIVE:
            if not self.timers[TimerName.ROLL].is_pending(time_ms):
                return
            self.timers.reset(TimerName.ROLL)
            self._start_active(time_ms)
            self._set_output(OutputState.ACTIVE, outputs)
        elif gesture_input is GestureInput.ROLL_EXPIRED:
            self.state = ActivityState.IDLE_ACTIVE
            self.prefer_fast = False
