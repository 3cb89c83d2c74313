"""
Gesture timers.

Timers hold an absolute expiry time in milliseconds, or None when inactive.
An expired timer stays expired until it is explicitly reset, so the caller
decides exactly once what an expiry means.
"""

from enum import Enum
from typing import Dict, Iterator, Optional
from glance.core.config import TimerConfig


class TimerName(str, Enum):
    ACTIVATION = "activation"
    SHORT = "short"
    LONG = "long"
    ROLL = "roll"


# Expiries are checked in this order for every processed sample. A later
# timer can be started by handling an earlier one, and is then examined
# against the same sample time.
CHECK_ORDER = (TimerName.ROLL, TimerName.SHORT, TimerName.LONG, TimerName.ACTIVATION)


class Timer:
    """One-shot expiry timer keyed by absolute timestamps."""

    __slots__ = ("expiry_ms",)

    def __init__(self):
        self.expiry_ms: Optional[int] = None

    def set(self, duration_ms: int, now_ms: int) -> None:
        self.expiry_ms = now_ms + duration_ms

    def reset(self) -> None:
        self.expiry_ms = None

    @property
    def is_running(self) -> bool:
        return self.expiry_ms is not None

    def is_expired(self, now_ms: int) -> bool:
        return self.expiry_ms is not None and self.expiry_ms <= now_ms

    def is_pending(self, now_ms: int) -> bool:
        """True while set and not yet expired at ``now_ms``."""
        return self.expiry_ms is not None and self.expiry_ms > now_ms

    def __repr__(self):
        return f"Timer(expiry_ms={self.expiry_ms})"


class TimerSet:
    """
    The four gesture timers with their configured durations.

    Changing durations only affects timers started afterwards.
    """

    def __init__(self, config: Optional[TimerConfig] = None):
        self.timers: Dict[TimerName, Timer] = {name: Timer() for name in TimerName}
        self.durations: Dict[TimerName, int] = {}
        self.update_durations(config or TimerConfig())

    def update_durations(self, config: TimerConfig) -> None:
        self.durations = {
            TimerName.ACTIVATION: config.activation_ms,
            TimerName.SHORT: config.short_ms,
            TimerName.LONG: config.long_ms,
            TimerName.ROLL: config.roll_ms,
        }

    def __getitem__(self, name: TimerName) -> Timer:
        return self.timers[name]

    def start(self, name: TimerName, now_ms: int) -> None:
        """Start (or restart) a timer with its configured duration."""
        self.timers[name].set(self.durations[name], now_ms)

    def reset(self, name: TimerName) -> None:
        self.timers[name].reset()

    def reset_all(self) -> None:
        for timer in self.timers.values():
            timer.reset()

    def is_expired(self, name: TimerName, now_ms: int) -> bool:
        return self.timers[name].is_expired(now_ms)

    def all_inactive(self) -> bool:
        return not any(timer.is_running for timer in self.timers.values())

    def expired(self, now_ms: int) -> Iterator[TimerName]:
        """
        Yield expired timers in check order, resetting each before it is yielded.

        The check happens lazily, so a timer started while handling an
        earlier expiry is still examined for this same ``now_ms``.
        """
        for name in CHECK_ORDER:
            if self.timers[name].is_expired(now_ms):
                self.timers[name].reset()
                yield name
