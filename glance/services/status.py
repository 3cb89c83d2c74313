"""
Glance status consumer.

Turns the glance event stream into what a watch face shows: a zone label,
a glance label with a roll counter, and whether the clock should tick every
second (while active) or every minute (while idle).
"""

from typing import Callable, Optional
from glance.core.events import GlanceEvent, OutputChangedEvent, OutputState, Zone, ZoneChangedEvent

ZONE_LABELS = {
    Zone.INACTIVE: "INACTIVE",
    Zone.ACTIVE: "ACTIVE",
    Zone.ROLL: "ROLL",
    Zone.UNKNOWN: "NONE",
}


class GlanceStatus:
    """Display state derived from glance events. Usable directly as a callback."""

    def __init__(self, on_change: Optional[Callable[["GlanceStatus"], None]] = None):
        self.on_change = on_change
        self.zone_label = ZONE_LABELS[Zone.UNKNOWN]
        self.glance_label = "IDLE"
        self.output = OutputState.IDLE
        self.roll_count = 0
        self.seconds_mode = False

    def __call__(self, event: GlanceEvent) -> None:
        self.handle_event(event)

    def handle_event(self, event: GlanceEvent) -> None:
        if isinstance(event, ZoneChangedEvent):
            self.zone_label = ZONE_LABELS[event.zone]
        elif isinstance(event, OutputChangedEvent):
            self._handle_output(event.output)
        else:
            return
        if self.on_change is not None:
            self.on_change(self)

    def _handle_output(self, output: OutputState) -> None:
        if output is OutputState.ROLL:
            self.roll_count += 1
            self.glance_label = self._rolled_label()
            return

        self.output = output
        if output is OutputState.ACTIVE:
            self.seconds_mode = True
            self.glance_label = self._rolled_label() if self.roll_count else "ACTIVE"
        else:
            self.roll_count = 0
            self.seconds_mode = False
            self.glance_label = "IDLE"

    def _rolled_label(self) -> str:
        return f"{self.roll_count} ROLLED"

    def as_dict(self):
        return {
            "zone": self.zone_label,
            "glance": self.glance_label,
            "roll_count": self.roll_count,
            "seconds_mode": self.seconds_mode,
        }
