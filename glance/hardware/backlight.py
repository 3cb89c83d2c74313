"""
Backlight hardware abstraction for the Glance gesture engine.

Watch backlights typically expose only a fixed-duration "interaction" hold
and an explicit off switch; there is no level-hold API and no control over
the fade-out. This module defines that interface and a simulated backlight.
"""

from abc import ABC, abstractmethod
from typing import List, Optional
from .base import BaseHardware


class Backlight(BaseHardware, ABC):
    """Base class for backlight implementations."""

    @abstractmethod
    def hold_interaction(self) -> None:
        """Light the display for one platform-defined interaction period."""
        pass

    @abstractmethod
    def turn_off(self) -> None:
        """Switch the light off immediately."""
        pass


class SimulatedBacklight(Backlight):
    """
    Backlight that records every call.

    ``calls`` holds the names of the primitives invoked, in order.
    """

    def __init__(self, name: Optional[str] = None):
        super().__init__(None, name)
        self.calls: List[str] = []
        self.is_lit = False

    def _initialize_impl(self) -> None:
        self.calls.clear()
        self.is_lit = False

    def _shutdown_impl(self) -> None:
        if self.is_lit:
            self.turn_off()

    def hold_interaction(self) -> None:
        self.calls.append("hold_interaction")
        self.is_lit = True
        self.logger.debug("Backlight interaction hold")

    def turn_off(self) -> None:
        self.calls.append("turn_off")
        self.is_lit = False
        self.logger.debug("Backlight off")

    @property
    def hold_count(self) -> int:
        return self.calls.count("hold_interaction")
