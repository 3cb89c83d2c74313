"""
Hardware abstraction layer for the Glance gesture engine.

This package provides abstractions for the platform services the engine
depends on: the accelerometer (with its tap detector), the one-shot timer
service and the display backlight. It isolates the gesture logic from the
details of a specific watch platform, and ships simulated implementations
for tests and the demo application.
"""

from .accel import AccelSample, AccelSensor, SimulatedAccelSensor
from .backlight import Backlight, SimulatedBacklight
from .scheduler import TimerService, AsyncioTimerService, SimulatedTimerService

__all__ = [
    'AccelSample',
    'AccelSensor',
    'SimulatedAccelSensor',
    'Backlight',
    'SimulatedBacklight',
    'TimerService',
    'AsyncioTimerService',
    'SimulatedTimerService',
]
