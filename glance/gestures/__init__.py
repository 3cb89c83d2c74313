"""
Gesture recognition for the Glance engine.

Samples flow through the zone classifier into the gesture state machine,
whose outputs drive the output dispatcher (backlight) and whose sampling
preference drives the adaptive sampler. The engine module owns all of them
and is the single processing path.
"""

from .zones import ZoneClassifier
from .timers import Timer, TimerName, TimerSet
from .sampler import AdaptiveSampler, SamplingMode
from .state_machine import ActivityState, GestureInput, GestureStateMachine
from .dispatcher import OutputDispatcher, RepeatingTask
from .engine import GlanceEngine

__all__ = [
    'ZoneClassifier',
    'Timer',
    'TimerName',
    'TimerSet',
    'AdaptiveSampler',
    'SamplingMode',
    'ActivityState',
    'GestureInput',
    'GestureStateMachine',
    'OutputDispatcher',
    'RepeatingTask',
    'GlanceEngine',
]
