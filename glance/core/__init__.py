"""
Core framework for the Glance gesture engine.

This package provides the fundamental components shared by every layer:
- Typed zone and output events
- Configuration management
- Event tracing for observability
"""

from .events import EventType, Zone, OutputState, BaseEvent, ZoneChangedEvent, OutputChangedEvent, GlanceEvent
from .tracing import EventTracer
from .config import get_config, ApplicationConfig

__all__ = [
    'EventType',
    'Zone',
    'OutputState',
    'BaseEvent',
    'ZoneChangedEvent',
    'OutputChangedEvent',
    'GlanceEvent',
    'EventTracer',
    'get_config',
    'ApplicationConfig'
]
