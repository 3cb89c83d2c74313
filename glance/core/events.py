"""
Core event system for the Glance gesture engine.

This module defines the zone and output enums and the two event models
delivered to consumers. Every event carries the (reconstructed) sample
timestamp at which it was produced.
"""

from pydantic import BaseModel, ConfigDict
from typing import Literal, Union
from enum import Enum


class EventType(str, Enum):
    """
    Enum defining all event types delivered to a glance consumer.

    Using string-based enum to ensure JSON serialization works properly.
    """
    ZONE_CHANGED = "zone_changed"
    OUTPUT_CHANGED = "output_changed"


class Zone(str, Enum):
    """Spatial region of accelerometer space the wrist currently sits in."""
    ACTIVE = "active"        # Screen tilted toward the user
    INACTIVE = "inactive"    # Arm hanging down ("dropped")
    ROLL = "roll"            # Wrist rotated away from the user
    UNKNOWN = "unknown"      # Outside every box


class OutputState(str, Enum):
    """Externally visible activity level. ROLL is a momentary pulse."""
    IDLE = "idle"
    ACTIVE = "active"
    ROLL = "roll"


class BaseEvent(BaseModel):
    """
    Base model for all glance events.

    Events are immutable once created.
    """
    model_config = ConfigDict(frozen=True)

    type: EventType
    timestamp_ms: int = 0


class ZoneChangedEvent(BaseEvent):
    """
    Event published when the classified zone changes.

    Only emitted when the new zone differs from the previously held one.
    """
    type: Literal[EventType.ZONE_CHANGED] = EventType.ZONE_CHANGED
    zone: Zone


class OutputChangedEvent(BaseEvent):
    """
    Event published when the activity output changes.

    A ROLL output is a pulse and is always followed by an ACTIVE output.
    """
    type: Literal[EventType.OUTPUT_CHANGED] = EventType.OUTPUT_CHANGED
    output: OutputState


GlanceEvent = Union[ZoneChangedEvent, OutputChangedEvent]
