"""
Event tracing system for the Glance gesture engine.

This module provides observability into the events delivered to a consumer,
facilitating debugging of gesture timing and tuning of zone boxes.
"""

import logging
from typing import Dict, List, Any, Deque
from collections import deque
from .events import BaseEvent, EventType, ZoneChangedEvent, OutputChangedEvent


class EventTracer:
    """
    Traces glance events for debugging and observability.

    The tracer records events as they're delivered, maintaining a bounded
    buffer of recent events for analysis and statistics.
    """

    def __init__(self, max_events: int = 1000):
        """
        Initialize the event tracer.

        Args:
            max_events: Maximum number of events to keep in the buffer
        """
        self.max_events = max_events
        self.events: Deque[BaseEvent] = deque(maxlen=max_events)
        self.logger = logging.getLogger(__name__)

    def record_event(self, event: BaseEvent) -> None:
        """
        Record an event in the trace buffer.

        Args:
            event: The event to record
        """
        self.events.append(event)
        self.logger.debug("Recorded %s at %d ms", event.type.value, event.timestamp_ms)

    def get_trace(self) -> List[BaseEvent]:
        """Get all buffered events, oldest first."""
        return list(self.events)

    def get_events_by_type(self, event_type: EventType) -> List[BaseEvent]:
        """
        Get all events of a specific type.

        Args:
            event_type: The event type to filter by

        Returns:
            List of events matching the type
        """
        return [e for e in self.events if e.type == event_type]

    def get_events_between(self, start_ms: int, end_ms: int) -> List[BaseEvent]:
        """
        Get events whose timestamp falls in [start_ms, end_ms].

        Args:
            start_ms: Window start, inclusive
            end_ms: Window end, inclusive

        Returns:
            List of events inside the window
        """
        return [e for e in self.events if start_ms <= e.timestamp_ms <= end_ms]

    def get_event_count(self) -> int:
        return len(self.events)

    def clear(self) -> None:
        """Clear all recorded events."""
        self.events.clear()

    def get_event_stats(self) -> Dict[str, Any]:
        """
        Get statistics about recorded events.

        Returns:
            Dictionary with totals per event type, per zone and per output
        """
        event_types: Dict[str, int] = {}
        zones: Dict[str, int] = {}
        outputs: Dict[str, int] = {}

        for event in self.events:
            key = event.type.value
            event_types[key] = event_types.get(key, 0) + 1
            if isinstance(event, ZoneChangedEvent):
                zones[event.zone.value] = zones.get(event.zone.value, 0) + 1
            elif isinstance(event, OutputChangedEvent):
                outputs[event.output.value] = outputs.get(event.output.value, 0) + 1

        return {
            'total_events': len(self.events),
            'event_types': event_types,
            'zones': zones,
            'outputs': outputs,
        }
