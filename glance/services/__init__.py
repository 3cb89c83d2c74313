"""
Service implementations for the Glance gesture engine.

Services are the public face of the engine: the glancing service exposes
subscribe/unsubscribe and live reconfiguration, and the status service is a
ready-made consumer that turns glance events into display state.
"""

from .glancing import GlancingService
from .status import GlanceStatus

__all__ = ['GlancingService', 'GlanceStatus']
