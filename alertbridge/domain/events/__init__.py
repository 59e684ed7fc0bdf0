"""
Domain Events Package

Architectural Intent:
- Contains the alert lifecycle events
- Events are the primary mechanism for cross-boundary communication
"""

from alertbridge.domain.events.event_base import DomainEvent
from alertbridge.domain.events.alert_events import (
    AlertReceivedEvent,
    AlertEvaluatedEvent,
    AlertProcessedEvent,
)

__all__ = [
    "DomainEvent",
    "AlertReceivedEvent",
    "AlertEvaluatedEvent",
    "AlertProcessedEvent",
]
