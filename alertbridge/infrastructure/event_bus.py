"""
Event Bus Infrastructure

Architectural Intent:
- In-memory event bus implementation for publishing alert lifecycle events
- Supports async subscription handlers
- Ships an audit-log subscriber so every lifecycle step leaves a log line
"""

import logging
from typing import Callable, Awaitable
from alertbridge.domain.events.event_base import DomainEvent
from alertbridge.domain.events.alert_events import (
    AlertEvaluatedEvent,
    AlertProcessedEvent,
    AlertReceivedEvent,
)

logger = logging.getLogger(__name__)

AUDITED_EVENTS = (AlertReceivedEvent, AlertEvaluatedEvent, AlertProcessedEvent)


class EventBus:
    def __init__(self) -> None:
        self._handlers: dict[type, list[Callable[[DomainEvent], Awaitable[None]]]] = {}

    async def publish(self, events: list[DomainEvent]) -> None:
        for event in events:
            for handler in self._handlers.get(type(event), []):
                await handler(event)

    def subscribe(
        self, event_type: type, handler: Callable[[DomainEvent], Awaitable[None]]
    ) -> None:
        self._handlers.setdefault(event_type, []).append(handler)


async def audit_log_handler(event: DomainEvent) -> None:
    logger.info(
        "audit %s %s",
        event.event_type,
        event.to_dict(),
        extra={"alert_id": event.aggregate_id},
    )


def subscribe_audit_log(bus: EventBus) -> None:
    for event_type in AUDITED_EVENTS:
        bus.subscribe(event_type, audit_log_handler)
