"""
Event Bus Port

Architectural Intent:
- Abstract interface for publishing alert lifecycle events
- Allows decoupling of event producers from consumers (audit log, notifications)
"""

from typing import Protocol, Callable, Awaitable, runtime_checkable
from alertbridge.domain.events.event_base import DomainEvent


@runtime_checkable
class EventBusPort(Protocol):
    async def publish(self, events: list[DomainEvent]) -> None: ...

    def subscribe(
        self, event_type: type, handler: Callable[[DomainEvent], Awaitable[None]]
    ) -> None: ...
