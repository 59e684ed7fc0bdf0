"""
Alert Lifecycle Events

- AlertReceivedEvent: Published when an alert is accepted by ingress
- AlertEvaluatedEvent: Published when the router has decided on escalation
- AlertProcessedEvent: Published when the alert is linked to its incident
"""

from dataclasses import dataclass
from typing import Optional

from alertbridge.domain.events.event_base import DomainEvent


@dataclass(frozen=True)
class AlertReceivedEvent(DomainEvent):
    unit_ref: str = ""
    severity: str = ""


@dataclass(frozen=True)
class AlertEvaluatedEvent(DomainEvent):
    should_escalate: bool = False
    assignment_group: Optional[str] = None


@dataclass(frozen=True)
class AlertProcessedEvent(DomainEvent):
    incident_id: str = ""
