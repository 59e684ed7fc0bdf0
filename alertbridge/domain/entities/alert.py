"""
Alert Module

Architectural Intent:
- Alert aggregate is the consistency boundary for one reported event
- Lifecycle managed through state transitions enforced by domain methods
- All state changes produce new instances so every step stays auditable
- Domain events published for cross-context communication (audit log, notifications)

Lifecycle:
    RECEIVED -> EVALUATED                     (no escalation, terminal)
    RECEIVED -> ESCALATING -> PROCESSED       (incident linked, terminal)

Domain Events:
- AlertReceivedEvent: Published when an alert is accepted by ingress
- AlertEvaluatedEvent: Published when the router has decided on escalation
- AlertProcessedEvent: Published when the alert is linked to its incident
"""

from __future__ import annotations
import uuid
from dataclasses import dataclass, field, replace
from datetime import datetime, UTC
from enum import Enum, auto
from typing import Any, Optional

from alertbridge.domain.errors import InvariantViolation
from alertbridge.domain.events.alert_events import (
    AlertEvaluatedEvent,
    AlertProcessedEvent,
    AlertReceivedEvent,
)
from alertbridge.domain.value_objects.alert_classification import (
    AlertType,
    ExternalSystem,
    Severity,
)


class AlertStatus(Enum):
    RECEIVED = auto()
    EVALUATED = auto()
    ESCALATING = auto()
    PROCESSED = auto()


def new_alert_id() -> str:
    return f"ALR-{uuid.uuid4().hex[:12].upper()}"


@dataclass(frozen=True)
class Alert:
    id: str
    external_system: ExternalSystem
    alert_type: AlertType
    severity: Severity
    unit_ref: str
    message: str
    received_at: datetime
    status: AlertStatus = AlertStatus.RECEIVED
    processed: bool = False
    incident_ref: Optional[str] = None
    domain_events: tuple = field(default=(), compare=False, repr=False)

    def __post_init__(self) -> None:
        if not self.id:
            raise ValueError("Alert id cannot be empty")
        if self.processed != (self.incident_ref is not None):
            raise ValueError("processed must be set if and only if incident_ref is set")
        if self.processed != (self.status == AlertStatus.PROCESSED):
            raise ValueError("processed alerts must be in PROCESSED state")

    @classmethod
    def receive(
        cls,
        external_system: ExternalSystem,
        alert_type: AlertType,
        severity: Severity,
        unit_ref: str,
        message: str,
    ) -> "Alert":
        """Create a freshly received alert with a generated id."""
        alert_id = new_alert_id()
        return cls(
            id=alert_id,
            external_system=external_system,
            alert_type=alert_type,
            severity=severity,
            unit_ref=unit_ref,
            message=message,
            received_at=datetime.now(UTC),
            domain_events=(
                AlertReceivedEvent(
                    aggregate_id=alert_id,
                    unit_ref=unit_ref,
                    severity=severity.value,
                ),
            ),
        )

    @property
    def is_terminal(self) -> bool:
        return self.status in (AlertStatus.EVALUATED, AlertStatus.PROCESSED)

    def evaluate(self, should_escalate: bool, assignment_group: Optional[str] = None) -> "Alert":
        if self.status != AlertStatus.RECEIVED:
            raise ValueError("Alert can only be evaluated from RECEIVED state")
        return replace(
            self,
            status=AlertStatus.ESCALATING if should_escalate else AlertStatus.EVALUATED,
            domain_events=self.domain_events
            + (
                AlertEvaluatedEvent(
                    aggregate_id=self.id,
                    should_escalate=should_escalate,
                    assignment_group=assignment_group,
                ),
            ),
        )

    def mark_processed(self, incident_id: str) -> "Alert":
        if self.processed:
            raise InvariantViolation(
                f"Alert {self.id} already processed (incident {self.incident_ref})"
            )
        if self.status != AlertStatus.ESCALATING:
            raise ValueError("Alert must be ESCALATING to be marked processed")
        if not incident_id:
            raise ValueError("incident_id cannot be empty")
        return replace(
            self,
            status=AlertStatus.PROCESSED,
            processed=True,
            incident_ref=incident_id,
            domain_events=self.domain_events
            + (AlertProcessedEvent(aggregate_id=self.id, incident_id=incident_id),),
        )

    def clear_events(self) -> "Alert":
        return replace(self, domain_events=())

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "external_system": self.external_system.value,
            "alert_type": self.alert_type.value,
            "severity": self.severity.value,
            "unit_ref": self.unit_ref,
            "message": self.message,
            "received_at": self.received_at.isoformat(),
            "status": self.status.name,
            "processed": self.processed,
            "incident_ref": self.incident_ref,
        }
