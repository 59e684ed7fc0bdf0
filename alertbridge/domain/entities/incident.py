"""
Incident Entity

Architectural Intent:
- A dispatched work order created from exactly one escalated alert
- Immutable once created; this core never updates incidents
- Back-reference to the source alert gives bidirectional traceability

Design Decisions:
- Text composition lives in the factory so every writer formats incidents alike
- IDs are short, provider-agnostic strings
"""

from __future__ import annotations
import uuid
from dataclasses import dataclass, field
from datetime import datetime, UTC
from typing import Any

from alertbridge.domain.entities.alert import Alert
from alertbridge.domain.value_objects.unit import Unit


def new_incident_id() -> str:
    return f"INC-{uuid.uuid4().hex[:8].upper()}"


@dataclass(frozen=True)
class Incident:
    """Work order linked back to the alert that caused it."""

    id: str
    short_description: str
    description: str
    priority: int
    assignment_group: str
    source_alert_ref: str
    created_at: datetime = field(default_factory=lambda: datetime.now(UTC))

    def __post_init__(self) -> None:
        if not self.id:
            raise ValueError("Incident id cannot be empty")
        if self.priority < 1:
            raise ValueError(f"priority must be >= 1, got {self.priority}")
        if not self.assignment_group:
            raise ValueError("assignment_group cannot be empty")
        if not self.source_alert_ref:
            raise ValueError("source_alert_ref cannot be empty")

    @classmethod
    def for_alert(
        cls, alert: Alert, unit: Unit, priority: int, assignment_group: str
    ) -> "Incident":
        location = unit.location or "unknown location"
        description = (
            f"{alert.external_system.value} reported a {alert.severity.value} "
            f"{alert.alert_type.value} alert for {unit.display_name} ({location}).\n"
            f"Message: {alert.message}\n"
            f"Source alert: {alert.id}"
        )
        return cls(
            id=new_incident_id(),
            short_description=f"{alert.alert_type.value} Alert - {unit.display_name}",
            description=description,
            priority=priority,
            assignment_group=assignment_group,
            source_alert_ref=alert.id,
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "short_description": self.short_description,
            "description": self.description,
            "priority": self.priority,
            "assignment_group": self.assignment_group,
            "source_alert_ref": self.source_alert_ref,
            "created_at": self.created_at.isoformat(),
        }
