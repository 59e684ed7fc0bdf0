"""
Alert DTOs

Architectural Intent:
- Data Transfer Objects for the alert ingestion boundary
- Input validation at the application boundary
- Decouples the wire representation (system_type, event_type, ...) from the domain model
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import Any, Optional

from alertbridge.domain.errors import ValidationError
from alertbridge.domain.value_objects.alert_classification import (
    AlertType,
    ExternalSystem,
    Severity,
)

DEFAULT_MAX_MESSAGE_LENGTH = 4000


@dataclass(frozen=True)
class AlertSubmission:
    external_system: ExternalSystem
    alert_type: AlertType
    severity: Severity
    unit_id: str
    message: str

    @classmethod
    def from_payload(
        cls,
        payload: Any,
        max_message_length: int = DEFAULT_MAX_MESSAGE_LENGTH,
    ) -> "AlertSubmission":
        """Validate and normalize a decoded JSON body.

        Raises ValidationError naming the first failing field.
        """
        if not isinstance(payload, dict):
            raise ValidationError("body", "must be a JSON object")

        external_system = ExternalSystem.parse(payload.get("system_type"), "system_type")
        alert_type = AlertType.parse(payload.get("event_type"), "event_type")
        severity = Severity.parse(payload.get("severity"), "severity")

        unit_id = payload.get("unit_id")
        if isinstance(unit_id, int) and not isinstance(unit_id, bool):
            unit_id = str(unit_id)
        if not isinstance(unit_id, str) or not unit_id.strip():
            raise ValidationError("unit_id", "is required")

        message = payload.get("message")
        if not isinstance(message, str):
            raise ValidationError("message", "is required")
        message = message.strip()
        if not message:
            raise ValidationError("message", "cannot be empty")
        if len(message) > max_message_length:
            raise ValidationError(
                "message", f"exceeds {max_message_length} characters"
            )

        return cls(
            external_system=external_system,
            alert_type=alert_type,
            severity=severity,
            unit_id=unit_id.strip(),
            message=message,
        )


@dataclass(frozen=True)
class WriteOutcome:
    """What the incident writer did for one alert."""
    alert_id: str
    incident_id: str
    created: bool = False
    repaired: bool = False
    already_processed: bool = False

    @property
    def label(self) -> str:
        if self.created:
            return "created"
        if self.repaired:
            return "repaired"
        return "already_processed"


@dataclass(frozen=True)
class SubmissionResult:
    alert_id: str
    escalated: bool
    incident_id: Optional[str] = None
    outcome: str = "stored"

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "status": "success",
            "alert_id": self.alert_id,
            "escalated": self.escalated,
            "outcome": self.outcome,
        }
        if self.incident_id is not None:
            data["incident_id"] = self.incident_id
        return data


@dataclass(frozen=True)
class RecoveryReport:
    scanned: int = 0
    repaired: int = 0
    redriven: int = 0

    def to_dict(self) -> dict[str, int]:
        return {"scanned": self.scanned, "repaired": self.repaired, "redriven": self.redriven}
