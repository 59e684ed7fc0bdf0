"""
Alert Classification Value Objects

Architectural Intent:
- Closed vocabularies for the source system, alert type and severity of an alert
- Parsing is case-insensitive and normalizes to the canonical value
- Unknown values raise ValidationError naming the offending field
"""

from __future__ import annotations
from enum import Enum

from alertbridge.domain.errors import ValidationError


class _ParseableEnum(str, Enum):
    """String enum that parses its values case-insensitively."""

    @classmethod
    def parse(cls, raw: object, field: str):
        if isinstance(raw, cls):
            return raw
        if not isinstance(raw, str) or not raw.strip():
            raise ValidationError(field, "is required")
        wanted = raw.strip().lower()
        for member in cls:
            if member.value.lower() == wanted:
                return member
        allowed = ", ".join(m.value for m in cls)
        raise ValidationError(field, f"'{raw}' is not one of: {allowed}")

    def __str__(self) -> str:
        return self.value


class ExternalSystem(_ParseableEnum):
    HVAC = "HVAC"
    FIRE_ALARM = "FireAlarm"
    WATER_SENSOR = "WaterSensor"
    ELECTRICAL_PANEL = "ElectricalPanel"
    SECURITY = "Security"


class AlertType(_ParseableEnum):
    TEMPERATURE = "Temperature"
    SMOKE = "Smoke"
    LEAK = "Leak"
    EQUIPMENT_FAILURE = "EquipmentFailure"
    MOTION = "Motion"


class Severity(_ParseableEnum):
    CRITICAL = "Critical"
    HIGH = "High"
    MEDIUM = "Medium"
    LOW = "Low"

    @property
    def is_escalation_eligible(self) -> bool:
        return self in (Severity.CRITICAL, Severity.HIGH)
