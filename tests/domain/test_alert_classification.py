"""Tests for alert classification enums and unit value object."""

import pytest

from alertbridge.domain.errors import ValidationError
from alertbridge.domain.value_objects.alert_classification import (
    AlertType,
    ExternalSystem,
    Severity,
)
from alertbridge.domain.value_objects.unit import Unit


class TestEnumParsing:
    def test_exact_value(self):
        assert ExternalSystem.parse("FireAlarm", "system_type") is ExternalSystem.FIRE_ALARM

    def test_case_insensitive(self):
        assert Severity.parse("critical", "severity") is Severity.CRITICAL
        assert AlertType.parse("  equipmentfailure ", "event_type") is AlertType.EQUIPMENT_FAILURE

    def test_member_passes_through(self):
        assert Severity.parse(Severity.LOW, "severity") is Severity.LOW

    def test_unknown_value_names_field(self):
        with pytest.raises(ValidationError) as exc_info:
            Severity.parse("Urgent", "severity")
        assert exc_info.value.field == "severity"
        assert "Urgent" in exc_info.value.reason

    @pytest.mark.parametrize("raw", [None, "", "   ", 3])
    def test_missing_value(self, raw):
        with pytest.raises(ValidationError, match="is required"):
            AlertType.parse(raw, "event_type")

    def test_escalation_eligibility(self):
        assert Severity.CRITICAL.is_escalation_eligible
        assert Severity.HIGH.is_escalation_eligible
        assert not Severity.MEDIUM.is_escalation_eligible
        assert not Severity.LOW.is_escalation_eligible


class TestUnit:
    def test_default_display_name(self):
        assert Unit("1307").display_name == "Unit 1307"

    def test_explicit_display_name(self):
        assert str(Unit("B1", display_name="Plant Room")) == "Plant Room"

    def test_matches_sensor(self):
        unit = Unit("1307", sensor_ids=("HVAC-1307-T1",))
        assert unit.matches("1307")
        assert unit.matches("HVAC-1307-T1")
        assert not unit.matches("1308")

    def test_empty_id_rejected(self):
        with pytest.raises(ValueError, match="cannot be empty"):
            Unit("")
