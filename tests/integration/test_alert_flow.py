"""Integration tests for the alert-to-incident flow.

These tests wire the real container against a SQLite file, simulating
crashes by writing partial state directly through the stores.
"""

import asyncio

import pytest

from alertbridge.application.dtos.alert_dtos import AlertSubmission
from alertbridge.composition_root import create_container
from alertbridge.domain.entities.alert import Alert, AlertStatus
from alertbridge.domain.entities.incident import Incident
from alertbridge.domain.value_objects.alert_classification import (
    AlertType,
    ExternalSystem,
    Severity,
)
from alertbridge.domain.value_objects.unit import Unit
from alertbridge.infrastructure.config import AlertBridgeConfig, RetryConfig, StoreConfig


@pytest.fixture
def container(tmp_path):
    config = AlertBridgeConfig(
        store=StoreConfig(backend="sqlite", db_path=str(tmp_path / "alerts.db")),
        retry=RetryConfig(delays=()),
    )
    c = create_container(config)
    yield c
    c.close()


class TestAlertFlowIntegration:
    """End-to-end flow with real wiring and a SQLite store."""

    @pytest.mark.asyncio
    async def test_hvac_critical_alert(self, container, hvac_payload):
        """Critical temperature alert in unit 1307 becomes a P1 for HVAC Specialists."""
        result = await container.process_alert.submit(
            AlertSubmission.from_payload(hvac_payload)
        )

        alert = await container.alert_repository.get(result.alert_id)
        incident = await container.incident_store.get(result.incident_id)

        assert alert.processed is True
        assert alert.incident_ref == incident.id
        assert incident.source_alert_ref == alert.id
        assert incident.priority == 1
        assert incident.assignment_group == "HVAC Specialists"
        assert incident.short_description == "Temperature Alert - Unit 1307"
        assert "Building A, Floor 13" in incident.description

    @pytest.mark.asyncio
    async def test_medium_alert_stays_unprocessed(self, container, hvac_payload):
        hvac_payload["severity"] = "Medium"
        result = await container.process_alert.submit(
            AlertSubmission.from_payload(hvac_payload)
        )

        alert = await container.alert_repository.get(result.alert_id)
        assert alert.processed is False
        assert alert.incident_ref is None
        assert container.sqlite_repository.get_incident_count() == 0

    @pytest.mark.asyncio
    async def test_repeated_escalations_create_one_incident(self, container):
        alert = Alert.receive(
            ExternalSystem.FIRE_ALARM, AlertType.SMOKE, Severity.CRITICAL, "0412", "smoke"
        )
        await container.alert_repository.add(alert)

        results = await asyncio.gather(
            *(container.process_alert.escalate(alert.id) for _ in range(5))
        )

        assert len({r.incident_id for r in results}) == 1
        assert sum(r.outcome == "created" for r in results) == 1
        assert container.sqlite_repository.get_incident_count() == 1

    @pytest.mark.asyncio
    async def test_crash_after_incident_created(self, container):
        """Incident written, alert update lost: recovery links without a duplicate."""
        alert = Alert.receive(
            ExternalSystem.WATER_SENSOR, AlertType.LEAK, Severity.HIGH, "1307", "water"
        )
        await container.alert_repository.add(alert)
        await container.alert_repository.record_evaluation(alert.id, AlertStatus.ESCALATING)
        orphan = Incident.for_alert(alert, Unit("1307"), 2, "Plumbing Team")
        await container.incident_store.create_for_alert(orphan)

        report = await container.recover_incidents.execute()

        assert report.repaired == 1
        assert (await container.alert_repository.get(alert.id)).incident_ref == orphan.id
        assert container.sqlite_repository.get_incident_count() == 1

    @pytest.mark.asyncio
    async def test_crash_before_escalation(self, container):
        """Alert stored, process died before routing: redrive escalates it once."""
        alert = Alert.receive(
            ExternalSystem.ELECTRICAL_PANEL,
            AlertType.EQUIPMENT_FAILURE,
            Severity.CRITICAL,
            "B1-PLANT",
            "breaker tripped",
        )
        await container.alert_repository.add(alert)

        first = await container.recover_incidents.execute(redrive=True)
        second = await container.recover_incidents.execute(redrive=True)

        assert first.redriven == 1
        assert second.scanned == 0
        stored = await container.alert_repository.get(alert.id)
        incident = await container.incident_store.get(stored.incident_ref)
        assert incident.assignment_group == "HVAC Specialists"
        assert incident.short_description == "EquipmentFailure Alert - Basement Plant Room"
