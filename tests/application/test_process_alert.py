"""Tests for the ProcessAlert use case (ingest -> classify -> write)."""

import pytest

from alertbridge.application.dtos.alert_dtos import AlertSubmission
from alertbridge.application.use_cases.ingest_alert import IngestAlert
from alertbridge.application.use_cases.process_alert import ProcessAlert
from alertbridge.application.use_cases.write_incident import WriteIncident
from alertbridge.domain.entities.alert import AlertStatus
from alertbridge.domain.errors import NotFoundError, TransientStoreError, ValidationError
from alertbridge.domain.events.alert_events import (
    AlertEvaluatedEvent,
    AlertProcessedEvent,
    AlertReceivedEvent,
)
from alertbridge.infrastructure.event_bus import EventBus
from alertbridge.infrastructure.repositories.in_memory_repository import (
    InMemoryIncidentStore,
)


class UnavailableIncidentStore(InMemoryIncidentStore):
    """Rejects incident creation until *available* is set."""

    def __init__(self) -> None:
        super().__init__()
        self.available = False

    async def create_for_alert(self, incident):
        if not self.available:
            raise TransientStoreError("incident store unavailable")
        return await super().create_for_alert(incident)


def _submission(payload, **changes):
    return AlertSubmission.from_payload({**payload, **changes})


class TestSubmit:
    @pytest.mark.asyncio
    async def test_critical_alert_creates_incident(
        self, pipeline, alert_repo, incident_store, hvac_payload
    ):
        result = await pipeline.submit(_submission(hvac_payload))

        assert result.escalated
        assert result.outcome == "created"
        alert = await alert_repo.get(result.alert_id)
        assert alert.processed is True
        assert alert.incident_ref == result.incident_id

        incident = await incident_store.get(result.incident_id)
        assert incident.priority == 1
        assert incident.assignment_group == "HVAC Specialists"
        assert incident.source_alert_ref == result.alert_id

    @pytest.mark.asyncio
    async def test_high_leak_routes_to_plumbing(self, pipeline, incident_store, hvac_payload):
        result = await pipeline.submit(
            _submission(hvac_payload, system_type="WaterSensor", event_type="Leak", severity="High")
        )

        incident = await incident_store.get(result.incident_id)
        assert incident.priority == 2
        assert incident.assignment_group == "Plumbing Team"

    @pytest.mark.asyncio
    @pytest.mark.parametrize("severity", ["Medium", "Low"])
    async def test_low_severity_stored_without_incident(
        self, pipeline, alert_repo, incident_store, hvac_payload, severity
    ):
        result = await pipeline.submit(_submission(hvac_payload, severity=severity))

        assert not result.escalated
        assert result.incident_id is None
        alert = await alert_repo.get(result.alert_id)
        assert alert.processed is False
        assert alert.status == AlertStatus.EVALUATED
        assert incident_store.count == 0

    @pytest.mark.asyncio
    async def test_unknown_unit_stores_nothing(self, pipeline, alert_repo, hvac_payload):
        with pytest.raises(ValidationError):
            await pipeline.submit(_submission(hvac_payload, unit_id="9999"))
        assert await alert_repo.list_alerts() == []

    @pytest.mark.asyncio
    async def test_each_submission_gets_its_own_incident(
        self, pipeline, incident_store, hvac_payload
    ):
        first = await pipeline.submit(_submission(hvac_payload))
        second = await pipeline.submit(_submission(hvac_payload))

        assert first.alert_id != second.alert_id
        assert first.incident_id != second.incident_id
        assert incident_store.count == 2

    @pytest.mark.asyncio
    async def test_events_published_in_order(self, alert_repo, units, router, writer, hvac_payload):
        seen = []

        async def record(event):
            seen.append(type(event))

        bus = EventBus()
        for event_type in (AlertReceivedEvent, AlertEvaluatedEvent, AlertProcessedEvent):
            bus.subscribe(event_type, record)
        ingest = IngestAlert(alert_repo, units, retry_delays=())
        pipeline = ProcessAlert(ingest, router, writer, alert_repo, event_bus=bus, retry_delays=())

        await pipeline.submit(_submission(hvac_payload))

        assert seen == [AlertReceivedEvent, AlertEvaluatedEvent, AlertProcessedEvent]

    @pytest.mark.asyncio
    async def test_events_published_when_incident_store_down(
        self, alert_repo, units, router, hvac_payload
    ):
        seen = []

        async def record(event):
            seen.append(type(event))

        bus = EventBus()
        for event_type in (AlertReceivedEvent, AlertEvaluatedEvent, AlertProcessedEvent):
            bus.subscribe(event_type, record)
        writer = WriteIncident(alert_repo, UnavailableIncidentStore(), units, retry_delays=())
        ingest = IngestAlert(alert_repo, units, retry_delays=())
        pipeline = ProcessAlert(ingest, router, writer, alert_repo, event_bus=bus, retry_delays=())

        with pytest.raises(TransientStoreError):
            await pipeline.submit(_submission(hvac_payload))

        assert seen == [AlertReceivedEvent, AlertEvaluatedEvent]


class TestEscalate:
    @pytest.mark.asyncio
    async def test_retry_after_store_outage(self, alert_repo, units, router, hvac_payload):
        store = UnavailableIncidentStore()
        writer = WriteIncident(alert_repo, store, units, retry_delays=())
        ingest = IngestAlert(alert_repo, units, retry_delays=())
        pipeline = ProcessAlert(ingest, router, writer, alert_repo, retry_delays=())

        with pytest.raises(TransientStoreError) as exc_info:
            await pipeline.submit(_submission(hvac_payload))
        alert_id = exc_info.value.alert_id
        assert alert_id is not None
        assert (await alert_repo.get(alert_id)).status == AlertStatus.ESCALATING

        store.available = True
        result = await pipeline.escalate(alert_id)

        assert result.outcome == "created"
        assert store.count == 1
        assert (await alert_repo.get(alert_id)).processed

    @pytest.mark.asyncio
    async def test_escalate_processed_alert_is_idempotent(
        self, pipeline, incident_store, hvac_payload
    ):
        submitted = await pipeline.submit(_submission(hvac_payload))

        again = await pipeline.escalate(submitted.alert_id)

        assert again.outcome == "already_processed"
        assert again.incident_id == submitted.incident_id
        assert incident_store.count == 1

    @pytest.mark.asyncio
    async def test_escalate_low_severity(self, pipeline, incident_store, hvac_payload):
        submitted = await pipeline.submit(_submission(hvac_payload, severity="Low"))

        result = await pipeline.escalate(submitted.alert_id)

        assert not result.escalated
        assert incident_store.count == 0

    @pytest.mark.asyncio
    async def test_escalate_unknown_alert(self, pipeline):
        with pytest.raises(NotFoundError):
            await pipeline.escalate("ALR-MISSING")
