"""Tests for the OpenTelemetry alert metrics exporter."""

import pytest
from opentelemetry.sdk.metrics.export import InMemoryMetricReader

from alertbridge.domain.events.alert_events import (
    AlertEvaluatedEvent,
    AlertProcessedEvent,
    AlertReceivedEvent,
)
from alertbridge.infrastructure.event_bus import EventBus
from alertbridge.infrastructure.telemetry.otel_exporter import AlertTelemetry, OTELConfig


def _points(reader: InMemoryMetricReader, name: str) -> list:
    data = reader.get_metrics_data()
    if data is None:
        return []
    return [
        point
        for resource_metrics in data.resource_metrics
        for scope_metrics in resource_metrics.scope_metrics
        for metric in scope_metrics.metrics
        if metric.name == name
        for point in metric.data.data_points
    ]


@pytest.fixture
def reader():
    return InMemoryMetricReader()


@pytest.fixture
def telemetry(reader):
    t = AlertTelemetry(OTELConfig(), metric_readers=[reader])
    yield t
    t.shutdown()


class TestOTELConfig:
    def test_default_empty_endpoint(self):
        assert OTELConfig().endpoint == ""

    def test_localhost_http_allowed(self):
        config = OTELConfig(endpoint="http://localhost:4317")
        assert config.endpoint == "http://localhost:4317"

    def test_remote_https_allowed(self):
        config = OTELConfig(endpoint="https://collector.example.com:4317")
        assert config.endpoint == "https://collector.example.com:4317"

    def test_remote_http_rejected(self):
        with pytest.raises(ValueError, match="insecure=True"):
            OTELConfig(endpoint="http://collector.example.com:4317")

    def test_remote_http_with_insecure(self):
        config = OTELConfig(endpoint="http://collector.example.com:4317", insecure=True)
        assert config.insecure is True

    def test_export_interval_positive(self):
        with pytest.raises(ValueError, match="export_interval"):
            OTELConfig(export_interval=0)


class TestAlertTelemetry:
    @pytest.mark.asyncio
    async def test_counts_received_by_severity(self, telemetry, reader):
        await telemetry.handle(AlertReceivedEvent(aggregate_id="ALR-1", severity="Critical"))
        await telemetry.handle(AlertReceivedEvent(aggregate_id="ALR-2", severity="Critical"))
        await telemetry.handle(AlertReceivedEvent(aggregate_id="ALR-3", severity="Low"))

        by_severity = {
            p.attributes["severity"]: p.value
            for p in _points(reader, "alertbridge.alerts.received")
        }
        assert by_severity == {"Critical": 2, "Low": 1}

    @pytest.mark.asyncio
    async def test_subscribed_to_event_bus(self, telemetry, reader):
        bus = EventBus()
        telemetry.subscribe(bus)

        await bus.publish([
            AlertEvaluatedEvent(aggregate_id="ALR-1", should_escalate=True),
            AlertProcessedEvent(aggregate_id="ALR-1", incident_id="INC-1"),
        ])

        evaluated = _points(reader, "alertbridge.alerts.evaluated")
        assert [(p.attributes["escalated"], p.value) for p in evaluated] == [("true", 1)]
        assert [p.value for p in _points(reader, "alertbridge.incidents.linked")] == [1]

    def test_shutdown_twice(self, reader):
        telemetry = AlertTelemetry(OTELConfig(), metric_readers=[reader])
        telemetry.shutdown()
        telemetry.shutdown()
