"""
OpenTelemetry Exporter for alertbridge

Architectural Intent:
- Exports alert lifecycle metrics to OTLP-compatible backends
- Subscribes to the event bus, so use cases never call telemetry directly
- Instruments always record; export only happens once an endpoint is set

Metrics:
    alertbridge.alerts.received    {severity}
    alertbridge.alerts.evaluated   {escalated}
    alertbridge.incidents.linked   {}

Security:
- Endpoint defaults to empty string (must be explicitly configured)
- Non-localhost http:// endpoints rejected unless insecure=True
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import Optional, Sequence
from urllib.parse import urlparse
import logging

from opentelemetry.exporter.otlp.proto.grpc.metric_exporter import OTLPMetricExporter
from opentelemetry.sdk.metrics import MeterProvider
from opentelemetry.sdk.metrics.export import MetricReader, PeriodicExportingMetricReader
from opentelemetry.sdk.resources import Resource, SERVICE_NAME

from alertbridge.domain.events.alert_events import (
    AlertEvaluatedEvent,
    AlertProcessedEvent,
    AlertReceivedEvent,
)
from alertbridge.domain.events.event_base import DomainEvent
from alertbridge.domain.ports.event_bus_port import EventBusPort

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class OTELConfig:
    endpoint: str = ""
    service_name: str = "alertbridge"
    environment: str = "development"
    export_interval: int = 5
    insecure: bool = False

    def __post_init__(self) -> None:
        if self.endpoint:
            parsed = urlparse(self.endpoint)
            is_localhost = parsed.hostname in ("localhost", "127.0.0.1", "::1")
            if parsed.scheme == "http" and not is_localhost and not self.insecure:
                raise ValueError(
                    f"Non-localhost HTTP endpoint '{self.endpoint}' requires "
                    "insecure=True or use https://. "
                    "Set insecure=True to explicitly allow plaintext export."
                )
        if self.export_interval < 1:
            raise ValueError("export_interval must be at least 1 second")


class AlertTelemetry:
    """
    Alert lifecycle metrics backed by an OpenTelemetry MeterProvider.

    Extra *metric_readers* are attached alongside the OTLP reader, which
    lets tests inspect recorded values with an in-memory reader.
    """

    def __init__(
        self,
        config: OTELConfig,
        metric_readers: Optional[Sequence[MetricReader]] = None,
    ):
        self.config = config
        readers = list(metric_readers or ())
        if config.endpoint:
            readers.append(
                PeriodicExportingMetricReader(
                    OTLPMetricExporter(endpoint=config.endpoint, insecure=config.insecure),
                    export_interval_millis=config.export_interval * 1000,
                )
            )
            logger.info("Exporting alert metrics to %s", config.endpoint)
        else:
            logger.info("OTEL endpoint not configured, metrics stay in-process")

        resource = Resource(
            attributes={
                SERVICE_NAME: config.service_name,
                "environment": config.environment,
            }
        )
        self._provider = MeterProvider(resource=resource, metric_readers=readers)
        self._shut_down = False
        meter = self._provider.get_meter(__name__)
        self._received = meter.create_counter(
            "alertbridge.alerts.received", unit="1", description="Alerts accepted by ingress"
        )
        self._evaluated = meter.create_counter(
            "alertbridge.alerts.evaluated", unit="1", description="Alerts classified by the router"
        )
        self._linked = meter.create_counter(
            "alertbridge.incidents.linked", unit="1", description="Alerts linked to an incident"
        )

    async def handle(self, event: DomainEvent) -> None:
        if isinstance(event, AlertReceivedEvent):
            self._received.add(1, {"severity": event.severity})
        elif isinstance(event, AlertEvaluatedEvent):
            self._evaluated.add(1, {"escalated": str(event.should_escalate).lower()})
        elif isinstance(event, AlertProcessedEvent):
            self._linked.add(1)

    def subscribe(self, bus: EventBusPort) -> None:
        for event_type in (AlertReceivedEvent, AlertEvaluatedEvent, AlertProcessedEvent):
            bus.subscribe(event_type, self.handle)

    def shutdown(self) -> None:
        """Flush pending metrics and stop the exporter. Safe to call twice."""
        if not self._shut_down:
            self._provider.shutdown()
            self._shut_down = True
