"""
Composition Root

Architectural Intent:
- Dependency injection composition root for the alertbridge application
- Single place where all adapters and use cases are wired together
- No adapter instantiation should occur outside this module

Design Decisions:
- Uses a simple dataclass container instead of a DI framework
- Factory function creates and wires all dependencies from AlertBridgeConfig
- The store backend ("memory" or "sqlite") is chosen by configuration
"""

from dataclasses import dataclass
from typing import Optional

from alertbridge.application.use_cases.ingest_alert import IngestAlert
from alertbridge.application.use_cases.process_alert import ProcessAlert
from alertbridge.application.use_cases.recover_incidents import RecoverIncidents
from alertbridge.application.use_cases.write_incident import WriteIncident
from alertbridge.domain.ports.alert_repository_port import AlertRepositoryPort
from alertbridge.domain.ports.incident_store_port import IncidentStorePort
from alertbridge.domain.services.escalation_router import EscalationRouter
from alertbridge.infrastructure.adapters.unit_directory_adapter import StaticUnitDirectory
from alertbridge.infrastructure.config import AlertBridgeConfig
from alertbridge.infrastructure.event_bus import EventBus, subscribe_audit_log
from alertbridge.infrastructure.repositories.in_memory_repository import (
    InMemoryAlertRepository,
    InMemoryIncidentStore,
)
from alertbridge.infrastructure.repositories.sqlite_repository import (
    SQLiteIncidentStore,
    SQLiteRepository,
)
from alertbridge.infrastructure.telemetry.otel_exporter import AlertTelemetry, OTELConfig


@dataclass
class AlertBridgeContainer:
    """DI container holding all wired dependencies."""

    config: AlertBridgeConfig
    alert_repository: AlertRepositoryPort
    incident_store: IncidentStorePort
    unit_directory: StaticUnitDirectory
    event_bus: EventBus
    router: EscalationRouter
    ingest_alert: IngestAlert
    write_incident: WriteIncident
    process_alert: ProcessAlert
    recover_incidents: RecoverIncidents
    telemetry: AlertTelemetry
    sqlite_repository: Optional[SQLiteRepository] = None

    def close(self) -> None:
        self.telemetry.shutdown()
        if self.sqlite_repository is not None:
            self.sqlite_repository.close()


def create_container(config: Optional[AlertBridgeConfig] = None) -> AlertBridgeContainer:
    """Create and wire all dependencies."""
    config = config or AlertBridgeConfig()
    delays = tuple(config.retry.delays)

    sqlite_repository = None
    if config.store.backend == "sqlite":
        sqlite_repository = SQLiteRepository(config.store.db_path)
        sqlite_repository.connect()
        alert_repository = sqlite_repository
        incident_store = SQLiteIncidentStore(sqlite_repository)
    elif config.store.backend == "memory":
        alert_repository = InMemoryAlertRepository()
        incident_store = InMemoryIncidentStore()
    else:
        raise ValueError(f"Unknown store backend: {config.store.backend!r}")

    if config.units.directory_path:
        unit_directory = StaticUnitDirectory.from_file(config.units.directory_path)
    else:
        unit_directory = StaticUnitDirectory()

    event_bus = EventBus()
    subscribe_audit_log(event_bus)
    telemetry = AlertTelemetry(
        OTELConfig(
            endpoint=config.telemetry.endpoint,
            service_name=config.telemetry.service_name,
            export_interval=config.telemetry.export_interval,
            insecure=config.telemetry.insecure,
        )
    )
    telemetry.subscribe(event_bus)
    router = EscalationRouter(config.routing.overrides)

    ingest_alert = IngestAlert(alert_repository, unit_directory, retry_delays=delays)
    write_incident = WriteIncident(
        alert_repository, incident_store, unit_directory, retry_delays=delays
    )
    process_alert = ProcessAlert(
        ingest_alert,
        router,
        write_incident,
        alert_repository,
        event_bus=event_bus,
        retry_delays=delays,
    )
    recover_incidents = RecoverIncidents(
        alert_repository,
        incident_store,
        router,
        write_incident,
        event_bus=event_bus,
        retry_delays=delays,
    )

    return AlertBridgeContainer(
        config=config,
        alert_repository=alert_repository,
        incident_store=incident_store,
        unit_directory=unit_directory,
        event_bus=event_bus,
        router=router,
        ingest_alert=ingest_alert,
        write_incident=write_incident,
        process_alert=process_alert,
        recover_incidents=recover_incidents,
        telemetry=telemetry,
        sqlite_repository=sqlite_repository,
    )
