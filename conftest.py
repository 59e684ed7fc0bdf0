"""Global test configuration.

Shared fixtures: in-memory stores, the sample unit directory, and a wired
ProcessAlert pipeline with retry delays disabled.
"""

import pytest

from alertbridge.application.use_cases.ingest_alert import IngestAlert
from alertbridge.application.use_cases.process_alert import ProcessAlert
from alertbridge.application.use_cases.write_incident import WriteIncident
from alertbridge.domain.services.escalation_router import EscalationRouter
from alertbridge.infrastructure.adapters.unit_directory_adapter import StaticUnitDirectory
from alertbridge.infrastructure.repositories.in_memory_repository import (
    InMemoryAlertRepository,
    InMemoryIncidentStore,
)

NO_DELAYS: tuple[float, ...] = ()


@pytest.fixture
def alert_repo():
    return InMemoryAlertRepository()


@pytest.fixture
def incident_store():
    return InMemoryIncidentStore()


@pytest.fixture
def units():
    return StaticUnitDirectory()


@pytest.fixture
def router():
    return EscalationRouter()


@pytest.fixture
def writer(alert_repo, incident_store, units):
    return WriteIncident(alert_repo, incident_store, units, retry_delays=NO_DELAYS)


@pytest.fixture
def pipeline(alert_repo, units, router, writer):
    ingest = IngestAlert(alert_repo, units, retry_delays=NO_DELAYS)
    return ProcessAlert(ingest, router, writer, alert_repo, retry_delays=NO_DELAYS)


@pytest.fixture
def hvac_payload():
    return {
        "system_type": "HVAC",
        "event_type": "Temperature",
        "severity": "Critical",
        "unit_id": "1307",
        "message": "85°F > 78°F",
    }
