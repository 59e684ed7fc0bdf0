"""
Ingest Alert Use Case

Architectural Intent:
- Ingress handler: turns a validated submission into a persisted RECEIVED alert
- Resolves the unit through the unit directory before anything is written
- An unresolved unit is a caller error: an incident with no location is not actionable
"""

import logging

from alertbridge.application.dtos.alert_dtos import AlertSubmission
from alertbridge.application.retry import DEFAULT_RETRY_DELAYS, retry_transient
from alertbridge.domain.entities.alert import Alert
from alertbridge.domain.errors import NotFoundError, ValidationError
from alertbridge.domain.ports.alert_repository_port import AlertRepositoryPort
from alertbridge.domain.ports.unit_directory_port import UnitDirectoryPort

logger = logging.getLogger(__name__)


class IngestAlert:
    def __init__(
        self,
        alert_repository: AlertRepositoryPort,
        unit_directory: UnitDirectoryPort,
        retry_delays: tuple[float, ...] = DEFAULT_RETRY_DELAYS,
    ):
        self.alert_repository = alert_repository
        self.unit_directory = unit_directory
        self.retry_delays = retry_delays

    async def execute(self, submission: AlertSubmission) -> Alert:
        try:
            unit = await self.unit_directory.resolve(submission.unit_id)
        except NotFoundError as exc:
            raise ValidationError("unit_id", str(exc)) from exc

        alert = Alert.receive(
            external_system=submission.external_system,
            alert_type=submission.alert_type,
            severity=submission.severity,
            unit_ref=unit.unit_id,
            message=submission.message,
        )
        await retry_transient(
            lambda: self.alert_repository.add(alert),
            retry_delays=self.retry_delays,
            description=f"persist alert {alert.id}",
        )
        logger.info(
            "Alert received: %s [%s/%s, severity=%s, unit=%s]",
            alert.id,
            alert.external_system.value,
            alert.alert_type.value,
            alert.severity.value,
            alert.unit_ref,
            extra={"alert_id": alert.id},
        )
        return alert
