"""
Write Incident Use Case

Architectural Intent:
- Incident writer: creates at most one incident per escalated alert
- Links the alert to its incident through a compare-and-set on the processed flag
- Safe to re-run after a crash or a caller retry

Write Protocol:
1. Re-read the alert; already processed -> short-circuit with the existing incident
2. An incident already pointing at the alert (orphan) -> repair the alert, no new incident
3. Otherwise get-or-create the incident (store is unique on source_alert_ref)
4. Compare-and-set processed=false -> true; a lost race is reported as already processed
"""

import logging

from alertbridge.application.dtos.alert_dtos import WriteOutcome
from alertbridge.application.retry import DEFAULT_RETRY_DELAYS, retry_transient
from alertbridge.domain.entities.alert import Alert, AlertStatus
from alertbridge.domain.entities.incident import Incident
from alertbridge.domain.errors import InvariantViolation, NotFoundError
from alertbridge.domain.ports.alert_repository_port import AlertRepositoryPort
from alertbridge.domain.ports.incident_store_port import IncidentStorePort
from alertbridge.domain.ports.unit_directory_port import UnitDirectoryPort
from alertbridge.domain.services.escalation_router import EscalationDecision
from alertbridge.domain.value_objects.unit import Unit

logger = logging.getLogger(__name__)


class WriteIncident:
    def __init__(
        self,
        alert_repository: AlertRepositoryPort,
        incident_store: IncidentStorePort,
        unit_directory: UnitDirectoryPort,
        retry_delays: tuple[float, ...] = DEFAULT_RETRY_DELAYS,
    ):
        self.alert_repository = alert_repository
        self.incident_store = incident_store
        self.unit_directory = unit_directory
        self.retry_delays = retry_delays

    async def execute(self, alert_id: str, decision: EscalationDecision) -> WriteOutcome:
        if not decision.should_escalate:
            raise ValueError("WriteIncident requires an escalating decision")

        alert = await self._load(alert_id)
        if alert.processed:
            return self._already_processed(alert)

        if alert.status == AlertStatus.RECEIVED:
            await self._retry(
                lambda: self.alert_repository.record_evaluation(
                    alert_id, AlertStatus.ESCALATING
                ),
                f"record escalation for {alert_id}",
            )
            alert = await self._load(alert_id)
            if alert.processed:
                return self._already_processed(alert)
        if alert.status != AlertStatus.ESCALATING:
            raise ValueError(
                f"Alert {alert_id} is {alert.status.name} and cannot be escalated"
            )

        existing = await self._retry(
            lambda: self.incident_store.find_by_source_alert(alert_id),
            f"look up incident for {alert_id}",
        )
        if existing is not None:
            logger.warning(
                "Orphaned incident %s found for alert %s, repairing link",
                existing.id,
                alert_id,
                extra={"alert_id": alert_id, "incident_id": existing.id},
            )
            return await self._link(alert, existing, repaired=True)

        unit = await self._unit_for(alert)
        candidate = Incident.for_alert(
            alert,
            unit,
            priority=decision.priority,
            assignment_group=decision.assignment_group,
        )
        incident, created = await self._retry(
            lambda: self.incident_store.create_for_alert(candidate),
            f"create incident for {alert_id}",
        )
        if created:
            logger.info(
                "Incident created: %s for alert %s [priority=%d, group=%s]",
                incident.id,
                alert_id,
                incident.priority,
                incident.assignment_group,
                extra={"alert_id": alert_id, "incident_id": incident.id},
            )
        return await self._link(alert, incident, repaired=not created)

    async def _link(self, alert: Alert, incident: Incident, repaired: bool) -> WriteOutcome:
        won = await self._retry(
            lambda: self.alert_repository.mark_processed(alert.id, incident.id),
            f"mark alert {alert.id} processed",
        )
        if won:
            return WriteOutcome(
                alert_id=alert.id,
                incident_id=incident.id,
                created=not repaired,
                repaired=repaired,
            )

        current = await self._load(alert.id)
        if not current.processed:
            raise InvariantViolation(
                f"Alert {alert.id} could not be marked processed and is still unprocessed"
            )
        return self._already_processed(current)

    def _already_processed(self, alert: Alert) -> WriteOutcome:
        violation = InvariantViolation(
            f"Alert {alert.id} already processed as {alert.incident_ref}; skipping"
        )
        logger.warning(
            "%s", violation, extra={"alert_id": alert.id, "incident_id": alert.incident_ref}
        )
        return WriteOutcome(
            alert_id=alert.id,
            incident_id=alert.incident_ref,
            already_processed=True,
        )

    async def _unit_for(self, alert: Alert) -> Unit:
        try:
            return await self.unit_directory.resolve(alert.unit_ref)
        except NotFoundError:
            logger.warning(
                "Unit %s no longer in directory; incident text uses the bare id",
                alert.unit_ref,
                extra={"alert_id": alert.id},
            )
            return Unit(unit_id=alert.unit_ref)

    async def _load(self, alert_id: str) -> Alert:
        alert = await self._retry(
            lambda: self.alert_repository.get(alert_id), f"load alert {alert_id}"
        )
        if alert is None:
            raise NotFoundError("alert", alert_id)
        return alert

    async def _retry(self, operation, description: str):
        return await retry_transient(
            operation, retry_delays=self.retry_delays, description=description
        )
