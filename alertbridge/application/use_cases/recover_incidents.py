"""
Recover Incidents Use Case

Architectural Intent:
- Recovery pass for crashes between incident creation and the alert update
- Finds unprocessed alerts whose incident already exists and repairs the link
- Optionally re-drives escalation-eligible alerts that never got an incident

Design Decisions:
- Repair and re-drive both go through WriteIncident, so the at-most-once
  guarantee has a single implementation
- Only RECEIVED/ESCALATING alerts are scanned, oldest first; EVALUATED
  alerts never take a slot in the scan limit
- A RECEIVED alert that does not escalate is recorded as EVALUATED so it
  leaves the scan set
- Every repaired or re-driven alert publishes AlertProcessedEvent
"""

import logging
from typing import Optional

from alertbridge.application.dtos.alert_dtos import RecoveryReport
from alertbridge.application.retry import DEFAULT_RETRY_DELAYS, retry_transient
from alertbridge.application.use_cases.write_incident import WriteIncident
from alertbridge.domain.entities.alert import AlertStatus
from alertbridge.domain.events.alert_events import AlertProcessedEvent
from alertbridge.domain.ports.alert_repository_port import AlertRepositoryPort
from alertbridge.domain.ports.event_bus_port import EventBusPort
from alertbridge.domain.ports.incident_store_port import IncidentStorePort
from alertbridge.domain.services.escalation_router import EscalationRouter

logger = logging.getLogger(__name__)


class RecoverIncidents:
    def __init__(
        self,
        alert_repository: AlertRepositoryPort,
        incident_store: IncidentStorePort,
        router: EscalationRouter,
        writer: WriteIncident,
        event_bus: Optional[EventBusPort] = None,
        retry_delays: tuple[float, ...] = DEFAULT_RETRY_DELAYS,
    ):
        self.alert_repository = alert_repository
        self.incident_store = incident_store
        self.router = router
        self.writer = writer
        self.event_bus = event_bus
        self.retry_delays = retry_delays

    async def execute(self, redrive: bool = False, limit: int = 1000) -> RecoveryReport:
        pending = await retry_transient(
            lambda: self.alert_repository.list_pending(limit=limit),
            retry_delays=self.retry_delays,
            description="list pending alerts",
        )
        repaired = 0
        redriven = 0

        for alert in pending:
            decision = self.router.classify(alert)
            if not decision.should_escalate:
                if alert.status == AlertStatus.RECEIVED:
                    await retry_transient(
                        lambda: self.alert_repository.record_evaluation(
                            alert.id, AlertStatus.EVALUATED
                        ),
                        retry_delays=self.retry_delays,
                        description=f"record evaluation for {alert.id}",
                    )
                continue

            orphan = await retry_transient(
                lambda: self.incident_store.find_by_source_alert(alert.id),
                retry_delays=self.retry_delays,
                description=f"look up incident for {alert.id}",
            )
            if orphan is None and not redrive:
                continue

            outcome = await self.writer.execute(alert.id, decision)
            if outcome.repaired:
                repaired += 1
            elif outcome.created:
                redriven += 1
            else:
                continue
            if self.event_bus is not None:
                await self.event_bus.publish(
                    [AlertProcessedEvent(aggregate_id=alert.id, incident_id=outcome.incident_id)]
                )

        report = RecoveryReport(scanned=len(pending), repaired=repaired, redriven=redriven)
        logger.info(
            "Recovery pass: scanned=%d repaired=%d redriven=%d",
            report.scanned, report.repaired, report.redriven,
        )
        return report
