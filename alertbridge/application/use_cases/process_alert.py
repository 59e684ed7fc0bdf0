"""
Process Alert Use Case

Architectural Intent:
- Explicit call chain replacing an implicit insert trigger:
  ingest -> classify -> record evaluation -> write incident
- Each submission is an independent, short-lived unit of work
- Lifecycle events collected on the Alert aggregate are published once the chain ends,
  or before a TransientStoreError propagates

Retrying:
- escalate() re-runs only the escalation step for an existing alert; processed
  alerts short-circuit to their incident and never re-enter ESCALATING
"""

import logging
from typing import Optional

from alertbridge.application.dtos.alert_dtos import AlertSubmission, SubmissionResult
from alertbridge.application.retry import DEFAULT_RETRY_DELAYS, retry_transient
from alertbridge.application.use_cases.ingest_alert import IngestAlert
from alertbridge.application.use_cases.write_incident import WriteIncident
from alertbridge.domain.entities.alert import Alert, AlertStatus
from alertbridge.domain.errors import NotFoundError, TransientStoreError
from alertbridge.domain.ports.alert_repository_port import AlertRepositoryPort
from alertbridge.domain.ports.event_bus_port import EventBusPort
from alertbridge.domain.services.escalation_router import EscalationRouter

logger = logging.getLogger(__name__)


class ProcessAlert:
    def __init__(
        self,
        ingest: IngestAlert,
        router: EscalationRouter,
        writer: WriteIncident,
        alert_repository: AlertRepositoryPort,
        event_bus: Optional[EventBusPort] = None,
        retry_delays: tuple[float, ...] = DEFAULT_RETRY_DELAYS,
    ):
        self.ingest = ingest
        self.router = router
        self.writer = writer
        self.alert_repository = alert_repository
        self.event_bus = event_bus
        self.retry_delays = retry_delays

    async def submit(self, submission: AlertSubmission) -> SubmissionResult:
        alert = await self.ingest.execute(submission)
        try:
            return await self._evaluate_and_escalate(alert)
        except TransientStoreError as exc:
            # the alert is stored; the caller retries via escalate(alert_id)
            raise TransientStoreError(str(exc), alert_id=alert.id) from exc

    async def escalate(self, alert_id: str) -> SubmissionResult:
        alert = await retry_transient(
            lambda: self.alert_repository.get(alert_id),
            retry_delays=self.retry_delays,
            description=f"load alert {alert_id}",
        )
        if alert is None:
            raise NotFoundError("alert", alert_id)
        if alert.processed:
            logger.info(
                "Escalation retry for processed alert %s returns incident %s",
                alert_id,
                alert.incident_ref,
                extra={"alert_id": alert_id},
            )
            return SubmissionResult(
                alert_id=alert_id,
                escalated=True,
                incident_id=alert.incident_ref,
                outcome="already_processed",
            )
        return await self._evaluate_and_escalate(alert)

    async def _evaluate_and_escalate(self, alert: Alert) -> SubmissionResult:
        decision = self.router.classify(alert)

        outcome = None
        try:
            if alert.status == AlertStatus.RECEIVED:
                evaluated = alert.evaluate(decision.should_escalate, decision.assignment_group)
                await retry_transient(
                    lambda: self.alert_repository.record_evaluation(evaluated.id, evaluated.status),
                    retry_delays=self.retry_delays,
                    description=f"record evaluation for {alert.id}",
                )
                alert = evaluated
            if decision.should_escalate:
                outcome = await self.writer.execute(alert.id, decision)
        except TransientStoreError:
            # events for the steps that did persist still go out
            await self._publish(alert)
            raise

        if outcome is None:
            logger.info(
                "Alert %s stored without escalation (severity=%s)",
                alert.id,
                alert.severity.value,
                extra={"alert_id": alert.id},
            )
            await self._publish(alert)
            return SubmissionResult(alert_id=alert.id, escalated=False)

        if not outcome.already_processed and alert.status == AlertStatus.ESCALATING:
            alert = alert.mark_processed(outcome.incident_id)
        await self._publish(alert)
        return SubmissionResult(
            alert_id=alert.id,
            escalated=True,
            incident_id=outcome.incident_id,
            outcome=outcome.label,
        )

    async def _publish(self, alert: Alert) -> None:
        if self.event_bus is not None and alert.domain_events:
            await self.event_bus.publish(list(alert.domain_events))
