"""
In-Memory Repositories

Architectural Intent:
- Dict-backed implementations of AlertRepositoryPort and IncidentStorePort
- Default backend for development, tests and single-process demos
- A lock makes each conditional update atomic across request threads
"""

from __future__ import annotations

import threading
from dataclasses import replace
from typing import Optional

from alertbridge.domain.entities.alert import Alert, AlertStatus
from alertbridge.domain.entities.incident import Incident

PENDING_STATUSES = (AlertStatus.RECEIVED, AlertStatus.ESCALATING)


def _check_limit(limit: int) -> None:
    if limit < 1:
        raise ValueError(f"limit must be at least 1, got {limit}")


class InMemoryAlertRepository:
    """Alert storage in a process-local dictionary."""

    def __init__(self) -> None:
        self._alerts: dict[str, Alert] = {}
        self._lock = threading.Lock()

    async def add(self, alert: Alert) -> None:
        with self._lock:
            if alert.id in self._alerts:
                raise ValueError(f"Alert {alert.id} already stored")
            self._alerts[alert.id] = alert.clear_events()

    async def get(self, alert_id: str) -> Optional[Alert]:
        with self._lock:
            return self._alerts.get(alert_id)

    async def record_evaluation(self, alert_id: str, status: AlertStatus) -> bool:
        if status not in (AlertStatus.EVALUATED, AlertStatus.ESCALATING):
            raise ValueError(f"Not an evaluation outcome: {status.name}")
        with self._lock:
            alert = self._alerts.get(alert_id)
            if alert is None or alert.status != AlertStatus.RECEIVED:
                return False
            self._alerts[alert_id] = replace(alert, status=status)
            return True

    async def mark_processed(self, alert_id: str, incident_id: str) -> bool:
        with self._lock:
            alert = self._alerts.get(alert_id)
            if alert is None or alert.processed:
                return False
            self._alerts[alert_id] = replace(
                alert,
                status=AlertStatus.PROCESSED,
                processed=True,
                incident_ref=incident_id,
            )
            return True

    async def list_alerts(
        self, processed: Optional[bool] = None, limit: int = 100
    ) -> list[Alert]:
        _check_limit(limit)
        with self._lock:
            alerts = [
                a for a in self._alerts.values()
                if processed is None or a.processed == processed
            ]
        alerts.sort(key=lambda a: a.received_at, reverse=True)
        return alerts[:limit]

    async def list_pending(self, limit: int = 1000) -> list[Alert]:
        _check_limit(limit)
        with self._lock:
            alerts = [
                a for a in self._alerts.values()
                if not a.processed and a.status in PENDING_STATUSES
            ]
        alerts.sort(key=lambda a: a.received_at)
        return alerts[:limit]


class InMemoryIncidentStore:
    """Incident storage keyed by id, unique on source alert."""

    def __init__(self) -> None:
        self._incidents: dict[str, Incident] = {}
        self._by_alert: dict[str, str] = {}
        self._lock = threading.Lock()

    async def create_for_alert(self, incident: Incident) -> tuple[Incident, bool]:
        with self._lock:
            existing_id = self._by_alert.get(incident.source_alert_ref)
            if existing_id is not None:
                return self._incidents[existing_id], False
            self._incidents[incident.id] = incident
            self._by_alert[incident.source_alert_ref] = incident.id
            return incident, True

    async def get(self, incident_id: str) -> Optional[Incident]:
        with self._lock:
            return self._incidents.get(incident_id)

    async def find_by_source_alert(self, alert_id: str) -> Optional[Incident]:
        with self._lock:
            incident_id = self._by_alert.get(alert_id)
            return self._incidents.get(incident_id) if incident_id else None

    @property
    def count(self) -> int:
        return len(self._incidents)
