"""
Alert Repository Port

Architectural Intent:
- Port interface for persisting Alert aggregates
- mark_processed is the compare-and-set guarding the single-writer processed flag
- Implementations raise TransientStoreError when the backing store is unavailable

Design Decisions:
- Uses Protocol for structural typing (no inheritance needed)
- Conditional updates return bool so callers can detect lost races without errors
"""

from typing import Optional, Protocol, runtime_checkable

from alertbridge.domain.entities.alert import Alert, AlertStatus


@runtime_checkable
class AlertRepositoryPort(Protocol):
    """Port for alert persistence."""

    async def add(self, alert: Alert) -> None:
        """Persist a newly received alert."""
        ...

    async def get(self, alert_id: str) -> Optional[Alert]:
        """Load an alert, or None if unknown."""
        ...

    async def record_evaluation(self, alert_id: str, status: AlertStatus) -> bool:
        """Move a RECEIVED alert to EVALUATED or ESCALATING. False if not RECEIVED."""
        ...

    async def mark_processed(self, alert_id: str, incident_id: str) -> bool:
        """Set processed/incident_ref only if still unprocessed. False if the race was lost."""
        ...

    async def list_alerts(
        self, processed: Optional[bool] = None, limit: int = 100
    ) -> list[Alert]:
        """List alerts, newest first, optionally filtered on the processed flag."""
        ...

    async def list_pending(self, limit: int = 1000) -> list[Alert]:
        """Unprocessed RECEIVED/ESCALATING alerts, oldest first. Never returns EVALUATED ones."""
        ...
