"""
SQLite Repository

Architectural Intent:
- Persistent storage backend using SQLite (stdlib, zero external deps)
- Stores alerts and the incidents created from them
- Implements AlertRepositoryPort; SQLiteIncidentStore exposes the incidents
  table as IncidentStorePort over the same connection
- Uses WAL mode for concurrent read/write support

Design Decisions:
- Single database file at configurable path (default: alertbridge.db)
- Auto-creates tables on first use
- UNIQUE(source_alert_ref) makes incident creation get-or-create per alert
- mark_processed is an UPDATE ... WHERE processed = 0 compare-and-set
- One shared connection (check_same_thread=False) serialized by a lock
- sqlite3.OperationalError (locked/unavailable database) becomes TransientStoreError
- Timestamps stored as ISO 8601 strings
"""

from __future__ import annotations
import sqlite3
import logging
import threading
from contextlib import contextmanager
from datetime import datetime
from typing import Iterator, Optional

from alertbridge.domain.entities.alert import Alert, AlertStatus
from alertbridge.domain.entities.incident import Incident
from alertbridge.domain.errors import TransientStoreError
from alertbridge.domain.value_objects.alert_classification import (
    AlertType,
    ExternalSystem,
    Severity,
)

logger = logging.getLogger(__name__)


class SQLiteRepository:
    """Persistent alert and incident storage using SQLite."""

    def __init__(self, db_path: str = "alertbridge.db"):
        self._db_path = db_path
        self._conn: Optional[sqlite3.Connection] = None
        self._lock = threading.Lock()

    def connect(self) -> None:
        """Open database connection and create tables."""
        self._conn = sqlite3.connect(
            self._db_path,
            check_same_thread=False,
        )
        self._conn.execute("PRAGMA journal_mode=WAL")
        self._conn.execute("PRAGMA foreign_keys=ON")
        self._conn.row_factory = sqlite3.Row
        self._create_tables()
        logger.info("SQLite repository connected: %s", self._db_path)

    def close(self) -> None:
        """Close database connection."""
        if self._conn:
            self._conn.close()
            self._conn = None

    def _create_tables(self) -> None:
        """Create tables if they don't exist."""
        assert self._conn is not None
        self._conn.executescript("""
            CREATE TABLE IF NOT EXISTS alerts (
                id TEXT PRIMARY KEY,
                external_system TEXT NOT NULL,
                alert_type TEXT NOT NULL,
                severity TEXT NOT NULL,
                unit_ref TEXT NOT NULL,
                message TEXT NOT NULL,
                received_at TEXT NOT NULL,
                status TEXT NOT NULL,
                processed INTEGER NOT NULL DEFAULT 0,
                incident_ref TEXT
            );

            CREATE TABLE IF NOT EXISTS incidents (
                id TEXT PRIMARY KEY,
                short_description TEXT NOT NULL,
                description TEXT NOT NULL,
                priority INTEGER NOT NULL,
                assignment_group TEXT NOT NULL,
                source_alert_ref TEXT NOT NULL UNIQUE REFERENCES alerts(id),
                created_at TEXT NOT NULL
            );

            CREATE INDEX IF NOT EXISTS idx_alerts_processed ON alerts(processed);
            CREATE INDEX IF NOT EXISTS idx_alerts_received ON alerts(received_at);
            CREATE INDEX IF NOT EXISTS idx_alerts_pending ON alerts(processed, status, received_at);
        """)

    @contextmanager
    def _cursor(self) -> Iterator[sqlite3.Connection]:
        if self._conn is None:
            raise TransientStoreError("SQLite repository is not connected")
        with self._lock:
            try:
                yield self._conn
                self._conn.commit()
            except sqlite3.OperationalError as exc:
                self._conn.rollback()
                raise TransientStoreError(f"SQLite unavailable: {exc}") from exc
            except Exception:
                self._conn.rollback()
                raise

    # -- Alerts --------------------------------------------------------------

    async def add(self, alert: Alert) -> None:
        """Persist a newly received alert."""
        with self._cursor() as conn:
            conn.execute(
                """INSERT INTO alerts
                   (id, external_system, alert_type, severity, unit_ref, message,
                    received_at, status, processed, incident_ref)
                   VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?)""",
                (alert.id, alert.external_system.value, alert.alert_type.value,
                 alert.severity.value, alert.unit_ref, alert.message,
                 alert.received_at.isoformat(), alert.status.name,
                 int(alert.processed), alert.incident_ref),
            )

    async def get(self, alert_id: str) -> Optional[Alert]:
        with self._cursor() as conn:
            row = conn.execute(
                "SELECT * FROM alerts WHERE id = ?", (alert_id,)
            ).fetchone()
        return _row_to_alert(row) if row else None

    async def record_evaluation(self, alert_id: str, status: AlertStatus) -> bool:
        """Move a RECEIVED alert to EVALUATED or ESCALATING."""
        if status not in (AlertStatus.EVALUATED, AlertStatus.ESCALATING):
            raise ValueError(f"Not an evaluation outcome: {status.name}")
        with self._cursor() as conn:
            cursor = conn.execute(
                "UPDATE alerts SET status = ? WHERE id = ? AND status = ?",
                (status.name, alert_id, AlertStatus.RECEIVED.name),
            )
        return cursor.rowcount == 1

    async def mark_processed(self, alert_id: str, incident_id: str) -> bool:
        """Compare-and-set: only the first writer seeing processed = 0 wins."""
        with self._cursor() as conn:
            cursor = conn.execute(
                """UPDATE alerts
                   SET processed = 1, incident_ref = ?, status = ?
                   WHERE id = ? AND processed = 0""",
                (incident_id, AlertStatus.PROCESSED.name, alert_id),
            )
        return cursor.rowcount == 1

    async def list_alerts(
        self, processed: Optional[bool] = None, limit: int = 100
    ) -> list[Alert]:
        """List alerts newest first, optionally filtered on processed."""
        _check_limit(limit)
        with self._cursor() as conn:
            if processed is None:
                rows = conn.execute(
                    "SELECT * FROM alerts ORDER BY received_at DESC LIMIT ?",
                    (limit,),
                ).fetchall()
            else:
                rows = conn.execute(
                    "SELECT * FROM alerts WHERE processed = ? ORDER BY received_at DESC LIMIT ?",
                    (int(processed), limit),
                ).fetchall()
        return [_row_to_alert(r) for r in rows]

    async def list_pending(self, limit: int = 1000) -> list[Alert]:
        """Unprocessed RECEIVED/ESCALATING alerts, oldest first."""
        _check_limit(limit)
        with self._cursor() as conn:
            rows = conn.execute(
                """SELECT * FROM alerts
                   WHERE processed = 0 AND status IN (?, ?)
                   ORDER BY received_at ASC LIMIT ?""",
                (AlertStatus.RECEIVED.name, AlertStatus.ESCALATING.name, limit),
            ).fetchall()
        return [_row_to_alert(r) for r in rows]

    # -- Incidents -----------------------------------------------------------

    async def create_for_alert(self, incident: Incident) -> tuple[Incident, bool]:
        """Insert *incident* unless its source alert already has one."""
        with self._cursor() as conn:
            try:
                conn.execute(
                    """INSERT INTO incidents
                       (id, short_description, description, priority,
                        assignment_group, source_alert_ref, created_at)
                       VALUES (?, ?, ?, ?, ?, ?, ?)""",
                    (incident.id, incident.short_description, incident.description,
                     incident.priority, incident.assignment_group,
                     incident.source_alert_ref, incident.created_at.isoformat()),
                )
                return incident, True
            except sqlite3.IntegrityError:
                row = conn.execute(
                    "SELECT * FROM incidents WHERE source_alert_ref = ?",
                    (incident.source_alert_ref,),
                ).fetchone()
                if row is None:
                    raise
                logger.info(
                    "Incident for alert %s already exists: %s",
                    incident.source_alert_ref,
                    row["id"],
                )
                return _row_to_incident(row), False

    async def get_incident(self, incident_id: str) -> Optional[Incident]:
        with self._cursor() as conn:
            row = conn.execute(
                "SELECT * FROM incidents WHERE id = ?", (incident_id,)
            ).fetchone()
        return _row_to_incident(row) if row else None

    async def find_by_source_alert(self, alert_id: str) -> Optional[Incident]:
        with self._cursor() as conn:
            row = conn.execute(
                "SELECT * FROM incidents WHERE source_alert_ref = ?", (alert_id,)
            ).fetchone()
        return _row_to_incident(row) if row else None

    # -- Stats ---------------------------------------------------------------

    def get_incident_count(self) -> int:
        """Get total incident count."""
        with self._cursor() as conn:
            row = conn.execute("SELECT COUNT(*) FROM incidents").fetchone()
        return row[0]


class SQLiteIncidentStore:
    """IncidentStorePort view over a shared SQLiteRepository."""

    def __init__(self, repository: SQLiteRepository) -> None:
        self._repository = repository

    async def create_for_alert(self, incident: Incident) -> tuple[Incident, bool]:
        return await self._repository.create_for_alert(incident)

    async def get(self, incident_id: str) -> Optional[Incident]:
        return await self._repository.get_incident(incident_id)

    async def find_by_source_alert(self, alert_id: str) -> Optional[Incident]:
        return await self._repository.find_by_source_alert(alert_id)


def _check_limit(limit: int) -> None:
    if limit < 1:
        raise ValueError(f"limit must be at least 1, got {limit}")


def _row_to_alert(row: sqlite3.Row) -> Alert:
    return Alert(
        id=row["id"],
        external_system=ExternalSystem(row["external_system"]),
        alert_type=AlertType(row["alert_type"]),
        severity=Severity(row["severity"]),
        unit_ref=row["unit_ref"],
        message=row["message"],
        received_at=datetime.fromisoformat(row["received_at"]),
        status=AlertStatus[row["status"]],
        processed=bool(row["processed"]),
        incident_ref=row["incident_ref"],
    )


def _row_to_incident(row: sqlite3.Row) -> Incident:
    return Incident(
        id=row["id"],
        short_description=row["short_description"],
        description=row["description"],
        priority=row["priority"],
        assignment_group=row["assignment_group"],
        source_alert_ref=row["source_alert_ref"],
        created_at=datetime.fromisoformat(row["created_at"]),
    )
