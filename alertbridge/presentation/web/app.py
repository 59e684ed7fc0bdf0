"""
alertbridge Web API

Architectural Intent:
- Lightweight HTTP ingestion endpoint built entirely on Python stdlib (http.server + asyncio).
- No external dependencies (no Flask, FastAPI, aiohttp, etc.).
- Thin presentation adapter: parses JSON, calls the ProcessAlert use case,
  maps domain errors onto HTTP status codes. No domain logic of its own.

API Surface:
    POST /alerts                 -> ingest an alert (201 / 400 / 503)
    POST /alerts/{id}/escalate   -> idempotent retry of the escalation step
    GET  /alerts                 -> list alerts (?processed=true|false&limit=N)
    GET  /alerts/{id}            -> alert record
    GET  /incidents/{id}         -> incident record
    GET  /health                 -> liveness probe

Threading Model:
    The server loop runs in a daemon thread so the caller's asyncio event loop
    stays free.  ThreadingHTTPServer serves each request on its own thread and
    handlers run the async use cases there with asyncio.run().
"""

from __future__ import annotations

import asyncio
import json
import logging
import re
import threading
from http import HTTPStatus
from http.server import ThreadingHTTPServer, BaseHTTPRequestHandler
from typing import Any, Awaitable, Optional
from urllib.parse import parse_qs, urlsplit

from alertbridge.application.dtos.alert_dtos import AlertSubmission
from alertbridge.composition_root import AlertBridgeContainer
from alertbridge.domain.errors import (
    AlertBridgeError,
    NotFoundError,
    TransientStoreError,
    ValidationError,
)

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

_ALERT_PATH_RE = re.compile(r"^/alerts/([^/]+)$")
_ESCALATE_PATH_RE = re.compile(r"^/alerts/([^/]+)/escalate$")
_INCIDENT_PATH_RE = re.compile(r"^/incidents/([^/]+)$")

MAX_BODY_BYTES = 64 * 1024

# returned by _run when an error response has already been sent
_FAILED = object()


def _error_body(exc: AlertBridgeError) -> dict[str, Any]:
    body: dict[str, Any] = {"status": "error", "reason": str(exc)}
    if isinstance(exc, ValidationError):
        body["field"] = exc.field
        body["reason"] = exc.reason
    if isinstance(exc, TransientStoreError):
        body["retryable"] = True
        if exc.alert_id is not None:
            body["alert_id"] = exc.alert_id
    return body


def _status_for(exc: AlertBridgeError) -> HTTPStatus:
    if isinstance(exc, ValidationError):
        return HTTPStatus.BAD_REQUEST
    if isinstance(exc, NotFoundError):
        return HTTPStatus.NOT_FOUND
    if isinstance(exc, TransientStoreError):
        return HTTPStatus.SERVICE_UNAVAILABLE
    return HTTPStatus.INTERNAL_SERVER_ERROR


# ---------------------------------------------------------------------------
# Request handler
# ---------------------------------------------------------------------------

class AlertBridgeRequestHandler(BaseHTTPRequestHandler):
    """HTTP request handler for the alert ingestion API.

    Attributes on the *server* instance (set by AlertBridgeWebApp):
        container:  AlertBridgeContainer -- wired use cases and stores
    """

    def log_message(self, format: str, *args: Any) -> None:  # noqa: A002
        logger.debug("web: %s", format % args)

    @property
    def container(self) -> AlertBridgeContainer:
        return self.server.container  # type: ignore[attr-defined]

    # ---- routing -----------------------------------------------------------

    def do_GET(self) -> None:  # noqa: N802
        """Route GET requests."""
        url = urlsplit(self.path)
        if url.path == "/health":
            self._send_json({"status": "ok"})
        elif url.path == "/alerts":
            self._list_alerts(parse_qs(url.query))
        elif match := _ALERT_PATH_RE.match(url.path):
            self._get_alert(match.group(1))
        elif match := _INCIDENT_PATH_RE.match(url.path):
            self._get_incident(match.group(1))
        else:
            self._send_json({"status": "error", "reason": "not found"}, HTTPStatus.NOT_FOUND)

    def do_POST(self) -> None:  # noqa: N802
        """Route POST requests."""
        path = urlsplit(self.path).path
        if path == "/alerts":
            self._submit_alert()
        elif match := _ESCALATE_PATH_RE.match(path):
            self._escalate(match.group(1))
        else:
            self._send_json({"status": "error", "reason": "not found"}, HTTPStatus.NOT_FOUND)

    # ---- endpoint implementations ------------------------------------------

    def _submit_alert(self) -> None:
        """Accept an alert submission.

        Expected JSON body:
            {"system_type": "HVAC", "event_type": "Temperature",
             "severity": "Critical", "unit_id": "1307", "message": "..."}
        """
        payload = self._read_json()
        if payload is _FAILED:
            return
        try:
            submission = AlertSubmission.from_payload(
                payload,
                max_message_length=self.container.config.ingest.max_message_length,
            )
        except ValidationError as exc:
            self._send_error(exc)
            return

        result = self._run(self.container.process_alert.submit(submission))
        if result is not _FAILED:
            body = {"status": "success", "alert_id": result.alert_id}
            if result.incident_id is not None:
                body["incident_id"] = result.incident_id
            self._send_json(body, HTTPStatus.CREATED)

    def _escalate(self, alert_id: str) -> None:
        result = self._run(self.container.process_alert.escalate(alert_id))
        if result is not _FAILED:
            self._send_json(result.to_dict())

    def _list_alerts(self, query: dict[str, list[str]]) -> None:
        processed: Optional[bool] = None
        if "processed" in query:
            processed = query["processed"][0].lower() in ("true", "1", "yes")
        try:
            limit = int(query.get("limit", ["100"])[0])
        except ValueError:
            self._send_error(ValidationError("limit", "must be an integer"))
            return
        if limit < 1:
            self._send_error(ValidationError("limit", "must be at least 1"))
            return
        alerts = self._run(
            self.container.alert_repository.list_alerts(processed=processed, limit=limit)
        )
        if alerts is not _FAILED:
            self._send_json({"alerts": [a.to_dict() for a in alerts]})

    def _get_alert(self, alert_id: str) -> None:
        alert = self._run(self.container.alert_repository.get(alert_id))
        if alert is _FAILED:
            return
        if alert is None:
            self._send_error(NotFoundError("alert", alert_id))
            return
        self._send_json(alert.to_dict())

    def _get_incident(self, incident_id: str) -> None:
        incident = self._run(self.container.incident_store.get(incident_id))
        if incident is _FAILED:
            return
        if incident is None:
            self._send_error(NotFoundError("incident", incident_id))
            return
        self._send_json(incident.to_dict())

    # ---- helpers -----------------------------------------------------------

    def _run(self, coro: Awaitable[Any]) -> Any:
        """Run a use case coroutine; on failure send the error response and return _FAILED."""
        try:
            return asyncio.run(coro)
        except AlertBridgeError as exc:
            self._send_error(exc)
        except ValueError as exc:
            logger.warning("Request rejected: %s", exc)
            self._send_json(
                {"status": "error", "reason": str(exc)}, HTTPStatus.CONFLICT
            )
        except Exception:
            logger.exception("Unhandled error serving %s %s", self.command, self.path)
            self._send_json(
                {"status": "error", "reason": "internal error"},
                HTTPStatus.INTERNAL_SERVER_ERROR,
            )
        return _FAILED

    def _read_json(self) -> Any:
        try:
            content_length = int(self.headers.get("Content-Length", 0))
        except ValueError:
            content_length = -1
        if content_length < 0 or content_length > MAX_BODY_BYTES:
            self._send_error(ValidationError("body", "invalid Content-Length"))
            return _FAILED
        raw = self.rfile.read(content_length)
        try:
            return json.loads(raw) if raw else {}
        except (json.JSONDecodeError, UnicodeDecodeError):
            self._send_error(ValidationError("body", "invalid JSON body"))
            return _FAILED

    def _send_error(self, exc: AlertBridgeError) -> None:
        status = _status_for(exc)
        if status >= HTTPStatus.INTERNAL_SERVER_ERROR:
            logger.error("Request failed: %s", exc)
        self._send_json(_error_body(exc), status)

    def _send_json(self, data: Any, status: HTTPStatus = HTTPStatus.OK) -> None:
        """Serialize *data* as JSON and send it as the HTTP response."""
        body = json.dumps(data, default=str).encode("utf-8")
        self.send_response(status)
        self.send_header("Content-Type", "application/json")
        self.send_header("Content-Length", str(len(body)))
        self.end_headers()
        self.wfile.write(body)


# ---------------------------------------------------------------------------
# Web application wrapper
# ---------------------------------------------------------------------------

class AlertBridgeWebApp:
    """Async-friendly web server for alert ingestion.

    Usage::

        app = AlertBridgeWebApp(container)
        await app.start("0.0.0.0", 8080)
        # ... later ...
        app.stop()
    """

    def __init__(self, container: AlertBridgeContainer) -> None:
        self.container = container
        self._server: Optional[ThreadingHTTPServer] = None
        self._thread: Optional[threading.Thread] = None

    @property
    def port(self) -> int:
        assert self._server is not None
        return self._server.server_address[1]

    async def start(self, host: str = "127.0.0.1", port: int = 8080) -> None:
        """Start the web server in a background thread."""
        self._server = ThreadingHTTPServer((host, port), AlertBridgeRequestHandler)
        self._server.daemon_threads = True
        # Attach application state to the server so handlers can access it.
        self._server.container = self.container  # type: ignore[attr-defined]

        self._thread = threading.Thread(
            target=self._server.serve_forever,
            daemon=True,
            name="alertbridge-web",
        )
        self._thread.start()
        logger.info("alertbridge API started on http://%s:%d", host, self.port)

    def stop(self) -> None:
        """Shut down the web server gracefully."""
        if self._server is not None:
            self._server.shutdown()
            self._server.server_close()
            logger.info("alertbridge API stopped")
        if self._thread is not None:
            self._thread.join(timeout=5)
