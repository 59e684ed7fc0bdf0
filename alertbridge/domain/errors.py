"""
Domain Errors

Architectural Intent:
- Single exception hierarchy shared by every layer
- Each error states whether the caller can fix it or should retry later
- Errors serialize to a flat dict for the web and CLI adapters

Taxonomy:
- ValidationError: bad submission, nothing persisted, caller resubmits
- NotFoundError: unknown unit or record
- TransientStoreError: backing store unavailable, safe to retry
- InvariantViolation: already-processed alert reached the incident writer
"""

from __future__ import annotations
from typing import Any, Optional


class AlertBridgeError(Exception):
    """Base class for all alertbridge errors."""

    caller_fixable: bool = False
    retryable: bool = False

    def to_dict(self) -> dict[str, Any]:
        return {
            "error": self.__class__.__name__,
            "reason": str(self),
            "caller_fixable": self.caller_fixable,
            "retryable": self.retryable,
        }


class ValidationError(AlertBridgeError):
    caller_fixable = True

    def __init__(self, field: str, reason: str) -> None:
        super().__init__(f"{field}: {reason}")
        self.field = field
        self.reason = reason

    def to_dict(self) -> dict[str, Any]:
        data = super().to_dict()
        data["field"] = self.field
        data["reason"] = self.reason
        return data


class NotFoundError(AlertBridgeError):
    caller_fixable = True

    def __init__(self, resource: str, identifier: str) -> None:
        super().__init__(f"{resource} '{identifier}' not found")
        self.resource = resource
        self.identifier = identifier


class TransientStoreError(AlertBridgeError):
    retryable = True

    def __init__(self, message: str, alert_id: Optional[str] = None) -> None:
        super().__init__(message)
        self.alert_id = alert_id

    def to_dict(self) -> dict[str, Any]:
        data = super().to_dict()
        if self.alert_id is not None:
            data["alert_id"] = self.alert_id
        return data


class InvariantViolation(AlertBridgeError):
    pass
