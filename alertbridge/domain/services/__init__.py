"""
Domain Services Package

Architectural Intent:
- Contains domain services implementing business logic
- Services are pure: they read aggregates and return decisions
"""

from alertbridge.domain.services.escalation_router import (
    DEFAULT_ASSIGNMENT_GROUP,
    EscalationDecision,
    EscalationRouter,
    assignment_group_for,
    priority_for,
)

__all__ = [
    "DEFAULT_ASSIGNMENT_GROUP",
    "EscalationDecision",
    "EscalationRouter",
    "assignment_group_for",
    "priority_for",
]
