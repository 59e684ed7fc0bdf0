"""
Escalation Router

Architectural Intent:
- Decides whether an alert becomes an incident, at which priority, and for which team
- Pure domain service: no I/O, no mutation, no ports
- Routing is data (a lookup table) so new alert types need no code change

Routing Table:
    Temperature, EquipmentFailure, HVAC  -> HVAC Specialists
    Leak, Water                          -> Plumbing Team
    Smoke, Fire                          -> Emergency Response
    Electrical, Power                    -> Electrician Group
    anything else                        -> Maintenance General
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import Mapping, Optional, Union

from alertbridge.domain.entities.alert import Alert
from alertbridge.domain.value_objects.alert_classification import AlertType, Severity

DEFAULT_ASSIGNMENT_GROUP = "Maintenance General"

ROUTING_TABLE: dict[str, str] = {
    "temperature": "HVAC Specialists",
    "equipmentfailure": "HVAC Specialists",
    "hvac": "HVAC Specialists",
    "leak": "Plumbing Team",
    "water": "Plumbing Team",
    "smoke": "Emergency Response",
    "fire": "Emergency Response",
    "electrical": "Electrician Group",
    "power": "Electrician Group",
}

PRIORITY_BY_SEVERITY: dict[Severity, int] = {
    Severity.CRITICAL: 1,
    Severity.HIGH: 2,
}


def _routing_key(alert_type: Union[str, AlertType]) -> str:
    value = alert_type.value if isinstance(alert_type, AlertType) else str(alert_type)
    return value.strip().lower().replace(" ", "").replace("_", "")


def assignment_group_for(
    alert_type: Union[str, AlertType],
    table: Optional[Mapping[str, str]] = None,
) -> str:
    """Look up the responsible group; unknown types fall back to the default group."""
    table = ROUTING_TABLE if table is None else table
    return table.get(_routing_key(alert_type), DEFAULT_ASSIGNMENT_GROUP)


def priority_for(severity: Severity) -> int:
    """Priority for an escalation-eligible severity (1 = highest)."""
    try:
        return PRIORITY_BY_SEVERITY[severity]
    except KeyError:
        raise ValueError(f"Severity {severity.value} is not escalated") from None


@dataclass(frozen=True)
class EscalationDecision:
    should_escalate: bool
    priority: Optional[int] = None
    assignment_group: Optional[str] = None

    def __post_init__(self) -> None:
        if self.should_escalate:
            if self.priority is None or self.priority < 1:
                raise ValueError("Escalating decisions need a positive priority")
            if not self.assignment_group:
                raise ValueError("Escalating decisions need an assignment group")

    @classmethod
    def no_escalation(cls) -> "EscalationDecision":
        return cls(should_escalate=False)

    @classmethod
    def escalate(cls, priority: int, assignment_group: str) -> "EscalationDecision":
        return cls(True, priority, assignment_group)


class EscalationRouter:
    """Classifies alerts into escalation decisions."""

    def __init__(self, overrides: Optional[Mapping[str, str]] = None) -> None:
        self._table = dict(ROUTING_TABLE)
        for alert_type, group in (overrides or {}).items():
            self._table[_routing_key(alert_type)] = group

    @property
    def routing_table(self) -> dict[str, str]:
        return dict(self._table)

    def assignment_group_for(self, alert_type: Union[str, AlertType]) -> str:
        return assignment_group_for(alert_type, self._table)

    def classify(self, alert: Alert) -> EscalationDecision:
        if not alert.severity.is_escalation_eligible:
            return EscalationDecision.no_escalation()
        return EscalationDecision.escalate(
            priority=priority_for(alert.severity),
            assignment_group=self.assignment_group_for(alert.alert_type),
        )
