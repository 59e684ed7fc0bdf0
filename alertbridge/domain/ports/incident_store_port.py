"""
Incident Store Port

Architectural Intent:
- Port interface for the incident-tracking store (an external collaborator)
- This core only creates and reads incidents; lifecycle beyond creation is external

Design Decisions:
- create_for_alert is get-or-create keyed on source_alert_ref, so a store never
  holds two incidents for one alert
- find_by_source_alert lets the writer and recovery pass detect orphans
"""

from typing import Optional, Protocol, runtime_checkable

from alertbridge.domain.entities.incident import Incident


@runtime_checkable
class IncidentStorePort(Protocol):
    """Port for incident persistence."""

    async def create_for_alert(self, incident: Incident) -> tuple[Incident, bool]:
        """Store *incident* unless one exists for its source alert.

        Returns the stored incident and whether it was newly created.
        """
        ...

    async def get(self, incident_id: str) -> Optional[Incident]:
        """Get an incident by id."""
        ...

    async def find_by_source_alert(self, alert_id: str) -> Optional[Incident]:
        """Get the incident created for *alert_id*, if any."""
        ...
