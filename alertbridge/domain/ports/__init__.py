"""
Domain Ports Package

Architectural Intent:
- Contains port interfaces (abstract contracts) for external dependencies
- Ports define what the domain needs, adapters implement how
- Follows Hexagonal Architecture principles
"""

from alertbridge.domain.ports.alert_repository_port import AlertRepositoryPort
from alertbridge.domain.ports.incident_store_port import IncidentStorePort
from alertbridge.domain.ports.unit_directory_port import UnitDirectoryPort
from alertbridge.domain.ports.event_bus_port import EventBusPort

__all__ = [
    "AlertRepositoryPort",
    "IncidentStorePort",
    "UnitDirectoryPort",
    "EventBusPort",
]
