"""
Unit Directory Port

Architectural Intent:
- Port interface for the external directory of units and their sensors
- Resolves either a unit identifier or a vendor sensor identifier
"""

from typing import Protocol, runtime_checkable

from alertbridge.domain.value_objects.unit import Unit


@runtime_checkable
class UnitDirectoryPort(Protocol):
    async def resolve(self, identifier: str) -> Unit:
        """Return the unit for *identifier*. Raises NotFoundError if absent."""
        ...
