"""
Unit Value Object

Architectural Intent:
- Immutable view of a building unit as reported by the external unit directory
- Carries the human-facing display name and location used in incident text
"""

from dataclasses import dataclass


@dataclass(frozen=True)
class Unit:
    """
    Value Object representing a unit (room, apartment, plant room) that alerts refer to.
    """
    unit_id: str
    display_name: str = ""
    location: str = ""
    sensor_ids: tuple[str, ...] = ()

    def __post_init__(self) -> None:
        if not self.unit_id or not self.unit_id.strip():
            raise ValueError("Unit ID cannot be empty")
        if not self.display_name:
            object.__setattr__(self, "display_name", f"Unit {self.unit_id}")

    def matches(self, identifier: str) -> bool:
        """True when *identifier* is this unit's id or one of its sensor ids."""
        return identifier == self.unit_id or identifier in self.sensor_ids

    def __str__(self) -> str:
        return self.display_name
