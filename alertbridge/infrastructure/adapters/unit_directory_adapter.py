"""
Static Unit Directory Adapter

Architectural Intent:
- Implements UnitDirectoryPort from a fixed list of units
- Resolves a unit by its own id or by any vendor sensor id mounted in it
- Loads the directory from a JSON file, or ships sample units for development

File Format:
    [
        {"unit_id": "1307", "display_name": "Unit 1307",
         "location": "Building A, Floor 13", "sensor_ids": ["HVAC-1307-T1"]},
        ...
    ]
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Iterable, Optional

from alertbridge.domain.errors import NotFoundError
from alertbridge.domain.value_objects.unit import Unit

logger = logging.getLogger(__name__)


def _sample_units() -> list[Unit]:
    """Units used when no directory file is configured."""
    return [
        Unit(
            unit_id="1307",
            location="Building A, Floor 13",
            sensor_ids=("HVAC-1307-T1", "WTR-1307-L1"),
        ),
        Unit(
            unit_id="0412",
            location="Building A, Floor 4",
            sensor_ids=("FIRE-0412-S1",),
        ),
        Unit(
            unit_id="B1-PLANT",
            display_name="Basement Plant Room",
            location="Building B, Basement",
            sensor_ids=("ELEC-B1-P1", "HVAC-B1-C1"),
        ),
    ]


class StaticUnitDirectory:
    """In-memory unit directory."""

    def __init__(self, units: Optional[Iterable[Unit]] = None) -> None:
        self._units: dict[str, Unit] = {}
        self._by_sensor: dict[str, Unit] = {}
        for unit in _sample_units() if units is None else units:
            self.add(unit)

    @classmethod
    def from_file(cls, path: str) -> "StaticUnitDirectory":
        """Load units from a JSON file. Raises FileNotFoundError / ValueError."""
        with open(Path(path)) as f:
            data = json.load(f)
        if not isinstance(data, list):
            raise ValueError(f"Unit directory {path} must hold a JSON list")
        units = [
            Unit(
                unit_id=str(entry["unit_id"]),
                display_name=entry.get("display_name", ""),
                location=entry.get("location", ""),
                sensor_ids=tuple(entry.get("sensor_ids", ())),
            )
            for entry in data
        ]
        logger.info("Loaded %d units from %s", len(units), path)
        return cls(units)

    def add(self, unit: Unit) -> None:
        self._units[unit.unit_id] = unit
        for sensor_id in unit.sensor_ids:
            self._by_sensor[sensor_id] = unit

    async def resolve(self, identifier: str) -> Unit:
        unit = self._units.get(identifier) or self._by_sensor.get(identifier)
        if unit is None:
            raise NotFoundError("unit", identifier)
        return unit

    def __len__(self) -> int:
        return len(self._units)
