"""Tests for the static unit directory adapter."""

import json

import pytest

from alertbridge.domain.errors import NotFoundError
from alertbridge.domain.ports.unit_directory_port import UnitDirectoryPort
from alertbridge.domain.value_objects.unit import Unit
from alertbridge.infrastructure.adapters.unit_directory_adapter import StaticUnitDirectory


class TestStaticUnitDirectory:
    def test_satisfies_port(self):
        assert isinstance(StaticUnitDirectory(), UnitDirectoryPort)

    def test_ships_sample_units(self):
        assert len(StaticUnitDirectory()) == 3

    @pytest.mark.asyncio
    async def test_resolve_by_unit_id(self, units):
        unit = await units.resolve("1307")
        assert unit.location == "Building A, Floor 13"

    @pytest.mark.asyncio
    async def test_resolve_by_sensor_id(self, units):
        unit = await units.resolve("ELEC-B1-P1")
        assert unit.unit_id == "B1-PLANT"
        assert unit.display_name == "Basement Plant Room"

    @pytest.mark.asyncio
    async def test_unknown_unit(self, units):
        with pytest.raises(NotFoundError, match="unit '9999' not found"):
            await units.resolve("9999")

    @pytest.mark.asyncio
    async def test_empty_directory(self):
        directory = StaticUnitDirectory([])
        assert len(directory) == 0
        with pytest.raises(NotFoundError):
            await directory.resolve("1307")

    @pytest.mark.asyncio
    async def test_add(self):
        directory = StaticUnitDirectory([])
        directory.add(Unit("42", sensor_ids=("S-42",)))
        assert (await directory.resolve("S-42")).unit_id == "42"


class TestFromFile:
    @pytest.mark.asyncio
    async def test_load(self, tmp_path):
        path = tmp_path / "units.json"
        path.write_text(json.dumps([
            {"unit_id": 501, "location": "Tower B", "sensor_ids": ["T-501"]},
            {"unit_id": "502", "display_name": "Gym"},
        ]))

        directory = StaticUnitDirectory.from_file(str(path))

        assert len(directory) == 2
        assert (await directory.resolve("T-501")).unit_id == "501"
        assert (await directory.resolve("502")).display_name == "Gym"

    def test_not_a_list(self, tmp_path):
        path = tmp_path / "units.json"
        path.write_text(json.dumps({"unit_id": "1"}))
        with pytest.raises(ValueError, match="JSON list"):
            StaticUnitDirectory.from_file(str(path))

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            StaticUnitDirectory.from_file(str(tmp_path / "absent.json"))
