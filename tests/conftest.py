"""Shared test fixtures for pyMBusFormula tests."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

import pytest

from mbusformula.units.registry import Quantity, Unit


@dataclass(frozen=True)
class FakeDVEntry:
    """Data record indices as a decoded telegram would provide them."""

    storage_nr: int = 0
    tariff_nr: int = 0
    subunit_nr: int = 0


@dataclass
class FakeMeter:
    """Field value provider keyed by (field name, quantity)."""

    fields: dict[tuple[str, Quantity], tuple[float, Unit]] = field(default_factory=dict)

    def has_field(self, name: str, quantity: Quantity) -> bool:
        return (name, quantity) in self.fields

    def field_value(self, name: str, quantity: Quantity) -> tuple[float, Unit] | None:
        return self.fields.get((name, quantity))


@pytest.fixture
def heat_meter() -> FakeMeter:
    """Heat meter with temperatures and an energy counter."""
    return FakeMeter(
        {
            ("flow_temperature", Quantity.TEMPERATURE): (31.0, Unit.C),
            ("external_temperature", Quantity.TEMPERATURE): (19.0, Unit.C),
            ("total_energy_consumption", Quantity.ENERGY): (229.0, Unit.KWH),
            ("total_volume", Quantity.VOLUME): (1234.0, Unit.L),
        }
    )


@pytest.fixture
def electricity_meter() -> FakeMeter:
    """Three phase electricity meter, powers stored in kw."""
    return FakeMeter(
        {
            ("current_power_consumption_phase1", Quantity.POWER): (0.10999, Unit.KW),
            ("current_power_consumption_phase2", Quantity.POWER): (0.10614, Unit.KW),
            ("current_power_consumption_phase3", Quantity.POWER): (0.00066, Unit.KW),
        }
    )


@pytest.fixture
def dv_entry() -> FakeDVEntry:
    """Record with storage 17, tariff 3, subunit 2."""
    return FakeDVEntry(storage_nr=17, tariff_nr=3, subunit_nr=2)


@pytest.fixture
def make_dv_entry() -> type[FakeDVEntry]:
    """Factory for records with other indices."""
    return FakeDVEntry


def pytest_configure(config: Any) -> None:
    """Configure pytest markers."""
    config.addinivalue_line(
        "markers", "unit: mark test as a unit test (fast, no collaborators beyond fakes)"
    )
    config.addinivalue_line(
        "markers", "calendar: mark test as exercising calendar date arithmetic"
    )
