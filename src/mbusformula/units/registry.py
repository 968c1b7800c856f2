"""Named unit registry.

This module contains the fixed set of units a formula may name:
- Quantity enum of semantic categories (Energy, Power, Temperature, ...)
- Unit enum of lowercase unit tokens (kwh, m3, c, counter, ...)
- _UnitDescriptor / _QuantityDescriptor declarative tables
- UnitRegistry, built once from the tables and exposed as REGISTRY
- extract_unit() for field names carrying a unit suffix

Every unit is described by its scale relative to the coherent SI unit and its
SI dimension vector. Units flagged ``literal`` render as their own token
instead of an SI decomposition, units flagged ``special`` only convert to
themselves.
"""

from __future__ import annotations

import math
from collections.abc import Mapping
from dataclasses import dataclass
from enum import StrEnum
from functools import lru_cache
from types import MappingProxyType

from .dimension import SIExp

# ============================================================================
# Constants
# ============================================================================


SECONDS_PER_MINUTE = 60.0
SECONDS_PER_HOUR = 3600.0
SECONDS_PER_DAY = 86400.0
SECONDS_PER_YEAR = 31556952.0  # Mean Gregorian year, 365.2425 days
SECONDS_PER_MONTH = SECONDS_PER_YEAR / 12  # Mean Gregorian month

SCALE_RELATIVE_TOLERANCE = 1e-12  # Tolerance when matching derived scales against the table


class Quantity(StrEnum):
    """Semantic category of a unit.

    The value is the name used in diagnostics and syntax tree dumps.
    """

    TIME = "Time"
    LENGTH = "Length"
    MASS = "Mass"
    AMPERAGE = "Amperage"
    TEMPERATURE = "Temperature"
    AMOUNT_OF_SUBSTANCE = "AmountOfSubstance"
    LUMINOUS_INTENSITY = "LuminousIntensity"
    ENERGY = "Energy"
    REACTIVE_ENERGY = "Reactive_Energy"
    APPARENT_ENERGY = "Apparent_Energy"
    POWER = "Power"
    VOLUME = "Volume"
    FLOW = "Flow"
    VOLTAGE = "Voltage"
    FREQUENCY = "Frequency"
    PRESSURE = "Pressure"
    POINT_IN_TIME = "PointInTime"
    RELATIVE_HUMIDITY = "RelativeHumidity"
    HCA = "HCA"
    TEXT = "Text"
    ANGLE = "Angle"
    DIMENSIONLESS = "Dimensionless"


class Unit(StrEnum):
    """Named units, the value is the lowercase token used in formulas and field names."""

    # Time
    SECOND = "s"
    MINUTE = "min"
    HOUR = "h"
    DAY = "d"
    MONTH = "month"
    YEAR = "y"

    # Base quantities
    M = "m"
    KG = "kg"
    AMPERE = "a"
    K = "k"
    C = "c"
    F = "f"
    MOL = "mol"
    CD = "cd"

    # Energy
    KWH = "kwh"
    MJ = "mj"
    GJ = "gj"
    M3C = "m3c"
    KVARH = "kvarh"
    KVAH = "kvah"

    # Power
    KW = "kw"
    M3CH = "m3ch"

    # Volume and flow
    M3 = "m3"
    L = "l"
    M3H = "m3h"
    LH = "lh"

    # Electrical, frequency and pressure
    VOLT = "v"
    HZ = "hz"
    PA = "pa"
    BAR = "bar"

    # Points in time
    UNIX_TIMESTAMP = "ut"
    DATE_TIME_UTC = "utc"
    DATE_TIME_LT = "lt"

    # Other
    RH = "rh"
    HCA = "hca"
    TXT = "txt"
    DEGREE = "deg"
    RADIAN = "rad"
    COUNTER = "counter"
    FACTOR = "factor"
    NUMBER = "number"
    PERCENTAGE = "pct"


# Quantities whose units convert freely into each other
_ALIAS_GROUPS: tuple[frozenset[Quantity], ...] = (
    frozenset({Quantity.ENERGY, Quantity.REACTIVE_ENERGY, Quantity.APPARENT_ENERGY}),
)


# =============================================================================
# Descriptors
# =============================================================================


@dataclass(frozen=True, kw_only=True)
class _UnitDescriptor:
    """Registry entry for a single unit."""

    unit: Unit
    display_name: str  # Human readable symbol (kWh, m³, °C, ...)
    quantity: Quantity
    description: str

    scale: float  # Multiplier to the coherent SI unit of the dimension
    exp: SIExp

    literal: bool = False  # Render as 1<token> instead of the SI decomposition
    special: bool = False  # Only convertible to itself


@dataclass(frozen=True, kw_only=True)
class _QuantityDescriptor:
    quantity: Quantity
    default_unit: Unit


_ENERGY = SIExp().kg(1).m(2).s(-2)
_POWER = SIExp().kg(1).m(2).s(-3)


# =============================================================================
# Registry Tables
# =============================================================================


_UnitTable: tuple[_UnitDescriptor, ...] = (
    # ==========================================================================
    # Time
    # ==========================================================================
    _UnitDescriptor(
        unit=Unit.SECOND, display_name="s", quantity=Quantity.TIME, description="second",
        scale=1.0, exp=SIExp().s(1),
    ),
    _UnitDescriptor(
        unit=Unit.MINUTE, display_name="min", quantity=Quantity.TIME, description="minute",
        scale=SECONDS_PER_MINUTE, exp=SIExp().s(1),
    ),
    _UnitDescriptor(
        unit=Unit.HOUR, display_name="h", quantity=Quantity.TIME, description="hour",
        scale=SECONDS_PER_HOUR, exp=SIExp().s(1),
    ),
    _UnitDescriptor(
        unit=Unit.DAY, display_name="d", quantity=Quantity.TIME, description="day",
        scale=SECONDS_PER_DAY, exp=SIExp().s(1),
    ),
    # Month and year lengths vary, the scale is only used for linear arithmetic
    _UnitDescriptor(
        unit=Unit.MONTH, display_name="month", quantity=Quantity.TIME, description="month",
        scale=SECONDS_PER_MONTH, exp=SIExp().s(1),
    ),
    _UnitDescriptor(
        unit=Unit.YEAR, display_name="y", quantity=Quantity.TIME, description="year",
        scale=SECONDS_PER_YEAR, exp=SIExp().s(1),
    ),
    # ==========================================================================
    # Base quantities
    # ==========================================================================
    _UnitDescriptor(
        unit=Unit.M, display_name="m", quantity=Quantity.LENGTH, description="meter",
        scale=1.0, exp=SIExp().m(1),
    ),
    _UnitDescriptor(
        unit=Unit.KG, display_name="kg", quantity=Quantity.MASS, description="kilogram",
        scale=1.0, exp=SIExp().kg(1),
    ),
    _UnitDescriptor(
        unit=Unit.AMPERE, display_name="A", quantity=Quantity.AMPERAGE, description="ampere",
        scale=1.0, exp=SIExp().a(1),
    ),
    _UnitDescriptor(
        unit=Unit.K, display_name="K", quantity=Quantity.TEMPERATURE, description="kelvin",
        scale=1.0, exp=SIExp().k(1), literal=True,
    ),
    _UnitDescriptor(
        unit=Unit.C, display_name="°C", quantity=Quantity.TEMPERATURE, description="celsius",
        scale=1.0, exp=SIExp().c(1), literal=True,
    ),
    _UnitDescriptor(
        unit=Unit.F, display_name="°F", quantity=Quantity.TEMPERATURE, description="fahrenheit",
        scale=1.0, exp=SIExp().f(1), literal=True,
    ),
    _UnitDescriptor(
        unit=Unit.MOL, display_name="mol", quantity=Quantity.AMOUNT_OF_SUBSTANCE, description="mole",
        scale=1.0, exp=SIExp().mol(1),
    ),
    _UnitDescriptor(
        unit=Unit.CD, display_name="cd", quantity=Quantity.LUMINOUS_INTENSITY, description="candela",
        scale=1.0, exp=SIExp().cd(1),
    ),
    # ==========================================================================
    # Energy
    # ==========================================================================
    _UnitDescriptor(
        unit=Unit.KWH, display_name="kWh", quantity=Quantity.ENERGY, description="kilo Watt hour",
        scale=3.6e6, exp=_ENERGY,
    ),
    _UnitDescriptor(
        unit=Unit.MJ, display_name="MJ", quantity=Quantity.ENERGY, description="Mega Joule",
        scale=1e6, exp=_ENERGY,
    ),
    _UnitDescriptor(
        unit=Unit.GJ, display_name="GJ", quantity=Quantity.ENERGY, description="Giga Joule",
        scale=1e9, exp=_ENERGY,
    ),
    # Volume times temperature difference, a proxy for heat energy
    _UnitDescriptor(
        unit=Unit.M3C, display_name="m³°C", quantity=Quantity.ENERGY, description="cubic meter celsius",
        scale=1.0, exp=SIExp().m(3).c(1), special=True,
    ),
    _UnitDescriptor(
        unit=Unit.KVARH, display_name="kVARh", quantity=Quantity.REACTIVE_ENERGY,
        description="kilo volt amperes reactive hour", scale=3.6e6, exp=_ENERGY,
    ),
    _UnitDescriptor(
        unit=Unit.KVAH, display_name="kVAh", quantity=Quantity.APPARENT_ENERGY,
        description="kilo volt amperes hour", scale=3.6e6, exp=_ENERGY,
    ),
    # ==========================================================================
    # Power
    # ==========================================================================
    _UnitDescriptor(
        unit=Unit.KW, display_name="kW", quantity=Quantity.POWER, description="kilo Watt",
        scale=1000.0, exp=_POWER,
    ),
    _UnitDescriptor(
        unit=Unit.M3CH, display_name="m³°C/h", quantity=Quantity.POWER, description="cubic meter celsius per hour",
        scale=1 / SECONDS_PER_HOUR, exp=SIExp().m(3).c(1).s(-1), special=True,
    ),
    # ==========================================================================
    # Volume and flow
    # ==========================================================================
    _UnitDescriptor(
        unit=Unit.M3, display_name="m³", quantity=Quantity.VOLUME, description="cubic meter",
        scale=1.0, exp=SIExp().m(3),
    ),
    _UnitDescriptor(
        unit=Unit.L, display_name="l", quantity=Quantity.VOLUME, description="litre",
        scale=0.001, exp=SIExp().m(3),
    ),
    _UnitDescriptor(
        unit=Unit.M3H, display_name="m³/h", quantity=Quantity.FLOW, description="cubic meters per hour",
        scale=1 / SECONDS_PER_HOUR, exp=SIExp().m(3).s(-1),
    ),
    _UnitDescriptor(
        unit=Unit.LH, display_name="l/h", quantity=Quantity.FLOW, description="liters per hour",
        scale=0.001 / SECONDS_PER_HOUR, exp=SIExp().m(3).s(-1),
    ),
    # ==========================================================================
    # Electrical, frequency and pressure
    # ==========================================================================
    _UnitDescriptor(
        unit=Unit.VOLT, display_name="V", quantity=Quantity.VOLTAGE, description="volt",
        scale=1.0, exp=SIExp().kg(1).m(2).s(-3).a(-1),
    ),
    _UnitDescriptor(
        unit=Unit.HZ, display_name="Hz", quantity=Quantity.FREQUENCY, description="hz",
        scale=1.0, exp=SIExp().s(-1),
    ),
    _UnitDescriptor(
        unit=Unit.PA, display_name="pa", quantity=Quantity.PRESSURE, description="pascal",
        scale=1.0, exp=SIExp().kg(1).m(-1).s(-2),
    ),
    _UnitDescriptor(
        unit=Unit.BAR, display_name="bar", quantity=Quantity.PRESSURE, description="bar",
        scale=1e5, exp=SIExp().kg(1).m(-1).s(-2),
    ),
    # ==========================================================================
    # Points in time, seconds since 1970-01-01 00:00:00
    # ==========================================================================
    _UnitDescriptor(
        unit=Unit.UNIX_TIMESTAMP, display_name="ut", quantity=Quantity.POINT_IN_TIME, description="unix timestamp",
        scale=1.0, exp=SIExp().s(1), literal=True,
    ),
    _UnitDescriptor(
        unit=Unit.DATE_TIME_UTC, display_name="utc", quantity=Quantity.POINT_IN_TIME,
        description="coordinated universal time", scale=1.0, exp=SIExp().s(1), literal=True,
    ),
    _UnitDescriptor(
        unit=Unit.DATE_TIME_LT, display_name="lt", quantity=Quantity.POINT_IN_TIME, description="local time",
        scale=1.0, exp=SIExp().s(1), literal=True,
    ),
    # ==========================================================================
    # Other
    # ==========================================================================
    # Dimensionless units come first so unnamed dimensionless results resolve to counter
    _UnitDescriptor(
        unit=Unit.COUNTER, display_name="counter", quantity=Quantity.DIMENSIONLESS, description="counter",
        scale=1.0, exp=SIExp(), literal=True,
    ),
    _UnitDescriptor(
        unit=Unit.FACTOR, display_name="factor", quantity=Quantity.DIMENSIONLESS, description="factor",
        scale=1.0, exp=SIExp(), literal=True,
    ),
    _UnitDescriptor(
        unit=Unit.NUMBER, display_name="number", quantity=Quantity.DIMENSIONLESS, description="number",
        scale=1.0, exp=SIExp(), literal=True,
    ),
    _UnitDescriptor(
        unit=Unit.PERCENTAGE, display_name="%", quantity=Quantity.DIMENSIONLESS, description="percentage",
        scale=1.0, exp=SIExp(), literal=True,
    ),
    _UnitDescriptor(
        unit=Unit.RH, display_name="RH", quantity=Quantity.RELATIVE_HUMIDITY, description="relative humidity",
        scale=1.0, exp=SIExp(), literal=True,
    ),
    _UnitDescriptor(
        unit=Unit.HCA, display_name="hca", quantity=Quantity.HCA, description="heat cost allocation",
        scale=1.0, exp=SIExp(), literal=True,
    ),
    _UnitDescriptor(
        unit=Unit.TXT, display_name="txt", quantity=Quantity.TEXT, description="text",
        scale=1.0, exp=SIExp(), literal=True,
    ),
    _UnitDescriptor(
        unit=Unit.DEGREE, display_name="°", quantity=Quantity.ANGLE, description="degree",
        scale=math.pi / 180, exp=SIExp(), literal=True,
    ),
    _UnitDescriptor(
        unit=Unit.RADIAN, display_name="rad", quantity=Quantity.ANGLE, description="radian",
        scale=1.0, exp=SIExp(), literal=True,
    ),
)


_QuantityTable: tuple[_QuantityDescriptor, ...] = (
    _QuantityDescriptor(quantity=Quantity.TIME, default_unit=Unit.HOUR),
    _QuantityDescriptor(quantity=Quantity.LENGTH, default_unit=Unit.M),
    _QuantityDescriptor(quantity=Quantity.MASS, default_unit=Unit.KG),
    _QuantityDescriptor(quantity=Quantity.AMPERAGE, default_unit=Unit.AMPERE),
    _QuantityDescriptor(quantity=Quantity.TEMPERATURE, default_unit=Unit.C),
    _QuantityDescriptor(quantity=Quantity.AMOUNT_OF_SUBSTANCE, default_unit=Unit.MOL),
    _QuantityDescriptor(quantity=Quantity.LUMINOUS_INTENSITY, default_unit=Unit.CD),
    _QuantityDescriptor(quantity=Quantity.ENERGY, default_unit=Unit.KWH),
    _QuantityDescriptor(quantity=Quantity.REACTIVE_ENERGY, default_unit=Unit.KVARH),
    _QuantityDescriptor(quantity=Quantity.APPARENT_ENERGY, default_unit=Unit.KVAH),
    _QuantityDescriptor(quantity=Quantity.POWER, default_unit=Unit.KW),
    _QuantityDescriptor(quantity=Quantity.VOLUME, default_unit=Unit.M3),
    _QuantityDescriptor(quantity=Quantity.FLOW, default_unit=Unit.M3H),
    _QuantityDescriptor(quantity=Quantity.VOLTAGE, default_unit=Unit.VOLT),
    _QuantityDescriptor(quantity=Quantity.FREQUENCY, default_unit=Unit.HZ),
    _QuantityDescriptor(quantity=Quantity.PRESSURE, default_unit=Unit.BAR),
    _QuantityDescriptor(quantity=Quantity.POINT_IN_TIME, default_unit=Unit.DATE_TIME_LT),
    _QuantityDescriptor(quantity=Quantity.RELATIVE_HUMIDITY, default_unit=Unit.RH),
    _QuantityDescriptor(quantity=Quantity.HCA, default_unit=Unit.HCA),
    _QuantityDescriptor(quantity=Quantity.TEXT, default_unit=Unit.TXT),
    _QuantityDescriptor(quantity=Quantity.ANGLE, default_unit=Unit.DEGREE),
    _QuantityDescriptor(quantity=Quantity.DIMENSIONLESS, default_unit=Unit.COUNTER),
)


# =============================================================================
# Registry
# =============================================================================


class UnitRegistry:
    """Read-only lookup structure over the unit and quantity tables.

    Built once; all mappings are exposed through read-only proxies.

    Raises:
        ValueError: If a unit is listed twice, a unit has no entry, a quantity
            has no member units, or a default unit belongs to another quantity
    """

    _units: Mapping[Unit, _UnitDescriptor]
    _members: Mapping[Quantity, tuple[Unit, ...]]
    _defaults: Mapping[Quantity, Unit]

    def __init__(
        self,
        unit_table: tuple[_UnitDescriptor, ...],
        quantity_table: tuple[_QuantityDescriptor, ...],
    ) -> None:
        units: dict[Unit, _UnitDescriptor] = {}
        members: dict[Quantity, list[Unit]] = {quantity: [] for quantity in Quantity}

        for descriptor in unit_table:
            if descriptor.unit in units:
                raise ValueError(f"Unit {descriptor.unit.name} registered twice")
            units[descriptor.unit] = descriptor
            members[descriptor.quantity].append(descriptor.unit)

        missing_units = [unit.name for unit in Unit if unit not in units]
        if missing_units:
            raise ValueError(f"Units without registry entry: {', '.join(missing_units)}")

        empty = [quantity.name for quantity, unit_list in members.items() if not unit_list]
        if empty:
            raise ValueError(f"Quantities without member units: {', '.join(empty)}")

        defaults: dict[Quantity, Unit] = {}
        for quantity_descriptor in quantity_table:
            if units[quantity_descriptor.default_unit].quantity != quantity_descriptor.quantity:
                raise ValueError(
                    f"Default unit {quantity_descriptor.default_unit.name} "
                    f"is not a member of {quantity_descriptor.quantity.name}"
                )
            defaults[quantity_descriptor.quantity] = quantity_descriptor.default_unit

        missing_defaults = [quantity.name for quantity in Quantity if quantity not in defaults]
        if missing_defaults:
            raise ValueError(f"Quantities without default unit: {', '.join(missing_defaults)}")

        self._units = MappingProxyType(units)
        self._members = MappingProxyType({quantity: tuple(unit_list) for quantity, unit_list in members.items()})
        self._defaults = MappingProxyType(defaults)

    def lookup(self, name: str) -> Unit | None:
        """Find a unit by its token, ignoring case.

        Args:
            name: Unit token such as "kwh" or "KWh"

        Returns:
            The unit, or None for an unregistered name
        """
        try:
            return Unit(name.lower())
        except ValueError:
            return None

    def descriptor(self, unit: Unit) -> _UnitDescriptor:
        return self._units[unit]

    def quantity_of(self, unit: Unit) -> Quantity:
        return self._units[unit].quantity

    def units_of(self, quantity: Quantity) -> tuple[Unit, ...]:
        """Member units of a quantity, in table order."""
        return self._members[quantity]

    def default_unit(self, quantity: Quantity) -> Unit:
        return self._defaults[quantity]

    def are_compatible(self, first: Quantity, second: Quantity) -> bool:
        """True if units of the two quantities may be added or converted."""
        if first == second:
            return True
        return any(first in group and second in group for group in _ALIAS_GROUPS)

    def find_unit(self, scale: float, exp: SIExp, quantity: Quantity | None = None) -> Unit | None:
        """Find the named unit with a matching scale and dimension.

        Args:
            scale: Multiplier to the coherent SI unit
            exp: Dimension vector
            quantity: Restrict the search to this quantity; when None, special
                units are skipped and the first match in table order wins

        Returns:
            The matching unit, or None if no registered unit matches
        """
        candidates = self._units.values() if quantity is None else (self._units[u] for u in self._members[quantity])
        for descriptor in candidates:
            if quantity is None and descriptor.special:
                continue
            if descriptor.exp == exp and math.isclose(descriptor.scale, scale, rel_tol=SCALE_RELATIVE_TOLERANCE):
                return descriptor.unit
        return None

    def find_quantity(self, scale: float, exp: SIExp) -> Quantity | None:
        """Quantity of the first non-special unit matching scale and dimension, None when unnamed."""
        unit = self.find_unit(scale, exp)
        return None if unit is None else self._units[unit].quantity


REGISTRY = UnitRegistry(_UnitTable, _QuantityTable)


@lru_cache(maxsize=128)
def extract_unit(name: str) -> tuple[str, Unit] | None:
    """Split a field name into its variable part and its unit suffix.

    The unit is the text after the last underscore, the variable part is
    everything before it and must not be empty.

    Examples:
        >>> extract_unit("total_kwh")
        ('total', <Unit.KWH: 'kwh'>)
        >>> extract_unit("work__c")
        ('work_', <Unit.C: 'c'>)
        >>> extract_unit("total") is None
        True

    Args:
        name: Field name with a unit suffix

    Returns:
        Tuple of (variable name, unit), or None if the name has no valid suffix
    """
    vname, separator, suffix = name.rpartition("_")
    if not separator or not vname or not suffix:
        return None
    unit = REGISTRY.lookup(suffix)
    if unit is None:
        return None
    return vname, unit
