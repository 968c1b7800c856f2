"""Flat unit-pair conversion table.

Before the SI based conversion in physical.py, every supported conversion was
listed as an explicit (from, to) pair with its own arithmetic. The table is
kept as a reference: where both mechanisms support a pair, they must agree to
15 significant digits.
"""

from __future__ import annotations

import math
from collections.abc import Callable
from dataclasses import dataclass
from functools import lru_cache

from ..exceptions import UnsupportedConversionError
from .registry import Unit

# ============================================================================
# Constants
# ============================================================================


DAYS_PER_YEAR = 365.2425


@dataclass(frozen=True, kw_only=True)
class _ConversionDescriptor:
    source: Unit
    target: Unit
    convert: Callable[[float], float]


# =============================================================================
# Conversion Table
# =============================================================================


_ConversionTable: tuple[_ConversionDescriptor, ...] = (
    # ==========================================================================
    # Time
    # ==========================================================================
    _ConversionDescriptor(source=Unit.SECOND, target=Unit.MINUTE, convert=lambda v: v / 60.0),
    _ConversionDescriptor(source=Unit.MINUTE, target=Unit.SECOND, convert=lambda v: v * 60.0),
    _ConversionDescriptor(source=Unit.SECOND, target=Unit.HOUR, convert=lambda v: v / 3600.0),
    _ConversionDescriptor(source=Unit.HOUR, target=Unit.SECOND, convert=lambda v: v * 3600.0),
    _ConversionDescriptor(source=Unit.SECOND, target=Unit.DAY, convert=lambda v: v / 3600.0 / 24.0),
    _ConversionDescriptor(source=Unit.DAY, target=Unit.SECOND, convert=lambda v: v * 3600.0 * 24.0),
    _ConversionDescriptor(source=Unit.SECOND, target=Unit.YEAR, convert=lambda v: v / 3600.0 / 24.0 / DAYS_PER_YEAR),
    _ConversionDescriptor(source=Unit.YEAR, target=Unit.SECOND, convert=lambda v: v * 3600.0 * 24.0 * DAYS_PER_YEAR),
    _ConversionDescriptor(source=Unit.MINUTE, target=Unit.HOUR, convert=lambda v: v / 60.0),
    _ConversionDescriptor(source=Unit.HOUR, target=Unit.MINUTE, convert=lambda v: v * 60.0),
    _ConversionDescriptor(source=Unit.MINUTE, target=Unit.DAY, convert=lambda v: v / 60.0 / 24.0),
    _ConversionDescriptor(source=Unit.DAY, target=Unit.MINUTE, convert=lambda v: v * 60.0 * 24.0),
    _ConversionDescriptor(source=Unit.HOUR, target=Unit.DAY, convert=lambda v: v / 24.0),
    _ConversionDescriptor(source=Unit.DAY, target=Unit.HOUR, convert=lambda v: v * 24.0),
    _ConversionDescriptor(source=Unit.HOUR, target=Unit.YEAR, convert=lambda v: v / 24.0 / DAYS_PER_YEAR),
    _ConversionDescriptor(source=Unit.YEAR, target=Unit.HOUR, convert=lambda v: v * 24.0 * DAYS_PER_YEAR),
    _ConversionDescriptor(source=Unit.DAY, target=Unit.YEAR, convert=lambda v: v / DAYS_PER_YEAR),
    _ConversionDescriptor(source=Unit.YEAR, target=Unit.DAY, convert=lambda v: v * DAYS_PER_YEAR),
    # ==========================================================================
    # Energy
    # ==========================================================================
    _ConversionDescriptor(source=Unit.KWH, target=Unit.GJ, convert=lambda v: v * 0.0036),
    _ConversionDescriptor(source=Unit.GJ, target=Unit.KWH, convert=lambda v: v / 0.0036),
    _ConversionDescriptor(source=Unit.KWH, target=Unit.MJ, convert=lambda v: v * 0.0036 * 1000.0),
    _ConversionDescriptor(source=Unit.MJ, target=Unit.KWH, convert=lambda v: v / 1000.0 / 0.0036),
    _ConversionDescriptor(source=Unit.GJ, target=Unit.MJ, convert=lambda v: v * 1000.0),
    _ConversionDescriptor(source=Unit.MJ, target=Unit.GJ, convert=lambda v: v / 1000.0),
    _ConversionDescriptor(source=Unit.KVARH, target=Unit.KWH, convert=lambda v: v),
    _ConversionDescriptor(source=Unit.KWH, target=Unit.KVARH, convert=lambda v: v),
    _ConversionDescriptor(source=Unit.KVAH, target=Unit.KWH, convert=lambda v: v),
    _ConversionDescriptor(source=Unit.KWH, target=Unit.KVAH, convert=lambda v: v),
    # ==========================================================================
    # Volume and flow
    # ==========================================================================
    _ConversionDescriptor(source=Unit.M3, target=Unit.L, convert=lambda v: v * 1000.0),
    _ConversionDescriptor(source=Unit.L, target=Unit.M3, convert=lambda v: v / 1000.0),
    _ConversionDescriptor(source=Unit.M3H, target=Unit.LH, convert=lambda v: v * 1000.0),
    _ConversionDescriptor(source=Unit.LH, target=Unit.M3H, convert=lambda v: v / 1000.0),
    # ==========================================================================
    # Temperature
    # ==========================================================================
    _ConversionDescriptor(source=Unit.C, target=Unit.K, convert=lambda v: v + 273.15),
    _ConversionDescriptor(source=Unit.K, target=Unit.C, convert=lambda v: v - 273.15),
    _ConversionDescriptor(source=Unit.C, target=Unit.F, convert=lambda v: v * 9.0 / 5.0 + 32.0),
    _ConversionDescriptor(source=Unit.F, target=Unit.C, convert=lambda v: (v - 32.0) * 5.0 / 9.0),
    _ConversionDescriptor(source=Unit.K, target=Unit.F, convert=lambda v: (v - 273.15) * 9.0 / 5.0 + 32.0),
    _ConversionDescriptor(source=Unit.F, target=Unit.K, convert=lambda v: (v - 32.0) * 5.0 / 9.0 + 273.15),
    # ==========================================================================
    # Pressure and angle
    # ==========================================================================
    _ConversionDescriptor(source=Unit.PA, target=Unit.BAR, convert=lambda v: v / 100000.0),
    _ConversionDescriptor(source=Unit.BAR, target=Unit.PA, convert=lambda v: v * 100000.0),
    _ConversionDescriptor(source=Unit.DEGREE, target=Unit.RADIAN, convert=lambda v: v * math.pi / 180.0),
    _ConversionDescriptor(source=Unit.RADIAN, target=Unit.DEGREE, convert=lambda v: v * 180.0 / math.pi),
)


@lru_cache(maxsize=64)
def _find_conversion(source: Unit, target: Unit) -> _ConversionDescriptor | None:
    for descriptor in _ConversionTable:
        if descriptor.source == source and descriptor.target == target:
            return descriptor
    return None


def conversion_pairs() -> tuple[tuple[Unit, Unit], ...]:
    """All (source, target) pairs listed in the table."""
    return tuple((descriptor.source, descriptor.target) for descriptor in _ConversionTable)


def can_convert(source: Unit, target: Unit) -> bool:
    """True if the table supports converting source into target (identity always)."""
    return source == target or _find_conversion(source, target) is not None


def convert(value: float, source: Unit, target: Unit) -> float:
    """Convert a value using the table.

    Raises:
        UnsupportedConversionError: If the pair is not in the table
    """
    if source == target:
        return value
    descriptor = _find_conversion(source, target)
    if descriptor is None:
        raise UnsupportedConversionError(f"No conversion from {source.value} to {target.value}")
    return descriptor.convert(value)
