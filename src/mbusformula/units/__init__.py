"""Unit system components for the formula engine.

This package contains the SI dimension vectors, the named unit registry,
physical units with conversion, and the legacy pair conversion table.
"""

from .dimension import SIDimension, SIExp, SIInvalid
from .physical import SIUnit
from .registry import REGISTRY, Quantity, Unit, UnitRegistry, extract_unit

__all__ = [
    # Dimension vectors
    "SIDimension",
    "SIExp",
    "SIInvalid",
    # Registry
    "REGISTRY",
    "Quantity",
    "Unit",
    "UnitRegistry",
    "extract_unit",
    # Physical units
    "SIUnit",
]
