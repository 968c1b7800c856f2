"""
pyMBusFormula: Unit-aware formula engine for M-Bus (Meter-Bus) meter values.

This library provides a dimensional unit system (SI exponent vectors and a
fixed registry of named units), a parser and evaluator for unit-annotated
arithmetic including calendar-aware date arithmetic, and a template string
interpolator built on the same grammar.
"""

from __future__ import annotations

from .exceptions import (
    DimensionOverflowError,
    EvaluationError,
    FormulaError,
    MisuseError,
    ParseError,
    UnitMismatchError,
    UnsupportedConversionError,
)
from .formula import DVEntry, DVEntryCounter, FieldValues, Formula, StringInterpolator
from .units import REGISTRY, Quantity, SIExp, SIUnit, Unit, extract_unit

__version__ = "0.1.0"
__author__ = "Tanny Lund Deutsch-Lauritsen"
__email__ = "pymbusmaster@de-la.dk"

__all__ = [
    "__version__",
    # Units
    "REGISTRY",
    "Quantity",
    "SIExp",
    "SIUnit",
    "Unit",
    "extract_unit",
    # Formulas
    "DVEntry",
    "DVEntryCounter",
    "FieldValues",
    "Formula",
    "StringInterpolator",
    # Exceptions
    "DimensionOverflowError",
    "EvaluationError",
    "FormulaError",
    "MisuseError",
    "ParseError",
    "UnitMismatchError",
    "UnsupportedConversionError",
]
