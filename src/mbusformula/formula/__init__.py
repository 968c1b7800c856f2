"""Formula parsing, evaluation and string interpolation."""

from .common import DVEntry, FieldValues
from .formula import Formula
from .interpolator import StringInterpolator
from .nodes import DVEntryCounter

__all__ = [
    "DVEntry",
    "DVEntryCounter",
    "FieldValues",
    "Formula",
    "StringInterpolator",
]
