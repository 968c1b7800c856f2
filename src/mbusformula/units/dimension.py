"""SI dimension vectors.

This module contains the dimensional signature of a physical unit:
- SIDimension enum of base dimensions, in canonical render order
- SIInvalid record describing why a vector became invalid
- SIExp immutable exponent vector with fluent per-dimension setters

A vector holds one signed exponent per base dimension in the range of a
signed byte. Combining two vectors adds or subtracts exponents; a result that
leaves the range wraps around like the signed byte it models and marks the
vector invalid. Invalid vectors stay invalid under any further combination.

The three temperature markers (kelvin, celsius, fahrenheit) are separate
dimensions because the scales are not proportional to each other. At most one
of them may be present in a vector.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum

# ============================================================================
# Constants
# ============================================================================


SIEXP_MINIMUM = -128  # Smallest exponent that fits a signed byte
SIEXP_MAXIMUM = 127  # Largest exponent that fits a signed byte

_SUPERSCRIPTS = str.maketrans("-0123456789", "⁻⁰¹²³⁴⁵⁶⁷⁸⁹")


class SIDimension(Enum):
    """Base dimensions, declared in canonical render order.

    The value is the letter used when rendering a vector.
    """

    KG = "kg"  # Mass
    M = "m"  # Length
    S = "s"  # Time
    A = "a"  # Electric current
    MOL = "mol"  # Amount of substance
    CD = "cd"  # Luminous intensity
    K = "k"  # Temperature in kelvin
    C = "c"  # Temperature in celsius
    F = "f"  # Temperature in fahrenheit


_DIMENSIONS: tuple[SIDimension, ...] = tuple(SIDimension)

_TEMPERATURE_DIMENSIONS = frozenset({SIDimension.K, SIDimension.C, SIDimension.F})


def _wrap(exponent: int) -> int:
    """Wrap an exponent into the signed byte range (two's complement)."""
    return (exponent - SIEXP_MINIMUM) % 256 + SIEXP_MINIMUM


@dataclass(frozen=True, kw_only=True)
class SIInvalid:
    """Reason why a dimension vector is invalid.

    Attributes:
        dimensions: Offending dimension(s)
        exponent: Attempted exponent for an overflow, None for a mutual exclusion
    """

    dimensions: tuple[SIDimension, ...]
    exponent: int | None = None

    def __str__(self) -> str:
        names = "".join(dimension.value for dimension in self.dimensions)
        if self.exponent is None:
            return f"{names} cannot be combined"
        return f"{names} exponent {self.exponent} out of range {SIEXP_MINIMUM}..{SIEXP_MAXIMUM}"


@dataclass(frozen=True)
class SIExp:
    """Immutable vector of SI exponents.

    Build vectors with the fluent setters, which each return a new vector:

        >>> str(SIExp().kg(1).m(2).s(-2))
        'kgm²s⁻²'
        >>> str(SIExp.build().s(-1).m(3) * SIExp.build().s(1))
        'm³'

    Attributes:
        exponents: One exponent per SIDimension, in declaration order
        invalid: None while valid, otherwise the reason for invalidity
    """

    exponents: tuple[int, ...] = field(default=(0,) * len(_DIMENSIONS))
    invalid: SIInvalid | None = None

    def __post_init__(self) -> None:
        if len(self.exponents) != len(_DIMENSIONS):
            raise ValueError(f"Expected {len(_DIMENSIONS)} exponents, got {len(self.exponents)}")

        # Mutual exclusion is checked whenever a vector is produced
        if self.invalid is None:
            present = tuple(
                dimension
                for dimension, exponent in zip(_DIMENSIONS, self.exponents, strict=True)
                if dimension in _TEMPERATURE_DIMENSIONS and exponent != 0
            )
            if len(present) > 1:
                object.__setattr__(self, "invalid", SIInvalid(dimensions=present))

    @classmethod
    def build(cls) -> SIExp:
        """Return the dimensionless vector, starting point for the fluent setters."""
        return cls()

    @property
    def is_valid(self) -> bool:
        return self.invalid is None

    @property
    def is_dimensionless(self) -> bool:
        return self.is_valid and not any(self.exponents)

    def get(self, dimension: SIDimension) -> int:
        """Return the exponent of a single dimension."""
        return self.exponents[_DIMENSIONS.index(dimension)]

    def set(self, dimension: SIDimension, exponent: int) -> SIExp:
        """Return a copy of this vector with one exponent replaced."""
        exponents = list(self.exponents)
        invalid = self.invalid
        if not SIEXP_MINIMUM <= exponent <= SIEXP_MAXIMUM and invalid is None:
            invalid = SIInvalid(dimensions=(dimension,), exponent=exponent)
        exponents[_DIMENSIONS.index(dimension)] = _wrap(exponent)
        return SIExp(tuple(exponents), invalid)

    # Fluent setters, one per base dimension

    def kg(self, exponent: int) -> SIExp:
        return self.set(SIDimension.KG, exponent)

    def m(self, exponent: int) -> SIExp:
        return self.set(SIDimension.M, exponent)

    def s(self, exponent: int) -> SIExp:
        return self.set(SIDimension.S, exponent)

    def a(self, exponent: int) -> SIExp:
        return self.set(SIDimension.A, exponent)

    def mol(self, exponent: int) -> SIExp:
        return self.set(SIDimension.MOL, exponent)

    def cd(self, exponent: int) -> SIExp:
        return self.set(SIDimension.CD, exponent)

    def k(self, exponent: int) -> SIExp:
        return self.set(SIDimension.K, exponent)

    def c(self, exponent: int) -> SIExp:
        return self.set(SIDimension.C, exponent)

    def f(self, exponent: int) -> SIExp:
        return self.set(SIDimension.F, exponent)

    def _combine(self, other: SIExp, sign: int) -> SIExp:
        invalid = self.invalid or other.invalid
        exponents = []
        for dimension, left, right in zip(_DIMENSIONS, self.exponents, other.exponents, strict=True):
            attempted = left + sign * right
            if invalid is None and not SIEXP_MINIMUM <= attempted <= SIEXP_MAXIMUM:
                invalid = SIInvalid(dimensions=(dimension,), exponent=attempted)
            exponents.append(_wrap(attempted))
        return SIExp(tuple(exponents), invalid)

    def mul(self, other: SIExp) -> SIExp:
        """Multiply two vectors (add exponents)."""
        return self._combine(other, 1)

    def div(self, other: SIExp) -> SIExp:
        """Divide two vectors (subtract exponents)."""
        return self._combine(other, -1)

    def __mul__(self, other: SIExp) -> SIExp:
        return self.mul(other)

    def __truediv__(self, other: SIExp) -> SIExp:
        return self.div(other)

    def sqrt(self) -> SIExp:
        """Halve every exponent.

        Raises:
            ValueError: If any exponent is odd
        """
        odd = [dimension.value for dimension, exponent in zip(_DIMENSIONS, self.exponents, strict=True) if exponent % 2]
        if odd:
            raise ValueError(f"Cannot take square root of {self}, odd exponent for {''.join(odd)}")
        return SIExp(tuple(exponent // 2 for exponent in self.exponents), self.invalid)

    def __str__(self) -> str:
        parts = []
        for dimension, exponent in zip(_DIMENSIONS, self.exponents, strict=True):
            if exponent == 0:
                continue
            parts.append(dimension.value)
            if exponent != 1:
                parts.append(str(exponent).translate(_SUPERSCRIPTS))
        rendered = "".join(parts)
        if self.invalid is not None:
            # Exponents can wrap back to zero, the reason still names the offenders
            if not rendered:
                rendered = "".join(dimension.value for dimension in self.invalid.dimensions)
            return f"!{rendered}-Invalid!"
        return rendered
