"""Physical units: quantity, scale and SI dimension.

SIUnit is the value type the formula engine computes with. Each syntax tree
node carries one, products and quotients derive new ones, and the final
result is converted from the root unit into the unit requested by the caller.
"""

from __future__ import annotations

import math
import re
from dataclasses import dataclass

from ..exceptions import DimensionOverflowError, UnsupportedConversionError
from .dimension import SIDimension, SIExp
from .registry import REGISTRY, Quantity, Unit

# ============================================================================
# Constants
# ============================================================================


KELVIN_AT_ZERO_CELSIUS = 273.15
KELVIN_AT_ZERO_FAHRENHEIT_SCALED = 459.67  # Rankine offset, kelvin = (°F + 459.67) * 5/9

_SUPERSCRIPTS = str.maketrans("-0123456789", "⁻⁰¹²³⁴⁵⁶⁷⁸⁹")

_SCIENTIFIC = re.compile(r"^(?P<mantissa>-?[0-9.]+)e(?P<exponent>[-+][0-9]+)$")


def _render_scale(scale: float) -> str:
    """Render a scale like printf %g, with the exponent written as ×10ⁿ.

    Examples:
        3600000.0 -> "3.6×10⁶", 1000.0 -> "1000", 1e9 -> "10⁹"
    """
    rendered = f"{scale:g}"
    match = _SCIENTIFIC.match(rendered)
    if match is None:
        return rendered
    exponent = str(int(match.group("exponent"))).translate(_SUPERSCRIPTS)
    mantissa = match.group("mantissa")
    if mantissa == "1":
        return f"10{exponent}"
    return f"{mantissa}×10{exponent}"


def _temperature_dimension(exp: SIExp) -> SIDimension | None:
    """Return the temperature marker if exp is exactly one temperature dimension to the power one."""
    for dimension in (SIDimension.K, SIDimension.C, SIDimension.F):
        if exp == SIExp().set(dimension, 1):
            return dimension
    return None


def _to_kelvin(value: float, dimension: SIDimension) -> float:
    if dimension is SIDimension.C:
        return value + KELVIN_AT_ZERO_CELSIUS
    if dimension is SIDimension.F:
        return (value + KELVIN_AT_ZERO_FAHRENHEIT_SCALED) * 5.0 / 9.0
    return value


def _from_kelvin(value: float, dimension: SIDimension) -> float:
    if dimension is SIDimension.C:
        return value - KELVIN_AT_ZERO_CELSIUS
    if dimension is SIDimension.F:
        return value * 9.0 / 5.0 - KELVIN_AT_ZERO_FAHRENHEIT_SCALED
    return value


@dataclass(frozen=True)
class SIUnit:
    """A physical unit described by quantity, scale and dimension vector.

    Attributes:
        quantity: Semantic category, None for a derived unit without a registry name
        scale: Multiplier to the coherent SI unit of the dimension
        exp: SI dimension vector

    Examples:
        >>> kwh = SIUnit(Quantity.ENERGY, 3.6e6, SIExp().kg(1).m(2).s(-2))
        >>> str(kwh)
        '3.6×10⁶kgm²s⁻²'
        >>> kwh == SIUnit.from_unit(Unit.KWH)
        True
        >>> SIUnit.from_unit(Unit.KWH).convert_to(10, SIUnit.from_unit(Unit.MJ))
        36.0
    """

    quantity: Quantity | None
    scale: float
    exp: SIExp

    @classmethod
    def from_unit(cls, unit: Unit) -> SIUnit:
        """Create the physical unit for a named registry unit."""
        descriptor = REGISTRY.descriptor(unit)
        return cls(descriptor.quantity, descriptor.scale, descriptor.exp)

    def as_unit(self, quantity: Quantity | None = None) -> Unit | None:
        """Resolve back to a named registry unit.

        Args:
            quantity: Disambiguates units sharing scale and dimension
                (kwh, kvarh and kvah for example); defaults to this unit's quantity

        Returns:
            The named unit, or None if no registry unit matches
        """
        return REGISTRY.find_unit(self.scale, self.exp, quantity or self.quantity)

    @property
    def is_special(self) -> bool:
        """True for units that only convert to themselves (m3c, m3ch)."""
        unit = self.as_unit()
        return unit is not None and REGISTRY.descriptor(unit).special

    def name(self) -> str:
        """Lowercase token of the named unit, "?" for unnamed derived units."""
        unit = self.as_unit()
        return "?" if unit is None else unit.value

    def quantity_name(self) -> str:
        return "Unknown" if self.quantity is None else self.quantity.value

    def describe(self) -> str:
        """Diagnostic description in the form [<unit>|<quantity>|<SI render>]."""
        return f"[{self.name()}|{self.quantity_name()}|{self}]"

    def __str__(self) -> str:
        unit = self.as_unit()
        if unit is not None and REGISTRY.descriptor(unit).literal:
            return f"1{unit.value}"
        return f"{_render_scale(self.scale)}{self.exp}"

    # =========================================================================
    # Arithmetic on units
    # =========================================================================

    def _derive(self, scale: float, exp: SIExp) -> SIUnit:
        quantity = REGISTRY.find_quantity(scale, exp) if exp.is_valid else None
        return SIUnit(quantity, scale, exp)

    def __mul__(self, other: SIUnit) -> SIUnit:
        return self._derive(self.scale * other.scale, self.exp * other.exp)

    def __truediv__(self, other: SIUnit) -> SIUnit:
        return self._derive(self.scale / other.scale, self.exp / other.exp)

    def sqrt(self) -> SIUnit:
        """Square root of the unit.

        Raises:
            ValueError: If any dimension exponent is odd
        """
        return self._derive(math.sqrt(self.scale), self.exp.sqrt())

    # =========================================================================
    # Conversion
    # =========================================================================

    def can_convert_to(self, other: SIUnit) -> bool:
        """True if values in this unit can be expressed in the other unit.

        Rules:
            - Invalid dimension vectors never convert
            - Special units only convert to themselves, including an unnamed
              derived unit with the same scale and dimension (m3 * c into m3c)
            - Temperature units convert among each other (affine relation)
            - Otherwise the dimensions must be equal and the quantities equal
              or aliased; an unnamed derived unit only needs equal dimensions
        """
        if not (self.exp.is_valid and other.exp.is_valid):
            return False

        if self.is_special or other.is_special:
            special = self if self.is_special else other
            unit = special.as_unit()
            return self.as_unit(special.quantity) is unit and other.as_unit(special.quantity) is unit

        if self.quantity is Quantity.TEMPERATURE and other.quantity is Quantity.TEMPERATURE:
            return _temperature_dimension(self.exp) is not None and _temperature_dimension(other.exp) is not None

        if self.exp != other.exp:
            return False

        if self.quantity is None or other.quantity is None:
            return True

        return REGISTRY.are_compatible(self.quantity, other.quantity)

    def convert_to(self, value: float, other: SIUnit) -> float:
        """Convert a value from this unit into the other unit.

        Args:
            value: Value expressed in this unit
            other: Target unit

        Returns:
            The value expressed in the target unit

        Raises:
            DimensionOverflowError: If either unit has an invalid dimension vector
            UnsupportedConversionError: If the units are not convertible
        """
        if not self.exp.is_valid or not other.exp.is_valid:
            invalid = self if not self.exp.is_valid else other
            raise DimensionOverflowError(f"Cannot convert {invalid.describe()}: {invalid.exp.invalid}")

        if not self.can_convert_to(other):
            raise UnsupportedConversionError(f"Cannot convert {self.describe()} to {other.describe()}")

        source = _temperature_dimension(self.exp)
        target = _temperature_dimension(other.exp)
        if source is not None and target is not None and source is not target:
            kelvin = _to_kelvin(value * self.scale, source)
            return _from_kelvin(kelvin, target) / other.scale

        return value * self.scale / other.scale
