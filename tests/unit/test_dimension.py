"""Unit tests for SI dimension vectors."""

import pytest

from mbusformula.units.dimension import SIEXP_MAXIMUM, SIEXP_MINIMUM, SIDimension, SIExp
from mbusformula.units.registry import REGISTRY, Unit

# =============================================================================
# Rendering
# =============================================================================


class TestSIExpRendering:
    """Tests for SIExp.__str__."""

    @pytest.mark.parametrize(
        ("exp", "expected"),
        [
            (SIExp.build().s(-1).m(3), "m³s⁻¹"),
            (SIExp().kg(1).m(2).s(-2), "kgm²s⁻²"),
            (SIExp().kg(1).m(2).s(-3).a(-1), "kgm²s⁻³a⁻¹"),
            (SIExp().m(3).c(1), "m³c"),
            (SIExp().mol(1).cd(1), "molcd"),
            (SIExp().f(-12), "f⁻¹²"),
            (SIExp(), ""),
        ],
        ids=["flow", "energy", "voltage", "volume_celsius", "mol_cd", "two_digit_negative", "dimensionless"],
    )
    def test_render(self, exp: SIExp, expected: str) -> None:
        """Test dimensions render in canonical order with superscript exponents."""
        assert str(exp) == expected

    def test_setter_order_does_not_matter(self) -> None:
        """Test that render order is fixed regardless of setter order."""
        assert SIExp().s(-1).m(3) == SIExp().m(3).s(-1)
        assert str(SIExp().s(-2).m(2).kg(1)) == "kgm²s⁻²"

    def test_division_by_itself_is_dimensionless(self) -> None:
        """Test that a vector divided by itself renders empty."""
        exp = SIExp.build().s(-1).m(3)
        assert str(exp.div(exp)) == ""
        assert (exp / exp).is_dimensionless

    @pytest.mark.parametrize("unit", list(Unit), ids=[unit.value for unit in Unit])
    def test_every_registry_unit_divided_by_itself(self, unit: Unit) -> None:
        """Test division by itself for the dimension vector of every registry unit."""
        exp = REGISTRY.descriptor(unit).exp
        assert str(exp / exp) == ""

    @pytest.mark.parametrize(
        ("first", "second"),
        [
            (SIExp().kg(1).m(2).s(-2), SIExp().s(1)),
            (SIExp().m(3), SIExp().m(3).s(-1)),
            (SIExp().c(1), SIExp().a(2).mol(-1)),
        ],
    )
    def test_multiply_divide_inverse(self, first: SIExp, second: SIExp) -> None:
        """Test that multiplying then dividing by the same vector is the identity."""
        assert (first * second) / second == first
        assert (first / second) * second == first


# =============================================================================
# Validity
# =============================================================================


class TestSIExpInvalid:
    """Tests for overflow and mutual exclusion."""

    def test_overflow_wraps_and_invalidates(self) -> None:
        """Test that exceeding the exponent range wraps like a signed byte."""
        exp = SIExp.build().s(SIEXP_MAXIMUM) * SIExp.build().s(1)
        assert not exp.is_valid
        assert exp.get(SIDimension.S) == SIEXP_MINIMUM
        assert str(exp) == "!s⁻¹²⁸-Invalid!"

    def test_underflow_invalidates(self) -> None:
        """Test that going below the exponent range invalidates."""
        exp = SIExp().m(SIEXP_MINIMUM) / SIExp().m(1)
        assert not exp.is_valid
        assert exp.invalid is not None
        assert exp.invalid.dimensions == (SIDimension.M,)
        assert exp.invalid.exponent == SIEXP_MINIMUM - 1

    def test_overflow_records_attempted_exponent(self) -> None:
        """Test that the invalid reason names the dimension and attempted exponent."""
        exp = SIExp().s(100) * SIExp().s(100)
        assert exp.invalid is not None
        assert exp.invalid.dimensions == (SIDimension.S,)
        assert exp.invalid.exponent == 200
        assert "out of range" in str(exp.invalid)

    def test_setter_out_of_range_invalidates(self) -> None:
        """Test that a setter outside the range invalidates the vector."""
        exp = SIExp().kg(200)
        assert not exp.is_valid
        assert exp.get(SIDimension.KG) == 200 - 256

    def test_invalid_render_names_wrapped_dimension(self) -> None:
        """Test that the render names the offending dimension after its exponent wraps back to zero."""
        exp = (SIExp().s(SIEXP_MAXIMUM) * SIExp().s(1)) * SIExp().s(SIEXP_MINIMUM)
        assert exp.get(SIDimension.S) == 0
        assert str(exp) == "!s-Invalid!"

    def test_invalid_is_sticky(self) -> None:
        """Test that invalid vectors stay invalid under further combination."""
        invalid = SIExp().s(SIEXP_MAXIMUM) * SIExp().s(1)
        restored = invalid / SIExp().s(1)
        assert not restored.is_valid
        assert str(restored).endswith("-Invalid!")
        assert not (SIExp() * invalid).is_valid
        assert not (invalid / invalid).is_valid

    @pytest.mark.parametrize(
        ("exp", "expected"),
        [
            (SIExp.build().k(1).c(1), "!kc-Invalid!"),
            (SIExp.build().c(1).f(1), "!cf-Invalid!"),
            (SIExp.build().k(1).f(-1), "!kf⁻¹-Invalid!"),
        ],
        ids=["kelvin_celsius", "celsius_fahrenheit", "kelvin_fahrenheit"],
    )
    def test_temperature_markers_exclusive(self, exp: SIExp, expected: str) -> None:
        """Test that two temperature markers in one vector invalidate it."""
        assert not exp.is_valid
        assert str(exp) == expected

    def test_temperature_markers_exclusive_after_multiplication(self) -> None:
        """Test that mutual exclusion is checked for combined vectors too."""
        exp = SIExp().c(1) * SIExp().k(1)
        assert not exp.is_valid
        assert exp.invalid is not None
        assert exp.invalid.exponent is None
        assert "cannot be combined" in str(exp.invalid)

    def test_wrong_exponent_count_raises(self) -> None:
        """Test that constructing with a wrong number of exponents raises ValueError."""
        with pytest.raises(ValueError, match="Expected 9 exponents"):
            SIExp((0, 0, 0))


# =============================================================================
# Square root
# =============================================================================


class TestSIExpSqrt:
    """Tests for SIExp.sqrt."""

    def test_sqrt_halves_exponents(self) -> None:
        """Test that sqrt halves every exponent."""
        assert SIExp().m(2).s(-4).sqrt() == SIExp().m(1).s(-2)

    def test_sqrt_of_dimensionless(self) -> None:
        """Test that sqrt of a dimensionless vector is dimensionless."""
        assert SIExp().sqrt().is_dimensionless

    def test_sqrt_odd_exponent_raises(self) -> None:
        """Test that an odd exponent raises ValueError."""
        with pytest.raises(ValueError, match="odd exponent"):
            SIExp().kg(1).m(2).s(-3).sqrt()
