"""Unit tests for template string interpolation."""

import pytest

from mbusformula.exceptions import EvaluationError, MisuseError
from mbusformula.formula import StringInterpolator


@pytest.fixture
def interpolator() -> StringInterpolator:
    return StringInterpolator()


class TestStringInterpolatorApply:
    """Tests for StringInterpolator.apply."""

    def test_history_field_name(self, interpolator: StringInterpolator, dv_entry: object) -> None:
        assert interpolator.parse("history_{storage_counter-12counter}_value")
        assert interpolator.apply(dv_entry) == "history_5_value"  # type: ignore[arg-type]

    def test_several_placeholders(self, interpolator: StringInterpolator, dv_entry: object) -> None:
        assert interpolator.parse("{storage_counter}_{tariff_counter}_{2counter*subunit_counter}")
        assert interpolator.apply(dv_entry) == "17_3_4"  # type: ignore[arg-type]

    def test_reapply_with_other_records(self, interpolator: StringInterpolator, make_dv_entry: type) -> None:
        """Test that a parsed template is evaluated afresh for every record."""
        assert interpolator.parse("history_{storage_counter-12counter}_value")
        assert interpolator.apply(make_dv_entry(storage_nr=13)) == "history_1_value"
        assert interpolator.apply(make_dv_entry(storage_nr=20)) == "history_8_value"

    def test_fractional_result(self, interpolator: StringInterpolator, dv_entry: object) -> None:
        """Test that results which are not whole keep their fraction."""
        assert interpolator.parse("half_{storage_counter / 2counter}")
        assert interpolator.apply(dv_entry) == "half_8.5"  # type: ignore[arg-type]

    def test_zero_divisor_raises(self, interpolator: StringInterpolator, make_dv_entry: type) -> None:
        """Test that a record without result for a placeholder raises instead of rendering."""
        assert interpolator.parse("x_{storage_counter / tariff_counter}")
        with pytest.raises(EvaluationError, match="Division by zero"):
            interpolator.apply(make_dv_entry(storage_nr=1, tariff_nr=0))

    @pytest.mark.parametrize("template", ["plain_text", ""])
    def test_without_placeholders(self, interpolator: StringInterpolator, dv_entry: object, template: str) -> None:
        assert interpolator.parse(template)
        assert interpolator.apply(dv_entry) == template  # type: ignore[arg-type]


class TestStringInterpolatorErrors:
    """Tests for broken templates."""

    def test_missing_closing_brace(self, interpolator: StringInterpolator) -> None:
        template = "history_{storage_counter"
        assert not interpolator.parse(template)
        assert interpolator.errors() == f"Missing closing '}}'!\n{template}\n" + " " * 8 + "^" + "~" * 15 + "\n"

    def test_meter_field_not_available(self, interpolator: StringInterpolator) -> None:
        assert not interpolator.parse("total_{total_kwh}")
        assert "without a meter" in interpolator.errors()

    def test_empty_placeholder(self, interpolator: StringInterpolator) -> None:
        assert not interpolator.parse("value_{}")
        assert interpolator.errors() == "Unexpected end of formula!\nvalue_{}\n" + " " * 7 + "^\n"

    def test_placeholder_error_points_into_template(self, interpolator: StringInterpolator) -> None:
        """Test that placeholder diagnostics render the template with the marker under the placeholder text."""
        template = "total_{total_kwh}_sum"
        assert not interpolator.parse(template)
        marker = " " * 7 + "^" + "~" * 8
        assert interpolator.errors() == f"Cannot resolve field 'total_kwh' without a meter!\n{template}\n{marker}\n"

    def test_apply_invalid_raises(self, interpolator: StringInterpolator, dv_entry: object) -> None:
        interpolator.parse("value_{bogus}")
        with pytest.raises(MisuseError, match="invalid or unparsed template"):
            interpolator.apply(dv_entry)  # type: ignore[arg-type]

    def test_apply_unparsed_raises(self, interpolator: StringInterpolator, dv_entry: object) -> None:
        with pytest.raises(MisuseError):
            interpolator.apply(dv_entry)  # type: ignore[arg-type]

    def test_reparse_resets_errors(self, interpolator: StringInterpolator) -> None:
        assert not interpolator.parse("value_{bogus}")
        assert interpolator.parse("value_{storage_counter}")
        assert interpolator.errors() == ""
