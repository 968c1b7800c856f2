"""Template strings with embedded formulas.

A template such as ``history_{storage_counter-12counter}_value`` is split
into literal text and placeholder formulas. The formulas are parsed once and
evaluated against a data record on every apply().
"""

from __future__ import annotations

import logging

from ..exceptions import MisuseError, ParseError
from ..units.registry import Unit
from .common import DVEntry
from .formula import Formula

logger = logging.getLogger(__name__)


def _render(value: float) -> str:
    """Whole numbers render without a fractional part."""
    if value.is_integer():
        return str(int(value))
    return str(value)


class StringInterpolator:
    """Template string whose ``{...}`` placeholders are formulas.

    Placeholder formulas may use constants and data record counters, meter
    fields are not available.

    Usage:
        interpolator = StringInterpolator()
        if interpolator.parse("{storage_counter}_{tariff_counter}"):
            interpolator.apply(record)  # "17_3"
    """

    _segments: list[str | Formula]
    _errors: list[str]
    _parsed: bool

    def __init__(self) -> None:
        self._segments = []
        self._errors = []
        self._parsed = False

    def parse(self, template: str) -> bool:
        """Split a template into literals and formulas, replacing any previous template.

        Returns:
            True if every placeholder parsed into a valid formula
        """
        self._segments = []
        self._errors = []
        self._parsed = True

        position = 0
        while position < len(template):
            opening = template.find("{", position)
            if opening == -1:
                self._segments.append(template[position:])
                break

            closing = template.find("}", opening + 1)
            if closing == -1:
                error = ParseError("Missing closing '}'!", template, opening, len(template) - opening)
                self._errors.append(str(error))
                break

            if opening > position:
                self._segments.append(template[position:opening])

            formula = Formula()
            if not formula.parse(template[opening + 1 : closing]):
                # Offsets are relative to the placeholder, re-anchor them to the template
                for error in formula.diagnostics:
                    anchored = ParseError(error.message, template, opening + 1 + error.start, error.length)
                    self._errors.append(str(anchored))
            self._segments.append(formula)

            position = closing + 1

        if self._errors:
            logger.warning(f"Invalid template {template!r}: {''.join(self._errors).rstrip()}")

        return self.valid()

    def valid(self) -> bool:
        return self._parsed and not self._errors

    def errors(self) -> str:
        return "".join(self._errors)

    def apply(self, record: DVEntry) -> str:
        """Evaluate every placeholder against record and join the result with the literals.

        Raises:
            MisuseError: If the template is not valid
            EvaluationError: If a placeholder has no result for the record (a zero
                tariff_counter as divisor for example)
        """
        if not self.valid():
            raise MisuseError("Cannot apply an invalid or unparsed template")

        parts = []
        for segment in self._segments:
            if isinstance(segment, str):
                parts.append(segment)
                continue
            segment.set_dv_entry(record)
            parts.append(_render(segment.calculate(Unit.COUNTER)))

        result = "".join(parts)
        logger.debug(f"Interpolated {result!r}")
        return result
