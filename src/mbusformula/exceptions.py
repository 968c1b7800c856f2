"""Formula engine exception classes."""

from __future__ import annotations


class FormulaError(Exception):
    """Base exception for all formula engine errors."""


class ParseError(FormulaError):
    """Malformed formula text (unknown token, bad grammar, unknown identifier).

    When the formula text is known the error renders the text followed by a
    marker line pointing at the offending source span.
    """

    message: str
    text: str | None
    start: int
    length: int

    def __init__(self, message: str, text: str | None = None, start: int = 0, length: int = 1) -> None:
        super().__init__(message)
        self.message = message
        self.text = text
        self.start = start
        self.length = max(length, 1)

    def marker(self) -> str:
        """Return the marker line: a caret followed by tildes, indented to the span start."""
        return " " * self.start + "^" + "~" * (self.length - 1)

    def __str__(self) -> str:
        if self.text is None:
            return f"{self.message}\n"
        return f"{self.message}\n{self.text}\n{self.marker()}\n"


class UnitMismatchError(ParseError):
    """Incompatible operands of an addition or subtraction."""

    left: str
    right: str

    def __init__(
        self, message: str, left: str, right: str, text: str | None = None, start: int = 0, length: int = 1
    ) -> None:
        super().__init__(message, text, start, length)
        self.left = left
        self.right = right


class UnsupportedConversionError(FormulaError):
    """Conversion between incompatible or special units."""


class DimensionOverflowError(UnsupportedConversionError):
    """Value carries an invalid (overflowed or contradictory) dimension vector."""


class MisuseError(FormulaError):
    """Formula evaluated before a successful parse or without a required collaborator."""


class EvaluationError(FormulaError):
    """Valid formula whose operand values have no result (division by zero, negative square root, date out of range)."""
