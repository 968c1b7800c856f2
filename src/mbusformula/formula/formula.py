"""Unit-aware formula parsing and evaluation.

Grammar:
    expr   := term (('+' | '-') term)*
    term   := factor (('*' | '/') factor)*
    factor := number unit? | 'sqrt' '(' expr ')' | '(' expr ')'
            | identifier | quoted-date | quoted-time

A number without a unit is a dimensionless counter. Identifiers are either
data record counters (storage_counter, tariff_counter, subunit_counter) or
meter fields with a unit suffix (total_energy_consumption_kwh).

The parser drives a stack based builder. The builder methods are public, so
a tree can also be assembled programmatically:

    formula = Formula()
    formula.do_constant(17, Unit.KWH)
    formula.do_constant(1, Unit.KWH)
    formula.do_addition()
    formula.calculate(Unit.KWH)  # 18.0

Unit mismatches found while building are collected as diagnostics and the
tree is still completed, a grammar error aborts the parse.
"""

from __future__ import annotations

import logging
from datetime import datetime

from ..dates import parse_date_time, parse_time_of_day
from ..exceptions import MisuseError, ParseError, UnitMismatchError
from ..units.physical import SIUnit
from ..units.registry import REGISTRY, Unit, extract_unit
from .common import DVEntry, FieldValues
from .nodes import (
    AddNode,
    ConstantNode,
    DateTimeNode,
    DivideNode,
    DVEntryCounter,
    DVEntryNode,
    FieldNode,
    Node,
    SqrtNode,
    TimeNode,
    TimesNode,
)
from .tokenizer import Token, TokenType, tokenize

logger = logging.getLogger(__name__)

_DV_ENTRY_COUNTERS = frozenset(counter.value for counter in DVEntryCounter)


class Formula:
    """A parsed (or programmatically built) formula.

    The formula owns its syntax tree and diagnostics. The meter and data
    record collaborators are borrowed and stay bound until clear().

    Usage:
        formula = Formula()
        if formula.parse("10 kwh + 100 kwh"):
            formula.calculate(Unit.KWH)  # 110.0
        else:
            print(formula.errors())
    """

    _meter: FieldValues | None
    _dv_entry: DVEntry | None
    _text: str | None
    _stack: list[Node]
    _errors: list[ParseError]

    def __init__(self) -> None:
        self.clear()

    def clear(self) -> None:
        """Discard the tree, the diagnostics and the collaborator bindings."""
        self._meter = None
        self._dv_entry = None
        self._text = None
        self._stack = []
        self._errors = []

    @property
    def meter(self) -> FieldValues | None:
        return self._meter

    @property
    def dv_entry(self) -> DVEntry | None:
        return self._dv_entry

    def set_meter(self, meter: FieldValues | None) -> None:
        self._meter = meter

    def set_dv_entry(self, dv_entry: DVEntry | None) -> None:
        self._dv_entry = dv_entry

    @property
    def _root(self) -> Node | None:
        return self._stack[0] if len(self._stack) == 1 else None

    def parse(self, text: str, meter: FieldValues | None = None) -> bool:
        """Parse formula text into a new tree, replacing any previous tree.

        Args:
            text: Formula text
            meter: Field value provider, binds like set_meter() when given;
                required when the formula references meter fields

        Returns:
            True if the formula is valid
        """
        self._stack = []
        self._errors = []
        self._text = text
        if meter is not None:
            self._meter = meter

        try:
            _Parser(self, text).parse()
        except ParseError as error:
            self._stack = []
            self._errors.append(error)

        if self.valid():
            logger.debug(f"Parsed formula {text!r}: {self.tree()}")
        else:
            logger.warning(f"Invalid formula {text!r}: {self.errors().rstrip()}")

        return self.valid()

    def valid(self) -> bool:
        """True if a complete tree was built without diagnostics."""
        return self._root is not None and not self._errors

    def errors(self) -> str:
        """All diagnostics concatenated, empty when the formula is valid."""
        return "".join(str(error) for error in self._errors)

    @property
    def diagnostics(self) -> tuple[ParseError, ...]:
        """The diagnostics as exception instances, in the order they were found."""
        return tuple(self._errors)

    def tree(self) -> str:
        """Bracketed diagnostic rendering of the tree, empty when there is none."""
        root = self._root
        return "" if root is None else root.tree()

    def calculate(self, unit: Unit | SIUnit) -> float:
        """Evaluate the formula into the requested unit.

        Args:
            unit: Target unit

        Returns:
            The value of the formula expressed in unit

        Raises:
            MisuseError: If the formula is not valid or a collaborator it needs is not bound
            UnsupportedConversionError: If the result cannot be converted into unit
            DimensionOverflowError: If the result has an invalid dimension vector
            EvaluationError: If the operand values have no result (division by zero,
                square root of a negative value, date out of range)
        """
        if self._errors:
            raise MisuseError(f"Cannot calculate an invalid formula:\n{self.errors()}")

        root = self._root
        if root is None:
            raise MisuseError("Cannot calculate, formula has not been parsed or built")

        target = unit if isinstance(unit, SIUnit) else SIUnit.from_unit(unit)
        value = root.unit.convert_to(root.evaluate(self._meter, self._dv_entry), target)

        logger.debug(f"Calculated {self._text or root.tree()} = {value} {target.name()}")
        return value

    # =========================================================================
    # Builder
    # =========================================================================

    def _pop(self, count: int, operation: str) -> list[Node]:
        if len(self._stack) < count:
            raise MisuseError(f"{operation} needs {count} operand(s), stack holds {len(self._stack)}")
        operands = self._stack[-count:]
        del self._stack[-count:]
        return operands

    def do_constant(self, value: float, unit: Unit, *, start: int = 0, end: int = 0) -> None:
        self._stack.append(ConstantNode(float(value), SIUnit.from_unit(unit), start, end))

    def do_meter_field(self, unit: Unit, name: str, *, start: int = 0, end: int = 0) -> None:
        """Push a reference to a meter field, evaluated in unit.

        Raises:
            MisuseError: If no meter is bound
            ParseError: If the meter has no such field for the unit's quantity
        """
        if self._meter is None:
            raise MisuseError(f"No meter bound, cannot reference field {name}")

        field_unit = SIUnit.from_unit(unit)
        quantity = REGISTRY.quantity_of(unit)
        if not self._meter.has_field(name, quantity):
            raise ParseError(f"No such field {name} with quantity {quantity}!", self._text, start, end - start)

        self._stack.append(FieldNode(name, field_unit, start, end))

    def do_dv_entry_counter(self, counter: DVEntryCounter | str, *, start: int = 0, end: int = 0) -> None:
        self._stack.append(DVEntryNode(DVEntryCounter(counter), start, end))

    def do_date_time(self, value: datetime, *, start: int = 0, end: int = 0) -> None:
        self._stack.append(DateTimeNode(value, start, end))

    def do_time(self, seconds: float, *, start: int = 0, end: int = 0) -> None:
        self._stack.append(TimeNode(float(seconds), start, end))

    def _add(self, subtract: bool, operator: int | None) -> None:
        left, right = self._pop(2, "Subtraction" if subtract else "Addition")
        node = AddNode(left, right, subtract)

        if not node.valid:
            # Marker starts at the operator and is as long as the right operand
            self._errors.append(
                UnitMismatchError(
                    node.mismatch_message(),
                    left.unit.describe(),
                    right.unit.describe(),
                    self._text,
                    right.start if operator is None else operator,
                    right.length,
                )
            )

        self._stack.append(node)

    def do_addition(self, *, operator: int | None = None) -> None:
        self._add(False, operator)

    def do_subtraction(self, *, operator: int | None = None) -> None:
        self._add(True, operator)

    def do_multiplication(self) -> None:
        left, right = self._pop(2, "Multiplication")
        self._stack.append(TimesNode(left, right))

    def do_division(self) -> None:
        left, right = self._pop(2, "Division")
        self._stack.append(DivideNode(left, right))

    def do_square_root(self, *, start: int | None = None, end: int | None = None) -> None:
        (inner,) = self._pop(1, "Square root")
        node = SqrtNode(
            inner,
            inner.start if start is None else start,
            inner.end if end is None else end,
        )

        if not node.valid:
            self._errors.append(
                ParseError(f"Cannot take square root of {inner.unit.describe()}!", self._text, node.start, node.length)
            )

        self._stack.append(node)


# =============================================================================
# Recursive descent parser
# =============================================================================


class _Parser:
    """Single-use recursive descent parser feeding a Formula's builder."""

    _formula: Formula
    _text: str
    _tokens: list[Token]
    _position: int

    def __init__(self, formula: Formula, text: str) -> None:
        self._formula = formula
        self._text = text
        self._tokens = tokenize(text)
        self._position = 0

    def parse(self) -> None:
        self._expression()

        token = self._peek()
        if token is not None:
            raise self._unexpected(token)

    def _error(self, message: str, start: int, length: int = 1) -> ParseError:
        return ParseError(message, self._text, start, length)

    def _unexpected(self, token: Token) -> ParseError:
        return self._error(f"Unexpected '{token.text}'!", token.start, len(token.text))

    def _peek(self) -> Token | None:
        if self._position < len(self._tokens):
            return self._tokens[self._position]
        return None

    def _next(self) -> Token:
        token = self._peek()
        if token is None:
            raise self._error("Unexpected end of formula!", len(self._text))
        self._position += 1
        return token

    def _expect(self, token_type: TokenType) -> Token:
        token = self._next()
        if token.type is not token_type:
            raise self._unexpected(token)
        return token

    def _operator(self, operators: str) -> Token | None:
        token = self._peek()
        if token is not None and token.type is TokenType.OPERATOR and token.text in operators:
            self._position += 1
            return token
        return None

    def _expression(self) -> None:
        self._term()
        while (operator := self._operator("+-")) is not None:
            self._term()
            if operator.text == "+":
                self._formula.do_addition(operator=operator.start)
            else:
                self._formula.do_subtraction(operator=operator.start)

    def _term(self) -> None:
        self._factor()
        while (operator := self._operator("*/")) is not None:
            self._factor()
            if operator.text == "*":
                self._formula.do_multiplication()
            else:
                self._formula.do_division()

    def _factor(self) -> None:
        token = self._next()

        match token.type:
            case TokenType.NUMBER:
                self._constant(token)
            case TokenType.IDENTIFIER:
                self._identifier(token)
            case TokenType.DATE_TIME:
                self._date_time(token)
            case TokenType.LEFT_PARENTHESIS:
                self._expression()
                self._expect(TokenType.RIGHT_PARENTHESIS)
            case _:
                raise self._unexpected(token)

    def _constant(self, number: Token) -> None:
        unit = Unit.COUNTER
        end = number.end

        token = self._peek()
        if token is not None and token.type is TokenType.IDENTIFIER:
            found = REGISTRY.lookup(token.value)
            if found is None:
                raise self._error(f"Unknown unit '{token.text}'!", token.start, len(token.text))
            unit = found
            end = token.end
            self._position += 1

        self._formula.do_constant(float(number.text), unit, start=number.start, end=end)

    def _identifier(self, token: Token) -> None:
        name = token.value

        if name == "sqrt":
            self._expect(TokenType.LEFT_PARENTHESIS)
            self._expression()
            closing = self._expect(TokenType.RIGHT_PARENTHESIS)
            self._formula.do_square_root(start=token.start, end=closing.end)
            return

        if name in _DV_ENTRY_COUNTERS:
            self._formula.do_dv_entry_counter(name, start=token.start, end=token.end)
            return

        extracted = extract_unit(name)
        if extracted is None:
            raise self._error(f"Unknown identifier '{token.text}'!", token.start, len(token.text))

        if self._formula.meter is None:
            raise self._error(f"Cannot resolve field '{token.text}' without a meter!", token.start, len(token.text))

        vname, unit = extracted
        self._formula.do_meter_field(unit, vname, start=token.start, end=token.end)

    def _date_time(self, token: Token) -> None:
        literal = token.value

        moment = parse_date_time(literal)
        if moment is not None:
            self._formula.do_date_time(moment, start=token.start, end=token.end)
            return

        seconds = parse_time_of_day(literal)
        if seconds is not None:
            self._formula.do_time(seconds, start=token.start, end=token.end)
            return

        raise self._error(f"Invalid date or time '{literal}'!", token.start, len(token.text))
