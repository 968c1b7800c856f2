"""Syntax tree nodes of a parsed formula.

Every node resolves its physical unit when it is built. Evaluation returns
the node's value expressed in that unit; parents convert or combine child
values as needed, so the root value only has to be converted once into the
unit requested by the caller.

Node kinds:
    - ConstantNode: number with unit
    - FieldNode: named field of the bound meter
    - DVEntryNode: storage/tariff/subunit index of the bound data record
    - DateTimeNode / TimeNode: quoted date/time literals
    - AddNode: addition or subtraction, linear or calendar
    - TimesNode / DivideNode: products and quotients
    - SqrtNode: square root
"""

from __future__ import annotations

import math
from abc import ABC, abstractmethod
from datetime import datetime
from enum import StrEnum

from ..dates import MONTHS_PER_YEAR, add_months, from_timestamp, to_timestamp
from ..exceptions import EvaluationError, MisuseError
from ..units.physical import SIUnit
from ..units.registry import Quantity, Unit
from .common import DVEntry, FieldValues

_SECOND = SIUnit.from_unit(Unit.SECOND)


def _describe_leaf(tag: str, label: str, unit: SIUnit) -> str:
    return f"<{tag} {label} {unit.name()}[{unit}]{unit.quantity_name()}>"


class Node(ABC):
    """Base class for syntax tree nodes.

    Attributes:
        unit: Physical unit of the value the node evaluates to
        start: Offset of the node's first character in the formula text
        end: Offset just past the node's last character
    """

    unit: SIUnit
    start: int
    end: int

    def __init__(self, unit: SIUnit, start: int = 0, end: int = 0) -> None:
        self.unit = unit
        self.start = start
        self.end = end

    @property
    def length(self) -> int:
        return self.end - self.start

    @abstractmethod
    def evaluate(self, meter: FieldValues | None, dv_entry: DVEntry | None) -> float:
        """Evaluate the subtree into a value expressed in self.unit.

        Raises:
            MisuseError: If a collaborator needed by the subtree is not bound
            EvaluationError: If an operation has no result for the operand values
            UnsupportedConversionError: If a value cannot be converted
        """

    @abstractmethod
    def tree(self) -> str:
        """Render the subtree in fully bracketed diagnostic form."""


# =============================================================================
# Leaf nodes
# =============================================================================


class ConstantNode(Node):
    value: float

    def __init__(self, value: float, unit: SIUnit, start: int = 0, end: int = 0) -> None:
        super().__init__(unit, start, end)
        self.value = value

    def evaluate(self, meter: FieldValues | None, dv_entry: DVEntry | None) -> float:
        return self.value

    def tree(self) -> str:
        return _describe_leaf("CONST", f"{self.value:g}", self.unit)


class FieldNode(Node):
    """Reference to a meter field, evaluated in the unit named by the reference suffix."""

    name: str

    def __init__(self, name: str, unit: SIUnit, start: int = 0, end: int = 0) -> None:
        super().__init__(unit, start, end)
        self.name = name

    def evaluate(self, meter: FieldValues | None, dv_entry: DVEntry | None) -> float:
        if meter is None:
            raise MisuseError(f"No meter bound, cannot read field {self.name}")

        quantity = self.unit.quantity
        if quantity is None:
            raise AssertionError(f"Field {self.name} has an unnamed unit: {self.unit}")

        found = meter.field_value(self.name, quantity)
        if found is None:
            raise MisuseError(f"Meter has no value for field {self.name}")

        value, stored_unit = found
        return SIUnit.from_unit(stored_unit).convert_to(value, self.unit)

    def tree(self) -> str:
        return _describe_leaf("FIELD", self.name, self.unit)


class DVEntryCounter(StrEnum):
    """Data record indices exposed as dimensionless identifiers."""

    STORAGE = "storage_counter"
    TARIFF = "tariff_counter"
    SUBUNIT = "subunit_counter"


class DVEntryNode(Node):
    counter: DVEntryCounter

    def __init__(self, counter: DVEntryCounter, start: int = 0, end: int = 0) -> None:
        super().__init__(SIUnit.from_unit(Unit.COUNTER), start, end)
        self.counter = counter

    def evaluate(self, meter: FieldValues | None, dv_entry: DVEntry | None) -> float:
        if dv_entry is None:
            raise MisuseError(f"No data record bound, cannot read {self.counter.value}")

        match self.counter:
            case DVEntryCounter.STORAGE:
                return float(dv_entry.storage_nr)
            case DVEntryCounter.TARIFF:
                return float(dv_entry.tariff_nr)
            case DVEntryCounter.SUBUNIT:
                return float(dv_entry.subunit_nr)

        raise AssertionError(f"Data record counter not recognized: {self.counter}")

    def tree(self) -> str:
        return _describe_leaf("DVENTRY", self.counter.value, self.unit)


class DateTimeNode(Node):
    """Point in time, stored as seconds since the epoch."""

    timestamp: float

    def __init__(self, value: datetime, start: int = 0, end: int = 0) -> None:
        super().__init__(SIUnit.from_unit(Unit.UNIX_TIMESTAMP), start, end)
        self.timestamp = to_timestamp(value)

    def evaluate(self, meter: FieldValues | None, dv_entry: DVEntry | None) -> float:
        return self.timestamp

    def tree(self) -> str:
        return _describe_leaf("DATETIME", from_timestamp(self.timestamp).isoformat(), self.unit)


class TimeNode(Node):
    """Time of day, stored as a duration in seconds since midnight."""

    seconds: float

    def __init__(self, seconds: float, start: int = 0, end: int = 0) -> None:
        super().__init__(_SECOND, start, end)
        self.seconds = seconds

    def evaluate(self, meter: FieldValues | None, dv_entry: DVEntry | None) -> float:
        return self.seconds

    def tree(self) -> str:
        return _describe_leaf("TIME", f"{self.seconds:g}", self.unit)


# =============================================================================
# Operator nodes
# =============================================================================


class AddNode(Node):
    """Addition or subtraction of two operands.

    Linear when both operands are of compatible units, the right operand is
    then converted into the left operand's unit. Calendar when one operand is
    a point in time and the other a duration: month and year durations move
    the calendar date, all other durations add seconds.

    Attributes:
        left: Left operand
        right: Right operand
        subtract: True for subtraction
        calendar: True for point in time plus/minus duration
        valid: False when the operand units cannot be added
    """

    left: Node
    right: Node
    subtract: bool
    calendar: bool
    valid: bool

    def __init__(self, left: Node, right: Node, subtract: bool = False) -> None:
        self.left = left
        self.right = right
        self.subtract = subtract
        self.calendar = False
        self.valid = True

        left_quantity = left.unit.quantity
        right_quantity = right.unit.quantity

        if left_quantity is Quantity.POINT_IN_TIME and right_quantity is Quantity.TIME:
            self.calendar = True
        elif left_quantity is Quantity.TIME and right_quantity is Quantity.POINT_IN_TIME and not subtract:
            self.calendar = True
        elif left.unit.exp.is_valid and right.unit.exp.is_valid:
            # Overflowed dimensions are reported when the value is converted
            self.valid = right.unit.can_convert_to(left.unit)

        unit = right.unit if self.calendar and right_quantity is Quantity.POINT_IN_TIME else left.unit
        super().__init__(unit, left.start, right.end)

    def mismatch_message(self) -> str:
        left = self.left.unit.describe()
        right = self.right.unit.describe()
        if self.subtract:
            return f"Cannot subtract {right} from {left}!"
        return f"Cannot add {left} to {right}!"

    def evaluate(self, meter: FieldValues | None, dv_entry: DVEntry | None) -> float:
        left = self.left.evaluate(meter, dv_entry)
        right = self.right.evaluate(meter, dv_entry)

        if self.calendar:
            if self.left.unit.quantity is Quantity.POINT_IN_TIME:
                return self._add_calendar(left, right, self.right.unit)
            return self._add_calendar(right, left, self.left.unit)

        right = self.right.unit.convert_to(right, self.left.unit)
        return left - right if self.subtract else left + right

    def _add_calendar(self, point: float, duration: float, duration_unit: SIUnit) -> float:
        if self.subtract:
            duration = -duration

        try:
            moment = from_timestamp(point * self.unit.scale)

            match duration_unit.as_unit(Quantity.TIME):
                case Unit.MONTH:
                    moment = add_months(moment, round(duration))
                case Unit.YEAR:
                    moment = add_months(moment, round(duration * MONTHS_PER_YEAR))
                case _:
                    seconds = duration_unit.convert_to(duration, _SECOND)
                    moment = from_timestamp(to_timestamp(moment) + seconds)
        except (ValueError, OverflowError) as error:
            raise EvaluationError(f"Date out of range in {self.tree()}: {error}") from error

        return to_timestamp(moment) / self.unit.scale

    def tree(self) -> str:
        tag = "SUB" if self.subtract else "ADD"
        return f"<{tag} {self.left.tree()} {self.right.tree()} >"


class TimesNode(Node):
    left: Node
    right: Node

    def __init__(self, left: Node, right: Node) -> None:
        super().__init__(left.unit * right.unit, left.start, right.end)
        self.left = left
        self.right = right

    def evaluate(self, meter: FieldValues | None, dv_entry: DVEntry | None) -> float:
        return self.left.evaluate(meter, dv_entry) * self.right.evaluate(meter, dv_entry)

    def tree(self) -> str:
        return f"<TIMES {self.left.tree()} {self.right.tree()} >"


class DivideNode(Node):
    left: Node
    right: Node

    def __init__(self, left: Node, right: Node) -> None:
        super().__init__(left.unit / right.unit, left.start, right.end)
        self.left = left
        self.right = right

    def evaluate(self, meter: FieldValues | None, dv_entry: DVEntry | None) -> float:
        divisor = self.right.evaluate(meter, dv_entry)
        if divisor == 0:
            raise EvaluationError(f"Division by zero in {self.tree()}")
        return self.left.evaluate(meter, dv_entry) / divisor

    def tree(self) -> str:
        return f"<DIV {self.left.tree()} {self.right.tree()} >"


class SqrtNode(Node):
    """Square root of an operand.

    Attributes:
        inner: Operand
        valid: False when the operand has an odd dimension exponent, the node
            then keeps the operand's unit
    """

    inner: Node
    valid: bool

    def __init__(self, inner: Node, start: int = 0, end: int = 0) -> None:
        try:
            unit = inner.unit.sqrt()
            self.valid = True
        except ValueError:
            unit = inner.unit
            self.valid = False
        super().__init__(unit, start, end)
        self.inner = inner

    def evaluate(self, meter: FieldValues | None, dv_entry: DVEntry | None) -> float:
        value = self.inner.evaluate(meter, dv_entry)
        if value < 0:
            raise EvaluationError(f"Square root of negative value {value:g} in {self.tree()}")
        return math.sqrt(value)

    def tree(self) -> str:
        return f"<SQRT {self.inner.tree()} >"
