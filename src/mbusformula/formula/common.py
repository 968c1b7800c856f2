"""Collaborator interfaces consumed by the formula engine.

The engine never owns the objects behind these interfaces, it only borrows
them for the duration of a calculation (or until the next rebind/clear).
"""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from ..units.registry import Quantity, Unit


@runtime_checkable
class FieldValues(Protocol):
    """Provider of named, unit-tagged decoded field values (typically a meter)."""

    def has_field(self, name: str, quantity: Quantity) -> bool:
        """True if a field with this name and quantity exists."""
        ...

    def field_value(self, name: str, quantity: Quantity) -> tuple[float, Unit] | None:
        """Current value of a field and the unit it is stored in, None if not (yet) available."""
        ...


@runtime_checkable
class DVEntry(Protocol):
    """Indices of the decoded data record currently bound."""

    @property
    def storage_nr(self) -> int: ...

    @property
    def tariff_nr(self) -> int: ...

    @property
    def subunit_nr(self) -> int: ...
