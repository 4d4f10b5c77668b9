"""Validators keyed by custom-field type."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, Protocol

from deep.validation.validator import Validator


class Property(Protocol):
    """Anything with a field type: ``ChannelField`` or ``MatrixCol``."""

    @property
    def property_type(self) -> str: ...


class PropertyValidator(ABC):
    """Checks a single value against a property definition."""

    @abstractmethod
    def validate(self, prop: Property, value: Any) -> bool:
        ...


class ListItemsValidator(PropertyValidator):
    """Value (or every value of a multi-select) must be one of the list items."""

    def rules(self, prop: Property) -> list[tuple[str, list[str]]]:
        return [("in", list(getattr(prop, "list_items", [])))]

    def validate(self, prop: Property, value: Any) -> bool:
        return Validator({"value": value}, {"value": self.rules(prop)}).passes()
