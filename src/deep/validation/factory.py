"""Factory for validators and property validators."""

from __future__ import annotations

from collections.abc import Callable, Mapping
from typing import Any

from deep.logging import get_logger
from deep.validation.messages import DEFAULT_MESSAGES
from deep.validation.properties import ListItemsValidator, Property, PropertyValidator
from deep.validation.validator import Validator

logger = get_logger(__name__)

Resolver = Callable[..., Validator]

PROPERTY_VALIDATORS: dict[str, type[PropertyValidator]] = {
    "select": ListItemsValidator,
}


class ValidationFactory:
    """Builds :class:`Validator` instances with the default message catalog.

    Caller messages are merged over the defaults (top-level keys only, caller
    wins). A resolver, when set, is called with the same arguments as
    :class:`Validator` and replaces its construction.
    """

    def __init__(
        self,
        default_messages: Mapping[str, Any] | None = None,
        resolver: Resolver | None = None,
        property_validators: Mapping[str, type[PropertyValidator]] | None = None,
    ) -> None:
        self.default_messages: dict[str, Any] = dict(
            DEFAULT_MESSAGES if default_messages is None else default_messages
        )
        self._resolver = resolver
        self.property_validators: dict[str, type[PropertyValidator]] = dict(
            PROPERTY_VALIDATORS if property_validators is None else property_validators
        )

    def make(
        self,
        data: Mapping[str, Any],
        rules: Mapping[str, Any],
        messages: Mapping[str, Any] | None = None,
        custom_attributes: Mapping[str, str] | None = None,
    ) -> Validator:
        merged = {**self.default_messages, **(messages or {})}
        return self.resolve(data, rules, merged, custom_attributes or {})

    def resolve(
        self,
        data: Mapping[str, Any],
        rules: Mapping[str, Any],
        messages: Mapping[str, Any],
        custom_attributes: Mapping[str, str],
    ) -> Validator:
        if self._resolver is not None:
            return self._resolver(data, rules, messages, custom_attributes)
        return Validator(data, rules, messages, custom_attributes)

    def set_resolver(self, resolver: Resolver | None) -> None:
        self._resolver = resolver

    # ── Property validators ──────────────────────────────────────

    def has_property_validator(self, prop: Property) -> bool:
        return prop.property_type in self.property_validators

    def make_property_validator(self, prop: Property) -> PropertyValidator | None:
        validator_cls = self.property_validators.get(prop.property_type)
        if validator_cls is None:
            return None
        return validator_cls()

    def validate_property(self, prop: Property, value: Any) -> bool:
        """True when *value* is acceptable for *prop*, or no validator is registered."""
        validator = self.make_property_validator(prop)
        if validator is None:
            return True
        valid = validator.validate(prop, value)
        if not valid:
            logger.debug("property_value_rejected", property_type=prop.property_type, value=value)
        return valid
