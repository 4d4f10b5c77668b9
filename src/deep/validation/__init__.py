"""Rule-based validation of entry data and custom-field values."""

from deep.validation.factory import PROPERTY_VALIDATORS, ValidationFactory
from deep.validation.messages import DEFAULT_MESSAGES
from deep.validation.properties import ListItemsValidator, PropertyValidator
from deep.validation.validator import Validator, parse_rules

__all__ = [
    "DEFAULT_MESSAGES",
    "PROPERTY_VALIDATORS",
    "ListItemsValidator",
    "PropertyValidator",
    "ValidationFactory",
    "Validator",
    "parse_rules",
]
