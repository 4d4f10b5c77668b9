"""Rule-based validator.

Rules are given per attribute, either as a pipe-delimited string or as a
list whose items are strings or ``(rule, params)`` tuples::

    Validator(
        {"title": "", "status": "open", "tags": ["a", "b"]},
        {
            "title": "required|max:100",
            "status": [("in", ["open", "closed"])],
            "tags": "array|min:1",
        },
        DEFAULT_MESSAGES,
    )

Rules other than ``required`` and ``accepted`` are skipped when the value is
missing or empty. Messages are looked up as ``"<attribute>.<rule>"``, then
``custom[attribute][rule]``, then ``<rule>`` (picking the numeric / string /
array variant for sized rules), and placeholders such as ``:attribute``,
``:min`` and ``:values`` are replaced.
"""

from __future__ import annotations

import datetime
import re
from collections.abc import Mapping, Sequence
from typing import Any, Union
from urllib.parse import urlparse

from deep.errors import ConfigError, ValidationError

RuleSpec = Union[str, tuple[str, Sequence[Any]]]

IMPLICIT_RULES = frozenset({"required", "accepted"})
SIZE_RULES = frozenset({"between", "max", "min", "size"})
NUMERIC_RULES = frozenset({"numeric", "integer"})

_EMAIL = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")
_INTEGER = re.compile(r"^[+-]?\d+$")
_ALPHA_DASH = re.compile(r"^[\w-]+$")
_REGEX_FLAGS = {"i": re.IGNORECASE, "m": re.MULTILINE, "s": re.DOTALL, "x": re.VERBOSE}


def parse_rules(rules: str | Sequence[RuleSpec]) -> list[tuple[str, list[Any]]]:
    """Normalize a rule definition to ``[(name, params), ...]``."""
    if isinstance(rules, str):
        rules = [rule for rule in rules.split("|") if rule]

    parsed: list[tuple[str, list[Any]]] = []
    for rule in rules:
        if isinstance(rule, tuple):
            name, params = rule
            parsed.append((name.strip().lower(), list(params)))
            continue
        name, _, raw = rule.partition(":")
        name = name.strip().lower()
        if not raw:
            params: list[Any] = []
        elif name == "regex":
            params = [raw]
        else:
            params = [param.strip() for param in raw.split(",")]
        parsed.append((name, params))
    return parsed


def _is_empty(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, str):
        return value.strip() == ""
    if isinstance(value, (list, tuple, dict, set)):
        return len(value) == 0
    return False


def _is_numeric(value: Any) -> bool:
    if isinstance(value, bool):
        return False
    if isinstance(value, (int, float)):
        return True
    if isinstance(value, str):
        try:
            float(value)
        except ValueError:
            return False
        return True
    return False


def _compile_regex(pattern: str) -> re.Pattern[str]:
    """Accept ``/body/flags`` patterns as well as bare ones."""
    last = pattern.rfind("/")
    if pattern.startswith("/") and last > 0:
        flags = 0
        for letter in pattern[last + 1:]:
            flags |= _REGEX_FLAGS.get(letter, 0)
        return re.compile(pattern[1:last], flags)
    return re.compile(pattern)


class Validator:
    """Validate *data* against *rules* and collect formatted messages."""

    def __init__(
        self,
        data: Mapping[str, Any],
        rules: Mapping[str, str | Sequence[RuleSpec]],
        messages: Mapping[str, Any] | None = None,
        custom_attributes: Mapping[str, str] | None = None,
    ) -> None:
        self.data = dict(data)
        self.rules = {attribute: parse_rules(spec) for attribute, spec in rules.items()}
        self.messages: Mapping[str, Any] = messages or {}
        self.custom_attributes: Mapping[str, str] = custom_attributes or {}
        self._errors: dict[str, list[str]] | None = None

    # -- public API --------------------------------------------------------------

    def passes(self) -> bool:
        self._errors = {}
        for attribute, rules in self.rules.items():
            value = self.data.get(attribute)
            for name, params in rules:
                if name not in IMPLICIT_RULES and _is_empty(value):
                    continue
                if not self._check(attribute, value, name, params):
                    self._errors.setdefault(attribute, []).append(
                        self._message(attribute, value, name, params)
                    )
        return not self._errors

    def fails(self) -> bool:
        return not self.passes()

    def errors(self) -> dict[str, list[str]]:
        if self._errors is None:
            self.passes()
        return dict(self._errors or {})

    def validate(self) -> dict[str, Any]:
        """Return the validated attributes or raise ``ValidationError``."""
        if self.fails():
            raise ValidationError(errors=self.errors())
        return {attribute: self.data.get(attribute) for attribute in self.rules if attribute in self.data}

    # -- rules ---------------------------------------------------------------------

    def _check(self, attribute: str, value: Any, name: str, params: list[Any]) -> bool:
        method = getattr(self, f"_validate_{name}", None)
        if method is None:
            raise ConfigError(f"Unknown validation rule {name!r}").with_context(field_name=attribute)
        return method(attribute, value, params)

    def _validate_required(self, attribute: str, value: Any, params: list[Any]) -> bool:
        return not _is_empty(value)

    def _validate_accepted(self, attribute: str, value: Any, params: list[Any]) -> bool:
        return value in ("yes", "on", "1", 1, True, "true")

    def _validate_boolean(self, attribute: str, value: Any, params: list[Any]) -> bool:
        return value in (True, False, 0, 1, "0", "1")

    def _validate_yes_or_no(self, attribute: str, value: Any, params: list[Any]) -> bool:
        return value in ("y", "n")

    def _validate_integer(self, attribute: str, value: Any, params: list[Any]) -> bool:
        if isinstance(value, bool):
            return False
        if isinstance(value, int):
            return True
        return isinstance(value, str) and bool(_INTEGER.match(value))

    def _validate_numeric(self, attribute: str, value: Any, params: list[Any]) -> bool:
        return _is_numeric(value)

    def _validate_string(self, attribute: str, value: Any, params: list[Any]) -> bool:
        return isinstance(value, str)

    def _validate_array(self, attribute: str, value: Any, params: list[Any]) -> bool:
        return isinstance(value, (list, tuple, dict))

    def _validate_email(self, attribute: str, value: Any, params: list[Any]) -> bool:
        return isinstance(value, str) and bool(_EMAIL.match(value))

    def _validate_url(self, attribute: str, value: Any, params: list[Any]) -> bool:
        if not isinstance(value, str):
            return False
        parsed = urlparse(value)
        return parsed.scheme in ("http", "https", "ftp") and bool(parsed.netloc)

    def _validate_alpha(self, attribute: str, value: Any, params: list[Any]) -> bool:
        return isinstance(value, str) and value.isalpha()

    def _validate_alpha_num(self, attribute: str, value: Any, params: list[Any]) -> bool:
        return isinstance(value, (str, int)) and str(value).isalnum()

    def _validate_alpha_dash(self, attribute: str, value: Any, params: list[Any]) -> bool:
        return isinstance(value, (str, int)) and bool(_ALPHA_DASH.match(str(value)))

    def _validate_date(self, attribute: str, value: Any, params: list[Any]) -> bool:
        if isinstance(value, (datetime.date, datetime.datetime)):
            return True
        if not isinstance(value, str):
            return False
        try:
            datetime.datetime.fromisoformat(value)
        except ValueError:
            return False
        return True

    def _validate_date_format(self, attribute: str, value: Any, params: list[Any]) -> bool:
        if not isinstance(value, str):
            return False
        try:
            datetime.datetime.strptime(value, params[0])
        except ValueError:
            return False
        return True

    def _validate_in(self, attribute: str, value: Any, params: list[Any]) -> bool:
        allowed = {str(param) for param in params}
        if isinstance(value, (list, tuple, set)):
            return all(str(item) in allowed for item in value)
        return str(value) in allowed

    def _validate_not_in(self, attribute: str, value: Any, params: list[Any]) -> bool:
        rejected = {str(param) for param in params}
        if isinstance(value, (list, tuple, set)):
            return not any(str(item) in rejected for item in value)
        return str(value) not in rejected

    def _validate_min(self, attribute: str, value: Any, params: list[Any]) -> bool:
        return self._size(attribute, value) >= float(params[0])

    def _validate_max(self, attribute: str, value: Any, params: list[Any]) -> bool:
        return self._size(attribute, value) <= float(params[0])

    def _validate_between(self, attribute: str, value: Any, params: list[Any]) -> bool:
        size = self._size(attribute, value)
        return float(params[0]) <= size <= float(params[1])

    def _validate_size(self, attribute: str, value: Any, params: list[Any]) -> bool:
        return self._size(attribute, value) == float(params[0])

    def _validate_digits(self, attribute: str, value: Any, params: list[Any]) -> bool:
        text = str(value)
        return text.isdigit() and len(text) == int(params[0])

    def _validate_digits_between(self, attribute: str, value: Any, params: list[Any]) -> bool:
        text = str(value)
        return text.isdigit() and int(params[0]) <= len(text) <= int(params[1])

    def _validate_regex(self, attribute: str, value: Any, params: list[Any]) -> bool:
        if not isinstance(value, (str, int, float)):
            return False
        return _compile_regex(str(params[0])).search(str(value)) is not None

    def _validate_same(self, attribute: str, value: Any, params: list[Any]) -> bool:
        return value == self.data.get(params[0])

    def _validate_different(self, attribute: str, value: Any, params: list[Any]) -> bool:
        return value != self.data.get(params[0])

    def _validate_confirmed(self, attribute: str, value: Any, params: list[Any]) -> bool:
        return value == self.data.get(f"{attribute}_confirmation")

    # -- sizes -----------------------------------------------------------------------

    def _has_numeric_rule(self, attribute: str) -> bool:
        return any(name in NUMERIC_RULES for name, _ in self.rules.get(attribute, []))

    def _size_type(self, attribute: str, value: Any) -> str:
        if self._has_numeric_rule(attribute) and _is_numeric(value):
            return "numeric"
        if isinstance(value, (list, tuple, dict, set)):
            return "array"
        return "string"

    def _size(self, attribute: str, value: Any) -> float:
        kind = self._size_type(attribute, value)
        if kind == "numeric":
            return float(value)
        if kind == "array":
            return float(len(value))
        return float(len(str(value)))

    # -- messages --------------------------------------------------------------------

    def _display_name(self, attribute: str) -> str:
        if attribute in self.custom_attributes:
            return self.custom_attributes[attribute]
        names = self.messages.get("attributes") or {}
        if attribute in names:
            return names[attribute]
        return attribute.replace("_", " ")

    def _message(self, attribute: str, value: Any, name: str, params: list[Any]) -> str:
        custom = (self.messages.get("custom") or {}).get(attribute) or {}

        template = self.messages.get(f"{attribute}.{name}") or custom.get(name)
        if template is None:
            template = self.messages.get(name)
            if isinstance(template, Mapping):
                template = template.get(self._size_type(attribute, value))
        if not template:
            template = f"validation.{name}"

        return self._replace(str(template), attribute, name, params)

    def _replace(self, template: str, attribute: str, name: str, params: list[Any]) -> str:
        replacements: dict[str, str] = {}
        if name in ("between", "digits_between"):
            replacements = {":min": str(params[0]), ":max": str(params[1])}
        elif name == "min":
            replacements = {":min": str(params[0])}
        elif name == "max":
            replacements = {":max": str(params[0])}
        elif name == "size":
            replacements = {":size": str(params[0])}
        elif name == "digits":
            replacements = {":digits": str(params[0])}
        elif name in ("in", "not_in"):
            replacements = {":values": ", ".join(str(param) for param in params)}
        elif name in ("same", "different"):
            replacements = {":other": self._display_name(str(params[0]))}
        elif name == "date_format":
            replacements = {":format": str(params[0])}

        message = template.replace(":attribute", self._display_name(attribute))
        for placeholder, replacement in replacements.items():
            message = message.replace(placeholder, replacement)
        return message
