"""
Structured error types for deep.

Every failure the data-access layer raises on purpose is a ``DeepError``
subclass carrying a category, a structured context and an optional chained
cause, so callers can log it with ``to_dict()`` and route it by category.

Manifesto:
    - **Typed Error Hierarchy:** Missing relations, unknown fields and
      unsupported writes are distinct types, never ``AttributeError`` on None
    - **Rich Context:** Errors carry the model, relation or field involved
    - **Error Chaining:** Preserve original exceptions as ``cause``

Architecture:
    ::

        ┌─────────────────────────────────────────────────────────────────┐
        │                        DeepError                                 │
        │             (category, context, cause)                           │
        ├─────────────────────────────────────────────────────────────────┤
        │                                                                  │
        │  ModelError          QueryError         ValidationError          │
        │  (MODEL)             (QUERY)            (VALIDATION)             │
        │     │                    │                                       │
        │  NotSupportedError   UnknownFieldError                           │
        │  RelationNotLoaded                                               │
        │                                                                  │
        │  ConfigError         DatabaseError                               │
        │  (CONFIG)            (DATABASE)                                  │
        │     │                                                            │
        │  InvalidConfigError                                              │
        └─────────────────────────────────────────────────────────────────┘

Examples:
    >>> error = RelationNotLoadedError("upload_pref", model="Asset")
    >>> error.category
    <ErrorCategory.MODEL: 'MODEL'>
    >>> error.context.model
    'Asset'

    >>> try:
    ...     raise KeyError("missing")
    ... except KeyError as e:
    ...     raise DatabaseError("lookup failed", cause=e)
    Traceback (most recent call last):
    ...
    DatabaseError: lookup failed

Tags:
    error-handling, exception-hierarchy, error-context, deep

Doc-Types:
    - API Reference
    - Error Handling Guide
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class ErrorCategory(str, Enum):
    """Standard error categories for classification and routing."""

    MODEL = "MODEL"               # Relations, read-only models
    QUERY = "QUERY"               # Scope arguments, field lookups
    VALIDATION = "VALIDATION"     # Rule failures
    CONFIG = "CONFIG"             # Missing config, invalid settings
    DATABASE = "DATABASE"         # Driver and execution failures
    INTERNAL = "INTERNAL"         # Bugs, unexpected state


@dataclass
class ErrorContext:
    """
    Structured metadata attached to an error.

    Attributes:
        model: Model class name the error concerns (e.g. ``"Entry"``)
        relation: Relation name that was missing (e.g. ``"channel"``)
        field_name: Custom field or attribute name involved
        table: Table name involved
        metadata: Additional key-value pairs
    """

    model: str | None = None
    relation: str | None = None
    field_name: str | None = None
    table: str | None = None

    metadata: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for logging."""
        result = {}
        for key in ["model", "relation", "field_name", "table"]:
            value = getattr(self, key)
            if value is not None:
                result[key] = value
        if self.metadata:
            result.update(self.metadata)
        return result


class DeepError(Exception):
    """
    Base exception for all deep errors.

    Subclasses set ``default_category``; instances carry an ``ErrorContext``
    and an optional ``cause`` which is also chained as ``__cause__``.

    Examples:
        >>> error = DeepError("Something went wrong")
        >>> error.category
        <ErrorCategory.INTERNAL: 'INTERNAL'>
        >>> error.with_context(table="channel_titles").context.table
        'channel_titles'
        >>> error.to_dict()["category"]
        'INTERNAL'
    """

    default_category: ErrorCategory = ErrorCategory.INTERNAL

    def __init__(
        self,
        message: str,
        *,
        category: ErrorCategory | None = None,
        context: ErrorContext | None = None,
        cause: Exception | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.category = category or self.default_category
        self.context = context or ErrorContext()
        self.cause = cause

        if cause is not None:
            self.__cause__ = cause

    def with_context(self, **kwargs: Any) -> DeepError:
        """
        Add context to this error (fluent API).

        Usage:
            raise QueryError("Bad column").with_context(table="channel_titles")
        """
        for key, value in kwargs.items():
            if hasattr(self.context, key):
                setattr(self.context, key, value)
            else:
                self.context.metadata[key] = value
        return self

    def to_dict(self) -> dict[str, Any]:
        """Convert error to dictionary for logging/serialization."""
        result = {
            "error_type": self.__class__.__name__,
            "message": self.message,
            "category": self.category.value,
        }
        context_dict = self.context.to_dict()
        if context_dict:
            result["context"] = context_dict
        if self.cause is not None:
            result["cause"] = str(self.cause)
        return result

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self.message!r}, category={self.category.value})"


# =============================================================================
# MODEL ERRORS
# =============================================================================


class ModelError(DeepError):
    """Misuse of a model instance."""

    default_category = ErrorCategory.MODEL


class NotSupportedError(ModelError):
    """The requested operation is not supported by this model (e.g. saving an entry)."""

    def __init__(self, message: str = "Saving is not supported", *, model: str | None = None, **kwargs: Any):
        super().__init__(message, **kwargs)
        self.context.model = model


class RelationNotLoadedError(ModelError):
    """A relation was accessed that was never loaded, or has no related row."""

    def __init__(self, relation: str, *, model: str | None = None, message: str | None = None, **kwargs: Any):
        owner = f"{model}." if model else ""
        super().__init__(message or f"Relation not loaded: {owner}{relation}", **kwargs)
        self.relation = relation
        self.context.relation = relation
        self.context.model = model


# =============================================================================
# QUERY ERRORS
# =============================================================================


class QueryError(DeepError):
    """A scope was called with arguments it cannot turn into SQL."""

    default_category = ErrorCategory.QUERY


class UnknownFieldError(QueryError):
    """A custom field name did not resolve to a field definition."""

    def __init__(self, field_name: str, message: str | None = None, **kwargs: Any):
        super().__init__(message or f"Unknown custom field: {field_name}", **kwargs)
        self.field_name = field_name
        self.context.field_name = field_name


# =============================================================================
# VALIDATION ERRORS
# =============================================================================


class ValidationError(DeepError):
    """
    Validation rules failed.

    ``errors`` maps each attribute to its list of formatted messages.
    """

    default_category = ErrorCategory.VALIDATION

    def __init__(
        self,
        message: str = "The given data was invalid.",
        *,
        errors: dict[str, list[str]] | None = None,
        **kwargs: Any,
    ):
        super().__init__(message, **kwargs)
        self.errors = errors or {}

    def to_dict(self) -> dict[str, Any]:
        result = super().to_dict()
        if self.errors:
            result["errors"] = self.errors
        return result


# =============================================================================
# CONFIGURATION / DATABASE ERRORS
# =============================================================================


class ConfigError(DeepError):
    """Configuration error."""

    default_category = ErrorCategory.CONFIG


class InvalidConfigError(ConfigError):
    """Configuration value is invalid."""

    def __init__(self, key: str, value: Any, message: str | None = None):
        self.key = key
        self.value = value
        super().__init__(message or f"Invalid configuration for {key}: {value!r}")


class DatabaseError(DeepError):
    """Database-level failure while executing a query."""

    default_category = ErrorCategory.DATABASE


__all__ = [
    "ErrorCategory",
    "ErrorContext",
    "DeepError",
    "ModelError",
    "NotSupportedError",
    "RelationNotLoadedError",
    "QueryError",
    "UnknownFieldError",
    "ValidationError",
    "ConfigError",
    "InvalidConfigError",
    "DatabaseError",
]
