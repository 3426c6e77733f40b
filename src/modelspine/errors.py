"""
Structured error types for modelspine.

Provides a small hierarchy of typed errors with metadata for categorization,
logging and root cause analysis through error chaining.

Most "failures" in the model layer are not exceptions at all: an unresolvable
dependency is an ``UNDEFINED``/``None`` return, a store call that touched zero
rows is a plain result. Exceptions are reserved for the cases a caller must
not miss:

- **Validation failure:** a write or save was refused; carries the
  aggregated :class:`~modelspine.validation.ValidationResult`
- **Query errors:** a filter or update expression the store cannot evaluate,
  or a model filter that cannot be translated into storage properties
- **Identity errors:** a persisted instance cannot build its identity filter
  (only raised in strict mode)
- **Config errors:** invalid settings

Architecture:
    ::

        ┌─────────────────────────────────────────────────────────────┐
        │                      ModelSpineError                         │
        │                (category, context, cause)                    │
        ├─────────────────────────────────────────────────────────────┤
        │  ValidationError      StoreError          IdentityError      │
        │  (VALIDATION)         (STORAGE)           (IDENTITY)         │
        │                          │                                   │
        │                       QueryError          ConfigError        │
        │                       (QUERY)             (CONFIG)           │
        │                          │                                   │
        │              UntranslatableFilterError                       │
        └─────────────────────────────────────────────────────────────┘

Examples:
    >>> try:
    ...     instance.set("age", -1)
    ... except ValidationError as e:
    ...     e.result.to_dict()
    {'age': ['Field must be greater than or equal to 0']}

    >>> error = StoreError("insert failed").with_context(model="users")
    >>> error.context.model
    'users'

Guardrails:
    ❌ DON'T: Raise for "not applicable here" (unknown field, opaque dependency)
    ✅ DO: Return ``UNDEFINED``/``None`` and let the caller decide

    ❌ DON'T: Swallow the original exception
    ✅ DO: Pass it as cause= for error chaining

Tags:
    error-handling, exception-hierarchy, error-context, modelspine

Doc-Types:
    - API Reference
    - Error Handling Guide
"""

from __future__ import annotations

from dataclasses import dataclass
from dataclasses import field as dataclass_field
from enum import Enum
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from modelspine.validation import ValidationResult


class ErrorCategory(str, Enum):
    """Standard error categories for classification and logging."""

    VALIDATION = "VALIDATION"  # Field validators rejected a value
    STORAGE = "STORAGE"  # Store adapter failures
    QUERY = "QUERY"  # Filter/update expression errors
    IDENTITY = "IDENTITY"  # Identity filter cannot be built
    CONFIG = "CONFIG"  # Missing or invalid settings
    INTERNAL = "INTERNAL"  # Bugs, unexpected state
    UNKNOWN = "UNKNOWN"  # Uncategorized errors


@dataclass
class ErrorContext:
    """
    Structured metadata context for errors.

    Attributes:
        model: Name (or repr) of the model involved
        field: Field name, when the error concerns one field
        operation: Operation that failed (``set``, ``save``, ``find`` ...)
        metadata: Additional key-value pairs
    """

    model: str | None = None
    field: str | None = None
    operation: str | None = None
    metadata: dict[str, Any] = dataclass_field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for logging."""
        result = {}
        for key in ["model", "field", "operation"]:
            value = getattr(self, key)
            if value is not None:
                result[key] = value
        if self.metadata:
            result.update(self.metadata)
        return result


class ModelSpineError(Exception):
    """
    Base exception for all modelspine errors.

    Subclasses set ``default_category``; instances carry a category, an
    :class:`ErrorContext` and an optional chained cause.
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

    def with_context(self, **kwargs: Any) -> ModelSpineError:
        """
        Add context to this error (fluent API).

        Usage:
            raise StoreError("Failed").with_context(model="users", operation="save")
        """
        for key, value in kwargs.items():
            if hasattr(self.context, key) and key != "metadata":
                setattr(self.context, key, value)
            else:
                self.context.metadata[key] = value
        return self

    def to_dict(self) -> dict[str, Any]:
        """Convert error to dictionary for logging/serialization."""
        result: dict[str, Any] = {
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
# VALIDATION ERRORS
# =============================================================================


class ValidationError(ModelSpineError):
    """
    One or more field validators rejected a value.

    The aggregated result is available as :attr:`result`; the write that
    triggered validation was not applied.
    """

    default_category = ErrorCategory.VALIDATION

    def __init__(
        self,
        message: str | None = None,
        *,
        result: ValidationResult,
        **kwargs: Any,
    ):
        self.result = result
        super().__init__(message or _summarize(result), **kwargs)

    def to_dict(self) -> dict[str, Any]:
        result = super().to_dict()
        result["errors"] = self.result.to_dict()
        return result


def _summarize(result: ValidationResult) -> str:
    names = sorted({name for name, _ in result.errors()})
    return f"Validation failed for field(s): {', '.join(names)}"


# =============================================================================
# STORAGE ERRORS
# =============================================================================


class StoreError(ModelSpineError):
    """Store adapter failure."""

    default_category = ErrorCategory.STORAGE


class QueryError(StoreError):
    """A filter or update expression could not be evaluated."""

    default_category = ErrorCategory.QUERY


class UntranslatableFilterError(QueryError):
    """A model-level filter or ordering names a field without a translation."""

    def __init__(self, entries: dict[str, Any], message: str | None = None, **kwargs: Any):
        self.entries = entries
        super().__init__(
            message or f"Cannot translate fields to storage properties: {sorted(entries)}",
            **kwargs,
        )


# =============================================================================
# IDENTITY / CONFIG ERRORS
# =============================================================================


class IdentityError(ModelSpineError):
    """A persisted instance cannot build a filter identifying its record."""

    default_category = ErrorCategory.IDENTITY


class ConfigError(ModelSpineError):
    """Configuration error."""

    default_category = ErrorCategory.CONFIG


# =============================================================================
# UTILITY FUNCTIONS
# =============================================================================


def categorize_error(error: Exception) -> ErrorCategory:
    """Get the category of an error."""
    if isinstance(error, ModelSpineError):
        return error.category
    if isinstance(error, (ValueError, TypeError)):
        return ErrorCategory.VALIDATION
    if isinstance(error, (KeyError, AttributeError)):
        return ErrorCategory.CONFIG
    return ErrorCategory.UNKNOWN


__all__ = [
    "ErrorCategory",
    "ErrorContext",
    "ModelSpineError",
    "ValidationError",
    "StoreError",
    "QueryError",
    "UntranslatableFilterError",
    "IdentityError",
    "ConfigError",
    "categorize_error",
]
