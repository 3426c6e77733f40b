"""Tests for modelspine.errors module."""

import pytest

from modelspine.errors import (
    ConfigError,
    ErrorCategory,
    ErrorContext,
    IdentityError,
    ModelSpineError,
    QueryError,
    StoreError,
    UntranslatableFilterError,
    ValidationError,
    categorize_error,
)
from modelspine.validation import ValidationResult


class TestErrorContext:
    def test_create_empty_context(self):
        ctx = ErrorContext()
        assert ctx.model is None
        assert ctx.field is None
        assert ctx.metadata == {}

    def test_to_dict_includes_set_fields(self):
        """to_dict includes only non-None fields plus metadata."""
        ctx = ErrorContext(model="users", operation="save", metadata={"key": "value"})
        assert ctx.to_dict() == {"model": "users", "operation": "save", "key": "value"}

    def test_field_attribute_and_independent_metadata(self):
        first = ErrorContext(field="age")
        second = ErrorContext()
        first.metadata["attempt"] = 1
        assert first.field == "age"
        assert second.metadata == {}
        assert first.to_dict() == {"field": "age", "attempt": 1}


class TestModelSpineError:
    def test_default_category(self):
        assert ModelSpineError("boom").category == ErrorCategory.INTERNAL

    def test_explicit_category(self):
        error = ModelSpineError("boom", category=ErrorCategory.STORAGE)
        assert error.category == ErrorCategory.STORAGE

    def test_with_context_is_fluent(self):
        error = StoreError("failed").with_context(model="users", attempt=2)
        assert isinstance(error, StoreError)
        assert error.context.model == "users"
        assert error.context.metadata == {"attempt": 2}

    def test_cause_is_chained(self):
        cause = ValueError("bad")
        error = ConfigError("invalid", cause=cause)
        assert error.__cause__ is cause
        assert error.to_dict()["cause"] == "bad"

    def test_to_dict(self):
        error = IdentityError("no id").with_context(field="id")
        assert error.to_dict() == {
            "error_type": "IdentityError",
            "message": "no id",
            "category": "IDENTITY",
            "context": {"field": "id"},
        }

    def test_repr(self):
        assert repr(StoreError("x")) == "StoreError('x', category=STORAGE)"


class TestHierarchy:
    @pytest.mark.parametrize(
        "error, category",
        [
            (StoreError("x"), ErrorCategory.STORAGE),
            (QueryError("x"), ErrorCategory.QUERY),
            (UntranslatableFilterError({"a": 1}), ErrorCategory.QUERY),
            (IdentityError("x"), ErrorCategory.IDENTITY),
            (ConfigError("x"), ErrorCategory.CONFIG),
        ],
    )
    def test_categories(self, error, category):
        assert error.category == category
        assert isinstance(error, ModelSpineError)

    def test_query_errors_are_store_errors(self):
        assert issubclass(UntranslatableFilterError, QueryError)
        assert issubclass(QueryError, StoreError)

    def test_untranslatable_filter_message(self):
        error = UntranslatableFilterError({"b": 1, "a": 2})
        assert error.entries == {"b": 1, "a": 2}
        assert "['a', 'b']" in error.message


class TestValidationError:
    def test_summarizes_result(self):
        result = ValidationResult.error("age", "too small")
        result.add_error("name", "required")
        error = ValidationError(result=result)
        assert error.message == "Validation failed for field(s): age, name"
        assert error.category == ErrorCategory.VALIDATION
        assert error.result is result

    def test_to_dict_includes_errors(self):
        error = ValidationError("nope", result=ValidationResult.error("age", "too small"))
        assert error.to_dict()["errors"] == {"age": ["too small"]}
        assert error.to_dict()["message"] == "nope"


class TestCategorizeError:
    def test_modelspine_errors_keep_category(self):
        assert categorize_error(QueryError("x")) == ErrorCategory.QUERY

    def test_builtin_errors(self):
        assert categorize_error(ValueError()) == ErrorCategory.VALIDATION
        assert categorize_error(KeyError()) == ErrorCategory.CONFIG
        assert categorize_error(RuntimeError()) == ErrorCategory.UNKNOWN
