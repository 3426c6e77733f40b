"""
Reusable field validators.

Every factory here returns a validator with the signature
``(instance, name, value) -> ValidationResult``, ready to be listed in a
field's ``validators``. Comparison and length validators let ``None``
through; combine them with :func:`required` to reject it. A value they
cannot compare or measure is reported as an error, never raised.

Examples:
    >>> from modelspine import Model, Alias, validators
    >>> users = Model()
    >>> users.add_field("age", Alias(validators=(validators.required, validators.ge(0))))
    True

Tags:
    validation, validators, predicates, modelspine
"""

from __future__ import annotations

from collections.abc import Callable, Iterable
from typing import Any

from modelspine.validation import ValidationResult

FieldValidator = Callable[[Any, str, Any], "ValidationResult | None"]


def _check(failed: bool, name: str, message: str) -> ValidationResult:
    result = ValidationResult()
    if failed:
        result.add_error(name, message)
    return result


def _rejects(test: Callable[[Any], bool], value: Any) -> bool:
    """Whether a non-null value fails *test*; a value it cannot compare fails."""
    if value is None:
        return False
    try:
        return test(value)
    except TypeError:
        return True


def required(instance: Any, name: str, value: Any) -> ValidationResult:
    return _check(value is None, name, "Field can't be null")


def type_of(t: type) -> FieldValidator:
    """Value must be exactly of type *t* (subclasses rejected)."""

    def validate(instance: Any, name: str, value: Any) -> ValidationResult:
        return _check(type(value) is not t, name, f'Field must be of type "{t.__name__}"')

    return validate


def instance_of(cls: type | tuple[type, ...]) -> FieldValidator:
    def validate(instance: Any, name: str, value: Any) -> ValidationResult:
        return _check(not isinstance(value, cls), name, f"Field must be an instance of {cls!r}")

    return validate


def eq(x: Any) -> FieldValidator:
    def validate(instance: Any, name: str, value: Any) -> ValidationResult:
        return _check(_rejects(lambda v: v != x, value), name, f"Field must equal to {x}")

    return validate


def ne(x: Any) -> FieldValidator:
    def validate(instance: Any, name: str, value: Any) -> ValidationResult:
        return _check(_rejects(lambda v: v == x, value), name, f"Field must not be equal to {x}")

    return validate


def lt(x: Any) -> FieldValidator:
    def validate(instance: Any, name: str, value: Any) -> ValidationResult:
        return _check(_rejects(lambda v: v >= x, value), name, f"Field must be less than {x}")

    return validate


def le(x: Any) -> FieldValidator:
    def validate(instance: Any, name: str, value: Any) -> ValidationResult:
        return _check(
            _rejects(lambda v: v > x, value), name, f"Field must be less than or equal to {x}"
        )

    return validate


def gt(x: Any) -> FieldValidator:
    def validate(instance: Any, name: str, value: Any) -> ValidationResult:
        return _check(_rejects(lambda v: v <= x, value), name, f"Field must be greater than {x}")

    return validate


def ge(x: Any) -> FieldValidator:
    def validate(instance: Any, name: str, value: Any) -> ValidationResult:
        return _check(
            _rejects(lambda v: v < x, value), name, f"Field must be greater than or equal to {x}"
        )

    return validate


def one_of(values: Iterable[Any]) -> FieldValidator:
    choices = list(values)

    def validate(instance: Any, name: str, value: Any) -> ValidationResult:
        return _check(
            value not in choices,
            name,
            f"Field must be one of: {', '.join(str(c) for c in choices)}",
        )

    return validate


def length(n: int) -> FieldValidator:
    def validate(instance: Any, name: str, value: Any) -> ValidationResult:
        return _check(_rejects(lambda v: len(v) != n, value), name, f"Field must be of length {n}")

    return validate


def min_length(n: int) -> FieldValidator:
    def validate(instance: Any, name: str, value: Any) -> ValidationResult:
        return _check(
            _rejects(lambda v: len(v) < n, value), name, f"Field must be of length {n} or greater"
        )

    return validate


def max_length(n: int) -> FieldValidator:
    def validate(instance: Any, name: str, value: Any) -> ValidationResult:
        return _check(
            _rejects(lambda v: len(v) > n, value), name, f"Field must be of length {n} or less"
        )

    return validate


__all__ = [
    "FieldValidator",
    "required",
    "type_of",
    "instance_of",
    "eq",
    "ne",
    "lt",
    "le",
    "gt",
    "ge",
    "one_of",
    "length",
    "min_length",
    "max_length",
]
