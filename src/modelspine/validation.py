"""Aggregated validation results keyed by field name."""

from __future__ import annotations

from collections.abc import Iterator
from typing import overload


class ValidationResult:
    """Error bags keyed by field name.

    Validators return one of these; results of several validators (or
    several fields) are combined with :meth:`merge`. An empty result means
    the value is valid.

    Example:
        result = ValidationResult()
        result.add_error("age", "Field must be greater than 0")
        result.has_errors()          # True
        result.has_errors("name")    # False
        list(result.errors("age"))   # ["Field must be greater than 0"]
    """

    def __init__(self) -> None:
        self._errors: dict[str, list[str]] = {}

    @classmethod
    def error(cls, name: str, message: str) -> ValidationResult:
        """Shortcut for a result holding a single error."""
        result = cls()
        result.add_error(name, message)
        return result

    def has_errors(self, name: str | None = None) -> bool:
        if name is not None:
            return name in self._errors
        return bool(self._errors)

    @overload
    def errors(self) -> Iterator[tuple[str, str]]: ...

    @overload
    def errors(self, name: str) -> Iterator[str]: ...

    def errors(self, name: str | None = None) -> Iterator[tuple[str, str]] | Iterator[str]:
        """Iterate ``(field, message)`` pairs, or the messages of one field."""
        if name is not None:
            return iter(list(self._errors.get(name, ())))
        return iter([(field, err) for field, bag in self._errors.items() for err in bag])

    def add_error(self, name: str, message: str) -> None:
        self._errors.setdefault(name, []).append(message)

    def merge(self, result: ValidationResult | None) -> ValidationResult:
        """Fold *result* into this one and return ``self``.

        ``None`` is accepted and ignored.
        """
        if result is not None:
            for name, message in result.errors():
                self.add_error(name, message)
        return self

    def to_dict(self) -> dict[str, list[str]]:
        return {name: list(bag) for name, bag in self._errors.items()}

    def __len__(self) -> int:
        return sum(len(bag) for bag in self._errors.values())

    def __repr__(self) -> str:
        return f"ValidationResult({self.to_dict()!r})"


__all__ = [
    "ValidationResult",
]
