"""The ``UNDEFINED`` sentinel.

``None`` is a legitimate field value (a stored ``null``), so "this field has
no value here" needs its own marker. ``UNDEFINED`` is returned by field reads
that are not applicable (unreadable, unselected, unresolved dependencies)
and is skipped by batch writes and validation.

Examples:
    >>> from modelspine import UNDEFINED
    >>> instance.get("unknown") is UNDEFINED
    True
    >>> bool(UNDEFINED)
    False

Tags:
    sentinel, undefined, field-value, modelspine
"""

from __future__ import annotations

from typing import Any


class _UndefinedType:
    """Singleton type of :data:`UNDEFINED`."""

    _instance: _UndefinedType | None = None

    def __new__(cls) -> _UndefinedType:
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "UNDEFINED"

    def __bool__(self) -> bool:
        return False

    def __copy__(self) -> _UndefinedType:
        return self

    def __deepcopy__(self, memo: dict[int, Any]) -> _UndefinedType:
        return self

    def __reduce__(self) -> str:
        return "UNDEFINED"


UNDEFINED: Any = _UndefinedType()


def is_undefined(value: Any) -> bool:
    """Return ``True`` if *value* is the :data:`UNDEFINED` sentinel."""
    return value is UNDEFINED


__all__ = [
    "UNDEFINED",
    "is_undefined",
]
