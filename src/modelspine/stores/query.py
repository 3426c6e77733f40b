"""
Structural filter matching and update application for in-process stores.

Implements the subset of the Mongo query language the model layer emits and
that tests and applications commonly use against :class:`MemoryStore`.

Filter language::

    {"name": "x"}                        equality (None also matches missing)
    {"tags": "a"}                        membership when the stored value is a list
    {"age": {"$gte": 18, "$lt": 65}}     field operators
    {"$or": [{"a": 1}, {"b": 2}]}        logical operators

    Field operators:   $eq $ne $gt $gte $lt $lte $in $nin $exists $not
    Logical operators: $and $or $nor $not

Update language::

    {"name": "y", "age": 3}              replacement (identity property kept)
    {"$set": {...}, "$unset": {...}, "$inc": {...}}

Unknown operators raise :class:`~modelspine.errors.QueryError`.

Tags:
    query, filter, update, mongo-style, memory-store, modelspine
"""

from __future__ import annotations

import copy
from collections.abc import Mapping
from typing import Any

from modelspine.errors import QueryError


def matches(filter: Mapping[str, Any] | None, record: Mapping[str, Any]) -> bool:
    """Return ``True`` if *record* satisfies *filter*."""
    if not filter:
        return True
    for key, condition in filter.items():
        if key.startswith("$"):
            if not _match_logical(key, condition, record):
                return False
        elif not _match_condition(key in record, record.get(key), condition):
            return False
    return True


def _match_logical(operator: str, operand: Any, record: Mapping[str, Any]) -> bool:
    if operator == "$and":
        return all(matches(f, record) for f in operand)
    if operator == "$or":
        return any(matches(f, record) for f in operand)
    if operator == "$nor":
        return not any(matches(f, record) for f in operand)
    if operator == "$not":
        return not matches(operand, record)
    raise QueryError(f"Unknown logical operator: {operator}")


def _is_operator_document(condition: Any) -> bool:
    return (
        isinstance(condition, Mapping)
        and bool(condition)
        and all(isinstance(k, str) and k.startswith("$") for k in condition)
    )


def _match_condition(present: bool, value: Any, condition: Any) -> bool:
    if not _is_operator_document(condition):
        return _equals(present, value, condition)
    return all(
        _apply_operator(operator, operand, present, value)
        for operator, operand in condition.items()
    )


def _equals(present: bool, value: Any, operand: Any) -> bool:
    if operand is None:
        return not present or value is None
    if not present:
        return False
    if value == operand:
        return True
    return isinstance(value, list) and not isinstance(operand, list) and operand in value


def _compare(present: bool, value: Any, operand: Any, operator: str) -> bool:
    if not present or value is None:
        return False
    try:
        if operator == "$gt":
            return value > operand
        if operator == "$gte":
            return value >= operand
        if operator == "$lt":
            return value < operand
        return value <= operand
    except TypeError:
        return False


def _apply_operator(operator: str, operand: Any, present: bool, value: Any) -> bool:
    if operator == "$eq":
        return _equals(present, value, operand)
    if operator == "$ne":
        return not _equals(present, value, operand)
    if operator in ("$gt", "$gte", "$lt", "$lte"):
        return _compare(present, value, operand, operator)
    if operator == "$in":
        return any(_equals(present, value, o) for o in operand)
    if operator == "$nin":
        return not any(_equals(present, value, o) for o in operand)
    if operator == "$exists":
        return present == bool(operand)
    if operator == "$not":
        return not _match_condition(present, value, operand)
    raise QueryError(f"Unknown field operator: {operator}")


def apply_update(
    record: Mapping[str, Any],
    update: Mapping[str, Any],
    id_property: str | None = None,
) -> dict[str, Any]:
    """Return a new record with *update* applied to *record*."""
    operator_keys = [k for k in update if k.startswith("$")]
    if operator_keys and len(operator_keys) != len(update):
        raise QueryError("Update mixes operators and replacement fields")

    if not operator_keys:
        result = copy.deepcopy(dict(update))
        if id_property is not None and id_property in record:
            result[id_property] = record[id_property]
        return result

    result = copy.deepcopy(dict(record))
    for operator, fields in update.items():
        if operator == "$set":
            for name, value in fields.items():
                result[name] = copy.deepcopy(value)
        elif operator == "$unset":
            for name in fields:
                result.pop(name, None)
        elif operator == "$inc":
            for name, amount in fields.items():
                result[name] = result.get(name, 0) + amount
        else:
            raise QueryError(f"Unknown update operator: {operator}")
    return result


def sort_records(records: list[dict[str, Any]], ordering: Mapping[str, int]) -> None:
    """Sort *records* in place by *ordering* (property → 1 or -1).

    Missing and ``None`` values sort first in ascending order.
    """
    for name, direction in reversed(list(ordering.items())):
        if direction not in (1, -1):
            raise QueryError(f"Invalid ordering direction for {name!r}: {direction!r}")
        try:
            records.sort(key=lambda r: _sort_key(r.get(name)), reverse=direction == -1)
        except TypeError as exc:
            raise QueryError(f"Cannot order by {name!r}: mixed value types", cause=exc) from exc


def _sort_key(value: Any) -> tuple[int, Any]:
    if value is None:
        return (0, 0)
    return (1, value)


__all__ = [
    "matches",
    "apply_update",
    "sort_records",
]
