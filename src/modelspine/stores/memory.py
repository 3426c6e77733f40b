"""
In-memory reference store.

:class:`MemoryStore` keeps records in a private list and satisfies the
:class:`~modelspine.protocols.Store` contract with the filter and update
language of :mod:`modelspine.stores.query`.

Manifesto:
    The model layer needs a store to be testable end to end, and a store
    whose behavior is obvious enough to reason about in tests. MemoryStore
    is that store: single process, no persistence, deterministic.

    - **No aliasing:** Records go in and come out as deep copies
    - **Identity assignment:** Records without an identity get a ULID,
      written back to the caller's record (as pymongo does on insert)
    - **Insert never overwrites:** A duplicate identity is skipped

Examples:
    >>> store = MemoryStore()
    >>> store.insert([{"foo": 1, "bar": 1}, {"foo": 1, "bar": 2}])
    InsertResult(inserted_count=2)
    >>> store.update({"bar": 2}, {"$set": {"foo": 3}})
    UpdateResult(matched_count=1, modified_count=1)
    >>> [r["bar"] for r in store.find({}, ordering={"bar": -1})]
    [2, 1]

Guardrails:
    ❌ DON'T: Use MemoryStore across processes (no sharing)
    ✅ DO: Use it for tests, fixtures and single-process tools

Tags:
    store, in-memory, crud, reference-implementation, modelspine
"""

from __future__ import annotations

import copy
from collections.abc import Mapping
from typing import Any

from modelspine.ids import generate_ulid
from modelspine.logging import get_logger
from modelspine.mask import Mask, MaskConvertible
from modelspine.stores.query import apply_update, matches, sort_records
from modelspine.stores.results import DeleteResult, InsertResult, UpdateResult

logger = get_logger(__name__)


class MemoryStore:
    """List-backed store with Mongo-style filters.

    Attributes:
        id_property: Property holding each record's identity. Defaults to
            the ``store_id_property`` setting (``_id``).
    """

    def __init__(self, *, id_property: str | None = None) -> None:
        if id_property is None:
            from modelspine.settings import get_settings

            id_property = get_settings().store_id_property
        self.id_property = id_property
        self._items: list[dict[str, Any]] = []

    def find(
        self,
        filter: Mapping[str, Any] | None = None,
        *,
        limit: int | None = None,
        offset: int | None = None,
        ordering: Mapping[str, int] | None = None,
        select: MaskConvertible = None,
    ) -> list[dict[str, Any]]:
        """Return deep copies of the records matching *filter*."""
        items = [item for item in self._items if matches(filter, item)]
        if ordering:
            sort_records(items, ordering)
        if offset is not None:
            items = items[offset:]
        if limit is not None:
            items = items[:limit]
        projection = Mask.selection(select)
        return [copy.deepcopy(projection.apply(item)) for item in items]

    def insert(
        self,
        items: Mapping[str, Any] | list[Mapping[str, Any]],
        *,
        ordered: bool = True,
    ) -> InsertResult:
        """Insert one record or a list of records.

        Records whose identity already exists are skipped. ``ordered`` is
        accepted for interface compatibility; insertion is always in order.
        """
        if isinstance(items, Mapping):
            items = [items]

        inserted_count = 0
        for item in items:
            if item.get(self.id_property) is not None:
                if self._index_of({self.id_property: item[self.id_property]}) != -1:
                    logger.debug("memory_store_duplicate_skipped", id=item[self.id_property])
                    continue
            elif isinstance(item, dict):
                item[self.id_property] = generate_ulid()
            else:
                item = {self.id_property: generate_ulid(), **item}
            self._items.append(copy.deepcopy(dict(item)))
            inserted_count += 1

        return InsertResult(inserted_count=inserted_count)

    def update(
        self,
        filter: Mapping[str, Any],
        update: Mapping[str, Any],
        *,
        multi: bool = False,
    ) -> UpdateResult:
        """Apply *update* to the first match, or to every match with ``multi``."""
        targets = [item for item in self._items if matches(filter, item)]
        if len(targets) > 1 and not multi:
            targets = targets[:1]

        modified_count = 0
        for target in targets:
            modified = apply_update(target, update, self.id_property)
            if modified != target:
                target.clear()
                target.update(modified)
                modified_count += 1

        return UpdateResult(matched_count=len(targets), modified_count=modified_count)

    def delete(self, filter: Mapping[str, Any], *, multi: bool = True) -> DeleteResult:
        """Remove every match, or only the first one when ``multi`` is false."""
        if not multi:
            index = self._index_of(filter)
            if index == -1:
                return DeleteResult(deleted_count=0)
            del self._items[index]
            return DeleteResult(deleted_count=1)

        remaining = [item for item in self._items if not matches(filter, item)]
        deleted_count = len(self._items) - len(remaining)
        self._items = remaining
        return DeleteResult(deleted_count=deleted_count)

    def count(self) -> int:
        """Return the number of stored records."""
        return len(self._items)

    def _index_of(self, filter: Mapping[str, Any]) -> int:
        for index, item in enumerate(self._items):
            if matches(filter, item):
                return index
        return -1


__all__ = [
    "MemoryStore",
]
