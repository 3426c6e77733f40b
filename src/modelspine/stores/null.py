"""Store that persists nothing.

Used by models constructed without a store: every mutation reports zero
affected records and ``find`` returns an empty list, so instances stay
floating and nothing ever leaks out of the process.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from modelspine.mask import MaskConvertible
from modelspine.stores.results import DeleteResult, InsertResult, UpdateResult


class NullStore:
    def find(
        self,
        filter: Mapping[str, Any] | None = None,
        *,
        limit: int | None = None,
        offset: int | None = None,
        ordering: Mapping[str, int] | None = None,
        select: MaskConvertible = None,
    ) -> list[dict[str, Any]]:
        return []

    def insert(
        self,
        items: Mapping[str, Any] | list[Mapping[str, Any]],
        *,
        ordered: bool = True,
    ) -> InsertResult:
        return InsertResult(inserted_count=0)

    def update(
        self,
        filter: Mapping[str, Any],
        update: Mapping[str, Any],
        *,
        multi: bool = False,
    ) -> UpdateResult:
        return UpdateResult(matched_count=0, modified_count=0)

    def delete(self, filter: Mapping[str, Any], *, multi: bool = True) -> DeleteResult:
        return DeleteResult(deleted_count=0)


__all__ = [
    "NullStore",
]
