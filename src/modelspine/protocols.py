"""
Canonical protocol definitions for modelspine.

This module is the single source of truth for the two structural contracts
the model layer is built on:

Architecture:
    ::

        protocols.py
        ├── Store      : CRUD boundary every model delegates persistence to
        └── ModelView  : capability set shared by Model and MaskedModel

    Consumers:
        model.py, masked.py, instance.py, stores/

Manifesto:
    Models compose by reference, not by inheritance. A model's parent may be
    another model or a masked view of one; an instance may be bound to
    either. Both only need the *shape* described by :class:`ModelView`, so
    parent delegation is an explicit fall-through to an optional reference
    rather than a class hierarchy.

    Likewise the core never needs to know what a store is backed by. Anything
    with ``find``/``insert``/``update``/``delete`` of the right shape works:
    the in-memory reference store, the null store, or an adapter around a
    real database.

Guardrails:
    ❌ DON'T: Subclass Model to share fields between models
    ✅ DO: Pass the shared model as ``parent=``

    ❌ DON'T: Add implementation logic to protocol classes
    ✅ DO: Keep protocols pure contracts; implementations live in stores/

Tags:
    protocol, store, model-view, contracts, modelspine

Doc-Types:
    - API Reference
    - Architecture Decision Record
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import TYPE_CHECKING, Any, Protocol, runtime_checkable

if TYPE_CHECKING:
    from modelspine.descriptors import FieldInformation
    from modelspine.instance import Instance
    from modelspine.mask import Mask, MaskConvertible
    from modelspine.stores.results import DeleteResult, InsertResult, UpdateResult
    from modelspine.validation import ValidationResult


# ---------------------------------------------------------------------------
# Store Protocol
# ---------------------------------------------------------------------------


@runtime_checkable
class Store(Protocol):
    """
    Minimal CRUD interface a model persists through.

    Architecture:
        ::

            Store Protocol:
            ┌──────────────────────────────────────────────────────────────┐
            │ find(filter, limit, offset, ordering, select) → list[dict]   │
            │ insert(items, ordered)                → InsertResult          │
            │ update(filter, update, multi=False)   → UpdateResult          │
            │ delete(filter, multi=True)            → DeleteResult          │
            └──────────────────────────────────────────────────────────────┘

    ``filter`` is a structural (Mongo-style) match expression over stored
    records. ``ordering`` maps property names to ``1`` (ascending) or ``-1``
    (descending); ``offset`` and ``limit`` apply after ordering. ``select``
    projects results down to the named properties.

    Zero affected rows is a normal outcome, never an exception. Stores never
    retry on their own.
    """

    def find(
        self,
        filter: Mapping[str, Any] | None = None,
        *,
        limit: int | None = None,
        offset: int | None = None,
        ordering: Mapping[str, int] | None = None,
        select: MaskConvertible = None,
    ) -> list[dict[str, Any]]:
        """Return the records matching *filter*."""
        ...

    def insert(
        self,
        items: Mapping[str, Any] | list[Mapping[str, Any]],
        *,
        ordered: bool = True,
    ) -> InsertResult:
        """Insert one record or a list of records."""
        ...

    def update(
        self,
        filter: Mapping[str, Any],
        update: Mapping[str, Any],
        *,
        multi: bool = False,
    ) -> UpdateResult:
        """Update the first (or, with ``multi``, every) matching record."""
        ...

    def delete(self, filter: Mapping[str, Any], *, multi: bool = True) -> DeleteResult:
        """Delete every (or, without ``multi``, the first) matching record."""
        ...


# ---------------------------------------------------------------------------
# Model View Protocol
# ---------------------------------------------------------------------------


@runtime_checkable
class ModelView(Protocol):
    """
    Capability set shared by :class:`~modelspine.model.Model` and
    :class:`~modelspine.masked.MaskedModel`.

    Field operations return ``UNDEFINED`` (values) or ``None`` (structural
    answers) when they do not apply, never raise for an unknown name.
    """

    id_field: str
    type_field: str

    @property
    def type_value(self) -> str | None: ...

    @property
    def store(self) -> Store: ...

    def has(self, name: str) -> bool: ...

    def fields(self, selection: MaskConvertible = None) -> list[str]: ...

    def query_field(self, name: str) -> FieldInformation | None: ...

    def get_field_value(self, instance: Instance, data: dict[str, Any], name: str) -> Any: ...

    def set_field_value(
        self, instance: Instance, data: dict[str, Any], name: str, value: Any
    ) -> bool: ...

    def validate_field(
        self, instance: Instance, data: dict[str, Any], name: str, value: Any
    ) -> ValidationResult | None: ...

    def get_dependency_mask(self, selection: MaskConvertible = None) -> Mask | None: ...

    def translate_data(self, entries: Mapping[str, Any]) -> dict[str, Any] | None: ...

    def select(self, selection: MaskConvertible) -> ModelView: ...

    def wrap(self, data: dict[str, Any]) -> Instance: ...

    def create_instance(self) -> Instance: ...

    def find(
        self,
        id_or_filter: Any = None,
        *,
        limit: int | None = None,
        offset: int | None = None,
        ordering: Mapping[str, int] | None = None,
        select: MaskConvertible = None,
    ) -> Instance | list[Instance] | None: ...


__all__ = [
    "Store",
    "ModelView",
]
