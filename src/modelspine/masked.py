"""
MaskedModel: a selection-restricted projection of a model.

A masked model never owns descriptors. It filters every field operation by
its selection mask and delegates the rest to its base (a model or another
view). Selecting on a masked model intersects masks, so nested selections
can only narrow.

Reads are additionally guarded by dependencies: a field is only readable
through a view when every storage property it requires is present in the
data, which is what lets a partially loaded record (``find(select=...)``)
answer ``UNDEFINED`` instead of a wrong default.

Examples:
    >>> view = users.select(["name"])
    >>> view.has("name"), view.has("email")
    (True, False)
    >>> view.select(["name", "email"]).fields()
    ['name']

Tags:
    view, projection, selection, mask, modelspine
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import TYPE_CHECKING, Any

from modelspine.mask import Mask, MaskConvertible
from modelspine.undefined import UNDEFINED

if TYPE_CHECKING:
    from modelspine.descriptors import FieldInformation
    from modelspine.instance import Instance
    from modelspine.protocols import ModelView, Store
    from modelspine.validation import ValidationResult


class MaskedModel:
    """View of *model* restricted to the names in *selected*."""

    def __init__(self, model: ModelView, selected: Mask) -> None:
        self._model = model
        self._selected = selected

    @property
    def base(self) -> ModelView:
        return self._model

    @property
    def selected(self) -> Mask:
        return self._selected

    @property
    def id_field(self) -> str:
        return self._model.id_field

    @property
    def type_field(self) -> str:
        return self._model.type_field

    @property
    def type_value(self) -> str | None:
        return self._model.type_value

    @property
    def store(self) -> Store:
        return self._model.store

    def has(self, name: str) -> bool:
        return self._selected.includes(name) and self._model.has(name)

    def fields(self, selection: MaskConvertible = None) -> list[str]:
        return self._model.fields(self._selected.intersect(Mask.selection(selection)))

    def query_field(self, name: str) -> FieldInformation | None:
        if not self._selected.includes(name):
            return None
        return self._model.query_field(name)

    def get_field_value(self, instance: Instance, data: dict[str, Any], name: str) -> Any:
        if not self._selected.includes(name):
            return UNDEFINED
        dependencies = self.get_dependency_mask([name])
        if dependencies is not None and dependencies.missing(data):
            return UNDEFINED
        return self._model.get_field_value(instance, data, name)

    def set_field_value(
        self, instance: Instance, data: dict[str, Any], name: str, value: Any
    ) -> bool:
        if not self._selected.includes(name):
            return False
        return self._model.set_field_value(instance, data, name, value)

    def validate_field(
        self, instance: Instance, data: dict[str, Any], name: str, value: Any
    ) -> ValidationResult | None:
        if not self._selected.includes(name):
            return None
        return self._model.validate_field(instance, data, name, value)

    def get_dependency_mask(self, selection: MaskConvertible = None) -> Mask | None:
        return self._model.get_dependency_mask(self._selected.intersect(Mask.selection(selection)))

    def translate_data(self, entries: Mapping[str, Any]) -> dict[str, Any] | None:
        return self._model.translate_data(self._selected.apply(entries))

    def select(self, selection: MaskConvertible) -> MaskedModel:
        return MaskedModel(self._model, self._selected.intersect(Mask.of(selection)))

    def wrap(self, data: dict[str, Any]) -> Instance:
        return self._model.wrap(data).rebind(self)

    def create_instance(self) -> Instance:
        return self.wrap({})

    def find(
        self,
        id_or_filter: Any = None,
        *,
        limit: int | None = None,
        offset: int | None = None,
        ordering: Mapping[str, int] | None = None,
        select: MaskConvertible = None,
    ) -> Instance | list[Instance] | None:
        """Find through the base, then rebind every result to this view.

        The store projection is narrowed to this view's selection.
        """
        narrowed = self._selected.intersect(Mask.selection(select))
        result = self._model.find(
            id_or_filter,
            limit=limit,
            offset=offset,
            ordering=ordering,
            select=None if narrowed.is_universal else narrowed,
        )
        view = self if select is None else self.select(select)
        if result is None:
            return None
        if isinstance(result, list):
            return [instance.rebind(view) for instance in result]
        return result.rebind(view)

    def __repr__(self) -> str:
        return f"MaskedModel({self._model!r}, {self._selected!r})"


__all__ = [
    "MaskedModel",
]
