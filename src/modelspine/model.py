"""
Model: field registry, dependency resolution and persistence entry point.

A :class:`Model` maps field names to :class:`~modelspine.descriptors.FieldDescriptor`
objects and tracks, for every field, the storage properties it depends on.
Everything an instance does with a field (read, write, validate) is resolved
here, after any view in between has applied its selection.

Manifesto:
    Consumers speak in fields; stores speak in properties. The model is the
    translation layer, and it must never pretend to know more than it does.
    A field whose dependencies are undeclared is opaque, and any computation
    covering it answers "unknown" (``None``) rather than a partial mask.

    - **Composition over inheritance:** a model may delegate to one parent
      (a model or a view), consulted only for names it does not define
    - **Resolve once:** descriptor shapes are normalized at registration
    - **Fail closed:** opaque dependencies short-circuit to ``None``

Architecture:
    ::

        ┌───────────────────────────────────────────────────────────────┐
        │                            Model                               │
        │  _fields:     name → FieldDescriptor                           │
        │  _dependents: name → Mask | None   (None = opaque)             │
        │  parent:      ModelView | None     (lookup chain)              │
        │  store:       Store                (NullStore by default)      │
        ├───────────────────────────────────────────────────────────────┤
        │  add_field / has / fields / query_field                        │
        │  get_field_value / set_field_value / validate_field            │
        │  get_dependency_mask / translate_data                          │
        │  select → MaskedModel        wrap / create_instance → Instance │
        │  find → Instance | list[Instance]                              │
        └───────────────────────────────────────────────────────────────┘

Examples:
    >>> from modelspine import Model, Alias
    >>> from modelspine.stores import MemoryStore
    >>> users = Model(MemoryStore(), name="users")
    >>> users.add_field("id", Alias(property="_id"))
    True
    >>> users.add_field("name", Alias(property="_name"))
    True
    >>> users.get_dependency_mask(["id", "name"])
    Mask(['_id', '_name'])
    >>> alice = users.create_instance()
    >>> alice.set("name", "Alice")
    True
    >>> alice.save()
    InsertResult(inserted_count=1)
    >>> users.find(alice.get("id")).get("name")
    'Alice'

Guardrails:
    ❌ DON'T: Register a field that an ancestor already defines
    ✅ DO: Check the ``False`` return of add_field

    ❌ DON'T: Leave ``requires`` off descriptors that only touch known properties
    ✅ DO: Declare ``requires`` so views and identity filters can resolve them

Tags:
    model, field-registry, dependency-mask, composition, modelspine

Doc-Types:
    - API Reference
    - Architecture Decision Record
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any, NoReturn

from modelspine.descriptors import FieldDescriptor, FieldInformation, resolve_descriptor
from modelspine.errors import UntranslatableFilterError
from modelspine.instance import Instance
from modelspine.logging import get_logger
from modelspine.mask import Mask, MaskConvertible
from modelspine.masked import MaskedModel
from modelspine.protocols import ModelView, Store
from modelspine.settings import get_settings
from modelspine.stores.null import NullStore
from modelspine.undefined import UNDEFINED
from modelspine.validation import ValidationResult

logger = get_logger(__name__)


class Model:
    """Registry of field descriptors bound to a store.

    Parameters:
        store: Store to persist through. Defaults to :class:`NullStore`.
        parent: Optional model (or view) consulted for names this model
            does not define.
        id_field: Identity field name (default from settings: ``id``).
        type_field: Type-discriminator field name (default: ``type``).
        type_value: Explicit literal type value.
        name: Label used in logs and reprs.
    """

    def __init__(
        self,
        store: Store | None = None,
        parent: ModelView | None = None,
        *,
        id_field: str | None = None,
        type_field: str | None = None,
        type_value: str | None = None,
        name: str | None = None,
    ) -> None:
        settings = get_settings()
        self.store: Store = store if store is not None else NullStore()
        self.parent = parent
        self.id_field = id_field or settings.id_field
        self.type_field = type_field or settings.type_field
        self.name = name
        self._type_value = type_value
        self._fields: dict[str, FieldDescriptor] = {}
        self._dependents: dict[str, Mask | None] = {}

    # -- Type ----------------------------------------------------------------

    @property
    def type_value(self) -> str | None:
        """Type of this model's records, if knowable without reading one.

        An explicit literal wins. Otherwise the type field is read from an
        empty record, but only when it depends on no storage property.
        """
        if self._type_value is not None:
            return self._type_value
        dependencies = self.get_dependency_mask([self.type_field])
        if dependencies is not None and dependencies.equals([]):
            value = self.wrap({}).get(self.type_field)
            return None if value is UNDEFINED else value
        return None

    @type_value.setter
    def type_value(self, value: str | None) -> None:
        self._type_value = value

    # -- Field registry ------------------------------------------------------

    def has(self, name: str) -> bool:
        if name in self._dependents:
            return True
        return self.parent is not None and self.parent.has(name)

    def add_field(self, name: str, definition: Any) -> bool:
        """Register *name*; ``False`` if it is already defined in the chain."""
        if self.has(name):
            logger.debug("field_rejected", model=self.name, field=name, reason="exists")
            return False
        descriptor = resolve_descriptor(name, definition)
        self._dependents[name] = descriptor.requires
        self._fields[name] = descriptor
        logger.debug("field_added", model=self.name, field=name, kind=descriptor.kind.value)
        return True

    def fields(self, selection: MaskConvertible = None) -> list[str]:
        """Field names included in *selection*, ancestors first."""
        selected = Mask.selection(selection)
        names = list(self.parent.fields(selected)) if self.parent is not None else []
        names.extend(name for name in self._fields if selected.includes(name))
        return names

    def query_field(self, name: str) -> FieldInformation | None:
        """Capabilities of a *locally* defined field, ``None`` otherwise."""
        descriptor = self._fields.get(name)
        if descriptor is None:
            return None
        return FieldInformation(readable=descriptor.readable, writable=descriptor.writable)

    # -- Field operations ----------------------------------------------------

    def get_field_value(self, instance: Instance, data: dict[str, Any], name: str) -> Any:
        descriptor = self._fields.get(name)
        if descriptor is not None:
            if descriptor.getter is None:
                return UNDEFINED
            if descriptor.requires is not None:
                data = descriptor.requires.apply(data)
            return descriptor.getter(instance, data)
        if self.parent is not None:
            return self.parent.get_field_value(instance, data, name)
        return UNDEFINED

    def set_field_value(
        self, instance: Instance, data: dict[str, Any], name: str, value: Any
    ) -> bool:
        """Run the field's setter; ``False`` when the field is not writable."""
        descriptor = self._fields.get(name)
        if descriptor is not None:
            if descriptor.setter is None:
                return False
            descriptor.setter(instance, data, value)
            return True
        if self.parent is not None:
            return self.parent.set_field_value(instance, data, name, value)
        return False

    def validate_field(
        self, instance: Instance, data: dict[str, Any], name: str, value: Any
    ) -> ValidationResult | None:
        descriptor = self._fields.get(name)
        if descriptor is not None:
            result = ValidationResult()
            for validate in descriptor.validators:
                result.merge(validate(instance, name, value))
            return result
        if self.parent is not None:
            return self.parent.validate_field(instance, data, name, value)
        return None

    # -- Dependencies & translation -----------------------------------------

    def get_dependency_mask(self, selection: MaskConvertible = None) -> Mask | None:
        """Union of the properties required by the selected dependents.

        Returns ``None`` as soon as any selected dependent is opaque.
        """
        selected = Mask.selection(selection)
        dependencies = Mask.of([])
        if self.parent is not None:
            inherited = self.parent.get_dependency_mask(selected)
            if inherited is None:
                return None
            dependencies = dependencies.join(inherited)
        for name, requires in self._dependents.items():
            if not selected.includes(name):
                continue
            if requires is None:
                return None
            dependencies = dependencies.join(requires)
        return dependencies

    def translate_data(self, entries: Mapping[str, Any]) -> dict[str, Any] | None:
        """Translate field entries into storage properties.

        Unknown names are skipped. Returns ``None`` at the first known field
        without a translate handler. Entry order is kept, so an ordering
        translates with its precedence intact.
        """
        result: dict[str, Any] = {}
        for name, value in entries.items():
            if value is UNDEFINED:
                continue
            descriptor = self._fields.get(name)
            if descriptor is None:
                if self.parent is None or not self.parent.has(name):
                    continue
                translated = self.parent.translate_data({name: value})
                if translated is None:
                    return None
                result.update(translated)
                continue
            if descriptor.translate is None:
                return None
            descriptor.translate(result, value)
        return result

    # -- Views & instances ---------------------------------------------------

    def select(self, selection: MaskConvertible) -> MaskedModel:
        return MaskedModel(self, Mask.of(selection))

    def wrap(self, data: dict[str, Any]) -> Instance:
        return Instance(self, self.store, data)

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
        """Load persisted instances.

        A scalar argument is an identity value and returns one instance or
        ``None``; a mapping (or nothing) is a field filter and returns a list.
        With ``select``, the store projects records onto the selected fields'
        dependencies and instances are bound to ``self.select(select)``.

        Raises:
            UntranslatableFilterError: the filter or ordering names a field
                that has no storage translation.
        """
        if id_or_filter is not None and not isinstance(id_or_filter, Mapping):
            results = self.find(
                {self.id_field: id_or_filter},
                limit=limit,
                offset=offset,
                ordering=ordering,
                select=select,
            )
            return results[0] if results else None

        entries = dict(id_or_filter or {})
        filter = self.translate_data(entries)
        if filter is None:
            self._reject_untranslatable(entries)

        store_ordering = None
        if ordering:
            store_ordering = self.translate_data(ordering)
            if store_ordering is None:
                self._reject_untranslatable(dict(ordering))

        projection = self.get_dependency_mask(select) if select is not None else None
        records = self.store.find(
            filter,
            limit=limit,
            offset=offset,
            ordering=store_ordering,
            select=projection,
        )
        logger.debug("model_find", model=self.name, filter=filter, count=len(records))

        wrapper: ModelView = self.select(select) if select is not None else self
        instances = []
        for record in records:
            instance = wrapper.wrap(record)
            instance.sink()
            instances.append(instance)
        return instances

    def _reject_untranslatable(self, entries: dict[str, Any]) -> NoReturn:
        error = UntranslatableFilterError(entries).with_context(model=self.name, operation="find")
        logger.info("model_find_rejected", model=self.name, error=error)
        raise error

    def __repr__(self) -> str:
        label = f"{self.name!r}, " if self.name else ""
        return f"Model({label}fields={self.fields()!r})"


__all__ = [
    "Model",
]
