"""
Instance: a bound (view, draft, snapshot) triple with a persistence lifecycle.

An :class:`Instance` pairs raw record data with the model (or view) that
interprets it. Field access always goes through the view, so rebinding an
instance to a narrower view re-filters it without touching its data.

Lifecycle:
    ::

                     save() · exactly 1 inserted
          ┌──────────┐ ─────────────────────────▶ ┌──────────┐
          │ floating │                            │   sunk   │ ──┐ save() · exactly
          └──────────┘ ◀───────────────────────── └──────────┘ ◀─┘ 1 modified
                     delete() · exactly 1 deleted

    Any other store outcome leaves the state (and the snapshot) unchanged.
    ``sink()`` moves the snapshot forward explicitly; ``sink(False)``
    additionally marks the instance floating.

Manifesto:
    - **Validate before write:** a single-field ``set`` runs the field's
      validators first and never reaches the setter on failure
    - **Snapshot by value:** ``is_modified`` compares field values of the
      draft against a deep-copied snapshot, never object identity
    - **Never guess an identity:** save/delete on a persisted instance need
      a resolvable, non-empty identity filter

Examples:
    >>> post = posts.wrap({"_title": "Draft"})
    >>> post.set("title", "Final")
    True
    >>> post.is_modified("title"), post.get_original("title")
    (True, 'Draft')
    >>> post.sink()
    >>> post.is_modified()
    False

Guardrails:
    ❌ DON'T: Mutate ``instance.data`` behind the model's back
    ✅ DO: Go through ``set`` so validators run

    ❌ DON'T: Assume ``save()`` persisted something
    ✅ DO: Check ``is_floating`` or the returned store result

Tags:
    instance, lifecycle, draft, snapshot, validation, modelspine

Doc-Types:
    - API Reference
"""

from __future__ import annotations

import copy
from collections.abc import Mapping
from typing import TYPE_CHECKING, Any

from modelspine.errors import IdentityError, ValidationError
from modelspine.logging import LogContext, get_logger
from modelspine.mask import MaskConvertible
from modelspine.settings import get_settings
from modelspine.undefined import UNDEFINED
from modelspine.validation import ValidationResult

if TYPE_CHECKING:
    from modelspine.protocols import ModelView, Store
    from modelspine.stores.results import DeleteResult, InsertResult, UpdateResult

logger = get_logger(__name__)


class Instance:
    """Record data bound to a model view.

    Parameters:
        model: Model or view interpreting the data.
        store: Store used by :meth:`save` and :meth:`delete`.
        data: Draft data. Kept by reference, not copied.
        floating: Whether the instance is unpersisted.
        original: Snapshot to start from; defaults to a copy of *data*.
    """

    def __init__(
        self,
        model: ModelView,
        store: Store,
        data: dict[str, Any],
        *,
        floating: bool = True,
        original: dict[str, Any] | None = None,
    ) -> None:
        self.model = model
        self._store = store
        self._data = data
        self._original = copy.deepcopy(data if original is None else original)
        self._floating = floating
        self._validation_enabled = True

    @property
    def is_floating(self) -> bool:
        return self._floating

    @property
    def data(self) -> dict[str, Any]:
        return self._data

    # -- Views ---------------------------------------------------------------

    def rebind(self, model: ModelView) -> Instance:
        """Same store and draft (shared by reference), different view."""
        return Instance(
            model,
            self._store,
            self._data,
            floating=self._floating,
            original=self._original,
        )

    def select(self, selection: MaskConvertible) -> Instance:
        return self.rebind(self.model.select(selection))

    # -- Reads ---------------------------------------------------------------

    def get(self, name_or_mask: str | MaskConvertible = None) -> Any:
        """Value of one field, or a dict of the readable fields in a mask.

        A single unreadable or unselected field gives ``UNDEFINED``; in the
        mask form such fields are omitted.
        """
        return self._read(self._data, name_or_mask)

    def get_original(self, name_or_mask: str | MaskConvertible = UNDEFINED) -> Any:
        """Like :meth:`get`, against the snapshot.

        Without an argument, returns an instance wrapping a copy of the
        snapshot.
        """
        if name_or_mask is UNDEFINED:
            return self.model.wrap(copy.deepcopy(self._original))
        return self._read(self._original, name_or_mask)

    def _read(self, data: dict[str, Any], name_or_mask: str | MaskConvertible) -> Any:
        if isinstance(name_or_mask, str):
            return self.model.get_field_value(self, data, name_or_mask)
        result: dict[str, Any] = {}
        for name in self.model.fields(name_or_mask):
            value = self.model.get_field_value(self, data, name)
            if value is not UNDEFINED:
                result[name] = value
        return result

    def is_modified(self, name_or_mask: str | MaskConvertible = None) -> bool:
        """Whether any covered field's draft value differs from the snapshot.

        Fields with known dependencies compare their stored properties, so a
        getter default cannot hide a change; opaque fields compare values.
        """
        if isinstance(name_or_mask, str):
            dependencies = self.model.get_dependency_mask([name_or_mask])
            if dependencies is not None:
                return dependencies.apply(self._data) != dependencies.apply(self._original)
            current = self.model.get_field_value(self, self._data, name_or_mask)
            original = self.model.get_field_value(self, self._original, name_or_mask)
            return current != original
        return any(self.is_modified(name) for name in self.model.fields(name_or_mask))

    # -- Writes --------------------------------------------------------------

    def set(self, name_or_entries: str | Mapping[str, Any], value: Any = UNDEFINED) -> bool:
        """Validate and write one field, or each entry of a mapping in order.

        ``UNDEFINED`` values are skipped. Entries are applied one by one, so
        a failure on a later entry leaves earlier ones written.

        Returns:
            Whether every attempted write reached a setter.

        Raises:
            ValidationError: a field's validators reported errors; that
                field's setter was not called.
        """
        if not isinstance(name_or_entries, str):
            written = True
            for name, entry in name_or_entries.items():
                if entry is not UNDEFINED:
                    written = self.set(name, entry) and written
            return written

        if value is UNDEFINED:
            return False
        result = self.validate(name_or_entries, value)
        if result is not None and result.has_errors():
            error = ValidationError(result=result).with_context(
                field=name_or_entries, operation="set"
            )
            logger.debug("instance_set_rejected", error=error)
            raise error
        return self.model.set_field_value(self, self._data, name_or_entries, value)

    # -- Validation ----------------------------------------------------------

    def disable_validation(self) -> None:
        """Make :meth:`validate` report no errors until restored."""
        self._validation_enabled = False

    def restore_validation(self) -> None:
        self._validation_enabled = True

    def validate(
        self,
        name_or_entries: str | Mapping[str, Any] | None = None,
        value: Any = UNDEFINED,
    ) -> ValidationResult | None:
        """Validate the instance, a mapping of candidate values, or one field.

        Candidate values are checked without being written. The single-field
        form returns ``None`` for an ``UNDEFINED`` value or an unknown field.
        """
        if not self._validation_enabled:
            return ValidationResult()

        if name_or_entries is None:
            result = ValidationResult()
            for name in self.model.fields():
                current = self.get(name)
                if current is not UNDEFINED:
                    result.merge(self.validate(name, current))
            return result

        if not isinstance(name_or_entries, str):
            result = ValidationResult()
            for name, entry in name_or_entries.items():
                if entry is not UNDEFINED:
                    result.merge(self.validate(name, entry))
            return result

        if value is UNDEFINED:
            return None
        return self.model.validate_field(self, self._data, name_or_entries, value)

    # -- Persistence ---------------------------------------------------------

    def sink(self, sunk: bool = True) -> None:
        """Snapshot the draft; mark the instance persisted (or floating)."""
        self._original = copy.deepcopy(self._data)
        self._floating = not sunk

    def save(self) -> InsertResult | UpdateResult | None:
        """Insert a floating instance or update a persisted one.

        Returns:
            The store result, or ``None`` when no store call was issued
            (unresolvable identity).

        Raises:
            ValidationError: whole-instance validation failed; the store was
                not called.
            IdentityError: the identity is unresolvable and the
                ``strict_identity`` setting is on.
        """
        with LogContext(model=_model_label(self.model), operation="save"):
            if self._floating:
                self._raise_if_invalid()
                result = self._store.insert(self._data)
                if result.inserted_count == 1:
                    self.sink()
                    logger.info("instance_inserted")
                else:
                    logger.info("instance_insert_skipped", inserted_count=result.inserted_count)
                return result

            filter = self._identity_filter()
            if filter is None:
                return None
            self._raise_if_invalid()
            result = self._store.update(filter, self._update_document())
            if result.modified_count == 1:
                self.sink()
                logger.info("instance_updated", filter=filter)
            else:
                logger.info(
                    "instance_update_skipped",
                    filter=filter,
                    matched_count=result.matched_count,
                    modified_count=result.modified_count,
                )
            return result

    def delete(self) -> DeleteResult | None:
        """Delete the persisted record; the instance becomes floating again.

        Returns:
            The store result, or ``None`` when the instance is floating or
            its identity is unresolvable.
        """
        if self._floating:
            return None
        with LogContext(model=_model_label(self.model), operation="delete"):
            filter = self._identity_filter()
            if filter is None:
                return None
            result = self._store.delete(filter, multi=False)
            if result.deleted_count == 1:
                self.sink(False)
                logger.info("instance_deleted", filter=filter)
            else:
                logger.info("instance_delete_skipped", filter=filter)
            return result

    def _raise_if_invalid(self) -> None:
        result = self.validate()
        if result is not None and result.has_errors():
            error = ValidationError(result=result).with_context(
                model=_model_label(self.model), operation="save"
            )
            logger.info("instance_validation_failed", error=error)
            raise error

    def _identity_filter(self) -> dict[str, Any] | None:
        """Filter matching this instance's record, or ``None`` if unresolvable."""
        id_field = self.model.id_field
        dependencies = self.model.get_dependency_mask([id_field])
        filter = dependencies.apply(self._data) if dependencies is not None else {}
        if dependencies is not None and filter and not dependencies.missing(self._data):
            return filter

        if not get_settings().strict_identity:
            logger.warning("instance_identity_unresolvable", id_field=id_field)
            return None
        error = IdentityError(
            f"Cannot build an identity filter from field {id_field!r}"
        ).with_context(model=_model_label(self.model), field=id_field)
        logger.error("instance_identity_unresolvable", id_field=id_field, error=error)
        raise error

    def _update_document(self) -> dict[str, Any]:
        update: dict[str, Any] = {"$set": copy.deepcopy(self._data)}
        removed = [name for name in self._original if name not in self._data]
        if removed:
            update["$unset"] = {name: "" for name in removed}
        return update

    def __repr__(self) -> str:
        state = "floating" if self._floating else "sunk"
        return f"Instance({_model_label(self.model)}, {state}, {self._data!r})"


def _model_label(model: Any) -> str:
    return getattr(model, "name", None) or type(model).__name__


__all__ = [
    "Instance",
]
