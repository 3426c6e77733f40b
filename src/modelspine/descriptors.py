"""
Field descriptors and their conversion rules.

A model field is always backed by a :class:`FieldDescriptor`. Callers may
hand :meth:`Model.add_field <modelspine.model.Model.add_field>` one of four
shapes; :func:`resolve_descriptor` normalizes them once, at registration
time, into a descriptor tagged with its :class:`DescriptorKind`.

Architecture:
    ::

        resolve_descriptor(name, value)          rules tried in order
        ┌────────────────────────────────────────────────────────────────┐
        │ 1. FieldDescriptor, or mapping with callable get/set           │
        │        → DESCRIPTOR   (used as-is)                             │
        │ 2. object with into_field_descriptor()                         │
        │        → CONVERTIBLE  (call it, resolve the result as rule 1)  │
        │ 3. Alias, or mapping without get/set                           │
        │        → ALIAS        (field ↔ storage property)               │
        │ 4. anything else                                               │
        │        → CONSTANT     (read-only literal, no dependencies)     │
        └────────────────────────────────────────────────────────────────┘

    Handler signatures:
        getter(instance, data) -> value
        setter(instance, data, value) -> None
        validator(instance, name, value) -> ValidationResult | None
        translate(result, value) -> None

Manifesto:
    A descriptor's ``requires`` mask names the storage properties its getter
    and setter touch. ``requires=None`` marks the field dependency-opaque:
    any dependency computation that covers it fails closed. Aliases and
    constants always know their dependencies; hand-written descriptors
    should declare them whenever they can.

Examples:
    >>> resolve_descriptor("foo", Alias(property="_foo")).requires
    Mask(['_foo'])
    >>> resolve_descriptor("kind", "user").kind
    <DescriptorKind.CONSTANT: 'constant'>
    >>> resolve_descriptor("full_name", {
    ...     "get": lambda inst, data: f"{data['first']} {data['last']}",
    ...     "requires": ["first", "last"],
    ... }).readable
    True

Tags:
    descriptor, field, alias, tagged-variant, modelspine

Doc-Types:
    - API Reference
"""

from __future__ import annotations

from collections.abc import Callable, Iterable, Mapping
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from modelspine.mask import Mask, MaskConvertible

Getter = Callable[[Any, dict[str, Any]], Any]
Setter = Callable[[Any, dict[str, Any], Any], None]
TranslateHandler = Callable[[dict[str, Any], Any], None]
Validator = Callable[[Any, str, Any], Any]


class DescriptorKind(str, Enum):
    """Which conversion rule produced a descriptor."""

    CONSTANT = "constant"
    ALIAS = "alias"
    DESCRIPTOR = "descriptor"
    CONVERTIBLE = "convertible"


@dataclass(frozen=True)
class FieldDescriptor:
    """Resolved behavior of one model field."""

    getter: Getter | None = None
    setter: Setter | None = None
    validators: tuple[Validator, ...] = ()
    translate: TranslateHandler | None = None
    requires: Mask | None = None
    kind: DescriptorKind = DescriptorKind.DESCRIPTOR

    @property
    def readable(self) -> bool:
        return self.getter is not None

    @property
    def writable(self) -> bool:
        return self.setter is not None


@dataclass(frozen=True)
class Alias:
    """Field backed directly by one storage property.

    Attributes:
        property: Storage property; defaults to the field's own name
        readable: Expose a getter (returns ``default`` for null/absent values)
        writable: Expose a setter writing the property
        default: Value read when the property is null or absent
        validators: Field validators, run in order
    """

    property: str | None = None
    readable: bool = True
    writable: bool = True
    default: Any = None
    validators: tuple[Validator, ...] = field(default_factory=tuple)


@dataclass(frozen=True)
class FieldInformation:
    """Static capabilities of a locally defined field."""

    readable: bool
    writable: bool


def _is_descriptor_mapping(value: Any) -> bool:
    return isinstance(value, Mapping) and (
        callable(value.get("get")) or callable(value.get("set"))
    )


def _requires(value: MaskConvertible) -> Mask | None:
    return None if value is None else Mask.of(value)


def _validators(value: Iterable[Validator] | None) -> tuple[Validator, ...]:
    return tuple(value) if value else ()


def _from_mapping(value: Mapping[str, Any], kind: DescriptorKind) -> FieldDescriptor:
    return FieldDescriptor(
        getter=value.get("get"),
        setter=value.get("set"),
        validators=_validators(value.get("validators")),
        translate=value.get("translate"),
        requires=_requires(value.get("requires")),
        kind=kind,
    )


def _coerce(value: Any, kind: DescriptorKind) -> FieldDescriptor:
    if isinstance(value, FieldDescriptor):
        if value.kind is kind:
            return value
        return FieldDescriptor(
            getter=value.getter,
            setter=value.setter,
            validators=value.validators,
            translate=value.translate,
            requires=value.requires,
            kind=kind,
        )
    if isinstance(value, Mapping):
        return _from_mapping(value, kind)
    raise TypeError(f"Expected a FieldDescriptor or mapping, got {type(value).__name__}")


def _from_alias(name: str, alias: Alias) -> FieldDescriptor:
    prop = alias.property if alias.property is not None else name
    default = alias.default

    def read(instance: Any, data: dict[str, Any]) -> Any:
        value = data.get(prop)
        return default if value is None else value

    def write(instance: Any, data: dict[str, Any], value: Any) -> None:
        data[prop] = value

    def translate(result: dict[str, Any], value: Any) -> None:
        result[prop] = value

    return FieldDescriptor(
        getter=read if alias.readable else None,
        setter=write if alias.writable else None,
        validators=_validators(alias.validators),
        translate=translate if alias.readable and alias.writable else None,
        requires=Mask.of([prop]),
        kind=DescriptorKind.ALIAS,
    )


def _alias_from_mapping(value: Mapping[str, Any]) -> Alias:
    return Alias(
        property=value.get("property"),
        readable=value.get("readable", True) is not False,
        writable=value.get("writable", True) is not False,
        default=value.get("default"),
        validators=_validators(value.get("validators")),
    )


def _constant(value: Any) -> FieldDescriptor:
    return FieldDescriptor(
        getter=lambda instance, data: value,
        requires=Mask.of([]),
        kind=DescriptorKind.CONSTANT,
    )


def resolve_descriptor(name: str, value: Any) -> FieldDescriptor:
    """Normalize any accepted field definition into a :class:`FieldDescriptor`."""
    if isinstance(value, FieldDescriptor) or _is_descriptor_mapping(value):
        return _coerce(value, DescriptorKind.DESCRIPTOR)
    into = getattr(value, "into_field_descriptor", None)
    if callable(into):
        return _coerce(into(), DescriptorKind.CONVERTIBLE)
    if isinstance(value, Alias):
        return _from_alias(name, value)
    if isinstance(value, Mapping):
        return _from_alias(name, _alias_from_mapping(value))
    return _constant(value)


__all__ = [
    "Alias",
    "DescriptorKind",
    "FieldDescriptor",
    "FieldInformation",
    "resolve_descriptor",
]
