"""
Immutable name masks for field selection and dependency declaration.

A :class:`Mask` is the unit of selection throughout modelspine. The same type
carries three kinds of names:

- **Field names**: logical attributes a model exposes
- **Dependent names**: dependency-trackable units (usually field names)
- **Property names**: physical attributes of a stored record

Manifesto:
    Selection and dependency tracking are both set algebra. Narrowing a view
    is an intersection, accumulating the storage properties a group of fields
    needs is a union. Keeping that algebra in one immutable value type means
    views compose without surprises: a selection can only ever shrink.

    - **Immutable:** Every operation returns a new mask
    - **Order-irrelevant:** Equality and inclusion never see insertion order
    - **Universal mask:** An omitted selection means "everything"

Architecture:
    ::

        Mask
        ├── of(x)            None | Mask | str | Iterable[str] → Mask
        ├── all()            universal mask (includes every name)
        ├── selection(x)     all() when x is None, else of(x)
        ├── includes(name)   membership
        ├── intersect(o)  &  narrowing (universal is the identity)
        ├── join(o)       |  accumulation (universal absorbs)
        ├── equals(x)     == structural equality
        ├── apply(data)      project a record onto the mask
        └── missing(data)    names absent from a record

Examples:
    >>> Mask.of(["a", "b"]).intersect(["b", "c"])
    Mask(['b'])
    >>> Mask.of(["a"]).join(Mask.of(["b"])) == ["b", "a"]
    True
    >>> Mask.all().includes("anything")
    True
    >>> Mask.of(["_id"]).apply({"_id": 1, "name": "x"})
    {'_id': 1}

Performance:
    - Backed by ``frozenset``: O(1) membership, O(min(n, m)) intersection

Tags:
    mask, selection, dependency, set-algebra, modelspine

Doc-Types:
    - API Reference
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator, Mapping
from typing import Any, Union

MaskConvertible = Union["Mask", str, Iterable[str], None]


class Mask:
    """Immutable, order-irrelevant set of names.

    ``Mask(names)`` builds an explicit mask. The universal mask is obtained
    from :meth:`all`; it includes every name and cannot be enumerated.
    """

    __slots__ = ("_names",)

    _names: frozenset[str] | None

    def __init__(self, names: Iterable[str] = ()) -> None:
        object.__setattr__(self, "_names", frozenset(names))

    @classmethod
    def of(cls, value: MaskConvertible) -> Mask:
        """Convert *value* into a mask.

        ``None`` gives the empty mask, a ``str`` gives a one-name mask and any
        other iterable is taken as a collection of names.
        """
        if value is None:
            return _EMPTY
        if isinstance(value, Mask):
            return value
        if isinstance(value, str):
            return cls((value,))
        return cls(value)

    @classmethod
    def all(cls) -> Mask:
        """Return the universal mask."""
        return _ALL

    @classmethod
    def selection(cls, value: MaskConvertible) -> Mask:
        """Like :meth:`of`, but an omitted selection means everything."""
        if value is None:
            return _ALL
        return cls.of(value)

    @property
    def is_universal(self) -> bool:
        return self._names is None

    def includes(self, name: str) -> bool:
        return self._names is None or name in self._names

    def intersect(self, other: MaskConvertible) -> Mask:
        other = Mask.of(other)
        if self._names is None:
            return other
        if other._names is None:
            return self
        return Mask(self._names & other._names)

    def join(self, other: MaskConvertible) -> Mask:
        other = Mask.of(other)
        if self._names is None or other._names is None:
            return _ALL
        return Mask(self._names | other._names)

    def equals(self, other: Any) -> bool:
        if not isinstance(other, Mask):
            if isinstance(other, (str, Iterable)) and not isinstance(other, Mapping):
                other = Mask.of(other)
            else:
                return False
        return self._names == other._names

    def apply(self, data: Mapping[str, Any]) -> dict[str, Any]:
        """Project *data* onto this mask, keeping only names present in it."""
        if self._names is None:
            return dict(data)
        return {name: data[name] for name in self._names if name in data}

    def missing(self, data: Mapping[str, Any]) -> list[str]:
        """Return the names of this mask that *data* does not carry."""
        if self._names is None:
            return []
        return sorted(name for name in self._names if name not in data)

    def __contains__(self, name: object) -> bool:
        return isinstance(name, str) and self.includes(name)

    def __and__(self, other: MaskConvertible) -> Mask:
        return self.intersect(other)

    def __or__(self, other: MaskConvertible) -> Mask:
        return self.join(other)

    def __eq__(self, other: object) -> bool:
        return self.equals(other)

    def __hash__(self) -> int:
        return hash(self._names)

    def __iter__(self) -> Iterator[str]:
        if self._names is None:
            raise TypeError("the universal mask is not enumerable")
        return iter(sorted(self._names))

    def __len__(self) -> int:
        if self._names is None:
            raise TypeError("the universal mask has no length")
        return len(self._names)

    def __bool__(self) -> bool:
        return self._names is None or bool(self._names)

    def __setattr__(self, name: str, value: Any) -> None:
        raise AttributeError("Mask is immutable")

    def __repr__(self) -> str:
        if self._names is None:
            return "Mask.all()"
        return f"Mask({sorted(self._names)!r})"


_EMPTY = Mask()
_ALL = Mask()
object.__setattr__(_ALL, "_names", None)


__all__ = [
    "Mask",
    "MaskConvertible",
]
