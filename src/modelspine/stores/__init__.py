"""Store implementations and the store factory.

Architecture::

    results.py    InsertResult / UpdateResult / DeleteResult
    query.py      Mongo-style filter matching, update application, ordering
    memory.py     MemoryStore: list-backed reference store
    null.py       NullStore: zero-effect default store

Quick start::

    from modelspine.stores import create_store, StoreBackend

    store = create_store(StoreBackend.MEMORY)
"""

from __future__ import annotations

from modelspine.errors import ConfigError
from modelspine.protocols import Store
from modelspine.settings import StoreBackend, get_settings
from modelspine.stores.memory import MemoryStore
from modelspine.stores.null import NullStore
from modelspine.stores.results import DeleteResult, InsertResult, UpdateResult


def create_store(backend: StoreBackend | str | None = None) -> Store:
    """Build a store for *backend*, or for the configured ``default_store``."""
    if backend is None:
        backend = get_settings().default_store
    try:
        backend = StoreBackend(backend)
    except ValueError as exc:
        raise ConfigError(f"Unknown store backend: {backend!r}", cause=exc).with_context(
            operation="create_store"
        ) from exc

    if backend == StoreBackend.MEMORY:
        return MemoryStore()
    return NullStore()


__all__ = [
    "create_store",
    "StoreBackend",
    "MemoryStore",
    "NullStore",
    "InsertResult",
    "UpdateResult",
    "DeleteResult",
]
