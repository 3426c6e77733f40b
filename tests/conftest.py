"""
Shared pytest fixtures for modelspine tests.

This module provides:
- Settings cache isolation (every test sees fresh ``MODELSPINE_*`` settings)
- Logging context cleanup
- Small ready-made models over a MemoryStore
"""

from collections.abc import Generator
from pathlib import Path

import pytest

from modelspine import Alias, Model
from modelspine.logging import clear_context
from modelspine.settings import clear_settings_cache
from modelspine.stores import MemoryStore


def pytest_collection_modifyitems(config: pytest.Config, items: list[pytest.Item]) -> None:
    """Auto-mark tests based on their location."""
    for item in items:
        test_path = Path(item.fspath).relative_to(Path(__file__).parent)
        if "integration" in str(test_path):
            item.add_marker(pytest.mark.integration)
        markers = {mark.name for mark in item.iter_markers()}
        if not markers.intersection({"unit", "integration"}):
            item.add_marker(pytest.mark.unit)


# =============================================================================
# Isolation Fixtures
# =============================================================================


@pytest.fixture(autouse=True)
def clean_settings_fixture(monkeypatch: pytest.MonkeyPatch) -> Generator[None, None, None]:
    """Clear cached settings and ``MODELSPINE_*`` overrides around each test."""
    monkeypatch.delenv("MODELSPINE_STRICT_IDENTITY", raising=False)
    monkeypatch.delenv("MODELSPINE_ID_FIELD", raising=False)
    monkeypatch.delenv("MODELSPINE_TYPE_FIELD", raising=False)
    monkeypatch.delenv("MODELSPINE_STORE_ID_PROPERTY", raising=False)
    monkeypatch.delenv("MODELSPINE_DEFAULT_STORE", raising=False)
    clear_settings_cache()
    yield
    clear_settings_cache()


@pytest.fixture(autouse=True)
def clean_log_context_fixture() -> Generator[None, None, None]:
    clear_context()
    yield
    clear_context()


# =============================================================================
# Model Fixtures
# =============================================================================


@pytest.fixture
def store() -> MemoryStore:
    return MemoryStore()


@pytest.fixture
def users(store: MemoryStore) -> Model:
    """
    ``users`` model: id → _id, name → _name, email → _email, age → _age.
    """
    model = Model(store, name="users")
    model.add_field("id", Alias(property="_id"))
    model.add_field("name", Alias(property="_name"))
    model.add_field("email", Alias(property="_email"))
    model.add_field("age", Alias(property="_age"))
    return model
