"""
Centralized settings for modelspine.

Manifesto:
    Model defaults (which field is the identity, which is the type
    discriminator, which property a store uses for generated ids) and
    library behavior (strict identity handling, log format) are read from
    one validated, cached settings object instead of being parsed ad hoc.

All fields can be set via ``MODELSPINE_*`` environment variables (e.g.
``MODELSPINE_STRICT_IDENTITY=true``) or a ``.env`` file.

Examples:
    >>> from modelspine.settings import get_settings
    >>> get_settings().id_field
    'id'

Tags:
    configuration, settings, pydantic, caching, modelspine

Doc-Types:
    - API Reference
    - Configuration Guide
"""

from __future__ import annotations

from enum import Enum

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class StoreBackend(str, Enum):
    """Store implementations selectable through configuration."""

    NULL = "null"
    MEMORY = "memory"


class ModelSpineSettings(BaseSettings):
    """modelspine configuration.

    Fields
    ──────
    id_field           : Default identity field name for new models
    type_field         : Default type-discriminator field name for new models
    store_id_property  : Property a store fills with a generated identity
    default_store      : Backend built by ``create_store()`` without arguments
    strict_identity    : Raise instead of skipping when save/delete cannot
                         build an identity filter
    log_level          : structlog log level
    log_format         : ``json`` or ``console``
    """

    model_config = SettingsConfigDict(
        env_prefix="MODELSPINE_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # ── Model defaults ───────────────────────────────────────────
    id_field: str = Field(default="id")
    type_field: str = Field(default="type")

    # ── Stores ───────────────────────────────────────────────────
    store_id_property: str = Field(default="_id")
    default_store: StoreBackend = Field(default=StoreBackend.NULL)

    # ── Persistence behavior ─────────────────────────────────────
    strict_identity: bool = Field(
        default=False,
        description="Raise IdentityError when an identity filter cannot be built",
    )

    # ── Logging ──────────────────────────────────────────────────
    log_level: str = Field(default="INFO")
    log_format: str = Field(default="console")


_settings_cache: dict[str, ModelSpineSettings] = {}


def get_settings(*, _force_reload: bool = False) -> ModelSpineSettings:
    """Load, validate, and cache a :class:`ModelSpineSettings` instance."""
    if not _force_reload and "default" in _settings_cache:
        return _settings_cache["default"]
    settings = ModelSpineSettings()
    _settings_cache["default"] = settings
    return settings


def clear_settings_cache() -> None:
    """Clear the settings cache (primarily for testing)."""
    _settings_cache.clear()


__all__ = [
    "ModelSpineSettings",
    "StoreBackend",
    "get_settings",
    "clear_settings_cache",
]
