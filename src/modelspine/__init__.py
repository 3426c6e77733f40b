"""
modelspine: field-level data modeling over pluggable record stores.

Manifesto:
    Application code reads and writes *fields*; stores hold *properties*.
    modelspine sits in between: a :class:`Model` declares how each field maps
    onto stored properties, a :class:`MaskedModel` restricts a model to a
    selection, and an :class:`Instance` carries one record through its
    floating/sunk lifecycle.

Architecture:
    ::

        modelspine/
        ├── mask.py          Mask: immutable name-set algebra
        ├── undefined.py     UNDEFINED sentinel
        ├── descriptors.py   FieldDescriptor, Alias, resolve_descriptor
        ├── validation.py    ValidationResult
        ├── validators.py    reusable field validators
        ├── model.py         Model
        ├── masked.py        MaskedModel
        ├── instance.py      Instance
        ├── protocols.py     Store / ModelView protocols
        ├── stores/          MemoryStore, NullStore, query language
        ├── errors.py        error hierarchy
        ├── logging.py       structlog configuration
        ├── settings.py      pydantic-settings configuration
        └── ids.py           ULID generation

Examples:
    >>> from modelspine import Alias, Model, validators
    >>> from modelspine.stores import MemoryStore
    >>> users = Model(MemoryStore(), name="users")
    >>> users.add_field("id", Alias(property="_id"))
    True
    >>> users.add_field("age", Alias(validators=(validators.ge(0),)))
    True
    >>> ann = users.create_instance()
    >>> ann.set("age", 31)
    True
    >>> ann.save()
    InsertResult(inserted_count=1)
    >>> ann.is_floating
    False

Tags:
    modelspine, data-modeling, field-mapping, persistence, package

Doc-Types:
    - API Reference
    - Package Overview
"""

from __future__ import annotations

from modelspine import validators
from modelspine.descriptors import (
    Alias,
    DescriptorKind,
    FieldDescriptor,
    FieldInformation,
    resolve_descriptor,
)
from modelspine.errors import (
    ConfigError,
    ErrorCategory,
    ErrorContext,
    IdentityError,
    ModelSpineError,
    QueryError,
    StoreError,
    UntranslatableFilterError,
    ValidationError,
)
from modelspine.instance import Instance
from modelspine.logging import configure_logging, get_logger
from modelspine.mask import Mask
from modelspine.masked import MaskedModel
from modelspine.model import Model
from modelspine.protocols import ModelView, Store
from modelspine.settings import ModelSpineSettings, get_settings
from modelspine.stores import MemoryStore, NullStore, create_store
from modelspine.undefined import UNDEFINED, is_undefined
from modelspine.validation import ValidationResult

__version__ = "0.1.0"

__all__ = [
    "__version__",
    # Core
    "Model",
    "MaskedModel",
    "Instance",
    "Mask",
    "UNDEFINED",
    "is_undefined",
    # Descriptors
    "Alias",
    "DescriptorKind",
    "FieldDescriptor",
    "FieldInformation",
    "resolve_descriptor",
    # Validation
    "ValidationResult",
    "validators",
    # Stores
    "Store",
    "ModelView",
    "MemoryStore",
    "NullStore",
    "create_store",
    # Errors
    "ModelSpineError",
    "ErrorCategory",
    "ErrorContext",
    "ValidationError",
    "StoreError",
    "QueryError",
    "UntranslatableFilterError",
    "IdentityError",
    "ConfigError",
    # Ambient
    "ModelSpineSettings",
    "get_settings",
    "configure_logging",
    "get_logger",
]
