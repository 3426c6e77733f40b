"""
Structured logging for modelspine.

Library modules log snake_case events with keyword context through
structlog::

    logger = get_logger(__name__)
    logger.info("instance_updated", filter={"_id": "u1"})

Applications call :func:`configure_logging` once at startup. Level and
format default to the ``log_level`` / ``log_format`` settings.

Manifesto:
    Events emitted by the model layer carry the library's own values: masks,
    the ``UNDEFINED`` sentinel, typed errors. Renderers should never see
    those raw. :func:`render_modelspine_values` turns them into plain data
    before rendering, so JSON output stays machine-readable and every logged
    error carries its category.

Architecture:
    ::

        processor chain (build_processors)
        ┌──────────────────────────────────────────────────────────────┐
        │ TimeStamper(iso)              (add_timestamp=True)           │
        │ merge_contextvars             LogContext / bind_context       │
        │ add_log_level                                                 │
        │ StackInfoRenderer, set_exc_info                               │
        │ ServiceMetadata(service)      service.name                    │
        │ render_modelspine_values      Mask → list, UNDEFINED → None,  │
        │                               error= → error.* fields         │
        │ ecs_field_names               @timestamp, log.level (JSON)    │
        │ JSONRenderer | ConsoleRenderer                                │
        └──────────────────────────────────────────────────────────────┘

Examples:
    >>> configure_logging(level="DEBUG", json_format=True, service="billing")
    >>> with LogContext(model="invoices", operation="save"):
    ...     get_logger(__name__).warning("instance_identity_unresolvable", id_field="id")
    {"model": "invoices", "operation": "save", "id_field": "id", ...}

Tags:
    logging, structlog, observability, modelspine

Doc-Types:
    - API Reference
"""

from __future__ import annotations

import logging
import sys
from typing import Any

import structlog
from structlog.types import EventDict, Processor, WrappedLogger

from modelspine.errors import ModelSpineError, ValidationError, categorize_error
from modelspine.mask import Mask
from modelspine.undefined import UNDEFINED


class ServiceMetadata:
    """Processor stamping every event with ``service.name``."""

    def __init__(self, service: str) -> None:
        self.service = service

    def __call__(self, logger: WrappedLogger, method_name: str, event_dict: EventDict) -> EventDict:
        event_dict.setdefault("service.name", self.service)
        return event_dict


def _plain(value: Any) -> Any:
    if isinstance(value, Mask):
        return "*" if value.is_universal else list(value)
    if value is UNDEFINED:
        return None
    return value


def render_modelspine_values(
    logger: WrappedLogger, method_name: str, event_dict: EventDict
) -> EventDict:
    """Flatten masks, ``UNDEFINED`` and an ``error=`` exception into plain data."""
    error = event_dict.pop("error", None)
    for key, value in event_dict.items():
        event_dict[key] = _plain(value)

    if isinstance(error, BaseException):
        event_dict["error.type"] = type(error).__name__
        event_dict["error.category"] = categorize_error(error).value
        if isinstance(error, ModelSpineError):
            event_dict["error.message"] = error.message
            context = error.context.to_dict()
            if context:
                event_dict["error.context"] = context
            if isinstance(error, ValidationError):
                event_dict["error.fields"] = error.result.to_dict()
        else:
            event_dict["error.message"] = str(error)
    elif error is not None:
        event_dict["error"] = error
    return event_dict


def ecs_field_names(logger: WrappedLogger, method_name: str, event_dict: EventDict) -> EventDict:
    """Rename ``timestamp``/``level`` to their ECS names."""
    if "timestamp" in event_dict:
        event_dict["@timestamp"] = event_dict.pop("timestamp")
    if "level" in event_dict:
        event_dict["log.level"] = event_dict.pop("level")
    return event_dict


def build_processors(
    json_format: bool,
    service: str = "modelspine",
    add_timestamp: bool = True,
) -> list[Processor]:
    """Processor chain used by :func:`configure_logging`, renderer included."""
    processors: list[Processor] = []
    if add_timestamp:
        processors.append(structlog.processors.TimeStamper(fmt="iso"))
    processors += [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.processors.StackInfoRenderer(),
        structlog.dev.set_exc_info,
        ServiceMetadata(service),
        render_modelspine_values,
    ]
    if json_format:
        processors += [ecs_field_names, structlog.processors.JSONRenderer()]
    else:
        processors.append(structlog.dev.ConsoleRenderer(colors=sys.stdout.isatty()))
    return processors


def configure_logging(
    level: str | None = None,
    json_format: bool | None = None,
    service: str = "modelspine",
    add_timestamp: bool = True,
) -> None:
    """Configure structlog for modelspine events.

    Args:
        level: DEBUG, INFO, WARNING or ERROR; defaults to ``log_level``
        json_format: JSON or console output; ``None`` reads ``log_format``
            (``json``/``console``, anything else means JSON when stdout is
            not a tty)
        service: Value of ``service.name`` on every event
        add_timestamp: Include an ISO timestamp
    """
    from modelspine.settings import get_settings

    settings = get_settings()
    level = (level or settings.log_level).upper()
    if json_format is None:
        fmt = settings.log_format.lower()
        json_format = fmt == "json" if fmt in ("json", "console") else not sys.stdout.isatty()

    structlog.configure(
        processors=build_processors(json_format, service, add_timestamp),
        wrapper_class=structlog.make_filtering_bound_logger(getattr(logging, level)),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=False,
    )


def get_logger(name: str | None = None) -> Any:
    """Get a structured logger (usually ``get_logger(__name__)``)."""
    return structlog.get_logger(name)


def bind_context(**kwargs: Any) -> None:
    structlog.contextvars.bind_contextvars(**kwargs)


def unbind_context(*keys: str) -> None:
    structlog.contextvars.unbind_contextvars(*keys)


def clear_context() -> None:
    structlog.contextvars.clear_contextvars()


class LogContext:
    """Scope context variables to a block.

    Values bound by an enclosing scope are restored on exit, so a nested
    ``LogContext(operation="delete")`` inside ``operation="save"`` does not
    leave ``operation`` unset afterwards.
    """

    def __init__(self, **kwargs: Any) -> None:
        self._context = kwargs
        self._scope: Any = None

    def __enter__(self) -> LogContext:
        self._scope = structlog.contextvars.bound_contextvars(**self._context)
        self._scope.__enter__()
        return self

    def __exit__(self, *args: Any) -> None:
        self._scope.__exit__(*args)
        self._scope = None


__all__ = [
    "configure_logging",
    "build_processors",
    "render_modelspine_values",
    "ecs_field_names",
    "ServiceMetadata",
    "get_logger",
    "bind_context",
    "unbind_context",
    "clear_context",
    "LogContext",
]
