"""Top-level package for event-model."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from .runtime import bootstrap
    from .config import load_config
    from .events import (
        CLEANUP_EVENT,
        WILDCARD,
        EventModel,
        EventModelRoot,
        add_event_model,
        configure_events,
        current_trigger,
        root,
    )
    from .exceptions import (
        ConfigValidationError,
        CycleError,
        EventModelError,
        MissingCapabilityError,
    )
    from .logging_utils import configure_logging

__all__ = [
    "CLEANUP_EVENT",
    "ConfigValidationError",
    "CycleError",
    "EventModel",
    "EventModelError",
    "EventModelRoot",
    "MissingCapabilityError",
    "WILDCARD",
    "add_event_model",
    "bootstrap",
    "configure_events",
    "configure_logging",
    "current_trigger",
    "load_config",
    "root",
]

_EVENT_EXPORTS = {
    "CLEANUP_EVENT",
    "WILDCARD",
    "EventModel",
    "EventModelRoot",
    "add_event_model",
    "configure_events",
    "current_trigger",
    "root",
}
_EXCEPTION_EXPORTS = {
    "ConfigValidationError",
    "CycleError",
    "EventModelError",
    "MissingCapabilityError",
}


def __getattr__(name: str) -> Any:
    """Lazily import symbols so config and logging helpers load only when used."""
    if name in _EVENT_EXPORTS:
        from . import events

        return getattr(events, name)
    if name in _EXCEPTION_EXPORTS:
        from . import exceptions

        return getattr(exceptions, name)
    if name == "bootstrap":
        from .runtime import bootstrap

        return bootstrap
    if name == "load_config":
        from .config import load_config

        return load_config
    if name == "configure_logging":
        from .logging_utils import configure_logging

        return configure_logging
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
