"""Event model: per-object listeners with cycle-free propagation between objects."""

from .model import (
    CLEANUP_EVENT,
    WILDCARD,
    EventModel,
    EventModelRoot,
    add_event_model,
    configure_events,
    current_trigger,
    root,
)

__all__ = [
    "CLEANUP_EVENT",
    "WILDCARD",
    "EventModel",
    "EventModelRoot",
    "add_event_model",
    "configure_events",
    "current_trigger",
    "root",
]
