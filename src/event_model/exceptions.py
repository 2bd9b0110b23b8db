"""Domain exception hierarchy for the event model."""

from __future__ import annotations


class EventModelError(RuntimeError):
    """Base class for all event model errors."""


class MissingCapabilityError(EventModelError):
    """Raised when a propagation peer was never given the event model."""


class CycleError(EventModelError):
    """Raised when a propagation edge would close a cycle or touch a root node."""


class ConfigValidationError(EventModelError):
    """Raised when configuration cannot be validated safely."""
