"""Event model mixin: listeners, triggering and propagation between objects.

Usage:
    viewer = add_event_model(Viewer())
    panel = add_event_model(Panel())

    # Handle events triggered on the viewer
    viewer.register("model.loaded", on_model_loaded)

    # Re-trigger "model.loaded" on the panel whenever the viewer triggers it
    viewer.propagate_to("model.loaded", panel)

    viewer.trigger("model.loaded", model)

    # Retire the panel: every object propagating to it drops those edges
    panel.trigger(CLEANUP_EVENT)

An event that an object does not propagate anywhere is re-triggered on the
object's root node, so ``root.register("*", handler)`` observes everything
that is not routed explicitly.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable
from contextvars import ContextVar
import logging
from typing import Any

from ..config import EventsConfig
from ..exceptions import CycleError, MissingCapabilityError

LOGGER = logging.getLogger(__name__)

WILDCARD = "*"
CLEANUP_EVENT = "eventmodelcleanup"

_current_trigger: ContextVar[Any] = ContextVar("event_model_trigger", default=None)
_settings = EventsConfig()


def current_trigger() -> Any:
    """Return the object whose ``trigger`` started the active dispatch.

    Propagated and fallback deliveries keep the original triggering object.
    Returns ``None`` outside of any dispatch.
    """
    return _current_trigger.get()


def configure_events(events_config: dict[str, Any]) -> None:
    """Apply the ``events`` configuration section to dispatch behaviour."""
    global _settings
    _settings = EventsConfig.model_validate(events_config)


def _contains(items: Iterable[Any], obj: Any) -> bool:
    return any(item is obj for item in items)


def _unique(items: Iterable[Any]) -> list[Any]:
    seen: set[int] = set()
    unique: list[Any] = []
    for item in items:
        if id(item) not in seen:
            seen.add(id(item))
            unique.append(item)
    return unique


def _is_root(obj: Any) -> bool:
    return getattr(obj, "event_root", None) is obj


def _describe(obj: Any) -> str:
    return type(obj).__name__


def _default_root() -> Any:
    return root


def _invoke(callback: Callable[..., Any], event_name: str, args: tuple[Any, ...]) -> None:
    if _settings.handler_errors == "raise":
        callback(*args)
        return
    try:
        callback(*args)
    except Exception as exc:
        LOGGER.error(
            "event.handler.failed",
            exc_info=True,
            extra={
                "event": "event.handler.failed",
                "event_name": event_name,
                "handler": getattr(callback, "__qualname__", repr(callback)),
                "error_type": type(exc).__name__,
            },
        )


def _walk(context: Any, node: Any, event_name: str, args: tuple[Any, ...]) -> None:
    """Deliver ``event_name`` depth-first starting at ``node``.

    Uses an explicit stack so long propagation chains do not hit the
    recursion limit. Peers without the event model get a plain ``trigger``.
    """
    token = _current_trigger.set(context)
    try:
        pending = [node]
        while pending:
            current = pending.pop()
            step = getattr(current, "_event_step", None)
            if step is None:
                current.trigger(event_name, *args)
                continue
            pending.extend(reversed(step(event_name, args)))
    finally:
        _current_trigger.reset(token)


def _closure(direct_targets: list[Any], event_name: str | None) -> list[Any]:
    """Breadth-first transitive closure visiting every object once."""
    targets = list(direct_targets)
    seen = {id(target) for target in targets}
    index = 0
    while index < len(targets):
        node = targets[index]
        index += 1
        direct = getattr(node, "_direct_event_targets", None)
        # Peers without the event model only expose the transitive query.
        found = (
            direct(event_name)
            if direct is not None
            else node.all_propagation_targets(event_name)
        )
        for target in found:
            if id(target) not in seen:
                seen.add(id(target))
                targets.append(target)
    return targets


def add_event_model(obj: Any, root: Any = None) -> Any:
    """Attach the event model operations to ``obj`` and return it.

    Args:
        obj: Any object accepting instance attributes.
        root: Root node receiving events that ``obj`` does not propagate.
            ``None`` selects the module-wide default root. Passing ``obj``
            itself turns it into a root node.
    """
    listeners: dict[str, list[Callable[..., Any]]] = {}
    propagated_events: dict[str, list[Any]] = {}
    event_root = root if root is not None else _default_root()
    is_root = event_root is obj
    if not is_root and not callable(getattr(event_root, "all_propagation_targets", None)):
        raise MissingCapabilityError("Root node doesn't seem to have an event model.")

    def register(event_name: str, callback: Callable[..., Any]) -> None:
        """Add ``callback`` as a handler for ``event_name``.

        Handlers registered under ``"*"`` run for every event triggered on
        the object and receive the event name before the event arguments.
        """
        listeners.setdefault(event_name, []).append(callback)

    def unregister(event_name: str, callback: Callable[..., Any]) -> None:
        """Remove every registration of ``callback`` for ``event_name``.

        Callbacks are matched by equality so a fresh bound method removes the
        one registered earlier; propagation targets are matched by identity.
        """
        callbacks = listeners.get(event_name)
        if callbacks:
            listeners[event_name] = [cb for cb in callbacks if cb != callback]

    def step(event_name: str, args: tuple[Any, ...]) -> list[Any]:
        """Run this object's handlers and return the objects to deliver to next."""
        propagate_to = direct_propagation_targets(event_name)
        if _settings.trace_dispatch:
            LOGGER.debug(
                "event.dispatch",
                extra={
                    "event": "event.dispatch",
                    "event_name": event_name,
                    "node": _describe(obj),
                    "trigger": _describe(current_trigger()),
                    "targets": len(propagate_to),
                },
            )

        for callback in list(listeners.get(event_name, ())):
            _invoke(callback, event_name, args)

        wildcard_args = (event_name, *args)
        for callback in list(listeners.get(WILDCARD, ())):
            _invoke(callback, event_name, wildcard_args)

        if propagate_to or is_root:
            return propagate_to
        return [event_root]

    def trigger(event_name: str, *args: Any) -> None:
        """Run all handlers for ``event_name`` and propagate it.

        Named handlers run first, then wildcard handlers, then the event is
        re-triggered on every direct propagation target. Without any target
        for this event name the event goes to the root node instead.
        """
        _walk(obj, obj, event_name, args)

    def propagate_to(event_name: str, other: Any) -> None:
        """Re-trigger ``event_name`` on ``other`` whenever it fires here.

        ``"*"`` propagates every event. Triggering ``CLEANUP_EVENT`` on
        ``other`` removes all propagation from this object to it.

        Raises:
            MissingCapabilityError: ``other`` has no event model.
            CycleError: the edge would close a propagation cycle or involves
                a root node.
        """
        if not callable(getattr(other, "all_propagation_targets", None)):
            raise MissingCapabilityError(
                "Propagation target doesn't seem to have an event model."
            )

        if (
            is_root
            or other is obj
            or _is_root(other)
            or _contains(other.all_propagation_targets(), obj)
        ):
            raise CycleError(f"Propagating event {event_name!r} would cause a cycle.")

        if not _contains(direct_propagation_targets(), other):

            def cleanup(*_args: Any) -> None:
                if current_trigger() is other:
                    stop_propagating_to(other)

            other.register(CLEANUP_EVENT, cleanup)

        targets = propagated_events.setdefault(event_name, [])
        if _contains(targets, other):
            return
        targets.append(other)
        if _settings.trace_dispatch:
            LOGGER.debug(
                "event.propagation.added",
                extra={
                    "event": "event.propagation.added",
                    "event_name": event_name,
                    "source": _describe(obj),
                    "target": _describe(other),
                },
            )

    def propagate_from(event_name: str, other: Any) -> None:
        """Re-trigger ``event_name`` here whenever ``other`` triggers it."""
        source_propagate = getattr(other, "propagate_to", None)
        if not callable(source_propagate):
            raise MissingCapabilityError(
                "Propagation source doesn't seem to have an event model."
            )
        source_propagate(event_name, obj)

    def stop_propagating_to(other: Any) -> None:
        """Cancel all propagation from this object to ``other``."""
        removed = 0
        for event_name in list(propagated_events):
            targets = propagated_events[event_name]
            kept = [target for target in targets if target is not other]
            removed += len(targets) - len(kept)
            propagated_events[event_name] = kept

        if removed and _settings.trace_dispatch:
            LOGGER.debug(
                "event.propagation.removed",
                extra={
                    "event": "event.propagation.removed",
                    "source": _describe(obj),
                    "target": _describe(other),
                    "edges": removed,
                },
            )

    def direct_propagation_targets(event_name: str | None = None) -> list[Any]:
        """Return the objects this object directly propagates ``event_name`` to.

        Without ``event_name`` every direct target of every event is returned.
        """
        event_names = (
            list(propagated_events) if event_name is None else [event_name, WILDCARD]
        )
        return _unique(
            target for name in event_names for target in propagated_events.get(name, ())
        )

    def all_propagation_targets(event_name: str | None = None) -> list[Any]:
        """Return every object ``event_name`` reaches, recursively."""
        return _closure(direct_propagation_targets(event_name), event_name)

    obj.event_root = event_root
    obj.register = register
    obj.unregister = unregister
    obj.trigger = trigger
    obj.propagate_to = propagate_to
    obj.propagate_from = propagate_from
    obj.stop_propagating_to = stop_propagating_to
    obj.direct_propagation_targets = direct_propagation_targets
    obj.all_propagation_targets = all_propagation_targets
    obj._event_step = step
    obj._direct_event_targets = direct_propagation_targets
    return obj


class EventModel:
    """Mixin giving every instance its own event model.

    Cooperates with other base classes: positional and keyword arguments other
    than ``event_root`` are passed on to ``super().__init__``.
    """

    event_root: Any
    register: Callable[[str, Callable[..., Any]], None]
    unregister: Callable[[str, Callable[..., Any]], None]
    trigger: Callable[..., None]
    propagate_to: Callable[[str, Any], None]
    propagate_from: Callable[[str, Any], None]
    stop_propagating_to: Callable[[Any], None]
    direct_propagation_targets: Callable[..., list[Any]]
    all_propagation_targets: Callable[..., list[Any]]

    def __init__(self, *args: Any, event_root: Any = None, **kwargs: Any) -> None:
        super().__init__(*args, **kwargs)
        add_event_model(self, root=event_root)


class EventModelRoot(EventModel):
    """Root node: receives events that have no explicit propagation target."""

    def __init__(self) -> None:
        super().__init__(event_root=self)


# Global root instance
root = EventModelRoot()
