"""Caller-supplied callback tables: raw handlers, managed handlers, lifecycle events."""

from __future__ import annotations

from typing import Any, Callable

import structlog

from chanfeed.exceptions import ConfigurationError
from chanfeed.models import ManagedEntity, RawEvent

logger = structlog.get_logger(__name__)

Handler = Callable[[Any], None]

# Raw families whose handlers must be filtered to one symbol.
SYMBOL_REQUIRED: frozenset[RawEvent] = frozenset({RawEvent.ORDER_BOOK, RawEvent.PUBLIC_TRADES})


def invoke(handler: Callable[..., Any] | None, /, *args: Any, **context: Any) -> bool:
    """Call ``handler`` and contain any exception it raises.

    Returns True if a handler was present and completed.
    """
    if handler is None:
        return False
    try:
        handler(*args)
    except Exception:
        logger.exception("handler_error", **context)
        return False
    return True


class HandlerRegistry:
    """
    Two independent single-slot tables keyed by ``(kind, symbol)``.

    Registering again under the same key replaces the previous handler.
    """

    def __init__(self) -> None:
        self._raw: dict[tuple[RawEvent, str | None], Handler] = {}
        self._managed: dict[tuple[ManagedEntity, str | None], Handler] = {}

    def register_raw(self, event: RawEvent, handler: Handler, symbol: str | None = None) -> Handler:
        if event in SYMBOL_REQUIRED and not symbol:
            raise ConfigurationError("symbol")
        self._raw[(event, symbol or None)] = handler
        logger.debug("raw_handler_registered", event_kind=event.value, symbol=symbol)
        return handler

    def register_managed(
        self, entity: ManagedEntity, handler: Handler, symbol: str | None = None
    ) -> Handler:
        if entity is ManagedEntity.ORDER_BOOK and not symbol:
            raise ConfigurationError("symbol")
        self._managed[(entity, symbol or None)] = handler
        logger.debug("managed_handler_registered", entity=entity.value, symbol=symbol)
        return handler

    def raw(self, event: RawEvent, symbol: str | None = None) -> Handler | None:
        return self._raw.get((event, symbol))

    def managed(self, entity: ManagedEntity, symbol: str | None = None) -> Handler | None:
        return self._managed.get((entity, symbol))


class EventEmitter:
    """Observer lists per event name. ``on`` returns a disposer."""

    def __init__(self) -> None:
        self._listeners: dict[str, list[Callable[..., Any]]] = {}

    def on(self, event: str, listener: Callable[..., Any]) -> Callable[[], None]:
        self._listeners.setdefault(event, []).append(listener)

        def dispose() -> None:
            listeners = self._listeners.get(event, [])
            if listener in listeners:
                listeners.remove(listener)

        return dispose

    def emit(self, event: str, *args: Any) -> int:
        """Notify every listener; a failing listener does not stop the others."""
        called = 0
        for listener in list(self._listeners.get(event, [])):
            if invoke(listener, *args, listener_event=event):
                called += 1
        return called

    def listener_count(self, event: str) -> int:
        return len(self._listeners.get(event, []))
