"""Ordered listener collections for keepalive events."""

from collections.abc import Callable
from enum import StrEnum
from typing import Any

from keepwarm.logging import get_logger

LOG = get_logger(__name__)

Listener = Callable[[Any], None]


class EventKind(StrEnum):
    """Events a keepalive scheduler emits."""

    PING = "ping"
    ERROR = "error"
    HEALTH_UPDATE = "health_update"


class Subscription:
    """Handle for one listener registration.

    Disposing removes exactly this registration. Registering the same
    callable twice yields two independent subscriptions.
    """

    def __init__(self, registry: "ListenerRegistry", kind: EventKind, entry: list[Listener]) -> None:
        self._registry = registry
        self._kind = kind
        self._entry = entry

    @property
    def kind(self) -> EventKind:
        return self._kind

    @property
    def active(self) -> bool:
        """Whether the listener is still registered."""
        return self._registry._contains(self._kind, self._entry)

    def dispose(self) -> None:
        """Remove the listener. Safe to call more than once."""
        self._registry._remove(self._kind, self._entry)

    def __enter__(self) -> "Subscription":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.dispose()


class ListenerRegistry:
    """Three ordered, non-deduplicated listener collections keyed by event kind."""

    def __init__(self) -> None:
        # Each registration is wrapped in its own list so identity survives
        # duplicate registrations of the same callable.
        self._listeners: dict[EventKind, list[list[Listener]]] = {kind: [] for kind in EventKind}

    def add(self, kind: EventKind, callback: Listener) -> Subscription:
        """Append a listener and return its subscription handle."""
        entry = [callback]
        self._listeners[kind].append(entry)
        return Subscription(self, kind, entry)

    def count(self, kind: EventKind) -> int:
        return len(self._listeners[kind])

    def emit(self, kind: EventKind, value: Any) -> None:
        """Invoke every listener of ``kind`` in registration order.

        A listener that raises is logged and skipped; later listeners still run.
        """
        # Snapshot so a listener disposing itself does not skip its neighbour
        for entry in list(self._listeners[kind]):
            callback = entry[0]
            try:
                callback(value)
            except Exception as exc:
                LOG.exception(
                    "keepalive_listener_failed",
                    event_kind=kind.value,
                    listener=getattr(callback, "__qualname__", repr(callback)),
                    error=str(exc),
                )

    def _contains(self, kind: EventKind, entry: list[Listener]) -> bool:
        return any(e is entry for e in self._listeners[kind])

    def _remove(self, kind: EventKind, entry: list[Listener]) -> None:
        self._listeners[kind] = [e for e in self._listeners[kind] if e is not entry]
