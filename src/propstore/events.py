"""Change notifications posted by the property store.

The store only depends on the :class:`EventBus` protocol. Applications pass
their own bus, or use :class:`InProcessEventBus`, a synchronous
publish/subscribe hub.

Example:
    >>> bus = InProcessEventBus()
    >>> seen = []
    >>> bus.subscribe(seen.append)
    >>> bus.publish(ConfigChanged(key="retries", item=None))
    >>> seen[0].key
    'retries'
"""

from __future__ import annotations

import threading
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import TYPE_CHECKING, Any, Protocol

from propstore.logging import get_logger

if TYPE_CHECKING:
    from propstore.configuration import ConfigurationItem

logger = get_logger(__name__)

EventHandler = Callable[["ConfigChanged"], None]


@dataclass(frozen=True, slots=True)
class ConfigChanged:
    """A stored value changed.

    Attributes:
        key: Storage key whose value changed.
        item: Registered descriptor for ``key``, or None when the key was
            written without one.
        occurred_at: When the change was applied (UTC).
    """

    key: str
    item: ConfigurationItem[Any] | None
    occurred_at: datetime = field(default_factory=lambda: datetime.now(UTC))


class EventBus(Protocol):
    """Destination for store notifications. Delivery is fire-and-forget."""

    def publish(self, event: ConfigChanged) -> None:
        """Deliver an event to interested parties."""
        ...


class InProcessEventBus:
    """Synchronous in-process event bus.

    Handlers run on the publishing thread in subscription order. A handler
    that raises is logged and skipped; the publisher never sees the error.
    """

    def __init__(self) -> None:
        self._handlers: list[EventHandler] = []
        self._lock = threading.Lock()

    def subscribe(self, handler: EventHandler) -> None:
        with self._lock:
            if handler not in self._handlers:
                self._handlers.append(handler)

    def unsubscribe(self, handler: EventHandler) -> None:
        with self._lock:
            if handler in self._handlers:
                self._handlers.remove(handler)

    @property
    def handlers(self) -> list[EventHandler]:
        with self._lock:
            return list(self._handlers)

    def publish(self, event: ConfigChanged) -> None:
        for handler in self.handlers:
            try:
                handler(event)
            except Exception:
                logger.exception(
                    "event_handler_failed",
                    event_type=type(event).__name__,
                    key=event.key,
                    handler=getattr(handler, "__qualname__", repr(handler)),
                )
