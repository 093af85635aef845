"""In-process publish/subscribe bus for queue lifecycle notifications."""

import inspect
from collections import defaultdict
from collections.abc import Callable
from enum import Enum
from typing import Any

from eventspool.core.logging import get_logger

logger = get_logger("eventspool.bus")

Handler = Callable[[Any], Any]


class QueueEventName(str, Enum):
    """Notifications emitted by EventQueue."""

    EVENT_QUEUED = "EVENT_QUEUED"
    EVENT_DEQUEUED = "EVENT_DEQUEUED"


def _key(event_name: str) -> str:
    if isinstance(event_name, Enum):
        return str(event_name.value)
    return event_name


class NotificationBus:
    """Per-queue subscriber registry.

    Handlers run in subscription order. A handler may be a plain callable or
    return an awaitable, which is awaited before the next handler runs.
    Delivery is at most once per emit, in process, and nothing is kept for
    subscribers that register later.
    """

    def __init__(self) -> None:
        self._handlers: dict[str, list[Handler]] = defaultdict(list)

    def subscribe(self, event_name: str, handler: Handler) -> None:
        if not callable(handler):
            raise TypeError(f"handler must be callable, got {type(handler).__name__}")
        self._handlers[_key(event_name)].append(handler)

    def unsubscribe(self, event_name: str, handler: Handler) -> None:
        """Remove the most recent registration of handler, if any."""
        handlers = self._handlers.get(_key(event_name))
        if not handlers:
            return
        for i in range(len(handlers) - 1, -1, -1):
            if handlers[i] == handler:
                del handlers[i]
                break

    def listener_count(self, event_name: str) -> int:
        return len(self._handlers.get(_key(event_name), ()))

    async def emit(self, event_name: str, data: Any = None) -> int:
        """Deliver data to every current subscriber of event_name.

        Handler exceptions are logged and do not stop delivery to the
        remaining subscribers.

        Returns:
            Number of handlers that completed without raising.
        """
        name = _key(event_name)
        # Snapshot so handlers may (un)subscribe during delivery
        handlers = list(self._handlers.get(name, ()))
        delivered = 0

        for handler in handlers:
            try:
                result = handler(data)
                if inspect.isawaitable(result):
                    await result
                delivered += 1
            except Exception as e:
                logger.error(
                    f"Subscriber {getattr(handler, '__name__', handler)!r} raised: {e}",
                    extra={"event_name": name, "error": str(e)},
                )

        return delivered
