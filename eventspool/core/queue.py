"""EventQueue: in-memory FIFO with best-effort storage mirroring.

The in-memory buffer is authoritative for the running process. Every
enqueue and dequeue mutates the buffer; the storage adapter, when one is
attached, is updated on a best-effort basis and its failures are logged
and discarded.

Construction is two-phase:

    queue = EventQueue(backend_kind="redis", host="localhost", port=6379, path="jobs")
    await queue.open()

or in one call with ``await open_queue(...)``.
"""

import asyncio
from collections import deque
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import Any

from eventspool.core.bus import Handler, NotificationBus, QueueEventName
from eventspool.core.config import QueueConfig
from eventspool.core.entry import Envelope, QueueEntry
from eventspool.core.errors import (
    InvalidAdapterError,
    MissingConfigurationError,
    StorageError,
    UnknownBackendError,
)
from eventspool.core.logging import configure_queue_logger
from eventspool.storage import AdapterFactory, get_adapter_factory
from eventspool.storage.base import StorageAdapter


@dataclass(frozen=True)
class AdapterResult:
    """Outcome of a best-effort storage call.

    Attributes:
        operation: Adapter method that was called.
        ok: True if the call completed.
        value: Return value of the call when ok.
        error: The raised exception when not ok.
    """

    operation: str
    ok: bool
    value: Any = None
    error: Exception | None = None


@dataclass
class QueueStats:
    """Counters for one EventQueue."""

    enqueued: int = 0
    dequeued: int = 0
    hydrated: int = 0
    storage_errors: int = 0


class EventQueue:
    """Ordered FIFO message buffer with optional persistence and notifications."""

    def __init__(
        self,
        config: QueueConfig | None = None,
        *,
        adapter_factory: AdapterFactory | None = None,
        **overrides: Any,
    ) -> None:
        """Validate configuration and resolve the adapter factory.

        Args:
            config: Queue configuration. Keyword overrides are applied on top,
                or used alone when config is None.
            adapter_factory: Callable building a storage adapter from the
                config. Looked up from the backend-kind registry if None.
            **overrides: QueueConfig fields.

        Raises:
            MissingConfigurationError: If a persistent backend lacks host,
                port or path.
            UnknownBackendError: If no adapter is known for the backend kind.
        """
        if config is None:
            config = QueueConfig(**overrides)
        elif overrides:
            config = QueueConfig(**{**config.model_dump(), **overrides})

        self._config = config
        self._log = configure_queue_logger()
        self._buffer: deque[QueueEntry] = deque()
        self._bus = NotificationBus()
        self._storage: StorageAdapter | None = None
        self._stats = QueueStats()
        self._opened = False
        self._open_lock = asyncio.Lock()
        self._factory: AdapterFactory | None = None

        if config.is_memory:
            self._log.warning(
                f"Queue will not persist, backend_kind[{config.backend_kind}]",
                extra={"backend_kind": config.backend_kind},
            )
            if adapter_factory is not None:
                self._log.warning(
                    "adapter_factory ignored for a non-persistent queue",
                    extra={"backend_kind": config.backend_kind},
                )
            return

        missing = config.missing_fields()
        if missing:
            raise MissingConfigurationError(missing[0], backend_kind=config.backend_kind)

        factory = adapter_factory or get_adapter_factory(config.backend_kind)
        if factory is None:
            raise UnknownBackendError(config.backend_kind)
        self._factory = factory

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    async def open(self) -> "EventQueue":
        """Build and initialize the storage adapter.

        Never raises for adapter problems: an invalid adapter or a failed
        initialize leaves the queue usable in memory-only mode.

        Returns:
            This queue, ready for use.
        """
        async with self._open_lock:
            # Concurrent callers wait here until the first attach attempt ends
            if not self._opened:
                await self._attach()
                self._opened = True
        return self

    async def _attach(self) -> None:
        if self._factory is None:
            return

        try:
            adapter = self._factory(self._config)
        except Exception as e:
            self._stats.storage_errors += 1
            self._log.error(
                f"Storage adapter factory failed: {e}",
                extra={"backend_kind": self._config.backend_kind, "error": str(e)},
            )
            return

        if not isinstance(adapter, StorageAdapter):
            error = InvalidAdapterError(
                f"Invalid storage adapter provided: {type(adapter).__name__}"
            )
            self._log.warning(
                str(error),
                extra={"backend_kind": self._config.backend_kind},
            )
            return

        result = await self._call_storage("initialize", adapter.initialize)
        if result.ok:
            self._storage = adapter
            self._log.info(
                f"Storage adapter {type(adapter).__name__} attached",
                extra={"backend_kind": self._config.backend_kind},
            )
        else:
            self._log.warning(
                "Continuing without persistence after failed initialize",
                extra={"backend_kind": self._config.backend_kind},
            )

    async def __aenter__(self) -> "EventQueue":
        return await self.open()

    async def __aexit__(self, *exc_info: object) -> None:
        # The adapter connection is owned by the caller (see `storage`)
        return None

    # ------------------------------------------------------------------
    # Properties
    # ------------------------------------------------------------------

    @property
    def config(self) -> QueueConfig:
        return self._config

    @property
    def events(self) -> tuple[str, ...]:
        return self._config.events

    @property
    def storage(self) -> StorageAdapter | None:
        """The attached storage adapter, or None in memory-only mode."""
        return self._storage

    @property
    def persistent(self) -> bool:
        return self._storage is not None

    @property
    def length(self) -> int:
        return len(self._buffer)

    def __len__(self) -> int:
        return len(self._buffer)

    @property
    def stats(self) -> QueueStats:
        return self.get_stats()

    def get_stats(self) -> QueueStats:
        """Return a copy of current statistics."""
        return QueueStats(
            enqueued=self._stats.enqueued,
            dequeued=self._stats.dequeued,
            hydrated=self._stats.hydrated,
            storage_errors=self._stats.storage_errors,
        )

    # ------------------------------------------------------------------
    # Storage
    # ------------------------------------------------------------------

    async def _call_storage(
        self,
        operation: str,
        call: Callable[..., Awaitable[Any]],
        *args: Any,
        entry: QueueEntry | None = None,
    ) -> AdapterResult:
        """Run one adapter call and capture its outcome instead of raising."""
        try:
            value = await call(*args)
        except Exception as e:
            self._stats.storage_errors += 1
            extra: dict[str, Any] = {
                "operation": operation,
                "backend_kind": self._config.backend_kind,
                "error": str(e),
            }
            if entry is not None:
                extra["entry_id"] = entry.id
            if not isinstance(e, StorageError):
                extra["error_type"] = type(e).__name__
            self._log.error(f"Storage {operation} failed: {e}", extra=extra)
            return AdapterResult(operation=operation, ok=False, error=e)
        return AdapterResult(operation=operation, ok=True, value=value)

    async def hydrate(self) -> None:
        """Append every persisted entry to the buffer.

        Entries are not deduplicated: hydrating twice buffers them twice.
        """
        if self._storage is None:
            return

        result = await self._call_storage("fetch_all", self._storage.fetch_all)
        if not result.ok:
            return  # logged by _call_storage

        entries = list(result.value or [])
        self._buffer.extend(entries)
        self._stats.hydrated += len(entries)
        self._log.info(
            f"Hydrated {len(entries)} entries",
            extra={"operation": "fetch_all", "backend_kind": self._config.backend_kind},
        )

    # ------------------------------------------------------------------
    # Raw entries
    # ------------------------------------------------------------------

    async def enqueue(self, message: str) -> bool:
        """Append a message as a new entry.

        Returns:
            Always True; a failed storage insert is logged only.
        """
        entry = QueueEntry(message=message)

        if self._storage is not None:
            await self._call_storage("insert", self._storage.insert, entry, entry=entry)

        self._buffer.append(entry)
        self._stats.enqueued += 1
        self._log.debug("Enqueued entry", extra={"entry_id": entry.id})
        return True

    async def dequeue(self) -> QueueEntry | None:
        """Remove and return the oldest entry, or None when empty."""
        if not self._buffer:
            return None

        entry = self._buffer.popleft()
        self._stats.dequeued += 1

        if self._storage is not None:
            await self._call_storage("delete", self._storage.delete, entry, entry=entry)

        self._log.debug("Dequeued entry", extra={"entry_id": entry.id})
        return entry

    # ------------------------------------------------------------------
    # Notifications
    # ------------------------------------------------------------------

    def on(self, event_name: str, handler: Handler) -> None:
        self._bus.subscribe(event_name, handler)

    def off(self, event_name: str, handler: Handler) -> None:
        self._bus.unsubscribe(event_name, handler)

    @property
    def bus(self) -> NotificationBus:
        return self._bus

    # ------------------------------------------------------------------
    # Envelopes
    # ------------------------------------------------------------------

    async def enqueue_event(self, method: str, payload: Any = None) -> None:
        """Enqueue a ``{method, payload}`` envelope and emit EVENT_QUEUED.

        Raises:
            MalformedEnvelopeError: If method is empty or payload is not
                JSON-serializable. Nothing is enqueued in that case.
        """
        text = Envelope.build(method, payload).dumps()
        await self.enqueue(text)
        await self._bus.emit(QueueEventName.EVENT_QUEUED, text)

    async def dequeue_event(self) -> Envelope | None:
        """Dequeue the next envelope and emit EVENT_DEQUEUED.

        Returns:
            The parsed Envelope, or None when the queue is empty (nothing is
            emitted then).

        Raises:
            MalformedEnvelopeError: If the next entry does not hold an
                envelope. The entry has been removed and is on ``error.entry``.
        """
        entry = await self.dequeue()
        if entry is None:
            return None

        envelope = Envelope.loads(entry.message, entry=entry)
        await self._bus.emit(QueueEventName.EVENT_DEQUEUED, envelope)
        return envelope


async def open_queue(
    config: QueueConfig | None = None,
    *,
    adapter_factory: AdapterFactory | None = None,
    **overrides: Any,
) -> EventQueue:
    """Build an EventQueue and open it.

    Configuration errors raise from the EventQueue constructor, before any
    adapter is created.
    """
    queue = EventQueue(config, adapter_factory=adapter_factory, **overrides)
    return await queue.open()
