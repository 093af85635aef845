"""Core components for the eventspool queue.

Types:
    QueueEntry: Immutable ``{id, message}`` unit stored in the buffer.
    Envelope: ``{method, payload}`` message serialized into a QueueEntry.
    QueueConfig: Frozen queue configuration.
    EventQueue: FIFO buffer with best-effort storage mirroring.
    NotificationBus: Per-queue publish/subscribe registry.

Errors:
    EventQueueError: Base class.
    MissingConfigurationError / UnknownBackendError: Raised at construction.
    InvalidAdapterError: Logged when an adapter fails the protocol check.
    StorageError and subclasses: Raised by adapters, logged by the queue.
    MalformedEnvelopeError: Invalid envelope text or payload.
"""

from eventspool.core.bus import NotificationBus, QueueEventName
from eventspool.core.config import BackendKind, QueueConfig, QueueSettings
from eventspool.core.entry import Envelope, QueueEntry
from eventspool.core.errors import (
    AdapterDeleteError,
    AdapterFetchError,
    AdapterInitializationError,
    AdapterInsertError,
    ConfigurationError,
    EventQueueError,
    InvalidAdapterError,
    MalformedEnvelopeError,
    MissingConfigurationError,
    StorageError,
    UnknownBackendError,
)
from eventspool.core.logging import set_log_level
from eventspool.core.queue import AdapterResult, EventQueue, QueueStats, open_queue

__all__ = [
    "AdapterDeleteError",
    "AdapterFetchError",
    "AdapterInitializationError",
    "AdapterInsertError",
    "AdapterResult",
    "BackendKind",
    "ConfigurationError",
    "Envelope",
    "EventQueue",
    "EventQueueError",
    "InvalidAdapterError",
    "MalformedEnvelopeError",
    "MissingConfigurationError",
    "NotificationBus",
    "QueueConfig",
    "QueueSettings",
    "QueueEntry",
    "QueueEventName",
    "QueueStats",
    "StorageError",
    "UnknownBackendError",
    "open_queue",
    "set_log_level",
]
