"""eventspool - Small durable event queue for asyncio."""

from eventspool.core import (
    AdapterDeleteError,
    AdapterFetchError,
    AdapterInitializationError,
    AdapterInsertError,
    AdapterResult,
    BackendKind,
    ConfigurationError,
    Envelope,
    EventQueue,
    EventQueueError,
    InvalidAdapterError,
    MalformedEnvelopeError,
    MissingConfigurationError,
    NotificationBus,
    QueueConfig,
    QueueEntry,
    QueueEventName,
    QueueSettings,
    QueueStats,
    StorageError,
    UnknownBackendError,
    open_queue,
    set_log_level,
)
from eventspool.storage import (
    InMemoryStorage,
    RedisStorage,
    StorageAdapter,
    get_adapter_factory,
    register_adapter,
    unregister_adapter,
)

__version__ = "0.1.0"

__all__ = [
    # Core
    "EventQueue",
    "open_queue",
    "QueueConfig",
    "QueueSettings",
    "BackendKind",
    "QueueEntry",
    "Envelope",
    "QueueStats",
    "AdapterResult",
    "set_log_level",
    # Notifications
    "NotificationBus",
    "QueueEventName",
    # Storage
    "StorageAdapter",
    "InMemoryStorage",
    "RedisStorage",
    "register_adapter",
    "unregister_adapter",
    "get_adapter_factory",
    # Errors
    "EventQueueError",
    "ConfigurationError",
    "MissingConfigurationError",
    "UnknownBackendError",
    "InvalidAdapterError",
    "StorageError",
    "AdapterInitializationError",
    "AdapterInsertError",
    "AdapterDeleteError",
    "AdapterFetchError",
    "MalformedEnvelopeError",
    # Meta
    "__version__",
]
