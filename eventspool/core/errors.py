"""Error taxonomy for eventspool.

Configuration errors are raised synchronously when a queue is built. Storage
errors are raised by adapters and swallowed (after logging) by the queue.
"""

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from eventspool.core.entry import QueueEntry


class EventQueueError(Exception):
    """Base class for all eventspool errors."""


class ConfigurationError(EventQueueError, ValueError):
    """Raised when a queue configuration cannot be used."""


class MissingConfigurationError(ConfigurationError):
    """Raised when a persistent backend is requested without a connection field.

    Attributes:
        field: Name of the missing configuration field.
    """

    def __init__(self, field: str, backend_kind: str | None = None):
        self.field = field
        self.backend_kind = backend_kind
        message = f"Missing {{{field}}} in queue configuration"
        if backend_kind:
            message += f" (backend_kind={backend_kind!r})"
        super().__init__(message)


class UnknownBackendError(ConfigurationError):
    """Raised when no storage adapter is registered for a backend kind."""

    def __init__(self, kind: str):
        self.kind = kind
        super().__init__(f"No storage adapter registered for backend kind {kind!r}")


class InvalidAdapterError(EventQueueError, TypeError):
    """An adapter factory produced something that is not a StorageAdapter."""


class StorageError(EventQueueError):
    """Raised by storage adapters when a backend call fails.

    Attributes:
        operation: Adapter operation that failed.
        original: The underlying exception, if any.
    """

    operation = "storage"

    def __init__(self, message: str, original: Exception | None = None):
        self.original = original
        super().__init__(message)

    def __str__(self) -> str:
        base = super().__str__()
        if self.original is not None:
            return f"{base} ({type(self.original).__name__}: {self.original})"
        return base


class AdapterInitializationError(StorageError):
    operation = "initialize"


class AdapterInsertError(StorageError):
    operation = "insert"


class AdapterDeleteError(StorageError):
    operation = "delete"


class AdapterFetchError(StorageError):
    operation = "fetch_all"


class MalformedEnvelopeError(EventQueueError, ValueError):
    """Raised when text cannot be turned into (or built from) an Envelope.

    Attributes:
        entry: The queue entry whose message failed to parse, if any. It has
            already been removed from the queue when this is raised.
    """

    def __init__(self, message: str, entry: "QueueEntry | None" = None):
        self.entry = entry
        super().__init__(message)
