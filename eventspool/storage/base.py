"""Storage adapter protocol.

The queue keeps its buffer in memory and mirrors writes to an adapter on a
best-effort basis. Adapters store opaque ``{id, message}`` records and do not
need to understand envelopes.
"""

from typing import Protocol, runtime_checkable

from eventspool.core.entry import QueueEntry


@runtime_checkable
class StorageAdapter(Protocol):
    """Protocol defining the interface for queue storage adapters.

    Adapters are responsible for:
    - Connecting to their backend (initialize)
    - Persisting entries (insert)
    - Removing dequeued entries (delete)
    - Returning every persisted entry for hydration (fetch_all)

    Failures should be raised as StorageError subclasses; the queue logs and
    discards them, except for initialize, whose failure detaches the adapter.

    Closing the connection is left to the owner of the adapter; the bundled
    adapters provide an async ``close()`` for that.
    """

    async def initialize(self) -> None:
        """Open the backend connection.

        Raises:
            AdapterInitializationError: If the backend is unreachable.
        """
        ...

    async def insert(self, entry: QueueEntry) -> None:
        """Persist an entry."""
        ...

    async def delete(self, entry: QueueEntry) -> None:
        """Remove a persisted entry. Unknown ids are ignored."""
        ...

    async def fetch_all(self) -> list[QueueEntry]:
        """Return all persisted entries, oldest first where the backend allows."""
        ...
