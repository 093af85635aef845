"""Process-local storage adapter."""

from eventspool.core.config import QueueConfig
from eventspool.core.entry import QueueEntry

# Named stores shared by every adapter built from the same (host, port, path)
_SHARED_STORES: dict[tuple[str | None, int | None, str | None], dict[str, QueueEntry]] = {}


class InMemoryStorage:
    """Dict-backed storage adapter.

    Entries live in a plain dict keyed by entry id, which keeps insertion
    order. Adapters built through ``from_config`` with the same host, port
    and path share one dict, so a queue re-created in the same process can
    hydrate what an earlier queue persisted. Nothing survives process
    termination.

    Args:
        store: Dict to use as backing store. A private one is created if None.
    """

    def __init__(self, store: dict[str, QueueEntry] | None = None) -> None:
        self._entries: dict[str, QueueEntry] = {} if store is None else store
        self._initialized = False

    @classmethod
    def from_config(cls, config: QueueConfig) -> "InMemoryStorage":
        """Adapter factory: return an adapter over the store named by config."""
        key = (config.host, config.port, config.path)
        return cls(_SHARED_STORES.setdefault(key, {}))

    @staticmethod
    def reset_shared() -> None:
        """Drop every named store (for testing)."""
        _SHARED_STORES.clear()

    @property
    def initialized(self) -> bool:
        return self._initialized

    async def initialize(self) -> None:
        self._initialized = True

    async def insert(self, entry: QueueEntry) -> None:
        self._entries[entry.id] = entry

    async def delete(self, entry: QueueEntry) -> None:
        self._entries.pop(entry.id, None)

    async def fetch_all(self) -> list[QueueEntry]:
        return list(self._entries.values())

    async def close(self) -> None:
        self._initialized = False

    def __len__(self) -> int:
        return len(self._entries)
