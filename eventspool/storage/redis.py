"""Redis storage adapter.

Entries are kept in two keys under a namespace taken from the queue's
``path``:

- ``{namespace}:entries``: hash of entry id -> message
- ``{namespace}:order``: list of entry ids in insertion order

Insert and delete update both keys in one MULTI/EXEC pipeline.
"""

import asyncio
import time
from dataclasses import dataclass
from typing import Any
from urllib.parse import urlparse, urlunparse

from eventspool.core.config import QueueConfig
from eventspool.core.entry import QueueEntry
from eventspool.core.errors import (
    AdapterDeleteError,
    AdapterFetchError,
    AdapterInitializationError,
    AdapterInsertError,
)
from eventspool.core.logging import get_logger

logger = get_logger("eventspool.redis")

DEFAULT_NAMESPACE = "eventspool:queue"


def _sanitize_url(url: str) -> str:
    """Mask password in Redis URL for logging."""
    try:
        parsed = urlparse(url)
        if parsed.password:
            netloc = f"{parsed.username or ''}:****@{parsed.hostname}"
            if parsed.port:
                netloc += f":{parsed.port}"
            return urlunparse(
                (parsed.scheme, netloc, parsed.path, parsed.params, parsed.query, parsed.fragment)
            )
        return f"{parsed.hostname}:{parsed.port or 6379}"
    except Exception:
        return "<url>"


@dataclass
class StorageHealth:
    """Health check result."""

    healthy: bool
    latency_ms: float
    details: dict[str, Any]


@dataclass
class RedisMetrics:
    """Redis adapter metrics."""

    entries_inserted: int = 0
    entries_deleted: int = 0
    entries_fetched: int = 0
    errors: int = 0


class RedisStorage:
    """Redis-backed storage adapter."""

    def __init__(
        self,
        redis_url: str,
        namespace: str = DEFAULT_NAMESPACE,
        pool_size: int = 10,
    ) -> None:
        """Initialize the adapter. No connection is made until initialize().

        Args:
            redis_url: Redis connection URL.
            namespace: Key prefix for the entries hash and order list.
            pool_size: Connection pool size.
        """
        self._url = redis_url
        self._url_safe = _sanitize_url(redis_url)
        self.namespace = namespace.strip("/") or DEFAULT_NAMESPACE
        self.entries_key = f"{self.namespace}:entries"
        self.order_key = f"{self.namespace}:order"
        self._pool_size = pool_size

        self._redis: Any = None
        self._metrics = RedisMetrics()
        self._conn_lock = asyncio.Lock()

    @classmethod
    def from_config(cls, config: QueueConfig) -> "RedisStorage":
        """Adapter factory: ``redis://{host}:{port}`` with ``path`` as namespace."""
        return cls(
            redis_url=f"redis://{config.host}:{config.port}",
            namespace=config.path or DEFAULT_NAMESPACE,
        )

    @property
    def redis_url(self) -> str:
        return self._url

    @property
    def metrics(self) -> RedisMetrics:
        return self._metrics

    async def _get_client(self) -> Any:
        """Return the connected client, creating the pool on first use."""
        try:
            from redis.asyncio import ConnectionPool, Redis
        except ImportError as e:
            raise ImportError("Install redis: pip install eventspool[redis]") from e

        if self._redis is not None:
            return self._redis

        async with self._conn_lock:
            # Another coroutine may have connected while we waited
            if self._redis is not None:
                return self._redis

            pool = ConnectionPool.from_url(
                self._url, max_connections=self._pool_size, decode_responses=True
            )
            new_redis = Redis(connection_pool=pool)

            # Verify new connection works before committing
            try:
                await new_redis.ping()
            except Exception:
                try:
                    await new_redis.aclose()
                except Exception as close_err:
                    logger.debug(f"Error closing failed connection: {close_err}")
                raise

            self._redis = new_redis
            logger.info(f"Connected to Redis at {self._url_safe}")
            return self._redis

    async def initialize(self) -> None:
        try:
            await self._get_client()
        except ImportError:
            raise
        except Exception as e:
            self._metrics.errors += 1
            raise AdapterInitializationError(
                f"Could not connect to Redis at {self._url_safe}", original=e
            ) from e

    async def insert(self, entry: QueueEntry) -> None:
        try:
            redis = await self._get_client()
            async with redis.pipeline(transaction=True) as pipe:
                pipe.hset(self.entries_key, entry.id, entry.message)
                pipe.rpush(self.order_key, entry.id)
                await pipe.execute()
        except Exception as e:
            self._metrics.errors += 1
            raise AdapterInsertError(f"Failed to insert entry {entry.id}", original=e) from e

        self._metrics.entries_inserted += 1
        logger.debug(f"Inserted {entry.id} into {self.entries_key}")

    async def delete(self, entry: QueueEntry) -> None:
        try:
            redis = await self._get_client()
            async with redis.pipeline(transaction=True) as pipe:
                pipe.hdel(self.entries_key, entry.id)
                pipe.lrem(self.order_key, 1, entry.id)
                await pipe.execute()
        except Exception as e:
            self._metrics.errors += 1
            raise AdapterDeleteError(f"Failed to delete entry {entry.id}", original=e) from e

        self._metrics.entries_deleted += 1
        logger.debug(f"Deleted {entry.id} from {self.entries_key}")

    async def fetch_all(self) -> list[QueueEntry]:
        try:
            redis = await self._get_client()
            ids = await redis.lrange(self.order_key, 0, -1)
            messages = await redis.hmget(self.entries_key, ids) if ids else []
        except Exception as e:
            self._metrics.errors += 1
            raise AdapterFetchError(f"Failed to fetch entries from {self.entries_key}", original=e) from e

        entries = []
        for entry_id, message in zip(ids, messages):
            if message is None:
                logger.warning(f"Order list references missing entry {entry_id}, skipping")
                continue
            entries.append(QueueEntry(id=entry_id, message=message))

        self._metrics.entries_fetched += len(entries)
        return entries

    async def health(self) -> StorageHealth:
        """Check adapter health."""
        start = time.monotonic()
        try:
            redis = await self._get_client()
            await redis.ping()
            length = await redis.llen(self.order_key)
            latency = (time.monotonic() - start) * 1000

            return StorageHealth(
                healthy=True,
                latency_ms=latency,
                details={
                    "namespace": self.namespace,
                    "length": length,
                    "metrics": {
                        "inserted": self._metrics.entries_inserted,
                        "deleted": self._metrics.entries_deleted,
                        "fetched": self._metrics.entries_fetched,
                        "errors": self._metrics.errors,
                    },
                },
            )
        except Exception as e:
            return StorageHealth(
                healthy=False,
                latency_ms=(time.monotonic() - start) * 1000,
                details={"error": str(e)},
            )

    async def close(self) -> None:
        """Close Redis connection."""
        if self._redis is not None:
            await self._redis.aclose()
            self._redis = None
            logger.info("Closed Redis connection")

    async def clear(self) -> None:
        """Delete both namespace keys (for testing)."""
        redis = await self._get_client()
        await redis.delete(self.entries_key, self.order_key)
