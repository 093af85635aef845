"""Storage adapters and the backend-kind registry."""

from collections.abc import Callable
from typing import Any

from eventspool.core.config import BackendKind, QueueConfig, is_memory_kind
from eventspool.storage.base import StorageAdapter
from eventspool.storage.memory import InMemoryStorage
from eventspool.storage.redis import RedisStorage

AdapterFactory = Callable[[QueueConfig], Any]

_REGISTRY: dict[str, AdapterFactory] = {
    BackendKind.LOCAL.value: InMemoryStorage.from_config,
    BackendKind.REDIS.value: RedisStorage.from_config,
}


def register_adapter(kind: str, factory: AdapterFactory) -> None:
    """Register (or replace) the adapter factory for a backend kind."""
    if is_memory_kind(kind):
        raise ValueError(f"{kind!r} is reserved for the non-persistent queue")
    _REGISTRY[kind] = factory


def unregister_adapter(kind: str) -> None:
    _REGISTRY.pop(kind, None)


def get_adapter_factory(kind: str) -> AdapterFactory | None:
    return _REGISTRY.get(kind)


__all__ = [
    "AdapterFactory",
    "InMemoryStorage",
    "RedisStorage",
    "StorageAdapter",
    "get_adapter_factory",
    "register_adapter",
    "unregister_adapter",
]
