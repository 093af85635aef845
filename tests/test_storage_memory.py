"""Tests for InMemoryStorage and the adapter registry."""

import pytest

from eventspool.core.config import QueueConfig
from eventspool.core.entry import QueueEntry
from eventspool.storage import (
    InMemoryStorage,
    RedisStorage,
    StorageAdapter,
    get_adapter_factory,
    register_adapter,
    unregister_adapter,
)


def test_bundled_adapters_satisfy_protocol():
    assert isinstance(InMemoryStorage(), StorageAdapter)
    assert isinstance(RedisStorage("redis://localhost:6379"), StorageAdapter)
    assert not isinstance(object(), StorageAdapter)


async def test_insert_fetch_delete():
    storage = InMemoryStorage()
    await storage.initialize()
    a = QueueEntry(message="a")
    b = QueueEntry(message="b")

    await storage.insert(a)
    await storage.insert(b)
    assert await storage.fetch_all() == [a, b]

    await storage.delete(a)
    assert await storage.fetch_all() == [b]
    assert len(storage) == 1


async def test_delete_unknown_entry_is_ignored():
    storage = InMemoryStorage()
    await storage.delete(QueueEntry(message="never stored"))
    assert await storage.fetch_all() == []


async def test_initialize_and_close_toggle_state():
    storage = InMemoryStorage()
    assert not storage.initialized
    await storage.initialize()
    assert storage.initialized
    await storage.close()
    assert not storage.initialized


async def test_from_config_shares_store_per_location(shared_stores):
    config = QueueConfig(backend_kind="local", host="h", port=1, path="p")
    other = QueueConfig(backend_kind="local", host="h", port=1, path="elsewhere")

    first = InMemoryStorage.from_config(config)
    await first.insert(QueueEntry(message="x"))

    assert len(InMemoryStorage.from_config(config)) == 1
    assert len(InMemoryStorage.from_config(other)) == 0


def test_registry_defaults():
    assert get_adapter_factory("local") == InMemoryStorage.from_config
    assert get_adapter_factory("redis") == RedisStorage.from_config
    assert get_adapter_factory("in-memory") is None
    assert get_adapter_factory("memory") is None


def test_register_and_unregister():
    factory = lambda config: InMemoryStorage()  # noqa: E731
    register_adapter("custom", factory)
    try:
        assert get_adapter_factory("custom") is factory
    finally:
        unregister_adapter("custom")
    assert get_adapter_factory("custom") is None


@pytest.mark.parametrize("kind", ["in-memory", "memory"])
def test_memory_kind_cannot_be_registered(kind: str):
    with pytest.raises(ValueError):
        register_adapter(kind, lambda config: InMemoryStorage())
