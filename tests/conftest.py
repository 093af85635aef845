"""Pytest configuration, Hypothesis profiles and shared fixtures."""

import logging

import pytest
from hypothesis import settings

from eventspool.core.entry import QueueEntry
from eventspool.core.errors import (
    AdapterDeleteError,
    AdapterFetchError,
    AdapterInitializationError,
    AdapterInsertError,
)
from eventspool.storage.memory import InMemoryStorage

# Register Hypothesis profiles
settings.register_profile("ci", max_examples=100)
settings.register_profile("dev", max_examples=20)

# Load dev profile by default, CI can override via --hypothesis-profile=ci
settings.load_profile("dev")


class LogCapture(logging.Handler):
    """Custom handler to capture log records for testing."""

    def __init__(self):
        super().__init__()
        self.records: list[logging.LogRecord] = []

    def emit(self, record: logging.LogRecord) -> None:
        self.records.append(record)

    def clear(self) -> None:
        self.records.clear()

    def at(self, level: int) -> list[logging.LogRecord]:
        return [r for r in self.records if r.levelno == level]


class RecordingStorage:
    """Storage adapter that records calls and can be told to fail."""

    def __init__(
        self,
        entries: list[QueueEntry] | None = None,
        fail_on: set[str] | None = None,
    ):
        self.entries: list[QueueEntry] = list(entries or [])
        self.fail_on = set(fail_on or ())
        self.calls: list[str] = []

    async def initialize(self) -> None:
        self.calls.append("initialize")
        if "initialize" in self.fail_on:
            raise AdapterInitializationError("simulated connection refused")

    async def insert(self, entry: QueueEntry) -> None:
        self.calls.append("insert")
        if "insert" in self.fail_on:
            raise AdapterInsertError(f"simulated insert failure for {entry.id}")
        self.entries.append(entry)

    async def delete(self, entry: QueueEntry) -> None:
        self.calls.append("delete")
        if "delete" in self.fail_on:
            raise AdapterDeleteError(f"simulated delete failure for {entry.id}")
        self.entries = [e for e in self.entries if e.id != entry.id]

    async def fetch_all(self) -> list[QueueEntry]:
        self.calls.append("fetch_all")
        if "fetch_all" in self.fail_on:
            raise AdapterFetchError("simulated fetch failure")
        return list(self.entries)

    async def close(self) -> None:
        self.calls.append("close")


PERSISTENT = {"backend_kind": "persistent-example", "host": "localhost", "port": 9999, "path": "queue"}


@pytest.fixture(scope="session")
def anyio_backend() -> str:
    """Use asyncio as the async backend for pytest-asyncio."""
    return "asyncio"


@pytest.fixture
def log_capture():
    """Capture records from the eventspool loggers."""
    handler = LogCapture()
    handler.setLevel(logging.DEBUG)
    loggers = [logging.getLogger(name) for name in ("eventspool.queue", "eventspool.bus")]
    saved = [(lg, lg.level) for lg in loggers]

    for lg in loggers:
        lg.addHandler(handler)
        lg.setLevel(logging.DEBUG)

    yield handler

    for lg, level in saved:
        lg.removeHandler(handler)
        lg.setLevel(level)


@pytest.fixture
def shared_stores():
    """Drop named InMemoryStorage stores after the test."""
    yield
    InMemoryStorage.reset_shared()
