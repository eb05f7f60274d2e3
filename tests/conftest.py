"""Test fixtures for mumblesync tests."""

import os
from pathlib import Path

import pytest

# Run Qt without a display server
os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")

from mumblesync.core.store import MemoryStore, SharedStore  # noqa: E402
from mumblesync.models.target import ConnectionTarget, create_target  # noqa: E402


class FailingStore:
    """Store that is always unreachable."""

    def __init__(self) -> None:
        self.put_calls: list[str] = []

    def get(self, key: str) -> bytes | None:  # noqa: ARG002
        return None

    def put(self, key: str, data: bytes) -> bool:  # noqa: ARG002
        self.put_calls.append(key)
        return False


class FakeClock:
    """Settable clock for deterministic timestamps."""

    def __init__(self, now: float = 1_700_000_000.0) -> None:
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def memory_store() -> MemoryStore:
    """Return an empty in-memory store."""
    return MemoryStore()


@pytest.fixture
def store_path(tmp_path: Path) -> Path:
    """Return a path for a shared store file."""
    return tmp_path / "shared" / "widget_store.ini"


@pytest.fixture
def shared_store(store_path: Path) -> SharedStore:
    """Return a SharedStore backed by a temporary file."""
    return SharedStore(store_path)


@pytest.fixture
def failing_store() -> FailingStore:
    """Return a store that drops every write and reads nothing."""
    return FailingStore()


@pytest.fixture
def clock() -> FakeClock:
    """Return a fake clock."""
    return FakeClock()


@pytest.fixture
def alpha() -> ConnectionTarget:
    """Return a sample target."""
    return create_target("alpha.example.org", 64738, "alice", "Alpha")


@pytest.fixture
def beta() -> ConnectionTarget:
    """Return a second sample target."""
    return create_target("beta.example.org", 64738, "alice", "Beta", has_credential=True)


@pytest.fixture
def gamma() -> ConnectionTarget:
    """Return a third sample target."""
    return create_target("gamma.example.org", 10000, "bob", "Gamma")
