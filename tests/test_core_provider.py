"""Tests for SnapshotProvider."""

from mumblesync.core.codec import decode_targets, encode_targets
from mumblesync.core.provider import DEFAULT_REFRESH_INTERVAL_SEC, SnapshotProvider
from mumblesync.core.store import PINNED_KEY, RECENT_KEY, MemoryStore
from mumblesync.models.target import ConnectionTarget, create_target
from mumblesync.models.timeline import DisplayMode, RefreshPolicy, SurfaceSize

from tests.conftest import FailingStore, FakeClock


def _fill(store: MemoryStore, key: str, count: int) -> list[ConnectionTarget]:
    targets = [create_target(f"host{i}.example.org", username="u") for i in range(count)]
    store.put(key, encode_targets(targets))
    return targets


class TestPlaceholder:
    """Test the placeholder entry."""

    def test_placeholder_has_sample_data(self, clock: FakeClock) -> None:
        """Test placeholder shows illustrative servers."""
        entry = SnapshotProvider(FailingStore(), clock=clock).placeholder()
        assert entry.pinned
        assert entry.recent
        assert entry.timestamp == clock.now
        assert entry.refresh_policy == RefreshPolicy.never()

    def test_placeholder_does_not_touch_store(self) -> None:
        """Test placeholder works without any store access."""

        class ExplodingStore:
            def get(self, key: str) -> bytes | None:
                raise AssertionError(f"unexpected read of {key}")

            def put(self, key: str, data: bytes) -> bool:
                raise AssertionError(f"unexpected write of {key}")

        entry = SnapshotProvider(ExplodingStore()).placeholder(DisplayMode.RECENT)
        assert entry.display_mode is DisplayMode.RECENT


class TestSnapshot:
    """Test snapshot reads."""

    def test_truncates_to_small_limit(self, memory_store: MemoryStore) -> None:
        """Test small surfaces get 3 rows per list."""
        pinned = _fill(memory_store, PINNED_KEY, 8)
        recent = _fill(memory_store, RECENT_KEY, 5)

        entry = SnapshotProvider(memory_store).snapshot(SurfaceSize.SMALL)

        assert list(entry.pinned) == pinned[:3]
        assert list(entry.recent) == recent[:3]

    def test_truncates_to_large_limit(self, memory_store: MemoryStore) -> None:
        """Test large surfaces get 6 rows per list."""
        pinned = _fill(memory_store, PINNED_KEY, 8)
        entry = SnapshotProvider(memory_store).snapshot(SurfaceSize.LARGE)
        assert list(entry.pinned) == pinned[:6]

    def test_short_lists_untouched(self, memory_store: MemoryStore) -> None:
        """Test lists below the limit are returned whole."""
        pinned = _fill(memory_store, PINNED_KEY, 2)
        entry = SnapshotProvider(memory_store).snapshot(SurfaceSize.LARGE)
        assert list(entry.pinned) == pinned

    def test_truncation_never_mutates_store(self, memory_store: MemoryStore) -> None:
        """Test repeated small snapshots leave the full list in the store."""
        _fill(memory_store, PINNED_KEY, 8)
        provider = SnapshotProvider(memory_store)
        for _ in range(3):
            provider.snapshot(SurfaceSize.SMALL)

        assert len(decode_targets(memory_store.get(PINNED_KEY))) == 8
        assert len(provider.snapshot(SurfaceSize.LARGE).pinned) == 6

    def test_no_scheduled_refresh(self, memory_store: MemoryStore) -> None:
        """Test snapshots leave the cadence to the caller."""
        entry = SnapshotProvider(memory_store).snapshot(SurfaceSize.MEDIUM)
        assert entry.refresh_policy.refresh_at is None

    def test_display_mode_passed_through(self, memory_store: MemoryStore) -> None:
        """Test the configured display mode is carried on the entry."""
        entry = SnapshotProvider(memory_store).snapshot(SurfaceSize.SMALL, DisplayMode.RECENT)
        assert entry.display_mode is DisplayMode.RECENT

    def test_unreachable_store_gives_empty_entry(self, failing_store: FailingStore) -> None:
        """Test an unreachable store renders an empty state."""
        entry = SnapshotProvider(failing_store).snapshot(SurfaceSize.LARGE)
        assert entry.is_empty

    def test_corrupt_data_gives_empty_list(self, memory_store: MemoryStore) -> None:
        """Test corrupt data is treated as absent."""
        memory_store.put(PINNED_KEY, b"not json")
        recent = _fill(memory_store, RECENT_KEY, 1)
        entry = SnapshotProvider(memory_store).snapshot(SurfaceSize.MEDIUM)
        assert entry.pinned == ()
        assert list(entry.recent) == recent

    def test_raising_store_is_contained(self) -> None:
        """Test a store that raises still yields an entry."""

        class BrokenStore:
            def get(self, key: str) -> bytes | None:
                raise OSError("disk gone")

            def put(self, key: str, data: bytes) -> bool:  # noqa: ARG002
                return False

        entry = SnapshotProvider(BrokenStore()).snapshot(SurfaceSize.SMALL)
        assert entry.is_empty


class TestTimeline:
    """Test timeline generation."""

    def test_single_entry_refreshes_after_interval(
        self, memory_store: MemoryStore, clock: FakeClock
    ) -> None:
        """Test the default timeline refreshes 30 minutes out."""
        entries = SnapshotProvider(memory_store, clock=clock).timeline(SurfaceSize.MEDIUM)

        assert len(entries) == 1
        assert DEFAULT_REFRESH_INTERVAL_SEC == 30 * 60
        assert entries[0].refresh_policy == RefreshPolicy.at(clock.now + 30 * 60)

    def test_custom_interval(self, memory_store: MemoryStore, clock: FakeClock) -> None:
        """Test a configured interval is honoured."""
        provider = SnapshotProvider(memory_store, refresh_interval_sec=300, clock=clock)
        (entry,) = provider.timeline(SurfaceSize.SMALL)
        assert entry.refresh_policy.refresh_at == clock.now + 300

    def test_each_call_rereads_store(self, memory_store: MemoryStore) -> None:
        """Test invocations share no state."""
        provider = SnapshotProvider(memory_store)
        assert provider.timeline(SurfaceSize.SMALL)[0].pinned == ()

        pinned = _fill(memory_store, PINNED_KEY, 1)
        assert list(provider.timeline(SurfaceSize.SMALL)[0].pinned) == pinned

    def test_repeat_calls_are_idempotent(self, memory_store: MemoryStore, clock: FakeClock) -> None:
        """Test rendering twice for the same data gives the same entry."""
        _fill(memory_store, PINNED_KEY, 4)
        provider = SnapshotProvider(memory_store, clock=clock)
        assert provider.timeline(SurfaceSize.LARGE) == provider.timeline(SurfaceSize.LARGE)
