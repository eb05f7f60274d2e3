"""Tests for the QSettings-backed shared store."""

from pathlib import Path

from mumblesync.core.store import MemoryStore, SharedStore


class TestSharedStoreBasics:
    """Test basic get/put behaviour."""

    def test_missing_key_is_none(self, shared_store: SharedStore) -> None:
        """Test absent keys read as None."""
        assert shared_store.get("nothing") is None

    def test_put_and_get(self, shared_store: SharedStore) -> None:
        """Test a value round-trips as bytes."""
        assert shared_store.put("key", b'[{"id": "x"}]') is True
        assert shared_store.get("key") == b'[{"id": "x"}]'

    def test_put_replaces_whole_value(self, shared_store: SharedStore) -> None:
        """Test a second put replaces the value entirely."""
        shared_store.put("key", b"first value that is long")
        shared_store.put("key", b"short")
        assert shared_store.get("key") == b"short"

    def test_keys_are_independent(self, shared_store: SharedStore) -> None:
        """Test writing one key leaves others untouched."""
        shared_store.put("a", b"1")
        shared_store.put("b", b"2")
        shared_store.put("a", b"3")
        assert shared_store.get("b") == b"2"

    def test_creates_file(self, shared_store: SharedStore, store_path: Path) -> None:
        """Test the backing file is created on first write."""
        shared_store.put("key", b"value")
        assert store_path.exists()
        assert shared_store.path == store_path

    def test_remove_and_clear(self, shared_store: SharedStore) -> None:
        """Test remove() and clear()."""
        shared_store.put("a", b"1")
        shared_store.put("b", b"2")
        shared_store.remove("a")
        assert shared_store.get("a") is None
        shared_store.clear()
        assert shared_store.get("b") is None


class TestSharedStoreAcrossInstances:
    """Test visibility between independent store instances (as in separate processes)."""

    def test_writer_visible_to_new_reader(self, store_path: Path) -> None:
        """Test a fresh instance sees a previous write."""
        SharedStore(store_path).put("key", b"hello")
        assert SharedStore(store_path).get("key") == b"hello"

    def test_long_lived_reader_sees_later_writes(self, store_path: Path) -> None:
        """Test an open reader picks up writes made after it was created."""
        reader = SharedStore(store_path)
        writer = SharedStore(store_path)
        assert reader.get("key") is None

        writer.put("key", b"v1")
        assert reader.get("key") == b"v1"

        writer.put("key", b"v2")
        assert reader.get("key") == b"v2"

    def test_binary_values(self, store_path: Path) -> None:
        """Test non-UTF-8 bytes survive the INI file."""
        data = bytes(range(256))
        SharedStore(store_path).put("blob", data)
        assert SharedStore(store_path).get("blob") == data


class TestSharedStoreFailures:
    """Test degraded behaviour when the file cannot be written."""

    def test_unwritable_location_drops_write(self, tmp_path: Path) -> None:
        """Test put() reports failure instead of raising."""
        blocker = tmp_path / "not_a_dir"
        blocker.write_text("file in the way")
        store = SharedStore(blocker / "widget_store.ini")

        assert store.put("key", b"value") is False

    def test_recovers_once_location_is_writable(self, tmp_path: Path) -> None:
        """Test a failed write does not poison later reads and writes."""
        blocker = tmp_path / "not_a_dir"
        blocker.write_text("file in the way")
        store = SharedStore(blocker / "widget_store.ini")
        assert store.put("key", b"v1") is False

        blocker.unlink()
        blocker.mkdir()

        assert store.put("key", b"v2") is True
        assert store.get("key") == b"v2"
        assert SharedStore(blocker / "widget_store.ini").get("key") == b"v2"


class TestMemoryStore:
    """Test the in-process store."""

    def test_put_and_get(self) -> None:
        """Test values are stored by copy."""
        store = MemoryStore()
        data = bytearray(b"abc")
        assert store.put("key", bytes(data)) is True
        data[0] = ord("z")
        assert store.get("key") == b"abc"

    def test_missing_key(self) -> None:
        """Test absent keys read as None."""
        assert MemoryStore().get("key") is None
