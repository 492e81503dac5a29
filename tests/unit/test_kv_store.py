"""
Unit tests for key-value stores.

Tests:
- In-memory store
- JSON file store: persistence across instances, atomic writes,
  corrupt file handling, write errors
"""

import json
import os
import pytest

from services.kv_store import MemoryKeyValueStore, JsonFileKeyValueStore, StoreError


class TestMemoryStore:
    """Tests for MemoryKeyValueStore."""

    def test_get_set_remove(self, memory_store):
        assert memory_store.get("a") is None
        memory_store.set("a", "1")
        assert memory_store.get("a") == "1"
        memory_store.remove("a")
        assert memory_store.get("a") is None

    def test_remove_missing_key(self, memory_store):
        memory_store.remove("nothing")

    def test_initial_data_copied(self):
        initial = {"k": "v"}
        store = MemoryKeyValueStore(initial)
        store.set("k", "w")
        assert initial["k"] == "v"


class TestJsonFileStore:
    """Tests for JsonFileKeyValueStore."""

    def test_values_survive_reopen(self, temp_dir):
        path = temp_dir / "store.json"
        JsonFileKeyValueStore(path).set("greeting", "hello")
        assert JsonFileKeyValueStore(path).get("greeting") == "hello"

    def test_file_is_flat_json_object(self, file_store):
        file_store.set("a", "1")
        file_store.set("b", '{"nested": true}')
        data = json.loads(file_store.path.read_text(encoding="utf-8"))
        assert data == {"a": "1", "b": '{"nested": true}'}

    def test_remove(self, file_store):
        file_store.set("a", "1")
        file_store.remove("a")
        assert JsonFileKeyValueStore(file_store.path).get("a") is None

    def test_no_temp_files_left(self, file_store):
        for i in range(5):
            file_store.set("k", str(i))
        assert [p.name for p in file_store.path.parent.iterdir()] == ["store.json"]

    def test_creates_parent_directory(self, temp_dir):
        store = JsonFileKeyValueStore(temp_dir / "deep" / "er" / "store.json")
        store.set("a", "1")
        assert store.path.exists()

    def test_missing_file_is_empty(self, file_store):
        assert not file_store.path.exists()
        assert file_store.get("anything") is None

    def test_corrupt_file_treated_as_empty(self, temp_dir):
        path = temp_dir / "store.json"
        path.write_text("{truncated", encoding="utf-8")
        store = JsonFileKeyValueStore(path)
        assert store.get("a") is None
        store.set("a", "1")
        assert json.loads(path.read_text(encoding="utf-8")) == {"a": "1"}

    def test_non_object_file_treated_as_empty(self, temp_dir):
        path = temp_dir / "store.json"
        path.write_text('["a", "b"]', encoding="utf-8")
        assert JsonFileKeyValueStore(path).get("a") is None

    def test_non_string_values_skipped(self, temp_dir):
        path = temp_dir / "store.json"
        path.write_text('{"a": "ok", "b": 3}', encoding="utf-8")
        store = JsonFileKeyValueStore(path)
        assert store.get("a") == "ok"
        assert store.get("b") is None

    def test_unchanged_value_not_rewritten(self, file_store):
        file_store.set("a", "1")
        mtime = file_store.path.stat().st_mtime_ns
        os.utime(file_store.path, ns=(mtime - 10**9, mtime - 10**9))
        file_store.set("a", "1")
        assert file_store.path.stat().st_mtime_ns == mtime - 10**9

    def test_write_error_raises_store_error(self, temp_dir):
        """Test an unwritable location surfaces as StoreError."""
        blocker = temp_dir / "blocker"
        blocker.write_text("", encoding="utf-8")
        store = JsonFileKeyValueStore(blocker / "store.json")
        with pytest.raises(StoreError):
            store.set("a", "1")


class TestLargeValues:
    """Tests for values kept in their own files."""

    @pytest.fixture
    def store(self, temp_dir):
        return JsonFileKeyValueStore(temp_dir / "store.json", large_value_bytes=100)

    def test_large_value_in_own_file(self, store):
        big = "x" * 500
        store.set("topology_v3_bg", big)
        index = json.loads(store.path.read_text(encoding="utf-8"))
        assert index == {"topology_v3_bg": {"file": "topology_v3_bg"}}
        value_file = store.path.parent / "store.values" / "topology_v3_bg"
        assert value_file.read_text(encoding="utf-8") == big

    def test_large_value_survives_reopen(self, store):
        store.set("bg", "y" * 500)
        store.set("small", "1")
        reopened = JsonFileKeyValueStore(store.path, large_value_bytes=100)
        assert reopened.get("bg") == "y" * 500
        assert reopened.get("small") == "1"

    def test_small_write_leaves_large_value_alone(self, store, monkeypatch):
        """Test changing a small key only rewrites the index."""
        store.set("bg", "z" * 500)
        written = []
        original = JsonFileKeyValueStore._write_atomic

        def recording(self, path, text):
            written.append((path.name, len(text)))
            original(self, path, text)

        monkeypatch.setattr(JsonFileKeyValueStore, "_write_atomic", recording)
        for i in range(5):
            store.set("nodes", str(i))
        assert [name for name, _ in written] == ["store.json"] * 5
        assert all(size < 100 for _, size in written)

    def test_replacing_large_value_keeps_index(self, store):
        store.set("bg", "a" * 500)
        mtime = store.path.stat().st_mtime_ns
        os.utime(store.path, ns=(mtime - 10**9, mtime - 10**9))
        store.set("bg", "b" * 500)
        assert store.path.stat().st_mtime_ns == mtime - 10**9
        assert JsonFileKeyValueStore(store.path, large_value_bytes=100).get("bg") == "b" * 500

    def test_shrunk_value_moves_back_inline(self, store):
        store.set("bg", "a" * 500)
        store.set("bg", "tiny")
        assert json.loads(store.path.read_text(encoding="utf-8")) == {"bg": "tiny"}
        assert not (store.path.parent / "store.values" / "bg").exists()

    def test_remove_deletes_value_file(self, store):
        store.set("bg", "a" * 500)
        store.remove("bg")
        assert not (store.path.parent / "store.values" / "bg").exists()
        assert JsonFileKeyValueStore(store.path, large_value_bytes=100).get("bg") is None

    def test_missing_value_file_skipped(self, store):
        store.set("bg", "a" * 500)
        store.set("nodes", "[]")
        (store.path.parent / "store.values" / "bg").unlink()
        reopened = JsonFileKeyValueStore(store.path, large_value_bytes=100)
        assert reopened.get("bg") is None
        assert reopened.get("nodes") == "[]"
