"""
Key-value stores used to persist the topology.

The editor only needs three synchronous operations: get, set and
remove string values by key. Two implementations are provided:

- MemoryKeyValueStore: dict backed, for tests and throwaway sessions
- JsonFileKeyValueStore: a single JSON object on disk, written
  atomically so a crash mid-save never leaves a truncated file;
  large values are kept in files of their own
"""

import json
import logging
import os
import re
import tempfile
from pathlib import Path
from typing import Optional, Protocol

logger = logging.getLogger(__name__)


class StoreError(Exception):
    """Raised when the underlying storage cannot be read or written."""


class KeyValueStore(Protocol):
    """Minimal string key-value storage."""

    def get(self, key: str) -> Optional[str]:
        ...

    def set(self, key: str, value: str) -> None:
        ...

    def remove(self, key: str) -> None:
        ...


class MemoryKeyValueStore:
    """In-memory store. Contents are lost when the process exits."""

    def __init__(self, initial: Optional[dict[str, str]] = None):
        self._data: dict[str, str] = dict(initial or {})

    def get(self, key: str) -> Optional[str]:
        return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        self._data[key] = value

    def remove(self, key: str) -> None:
        self._data.pop(key, None)

    def keys(self) -> list[str]:
        return list(self._data)


class JsonFileKeyValueStore:
    """
    Store backed by one JSON file holding a {key: string} object.

    The file is read once on construction and rewritten on every change.
    Writes go to a temporary file in the same directory which then
    replaces the real file, so readers only ever see a complete file.

    Values of at least ``large_value_bytes`` characters (a background map
    data URL, typically) live in their own file under ``<stem>.values/``
    and the index holds ``{"file": name}`` in their place. Changing a
    small value then never rewrites the large ones.
    """

    LARGE_VALUE_BYTES = 64 * 1024

    def __init__(self, path: Path, large_value_bytes: int = LARGE_VALUE_BYTES):
        self._path = Path(path)
        self._values_dir = self._path.parent / f"{self._path.stem}.values"
        self.large_value_bytes = large_value_bytes
        self._data: dict[str, str] = {}
        self._spilled: dict[str, str] = {}   # key -> file name under _values_dir
        self._load()

    @property
    def path(self) -> Path:
        return self._path

    @staticmethod
    def _value_file_name(key: str) -> str:
        return re.sub(r"[^A-Za-z0-9_.-]", "_", key)

    def _load(self):
        if not self._path.exists():
            return

        try:
            with open(self._path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, ValueError) as e:
            logger.warning(f"Ignoring unreadable store {self._path}: {e}")
            return

        if not isinstance(data, dict):
            logger.warning(f"Ignoring store {self._path}: top level is not an object")
            return

        for key, value in data.items():
            if isinstance(value, str):
                self._data[str(key)] = value
            elif isinstance(value, dict) and isinstance(value.get("file"), str):
                name = self._value_file_name(value["file"])
                try:
                    self._data[str(key)] = (self._values_dir / name).read_text(encoding="utf-8")
                except OSError as e:
                    logger.warning(f"Ignoring {key}: value file unreadable ({e})")
                    continue
                self._spilled[str(key)] = name

    def _write_atomic(self, path: Path, text: str):
        """Write text to path via a temporary file and os.replace."""
        path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(prefix=f".{path.name}.", suffix=".tmp", dir=path.parent)
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                f.write(text)
                f.flush()
                os.fsync(f.fileno())
            os.replace(tmp_name, path)
        except BaseException:
            try:
                os.unlink(tmp_name)
            except OSError:
                pass
            raise

    def _flush(self):
        index = {
            key: {"file": self._spilled[key]} if key in self._spilled else value
            for key, value in self._data.items()
        }
        try:
            self._write_atomic(self._path, json.dumps(index, ensure_ascii=False))
        except OSError as e:
            raise StoreError(f"Cannot write {self._path}: {e}") from e

    def _remove_value_file(self, name: Optional[str]):
        if name is None:
            return
        try:
            (self._values_dir / name).unlink()
        except FileNotFoundError:
            pass
        except OSError as e:
            logger.warning(f"Could not remove value file {name}: {e}")

    def get(self, key: str) -> Optional[str]:
        return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        if self._data.get(key) == value:
            return

        if len(value) < self.large_value_bytes:
            # The old value file goes only once the index no longer names it
            stale = self._spilled.pop(key, None)
            self._data[key] = value
            self._flush()
            self._remove_value_file(stale)
            return

        name = self._spilled.get(key) or self._value_file_name(key)
        try:
            self._write_atomic(self._values_dir / name, value)
        except OSError as e:
            raise StoreError(f"Cannot write value file for {key}: {e}") from e
        self._data[key] = value
        # A value already in its own file needs no index change
        if key not in self._spilled:
            self._spilled[key] = name
            self._flush()

    def remove(self, key: str) -> None:
        if key not in self._data:
            return
        del self._data[key]
        stale = self._spilled.pop(key, None)
        self._flush()
        self._remove_value_file(stale)
