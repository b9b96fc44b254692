"""Key-value backends used as the durable store behind NoteStore."""

import asyncio
import json
import logging
import os
import tempfile
import threading
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Optional

from .errors import BackingStoreError

logger = logging.getLogger(__name__)


class KeyValueStore(ABC):
    """Interface for an asynchronous string key-value store."""

    @abstractmethod
    async def get(self, key: str) -> Optional[str]:
        """Return the value stored under key, or None if absent."""
        ...

    @abstractmethod
    async def set(self, key: str, value: str) -> None:
        """Store value under key, replacing any previous value.

        Raises:
            BackingStoreError: If the write is rejected.
        """
        ...


class InMemoryKeyValueStore(KeyValueStore):
    """Dict-backed store for tests and ephemeral sessions."""

    def __init__(self, initial: Optional[dict[str, str]] = None):
        self.data: dict[str, str] = dict(initial or {})
        self.fail_writes = False
        self.failing_keys: set[str] = set()
        self.write_count = 0

    async def get(self, key: str) -> Optional[str]:
        # Yield so concurrent callers interleave the way a real async backend would
        await asyncio.sleep(0)
        return self.data.get(key)

    async def set(self, key: str, value: str) -> None:
        await asyncio.sleep(0)
        if self.fail_writes or key in self.failing_keys:
            raise BackingStoreError(f"Write rejected for key '{key}'")
        self.data[key] = value
        self.write_count += 1


class JsonFileKeyValueStore(KeyValueStore):
    """Store that keeps every key in a single JSON object file.

    Writes go to a temporary file in the same directory which then replaces
    the target, so a crash mid-write leaves the previous contents intact.
    """

    def __init__(self, path: Path):
        self.path = Path(path)
        self._lock = threading.Lock()
        self._ensure_dir()

    def _ensure_dir(self) -> None:
        """Ensure the parent directory of the store file exists."""
        self.path.parent.mkdir(parents=True, exist_ok=True)
        logger.debug(f"Key-value store file: {self.path}")

    def _read_all(self) -> dict[str, str]:
        if not self.path.exists():
            return {}

        try:
            with open(self.path, encoding="utf-8") as f:
                data = json.load(f)
        except (json.JSONDecodeError, OSError) as e:
            raise BackingStoreError(f"Cannot read store file {self.path}: {e}") from e

        if not isinstance(data, dict):
            raise BackingStoreError(f"Store file {self.path} is not a JSON object")
        return data

    def _write_all(self, data: dict[str, str]) -> None:
        fd, tmp_name = tempfile.mkstemp(
            dir=self.path.parent, prefix=f".{self.path.name}.", suffix=".tmp"
        )
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(data, f, indent=2)
            os.replace(tmp_name, self.path)
        except OSError:
            if os.path.exists(tmp_name):
                os.unlink(tmp_name)
            raise

    def _get(self, key: str) -> Optional[str]:
        value = self._read_all().get(key)
        if value is not None and not isinstance(value, str):
            raise BackingStoreError(f"Value for key '{key}' is not a string")
        return value

    def _set(self, key: str, value: str) -> None:
        with self._lock:
            data = self._read_all()
            data[key] = value
            try:
                self._write_all(data)
            except OSError as e:
                raise BackingStoreError(
                    f"Cannot write store file {self.path}: {e}"
                ) from e
        logger.debug(f"Wrote key '{key}' to {self.path}")

    async def get(self, key: str) -> Optional[str]:
        return await asyncio.to_thread(self._get, key)

    async def set(self, key: str, value: str) -> None:
        await asyncio.to_thread(self._set, key, value)
