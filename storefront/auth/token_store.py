"""
Access Token Store

Holds the current access token in memory, mirrored to persistent storage so
a restarted process can restore its session.

Storage backends:
    - FileStorage: a JSON object on disk, every access under a FileLock so
      two processes sharing the file never interleave writes
    - MemoryStorage: a plain dict, for tests and throwaway sessions

Writes are last-write-wins; no other concurrency control is needed.
"""

import json
import logging
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Optional

from filelock import FileLock, Timeout

logger = logging.getLogger(__name__)


class BaseStorage(ABC):
    """Key/value string storage, modelled on browser local storage."""

    @abstractmethod
    def get_item(self, key: str) -> Optional[str]:
        pass

    @abstractmethod
    def set_item(self, key: str, value: str) -> None:
        pass

    @abstractmethod
    def remove_item(self, key: str) -> None:
        pass


class MemoryStorage(BaseStorage):
    """In-process storage; lost when the process exits."""

    def __init__(self, initial: Optional[dict[str, str]] = None):
        self._data: dict[str, str] = dict(initial or {})

    def get_item(self, key: str) -> Optional[str]:
        return self._data.get(key)

    def set_item(self, key: str, value: str) -> None:
        self._data[key] = value

    def remove_item(self, key: str) -> None:
        self._data.pop(key, None)


class FileStorage(BaseStorage):
    """JSON file storage guarded by a file lock."""

    def __init__(self, path: Path, lock_timeout: int = 10):
        self.path = Path(path)
        self._lock = FileLock(str(self.path) + ".lock", timeout=lock_timeout)

    def _read(self) -> dict[str, str]:
        if not self.path.exists():
            return {}
        try:
            data = json.loads(self.path.read_text(encoding="utf-8") or "{}")
        except json.JSONDecodeError:
            logger.warning(f"Storage file {self.path} is corrupt, starting empty")
            return {}
        return data if isinstance(data, dict) else {}

    def _write(self, data: dict[str, str]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(json.dumps(data, indent=2), encoding="utf-8")

    def get_item(self, key: str) -> Optional[str]:
        try:
            with self._lock:
                value = self._read().get(key)
        except Timeout:
            logger.error(f"Timed out waiting for storage lock {self._lock.lock_file}")
            raise
        return value if isinstance(value, str) else None

    def set_item(self, key: str, value: str) -> None:
        with self._lock:
            data = self._read()
            data[key] = value
            self._write(data)

    def remove_item(self, key: str) -> None:
        with self._lock:
            data = self._read()
            if key in data:
                del data[key]
                self._write(data)


class TokenStore:
    """
    Process-wide holder of the current access token.

    Attributes:
        storage: Persistent backend the token is mirrored to
        key: Storage key of the token
    """

    def __init__(self, storage: BaseStorage, key: str = "accessToken"):
        self.storage = storage
        self.key = key
        self._token: Optional[str] = storage.get_item(key)

    def get(self) -> Optional[str]:
        """Return the in-memory token, falling back to storage."""
        if self._token is not None:
            return self._token
        return self.storage.get_item(self.key)

    def set(self, token: str) -> None:
        """Write the token through to memory and storage."""
        self._token = token
        self.storage.set_item(self.key, token)

    def clear(self) -> None:
        """Forget the token everywhere."""
        self._token = None
        self.storage.remove_item(self.key)

    @property
    def has_token(self) -> bool:
        return self.get() is not None
