import json
import logging
import os
from pathlib import Path
from typing import Dict, Optional

import redis

from storefront.core.config import settings
from storefront.core.exceptions import StorageException

logger = logging.getLogger("storage")


class MemoryStorage:
    """In-process key/value storage (lost on exit)"""

    def __init__(self):
        self._data: Dict[str, str] = {}

    def get_item(self, key: str) -> Optional[str]:
        return self._data.get(key)

    def set_item(self, key: str, value: str) -> None:
        self._data[key] = value

    def remove_item(self, key: str) -> None:
        self._data.pop(key, None)


class FileStorage:
    """JSON file backed key/value storage that survives restarts"""

    def __init__(self, path: str):
        self.path = Path(path)

    def _read(self) -> Dict[str, str]:
        if not self.path.exists():
            return {}
        try:
            with self.path.open("r", encoding="utf-8") as fh:
                data = json.load(fh)
        except ValueError as e:
            logger.warning(f"Storage file {self.path} is corrupt, starting empty: {e}")
            return {}
        except OSError as e:
            raise StorageException(f"Cannot read {self.path}: {e}") from e
        return data if isinstance(data, dict) else {}

    def _write(self, data: Dict[str, str]) -> None:
        tmp_path = self.path.with_suffix(self.path.suffix + ".tmp")
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            with tmp_path.open("w", encoding="utf-8") as fh:
                json.dump(data, fh)
            os.replace(tmp_path, self.path)
        except OSError as e:
            raise StorageException(f"Cannot write {self.path}: {e}") from e

    def get_item(self, key: str) -> Optional[str]:
        return self._read().get(key)

    def set_item(self, key: str, value: str) -> None:
        data = self._read()
        data[key] = value
        self._write(data)

    def remove_item(self, key: str) -> None:
        data = self._read()
        if key in data:
            del data[key]
            self._write(data)


class RedisStorage:
    """Redis backed key/value storage shared by every process of the user"""

    def __init__(self, redis_client=None, prefix: Optional[str] = None):
        self.redis_client = redis_client or redis.Redis.from_url(
            settings.REDIS_URL or "redis://localhost:6379/0",
            decode_responses=True,
        )
        self.prefix = settings.STORAGE_KEY_PREFIX if prefix is None else prefix

    def get_item(self, key: str) -> Optional[str]:
        try:
            value = self.redis_client.get(f"{self.prefix}{key}")
        except redis.RedisError as e:
            raise StorageException(f"Redis GET failed for {key}: {e}") from e
        if isinstance(value, bytes):
            return value.decode("utf-8")
        return value

    def set_item(self, key: str, value: str) -> None:
        try:
            self.redis_client.set(f"{self.prefix}{key}", value)
        except redis.RedisError as e:
            raise StorageException(f"Redis SET failed for {key}: {e}") from e

    def remove_item(self, key: str) -> None:
        try:
            self.redis_client.delete(f"{self.prefix}{key}")
        except redis.RedisError as e:
            raise StorageException(f"Redis DELETE failed for {key}: {e}") from e


def create_storage(backend: Optional[str] = None):
    """Build the storage backend named in settings"""
    backend = (backend or settings.STORAGE_BACKEND).lower()
    if backend == "redis":
        return RedisStorage()
    if backend == "file":
        return FileStorage(settings.STORAGE_FILE)
    if backend == "memory":
        return MemoryStorage()
    raise ValueError(f"Unknown storage backend: {backend}")
