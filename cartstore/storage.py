"""
Persistent key-value stores for the cart snapshot.

Each backend stores one string per key. Reads and writes are plain blocking
calls: the cart store treats a write as part of the committing step, never as
a suspension point.
"""
import json
import os
from pathlib import Path
from typing import Dict, Optional, Protocol, Union

from upstash_redis import Redis

from .config import Settings
from .errors import ConfigError
from .logging import get_logger

logger = get_logger(__name__)


class PersistentStore(Protocol):
    """String key-value store holding the cart snapshot."""

    def read(self, key: str) -> Optional[str]:
        ...

    def write(self, key: str, value: str) -> None:
        ...


class MemoryStore:
    """Process-local store; the snapshot lives as long as the object."""

    def __init__(self, initial: Optional[Dict[str, str]] = None):
        self._data: Dict[str, str] = dict(initial or {})

    def read(self, key: str) -> Optional[str]:
        return self._data.get(key)

    def write(self, key: str, value: str) -> None:
        self._data[key] = value


class FileStore:
    """
    JSON file on local disk mapping keys to snapshot strings.

    Writes go to a sibling temp file first and are moved into place with
    os.replace, so a crash mid-write leaves the previous snapshot intact.
    """

    def __init__(self, path: Union[str, Path]):
        self.path = Path(path)

    def _load(self) -> Dict[str, str]:
        if not self.path.exists():
            return {}
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except json.JSONDecodeError as e:
            logger.warning(f"Corrupted storage file {self.path}: {e}")
            return {}
        if not isinstance(data, dict):
            logger.warning(f"Unexpected storage file layout in {self.path}, ignoring")
            return {}
        return data

    def read(self, key: str) -> Optional[str]:
        value = self._load().get(key)
        return value if isinstance(value, str) else None

    def write(self, key: str, value: str) -> None:
        data = self._load()
        data[key] = value
        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = self.path.with_name(self.path.name + ".tmp")
        tmp_path.write_text(json.dumps(data, ensure_ascii=False), encoding="utf-8")
        os.replace(tmp_path, self.path)


class RedisStore:
    """Upstash Redis (REST) backend using the synchronous client."""

    def __init__(self, client: Redis):
        self.client = client

    @classmethod
    def from_credentials(cls, url: str, token: str) -> "RedisStore":
        if not url or not token:
            raise ConfigError("UPSTASH_REDIS_REST_URL and UPSTASH_REDIS_REST_TOKEN must be set")
        return cls(Redis(url=url, token=token))

    def read(self, key: str) -> Optional[str]:
        value = self.client.get(key)
        if value is None:
            return None
        return value.decode("utf-8") if isinstance(value, bytes) else str(value)

    def write(self, key: str, value: str) -> None:
        self.client.set(key, value)


def build_store(settings: Settings) -> PersistentStore:
    """Create the storage backend selected by CART_STORAGE_BACKEND."""
    if settings.storage_backend == "file":
        return FileStore(settings.storage_path)
    if settings.storage_backend == "redis":
        return RedisStore.from_credentials(settings.redis_url, settings.redis_token)
    if settings.storage_backend == "memory":
        return MemoryStore()
    raise ConfigError(f"Unsupported storage backend: {settings.storage_backend}")
