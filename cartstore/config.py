"""Cart store configuration loaded from environment variables."""
import os
from dataclasses import dataclass
from typing import Optional, Tuple

from dotenv import load_dotenv

from .errors import ConfigError

DEFAULT_API_URL = "http://localhost:3333"
DEFAULT_STORAGE_KEY = "cart:snapshot"
DEFAULT_STORAGE_PATH = ".cart.json"
DEFAULT_HTTP_TIMEOUT = 10.0

STORAGE_BACKENDS: Tuple[str, ...] = ("memory", "file", "redis")


@dataclass(frozen=True)
class Settings:
    """Resolved cart store settings."""
    api_url: str = DEFAULT_API_URL
    http_timeout: float = DEFAULT_HTTP_TIMEOUT
    storage_backend: str = "memory"
    storage_key: str = DEFAULT_STORAGE_KEY
    storage_path: str = DEFAULT_STORAGE_PATH
    redis_url: str = ""
    redis_token: str = ""
    log_level: str = "INFO"


def _parse_timeout(raw: str) -> float:
    try:
        value = float(raw)
    except ValueError:
        raise ConfigError(f"CART_HTTP_TIMEOUT must be a number, got {raw!r}")
    if value <= 0:
        raise ConfigError("CART_HTTP_TIMEOUT must be positive")
    return value


def load_settings(env_file: Optional[str] = None) -> Settings:
    """
    Build Settings from the process environment.

    Args:
        env_file: Optional path to a .env file; values already present in the
            environment take precedence over the file.

    Raises:
        ConfigError: if a value cannot be parsed
    """
    if env_file:
        load_dotenv(env_file, override=False)

    backend = os.environ.get("CART_STORAGE_BACKEND", "memory").strip().lower()
    if backend not in STORAGE_BACKENDS:
        raise ConfigError(
            f"Unsupported CART_STORAGE_BACKEND: {backend} (expected one of {', '.join(STORAGE_BACKENDS)})"
        )

    storage_key = os.environ.get("CART_STORAGE_KEY", DEFAULT_STORAGE_KEY).strip()
    if not storage_key:
        raise ConfigError("CART_STORAGE_KEY must not be empty")

    return Settings(
        api_url=os.environ.get("CART_API_URL", DEFAULT_API_URL).rstrip("/"),
        http_timeout=_parse_timeout(os.environ.get("CART_HTTP_TIMEOUT", str(DEFAULT_HTTP_TIMEOUT))),
        storage_backend=backend,
        storage_key=storage_key,
        storage_path=os.environ.get("CART_STORAGE_PATH", DEFAULT_STORAGE_PATH),
        # Upstash uses REST_URL and REST_TOKEN
        redis_url=os.environ.get("UPSTASH_REDIS_REST_URL", ""),
        redis_token=os.environ.get("UPSTASH_REDIS_REST_TOKEN", ""),
        log_level=os.environ.get("LOG_LEVEL", "INFO"),
    )
