"""Tests for settings loading"""
import os
import pytest
from unittest.mock import patch

from cartstore.config import DEFAULT_STORAGE_KEY, load_settings
from cartstore.errors import ConfigError

CART_VARS = (
    "CART_API_URL",
    "CART_HTTP_TIMEOUT",
    "CART_STORAGE_BACKEND",
    "CART_STORAGE_KEY",
    "CART_STORAGE_PATH",
    "UPSTASH_REDIS_REST_URL",
    "UPSTASH_REDIS_REST_TOKEN",
    "LOG_LEVEL",
)


@pytest.fixture
def clean_env():
    """Environment without any cart settings"""
    env = {k: v for k, v in os.environ.items() if k not in CART_VARS}
    with patch.dict(os.environ, env, clear=True):
        yield


def test_defaults(clean_env):
    settings = load_settings()

    assert settings.api_url == "http://localhost:3333"
    assert settings.http_timeout == 10.0
    assert settings.storage_backend == "memory"
    assert settings.storage_key == DEFAULT_STORAGE_KEY


def test_from_environment(clean_env):
    with patch.dict(os.environ, {
        "CART_API_URL": "http://api.test/",
        "CART_HTTP_TIMEOUT": "2.5",
        "CART_STORAGE_BACKEND": "Redis",
        "UPSTASH_REDIS_REST_URL": "https://redis.test",
        "UPSTASH_REDIS_REST_TOKEN": "token",
    }):
        settings = load_settings()

    assert settings.api_url == "http://api.test"
    assert settings.http_timeout == 2.5
    assert settings.storage_backend == "redis"
    assert settings.redis_url == "https://redis.test"


@pytest.mark.parametrize("name,value", [
    ("CART_HTTP_TIMEOUT", "soon"),
    ("CART_HTTP_TIMEOUT", "0"),
    ("CART_STORAGE_BACKEND", "sqlite"),
    ("CART_STORAGE_KEY", "  "),
])
def test_invalid_values(clean_env, name, value):
    with patch.dict(os.environ, {name: value}):
        with pytest.raises(ConfigError):
            load_settings()


def test_env_file(clean_env, tmp_path):
    """Test .env values apply without overriding the real environment"""
    env_file = tmp_path / ".env"
    env_file.write_text("CART_STORAGE_BACKEND=file\nCART_STORAGE_PATH=/tmp/cart.json\nCART_API_URL=http://from-file\n")

    with patch.dict(os.environ, {"CART_API_URL": "http://from-env"}):
        settings = load_settings(str(env_file))

    assert settings.storage_backend == "file"
    assert settings.storage_path == "/tmp/cart.json"
    assert settings.api_url == "http://from-env"


def test_log_level(clean_env, tmp_path):
    """Test LOG_LEVEL defaults to INFO and can come from a .env file"""
    assert load_settings().log_level == "INFO"

    env_file = tmp_path / ".env"
    env_file.write_text("LOG_LEVEL=DEBUG\n")

    assert load_settings(str(env_file)).log_level == "DEBUG"
