"""
Typed Cache - Configuration Loader Tests
"""

from pathlib import Path

import pytest

from typed_cache.config import CacheBackend, CacheConfig, get_config, load_config, reload_config
from typed_cache.errors import ConfigurationError


@pytest.fixture
def no_env_file(tmp_path: Path) -> str:
    return str(tmp_path / "missing.env")


class TestLoadConfig:
    def test_memory_defaults(self, mock_env_memory: None, no_env_file: str) -> None:
        config = load_config(env_file=no_env_file, reload=True)

        assert config.environment == "test"
        assert config.log_level == "DEBUG"
        assert config.cache.backend == CacheBackend.MEMORY
        assert config.cache.max_size == 100
        assert config.cache.ttl_seconds == 3600
        assert config.cache.namespace == "test"
        assert config.serialization.by_alias is False

    def test_redis_auto_detected_from_url(self, monkeypatch: pytest.MonkeyPatch, no_env_file: str) -> None:
        monkeypatch.delenv("CACHE_BACKEND", raising=False)
        monkeypatch.setenv("REDIS_URL", "redis://cache.internal:6379/0")

        config = load_config(env_file=no_env_file, reload=True)

        assert config.cache.backend == CacheBackend.REDIS
        assert config.cache.redis_url == "redis://cache.internal:6379/0"

    def test_redis_without_url_rejected(self, monkeypatch: pytest.MonkeyPatch, no_env_file: str) -> None:
        monkeypatch.setenv("CACHE_BACKEND", "redis")
        monkeypatch.delenv("REDIS_URL", raising=False)

        with pytest.raises(ConfigurationError):
            load_config(env_file=no_env_file, reload=True)

    def test_invalid_number_rejected(self, monkeypatch: pytest.MonkeyPatch, no_env_file: str) -> None:
        monkeypatch.setenv("CACHE_MAX_SIZE", "lots")

        with pytest.raises(ConfigurationError):
            load_config(env_file=no_env_file, reload=True)

    def test_unknown_backend_rejected(self, monkeypatch: pytest.MonkeyPatch, no_env_file: str) -> None:
        monkeypatch.setenv("CACHE_BACKEND", "memcached")

        with pytest.raises(ConfigurationError) as exc_info:
            load_config(env_file=no_env_file, reload=True)

        assert "validation_errors" in exc_info.value.details

    def test_serialization_flags(self, monkeypatch: pytest.MonkeyPatch, no_env_file: str) -> None:
        monkeypatch.setenv("SERIALIZATION_BY_ALIAS", "true")
        monkeypatch.setenv("SERIALIZATION_STRICT", "TRUE")

        config = load_config(env_file=no_env_file, reload=True)

        assert config.serialization.by_alias is True
        assert config.serialization.strict is True
        assert config.serialization.exclude_none is False

    def test_env_file_loaded(self, monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
        # Register the variable so monkeypatch restores it after dotenv overrides it
        monkeypatch.setenv("CACHE_NAMESPACE", "before")
        env_file = tmp_path / ".env"
        env_file.write_text("CACHE_NAMESPACE=from_dotenv\n")

        config = load_config(env_file=str(env_file), reload=True)

        assert config.cache.namespace == "from_dotenv"

    def test_singleton(self, mock_env_memory: None, no_env_file: str) -> None:
        first = load_config(env_file=no_env_file, reload=True)

        assert get_config() is first
        assert load_config() is first
        assert reload_config(env_file=no_env_file) is not first


class TestCacheConfig:
    def test_redis_backend_requires_url(self) -> None:
        with pytest.raises(ValueError):
            CacheConfig(backend=CacheBackend.REDIS)

    def test_negative_ttl_rejected(self) -> None:
        with pytest.raises(ValueError):
            CacheConfig(ttl_seconds=-1)
