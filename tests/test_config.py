"""Tests for roost.config — AppConfig defaults and cache settings."""

import pytest

from roost.config import SWEEPS_PER_TTL, TWO_DAYS, AppConfig
from roost.errors import ConfigurationError


class TestDefaults:
    def test_server_defaults(self) -> None:
        cfg = AppConfig()
        assert cfg.host == "127.0.0.1"
        assert cfg.port == 8000
        assert cfg.debug is False

    def test_cache_defaults(self) -> None:
        cfg = AppConfig()
        assert cfg.cache_ttl == 172800
        assert cfg.cache_ttl == TWO_DAYS
        assert cfg.cache_vary_query is False
        assert cfg.render_timeout is None

    def test_frozen(self) -> None:
        cfg = AppConfig()
        with pytest.raises(AttributeError):
            cfg.port = 9000  # type: ignore[misc]


class TestCacheConfig:
    def test_default_interval_derived_from_ttl(self) -> None:
        cache = AppConfig().cache_config()
        assert cache.ttl == TWO_DAYS
        assert cache.sweep_interval == TWO_DAYS / SWEEPS_PER_TTL
        assert cache.sweep_interval == 3600

    def test_explicit_interval(self) -> None:
        cache = AppConfig(cache_ttl=100, cache_sweep_interval=5).cache_config()
        assert cache.ttl == 100
        assert cache.sweep_interval == 5

    def test_non_positive_ttl(self) -> None:
        with pytest.raises(ConfigurationError):
            AppConfig(cache_ttl=0).cache_config()

    def test_non_positive_interval(self) -> None:
        with pytest.raises(ConfigurationError):
            AppConfig(cache_sweep_interval=-1).cache_config()

    def test_key_policy(self) -> None:
        assert AppConfig().key_policy().vary_query is False
        assert AppConfig(cache_vary_query=True).key_policy().vary_query is True


class TestValidate:
    def test_valid(self) -> None:
        AppConfig(render_timeout=2.5).validate()

    def test_render_timeout_must_be_positive(self) -> None:
        with pytest.raises(ConfigurationError, match="render_timeout"):
            AppConfig(render_timeout=0).validate()

    def test_invalid_cache_settings(self) -> None:
        with pytest.raises(ConfigurationError):
            AppConfig(cache_ttl=-5).validate()
