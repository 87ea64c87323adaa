"""Application configuration.

AppConfig is a frozen dataclass — immutable after creation, IDE-autocompletable,
no string-key dict lookups. It carries the defaults the HTTP glue supplies;
the cache core itself takes a ``CacheConfig`` with no defaults.
"""

from dataclasses import dataclass
from pathlib import Path

from roost.cache.policy import CacheConfig, KeyPolicy
from roost.errors import ConfigurationError

TWO_DAYS = 2 * 24 * 60 * 60.0

# Sweep this many times per TTL window when no interval is given
SWEEPS_PER_TTL = 48


@dataclass(frozen=True, slots=True)
class AppConfig:
    """Application configuration. Immutable after creation.

    All fields have sensible defaults. Override what you need::

        config = AppConfig(debug=True, port=3000, cache_ttl=600)
    """

    # Server
    host: str = "127.0.0.1"
    port: int = 8000
    debug: bool = False
    log_level: str = "info"

    # Templates
    template_dir: str | Path = "templates"
    autoescape: bool = True

    # SSR cache
    cache_ttl: float = TWO_DAYS
    cache_sweep_interval: float | None = None  # None = cache_ttl / 48
    cache_vary_query: bool = False  # Key pages by path only unless enabled
    render_timeout: float | None = None

    def cache_config(self) -> CacheConfig:
        """Build the core cache configuration from these settings.

        Raises ``ConfigurationError`` if the TTL or sweep interval is
        not positive.
        """
        interval = self.cache_sweep_interval
        if interval is None:
            interval = self.cache_ttl / SWEEPS_PER_TTL
        return CacheConfig(ttl=self.cache_ttl, sweep_interval=interval)

    def key_policy(self) -> KeyPolicy:
        """The cache key policy selected by ``cache_vary_query``."""
        return KeyPolicy(vary_query=self.cache_vary_query)

    def validate(self) -> None:
        """Check cross-field constraints. Called once at app freeze."""
        self.cache_config()
        if self.render_timeout is not None and self.render_timeout <= 0:
            msg = f"render_timeout must be positive, got {self.render_timeout!r}"
            raise ConfigurationError(msg)
