"""Cache configuration and key policy.

``CacheConfig`` is the core's required input: no defaults, validated on
construction. ``KeyPolicy`` decides which part of a request names a page.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from roost.errors import ConfigurationError
from roost.http.paths import canonical_path

if TYPE_CHECKING:
    from roost.http.request import Request


@dataclass(frozen=True, slots=True)
class CacheConfig:
    """Time-to-live and sweep period, both in seconds.

    An entry whose age reaches ``ttl`` is stale. The sweeper wakes every
    ``sweep_interval`` seconds to evict stale entries.
    """

    ttl: float
    sweep_interval: float

    def __post_init__(self) -> None:
        if self.ttl <= 0:
            msg = f"Cache ttl must be positive, got {self.ttl!r}"
            raise ConfigurationError(msg)
        if self.sweep_interval <= 0:
            msg = f"Cache sweep_interval must be positive, got {self.sweep_interval!r}"
            raise ConfigurationError(msg)

    @property
    def max_age(self) -> int:
        """TTL as whole seconds, for ``Cache-Control: max-age``."""
        return int(self.ttl)


@dataclass(frozen=True, slots=True)
class KeyPolicy:
    """Derive a cache key from a request.

    By default only the canonical path is used: ``/search?q=a`` and
    ``/search?q=b`` share one cached page. Set ``vary_query=True`` when
    the renderer reads the query string; the key then carries the query
    pairs in sorted order. Headers never take part in the key.
    """

    vary_query: bool = False

    def derive(self, request: Request) -> str:
        path = canonical_path(request.path)
        if self.vary_query:
            query = request.query.canonical()
            if query:
                return f"{path}?{query}"
        return path
