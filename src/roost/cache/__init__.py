"""SSR response cache — store, expiry sweeper, and render gateway.

Build the pieces explicitly and hand the same store to both consumers::

    store = CacheStore()
    config = CacheConfig(ttl=600, sweep_interval=60)
    gateway = RenderGateway(store, render_page, config)
    sweeper = ExpirySweeper(store, config)

``App`` does this wiring for you; use these types directly to embed the
cache in another ASGI stack.
"""

from roost.cache.gateway import CacheMeta, CacheStats, CacheStatus, RenderGateway
from roost.cache.policy import CacheConfig, KeyPolicy
from roost.cache.store import CacheEntry, CacheStore
from roost.cache.sweeper import ExpirySweeper, SweepStats
from roost.http.paths import canonical_path

__all__ = [
    "CacheConfig",
    "CacheEntry",
    "CacheMeta",
    "CacheStats",
    "CacheStatus",
    "CacheStore",
    "ExpirySweeper",
    "KeyPolicy",
    "RenderGateway",
    "SweepStats",
    "canonical_path",
]
