"""Render gateway — lookup-or-render for SSR pages.

The single place that decides whether a cached page may be served and,
if not, how it is refreshed::

    content, meta = await gateway.serve(request)

A fresh entry (age strictly below the TTL) is a HIT. Anything else is a
MISS: the render capability runs, its output is stored, and the fresh
content is returned. A failed or timed-out render raises ``RenderError``
and leaves the store untouched. A store that raises is logged and
treated as empty, so every request becomes a miss.

Concurrent misses for one key are not coalesced. Each renders on its
own and the last one to finish owns the entry.
"""

import logging
import time
from collections.abc import Callable
from dataclasses import asdict, dataclass
from enum import StrEnum
from typing import Any

import anyio
from kida import Environment

from roost._internal.invoke import invoke
from roost.cache.policy import CacheConfig, KeyPolicy
from roost.cache.store import CacheEntry, CacheStore
from roost.errors import RenderError
from roost.http.request import Request
from roost.templating.integration import render_template
from roost.templating.returns import Template

logger = logging.getLogger("roost.cache")

# Render capability: request -> HTML (str or Template), sync or async
type Renderer = Callable[[Request], Any]


class CacheStatus(StrEnum):
    HIT = "HIT"
    MISS = "MISS"


@dataclass(frozen=True, slots=True)
class CacheMeta:
    """How a page was served."""

    status: CacheStatus
    age: float
    key: str

    @property
    def age_seconds(self) -> int:
        """Age truncated to whole seconds, as sent in ``X-Cache-Age``."""
        return int(self.age)


@dataclass(slots=True)
class CacheStats:
    """Hit, miss and render-failure counters."""

    hits: int = 0
    misses: int = 0
    render_failures: int = 0

    def as_dict(self) -> dict[str, int]:
        return asdict(self)


class RenderGateway:
    """Serve SSR pages from a ``CacheStore``, rendering on a miss."""

    __slots__ = (
        "_clock",
        "_config",
        "_kida_env",
        "_key_policy",
        "_render",
        "_render_timeout",
        "_store",
        "stats",
    )

    def __init__(
        self,
        store: CacheStore,
        render: Renderer,
        config: CacheConfig,
        *,
        key_policy: KeyPolicy | None = None,
        clock: Callable[[], float] = time.monotonic,
        render_timeout: float | None = None,
        kida_env: Environment | None = None,
    ) -> None:
        self._store = store
        self._render = render
        self._config = config
        self._key_policy = key_policy or KeyPolicy()
        self._clock = clock
        self._render_timeout = render_timeout
        self._kida_env = kida_env
        self.stats = CacheStats()

    @property
    def config(self) -> CacheConfig:
        return self._config

    @property
    def store(self) -> CacheStore:
        return self._store

    def key_for(self, request: Request) -> str:
        return self._key_policy.derive(request)

    def is_fresh(self, entry: CacheEntry, now: float) -> bool:
        """Fresh means strictly younger than the TTL."""
        return entry.age(now) < self._config.ttl

    async def serve(self, request: Request) -> tuple[str, CacheMeta]:
        """Return the page for *request* and how it was obtained.

        Raises ``RenderError`` if a miss could not be rendered.
        """
        key = self.key_for(request)
        now = self._clock()
        entry = self._lookup(key)

        if entry is not None and self.is_fresh(entry, now):
            age = entry.age(now)
            self.stats.hits += 1
            logger.debug("Cache HIT for %s (age: %.0fs)", key, age)
            return entry.content, CacheMeta(status=CacheStatus.HIT, age=age, key=key)

        self.stats.misses += 1
        logger.debug("Cache MISS for %s - rendering", key)
        content = await self._render_page(request, key)
        self._remember(key, content)
        return content, CacheMeta(status=CacheStatus.MISS, age=0.0, key=key)

    def invalidate(self, target: Request | str) -> bool:
        """Drop the cached page for a request or an explicit key."""
        key = target if isinstance(target, str) else self.key_for(target)
        return self._store.delete(key)

    # A broken store degrades to "always miss"; it never fails the request.

    def _lookup(self, key: str) -> CacheEntry | None:
        try:
            return self._store.get(key)
        except Exception:
            logger.exception("Cache lookup failed for %s; rendering uncached", key)
            return None

    def _remember(self, key: str, content: str) -> None:
        try:
            self._store.put(key, content, self._clock())
        except Exception:
            logger.exception("Cache write failed for %s; serving uncached", key)
            return
        logger.debug("Cached %s (total entries: %d)", key, self._store.size())

    async def _render_page(self, request: Request, key: str) -> str:
        try:
            if self._render_timeout is None:
                result = await invoke(self._render, request)
            else:
                with anyio.fail_after(self._render_timeout):
                    result = await invoke(self._render, request)
            return self._to_html(result)
        except TimeoutError as exc:
            self.stats.render_failures += 1
            raise RenderError(key, f"render timed out after {self._render_timeout}s") from exc
        except Exception as exc:
            self.stats.render_failures += 1
            raise RenderError(key) from exc

    def _to_html(self, result: Any) -> str:
        match result:
            case str():
                return result
            case Template():
                return render_template(self._kida_env, result)
            case _:
                msg = f"Renderer returned {type(result).__name__}; expected str or Template."
                raise TypeError(msg)
