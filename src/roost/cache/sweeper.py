"""Background expiry sweeper.

Evicts stale entries on a fixed interval, independent of read traffic,
so memory does not grow for pages nobody asks for again.

Run it inside an anyio task group and stop it with ``stop()``::

    async with anyio.create_task_group() as tg:
        await tg.start(sweeper.run)
        ...
        sweeper.stop()

Stopping prevents the next iteration from starting. A sweep already in
progress is synchronous and always runs to completion. A stopped
sweeper can be started again.
"""

import logging
import time
from collections.abc import Callable
from dataclasses import dataclass

import anyio
from anyio.abc import TaskStatus

from roost.cache.policy import CacheConfig
from roost.cache.store import CacheStore

logger = logging.getLogger("roost.cache")


@dataclass(slots=True)
class SweepStats:
    """Plain counters for observability. Not a correctness signal."""

    runs: int = 0
    failures: int = 0
    last_removed: int = 0
    total_removed: int = 0


class ExpirySweeper:
    """Periodic scan-and-evict over a ``CacheStore``."""

    __slots__ = (
        "_clock",
        "_config",
        "_running",
        "_stop_event",
        "_stop_requested",
        "_store",
        "stats",
    )

    def __init__(
        self,
        store: CacheStore,
        config: CacheConfig,
        *,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._store = store
        self._config = config
        self._clock = clock
        self._stop_event: anyio.Event | None = None
        self._stop_requested = False
        self._running = False
        self.stats = SweepStats()

    @property
    def interval(self) -> float:
        return self._config.sweep_interval

    @property
    def running(self) -> bool:
        return self._running

    def sweep(self, now: float | None = None) -> int:
        """Delete every entry whose age is at least the TTL.

        Returns the number of entries removed.
        """
        if now is None:
            now = self._clock()
        ttl = self._config.ttl
        removed = 0
        for key, entry in self._store.all_entries():
            if entry.age(now) >= ttl and self._store.evict(key, entry):
                removed += 1

        self.stats.runs += 1
        self.stats.last_removed = removed
        self.stats.total_removed += removed
        if removed:
            logger.info("Swept %d expired page(s), %d cached", removed, self._store.size())
        return removed

    async def run(self, *, task_status: TaskStatus[None] = anyio.TASK_STATUS_IGNORED) -> None:
        """Sweep every ``interval`` seconds until ``stop()`` is called."""
        if self._running:
            msg = "Sweeper is already running."
            raise RuntimeError(msg)
        self._running = True
        stop_event = self._stop_event = anyio.Event()
        if self._stop_requested:
            stop_event.set()
        task_status.started()
        logger.debug("Sweeper started (interval=%.1fs, ttl=%.1fs)", self.interval, self._config.ttl)

        try:
            while not stop_event.is_set():
                with anyio.move_on_after(self.interval):
                    await stop_event.wait()
                if stop_event.is_set():
                    break
                self._sweep_once()
        finally:
            self._running = False
            self._stop_requested = False
            self._stop_event = None
            logger.debug("Sweeper stopped")

    def stop(self) -> None:
        """Signal the loop to exit before its next iteration."""
        self._stop_requested = True
        if self._stop_event is not None:
            self._stop_event.set()

    def _sweep_once(self) -> None:
        try:
            self.sweep()
        except Exception:
            self.stats.failures += 1
            logger.exception("Cache sweep failed; retrying in %.1fs", self.interval)
