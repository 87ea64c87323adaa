"""In-memory store of rendered pages.

The store answers "what do we hold for this key" and nothing more:
freshness is judged by the caller, which lets it report an entry's age.
Every operation is synchronous and runs under one lock, so the mapping
is guarded as a single unit even under free-threaded workers.
"""

import threading
from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class CacheEntry:
    """One rendered page. Immutable once stored."""

    key: str
    content: str
    created_at: float

    def age(self, now: float) -> float:
        """Seconds since insertion, as measured by the store's clock."""
        return now - self.created_at


class CacheStore:
    """Mapping from cache key to ``CacheEntry``.

    Entries are only ever inserted whole or removed; a render under an
    existing key replaces the old entry outright.
    """

    __slots__ = ("_entries", "_lock")

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._entries: dict[str, CacheEntry] = {}

    def get(self, key: str) -> CacheEntry | None:
        """Return the entry for *key*, stale or not, or ``None``."""
        with self._lock:
            return self._entries.get(key)

    def put(self, key: str, content: str, now: float) -> CacheEntry:
        """Insert or replace the entry for *key*, created at *now*."""
        entry = CacheEntry(key=key, content=content, created_at=now)
        with self._lock:
            self._entries[key] = entry
        return entry

    def delete(self, key: str) -> bool:
        """Remove the entry for *key*. Returns False if there was none."""
        with self._lock:
            return self._entries.pop(key, None) is not None

    def evict(self, key: str, entry: CacheEntry) -> bool:
        """Remove *entry* only if it is still the one stored under *key*.

        A page re-rendered after *entry* was read is left in place.
        """
        with self._lock:
            if self._entries.get(key) is not entry:
                return False
            del self._entries[key]
            return True

    def size(self) -> int:
        """Number of entries held, including stale ones not yet swept."""
        with self._lock:
            return len(self._entries)

    def all_entries(self) -> list[tuple[str, CacheEntry]]:
        """Snapshot of every ``(key, entry)`` pair.

        Mutating the store afterwards does not affect the returned list.
        """
        with self._lock:
            return list(self._entries.items())

    def clear(self) -> int:
        """Drop every entry. Returns how many were dropped."""
        with self._lock:
            dropped = len(self._entries)
            self._entries.clear()
        return dropped

    def __len__(self) -> int:
        return self.size()

    def __contains__(self, key: object) -> bool:
        with self._lock:
            return key in self._entries

    def __repr__(self) -> str:
        return f"<CacheStore entries={self.size()}>"
