"""Tests for roost.cache.store — the in-memory page store."""

import pytest

from roost.cache.store import CacheEntry, CacheStore


class TestCacheEntry:
    def test_age(self) -> None:
        entry = CacheEntry(key="/a", content="A", created_at=10.0)
        assert entry.age(10.0) == 0.0
        assert entry.age(25.5) == 15.5

    def test_frozen(self) -> None:
        entry = CacheEntry(key="/a", content="A", created_at=0.0)
        with pytest.raises(AttributeError):
            entry.content = "B"  # type: ignore[misc]


class TestCacheStore:
    def test_get_missing_returns_none(self) -> None:
        store = CacheStore()
        assert store.get("/nope") is None

    def test_put_then_get(self) -> None:
        store = CacheStore()
        stored = store.put("/a", "<p>A</p>", 5.0)

        entry = store.get("/a")
        assert entry is stored
        assert entry.key == "/a"
        assert entry.content == "<p>A</p>"
        assert entry.created_at == 5.0

    def test_put_replaces_whole_entry(self) -> None:
        store = CacheStore()
        store.put("/a", "old", 0.0)
        store.put("/a", "new", 50.0)

        entry = store.get("/a")
        assert entry is not None
        assert entry.content == "new"
        assert entry.created_at == 50.0
        assert store.size() == 1

    def test_get_returns_stale_entries(self) -> None:
        """Staleness is the caller's call; the store hands back what it holds."""
        store = CacheStore()
        store.put("/old", "content", 0.0)
        assert store.get("/old") is not None

    def test_distinct_keys_independent(self) -> None:
        store = CacheStore()
        store.put("/a", "A", 0.0)
        store.put("/b", "B", 0.0)

        a = store.get("/a")
        b = store.get("/b")
        assert a is not None and a.content == "A"
        assert b is not None and b.content == "B"
        assert store.size() == 2

    def test_delete(self) -> None:
        store = CacheStore()
        store.put("/a", "A", 0.0)

        assert store.delete("/a") is True
        assert store.get("/a") is None
        assert store.size() == 0

    def test_delete_missing_is_not_an_error(self) -> None:
        store = CacheStore()
        assert store.delete("/missing") is False

    def test_all_entries_is_a_snapshot(self) -> None:
        store = CacheStore()
        store.put("/a", "A", 0.0)
        store.put("/b", "B", 1.0)

        snapshot = store.all_entries()
        store.delete("/a")
        store.put("/c", "C", 2.0)

        assert sorted(key for key, _ in snapshot) == ["/a", "/b"]
        assert store.size() == 2

    def test_clear(self) -> None:
        store = CacheStore()
        store.put("/a", "A", 0.0)
        store.put("/b", "B", 0.0)

        assert store.clear() == 2
        assert store.size() == 0

    def test_len_and_contains(self) -> None:
        store = CacheStore()
        store.put("/a", "A", 0.0)

        assert len(store) == 1
        assert "/a" in store
        assert "/b" not in store

    def test_evict_removes_matching_entry(self) -> None:
        store = CacheStore()
        entry = store.put("/a", "A", 0.0)

        assert store.evict("/a", entry) is True
        assert store.get("/a") is None

    def test_evict_keeps_replaced_entry(self) -> None:
        store = CacheStore()
        old = store.put("/a", "old", 0.0)
        store.put("/a", "new", 5.0)

        assert store.evict("/a", old) is False
        current = store.get("/a")
        assert current is not None
        assert current.content == "new"

    def test_evict_missing_key(self) -> None:
        store = CacheStore()
        entry = CacheEntry(key="/a", content="A", created_at=0.0)
        assert store.evict("/a", entry) is False
