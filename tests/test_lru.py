"""Tests for the bounded LRU map."""

import pytest

from agentrecall.lru import BoundedLRU


class TestBoundedLRU:
    """Test capacity and recency behavior."""

    def test_set_and_get(self):
        """Basic set and get."""
        lru = BoundedLRU(3)
        lru.set("a", 1)
        assert lru.get("a") == 1
        assert "a" in lru
        assert len(lru) == 1

    def test_get_missing_returns_default(self):
        """Missing keys return the default."""
        lru = BoundedLRU(3)
        assert lru.get("missing") is None
        assert lru.get("missing", 42) == 42

    def test_rejects_non_positive_size(self):
        """Capacity must be at least one."""
        with pytest.raises(ValueError):
            BoundedLRU(0)

    def test_evicts_least_recently_inserted(self):
        """Oldest key goes first when nothing was read."""
        lru = BoundedLRU(2)
        lru.set("a", 1)
        lru.set("b", 2)
        lru.set("c", 3)

        assert "a" not in lru
        assert lru.keys() == ["b", "c"]

    def test_get_refreshes_recency(self):
        """Reading a key protects it from the next eviction."""
        lru = BoundedLRU(2)
        lru.set("a", 1)
        lru.set("b", 2)
        lru.get("a")
        lru.set("c", 3)

        assert "a" in lru
        assert "b" not in lru

    def test_peek_does_not_refresh_recency(self):
        """peek() leaves eviction order alone."""
        lru = BoundedLRU(2)
        lru.set("a", 1)
        lru.set("b", 2)
        assert lru.peek("a") == 1
        lru.set("c", 3)

        assert "a" not in lru

    def test_overwrite_keeps_single_key(self):
        """Setting an existing key replaces its value."""
        lru = BoundedLRU(2)
        lru.set("a", 1)
        lru.set("a", 2)

        assert len(lru) == 1
        assert lru.get("a") == 2

    def test_on_evict_receives_evicted_pair(self):
        """Eviction callback sees each dropped pair."""
        evicted = []
        lru = BoundedLRU(1, on_evict=lambda key, value: evicted.append((key, value)))
        lru.set("a", 1)
        lru.set("b", 2)
        lru.set("c", 3)

        assert evicted == [("a", 1), ("b", 2)]

    def test_explicit_removal_is_not_eviction(self):
        """pop() and clear() do not call the eviction callback."""
        evicted = []
        lru = BoundedLRU(3, on_evict=lambda key, value: evicted.append(key))
        lru.set("a", 1)
        lru.set("b", 2)

        assert lru.pop("a") == 1
        lru.clear()

        assert evicted == []
        assert len(lru) == 0

    def test_size_never_exceeds_capacity(self):
        """Capacity holds after every insertion."""
        lru = BoundedLRU(5)
        for i in range(50):
            lru.set(i % 13, i)
            assert len(lru) <= 5
