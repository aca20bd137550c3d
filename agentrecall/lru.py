"""Fixed-capacity map with least-recently-used eviction."""

from __future__ import annotations

from typing import Callable, Generic, Iterator, TypeVar

K = TypeVar("K")
V = TypeVar("V")


class BoundedLRU(Generic[K, V]):
    """Recency-ordered map holding at most ``max_size`` keys.

    ``set`` and ``get`` both mark a key as most recently used; ``peek`` and
    iteration do not. Once a ``set`` pushes the size past ``max_size``, the
    least recently used pairs are dropped and handed to ``on_evict``.
    Explicit ``pop`` and ``clear`` are removals, not evictions, and never
    invoke the callback.
    """

    def __init__(
        self,
        max_size: int,
        on_evict: Callable[[K, V], None] | None = None,
    ):
        """Initialize the map.

        Args:
            max_size: Maximum number of keys held
            on_evict: Called with (key, value) for every capacity eviction
        """
        if max_size < 1:
            raise ValueError(f"max_size must be at least 1, got {max_size}")
        self.max_size = max_size
        self._on_evict = on_evict
        # dict preserves insertion order: first key is least recently used
        self._data: dict[K, V] = {}

    def set(self, key: K, value: V) -> None:
        """Insert or overwrite a key, evicting LRU keys beyond capacity."""
        self._data.pop(key, None)
        self._data[key] = value

        while len(self._data) > self.max_size:
            oldest_key = next(iter(self._data))
            oldest_value = self._data.pop(oldest_key)
            if self._on_evict is not None:
                self._on_evict(oldest_key, oldest_value)

    def get(self, key: K, default: V | None = None) -> V | None:
        """Return the value for key and mark it most recently used."""
        if key not in self._data:
            return default
        value = self._data.pop(key)
        self._data[key] = value
        return value

    def peek(self, key: K, default: V | None = None) -> V | None:
        """Return the value for key without touching its recency."""
        return self._data.get(key, default)

    def pop(self, key: K, default: V | None = None) -> V | None:
        """Remove key and return its value."""
        return self._data.pop(key, default)

    def clear(self) -> None:
        self._data.clear()

    def keys(self) -> list[K]:
        return list(self._data)

    def values(self) -> list[V]:
        return list(self._data.values())

    def items(self) -> list[tuple[K, V]]:
        return list(self._data.items())

    def __contains__(self, key: object) -> bool:
        return key in self._data

    def __len__(self) -> int:
        return len(self._data)

    def __iter__(self) -> Iterator[K]:
        return iter(list(self._data))
