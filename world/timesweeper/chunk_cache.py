"""
LRU cache for generated chunks.

Generated chunk data never changes, so it is safe to drop and regenerate;
the cache only bounds memory for an unbounded world.
"""

import logging
from collections import OrderedDict
from typing import Callable, Generic, Hashable, TypeVar

from world.timesweeper.validation import require_positive

logger = logging.getLogger(__name__)

V = TypeVar("V")


class ChunkCache(Generic[V]):
    """
    Fixed-capacity least-recently-used map.

    OrderedDict keeps recency order: the front is the least recently used,
    move_to_end() promotes and popitem(last=False) evicts, both O(1).
    """

    def __init__(self, capacity: int = 200):
        self.capacity = require_positive(capacity, "capacity")
        self._entries: "OrderedDict[Hashable, V]" = OrderedDict()
        self.hits = 0
        self.misses = 0
        self.evictions = 0

    def get_or_create(self, key: Hashable, factory: Callable[[], V]) -> V:
        """
        Return the cached value for key, creating it on a miss.

        Args:
            key: Cache key, e.g. (chunk_x, chunk_y)
            factory: Builds the value when it is not cached

        Returns:
            The cached or newly created value
        """
        if key in self._entries:
            self._entries.move_to_end(key)
            self.hits += 1
            return self._entries[key]

        self.misses += 1
        value = factory()
        self._entries[key] = value
        if len(self._entries) > self.capacity:
            evicted_key, _ = self._entries.popitem(last=False)
            self.evictions += 1
            logger.debug("Evicted chunk %s from cache", evicted_key)
        return value

    def clear(self) -> None:
        self._entries.clear()

    def keys(self):
        """Keys from least to most recently used."""
        return list(self._entries.keys())

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, key: Hashable) -> bool:
        return key in self._entries
