"""Bounded transposition table with LRU eviction for memory-limited search."""

from __future__ import annotations

from collections import OrderedDict
from collections.abc import Hashable
from typing import NamedTuple

# Bound flags for alpha-beta entries
EXACT = 0
LOWER_BOUND = 1
UPPER_BOUND = 2


class SearchEntry(NamedTuple):
    depth: int
    value: float
    flag: int


class BoundedTranspositionTable:
    """LRU-evicting transposition table keyed by ``SimState.key()``."""

    def __init__(self, max_entries: int = 100_000) -> None:
        """Initialize the transposition table.

        Args:
            max_entries: Maximum number of entries before eviction
        """
        self._table: OrderedDict[Hashable, SearchEntry] = OrderedDict()
        self.max_entries = max_entries
        self.hits = 0
        self.misses = 0
        self.evictions = 0

    def get(self, key: Hashable) -> SearchEntry | None:
        """Get entry, moving it to the end if found (LRU)."""
        entry = self._table.get(key)
        if entry is None:
            self.misses += 1
            return None
        self._table.move_to_end(key)
        self.hits += 1
        return entry

    def put(self, key: Hashable, entry: SearchEntry) -> None:
        """Add entry, evicting the oldest if at capacity.

        A shallower result never replaces a deeper one for the same key.
        """
        existing = self._table.get(key)
        if existing is not None:
            self._table.move_to_end(key)
            if existing.depth > entry.depth:
                return
        elif len(self._table) >= self.max_entries:
            self._table.popitem(last=False)
            self.evictions += 1
        self._table[key] = entry

    def probe(
        self, key: Hashable, depth: int, alpha: float, beta: float
    ) -> float | None:
        """Return a stored value usable at ``depth`` within ``(alpha, beta)``,
        or None when the entry is missing, too shallow or only a bound that
        does not cut."""
        entry = self.get(key)
        if entry is None or entry.depth < depth:
            return None
        if entry.flag == EXACT:
            return entry.value
        if entry.flag == LOWER_BOUND and entry.value >= beta:
            return entry.value
        if entry.flag == UPPER_BOUND and entry.value <= alpha:
            return entry.value
        return None

    def __contains__(self, key: Hashable) -> bool:
        return key in self._table

    def __len__(self) -> int:
        return len(self._table)

    def clear(self) -> None:
        """Clear all entries and reset stats."""
        self._table.clear()
        self.hits = 0
        self.misses = 0
        self.evictions = 0

    def stats(self) -> dict:
        """Return usage statistics.

        Returns:
            Dictionary with entries, max_entries, hits, misses, evictions
            and hit_rate.
        """
        total_lookups = self.hits + self.misses
        hit_rate = self.hits / total_lookups if total_lookups > 0 else 0.0
        return {
            "entries": len(self._table),
            "max_entries": self.max_entries,
            "hits": self.hits,
            "misses": self.misses,
            "evictions": self.evictions,
            "hit_rate": hit_rate,
        }
