from __future__ import annotations
from dataclasses import dataclass
from typing import Optional

import numpy as np

from .address import decode
from .cache import CacheState
from .stats import Statistics


@dataclass(frozen=True)
class AccessResult:
    """Outcome of one cache access."""
    hit: bool
    evicted: bool
    set_index: int
    line: int
    evicted_tag: Optional[int] = None

    @property
    def label(self) -> str:
        if self.hit:
            return "hit"
        return "miss eviction" if self.evicted else "miss"


class AccessEngine:
    """
    Hit/miss/eviction decisions with LRU replacement.

    Every access, hit or miss, stamps exactly one line with the cache's
    ``global_clock`` and advances it, so recency values inside a set are
    unique and the smallest one is always the least recently used line.
    """
    def __init__(self, state: CacheState, stats: Statistics | None = None):
        self.state = state
        set_count = state.geometry.set_count
        if stats is None:
            stats = Statistics.for_sets(set_count)
        else:
            stats.ensure_sets(set_count)
        self.stats = stats

    def access(self, set_index: int, tag: int) -> AccessResult:
        state = self.state
        state.ensure_alive()
        row_valid = state.valid[set_index]
        row_tags = state.tags[set_index]

        matches = np.flatnonzero(row_valid & (row_tags == np.uint64(tag)))
        if matches.size:
            line = int(matches[0])
            state.stamp(set_index, line, tag)
            self.stats.record_hit(set_index)
            return AccessResult(hit=True, evicted=False, set_index=set_index, line=line)

        free = np.flatnonzero(~row_valid)
        if free.size:
            line = int(free[0])
            evicted_tag = None
        else:
            # recency values are unique, the minimum is the only LRU candidate
            line = int(np.argmin(state.recency[set_index]))
            evicted_tag = int(row_tags[line])

        evicted = evicted_tag is not None
        state.stamp(set_index, line, tag)
        self.stats.record_miss(set_index, evicted)
        return AccessResult(hit=False, evicted=evicted, set_index=set_index, line=line, evicted_tag=evicted_tag)

    def access_address(self, address: int) -> AccessResult:
        """Decodes an address with the cache geometry and accesses it."""
        g = self.state.geometry
        set_index, tag = decode(address, g.offset_bits, g.set_index_bits)
        return self.access(set_index, tag)
