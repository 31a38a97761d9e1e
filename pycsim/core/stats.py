from __future__ import annotations
from dataclasses import dataclass, field
from typing import Any, Dict, List

import numpy as np

from .cache import CacheAllocationError


def _counters(set_count: int) -> np.ndarray:
    try:
        return np.zeros(set_count, dtype=np.int64)
    except (MemoryError, ValueError) as e:
        raise CacheAllocationError(f"Could not allocate per-set counters for {set_count} sets: {e}") from e


@dataclass(eq=False)
class Statistics:
    """Hit/miss/eviction counters for one simulation run.

    The global counters are what the simulator reports. The per-set arrays
    break the same counts down by set index for the HTML/ASCII reports.
    """
    hits: int = 0
    misses: int = 0
    evictions: int = 0
    set_hits: np.ndarray = field(default_factory=lambda: _counters(0))
    set_misses: np.ndarray = field(default_factory=lambda: _counters(0))
    set_evictions: np.ndarray = field(default_factory=lambda: _counters(0))

    @classmethod
    def for_sets(cls, set_count: int) -> Statistics:
        return cls(
            set_hits=_counters(set_count),
            set_misses=_counters(set_count),
            set_evictions=_counters(set_count),
        )

    def ensure_sets(self, set_count: int):
        """Grows the per-set arrays to cover set_count sets, keeping existing counts."""
        if len(self.set_hits) >= set_count:
            return
        grown = []
        for counts in (self.set_hits, self.set_misses, self.set_evictions):
            new = _counters(set_count)
            new[:len(counts)] = counts
            grown.append(new)
        self.set_hits, self.set_misses, self.set_evictions = grown

    def record_hit(self, set_index: int):
        self.hits += 1
        self.set_hits[set_index] += 1

    def record_miss(self, set_index: int, evicted: bool):
        self.misses += 1
        self.set_misses[set_index] += 1
        if evicted:
            self.evictions += 1
            self.set_evictions[set_index] += 1

    @property
    def accesses(self) -> int:
        return self.hits + self.misses

    @property
    def hit_rate(self) -> float:
        return (self.hits / self.accesses) if self.accesses else 0.0

    @property
    def miss_rate(self) -> float:
        return (self.misses / self.accesses) if self.accesses else 0.0

    def as_tuple(self) -> tuple[int, int, int]:
        return self.hits, self.misses, self.evictions

    def per_set_rows(self, skip_idle: bool = True) -> List[Dict[str, Any]]:
        """One row per set, optionally dropping sets that were never accessed."""
        rows = []
        for i, (h, m, e) in enumerate(zip(self.set_hits, self.set_misses, self.set_evictions)):
            if skip_idle and h == 0 and m == 0:
                continue
            rows.append({"set": i, "hits": int(h), "misses": int(m), "evictions": int(e)})
        return rows

    def to_dict(self) -> Dict[str, Any]:
        return {
            "hits": self.hits,
            "misses": self.misses,
            "evictions": self.evictions,
            "accesses": self.accesses,
            "hit_rate": self.hit_rate,
            "miss_rate": self.miss_rate,
        }
