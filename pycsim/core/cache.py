from __future__ import annotations
from dataclasses import dataclass
from typing import List

import numpy as np

from .geometry import CacheGeometry


class CacheAllocationError(MemoryError):
    """Raised when the backing arrays for a cache cannot be allocated."""


@dataclass
class CacheLine:
    """Snapshot of a single line in a cache set."""
    valid: bool = False
    tag: int = 0
    recency: int = 0


class CacheState:
    """
    All simulated cache content.

    Lines are kept in flat ``(set_count, lines_per_set)`` arrays rather than
    per-line objects. Position inside a set carries no LRU meaning; recency
    is the ``global_clock`` value stamped on the line at its last access.
    """
    def __init__(self, geometry: CacheGeometry, valid: np.ndarray, tags: np.ndarray, recency: np.ndarray):
        self.geometry = geometry
        self.valid = valid
        self.tags = tags
        self.recency = recency
        self.global_clock = 1

    @classmethod
    def create(cls, geometry: CacheGeometry) -> CacheState:
        """Allocates set_count sets of lines_per_set invalid, zeroed lines."""
        shape = (geometry.set_count, geometry.lines_per_set)
        try:
            valid = np.zeros(shape, dtype=np.bool_)
            tags = np.zeros(shape, dtype=np.uint64)
            recency = np.zeros(shape, dtype=np.uint64)
        except (MemoryError, ValueError) as e:
            # numpy raises ValueError for shapes it cannot even describe
            raise CacheAllocationError(
                f"Could not allocate space for cache ({geometry.describe()}): {e}"
            ) from e
        return cls(geometry, valid, tags, recency)

    def destroy(self):
        """Releases the backing arrays. The state is unusable afterwards."""
        self.valid = None
        self.tags = None
        self.recency = None

    @property
    def destroyed(self) -> bool:
        return self.valid is None

    def ensure_alive(self):
        if self.destroyed:
            raise RuntimeError("Cache state has been destroyed.")

    def lines(self, set_index: int) -> List[CacheLine]:
        """Returns a copy of the lines of one set, in index order."""
        self.ensure_alive()
        return [
            CacheLine(valid=bool(v), tag=int(t), recency=int(r))
            for v, t, r in zip(self.valid[set_index], self.tags[set_index], self.recency[set_index])
        ]

    def contains(self, set_index: int, tag: int) -> bool:
        """Checks residency without touching recency."""
        self.ensure_alive()
        return bool(np.any(self.valid[set_index] & (self.tags[set_index] == np.uint64(tag))))

    def occupancy(self) -> int:
        """Number of valid lines across the whole cache."""
        self.ensure_alive()
        return int(self.valid.sum())

    def stamp(self, set_index: int, line: int, tag: int):
        """Fills or refreshes a line with the current clock, then advances it."""
        self.valid[set_index, line] = True
        self.tags[set_index, line] = tag
        self.recency[set_index, line] = self.global_clock
        self.global_clock += 1
