from __future__ import annotations
from typing import Callable, Iterable, List, Optional

from ..core.engine import AccessEngine, AccessResult
from ..core.stats import Statistics
from ..trace.record import AccessKind, AccessRecord

AccessCallback = Callable[[AccessRecord, List[AccessResult]], None]

# Number of cache accesses each record kind issues
ACCESSES_PER_KIND = {
    AccessKind.LOAD: 1,
    AccessKind.STORE: 1,
    AccessKind.MODIFY: 2,
}


def replay(records: Iterable[AccessRecord], engine: AccessEngine,
           on_access: Optional[AccessCallback] = None) -> Statistics:
    """
    Replays access records against the engine, strictly in order.

    Loads and stores access the cache once; a modify is a load then a store
    to the same address, so it accesses twice and the second access sees the
    state left by the first. Any other kind (instruction fetches) is skipped.
    """
    for record in records:
        count = ACCESSES_PER_KIND.get(record.kind, 0)
        if count == 0:
            continue

        results = [engine.access_address(record.address) for _ in range(count)]

        if on_access is not None:
            on_access(record, results)

    return engine.stats


def format_verbose(record: AccessRecord, results: List[AccessResult]) -> str:
    """Renders a record and its outcomes, e.g. ``M 20,1 miss hit``."""
    return " ".join([str(record)] + [r.label for r in results])
