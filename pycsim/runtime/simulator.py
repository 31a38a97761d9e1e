from __future__ import annotations
import logging
from typing import Optional

from ..config import SimConfig
from ..core.cache import CacheState
from ..core.engine import AccessEngine
from ..core.stats import Statistics
from ..trace.parser import iter_trace
from ..utils.logging import get_logger
from .replayer import AccessCallback, format_verbose, replay

logger = get_logger(__name__)


def run(config: SimConfig, on_access: Optional[AccessCallback] = None) -> Statistics:
    """
    Runs one simulation for the given configuration.

    Builds the cache, streams the trace through the replayer and tears the
    cache down again. Allocation failures and trace errors propagate.
    """
    geometry = config.geometry()
    logger.info(f"Simulating {geometry.describe()} on trace '{config.trace_file}'")

    state = CacheState.create(geometry)

    callback = on_access
    if logger.isEnabledFor(logging.DEBUG):
        def callback(record, results):
            logger.debug(format_verbose(record, results))
            if on_access is not None:
                on_access(record, results)

    try:
        engine = AccessEngine(state)
        stats = replay(iter_trace(config.trace_file), engine, on_access=callback)
        logger.info(f"Replay finished: {stats.accesses} accesses, "
                    f"{state.occupancy()}/{geometry.total_lines} lines valid")
    finally:
        state.destroy()

    return stats
