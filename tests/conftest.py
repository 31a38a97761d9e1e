import pytest
from pathlib import Path

from pycsim.core.cache import CacheState
from pycsim.core.engine import AccessEngine
from pycsim.core.geometry import CacheGeometry


@pytest.fixture
def write_trace(tmp_path: Path):
    """Returns a helper that writes trace lines to a file and gives its path."""
    def _write(lines, name="test.trace"):
        path = tmp_path / name
        path.write_text("".join(line + "\n" for line in lines))
        return str(path)
    return _write


@pytest.fixture
def make_engine():
    """Returns a helper building a fresh engine for (s, E, b)."""
    def _make(s: int, E: int, b: int) -> AccessEngine:
        geometry = CacheGeometry(offset_bits=b, set_index_bits=s, lines_per_set=E)
        return AccessEngine(CacheState.create(geometry))
    return _make
