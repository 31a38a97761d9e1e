"""Valgrind lackey trace reader.

Lines look like::

    I  0400d7d4,8
     L 7ff0005c8,8
     S 7ff0005c8,8
     M 0421c7f0,4

Instruction fetches start in column 0, data accesses are indented by one
space. Records are yielded lazily, one per line.
"""
from __future__ import annotations
import re
from pathlib import Path
from typing import Iterator, Optional

from ..core.address import MASK_64
from .record import AccessKind, AccessRecord

_RECORD_RE = re.compile(r"^\s*(?P<kind>[ILSM])\s+(?P<addr>[0-9a-fA-F]+),(?P<size>\d+)\s*$")


class TraceParseError(ValueError):
    """Raised for a trace line that is not a valid access record."""
    def __init__(self, message: str, lineno: int | None = None, line: str | None = None):
        self.lineno = lineno
        self.line = line
        if lineno is not None:
            message = f"line {lineno}: {message}"
        super().__init__(message)


def parse_line(line: str, lineno: int | None = None) -> Optional[AccessRecord]:
    """Parses one trace line. Blank lines and Valgrind banner lines give None."""
    stripped = line.strip()
    if not stripped or stripped.startswith("=="):
        return None

    m = _RECORD_RE.match(line.rstrip("\r\n"))
    if m is None:
        raise TraceParseError(f"malformed trace record {stripped!r}", lineno, line)

    address = int(m.group("addr"), 16)
    if address > MASK_64:
        raise TraceParseError(f"address {m.group('addr')} does not fit in 64 bits", lineno, line)

    return AccessRecord(kind=AccessKind(m.group("kind")), address=address, size=int(m.group("size")))


def iter_trace(path: str | Path) -> Iterator[AccessRecord]:
    """Yields the records of a trace file in order."""
    with open(path, "r") as f:
        for lineno, line in enumerate(f, start=1):
            record = parse_line(line, lineno)
            if record is not None:
                yield record
