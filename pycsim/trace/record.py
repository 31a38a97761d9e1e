from __future__ import annotations
from dataclasses import dataclass
from enum import Enum


class AccessKind(str, Enum):
    """Operation kinds found in a Valgrind lackey trace."""

    # Data accesses
    LOAD = "L"
    STORE = "S"
    MODIFY = "M"  # load followed by a store to the same address

    # Instruction fetch, not simulated
    INSTRUCTION = "I"

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class AccessRecord:
    """One parsed trace entry."""
    kind: AccessKind
    address: int
    size: int = 0

    def __str__(self) -> str:
        return f"{self.kind} {self.address:x},{self.size}"
