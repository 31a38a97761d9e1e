from __future__ import annotations
from dataclasses import dataclass, field

ADDRESS_BITS = 64


@dataclass(frozen=True)
class CacheGeometry:
    """Shape of a set-associative cache: 2^s sets of E lines, 2^b-byte blocks."""
    offset_bits: int = 4      # b
    set_index_bits: int = 4   # s
    lines_per_set: int = 1    # E

    # Derived properties
    block_size: int = field(init=False)
    set_count: int = field(init=False)
    tag_bits: int = field(init=False)

    def __post_init__(self):
        if self.offset_bits < 0:
            raise ValueError("Block offset bits must not be negative.")
        if self.set_index_bits < 0:
            raise ValueError("Set index bits must not be negative.")
        if not self.lines_per_set > 0:
            raise ValueError("Lines per set must be positive.")
        if not self.offset_bits + self.set_index_bits < ADDRESS_BITS:
            raise ValueError(
                f"Offset bits plus set index bits must leave a tag field "
                f"(b + s < {ADDRESS_BITS}), got {self.offset_bits + self.set_index_bits}."
            )

        # frozen dataclass: derived fields go through object.__setattr__
        object.__setattr__(self, "block_size", 1 << self.offset_bits)
        object.__setattr__(self, "set_count", 1 << self.set_index_bits)
        object.__setattr__(self, "tag_bits", ADDRESS_BITS - self.offset_bits - self.set_index_bits)

    @property
    def total_lines(self) -> int:
        return self.set_count * self.lines_per_set

    @property
    def capacity_bytes(self) -> int:
        return self.total_lines * self.block_size

    def describe(self) -> str:
        return (f"s={self.set_index_bits} E={self.lines_per_set} b={self.offset_bits} "
                f"({self.set_count} sets x {self.lines_per_set} lines x {self.block_size} B)")
