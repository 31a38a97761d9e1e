"""Address decomposition into tag, set index and block offset.

An address is laid out as ``| tag | set index (s bits) | offset (b bits) |``
on a 64-bit word. Every 64-bit value decodes; there are no error cases.
"""
from __future__ import annotations
from typing import Tuple

MASK_64 = (1 << 64) - 1


def decode(address: int, offset_bits: int, set_index_bits: int) -> Tuple[int, int]:
    """Splits an address into (set_index, tag).

    With ``set_index_bits == 0`` the cache has a single set, so the set index
    is always 0 and the tag is everything above the block offset.
    """
    address &= MASK_64
    set_mask = (1 << set_index_bits) - 1
    set_index = (address >> offset_bits) & set_mask
    tag = address >> (offset_bits + set_index_bits)
    return set_index, tag


def block_offset(address: int, offset_bits: int) -> int:
    """Returns the byte offset of the address inside its block."""
    return address & MASK_64 & ((1 << offset_bits) - 1)


def reconstruct_address(tag: int, set_index: int, offset_bits: int, set_index_bits: int, offset: int = 0) -> int:
    """Reassembles an address from its fields (block start when offset is 0)."""
    return (
        (tag << (offset_bits + set_index_bits))
        | (set_index << offset_bits)
        | offset
    ) & MASK_64
