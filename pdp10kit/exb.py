"""EXB files: little-endian blocks of five-byte words packed in 8-bit bytes."""

from __future__ import annotations

from typing import Iterable

from .memory import Memory
from .words import HALFMASK, JRST, pack_bytes, unpack_bytes


def read_exb(words: Iterable[int], memory: Memory) -> int:
    """Load blocks into memory and return the start instruction."""
    data = unpack_bytes(words)
    pos = 0

    def take(count: int) -> int:
        nonlocal pos
        if pos + count > len(data):
            raise ValueError("Unexpected end of file.")
        value = int.from_bytes(data[pos:pos + count], "little")
        pos += count
        return value

    while True:
        length = take(2)
        address = take(4)
        if length < 4:
            raise ValueError("Unexpected end of file.")
        if length == 4:
            return JRST + address
        count = (length - 4) // 5
        core = [take(5) for _ in range(count)]
        if count & 1:
            pos += 1
        memory.add(address, core)


def _block(address: int, words: list[int]) -> bytes:
    out = bytearray()
    out += ((5 * len(words) + 4) & 0xFFFF).to_bytes(2, "little")
    out += (address & 0xFFFFFFFF).to_bytes(4, "little")
    for word in words:
        out += (word & 0xFFFFFFFF).to_bytes(4, "little")
        out.append((word >> 32) & 0xFF)
    if len(words) & 1:
        out.append(0)
    return bytes(out)


def write_exb(memory: Memory, start_instruction: int) -> list[int]:
    """Write memory as EXB blocks, ending with a start block if one is set."""
    out = bytearray()
    for area in memory.areas():
        out += _block(area.start, area.words)
    start = start_instruction & HALFMASK
    if start:
        out += _block(start, [])
    return pack_bytes(bytes(out))