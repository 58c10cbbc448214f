"""Nonsharable (compressed) SAVE files: IOWD blocks ended by a start word."""

from __future__ import annotations

from typing import Iterable

from .memory import Memory
from .words import DEC_PAGESIZE, HALFMASK, JRST, SIGNBIT, WORDMASK


def read_csave(words: Iterable[int], memory: Memory) -> tuple[int, int]:
    """Load data blocks into memory.

    Returns the halves (left, right) of the terminating word, which give
    the entry vector length and address.
    """
    stream = iter(words)

    def take() -> int:
        try:
            return next(stream)
        except StopIteration:
            raise ValueError("SAVE file ends inside a block") from None

    while True:
        word = take()
        if not word & SIGNBIT:
            break
        length = 0o1000000 - ((word >> 18) & HALFMASK)
        address = (word & HALFMASK) + 1
        memory.add(address, [take() for _ in range(length)])

    return (word >> 18) & HALFMASK, word & HALFMASK


def write_csave(memory: Memory, start_instruction: int) -> list[int]:
    """Write memory as IOWD blocks of at most one page, then a JRST start."""
    out: list[int] = []
    for area in memory.areas():
        for offset in range(0, len(area.words), DEC_PAGESIZE):
            chunk = area.words[offset:offset + DEC_PAGESIZE]
            address = area.start + offset
            out.append(((-len(chunk) << 18) | (address - 1)) & WORDMASK)
            out.extend(chunk)
    out.append(JRST + (start_instruction & HALFMASK))
    return out