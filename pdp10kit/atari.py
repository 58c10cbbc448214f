"""Atari DOS binary output: 0xFFFF, then blocks with inclusive address ranges."""

from __future__ import annotations

import struct

from .memory import Memory


def write_atari(memory: Memory) -> bytes:
    """Write each memory area as an Atari block, one byte per word."""
    out = bytearray(b"\xff\xff")
    for area in memory.areas():
        out += struct.pack("<HH", area.start & 0xFFFF, (area.end - 1) & 0xFFFF)
        out += bytes(word & 0xFF for word in area.words)
    return bytes(out)