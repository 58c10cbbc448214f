"""Binary and ASCII block output of the CROSS assembler, and what is made of it."""

from __future__ import annotations

import logging
import string
import struct
from dataclasses import dataclass
from typing import Iterable, Iterator

from .memory import Memory
from .words import unpack_bytes

log = logging.getLogger(__name__)

MEMORY_SIZE = 65536
_HEADER_LENGTH = 6


@dataclass(frozen=True)
class CrossBlock:
    """A loaded block: its type, load address and data bytes."""

    type: int
    address: int
    data: bytes
    checksum_ok: bool = True


class _EndOfInput(Exception):
    """The input ran out; block reading stops quietly."""


class _ByteReader:
    def __init__(self, data: bytes) -> None:
        self._data = data
        self._pos = 0
        self.checksum = 0

    def byte(self) -> int:
        if self._pos >= len(self._data):
            raise _EndOfInput
        value = self._data[self._pos]
        self._pos += 1
        self.checksum += value
        return value

    def word16(self) -> int:
        low = self.byte()
        return low | (self.byte() << 8)


def read_binary_blocks(words: Iterable[int]) -> Iterator[CrossBlock]:
    """Yield the binary blocks held in a stream of words.

    Reading stops at a block of zero length or at the end of the input.
    A bad checksum is logged and recorded in the block.
    """
    reader = _ByteReader(unpack_bytes(words))
    try:
        while True:
            reader.checksum = 0
            kind = reader.byte()
            while kind == 0:
                kind = reader.byte()
            kind |= reader.byte() << 8
            length = reader.word16() - _HEADER_LENGTH
            address = reader.word16()
            if length == 0:
                return
            if length < 0:
                raise ValueError(f"bad block length {length + _HEADER_LENGTH}")
            payload = bytes(reader.byte() for _ in range(length))
            expected = -(reader.checksum) & 0xFF
            stored = reader.byte()
            ok = (reader.checksum & 0xFF) == 0
            if not ok:
                log.warning("Bad checksum: %04X.", expected)
            del stored
            yield CrossBlock(kind, address, payload, ok)
    except _EndOfInput:
        return


class _HexReader:
    def __init__(self, text: str) -> None:
        self.text = text
        self.pos = 0
        self.checksum = 0

    def skip_to_block(self) -> bool:
        found = self.text.find(";", self.pos)
        if found == -1:
            self.pos = len(self.text)
            return False
        self.pos = found + 1
        return True

    def digit(self) -> int:
        if self.pos >= len(self.text):
            raise ValueError("Unexpected end of input file.")
        char = self.text[self.pos]
        self.pos += 1
        if char not in string.hexdigits:
            raise ValueError(f"Bad hex digit: {char}")
        return int(char, 16)

    def byte(self) -> int:
        high = self.digit()
        value = (high << 4) | self.digit()
        self.checksum += value
        return value

    def word16(self) -> int:
        high = self.byte()
        return (high << 8) | self.byte()


def read_ascii_blocks(text: str | bytes) -> Iterator[CrossBlock]:
    """Yield the blocks of the ASCII hex format, each introduced by ';'.

    Reading stops at a block of zero length or when no ';' is left;
    input that ends inside a block or holds a bad digit raises ValueError.
    """
    if isinstance(text, (bytes, bytearray)):
        text = bytes(text).decode("latin-1")
    reader = _HexReader(text)
    while reader.skip_to_block():
        reader.checksum = 0
        length = reader.byte()
        address = reader.word16()
        if length == 0:
            return
        payload = bytes(reader.byte() for _ in range(length))
        expected = reader.checksum & 0xFFFF
        ok = expected == reader.word16()
        if not ok:
            log.warning("Bad checksum: %04X.", expected)
        yield CrossBlock(0, address, payload, ok)


def read_cross(words: Iterable[int], memory: Memory) -> list[CrossBlock]:
    """Load the binary blocks of a word stream into memory, one byte per word."""
    blocks = []
    for block in read_binary_blocks(words):
        log.info(
            "Type %d, length %d, address %04x",
            block.type, len(block.data), block.address,
        )
        memory.add(block.address, list(block.data))
        blocks.append(block)
    return blocks


def atari_output(blocks: Iterable[CrossBlock]) -> bytes:
    """Write blocks as an Atari DOS binary file, 0xFFFF header included."""
    out = bytearray(b"\xff\xff")
    for block in blocks:
        last = block.address + len(block.data) - 1
        out += struct.pack("<HH", block.address & 0xFFFF, last & 0xFFFF)
        out += block.data
    return bytes(out)


def memory_image(
    blocks: Iterable[CrossBlock], start: int | None = None, end: int | None = None
) -> bytes:
    """Return the 64K memory image spanned by the blocks, end exclusive.

    ``start`` and ``end`` override the range the blocks cover.
    """
    memory = bytearray(MEMORY_SIZE)
    low, high = MEMORY_SIZE, 0
    for block in blocks:
        top = block.address + len(block.data)
        if block.address < 0 or top > MEMORY_SIZE:
            raise ValueError(f"block at {block.address:04X} is outside memory")
        memory[block.address:top] = block.data
        low = min(low, block.address)
        high = max(high, top)
    if start is not None:
        low = start
    if end is not None:
        high = end
    if low < 0 or high > MEMORY_SIZE:
        raise ValueError("image range is outside memory")
    log.info(
        "Memory image from %04X to %04X (%d bytes)", low, high, high - low
    )
    return bytes(memory[low:high])