"""36-bit word helpers: halves, SIXBIT text and 8-bit byte packing."""

from __future__ import annotations

from typing import Iterable

WORDMASK = 0o777777777777
SIGNBIT = 0o400000000000
HALFMASK = 0o777777

ITS_PAGESIZE = 1024
DEC_PAGESIZE = 512

JRST = 0o254000000000
JRST_1 = JRST + 1
JUMPA = 0o324000000000

# Bit positions of the four 8-bit bytes held in one word, in stream order.
_BYTE_SHIFTS = (18, 26, 0, 8)


def left_half(word: int) -> int:
    """Return the left 18 bits of a word."""
    return (word >> 18) & HALFMASK


def right_half(word: int) -> int:
    """Return the right 18 bits of a word."""
    return word & HALFMASK


def sixbit_to_ascii(word: int) -> str:
    """Decode the six SIXBIT characters of a word."""
    return "".join(
        chr(((word >> (30 - 6 * i)) & 0o77) + 32) for i in range(6)
    )


def ascii_to_sixbit(text: str) -> int:
    """Encode up to six characters as SIXBIT, left aligned.

    Lower case letters are folded to upper case; characters with no
    SIXBIT code raise ValueError.
    """
    word = 0
    for i, ch in enumerate(text[:6].upper()):
        code = ord(ch) - 32
        if not 0 <= code < 64:
            raise ValueError(f"character {ch!r} has no SIXBIT code")
        word |= code << (30 - 6 * i)
    return word


def unpack_bytes(words: Iterable[int]) -> bytes:
    """Split words into four 8-bit bytes each, in stream order."""
    return bytes(
        (word >> shift) & 0o377 for word in words for shift in _BYTE_SHIFTS
    )


def pack_bytes(data: bytes) -> list[int]:
    """Pack bytes four to a word; a short final group is zero padded."""
    return [
        sum(byte << shift for byte, shift in zip(data[i:i + 4], _BYTE_SHIFTS))
        for i in range(0, len(data), 4)
    ]