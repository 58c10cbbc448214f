"""Accounting file reports, in the 1975 and the 1978 record layouts."""

from __future__ import annotations

from itertools import chain, islice
from typing import Iterable, Iterator

from .decdate import format_dec_timestamp
from .words import HALFMASK, SIGNBIT, WORDMASK, sixbit_to_ascii

_OLD_HEADER = 0o777777777777
_OLD_TRAILER = 0o777777777776
_DETACHED = 0o777777777777
_NEW_MARK = 0o400000000020
_SKIPPED_RECORDS = {0o440, 0o450, 0o510, 0o600, 0o610, 0o640}
_NEW_RECORDS = {0o500, 0o540}
_COLUMNS = (
    "  PRJ,PRG  Job  Login             Logout            Line  Runtime   Kcticks"
)


def format_timestamp(date: int, minutes: int) -> str:
    """Format a DEC date and minutes past midnight."""
    return f"{format_dec_timestamp(date)} {minutes // 60:02d}:{minutes % 60:02d}"


def format_ppn(word: int) -> str:
    """Format a SIXBIT project-programmer word as PRJ,PRG."""
    text = sixbit_to_ascii(word)
    return f"{text[:3]},{text[3:6]}"


def format_ascii(word: int) -> str:
    """Return the five 7-bit characters of a word, with '.' for controls."""
    chars = []
    for _ in range(5):
        code = (word >> 29) & 0o177
        chars.append("." if code < 32 or code == 0o177 else chr(code))
        word <<= 7
    return "".join(chars)


def _stamp(word: int) -> str:
    return format_timestamp(word >> 18, word & 0o7777)


class _Report:
    def __init__(self, stream: Iterator[int]) -> None:
        self.stream = stream
        self.lines: list[str] = []
        self.started = "initiated"

    def take(self) -> int:
        try:
            return next(self.stream)
        except StopIteration:
            raise ValueError("accounting file ends inside a record") from None

    def skip(self, count: int | None) -> None:
        for _ in islice(self.stream, count):
            pass

    def header(self, first: int) -> None:
        count = 1
        line = f"Accounting {self.started}:  "
        self.started = "restarted"
        line += _stamp(self.take()) + "  "
        count += 1
        while True:
            word = self.take()
            count += 1
            line += format_ascii(word)
            if not word & 0o376:
                break
        self.lines += [line, _COLUMNS]
        if first >> 18 == 0o400000:
            self.skip(max(0, (first & HALFMASK) - count))

    def trailer(self) -> None:
        self.lines.append("Accounting stopped: " + _stamp(self.take()))

    def old_record(self, ppn: int) -> None:
        line = "  " + format_ppn(ppn)
        job = self.take()
        if job & SIGNBIT:
            line += f"  {0o1000000000000 - (job & WORDMASK):3o}  "
        else:
            line += f"  {job:3o}  "
        line += _stamp(self.take()) + "  "
        line += _stamp(self.take()) + "  "
        tty = self.take()
        line += "DET  " if tty == _DETACHED else f"{tty & HALFMASK:3o}  "
        line += f"{self.take():8d}  "
        line += f"{self.take():8d} "
        if job & SIGNBIT:
            self.take()
            line += " " + sixbit_to_ascii(self.take())
        self.lines.append(line)

    def new_record(self, first: int) -> None:
        time = self.take()
        login = self.take()
        line = "  " + format_ppn(self.take())
        line += f"  {(first >> 18) & 0o777:3o}  "
        line += _stamp(login) + "  " + _stamp(time)
        line += f"  {(first >> 9) & 0o777:3o}  "
        line += f"{self.take():8d}  "
        line += f"{self.take():8d}  "
        self.take()
        self.take()
        line += " " + sixbit_to_ascii(self.take())
        self.lines.append(line)

    def old_format(self, first: int) -> None:
        for word in chain([first], self.stream):
            word &= WORDMASK
            if word == _OLD_HEADER:
                self.header(word)
            elif word == _OLD_TRAILER:
                self.trailer()
            else:
                self.old_record(word)

    def new_format(self, first: int) -> None:
        for word in chain([first], self.stream):
            length = word & 0o777
            code = (word >> 27) & 0o777
            if code == 0o400:
                self.header(word)
            elif code in _SKIPPED_RECORDS:
                self.skip(length - 1 if length else None)
            elif code in _NEW_RECORDS:
                self.new_record(word)
            else:
                self.lines.append(f"Unknown: {code:03o}")


def report(words: Iterable[int]) -> list[str]:
    """Return the report lines for an accounting file.

    Input in neither layout gives no lines; a record cut short raises
    ValueError.
    """
    stream = iter(words)
    try:
        first = next(stream) & WORDMASK
    except StopIteration:
        return []
    state = _Report(stream)
    if first == _OLD_HEADER:
        state.old_format(first)
    elif first == _NEW_MARK:
        state.new_format(first)
    return state.lines