"""DUMPER tapes: the TOPS-20 and TENEX backup format, listed, extracted or written."""

from __future__ import annotations

import datetime
import logging
import os
import re
import time
from dataclasses import dataclass, field
from enum import IntEnum
from pathlib import Path
from typing import Iterable, Iterator

from .words import WORDMASK, left_half, pack_bytes, right_half, unpack_bytes

log = logging.getLogger(__name__)

MAX = 518          # Words in a record.
PAGE = 512         # Data words in a record.
_DATA = 6          # Offset of the data area in a record.
_FDB = 0o200       # Offset of the FDB within the data area of a file header.
_FDB_LENGTH = 0o30
_EPOCH_DAYS = 0o117213  # Days from 1858-11-17 to 1970-01-01.
_SECONDS_PER_DAY = 24 * 60 * 60

_SAVESET_NUMBER = 0
_TAPE_NUMBER = 1
_PROTECTION = 0o777777
_ACCOUNT = "1"
_BYTE_SIZE = 36


class _Record(IntEnum):
    DATA = 0  # Contents of file page.
    TPHD = 1  # Saveset header.
    FLHD = 2  # File header.
    FLTR = 3  # File trailer.
    TPTR = 4  # Tape trailer.
    USR = 5   # User directory.
    CTPH = 6  # Continued saveset header.
    FILL = 7  # Padding.


@dataclass
class DumperEntry:
    """A file found on a DUMPER tape."""

    name: str
    written: int
    modified: float | None
    pages: int
    bytes: int
    bits_per_byte: int
    words: list[int] = field(default_factory=list)
    path: Path | None = None

    def __str__(self) -> str:
        stamp = _format_seconds(self.modified)
        return (
            f" {self.name:<40}{stamp} {self.pages:4d}"
            f" {self.bytes}({self.bits_per_byte})"
        )


def _cdivmod(a: int, b: int) -> tuple[int, int]:
    """Division truncating toward zero, with the matching remainder."""
    q = abs(a) // abs(b)
    if (a < 0) != (b < 0):
        q = -q
    return q, a - q * b


def unix_timestamp(timestamp: int, fmt: int = 4) -> float:
    """Convert a TOPS-20 (fmt > 0) or TENEX (fmt 0) timestamp to Unix seconds."""
    if timestamp == 0:
        return 0.0
    days = left_half(timestamp) - _EPOCH_DAYS
    ticks = right_half(timestamp)
    seconds = _SECONDS_PER_DAY * days
    if fmt > 0:
        seconds += (675 * ticks) // 2048
        micro = ((675 * ticks) % 2048) * 15625 // 32
        return seconds + micro / 1e6
    return float(seconds + ticks)


def tops20_timestamp(t: float, fmt: int = 4) -> int:
    """Convert Unix seconds to a TOPS-20 (fmt > 0) or TENEX (fmt 0) timestamp."""
    t = int(t)
    if t in (0, -1):
        return 0
    days, ticks = _cdivmod(t, _SECONDS_PER_DAY)
    days += _EPOCH_DAYS
    if fmt > 0:
        ticks = _cdivmod(ticks * 2048, 675)[0]
    return ((days << 18) | ticks) & WORDMASK


def _format_seconds(seconds: float | None) -> str:
    if seconds is None:
        return "****-**-** **:**"
    whole = int(seconds // 1)
    try:
        moment = datetime.datetime(1970, 1, 1) + datetime.timedelta(seconds=whole)
    except OverflowError:
        return str(whole)
    return moment.strftime("%Y-%m-%d %H:%M:%S")


def _format_timestamp(timestamp: int, fmt: int) -> str:
    if timestamp == 0:
        return _format_seconds(None)
    return _format_seconds(unix_timestamp(timestamp, fmt))


def checksum_add(checksum: int, word: int, fmt: int = 4) -> int:
    """Fold a word into a record checksum.

    Formats up to 4 use an end-around-carry sum, later ones rotate and add.
    """
    word &= WORDMASK
    if fmt <= 4:
        checksum += word
        if checksum & 0o1000000000000:
            checksum += 1
    else:
        checksum = (checksum << 1) | (checksum >> 35)
        checksum += word
    return checksum & WORDMASK


def read_asciz(words: Iterable[int]) -> str:
    """Decode five 7-bit characters per word up to the first NUL."""
    chars = []
    for word in words:
        for _ in range(5):
            code = (word >> 29) & 0o177
            if code == 0:
                return "".join(chars)
            chars.append(chr(code))
            word <<= 7
    return "".join(chars)


def write_asciz(text: str) -> list[int]:
    """Encode text as NUL-terminated 7-bit characters, five per word.

    Characters outside ASCII raise ValueError.
    """
    data = text.split("\0", 1)[0].encode("ascii") + b"\0"
    data += bytes(-len(data) % 5)
    words = []
    for start in range(0, len(data), 5):
        word = 0
        for code in data[start:start + 5]:
            word = (word << 7) | (code << 1)
        words.append(word)
    return words


def _lower(ch: str) -> str:
    return ch.lower() if ch.isascii() else ch


def mangle(path: str, fmt: int = 4) -> str:
    """Turn a TOPS-20 or TENEX file name into a relative Unix path."""
    colon = path.find(":")
    if colon <= 0 or path[colon - 1] == "\x16":
        rest = path
    else:
        rest = path[colon + 1:]

    in_dir = False
    version = True
    if rest.startswith("<"):
        in_dir = True
        rest = rest[1:]

    out = []
    chars = iter(rest)
    for ch in chars:
        if ch == ">":
            out.append("/" if in_dir else ">")
            in_dir = False
        elif ch == ".":
            out.append("/" if in_dir and fmt > 0 else ".")
        elif ch == ";":
            if fmt == 0 and version:
                out.append(";" if in_dir else ".")
            else:
                out.append(";")
            version = False
        elif ch == "/":
            out.append("\\")
        elif ch == "\x16":
            quoted = next(chars, None)
            if quoted is None:
                break
            out.append(_lower(quoted))
        else:
            out.append(_lower(ch))
    return "".join(out)


def _find(rest: str, separators: str) -> tuple[str | None, str]:
    if not rest:
        return None, rest
    for i, ch in enumerate(rest):
        if ch in separators:
            return rest[:i], rest[i + 1:]
    return rest, ""


_NUMBER = re.compile(r"\s*[+-]?\d+")


def unmangle(
    name: str,
    device: str | None = None,
    protection: int = _PROTECTION,
    account: str | None = None,
    generation: int = 1,
    fmt: int = 4,
) -> tuple[str, int]:
    """Build a TOPS-20 or TENEX file name from a Unix path.

    Returns the name and the generation, which a ;N or .N suffix of the
    path overrides.  TENEX names allow one directory at most; more raise
    ValueError.
    """
    *directories, rest = name.split("/")
    if len(directories) >= 2 and fmt == 0:
        raise ValueError("TENEX doesn't support subdirectories")

    file, rest = _find(rest, ".")
    kind, rest = _find(rest, ".;")
    version, rest = _find(rest, ";")
    if version:
        match = _NUMBER.match(version)
        if match:
            generation = int(match.group())

    parts = []
    if device is not None:
        parts.append(f"{device}:")
    if directories:
        parts.append("<" + ".".join(d.upper() for d in directories) + ">")
    if file is not None:
        parts.append(file.upper())
    parts.append(".")
    if kind is not None:
        parts.append(kind.upper())
    parts.append(f"{';' if fmt == 0 else '.'}{generation & 0xFFFFFFFF}")
    parts.append(f";P{protection:06o}")
    if account is not None:
        parts.append(f";A{account}")
    return "".join(parts), generation


def _blocks(records: Iterable[Iterable[int]]) -> Iterator[list[int]]:
    for record in records:
        words = [word & WORDMASK for word in record]
        for start in range(0, len(words), MAX):
            chunk = words[start:start + MAX]
            yield chunk + [0] * (MAX - len(chunk))


def _file_header(block: list[int], fmt: int) -> DumperEntry:
    name = read_asciz(block[_DATA:])
    cut = name.find(";")
    if fmt == 0 and cut != -1:
        cut = name.find(";", cut + 1)
    if cut != -1:
        name = name[:cut]
    fdb = block[_DATA + _FDB:]
    written = fdb[5]
    bits_per_byte = (fdb[0o11] >> 24) & 0o77
    entry = DumperEntry(
        name=name,
        written=written,
        modified=unix_timestamp(written, fmt) if written else None,
        pages=right_half(fdb[0o11]),
        bytes=fdb[0o12],
        bits_per_byte=bits_per_byte,
    )
    log.info("%s", entry)
    return entry


def _extract(entry: DumperEntry, directory: Path, fmt: int) -> None:
    relative = mangle(entry.name, fmt).lstrip("/")
    if not relative:
        log.warning("Empty file name; not extracted")
        return
    path = directory / relative
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_bytes(unpack_bytes(entry.words))
    if entry.modified is not None:
        try:
            os.utime(path, (entry.modified, entry.modified))
        except (OverflowError, OSError, ValueError):
            log.warning("Bad timestamp for %s", path)
    entry.path = path


def read_tape(
    records: Iterable[Iterable[int]],
    fmt: int = 4,
    extract_dir: str | os.PathLike | None = None,
) -> list[DumperEntry]:
    """List the files of a tape given as records of words.

    Empty records are tape marks.  With ``extract_dir`` the files are
    also written below it, four bytes to a word.  An unknown record type
    raises ValueError.
    """
    blocks = _blocks(records)
    header = next(blocks, None)
    if header is None:
        return []
    log.info(
        "DUMPER tape #%d, %s, %s",
        right_half(header[2]),
        read_asciz(header[_DATA + 3:]),
        _format_timestamp(header[_DATA + 2], fmt),
    )

    entries: list[DumperEntry] = []
    current: DumperEntry | None = None
    remaining = 0
    word_bytes = 0
    for block in blocks:
        kind = (0o1000000000000 - block[4]) & WORDMASK
        if kind == _Record.DATA:
            if current is None:
                continue
            for word in block[_DATA:_DATA + PAGE]:
                if remaining < 0:
                    break
                current.words.append(word)
                remaining -= word_bytes
        elif kind == _Record.FLHD:
            current = _file_header(block, fmt)
            entries.append(current)
            remaining = current.bytes
            bpb = current.bits_per_byte
            word_bytes = 36 // bpb if bpb else 0
        elif kind == _Record.FLTR:
            current = None
        elif kind in (_Record.TPHD, _Record.TPTR, _Record.USR,
                      _Record.CTPH, _Record.FILL):
            continue
        else:
            raise ValueError("Unknown record type.")

    if extract_dir is not None:
        for entry in entries:
            _extract(entry, Path(extract_dir), fmt)
    return entries


def write_tape(paths: Iterable[str | os.PathLike], fmt: int = 4) -> list[list[int]]:
    """Write files as the records of a DUMPER tape; empty records are tape marks.

    File contents are taken four bytes to a word.
    """
    records: list[list[int]] = []
    block = [0] * MAX
    record_number = 0
    page_number = 0

    def write_record(kind: _Record) -> None:
        nonlocal record_number
        log.debug("Write record %s, page %d, record %d",
                  kind.name, page_number, record_number)
        block[0:_DATA] = [0] * _DATA
        block[2] = (_SAVESET_NUMBER << 18) | _TAPE_NUMBER
        if fmt > 0:
            block[2] |= _SAVESET_NUMBER
        block[3] = page_number
        block[4] = (-kind) & WORDMASK
        block[5] = record_number
        record_number += 1
        checksum = 0
        for word in block:
            checksum = checksum_add(checksum, word, fmt)
        block[0] = checksum ^ WORDMASK
        records.append([word & WORDMASK for word in block])
        block[:] = [0] * MAX

    def put(offset: int, words: list[int]) -> None:
        block[_DATA + offset:_DATA + offset + len(words)] = words

    def write_file(name: str) -> None:
        nonlocal page_number, record_number
        path = Path(name)
        st = path.stat()
        words = pack_bytes(path.read_bytes())
        size = len(words)
        file_name, generation = unmangle(
            name, None, _PROTECTION, _ACCOUNT, 1, fmt
        )
        log.info("  %s", file_name)

        fdb = [0] * _FDB_LENGTH
        fdb[0o4] = _PROTECTION | (0o500000 << 18)
        fdb[0o5] = tops20_timestamp(st.st_mtime, fmt)
        fdb[0o7] = (generation << 18) & WORDMASK
        fdb[0o11] = (_BYTE_SIZE << 24) | (size + PAGE - 1) // PAGE
        fdb[0o12] = size * (36 // _BYTE_SIZE)
        fdb[0o13] = tops20_timestamp(st.st_ctime, fmt)
        fdb[0o14] = tops20_timestamp(st.st_mtime, fmt)
        fdb[0o15] = tops20_timestamp(st.st_atime, fmt)

        put(0, write_asciz(file_name))
        put(_FDB, fdb)
        page_number = 0
        write_record(_Record.FLHD)

        for start in range(0, size, PAGE):
            put(0, words[start:start + PAGE])
            write_record(_Record.DATA)
            page_number += 1

        put(0, fdb)
        page_number = 0
        write_record(_Record.FLTR)
        if fmt == 0:
            records.append([])
            record_number += 1

    if fmt == 0:
        record_number = 2
        message = 0
    else:
        record_number = 1
        put(0, [fmt, 3, tops20_timestamp(time.time(), fmt)])
        message = 3
    put(message, write_asciz("Saveset name"))
    write_record(_Record.TPHD)
    if fmt == 0:
        records.append([])
        record_number += 1

    for name in paths:
        write_file(os.fspath(name))

    write_record(_Record.TPTR)
    records.append([])
    return records