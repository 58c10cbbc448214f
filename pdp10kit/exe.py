"""DEC sharable SAVE (EXE) files: a directory page followed by data pages."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from itertools import islice
from typing import Iterable

from .memory import Memory
from .words import DEC_PAGESIZE, HALFMASK

log = logging.getLogger(__name__)

# Only a single section is handled.
FILE_MAX_PAGES = (1 << 18) // DEC_PAGESIZE

_DIRECTORY = 0o1776
_ENTRY_VECTOR = 0o1775
_PDV = 0o1774
_END = 0o1777
_PAGE_MASK = (1 << 27) - 1


@dataclass(frozen=True)
class DirectoryEntry:
    """One directory entry mapping file pages to memory pages."""

    access: int
    file_page: int
    memory_page: int
    count: int


@dataclass
class ExeInfo:
    """What the directory of an EXE file says."""

    directory: list[DirectoryEntry] = field(default_factory=list)
    entry_vector_length: int | None = None
    entry_vector_address: int | None = None
    unknown_blocks: list[int] = field(default_factory=list)


def read_exe(words: Iterable[int], memory: Memory) -> ExeInfo:
    """Read the directory, load mapped pages into memory and describe the file."""
    stream = iter(words)
    position = 0
    info = ExeInfo()
    file_map: dict[int, int] = {}

    def take() -> int:
        nonlocal position
        try:
            word = next(stream)
        except StopIteration:
            raise ValueError("EXE directory is truncated") from None
        position += 1
        return word

    while True:
        word = take()
        block_type = word >> 18
        block_len = word & HALFMASK
        if block_type == _DIRECTORY:
            for _ in range(1, block_len, 2):
                first = take()
                second = take()
                entry = DirectoryEntry(
                    access=first >> 27,
                    file_page=first & _PAGE_MASK,
                    memory_page=second & _PAGE_MASK,
                    count=(second >> 27) + 1,
                )
                info.directory.append(entry)
                if entry.file_page == 0:
                    continue
                for j in range(entry.count):
                    if entry.file_page + j < FILE_MAX_PAGES:
                        file_map[entry.file_page + j] = entry.memory_page + j
                    else:
                        log.warning("too many pages; not loaded")
        elif block_type == _ENTRY_VECTOR:
            info.entry_vector_length = take()
            info.entry_vector_address = take()
        elif block_type == _END:
            break
        else:
            if block_type != _PDV:
                info.unknown_blocks.append(block_type)
            for _ in range(1, block_len):
                take()

    skipped = sum(1 for _ in islice(stream, max(0, DEC_PAGESIZE - position)))
    position += skipped
    position = max(position, DEC_PAGESIZE)

    while True:
        page = list(islice(stream, DEC_PAGESIZE))
        if len(page) < DEC_PAGESIZE:
            break
        target = file_map.get(position // DEC_PAGESIZE)
        if target is not None:
            memory.add(target * DEC_PAGESIZE, page)
        position += DEC_PAGESIZE

    return info