"""Cross references: which words point at each location of a memory range."""

from __future__ import annotations

from collections import defaultdict
from dataclasses import dataclass, replace
from typing import Iterator

from .memory import Memory
from .words import HALFMASK


@dataclass(frozen=True)
class Reference:
    """A word at ``address`` whose left or right half names a location."""

    address: int
    left: bool = False
    out_of_order: bool = False

    def __str__(self) -> str:
        text = f" ({self.address:06o})" if self.left else f" {self.address:06o}"
        return text + ("!!!" if self.out_of_order else "")


def _index(memory: Memory) -> dict[int, list[Reference]]:
    addresses = sorted(
        {
            address
            for area in memory.areas()
            for address in range(area.start, area.end)
            if address <= HALFMASK
        }
    )
    index: dict[int, list[Reference]] = defaultdict(list)
    for address in addresses:
        data = memory.get(address)
        index[data & HALFMASK].append(Reference(address))
        index[(data >> 18) & HALFMASK].append(Reference(address, left=True))
    return index


def references(memory: Memory, address: int) -> list[Reference]:
    """Return every reference to an address, in ascending order of origin."""
    return list(_index(memory).get(address, []))


def analyse(memory: Memory, start: int, end: int) -> Iterator[str]:
    """Yield a line for each loaded location in start..end, inclusive.

    A location's first reference is flagged when it does not come after
    the first references of the locations listed before it.
    """
    index = _index(memory)
    ascending = 0
    for address in range(start, end + 1):
        data = memory.get(address)
        if data is None:
            continue
        refs = list(index.get(address, []))
        if refs:
            first = refs[0]
            if first.address > ascending:
                ascending = first.address
            else:
                refs[0] = replace(first, out_of_order=True)
        yield f"{address:06o}/{data:012o}: " + "".join(map(str, refs))