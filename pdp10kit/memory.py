"""A sparse PDP-10 core image made of contiguous areas."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable


@dataclass
class Area:
    """A run of consecutive words starting at ``start``."""

    start: int
    words: list[int] = field(default_factory=list)

    @property
    def end(self) -> int:
        """First address past the area."""
        return self.start + len(self.words)

    def __contains__(self, address: int) -> bool:
        return self.start <= address < self.end


class Memory:
    """Core image; where areas overlap the most recently added one wins."""

    def __init__(self) -> None:
        self._areas: list[Area] = []

    def add(self, address: int, words: Iterable[int]) -> Area:
        """Add an area of words at an address and return it."""
        if address < 0:
            raise ValueError(f"negative address {address}")
        area = Area(address, list(words))
        self._areas.append(area)
        return area

    def _find(self, address: int) -> Area | None:
        for area in reversed(self._areas):
            if address in area:
                return area
        return None

    def get(self, address: int) -> int | None:
        """Return the word at an address, or None if nothing is loaded there."""
        area = self._find(address)
        if area is None:
            return None
        return area.words[address - area.start]

    def set(self, address: int, value: int) -> None:
        """Store a word, creating a one-word area if the address is empty."""
        area = self._find(address)
        if area is None:
            self.add(address, [value])
        else:
            area.words[address - area.start] = value

    def areas(self) -> list[Area]:
        """Return the areas ordered by start address."""
        return sorted(self._areas, key=lambda area: area.start)