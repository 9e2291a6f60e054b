"""
MIT License
Copyright (c) 2026 arpan404
See LICENSE file for full license text.

Palette result types returned by color extraction.
"""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass, field


@dataclass(frozen=True, slots=True)
class PaletteColor:
    """One palette entry; `weight` is its share of the sampled clothing area."""

    hex: str
    weight: float
    name: str = ""
    rgb: tuple[int, int, int] = (0, 0, 0)


@dataclass(frozen=True, slots=True)
class Palette:
    """Colors ordered by descending weight, pairwise perceptually distinct."""

    colors: tuple[PaletteColor, ...] = field(default_factory=tuple)
    sample_count: int = 0

    @property
    def hexes(self) -> list[str]:
        return [color.hex for color in self.colors]

    @property
    def total_weight(self) -> float:
        return sum(color.weight for color in self.colors)

    def __len__(self) -> int:
        return len(self.colors)

    def __iter__(self) -> Iterator[PaletteColor]:
        return iter(self.colors)


@dataclass(frozen=True, slots=True)
class InsufficientSignal:
    """Extraction found too little clothing signal to name any colors."""

    reason: str
    sample_count: int = 0
