"""
MIT License
Copyright (c) 2026 arpan404
See LICENSE file for full license text.

Advisory diversity scoring for a batch of generated looks.
"""

from __future__ import annotations

import re
from collections import defaultdict
from collections.abc import Sequence
from dataclasses import dataclass, field
from itertools import combinations

from ..colors.colorspace import hex_to_rgb
from ..colors.types import Palette

_WORD = re.compile(r"[a-z0-9]+")

_FILLER_WORDS = frozenset(
    {
        "a",
        "an",
        "and",
        "or",
        "the",
        "with",
        "for",
        "in",
        "on",
        "of",
        "style",
        "styled",
        "look",
        "outfit",
        "piece",
        "pair",
        "set",
    }
)


@dataclass(frozen=True, slots=True)
class DiversityConfig:
    """Product-tuned penalties and thresholds; none of them are invariants."""

    style_penalty: float = 30.0
    palette_overlap_penalty: float = 15.0
    palette_overlap_threshold: float = 0.6
    title_penalty: float = 20.0
    item_overlap_penalty: float = 10.0
    item_overlap_threshold: float = 0.7
    hex_tolerance: int = 8


@dataclass(frozen=True, slots=True)
class ResultSummary:
    """The parts of one generated look that diversity scoring compares."""

    style_tag: str
    palette: Palette | Sequence[str] = ()
    items: Sequence[str] = ()
    title: str = ""


@dataclass(frozen=True, slots=True)
class DiversityReport:
    """Score in [0, 100] plus human-readable reasons for every deduction."""

    score: float
    violations: tuple[str, ...] = field(default_factory=tuple)

    @property
    def is_diverse(self) -> bool:
        return not self.violations


def item_descriptor(item: str) -> str:
    """Last significant word of an item, e.g. `"Slim navy chinos"` -> `"chino"`."""
    words = [word for word in _WORD.findall(item.lower()) if word not in _FILLER_WORDS]
    if not words:
        return item.strip().lower()
    word = words[-1]
    if len(word) > 3 and word.endswith("s") and not word.endswith("ss"):
        word = word[:-1]
    return word


def _palette_rgbs(palette: Palette | Sequence[str]) -> list[tuple[int, int, int]]:
    hexes = palette.hexes if isinstance(palette, Palette) else list(palette)
    rgbs: list[tuple[int, int, int]] = []
    for value in hexes:
        try:
            rgb = hex_to_rgb(value)
        except ValueError:
            continue
        if rgb not in rgbs:
            rgbs.append(rgb)
    return rgbs


def _near(a: tuple[int, int, int], b: tuple[int, int, int], tolerance: int) -> bool:
    return all(abs(x - y) <= tolerance for x, y in zip(a, b))


def palette_overlap(
    first: Palette | Sequence[str],
    second: Palette | Sequence[str],
    *,
    tolerance: int = 8,
) -> float:
    """Share of the smaller palette's colors with a near-exact match in the other."""
    left, right = _palette_rgbs(first), _palette_rgbs(second)
    if not left or not right:
        return 0.0
    small, large = (left, right) if len(left) <= len(right) else (right, left)
    matched = sum(1 for color in small if any(_near(color, other, tolerance) for other in large))
    return matched / len(small)


def item_overlap(first: Sequence[str], second: Sequence[str]) -> float:
    left = {item_descriptor(item) for item in first if item.strip()}
    right = {item_descriptor(item) for item in second if item.strip()}
    if not left or not right:
        return 0.0
    return len(left & right) / min(len(left), len(right))


class DiversityScorer:
    """
    Score how distinct the looks in one batch are from each other.

    Starts at 100 and deducts: once for any repeated style tag, once for any
    repeated title (case-insensitive), and per pair for palettes or item
    lists that overlap beyond their thresholds. The report is a quality
    signal for logging; it never blocks a response.
    """

    def __init__(self, config: DiversityConfig | None = None) -> None:
        self.config = config or DiversityConfig()

    def score(self, batch: Sequence[ResultSummary]) -> DiversityReport:
        cfg = self.config
        score = 100.0
        violations: list[str] = []

        by_tag: dict[str, list[int]] = defaultdict(list)
        for index, entry in enumerate(batch, start=1):
            tag = entry.style_tag.strip().lower()
            if tag:
                by_tag[tag].append(index)
        repeated_tags = {tag: idx for tag, idx in by_tag.items() if len(idx) > 1}
        if repeated_tags:
            score -= cfg.style_penalty
            for tag, indexes in repeated_tags.items():
                violations.append(
                    f"Style tag '{tag}' is shared by entries {_join(indexes)}"
                )

        for (i, left), (j, right) in combinations(enumerate(batch, start=1), 2):
            overlap = palette_overlap(left.palette, right.palette, tolerance=cfg.hex_tolerance)
            if overlap > cfg.palette_overlap_threshold:
                score -= cfg.palette_overlap_penalty
                violations.append(
                    f"Entries {i} and {j} share {overlap:.0%} of their palette colors"
                )

        by_title: dict[str, list[int]] = defaultdict(list)
        for index, entry in enumerate(batch, start=1):
            title = " ".join(entry.title.lower().split())
            if title:
                by_title[title].append(index)
        repeated_titles = {title: idx for title, idx in by_title.items() if len(idx) > 1}
        if repeated_titles:
            score -= cfg.title_penalty
            for title, indexes in repeated_titles.items():
                violations.append(f"Title '{title}' is used by entries {_join(indexes)}")

        for (i, left), (j, right) in combinations(enumerate(batch, start=1), 2):
            overlap = item_overlap(left.items, right.items)
            if overlap > cfg.item_overlap_threshold:
                score -= cfg.item_overlap_penalty
                violations.append(f"Entries {i} and {j} share {overlap:.0%} of their items")

        return DiversityReport(score=max(0.0, min(100.0, score)), violations=tuple(violations))


def _join(indexes: Sequence[int]) -> str:
    return ", ".join(str(i) for i in indexes)


def score_diversity(
    batch: Sequence[ResultSummary],
    config: DiversityConfig | None = None,
) -> DiversityReport:
    return DiversityScorer(config).score(batch)
