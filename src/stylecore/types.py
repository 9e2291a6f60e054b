"""
MIT License
Copyright (c) 2026 arpan404
See LICENSE file for full license text.

Request and result types exchanged with the recommendation orchestrator.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Literal

from .colors.types import PaletteColor
from .diversity.scorer import DiversityReport

PaletteSource = Literal["image", "provider", "none"]


@dataclass(frozen=True, slots=True)
class RecommendationRequest:
    """
    One caller request.

    `cache_key` is built by the caller (see `build_cache_key`) and is opaque
    here; `payload` is handed to the provider call untouched.
    """

    caller_id: str
    cache_key: str
    payload: Any = None
    ttl_s: float | None = None


@dataclass(frozen=True, slots=True)
class GeneratedLook:
    """One look as returned by a provider; `image` holds encoded image bytes."""

    title: str
    style_tag: str
    items: tuple[str, ...] = ()
    colors: tuple[str, ...] = ()
    image: bytes | None = None


@dataclass(frozen=True, slots=True)
class StyledLook:
    """A generated look with its final palette, as served and cached."""

    title: str
    style_tag: str
    items: tuple[str, ...] = ()
    palette: tuple[PaletteColor, ...] = ()
    palette_source: PaletteSource = "none"

    @property
    def hexes(self) -> list[str]:
        return [color.hex for color in self.palette]


@dataclass(frozen=True, slots=True)
class Recommendation:
    """Response for one request; `from_cache` is set on cache hits only."""

    looks: tuple[StyledLook, ...]
    diversity: DiversityReport
    provider: str
    from_cache: bool = False
    failed_candidates: tuple[str, ...] = field(default_factory=tuple)
