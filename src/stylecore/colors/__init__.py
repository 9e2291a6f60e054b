"""
MIT License
Copyright (c) 2026 arpan404
See LICENSE file for full license text.

Module: colors/__init__.py.
"""

from .colorspace import (
    delta_e,
    delta_e_ciede2000,
    hex_to_rgb,
    rgb_to_hex,
    rgb_to_hsv,
    rgb_to_lab,
    rgb_to_lab_array,
)
from .extractor import (
    ExtractionConfig,
    enforce_diversity,
    extract_palette,
    extract_palette_from_image,
    load_pixels,
    locate_subject,
)
from .naming import color_name
from .skin import is_skin, skin_mask
from .types import InsufficientSignal, Palette, PaletteColor

__all__ = [
    "ExtractionConfig",
    "InsufficientSignal",
    "Palette",
    "PaletteColor",
    "extract_palette",
    "extract_palette_from_image",
    "enforce_diversity",
    "load_pixels",
    "locate_subject",
    "color_name",
    "is_skin",
    "skin_mask",
    "delta_e",
    "delta_e_ciede2000",
    "hex_to_rgb",
    "rgb_to_hex",
    "rgb_to_hsv",
    "rgb_to_lab",
    "rgb_to_lab_array",
]
