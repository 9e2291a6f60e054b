"""
MIT License
Copyright (c) 2026 arpan404
See LICENSE file for full license text.

Module: colors/naming.py.
"""

from __future__ import annotations

from .colorspace import rgb_to_hsv

_HUE_FAMILIES = (
    (15.0, "red"),
    (45.0, "orange"),
    (75.0, "yellow"),
    (150.0, "green"),
    (200.0, "cyan"),
    (260.0, "blue"),
    (300.0, "purple"),
    (330.0, "magenta"),
    (360.0, "red"),
)


def color_name(r: int, g: int, b: int) -> str:
    """Human-readable name such as `dark blue` or `light orange`."""
    hue, sat, val = rgb_to_hsv(r, g, b)
    luminance = 0.299 * r + 0.587 * g + 0.114 * b

    if sat < 10:
        if luminance < 50:
            return "black"
        if luminance > 200:
            return "white"
        return "gray"

    is_dark = val < 40
    base = next(name for upper, name in _HUE_FAMILIES if hue < upper)
    if base == "orange" and is_dark:
        base = "brown"

    if sat < 30:
        return f"light {base}"
    if is_dark:
        return f"dark {base}"
    if val > 75 and sat > 60:
        return f"bright {base}"
    return base
