"""
MIT License
Copyright (c) 2026 arpan404
See LICENSE file for full license text.

Color-space conversions and the CIEDE2000 perceptual distance.
"""

from __future__ import annotations

import numpy as np
from skimage import color as skcolor


def hex_to_rgb(value: str) -> tuple[int, int, int]:
    """Parse `#rrggbb` / `rrggbb` / `#rgb` into an RGB triple."""
    text = value.strip().lstrip("#")
    if len(text) == 3:
        text = "".join(ch * 2 for ch in text)
    if len(text) != 6:
        raise ValueError(f"Not a hex color: {value!r}")
    try:
        return (int(text[0:2], 16), int(text[2:4], 16), int(text[4:6], 16))
    except ValueError as exc:
        raise ValueError(f"Not a hex color: {value!r}") from exc


def rgb_to_hex(r: float, g: float, b: float) -> str:
    """Format an RGB triple as upper-case `#RRGGBB`, clamping to 0..255."""
    channels = (max(0, min(255, int(round(c)))) for c in (r, g, b))
    return "#" + "".join(f"{c:02X}" for c in channels)


def rgb_to_hsv_array(rgb: np.ndarray) -> np.ndarray:
    """
    Convert an `(..., 3)` array of 0..255 RGB values to HSV.

    Hue is in degrees `[0, 360)`, saturation and value in percent `[0, 100]`.
    """
    rgb = np.asarray(rgb, dtype=np.float64) / 255.0
    r, g, b = rgb[..., 0], rgb[..., 1], rgb[..., 2]
    high = rgb.max(axis=-1)
    low = rgb.min(axis=-1)
    diff = high - low

    safe_diff = np.where(diff == 0, 1.0, diff)
    hue_r = 60.0 * (((g - b) / safe_diff) % 6.0)
    hue_g = 60.0 * ((b - r) / safe_diff + 2.0)
    hue_b = 60.0 * ((r - g) / safe_diff + 4.0)
    hue = np.where(high == r, hue_r, np.where(high == g, hue_g, hue_b))
    hue = np.where(diff == 0, 0.0, hue) % 360.0

    sat = np.where(high == 0, 0.0, diff / np.where(high == 0, 1.0, high)) * 100.0
    val = high * 100.0
    return np.stack([hue, sat, val], axis=-1)


def rgb_to_hsv(r: float, g: float, b: float) -> tuple[float, float, float]:
    h, s, v = rgb_to_hsv_array(np.array([r, g, b], dtype=np.float64))
    return float(h), float(s), float(v)


def rgb_to_ycbcr_array(rgb: np.ndarray) -> np.ndarray:
    """Full-range BT.601 YCbCr for an `(..., 3)` RGB array."""
    rgb = np.asarray(rgb, dtype=np.float64)
    r, g, b = rgb[..., 0], rgb[..., 1], rgb[..., 2]
    y = 0.299 * r + 0.587 * g + 0.114 * b
    cb = 128.0 - 0.168736 * r - 0.331264 * g + 0.5 * b
    cr = 128.0 + 0.5 * r - 0.418688 * g - 0.081312 * b
    return np.stack([y, cb, cr], axis=-1)


def rgb_to_lab_array(rgb: np.ndarray) -> np.ndarray:
    """Convert an `(..., 3)` array of 0..255 sRGB values to CIELAB under D65."""
    rgb = np.asarray(rgb, dtype=np.float64) / 255.0
    return skcolor.rgb2lab(np.clip(rgb, 0.0, 1.0), illuminant="D65", observer="2")


def rgb_to_lab(r: float, g: float, b: float) -> tuple[float, float, float]:
    lightness, a_star, b_star = rgb_to_lab_array(np.array([[r, g, b]], dtype=np.float64))[0]
    return float(lightness), float(a_star), float(b_star)


def delta_e_ciede2000(lab1, lab2) -> float | np.ndarray:
    """
    CIEDE2000 color difference with unit weighting factors.

    Accepts single Lab triples or broadcastable `(..., 3)` arrays; a pair of
    triples returns a float.
    """
    distance = skcolor.deltaE_ciede2000(
        np.asarray(lab1, dtype=np.float64),
        np.asarray(lab2, dtype=np.float64),
    )
    if np.ndim(distance) == 0:
        return float(distance)
    return distance


def delta_e(rgb1: tuple[int, int, int], rgb2: tuple[int, int, int]) -> float:
    """Perceptual distance between two sRGB colors."""
    return float(delta_e_ciede2000(rgb_to_lab(*rgb1), rgb_to_lab(*rgb2)))
