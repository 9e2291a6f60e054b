"""
MIT License
Copyright (c) 2026 arpan404
See LICENSE file for full license text.

Multi-test skin-tone classifier.
"""

from __future__ import annotations

import numpy as np

from .colorspace import rgb_to_hsv_array, rgb_to_ycbcr_array


def skin_mask(rgb: np.ndarray, hsv: np.ndarray | None = None) -> np.ndarray:
    """
    Return a boolean mask of pixels classified as skin.

    Three independent tests vote: an RGB ratio test, a YCbCr chroma range
    and an HSV hue/saturation range. A pixel is skin when at least two
    agree, which keeps darker and lighter skin tones that fail one test.
    """
    rgb = np.asarray(rgb, dtype=np.float64)
    r, g, b = rgb[..., 0], rgb[..., 1], rgb[..., 2]
    rgb_vote = (
        (r > 95) & (g > 40) & (b > 20) & (r > g) & (r > b) & (np.abs(r - g) > 15)
    )

    ycbcr = rgb_to_ycbcr_array(rgb)
    cb, cr = ycbcr[..., 1], ycbcr[..., 2]
    ycbcr_vote = (cr >= 133) & (cr <= 173) & (cb >= 77) & (cb <= 127)

    if hsv is None:
        hsv = rgb_to_hsv_array(rgb)
    h, s = hsv[..., 0], hsv[..., 1]
    hsv_vote = (h >= 0) & (h <= 50) & (s >= 23) & (s <= 68)

    votes = rgb_vote.astype(np.int8) + ycbcr_vote.astype(np.int8) + hsv_vote.astype(np.int8)
    return votes >= 2


def is_skin(r: int, g: int, b: int) -> bool:
    return bool(skin_mask(np.array([r, g, b], dtype=np.float64)))
