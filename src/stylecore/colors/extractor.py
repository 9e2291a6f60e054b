"""
MIT License
Copyright (c) 2026 arpan404
See LICENSE file for full license text.

Heuristic clothing palette extraction.

The pipeline is deterministic and runs without network access:

1. locate the subject from the largest cluster of skin-toned samples,
2. sample a disk around it, weighting samples near the center,
3. drop background (near white/black, washed out walls and floors),
4. drop skin,
5. quantize into coarse HSV bins and keep the heaviest,
6. merge candidates closer than the ΔE threshold into their stronger neighbor.
"""

from __future__ import annotations

import io
import logging
import math
from collections.abc import Sequence
from dataclasses import dataclass
from typing import Any

import numpy as np
from PIL import Image, ImageOps

from .colorspace import delta_e_ciede2000, rgb_to_hex, rgb_to_hsv_array, rgb_to_lab_array
from .naming import color_name
from .skin import skin_mask
from .types import InsufficientSignal, Palette, PaletteColor

logger = logging.getLogger("stylecore.colors")


@dataclass(frozen=True, slots=True)
class ExtractionConfig:
    """Tuning knobs for `extract_palette`; defaults reproduce the production heuristic."""

    roi_radius_ratio: float = 0.35
    skin_scan_stride: int = 12
    sample_stride: int = 10
    min_skin_cluster: int = 20
    min_alpha: int = 128
    min_saturation: float = 5.0
    max_saturation: float = 95.0
    min_value: float = 12.0
    max_value: float = 88.0
    hue_bin: float = 12.0
    saturation_bin: float = 15.0
    value_bin: float = 15.0
    min_bin_share: float = 0.03
    max_candidates: int = 10
    min_delta_e: float = 15.0
    min_samples: int = 2


@dataclass(frozen=True, slots=True)
class _Samples:
    """Data type for samples surviving rejection."""

    rgb: np.ndarray
    hsv: np.ndarray
    weight: np.ndarray


def _as_pixel_array(pixels: Any, width: int, height: int) -> np.ndarray:
    """Coerce raw RGB/RGBA buffers or arrays into an `(h, w, c)` uint8 array."""
    if width <= 0 or height <= 0:
        raise ValueError("width and height must be positive")
    if isinstance(pixels, (bytes, bytearray, memoryview)):
        arr = np.frombuffer(pixels, dtype=np.uint8)
    else:
        arr = np.asarray(pixels)

    if arr.ndim == 3:
        if arr.shape[:2] != (height, width) or arr.shape[2] not in (3, 4):
            raise ValueError(
                f"Pixel array shape {arr.shape} does not match {width}x{height} RGB/RGBA"
            )
        return arr.astype(np.uint8, copy=False)

    flat = arr.reshape(-1)
    area = width * height
    channels = flat.size // area if area else 0
    if channels not in (3, 4) or flat.size != area * channels:
        raise ValueError(
            f"Buffer of {flat.size} values does not match {width}x{height} RGB/RGBA"
        )
    return flat.astype(np.uint8, copy=False).reshape(height, width, channels)


def _largest_cluster(mask: np.ndarray) -> list[tuple[int, int]]:
    """Cells of the largest 8-connected True region, first found wins ties."""
    rows, cols = mask.shape
    seen = np.zeros_like(mask, dtype=bool)
    best: list[tuple[int, int]] = []
    for start_r, start_c in zip(*np.nonzero(mask)):
        if seen[start_r, start_c]:
            continue
        seen[start_r, start_c] = True
        stack = [(int(start_r), int(start_c))]
        region: list[tuple[int, int]] = []
        while stack:
            r, c = stack.pop()
            region.append((r, c))
            for dr in (-1, 0, 1):
                for dc in (-1, 0, 1):
                    nr, nc = r + dr, c + dc
                    if 0 <= nr < rows and 0 <= nc < cols and mask[nr, nc] and not seen[nr, nc]:
                        seen[nr, nc] = True
                        stack.append((nr, nc))
        if len(region) > len(best):
            best = region
    return best


def locate_subject(
    pixels: np.ndarray,
    config: ExtractionConfig = ExtractionConfig(),
) -> tuple[float, float]:
    """Estimate the subject center `(x, y)`; image center when no skin region is found."""
    height, width = pixels.shape[:2]
    stride = max(1, min(config.skin_scan_stride, min(width, height) // 40))
    grid = pixels[::stride, ::stride]
    mask = skin_mask(grid[..., :3])
    if grid.shape[2] == 4:
        mask &= grid[..., 3] >= config.min_alpha

    cluster = _largest_cluster(mask) if mask.sum() > config.min_skin_cluster else []
    if len(cluster) <= config.min_skin_cluster:
        return width / 2.0, height / 2.0

    ys = np.array([r for r, _ in cluster], dtype=np.float64) * stride
    xs = np.array([c for _, c in cluster], dtype=np.float64) * stride
    return float(xs.mean()), float(ys.mean())


def _sample_region(
    pixels: np.ndarray,
    center: tuple[float, float],
    config: ExtractionConfig,
) -> _Samples:
    height, width = pixels.shape[:2]
    cx, cy = center
    radius = max(1.0, config.roi_radius_ratio * min(width, height))
    stride = max(1, min(config.sample_stride, int(radius / 6)))

    y0, y1 = max(0, math.ceil(cy - radius)), min(height, math.floor(cy + radius) + 1)
    x0, x1 = max(0, math.ceil(cx - radius)), min(width, math.floor(cx + radius) + 1)
    ys = np.arange(y0, y1, stride)
    xs = np.arange(x0, x1, stride)
    grid_y, grid_x = np.meshgrid(ys, xs, indexing="ij")
    dist = np.hypot(grid_x - cx, grid_y - cy) / radius

    block = pixels[grid_y, grid_x]
    keep = dist <= 1.0
    if block.shape[-1] == 4:
        keep &= block[..., 3] >= config.min_alpha

    rgb = block[..., :3][keep].astype(np.float64)
    dist = dist[keep]
    hsv = rgb_to_hsv_array(rgb)
    weight = np.maximum(1, np.floor(8.0 * (1.0 - dist)))
    return _reject(rgb, hsv, dist, weight, config)


def _reject(
    rgb: np.ndarray,
    hsv: np.ndarray,
    dist: np.ndarray,
    weight: np.ndarray,
    config: ExtractionConfig,
) -> _Samples:
    h, s, v = hsv[..., 0], hsv[..., 1], hsv[..., 2]
    outer = dist > 0.6
    background = (
        ((v > 90) & (s < 15))
        | (v < 8)
        | ((s < 8) & (dist > 0.7))
        # warm walls and wooden floors at the edge of the frame
        | ((h <= 35) & (s > 55) & (v > 50) & outer)
        | ((h >= 35) & (h <= 65) & (s > 40) & (v > 65) & outer)
        # sky
        | ((h >= 200) & (h <= 230) & (s > 30) & (s < 60) & (v > 65))
        # foliage
        | ((h >= 100) & (h <= 140) & (s > 35) & (s < 70) & (v > 50) & outer)
    )
    clothing = (
        (s >= config.min_saturation)
        & (s <= config.max_saturation)
        & (v >= config.min_value)
        & (v <= config.max_value)
    ) | ((s >= 1) & (s <= 15) & (v >= 15) & (v <= 75) & (dist < 0.8))

    keep = ~background & clothing & ~skin_mask(rgb, hsv)
    return _Samples(rgb=rgb[keep], hsv=hsv[keep], weight=weight[keep])


def _quantize(samples: _Samples, config: ExtractionConfig) -> list[PaletteColor]:
    """Bucket samples into HSV bins and return the heaviest bins as candidates."""
    h_idx = np.floor(samples.hsv[:, 0] / config.hue_bin + 0.5).astype(np.int64)
    h_idx %= int(round(360.0 / config.hue_bin))
    s_idx = np.floor(samples.hsv[:, 1] / config.saturation_bin + 0.5).astype(np.int64)
    v_idx = np.floor(samples.hsv[:, 2] / config.value_bin + 0.5).astype(np.int64)
    keys = h_idx * 10_000 + s_idx * 100 + v_idx

    bins, inverse = np.unique(keys, return_inverse=True)
    totals = np.bincount(inverse, weights=samples.weight)
    mean_rgb = np.stack(
        [
            np.bincount(inverse, weights=samples.weight * samples.rgb[:, ch]) / totals
            for ch in range(3)
        ],
        axis=-1,
    )

    grand_total = float(totals.sum())
    order = np.lexsort((bins, -totals))
    passing = [i for i in order if totals[i] / grand_total >= config.min_bin_share]
    chosen = (passing or list(order))[: config.max_candidates]

    candidates = []
    for i in chosen:
        r, g, b = (int(round(c)) for c in mean_rgb[i])
        candidates.append(
            PaletteColor(
                hex=rgb_to_hex(r, g, b),
                weight=float(totals[i]) / grand_total,
                name=color_name(r, g, b),
                rgb=(r, g, b),
            )
        )
    return candidates


def enforce_diversity(
    colors: Sequence[PaletteColor],
    min_delta_e: float = 15.0,
) -> tuple[PaletteColor, ...]:
    """
    Merge colors closer than `min_delta_e` into their stronger neighbor.

    Colors are visited strongest first; a color within the threshold of an
    already kept color adds its weight to the nearest such color instead of
    being emitted. The result is ordered by descending weight.
    """
    ranked = sorted(colors, key=lambda color: -color.weight)
    if not ranked:
        return ()
    labs = rgb_to_lab_array(np.array([color.rgb for color in ranked], dtype=np.float64))
    kept: list[PaletteColor] = []
    kept_labs: list[np.ndarray] = []
    for color, lab in zip(ranked, labs):
        target = None
        if kept_labs:
            stacked = np.stack(kept_labs)
            distances = np.atleast_1d(
                delta_e_ciede2000(stacked, np.repeat(lab[None, :], len(stacked), axis=0))
            )
            nearest = int(np.argmin(distances))
            if distances[nearest] < min_delta_e:
                target = nearest
        if target is None:
            kept.append(color)
            kept_labs.append(lab)
            continue
        stronger = kept[target]
        kept[target] = PaletteColor(
            hex=stronger.hex,
            weight=stronger.weight + color.weight,
            name=stronger.name,
            rgb=stronger.rgb,
        )
    return tuple(sorted(kept, key=lambda color: -color.weight))


def extract_palette(
    pixels: Any,
    width: int,
    height: int,
    *,
    config: ExtractionConfig = ExtractionConfig(),
) -> Palette | InsufficientSignal:
    """
    Derive a ranked clothing palette from raw pixels.

    Args:
        pixels: RGB/RGBA bytes in row-major order, or an array shaped
            `(height, width, 3|4)` or flat.
        width: Image width in pixels.
        height: Image height in pixels.
        config: Heuristic tuning.

    Returns:
        A `Palette`, or `InsufficientSignal` when fewer than
        `config.min_samples` samples survive background and skin rejection.
    """
    arr = _as_pixel_array(pixels, width, height)
    center = locate_subject(arr, config)
    samples = _sample_region(arr, center, config)
    count = int(samples.weight.size)
    if count < config.min_samples:
        logger.info("Palette extraction found %d usable samples; insufficient signal", count)
        return InsufficientSignal(
            reason=f"only {count} clothing sample(s) survived rejection",
            sample_count=count,
        )

    candidates = _quantize(samples, config)
    colors = enforce_diversity(candidates, config.min_delta_e)
    logger.debug(
        "Extracted %d colors from %d samples: %s",
        len(colors),
        count,
        ", ".join(color.hex for color in colors),
    )
    return Palette(colors=colors, sample_count=count)


def load_pixels(image_bytes: bytes) -> tuple[np.ndarray, int, int]:
    """Decode an encoded image into an RGBA array plus `(width, height)`."""
    with Image.open(io.BytesIO(image_bytes)) as img:
        rgba = ImageOps.exif_transpose(img).convert("RGBA")
        arr = np.asarray(rgba, dtype=np.uint8)
    return arr, rgba.width, rgba.height


def extract_palette_from_image(
    image_bytes: bytes,
    *,
    config: ExtractionConfig = ExtractionConfig(),
) -> Palette | InsufficientSignal:
    arr, width, height = load_pixels(image_bytes)
    return extract_palette(arr, width, height, config=config)
