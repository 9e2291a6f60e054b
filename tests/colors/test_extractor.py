from __future__ import annotations

import io

import numpy as np
import pytest
from PIL import Image

from stylecore.colors import (
    ExtractionConfig,
    InsufficientSignal,
    Palette,
    PaletteColor,
    enforce_diversity,
    extract_palette,
    extract_palette_from_image,
    locate_subject,
)

NAVY = (40, 60, 140)
BURGUNDY = (150, 30, 40)
SKIN = (224, 172, 140)
WHITE = (255, 255, 255)


def _solid(width: int, height: int, rgb: tuple[int, int, int]) -> np.ndarray:
    arr = np.zeros((height, width, 3), dtype=np.uint8)
    arr[...] = rgb
    return arr


def _png(arr: np.ndarray) -> bytes:
    buffer = io.BytesIO()
    Image.fromarray(arr).save(buffer, format="PNG")
    return buffer.getvalue()


def test_single_garment_color_yields_one_entry():
    palette = extract_palette(_solid(60, 60, NAVY), 60, 60)

    assert isinstance(palette, Palette)
    assert palette.hexes == ["#283C8C"]
    assert palette.colors[0].weight == pytest.approx(1.0)
    assert palette.colors[0].name == "blue"
    assert palette.sample_count > 2


def test_two_distinct_garments_are_both_reported_and_weights_sum_to_one():
    arr = _solid(60, 60, NAVY)
    arr[:, 30:] = BURGUNDY

    palette = extract_palette(arr, 60, 60)

    assert isinstance(palette, Palette)
    assert set(palette.hexes) == {"#283C8C", "#961E28"}
    assert palette.total_weight == pytest.approx(1.0)
    weights = [color.weight for color in palette]
    assert weights == sorted(weights, reverse=True)


def test_extraction_is_deterministic_for_identical_input():
    arr = _solid(80, 60, NAVY)
    arr[20:50, 10:70] = BURGUNDY
    assert extract_palette(arr, 80, 60) == extract_palette(arr, 80, 60)


@pytest.mark.parametrize("fill", [WHITE, SKIN, (0, 0, 0)])
def test_background_or_skin_only_image_is_insufficient_signal(fill):
    result = extract_palette(_solid(60, 60, fill), 60, 60)

    assert isinstance(result, InsufficientSignal)
    assert result.sample_count < 2


def test_transparent_pixels_are_ignored():
    arr = np.zeros((40, 40, 4), dtype=np.uint8)
    arr[..., :3] = NAVY
    arr[..., 3] = 0
    assert isinstance(extract_palette(arr, 40, 40), InsufficientSignal)

    arr[..., 3] = 255
    assert isinstance(extract_palette(arr, 40, 40), Palette)


def test_accepts_raw_row_major_bytes():
    arr = _solid(30, 20, NAVY)
    palette = extract_palette(arr.tobytes(), 30, 20)
    assert isinstance(palette, Palette)
    assert palette.hexes == ["#283C8C"]


def test_rejects_buffers_that_do_not_match_dimensions():
    with pytest.raises(ValueError):
        extract_palette(b"\x00" * 10, 4, 4)
    with pytest.raises(ValueError):
        extract_palette(_solid(10, 10, NAVY), 12, 10)
    with pytest.raises(ValueError):
        extract_palette(b"", 0, 10)


def test_subject_is_located_from_largest_skin_cluster():
    arr = _solid(200, 200, WHITE)
    arr[20:80, 20:80] = SKIN
    assert locate_subject(arr) == pytest.approx((47.5, 47.5))

    assert locate_subject(_solid(200, 200, WHITE)) == (100.0, 100.0)


def test_small_skin_specks_fall_back_to_image_center():
    arr = _solid(200, 200, WHITE)
    arr[0:10, 0:10] = SKIN
    assert locate_subject(arr) == (100.0, 100.0)


def test_near_duplicate_candidates_merge_into_the_stronger():
    merged = enforce_diversity(
        [
            PaletteColor(hex="#263984", weight=0.4, rgb=(38, 57, 132)),
            PaletteColor(hex="#283C8C", weight=0.6, rgb=NAVY),
            PaletteColor(hex="#961E28", weight=0.2, rgb=BURGUNDY),
        ],
        min_delta_e=15,
    )

    assert [color.hex for color in merged] == ["#283C8C", "#961E28"]
    assert merged[0].weight == pytest.approx(1.0)


def test_near_identical_garment_shades_merge_into_one_entry():
    arr = _solid(60, 60, NAVY)
    arr[:, 36:] = (38, 57, 132)

    unmerged = extract_palette(arr, 60, 60, config=ExtractionConfig(min_delta_e=0.0))
    merged = extract_palette(arr, 60, 60)

    assert isinstance(unmerged, Palette)
    assert isinstance(merged, Palette)
    assert unmerged.hexes == ["#283C8C", "#263984"]
    assert merged.hexes == ["#283C8C"]
    assert merged.colors[0].weight == pytest.approx(unmerged.total_weight)
    assert merged.colors[0].weight == pytest.approx(1.0)


def test_max_candidates_limits_palette_size():
    arr = np.zeros((60, 60, 3), dtype=np.uint8)
    stripes = [NAVY, BURGUNDY, (30, 120, 60), (200, 160, 20), (120, 40, 160)]
    for index, rgb in enumerate(stripes):
        arr[:, index * 12 : (index + 1) * 12] = rgb

    palette = extract_palette(arr, 60, 60, config=ExtractionConfig(max_candidates=2))

    assert isinstance(palette, Palette)
    assert len(palette) <= 2


def test_extract_from_encoded_image():
    palette = extract_palette_from_image(_png(_solid(48, 48, NAVY)))
    assert isinstance(palette, Palette)
    assert palette.hexes == ["#283C8C"]
