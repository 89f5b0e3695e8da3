from __future__ import annotations

import numpy as np
import pytest

from coloring.escape_time import PaletteLookupColoring
from coloring.palettes import build_palette


def test_palette_shape_and_dtype() -> None:
    table = build_palette(800)
    assert table.shape == (801, 3)
    assert table.dtype == np.uint8


def test_palette_endpoints_are_black() -> None:
    table = build_palette(800)
    assert tuple(table[0]) == (0, 0, 0)
    assert tuple(table[800]) == (0, 0, 0)


def test_palette_midpoint_values() -> None:
    # t = 0.5: r = 9/16*255, g = 15/16*255, b = 8.5/16*255, truncated
    table = build_palette(2)
    assert tuple(int(c) for c in table[1]) == (143, 239, 135)


def test_palette_first_step_is_faint_blue() -> None:
    table = build_palette(800)
    r, g, b = (int(c) for c in table[1])
    assert r == 0 and g == 0
    assert 1 <= b <= 3


def test_palette_is_read_only() -> None:
    table = build_palette(16)
    with pytest.raises(ValueError):
        table[0, 0] = 1


@pytest.mark.parametrize("max_iter", [0, -5])
def test_palette_rejects_non_positive_cap(max_iter: int) -> None:
    with pytest.raises(ValueError):
        build_palette(max_iter)


def test_lookup_clips_out_of_range_counts() -> None:
    table = build_palette(4)
    counts = np.array([[-3, 0, 2], [4, 9, 1]], dtype=np.int32)
    rgb = PaletteLookupColoring().apply(counts, table)
    assert rgb.shape == (2, 3, 3)
    assert rgb.dtype == np.uint8
    assert np.array_equal(rgb[0, 0], table[0])
    assert np.array_equal(rgb[1, 1], table[4])
    assert np.array_equal(rgb[0, 2], table[2])


def test_lookup_returns_fresh_writable_array() -> None:
    table = build_palette(4)
    counts = np.zeros((2, 2), dtype=np.int32)
    rgb = PaletteLookupColoring().apply(counts, table)
    assert rgb.flags.c_contiguous
    assert rgb.flags.writeable
    rgb[0, 0] = 7
    assert tuple(table[0]) == (0, 0, 0)
