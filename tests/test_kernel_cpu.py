from __future__ import annotations

import numpy as np
import pytest

from kernel_sources.cpu.mandelbrot.iter import mandelbrot_iter_f32, mandelbrot_iter_f64

KERNELS = {np.float32: mandelbrot_iter_f32, np.float64: mandelbrot_iter_f64}


def _run(real_t, offset_x: float, offset_y: float, zoom: float,
         width: int = 8, height: int = 8, max_iter: int = 100) -> np.ndarray:
    out = np.zeros((height, width), dtype=np.int32)
    KERNELS[real_t](real_t(offset_x), real_t(offset_y), real_t(zoom),
                    np.int32(width), np.int32(height),
                    np.int32(max_iter), real_t(4.0), out)
    return out


@pytest.mark.parametrize("real_t", [np.float32, np.float64], ids=["f32", "f64"])
def test_origin_never_escapes(real_t) -> None:
    counts = _run(real_t, 0.0, 0.0, 1.0, max_iter=100)
    # pixel (w/2, h/2) samples the offset exactly
    assert counts[4, 4] == 100


@pytest.mark.parametrize("real_t", [np.float32, np.float64], ids=["f32", "f64"])
def test_far_point_escapes_immediately(real_t) -> None:
    counts = _run(real_t, 3.0, 3.0, 1.0, max_iter=100)
    assert counts[4, 4] <= 1


@pytest.mark.parametrize("real_t", [np.float32, np.float64], ids=["f32", "f64"])
def test_counts_stay_in_range(real_t) -> None:
    counts = _run(real_t, -0.5, 0.0, 1.0, width=32, height=24, max_iter=50)
    assert counts.min() >= 0
    assert counts.max() <= 50


def test_every_pixel_written() -> None:
    out = np.full((5, 7), -1, dtype=np.int32)
    mandelbrot_iter_f64(np.float64(-0.5), np.float64(0.0), np.float64(1.0),
                        np.int32(7), np.int32(5), np.int32(20), np.float64(4.0), out)
    assert (out >= 0).all()
