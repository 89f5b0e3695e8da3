import numpy as np
from numba import njit, prange

from kernel_sources.registry import register_kernel


ARG_SCALARS = [
    "offset_x", "offset_y", "zoom",
    "width", "height",
    "max_iter", "bailout",
]
ARG_BUFFERS_OUT = ["iterations"]

ARG_ORDER = ARG_SCALARS + ARG_BUFFERS_OUT


def _make_escape_time(real_t):
    """
    Build the escape-time kernel with all coordinate math pinned to real_t,
    so an f32 build reproduces single-precision banding at deep zoom.
    fastmath allows LLVM to reassociate and contract the recurrence, so
    counts near the set boundary can differ from a strict IEEE evaluation.
    """

    @njit(fastmath=True, parallel=True)
    def _mandelbrot_iter(offset_x, offset_y, zoom,
                         width, height,
                         max_iter, bailout,
                         iterations):
        scale_x = real_t(3.5) / real_t(width) / zoom
        scale_y = real_t(2.0) / real_t(height) / zoom
        half_w = width // 2
        half_h = height // 2

        for y in prange(height):
            cy = real_t(y - half_h) * scale_y + offset_y
            for x in range(width):
                cx = real_t(x - half_w) * scale_x + offset_x

                zr = real_t(0.0)
                zi = real_t(0.0)
                n = 0
                while n < max_iter:
                    zr2 = zr * zr
                    zi2 = zi * zi
                    if zr2 + zi2 > bailout:
                        break
                    tmp = zr2 - zi2 + cx
                    zi = real_t(2.0) * zr * zi + cy
                    zr = tmp
                    n += 1

                iterations[y, x] = n

    return _mandelbrot_iter


mandelbrot_iter_f32 = _make_escape_time(np.float32)
mandelbrot_iter_f64 = _make_escape_time(np.float64)


for _tag, _func in (("f32", mandelbrot_iter_f32), ("f64", mandelbrot_iter_f64)):
    register_kernel(
        fractal="mandelbrot",
        op_name="iter",
        backend="CPU",
        precision=_tag,
        func=_func,
        arg_order=ARG_ORDER,
        scalars=ARG_SCALARS,
        produces=ARG_BUFFERS_OUT,
        block=None
    )
