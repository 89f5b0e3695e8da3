from kernel_sources.registry import register_kernel

SRC = r"""
#ifdef USE_DOUBLE
  #pragma OPENCL EXTENSION cl_khr_fp64 : enable
  typedef double real_t;
#else
  typedef float  real_t;
#endif

__kernel void mandelbrot_iter(
    real_t offset_x, real_t offset_y, real_t zoom,
    int width, int height,
    int max_iter, real_t bailout,
    __global int* iterations)
{
    const int x = get_global_id(0);
    const int y = get_global_id(1);
    if (x >= width || y >= height) return;

    const real_t scale_x = (real_t)3.5 / (real_t)width / zoom;
    const real_t scale_y = (real_t)2.0 / (real_t)height / zoom;

    const real_t cx = (real_t)(x - width / 2) * scale_x + offset_x;
    const real_t cy = (real_t)(y - height / 2) * scale_y + offset_y;

    real_t zr = 0, zi = 0;
    int n = 0;
    while (n < max_iter) {
        real_t zr2 = zr * zr;
        real_t zi2 = zi * zi;
        if (zr2 + zi2 > bailout) break;

        real_t tmp = zr2 - zi2 + cx;
        zi = (real_t)2 * zr * zi + cy;
        zr = tmp;
        ++n;
    }
    iterations[y * width + x] = n;
}
"""

KERNEL_NAME = "mandelbrot_iter"

ARG_SCALARS = [
    "offset_x", "offset_y", "zoom",
    "width", "height",
    "max_iter", "bailout",
]
ARG_BUFFERS_OUT = ["iterations"]

ARG_ORDER = ARG_SCALARS + ARG_BUFFERS_OUT

opts_f32 = ["-cl-fast-relaxed-math"]
opts_f64 = opts_f32 + ["-D", "USE_DOUBLE=1"]

for _tag, _opts in (("f32", opts_f32), ("f64", opts_f64)):
    register_kernel(
        fractal="mandelbrot",
        op_name="iter",
        backend="opencl",
        precision=_tag,
        func={"src": SRC, "kernel_name": KERNEL_NAME, "build_options": _opts},
        arg_order=ARG_ORDER,
        produces=ARG_BUFFERS_OUT,
        scalars=ARG_SCALARS,
        block=(8, 8)
    )
