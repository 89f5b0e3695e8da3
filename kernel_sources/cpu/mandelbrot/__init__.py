from kernel_sources.registry import register_op_descriptor

# "iter" produces the raw escape-time iteration count per pixel; no deps.
register_op_descriptor(
    "mandelbrot", "iter",
    depends_on=[],
    default_params={"bailout": 4.0}
)
