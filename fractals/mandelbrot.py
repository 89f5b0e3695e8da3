from dataclasses import dataclass
from typing import Dict, Any

import numpy as np

import kernel_sources.cpu.mandelbrot  # noqa: F401  registers op descriptors
from fractals.base import (Fractal, Viewport, RenderSettings,
                           ProgramSpec, KernelStep, ArgSpec)
from kernel_sources import load_kernel, get_op_descriptor


@dataclass
class MandelbrotFractal(Fractal):
    name: str = "mandelbrot"
    operations: tuple = ("iter",)

    def build_arg_values(self, vp: Viewport, st: RenderSettings) -> Dict[str, Any]:
        bailout = st.bailout
        if bailout is None:
            bailout = get_op_descriptor(self.name, "iter")["default_params"]["bailout"]
        return {
            "offset_x": vp.offset_x,
            "offset_y": vp.offset_y,
            "zoom": vp.zoom,
            "width": vp.width,
            "height": vp.height,
            "max_iter": st.max_iter,
            "bailout": bailout,
        }

    def get_program_spec(self, st: RenderSettings,
                         backend_name: str) -> ProgramSpec:
        precision = np.dtype(st.precision).type
        tag = st.precision_tag

        args: Dict[str, ArgSpec] = {
            "offset_x": ArgSpec("offset_x", "scalar", precision, source="viewport"),
            "offset_y": ArgSpec("offset_y", "scalar", precision, source="viewport"),
            "zoom": ArgSpec("zoom", "scalar", precision, source="viewport"),
            "width": ArgSpec("width", "scalar", np.int32, source="viewport"),
            "height": ArgSpec("height", "scalar", np.int32, source="viewport"),
            "max_iter": ArgSpec("max_iter", "scalar", np.int32, source="settings"),
            "bailout": ArgSpec("bailout", "scalar", precision, source="settings"),
            "iterations": ArgSpec("iterations", "buffer_out", np.int32),
        }

        steps = []
        for op in self.operations:
            meta = load_kernel(backend_name, self.name, op, tag)
            steps.append(KernelStep(name=op,
                                    func=meta["func"],
                                    args=list(meta["arg_order"]),
                                    meta={"block": meta.get("block")}))

        return ProgramSpec(backend=backend_name.upper(),
                           precision=precision,
                           args=args,
                           steps=steps,
                           output_arg="iterations",
                           output_dtype=np.int32)
