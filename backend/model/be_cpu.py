import logging
import time
from typing import Optional, Tuple

import numpy as np

from fractals.base import Fractal, Viewport, RenderSettings, ProgramSpec
from fractals.spec_validator import validate_program_spec
from backend.model.be_base import Backend

logger = logging.getLogger(__name__)


class CpuEvent:
    """The CPU kernel has already finished when render_async returns."""
    @staticmethod
    def wait() -> None:
        return None


class CpuBackend(Backend):
    """
    Runs the Numba escape-time kernels on the host, one prange row per
    worker thread.
    """
    name = "CPU"

    # small frame used to force JIT compilation during compile()
    WARMUP_VIEW = Viewport(offset_x=-0.5, offset_y=0.0, zoom=1.0, width=64, height=64)
    WARMUP_MAX_ITER = 64

    def __init__(self):
        self.program_spec: Optional[ProgramSpec] = None
        self._fractal: Optional[Fractal] = None
        self._jitted_for: Optional[str] = None

    def compile(self, fractal: Fractal, settings: RenderSettings) -> None:
        """
        Resolve the ProgramSpec for the requested precision and JIT the
        kernels for it. Numba compiles lazily, so a tiny frame is rendered
        here to keep that cost out of the first real generation.
        """
        spec = fractal.get_program_spec(settings, self.name)
        validate_program_spec(spec, backend_hint=self.name)
        self.program_spec = spec
        self._fractal = fractal

        if self._jitted_for != settings.precision_tag:
            t0 = time.perf_counter()
            st = RenderSettings(max_iter=self.WARMUP_MAX_ITER, precision=spec.precision)
            self.render_async(fractal, self.WARMUP_VIEW, st)
            self._jitted_for = settings.precision_tag
            logger.debug("Numba %s kernels ready in %.2fs", self._jitted_for, time.perf_counter() - t0)

    def render_async(
            self,
            fractal: Fractal,
            vp: Viewport,
            settings: RenderSettings,
    ) -> Tuple[np.ndarray, CpuEvent]:
        """
        Synchronous CPU execution, but returns (host_array, CpuEvent) for API parity.
        Every call allocates fresh output buffers.
        """
        if self.program_spec is None:
            raise RuntimeError("Backend has not been compiled yet")

        spec = self.program_spec
        arg_map = self._scalar_values(spec, fractal.build_arg_values(vp, settings))
        arg_map.update({
            name: np.zeros((vp.height, vp.width), dtype=arg.dtype)
            for name, arg in spec.buffers_out().items()
        })

        for step in spec.steps:
            step.func(*self._ordered(step.args, arg_map))

        return arg_map[spec.output_arg], CpuEvent()

    def close(self) -> None:
        self.program_spec = None
        self._fractal = None
