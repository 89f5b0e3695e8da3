import numpy as np
import pyopencl as cl
import logging
from typing import Dict, Any, Optional, Tuple, List

from utils.errors import BackendInitError
from fractals.base import Fractal, Viewport, RenderSettings, ProgramSpec, KernelStep
from fractals.spec_validator import validate_program_spec
from backend.model.be_base import Backend


logger = logging.getLogger(__name__)


def list_opencl_devices() -> List[Tuple[int, "cl.Device"]]:
    """
    All OpenCL devices across platforms, numbered by a global ordinal.
    Returns an empty list when no ICD/platform is installed.
    """
    try:
        plats: list[cl.Platform] = cl.get_platforms()
    except cl.Error as e:
        logger.debug("No OpenCL platforms: %s", e)
        return []
    all_devs: list[tuple[int, cl.Device]] = []
    ordinal = 0
    for p in plats:
        try:
            devs = p.get_devices()
        except cl.Error as e:
            logger.debug("Platform %s has no usable devices: %s", p.name, e)
            continue
        for d in devs:
            all_devs.append((ordinal, d))
            ordinal += 1
    return all_devs


class OpenClBackend(Backend):
    """
    Backend for OpenCL-based fractal rendering.
    """
    name = "OPENCL"

    def __init__(self, device: Optional[int] = None):
        all_devs = list_opencl_devices()
        if not all_devs:
            raise BackendInitError("No OpenCL devices found.")

        if device is None:
            chosen = None
            for ord_id, d in all_devs:
                if d.type & cl.device_type.GPU:
                    chosen = (ord_id, d)
                    break
            if chosen is None:
                chosen = all_devs[0]
        else:
            chosen = next(((ord_id, d) for ord_id, d in all_devs if ord_id == device), None)
            if chosen is None:
                raise BackendInitError(f"No OpenCL device with ordinal {device} found.")

        self.device_ordinal, self.device = chosen
        logger.info("Using OpenCL device %d: %s", self.device_ordinal, self.device.name.strip())

        # Context
        self.ctx: cl.Context | None = cl.Context([self.device])

        self.queue: cl.CommandQueue | None = cl.CommandQueue(self.ctx, self.device)

        self.program_spec: Optional[ProgramSpec] = None
        self._kernels: Dict[str, cl.Kernel] = {}    # step.name -> kernel

        self.local_size = (8, 8)

    def compile(self, fractal: Fractal, settings: RenderSettings) -> None:
        """
        Build kernels for all ProgramSpec steps.
        KernelStep.func is a dict {"src": <str>, "kernel_name": <str>, "build_options": [...]}.
        """
        spec = fractal.get_program_spec(settings, self.name)
        validate_program_spec(spec, backend_hint=self.name)
        kernels: Dict[str, cl.Kernel] = {}

        for step in spec.steps:
            src = step.func["src"]
            kname = step.func.get("kernel_name", step.name)
            opts = step.func.get("build_options", [])
            try:
                program = cl.Program(self.ctx, src).build(options=opts)
            except cl.Error as e:
                raise BackendInitError(f"OpenCL build of '{kname}' failed:\n{e}") from e
            kernels[step.name] = cl.Kernel(program, kname)

        self.program_spec = spec
        self._kernels = kernels

    def render_async(self,
                     fractal: Fractal,
                     vp: Viewport,
                     settings: RenderSettings) -> Tuple[np.ndarray, cl.Event]:
        """
        Asynchronous rendering.
        - Enqueue kernels in order on the device queue
        - Enqueue non-blocking read of the output buffer into a host array
        - Return (host_array, completion_event)
        """

        if self.program_spec is None or self.queue is None:
            raise RuntimeError("Backend has not been compiled yet")

        spec = self.program_spec
        q = self.queue

        arg_map: Dict[str, Any] = self._scalar_values(spec, fractal.build_arg_values(vp, settings))
        out_dev: Optional[cl.Buffer] = None
        out_host: Optional[np.ndarray] = None
        for name, arg in spec.buffers_out().items():
            np_dt = np.dtype(arg.dtype)
            buf = cl.Buffer(self.ctx, cl.mem_flags.WRITE_ONLY, vp.width * vp.height * np_dt.itemsize)
            arg_map[name] = buf
            if name == spec.output_arg:
                out_dev = buf
                out_host = np.empty((vp.height, vp.width), dtype=np_dt)

        k_evt: Optional[cl.Event] = None
        for step in spec.steps:
            kernel = self._kernels[step.name]
            for idx, value in enumerate(self._ordered(step.args, arg_map)):
                kernel.set_arg(idx, value)

            gxs, gys = self._compute_global_sizes(vp.width, vp.height, step)
            lxs, lys = self._compute_local_sizes(step)
            k_evt = cl.enqueue_nd_range_kernel(q, kernel, global_work_size=(gxs, gys),
                                               local_work_size=(lxs, lys),
                                               wait_for=[k_evt] if k_evt is not None else None)

        read_evt = cl.enqueue_copy(q, out_host, out_dev, is_blocking=False, wait_for=[k_evt])
        return out_host, read_evt

    def _compute_local_sizes(self, step: KernelStep) -> Tuple[int, int]:
        block = (step.meta or {}).get("block") or self.local_size
        return int(block[0]), int(block[1])

    def _compute_global_sizes(self, w: int, h: int, step: KernelStep) -> Tuple[int, int]:
        lx, ly = self._compute_local_sizes(step)
        gx = ((w + lx - 1) // lx) * lx
        gy = ((h + ly - 1) // ly) * ly
        return gx, gy

    def close(self) -> None:
        if self.queue is not None:
            try:
                self.queue.finish()
            except cl.Error as e:
                logger.exception("Error finishing OpenCL queue during close: %s", e)
        self.queue = None
        self._kernels.clear()
        self.program_spec = None
        self.ctx = None
