"""
Benchmark full-frame Mandelbrot generation (CPU / OpenCL).

Times FrameGenerator.generate at the default view for each backend,
precision and resolution, and prints a summary table.

Usage examples:
  python -m benchmarking.benchmark --backends cpu,opencl --res 800x600,1280x720 \
      --precision f32,f64 --max-iter 800 --runs 5
"""

import time
import argparse
import platform
from typing import List, Tuple, Optional

import numpy as np

from devices.manager import DeviceManager
from fractals.base import RenderSettings, Viewport
from fractals.mandelbrot import MandelbrotFractal
from rendering.core import FrameGenerator
from rendering.executor import RenderExecutor
from rendering.view_state import DEFAULT_OFFSET_X, DEFAULT_OFFSET_Y, DEFAULT_ZOOM
from utils.backend_helpers import precision_to_dtype
from utils.errors import BackendInitError

# --- Helpers -----------------------------------------------------------------

def parse_resolution_list(res_str: str) -> List[Tuple[int, int]]:
    """
    Parse resolutions like "800x600,1280x720".
    """
    if not res_str:
        return [(800, 600), (1280, 720), (1920, 1080)]
    out: List[Tuple[int, int]] = []
    for token in res_str.split(','):
        token = token.strip().lower()
        if not token:
            continue
        w, h = token.split('x')
        out.append((int(w), int(h)))
    return out

def positive_int(text: str) -> int:
    value = int(text)
    if value < 1:
        raise argparse.ArgumentTypeError(f"expected a positive integer, got {text}")
    return value

def hardware_summary(devices: DeviceManager) -> Tuple[str, str]:
    """
    Return (CPU summary, Accelerator summary string).
    """
    cpu_info = platform.processor() or platform.machine()
    accel = [f"OpenCL: {d.name} ({d.vendor})" for d in devices.list("OPENCL")]
    return cpu_info or "Unknown CPU", "; ".join(accel) if accel else "No accelerator"

# --- Benchmark core ----------------------------------------------------------

def benchmark_combo(devices: DeviceManager,
                    backend: str,
                    precision: np.dtype,
                    max_iter: int,
                    width: int,
                    height: int,
                    runs: int,
                    warmup: int = 1) -> Tuple[float, float]:
    """
    Runs warmups (not timed), then 'runs' timed generations.
    Returns (avg_time_seconds, fps).
    """
    if runs < 1:
        raise ValueError(f"runs must be >= 1, got {runs}")
    settings = RenderSettings(max_iter=max_iter, precision=precision)
    executor = RenderExecutor(devices=devices, backend=backend)
    generator = FrameGenerator(MandelbrotFractal(), settings, executor=executor)
    vp = Viewport(DEFAULT_OFFSET_X, DEFAULT_OFFSET_Y, DEFAULT_ZOOM, width, height)

    try:
        for _ in range(max(0, warmup)):
            generator.generate(vp)

        times = []
        for _ in range(runs):
            t0 = time.perf_counter()
            generator.generate(vp)
            times.append(time.perf_counter() - t0)
    finally:
        generator.close()

    avg = sum(times) / len(times)
    fps = 1.0 / avg if avg > 0 else 0.0
    return avg, fps

# --- CLI ---------------------------------------------------------------------

def main(argv=None):
    p = argparse.ArgumentParser(description="Benchmark Mandelbrot frame generation.")
    p.add_argument("--backends", type=str, default="cpu,opencl",
                   help="Comma separated list: cpu,opencl")
    p.add_argument("--res", type=str, default="800x600,1280x720,1920x1080",
                   help="Comma separated WxH list")
    p.add_argument("--precision", type=str, default="f32",
                   help="Comma separated list: f32,f64")
    p.add_argument("--max-iter", type=positive_int, default=800)
    p.add_argument("--runs", type=positive_int, default=3)
    p.add_argument("--warmup", type=int, default=1)
    args = p.parse_args(argv)

    backend_tags = [t.strip().upper() for t in args.backends.split(",") if t.strip()]
    precisions = [precision_to_dtype(t) for t in args.precision.split(",") if t.strip()]
    resolutions = parse_resolution_list(args.res)

    devices = DeviceManager()
    cpu_info, accel_info = hardware_summary(devices)
    print("=== Hardware Summary ===")
    print("CPU:", cpu_info)
    print("Accel:", accel_info)
    print(f"max_iter={args.max_iter}, runs={args.runs}, warmup={args.warmup}")
    print()

    results: List[Tuple[str, str, Tuple[int, int], Optional[Tuple[float, float]]]] = []
    for (w, h) in resolutions:
        print(f"=== {w}x{h} ===")
        for tag in backend_tags:
            if not devices.list(tag):
                print(f"{tag:>8}  SKIP: no device")
                continue
            for prec in precisions:
                label = np.dtype(prec).name
                try:
                    avg, fps = benchmark_combo(devices, tag, prec, args.max_iter,
                                               w, h, args.runs, args.warmup)
                    print(f"{tag:>8} {label:>8}  avg={avg:.4f}s  fps={fps:.2f}")
                    results.append((tag, label, (w, h), (avg, fps)))
                except BackendInitError as e:
                    print(f"{tag:>8} {label:>8}  FAIL: {e}")
                    results.append((tag, label, (w, h), None))
        print()

    return results

if __name__ == "__main__":
    main()
