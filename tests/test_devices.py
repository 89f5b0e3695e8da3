from __future__ import annotations

from typing import Dict, List

import numpy as np
import pytest

from backend.model.be_cpu import CpuBackend
from backend.pool import BackendPool
from devices.manager import DeviceManager
from devices.providers.prov_cpu import CpuDeviceProvider
from fractals.base import RenderSettings, Viewport
from fractals.mandelbrot import MandelbrotFractal
from rendering.executor import RenderExecutor
from utils.errors import BackendInitError


class FakeGpuProvider:
    backend = "OPENCL"

    @staticmethod
    def enumerate() -> List[Dict]:
        return [{
            "device_id": 0,
            "name": "Fake GPU",
            "compute_units": 16,
            "memory_total_mb": 4096,
            "is_gpu": True,
        }]


def test_cpu_only_manager_picks_cpu(cpu_devices: DeviceManager) -> None:
    di = cpu_devices.choose()
    assert di.backend == "CPU"
    assert di.driver.startswith("numba")
    assert di.supports_fp64
    assert cpu_devices.choose("AUTO").backend == "CPU"


def test_missing_backend_is_init_error(cpu_devices: DeviceManager) -> None:
    with pytest.raises(BackendInitError):
        cpu_devices.choose("OPENCL")


def test_unknown_device_ordinal_is_init_error() -> None:
    dm = DeviceManager(providers=[FakeGpuProvider(), CpuDeviceProvider()])
    with pytest.raises(BackendInitError):
        dm.choose("OPENCL", device=3)


def test_gpu_ranks_above_cpu() -> None:
    dm = DeviceManager(providers=[CpuDeviceProvider(), FakeGpuProvider()])
    ranked = dm.list()
    assert [d.backend for d in ranked] == ["OPENCL", "CPU"]
    assert ranked[0].score > ranked[1].score
    assert dm.choose().name == "Fake GPU"
    assert dm.choose("cpu").backend == "CPU"


def test_pool_caches_and_compiles_lazily() -> None:
    pool = BackendPool()
    settings = RenderSettings(max_iter=32)
    pool.compile_all(MandelbrotFractal(), settings)
    be = pool.get("cpu")
    assert isinstance(be, CpuBackend)
    assert pool.get("CPU") is be
    assert be.program_spec is not None

    counts = be.render(MandelbrotFractal(), Viewport(0.0, 0.0, 1.0, 8, 8), settings)
    assert counts.shape == (8, 8)
    assert counts[4, 4] == 32
    pool.close_all()
    assert be.program_spec is None


def test_pool_rejects_unknown_backend() -> None:
    with pytest.raises(KeyError):
        BackendPool().get("CUDA")


def test_cpu_backend_requires_compile() -> None:
    with CpuBackend() as be:
        with pytest.raises(RuntimeError):
            be.render(MandelbrotFractal(), Viewport(0.0, 0.0, 1.0, 4, 4), RenderSettings(max_iter=8))


def test_double_precision_needs_fp64_device() -> None:
    ex = RenderExecutor(devices=DeviceManager(providers=[FakeGpuProvider()]), backend="OPENCL")
    with pytest.raises(BackendInitError, match="double precision"):
        ex.compile(MandelbrotFractal(), RenderSettings(max_iter=8, precision=np.float64))
    assert ex.active is None


def test_executor_pins_compiled_device(cpu_executor: RenderExecutor) -> None:
    di = cpu_executor.compile(MandelbrotFractal(), RenderSettings(max_iter=16))
    assert cpu_executor.active == di
    counts = cpu_executor.render(MandelbrotFractal(), Viewport(0.0, 0.0, 1.0, 4, 4), RenderSettings(max_iter=16))
    assert counts[2, 2] == 16
