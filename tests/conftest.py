"""Shared fixtures: CPU-only device discovery and a compiled generator."""

from __future__ import annotations

from typing import Iterator

import numpy as np
import pytest

from devices.manager import DeviceManager
from devices.providers.prov_cpu import CpuDeviceProvider
from fractals.base import RenderSettings
from fractals.mandelbrot import MandelbrotFractal
from rendering.core import FrameGenerator
from rendering.executor import RenderExecutor


@pytest.fixture()
def cpu_devices() -> DeviceManager:
    """Device manager that never probes OpenCL."""
    return DeviceManager(providers=[CpuDeviceProvider()])


@pytest.fixture()
def cpu_executor(cpu_devices: DeviceManager) -> Iterator[RenderExecutor]:
    ex = RenderExecutor(devices=cpu_devices, backend="CPU")
    yield ex
    ex.close()


@pytest.fixture(params=[np.float32, np.float64], ids=["f32", "f64"])
def precision(request: pytest.FixtureRequest):
    return request.param


@pytest.fixture()
def cpu_generator(cpu_executor: RenderExecutor, precision) -> FrameGenerator:
    settings = RenderSettings(max_iter=800, precision=precision)
    return FrameGenerator(MandelbrotFractal(), settings, executor=cpu_executor)
