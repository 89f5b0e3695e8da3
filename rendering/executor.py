from __future__ import annotations

import logging
from typing import Optional, Callable, Tuple

import numpy as np

from fractals.base import Fractal, Viewport, RenderSettings

from devices.manager import DeviceManager
from devices.types import DeviceInfo
from backend.pool import BackendPool
from utils.errors import BackendInitError

logger = logging.getLogger(__name__)


# ---- Async handle -------------------------------------------------------

class RenderHandle:
    """Wraps an async render (array + wait_fn)."""
    def __init__(self, result, wait_fn: Callable[[], None]):
        self._result = result
        self._wait_fn = wait_fn
        self._waited = False

    def wait(self) -> np.ndarray:
        if not self._waited:
            self._wait_fn()
            self._waited = True
        return self._result


# ---- Executor -----------------------------------------------------------

class RenderExecutor:
    """
    Execution facade built on:
      - DeviceManager: discovery/selection/scoring.
      - BackendPool: backend instance lifecycle and compilation.
    """

    def __init__(
        self,
        *,
        devices: Optional[DeviceManager] = None,
        pool: Optional[BackendPool] = None,
        backend: Optional[str] = None,
        device: Optional[int] = None,
    ) -> None:
        self.devices = devices or DeviceManager()
        self.pool = pool or BackendPool()
        self.default_backend = backend
        self.default_device = device
        self.active: Optional[DeviceInfo] = None

    # ---- Lifecycle ------------------------------------------------------

    def compile(self, fractal: Fractal, settings: RenderSettings) -> DeviceInfo:
        """
        Resolve the device, bring its backend up and build the kernels.
        Any failure here is an initialization failure for the caller.
        """
        di = self.choose_device(self.default_backend, self.default_device)
        if settings.precision_tag == "f64" and not di.supports_fp64:
            raise BackendInitError(f"{di.label} has no double precision support")
        self.pool.compile_all(fractal, settings)
        self.pool.get(di.backend, di.device_id)
        logger.info("Compiled %s (%s) for %s", fractal.name, settings.precision_tag, di.label)
        self.active = di
        return di

    def close(self) -> None:
        self.pool.close_all()
        self.active = None

    # ---- Device APIs ----------------------------------------------------

    def choose_device(
        self,
        backend: Optional[str] = None,
        device: Optional[int] = None,
    ) -> DeviceInfo:
        return self.devices.choose(backend=backend, device=device)

    def _choose_backend_and_device(self, backend: Optional[str], device: Optional[int]) -> Tuple[str, Optional[int]]:
        if backend is None and device is None and self.active is not None:
            return self.active.backend, self.active.device_id
        backend = backend or self.default_backend
        device = device if device is not None else self.default_device
        if backend is not None and backend.upper() != "AUTO" and device is not None:
            return backend, device
        di = self.choose_device(backend=backend, device=device)
        return di.backend, di.device_id

    # ---- Single render --------------------------------------------------

    def render(
        self,
        fractal: Fractal,
        vp: Viewport,
        settings: RenderSettings,
        backend: Optional[str] = None,
        device: Optional[int] = None,
    ) -> np.ndarray:
        return self.render_async(fractal, vp, settings, backend, device).wait()

    def render_async(
        self,
        fractal: Fractal,
        vp: Viewport,
        settings: RenderSettings,
        backend: Optional[str] = None,
        device: Optional[int] = None,
    ) -> RenderHandle:
        name, dev = self._choose_backend_and_device(backend, device)
        be = self.pool.get(name, dev)
        result, evt = be.render_async(fractal, vp, settings)
        return RenderHandle(result, evt.wait)
