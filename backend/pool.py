from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from typing import Dict, Tuple, Optional, Type

from backend.model.be_base import Backend
from backend.model.be_cpu import CpuBackend
from backend.model.be_opencl import OpenClBackend
from fractals.base import Fractal, RenderSettings

logger = logging.getLogger(__name__)


# Small descriptor of a backend implementation
@dataclass(frozen=True)
class BackendSpec:
    cls: Type[Backend]
    supports_devices: bool


# Default registry
DEFAULT_BACKENDS: Dict[str, BackendSpec] = {
    "CPU":    BackendSpec(cls=CpuBackend,    supports_devices=False),
    "OPENCL": BackendSpec(cls=OpenClBackend, supports_devices=True),
}


class BackendPool:
    """
    Creates, caches and compiles backend instances.
    Keyed by (backend_name, device_id_or_None).
    """

    def __init__(self, registry: Optional[Dict[str, BackendSpec]] = None) -> None:
        self.registry: Dict[str, BackendSpec] = registry or DEFAULT_BACKENDS
        self._cache: Dict[Tuple[str, Optional[int]], Backend] = {}
        self._compiled_args: Optional[Tuple[Fractal, RenderSettings]] = None
        self._lock = threading.Lock()

    def _spec(self, name: str) -> BackendSpec:
        try:
            return self.registry[name.upper()]
        except KeyError as e:
            raise KeyError(f"Unknown backend '{name}'; known: {sorted(self.registry)}") from e

    def get(self, name: str, device: Optional[int] = None) -> Backend:
        spec = self._spec(name)
        key = (name.upper(), device if spec.supports_devices else None)
        with self._lock:
            if key in self._cache:
                return self._cache[key]
            be = spec.cls(device=device) if spec.supports_devices else spec.cls()
            # If we already compiled for (fractal, settings), apply lazily to new instances
            if self._compiled_args is not None:
                fractal, settings = self._compiled_args
                be.compile(fractal, settings)
            self._cache[key] = be
            logger.debug("Backend %s created for device %s", key[0], key[1])
            return be

    def compile_all(self, fractal: Fractal, settings: RenderSettings) -> None:
        """
        Record the current (fractal, settings), and eager-compile any cached instances.
        Newly created instances will be lazily compiled when first retrieved.
        """
        with self._lock:
            self._compiled_args = (fractal, settings)
            for be in list(self._cache.values()):
                be.compile(fractal, settings)

    def close_all(self) -> None:
        with self._lock:
            for be in list(self._cache.values()):
                be.close()
            self._cache.clear()
            self._compiled_args = None
