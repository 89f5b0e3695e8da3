from __future__ import annotations
import logging
from typing import List, Optional

from devices.types import DeviceInfo
from devices.providers.prov_cpu import CpuDeviceProvider
from devices.providers.prov_opencl import OpenClDeviceProvider
from utils.errors import BackendInitError

logger = logging.getLogger(__name__)


BACKEND_PRIORITY = {"CPU": 0, "OPENCL": 8}
PROVIDER = OpenClDeviceProvider | CpuDeviceProvider


class DeviceManager:
    """
    Enumerates, scores, and selects devices via pluggable providers.
    """
    def __init__(self, providers: Optional[List[PROVIDER]] = None) -> None:
        self.providers = providers if providers is not None else [OpenClDeviceProvider(), CpuDeviceProvider()]
        self._devices: List[DeviceInfo] = []
        self.refresh()

    # ---- Discovery ------------------------------------------------------

    def refresh(self) -> None:
        devices: List[DeviceInfo] = []
        for p in self.providers:
            for raw in p.enumerate():
                di = raw if isinstance(raw, DeviceInfo) else DeviceInfo(backend=p.backend, **raw)
                devices.append(di)
        self._devices = self._score_devices(devices)
        for d in self._devices:
            logger.debug("Device %s/%s '%s' score=%.3f", d.backend, d.device_id, d.name, d.score)

    def list(self, backend: Optional[str] = None) -> List[DeviceInfo]:
        if backend:
            be = backend.upper()
            return [d for d in self._devices if d.backend.upper() == be]
        return list(self._devices)

    # ---- Selection ------------------------------------------------------

    def choose(
        self,
        backend: Optional[str] = None,
        device: Optional[int] = None,
    ) -> DeviceInfo:
        """
        Best device for the request. backend None or "AUTO" ranks every
        backend; a named backend with no device is an initialization failure.
        """
        if backend is not None and backend.upper() == "AUTO":
            backend = None
        cand = self.list(backend) if backend else list(self._devices)

        if device is not None:
            for d in cand:
                if d.device_id == device:
                    return d
            raise BackendInitError(f"No device {device} for backend {backend or '*'}")

        if not cand:
            raise BackendInitError(f"No devices available for backend {backend or '*'}")

        return cand[0]

    # ---- Scoring --------------------------------------------------------

    @staticmethod
    def _normalize(xs: List[float]) -> List[float]:
        if not xs: return []
        lo, hi = min(xs), max(xs)
        if hi <= lo: return [0.5 for _ in xs]
        r = hi - lo
        return [(x - lo) / r for x in xs]

    def _score_devices(self, devices: List[DeviceInfo]) -> List[DeviceInfo]:
        if not devices: return []

        mems = [float(d.memory_total_mb or 0) for d in devices]
        units = [float(d.compute_units or 0) for d in devices]
        prios = [float(BACKEND_PRIORITY.get(d.backend.upper(), -1)) for d in devices]

        n_mem, n_units, n_prio = map(self._normalize, (mems, units, prios))

        scored: List[DeviceInfo] = []
        for i, d in enumerate(devices):
            if not d.is_available:
                continue
            s = (
                0.50 * n_prio[i] +
                0.20 * float(d.is_gpu) +
                0.15 * n_mem[i] +
                0.15 * n_units[i]
            )
            scored.append(DeviceInfo(**{**d.__dict__, "score": float(s)}))

        scored.sort(key=lambda di: di.score, reverse=True)
        return scored
