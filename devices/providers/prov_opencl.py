from __future__ import annotations
from typing import List, Dict
import logging

import pyopencl as cl

from backend.model.be_opencl import list_opencl_devices

logger = logging.getLogger(__name__)

class OpenClDeviceProvider:
    backend = "OPENCL"

    @staticmethod
    def enumerate() -> List[Dict]:
        """
        Probe pyopencl platforms/devices and return a list of device dicts
        compatible with DeviceInfo construction in DeviceManager.
        """
        devs: List[Dict] = []
        for ordinal, d in list_opencl_devices():
            try:
                devs.append({
                    "device_id": ordinal,
                    "name": (d.name or f"OpenCL Device {ordinal}").strip(),
                    "vendor": (d.vendor or "").strip() or None,
                    "driver": d.driver_version,
                    "compute_units": int(d.max_compute_units),
                    "memory_total_mb": int(d.global_mem_size // (1024 ** 2)),
                    "is_gpu": bool(d.type & cl.device_type.GPU),
                    "is_available": bool(d.available),
                    "extra": {
                        "fp64": bool(getattr(d, "double_fp_config", 0)),
                    },
                })
            except cl.Error:
                logger.exception("Failed to read OpenCL device info for ordinal %d", ordinal)
        return devs
