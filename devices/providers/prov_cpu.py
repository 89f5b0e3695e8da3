from __future__ import annotations
import os
import platform
from typing import List, Dict

import numba


class CpuDeviceProvider:
    """
    The host CPU as a single device, driven by Numba's parallel threading layer.
    """
    backend = "CPU"

    @staticmethod
    def enumerate() -> List[Dict]:
        threads = numba.config.NUMBA_NUM_THREADS
        return [{
            "device_id": None,
            "name": platform.processor() or platform.machine() or "CPU",
            "vendor": platform.system() or None,
            "driver": f"numba {numba.__version__}",
            "compute_units": threads or os.cpu_count(),
            "memory_total_mb": None,
            "is_gpu": False,
            "is_available": True,
            "extra": {"fp64": True, "threads": threads},
        }]
