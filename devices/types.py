from __future__ import annotations
from dataclasses import dataclass, field
from typing import Optional, Dict


@dataclass(frozen=True)
class DeviceInfo:
    """
    One compute target as reported by a provider. device_id is the global
    OpenCL ordinal, or None for the host CPU.
    """
    backend: str
    device_id: Optional[int]
    name: str
    vendor: Optional[str] = None
    driver: Optional[str] = None
    compute_units: Optional[int] = None
    memory_total_mb: Optional[int] = None
    is_gpu: bool = False
    score: float = 0.0
    is_available: bool = True
    extra: Dict[str, object] = field(default_factory=dict)

    @property
    def label(self) -> str:
        where = "" if self.device_id is None else f"#{self.device_id} "
        return f"{self.backend} {where}'{self.name}'"

    @property
    def supports_fp64(self) -> bool:
        # host CPU always has doubles; OpenCL devices report cl_khr_fp64
        return bool(self.extra.get("fp64", self.backend.upper() == "CPU"))
