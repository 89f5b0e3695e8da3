from dataclasses import dataclass
import numpy as np
from typing import Optional

from fractals.base import Viewport


@dataclass(frozen=True)
class FrameEvent:
    """A generation finished and its image is now the current frame."""
    data: np.ndarray        # (H, W, 3) uint8, read-only
    width: int
    height: int
    seq: int                # generation sequence number
    viewport: Viewport      # view the frame was generated for
    elapsed_s: float


@dataclass(frozen=True)
class LogEvent:
    message: str
    level: Optional[str] = None     # None for informational, "error" on failures
