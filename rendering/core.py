from __future__ import annotations
import logging
from typing import Optional

import numpy as np

from coloring.base import ColoringStrategy
from coloring.escape_time import PaletteLookupColoring
from coloring.palettes import build_palette
from devices.types import DeviceInfo
from fractals.base import Fractal, Viewport, RenderSettings
from rendering.executor import RenderExecutor
from utils.errors import GenerationError

logger = logging.getLogger(__name__)


class FrameGenerator:

    """
    One full-frame computation:
      - dispatch the escape-time kernel through the executor,
      - block until the iteration buffer is readable on the host,
      - map every count through the palette table into a fresh RGB image.

    The returned image is never reused, so a caller can hand it to another
    thread once generate() returns.
    """

    def __init__(
        self,
        fractal: Fractal,
        settings: RenderSettings,
        *,
        executor: Optional[RenderExecutor] = None,
        palette: Optional[np.ndarray] = None,
        coloring: Optional[ColoringStrategy] = None,
        compile: bool = True,
    ):
        # Core state
        self.fractal = fractal
        self.settings = settings

        # Execution & resource ownership
        self.executor = executor or RenderExecutor()

        # Coloring (palette built once per iteration cap)
        self.palette = palette if palette is not None else build_palette(settings.max_iter)
        self.coloring = coloring or PaletteLookupColoring()

        self.device: Optional[DeviceInfo] = None
        if compile:
            self.device = self.executor.compile(self.fractal, self.settings)

    def close(self) -> None:
        self.executor.close()

    # ----------------------------
    # Generation entry points
    # ----------------------------

    def iterations(self, vp: Viewport) -> np.ndarray:
        """
        Raw (H, W) int32 iteration counts for the viewport.
        """
        counts = self.executor.render(self.fractal, vp, self.settings)
        if counts.shape != (vp.height, vp.width):
            raise GenerationError(
                f"Backend returned shape {counts.shape}, expected {(vp.height, vp.width)}")
        return counts

    def generate(self, vp: Viewport, seq: Optional[int] = None) -> np.ndarray:
        """
        (H, W, 3) uint8 image for the viewport; row-major so that
        image.tobytes()[(y * W + x) * 3:...] is pixel (x, y).
        """
        try:
            counts = self.iterations(vp)
        except GenerationError as e:
            if e.seq is None:
                e.seq = seq
            raise
        except Exception as e:
            raise GenerationError(f"Kernel dispatch failed: {e}", seq=seq) from e
        return self.coloring.apply(counts, self.palette)
