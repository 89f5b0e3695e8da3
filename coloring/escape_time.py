import numpy as np

from coloring.base import ColoringStrategy


class PaletteLookupColoring(ColoringStrategy):
    """
    Direct table lookup: rgb[y, x] = palette[iter[y, x]].
    Counts outside the table are clipped so a misbehaving backend cannot
    index past the end.
    """
    def apply(self, iter_buf: np.ndarray, palette: np.ndarray) -> np.ndarray:
        idx = np.clip(iter_buf, 0, len(palette) - 1)
        return np.ascontiguousarray(palette[idx], dtype=np.uint8)
