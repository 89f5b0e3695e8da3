from __future__ import annotations
import threading
from typing import Tuple

import numpy as np


class FrameBuffer:
    """
    Hand-off point between the generation job and the display loop.

    The job renders into its own array and publish() swaps the handle under
    a lock; readers only ever see complete frames. Published arrays are
    frozen (writeable=False) so neither side can mutate a shared frame.
    """

    def __init__(self, width: int, height: int) -> None:
        self.width = int(width)
        self.height = int(height)
        blank = np.zeros((self.height, self.width, 3), dtype=np.uint8)
        blank.flags.writeable = False
        self._lock = threading.Lock()
        self._image = blank
        self._seq = 0

    @property
    def shape(self) -> Tuple[int, int, int]:
        return self.height, self.width, 3

    def publish(self, image: np.ndarray, seq: int) -> bool:
        """
        Make image the current frame. Frames older than the current one are
        ignored (returns False).
        """
        if image.shape != self.shape or image.dtype != np.uint8:
            raise ValueError(
                f"Frame must be {self.shape} uint8, got {image.shape} {image.dtype}")
        image.flags.writeable = False
        with self._lock:
            if seq < self._seq:
                return False
            self._image = image
            self._seq = seq
        return True

    def latest(self) -> Tuple[np.ndarray, int]:
        with self._lock:
            return self._image, self._seq
