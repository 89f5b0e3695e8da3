from abc import ABC, abstractmethod
import numpy as np


class ColoringStrategy(ABC):
    @abstractmethod
    def apply(self, iter_buf: np.ndarray, palette: np.ndarray) -> np.ndarray:
        """Map an (H, W) iteration buffer to a fresh (H, W, 3) uint8 image."""
        ...
