import numpy as np
from PySide6.QtGui import QImage


def ndarray_to_qimage(arr: np.ndarray) -> QImage:
    """
    Convert an (h, w, 3) uint8 RGB frame into a QImage that owns its memory.
    """
    if arr.ndim != 3 or arr.shape[2] != 3 or arr.dtype != np.uint8:
        raise ValueError(f"Unsupported frame {arr.shape} {arr.dtype}; expected (h, w, 3) uint8")

    h, w, _ = arr.shape
    data = np.ascontiguousarray(arr)
    # Qt expects RGB888, rows tightly packed
    bytes_per_line = 3 * w
    qimg = QImage(data.tobytes(), w, h, bytes_per_line, QImage.Format_RGB888)
    return qimg.copy()
