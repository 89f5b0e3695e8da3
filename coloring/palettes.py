import numpy as np


def build_palette(max_iter: int) -> np.ndarray:
    """
    Builds the iteration -> RGB lookup table used for every frame.

    For t = iter / max_iter the channels follow the Bernstein-style ramp
        r = 9    * (1-t)   * t^3 * 255
        g = 15   * (1-t)^2 * t^2 * 255
        b = 8.5  * (1-t)^3 * t   * 255
    evaluated in float64, clamped to [0, 255] and truncated to uint8.

    Parameters:
        max_iter (int): Iteration cap; the table has max_iter + 1 rows.

    Returns:
        np.ndarray: Read-only (max_iter + 1, 3) uint8 table.
    """
    if max_iter < 1:
        raise ValueError(f"max_iter must be >= 1, got {max_iter}")

    t = np.arange(max_iter + 1, dtype=np.float64) / max_iter
    s = 1.0 - t
    channels = np.stack([
        9.0 * s * t ** 3,
        15.0 * s ** 2 * t ** 2,
        8.5 * s ** 3 * t,
    ], axis=1) * 255.0

    table = np.clip(channels, 0.0, 255.0).astype(np.uint8)
    table.flags.writeable = False
    return table
