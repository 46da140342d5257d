"""Level shift between unsigned 8-bit pixels and zero-centered samples."""

import numpy as np

from ..constants import CENTER_OFFSET, PIXEL_MAX


def level_shift(data: np.ndarray, forward: bool = True,
                offset: int = CENTER_OFFSET) -> np.ndarray:
    """
    Center pixels around zero, or undo the centering.

    - Forward (encoding): uint8 [0, 255] -> float64 [-128, 127]
    - Inverse (decoding): float64 -> uint8, rounded and clamped to [0, 255]

    Args:
        data: Input array
        forward: If True, subtract the offset; otherwise add it back
        offset: Centering offset (default: 128)

    Returns:
        Shifted array
    """
    if forward:
        return data.astype(np.float64) - offset

    result = data.astype(np.float64) + offset
    return np.clip(np.round(result), 0, PIXEL_MAX).astype(np.uint8)
