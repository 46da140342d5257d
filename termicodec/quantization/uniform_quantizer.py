"""Uniform quantization for 8-bit frames and residuals."""

import logging

import numpy as np

from ..constants import PIXEL_MAX, TRANSFORM_QUANT_STEP
from ..errors import InvalidArgumentError

logger = logging.getLogger(__name__)

INT8_MIN = -128
INT8_MAX = 127


def get_quantization_step(quality: int) -> int:
    """
    Map quality parameter (1-100) to the block codec quantization step.

    The base step is one twentieth of the 8-bit range.

    Quality mapping:
        Q=1   → step = 637 (highest compression, lowest quality)
        Q=50  → step = 12  (medium)
        Q=75  → step = 6
        Q=100 → step = 1   (lowest compression, highest quality)

    Raises:
        InvalidArgumentError: If quality is not in range [1, 100]
    """
    if not 1 <= quality <= 100:
        raise InvalidArgumentError(f"Quality must be in range [1, 100], got {quality}")

    base_step = PIXEL_MAX / 20

    if quality < 50:
        factor = 50 / quality
    else:
        factor = (100 - quality) / 50

    step = int(base_step * factor)
    return max(1, step)


def quantize(coeffs: np.ndarray, step) -> np.ndarray:
    """Divide by the step and round to the nearest integer (int32)."""
    return np.round(coeffs / step).astype(np.int32)


def dequantize(quant_coeffs: np.ndarray, step) -> np.ndarray:
    """Multiply quantized values back by the step (float64)."""
    return quant_coeffs.astype(np.float64) * step


def quantize_to_int8(coeffs: np.ndarray, step: float = TRANSFORM_QUANT_STEP) -> np.ndarray:
    """
    Quantize whole-frame transform coefficients to signed bytes.

    Values outside [-128, 127] after rounding saturate to the nearest bound.
    """
    q = np.round(coeffs / step)
    clipped = np.count_nonzero((q < INT8_MIN) | (q > INT8_MAX))
    if clipped:
        logger.warning("%d of %d coefficients saturated to the int8 range", clipped, q.size)
    return np.clip(q, INT8_MIN, INT8_MAX).astype(np.int8)


def dequantize_int8(quant: np.ndarray, step: float = TRANSFORM_QUANT_STEP) -> np.ndarray:
    """Inverse of quantize_to_int8 (float64)."""
    return quant.astype(np.float64) * step
