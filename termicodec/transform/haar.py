"""Separable multi-level 2D Haar wavelet transform."""

import numpy as np

from ..errors import InvalidArgumentError

SQRT2 = np.sqrt(2.0)


def check_levels(shape, levels: int) -> None:
    """
    Validate that a (height, width) array supports `levels` decompositions.

    Raises:
        InvalidArgumentError: If levels < 0 or a dimension is not a
                              multiple of 2**levels
    """
    if levels < 0:
        raise InvalidArgumentError(f"Wavelet levels must be >= 0, got {levels}")
    h, w = shape
    factor = 1 << levels
    if h % factor or w % factor:
        raise InvalidArgumentError(
            f"{w}x{h} image is not divisible by 2**{levels} = {factor}")


def haar_forward_1d(x: np.ndarray) -> np.ndarray:
    """One Haar step along the last axis: averages first, then details."""
    even = x[..., 0::2]
    odd = x[..., 1::2]
    return np.concatenate([(even + odd) / SQRT2, (even - odd) / SQRT2], axis=-1)


def haar_inverse_1d(c: np.ndarray) -> np.ndarray:
    """Invert haar_forward_1d along the last axis."""
    half = c.shape[-1] // 2
    avg = c[..., :half]
    diff = c[..., half:]
    out = np.empty_like(c)
    out[..., 0::2] = (avg + diff) / SQRT2
    out[..., 1::2] = (avg - diff) / SQRT2
    return out


def haar_forward_2d(x: np.ndarray, levels: int) -> np.ndarray:
    """
    Multi-level 2D Haar transform.

    Each level transforms the rows, then the columns, of the current
    low-pass quadrant (top-left), which then halves in both dimensions.

    Args:
        x: 2D array whose dimensions are multiples of 2**levels
        levels: Number of decomposition levels

    Returns:
        float64 coefficient array of the same shape
    """
    check_levels(x.shape, levels)
    coeffs = x.astype(np.float64).copy()
    h, w = coeffs.shape

    for _ in range(levels):
        region = coeffs[:h, :w]
        region = haar_forward_1d(region)
        region = haar_forward_1d(region.T).T
        coeffs[:h, :w] = region
        h //= 2
        w //= 2

    return coeffs


def haar_inverse_2d(c: np.ndarray, levels: int) -> np.ndarray:
    """Invert haar_forward_2d, coarsest level first."""
    check_levels(c.shape, levels)
    data = c.astype(np.float64).copy()
    H, W = data.shape

    for level in range(levels - 1, -1, -1):
        h = H >> level
        w = W >> level
        region = data[:h, :w]
        region = haar_inverse_1d(region.T).T
        region = haar_inverse_1d(region)
        data[:h, :w] = region

    return data
