"""Fidelity and rate metrics for 8-bit frames."""

import numpy as np

from ..constants import BIT_DEPTH


def _difference(original: np.ndarray, reconstructed: np.ndarray) -> np.ndarray:
    return original.astype(np.float64) - reconstructed.astype(np.float64)


def calculate_mse(original: np.ndarray, reconstructed: np.ndarray) -> float:
    """Mean squared error between two equally shaped arrays."""
    return float(np.mean(np.square(_difference(original, reconstructed))))


def calculate_rmse(original: np.ndarray, reconstructed: np.ndarray) -> float:
    return float(np.sqrt(calculate_mse(original, reconstructed)))


def calculate_psnr(original: np.ndarray, reconstructed: np.ndarray,
                   bit_depth: int = BIT_DEPTH) -> float:
    """
    Peak signal-to-noise ratio in dB, 10 * log10(peak^2 / MSE).

    The peak is 2**bit_depth - 1 (255 for 8-bit frames). Identical inputs
    give inf.
    """
    mse = calculate_mse(original, reconstructed)
    if mse == 0:
        return float('inf')
    peak = (1 << bit_depth) - 1
    return float(10 * np.log10(peak * peak / mse))


def calculate_bpp(compressed_size: int, image_shape: tuple) -> float:
    """Compressed bits per pixel for a (height, width) frame."""
    return compressed_size * 8 / (image_shape[0] * image_shape[1])


def calculate_compression_ratio(original_size: int, compressed_size: int) -> float:
    """original / compressed; inf for an empty output."""
    return original_size / compressed_size if compressed_size else float('inf')


def generate_error_map(original: np.ndarray, reconstructed: np.ndarray) -> np.ndarray:
    """Absolute per-pixel error, saturated to uint8."""
    return np.clip(np.abs(_difference(original, reconstructed)), 0, 255).astype(np.uint8)


def normalize_for_display(image: np.ndarray) -> np.ndarray:
    """Min-max stretch to 0-255; a constant array maps to zeros."""
    values = image.astype(np.float64)
    lo, hi = values.min(), values.max()
    if hi == lo:
        return np.zeros(image.shape, dtype=np.uint8)
    return ((values - lo) / (hi - lo) * 255).astype(np.uint8)
