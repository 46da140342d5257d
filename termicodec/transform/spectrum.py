"""Frequency-domain views and filters for grayscale frames."""

import numpy as np

from .dct import dft2, idft2, orthonormal_dct2
from .haar import haar_forward_2d
from ..errors import InvalidArgumentError

FILTER_TYPES = ('ideal_lowpass', 'ideal_highpass', 'gaussian_lowpass', 'gaussian_highpass')


def _scale_to_byte(values: np.ndarray, peak: float) -> np.ndarray:
    if peak <= 0:
        return np.zeros(values.shape, dtype=np.uint8)
    return np.clip(values / peak * 255.0, 0, 255).astype(np.uint8)


def dft_magnitude_spectrum(image: np.ndarray) -> np.ndarray:
    """
    Log-magnitude DFT spectrum with the zero frequency at the center.

    Returns:
        uint8 array of the input shape, scaled so the peak is 255
    """
    magnitude = np.log1p(np.abs(dft2(image)))
    magnitude = np.fft.fftshift(magnitude)
    return _scale_to_byte(magnitude, magnitude.max())


def dct_spectrum(image: np.ndarray) -> np.ndarray:
    """
    Log-scaled orthonormal DCT coefficient magnitudes.

    DC sits in the top-left corner.
    """
    coeffs = np.abs(orthonormal_dct2(image))
    peak = coeffs.max()
    if peak <= 0:
        return np.zeros(image.shape, dtype=np.uint8)
    return _scale_to_byte(np.log1p(coeffs), np.log1p(peak))


def max_haar_levels(shape) -> int:
    """Largest number of Haar levels both dimensions support."""
    levels = 0
    h, w = shape
    while h % 2 == 0 and w % 2 == 0 and h > 1 and w > 1:
        h //= 2
        w //= 2
        levels += 1
    return levels


def dwt_spectrum(image: np.ndarray, levels: int = None) -> np.ndarray:
    """
    Haar coefficient magnitudes scaled linearly to 0-255.

    Args:
        image: 2D array
        levels: Decomposition depth (default: as deep as the shape allows)
    """
    if levels is None:
        levels = max_haar_levels(image.shape)
    coeffs = np.abs(haar_forward_2d(image, levels))
    return _scale_to_byte(coeffs, coeffs.max())


def frequency_mask(shape, filter_type: str, cutoff: float) -> np.ndarray:
    """
    Build a filter mask laid out like an unshifted DFT.

    Distances are measured from the spectrum center; the mask is then
    shifted so the zero frequency lands at index (0, 0).
    """
    if filter_type not in FILTER_TYPES:
        raise InvalidArgumentError(f"Unknown filter type: {filter_type}")
    if cutoff <= 0:
        raise InvalidArgumentError(f"Cutoff must be positive, got {cutoff}")

    h, w = shape
    y = np.arange(h).reshape(-1, 1) - h / 2.0
    x = np.arange(w).reshape(1, -1) - w / 2.0
    dist_sq = y ** 2 + x ** 2
    cutoff_sq = cutoff ** 2

    if filter_type == 'ideal_lowpass':
        mask = (dist_sq <= cutoff_sq).astype(np.float64)
    elif filter_type == 'ideal_highpass':
        mask = (dist_sq > cutoff_sq).astype(np.float64)
    elif filter_type == 'gaussian_lowpass':
        mask = np.exp(-dist_sq / (2.0 * cutoff_sq))
    else:
        mask = 1.0 - np.exp(-dist_sq / (2.0 * cutoff_sq))

    return np.fft.ifftshift(mask)


def apply_frequency_filter(image: np.ndarray, filter_type: str, cutoff: float) -> np.ndarray:
    """
    Filter a grayscale frame in the DFT domain.

    Args:
        image: 2D uint8 array
        filter_type: One of FILTER_TYPES
        cutoff: Cutoff radius (ideal) or standard deviation (gaussian), in
                frequency bins

    Returns:
        Filtered uint8 frame, clamped to [0, 255]
    """
    spectrum = dft2(image) * frequency_mask(image.shape, filter_type, cutoff)
    filtered = idft2(spectrum)
    return np.clip(filtered, 0, 255).astype(np.uint8)
