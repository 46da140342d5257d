"""Differential coding of block DC terms."""

import numpy as np


def dpcm_encode_dc(dc_values: np.ndarray) -> np.ndarray:
    """First value as-is, then each value minus its predecessor."""
    dc_values = np.asarray(dc_values)
    return np.diff(dc_values, prepend=dc_values.dtype.type(0))


def dpcm_decode_dc(diff_values: np.ndarray) -> np.ndarray:
    """Running sum of the differences."""
    return np.cumsum(diff_values)
