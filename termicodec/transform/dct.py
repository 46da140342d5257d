"""DCT and DFT primitives using matrix multiplication and numpy.fft."""

from functools import lru_cache

import numpy as np

from ..constants import BLOCK_SIZE


def create_dct_matrix(N: int = BLOCK_SIZE) -> np.ndarray:
    """
    Generate the 1D orthonormal DCT-II transform matrix of size N x N.

    The DCT matrix T has elements:
        T[i, j] = c[i] * cos((2j + 1) * i * pi / (2N))

    where:
        c[0] = 1/sqrt(N)
        c[k] = sqrt(2/N) for k > 0

    This matrix is orthogonal: T @ T.T = I
    """
    i = np.arange(N).reshape(-1, 1)
    j = np.arange(N).reshape(1, -1)
    T = np.sqrt(2 / N) * np.cos((2 * j + 1) * i * np.pi / (2 * N))
    T[0, :] = 1 / np.sqrt(N)
    return T


# Pre-compute DCT matrices for 8x8 blocks
DCT_MATRIX_8 = create_dct_matrix(BLOCK_SIZE)
DCT_MATRIX_8_T = DCT_MATRIX_8.T


def forward_dct_block(block: np.ndarray) -> np.ndarray:
    """
    Perform 2D DCT on an 8x8 block.

    Formula: D = T @ B @ T'
    """
    return DCT_MATRIX_8 @ block @ DCT_MATRIX_8_T


def inverse_dct_block(dct_block: np.ndarray) -> np.ndarray:
    """
    Perform 2D inverse DCT on an 8x8 block.

    Formula: B = T' @ D @ T
    """
    return DCT_MATRIX_8_T @ dct_block @ DCT_MATRIX_8


def orthonormal_dct2(image: np.ndarray) -> np.ndarray:
    """Orthonormal 2D DCT-II of a whole frame of any size."""
    h, w = image.shape
    return create_dct_matrix(h) @ image.astype(np.float64) @ create_dct_matrix(w).T


@lru_cache(maxsize=32)
def _redft10_matrix(N: int) -> np.ndarray:
    # C[k, n] = 2 cos(pi k (2n+1) / 2N)
    k = np.arange(N).reshape(-1, 1)
    n = np.arange(N).reshape(1, -1)
    return 2.0 * np.cos(np.pi * k * (2 * n + 1) / (2 * N))


@lru_cache(maxsize=32)
def _redft01_matrix(N: int) -> np.ndarray:
    # D[n, k] = w_k cos(pi k (2n+1) / 2N), w_0 = 1, w_k = 2
    n = np.arange(N).reshape(-1, 1)
    k = np.arange(N).reshape(1, -1)
    D = 2.0 * np.cos(np.pi * k * (2 * n + 1) / (2 * N))
    D[:, 0] = 1.0
    return D


def dct2_unnormalized(x: np.ndarray) -> np.ndarray:
    """
    Unnormalized 2D type-II DCT over the whole array.

    Per axis: Y[k] = 2 * sum_n x[n] * cos(pi * k * (2n + 1) / (2N))

    Args:
        x: 2D array (height, width)

    Returns:
        float64 coefficient array of the same shape
    """
    h, w = x.shape
    return _redft10_matrix(h) @ x.astype(np.float64) @ _redft10_matrix(w).T


def idct3_unnormalized(y: np.ndarray) -> np.ndarray:
    """
    Unnormalized 2D type-III DCT, the inverse of dct2_unnormalized up to scale.

    Per axis: x[n] = y[0] + 2 * sum_{k>0} y[k] * cos(pi * k * (2n + 1) / (2N))

    idct3_unnormalized(dct2_unnormalized(x)) == 4 * height * width * x
    """
    h, w = y.shape
    return _redft01_matrix(h) @ y.astype(np.float64) @ _redft01_matrix(w).T


def dft2(x: np.ndarray) -> np.ndarray:
    """2D discrete Fourier transform (complex128)."""
    return np.fft.fft2(x.astype(np.float64))


def idft2(X: np.ndarray) -> np.ndarray:
    """Inverse 2D DFT, returning the real part."""
    return np.real(np.fft.ifft2(X))
