"""Transform modules: block/frame DCT, DFT, Haar wavelet and spectra."""

from .dct import (
    create_dct_matrix,
    forward_dct_block,
    inverse_dct_block,
    orthonormal_dct2,
    dct2_unnormalized,
    idct3_unnormalized,
    dft2,
    idft2,
)
from .haar import haar_forward_2d, haar_inverse_2d, check_levels
from .block_utils import split_into_blocks, merge_blocks, block_origins, extract_block
from .level_shift import level_shift
from .spectrum import (
    dft_magnitude_spectrum,
    dct_spectrum,
    dwt_spectrum,
    apply_frequency_filter,
    FILTER_TYPES,
)

__all__ = [
    'create_dct_matrix',
    'forward_dct_block',
    'inverse_dct_block',
    'orthonormal_dct2',
    'dct2_unnormalized',
    'idct3_unnormalized',
    'dft2',
    'idft2',
    'haar_forward_2d',
    'haar_inverse_2d',
    'check_levels',
    'split_into_blocks',
    'merge_blocks',
    'block_origins',
    'extract_block',
    'level_shift',
    'dft_magnitude_spectrum',
    'dct_spectrum',
    'dwt_spectrum',
    'apply_frequency_filter',
    'FILTER_TYPES',
]
