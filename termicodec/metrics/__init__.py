"""Quality metrics."""

from .quality import (
    calculate_mse,
    calculate_rmse,
    calculate_psnr,
    calculate_bpp,
    calculate_compression_ratio,
    generate_error_map,
    normalize_for_display,
)

__all__ = [
    'calculate_mse',
    'calculate_rmse',
    'calculate_psnr',
    'calculate_bpp',
    'calculate_compression_ratio',
    'generate_error_map',
    'normalize_for_display',
]
