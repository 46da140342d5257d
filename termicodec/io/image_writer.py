"""Grayscale image writer supporting Pillow formats, NumPy, and raw buffers."""

import numpy as np
from pathlib import Path
from PIL import Image

from ..errors import InvalidArgumentError


def write_grayscale_image(image: np.ndarray, path: str, format: str = None) -> Path:
    """
    Write an 8-bit grayscale image to file.

    Args:
        image: 2D numpy array
        path: Output file path
        format: 'png', 'npy' or 'raw'. Auto-detected from extension if None;
                other extensions are handed to Pillow, no extension means PNG.

    Returns:
        The path actually written

    Raises:
        InvalidArgumentError: If the image is not 2D
    """
    path = Path(path)

    if format is None:
        suffix = path.suffix.lower()
        if suffix == '.npy':
            format = 'npy'
        elif suffix == '.raw':
            format = 'raw'
        elif suffix:
            format = 'pillow'
        else:
            format = 'png'
            path = path.with_suffix('.png')

    if image.ndim != 2:
        raise InvalidArgumentError(f"Expected 2D array, got {image.ndim}D")

    pixels = np.clip(image, 0, 255).astype(np.uint8)

    if format == 'npy':
        np.save(str(path), pixels)
    elif format == 'raw':
        with open(path, 'wb') as f:
            f.write(pixels.tobytes())
    elif format in ('png', 'pillow'):
        Image.fromarray(pixels).save(str(path))
    else:
        raise InvalidArgumentError(f"Unsupported format: {format}")

    return path
