"""Grayscale image reader supporting Pillow formats, NumPy, and raw buffers."""

import numpy as np
from pathlib import Path
from PIL import Image

from ..constants import LUMA_WEIGHTS
from ..errors import InvalidArgumentError

NUMPY_SUFFIXES = ('.npy',)
RAW_SUFFIXES = ('.raw', '.gray')


def read_grayscale_image(path: str, width: int = None, height: int = None) -> np.ndarray:
    """
    Read an image file as an 8-bit grayscale pixel buffer.

    Args:
        path: Path to the image file (.png/.jpg/.bmp/... via Pillow, .npy, or .raw)
        width: Image width (required for .raw files)
        height: Image height (required for .raw files)

    Returns:
        2D numpy array (height, width) with dtype uint8

    Raises:
        InvalidArgumentError: If parameters are missing or the data is unusable
    """
    path = Path(path)
    suffix = path.suffix.lower()

    if suffix in NUMPY_SUFFIXES:
        return _read_numpy(path)
    elif suffix in RAW_SUFFIXES:
        if width is None or height is None:
            raise InvalidArgumentError("Width and height are required for .raw files")
        with open(path, 'rb') as f:
            return image_from_buffer(f.read(), width, height)
    else:
        return _read_pillow(path)


def _read_pillow(path: Path) -> np.ndarray:
    """Decode any Pillow-supported file and convert it to luma."""
    with Image.open(str(path)) as img:
        if img.mode in ('L', 'I;16', 'I', 'F'):
            data = np.asarray(img)
            return np.clip(data, 0, 255).astype(np.uint8)
        rgb = np.asarray(img.convert('RGB'))
    return rgb_to_grayscale(rgb)


def _read_numpy(path: Path) -> np.ndarray:
    """Read a NumPy array file (grayscale or RGB)."""
    data = np.load(str(path))

    if data.ndim == 3 and data.shape[2] in (3, 4):
        return rgb_to_grayscale(data[:, :, :3])
    if data.ndim != 2:
        raise InvalidArgumentError(f"Expected 2D array, got {data.ndim}D")

    return np.clip(np.round(data), 0, 255).astype(np.uint8)


def image_from_buffer(data: bytes, width: int, height: int) -> np.ndarray:
    """
    Interpret a flat row-major byte buffer as a grayscale image.

    Raises:
        InvalidArgumentError: If the buffer size does not match width*height
    """
    if width <= 0 or height <= 0:
        raise InvalidArgumentError(f"Invalid dimensions: {width}x{height}")

    expected_size = width * height
    if len(data) != expected_size:
        raise InvalidArgumentError(f"Data size mismatch. Expected {expected_size}, got {len(data)}")

    return np.frombuffer(data, dtype=np.uint8).reshape((height, width)).copy()


def rgb_to_grayscale(rgb: np.ndarray) -> np.ndarray:
    """
    Convert an RGB image to 8-bit luma.

    gray = 0.299 R + 0.587 G + 0.114 B

    Args:
        rgb: Array of shape (height, width, 3)

    Returns:
        2D uint8 array
    """
    if rgb.ndim != 3 or rgb.shape[2] != 3:
        raise InvalidArgumentError(f"Expected (H, W, 3) RGB array, got shape {rgb.shape}")

    weights = np.array(LUMA_WEIGHTS, dtype=np.float64)
    gray = rgb.astype(np.float64) @ weights
    return np.clip(np.round(gray), 0, 255).astype(np.uint8)
