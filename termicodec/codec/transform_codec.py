"""Whole-frame DCT and Haar wavelet codecs with signed-byte coefficients."""

import logging
import struct

import numpy as np

from ..constants import (
    DCT_HEADER_FORMAT, DCT_HEADER_SIZE, WAVELET_HEADER_FORMAT,
    WAVELET_HEADER_SIZE, DEFAULT_WAVELET_LEVELS, TRANSFORM_QUANT_STEP,
)
from ..errors import InvalidArgumentError, DimensionMismatchError, MalformedPayloadError
from ..quantization import quantize_to_int8, dequantize_int8
from ..transform import (
    level_shift, dct2_unnormalized, idct3_unnormalized,
    haar_forward_2d, haar_inverse_2d, check_levels,
)

logger = logging.getLogger(__name__)


def _check_image(image: np.ndarray) -> None:
    if image.ndim != 2 or image.size == 0:
        raise InvalidArgumentError(f"Expected non-empty 2D grayscale image, got shape {image.shape}")


def _check_dimensions(stored_w: int, stored_h: int, width, height) -> None:
    if (width is not None and width != stored_w) or (height is not None and height != stored_h):
        raise DimensionMismatchError(
            f"Payload holds a {stored_w}x{stored_h} image, expected {width}x{height}")


def _read_coefficients(payload: bytes, offset: int, w: int, h: int) -> np.ndarray:
    if w <= 0 or h <= 0:
        raise MalformedPayloadError(f"Invalid stored dimensions {w}x{h}")
    expected = offset + w * h
    if len(payload) != expected:
        raise MalformedPayloadError(
            f"Payload length {len(payload)} does not match {w}x{h} image ({expected} bytes)")
    return np.frombuffer(payload, dtype=np.int8, offset=offset).reshape(h, w)


def dct_based_encode(image: np.ndarray) -> bytes:
    """
    Encode a grayscale image with one whole-frame DCT.

    Layout: int32 width | int32 height | width*height int8 coefficients

    Coefficients are quantized with a fixed step of 10 and saturate at the
    signed-byte range, so large low-frequency terms lose magnitude.
    """
    _check_image(image)
    h, w = image.shape

    coeffs = dct2_unnormalized(level_shift(image, forward=True))
    quant = quantize_to_int8(coeffs, TRANSFORM_QUANT_STEP)

    logger.debug("DCT codec: %dx%d image", w, h)
    return struct.pack(DCT_HEADER_FORMAT, w, h) + quant.tobytes()


def dct_based_decode(payload: bytes, width: int = None, height: int = None) -> np.ndarray:
    """
    Decode a dct_based payload.

    Args:
        payload: Output of dct_based_encode
        width: Expected width (checked against the header when given)
        height: Expected height (checked against the header when given)

    Returns:
        uint8 image of shape (height, width)

    Raises:
        DimensionMismatchError: If the stored dimensions differ from the request
        MalformedPayloadError: If the payload is truncated or oversized
    """
    if len(payload) < DCT_HEADER_SIZE:
        raise MalformedPayloadError(f"DCT payload too short: {len(payload)} bytes")

    w, h = struct.unpack(DCT_HEADER_FORMAT, payload[:DCT_HEADER_SIZE])
    _check_dimensions(w, h, width, height)
    quant = _read_coefficients(payload, DCT_HEADER_SIZE, w, h)

    spatial = idct3_unnormalized(dequantize_int8(quant, TRANSFORM_QUANT_STEP))
    return level_shift(spatial / (4.0 * w * h), forward=False)


def wavelet_encode(image: np.ndarray, levels: int = DEFAULT_WAVELET_LEVELS) -> bytes:
    """
    Encode a grayscale image with a multi-level Haar transform.

    Layout: int32 width | int32 height | int32 levels | width*height int8 coefficients

    Raises:
        InvalidArgumentError: If the dimensions are not multiples of 2**levels
    """
    _check_image(image)
    check_levels(image.shape, levels)
    h, w = image.shape

    coeffs = haar_forward_2d(level_shift(image, forward=True), levels)
    quant = quantize_to_int8(coeffs, TRANSFORM_QUANT_STEP)

    logger.debug("Wavelet codec: %dx%d image, %d levels", w, h, levels)
    return struct.pack(WAVELET_HEADER_FORMAT, w, h, levels) + quant.tobytes()


def wavelet_decode(payload: bytes, width: int = None, height: int = None) -> np.ndarray:
    """Decode a wavelet payload; same checks as dct_based_decode."""
    if len(payload) < WAVELET_HEADER_SIZE:
        raise MalformedPayloadError(f"Wavelet payload too short: {len(payload)} bytes")

    w, h, levels = struct.unpack(WAVELET_HEADER_FORMAT, payload[:WAVELET_HEADER_SIZE])
    _check_dimensions(w, h, width, height)
    quant = _read_coefficients(payload, WAVELET_HEADER_SIZE, w, h)

    try:
        check_levels((h, w), levels)
    except InvalidArgumentError as e:
        raise MalformedPayloadError(str(e)) from e

    spatial = haar_inverse_2d(dequantize_int8(quant, TRANSFORM_QUANT_STEP), levels)
    return level_shift(spatial, forward=False)
