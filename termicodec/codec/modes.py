"""Compression mode selection: one entry point for every codec."""

import logging
import struct
from typing import Union

import numpy as np

from .encoder import BlockImageEncoder
from .decoder import BlockImageDecoder
from .transform_codec import dct_based_encode, dct_based_decode, wavelet_encode, wavelet_decode
from ..constants import (
    COMPRESSION_MODES, BYTE_MODES, IMAGE_MODES, NUM_SYMBOLS,
    DEFAULT_QUALITY, DEFAULT_WAVELET_LEVELS,
)
from ..entropy import (
    calculate_frequencies, build_huffman_tree, build_code_table,
    huffman_encode, huffman_decode, arithmetic_encode, arithmetic_decode,
    lzw_encode, lzw_decode, rle_encode, rle_decode,
)
from ..errors import InvalidArgumentError, MalformedPayloadError
from ..io.container import pack_container, unpack_container, read_container_header
from ..io.image_reader import image_from_buffer

logger = logging.getLogger(__name__)

FREQ_TABLE_FORMAT = f'<{NUM_SYMBOLS}I'
FREQ_TABLE_SIZE = struct.calcsize(FREQ_TABLE_FORMAT)
HUFFMAN_SIDE_FORMAT = f'<{NUM_SYMBOLS}IQ'   # frequencies, total bit count
HUFFMAN_SIDE_SIZE = struct.calcsize(HUFFMAN_SIDE_FORMAT)


def _as_image(data, width, height) -> np.ndarray:
    if isinstance(data, np.ndarray):
        if data.ndim != 2:
            raise InvalidArgumentError(f"Image modes need a 2D grayscale array, got shape {data.shape}")
        return np.clip(data, 0, 255).astype(np.uint8)
    if width is None or height is None:
        raise InvalidArgumentError("Width and height are required to compress raw bytes as an image")
    return image_from_buffer(bytes(data), width, height)


def _encode_bytes(data: bytes, mode: str):
    """Return (side_info, payload) for a byte mode."""
    if mode == 'huffman':
        freqs = calculate_frequencies(data)
        code_table = build_code_table(build_huffman_tree(freqs))
        payload, total_bits = huffman_encode(data, code_table)
        return struct.pack(HUFFMAN_SIDE_FORMAT, *freqs.tolist(), total_bits), payload
    if mode == 'arithmetic':
        freqs = calculate_frequencies(data)
        return struct.pack(FREQ_TABLE_FORMAT, *freqs.tolist()), arithmetic_encode(data, freqs)
    if mode == 'lzw':
        return b'', lzw_encode(data)
    return b'', rle_encode(data)


def _decode_bytes(mode: str, side_info: bytes, payload: bytes, original_len: int) -> bytes:
    if mode == 'huffman':
        if len(side_info) != HUFFMAN_SIDE_SIZE:
            raise MalformedPayloadError("Huffman side info has the wrong size")
        values = struct.unpack(HUFFMAN_SIDE_FORMAT, side_info)
        tree = build_huffman_tree(values[:NUM_SYMBOLS])
        return huffman_decode(payload, values[NUM_SYMBOLS], tree)
    if mode == 'arithmetic':
        if len(side_info) != FREQ_TABLE_SIZE:
            raise MalformedPayloadError("Arithmetic side info has the wrong size")
        freqs = struct.unpack(FREQ_TABLE_FORMAT, side_info)
        return arithmetic_decode(payload, freqs, original_len)
    if mode == 'lzw':
        return lzw_decode(payload)
    return rle_decode(payload)


def compress(data: Union[bytes, np.ndarray], mode: str,
             quality: int = DEFAULT_QUALITY,
             levels: int = DEFAULT_WAVELET_LEVELS,
             width: int = None, height: int = None) -> bytes:
    """
    Compress a buffer with the named mode.

    Byte modes (lzw, huffman, arithmetic, rle) accept any bytes; a 2D
    uint8 array is compressed as its raw pixel bytes and comes back as an
    image. Image modes (dct_based, wavelet, jpeg) need a 2D grayscale
    array, or raw bytes together with width and height.

    Args:
        data: Input bytes or grayscale image
        mode: One of COMPRESSION_MODES
        quality: Block codec quality for 'jpeg' (1-100)
        levels: Haar levels for 'wavelet'
        width: Image width when `data` is raw bytes for an image mode
        height: Image height when `data` is raw bytes for an image mode

    Returns:
        Self-describing container bytes
    """
    if mode not in COMPRESSION_MODES:
        raise InvalidArgumentError(
            f"Unknown compression mode '{mode}'. Choose from: {', '.join(COMPRESSION_MODES)}")

    if mode in BYTE_MODES:
        w = h = 0
        if isinstance(data, np.ndarray):
            if data.ndim != 2:
                raise InvalidArgumentError(f"Expected bytes or a 2D image, got shape {data.shape}")
            h, w = data.shape
            raw = np.clip(data, 0, 255).astype(np.uint8).tobytes()
        else:
            raw = bytes(data)
        if not raw:
            raise InvalidArgumentError(f"Cannot compress an empty buffer with {mode}")
        side_info, payload = _encode_bytes(raw, mode)
        original_len = len(raw)
    else:
        image = _as_image(data, width, height)
        h, w = image.shape
        side_info = b''
        if mode == 'dct_based':
            payload = dct_based_encode(image)
        elif mode == 'wavelet':
            payload = wavelet_encode(image, levels)
        else:
            payload = BlockImageEncoder().encode(image, quality=quality)
        original_len = image.size

    if w > 0xFFFF or h > 0xFFFF:
        raise InvalidArgumentError(f"Image too large for container header: {w}x{h}")

    blob = pack_container(mode, payload, side_info, w, h, original_len)
    logger.debug("compress(%s): %d -> %d bytes", mode, original_len, len(blob))
    return blob


def decompress(blob: bytes) -> Union[bytes, np.ndarray]:
    """
    Reverse compress().

    Returns:
        bytes for byte-mode input given as bytes, otherwise a uint8 image

    Raises:
        MalformedPayloadError: On a damaged container or payload
        DimensionMismatchError: If an image payload disagrees with the
                                container's dimensions
    """
    header, side_info, payload = unpack_container(blob)
    mode = header['mode']
    w, h = header['width'], header['height']

    if mode in BYTE_MODES:
        result = _decode_bytes(mode, side_info, payload, header['original_len'])
        if len(result) != header['original_len']:
            raise MalformedPayloadError(
                f"Decoded {len(result)} bytes, container says {header['original_len']}")
        if w and h:
            return image_from_buffer(result, w, h)
        return result

    if mode == 'dct_based':
        return dct_based_decode(payload, w, h)
    if mode == 'wavelet':
        return wavelet_decode(payload, w, h)
    return BlockImageDecoder().decode(payload, w, h)


def get_container_info(blob: bytes) -> dict:
    """Container metadata without decoding."""
    return read_container_header(blob)
