"""Self-describing container for the mode selection layer."""

import struct
import zlib

from ..constants import (
    CONTAINER_MAGIC, CONTAINER_VERSION, CONTAINER_HEADER_FORMAT,
    CONTAINER_HEADER_SIZE, COMPRESSION_MODES,
)
from ..errors import InvalidArgumentError, MalformedPayloadError


def pack_container(mode: str, payload: bytes, side_info: bytes = b'',
                   width: int = 0, height: int = 0,
                   original_len: int = 0) -> bytes:
    """
    Wrap a codec payload with a header and a CRC32 trailer.

    Layout: header | side info | payload | CRC32 (over side info + payload)

    Args:
        mode: Compression mode name
        payload: Codec output
        side_info: Data the decoder needs besides the payload
                   (frequency tables, bit counts)
        width: Image width (0 for byte modes)
        height: Image height (0 for byte modes)
        original_len: Length of the uncompressed input in bytes

    Returns:
        Container bytes
    """
    if mode not in COMPRESSION_MODES:
        raise InvalidArgumentError(f"Unknown compression mode: {mode}")

    header = struct.pack(
        CONTAINER_HEADER_FORMAT,
        CONTAINER_MAGIC,
        CONTAINER_VERSION,
        COMPRESSION_MODES.index(mode),
        width,
        height,
        original_len,
        len(side_info),
        len(payload),
    )
    body = side_info + payload
    crc = zlib.crc32(body) & 0xFFFFFFFF
    return header + body + crc.to_bytes(4, 'little')


def read_container_header(data: bytes) -> dict:
    """Parse and validate the container header only."""
    if len(data) < CONTAINER_HEADER_SIZE:
        raise MalformedPayloadError(
            f"Data too short: {len(data)} bytes, need at least {CONTAINER_HEADER_SIZE}")

    (magic, version, mode_id, width, height,
     original_len, side_len, payload_len) = struct.unpack(
        CONTAINER_HEADER_FORMAT, data[:CONTAINER_HEADER_SIZE])

    if magic != CONTAINER_MAGIC:
        raise MalformedPayloadError(f"Invalid container magic: {magic}")
    if version != CONTAINER_VERSION:
        raise MalformedPayloadError(f"Unsupported container version: {version}")
    if mode_id >= len(COMPRESSION_MODES):
        raise MalformedPayloadError(f"Unknown mode id: {mode_id}")

    return {
        'version': version,
        'mode': COMPRESSION_MODES[mode_id],
        'width': width,
        'height': height,
        'original_len': original_len,
        'side_info_len': side_len,
        'payload_len': payload_len,
        'total_size': len(data),
    }


def unpack_container(data: bytes):
    """
    Split a container into its header fields, side info and payload.

    Returns:
        (header dict, side_info bytes, payload bytes)

    Raises:
        MalformedPayloadError: On bad magic, truncation or CRC mismatch
    """
    header = read_container_header(data)
    start = CONTAINER_HEADER_SIZE
    side_end = start + header['side_info_len']
    payload_end = side_end + header['payload_len']

    if len(data) != payload_end + 4:
        raise MalformedPayloadError(
            f"Container length mismatch: expected {payload_end + 4} bytes, got {len(data)}")

    body = data[start:payload_end]
    crc_received = int.from_bytes(data[payload_end:payload_end + 4], 'little')
    crc_computed = zlib.crc32(body) & 0xFFFFFFFF
    if crc_computed != crc_received:
        raise MalformedPayloadError(
            f"CRC mismatch: expected {crc_received:08X}, got {crc_computed:08X}")

    return header, data[start:side_end], data[side_end:payload_end]
