"""MSB-first bit packing and the block codec header."""

import io
import struct
from typing import List

from ..constants import (
    BLOCK_MAGIC, BLOCK_VERSION, BLOCK_HEADER_FORMAT, BLOCK_HEADER_SIZE,
    BLOCK_SIZE, FLAG_DPCM, FLAG_SIGNED,
)
from ..errors import MalformedPayloadError


class BitstreamWriter:
    """
    Writes bits MSB first to a binary file object.

    Whole bytes go to the file as soon as they are complete; up to seven
    bits wait in the accumulator until the next write or flush().
    """

    def __init__(self, f=None):
        """
        Args:
            f: File object opened for binary writing. An in-memory buffer
               is used when omitted.
        """
        self.f = f if f is not None else io.BytesIO()
        self._acc = 0
        self._pending = 0
        self.bits_written = 0

    def write_bits(self, value: int, num_bits: int) -> None:
        """Append the low `num_bits` bits of value, most significant first."""
        if num_bits <= 0:
            return
        self._acc = (self._acc << num_bits) | (value & ((1 << num_bits) - 1))
        self._pending += num_bits
        self.bits_written += num_bits

        if self._pending >= 8:
            whole = self._pending // 8
            self._pending -= whole * 8
            self.f.write((self._acc >> self._pending).to_bytes(whole, 'big'))
            self._acc &= (1 << self._pending) - 1

    def write_bit(self, bit: int) -> None:
        self.write_bits(bit & 1, 1)

    def write_repeated(self, bit: int, count: int) -> None:
        """Write the same bit `count` times."""
        self.write_bits((1 << count) - 1 if bit else 0, count)

    def write_uint16(self, value: int) -> None:
        self.write_bits(value, 16)

    def flush(self) -> None:
        """Zero-pad the pending bits to a byte boundary and write them."""
        if self._pending:
            self.f.write(bytes([(self._acc << (8 - self._pending)) & 0xFF]))
            self._acc = 0
            self._pending = 0

    def getvalue(self) -> bytes:
        """Flush and return the bytes written to an in-memory buffer."""
        self.flush()
        return self.f.getvalue()


class BitstreamReader:
    """Reads bits MSB first from a byte string."""

    def __init__(self, data_bytes: bytes, zero_pad: bool = False):
        """
        Args:
            data_bytes: Binary data to read from
            zero_pad: Yield 0 bits past the end instead of raising EOFError
        """
        self.data = bytes(data_bytes)
        self.zero_pad = zero_pad
        self.pos = 0

    def read_bit(self) -> int:
        index = self.pos >> 3
        if index >= len(self.data):
            if self.zero_pad:
                self.pos += 1
                return 0
            raise EOFError("End of bitstream")
        bit = (self.data[index] >> (7 - (self.pos & 7))) & 1
        self.pos += 1
        return bit

    def read_bits(self, num_bits: int) -> int:
        """Read `num_bits` bits as an unsigned integer."""
        end = self.pos + num_bits
        if end > len(self.data) * 8:
            value = 0
            for _ in range(num_bits):
                value = (value << 1) | self.read_bit()
            return value

        first = self.pos >> 3
        last = (end + 7) >> 3
        chunk = int.from_bytes(self.data[first:last], 'big')
        self.pos = end
        return (chunk >> (last * 8 - end)) & ((1 << num_bits) - 1)

    def read_uint16(self) -> int:
        return self.read_bits(16)

    def bits_remaining(self) -> int:
        """Unread bits left in the data."""
        return max(0, len(self.data) * 8 - self.pos)


def pack_bits(values: List[int], width: int) -> bytes:
    """
    Pack fixed-width unsigned values MSB first, zero-padding the last byte.

    Args:
        values: Integers, each in [0, 2**width)
        width: Bits per value

    Returns:
        Packed bytes of length ceil(len(values) * width / 8)
    """
    writer = BitstreamWriter()
    for value in values:
        writer.write_bits(value, width)
    return writer.getvalue()


def unpack_bits(data: bytes, width: int) -> List[int]:
    """
    Unpack as many complete fixed-width values as the data holds.

    Trailing bits that do not form a full value are padding and ignored.
    """
    count = (len(data) * 8) // width
    reader = BitstreamReader(data)
    return [reader.read_bits(width) for _ in range(count)]


def pack_header(height: int, width: int, quality: int,
                pad_h: int, pad_w: int, data_len: int,
                use_dpcm: bool = True, signed: bool = False) -> bytes:
    """
    Pack block codec metadata into a 19-byte binary header.

    Args:
        height: Image height
        width: Image width
        quality: Quality parameter (1-100)
        pad_h: Vertical padding applied
        pad_w: Horizontal padding applied
        data_len: Length of payload in bytes
        use_dpcm: Whether DC DPCM was used
        signed: Whether the input was a signed residual frame

    Returns:
        19-byte header as bytes
    """
    flags = 0
    if use_dpcm:
        flags |= FLAG_DPCM
    if signed:
        flags |= FLAG_SIGNED

    return struct.pack(
        BLOCK_HEADER_FORMAT,
        BLOCK_MAGIC,
        BLOCK_VERSION,
        height,
        width,
        quality,
        flags,
        pad_h,
        pad_w,
        data_len,
    )


def unpack_header(header_bytes: bytes) -> dict:
    """
    Unpack the 19-byte block codec header.

    Args:
        header_bytes: 19-byte header data

    Returns:
        Dictionary with header fields

    Raises:
        MalformedPayloadError: If header is invalid
    """
    if len(header_bytes) != BLOCK_HEADER_SIZE:
        raise MalformedPayloadError(
            f"Header size mismatch. Expected {BLOCK_HEADER_SIZE}, got {len(header_bytes)}")

    magic, ver, h, w, q, flags, ph, pw, dlen = struct.unpack(BLOCK_HEADER_FORMAT, header_bytes)

    if magic != BLOCK_MAGIC:
        raise MalformedPayloadError(f"Invalid file signature: {magic}. Expected {BLOCK_MAGIC}")

    if ver != BLOCK_VERSION:
        raise MalformedPayloadError(f"Unsupported version: {ver}")

    if h == 0 or w == 0 or not 1 <= q <= 100:
        raise MalformedPayloadError(f"Invalid header fields: {w}x{h}, quality {q}")
    if (ph, pw) != (-h % BLOCK_SIZE, -w % BLOCK_SIZE):
        raise MalformedPayloadError(f"Padding {pw}x{ph} does not match a {w}x{h} frame")

    return {
        'height': h,
        'width': w,
        'quality': q,
        'padding_h': ph,
        'padding_w': pw,
        'data_len': dlen,
        'use_dpcm': bool(flags & FLAG_DPCM),
        'signed': bool(flags & FLAG_SIGNED),
    }
