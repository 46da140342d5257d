"""Run-length coding: byte streams and block AC coefficients."""

from typing import List, Tuple

from ..constants import MARKER_EOB, MARKER_ZRL, RLE_MAX_RUN
from ..errors import InvalidArgumentError, MalformedPayloadError

# Special markers for coefficient runs
EOB = MARKER_EOB  # End of Block - remaining coefficients are all zeros
ZRL = MARKER_ZRL  # Zero Run Length - 16 consecutive zeros


def rle_encode(data: bytes) -> bytes:
    """
    Encode bytes as (count, byte) pairs.

    Runs longer than 255 are split into several pairs.

    Raises:
        InvalidArgumentError: On empty input
    """
    if not data:
        raise InvalidArgumentError("Cannot RLE-encode an empty buffer")

    data = bytes(data)
    result = bytearray()
    i = 0
    while i < len(data):
        current = data[i]
        j = i
        while j < len(data) and data[j] == current and j - i < RLE_MAX_RUN:
            j += 1
        result.append(j - i)
        result.append(current)
        i = j

    return bytes(result)


def rle_decode(encoded: bytes) -> bytes:
    """
    Expand (count, byte) pairs.

    Raises:
        InvalidArgumentError: On empty input
        MalformedPayloadError: If the stream has an odd length
    """
    if not encoded:
        raise InvalidArgumentError("Cannot RLE-decode an empty buffer")
    if len(encoded) % 2:
        raise MalformedPayloadError(f"RLE stream has odd length {len(encoded)}")

    result = bytearray()
    for k in range(0, len(encoded), 2):
        result.extend(bytes([encoded[k + 1]]) * encoded[k])
    return bytes(result)


def rle_encode_ac(ac_coeffs: List[int]) -> List[Tuple[int, int]]:
    """
    Code AC coefficients as (zero run, value) pairs.

    Runs of 16 or more zeros before a value are broken up with ZRL; trailing
    zeros collapse into a single EOB. An all-zero block is just [EOB].
    """
    pairs = []
    last = -1
    for pos, coeff in enumerate(ac_coeffs):
        if coeff == 0:
            continue
        gap = pos - last - 1
        pairs.extend([ZRL] * (gap // 16))
        pairs.append((gap % 16, coeff))
        last = pos

    if last < len(ac_coeffs) - 1 or not pairs:
        pairs.append(EOB)
    return pairs


def rle_decode_ac(rle_pairs: List[Tuple[int, int]], length: int = 63) -> List[int]:
    """Expand (run, value) pairs into exactly `length` coefficients."""
    coeffs = [0] * length
    pos = 0
    for pair in rle_pairs:
        if pair == EOB:
            break
        if pair == ZRL:
            pos += 16
            continue
        run, value = pair
        pos += run
        if pos < length:
            coeffs[pos] = value
        pos += 1
    return coeffs
