"""LZW dictionary coder with fixed-width 12-bit codes."""

import logging
from typing import Dict, List

from ..constants import LZW_ALPHABET_SIZE, LZW_MAX_DICT_SIZE, LZW_CODE_BIT_LEN
from ..errors import InvalidArgumentError, MalformedPayloadError
from ..io.bitstream import pack_bits, unpack_bits

logger = logging.getLogger(__name__)


def _initial_dictionary() -> Dict[bytes, int]:
    return {bytes([i]): i for i in range(LZW_ALPHABET_SIZE)}


def lzw_encode(data: bytes, max_dict_size: int = LZW_MAX_DICT_SIZE) -> bytes:
    """
    Compress bytes with LZW.

    The dictionary starts with the 256 single bytes and grows by one entry
    per emitted code until it holds `max_dict_size` entries; after that it
    is frozen. Codes are packed MSB-first, 12 bits each.

    Args:
        data: Input bytes
        max_dict_size: Dictionary capacity (at most 4096 for 12-bit codes)

    Returns:
        Packed codes

    Raises:
        InvalidArgumentError: On empty input or an invalid capacity
    """
    if not data:
        raise InvalidArgumentError("Cannot LZW-encode an empty buffer")
    if not LZW_ALPHABET_SIZE <= max_dict_size <= (1 << LZW_CODE_BIT_LEN):
        raise InvalidArgumentError(f"Invalid LZW dictionary capacity: {max_dict_size}")

    dictionary = _initial_dictionary()
    codes: List[int] = []
    match = b''

    for byte in bytes(data):
        candidate = match + bytes([byte])
        if candidate in dictionary:
            match = candidate
            continue

        codes.append(dictionary[match])
        if len(dictionary) < max_dict_size:
            dictionary[candidate] = len(dictionary)
            if len(dictionary) == max_dict_size:
                logger.warning("LZW dictionary full at %d entries; growth stopped", max_dict_size)
        match = bytes([byte])

    codes.append(dictionary[match])

    logger.debug("LZW: %d bytes -> %d codes, dictionary %d entries",
                 len(data), len(codes), len(dictionary))
    return pack_bits(codes, LZW_CODE_BIT_LEN)


def lzw_decode(encoded: bytes, max_dict_size: int = LZW_MAX_DICT_SIZE) -> bytes:
    """
    Decompress an LZW code stream.

    Rebuilds the encoder's dictionary in the same order from the codes
    alone, including the case where a code refers to the entry that is
    about to be created.

    Raises:
        InvalidArgumentError: On empty input
        MalformedPayloadError: If the stream holds no complete code or a
                               code that the dictionary cannot resolve
    """
    if not encoded:
        raise InvalidArgumentError("Cannot LZW-decode an empty buffer")

    codes = unpack_bits(encoded, LZW_CODE_BIT_LEN)
    if not codes:
        raise MalformedPayloadError("LZW stream is shorter than one code")

    # Index -> string; grows exactly like the encoder's map
    entries: List[bytes] = [bytes([i]) for i in range(LZW_ALPHABET_SIZE)]

    first = codes[0]
    if first >= len(entries):
        raise MalformedPayloadError(f"Invalid first LZW code: {first}")

    previous = entries[first]
    output = bytearray(previous)

    for code in codes[1:]:
        if code < len(entries):
            current = entries[code]
        elif code == len(entries) and len(entries) < max_dict_size:
            # KwKwK: the entry being defined by this very step
            current = previous + previous[:1]
        else:
            raise MalformedPayloadError(
                f"LZW code {code} beyond dictionary size {len(entries)}")

        output.extend(current)
        if len(entries) < max_dict_size:
            entries.append(previous + current[:1])
        previous = current

    return bytes(output)
