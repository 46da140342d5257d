"""32-bit range (arithmetic) coder over a static byte frequency table."""

import bisect
import logging
from typing import List, Sequence

import numpy as np

from ..constants import (
    NUM_SYMBOLS, RANGE_TOP, RANGE_HALF, RANGE_QUARTER, RANGE_THREE_QUARTERS,
    RANGE_CODE_BITS,
)
from ..errors import InvalidArgumentError, MalformedPayloadError
from ..io.bitstream import BitstreamWriter, BitstreamReader

logger = logging.getLogger(__name__)


def build_cumulative_frequencies(frequencies: Sequence[int]) -> List[int]:
    """
    Prefix sums of a 256-entry frequency table.

    cum[s] is the total count of symbols below s, cum[256] the grand total.

    Args:
        frequencies: 256 non-negative counts indexed by byte value

    Returns:
        257-entry list of Python ints

    Raises:
        InvalidArgumentError: On a wrong table size, negative counts, or a
                              total that is zero or too large for 32-bit
                              registers
    """
    freqs = np.asarray(frequencies, dtype=np.int64)
    if freqs.shape != (NUM_SYMBOLS,):
        raise InvalidArgumentError(
            f"Frequency table must have {NUM_SYMBOLS} entries, got shape {freqs.shape}")
    if (freqs < 0).any():
        raise InvalidArgumentError("Frequencies must be non-negative")

    cum = [0] * (NUM_SYMBOLS + 1)
    running = 0
    for symbol in range(NUM_SYMBOLS):
        running += int(freqs[symbol])
        cum[symbol + 1] = running

    if running == 0:
        raise InvalidArgumentError("Total frequency is zero")
    # Every symbol interval must survive the narrowest renormalized range
    if running >= RANGE_QUARTER:
        raise InvalidArgumentError(
            f"Total frequency {running} too large for a 32-bit range coder")

    return cum


def _narrow(low: int, high: int, cum: List[int], symbol: int):
    total = cum[NUM_SYMBOLS]
    span = high - low + 1
    new_high = low + (span * cum[symbol + 1]) // total - 1
    new_low = low + (span * cum[symbol]) // total
    return new_low, new_high


def arithmetic_encode(data: bytes, frequencies: Sequence[int]) -> bytes:
    """
    Encode bytes with a 32-bit range coder.

    The output carries no length or table; the decoder needs the same
    frequency table and the number of symbols.

    Args:
        data: Input bytes
        frequencies: 256-entry frequency table (normally the counts of `data`).
                     The counts must sum to less than 2**30 so every
                     symbol keeps a non-empty interval; scale larger
                     tables down first.

    Returns:
        Packed code bits, zero padded to a whole byte

    Raises:
        InvalidArgumentError: On empty input, an unusable table (including a
                              total of 2**30 or more), or a symbol whose
                              frequency is zero
    """
    if not data:
        raise InvalidArgumentError("Cannot arithmetic-encode an empty buffer")

    cum = build_cumulative_frequencies(frequencies)

    writer = BitstreamWriter()
    low, high = 0, RANGE_TOP
    bits_to_follow = 0

    for symbol in bytes(data):
        if cum[symbol + 1] == cum[symbol]:
            raise InvalidArgumentError(f"Symbol 0x{symbol:02X} has zero frequency")

        low, high = _narrow(low, high, cum, symbol)

        while True:
            if high < RANGE_HALF:
                writer.write_bit(0)
                writer.write_repeated(1, bits_to_follow)
                bits_to_follow = 0
            elif low >= RANGE_HALF:
                writer.write_bit(1)
                writer.write_repeated(0, bits_to_follow)
                bits_to_follow = 0
                low -= RANGE_HALF
                high -= RANGE_HALF
            elif low >= RANGE_QUARTER and high < RANGE_THREE_QUARTERS:
                bits_to_follow += 1
                low -= RANGE_QUARTER
                high -= RANGE_QUARTER
            else:
                break
            low = low << 1
            high = (high << 1) | 1

    # Pick the quarter that lies inside the final interval
    bits_to_follow += 1
    if low < RANGE_QUARTER:
        writer.write_bit(0)
        writer.write_repeated(1, bits_to_follow)
    else:
        writer.write_bit(1)
        writer.write_repeated(0, bits_to_follow)

    logger.debug("Arithmetic: %d symbols -> %d bits", len(data), writer.bits_written)
    return writer.getvalue()


def arithmetic_decode(encoded: bytes, frequencies: Sequence[int], data_len: int) -> bytes:
    """
    Decode exactly `data_len` symbols from a range-coded stream.

    Bits past the end of `encoded` read as zero.

    Args:
        encoded: Output of arithmetic_encode
        frequencies: The table used for encoding
        data_len: Number of symbols to recover

    Returns:
        Decoded bytes

    Raises:
        InvalidArgumentError: On data_len < 1 or an unusable table
        MalformedPayloadError: If the code register falls outside the table
    """
    if data_len < 1:
        raise InvalidArgumentError(f"data_len must be positive, got {data_len}")

    cum = build_cumulative_frequencies(frequencies)
    total = cum[NUM_SYMBOLS]

    reader = BitstreamReader(encoded, zero_pad=True)
    low, high = 0, RANGE_TOP
    code = reader.read_bits(RANGE_CODE_BITS)

    output = bytearray()
    for _ in range(data_len):
        span = high - low + 1
        scaled = ((code - low + 1) * total - 1) // span

        # Smallest symbol whose upper bound exceeds `scaled`
        symbol = bisect.bisect_right(cum, scaled) - 1
        if not 0 <= symbol < NUM_SYMBOLS:
            raise MalformedPayloadError("Arithmetic code value outside the frequency table")
        output.append(symbol)

        low, high = _narrow(low, high, cum, symbol)

        while True:
            if high < RANGE_HALF:
                pass
            elif low >= RANGE_HALF:
                code -= RANGE_HALF
                low -= RANGE_HALF
                high -= RANGE_HALF
            elif low >= RANGE_QUARTER and high < RANGE_THREE_QUARTERS:
                code -= RANGE_QUARTER
                low -= RANGE_QUARTER
                high -= RANGE_QUARTER
            else:
                break
            low = low << 1
            high = (high << 1) | 1
            code = ((code << 1) | reader.read_bit()) & RANGE_TOP

    return bytes(output)
