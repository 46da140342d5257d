"""Block image encoder ('jpeg' mode)."""

import io
import logging
import zlib
import numpy as np
from typing import List, Tuple

from ..constants import BLOCK_SIZE, DEFAULT_QUALITY, RESIDUAL_MIN, RESIDUAL_MAX
from ..errors import InvalidArgumentError
from ..io.bitstream import BitstreamWriter, pack_header
from ..transform import level_shift, forward_dct_block, split_into_blocks
from ..quantization import get_quantization_step, quantize
from ..entropy import (
    dpcm_encode_dc, rle_encode_ac, get_category, encode_value,
    HuffmanEncoder, serialize_huffman_table,
)
from ..entropy.zigzag import ZIGZAG_ORDER

logger = logging.getLogger(__name__)


def _check_frame(image: np.ndarray, quality: int) -> None:
    if not 1 <= quality <= 100:
        raise InvalidArgumentError(f"Quality must be 1-100, got {quality}")
    if image.ndim != 2 or image.size == 0:
        raise InvalidArgumentError(f"Expected non-empty 2D frame, got shape {image.shape}")
    h, w = image.shape
    if h > 0xFFFF or w > 0xFFFF:
        raise InvalidArgumentError(f"Frame too large: {w}x{h}")


def scan_blocks(centered: np.ndarray, step: int) -> Tuple[np.ndarray, np.ndarray, dict]:
    """
    Transform, quantize and zigzag every 8x8 tile of a zero-centered frame.

    Returns:
        (DC terms, (n_blocks, 63) AC terms, tile layout)
    """
    tiles, layout = split_into_blocks(centered, BLOCK_SIZE)
    stack = np.stack(tiles)
    # matmul broadcasts over the leading block axis
    quantized = quantize(forward_dct_block(stack), step)
    scans = quantized.reshape(len(tiles), BLOCK_SIZE * BLOCK_SIZE)[:, ZIGZAG_ORDER]
    return scans[:, 0].astype(np.int32), scans[:, 1:], layout


def _write_table(buffer, code_table) -> None:
    table = serialize_huffman_table(code_table)
    buffer.write(len(table).to_bytes(2, 'little'))
    buffer.write(table)


def _write_coefficient(writer, code: Tuple[int, int], value: int) -> None:
    """Huffman code of the category, then the amplitude bits."""
    writer.write_bits(*code)
    cat, amplitude, n_bits = encode_value(value)
    if cat:
        writer.write_bits(amplitude, n_bits)


class BlockImageEncoder:
    """
    Lossy encoder for 8-bit grayscale frames and signed residual frames.

    Pixels are level shifted by -128; residuals are already centered and
    only clamped to [-255, 255]. Each 8x8 tile goes through DCT, uniform
    quantization and zigzag ordering. DC terms are optionally DPCM coded,
    AC terms run-length coded, and both symbol streams Huffman coded with
    tables trained on the frame itself and stored in the payload.
    """

    def __init__(self):
        self.huffman_encoder = None

    def encode(self, image: np.ndarray, quality: int = DEFAULT_QUALITY,
               use_dpcm: bool = True, signed: bool = False) -> bytes:
        """
        Encode a frame.

        Args:
            image: 2D numpy array; uint8 pixels, or residuals in
                   [-255, 255] when `signed` is set
            quality: Quality parameter (1-100)
            use_dpcm: Whether to difference consecutive DC terms
            signed: Encode a zero-centered residual instead of pixels

        Returns:
            Header, entropy-coded payload and CRC32 as bytes
        """
        _check_frame(image, quality)
        h, w = image.shape

        if signed:
            centered = np.clip(image.astype(np.float64), RESIDUAL_MIN, RESIDUAL_MAX)
        else:
            centered = level_shift(image, forward=True)

        dc, ac, layout = scan_blocks(centered, get_quantization_step(quality))
        dc_symbols = dpcm_encode_dc(dc) if use_dpcm else dc
        ac_runs = [rle_encode_ac(row.tolist()) for row in ac]

        payload = self._entropy_code(dc_symbols, ac_runs)
        crc = zlib.crc32(payload) & 0xFFFFFFFF

        header = pack_header(
            height=h,
            width=w,
            quality=quality,
            pad_h=layout['pad_h'],
            pad_w=layout['pad_w'],
            data_len=len(payload) + 4,
            use_dpcm=use_dpcm,
            signed=signed,
        )
        result = header + payload + crc.to_bytes(4, 'little')
        logger.debug("Block codec: %dx%d q=%d signed=%s -> %d bytes",
                     w, h, quality, signed, len(result))
        return result

    def _entropy_code(self, dc_symbols: np.ndarray,
                      ac_runs: List[List[Tuple[int, int]]]) -> bytes:
        """Train the tables, then write both tables and the coded symbols."""
        dc_list = [int(d) for d in dc_symbols]
        self.huffman_encoder = tables = HuffmanEncoder()
        tables.train([get_category(d) for d in dc_list],
                     [(run, get_category(v)) for pairs in ac_runs for run, v in pairs])

        buffer = io.BytesIO()
        _write_table(buffer, tables.dc_code_table)
        _write_table(buffer, tables.ac_code_table)

        writer = BitstreamWriter(buffer)
        for diff in dc_list:
            _write_coefficient(writer, tables.encode_dc(get_category(diff)), diff)
        for pairs in ac_runs:
            for run, value in pairs:
                value = int(value)
                _write_coefficient(writer, tables.encode_ac(run, get_category(value)), value)

        return writer.getvalue()
