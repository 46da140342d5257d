"""Block image decoder ('jpeg' mode)."""

import logging
import zlib
import numpy as np
from typing import List, Tuple

from ..constants import BLOCK_SIZE, BLOCK_HEADER_SIZE, RESIDUAL_MIN, RESIDUAL_MAX
from ..errors import DimensionMismatchError, MalformedPayloadError
from ..io.bitstream import BitstreamReader, unpack_header
from ..transform import level_shift, inverse_dct_block, merge_blocks
from ..quantization import get_quantization_step, dequantize
from ..entropy import (
    dpcm_decode_dc, rle_decode_ac, decode_value, HuffmanDecoder,
    build_tree_from_code_table, deserialize_huffman_table, EOB, ZRL,
)
from ..entropy.zigzag import ZIGZAG_ORDER

logger = logging.getLogger(__name__)

AC_PER_BLOCK = BLOCK_SIZE * BLOCK_SIZE - 1


def _read_table(payload: bytes, offset: int, is_ac: bool) -> Tuple[dict, int]:
    if offset + 2 > len(payload):
        raise MalformedPayloadError("Huffman table length missing")
    size = int.from_bytes(payload[offset:offset + 2], 'little')
    offset += 2
    table, _ = deserialize_huffman_table(payload[offset:offset + size], is_ac=is_ac)
    return table, offset + size


def _read_amplitude(bitstream, category: int) -> int:
    return decode_value(category, bitstream.read_bits(category)) if category else 0


def _read_ac_row(bitstream, tables: HuffmanDecoder) -> List[int]:
    """Read (run, value) symbols until EOB or all 63 AC slots are covered."""
    pairs = []
    covered = 0
    while covered < AC_PER_BLOCK:
        run, cat = tables.decode_ac(bitstream)
        if (run, cat) == EOB:
            pairs.append(EOB)
            break
        if (run, cat) == ZRL:
            pairs.append(ZRL)
            covered += 16
            continue
        pairs.append((run, _read_amplitude(bitstream, cat)))
        covered += run + 1
    return rle_decode_ac(pairs, length=AC_PER_BLOCK)


def unscan_blocks(scans: np.ndarray, step: int, layout: dict) -> np.ndarray:
    """Undo zigzag, quantization and DCT for (n_blocks, 64) scans and reassemble the frame."""
    n = len(scans)
    flat = np.zeros((n, BLOCK_SIZE * BLOCK_SIZE), dtype=np.int32)
    flat[:, ZIGZAG_ORDER] = scans
    coeffs = dequantize(flat.reshape(n, BLOCK_SIZE, BLOCK_SIZE), step)
    tiles = inverse_dct_block(coeffs)
    return merge_blocks(list(tiles), (layout['original_h'], layout['original_w']), layout)


class BlockImageDecoder:
    """
    Decoder for BlockImageEncoder streams.

    The CRC is checked before anything else in the payload is read, so a
    damaged stream is rejected without partial output.
    """

    def read_header(self, data: bytes) -> dict:
        """Parse the header without decoding the payload."""
        if len(data) < BLOCK_HEADER_SIZE:
            raise MalformedPayloadError(
                f"Data too short: {len(data)} bytes, need at least {BLOCK_HEADER_SIZE}")
        return unpack_header(data[:BLOCK_HEADER_SIZE])

    def decode(self, data: bytes, width: int = None, height: int = None) -> np.ndarray:
        """
        Decode a block codec stream.

        Args:
            data: Compressed data bytes
            width: Expected width; checked against the header when given
            height: Expected height; checked against the header when given

        Returns:
            uint8 frame, or int16 residual in [-255, 255] for signed streams

        Raises:
            MalformedPayloadError: If data is invalid or corrupted
            DimensionMismatchError: If the header disagrees with width/height
        """
        header = self.read_header(data)
        h, w = header['height'], header['width']

        if (width is not None and width != w) or (height is not None and height != h):
            raise DimensionMismatchError(
                f"Stream holds a {w}x{h} frame, expected {width}x{height}")

        payload = self._checked_payload(data, header['data_len'])

        layout = {
            'original_h': h,
            'original_w': w,
            'pad_h': header['padding_h'],
            'pad_w': header['padding_w'],
            'n_blocks_h': (h + header['padding_h']) // BLOCK_SIZE,
            'n_blocks_w': (w + header['padding_w']) // BLOCK_SIZE,
        }
        n_blocks = layout['n_blocks_h'] * layout['n_blocks_w']

        scans = self._read_scans(payload, n_blocks, header['use_dpcm'])
        frame = unscan_blocks(scans, get_quantization_step(header['quality']), layout)

        logger.debug("Block codec: decoded %dx%d frame from %d bytes", w, h, len(data))
        if header['signed']:
            return np.clip(np.round(frame), RESIDUAL_MIN, RESIDUAL_MAX).astype(np.int16)
        return level_shift(frame, forward=False)

    @staticmethod
    def _checked_payload(data: bytes, data_len: int) -> bytes:
        end = BLOCK_HEADER_SIZE + data_len
        if data_len < 4 or len(data) < end:
            raise MalformedPayloadError(
                f"Data truncated: expected {end} bytes, got {len(data)}")

        payload = data[BLOCK_HEADER_SIZE:end - 4]
        stored = int.from_bytes(data[end - 4:end], 'little')
        computed = zlib.crc32(payload) & 0xFFFFFFFF
        if stored != computed:
            raise MalformedPayloadError(
                f"CRC mismatch: expected {stored:08X}, got {computed:08X}")
        return payload

    @staticmethod
    def _read_scans(payload: bytes, n_blocks: int, use_dpcm: bool) -> np.ndarray:
        """Entropy-decode the payload into (n_blocks, 64) zigzag scans."""
        dc_table, offset = _read_table(payload, 0, is_ac=False)
        ac_table, offset = _read_table(payload, offset, is_ac=True)
        tables = HuffmanDecoder(build_tree_from_code_table(dc_table),
                                build_tree_from_code_table(ac_table))

        bitstream = BitstreamReader(payload[offset:])
        try:
            dc = [_read_amplitude(bitstream, tables.decode_dc(bitstream))
                  for _ in range(n_blocks)]
            ac = [_read_ac_row(bitstream, tables) for _ in range(n_blocks)]
        except EOFError as e:
            raise MalformedPayloadError("Block codec bitstream ended early") from e

        dc = np.array(dc, dtype=np.int32)
        scans = np.zeros((n_blocks, BLOCK_SIZE * BLOCK_SIZE), dtype=np.int32)
        scans[:, 0] = dpcm_decode_dc(dc) if use_dpcm else dc
        scans[:, 1:] = ac
        return scans
