"""Predictive video codec - motion-compensated I/P frame coding."""

import logging
import struct
import zlib
from dataclasses import dataclass
from typing import List, Sequence

import numpy as np

from .encoder import BlockImageEncoder
from .decoder import BlockImageDecoder
from ..constants import (
    VIDEO_MAGIC, VIDEO_VERSION, VIDEO_HEADER_FORMAT, VIDEO_HEADER_SIZE,
    FRAME_HEADER_FORMAT, FRAME_HEADER_SIZE, I_FRAME, P_FRAME,
    DEFAULT_MOTION_BLOCK_SIZE, DEFAULT_SEARCH_WINDOW, DEFAULT_QUALITY, PIXEL_MAX,
    P_FRAME_BLOCK_FORMAT, P_FRAME_BLOCK_SIZE,
)
from ..errors import InvalidArgumentError, MalformedPayloadError
from ..io.image_reader import rgb_to_grayscale
from ..metrics.quality import calculate_mse, calculate_psnr
from ..motion import (
    estimate_motion, compensate, serialize_motion_vectors, deserialize_motion_vectors,
)

logger = logging.getLogger(__name__)

FRAME_TYPE_NAMES = {I_FRAME: 'I', P_FRAME: 'P'}


@dataclass
class CodedFrame:
    """One coded frame: type, dimensions and the bytes the decoder needs."""
    frame_type: int
    width: int
    height: int
    payload: bytes


def prepare_frames(frames: Sequence[np.ndarray]) -> List[np.ndarray]:
    """
    Convert input frames to equally sized uint8 grayscale arrays.

    RGB frames (H, W, 3) are converted to luma.

    Raises:
        InvalidArgumentError: On an empty sequence or mismatched shapes
    """
    frames = list(frames)
    if not frames:
        raise InvalidArgumentError("Cannot encode an empty frame sequence")

    prepared = []
    for frame in frames:
        frame = np.asarray(frame)
        if frame.ndim == 3:
            frame = rgb_to_grayscale(frame)
        elif frame.ndim != 2:
            raise InvalidArgumentError(f"Expected 2D or RGB frame, got shape {frame.shape}")
        prepared.append(np.clip(frame, 0, PIXEL_MAX).astype(np.uint8))

    shape = prepared[0].shape
    for idx, frame in enumerate(prepared):
        if frame.shape != shape:
            raise InvalidArgumentError(f"Frame {idx} has shape {frame.shape}, expected {shape}")
    if shape[0] == 0 or shape[1] == 0:
        raise InvalidArgumentError(f"Empty frame shape {shape}")

    return prepared


def _add_residual(prediction: np.ndarray, residual: np.ndarray) -> np.ndarray:
    recon = prediction.astype(np.int32) + residual.astype(np.int32)
    return np.clip(recon, 0, PIXEL_MAX).astype(np.uint8)


def _check_parameters(block_size: int, search_window: int, quality: int) -> None:
    if not 1 <= block_size <= 0xFF:
        raise InvalidArgumentError(f"Block size must be 1-255, got {block_size}")
    if not 0 <= search_window <= 0xFF:
        raise InvalidArgumentError(f"Search window must be 0-255, got {search_window}")
    if not 1 <= quality <= 100:
        raise InvalidArgumentError(f"Quality must be 1-100, got {quality}")


class VideoEncoder:
    """
    Predictive video encoder.

    Strategy:
    - Frame 0: I-frame, coded on its own with the block image codec
    - Every later frame: P-frame, predicted by block motion compensation
      from the previous *reconstructed* frame, with the prediction residual
      coded by the block image codec

    Reconstructing each frame exactly as the decoder will keeps encoder
    and decoder references identical.
    """

    def __init__(self):
        self.encoder = BlockImageEncoder()
        self.decoder = BlockImageDecoder()

    def encode_frames(self, frames: Sequence[np.ndarray],
                      block_size: int = DEFAULT_MOTION_BLOCK_SIZE,
                      search_window: int = DEFAULT_SEARCH_WINDOW,
                      quality: int = DEFAULT_QUALITY) -> List[CodedFrame]:
        """
        Encode a sequence into coded frames.

        Args:
            frames: Sequence of 2D uint8 (or RGB) frames of equal size
            block_size: Motion block edge length
            search_window: Maximum motion displacement per axis
            quality: Block codec quality (1-100)

        Returns:
            One CodedFrame per input frame
        """
        _check_parameters(block_size, search_window, quality)
        frames = prepare_frames(frames)
        height, width = frames[0].shape

        coded = []
        reference = None

        for idx, current in enumerate(frames):
            if reference is None:
                payload = self.encoder.encode(current, quality=quality)
                reconstructed = self.decoder.decode(payload)
                frame_type = I_FRAME
            else:
                vectors = estimate_motion(current, reference, block_size, search_window)
                prediction = compensate(reference, vectors, block_size)

                residual = current.astype(np.int16) - prediction.astype(np.int16)
                residual_payload = self.encoder.encode(residual, quality=quality, signed=True)

                decoded_residual = self.decoder.decode(residual_payload)
                reconstructed = _add_residual(prediction, decoded_residual)

                payload = (struct.pack(P_FRAME_BLOCK_FORMAT, block_size)
                           + serialize_motion_vectors(vectors)
                           + struct.pack('<I', len(residual_payload))
                           + residual_payload)
                frame_type = P_FRAME

            coded.append(CodedFrame(frame_type, width, height, payload))
            reference = reconstructed
            logger.debug("Frame %d: %s, %d bytes", idx, FRAME_TYPE_NAMES[frame_type], len(payload))

        return coded

    def encode(self, frames: Sequence[np.ndarray],
               block_size: int = DEFAULT_MOTION_BLOCK_SIZE,
               search_window: int = DEFAULT_SEARCH_WINDOW,
               quality: int = DEFAULT_QUALITY) -> bytes:
        """
        Encode a sequence into a single byte stream.

        Returns:
            Stream bytes: header, per-frame records, CRC32
        """
        coded = self.encode_frames(frames, block_size, search_window, quality)
        return self._pack_stream(coded, block_size, search_window, quality)

    def _pack_stream(self, coded: List[CodedFrame], block_size: int,
                     search_window: int, quality: int) -> bytes:
        """Pack coded frames into the video bitstream."""
        width, height = coded[0].width, coded[0].height
        if width > 0xFFFF or height > 0xFFFF:
            raise InvalidArgumentError(f"Frame too large for stream header: {width}x{height}")

        parts = [struct.pack(
            VIDEO_HEADER_FORMAT,
            VIDEO_MAGIC,
            VIDEO_VERSION,
            width,
            height,
            len(coded),
            block_size,
            search_window,
            quality,
        )]
        for frame in coded:
            parts.append(struct.pack(FRAME_HEADER_FORMAT, frame.frame_type, len(frame.payload)))
            parts.append(frame.payload)

        body = b''.join(parts)
        crc = zlib.crc32(body) & 0xFFFFFFFF
        return body + crc.to_bytes(4, 'little')


class VideoDecoder:
    """
    Predictive video decoder.

    Frames decode strictly in order: each P-frame needs the previous
    decoded frame as its reference.
    """

    def __init__(self):
        self.decoder = BlockImageDecoder()

    def decode_frames(self, coded: Sequence[CodedFrame]) -> List[np.ndarray]:
        """
        Decode coded frames in order.

        P-frames carry their own motion block size, so no coding
        parameters are needed here.

        Raises:
            MalformedPayloadError: If the first frame is not an I-frame, a
                                   frame type is unknown, or a payload is bad
        """
        decoded = []
        reference = None

        for idx, frame in enumerate(coded):
            if frame.frame_type == I_FRAME:
                current = self.decoder.decode(frame.payload, frame.width, frame.height)
            elif frame.frame_type == P_FRAME:
                if reference is None:
                    raise MalformedPayloadError(f"P-frame {idx} has no reference frame")
                current = self._decode_p_frame(frame, reference)
            else:
                raise MalformedPayloadError(f"Unknown frame type {frame.frame_type} at frame {idx}")

            decoded.append(current)
            reference = current

        return decoded

    def _decode_p_frame(self, frame: CodedFrame, reference: np.ndarray) -> np.ndarray:
        if len(frame.payload) < P_FRAME_BLOCK_SIZE:
            raise MalformedPayloadError("P-frame block size missing")
        (block_size,) = struct.unpack_from(P_FRAME_BLOCK_FORMAT, frame.payload, 0)
        if block_size == 0:
            raise MalformedPayloadError("P-frame block size is zero")

        vectors, used = deserialize_motion_vectors(frame.payload, P_FRAME_BLOCK_SIZE)
        offset = P_FRAME_BLOCK_SIZE + used

        if len(frame.payload) < offset + 4:
            raise MalformedPayloadError("P-frame residual length missing")
        (residual_len,) = struct.unpack_from('<I', frame.payload, offset)
        offset += 4
        if len(frame.payload) != offset + residual_len:
            raise MalformedPayloadError(
                f"P-frame residual length {residual_len} does not match payload")

        try:
            prediction = compensate(reference, vectors, block_size)
        except InvalidArgumentError as e:
            raise MalformedPayloadError(f"Bad motion vector field: {e}") from e

        residual = self.decoder.decode(frame.payload[offset:], frame.width, frame.height)
        return _add_residual(prediction, residual)

    def _parse_stream(self, data: bytes):
        if len(data) < VIDEO_HEADER_SIZE + 4:
            raise MalformedPayloadError("Data too short for video stream")

        body = data[:-4]
        crc_received = int.from_bytes(data[-4:], 'little')
        crc_computed = zlib.crc32(body) & 0xFFFFFFFF
        if crc_computed != crc_received:
            raise MalformedPayloadError(
                f"Video CRC mismatch: expected {crc_received:08X}, got {crc_computed:08X}")

        (magic, version, width, height, frame_count,
         block_size, search_window, quality) = struct.unpack(
            VIDEO_HEADER_FORMAT, body[:VIDEO_HEADER_SIZE])

        if magic != VIDEO_MAGIC:
            raise MalformedPayloadError(f"Invalid video magic: {magic}")
        if version != VIDEO_VERSION:
            raise MalformedPayloadError(f"Unsupported video version: {version}")

        header = {
            'version': version,
            'width': width,
            'height': height,
            'frame_count': frame_count,
            'block_size': block_size,
            'search_window': search_window,
            'quality': quality,
        }

        coded = []
        offset = VIDEO_HEADER_SIZE
        for idx in range(frame_count):
            if len(body) < offset + FRAME_HEADER_SIZE:
                raise MalformedPayloadError(f"Frame {idx} header truncated")
            frame_type, length = struct.unpack_from(FRAME_HEADER_FORMAT, body, offset)
            offset += FRAME_HEADER_SIZE
            if len(body) < offset + length:
                raise MalformedPayloadError(f"Frame {idx} payload truncated")
            coded.append(CodedFrame(frame_type, width, height, body[offset:offset + length]))
            offset += length

        if offset != len(body):
            raise MalformedPayloadError(f"{len(body) - offset} trailing bytes after last frame")

        return header, coded

    def decode(self, data: bytes) -> List[np.ndarray]:
        """
        Decode a video stream.

        Returns:
            List of uint8 frames, in display order
        """
        header, coded = self._parse_stream(data)
        frames = self.decode_frames(coded)
        logger.debug("Decoded %d frames of %dx%d", len(frames), header['width'], header['height'])
        return frames

    def get_stream_info(self, data: bytes) -> dict:
        """Get stream metadata without decoding frames."""
        header, coded = self._parse_stream(data)
        header['i_frames'] = sum(1 for f in coded if f.frame_type == I_FRAME)
        header['p_frames'] = sum(1 for f in coded if f.frame_type == P_FRAME)
        header['frame_sizes'] = [len(f.payload) for f in coded]
        header['total_size'] = len(data)
        return header


def calculate_video_stats(original_frames: Sequence[np.ndarray],
                          decoded_frames: Sequence[np.ndarray],
                          stream_size: int) -> dict:
    """
    Compression and fidelity statistics for a coded sequence.
    """
    originals = prepare_frames(original_frames)
    if len(originals) != len(decoded_frames):
        raise InvalidArgumentError(
            f"Frame count mismatch: {len(originals)} vs {len(decoded_frames)}")

    original_size = sum(f.nbytes for f in originals)
    num_pixels = sum(f.size for f in originals)
    mse = [calculate_mse(o, d) for o, d in zip(originals, decoded_frames)]
    psnr = [calculate_psnr(o, d) for o, d in zip(originals, decoded_frames)]

    return {
        'frames': len(originals),
        'original_bytes': original_size,
        'compressed_bytes': stream_size,
        'compression_ratio': original_size / stream_size,
        'bpp': (stream_size * 8) / num_pixels,
        'mse_per_frame': mse,
        'psnr_per_frame': psnr,
        'max_mse': max(mse),
    }
