"""Full-search block matching motion estimation and compensation."""

import logging
import struct
from dataclasses import dataclass
from typing import List, Tuple

import numpy as np

from ..constants import (
    DEFAULT_MOTION_BLOCK_SIZE, DEFAULT_SEARCH_WINDOW,
    MOTION_VECTOR_FORMAT, MOTION_VECTOR_SIZE,
)
from ..errors import InvalidArgumentError, MalformedPayloadError
from ..transform.block_utils import block_origins, extract_block

logger = logging.getLogger(__name__)


@dataclass
class MotionVector:
    """Offset (dx, dy) from the block at (block_x, block_y) to its best reference match."""
    block_x: int
    block_y: int
    dx: int
    dy: int


def mean_absolute_difference(a: np.ndarray, b: np.ndarray) -> float:
    """Average per-pixel absolute difference of two equally sized blocks."""
    return float(np.mean(np.abs(a.astype(np.float64) - b.astype(np.float64))))


def _check_frames(current: np.ndarray, reference: np.ndarray,
                  block_size: int, search_window: int) -> None:
    if block_size < 1:
        raise InvalidArgumentError(f"Block size must be >= 1, got {block_size}")
    if search_window < 0:
        raise InvalidArgumentError(f"Search window must be >= 0, got {search_window}")
    if current.ndim != 2 or reference.ndim != 2:
        raise InvalidArgumentError("Motion search needs 2D grayscale frames")
    if current.shape != reference.shape:
        raise InvalidArgumentError(
            f"Frame shapes differ: {current.shape} vs {reference.shape}")
    h, w = reference.shape
    if block_size > h or block_size > w:
        raise InvalidArgumentError(
            f"Block size {block_size} exceeds frame size {w}x{h}")


def _candidate_range(pos: int, extent: int, block_size: int, window: int) -> Tuple[int, int]:
    """Inclusive displacement range that keeps the block inside [0, extent)."""
    last = extent - block_size - pos
    lo = max(-window, -pos)
    hi = min(window, last)
    if lo > hi:
        # Edge tile: the window cannot reach an in-frame position
        lo = hi = last
    return lo, hi


def _full_search(cur_block: np.ndarray, ref: np.ndarray, x: int, y: int,
                 block_size: int, search_window: int) -> MotionVector:
    h, w = ref.shape
    dy_lo, dy_hi = _candidate_range(y, h, block_size, search_window)
    dx_lo, dx_hi = _candidate_range(x, w, block_size, search_window)

    best_cost = float('inf')
    best_dx = dx_lo
    best_dy = dy_lo
    for dy in range(dy_lo, dy_hi + 1):
        ry = y + dy
        for dx in range(dx_lo, dx_hi + 1):
            rx = x + dx
            cand = ref[ry:ry + block_size, rx:rx + block_size]
            cost = mean_absolute_difference(cur_block, cand)
            # Strict comparison: the first candidate in scan order wins ties
            if cost < best_cost:
                best_cost = cost
                best_dx = dx
                best_dy = dy
    return MotionVector(x, y, best_dx, best_dy)


def estimate_motion(current: np.ndarray, reference: np.ndarray,
                    block_size: int = DEFAULT_MOTION_BLOCK_SIZE,
                    search_window: int = DEFAULT_SEARCH_WINDOW) -> List[MotionVector]:
    """
    Find one motion vector per block of the current frame.

    Blocks tile the frame in raster order; tiles that overhang the right or
    bottom edge read zeros past the frame. Every candidate within
    +/-search_window whose block lies fully inside the reference is scored
    by mean absolute difference, dy in the outer loop and dx in the inner.

    Args:
        current: 2D frame to predict
        reference: 2D frame to predict from, same shape
        block_size: Tile edge length
        search_window: Maximum displacement per axis

    Returns:
        Motion vector field in raster order
    """
    _check_frames(current, reference, block_size, search_window)
    ref = reference.astype(np.float64)

    vectors = []
    for x, y in block_origins(current.shape, block_size):
        cur_block = extract_block(current, x, y, block_size)
        vectors.append(_full_search(cur_block, ref, x, y, block_size, search_window))

    logger.debug("Estimated %d motion vectors (block %d, window %d)",
                 len(vectors), block_size, search_window)
    return vectors


def compensate(reference: np.ndarray, vectors: List[MotionVector],
               block_size: int = DEFAULT_MOTION_BLOCK_SIZE) -> np.ndarray:
    """
    Build a prediction by copying each vector's displaced reference block.

    Blocks overhanging the frame are cropped to it.

    Raises:
        InvalidArgumentError: If a vector points outside the reference frame
    """
    h, w = reference.shape
    predicted = np.zeros_like(reference)

    for mv in vectors:
        bx, by = mv.block_x, mv.block_y
        rx, ry = bx + mv.dx, by + mv.dy
        if not (0 <= bx < w and 0 <= by < h):
            raise InvalidArgumentError(f"Block origin ({bx}, {by}) outside {w}x{h} frame")
        if rx < 0 or ry < 0 or rx + block_size > w or ry + block_size > h:
            raise InvalidArgumentError(
                f"Vector ({mv.dx}, {mv.dy}) at ({bx}, {by}) reads outside the reference")

        bh = min(block_size, h - by)
        bw = min(block_size, w - bx)
        predicted[by:by + bh, bx:bx + bw] = reference[ry:ry + bh, rx:rx + bw]

    return predicted


def serialize_motion_vectors(vectors: List[MotionVector]) -> bytes:
    """uint32 count, then (uint16 block_x, uint16 block_y, int16 dx, int16 dy) per vector."""
    out = bytearray(struct.pack('<I', len(vectors)))
    for mv in vectors:
        out.extend(struct.pack(MOTION_VECTOR_FORMAT, mv.block_x, mv.block_y, mv.dx, mv.dy))
    return bytes(out)


def deserialize_motion_vectors(data: bytes, offset: int = 0) -> Tuple[List[MotionVector], int]:
    """
    Read a serialized vector field.

    Returns:
        (vectors, bytes_consumed)
    """
    if len(data) < offset + 4:
        raise MalformedPayloadError("Motion vector field truncated")
    (count,) = struct.unpack_from('<I', data, offset)
    end = offset + 4 + count * MOTION_VECTOR_SIZE
    if len(data) < end:
        raise MalformedPayloadError(
            f"Motion vector field truncated: {count} vectors need {end - offset} bytes")

    vectors = [MotionVector(*struct.unpack_from(MOTION_VECTOR_FORMAT, data,
                                                offset + 4 + i * MOTION_VECTOR_SIZE))
               for i in range(count)]
    return vectors, end - offset
