"""Block tiling utilities shared by the block codec and motion search."""

import numpy as np
from typing import List, Tuple
from ..constants import BLOCK_SIZE


def _padding(extent: int, block_size: int) -> int:
    return -extent % block_size


def split_into_blocks(image: np.ndarray, block_size: int = BLOCK_SIZE) -> Tuple[List[np.ndarray], dict]:
    """
    Cut a frame into block_size x block_size tiles in raster order.

    The right and bottom edges are padded by repeating the last row/column,
    so partial tiles gain no artificial edges.

    Returns:
        (list of float64 tiles, layout dict for merge_blocks)
    """
    h, w = image.shape
    pad_h = _padding(h, block_size)
    pad_w = _padding(w, block_size)

    padded = np.pad(image.astype(np.float64), ((0, pad_h), (0, pad_w)), mode='edge')
    rows = padded.shape[0] // block_size
    cols = padded.shape[1] // block_size

    tiles = (padded.reshape(rows, block_size, cols, block_size)
             .swapaxes(1, 2)
             .reshape(rows * cols, block_size, block_size))

    layout = {
        'original_h': h,
        'original_w': w,
        'pad_h': pad_h,
        'pad_w': pad_w,
        'n_blocks_h': rows,
        'n_blocks_w': cols,
    }
    return list(tiles), layout


def merge_blocks(blocks: List[np.ndarray], original_shape: Tuple[int, int],
                 pad_info: dict) -> np.ndarray:
    """Reassemble raster-ordered tiles and crop away the padding (float64)."""
    rows, cols = pad_info['n_blocks_h'], pad_info['n_blocks_w']
    block_size = blocks[0].shape[0]

    frame = (np.asarray(blocks, dtype=np.float64)
             .reshape(rows, cols, block_size, block_size)
             .swapaxes(1, 2)
             .reshape(rows * block_size, cols * block_size))

    h, w = original_shape
    return frame[:h, :w]


def block_origins(shape: Tuple[int, int], block_size: int) -> List[Tuple[int, int]]:
    """Top-left (x, y) of every tile covering `shape`, raster order."""
    h, w = shape
    return [(x, y) for y in range(0, h, block_size) for x in range(0, w, block_size)]


def extract_block(frame: np.ndarray, x: int, y: int, block_size: int) -> np.ndarray:
    """
    Read a block_size x block_size tile at (x, y) as float64.

    Pixels past the frame bounds read as zero.
    """
    h, w = frame.shape
    block = np.zeros((block_size, block_size), dtype=np.float64)
    y_end = min(y + block_size, h)
    x_end = min(x + block_size, w)
    block[:y_end - y, :x_end - x] = frame[y:y_end, x:x_end]
    return block
