"""Zigzag scan for converting square blocks to 1D arrays."""

import numpy as np

from ..constants import BLOCK_SIZE


def zigzag_order(n: int = BLOCK_SIZE) -> np.ndarray:
    """
    Flat indices of an n x n block in zigzag order.

    Anti-diagonals are walked alternately up-right (even sums) and
    down-left (odd sums), starting at the DC position.
    """
    cells = sorted(((r, c) for r in range(n) for c in range(n)),
                   key=lambda rc: (rc[0] + rc[1],
                                   rc[1] if (rc[0] + rc[1]) % 2 == 0 else rc[0]))
    return np.array([r * n + c for r, c in cells])


ZIGZAG_ORDER = zigzag_order(BLOCK_SIZE)


def zigzag_scan(block: np.ndarray) -> np.ndarray:
    """
    Read an 8x8 block in order of increasing frequency.

    Args:
        block: 8x8 input block

    Returns:
        1D array of 64 elements in zigzag order
    """
    if block.shape != (BLOCK_SIZE, BLOCK_SIZE):
        raise ValueError(f"Expected {BLOCK_SIZE}x{BLOCK_SIZE} block, got {block.shape}")
    return block.flatten()[ZIGZAG_ORDER]


def inverse_zigzag(array: np.ndarray) -> np.ndarray:
    """Convert zigzag-ordered 1D array back to an 8x8 block."""
    if len(array) != BLOCK_SIZE * BLOCK_SIZE:
        raise ValueError(f"Expected {BLOCK_SIZE * BLOCK_SIZE} elements, got {len(array)}")
    flat = np.zeros(BLOCK_SIZE * BLOCK_SIZE, dtype=array.dtype)
    flat[ZIGZAG_ORDER] = array
    return flat.reshape(BLOCK_SIZE, BLOCK_SIZE)
