"""Static Huffman coding over bytes."""

import heapq
import itertools
import logging
from collections.abc import Mapping
from typing import Dict, Optional, Tuple

import numpy as np

from ..constants import NUM_SYMBOLS
from ..errors import InvalidArgumentError, MissingCodeError, MalformedPayloadError
from ..io.bitstream import BitstreamWriter, BitstreamReader

logger = logging.getLogger(__name__)


class HuffmanNode:
    """Tree node. Leaves carry a symbol; internal nodes carry only the summed weight."""

    __slots__ = ('symbol', 'freq', 'left', 'right')

    def __init__(self, symbol=None, freq=0, left=None, right=None):
        self.symbol = symbol
        self.freq = freq
        self.left = left
        self.right = right

    def is_leaf(self):
        return self.left is None and self.right is None

    def child(self, bit: int) -> Optional['HuffmanNode']:
        return self.right if bit else self.left


def calculate_frequencies(data: bytes) -> np.ndarray:
    """256-entry int64 histogram of the byte values in `data`."""
    return np.bincount(np.frombuffer(bytes(data), dtype=np.uint8),
                       minlength=NUM_SYMBOLS).astype(np.int64)


def build_huffman_tree(freq_table) -> HuffmanNode:
    """
    Build a Huffman tree by repeatedly merging the two lightest nodes.

    Leaves enter a min-heap keyed by (weight, insertion order), so equal
    weights always resolve the same way. The first node popped becomes the
    left child of each merge.

    Args:
        freq_table: 256-entry sequence indexed by byte value, or a
                    mapping of symbol -> frequency. Zero counts are skipped.

    Raises:
        InvalidArgumentError: If no symbol has a nonzero frequency
    """
    items = freq_table.items() if isinstance(freq_table, Mapping) else enumerate(freq_table)

    order = itertools.count()
    heap = [(int(freq), next(order), HuffmanNode(symbol, int(freq)))
            for symbol, freq in items if freq > 0]
    if not heap:
        raise InvalidArgumentError("Frequency table has no nonzero entries")
    heapq.heapify(heap)

    while len(heap) > 1:
        w1, _, first = heapq.heappop(heap)
        w2, _, second = heapq.heappop(heap)
        heapq.heappush(heap, (w1 + w2, next(order), HuffmanNode(freq=w1 + w2, left=first, right=second)))

    return heap[0][2]


def build_code_table(tree: HuffmanNode) -> Dict:
    """
    Map every leaf symbol to (code_bits, code_length).

    Left edges are 0 and right edges 1, read from the root. A tree that is
    a single leaf gets the one-bit code 0.
    """
    if tree is None:
        return {}
    if tree.is_leaf():
        return {tree.symbol: (0, 1)}

    table = {}
    stack = [(tree, 0, 0)]
    while stack:
        node, code, length = stack.pop()
        if node.is_leaf():
            table[node.symbol] = (code, length)
            continue
        if node.right is not None:
            stack.append((node.right, (code << 1) | 1, length + 1))
        if node.left is not None:
            stack.append((node.left, code << 1, length + 1))
    return table


def build_tree_from_code_table(code_table: Dict) -> Optional[HuffmanNode]:
    """Rebuild a decoding tree from (code_bits, code_length) entries."""
    if not code_table:
        return None

    root = HuffmanNode()
    for symbol, (code, length) in code_table.items():
        node = root
        for shift in range(length - 1, -1, -1):
            side = 'right' if (code >> shift) & 1 else 'left'
            nxt = getattr(node, side)
            if nxt is None:
                nxt = HuffmanNode()
                setattr(node, side, nxt)
            node = nxt
        node.symbol = symbol
    return root


def huffman_encode(data: bytes, code_table: Dict) -> Tuple[bytes, int]:
    """
    Encode bytes with a Huffman code table.

    Codes are concatenated MSB-first; the last byte is zero padded.

    Returns:
        (packed bytes, total number of meaningful bits)

    Raises:
        InvalidArgumentError: If data is empty
        MissingCodeError: If a byte has no code
    """
    if not data:
        raise InvalidArgumentError("Cannot Huffman-encode an empty buffer")

    writer = BitstreamWriter()
    for byte in bytes(data):
        entry = code_table.get(byte)
        if entry is None:
            raise MissingCodeError(f"No Huffman code for byte 0x{byte:02X}")
        writer.write_bits(*entry)

    total_bits = writer.bits_written
    logger.debug("Huffman: %d bytes -> %d bits", len(data), total_bits)
    return writer.getvalue(), total_bits


def huffman_decode(encoded: bytes, total_bits: int, tree: HuffmanNode) -> bytes:
    """
    Decode exactly `total_bits` bits of a Huffman stream.

    There is no end marker; the bit count from huffman_encode is required.

    Raises:
        MalformedPayloadError: If the bit count exceeds the data or the
                               stream ends in the middle of a code
    """
    if tree is None:
        raise InvalidArgumentError("Empty Huffman tree")
    if not 0 <= total_bits <= len(encoded) * 8:
        raise MalformedPayloadError(
            f"Bit count {total_bits} does not fit in {len(encoded)} bytes")

    # Single-symbol tree: every bit is one occurrence
    if tree.is_leaf():
        return bytes([tree.symbol]) * total_bits

    reader = BitstreamReader(encoded)
    output = bytearray()
    node = tree
    for _ in range(total_bits):
        node = node.child(reader.read_bit())
        if node is None:
            raise MalformedPayloadError("Invalid Huffman code")
        if node.is_leaf():
            output.append(node.symbol)
            node = tree

    if node is not tree:
        raise MalformedPayloadError("Huffman stream ends inside a code")
    return bytes(output)
