"""
Category/amplitude coding and the DC/AC Huffman tables of the block codec.

A coefficient v != 0 is sent as its category (bit length of |v|) through a
Huffman table, followed by `category` raw amplitude bits. Negative values
use the one's-complement amplitude v + 2**category - 1, so their leading
amplitude bit is 0.
"""

import struct
from collections import Counter
from typing import Dict, List, Tuple

from ..errors import MissingCodeError, MalformedPayloadError
from .huffman import HuffmanNode, build_huffman_tree, build_code_table

_COUNT = struct.Struct('<H')
_ENTRY = struct.Struct('<iB')  # symbol key, code length


def get_category(value: int) -> int:
    return abs(int(value)).bit_length()


def encode_value(value: int) -> Tuple[int, int, int]:
    """Returns (category, amplitude_bits, num_amplitude_bits)."""
    value = int(value)
    cat = get_category(value)
    amplitude = value if value >= 0 else value + (1 << cat) - 1
    return cat, amplitude, cat


def decode_value(category: int, additional: int) -> int:
    if category == 0:
        return 0
    if additional >> (category - 1):
        return additional
    return additional - (1 << category) + 1


class HuffmanEncoder:
    """Trains and holds the DC-category and AC (run, category) tables."""

    def __init__(self):
        self.dc_tree = self.ac_tree = None
        self.dc_code_table = {}
        self.ac_code_table = {}

    def train(self, dc_categories: List[int], ac_symbols: List[Tuple[int, int]]):
        self.dc_tree = build_huffman_tree(Counter(dc_categories))
        self.ac_tree = build_huffman_tree(Counter(ac_symbols))
        self.dc_code_table = build_code_table(self.dc_tree)
        self.ac_code_table = build_code_table(self.ac_tree)

    @staticmethod
    def _lookup(table, symbol, kind):
        try:
            return table[symbol]
        except KeyError:
            raise MissingCodeError(f"No {kind} Huffman code for {symbol!r}") from None

    def encode_dc(self, category: int) -> Tuple[int, int]:
        return self._lookup(self.dc_code_table, category, 'DC')

    def encode_ac(self, run: int, category: int) -> Tuple[int, int]:
        return self._lookup(self.ac_code_table, (run, category), 'AC')


class HuffmanDecoder:
    """Walks the DC/AC trees one bit at a time from a BitstreamReader."""

    def __init__(self, dc_tree: HuffmanNode, ac_tree: HuffmanNode):
        self.dc_tree = dc_tree
        self.ac_tree = ac_tree

    def decode_dc(self, bitstream) -> int:
        return self._walk(bitstream, self.dc_tree)

    def decode_ac(self, bitstream) -> Tuple[int, int]:
        return self._walk(bitstream, self.ac_tree)

    @staticmethod
    def _walk(bitstream, tree):
        if tree is None:
            raise MalformedPayloadError("Empty Huffman tree")
        # A one-symbol table still spends one bit per symbol
        if tree.is_leaf():
            bitstream.read_bit()
            return tree.symbol

        node = tree
        while not node.is_leaf():
            node = node.child(bitstream.read_bit())
            if node is None:
                raise MalformedPayloadError("Invalid Huffman code")
        return node.symbol


def serialize_huffman_table(code_table: Dict) -> bytes:
    """
    Pack a code table as: uint16 entry count, then per entry an int32 key,
    a uint8 code length and the code in ceil(length / 8) big-endian bytes.
    AC (run, category) keys are stored as (run << 8) | category.
    """
    parts = [_COUNT.pack(len(code_table))]
    for symbol, (code, length) in code_table.items():
        key = (symbol[0] << 8) | symbol[1] if isinstance(symbol, tuple) else symbol
        parts.append(_ENTRY.pack(key, length))
        parts.append(code.to_bytes((length + 7) // 8, 'big'))
    return b''.join(parts)


def deserialize_huffman_table(data: bytes, is_ac: bool = False) -> Tuple[Dict, int]:
    """
    Inverse of serialize_huffman_table.

    Returns:
        (code_table, bytes_consumed)

    Raises:
        MalformedPayloadError: If the data ends before the last entry
    """
    data = bytes(data)
    try:
        (count,) = _COUNT.unpack_from(data, 0)
        offset = _COUNT.size
        table = {}
        for _ in range(count):
            key, length = _ENTRY.unpack_from(data, offset)
            offset += _ENTRY.size
            n_bytes = (length + 7) // 8
            if offset + n_bytes > len(data):
                raise MalformedPayloadError("Huffman table truncated")
            code = int.from_bytes(data[offset:offset + n_bytes], 'big')
            offset += n_bytes
            symbol = ((key >> 8) & 0xFF, key & 0xFF) if is_ac else key
            table[symbol] = (code, length)
    except struct.error as e:
        raise MalformedPayloadError(f"Huffman table truncated: {e}") from e
    return table, offset
