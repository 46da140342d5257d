"""Entropy and dictionary coders."""

from .zigzag import zigzag_scan, inverse_zigzag
from .dpcm import dpcm_encode_dc, dpcm_decode_dc
from .rle import rle_encode, rle_decode, rle_encode_ac, rle_decode_ac, EOB, ZRL
from .lzw import lzw_encode, lzw_decode
from .arithmetic import arithmetic_encode, arithmetic_decode, build_cumulative_frequencies
from .huffman import (
    HuffmanNode,
    calculate_frequencies,
    huffman_encode,
    huffman_decode,
    build_huffman_tree,
    build_code_table,
    build_tree_from_code_table,
)
from .symbol_tables import (
    HuffmanEncoder,
    HuffmanDecoder,
    get_category,
    encode_value,
    decode_value,
    serialize_huffman_table,
    deserialize_huffman_table,
)

__all__ = [
    'zigzag_scan',
    'inverse_zigzag',
    'dpcm_encode_dc',
    'dpcm_decode_dc',
    'rle_encode',
    'rle_decode',
    'rle_encode_ac',
    'rle_decode_ac',
    'EOB',
    'ZRL',
    'lzw_encode',
    'lzw_decode',
    'arithmetic_encode',
    'arithmetic_decode',
    'build_cumulative_frequencies',
    'HuffmanNode',
    'HuffmanEncoder',
    'HuffmanDecoder',
    'calculate_frequencies',
    'huffman_encode',
    'huffman_decode',
    'get_category',
    'encode_value',
    'decode_value',
    'build_huffman_tree',
    'build_code_table',
    'build_tree_from_code_table',
    'serialize_huffman_table',
    'deserialize_huffman_table',
]
