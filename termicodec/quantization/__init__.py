"""Quantization modules."""

from .uniform_quantizer import (
    get_quantization_step,
    quantize,
    dequantize,
    quantize_to_int8,
    dequantize_int8,
)

__all__ = [
    'get_quantization_step',
    'quantize',
    'dequantize',
    'quantize_to_int8',
    'dequantize_int8',
]
