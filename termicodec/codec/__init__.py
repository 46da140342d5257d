"""Codecs: block image codec, whole-frame transform codecs, video, mode selection."""

from .encoder import BlockImageEncoder
from .decoder import BlockImageDecoder
from .transform_codec import dct_based_encode, dct_based_decode, wavelet_encode, wavelet_decode
from .video_codec import (
    CodedFrame,
    VideoEncoder,
    VideoDecoder,
    prepare_frames,
    calculate_video_stats,
)
from .modes import compress, decompress, get_container_info

__all__ = [
    'BlockImageEncoder',
    'BlockImageDecoder',
    'dct_based_encode',
    'dct_based_decode',
    'wavelet_encode',
    'wavelet_decode',
    'CodedFrame',
    'VideoEncoder',
    'VideoDecoder',
    'prepare_frames',
    'calculate_video_stats',
    'compress',
    'decompress',
    'get_container_info',
]
