"""I/O modules for the TermiView codec core."""

from .image_reader import read_grayscale_image, rgb_to_grayscale, image_from_buffer
from .image_writer import write_grayscale_image
from .video_reader import read_video_frames, temporal_average
from .bitstream import (
    BitstreamWriter, BitstreamReader, pack_bits, unpack_bits,
    pack_header, unpack_header,
)
from .container import pack_container, unpack_container, read_container_header

__all__ = [
    'read_grayscale_image',
    'rgb_to_grayscale',
    'image_from_buffer',
    'write_grayscale_image',
    'read_video_frames',
    'temporal_average',
    'BitstreamWriter',
    'BitstreamReader',
    'pack_bits',
    'unpack_bits',
    'pack_header',
    'unpack_header',
    'pack_container',
    'unpack_container',
    'read_container_header',
]
