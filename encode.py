#!/usr/bin/env python3
"""
TermiView Codec Encoder CLI

Usage:
    python encode.py --input <path> --output <path> --mode <mode>

Example:
    python encode.py --input photo.png --output photo.tmvz --mode jpeg --quality 75
"""

import argparse
import logging
import sys
import os
import time

# Add project root to path
sys.path.insert(0, os.path.dirname(os.path.abspath(__file__)))

from termicodec.constants import (
    COMPRESSION_MODES, BYTE_MODES, DEFAULT_QUALITY, DEFAULT_WAVELET_LEVELS,
    DEFAULT_MOTION_BLOCK_SIZE, DEFAULT_SEARCH_WINDOW,
)
from termicodec.errors import CodecError
from termicodec.io import read_grayscale_image, read_video_frames
from termicodec.codec import compress, VideoEncoder
from termicodec.metrics import calculate_bpp, calculate_compression_ratio

LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'


def main():
    parser = argparse.ArgumentParser(
        description='TermiView Codec Encoder - lossless byte coders, lossy image codecs and predictive video',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Lossless LZW on any file
  python encode.py --input notes.txt --output notes.tmvz --mode lzw

  # Whole-frame DCT on an image
  python encode.py --input photo.png --output photo.tmvz --mode dct_based

  # Haar wavelet with 2 levels
  python encode.py --input photo.png --output photo.tmvz --mode wavelet --levels 2

  # Block codec at quality 50
  python encode.py --input photo.png --output photo.tmvz --mode jpeg --quality 50

  # Predictive video (file or directory of frames)
  python encode.py --input clip.mp4 --output clip.tmv --mode video \\
      --block-size 8 --search-window 4 --max-frames 30
        """
    )

    # Required arguments
    parser.add_argument('--input', '-i', required=True,
                        help='Input file (any file for byte modes, an image, or a video)')
    parser.add_argument('--output', '-o', required=True,
                        help='Output compressed file path')
    parser.add_argument('--mode', '-m', required=True,
                        choices=list(COMPRESSION_MODES) + ['video'],
                        help='Compression mode')

    # Optional arguments
    parser.add_argument('--quality', '-q', type=int, default=DEFAULT_QUALITY,
                        help=f'Quality for jpeg/video modes, 1-100 (default: {DEFAULT_QUALITY})')
    parser.add_argument('--levels', '-l', type=int, default=DEFAULT_WAVELET_LEVELS,
                        help=f'Wavelet levels (default: {DEFAULT_WAVELET_LEVELS})')
    parser.add_argument('--width', '-W', type=int,
                        help='Image width (required for .raw images)')
    parser.add_argument('--height', '-H', type=int,
                        help='Image height (required for .raw images)')
    parser.add_argument('--block-size', type=int, default=DEFAULT_MOTION_BLOCK_SIZE,
                        help=f'Motion block size (default: {DEFAULT_MOTION_BLOCK_SIZE})')
    parser.add_argument('--search-window', type=int, default=DEFAULT_SEARCH_WINDOW,
                        help=f'Motion search window (default: {DEFAULT_SEARCH_WINDOW})')
    parser.add_argument('--max-frames', type=int,
                        help='Read at most this many video frames')
    parser.add_argument('--verbose', '-v', action='store_true',
                        help='Verbose output')

    args = parser.parse_args()

    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.WARNING,
                        format=LOG_FORMAT)

    if not 1 <= args.quality <= 100:
        print(f"Error: Quality must be between 1 and 100, got {args.quality}",
              file=sys.stderr)
        sys.exit(1)

    if not os.path.exists(args.input):
        print(f"Error: Input file not found: {args.input}", file=sys.stderr)
        sys.exit(1)

    try:
        start_time = time.time()

        if args.mode == 'video':
            frames = read_video_frames(args.input, max_frames=args.max_frames)
            compressed = VideoEncoder().encode(frames, block_size=args.block_size,
                                               search_window=args.search_window,
                                               quality=args.quality)
            original_size = sum(f.nbytes for f in frames)
            shape = (frames[0].shape[0] * len(frames), frames[0].shape[1])
        elif args.mode in BYTE_MODES:
            with open(args.input, 'rb') as f:
                data = f.read()
            compressed = compress(data, args.mode)
            original_size = len(data)
            shape = (1, max(1, len(data)))
        else:
            image = read_grayscale_image(args.input, width=args.width, height=args.height)
            compressed = compress(image, args.mode, quality=args.quality, levels=args.levels)
            original_size = image.nbytes
            shape = image.shape

        with open(args.output, 'wb') as f:
            f.write(compressed)

        elapsed = time.time() - start_time

        compressed_size = len(compressed)
        bpp = calculate_bpp(compressed_size, shape)
        cr = calculate_compression_ratio(original_size, compressed_size)

        if args.verbose:
            print(f"\nResults ({args.mode}):")
            print(f"  Original size:   {original_size:,} bytes")
            print(f"  Compressed size: {compressed_size:,} bytes")
            print(f"  Compression ratio: {cr:.2f}x")
            print(f"  Bits per {'byte' if args.mode in BYTE_MODES else 'pixel'}: {bpp:.3f}")
            print(f"  Encoding time: {elapsed:.2f}s")
            print(f"\nOutput written to: {args.output}")
        else:
            print(f"Encoded: {args.input} -> {args.output} "
                  f"({args.mode}, {cr:.2f}x compression)")

    except (CodecError, ValueError, OSError, ImportError) as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)


if __name__ == '__main__':
    main()
