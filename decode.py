#!/usr/bin/env python3
"""
TermiView Codec Decoder CLI

Usage:
    python decode.py --input <path> --output <path>

Example:
    python decode.py --input photo.tmvz --output recovered.png
"""

import argparse
import logging
import sys
import os
import time

# Add project root to path
sys.path.insert(0, os.path.dirname(os.path.abspath(__file__)))

import numpy as np
from termicodec.constants import VIDEO_MAGIC
from termicodec.errors import CodecError
from termicodec.io import write_grayscale_image
from termicodec.codec import decompress, get_container_info, VideoDecoder

LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'


def write_frames(frames, output: str) -> str:
    """Write decoded frames as numbered PNGs into a directory."""
    os.makedirs(output, exist_ok=True)
    for idx, frame in enumerate(frames):
        write_grayscale_image(frame, os.path.join(output, f'frame_{idx:04d}.png'))
    return output


def main():
    parser = argparse.ArgumentParser(
        description='TermiView Codec Decoder - restore files, images and video frames',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Restore a byte-mode file
  python decode.py --input notes.tmvz --output notes.txt

  # Restore an image (format from extension: .png, .npy, .raw, ...)
  python decode.py --input photo.tmvz --output recovered.png

  # Restore a video as a directory of PNG frames
  python decode.py --input clip.tmv --output frames/ --verbose
        """
    )

    parser.add_argument('--input', '-i', required=True,
                        help='Input compressed file (.tmvz container or .tmv video stream)')
    parser.add_argument('--output', '-o', required=True,
                        help='Output file, image, or frame directory for video')
    parser.add_argument('--verbose', '-v', action='store_true',
                        help='Verbose output')

    args = parser.parse_args()

    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.WARNING,
                        format=LOG_FORMAT)

    if not os.path.exists(args.input):
        print(f"Error: Input file not found: {args.input}", file=sys.stderr)
        sys.exit(1)

    try:
        start_time = time.time()

        with open(args.input, 'rb') as f:
            compressed = f.read()

        if args.verbose:
            print(f"Reading compressed file: {args.input}")
            print(f"  Compressed size: {len(compressed):,} bytes")

        if compressed[:4] == VIDEO_MAGIC:
            decoder = VideoDecoder()
            if args.verbose:
                info = decoder.get_stream_info(compressed)
                print(f"  Video: {info['frame_count']} frames, {info['width']}x{info['height']}, "
                      f"{info['i_frames']} I / {info['p_frames']} P")
            frames = decoder.decode(compressed)
            target = write_frames(frames, args.output)
            summary = f"{len(frames)} frames"
        else:
            info = get_container_info(compressed)
            if args.verbose:
                print(f"  Mode: {info['mode']}")
            result = decompress(compressed)
            if isinstance(result, np.ndarray):
                target = write_grayscale_image(result, args.output)
                summary = f"{info['mode']}, {result.shape[1]}x{result.shape[0]}"
            else:
                with open(args.output, 'wb') as f:
                    f.write(result)
                target = args.output
                summary = f"{info['mode']}, {len(result):,} bytes"

        elapsed = time.time() - start_time

        if args.verbose:
            print(f"  Decoding time: {elapsed:.2f}s")
            print(f"\nOutput written to: {target}")
        else:
            print(f"Decoded: {args.input} -> {target} ({summary})")

    except (CodecError, ValueError) as e:
        print(f"Error: Invalid compressed file - {e}", file=sys.stderr)
        sys.exit(1)
    except OSError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)


if __name__ == '__main__':
    main()
