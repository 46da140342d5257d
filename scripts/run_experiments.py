#!/usr/bin/env python3
"""
Run every compression mode on one image and record the results.

Generates metrics.json plus reconstructed/error map PNGs.

Usage:
    python scripts/run_experiments.py [image_path]
"""

import sys
import os
import json
from datetime import datetime

# Add project root to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

import numpy as np

from termicodec.constants import COMPRESSION_MODES, BYTE_MODES
from termicodec.codec import compress, decompress, BlockImageEncoder, BlockImageDecoder
from termicodec.io import read_grayscale_image, write_grayscale_image
from termicodec.metrics import (
    calculate_mse,
    calculate_psnr,
    calculate_bpp,
    calculate_compression_ratio,
    generate_error_map,
    normalize_for_display,
)


def create_synthetic_image(height=128, width=128, seed=42):
    """Smooth gradient with a bright disc and mild noise."""
    rng = np.random.default_rng(seed)
    y, x = np.mgrid[:height, :width]
    image = 40 + 120 * (x / width) + 40 * (y / height)
    disc = (y - height / 2) ** 2 + (x - width / 2) ** 2 <= (min(height, width) / 5) ** 2
    image[disc] += 60
    image += rng.normal(0, 3, image.shape)
    return np.clip(np.round(image), 0, 255).astype(np.uint8)


def run_mode(image: np.ndarray, mode: str):
    """Compress/decompress with one mode and collect metrics."""
    blob = compress(image, mode)
    recovered = decompress(blob)

    mse = calculate_mse(image, recovered)
    psnr = calculate_psnr(image, recovered)

    return {
        'mode': mode,
        'lossless': mode in BYTE_MODES,
        'mse': round(mse, 4),
        'psnr': None if np.isinf(psnr) else round(psnr, 2),
        'bpp': round(calculate_bpp(len(blob), image.shape), 4),
        'compression_ratio': round(calculate_compression_ratio(image.nbytes, len(blob)), 3),
        'compressed_bytes': len(blob),
        'original_bytes': int(image.nbytes),
    }, recovered


def run_quality_sweep(image: np.ndarray, qualities):
    """Rate-distortion points of the block codec."""
    encoder = BlockImageEncoder()
    decoder = BlockImageDecoder()
    results = []
    for quality in qualities:
        with_dpcm = encoder.encode(image, quality=quality, use_dpcm=True)
        without_dpcm = encoder.encode(image, quality=quality, use_dpcm=False)
        recovered = decoder.decode(with_dpcm)
        results.append({
            'quality': quality,
            'psnr': round(calculate_psnr(image, recovered), 2),
            'bpp': round(calculate_bpp(len(with_dpcm), image.shape), 4),
            'bpp_without_dpcm': round(calculate_bpp(len(without_dpcm), image.shape), 4),
        })
    return results


def main():
    """Run all experiments."""
    print("=" * 60)
    print("TERMIVIEW CODEC - EXPERIMENT RUNNER")
    print("=" * 60)

    results_dir = "results"
    images_dir = os.path.join(results_dir, "images")
    os.makedirs(images_dir, exist_ok=True)

    if len(sys.argv) > 1:
        source = sys.argv[1]
        if not os.path.exists(source):
            print(f"Error: image not found: {source}")
            return 1
        image = read_grayscale_image(source)
    else:
        source = "synthetic (128x128 gradient + disc)"
        image = create_synthetic_image()

    print(f"\nImage: {source}")
    print(f"  Shape: {image.shape}")
    print(f"  Range: [{image.min()}, {image.max()}]")

    write_grayscale_image(image, os.path.join(images_dir, "original.png"))

    print("\n" + "=" * 60)
    print("MODE COMPARISON")
    print("=" * 60)

    mode_results = []
    for mode in COMPRESSION_MODES:
        result, recovered = run_mode(image, mode)
        mode_results.append(result)

        if not result['lossless']:
            write_grayscale_image(recovered, os.path.join(images_dir, f"reconstructed_{mode}.png"))
            error_map = normalize_for_display(generate_error_map(image, recovered))
            write_grayscale_image(error_map, os.path.join(images_dir, f"error_map_{mode}.png"))

        psnr = 'inf' if result['psnr'] is None else f"{result['psnr']:.2f} dB"
        print(f"  {mode:>10}: CR={result['compression_ratio']:>7.3f}x  "
              f"BPP={result['bpp']:>7.4f}  PSNR={psnr}")

    print("\n" + "=" * 60)
    print("BLOCK CODEC QUALITY SWEEP")
    print("=" * 60)

    sweep = run_quality_sweep(image, [25, 50, 75, 90])
    for r in sweep:
        print(f"  Q={r['quality']:>3}: PSNR={r['psnr']:.2f} dB  BPP={r['bpp']:.4f} "
              f"(no DPCM: {r['bpp_without_dpcm']:.4f})")

    output = {
        "experiment_date": datetime.now().isoformat(),
        "image": {
            "source": source,
            "shape": list(image.shape),
            "original_bytes": int(image.nbytes),
        },
        "modes": mode_results,
        "block_codec_sweep": sweep,
    }

    output_path = os.path.join(results_dir, "metrics.json")
    with open(output_path, 'w', encoding='utf-8') as f:
        json.dump(output, f, indent=2, ensure_ascii=False)

    print(f"\nResults saved to: {output_path}")
    print(f"Images saved to: {images_dir}/")
    return 0


if __name__ == "__main__":
    sys.exit(main())
