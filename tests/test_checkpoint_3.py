"""Checkpoint 3: Quantization Verification."""

import sys
import os

# Add parent directory to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

import numpy as np
import pytest

from termicodec.errors import InvalidArgumentError
from termicodec.transform import level_shift, forward_dct_block, inverse_dct_block
from termicodec.transform import split_into_blocks, merge_blocks
from termicodec.quantization import (
    get_quantization_step, quantize, dequantize, quantize_to_int8, dequantize_int8,
)
from termicodec.metrics import calculate_psnr


def test_quantization_step_mapping():
    """Quality to step mapping."""
    print("=" * 60)
    print("Test 1: Quality to Step Mapping")
    print("=" * 60)

    expected = {1: 637, 25: 25, 50: 12, 75: 6, 90: 2, 100: 1}
    for quality, step in expected.items():
        assert get_quantization_step(quality) == step, \
            f"Q={quality} should give step={step}, got {get_quantization_step(quality)}"
        print(f"   Q={quality:3d} → step = {step}")

    steps = [get_quantization_step(q) for q in range(1, 101)]
    assert all(a >= b for a, b in zip(steps, steps[1:])), "Step must not grow with quality"

    for bad in (0, 101, -5):
        with pytest.raises(InvalidArgumentError):
            get_quantization_step(bad)
    print("✅ Monotonic mapping, out-of-range quality rejected")


def test_quantize_dequantize():
    """Quantize/dequantize dtypes and error bound."""
    print("\n" + "=" * 60)
    print("Test 2: Quantize/Dequantize Operations")
    print("=" * 60)

    coeffs = np.random.RandomState(6).uniform(-500, 500, (8, 8))
    for step in (1, 6, 12, 100):
        quant = quantize(coeffs, step)
        dequant = dequantize(quant, step)
        assert quant.dtype == np.int32
        assert dequant.dtype == np.float64
        assert np.abs(dequant - coeffs).max() <= step / 2 + 1e-9
        print(f"✅ step={step}: max error <= step/2")


def test_int8_quantization():
    """Whole-frame quantization saturates instead of wrapping."""
    print("\n" + "=" * 60)
    print("Test 3: Signed Byte Quantization")
    print("=" * 60)

    coeffs = np.array([0.0, 14.9, -15.1, 1269.0, 1275.0, -1300.0, 5000.0])
    q = quantize_to_int8(coeffs)
    assert q.dtype == np.int8
    assert q.tolist() == [0, 1, -2, 127, 127, -128, 127]

    restored = dequantize_int8(q)
    assert restored.tolist() == [0.0, 10.0, -20.0, 1270.0, 1270.0, -1280.0, 1270.0]

    q = quantize_to_int8(np.array([33.0]), step=4.0)
    assert q[0] == 8
    print("✅ Saturation at [-128, 127], step 10 by default")


def test_full_image_quantization():
    """Block DCT + quantization PSNR rises with quality."""
    print("\n" + "=" * 60)
    print("Test 4: Full Image Block Quantization")
    print("=" * 60)

    y, x = np.mgrid[:64, :64]
    img = (128 + 60 * np.sin(x / 5.0) + 40 * np.cos(y / 7.0)).astype(np.uint8)

    psnrs = []
    for quality in (25, 50, 75, 100):
        step = get_quantization_step(quality)
        shifted = level_shift(img, forward=True)
        blocks, pad_info = split_into_blocks(shifted)
        recon = [inverse_dct_block(dequantize(quantize(forward_dct_block(b), step), step))
                 for b in blocks]
        merged = merge_blocks(recon, img.shape, pad_info)
        result = level_shift(merged, forward=False)
        psnr = calculate_psnr(img, result)
        psnrs.append(psnr)
        print(f"   Q={quality:3d} step={step:3d} PSNR={psnr:.2f} dB")

    assert psnrs == sorted(psnrs), "PSNR should increase with quality"
    assert psnrs[-1] > 45.0
    print("✅ Rate-distortion ordering holds")


def _run(test):
    try:
        test()
        return True
    except AssertionError as e:
        print(f"❌ {test.__name__} failed: {e}")
        return False


def main():
    """Run all Checkpoint 3 tests."""
    print("\n" + "=" * 60)
    print("CHECKPOINT 3: QUANTIZATION")
    print("=" * 60 + "\n")

    results = [
        ("Step Mapping", _run(test_quantization_step_mapping)),
        ("Quantize/Dequantize", _run(test_quantize_dequantize)),
        ("Signed Byte Quantization", _run(test_int8_quantization)),
        ("Full Image Quantization", _run(test_full_image_quantization)),
    ]

    print("\n" + "=" * 60)
    print("CHECKPOINT 3 SUMMARY")
    print("=" * 60)

    all_passed = True
    for name, passed in results:
        status = "✅ PASS" if passed else "❌ FAIL"
        print(f"   {name}: {status}")
        if not passed:
            all_passed = False

    print("\n" + "=" * 60)
    if all_passed:
        print("🎉 CHECKPOINT 3 PASSED - All tests successful!")
    else:
        print("⚠️  CHECKPOINT 3 FAILED - Some tests did not pass")
    print("=" * 60 + "\n")

    return 0 if all_passed else 1


if __name__ == "__main__":
    sys.exit(main())
