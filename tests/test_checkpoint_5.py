"""Checkpoint 5: Image Codecs (whole-frame DCT, Haar wavelet, block codec)."""

import sys
import os
import struct

# Add parent directory to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

import numpy as np
import pytest

from termicodec.errors import (
    InvalidArgumentError, DimensionMismatchError, MalformedPayloadError,
)
from termicodec.codec import (
    BlockImageEncoder, BlockImageDecoder,
    dct_based_encode, dct_based_decode, wavelet_encode, wavelet_decode,
)
from termicodec.metrics import calculate_mse, calculate_psnr


def create_gradient(height=8, width=8):
    i, j = np.mgrid[:height, :width]
    return np.clip(i * 32 + j * 4, 0, 255).astype(np.uint8)


def create_test_image(height=64, width=64, seed=11):
    rng = np.random.RandomState(seed)
    y, x = np.mgrid[:height, :width]
    img = 120 + 50 * np.sin(x / 7.0) + 30 * np.cos(y / 5.0) + rng.normal(0, 4, (height, width))
    return np.clip(np.round(img), 0, 255).astype(np.uint8)


def test_dct_codec_layout():
    """int32 width | int32 height | signed-byte coefficients."""
    print("=" * 60)
    print("Test 1: DCT Codec Layout")
    print("=" * 60)

    img = create_gradient(8, 12)
    payload = dct_based_encode(img)
    assert len(payload) == 8 + 8 * 12
    assert struct.unpack('<ii', payload[:8]) == (12, 8)
    print(f"✅ {len(payload)} bytes for a 12x8 image")


def test_dct_codec_roundtrip():
    """Whole-frame DCT reconstructs within the documented error bound."""
    print("\n" + "=" * 60)
    print("Test 2: DCT Codec Roundtrip")
    print("=" * 60)

    img = create_gradient()
    recon = dct_based_decode(dct_based_encode(img), 8, 8)
    assert recon.dtype == np.uint8 and recon.shape == (8, 8)
    mse = calculate_mse(img, recon)
    print(f"   Gradient MSE: {mse:.1f}")
    assert mse < 6000

    flat = np.full((4, 4), 130, dtype=np.uint8)
    recon = dct_based_decode(dct_based_encode(flat))
    np.testing.assert_array_equal(recon, flat)
    print("✅ Bounded error, near-mid-gray flat image exact")


def test_dct_codec_errors():
    """Dimension mismatch and truncation are fatal."""
    print("\n" + "=" * 60)
    print("Test 3: DCT Codec Errors")
    print("=" * 60)

    payload = dct_based_encode(create_gradient())
    with pytest.raises(DimensionMismatchError):
        dct_based_decode(payload, 16, 8)
    with pytest.raises(DimensionMismatchError):
        dct_based_decode(payload, 8, 9)
    with pytest.raises(MalformedPayloadError):
        dct_based_decode(payload[:-1])
    with pytest.raises(MalformedPayloadError):
        dct_based_decode(payload[:5])
    with pytest.raises(InvalidArgumentError):
        dct_based_encode(np.zeros((0, 4), dtype=np.uint8))
    print("✅ Errors raised")


def test_wavelet_roundtrip():
    """Haar codec error stays near the quantization noise floor."""
    print("\n" + "=" * 60)
    print("Test 4: Wavelet Codec Roundtrip")
    print("=" * 60)

    img = create_test_image(64, 48)
    for levels in (1, 2, 3):
        payload = wavelet_encode(img, levels)
        assert len(payload) == 12 + 64 * 48
        assert struct.unpack('<iii', payload[:12]) == (48, 64, levels)
        recon = wavelet_decode(payload, 48, 64)
        mse = calculate_mse(img, recon)
        print(f"   levels={levels}: MSE={mse:.2f}")
        assert mse < 30

    with pytest.raises(InvalidArgumentError):
        wavelet_encode(create_test_image(20, 20), 3)
    with pytest.raises(DimensionMismatchError):
        wavelet_decode(wavelet_encode(img, 2), 64, 64)
    print("✅ Wavelet codec")


def test_block_codec_roundtrip():
    """Block codec quality and padding."""
    print("\n" + "=" * 60)
    print("Test 5: Block Codec Roundtrip")
    print("=" * 60)

    encoder = BlockImageEncoder()
    decoder = BlockImageDecoder()

    for shape in ((64, 64), (30, 41)):
        img = create_test_image(*shape)
        data = encoder.encode(img, quality=75)
        recon = decoder.decode(data)
        assert recon.shape == img.shape and recon.dtype == np.uint8
        psnr = calculate_psnr(img, recon)
        print(f"   {shape[1]}x{shape[0]} Q75: {len(data)} bytes, PSNR={psnr:.2f} dB")
        assert psnr > 30

        header = decoder.read_header(data)
        assert (header['height'], header['width']) == shape

    img = create_test_image()
    low = encoder.encode(img, quality=20)
    high = encoder.encode(img, quality=95)
    assert len(low) < len(high)
    assert calculate_psnr(img, decoder.decode(low)) < calculate_psnr(img, decoder.decode(high))
    print("✅ Higher quality, larger stream, better PSNR")


def test_block_codec_dpcm():
    """DPCM is recorded in the header and does not change the pixels."""
    print("\n" + "=" * 60)
    print("Test 6: Block Codec DPCM Flag")
    print("=" * 60)

    img = create_test_image()
    encoder = BlockImageEncoder()
    decoder = BlockImageDecoder()

    with_dpcm = encoder.encode(img, quality=60, use_dpcm=True)
    without_dpcm = encoder.encode(img, quality=60, use_dpcm=False)
    assert decoder.read_header(with_dpcm)['use_dpcm'] is True
    assert decoder.read_header(without_dpcm)['use_dpcm'] is False
    np.testing.assert_array_equal(decoder.decode(with_dpcm), decoder.decode(without_dpcm))
    print("✅ Identical reconstruction with and without DPCM")


def test_block_codec_signed():
    """Residual frames keep their sign."""
    print("\n" + "=" * 60)
    print("Test 7: Signed Residual Coding")
    print("=" * 60)

    rng = np.random.RandomState(12)
    residual = rng.randint(-40, 41, (24, 24)).astype(np.int16)
    residual[0, 0] = -255
    residual[0, 1] = 255

    data = BlockImageEncoder().encode(residual, quality=100, signed=True)
    recon = BlockImageDecoder().decode(data)
    assert recon.dtype == np.int16
    assert recon.min() >= -255 and recon.max() <= 255
    assert calculate_mse(residual, recon) < 1.0
    assert recon.min() < 0
    print("✅ Signed residual roundtrip")


def test_block_codec_errors():
    """Corruption, truncation and dimension checks."""
    print("\n" + "=" * 60)
    print("Test 8: Block Codec Errors")
    print("=" * 60)

    img = create_test_image(16, 16)
    data = BlockImageEncoder().encode(img)
    decoder = BlockImageDecoder()

    corrupted = bytearray(data)
    corrupted[30] ^= 0xFF
    with pytest.raises(MalformedPayloadError):
        decoder.decode(bytes(corrupted))
    with pytest.raises(MalformedPayloadError):
        decoder.decode(data[:-3])
    with pytest.raises(MalformedPayloadError):
        decoder.decode(data[:10])
    with pytest.raises(DimensionMismatchError):
        decoder.decode(data, width=32)

    with pytest.raises(InvalidArgumentError):
        BlockImageEncoder().encode(img, quality=0)
    with pytest.raises(InvalidArgumentError):
        BlockImageEncoder().encode(np.zeros((4, 4, 3), dtype=np.uint8))
    print("✅ Errors raised")


def _run(test):
    try:
        test()
        return True
    except AssertionError as e:
        print(f"❌ {test.__name__} failed: {e}")
        return False


def main():
    """Run all Checkpoint 5 tests."""
    print("\n" + "=" * 60)
    print("CHECKPOINT 5: IMAGE CODECS")
    print("=" * 60 + "\n")

    results = [
        ("DCT Layout", _run(test_dct_codec_layout)),
        ("DCT Roundtrip", _run(test_dct_codec_roundtrip)),
        ("DCT Errors", _run(test_dct_codec_errors)),
        ("Wavelet Roundtrip", _run(test_wavelet_roundtrip)),
        ("Block Codec Roundtrip", _run(test_block_codec_roundtrip)),
        ("Block Codec DPCM", _run(test_block_codec_dpcm)),
        ("Signed Residual", _run(test_block_codec_signed)),
        ("Block Codec Errors", _run(test_block_codec_errors)),
    ]

    print("\n" + "=" * 60)
    print("CHECKPOINT 5 SUMMARY")
    print("=" * 60)

    all_passed = True
    for name, passed in results:
        status = "✅ PASS" if passed else "❌ FAIL"
        print(f"   {name}: {status}")
        if not passed:
            all_passed = False

    print("\n" + "=" * 60)
    if all_passed:
        print("🎉 CHECKPOINT 5 PASSED - All tests successful!")
    else:
        print("⚠️  CHECKPOINT 5 FAILED - Some tests did not pass")
    print("=" * 60 + "\n")

    return 0 if all_passed else 1


if __name__ == "__main__":
    sys.exit(main())
