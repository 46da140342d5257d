"""Checkpoint 1: I/O, Bitstream and Level Shift Verification."""

import sys
import os
import io
import tempfile

# Add parent directory to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

import numpy as np
import pytest
from PIL import Image

from termicodec.constants import BLOCK_HEADER_SIZE
from termicodec.errors import InvalidArgumentError, MalformedPayloadError
from termicodec.io import (
    BitstreamWriter, BitstreamReader, pack_bits, unpack_bits,
    pack_header, unpack_header, pack_container, unpack_container,
    read_grayscale_image, write_grayscale_image, rgb_to_grayscale,
    image_from_buffer, temporal_average, read_video_frames,
)
from termicodec.transform import level_shift


def test_bitstream_msb_first():
    """Bits are packed MSB first and the tail is zero padded."""
    print("=" * 60)
    print("Test 1: Bitstream MSB-first packing")
    print("=" * 60)

    buffer = io.BytesIO()
    writer = BitstreamWriter(buffer)
    writer.write_bits(0b101, 3)
    writer.write_bits(0b11, 2)
    writer.flush()

    assert buffer.getvalue() == bytes([0b10111000])
    print("✅ 5 bits -> 0xB8")

    writer = BitstreamWriter()
    writer.write_uint16(0xABCD)
    writer.write_bit(1)
    assert writer.bits_written == 17
    data = writer.getvalue()
    assert data == bytes([0xAB, 0xCD, 0x80])

    reader = BitstreamReader(data)
    assert reader.read_uint16() == 0xABCD
    assert reader.read_bit() == 1
    assert reader.bits_remaining() == 7
    print("✅ Writer/reader agree")


def test_bitstream_end_of_data():
    """Reading past the end raises unless zero padding is requested."""
    print("\n" + "=" * 60)
    print("Test 2: End of bitstream")
    print("=" * 60)

    reader = BitstreamReader(b'\xff')
    assert reader.read_bits(8) == 0xFF
    with pytest.raises(EOFError):
        reader.read_bit()

    padded = BitstreamReader(b'\xff', zero_pad=True)
    assert padded.read_bits(12) == 0xFF0
    print("✅ EOFError by default, zeros with zero_pad")


def test_fixed_width_codes():
    """12-bit codes survive pack/unpack and padding is ignored."""
    print("\n" + "=" * 60)
    print("Test 3: Fixed-width code packing")
    print("=" * 60)

    codes = [0, 4095, 256, 84, 1000]
    packed = pack_bits(codes, 12)
    assert len(packed) == (len(codes) * 12 + 7) // 8
    assert unpack_bits(packed, 12) == codes
    print(f"✅ {len(codes)} codes in {len(packed)} bytes")


def test_block_header():
    """Block codec header round trip and validation."""
    print("\n" + "=" * 60)
    print("Test 4: Block codec header")
    print("=" * 60)

    header = pack_header(height=30, width=41, quality=60, pad_h=2, pad_w=7,
                         data_len=1234, use_dpcm=False, signed=True)
    assert len(header) == BLOCK_HEADER_SIZE == 19

    info = unpack_header(header)
    assert info['height'] == 30 and info['width'] == 41
    assert info['quality'] == 60
    assert info['padding_h'] == 2 and info['padding_w'] == 7
    assert info['data_len'] == 1234
    assert info['use_dpcm'] is False
    assert info['signed'] is True

    with pytest.raises(MalformedPayloadError):
        unpack_header(b'XXXX' + header[4:])
    with pytest.raises(MalformedPayloadError):
        unpack_header(header[:10])
    with pytest.raises(MalformedPayloadError):
        unpack_header(pack_header(30, 41, 60, pad_h=0, pad_w=7, data_len=4))
    with pytest.raises(MalformedPayloadError):
        unpack_header(pack_header(30, 41, 0, pad_h=2, pad_w=7, data_len=4))
    print("✅ Header fields and validation")


def test_container_crc():
    """Container round trip; a flipped payload bit fails the CRC."""
    print("\n" + "=" * 60)
    print("Test 5: Container CRC")
    print("=" * 60)

    blob = pack_container('rle', b'\x03A\x02B', side_info=b'xy', original_len=5)
    header, side, payload = unpack_container(blob)
    assert header['mode'] == 'rle'
    assert header['original_len'] == 5
    assert side == b'xy'
    assert payload == b'\x03A\x02B'

    corrupted = bytearray(blob)
    corrupted[-6] ^= 0x01
    with pytest.raises(MalformedPayloadError):
        unpack_container(bytes(corrupted))

    with pytest.raises(MalformedPayloadError):
        unpack_container(blob[:-1])

    with pytest.raises(InvalidArgumentError):
        pack_container('zip', b'')
    print("✅ CRC and length checks")


def test_level_shift():
    """Level shift reversibility and clamping."""
    print("\n" + "=" * 60)
    print("Test 6: Level Shift")
    print("=" * 60)

    img = np.arange(256, dtype=np.uint8).reshape(16, 16)
    shifted = level_shift(img, forward=True)
    assert shifted.min() == -128 and shifted.max() == 127

    restored = level_shift(shifted, forward=False)
    assert restored.dtype == np.uint8
    np.testing.assert_array_equal(restored, img)

    clamped = level_shift(np.array([[-500.0, 500.0]]), forward=False)
    np.testing.assert_array_equal(clamped, [[0, 255]])
    print("✅ Level shift reversible, out-of-range values clamped")


def test_grayscale_conversion():
    """Luma weights 0.299/0.587/0.114."""
    print("\n" + "=" * 60)
    print("Test 7: RGB to grayscale")
    print("=" * 60)

    rgb = np.zeros((1, 4, 3), dtype=np.uint8)
    rgb[0, 0] = (255, 0, 0)
    rgb[0, 1] = (0, 255, 0)
    rgb[0, 2] = (0, 0, 255)
    rgb[0, 3] = (200, 200, 200)

    gray = rgb_to_grayscale(rgb)
    np.testing.assert_array_equal(gray, [[76, 150, 29, 200]])
    print(f"   Gray: {gray.tolist()}")
    print("✅ Luma conversion")


def test_image_read_write_roundtrip():
    """PNG, NPY and RAW round trips."""
    print("\n" + "=" * 60)
    print("Test 8: Image Read/Write Roundtrip")
    print("=" * 60)

    img = np.random.RandomState(0).randint(0, 256, (24, 40)).astype(np.uint8)

    with tempfile.TemporaryDirectory() as tmpdir:
        for name in ('img.png', 'img.npy', 'img.raw'):
            path = os.path.join(tmpdir, name)
            write_grayscale_image(img, path)
            if name.endswith('.raw'):
                loaded = read_grayscale_image(path, width=40, height=24)
            else:
                loaded = read_grayscale_image(path)
            np.testing.assert_array_equal(loaded, img)
            print(f"✅ {name} lossless")

        rgb_path = os.path.join(tmpdir, 'rgb.png')
        Image.fromarray(np.full((8, 8, 3), (10, 20, 30), dtype=np.uint8)).save(rgb_path)
        gray = read_grayscale_image(rgb_path)
        assert gray.shape == (8, 8)
        assert np.all(gray == 18)
        print("✅ RGB file read as luma")

        with pytest.raises(InvalidArgumentError):
            read_grayscale_image(os.path.join(tmpdir, 'img.raw'))


def test_buffer_and_temporal_average():
    """Flat buffers and frame averaging."""
    print("\n" + "=" * 60)
    print("Test 9: Buffers and temporal average")
    print("=" * 60)

    img = image_from_buffer(bytes(range(12)), width=4, height=3)
    assert img.shape == (3, 4)
    assert img[2, 3] == 11

    with pytest.raises(InvalidArgumentError):
        image_from_buffer(b'\x00' * 11, width=4, height=3)

    frames = [np.full((4, 4), v, dtype=np.uint8) for v in (10, 20, 31)]
    avg = temporal_average(frames)
    assert avg.dtype == np.uint8
    assert np.all(avg == 20)

    with pytest.raises(InvalidArgumentError):
        temporal_average([])
    with pytest.raises(InvalidArgumentError):
        temporal_average([np.zeros((2, 2)), np.zeros((3, 3))])
    print("✅ Buffer reshaping and averaging")


def test_frame_directory():
    """A directory of PNG frames reads in sorted order."""
    print("\n" + "=" * 60)
    print("Test 10: Frame directory")
    print("=" * 60)

    with tempfile.TemporaryDirectory() as tmpdir:
        for idx in (2, 0, 1):
            write_grayscale_image(np.full((6, 6), idx * 50, dtype=np.uint8),
                                  os.path.join(tmpdir, f'frame_{idx:02d}.png'))

        frames = read_video_frames(tmpdir)
        assert [int(f[0, 0]) for f in frames] == [0, 50, 100]

        frames = read_video_frames(tmpdir, max_frames=2)
        assert len(frames) == 2
    print("✅ Sorted frame sequence")


def _run(test):
    try:
        test()
        return True
    except AssertionError as e:
        print(f"❌ {test.__name__} failed: {e}")
        return False


def main():
    """Run all Checkpoint 1 tests."""
    print("\n" + "=" * 60)
    print("CHECKPOINT 1: I/O, BITSTREAM, LEVEL SHIFT")
    print("=" * 60 + "\n")

    results = [
        ("Bitstream MSB-first", _run(test_bitstream_msb_first)),
        ("Bitstream end of data", _run(test_bitstream_end_of_data)),
        ("Fixed-width codes", _run(test_fixed_width_codes)),
        ("Block header", _run(test_block_header)),
        ("Container CRC", _run(test_container_crc)),
        ("Level Shift", _run(test_level_shift)),
        ("Grayscale conversion", _run(test_grayscale_conversion)),
        ("Read/Write Roundtrip", _run(test_image_read_write_roundtrip)),
        ("Buffers and averaging", _run(test_buffer_and_temporal_average)),
        ("Frame directory", _run(test_frame_directory)),
    ]

    print("\n" + "=" * 60)
    print("CHECKPOINT 1 SUMMARY")
    print("=" * 60)

    all_passed = True
    for name, passed in results:
        status = "✅ PASS" if passed else "❌ FAIL"
        print(f"   {name}: {status}")
        if not passed:
            all_passed = False

    print("\n" + "=" * 60)
    if all_passed:
        print("🎉 CHECKPOINT 1 PASSED - All tests successful!")
    else:
        print("⚠️  CHECKPOINT 1 FAILED - Some tests did not pass")
    print("=" * 60 + "\n")

    return 0 if all_passed else 1


if __name__ == "__main__":
    sys.exit(main())
