"""Test Predictive Video Codec Extension."""

import sys
import os

# Add parent directory to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

import numpy as np
import pytest

from termicodec.constants import I_FRAME, P_FRAME
from termicodec.errors import InvalidArgumentError, MalformedPayloadError
from termicodec.codec import (
    CodedFrame, VideoEncoder, VideoDecoder, prepare_frames, calculate_video_stats,
)
from termicodec.metrics import calculate_mse


def create_synthetic_sequence(num_frames=4, height=32, width=32, seed=42):
    """
    Smooth background panning right with a bright square moving down.

    Adjacent frames are similar, as in real footage.
    """
    rng = np.random.RandomState(seed)
    canvas_w = width + 2 * num_frames
    y, x = np.mgrid[:height, :canvas_w]
    background = 110 + 40 * np.sin(x / 5.0) * np.cos(y / 7.0) + rng.normal(0, 2, (height, canvas_w))

    frames = []
    for t in range(num_frames):
        frame = background[:, 2 * t:2 * t + width].copy()
        top = 4 + 2 * t
        frame[top:top + 8, 12:20] = 220
        frames.append(np.clip(np.round(frame), 0, 255).astype(np.uint8))
    return frames


def test_video_roundtrip():
    """Every frame is reproduced with bounded error."""
    print("=" * 60)
    print("Test 1: Video Roundtrip")
    print("=" * 60)

    frames = create_synthetic_sequence()
    stream = VideoEncoder().encode(frames, block_size=8, search_window=4, quality=75)
    decoded = VideoDecoder().decode(stream)

    assert len(decoded) == len(frames)
    for idx, (orig, recon) in enumerate(zip(frames, decoded)):
        assert recon.shape == orig.shape and recon.dtype == np.uint8
        mse = calculate_mse(orig, recon)
        print(f"   Frame {idx}: MSE={mse:.2f}")
        assert mse < 500
    print(f"✅ {len(decoded)} frames, {len(stream)} bytes")


def test_frame_types():
    """Frame 0 is I, the rest are P."""
    print("\n" + "=" * 60)
    print("Test 2: Frame Types")
    print("=" * 60)

    frames = create_synthetic_sequence(num_frames=5)
    coded = VideoEncoder().encode_frames(frames)
    assert [c.frame_type for c in coded] == [I_FRAME] + [P_FRAME] * 4

    stream = VideoEncoder().encode(frames, block_size=8, search_window=3, quality=60)
    info = VideoDecoder().get_stream_info(stream)
    assert info['frame_count'] == 5
    assert info['i_frames'] == 1 and info['p_frames'] == 4
    assert (info['width'], info['height']) == (32, 32)
    assert (info['block_size'], info['search_window'], info['quality']) == (8, 3, 60)
    assert info['total_size'] == len(stream)
    print("✅ I P P P P")


def test_decode_matches_coded_frames():
    """Stream and coded-frame decoding agree."""
    print("\n" + "=" * 60)
    print("Test 3: Stream vs Coded Frames")
    print("=" * 60)

    frames = create_synthetic_sequence()
    coded = VideoEncoder().encode_frames(frames, block_size=8, search_window=4, quality=75)
    from_coded = VideoDecoder().decode_frames(coded)
    from_stream = VideoDecoder().decode(VideoEncoder().encode(frames, 8, 4, 75))
    for a, b in zip(from_coded, from_stream):
        np.testing.assert_array_equal(a, b)
    print("✅ Identical reconstructions")


def test_coded_frames_carry_block_size():
    """Coded frames from a non-default block size decode on their own."""
    print("\n" + "=" * 60)
    print("Test 4: Block Size In P-Frames")
    print("=" * 60)

    frames = create_synthetic_sequence(num_frames=3, height=32, width=36)
    coded = VideoEncoder().encode_frames(frames, block_size=4, search_window=2, quality=75)
    assert all(c.payload[0] == 4 for c in coded[1:])

    from_coded = VideoDecoder().decode_frames(coded)
    from_stream = VideoDecoder().decode(VideoEncoder().encode(frames, 4, 2, 75))
    for orig, a, b in zip(frames, from_coded, from_stream):
        np.testing.assert_array_equal(a, b)
        assert calculate_mse(orig, a) < 500

    zeroed = CodedFrame(P_FRAME, 36, 32, b"\x00" + coded[1].payload[1:])
    with pytest.raises(MalformedPayloadError):
        VideoDecoder().decode_frames([coded[0], zeroed])
    with pytest.raises(MalformedPayloadError):
        VideoDecoder().decode_frames([coded[0], CodedFrame(P_FRAME, 36, 32, b"")])
    with pytest.raises(InvalidArgumentError):
        VideoEncoder().encode_frames(frames, block_size=256)
    print("✅ P-frames are self-describing")


def test_static_scene_prediction():
    """A static scene costs far less in P-frames than in the I-frame."""
    print("\n" + "=" * 60)
    print("Test 5: Static Scene")
    print("=" * 60)

    frame = create_synthetic_sequence(num_frames=1, height=64, width=64)[0]
    frame = np.clip(frame.astype(np.int16) + np.random.RandomState(3).randint(-20, 21, frame.shape),
                    0, 255).astype(np.uint8)
    coded = VideoEncoder().encode_frames([frame] * 3, quality=75)

    i_size = len(coded[0].payload)
    p_sizes = [len(c.payload) for c in coded[1:]]
    print(f"   I: {i_size} bytes, P: {p_sizes}")
    assert all(p < i_size for p in p_sizes)
    print("✅ Prediction removes temporal redundancy")


def test_input_preparation():
    """RGB frames convert to luma; bad sequences are rejected."""
    print("\n" + "=" * 60)
    print("Test 6: Input Preparation")
    print("=" * 60)

    rgb = np.zeros((16, 16, 3), dtype=np.uint8)
    rgb[..., 1] = 200
    prepared = prepare_frames([rgb])
    assert prepared[0].shape == (16, 16)
    assert np.all(prepared[0] == 117)

    with pytest.raises(InvalidArgumentError):
        prepare_frames([])
    with pytest.raises(InvalidArgumentError):
        prepare_frames([np.zeros((16, 16)), np.zeros((16, 8))])
    with pytest.raises(InvalidArgumentError):
        VideoEncoder().encode(create_synthetic_sequence(2), quality=0)
    with pytest.raises(InvalidArgumentError):
        VideoEncoder().encode(create_synthetic_sequence(2), block_size=0)
    print("✅ Input checks")


def test_stream_corruption():
    """Damaged streams and broken frame order fail the whole decode."""
    print("\n" + "=" * 60)
    print("Test 7: Stream Corruption")
    print("=" * 60)

    frames = create_synthetic_sequence(num_frames=3)
    stream = VideoEncoder().encode(frames)

    corrupted = bytearray(stream)
    corrupted[len(stream) // 2] ^= 0x10
    with pytest.raises(MalformedPayloadError):
        VideoDecoder().decode(bytes(corrupted))
    with pytest.raises(MalformedPayloadError):
        VideoDecoder().decode(stream[:-7])
    with pytest.raises(MalformedPayloadError):
        VideoDecoder().decode(b"TMV1")

    coded = VideoEncoder().encode_frames(frames)
    with pytest.raises(MalformedPayloadError):
        VideoDecoder().decode_frames(coded[1:])
    with pytest.raises(MalformedPayloadError):
        VideoDecoder().decode_frames([CodedFrame(7, 32, 32, coded[0].payload)])

    broken = CodedFrame(P_FRAME, 32, 32, coded[1].payload[:-1])
    with pytest.raises(MalformedPayloadError):
        VideoDecoder().decode_frames([coded[0], broken])
    print("✅ Corruption detected")


def test_video_stats():
    """Statistics over a decoded sequence."""
    print("\n" + "=" * 60)
    print("Test 8: Video Statistics")
    print("=" * 60)

    frames = create_synthetic_sequence()
    stream = VideoEncoder().encode(frames)
    decoded = VideoDecoder().decode(stream)
    stats = calculate_video_stats(frames, decoded, len(stream))

    assert stats['frames'] == 4
    assert stats['original_bytes'] == 4 * 32 * 32
    assert stats['compressed_bytes'] == len(stream)
    assert abs(stats['bpp'] - len(stream) * 8 / (4 * 32 * 32)) < 1e-12
    assert len(stats['mse_per_frame']) == 4
    assert stats['max_mse'] == max(stats['mse_per_frame'])

    with pytest.raises(InvalidArgumentError):
        calculate_video_stats(frames, decoded[:2], len(stream))
    print(f"   CR={stats['compression_ratio']:.2f}x, BPP={stats['bpp']:.3f}")
    print("✅ Statistics")


def _run(test):
    try:
        test()
        return True
    except AssertionError as e:
        print(f"❌ {test.__name__} failed: {e}")
        return False


def main():
    """Run all video codec tests."""
    print("\n" + "=" * 60)
    print("PREDICTIVE VIDEO CODEC EXTENSION")
    print("=" * 60 + "\n")

    results = [
        ("Video Roundtrip", _run(test_video_roundtrip)),
        ("Frame Types", _run(test_frame_types)),
        ("Stream vs Coded Frames", _run(test_decode_matches_coded_frames)),
        ("Block Size In P-Frames", _run(test_coded_frames_carry_block_size)),
        ("Static Scene", _run(test_static_scene_prediction)),
        ("Input Preparation", _run(test_input_preparation)),
        ("Stream Corruption", _run(test_stream_corruption)),
        ("Video Statistics", _run(test_video_stats)),
    ]

    print("\n" + "=" * 60)
    print("VIDEO EXTENSION SUMMARY")
    print("=" * 60)

    all_passed = True
    for name, passed in results:
        status = "✅ PASS" if passed else "❌ FAIL"
        print(f"   {name}: {status}")
        if not passed:
            all_passed = False

    print("\n" + "=" * 60)
    if all_passed:
        print("🎉 VIDEO EXTENSION PASSED - All tests successful!")
    else:
        print("⚠️  VIDEO EXTENSION FAILED - Some tests did not pass")
    print("=" * 60 + "\n")

    return 0 if all_passed else 1


if __name__ == "__main__":
    sys.exit(main())
