"""Video frame source and temporal helpers."""

import logging
from pathlib import Path
from typing import List, Optional

import numpy as np

from .image_reader import read_grayscale_image, rgb_to_grayscale
from ..errors import InvalidArgumentError

logger = logging.getLogger(__name__)

FRAME_SUFFIXES = ('.png', '.jpg', '.jpeg', '.bmp', '.tif', '.tiff', '.pgm', '.npy')


def read_video_frames(path: str, max_frames: Optional[int] = None) -> List[np.ndarray]:
    """
    Read a video as a list of grayscale frames.

    Video containers are decoded with OpenCV. A directory is read as an
    image sequence in sorted filename order.

    Args:
        path: Video file or directory of frame images
        max_frames: Stop after this many frames

    Returns:
        List of 2D uint8 arrays, all of the same shape
    """
    path = Path(path)
    if path.is_dir():
        frames = _read_frame_directory(path, max_frames)
    else:
        frames = _read_video_file(path, max_frames)

    if not frames:
        raise InvalidArgumentError(f"No frames read from: {path}")

    logger.debug("Read %d frames of %dx%d from %s",
                 len(frames), frames[0].shape[1], frames[0].shape[0], path)
    return frames


def _read_video_file(path: Path, max_frames: Optional[int]) -> List[np.ndarray]:
    import cv2

    cap = cv2.VideoCapture(str(path))
    if not cap.isOpened():
        raise InvalidArgumentError(f"Unable to open video: {path}")

    frames = []
    try:
        while max_frames is None or len(frames) < max_frames:
            ok, frame = cap.read()
            if not ok:
                break
            # OpenCV delivers BGR
            frames.append(rgb_to_grayscale(frame[:, :, ::-1]))
    finally:
        cap.release()

    return frames


def _read_frame_directory(path: Path, max_frames: Optional[int]) -> List[np.ndarray]:
    files = sorted(p for p in path.iterdir() if p.suffix.lower() in FRAME_SUFFIXES)
    if max_frames is not None:
        files = files[:max_frames]

    frames = [read_grayscale_image(str(p)) for p in files]
    if frames and any(f.shape != frames[0].shape for f in frames):
        raise InvalidArgumentError(f"Frame size mismatch in sequence: {path}")
    return frames


def temporal_average(frames: List[np.ndarray]) -> np.ndarray:
    """
    Pixel-wise mean of equally sized frames.

    Args:
        frames: Non-empty list of 2D arrays with identical shapes

    Returns:
        2D uint8 array
    """
    if not frames:
        raise InvalidArgumentError("temporal_average needs at least one frame")

    shape = frames[0].shape
    for frame in frames:
        if frame.shape != shape:
            raise InvalidArgumentError(f"Frame shape {frame.shape} does not match {shape}")

    mean = np.mean(np.stack([f.astype(np.float64) for f in frames]), axis=0)
    return np.clip(np.round(mean), 0, 255).astype(np.uint8)
