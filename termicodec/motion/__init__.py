"""Block-matching motion estimation and compensation."""

from .block_matching import (
    MotionVector,
    estimate_motion,
    compensate,
    mean_absolute_difference,
    serialize_motion_vectors,
    deserialize_motion_vectors,
)

__all__ = [
    'MotionVector',
    'estimate_motion',
    'compensate',
    'mean_absolute_difference',
    'serialize_motion_vectors',
    'deserialize_motion_vectors',
]
