"""
Attitude error metrics.

Provides the angular distance between orientation quaternions along with a few
small quaternion helpers. Quaternions are stored scalar-last as (x, y, z, w).
"""

from __future__ import annotations

import logging
from typing import Sequence, Union

import numpy as np

LOGGER = logging.getLogger(__name__)

QuaternionLike = Union[Sequence[float], np.ndarray]


def _as_quaternions(q: QuaternionLike, name: str) -> np.ndarray:
    arr = np.asarray(q, dtype=np.float64)
    if arr.ndim == 0 or arr.shape[-1] != 4:
        raise ValueError(f"{name} must have 4 components in its last dimension, got shape {arr.shape}")
    return arr


def angular_error_degrees(q1: QuaternionLike, q2: QuaternionLike) -> Union[float, np.ndarray]:
    """Compute the angular separation between two orientations in degrees.

    Uses ``acos(2 * (q1 . q2)^2 - 1)``, which is the rotation angle of the
    shortest rotation taking one orientation onto the other. Squaring the dot
    product makes the result identical for ``q`` and ``-q``.

    Both inputs are expected to be unit quaternions. They are NOT normalized
    here; passing non-unit quaternions gives a meaningless result.

    Args:
        q1: Quaternion (x, y, z, w), or an (N, 4) array of quaternions
        q2: Quaternion (x, y, z, w), or an (N, 4) array compared row-wise

    Returns:
        Angle in [0, 180] degrees. A float for single quaternions, an array
        with one value per row for batches.
    """
    a = _as_quaternions(q1, "q1")
    b = _as_quaternions(q2, "q2")

    try:
        dot = np.sum(a * b, axis=-1)
    except ValueError as e:
        raise ValueError(f"Quaternion batches do not broadcast: {a.shape} vs {b.shape}") from e

    # Rounding can push the argument just past +/-1
    cos_angle = np.clip(2.0 * dot * dot - 1.0, -1.0, 1.0)
    angle = np.degrees(np.arccos(cos_angle))

    if np.ndim(angle) == 0:
        return float(angle)
    return angle


def quaternion_conjugate(q: QuaternionLike) -> np.ndarray:
    """Return the conjugate (inverse rotation for unit quaternions)."""
    arr = _as_quaternions(q, "q")
    return arr * np.array([-1.0, -1.0, -1.0, 1.0])


def quaternion_multiply(q1: QuaternionLike, q2: QuaternionLike) -> np.ndarray:
    """Hamilton product ``q1 * q2`` for scalar-last quaternions."""
    x1, y1, z1, w1 = np.moveaxis(_as_quaternions(q1, "q1"), -1, 0)
    x2, y2, z2, w2 = np.moveaxis(_as_quaternions(q2, "q2"), -1, 0)
    return np.stack(
        [
            w1 * x2 + x1 * w2 + y1 * z2 - z1 * y2,
            w1 * y2 - x1 * z2 + y1 * w2 + z1 * x2,
            w1 * z2 + x1 * y2 - y1 * x2 + z1 * w2,
            w1 * w2 - x1 * x2 - y1 * y2 - z1 * z2,
        ],
        axis=-1,
    )


def relative_rotation(q1: QuaternionLike, q2: QuaternionLike) -> np.ndarray:
    """Error rotation ``q1^-1 * q2`` taking orientation q1 onto q2."""
    return quaternion_multiply(quaternion_conjugate(q1), q2)


def rotation_angle_degrees(q: QuaternionLike) -> Union[float, np.ndarray]:
    """Rotation angle encoded by a unit quaternion, folded into [0, 180]."""
    arr = _as_quaternions(q, "q")
    w = np.clip(np.abs(arr[..., 3]), 0.0, 1.0)
    angle = np.degrees(2.0 * np.arccos(w))
    if np.ndim(angle) == 0:
        return float(angle)
    return angle

