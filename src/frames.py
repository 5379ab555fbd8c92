"""
Rigid-body frame transforms.

Maps points from a local frame (e.g. the dock/target plate frame) into a
destination frame such as the world frame:

    world = R @ local + t

Orientation may be supplied as a scalar-last quaternion (x, y, z, w), a 3x3
rotation matrix, or a Rodrigues rotation vector.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Dict, Optional, Sequence, Union

import cv2
import numpy as np

LOGGER = logging.getLogger(__name__)

ArrayLike = Union[Sequence[float], Sequence[Sequence[float]], np.ndarray]


def quaternion_to_rotation_matrix(q: ArrayLike) -> np.ndarray:
    """Convert a unit quaternion (x, y, z, w) to a 3x3 rotation matrix."""
    arr = np.asarray(q, dtype=np.float64).reshape(-1)
    if arr.shape != (4,):
        raise ValueError(f"Quaternion must have 4 components, got shape {arr.shape}")

    x, y, z, w = arr
    return np.array(
        [
            [1 - 2 * (y * y + z * z), 2 * (x * y - z * w), 2 * (x * z + y * w)],
            [2 * (x * y + z * w), 1 - 2 * (x * x + z * z), 2 * (y * z - x * w)],
            [2 * (x * z - y * w), 2 * (y * z + x * w), 1 - 2 * (x * x + y * y)],
        ],
        dtype=np.float64,
    )


def rotation_matrix_to_quaternion(rotation: ArrayLike) -> np.ndarray:
    """Convert a 3x3 rotation matrix to a unit quaternion (x, y, z, w) with w >= 0."""
    m = np.asarray(rotation, dtype=np.float64)
    if m.shape != (3, 3):
        raise ValueError(f"Rotation must be 3x3, got shape {m.shape}")

    trace = np.trace(m)
    if trace > 0:
        s = 2.0 * np.sqrt(trace + 1.0)
        q = [(m[2, 1] - m[1, 2]) / s, (m[0, 2] - m[2, 0]) / s, (m[1, 0] - m[0, 1]) / s, 0.25 * s]
    elif m[0, 0] > m[1, 1] and m[0, 0] > m[2, 2]:
        s = 2.0 * np.sqrt(1.0 + m[0, 0] - m[1, 1] - m[2, 2])
        q = [0.25 * s, (m[0, 1] + m[1, 0]) / s, (m[0, 2] + m[2, 0]) / s, (m[2, 1] - m[1, 2]) / s]
    elif m[1, 1] > m[2, 2]:
        s = 2.0 * np.sqrt(1.0 + m[1, 1] - m[0, 0] - m[2, 2])
        q = [(m[0, 1] + m[1, 0]) / s, 0.25 * s, (m[1, 2] + m[2, 1]) / s, (m[0, 2] - m[2, 0]) / s]
    else:
        s = 2.0 * np.sqrt(1.0 + m[2, 2] - m[0, 0] - m[1, 1])
        q = [(m[0, 2] + m[2, 0]) / s, (m[1, 2] + m[2, 1]) / s, 0.25 * s, (m[1, 0] - m[0, 1]) / s]

    q = np.array(q, dtype=np.float64)
    q /= np.linalg.norm(q)
    return -q if q[3] < 0 else q


def rotation_from_orientation(orientation: Optional[ArrayLike]) -> np.ndarray:
    """Build a rotation matrix from any supported orientation representation.

    Args:
        orientation: Quaternion (4,), rotation matrix (3, 3), rotation
            vector (3,), or None for identity

    Returns:
        3x3 rotation matrix
    """
    if orientation is None:
        return np.eye(3, dtype=np.float64)

    arr = np.asarray(orientation, dtype=np.float64)
    if arr.shape == (3, 3):
        return arr.copy()
    if arr.size == 4:
        return quaternion_to_rotation_matrix(arr)
    if arr.size == 3:
        rotation, _ = cv2.Rodrigues(arr.reshape(3, 1))
        return rotation

    raise ValueError(f"Unsupported orientation shape: {arr.shape}")


@dataclass(frozen=True, eq=False)
class RigidTransform:
    """Rotation + translation taking local-frame points into a destination frame."""

    rotation: np.ndarray = field(default_factory=lambda: np.eye(3, dtype=np.float64))
    translation: np.ndarray = field(default_factory=lambda: np.zeros(3, dtype=np.float64))

    def __post_init__(self):
        rotation = np.array(self.rotation, dtype=np.float64)
        translation = np.array(self.translation, dtype=np.float64).reshape(-1)
        if rotation.shape != (3, 3):
            raise ValueError(f"Rotation must be 3x3, got shape {rotation.shape}")
        if translation.shape != (3,):
            raise ValueError(f"Translation must have 3 components, got shape {translation.shape}")
        rotation.setflags(write=False)
        translation.setflags(write=False)
        object.__setattr__(self, "rotation", rotation)
        object.__setattr__(self, "translation", translation)

    @classmethod
    def identity(cls) -> RigidTransform:
        return cls()

    @classmethod
    def from_pose(
        cls,
        position: Optional[ArrayLike] = None,
        orientation: Optional[ArrayLike] = None,
    ) -> RigidTransform:
        """Create a transform from a dock pose (position + orientation)."""
        translation = np.zeros(3) if position is None else position
        return cls(rotation=rotation_from_orientation(orientation), translation=translation)

    @classmethod
    def from_dict(cls, pose: Optional[Dict]) -> RigidTransform:
        """Create a transform from a ``{"position": ..., "orientation": ...}`` mapping."""
        if not pose:
            return cls.identity()
        return cls.from_pose(pose.get("position"), pose.get("orientation"))

    def as_matrix(self) -> np.ndarray:
        """Return the 4x4 homogeneous transformation matrix."""
        transform = np.eye(4, dtype=np.float64)
        transform[:3, :3] = self.rotation
        transform[:3, 3] = self.translation
        return transform

    def apply(self, points: ArrayLike) -> np.ndarray:
        return apply_rigid_transform(points, self)


def apply_rigid_transform(points: ArrayLike, transform: RigidTransform) -> np.ndarray:
    """Apply a rigid transform to a single 3-D point or an (N, 3) point set.

    Args:
        points: Point (3,) or points (N, 3) in the local frame
        transform: Local-to-destination transform

    Returns:
        Transformed point(s) with the same shape as the input
    """
    pts = np.asarray(points, dtype=np.float64)
    if pts.shape[-1:] != (3,):
        raise ValueError(f"Points must have 3 components in their last dimension, got shape {pts.shape}")

    return pts @ transform.rotation.T + transform.translation
