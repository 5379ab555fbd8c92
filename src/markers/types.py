"""
Typed records for marker specifications and resolved marker corners.
"""

from __future__ import annotations

import math
import numbers
from dataclasses import dataclass
from typing import Dict, Mapping, Tuple

import numpy as np

from .errors import InvalidMarkerSpec


def _readonly_vector(values) -> np.ndarray:
    arr = np.array(values, dtype=np.float64).reshape(3)
    arr.setflags(write=False)
    return arr


@dataclass(frozen=True)
class MarkerSpec:
    """One square fiducial marker as laid out on the printable plate.

    Position is the top-left corner of the marker in drawing coordinates
    (x right, y down); size is the edge length. Both are in drawing units.
    """

    id: int
    position: Tuple[float, float]
    size: float

    def validate(self):
        """Raise InvalidMarkerSpec if this spec cannot describe a real square."""
        if isinstance(self.id, bool) or not isinstance(self.id, numbers.Integral):
            raise InvalidMarkerSpec(self.id, f"id must be an integer, got {self.id!r}")
        if isinstance(self.size, bool) or not isinstance(self.size, numbers.Real):
            raise InvalidMarkerSpec(self.id, f"size must be a number, got {self.size!r}")
        if not math.isfinite(self.size) or self.size <= 0:
            raise InvalidMarkerSpec(self.id, f"size must be positive, got {self.size}")
        try:
            count = len(self.position)
        except TypeError:
            raise InvalidMarkerSpec(self.id, f"position must be [x, y], got {self.position!r}") from None
        if count != 2:
            raise InvalidMarkerSpec(self.id, f"position must have 2 components, got {count}")
        for value in self.position:
            if isinstance(value, bool) or not isinstance(value, numbers.Real) or not math.isfinite(value):
                raise InvalidMarkerSpec(self.id, f"position must be two finite numbers, got {self.position!r}")

    @classmethod
    def from_dict(cls, entry: Mapping) -> MarkerSpec:
        """Build a spec from a ``{"id", "position": [x, y], "size"}`` table entry."""
        marker_id = entry.get("id")
        position = entry.get("position")
        if position is None or isinstance(position, (str, bytes)):
            raise InvalidMarkerSpec(marker_id, f"position must be [x, y], got {position!r}")
        try:
            position = tuple(position)
        except TypeError:
            raise InvalidMarkerSpec(marker_id, f"position must be [x, y], got {position!r}") from None

        spec = cls(id=marker_id, position=position, size=entry.get("size"))
        spec.validate()
        return spec


@dataclass(frozen=True, eq=False)
class MarkerCorners:
    """Corners of one marker in the destination frame, in meters."""

    id: int
    top_left: np.ndarray
    top_right: np.ndarray
    bottom_left: np.ndarray
    bottom_right: np.ndarray

    def __post_init__(self):
        for name in ("top_left", "top_right", "bottom_left", "bottom_right"):
            object.__setattr__(self, name, _readonly_vector(getattr(self, name)))

    @property
    def edge_length(self) -> float:
        return float(np.linalg.norm(self.top_right - self.top_left))

    @property
    def center(self) -> np.ndarray:
        return (self.top_left + self.bottom_right) / 2.0

    def as_array(self) -> np.ndarray:
        """Corners as a (4, 3) array in ArUco order: TL, TR, BR, BL."""
        return np.vstack([self.top_left, self.top_right, self.bottom_right, self.bottom_left])

    def to_dict(self) -> Dict:
        return {
            "id": self.id,
            "top_left": self.top_left.tolist(),
            "top_right": self.top_right.tolist(),
            "bottom_left": self.bottom_left.tolist(),
            "bottom_right": self.bottom_right.tolist(),
        }
