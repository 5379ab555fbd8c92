"""Exception types for marker geometry."""

from typing import Optional


class MarkerGeometryError(Exception):
    """Base exception for marker geometry errors."""

    pass


class InvalidMarkerSpec(MarkerGeometryError, ValueError):
    """A marker specification cannot produce a valid square."""

    def __init__(self, marker_id: Optional[int], reason: str):
        self.marker_id = marker_id
        self.reason = reason
        super().__init__(f"Invalid marker spec (id={marker_id}): {reason}")
