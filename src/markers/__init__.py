"""
Markers subpackage.

Turns printable fiducial-marker layouts into 3-D corner coordinates for
calibration and perception:

- Typed marker specifications parsed from id-keyed tables
- Drawing unit resolution (mm, in, meters fallback)
- Plate-frame corner computation
- Optional rigid transform of resolved corners into another frame
"""

from .errors import InvalidMarkerSpec, MarkerGeometryError
from .resolver import (
    MarkerCornerResolver,
    ResolutionResult,
    ResolverConfig,
    compute_marker_corners,
    parse_marker_table,
    resolve_marker_corners,
    transform_marker_corners,
)
from .types import MarkerCorners, MarkerSpec
from .units import DrawingUnit, resolve_drawing_unit

__all__ = [
    "DrawingUnit",
    "InvalidMarkerSpec",
    "MarkerCornerResolver",
    "MarkerCorners",
    "MarkerGeometryError",
    "MarkerSpec",
    "ResolutionResult",
    "ResolverConfig",
    "compute_marker_corners",
    "parse_marker_table",
    "resolve_drawing_unit",
    "resolve_marker_corners",
    "transform_marker_corners",
]
