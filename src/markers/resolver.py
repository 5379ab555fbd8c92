"""
Marker corner resolution.

Converts square markers laid out in a 2-D drawing (x right, y down) into 3-D
corner coordinates in the dock/plate frame:

- drawing x maps to plate +z
- drawing y maps to plate -y
- plate x is the plate normal (egress direction) and is always zero

The plate-frame output can optionally be carried into another frame (e.g. the
world frame) with ``transform_marker_corners``. That step is left to the caller.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Mapping, Optional, Union

import numpy as np

from frames import RigidTransform, apply_rigid_transform

from .errors import InvalidMarkerSpec
from .types import MarkerCorners, MarkerSpec
from .units import DrawingUnit, resolve_drawing_unit

LOGGER = logging.getLogger(__name__)

SpecCollection = Union[Mapping[int, MarkerSpec], Iterable[MarkerSpec]]

# Plate-frame directions of the drawing axes
DRAWING_X_AXIS = np.array([0.0, 0.0, 1.0])
DRAWING_Y_AXIS = np.array([0.0, -1.0, 0.0])


def compute_marker_corners(spec: MarkerSpec, scale_factor: float) -> MarkerCorners:
    """Compute the four plate-frame corners of a single marker.

    Args:
        spec: Marker specification in drawing units
        scale_factor: Meters per drawing unit

    Returns:
        MarkerCorners in meters

    Raises:
        InvalidMarkerSpec: If the spec has a non-positive size or a bad position
    """
    if not math.isfinite(scale_factor) or scale_factor <= 0:
        raise ValueError(f"Scale factor must be positive, got {scale_factor}")

    spec.validate()
    px, py = spec.position
    edge = scale_factor * spec.size

    top_left = scale_factor * (px * DRAWING_X_AXIS + py * DRAWING_Y_AXIS)
    # Top edge follows drawing y, left edge follows drawing x
    top_right = top_left + edge * DRAWING_Y_AXIS
    bottom_left = top_left + edge * DRAWING_X_AXIS
    bottom_right = bottom_left + edge * DRAWING_Y_AXIS

    LOGGER.debug("Marker %s: top_left=%s edge=%.6f m", spec.id, top_left, edge)
    return MarkerCorners(
        id=spec.id,
        top_left=top_left,
        top_right=top_right,
        bottom_left=bottom_left,
        bottom_right=bottom_right,
    )


def parse_marker_table(table: Mapping, strict: bool = True) -> Dict[int, MarkerSpec]:
    """Convert an id-keyed table of ``{id, position, size}`` entries to MarkerSpecs.

    Keys may be ints or numeric strings (as JSON produces). With ``strict`` the
    first malformed entry raises InvalidMarkerSpec; otherwise malformed entries
    are logged and left out.
    """
    specs: Dict[int, MarkerSpec] = {}
    for key, entry in table.items():
        try:
            spec = _parse_entry(key, entry)
            if spec.id in specs:
                raise InvalidMarkerSpec(spec.id, "duplicate marker id")
        except InvalidMarkerSpec as e:
            if strict:
                raise
            LOGGER.error("Skipping table entry %r: %s", key, e.reason)
            continue
        specs[spec.id] = spec
    return specs


def _parse_entry(key, entry) -> MarkerSpec:
    if isinstance(entry, MarkerSpec):
        spec = entry
    elif not isinstance(entry, Mapping):
        raise InvalidMarkerSpec(_coerce_id(key), f"table entry must be a mapping, got {entry!r}")
    else:
        entry = dict(entry)
        entry.setdefault("id", _coerce_id(key))
        spec = MarkerSpec.from_dict(entry)

    if _coerce_id(key) != spec.id:
        raise InvalidMarkerSpec(spec.id, f"table key {key!r} does not match marker id")
    return spec


def _coerce_id(key) -> Optional[int]:
    try:
        return int(key)
    except (TypeError, ValueError):
        return None


def _iter_specs(specs: SpecCollection) -> Iterable[MarkerSpec]:
    if isinstance(specs, Mapping):
        return specs.values()
    return specs


@dataclass
class ResolverConfig:
    """Configuration for marker corner resolution."""

    drawing_unit: Optional[Union[str, DrawingUnit]] = "mm"
    strict: bool = False  # Raise on the first invalid marker instead of skipping it


@dataclass
class ResolutionResult:
    """Structured container for a batch of resolved markers."""

    corners: Dict[int, MarkerCorners] = field(default_factory=dict)
    rejected: List[InvalidMarkerSpec] = field(default_factory=list)
    unit: DrawingUnit = DrawingUnit.UNSPECIFIED
    scale_factor: float = 1.0

    @property
    def unit_defaulted(self) -> bool:
        """True when the drawing unit was not recognized and meters were assumed."""
        return self.unit is DrawingUnit.UNSPECIFIED

    @property
    def success(self) -> bool:
        return not self.rejected

    def to_dict(self) -> Dict:
        return {
            "unit": self.unit.value,
            "scale_factor": self.scale_factor,
            "markers": [corners.to_dict() for corners in self.corners.values()],
            "rejected": [{"id": err.marker_id, "reason": err.reason} for err in self.rejected],
        }


class MarkerCornerResolver:
    """
    Resolves marker specifications into plate-frame corner coordinates.

    Each marker is resolved independently. Invalid markers are reported in the
    result and skipped, unless ``strict`` is set.
    """

    def __init__(self, config: Optional[ResolverConfig] = None):
        self.config = config or ResolverConfig()

    @classmethod
    def from_dict(cls, config: Optional[Dict] = None) -> MarkerCornerResolver:
        config = config or {}
        return cls(
            ResolverConfig(
                drawing_unit=config.get("drawing_unit", "mm"),
                strict=config.get("strict", False),
            )
        )

    def resolve(
        self,
        specs: SpecCollection,
        unit: Optional[Union[str, DrawingUnit]] = None,
    ) -> ResolutionResult:
        """Resolve a batch of markers.

        Args:
            specs: MarkerSpecs, either id-keyed or as a plain iterable
            unit: Drawing unit override; defaults to the configured unit

        Returns:
            ResolutionResult with corners keyed by id in input order
        """
        selector = self.config.drawing_unit if unit is None else unit
        drawing_unit = resolve_drawing_unit(selector)

        result = ResolutionResult(unit=drawing_unit, scale_factor=drawing_unit.scale_factor)

        seen = []
        for spec in _iter_specs(specs):
            try:
                if spec.id in seen:
                    raise InvalidMarkerSpec(spec.id, "duplicate marker id")
                seen.append(spec.id)
                result.corners[spec.id] = compute_marker_corners(spec, result.scale_factor)
            except InvalidMarkerSpec as e:
                if self.config.strict:
                    raise
                LOGGER.error("Skipping marker %s: %s", e.marker_id, e.reason)
                result.rejected.append(e)

        LOGGER.info(
            "Resolved %d marker(s) at %.4f m/unit (%d rejected)",
            len(result.corners),
            result.scale_factor,
            len(result.rejected),
        )
        return result


def resolve_marker_corners(
    specs: SpecCollection,
    unit: Optional[Union[str, DrawingUnit]] = None,
) -> Dict[int, MarkerCorners]:
    """Resolve every valid marker's plate-frame corners.

    Invalid markers are logged and left out; the rest of the batch is still
    resolved. An unrecognized unit falls back to meters with a warning.

    Args:
        specs: MarkerSpecs, either id-keyed or as a plain iterable
        unit: "mm", "in", a DrawingUnit, or anything else for meters

    Returns:
        Dict of marker id to MarkerCorners
    """
    resolver = MarkerCornerResolver(ResolverConfig(drawing_unit=unit))
    return resolver.resolve(specs).corners


def transform_marker_corners(
    corners: Union[MarkerCorners, Mapping[int, MarkerCorners]],
    transform: RigidTransform,
):
    """Carry plate-frame corners into another frame with a rigid transform.

    Accepts a single MarkerCorners or an id-keyed mapping and returns the same
    shape.
    """
    if isinstance(corners, MarkerCorners):
        return _transform_one(corners, transform)
    return {marker_id: _transform_one(c, transform) for marker_id, c in corners.items()}


def _transform_one(corners: MarkerCorners, transform: RigidTransform) -> MarkerCorners:
    points = apply_rigid_transform(
        np.vstack([corners.top_left, corners.top_right, corners.bottom_left, corners.bottom_right]),
        transform,
    )
    return MarkerCorners(
        id=corners.id,
        top_left=points[0],
        top_right=points[1],
        bottom_left=points[2],
        bottom_right=points[3],
    )
