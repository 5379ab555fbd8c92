"""
Drawing units for printable marker artwork.

Marker tables are authored in the units of the drawing they were generated
from. Everything downstream works in meters.
"""

from __future__ import annotations

import logging
from enum import Enum
from typing import Optional, Union

LOGGER = logging.getLogger(__name__)


class DrawingUnit(Enum):
    """Unit selector for marker positions and sizes."""

    MILLIMETERS = "mm"
    INCHES = "in"
    UNSPECIFIED = "unspecified"

    @property
    def scale_factor(self) -> float:
        """Meters per drawing unit."""
        return _SCALE_FACTORS[self]

    @classmethod
    def parse(cls, value: Optional[Union[str, DrawingUnit]]) -> DrawingUnit:
        """Map a unit selector to a DrawingUnit.

        Unknown or missing selectors map to UNSPECIFIED (meters) rather than
        raising; callers decide how loudly to report that.
        """
        if isinstance(value, DrawingUnit):
            return value
        if value is None:
            return cls.UNSPECIFIED
        return _ALIASES.get(str(value).strip().lower(), cls.UNSPECIFIED)


_SCALE_FACTORS = {
    DrawingUnit.MILLIMETERS: 0.001,
    DrawingUnit.INCHES: 0.0254,
    DrawingUnit.UNSPECIFIED: 1.0,
}

_ALIASES = {
    "mm": DrawingUnit.MILLIMETERS,
    "millimeter": DrawingUnit.MILLIMETERS,
    "millimeters": DrawingUnit.MILLIMETERS,
    "in": DrawingUnit.INCHES,
    "inch": DrawingUnit.INCHES,
    "inches": DrawingUnit.INCHES,
}


def resolve_drawing_unit(unit: Optional[Union[str, DrawingUnit]]) -> DrawingUnit:
    """Parse a unit selector, warning when falling back to meters."""
    drawing_unit = DrawingUnit.parse(unit)
    if drawing_unit is DrawingUnit.UNSPECIFIED:
        LOGGER.warning("Drawing unit %r not recognized, assuming meters (scale factor 1.0)", unit)
    return drawing_unit
