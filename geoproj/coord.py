"""
Coordinate value types for geoproj.

This module contains the plain value types exchanged with PROJ:
- Coord: a 4-component coordinate (x, y, z, m)
- Bounds: a bounding box given by its min/max corners
- Area: an optional usage area restricting operation selection

None of these own native resources.
"""

import math
from dataclasses import dataclass
from typing import List, NamedTuple, Optional, Sequence


class Coord(NamedTuple):
    """
    A coordinate with four generic components.

    The meaning of each component (lon/lat/height/time, easting/northing/...)
    depends on the CRS and the axis order it declares.
    """

    x: float = 0.0
    y: float = 0.0
    z: float = 0.0
    m: float = 0.0

    def deg_to_rad(self) -> "Coord":
        """Return a copy with the first two components converted to radians."""
        return self._replace(x=math.radians(self.x), y=math.radians(self.y))

    def rad_to_deg(self) -> "Coord":
        """Return a copy with the first two components converted to degrees."""
        return self._replace(x=math.degrees(self.x), y=math.degrees(self.y))


class Bounds(NamedTuple):
    """A bounding box."""

    xmin: float = 0.0
    ymin: float = 0.0
    xmax: float = 0.0
    ymax: float = 0.0


@dataclass(frozen=True)
class Area:
    """
    Area of interest used to pick the most suitable operation when several
    candidate operations exist between two CRS.

    Parameters
    ----------
    west, south, east, north : float
        Bounding box in degrees. ``west`` may be greater than ``east`` for
        areas crossing the antimeridian.
    name : str, optional
        Name of the area.
    """

    west: float
    south: float
    east: float
    north: float
    name: Optional[str] = None

    @classmethod
    def from_bounds(cls, bounds: Bounds, name: Optional[str] = None) -> "Area":
        return cls(bounds.xmin, bounds.ymin, bounds.xmax, bounds.ymax, name)


def float64_lists_to_coords(rows: Sequence[Sequence[float]]) -> List[Coord]:
    """
    Convert rows of 2 to 4 floats into Coords, padding missing components with 0.

    Raises
    ------
    ValueError
        If a row has fewer than 2 or more than 4 values.
    """
    coords = []
    for i, row in enumerate(rows):
        if not 2 <= len(row) <= 4:
            raise ValueError(f"row {i} has {len(row)} values, expected 2 to 4")
        coords.append(Coord(*(float(value) for value in row)))
    return coords
