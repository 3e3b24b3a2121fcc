"""Spherical web-Mercator projection onto a square segment canvas.

Geographic degrees are first mapped to continuous Mercator world units
(256 units per full longitude wrap, y growing southwards), then each
folder gets its own affine map from its projected bounding box onto a
``size`` × ``size`` pixel canvas.  No projection frame is shared between
folders.
"""

from __future__ import annotations

import math
from collections.abc import Iterable
from dataclasses import dataclass

from kml_dispersion.core.constants import MERCATOR_TILE_SIZE
from kml_dispersion.core.exceptions import ValidationError
from kml_dispersion.models.segment import BoundingBox


class ProjectionError(ValidationError):
    """Raised when a folder's geometry cannot be mapped onto a canvas."""

    default_stage = "project"
    default_code = "PROJECTION_FAILED"


class DegenerateBoundingBoxError(ProjectionError):
    """Raised when a bounding box has zero width or height."""

    default_code = "DEGENERATE_BBOX"


def lon_to_x(lon: float) -> float:
    """Mercator x in world units; increases with longitude, 0..256 over -180..180."""
    return (lon + 180.0) * (MERCATOR_TILE_SIZE / 360.0)


def lat_to_y(lat: float) -> float:
    """Mercator y in world units; decreases as latitude increases.

    Raises:
        ProjectionError: If ``lat`` is not strictly between -90 and 90.
    """
    if not -90.0 < lat < 90.0:
        msg = f"Latitude {lat} cannot be projected (must be strictly between -90 and 90)"
        raise ProjectionError(msg)
    lat_rad = lat * math.pi / 180.0
    half = MERCATOR_TILE_SIZE / 2.0
    return (half / math.pi) * (math.pi - math.log(math.tan(math.pi / 4.0 + lat_rad / 2.0)))


def compute_bounding_box(points: Iterable[tuple[float, float]]) -> BoundingBox:
    """Return the tightest box containing every ``(lon, lat)`` point.

    Raises:
        ProjectionError: If ``points`` is empty.
    """
    lons: list[float] = []
    lats: list[float] = []
    for lon, lat in points:
        lons.append(lon)
        lats.append(lat)
    if not lons:
        msg = "Cannot compute a bounding box of zero vertices"
        raise ProjectionError(msg)
    return BoundingBox(west=min(lons), south=min(lats), east=max(lons), north=max(lats))


@dataclass(frozen=True, slots=True)
class CanvasProjection:
    """Affine map from one folder's projected bounding box to pixel space.

    Attributes:
        min_x: Mercator x of the west edge.
        max_x: Mercator x of the east edge.
        min_y: Mercator y of the north edge (smallest y).
        max_y: Mercator y of the south edge (largest y).
        size: Canvas side length in pixels.
    """

    min_x: float
    max_x: float
    min_y: float
    max_y: float
    size: int

    @classmethod
    def from_bbox(cls, bbox: BoundingBox, size: int) -> CanvasProjection:
        """Build the folder's canvas map.

        Raises:
            DegenerateBoundingBoxError: If the box has zero width or height.
            ProjectionError: If an edge is not a finite number, or a
                bounding latitude is at or beyond a pole.
        """
        edges = (bbox.west, bbox.south, bbox.east, bbox.north)
        if not all(math.isfinite(edge) for edge in edges):
            msg = f"Bounding box has a non-finite edge {edges}"
            raise ProjectionError(msg)
        if bbox.is_degenerate:
            msg = (
                f"Bounding box has zero extent (west={bbox.west}, south={bbox.south}, "
                f"east={bbox.east}, north={bbox.north})"
            )
            raise DegenerateBoundingBoxError(msg)
        return cls(
            min_x=lon_to_x(bbox.west),
            max_x=lon_to_x(bbox.east),
            min_y=lat_to_y(bbox.north),
            max_y=lat_to_y(bbox.south),
            size=size,
        )

    def to_pixel(self, lon: float, lat: float) -> tuple[float, float]:
        """Map a geographic point to continuous ``(col, row)`` pixel coordinates."""
        px = (lon_to_x(lon) - self.min_x) / (self.max_x - self.min_x) * self.size
        py = (lat_to_y(lat) - self.min_y) / (self.max_y - self.min_y) * self.size
        return (px, py)

    def project_ring(self, ring: Iterable[tuple[float, float]]) -> list[tuple[float, float]]:
        return [self.to_pixel(lon, lat) for lon, lat in ring]
