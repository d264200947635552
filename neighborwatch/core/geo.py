"""Geo-containment helpers.

Two distinct predicates live here and must not be conflated:

- a *bounding box* is a map viewport (two corners), used for "events on the
  map right now" queries;
- a *circle* (center + radius in meters) is an area of interest.

``circle_bounds`` turns a circle into its enclosing rectangle purely as a
cheap SQL prefilter; the exact answer always comes from ``is_within_radius``.
"""

from __future__ import annotations

import math
from collections.abc import Callable
from dataclasses import dataclass

from neighborwatch.core.exceptions import ValidationError

EARTH_RADIUS_METERS = 6_371_000.0

# Keeps float rounding from excluding points exactly on a circle's edge.
_BOUNDS_EPSILON = 1e-9


@dataclass(frozen=True)
class LatLng:
    latitude: float
    longitude: float


def parse_lat_lng(raw: str) -> LatLng:
    """Parse a ``"lat,lng"`` query parameter."""
    parts = raw.split(",")
    if len(parts) != 2:
        raise ValidationError(f"Expected 'lat,lng', got {raw!r}")
    try:
        latitude, longitude = float(parts[0]), float(parts[1])
    except ValueError as e:
        raise ValidationError(f"Expected 'lat,lng', got {raw!r}") from e
    if not (math.isfinite(latitude) and math.isfinite(longitude)):
        raise ValidationError(f"Coordinates must be finite, got {raw!r}")
    if not -90.0 <= latitude <= 90.0 or not -180.0 <= longitude <= 180.0:
        raise ValidationError(f"Coordinates out of range: {raw!r}")
    return LatLng(latitude, longitude)


def haversine_distance(a: LatLng, b: LatLng) -> float:
    """Great-circle distance between two points, in meters."""
    phi1 = math.radians(a.latitude)
    phi2 = math.radians(b.latitude)
    d_phi = math.radians(b.latitude - a.latitude)
    d_lambda = math.radians(b.longitude - a.longitude)

    h = (
        math.sin(d_phi / 2) ** 2
        + math.cos(phi1) * math.cos(phi2) * math.sin(d_lambda / 2) ** 2
    )
    # Rounding can push h marginally above 1 for antipodal points.
    return 2 * EARTH_RADIUS_METERS * math.asin(math.sqrt(min(1.0, h)))


def is_within_radius(point: LatLng, center: LatLng, radius_meters: float) -> bool:
    """True iff ``point`` lies within ``radius_meters`` of ``center``.

    Only requires a positive radius; business bounds on area radii are
    enforced by the callers.
    """
    if not radius_meters > 0:
        raise ValidationError("Radius must be a positive number of meters")
    return haversine_distance(point, center) <= radius_meters


@dataclass(frozen=True)
class BoundingBox:
    """Axis-aligned lat/lng rectangle (a map viewport)."""

    min_latitude: float
    max_latitude: float
    min_longitude: float
    max_longitude: float

    @classmethod
    def from_corners(cls, north_east: LatLng, south_west: LatLng) -> BoundingBox:
        """Build a box from two corners; corner order is normalised."""
        return cls(
            min_latitude=min(north_east.latitude, south_west.latitude),
            max_latitude=max(north_east.latitude, south_west.latitude),
            min_longitude=min(north_east.longitude, south_west.longitude),
            max_longitude=max(north_east.longitude, south_west.longitude),
        )

    def contains(self, point: LatLng) -> bool:
        return (
            self.min_latitude <= point.latitude <= self.max_latitude
            and self.min_longitude <= point.longitude <= self.max_longitude
        )


def bounding_box_filter(
    north_east: LatLng, south_west: LatLng
) -> Callable[[LatLng], bool]:
    """Return a viewport predicate over points."""
    return BoundingBox.from_corners(north_east, south_west).contains


def circle_bounds(center: LatLng, radius_meters: float) -> BoundingBox:
    """Smallest lat/lng rectangle enclosing a circle.

    Used as a coarse prefilter only. When the circle reaches a pole or
    crosses the antimeridian the longitude span is widened to the full range.
    """
    if not radius_meters > 0:
        raise ValidationError("Radius must be a positive number of meters")

    angular = radius_meters / EARTH_RADIUS_METERS
    d_lat = math.degrees(angular) + _BOUNDS_EPSILON
    sin_angular = math.sin(angular)
    cos_lat = math.cos(math.radians(center.latitude))
    if sin_angular >= cos_lat:
        min_lng, max_lng = -180.0, 180.0
    else:
        d_lng = math.degrees(math.asin(sin_angular / cos_lat)) + _BOUNDS_EPSILON
        min_lng, max_lng = center.longitude - d_lng, center.longitude + d_lng
        if min_lng < -180.0 or max_lng > 180.0:
            min_lng, max_lng = -180.0, 180.0

    return BoundingBox(
        min_latitude=max(-90.0, center.latitude - d_lat),
        max_latitude=min(90.0, center.latitude + d_lat),
        min_longitude=min_lng,
        max_longitude=max_lng,
    )
