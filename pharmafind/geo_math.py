#!/usr/bin/env python3
"""
PharmaFind: Geo Math

Great-circle distance between WGS84 points using the Haversine formula,
coordinate validation, and bounding boxes over sets of points.

No external geo-libraries required, pure math with stdlib.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from decimal import Decimal
from typing import Iterable

from .errors import InvalidInput
from .policy import DISPLAY_PRECISION


# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

EARTH_RADIUS_KM = 6371.0

# Distances closer than this are treated as equal when testing a radius
DISTANCE_EPSILON_KM = 1e-9


def _is_number(value: object) -> bool:
    return isinstance(value, (int, float, Decimal)) and not isinstance(value, bool)


def validate_coordinate(lat: object, lng: object) -> bool:
    """
    Check that a latitude/longitude pair is numeric, finite and in range.

    Never raises; callers decide whether to surface a failure as a
    client error.
    """
    if not (_is_number(lat) and _is_number(lng)):
        return False
    try:
        lat_f, lng_f = float(lat), float(lng)  # type: ignore[arg-type]
    except ValueError:
        # signaling NaN Decimals refuse float conversion
        return False
    if not (math.isfinite(lat_f) and math.isfinite(lng_f)):
        return False
    return -90.0 <= lat_f <= 90.0 and -180.0 <= lng_f <= 180.0


@dataclass(frozen=True)
class Coordinate:
    """A WGS84 coordinate pair in decimal degrees."""
    latitude: float
    longitude: float

    def __post_init__(self) -> None:
        if not validate_coordinate(self.latitude, self.longitude):
            raise InvalidInput(
                f"Invalid coordinates: ({self.latitude!r}, {self.longitude!r})",
                field="coordinate",
            )
        object.__setattr__(self, "latitude", float(self.latitude))
        object.__setattr__(self, "longitude", float(self.longitude))

    @classmethod
    def parse(cls, lat: object, lng: object) -> "Coordinate":
        """Build a Coordinate from loosely-typed input (query strings, JSON)."""
        try:
            lat_f = float(lat)  # type: ignore[arg-type]
            lng_f = float(lng)  # type: ignore[arg-type]
        except (TypeError, ValueError):
            raise InvalidInput(
                f"Invalid coordinates: ({lat!r}, {lng!r})",
                field="coordinate",
            )
        return cls(latitude=lat_f, longitude=lng_f)

    def to_dict(self) -> dict[str, float]:
        return {"latitude": self.latitude, "longitude": self.longitude}


@dataclass(frozen=True)
class MapBounds:
    """Axis-aligned box over a set of coordinates, centred on its midpoint."""
    north: float
    south: float
    east: float
    west: float
    center: Coordinate

    def to_dict(self) -> dict:
        return {
            "north": self.north,
            "south": self.south,
            "east": self.east,
            "west": self.west,
            "center": self.center.to_dict(),
        }


# ---------------------------------------------------------------------------
# Core distance calculation
# ---------------------------------------------------------------------------


def distance(coord_a: Coordinate, coord_b: Coordinate) -> float:
    """
    Compute the great-circle distance in kilometres between two WGS84 points
    using the Haversine formula.

    The result is unrounded; use display_distance() for presentation.
    """
    lat1 = math.radians(coord_a.latitude)
    lat2 = math.radians(coord_b.latitude)
    dlat = math.radians(coord_b.latitude - coord_a.latitude)
    dlon = math.radians(coord_b.longitude - coord_a.longitude)

    h = (
        math.sin(dlat / 2) ** 2
        + math.cos(lat1) * math.cos(lat2) * math.sin(dlon / 2) ** 2
    )
    # rounding can push h a hair above 1 for antipodal points
    h = min(1.0, h)
    c = 2 * math.atan2(math.sqrt(h), math.sqrt(1 - h))

    return EARTH_RADIUS_KM * c


def display_distance(distance_km: float | None, precision: int = DISPLAY_PRECISION) -> float | None:
    """Round a distance for display. None passes through."""
    if distance_km is None:
        return None
    return round(distance_km, precision)


def format_coordinates(coord: Coordinate) -> str:
    """Human-readable "lat, lon" with six decimals."""
    return f"{coord.latitude:.6f}, {coord.longitude:.6f}"


# ---------------------------------------------------------------------------
# Boxes
# ---------------------------------------------------------------------------


def bounding_box(points: Iterable[Coordinate]) -> MapBounds | None:
    """
    Min/max box over a set of points.

    The center is the midpoint of the box, not the centroid of the points.
    Returns None for an empty set; every caller must check.
    """
    points = list(points)
    if not points:
        return None

    lats = [p.latitude for p in points]
    lons = [p.longitude for p in points]
    north, south = max(lats), min(lats)
    east, west = max(lons), min(lons)

    return MapBounds(
        north=north,
        south=south,
        east=east,
        west=west,
        center=Coordinate((north + south) / 2, (east + west) / 2),
    )


def radius_bounding_box(
    target: Coordinate,
    radius_km: float,
) -> tuple[float, float, float, float]:
    """
    Return a lat/lon box that encloses a circle of the given radius around
    the target coordinate.

    Returns (min_lat, max_lat, min_lon, max_lon) in degrees.

    Coarse pre-filter only, for storage layers that want a cheap WHERE
    clause. Final inclusion is always decided by distance().
    """
    if radius_km < 0:
        raise InvalidInput("radius_km must be >= 0", field="radius_km")

    lat_delta = radius_km / EARTH_RADIUS_KM * (180.0 / math.pi)
    min_lat = max(-90.0, target.latitude - lat_delta)
    max_lat = min(90.0, target.latitude + lat_delta)

    cos_lat = math.cos(math.radians(target.latitude))
    if cos_lat <= 1e-12 or min_lat <= -90.0 or max_lat >= 90.0:
        return (min_lat, max_lat, -180.0, 180.0)

    lon_delta = lat_delta / cos_lat
    min_lon = target.longitude - lon_delta
    max_lon = target.longitude + lon_delta
    # box wraps the antimeridian
    if min_lon < -180.0 or max_lon > 180.0:
        return (min_lat, max_lat, -180.0, 180.0)

    return (min_lat, max_lat, min_lon, max_lon)
