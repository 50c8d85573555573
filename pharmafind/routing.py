#!/usr/bin/env python3
"""
PharmaFind: Location Provider Client

Thin client for the external location services the search layer leans
on:

    geocode_address   free-text address -> Coordinate (OpenStreetMap Nominatim)
    reverse_geocode   Coordinate -> Place (Nominatim reverse lookup)
    estimate_route    driving distance/duration between two points (OSRM)

Provider failures never propagate. Both geocoding directions return None; route
estimation falls back to the Haversine distance with a rough
2-minutes-per-km duration.

Dependencies:
    pip install requests
"""

from __future__ import annotations

import logging
import os
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import Any, Iterator

import requests

from .errors import InvalidInput
from .geo_math import Coordinate, distance, format_coordinates

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Configuration (env vars with public-endpoint defaults)
# ---------------------------------------------------------------------------

NOMINATIM_URL = os.environ.get(
    "PHARMAFIND_NOMINATIM_URL", "https://nominatim.openstreetmap.org/search"
)
NOMINATIM_REVERSE_URL = os.environ.get(
    "PHARMAFIND_NOMINATIM_REVERSE_URL", "https://nominatim.openstreetmap.org/reverse"
)
OSRM_URL = os.environ.get(
    "PHARMAFIND_OSRM_URL", "https://router.project-osrm.org/route/v1/driving"
)
HTTP_TIMEOUT = float(os.environ.get("PHARMAFIND_HTTP_TIMEOUT", "10"))
USER_AGENT = "pharmafind/0.1 (drug availability search)"

FALLBACK_MINUTES_PER_KM = 2.0


@dataclass(frozen=True)
class RouteEstimate:
    distance_km: float
    duration_minutes: float
    geometry: dict | None = None
    source: str = "osrm"  # "osrm" | "haversine"

    def to_dict(self) -> dict[str, Any]:
        return {
            "distance_km": round(self.distance_km, 2),
            "duration_minutes": round(self.duration_minutes),
            "geometry": self.geometry,
            "source": self.source,
        }


@dataclass(frozen=True)
class Place:
    display_name: str
    city: str | None = None
    state: str | None = None
    country: str | None = None
    postcode: str | None = None
    address: dict = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return {
            "display_name": self.display_name,
            "city": self.city,
            "state": self.state,
            "country": self.country,
            "postcode": self.postcode,
            "address": self.address,
        }


@contextmanager
def _session(session: requests.Session | None) -> Iterator[requests.Session]:
    """Use the caller's session as is, or open a short-lived one that is closed on exit."""
    if session is not None:
        yield session
        return
    with requests.Session() as s:
        s.headers["User-Agent"] = USER_AGENT
        yield s


def geocode_address(
    address: str,
    session: requests.Session | None = None,
) -> Coordinate | None:
    """
    Resolve a free-text address to a coordinate.

    Returns None when the address is not found, the provider errors, or
    the provider answers with coordinates that fail validation.
    """
    if not address or not address.strip():
        raise InvalidInput("Address must not be empty", field="address")

    params = {"format": "json", "q": address.strip(), "limit": 1}
    try:
        with _session(session) as s:
            resp = s.get(NOMINATIM_URL, params=params, timeout=HTTP_TIMEOUT)
            resp.raise_for_status()
            results = resp.json()
    except (requests.exceptions.RequestException, ValueError) as e:
        logger.warning("Geocoding request failed for %r: %s", address, e)
        return None

    if not results:
        return None

    try:
        return Coordinate.parse(results[0].get("lat"), results[0].get("lon"))
    except InvalidInput:
        logger.warning("Geocoder returned invalid coordinates for %r: %s", address, results[0])
        return None


def reverse_geocode(
    coord: Coordinate,
    session: requests.Session | None = None,
) -> Place | None:
    """
    Describe the place at a coordinate.

    Returns None when nothing is found there or the provider errors.
    """
    params = {
        "format": "json",
        "lat": coord.latitude,
        "lon": coord.longitude,
        "zoom": 18,
        "addressdetails": 1,
    }
    try:
        with _session(session) as s:
            resp = s.get(NOMINATIM_REVERSE_URL, params=params, timeout=HTTP_TIMEOUT)
            resp.raise_for_status()
            result = resp.json()
    except (requests.exceptions.RequestException, ValueError) as e:
        logger.warning("Reverse geocoding failed for %s: %s", format_coordinates(coord), e)
        return None

    # Nominatim answers a miss with {"error": "Unable to geocode"}
    if not isinstance(result, dict) or "error" in result or not result.get("display_name"):
        return None

    address = result.get("address") or {}
    return Place(
        display_name=result["display_name"],
        city=address.get("city") or address.get("town") or address.get("village"),
        state=address.get("state"),
        country=address.get("country"),
        postcode=address.get("postcode"),
        address=address,
    )


def haversine_route(start: Coordinate, end: Coordinate) -> RouteEstimate:
    """Straight-line estimate used when the routing service is unavailable."""
    dist = distance(start, end)
    return RouteEstimate(
        distance_km=dist,
        duration_minutes=dist * FALLBACK_MINUTES_PER_KM,
        geometry=None,
        source="haversine",
    )


def estimate_route(
    start: Coordinate,
    end: Coordinate,
    session: requests.Session | None = None,
) -> RouteEstimate:
    """Driving route between two points, falling back to Haversine on any provider failure."""
    url = (
        f"{OSRM_URL}/{start.longitude},{start.latitude};"
        f"{end.longitude},{end.latitude}"
    )
    params = {"overview": "full", "geometries": "geojson"}
    try:
        with _session(session) as s:
            resp = s.get(url, params=params, timeout=HTTP_TIMEOUT)
            resp.raise_for_status()
            routes = resp.json().get("routes") or []
    except (requests.exceptions.RequestException, ValueError) as e:
        logger.warning("Route request failed, using straight-line estimate: %s", e)
        return haversine_route(start, end)

    if not routes:
        logger.info("No route found, using straight-line estimate")
        return haversine_route(start, end)

    route = routes[0]
    try:
        return RouteEstimate(
            distance_km=float(route["distance"]) / 1000,
            duration_minutes=float(route["duration"]) / 60,
            geometry=route.get("geometry"),
            source="osrm",
        )
    except (KeyError, TypeError, ValueError) as e:
        logger.warning("Malformed route response, using straight-line estimate: %s", e)
        return haversine_route(start, end)
