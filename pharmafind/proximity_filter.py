#!/usr/bin/env python3
"""
PharmaFind: Proximity Filter

Keeps the candidates that lie within a radius of a center point and
annotates each with its distance. Ordering is left to the ranking module.
"""

from __future__ import annotations

import math
from typing import Iterable, TypeVar

from .errors import InvalidInput
from .geo_math import DISTANCE_EPSILON_KM, Coordinate, distance

T = TypeVar("T")


def validate_radius(radius_km: float) -> float:
    """Reject negative, NaN or non-numeric radii."""
    if isinstance(radius_km, bool):
        raise InvalidInput("radius_km must be a number", field="radius_km")
    try:
        radius = float(radius_km)
    except (TypeError, ValueError):
        raise InvalidInput("radius_km must be a number", field="radius_km")
    if math.isnan(radius) or radius < 0:
        raise InvalidInput("radius_km must be >= 0", field="radius_km")
    return radius


def filter_within_radius(
    center: Coordinate,
    radius_km: float,
    candidates: Iterable[T],
) -> list[tuple[T, float]]:
    """
    Return (candidate, distance_km) for every candidate within radius_km of
    center, in input order.

    Candidates expose a ``coordinate`` attribute; those without one cannot
    be geo-filtered and are left out. The boundary is inclusive, and
    radius 0 keeps only candidates sitting on the center itself.
    """
    radius = validate_radius(radius_km)

    nearby: list[tuple[T, float]] = []
    for candidate in candidates:
        coord = getattr(candidate, "coordinate", None)
        if coord is None:
            continue
        dist = distance(center, coord)
        if dist <= radius + DISTANCE_EPSILON_KM:
            nearby.append((candidate, dist))

    return nearby
