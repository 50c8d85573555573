#!/usr/bin/env python3
"""
PharmaFind: Map Projection

Marker descriptors and map bounds for pharmacies (or search-result
groups) plus an optional user location.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Iterable

from .geo_math import Coordinate, MapBounds, bounding_box, display_distance

USER_MARKER_ID = "user-location"


@dataclass(frozen=True)
class Marker:
    id: str
    type: str  # "pharmacy" | "user"
    position: Coordinate
    title: str
    description: str | None = None
    distance_km: float | None = None
    is_verified: bool | None = None

    def to_dict(self, precision: int = 1) -> dict[str, Any]:
        return {
            "id": self.id,
            "type": self.type,
            "position": self.position.to_dict(),
            "title": self.title,
            "description": self.description,
            "distance_km": display_distance(self.distance_km, precision),
            "is_verified": self.is_verified,
        }


def _user_marker(location: Coordinate) -> Marker:
    return Marker(
        id=USER_MARKER_ID,
        type="user",
        position=location,
        title="Your Location",
        description="Current location",
    )


def markers(
    entities: Iterable[Any],
    user_location: Coordinate | None = None,
) -> list[Marker]:
    """
    One marker per entity that has a coordinate, with the user marker
    first when a user location is given.

    Entities are PharmacyInfo or PharmacyGroup objects; anything else with
    pharmacy_id, name, address and coordinate attributes works too.
    """
    result: list[Marker] = []
    if user_location is not None:
        result.append(_user_marker(user_location))

    for entity in entities:
        coord = getattr(entity, "coordinate", None)
        if coord is None:
            continue
        pharmacy = getattr(entity, "pharmacy", entity)
        result.append(
            Marker(
                id=str(entity.pharmacy_id),
                type="pharmacy",
                position=coord,
                title=entity.name,
                description=entity.address,
                distance_km=getattr(entity, "distance_km", None),
                is_verified=getattr(pharmacy, "is_verified", None),
            )
        )

    return result


def bounds(entities: Iterable[Any]) -> MapBounds | None:
    """Bounding box over every entity coordinate, or None when no entity has one."""
    coords = [
        coord
        for coord in (getattr(e, "coordinate", None) for e in entities)
        if coord is not None
    ]
    return bounding_box(coords)
