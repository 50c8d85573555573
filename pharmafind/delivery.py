#!/usr/bin/env python3
"""
PharmaFind: Delivery Estimator

Delivery fee and ETA from distance, using one ordered table of tiers.
The concentric zones drawn on maps are materialised from the same table,
so fee lookups and zone rings always agree.

    distance <=   fee    eta
    2 km          500    15-30 minutes
    5 km          800    30-45 minutes
    10 km         1200   45-60 minutes
    beyond        1500   60-90 minutes
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from decimal import Decimal
from typing import Any

from .errors import InvalidInput
from .geo_math import Coordinate, display_distance, distance


@dataclass(frozen=True)
class DeliveryTier:
    name: str
    max_km: float  # inclusive upper bound; math.inf for the catch-all tier
    fee: Decimal
    eta: str


DELIVERY_TIERS: tuple[DeliveryTier, ...] = (
    DeliveryTier("Immediate", 2.0, Decimal("500"), "15-30 minutes"),
    DeliveryTier("Local", 5.0, Decimal("800"), "30-45 minutes"),
    DeliveryTier("Extended", 10.0, Decimal("1200"), "45-60 minutes"),
    DeliveryTier("Far", math.inf, Decimal("1500"), "60-90 minutes"),
)


@dataclass(frozen=True)
class DeliveryZone:
    """A tier drawn as a ring around a pharmacy. radius_km is None for the unbounded outer zone."""
    name: str
    radius_km: float | None
    fee: Decimal
    eta_range: str
    center: Coordinate

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "radius_km": self.radius_km,
            "fee": str(self.fee),
            "eta_range": self.eta_range,
            "center": self.center.to_dict(),
        }


@dataclass(frozen=True)
class DeliveryQuote:
    distance_km: float
    fee: Decimal
    eta: str
    zone: str

    def to_dict(self, precision: int = 1) -> dict[str, Any]:
        return {
            "distance_km": display_distance(self.distance_km, precision),
            "fee": str(self.fee),
            "eta": self.eta,
            "zone": self.zone,
        }


# ---------------------------------------------------------------------------
# Tier lookup
# ---------------------------------------------------------------------------


def tier_for(distance_km: float) -> DeliveryTier:
    """First tier whose upper bound is >= distance. Negative or NaN distances are rejected."""
    if isinstance(distance_km, bool):
        raise InvalidInput("distance_km must be a number", field="distance_km")
    try:
        dist = float(distance_km)
    except (TypeError, ValueError):
        raise InvalidInput("distance_km must be a number", field="distance_km")
    if math.isnan(dist) or dist < 0:
        raise InvalidInput("distance_km must be >= 0", field="distance_km")

    for tier in DELIVERY_TIERS:
        if dist <= tier.max_km:
            return tier
    # unreachable while the last tier is unbounded
    return DELIVERY_TIERS[-1]


def fee_for(distance_km: float) -> Decimal:
    return tier_for(distance_km).fee


def eta_for(distance_km: float) -> str:
    return tier_for(distance_km).eta


def zone_for(distance_km: float) -> str:
    return tier_for(distance_km).name


def estimate_delivery(origin: Coordinate, destination: Coordinate) -> DeliveryQuote:
    """Fee, ETA and zone for delivering from origin to destination."""
    dist = distance(origin, destination)
    tier = tier_for(dist)
    return DeliveryQuote(distance_km=dist, fee=tier.fee, eta=tier.eta, zone=tier.name)


def delivery_zones(center: Coordinate) -> list[DeliveryZone]:
    """The delivery tiers as concentric rings around center, innermost first."""
    return [
        DeliveryZone(
            name=tier.name,
            radius_km=tier.max_km if math.isfinite(tier.max_km) else None,
            fee=tier.fee,
            eta_range=tier.eta,
            center=center,
        )
        for tier in DELIVERY_TIERS
    ]
