"""Pharmacy endpoints (nearby, detail, delivery zones)."""

from __future__ import annotations

import logging
from typing import Any

from fastapi import APIRouter, HTTPException, Query

from pharmafind import (
    PHARMACY_PROXIMITY_ORDER,
    Coordinate,
    InvalidInput,
    SearchFilters,
    delivery_zones,
    nearby_pharmacies,
    search,
)
from pharmafind.aggregator import resolve_radius

from ..helpers import (
    bad_request,
    candidate_supplier,
    find_pharmacy,
    get_policy,
    list_pharmacies,
    map_payload,
    serialize_groups,
)

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/api/pharmacies/nearby")
async def pharmacies_nearby(
    lat: float = Query(..., description="Latitude"),
    lng: float = Query(..., description="Longitude"),
    radius_km: float | None = Query(None, description="Search radius in km (default from policy)"),
    drug: str | None = Query(None, description="Only pharmacies stocking this drug"),
    in_stock_only: bool = Query(False, description="With drug: ignore out-of-stock offers"),
) -> dict[str, Any]:
    """
    Pharmacies around a point, nearest first. With ``drug``, each pharmacy
    carries its matching offers and ties on distance go to the larger stock.
    """
    policy = get_policy()
    try:
        center = Coordinate(latitude=lat, longitude=lng)
        filters = SearchFilters(in_stock_only=in_stock_only)
        radius = resolve_radius(radius_km, filters, policy)
        if drug is not None:
            groups = search(
                drug,
                candidate_supplier(center, radius),
                center=center,
                radius_km=radius,
                filters=filters,
                ordering=PHARMACY_PROXIMITY_ORDER,
                policy=policy,
            )
        else:
            groups = nearby_pharmacies(center, list_pharmacies(), radius, policy=policy)
    except InvalidInput as e:
        raise bad_request(e)
    except HTTPException:
        raise
    except Exception as e:
        logger.exception("Nearby query failed")
        raise HTTPException(status_code=500, detail=str(e))

    return {
        "center": center.to_dict(),
        "radius_km": radius,
        "drug": drug.strip() if drug else None,
        "count": len(groups),
        "data": serialize_groups(groups, policy),
        "map": map_payload(groups, center, policy),
    }


@router.get("/api/pharmacies/{pharmacy_id}")
async def get_pharmacy(pharmacy_id: str) -> dict[str, Any]:
    """A single pharmacy with its full inventory."""
    found = find_pharmacy(pharmacy_id)
    if found is None:
        raise HTTPException(status_code=404, detail="Pharmacy not found")

    policy = get_policy()
    pharmacy, offers = found
    return {
        "data": {
            **pharmacy.to_dict(),
            "drugs": [
                o.to_dict(
                    policy.low_stock_threshold,
                    expiring_soon_days=policy.expiring_soon_days,
                )
                for o in offers
            ],
        }
    }


@router.get("/api/pharmacies/{pharmacy_id}/delivery-zones")
async def get_delivery_zones(pharmacy_id: str) -> dict[str, Any]:
    """Concentric delivery rings (fee and ETA per ring) around a pharmacy."""
    found = find_pharmacy(pharmacy_id)
    if found is None:
        raise HTTPException(status_code=404, detail="Pharmacy not found")

    pharmacy, _ = found
    if pharmacy.coordinate is None:
        raise HTTPException(status_code=409, detail="Pharmacy has no coordinates")

    return {
        "pharmacy_id": pharmacy.pharmacy_id,
        "zones": [z.to_dict() for z in delivery_zones(pharmacy.coordinate)],
    }
