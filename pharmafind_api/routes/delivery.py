"""Delivery quote and location lookup endpoints.

These handlers call external providers with blocking requests, so they
are plain functions and FastAPI runs them in its threadpool.
"""

from __future__ import annotations

import logging
from typing import Any

from fastapi import APIRouter, HTTPException, Query

from pharmafind import Coordinate, InvalidInput, estimate_delivery
from pharmafind.routing import estimate_route, geocode_address, reverse_geocode

from ..helpers import bad_request, find_pharmacy, get_policy
from ..models import DeliveryQuoteRequest

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("/api/delivery/quote")
def delivery_quote(req: DeliveryQuoteRequest) -> dict[str, Any]:
    """Delivery fee, ETA and zone from a pharmacy to a delivery point."""
    try:
        destination = Coordinate(latitude=req.latitude, longitude=req.longitude)
    except InvalidInput as e:
        raise bad_request(e)

    found = find_pharmacy(req.pharmacy_id)
    if found is None:
        raise HTTPException(status_code=404, detail="Pharmacy not found")
    pharmacy, _ = found
    if pharmacy.coordinate is None:
        raise HTTPException(status_code=409, detail="Pharmacy has no coordinates")

    quote = estimate_delivery(pharmacy.coordinate, destination)
    result: dict[str, Any] = {
        "pharmacy_id": pharmacy.pharmacy_id,
        "destination": destination.to_dict(),
        **quote.to_dict(get_policy().display_precision),
    }
    if req.use_routing:
        result["route"] = estimate_route(pharmacy.coordinate, destination).to_dict()
    return result


@router.get("/api/location/geocode")
def geocode(
    address: str = Query(..., max_length=500, description="Free-text address"),
) -> dict[str, Any]:
    """Resolve an address to coordinates via the geocoding provider."""
    try:
        coord = geocode_address(address)
    except InvalidInput as e:
        raise bad_request(e)

    if coord is None:
        raise HTTPException(status_code=404, detail="Address not found")
    return {"address": address, "location": coord.to_dict()}


@router.get("/api/location/reverse-geocode")
def reverse_geocode_location(
    lat: float = Query(..., description="Latitude"),
    lng: float = Query(..., description="Longitude"),
) -> dict[str, Any]:
    """Describe the place at a coordinate via the geocoding provider."""
    try:
        coord = Coordinate(latitude=lat, longitude=lng)
    except InvalidInput as e:
        raise bad_request(e)

    place = reverse_geocode(coord)
    if place is None:
        raise HTTPException(status_code=404, detail="Location not found")
    return {"location": coord.to_dict(), "place": place.to_dict()}
