"""Pydantic request models for the PharmaFind API."""

from __future__ import annotations

from pydantic import BaseModel, Field


class DeliveryQuoteRequest(BaseModel):
    pharmacy_id: str = Field(
        ...,
        description="Pharmacy the order will be fulfilled from",
    )
    latitude: float = Field(
        ...,
        description="Delivery point latitude (WGS84 decimal degrees)",
    )
    longitude: float = Field(
        ...,
        description="Delivery point longitude (WGS84 decimal degrees)",
    )
    use_routing: bool = Field(
        False,
        description="If true, also ask the routing service for a driving estimate",
    )

