"""PharmaFind: proximity search and ranking for drug availability."""

from .errors import InvalidInput, InvalidQuery, PharmaFindError
from .geo_math import (
    Coordinate,
    MapBounds,
    bounding_box,
    display_distance,
    distance,
    radius_bounding_box,
    validate_coordinate,
)
from .proximity_filter import filter_within_radius
from .inventory import (
    InventoryOffer,
    PharmacyGroup,
    PharmacyInfo,
    StockStatus,
    stock_status,
)
from .ranking import DRUG_SEARCH_ORDER, PHARMACY_PROXIMITY_ORDER, Ordering
from .aggregator import SearchFilters, nearby_pharmacies, search
from .delivery import (
    DELIVERY_TIERS,
    DeliveryQuote,
    DeliveryZone,
    delivery_zones,
    estimate_delivery,
    eta_for,
    fee_for,
)
from .map_projection import Marker, bounds, markers
from .policy import SearchPolicy

__all__ = [
    "InvalidInput",
    "InvalidQuery",
    "PharmaFindError",
    "Coordinate",
    "MapBounds",
    "bounding_box",
    "display_distance",
    "distance",
    "radius_bounding_box",
    "validate_coordinate",
    "filter_within_radius",
    "InventoryOffer",
    "PharmacyGroup",
    "PharmacyInfo",
    "StockStatus",
    "stock_status",
    "DRUG_SEARCH_ORDER",
    "PHARMACY_PROXIMITY_ORDER",
    "Ordering",
    "SearchFilters",
    "nearby_pharmacies",
    "search",
    "DELIVERY_TIERS",
    "DeliveryQuote",
    "DeliveryZone",
    "delivery_zones",
    "estimate_delivery",
    "eta_for",
    "fee_for",
    "Marker",
    "bounds",
    "markers",
    "SearchPolicy",
]
