#!/usr/bin/env python3
"""
PharmaFind: Inventory Value Objects

Pharmacies, the drug offers they stock, and the per-pharmacy groups that
make up a search result. All objects are built per request from rows
returned by the candidate supplier and discarded afterwards.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass, field
from datetime import date, timedelta
from decimal import Decimal, InvalidOperation
from typing import Any

from .errors import InvalidInput
from .geo_math import Coordinate, display_distance
from .policy import EXPIRING_SOON_DAYS, LOW_STOCK_THRESHOLD


class StockStatus(enum.IntEnum):
    """Stock classification. The integer value is the ranking position."""

    IN_STOCK = 0
    LOW_STOCK = 1
    OUT_OF_STOCK = 2

    @property
    def label(self) -> str:
        return _STOCK_LABELS[self]


_STOCK_LABELS = {
    StockStatus.IN_STOCK: "In Stock",
    StockStatus.LOW_STOCK: "Low Stock",
    StockStatus.OUT_OF_STOCK: "Out of Stock",
}


def stock_status(quantity: int, low_stock_threshold: int = LOW_STOCK_THRESHOLD) -> StockStatus:
    """Classify a quantity as out of stock, low stock or in stock."""
    if quantity <= 0:
        return StockStatus.OUT_OF_STOCK
    if quantity < low_stock_threshold:
        return StockStatus.LOW_STOCK
    return StockStatus.IN_STOCK


def to_decimal(value: Any, field_name: str = "price") -> Decimal:
    """Coerce a numeric value to Decimal, rejecting junk and negatives."""
    if isinstance(value, bool):
        raise InvalidInput(f"{field_name} must be a number", field=field_name)
    try:
        amount = value if isinstance(value, Decimal) else Decimal(str(value))
    except (InvalidOperation, ValueError, TypeError):
        raise InvalidInput(f"{field_name} must be a number", field=field_name)
    if not amount.is_finite() or amount < 0:
        raise InvalidInput(f"{field_name} must be a finite number >= 0", field=field_name)
    return amount


# ---------------------------------------------------------------------------
# Pharmacy
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class PharmacyInfo:
    """Pharmacy metadata attached once per search-result group."""

    pharmacy_id: str
    name: str
    address: str | None = None
    phone: str | None = None
    rating: float = 0.0
    coordinate: Coordinate | None = None
    city: str | None = None
    is_verified: bool = False

    def to_dict(self) -> dict[str, Any]:
        return {
            "pharmacy_id": self.pharmacy_id,
            "name": self.name,
            "address": self.address,
            "city": self.city,
            "phone": self.phone,
            "rating": self.rating,
            "latitude": self.coordinate.latitude if self.coordinate else None,
            "longitude": self.coordinate.longitude if self.coordinate else None,
            "is_verified": self.is_verified,
        }


# ---------------------------------------------------------------------------
# Inventory offer
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class InventoryOffer:
    """One drug as stocked by one pharmacy."""

    pharmacy_id: str
    drug_name: str
    price: Decimal
    quantity: int
    generic_name: str | None = None
    category: str | None = None
    expiry_date: date | None = None
    drug_id: str | None = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "price", to_decimal(self.price))
        if isinstance(self.quantity, bool) or not isinstance(self.quantity, int):
            raise InvalidInput("quantity must be an integer", field="quantity")
        if self.quantity < 0:
            raise InvalidInput("quantity must be >= 0", field="quantity")

    @property
    def stock_status(self) -> StockStatus:
        return stock_status(self.quantity)

    def stock_status_for(self, low_stock_threshold: int) -> StockStatus:
        return stock_status(self.quantity, low_stock_threshold)

    @property
    def in_stock(self) -> bool:
        return self.quantity > 0

    def is_expiring_soon(self, today: date | None = None, days: int = EXPIRING_SOON_DAYS) -> bool:
        """True when the expiry date falls within [today, today + days]."""
        if self.expiry_date is None:
            return False
        today = today or date.today()
        return today <= self.expiry_date <= today + timedelta(days=days)

    def matches(self, term: str) -> bool:
        """Case-insensitive substring match on drug name, generic name or category."""
        needle = term.strip().casefold()
        return any(
            needle in value.casefold()
            for value in (self.drug_name, self.generic_name, self.category)
            if value
        )

    def to_dict(
        self,
        low_stock_threshold: int = LOW_STOCK_THRESHOLD,
        today: date | None = None,
        expiring_soon_days: int = EXPIRING_SOON_DAYS,
    ) -> dict[str, Any]:
        status = self.stock_status_for(low_stock_threshold)
        return {
            "drug_id": self.drug_id,
            "drug_name": self.drug_name,
            "generic_name": self.generic_name,
            "category": self.category,
            "price": str(self.price),
            "quantity": self.quantity,
            "stock_status": status.label,
            "expiry_date": self.expiry_date.isoformat() if self.expiry_date else None,
            "expiring_soon": self.is_expiring_soon(today, expiring_soon_days),
        }


# ---------------------------------------------------------------------------
# Search-result group
# ---------------------------------------------------------------------------


@dataclass
class PharmacyGroup:
    """
    One pharmacy with the offers that matched a query.

    distance_km is unrounded (None when the search had no center); it is
    only rounded on serialisation.
    """

    pharmacy: PharmacyInfo
    offers: list[InventoryOffer] = field(default_factory=list)
    distance_km: float | None = None

    @property
    def pharmacy_id(self) -> str:
        return self.pharmacy.pharmacy_id

    @property
    def name(self) -> str:
        return self.pharmacy.name

    @property
    def address(self) -> str | None:
        return self.pharmacy.address

    @property
    def coordinate(self) -> Coordinate | None:
        return self.pharmacy.coordinate

    @property
    def rating(self) -> float:
        return self.pharmacy.rating or 0.0

    @property
    def total_quantity(self) -> int:
        return sum(o.quantity for o in self.offers)

    def to_dict(
        self,
        precision: int = 1,
        low_stock_threshold: int = LOW_STOCK_THRESHOLD,
        today: date | None = None,
        expiring_soon_days: int = EXPIRING_SOON_DAYS,
    ) -> dict[str, Any]:
        return {
            **self.pharmacy.to_dict(),
            "distance_km": display_distance(self.distance_km, precision),
            "drugs": [
                o.to_dict(low_stock_threshold, today, expiring_soon_days)
                for o in self.offers
            ],
        }
