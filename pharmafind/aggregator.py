#!/usr/bin/env python3
"""
PharmaFind: Drug Availability Aggregator

Turns raw (pharmacy, offer) rows from a candidate supplier into ranked
per-pharmacy groups:

    1. reject blank search terms
    2. keep offers whose drug name, generic name or category contains the
       term (case-insensitive) and that pass the filters
    3. when a center is given, drop pharmacies outside the radius or
       without coordinates
    4. group the surviving offers by pharmacy_id
    5. rank with the ordering chosen by the caller

The supplier owns storage; this module never builds a query.
"""

from __future__ import annotations

from dataclasses import dataclass, fields
from decimal import Decimal
from typing import Any, Callable, Iterable, Mapping

from .errors import InvalidInput, InvalidQuery
from .geo_math import Coordinate
from .inventory import InventoryOffer, PharmacyGroup, PharmacyInfo, to_decimal
from .policy import SearchPolicy
from .proximity_filter import filter_within_radius, validate_radius
from .ranking import DRUG_SEARCH_ORDER, PHARMACY_PROXIMITY_ORDER, Ordering

CandidateRow = tuple[PharmacyInfo, InventoryOffer]
CandidateSupplier = Callable[[str, "SearchFilters"], Iterable[CandidateRow]]


# ---------------------------------------------------------------------------
# Filters
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class SearchFilters:
    """The closed set of filters a search accepts."""

    category: str | None = None
    max_price: Decimal | None = None
    in_stock_only: bool = False
    radius_km: float | None = None

    def __post_init__(self) -> None:
        category = self.category.strip() if self.category else None
        object.__setattr__(self, "category", category or None)
        if self.max_price is not None:
            object.__setattr__(self, "max_price", to_decimal(self.max_price, "max_price"))
        if self.radius_km is not None:
            object.__setattr__(self, "radius_km", validate_radius(self.radius_km))
        object.__setattr__(self, "in_stock_only", bool(self.in_stock_only))

    @classmethod
    def from_mapping(cls, raw: Mapping[str, Any] | None) -> "SearchFilters":
        """Build filters from a dict, rejecting keys outside the closed set."""
        raw = dict(raw or {})
        known = {f.name for f in fields(cls)}
        unknown = sorted(set(raw) - known)
        if unknown:
            raise InvalidQuery(
                f"Unsupported filter(s): {', '.join(unknown)}",
                field=unknown[0],
            )
        return cls(**raw)

    def admits(self, offer: InventoryOffer) -> bool:
        if self.category and (offer.category or "").casefold() != self.category.casefold():
            return False
        if self.max_price is not None and offer.price > self.max_price:
            return False
        if self.in_stock_only and not offer.in_stock:
            return False
        return True


def validate_term(term: str | None) -> str:
    """Return the stripped term, raising InvalidQuery when it is blank."""
    if term is None or not isinstance(term, str) or not term.strip():
        raise InvalidQuery("Search term must not be empty", field="term")
    return term.strip()


def resolve_radius(radius_km: float | None, filters: SearchFilters, policy: SearchPolicy) -> float:
    """Explicit radius, then the filter's radius, then the policy default."""
    if radius_km is not None:
        radius = validate_radius(radius_km)
    elif filters.radius_km is not None:
        radius = filters.radius_km
    else:
        radius = policy.default_radius_km

    if radius > policy.max_radius_km:
        raise InvalidInput(
            f"radius_km must be <= {policy.max_radius_km}",
            field="radius_km",
        )
    return radius


# ---------------------------------------------------------------------------
# Search
# ---------------------------------------------------------------------------


def search(
    term: str,
    supplier: CandidateSupplier,
    center: Coordinate | None = None,
    radius_km: float | None = None,
    filters: SearchFilters | None = None,
    *,
    ordering: Ordering = DRUG_SEARCH_ORDER,
    policy: SearchPolicy | None = None,
) -> list[PharmacyGroup]:
    """
    Search drug availability across pharmacies.

    Parameters
    ----------
    term : str
        Matched as a substring against drug name, generic name and category.
    supplier : callable
        ``supplier(term, filters)`` returning (PharmacyInfo, InventoryOffer)
        rows. It may return a superset; matching is re-applied here.
    center : Coordinate, optional
        Search origin. Without it no distance is computed and every
        group's distance_km is None.
    radius_km : float, optional
        Overrides filters.radius_km and the policy default.
    ordering : Ordering
        DRUG_SEARCH_ORDER unless the call site wants proximity ranking.

    Returns an empty list when nothing matches; that is not an error.
    """
    term = validate_term(term)
    policy = policy or SearchPolicy()
    filters = filters or SearchFilters()
    if radius_km is not None:
        validate_radius(radius_km)
    radius = resolve_radius(radius_km, filters, policy) if center is not None else None

    pharmacies: dict[str, PharmacyInfo] = {}
    matched: list[InventoryOffer] = []
    for pharmacy, offer in supplier(term, filters):
        if offer.pharmacy_id != pharmacy.pharmacy_id:
            raise InvalidInput(
                f"Offer {offer.drug_name!r} belongs to {offer.pharmacy_id}, "
                f"not {pharmacy.pharmacy_id}",
                field="pharmacy_id",
            )
        if not offer.matches(term) or not filters.admits(offer):
            continue
        # metadata comes from the first row seen for each pharmacy
        pharmacies.setdefault(pharmacy.pharmacy_id, pharmacy)
        matched.append(offer)

    if center is not None:
        nearby = filter_within_radius(center, radius, pharmacies.values())
        distances: dict[str, float | None] = {p.pharmacy_id: d for p, d in nearby}
    else:
        distances = {pid: None for pid in pharmacies}

    groups: dict[str, PharmacyGroup] = {}
    for offer in matched:
        pid = offer.pharmacy_id
        if pid not in distances:
            continue
        group = groups.get(pid)
        if group is None:
            group = groups[pid] = PharmacyGroup(
                pharmacy=pharmacies[pid],
                distance_km=distances[pid],
            )
        group.offers.append(offer)

    return ordering.apply(groups.values(), policy.low_stock_threshold)


def nearby_pharmacies(
    center: Coordinate,
    pharmacies: Iterable[PharmacyInfo],
    radius_km: float | None = None,
    *,
    ordering: Ordering = PHARMACY_PROXIMITY_ORDER,
    policy: SearchPolicy | None = None,
) -> list[PharmacyGroup]:
    """
    Pharmacies within radius of center, as offer-less groups ranked by
    proximity. Duplicate pharmacy ids keep their first occurrence.
    """
    policy = policy or SearchPolicy()
    radius = resolve_radius(radius_km, SearchFilters(), policy)

    unique: dict[str, PharmacyInfo] = {}
    for pharmacy in pharmacies:
        unique.setdefault(pharmacy.pharmacy_id, pharmacy)

    groups = [
        PharmacyGroup(pharmacy=p, distance_km=d)
        for p, d in filter_within_radius(center, radius, unique.values())
    ]
    return ordering.apply(groups, policy.low_stock_threshold)
