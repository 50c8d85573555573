#!/usr/bin/env python3
"""
PharmaFind: Ranking Policy

Two named orderings for search results, chosen by the call site:

    DRUG_SEARCH_ORDER
        best stock status first, then cheapest, then highest-rated
        pharmacy. Distance is deliberately not a key: a drug search
        favours availability and price over proximity.

    PHARMACY_PROXIMITY_ORDER
        nearest first (groups without a distance last), then most stock,
        then highest-rated pharmacy.

Both are applied with Python's stable sort, so equal keys keep their
insertion order and repeated runs give identical output.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from typing import Callable, Iterable

from .inventory import InventoryOffer, PharmacyGroup, StockStatus
from .policy import LOW_STOCK_THRESHOLD

OfferKey = Callable[[InventoryOffer, int], tuple]
GroupKey = Callable[[PharmacyGroup, int], tuple]

# Sorts empty groups after every group that has an offer
_NO_OFFER_RANK = len(StockStatus)


@dataclass(frozen=True)
class Ordering:
    """A named, total ordering over offers and the groups that hold them."""

    name: str
    offer_key: OfferKey
    group_key: GroupKey

    def apply(
        self,
        groups: Iterable[PharmacyGroup],
        low_stock_threshold: int = LOW_STOCK_THRESHOLD,
    ) -> list[PharmacyGroup]:
        """
        Return new groups with offers sorted inside each group and the
        groups themselves sorted. Inputs are left untouched.
        """
        ranked = [
            PharmacyGroup(
                pharmacy=g.pharmacy,
                offers=sorted(g.offers, key=lambda o: self.offer_key(o, low_stock_threshold)),
                distance_km=g.distance_km,
            )
            for g in groups
        ]
        ranked.sort(key=lambda g: self.group_key(g, low_stock_threshold))
        return ranked


# ---------------------------------------------------------------------------
# Drug search: stock status -> price -> rating
# ---------------------------------------------------------------------------


def _drug_offer_key(offer: InventoryOffer, threshold: int) -> tuple:
    return (int(offer.stock_status_for(threshold)), offer.price)


def _drug_group_key(group: PharmacyGroup, threshold: int) -> tuple:
    # offers are already sorted, so the first one is the group's best
    if not group.offers:
        return (_NO_OFFER_RANK, Decimal(0), -group.rating)
    best = group.offers[0]
    return (int(best.stock_status_for(threshold)), best.price, -group.rating)


DRUG_SEARCH_ORDER = Ordering(
    name="drug_search",
    offer_key=_drug_offer_key,
    group_key=_drug_group_key,
)


# ---------------------------------------------------------------------------
# Pharmacy list: distance -> stock quantity -> rating
# ---------------------------------------------------------------------------


def _proximity_offer_key(offer: InventoryOffer, threshold: int) -> tuple:
    return (-offer.quantity, offer.price)


def _proximity_group_key(group: PharmacyGroup, threshold: int) -> tuple:
    dist = group.distance_km
    return (
        dist is None,
        dist if dist is not None else 0.0,
        -group.total_quantity,
        -group.rating,
    )


PHARMACY_PROXIMITY_ORDER = Ordering(
    name="pharmacy_proximity",
    offer_key=_proximity_offer_key,
    group_key=_proximity_group_key,
)
