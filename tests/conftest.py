"""Shared fixtures for the search-core test suite."""

from __future__ import annotations

from decimal import Decimal

import pytest

from pharmafind import Coordinate, InventoryOffer, PharmacyInfo


# ---------------------------------------------------------------------------
# Sample pharmacies around Bamenda
# ---------------------------------------------------------------------------

CENTRAL = PharmacyInfo(
    pharmacy_id="p1",
    name="Bamenda Central Pharmacy",
    address="Commercial Avenue, Bamenda",
    rating=4.5,
    coordinate=Coordinate(5.9597, 10.1460),
    is_verified=True,
)
HEALTHPLUS = PharmacyInfo(
    pharmacy_id="p2",
    name="HealthPlus Bamenda",
    address="Station Road, Bamenda",
    rating=4.2,
    coordinate=Coordinate(5.9612, 10.1485),  # ~0.32 km from CENTRAL
)
BALI_ROAD = PharmacyInfo(
    pharmacy_id="p3",
    name="Bali Road Pharmacy",
    address="Bali Road, Mbengwi",
    rating=4.0,
    coordinate=Coordinate(6.0110, 10.0010),  # ~17 km from CENTRAL
)
NKWEN = PharmacyInfo(
    pharmacy_id="p4",
    name="Nkwen Family Pharmacy",
    address="Nkwen, Bamenda",
    rating=3.5,
    coordinate=None,
)


def offer(pharmacy: PharmacyInfo, drug_name: str, price, quantity: int, **kwargs) -> InventoryOffer:
    return InventoryOffer(
        pharmacy_id=pharmacy.pharmacy_id,
        drug_name=drug_name,
        price=Decimal(str(price)),
        quantity=quantity,
        **kwargs,
    )


class ListSupplier:
    """Candidate supplier over a fixed list of rows; records each call."""

    def __init__(self, rows):
        self.rows = list(rows)
        self.calls = []

    def __call__(self, term, filters):
        self.calls.append((term, filters))
        return list(self.rows)


@pytest.fixture()
def center():
    return CENTRAL.coordinate


@pytest.fixture()
def paracetamol_rows():
    """Paracetamol stocked at every sample pharmacy, plus unrelated drugs."""
    return [
        (CENTRAL, offer(CENTRAL, "Paracetamol 500mg", 200, 500, generic_name="Acetaminophen", category="Analgesic")),
        (CENTRAL, offer(CENTRAL, "Amoxicillin 250mg", 1500, 200, category="Antibiotic")),
        (HEALTHPLUS, offer(HEALTHPLUS, "Paracetamol 500mg", 150, 0, generic_name="Acetaminophen", category="Analgesic")),
        (HEALTHPLUS, offer(HEALTHPLUS, "Ciprofloxacin 500mg", 3000, 10, category="Antibiotic")),
        (BALI_ROAD, offer(BALI_ROAD, "Paracetamol 500mg", 160, 240, generic_name="Acetaminophen", category="Analgesic")),
        (NKWEN, offer(NKWEN, "Paracetamol 500mg", 210, 450, generic_name="Acetaminophen", category="Analgesic")),
    ]


@pytest.fixture()
def supplier(paracetamol_rows):
    return ListSupplier(paracetamol_rows)
