"""Shared fixtures for the API test suite.

All tests run in JSON fallback mode (no database required).
We seed the helpers dataset directly and patch db.is_available() -> False.
"""

from __future__ import annotations

from datetime import datetime, timezone
from unittest.mock import patch

import pytest
from starlette.testclient import TestClient

# ---------------------------------------------------------------------------
# Sample pharmacy records (mirrors the data/*.json shape)
# ---------------------------------------------------------------------------

SAMPLE_PHARMACIES: list[dict] = [
    {
        "pharmacy_id": "ph-001",
        "name": "Bamenda Central Pharmacy",
        "address": "Commercial Avenue",
        "city": "Bamenda",
        "phone": "+237650000001",
        "rating": 4.5,
        "latitude": 5.9597,
        "longitude": 10.1460,
        "is_verified": True,
        "inventory": [
            {
                "drug_id": "d-001",
                "drug_name": "Paracetamol 500mg",
                "generic_name": "Acetaminophen",
                "category": "Analgesic",
                "price": 200,
                "quantity": 500,
                "expiry_date": "2027-06-30",
            },
            {
                "drug_id": "d-002",
                "drug_name": "Amoxicillin 250mg",
                "generic_name": "Amoxicillin",
                "category": "Antibiotic",
                "price": 1500,
                "quantity": 200,
                "expiry_date": "2027-03-31",
            },
        ],
    },
    {
        "pharmacy_id": "ph-002",
        "name": "HealthPlus Bamenda",
        "address": "Station Road",
        "city": "Bamenda",
        "phone": "+237650000002",
        "rating": 4.2,
        "latitude": 5.9612,
        "longitude": 10.1485,
        "is_verified": True,
        "inventory": [
            {
                "drug_id": "d-003",
                "drug_name": "Paracetamol 500mg",
                "generic_name": "Acetaminophen",
                "category": "Analgesic",
                "price": 150,
                "quantity": 0,
                "expiry_date": "2027-01-31",
            },
            {
                "drug_id": "d-004",
                "drug_name": "Ciprofloxacin 500mg",
                "generic_name": "Ciprofloxacin",
                "category": "Antibiotic",
                "price": 3000,
                "quantity": 10,
                "expiry_date": "2027-02-28",
            },
        ],
    },
    {
        "pharmacy_id": "ph-003",
        "name": "Bali Road Pharmacy",
        "address": "Bali Road",
        "city": "Mbengwi",
        "phone": None,
        "rating": 4.0,
        "latitude": 6.0110,
        "longitude": 10.0010,
        "is_verified": False,
        "inventory": [
            {
                "drug_id": "d-005",
                "drug_name": "Paracetamol 500mg",
                "generic_name": "Acetaminophen",
                "category": "Analgesic",
                "price": 160,
                "quantity": 240,
                "expiry_date": "2027-08-31",
            },
        ],
    },
    {
        "pharmacy_id": "ph-004",
        "name": "Nkwen Family Pharmacy",
        "address": "Nkwen",
        "city": "Bamenda",
        "phone": None,
        "rating": 3.5,
        "latitude": None,
        "longitude": None,
        "is_verified": False,
        "inventory": [
            {
                "drug_id": "d-006",
                "drug_name": "Paracetamol 500mg",
                "generic_name": "Acetaminophen",
                "category": "Analgesic",
                "price": 210,
                "quantity": 450,
                "expiry_date": "2027-05-31",
            },
        ],
    },
]


def _seed(helpers):
    pharmacies = [helpers.record_to_pharmacy(r) for r in SAMPLE_PHARMACIES]
    offers = [
        helpers.record_to_offer(r["pharmacy_id"], item)
        for r in SAMPLE_PHARMACIES
        for item in r["inventory"]
    ]
    helpers.set_dataset(pharmacies, offers)


# ---------------------------------------------------------------------------
# App fixture: seeds JSON fallback, patches DB away
# ---------------------------------------------------------------------------


@pytest.fixture()
def app():
    """FastAPI app running in JSON fallback mode (no DB)."""
    with (
        patch("pharmafind_api.db.is_available", return_value=False),
        patch("pharmafind_api.db.init_pool", return_value=False),
        patch("pharmafind_api.db.close_pool"),
    ):
        from pharmafind import SearchPolicy
        from pharmafind_api import helpers
        from pharmafind_api.app import app as _app

        _seed(helpers)
        helpers._POLICY = SearchPolicy()

        # Set server_started_at on app.state (normally done in startup event)
        _app.state.server_started_at = datetime(2026, 10, 1, 0, 0, 0, tzinfo=timezone.utc)

        yield _app

        # Cleanup
        helpers.set_dataset([], [])


@pytest.fixture()
def client(app):
    return TestClient(app, raise_server_exceptions=False)
