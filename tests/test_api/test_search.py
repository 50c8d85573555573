"""Tests for drug search and suggestion endpoints."""

from __future__ import annotations

import pytest

CENTRAL = {"lat": 5.9597, "lng": 10.1460}


def _ids(data):
    return [p["pharmacy_id"] for p in data["pharmacies"]]


class TestSearchDrugs:
    """GET /api/search/drugs"""

    def test_without_location_ranks_by_stock_then_price(self, client):
        resp = client.get("/api/search/drugs", params={"drug": "paracetamol"})
        assert resp.status_code == 200
        data = resp.json()
        assert data["search_term"] == "paracetamol"
        assert data["location"] is None
        assert data["radius_km"] is None
        assert data["count"] == 4
        assert _ids(data) == ["ph-003", "ph-001", "ph-004", "ph-002"]
        assert all(p["distance_km"] is None for p in data["pharmacies"])

    def test_offer_payload(self, client):
        data = client.get("/api/search/drugs", params={"drug": "paracetamol"}).json()
        out_of_stock = data["pharmacies"][-1]["drugs"][0]
        assert out_of_stock["stock_status"] == "Out of Stock"
        assert out_of_stock["price"] == "150"
        assert out_of_stock["expiring_soon"] is False

    def test_case_insensitive_and_generic_name(self, client):
        resp = client.get("/api/search/drugs", params={"drug": "ACETAMINOPHEN"})
        assert resp.json()["count"] == 4

    def test_with_location_uses_default_radius(self, client):
        resp = client.get("/api/search/drugs", params={"drug": "paracetamol", **CENTRAL})
        assert resp.status_code == 200
        data = resp.json()
        assert data["radius_km"] == 10.0
        assert data["location"] == {"latitude": 5.9597, "longitude": 10.146}
        assert _ids(data) == ["ph-001", "ph-002"]
        assert data["pharmacies"][0]["distance_km"] == 0.0
        assert data["pharmacies"][1]["distance_km"] == 0.3

    def test_wider_radius_includes_far_pharmacy(self, client):
        params = {"drug": "paracetamol", "radius_km": 20, **CENTRAL}
        data = client.get("/api/search/drugs", params=params).json()
        assert _ids(data) == ["ph-003", "ph-001", "ph-002"]
        assert data["pharmacies"][0]["distance_km"] == pytest.approx(17.0, abs=1.0)

    def test_in_stock_only(self, client):
        params = {"drug": "paracetamol", "in_stock_only": "true", **CENTRAL}
        data = client.get("/api/search/drugs", params=params).json()
        assert _ids(data) == ["ph-001"]
        assert data["filters"]["in_stock_only"] is True

    def test_max_price(self, client):
        data = client.get("/api/search/drugs", params={"drug": "paracetamol", "max_price": 180}).json()
        assert _ids(data) == ["ph-003", "ph-002"]
        assert data["filters"]["max_price"] == "180.0"

    def test_category(self, client):
        data = client.get("/api/search/drugs", params={"drug": "500mg", "category": "antibiotic"}).json()
        assert _ids(data) == ["ph-002"]

    def test_no_match_is_empty(self, client):
        resp = client.get("/api/search/drugs", params={"drug": "insulin"})
        assert resp.status_code == 200
        data = resp.json()
        assert data["count"] == 0
        assert data["map"] == {"bounds": None, "markers": []}

    def test_map_payload_with_user_location(self, client):
        data = client.get("/api/search/drugs", params={"drug": "paracetamol", **CENTRAL}).json()
        markers = data["map"]["markers"]
        assert markers[0]["type"] == "user"
        assert [m["id"] for m in markers[1:]] == ["ph-001", "ph-002"]
        assert data["map"]["bounds"]["north"] == 5.9612

    def test_map_skips_unlocated_pharmacy(self, client):
        data = client.get("/api/search/drugs", params={"drug": "paracetamol"}).json()
        ids = [m["id"] for m in data["map"]["markers"]]
        assert "ph-004" not in ids
        assert len(ids) == 3

    @pytest.mark.parametrize(
        "params",
        [
            {},
            {"drug": ""},
            {"drug": "   "},
            {"drug": "paracetamol", "lat": 5.9597},
            {"drug": "paracetamol", "lat": 95, "lng": 10.1},
            {"drug": "paracetamol", "radius_km": -1, **CENTRAL},
            {"drug": "paracetamol", "radius_km": -5},
            {"drug": "paracetamol", "radius_km": 500, **CENTRAL},
            {"drug": "paracetamol", "max_price": -5},
        ],
    )
    def test_bad_requests(self, client, params):
        resp = client.get("/api/search/drugs", params=params)
        assert resp.status_code == 400


class TestSuggestions:
    """GET /api/search/suggestions"""

    def test_prefix(self, client):
        data = client.get("/api/search/suggestions", params={"q": "par"}).json()
        assert data == {"query": "par", "suggestions": ["Paracetamol 500mg"]}

    def test_only_in_stock_names(self, client):
        data = client.get("/api/search/suggestions", params={"q": "amox"}).json()
        assert data["suggestions"] == ["Amoxicillin 250mg"]

    def test_misspelling(self, client):
        data = client.get("/api/search/suggestions", params={"q": "paracetmol"}).json()
        assert "Paracetamol 500mg" in data["suggestions"]

    def test_too_short(self, client):
        assert client.get("/api/search/suggestions", params={"q": "p"}).json()["suggestions"] == []

    def test_missing_query(self, client):
        resp = client.get("/api/search/suggestions")
        assert resp.status_code == 200
        assert resp.json()["suggestions"] == []
