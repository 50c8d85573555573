"""Tests for pharmacy endpoints (nearby, detail, delivery zones)."""

from __future__ import annotations

CENTRAL = {"lat": 5.9597, "lng": 10.1460}


def _ids(data):
    return [p["pharmacy_id"] for p in data["data"]]


class TestNearby:
    """GET /api/pharmacies/nearby"""

    def test_default_radius(self, client):
        resp = client.get("/api/pharmacies/nearby", params=CENTRAL)
        assert resp.status_code == 200
        data = resp.json()
        assert data["radius_km"] == 10.0
        assert data["count"] == 2
        assert _ids(data) == ["ph-001", "ph-002"]
        assert data["data"][0]["drugs"] == []
        assert data["drug"] is None

    def test_wider_radius_nearest_first(self, client):
        data = client.get("/api/pharmacies/nearby", params={**CENTRAL, "radius_km": 20}).json()
        assert _ids(data) == ["ph-001", "ph-002", "ph-003"]
        distances = [p["distance_km"] for p in data["data"]]
        assert distances == sorted(distances)

    def test_with_drug_ranks_by_distance(self, client):
        params = {**CENTRAL, "radius_km": 20, "drug": "paracetamol"}
        data = client.get("/api/pharmacies/nearby", params=params).json()
        assert data["drug"] == "paracetamol"
        assert _ids(data) == ["ph-001", "ph-002", "ph-003"]
        assert all(p["drugs"] for p in data["data"])

    def test_with_drug_in_stock_only(self, client):
        params = {**CENTRAL, "drug": "paracetamol", "in_stock_only": "true"}
        data = client.get("/api/pharmacies/nearby", params=params).json()
        assert _ids(data) == ["ph-001"]

    def test_map_has_user_marker(self, client):
        data = client.get("/api/pharmacies/nearby", params=CENTRAL).json()
        assert data["map"]["markers"][0]["id"] == "user-location"

    def test_lat_lng_required(self, client):
        assert client.get("/api/pharmacies/nearby", params={"lat": 5.9}).status_code == 422

    def test_out_of_range_coordinates(self, client):
        resp = client.get("/api/pharmacies/nearby", params={"lat": 95, "lng": 10.1})
        assert resp.status_code == 400

    def test_radius_above_max(self, client):
        resp = client.get("/api/pharmacies/nearby", params={**CENTRAL, "radius_km": 1000})
        assert resp.status_code == 400

    def test_blank_drug(self, client):
        resp = client.get("/api/pharmacies/nearby", params={**CENTRAL, "drug": " "})
        assert resp.status_code == 400


class TestPharmacyDetail:
    """GET /api/pharmacies/{id}"""

    def test_found(self, client):
        resp = client.get("/api/pharmacies/ph-001")
        assert resp.status_code == 200
        data = resp.json()["data"]
        assert data["name"] == "Bamenda Central Pharmacy"
        assert data["is_verified"] is True
        assert [d["drug_name"] for d in data["drugs"]] == ["Paracetamol 500mg", "Amoxicillin 250mg"]

    def test_low_stock_label(self, client):
        drugs = client.get("/api/pharmacies/ph-002").json()["data"]["drugs"]
        assert {d["drug_name"]: d["stock_status"] for d in drugs} == {
            "Paracetamol 500mg": "Out of Stock",
            "Ciprofloxacin 500mg": "Low Stock",
        }

    def test_unlocated_pharmacy(self, client):
        data = client.get("/api/pharmacies/ph-004").json()["data"]
        assert data["latitude"] is None

    def test_not_found(self, client):
        assert client.get("/api/pharmacies/ph-999").status_code == 404


class TestDeliveryZones:
    """GET /api/pharmacies/{id}/delivery-zones"""

    def test_zones(self, client):
        resp = client.get("/api/pharmacies/ph-001/delivery-zones")
        assert resp.status_code == 200
        zones = resp.json()["zones"]
        assert [z["name"] for z in zones] == ["Immediate", "Local", "Extended", "Far"]
        assert [z["radius_km"] for z in zones] == [2.0, 5.0, 10.0, None]
        assert [z["fee"] for z in zones] == ["500", "800", "1200", "1500"]
        assert zones[0]["center"] == {"latitude": 5.9597, "longitude": 10.146}

    def test_unlocated_pharmacy_conflict(self, client):
        assert client.get("/api/pharmacies/ph-004/delivery-zones").status_code == 409

    def test_not_found(self, client):
        assert client.get("/api/pharmacies/ph-999/delivery-zones").status_code == 404
