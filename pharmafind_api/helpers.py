"""Candidate suppliers, JSON fallback state, and serialisation helpers for the PharmaFind API."""

from __future__ import annotations

import json
import logging
import os
from datetime import date
from pathlib import Path
from typing import Any, Iterable

from fastapi import HTTPException

from pharmafind import (
    Coordinate,
    InvalidInput,
    InventoryOffer,
    PharmacyGroup,
    PharmacyInfo,
    SearchFilters,
    SearchPolicy,
    bounds,
    markers,
    radius_bounding_box,
)
from pharmafind.aggregator import CandidateRow, CandidateSupplier

from . import db
from .db import extras

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Path constants
# ---------------------------------------------------------------------------

ROOT = Path(__file__).resolve().parent.parent
DATA_DIR = Path(os.environ.get("PHARMAFIND_DATA_DIR", ROOT / "data"))
POLICY_PATH = Path(os.environ.get("PHARMAFIND_POLICY_PATH", ROOT / "config" / "search_policy.yaml"))

# ---------------------------------------------------------------------------
# JSON fallback state (populated by load_dataset)
# ---------------------------------------------------------------------------

_PHARMACIES: list[PharmacyInfo] = []
_OFFERS: list[InventoryOffer] = []
_INDEX: dict[str, PharmacyInfo] = {}

_POLICY: SearchPolicy = SearchPolicy()


def record_to_pharmacy(rec: dict[str, Any]) -> PharmacyInfo:
    """Build a PharmacyInfo from a JSON record. Missing or partial coordinates mean no coordinate."""
    lat = rec.get("latitude")
    lon = rec.get("longitude")
    coord = Coordinate.parse(lat, lon) if lat is not None and lon is not None else None
    return PharmacyInfo(
        pharmacy_id=str(rec["pharmacy_id"]),
        name=rec["name"],
        address=rec.get("address"),
        phone=rec.get("phone"),
        rating=float(rec.get("rating") or 0.0),
        coordinate=coord,
        city=rec.get("city"),
        is_verified=bool(rec.get("is_verified", False)),
    )


def record_to_offer(pharmacy_id: str, item: dict[str, Any]) -> InventoryOffer:
    expiry = item.get("expiry_date")
    return InventoryOffer(
        pharmacy_id=pharmacy_id,
        drug_id=item.get("drug_id"),
        drug_name=item["drug_name"],
        generic_name=item.get("generic_name"),
        category=item.get("category"),
        price=item["price"],
        quantity=int(item.get("quantity", 0)),
        expiry_date=date.fromisoformat(expiry) if expiry else None,
    )


def load_dataset(data_dir: Path | None = None) -> None:
    """
    Load pharmacies and their inventory from every *.json file in the data
    directory. Records that fail validation are skipped with a warning.
    """
    global _PHARMACIES, _OFFERS, _INDEX  # noqa: PLW0603

    data_dir = data_dir or DATA_DIR
    pharmacies: list[PharmacyInfo] = []
    offers: list[InventoryOffer] = []
    seen: set[str] = set()

    for fpath in sorted(data_dir.glob("*.json")):
        with open(fpath, "r", encoding="utf-8") as f:
            batch = json.load(f)
        if not isinstance(batch, list):
            logger.warning("Skipping %s: expected a list of pharmacies", fpath)
            continue

        loaded = 0
        for rec in batch:
            try:
                pharmacy = record_to_pharmacy(rec)
                items = [record_to_offer(pharmacy.pharmacy_id, i) for i in rec.get("inventory", [])]
            except (InvalidInput, KeyError, ValueError) as e:
                logger.warning("Skipping invalid record %s in %s: %s", rec.get("pharmacy_id"), fpath.name, e)
                continue
            # First file wins on duplicate ids
            if pharmacy.pharmacy_id in seen:
                continue
            seen.add(pharmacy.pharmacy_id)
            pharmacies.append(pharmacy)
            offers.extend(items)
            loaded += 1
        logger.info("Loaded %d pharmacies from %s", loaded, fpath)

    set_dataset(pharmacies, offers)
    logger.info("Total JSON dataset: %d pharmacies, %d offers", len(_PHARMACIES), len(_OFFERS))


def set_dataset(pharmacies: Iterable[PharmacyInfo], offers: Iterable[InventoryOffer]) -> None:
    """Replace the JSON fallback state."""
    global _PHARMACIES, _OFFERS, _INDEX  # noqa: PLW0603
    _PHARMACIES = list(pharmacies)
    _OFFERS = list(offers)
    _INDEX = {p.pharmacy_id: p for p in _PHARMACIES}


def get_pharmacies() -> list[PharmacyInfo]:
    return _PHARMACIES


def get_offers() -> list[InventoryOffer]:
    return _OFFERS


def get_index() -> dict[str, PharmacyInfo]:
    return _INDEX


# ---------------------------------------------------------------------------
# Policy
# ---------------------------------------------------------------------------


def load_policy(path: Path | None = None) -> SearchPolicy:
    """Load search_policy.yaml when present, else keep the built-in defaults."""
    global _POLICY  # noqa: PLW0603
    path = path or POLICY_PATH
    if path.exists():
        _POLICY = SearchPolicy.from_yaml(path)
        logger.info("Loaded search policy from %s", path)
    else:
        _POLICY = SearchPolicy()
        logger.info("No search policy at %s, using defaults", path)
    return _POLICY


def get_policy() -> SearchPolicy:
    return _POLICY


# ---------------------------------------------------------------------------
# Request parsing
# ---------------------------------------------------------------------------


def parse_center(lat: float | None, lng: float | None) -> Coordinate | None:
    """Both or neither of lat/lng; raises InvalidInput otherwise."""
    if lat is None and lng is None:
        return None
    if lat is None or lng is None:
        raise InvalidInput("lat and lng must be provided together", field="lat" if lat is None else "lng")
    return Coordinate(latitude=lat, longitude=lng)


def bad_request(exc: InvalidInput) -> HTTPException:
    return HTTPException(status_code=400, detail=str(exc))


# ---------------------------------------------------------------------------
# JSON fallback supplier
# ---------------------------------------------------------------------------


def json_candidate_supplier(term: str, filters: SearchFilters) -> list[CandidateRow]:
    """Every (pharmacy, offer) row from the JSON dataset whose offer matches term."""
    index = get_index()
    rows: list[CandidateRow] = []
    for offer in get_offers():
        pharmacy = index.get(offer.pharmacy_id)
        if pharmacy is None or not offer.matches(term):
            continue
        rows.append((pharmacy, offer))
    return rows


# ---------------------------------------------------------------------------
# Database supplier
# ---------------------------------------------------------------------------


def _ilike_pattern(term: str) -> str:
    escaped = term.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
    return f"%{escaped}%"


def db_row_to_pharmacy(row: dict) -> PharmacyInfo:
    """Convert a DB row (RealDictRow) to PharmacyInfo."""
    lat = row.get("gps_lat")
    lon = row.get("gps_long")
    coord = None
    if lat is not None and lon is not None:
        try:
            coord = Coordinate.parse(lat, lon)
        except InvalidInput:
            logger.warning("Pharmacy %s has invalid coordinates (%s, %s)", row.get("pharmacy_id"), lat, lon)
    return PharmacyInfo(
        pharmacy_id=str(row["pharmacy_id"]),
        name=row["pharmacy_name"],
        address=row.get("address"),
        phone=row.get("phone"),
        rating=float(row.get("rating") or 0.0),
        coordinate=coord,
        city=row.get("city"),
        is_verified=bool(row.get("is_verified")),
    )


def db_row_to_offer(row: dict) -> InventoryOffer:
    return InventoryOffer(
        pharmacy_id=str(row["pharmacy_id"]),
        drug_id=str(row["drug_id"]) if row.get("drug_id") is not None else None,
        drug_name=row["drug_name"],
        generic_name=row.get("generic_name"),
        category=row.get("category"),
        price=row["price"],
        quantity=int(row["stock"]),
        expiry_date=row.get("expiry_date"),
    )


_PHARMACY_COLUMNS = """
    p.id AS pharmacy_id, p.name AS pharmacy_name, p.address, p.city,
    p.phone, p.rating, p.gps_lat, p.gps_long, p.is_verified
"""


def db_candidate_rows(
    term: str,
    filters: SearchFilters,
    center: Coordinate | None = None,
    radius_km: float | None = None,
) -> list[CandidateRow]:
    """
    Query matching (pharmacy, drug) rows. When a center is given, a lat/lon
    box around it is used as a coarse WHERE pre-filter; exact distance is
    left to the search core.
    """
    pattern = _ilike_pattern(term)
    conditions = [
        "p.status = 'approved'",
        "(d.name ILIKE %s OR d.generic_name ILIKE %s OR d.category ILIKE %s)",
    ]
    params: list[Any] = [pattern, pattern, pattern]

    if filters.category:
        conditions.append("d.category ILIKE %s")
        params.append(filters.category)
    if filters.max_price is not None:
        conditions.append("d.price <= %s")
        params.append(filters.max_price)
    if filters.in_stock_only:
        conditions.append("d.stock > 0")
    if center is not None and radius_km is not None:
        min_lat, max_lat, min_lon, max_lon = radius_bounding_box(center, radius_km)
        conditions.append("p.gps_lat BETWEEN %s AND %s AND p.gps_long BETWEEN %s AND %s")
        params.extend([min_lat, max_lat, min_lon, max_lon])

    where = " AND ".join(conditions)
    with db.get_conn() as conn:
        with conn.cursor(cursor_factory=extras.RealDictCursor) as cur:
            cur.execute(
                f"""
                SELECT {_PHARMACY_COLUMNS},
                       d.id AS drug_id, d.name AS drug_name, d.generic_name,
                       d.category, d.price, d.stock, d.expiry_date
                FROM pharmacies p
                JOIN drugs d ON d.pharmacy_id = p.id
                WHERE {where}
                ORDER BY p.id, d.id
                """,
                params,
            )
            rows = cur.fetchall()

    return [(db_row_to_pharmacy(r), db_row_to_offer(r)) for r in rows]


def candidate_supplier(
    center: Coordinate | None = None,
    radius_km: float | None = None,
) -> CandidateSupplier:
    """
    Supplier for the search core: database when available, JSON dataset
    otherwise or when the database query fails.
    """

    def supplier(term: str, filters: SearchFilters) -> list[CandidateRow]:
        rows: list[CandidateRow] | None = None
        if db.is_available():
            try:
                rows = db_candidate_rows(term, filters, center, radius_km)
            except Exception as e:
                logger.warning("DB candidate query failed, will fall back to JSON: %s", e)
        if rows is None:
            rows = json_candidate_supplier(term, filters)
        if center is not None:
            _log_unlocated(rows)
        return rows

    return supplier


def _log_unlocated(rows: Iterable[CandidateRow]) -> None:
    """Geo-filtered searches silently drop pharmacies without coordinates; count them here."""
    unlocated = {p.pharmacy_id for p, _ in rows if p.coordinate is None}
    if unlocated:
        logger.debug(
            "%d candidate pharmacies have no coordinates and will be excluded: %s",
            len(unlocated),
            ", ".join(sorted(unlocated)),
        )


def list_pharmacies() -> list[PharmacyInfo]:
    """All approved pharmacies (database or JSON fallback)."""
    if db.is_available():
        try:
            with db.get_conn() as conn:
                with conn.cursor(cursor_factory=extras.RealDictCursor) as cur:
                    cur.execute(
                        f"SELECT {_PHARMACY_COLUMNS} FROM pharmacies p "
                        "WHERE p.status = 'approved' ORDER BY p.id"
                    )
                    rows = cur.fetchall()
            return [db_row_to_pharmacy(r) for r in rows]
        except Exception as e:
            logger.warning("DB pharmacy list failed, will fall back to JSON: %s", e)
    return list(get_pharmacies())


def find_pharmacy(pharmacy_id: str) -> tuple[PharmacyInfo, list[InventoryOffer]] | None:
    """One pharmacy and its full inventory, or None when unknown."""
    if db.is_available():
        try:
            with db.get_conn() as conn:
                with conn.cursor(cursor_factory=extras.RealDictCursor) as cur:
                    cur.execute(
                        f"SELECT {_PHARMACY_COLUMNS} FROM pharmacies p WHERE p.id::text = %s",
                        (pharmacy_id,),
                    )
                    row = cur.fetchone()
                    if not row:
                        return None
                    cur.execute(
                        """
                        SELECT d.pharmacy_id, d.id AS drug_id, d.name AS drug_name,
                               d.generic_name, d.category, d.price, d.stock, d.expiry_date
                        FROM drugs d
                        WHERE d.pharmacy_id::text = %s
                        ORDER BY d.name
                        """,
                        (pharmacy_id,),
                    )
                    drug_rows = cur.fetchall()
            return db_row_to_pharmacy(row), [db_row_to_offer(r) for r in drug_rows]
        except Exception as e:
            logger.warning("DB pharmacy lookup failed, will fall back to JSON: %s", e)

    pharmacy = get_index().get(pharmacy_id)
    if pharmacy is None:
        return None
    return pharmacy, [o for o in get_offers() if o.pharmacy_id == pharmacy_id]


def drug_names() -> list[str]:
    """Names of drugs currently in stock somewhere."""
    if db.is_available():
        try:
            with db.get_conn() as conn:
                with conn.cursor() as cur:
                    cur.execute(
                        """
                        SELECT DISTINCT d.name
                        FROM drugs d
                        JOIN pharmacies p ON d.pharmacy_id = p.id
                        WHERE p.status = 'approved' AND d.stock > 0
                        """
                    )
                    return [r[0] for r in cur.fetchall()]
        except Exception as e:
            logger.warning("DB drug name query failed, will fall back to JSON: %s", e)
    return [o.drug_name for o in get_offers() if o.in_stock]


# ---------------------------------------------------------------------------
# Serialisation
# ---------------------------------------------------------------------------


def serialize_groups(groups: Iterable[PharmacyGroup], policy: SearchPolicy) -> list[dict[str, Any]]:
    return [
        g.to_dict(
            precision=policy.display_precision,
            low_stock_threshold=policy.low_stock_threshold,
            expiring_soon_days=policy.expiring_soon_days,
        )
        for g in groups
    ]


def map_payload(
    groups: list[PharmacyGroup],
    user_location: Coordinate | None,
    policy: SearchPolicy,
) -> dict[str, Any]:
    """Bounds and markers for the map view. Bounds is None when nothing is located."""
    box = bounds(groups)
    return {
        "bounds": box.to_dict() if box else None,
        "markers": [m.to_dict(policy.display_precision) for m in markers(groups, user_location)],
    }
