"""Drug search endpoints (search, suggestions)."""

from __future__ import annotations

import logging
from typing import Any

from fastapi import APIRouter, HTTPException, Query

from pharmafind import InvalidInput, SearchFilters, search
from pharmafind.aggregator import resolve_radius
from pharmafind.proximity_filter import validate_radius
from pharmafind.suggestions import suggest_drug_names

from ..helpers import (
    bad_request,
    candidate_supplier,
    drug_names,
    get_policy,
    map_payload,
    parse_center,
    serialize_groups,
)

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/api/search/drugs")
async def search_drugs(
    drug: str | None = Query(None, description="Drug name, generic name or category (case-insensitive)"),
    lat: float | None = Query(None, description="Search center latitude"),
    lng: float | None = Query(None, description="Search center longitude"),
    radius_km: float | None = Query(None, description="Search radius in km (default from policy)"),
    category: str | None = Query(None, description="Restrict to one drug category"),
    max_price: float | None = Query(None, description="Drop offers priced above this"),
    in_stock_only: bool = Query(False, description="Drop offers with zero quantity"),
) -> dict[str, Any]:
    """
    Find pharmacies stocking a drug. Ranked by stock status, then price,
    then pharmacy rating; distance is reported but not ranked on.
    """
    policy = get_policy()
    try:
        center = parse_center(lat, lng)
        filters = SearchFilters(category=category, max_price=max_price, in_stock_only=in_stock_only)
        if radius_km is not None:
            validate_radius(radius_km)
        radius = resolve_radius(radius_km, filters, policy) if center is not None else None
        groups = search(
            drug,
            candidate_supplier(center, radius),
            center=center,
            radius_km=radius,
            filters=filters,
            policy=policy,
        )
    except InvalidInput as e:
        raise bad_request(e)
    except HTTPException:
        raise
    except Exception as e:
        logger.exception("Drug search failed")
        raise HTTPException(status_code=500, detail=str(e))

    return {
        "search_term": drug.strip(),
        "location": center.to_dict() if center else None,
        "radius_km": radius,
        "filters": {
            "category": filters.category,
            "max_price": str(filters.max_price) if filters.max_price is not None else None,
            "in_stock_only": filters.in_stock_only,
        },
        "count": len(groups),
        "pharmacies": serialize_groups(groups, policy),
        "map": map_payload(groups, center, policy),
    }


@router.get("/api/search/suggestions")
async def search_suggestions(
    q: str | None = Query(None, description="Partial drug name"),
) -> dict[str, Any]:
    """Autocomplete drug names; falls back to close spellings when nothing contains q."""
    policy = get_policy()
    suggestions = suggest_drug_names(
        q,
        drug_names(),
        limit=policy.suggestion_limit,
        min_length=policy.suggestion_min_length,
        score_cutoff=policy.fuzzy_score_cutoff,
    )
    return {"query": q, "suggestions": suggestions}
