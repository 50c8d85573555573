#!/usr/bin/env python3
"""
PharmaFind: Search Policy Configuration

Named policy constants for search and ranking, with optional overrides
from a YAML file (config/search_policy.yaml).

Dependencies:
    pip install pyyaml
"""

from __future__ import annotations

from dataclasses import dataclass, fields
from pathlib import Path
from typing import Any

import yaml

from .errors import InvalidInput


# ---------------------------------------------------------------------------
# Defaults (overridden by search_policy.yaml at runtime)
# ---------------------------------------------------------------------------

DEFAULT_RADIUS_KM = 10.0
MAX_RADIUS_KM = 100.0

# Quantity below which an offer is reported as low stock.
# TODO: confirm the 20-unit cutoff with partner pharmacies
LOW_STOCK_THRESHOLD = 20

# Days before expiry at which an offer is flagged as expiring soon
EXPIRING_SOON_DAYS = 30

DISPLAY_PRECISION = 1

SUGGESTION_LIMIT = 10
SUGGESTION_MIN_LENGTH = 2
FUZZY_SCORE_CUTOFF = 70.0


@dataclass
class SearchPolicy:
    """Loaded search policy from search_policy.yaml."""

    default_radius_km: float = DEFAULT_RADIUS_KM
    max_radius_km: float = MAX_RADIUS_KM
    low_stock_threshold: int = LOW_STOCK_THRESHOLD
    expiring_soon_days: int = EXPIRING_SOON_DAYS
    display_precision: int = DISPLAY_PRECISION
    suggestion_limit: int = SUGGESTION_LIMIT
    suggestion_min_length: int = SUGGESTION_MIN_LENGTH
    fuzzy_score_cutoff: float = FUZZY_SCORE_CUTOFF

    def __post_init__(self) -> None:
        if self.default_radius_km < 0 or self.max_radius_km < 0:
            raise InvalidInput("Radius settings must be >= 0", field="radius_km")
        if self.default_radius_km > self.max_radius_km:
            raise InvalidInput(
                "default_radius_km cannot exceed max_radius_km",
                field="default_radius_km",
            )
        if self.low_stock_threshold < 1:
            raise InvalidInput("low_stock_threshold must be >= 1", field="low_stock_threshold")
        if self.expiring_soon_days < 0:
            raise InvalidInput("expiring_soon_days must be >= 0", field="expiring_soon_days")

    @classmethod
    def from_mapping(cls, raw: dict[str, Any] | None) -> "SearchPolicy":
        """Build a policy from a plain dict, rejecting unknown keys."""
        raw = raw or {}
        known = {f.name for f in fields(cls)}
        unknown = sorted(set(raw) - known)
        if unknown:
            raise InvalidInput(
                f"Unknown policy keys: {', '.join(unknown)}",
                field=unknown[0],
            )
        return cls(**raw)

    @classmethod
    def from_yaml(cls, path: str | Path) -> "SearchPolicy":
        """Load configuration from a YAML file."""
        with open(path, "r") as f:
            raw = yaml.safe_load(f)

        if raw is not None and not isinstance(raw, dict):
            raise InvalidInput(f"Policy file {path} must contain a mapping")

        return cls.from_mapping(raw)
