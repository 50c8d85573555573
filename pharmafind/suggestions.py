#!/usr/bin/env python3
"""
PharmaFind: Drug Name Suggestions

Autocomplete for the search box. Substring matches come first; when none
exist, close spellings are offered as "did you mean" candidates using
rapidfuzz's weighted ratio.

Dependencies:
    pip install rapidfuzz
"""

from __future__ import annotations

from typing import Iterable

from rapidfuzz import fuzz, process
from rapidfuzz.utils import default_process

from .policy import FUZZY_SCORE_CUTOFF, SUGGESTION_LIMIT, SUGGESTION_MIN_LENGTH


def _distinct(names: Iterable[str | None]) -> list[str]:
    """Distinct non-empty names, deduplicated case-insensitively, first spelling wins."""
    seen: set[str] = set()
    unique: list[str] = []
    for name in names:
        if not name or not name.strip():
            continue
        name = name.strip()
        key = name.casefold()
        if key not in seen:
            seen.add(key)
            unique.append(name)
    return unique


def suggest_drug_names(
    query: str | None,
    names: Iterable[str | None],
    *,
    limit: int = SUGGESTION_LIMIT,
    min_length: int = SUGGESTION_MIN_LENGTH,
    score_cutoff: float = FUZZY_SCORE_CUTOFF,
) -> list[str]:
    """
    Suggest drug names for a partial query.

    Returns [] for queries shorter than min_length. Substring matches are
    returned alphabetically; fuzzy matches (only when there are no
    substring matches) are returned best score first.
    """
    query = (query or "").strip()
    if len(query) < min_length or limit <= 0:
        return []

    candidates = _distinct(names)
    needle = query.casefold()

    contains = sorted(
        (n for n in candidates if needle in n.casefold()),
        key=lambda n: (n.casefold(), n),
    )
    if contains:
        return contains[:limit]

    fuzzy = process.extract(
        query,
        candidates,
        scorer=fuzz.WRatio,
        processor=default_process,
        limit=limit,
        score_cutoff=score_cutoff,
    )
    return [choice for choice, _score, _index in fuzzy]
