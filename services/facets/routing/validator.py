"""
Filter combination validator.

Turns a raw filter segment ("12-month+green-energy") into a normalized,
deduplicated FilterSet in canonical ranking order, and reports:

  - rejected tokens (malformed or unknown) with nearest-match suggestions;
    any rejected token makes the combination invalid
  - conflicts (two tokens from one conflict-bearing category); conflicts are
    reported but do NOT invalidate, the canonical resolver settles them

Pure functions, no shared state. Safe to call from any thread.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Sequence

from services.facets.catalog.filters import (
    FILTER_DEFINITIONS,
    FILTER_RANKING,
    FilterCategory,
    find_conflicts,
    is_known_filter,
    sort_filters,
)
from services.facets.routing.url_parser import (
    build_path,
    city_path,
    parse_path,
    split_segment,
)

_TOKEN_PATTERN = re.compile(r"^[a-z0-9]+(?:-[a-z0-9]+)*$")

_MAX_SUGGESTIONS_PER_TOKEN = 3

# Substring containment only counts for tokens at least this long
_MIN_CONTAINMENT_LENGTH = 3


@dataclass(frozen=True)
class FilterConflict:
    """Two or more tokens from one conflict-bearing category."""
    category: FilterCategory
    filters: tuple[str, ...]  # ranking order

    @property
    def kept(self) -> str:
        """Top-ranked member, the one rule 2 keeps. A seasonal rate swap may replace it later."""
        return self.filters[0]


@dataclass(frozen=True)
class FilterValidationResult:
    is_valid: bool
    city_slug: str
    normalized_filters: tuple[str, ...]
    fallback_path: str
    conflicts: tuple[FilterConflict, ...] = ()
    suggestions: tuple[str, ...] = ()
    rejected: tuple[str, ...] = ()

    @property
    def has_conflicts(self) -> bool:
        return bool(self.conflicts)

    @property
    def normalized_path(self) -> str:
        return build_path(self.city_slug, self.normalized_filters)


# ---------------------------------------------------------------------------
# Nearest-match suggestions
# ---------------------------------------------------------------------------

def levenshtein_distance(a: str, b: str) -> int:
    """Classic DP Levenshtein distance."""
    if not a:
        return len(b)
    if not b:
        return len(a)
    prev = list(range(len(b) + 1))
    for i in range(1, len(a) + 1):
        curr = [i] + [0] * len(b)
        for j in range(1, len(b) + 1):
            cost = 0 if a[i - 1] == b[j - 1] else 1
            curr[j] = min(curr[j - 1] + 1, prev[j] + 1, prev[j - 1] + cost)
        prev = curr
    return prev[len(b)]


def suggest_filters(token: str, limit: int = _MAX_SUGGESTIONS_PER_TOKEN) -> list[str]:
    """
    Known tokens closest to an unknown one.

    A known token qualifies when its edit distance is within the threshold
    (scales with token length) or when one token contains the other.
    Results are ordered by edit distance, then canonical ranking.
    """
    threshold = max(2, len(token) // 4)
    scored: list[tuple[int, int, str]] = []
    for rank, known in enumerate(FILTER_RANKING):
        distance = levenshtein_distance(token, known)
        contained = len(token) >= _MIN_CONTAINMENT_LENGTH and (token in known or known in token)
        if distance <= threshold or contained:
            scored.append((distance, rank, known))
    scored.sort()
    return [known for _, _, known in scored[:limit]]


# ---------------------------------------------------------------------------
# Validation
# ---------------------------------------------------------------------------

def normalize_filters(tokens: Sequence[str]) -> tuple[str, ...]:
    """Known tokens, deduplicated, in canonical order. Unknown tokens are dropped."""
    return sort_filters(t for t in tokens if is_known_filter(t))


def validate_combination(city_slug: str, segment: str | Sequence[str]) -> FilterValidationResult:
    """
    Validate a raw filter segment (or a list of tokens) for a city.

    The city slug is not checked here: unknown cities are rejected by the
    routing layer before this is called.
    """
    if isinstance(segment, str):
        tokens = split_segment(segment)
    else:
        tokens = [t.strip().lower() for t in segment if t and t.strip()]

    rejected: list[str] = []
    accepted: list[str] = []
    for token in dict.fromkeys(tokens):
        if _TOKEN_PATTERN.match(token) and token in FILTER_DEFINITIONS:
            accepted.append(token)
        else:
            rejected.append(token)

    normalized = sort_filters(accepted)
    # find_conflicts yields categories in ranking order
    conflicts = tuple(
        FilterConflict(category=category, filters=members)
        for category, members in find_conflicts(normalized).items()
    )

    suggestions: list[str] = []
    for token in rejected:
        for candidate in suggest_filters(token):
            if candidate not in suggestions:
                suggestions.append(candidate)

    is_valid = not rejected
    return FilterValidationResult(
        is_valid=is_valid,
        city_slug=city_slug,
        normalized_filters=normalized,
        fallback_path=build_path(city_slug, normalized) if is_valid else city_path(city_slug),
        conflicts=conflicts,
        suggestions=tuple(suggestions),
        rejected=tuple(rejected),
    )


# ---------------------------------------------------------------------------
# Path helpers for facet navigation
# ---------------------------------------------------------------------------

def add_filter(path: str, token: str) -> str:
    """Path with one more filter, normalized. Unparseable paths come back unchanged."""
    parsed = parse_path(path)
    if parsed is None:
        return path
    current = split_segment(parsed.filter_segment)
    return build_path(parsed.city_slug, normalize_filters([*current, token.lower()]))


def remove_filter(path: str, token: str) -> str:
    """Path without a filter, normalized. Unparseable paths come back unchanged."""
    parsed = parse_path(path)
    if parsed is None:
        return path
    remaining = [t for t in split_segment(parsed.filter_segment) if t != token.lower()]
    return build_path(parsed.city_slug, normalize_filters(remaining))


_POPULAR_BY_TIER: dict[int, list[tuple[str, ...]]] = {
    1: [
        ("12-month",), ("24-month",), ("fixed-rate",), ("green-energy",), ("prepaid",),
        ("12-month", "fixed-rate"), ("12-month", "green-energy"),
        ("fixed-rate", "green-energy"), ("24-month", "fixed-rate"),
    ],
    2: [
        ("12-month",), ("24-month",), ("fixed-rate",), ("green-energy",),
        ("12-month", "fixed-rate"),
    ],
    3: [("12-month",), ("fixed-rate",), ("green-energy",)],
}


def popular_combinations(tier: int) -> list[tuple[str, ...]]:
    """Hand-picked combinations surfaced in navigation for a city tier."""
    return [sort_filters(combo) for combo in _POPULAR_BY_TIER.get(tier, _POPULAR_BY_TIER[3])]
