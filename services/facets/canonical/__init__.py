"""
Canonical URL decisions for faceted pages.

Usage:
    from services.facets.canonical import CanonicalResolver, BoundedCanonicalCache
"""

from __future__ import annotations

from services.facets.canonical.cache import (
    BoundedCanonicalCache,
    CanonicalCache,
    NullCanonicalCache,
    RedisCanonicalCache,
)
from services.facets.canonical.resolver import CanonicalResolver, canonical_url, robots_directive
from services.facets.canonical.rules import (
    CanonicalDecision,
    CanonicalReason,
    ChangeFrequency,
    MarketData,
    Season,
    season_for_month,
)

__all__ = [
    "BoundedCanonicalCache",
    "CanonicalCache",
    "CanonicalDecision",
    "CanonicalReason",
    "CanonicalResolver",
    "ChangeFrequency",
    "MarketData",
    "NullCanonicalCache",
    "RedisCanonicalCache",
    "Season",
    "canonical_url",
    "robots_directive",
    "season_for_month",
]
