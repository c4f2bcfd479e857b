"""
Canonical resolution engine.

resolve(city, filters) runs the rule chain in rules.py and turns its outcome
into a CanonicalDecision:

  - self-canonical outcome -> canonical path is the requested path
  - reducing outcome       -> the target filter set is resolved again
                              (season kept, market data dropped since it
                              describes only the requested page) until a
                              self-canonical page is reached

The canonical path is therefore a fixpoint: resolving it again returns
itself. The firing rule keeps ownership of should_index and priority.
"""

from __future__ import annotations

import logging
from typing import Iterable

from services.facets.canonical.cache import CanonicalCache, NullCanonicalCache, make_key
from services.facets.canonical.rules import (
    CanonicalDecision,
    MarketData,
    RuleContext,
    Season,
    change_frequency_for_depth,
    evaluate_rules,
)
from services.facets.catalog.cities import City, CityRegistry
from services.facets.catalog.filters import sort_filters
from services.facets.routing.url_parser import absolute_url, build_path, city_path

logger = logging.getLogger(__name__)

INDEX_FOLLOW = "index,follow"
NOINDEX_FOLLOW = "noindex,follow"


class CanonicalResolver:
    """
    Deterministic canonical decisions for (city, filters).

    Usage:
        resolver = CanonicalResolver(texas_registry(), cache=BoundedCanonicalCache())
        decision = resolver.resolve("dallas", ["fixed-rate"])
        decision.canonical_path   # "/texas/dallas/fixed-rate/"

    The cache is optional and never changes results. Safe to share across
    threads as long as the cache is.
    """

    def __init__(self, registry: CityRegistry, cache: CanonicalCache | None = None) -> None:
        self.registry = registry
        self.cache: CanonicalCache = cache if cache is not None else NullCanonicalCache()

    def resolve(
        self,
        city_slug: str,
        filters: Iterable[str] = (),
        market: MarketData | None = None,
        season: Season | None = None,
    ) -> CanonicalDecision:
        """
        Resolve the canonical target for a city and filter set.

        Raises:
            UnknownCityError: city_slug is not in the registry.
            InvalidFilterError: a token is not a known filter.
        """
        city = self.registry.get(city_slug)
        normalized = sort_filters(filters)
        key = make_key(city_path(city.slug), normalized, market, season)

        try:
            cached = self.cache.get(key)
        except Exception:
            logger.warning("Canonical cache read failed for %s, recomputing", key[0], exc_info=True)
            cached = None
        if cached is not None:
            return cached

        decision = self._decide(city, normalized, market, season)

        try:
            self.cache.put(key, decision)
        except Exception:
            logger.warning("Canonical cache write failed for %s", key[0], exc_info=True)
        return decision

    def _decide(
        self,
        city: City,
        filters: tuple[str, ...],
        market: MarketData | None,
        season: Season | None,
    ) -> CanonicalDecision:
        outcome = evaluate_rules(RuleContext(city=city, filters=filters, market=market, season=season))
        source_path = build_path(city.slug, filters)

        if outcome.target_filters is None:
            canonical_filters = filters
        else:
            target = self._decide(city, sort_filters(outcome.target_filters), None, season)
            canonical_filters = target.canonical_filters

        return CanonicalDecision(
            source_path=source_path,
            canonical_path=build_path(city.slug, canonical_filters),
            canonical_filters=canonical_filters,
            reason=outcome.reason,
            priority=round(outcome.priority, 2),
            should_index=outcome.should_index,
            change_frequency=change_frequency_for_depth(len(canonical_filters)),
        )


# ---------------------------------------------------------------------------
# Rendering helpers
# ---------------------------------------------------------------------------

def robots_directive(decision: CanonicalDecision) -> str:
    """<meta name="robots"> value for a decision."""
    return INDEX_FOLLOW if decision.should_index else NOINDEX_FOLLOW


def canonical_url(decision: CanonicalDecision, base_url: str | None = None) -> str:
    """Absolute <link rel="canonical"> href."""
    return absolute_url(decision.canonical_path, base_url)
