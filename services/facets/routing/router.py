"""
Faceted route handling.

Every request path under the catalog prefix ends in one of three outcomes:

  NOT_FOUND  no city in the path, or a city the registry does not know
  REDIRECT   invalid filters (-> fallback path) or a non-normalized path
             (-> normalized path, e.g. reordered or upper-cased tokens)
  OK         valid, normalized path with its canonical decision

Unknown cities are settled here so the canonical engine only ever sees
registry slugs.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum

from services.facets.canonical.resolver import CanonicalResolver, canonical_url, robots_directive
from services.facets.canonical.rules import CanonicalDecision, MarketData, Season
from services.facets.catalog.cities import City
from services.facets.routing.url_parser import parse_path
from services.facets.routing.validator import FilterValidationResult, validate_combination

logger = logging.getLogger(__name__)


class RouteStatus(str, Enum):
    OK = "ok"
    REDIRECT = "redirect"
    NOT_FOUND = "not_found"


@dataclass(frozen=True)
class RouteResult:
    status: RouteStatus
    path: str
    city: City | None = None
    validation: FilterValidationResult | None = None
    decision: CanonicalDecision | None = None
    redirect_to: str | None = None
    error: str | None = None

    @property
    def canonical_url(self) -> str | None:
        return canonical_url(self.decision) if self.decision else None

    @property
    def robots(self) -> str | None:
        return robots_directive(self.decision) if self.decision else None


class FacetedRouter:
    """Maps request paths to validated, canonicalized routes."""

    def __init__(self, resolver: CanonicalResolver) -> None:
        self.resolver = resolver

    @property
    def registry(self):
        return self.resolver.registry

    def route(
        self,
        path: str,
        market: MarketData | None = None,
        season: Season | None = None,
    ) -> RouteResult:
        parsed = parse_path(path)
        if parsed is None:
            return RouteResult(status=RouteStatus.NOT_FOUND, path=path, error="No city in path")

        if parsed.city_slug not in self.registry:
            logger.info("Unknown city in path %s", path)
            return RouteResult(
                status=RouteStatus.NOT_FOUND,
                path=path,
                error=f"Unknown city: {parsed.city_slug}",
            )
        city = self.registry.get(parsed.city_slug)

        validation = validate_combination(city.slug, parsed.filter_segment)
        if not validation.is_valid:
            return RouteResult(
                status=RouteStatus.REDIRECT,
                path=path,
                city=city,
                validation=validation,
                redirect_to=validation.fallback_path,
                error=f"Invalid filters: {', '.join(validation.rejected)}",
            )

        decision = self.resolver.resolve(
            city.slug, validation.normalized_filters, market=market, season=season
        )

        request_path = path.split("?", 1)[0].split("#", 1)[0]
        if not request_path.endswith("/"):
            request_path += "/"
        if request_path != validation.normalized_path:
            return RouteResult(
                status=RouteStatus.REDIRECT,
                path=path,
                city=city,
                validation=validation,
                decision=decision,
                redirect_to=validation.normalized_path,
            )

        return RouteResult(
            status=RouteStatus.OK,
            path=path,
            city=city,
            validation=validation,
            decision=decision,
        )
