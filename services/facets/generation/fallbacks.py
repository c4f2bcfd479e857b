"""
Fallback plan for static generation.

If the full planner raises (broken registry data, resolver bug), the build
still ships the pages that matter most: a hand-picked set of tier-1 cities,
each with its hub and three essential filter pages. The fallback does not
touch the canonical engine, so it cannot fail the same way.
"""

from __future__ import annotations

import logging
from typing import Any

from services.facets.canonical.rules import HUB_PRIORITY, SeoValue
from services.facets.catalog.cities import CityRegistry
from services.facets.generation.planner import (
    GenerationConfig,
    GenerationPlan,
    GenerationPlanner,
    PlannedPath,
    build_plan,
)
from services.facets.routing.url_parser import build_path, city_path

logger = logging.getLogger(__name__)

FALLBACK_CITIES: tuple[str, ...] = (
    "dallas", "houston", "austin", "fort-worth", "arlington", "plano",
)

ESSENTIAL_FILTERS: tuple[str, ...] = ("12-month", "fixed-rate", "green-energy")

# Essential filter pages rank just under the hubs
_ESSENTIAL_PRIORITY = 0.9

FALLBACK_WARNING = "Full planning failed; using fallback plan"


def fallback_plan(registry: CityRegistry, config: GenerationConfig | None = None) -> GenerationPlan:
    """Hub + essential filters for every fallback city present in the registry."""
    config = config or GenerationConfig.from_settings()
    paths: list[PlannedPath] = []
    for slug in FALLBACK_CITIES:
        if slug not in registry:
            continue
        paths.append(PlannedPath(city_path(slug), slug, (), HUB_PRIORITY, SeoValue.HIGH))
        for token in ESSENTIAL_FILTERS:
            paths.append(
                PlannedPath(build_path(slug, (token,)), slug, (token,), _ESSENTIAL_PRIORITY, SeoValue.HIGH)
            )
    return build_plan(paths, ms_per_page=config.ms_per_page, warnings=(FALLBACK_WARNING,))


def plan_with_fallback(
    planner: GenerationPlanner,
    registry: CityRegistry | None = None,
    **plan_kwargs: Any,
) -> GenerationPlan:
    """
    Run the planner; on any failure return the fallback plan instead.

    Per-city failures are already absorbed inside plan(); this guards the
    pipeline as a whole.
    """
    registry = registry if registry is not None else planner.resolver.registry
    try:
        return planner.plan(registry, **plan_kwargs)
    except Exception:
        logger.exception("Generation planning failed, falling back to %d essential cities", len(FALLBACK_CITIES))
        return fallback_plan(registry, planner.config)
