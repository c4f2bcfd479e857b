"""
Static generation planner.

Decides which faceted pages the static build pre-renders.

Flow per city:
  1. Always include the city hub (never counted against the tier cap)
  2. Enumerate filter combinations of depth 1..max_depth from the universe
  3. Skip combinations with category conflicts
  4. Resolve each; keep self-canonical ones worth a page (SEO value high/medium)
  5. Order high > medium, then priority, then canonical filter order
  6. Keep up to the tier cap

Cities run in fixed-size batches. Within a batch, cities are enumerated on a
thread pool. Between batches the elapsed time is checked against the time
budget; once it is exceeded the planner stops and returns the pages planned
so far, flagged partial. A city that raises is logged and skipped.

Finally every path is stable-sorted by priority (descending) and truncated
to the global page cap.
"""

from __future__ import annotations

import itertools
import logging
import time
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, replace
from types import MappingProxyType
from typing import Callable, Iterable, Mapping

from services.facets.canonical.resolver import CanonicalResolver
from services.facets.canonical.rules import SeoValue, classify_seo_value
from services.facets.catalog.cities import City, CityRegistry
from services.facets.catalog.filters import (
    DEFAULT_FILTER_UNIVERSE,
    filter_rank,
    find_conflicts,
    sort_filters,
)
from services.facets.config import settings
from services.facets.routing.url_parser import absolute_url, city_path

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Configuration
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class GenerationConfig:
    tier_caps: Mapping[int, int]
    max_pages_per_build: int
    time_budget_s: float
    batch_size: int = 10
    max_workers: int = 10
    max_depth: int = 2
    enable_isr: bool = True
    isr_revalidate_seconds: int = 3600
    ms_per_page: int = 500

    def cap_for_tier(self, tier: int) -> int:
        """Unknown tiers get the smallest (tier 3) allowance."""
        return self.tier_caps.get(tier, self.tier_caps.get(3, 0))

    @classmethod
    def from_settings(cls) -> "GenerationConfig":
        return cls(
            tier_caps={
                1: settings.tier1_max_combinations,
                2: settings.tier2_max_combinations,
                3: settings.tier3_max_combinations,
            },
            max_pages_per_build=settings.max_pages_per_build,
            time_budget_s=settings.build_timeout_s,
            batch_size=settings.generation_batch_size,
            max_workers=settings.max_concurrent_generations,
            max_depth=settings.max_filter_depth,
            enable_isr=settings.enable_isr,
            isr_revalidate_seconds=settings.isr_revalidate_seconds,
            ms_per_page=settings.ms_per_page_estimate,
        )

    @classmethod
    def for_environment(cls, environment: str | None = None) -> "GenerationConfig":
        """
        Build presets on top of the configured values.

        production   more pages per city and per build, ISR on
        development  minimal pages, ISR off, 30s budget
        staging      configured values unchanged
        """
        base = cls.from_settings()
        environment = environment or settings.environment
        if environment == "production":
            return replace(
                base,
                tier_caps={1: 100, 2: 50, 3: 25},
                max_pages_per_build=2000,
                enable_isr=True,
                isr_revalidate_seconds=3600,
            )
        if environment == "development":
            return replace(
                base,
                tier_caps={1: 10, 2: 5, 3: 3},
                max_pages_per_build=50,
                enable_isr=False,
                time_budget_s=30.0,
            )
        return base


# ---------------------------------------------------------------------------
# Plan types
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class PlannedPath:
    path: str
    city_slug: str
    filters: tuple[str, ...]
    priority: float
    seo_value: SeoValue


@dataclass(frozen=True)
class GenerationPlan:
    total_pages: int
    per_tier_counts: Mapping[str, int]  # seo value -> pages
    per_city_counts: Mapping[str, int]
    estimated_duration_ms: int
    use_incremental_regeneration: bool
    paths: tuple[PlannedPath, ...]
    is_partial: bool = False
    warnings: tuple[str, ...] = ()
    failed_cities: tuple[str, ...] = ()


def build_plan(
    paths: Iterable[PlannedPath],
    *,
    ms_per_page: int,
    use_incremental_regeneration: bool = False,
    is_partial: bool = False,
    warnings: Iterable[str] = (),
    failed_cities: Iterable[str] = (),
) -> GenerationPlan:
    """Assemble a frozen plan and its counters from the final path list."""
    paths = tuple(paths)
    per_value = {value.value: 0 for value in SeoValue}
    per_city: dict[str, int] = {}
    for planned in paths:
        per_value[planned.seo_value.value] += 1
        per_city[planned.city_slug] = per_city.get(planned.city_slug, 0) + 1
    return GenerationPlan(
        total_pages=len(paths),
        per_tier_counts=MappingProxyType(per_value),
        per_city_counts=MappingProxyType(per_city),
        estimated_duration_ms=len(paths) * ms_per_page,
        use_incremental_regeneration=use_incremental_regeneration,
        paths=paths,
        is_partial=is_partial,
        warnings=tuple(warnings),
        failed_cities=tuple(failed_cities),
    )


# ---------------------------------------------------------------------------
# Planner
# ---------------------------------------------------------------------------

class GenerationPlanner:
    """
    Tiered, time-boxed page planner.

    The clock is injectable so time-budget behaviour is testable without
    sleeping.
    """

    def __init__(
        self,
        resolver: CanonicalResolver,
        config: GenerationConfig | None = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.resolver = resolver
        self.config = config or GenerationConfig.from_settings()
        self._clock = clock

    def plan(
        self,
        registry: CityRegistry | None = None,
        filter_universe: Iterable[str] | None = None,
        tier_caps: Mapping[int, int] | None = None,
        global_page_cap: int | None = None,
        time_budget_s: float | None = None,
    ) -> GenerationPlan:
        registry = registry if registry is not None else self.resolver.registry
        universe = tuple(filter_universe) if filter_universe is not None else DEFAULT_FILTER_UNIVERSE
        config = self.config
        if tier_caps is not None:
            config = replace(config, tier_caps=dict(tier_caps))
        page_cap = global_page_cap if global_page_cap is not None else config.max_pages_per_build
        budget = time_budget_s if time_budget_s is not None else config.time_budget_s

        resolver = self.resolver
        if registry is not resolver.registry:
            # Cache keys carry no registry identity, so a foreign registry gets its own resolver
            resolver = CanonicalResolver(registry)

        start = self._clock()
        cities = list(registry)
        batches = [
            cities[i:i + config.batch_size] for i in range(0, len(cities), config.batch_size)
        ]

        collected: list[PlannedPath] = []
        failed: list[str] = []
        warnings: list[str] = []
        is_partial = False

        with ThreadPoolExecutor(max_workers=config.max_workers) as pool:
            for index, batch in enumerate(batches):
                futures = [
                    (city, pool.submit(
                        self.plan_city, city, universe, config.cap_for_tier(city.tier), config.max_depth, resolver,
                    ))
                    for city in batch
                ]
                for city, future in futures:
                    try:
                        collected.extend(future.result())
                    except Exception as e:
                        logger.warning("Failed to plan pages for %s: %s", city.slug, e)
                        failed.append(city.slug)

                elapsed = self._clock() - start
                remaining = len(batches) - index - 1
                if elapsed > budget and remaining:
                    is_partial = True
                    message = (
                        f"Time budget of {budget:.1f}s exceeded after {elapsed:.1f}s; "
                        f"{remaining} batch(es) skipped"
                    )
                    logger.warning(message)
                    warnings.append(message)
                    break

        if failed:
            warnings.append(f"{len(failed)} city(ies) failed to plan: {', '.join(failed)}")

        untruncated = len(collected)
        # sorted() is stable, so equal priorities keep tier/city order
        ranked = sorted(collected, key=lambda p: -p.priority)
        if untruncated > page_cap:
            message = f"Page cap of {page_cap} reached; dropped {untruncated - page_cap} lower-priority pages"
            logger.warning(message)
            warnings.append(message)
            ranked = ranked[:page_cap]

        plan = build_plan(
            ranked,
            ms_per_page=config.ms_per_page,
            use_incremental_regeneration=untruncated > page_cap and config.enable_isr,
            is_partial=is_partial,
            warnings=warnings,
            failed_cities=failed,
        )
        logger.info(
            "Generation plan: %d pages (%d candidates) across %d cities in %.2fs, partial=%s",
            plan.total_pages,
            untruncated,
            len(plan.per_city_counts),
            self._clock() - start,
            plan.is_partial,
        )
        return plan

    def plan_city(
        self,
        city: City,
        universe: Iterable[str],
        cap: int,
        max_depth: int = 2,
        resolver: CanonicalResolver | None = None,
    ) -> list[PlannedPath]:
        """Hub plus up to `cap` best combinations for one city."""
        resolver = resolver or self.resolver
        hub = resolver.resolve(city.slug, ())
        pages = [
            PlannedPath(
                path=city_path(city.slug),
                city_slug=city.slug,
                filters=(),
                priority=hub.priority,
                seo_value=SeoValue.HIGH,
            )
        ]

        tokens = sort_filters(universe)
        candidates: list[PlannedPath] = []
        for depth in range(1, max_depth + 1):
            for combo in itertools.combinations(tokens, depth):
                if find_conflicts(combo):
                    continue
                decision = resolver.resolve(city.slug, combo)
                if not decision.is_self_canonical:
                    continue
                value = classify_seo_value(city.tier, combo)
                if value == SeoValue.LOW:
                    continue
                candidates.append(
                    PlannedPath(
                        path=decision.canonical_path,
                        city_slug=city.slug,
                        filters=combo,
                        priority=decision.priority,
                        seo_value=value,
                    )
                )

        candidates.sort(
            key=lambda p: (-p.seo_value.weight, -p.priority, tuple(filter_rank(f) for f in p.filters))
        )
        return pages + candidates[:cap]


# ---------------------------------------------------------------------------
# Build-tool helpers
# ---------------------------------------------------------------------------

def prebuild_urls(plan: GenerationPlan, base_url: str | None = None) -> list[str]:
    """Absolute URLs of every planned page, for cache warming."""
    return [absolute_url(p.path, base_url) for p in plan.paths]


def isr_config(config: GenerationConfig | None = None) -> dict:
    """Incremental regeneration settings for the static build; empty when disabled."""
    config = config or GenerationConfig.from_settings()
    if not config.enable_isr:
        return {}
    return {"revalidate": config.isr_revalidate_seconds, "fallback": "static"}
