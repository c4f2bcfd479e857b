"""
Tests for services/facets/generation/fallbacks.py
"""

from __future__ import annotations

import logging

from services.facets.catalog.cities import City, CityRegistry
from services.facets.generation.fallbacks import (
    ESSENTIAL_FILTERS,
    FALLBACK_CITIES,
    FALLBACK_WARNING,
    fallback_plan,
    plan_with_fallback,
)
from services.facets.generation.planner import GenerationPlanner


class ExplodingPlanner(GenerationPlanner):
    def plan(self, *args, **kwargs):
        raise RuntimeError("planner crashed")


class TestFallbackPlan:

    def test_hub_and_essentials_per_city(self, registry):
        plan = fallback_plan(registry)
        paths = {p.path for p in plan.paths}
        assert plan.total_pages == len(FALLBACK_CITIES) * (1 + len(ESSENTIAL_FILTERS))
        assert "/texas/dallas/" in paths
        assert "/texas/plano/green-energy/" in paths
        assert plan.warnings == (FALLBACK_WARNING,)
        assert plan.is_partial is False

    def test_cities_missing_from_registry_skipped(self, mini_registry):
        assert fallback_plan(mini_registry).total_pages == 0

    def test_partial_registry(self):
        registry = CityRegistry([City("austin", "Austin", 1, 1.0, 961_855, "aep-central")])
        plan = fallback_plan(registry)
        assert dict(plan.per_city_counts) == {"austin": 4}

    def test_hubs_rank_above_essentials(self, registry):
        plan = fallback_plan(registry)
        hubs = [p for p in plan.paths if not p.filters]
        essentials = [p for p in plan.paths if p.filters]
        assert min(p.priority for p in hubs) > max(p.priority for p in essentials)


class TestPlanWithFallback:

    def test_success_returns_real_plan(self, resolver, registry):
        plan = plan_with_fallback(GenerationPlanner(resolver), registry, tier_caps={1: 1, 2: 1, 3: 1})
        assert FALLBACK_WARNING not in plan.warnings
        assert len(plan.per_city_counts) == len(registry)

    def test_failure_returns_fallback(self, resolver, registry, caplog):
        with caplog.at_level(logging.ERROR):
            plan = plan_with_fallback(ExplodingPlanner(resolver), registry)
        assert plan.warnings == (FALLBACK_WARNING,)
        assert set(plan.per_city_counts) == set(FALLBACK_CITIES)
        assert "Generation planning failed" in caplog.text

    def test_registry_defaults_to_resolver_registry(self, resolver):
        plan = plan_with_fallback(ExplodingPlanner(resolver))
        assert plan.total_pages == len(FALLBACK_CITIES) * (1 + len(ESSENTIAL_FILTERS))
