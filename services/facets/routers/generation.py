"""
Generation plan endpoint — GET /generation/plan

Runs the static generation planner (with its fallback) for an environment
preset and returns the plan summary plus the planned paths, highest priority
first. Planning is CPU-bound and runs off the event loop.
"""

from __future__ import annotations

from fastapi import APIRouter, Query, Request
from starlette.concurrency import run_in_threadpool

from services.facets.generation.fallbacks import plan_with_fallback
from services.facets.generation.planner import GenerationConfig, GenerationPlanner, isr_config
from services.facets.routers._envelope import ok

router = APIRouter(prefix="/generation", tags=["generation"])


@router.get("/plan")
async def generation_plan(
    request: Request,
    environment: str | None = Query(None, pattern=r"^(development|staging|production)$"),
    limit: int = Query(100, ge=0, le=5000, description="Max paths returned in the response"),
) -> dict:
    config = GenerationConfig.for_environment(environment)
    planner = GenerationPlanner(request.app.state.resolver, config)
    plan = await run_in_threadpool(plan_with_fallback, planner, request.app.state.registry)

    return ok(request, {
        "totalPages": plan.total_pages,
        "perTierCounts": dict(plan.per_tier_counts),
        "perCityCounts": dict(plan.per_city_counts),
        "estimatedDurationMs": plan.estimated_duration_ms,
        "useIncrementalRegeneration": plan.use_incremental_regeneration,
        "isPartial": plan.is_partial,
        "warnings": list(plan.warnings),
        "failedCities": list(plan.failed_cities),
        "isr": isr_config(config),
        "paths": [
            {"path": p.path, "priority": p.priority, "seoValue": p.seo_value.value}
            for p in plan.paths[:limit]
        ],
    })
