"""
Canonical endpoint — GET /canonical?path=/texas/dallas/12-month+fixed-rate/

Returns what the page-rendering layer needs for one request path: the
canonical link, the robots meta value, and where to redirect when the path
is not in normalized form or carries unknown filters.
"""

from __future__ import annotations

from fastapi import APIRouter, Query, Request

from services.facets.canonical.rules import MarketData, Season, season_for_month
from services.facets.routers._envelope import error, ok
from services.facets.routing.router import RouteResult, RouteStatus

router = APIRouter(tags=["canonical"])


def _serialize(result: RouteResult) -> dict:
    data: dict = {
        "status": result.status.value,
        "path": result.path,
        "redirectTo": result.redirect_to,
        "error": result.error,
    }
    if result.validation is not None:
        v = result.validation
        data["validation"] = {
            "isValid": v.is_valid,
            "normalizedFilters": list(v.normalized_filters),
            "rejected": list(v.rejected),
            "suggestions": list(v.suggestions),
            "conflicts": [
                {"category": c.category.value, "filters": list(c.filters), "kept": c.kept}
                for c in v.conflicts
            ],
            "fallbackPath": v.fallback_path,
        }
    if result.decision is not None:
        d = result.decision
        data.update({
            "canonicalPath": d.canonical_path,
            "canonicalUrl": result.canonical_url,
            "robots": result.robots,
            "shouldIndex": d.should_index,
            "priority": d.priority,
            "reason": d.reason.value,
            "changeFrequency": d.change_frequency.value,
            "isSelfCanonical": d.is_self_canonical,
        })
    return data


@router.get("/canonical")
async def resolve_canonical(
    request: Request,
    path: str = Query(..., min_length=1, max_length=500, description="Request path under the catalog prefix"),
    season: Season | None = Query(None, description="Season for rate-type overrides"),
    month: int | None = Query(None, ge=1, le=12, description="Derive season from a calendar month"),
    search_volume: int | None = Query(None, ge=0, alias="searchVolume"),
    competition: float | None = Query(None, ge=0.0, le=1.0),
) -> dict:
    if season is None and month is not None:
        season = season_for_month(month)

    market = None
    if search_volume is not None:
        market = MarketData(search_volume=search_volume, competition=competition or 0.0)

    result = request.app.state.router.route(path, market=market, season=season)
    if result.status == RouteStatus.NOT_FOUND:
        return error(request, 404, "NOT_FOUND", result.error or "Resource not found.")
    return ok(request, _serialize(result))
