"""
Health endpoint — GET /health
"""

from fastapi import APIRouter, Request

from services.facets.config import settings
from services.facets.routers._envelope import ok

router = APIRouter(tags=["health"])


@router.get("/health")
async def health(request: Request) -> dict:
    registry = request.app.state.registry
    return ok(request, {
        "status": "healthy",
        "version": settings.app_version,
        "environment": settings.environment,
        "cities": len(registry),
    })
