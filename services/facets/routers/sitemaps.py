"""
Sitemap endpoints.

  GET /sitemap.xml            sitemap index
  GET /sitemaps/{name}.xml    one category sitemap (or numbered part)
  GET /robots.txt

The bundle is built on first request from the configured generation plan
and kept on app.state. It is rebuilt once the emitter's build date moves
past the bundle's lastmod.
"""

from __future__ import annotations

import asyncio
import logging

from fastapi import APIRouter, HTTPException, Request
from starlette.concurrency import run_in_threadpool
from starlette.responses import PlainTextResponse, Response

from services.facets.canonical.resolver import CanonicalResolver
from services.facets.catalog.cities import CityRegistry
from services.facets.generation.fallbacks import plan_with_fallback
from services.facets.generation.planner import GenerationPlanner
from services.facets.sitemap.emitter import SitemapBundle, SitemapEmitter

logger = logging.getLogger(__name__)

router = APIRouter(tags=["sitemaps"])

_XML = "application/xml"


def build_sitemap_bundle(
    registry: CityRegistry,
    resolver: CanonicalResolver,
    emitter: SitemapEmitter,
) -> SitemapBundle:
    """Plan pages, resolve each, and emit sitemaps from those decisions."""
    plan = plan_with_fallback(GenerationPlanner(resolver), registry)
    decisions = [resolver.resolve(p.city_slug, p.filters) for p in plan.paths]
    return emitter.emit_sitemaps(registry, decisions)


def _is_current(bundle: SitemapBundle | None, emitter: SitemapEmitter) -> bool:
    return bundle is not None and bundle.last_modified == emitter.build_date()


async def _bundle(request: Request) -> SitemapBundle:
    state = request.app.state
    bundle = getattr(state, "sitemap_bundle", None)
    if _is_current(bundle, state.sitemap_emitter):
        return bundle
    lock: asyncio.Lock = state.sitemap_lock
    async with lock:
        bundle = getattr(state, "sitemap_bundle", None)
        if not _is_current(bundle, state.sitemap_emitter):
            bundle = await run_in_threadpool(
                build_sitemap_bundle, state.registry, state.resolver, state.sitemap_emitter
            )
            state.sitemap_bundle = bundle
    return bundle


@router.get("/sitemap.xml")
async def sitemap_index(request: Request) -> Response:
    bundle = await _bundle(request)
    return Response(content=bundle.index_xml, media_type=_XML)


@router.get("/sitemaps/{name}.xml")
async def sitemap_part(request: Request, name: str) -> Response:
    bundle = await _bundle(request)
    xml = bundle.sitemaps.get(name)
    if xml is None:
        raise HTTPException(status_code=404)
    return Response(content=xml, media_type=_XML)


@router.get("/robots.txt")
async def robots_txt(request: Request) -> PlainTextResponse:
    bundle = await _bundle(request)
    return PlainTextResponse(request.app.state.sitemap_emitter.robots_txt(bundle.names))
