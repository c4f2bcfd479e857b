"""
Faceted catalog engine — canonical decisions, generation plans, sitemaps.

Entrypoint: uvicorn services.facets.main:app --host 0.0.0.0 --port 8000
"""

import asyncio
import logging
import uuid
from contextlib import asynccontextmanager

import redis
import sentry_sdk
from fastapi import FastAPI, Request, Response
from fastapi.exceptions import RequestValidationError
from starlette.responses import JSONResponse

from services.facets.canonical.cache import BoundedCanonicalCache, RedisCanonicalCache
from services.facets.canonical.resolver import CanonicalResolver
from services.facets.catalog.cities import CityRegistry, UnknownCityError, load_registry
from services.facets.catalog.filters import InvalidFilterError
from services.facets.config import settings
from services.facets.routers import canonical, generation, health, sitemaps
from services.facets.routers._envelope import error
from services.facets.routing.router import FacetedRouter
from services.facets.sitemap.emitter import SitemapEmitter

logger = logging.getLogger(__name__)


def setup_sentry() -> None:
    """Initialise Sentry error reporting when a DSN is configured."""
    if not settings.sentry_dsn:
        return
    sentry_sdk.init(
        dsn=settings.sentry_dsn,
        traces_sample_rate=settings.sentry_traces_sample_rate,
        environment=settings.environment,
        release=f"{settings.app_name}@{settings.app_version}",
    )


def init_state(app: FastAPI, registry: CityRegistry | None = None, redis_client=None) -> None:
    """Build the engine objects shared by every request."""
    registry = registry if registry is not None else load_registry(settings.registry_path)
    cache = RedisCanonicalCache(redis_client) if redis_client is not None else BoundedCanonicalCache()
    resolver = CanonicalResolver(registry, cache=cache)

    app.state.settings = settings
    app.state.redis = redis_client
    app.state.registry = registry
    app.state.resolver = resolver
    app.state.router = FacetedRouter(resolver)
    app.state.sitemap_emitter = SitemapEmitter()
    app.state.sitemap_bundle = None
    app.state.sitemap_lock = asyncio.Lock()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup/shutdown lifecycle."""
    setup_sentry()

    # Shared decision cache across workers; in-process cache when absent
    redis_client = None
    if settings.redis_url:
        try:
            redis_client = redis.Redis.from_url(
                settings.redis_url,
                decode_responses=True,
                socket_connect_timeout=5,
            )
            redis_client.ping()
        except Exception as e:
            logger.warning("Redis unavailable, using in-process canonical cache: %s", e)
            redis_client = None

    init_state(app, redis_client=redis_client)
    logger.info("Loaded %d cities", len(app.state.registry))

    yield

    if redis_client is not None:
        redis_client.close()


app = FastAPI(
    title="Faceted Catalog Engine",
    version=settings.app_version,
    docs_url="/docs" if settings.environment == "development" else None,
    redoc_url=None,
    lifespan=lifespan,
)

app.include_router(health.router)
app.include_router(canonical.router)
app.include_router(generation.router)
app.include_router(sitemaps.router)


# Request ID injection
@app.middleware("http")
async def request_id_middleware(request: Request, call_next) -> Response:
    request_id = request.headers.get("x-request-id", str(uuid.uuid4()))
    request.state.request_id = request_id
    response = await call_next(request)
    response.headers["X-Request-ID"] = request_id
    return response


# -- Exception Handlers --

@app.exception_handler(404)
async def not_found_handler(request: Request, exc) -> JSONResponse:
    return error(request, 404, "NOT_FOUND", "Resource not found.")


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    return error(request, 422, "VALIDATION_ERROR", str(exc.errors()))


@app.exception_handler(UnknownCityError)
async def unknown_city_handler(request: Request, exc: UnknownCityError) -> JSONResponse:
    return error(request, 404, "CITY_NOT_FOUND", f"Unknown city: {exc.args[0] if exc.args else ''}")


@app.exception_handler(InvalidFilterError)
async def invalid_filter_handler(request: Request, exc: InvalidFilterError) -> JSONResponse:
    return error(request, 400, "INVALID_FILTER", str(exc))


@app.exception_handler(500)
async def internal_error_handler(request: Request, exc) -> JSONResponse:
    logger.exception("Unhandled error on %s", request.url.path)
    return error(request, 500, "INTERNAL_ERROR", "An unexpected error occurred.")
