"""
Shared test fixtures for the faceted catalog engine.

Provides:
- the bundled Texas registry and a small hand-built registry
- resolvers with and without a cache
- async FastAPI test client with engine state built in-process
"""

import os

import pytest
from httpx import ASGITransport, AsyncClient

# Ensure test env vars before any app imports
os.environ.setdefault("ENVIRONMENT", "development")
os.environ.setdefault("REDIS_URL", "")

from services.facets.canonical.cache import BoundedCanonicalCache, NullCanonicalCache  # noqa: E402
from services.facets.canonical.resolver import CanonicalResolver  # noqa: E402
from services.facets.catalog.cities import City, CityRegistry, texas_registry  # noqa: E402


# ---------------------------------------------------------------------------
# Registries
# ---------------------------------------------------------------------------

@pytest.fixture(scope="session")
def registry() -> CityRegistry:
    return texas_registry()


def make_city(**overrides) -> City:
    """Factory for City records."""
    base = {
        "slug": "testville",
        "name": "Testville",
        "tier": 3,
        "priority_weight": 0.5,
        "population": 20_000,
        "territory_id": "oncor",
    }
    base.update(overrides)
    return City(**base)


@pytest.fixture
def small_city() -> City:
    """Tier-3 city well under the small-city population threshold."""
    return make_city(slug="smallton", name="Smallton", population=20_000)


@pytest.fixture
def mini_registry(small_city) -> CityRegistry:
    return CityRegistry(
        cities=[
            make_city(slug="bigtown", name="Bigtown", tier=1, priority_weight=1.0, population=900_000),
            make_city(slug="midtown", name="Midtown", tier=2, priority_weight=0.8, population=150_000),
            small_city,
        ],
    )


# ---------------------------------------------------------------------------
# Resolvers
# ---------------------------------------------------------------------------

@pytest.fixture
def resolver(registry) -> CanonicalResolver:
    return CanonicalResolver(registry, cache=NullCanonicalCache())


@pytest.fixture
def cached_resolver(registry) -> CanonicalResolver:
    return CanonicalResolver(registry, cache=BoundedCanonicalCache(max_entries=5000, evict_batch=500))


# ---------------------------------------------------------------------------
# FastAPI test client
# ---------------------------------------------------------------------------

@pytest.fixture
def app(registry):
    """The FastAPI app with engine state built directly (lifespan does not run under ASGITransport)."""
    from services.facets.main import app as _app, init_state

    init_state(_app, registry=registry)
    return _app


@pytest.fixture
async def client(app):
    """Async HTTP client bound to the test app."""
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
