"""
Engine configuration via pydantic-settings.
All config read from environment variables with sensible defaults for local dev.
"""

from pydantic import Field
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    # App
    app_name: str = "faceted-catalog"
    app_version: str = "0.1.0"
    environment: str = Field(default="development", pattern=r"^(development|staging|production)$")
    debug: bool = False

    # Error reporting (empty DSN = disabled)
    sentry_dsn: str = ""
    sentry_traces_sample_rate: float = Field(default=0.1, ge=0.0, le=1.0)

    # Site
    site_base_url: str = "https://choosemypower.org"
    url_prefix: str = "/texas"

    # Registry (empty = bundled Texas table)
    registry_path: str = ""

    # Generation planner
    tier1_max_combinations: int = Field(default=50, ge=0)
    tier2_max_combinations: int = Field(default=25, ge=0)
    tier3_max_combinations: int = Field(default=10, ge=0)
    max_pages_per_build: int = Field(default=1000, ge=1)
    build_timeout_s: float = Field(default=300.0, gt=0)
    generation_batch_size: int = Field(default=10, ge=1)
    max_concurrent_generations: int = Field(default=10, ge=1)
    max_filter_depth: int = Field(default=2, ge=1, le=3)
    ms_per_page_estimate: int = 500

    # Incremental regeneration
    enable_isr: bool = True
    isr_revalidate_seconds: int = 3600  # 1 hour

    # Canonical result cache
    canonical_cache_max_entries: int = Field(default=2000, ge=1)
    canonical_cache_evict_batch: int = Field(default=200, ge=1)

    # Optional shared cache across build workers (empty = in-process only)
    redis_url: str = ""
    canonical_cache_ttl_s: int = Field(default=86_400, ge=1)  # 24 hours

    # Sitemaps (protocol limit is 50,000 per file)
    max_urls_per_sitemap: int = Field(default=45_000, ge=1, le=50_000)

    model_config = {"env_prefix": "", "env_file": ".env", "extra": "ignore"}


settings = Settings()
