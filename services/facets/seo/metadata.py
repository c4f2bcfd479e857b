"""
SEO metadata generator for faceted pages.

The variation index is a 32-bit string hash of the city slug modulo
VARIANT_COUNT: the same city always renders the same phrasing across builds,
while different cities spread across the variants. Template banks then
branch on filter shape:

  no filters   city banks
  one filter   bank keyed by the token, or the generic single-filter bank
  2+ filters   multi-filter banks with the joined display names

Plan count and rate are interpolated as given. Indexing decisions are the
caller's concern.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Sequence

from services.facets.catalog.cities import City
from services.facets.catalog.filters import display_name, sort_filters
from services.facets.routing.url_parser import absolute_url
from services.facets.seo import templates
from services.facets.seo.templates import VARIANT_COUNT, pick


@dataclass(frozen=True)
class PageMetadata:
    title: str
    description: str
    h1: str
    body_html: str
    footer_html: str
    og_image_url: str


def string_hash(value: str) -> int:
    """Signed 32-bit multiplicative string hash (h * 31 + code point)."""
    h = 0
    for ch in value:
        h = ((h << 5) - h + ord(ch)) & 0xFFFFFFFF
    return h - 0x100000000 if h & 0x80000000 else h


def template_variation(city_slug: str, variants: int = VARIANT_COUNT) -> int:
    return abs(string_hash(city_slug)) % variants


def og_image_url(city_slug: str, filters: Sequence[str] = (), base_url: str | None = None) -> str:
    suffix = "-" + "-".join(filters) if filters else ""
    return absolute_url(f"/images/og/{city_slug}{suffix}.jpg", base_url)


def generate_metadata(
    city: City,
    filters: Sequence[str],
    plan_count: int,
    lowest_rate: float | str,
    territory_name: str,
) -> PageMetadata:
    """Render title, description, headings and copy for one page."""
    filters = sort_filters(filters)
    variation = template_variation(city.slug)
    names = [display_name(f) for f in filters]
    values = {
        "city": city.name,
        "count": plan_count,
        "rate": lowest_rate,
        "territory": territory_name,
        "filter": names[0] if names else "",
        "filters": " + ".join(names),
    }

    if not filters:
        title_bank = templates.CITY_TITLES
        description_bank = templates.CITY_DESCRIPTIONS
        h1_bank = templates.CITY_HEADINGS
        body_bank = templates.CITY_BODIES
    elif len(filters) == 1:
        token = filters[0]
        title_bank = templates.SINGLE_FILTER_TITLES.get(token, templates.GENERIC_SINGLE_TITLES)
        description_bank = templates.FILTERED_DESCRIPTIONS
        h1_bank = templates.FILTERED_HEADINGS
        body_bank = templates.SINGLE_FILTER_BODIES.get(token, templates.GENERIC_FILTERED_BODIES)
    else:
        title_bank = templates.MULTI_FILTER_TITLES
        description_bank = templates.FILTERED_DESCRIPTIONS
        h1_bank = templates.FILTERED_HEADINGS
        body_bank = templates.GENERIC_FILTERED_BODIES

    return PageMetadata(
        title=pick(title_bank, variation).format(**values),
        description=pick(description_bank, variation).format(**values),
        h1=pick(h1_bank, variation).format(**values),
        body_html=pick(body_bank, variation).format(**values),
        footer_html=pick(templates.FOOTERS, variation).format(**values),
        og_image_url=og_image_url(city.slug, filters),
    )
