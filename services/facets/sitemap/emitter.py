"""
Sitemap and robots emitter.

Output layout:
  /sitemap.xml               index referencing every category sitemap
  /sitemaps/{name}.xml       one per category: main, cities, filters,
                             providers, guides; a category larger than
                             max_urls_per_sitemap is split into
                             {category}-1, {category}-2, ...
  /robots.txt

Faceted pages (city hubs, filter combinations) appear only when their
canonical decision is self-canonical and indexable; everything else is left
out entirely rather than listed with noindex. changefreq and priority are
copied from the decision.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date, datetime, timezone
from enum import Enum
from typing import Iterable, Mapping
from xml.etree.ElementTree import Element, SubElement, tostring

from services.facets.canonical.resolver import robots_directive
from services.facets.canonical.rules import (
    HUB_PRIORITY,
    CanonicalDecision,
    ChangeFrequency,
)
from services.facets.catalog.cities import City
from services.facets.catalog.filters import display_name
from services.facets.config import settings
from services.facets.routing.url_parser import absolute_url, city_path, parse_path
from services.facets.seo.metadata import og_image_url

logger = logging.getLogger(__name__)

SITEMAP_NS = "http://www.sitemaps.org/schemas/sitemap/0.9"
IMAGE_NS = "http://www.google.com/schemas/sitemap-image/1.1"
XML_DECLARATION = '<?xml version="1.0" encoding="UTF-8"?>\n'


class SitemapCategory(str, Enum):
    MAIN = "main"
    CITIES = "cities"
    FILTERS = "filters"
    PROVIDERS = "providers"
    GUIDES = "guides"


@dataclass(frozen=True)
class SitemapImage:
    loc: str
    title: str = ""


@dataclass(frozen=True)
class SitemapEntry:
    location_url: str
    last_modified: str  # YYYY-MM-DD
    change_frequency: str
    priority: float
    images: tuple[SitemapImage, ...] = ()


@dataclass(frozen=True)
class SitemapBundle:
    index_xml: str
    sitemaps: Mapping[str, str]  # name (e.g. "filters-2") -> urlset XML
    last_modified: str = ""  # YYYY-MM-DD stamped on every entry

    @property
    def names(self) -> list[str]:
        return list(self.sitemaps)


# ---------------------------------------------------------------------------
# Static pages: (path, changefreq, priority)
# ---------------------------------------------------------------------------

MAIN_PAGES: tuple[tuple[str, str, float], ...] = (
    ("/", "daily", 1.0),
    ("/texas/", "daily", 0.9),
    ("/texas/electricity-plans/", "daily", 0.9),
    ("/providers/", "weekly", 0.8),
    ("/guides/", "monthly", 0.7),
    ("/about/", "monthly", 0.3),
    ("/privacy-policy/", "yearly", 0.2),
    ("/terms-of-service/", "yearly", 0.2),
)

PROVIDER_SLUGS: tuple[str, ...] = (
    "txu-energy", "reliant-energy", "direct-energy", "green-mountain-energy",
    "just-energy", "champion-energy", "cirro-energy", "frontier-utilities",
)

COMPARISON_PAGES: tuple[str, ...] = (
    "/compare/txu-vs-reliant/",
    "/compare/green-mountain-vs-direct-energy/",
)

GUIDE_PAGES: tuple[tuple[str, str, float], ...] = (
    ("/guides/how-to-choose-electricity-plan/", "monthly", 0.8),
    ("/guides/texas-electricity-deregulation-explained/", "monthly", 0.7),
    ("/guides/fixed-vs-variable-electricity-rates/", "monthly", 0.7),
    ("/guides/green-energy-plans-texas/", "monthly", 0.7),
    ("/guides/prepaid-electricity-plans/", "monthly", 0.6),
    ("/guides/avoid-high-electricity-bills/", "monthly", 0.6),
)

# Sections the crawler has no business in
ROBOTS_DISALLOW: tuple[str, ...] = (
    "/admin/", "/api/", "/test/", "/*?sort=*", "/*?page=*", "/*&*",
)


def utc_today() -> date:
    return datetime.now(timezone.utc).date()


def robots_meta(decision: CanonicalDecision) -> str:
    """Robots meta value for a decision: index,follow or noindex,follow."""
    return robots_directive(decision)


def is_sitemap_eligible(decision: CanonicalDecision) -> bool:
    return decision.is_self_canonical and decision.should_index


def _format_priority(priority: float) -> str:
    return str(round(priority, 2))


# ---------------------------------------------------------------------------
# Emitter
# ---------------------------------------------------------------------------

class SitemapEmitter:
    """
    Builds every sitemap document from cities and canonical decisions.

    Usage:
        emitter = SitemapEmitter()
        bundle = emitter.emit_sitemaps(registry, decisions)
        bundle.index_xml
        bundle.sitemaps["cities"]
    """

    def __init__(
        self,
        base_url: str | None = None,
        max_urls_per_sitemap: int | None = None,
        last_modified: date | None = None,
    ) -> None:
        self.base_url = (base_url or settings.site_base_url).rstrip("/")
        self.max_urls = max_urls_per_sitemap or settings.max_urls_per_sitemap
        self.pinned_date = last_modified

    def build_date(self) -> str:
        """lastmod for the next build: the pinned date, else today (UTC)."""
        return (self.pinned_date or utc_today()).isoformat()

    def sitemap_url(self, name: str) -> str:
        return f"{self.base_url}/sitemaps/{name}.xml"

    def index_url(self) -> str:
        return f"{self.base_url}/sitemap.xml"

    # -- entries ----------------------------------------------------------

    def _entry(self, lastmod: str, path: str, changefreq: str, priority: float, images=()) -> SitemapEntry:
        return SitemapEntry(
            location_url=absolute_url(path, self.base_url),
            last_modified=lastmod,
            change_frequency=changefreq,
            priority=priority,
            images=tuple(images),
        )

    def _decision_entry(self, lastmod: str, decision: CanonicalDecision, city_name: str) -> SitemapEntry:
        filters = decision.canonical_filters
        if filters:
            title = f"{' + '.join(display_name(f) for f in filters)} Electricity Plans in {city_name}"
        else:
            title = f"Electricity Plans in {city_name}"
        parsed = parse_path(decision.canonical_path)
        slug = parsed.city_slug if parsed else ""
        return self._entry(
            lastmod,
            decision.canonical_path,
            decision.change_frequency.value,
            decision.priority,
            images=(SitemapImage(loc=og_image_url(slug, filters, self.base_url), title=title),),
        )

    def build_entries(
        self,
        cities: Iterable[City],
        decisions: Iterable[CanonicalDecision],
        last_modified: str | None = None,
    ) -> dict[SitemapCategory, list[SitemapEntry]]:
        """Entries per category, in emission order."""
        lastmod = last_modified or self.build_date()
        cities = list(cities)
        names = {c.slug: c.name for c in cities}
        entries: dict[SitemapCategory, list[SitemapEntry]] = {c: [] for c in SitemapCategory}

        entries[SitemapCategory.MAIN] = [self._entry(lastmod, *page) for page in MAIN_PAGES]

        seen: set[str] = set()
        skipped = 0
        for decision in decisions:
            if not is_sitemap_eligible(decision):
                skipped += 1
                continue
            if decision.canonical_path in seen:
                continue
            seen.add(decision.canonical_path)
            parsed = parse_path(decision.canonical_path)
            city_name = names.get(parsed.city_slug, parsed.city_slug) if parsed else ""
            category = SitemapCategory.FILTERS if decision.canonical_filters else SitemapCategory.CITIES
            entries[category].append(self._decision_entry(lastmod, decision, city_name))

        # Hubs are always self-canonical and indexed at full priority
        for city in cities:
            hub = city_path(city.slug)
            if hub in seen:
                continue
            seen.add(hub)
            entries[SitemapCategory.CITIES].append(
                self._entry(
                    lastmod,
                    hub,
                    ChangeFrequency.DAILY.value,
                    HUB_PRIORITY,
                    images=(SitemapImage(
                        loc=og_image_url(city.slug, (), self.base_url),
                        title=f"Electricity Plans in {city.name}",
                    ),),
                )
            )

        for slug in PROVIDER_SLUGS:
            entries[SitemapCategory.PROVIDERS].append(self._entry(lastmod, f"/providers/{slug}/", "weekly", 0.6))
            entries[SitemapCategory.PROVIDERS].append(self._entry(lastmod, f"/providers/{slug}/texas/", "weekly", 0.5))
        for path in COMPARISON_PAGES:
            entries[SitemapCategory.PROVIDERS].append(self._entry(lastmod, path, "monthly", 0.5))

        entries[SitemapCategory.GUIDES] = [self._entry(lastmod, *page) for page in GUIDE_PAGES]
        for city in cities:
            if city.tier == 1:
                entries[SitemapCategory.GUIDES].append(
                    self._entry(lastmod, f"/guides/{city.slug}-electricity-guide/", "monthly", 0.6)
                )

        if skipped:
            logger.debug("Sitemap skipped %d non-canonical or noindex decisions", skipped)
        return entries

    # -- documents --------------------------------------------------------

    def emit_sitemaps(
        self,
        cities: Iterable[City],
        decisions: Iterable[CanonicalDecision],
    ) -> SitemapBundle:
        lastmod = self.build_date()
        entries = self.build_entries(cities, decisions, lastmod)
        sitemaps: dict[str, str] = {}
        for category, category_entries in entries.items():
            chunks = [
                category_entries[i:i + self.max_urls]
                for i in range(0, len(category_entries), self.max_urls)
            ] or [[]]
            if len(chunks) == 1:
                sitemaps[category.value] = render_urlset(chunks[0])
                continue
            for number, chunk in enumerate(chunks, start=1):
                sitemaps[f"{category.value}-{number}"] = render_urlset(chunk)

        index_xml = render_index([self.sitemap_url(name) for name in sitemaps], lastmod)
        logger.info(
            "Emitted %d sitemaps (%d urls)",
            len(sitemaps),
            sum(len(e) for e in entries.values()),
        )
        return SitemapBundle(index_xml=index_xml, sitemaps=sitemaps, last_modified=lastmod)

    def robots_txt(self, sitemap_names: Iterable[str] | None = None) -> str:
        """robots.txt referencing the index and each category sitemap."""
        names = list(sitemap_names) if sitemap_names is not None else [c.value for c in SitemapCategory]
        lines = ["User-agent: *", "Allow: /", ""]
        lines.append(f"Sitemap: {self.index_url()}")
        lines.extend(f"Sitemap: {self.sitemap_url(name)}" for name in names)
        lines.append("")
        lines.extend(f"Disallow: {path}" for path in ROBOTS_DISALLOW)
        lines.extend(["", "Crawl-delay: 1", ""])
        lines.extend(["User-agent: Googlebot", "Crawl-delay: 0", ""])
        lines.extend(["User-agent: Bingbot", "Crawl-delay: 1", ""])
        return "\n".join(lines)


# ---------------------------------------------------------------------------
# XML rendering
# ---------------------------------------------------------------------------

def render_urlset(entries: Iterable[SitemapEntry]) -> str:
    urlset = Element("urlset")
    urlset.set("xmlns", SITEMAP_NS)
    urlset.set("xmlns:image", IMAGE_NS)
    for entry in entries:
        url_el = SubElement(urlset, "url")
        SubElement(url_el, "loc").text = entry.location_url
        SubElement(url_el, "lastmod").text = entry.last_modified
        SubElement(url_el, "changefreq").text = entry.change_frequency
        SubElement(url_el, "priority").text = _format_priority(entry.priority)
        for image in entry.images:
            image_el = SubElement(url_el, "image:image")
            SubElement(image_el, "image:loc").text = image.loc
            if image.title:
                SubElement(image_el, "image:title").text = image.title
    return XML_DECLARATION + tostring(urlset, encoding="unicode")


def render_index(locations: Iterable[str], last_modified: str) -> str:
    index = Element("sitemapindex")
    index.set("xmlns", SITEMAP_NS)
    for loc in locations:
        sitemap_el = SubElement(index, "sitemap")
        SubElement(sitemap_el, "loc").text = loc
        SubElement(sitemap_el, "lastmod").text = last_modified
    return XML_DECLARATION + tostring(index, encoding="unicode")
