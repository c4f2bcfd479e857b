"""
Tests for services/facets/sitemap/emitter.py

Covers:
- Only self-canonical, indexable decisions reach the sitemaps
- Hub synthesis, static pages, tier-1 city guides
- Category split once max_urls_per_sitemap is exceeded
- urlset / sitemapindex XML shape and robots.txt
"""

from __future__ import annotations

from datetime import date
from xml.etree import ElementTree as ET

import pytest

from services.facets.sitemap import emitter as emitter_module
from services.facets.sitemap.emitter import (
    IMAGE_NS,
    MAIN_PAGES,
    SITEMAP_NS,
    SitemapCategory,
    SitemapEmitter,
    is_sitemap_eligible,
    render_urlset,
    robots_meta,
)

BASE = "https://example.org"
NS = {"sm": SITEMAP_NS, "image": IMAGE_NS}


def parse(xml: str) -> ET.Element:
    return ET.fromstring(xml.encode("utf-8"))


def locs(xml: str) -> list[str]:
    return [el.text for el in parse(xml).findall("sm:url/sm:loc", NS)]


@pytest.fixture
def emitter() -> SitemapEmitter:
    return SitemapEmitter(base_url=BASE, last_modified=date(2024, 1, 15))


@pytest.fixture
def cities(registry):
    return [registry.get("dallas"), registry.get("alvin")]


@pytest.fixture
def decisions(resolver):
    return [
        resolver.resolve("dallas"),
        resolver.resolve("dallas", ["fixed-rate"]),
        resolver.resolve("dallas", ["12-month", "24-month"]),
        resolver.resolve("dallas", ["prepaid", "bill-credit"]),
        resolver.resolve("dallas", ["fixed-rate"]),
        resolver.resolve("victoria", ["12-month", "prepaid"]),
        resolver.resolve("dallas", ["time-of-use"]),
    ]


# ===========================================================================
# Eligibility
# ===========================================================================

class TestEligibility:

    def test_self_canonical_indexed(self, resolver):
        assert is_sitemap_eligible(resolver.resolve("dallas", ["fixed-rate"]))

    def test_non_canonical_excluded(self, resolver):
        assert not is_sitemap_eligible(resolver.resolve("dallas", ["12-month", "24-month"]))

    def test_noindex_self_canonical_excluded(self, resolver):
        d = resolver.resolve("victoria", ["12-month", "prepaid"])
        assert d.is_self_canonical
        assert not is_sitemap_eligible(d)

    def test_robots_meta(self, resolver):
        assert robots_meta(resolver.resolve("dallas", ["fixed-rate"])) == "index,follow"
        assert robots_meta(resolver.resolve("dallas", ["time-of-use"])) == "noindex,follow"


# ===========================================================================
# Entries
# ===========================================================================

class TestBuildEntries:

    def test_filter_entries_are_eligible_and_unique(self, emitter, cities, decisions):
        entries = emitter.build_entries(cities, decisions)
        assert [e.location_url for e in entries[SitemapCategory.FILTERS]] == [
            f"{BASE}/texas/dallas/fixed-rate/",
            f"{BASE}/texas/dallas/prepaid+bill-credit/",
        ]

    def test_hubs_for_every_city(self, emitter, cities, decisions):
        urls = [e.location_url for e in emitter.build_entries(cities, decisions)[SitemapCategory.CITIES]]
        assert urls == [f"{BASE}/texas/dallas/", f"{BASE}/texas/alvin/"]

    def test_decision_fields_copied(self, emitter, cities, resolver):
        d = resolver.resolve("dallas", ["12-month", "green-energy"])
        [entry] = emitter.build_entries(cities, [d])[SitemapCategory.FILTERS]
        assert entry.priority == d.priority
        assert entry.change_frequency == "weekly"
        assert entry.last_modified == "2024-01-15"
        assert entry.images[0].loc == f"{BASE}/images/og/dallas-12-month-green-energy.jpg"
        assert "Dallas" in entry.images[0].title

    def test_static_sections(self, emitter, cities):
        entries = emitter.build_entries(cities, [])
        assert len(entries[SitemapCategory.MAIN]) == len(MAIN_PAGES)
        assert entries[SitemapCategory.FILTERS] == []
        guides = [e.location_url for e in entries[SitemapCategory.GUIDES]]
        assert f"{BASE}/guides/dallas-electricity-guide/" in guides
        assert f"{BASE}/guides/alvin-electricity-guide/" not in guides
        providers = [e.location_url for e in entries[SitemapCategory.PROVIDERS]]
        assert f"{BASE}/providers/txu-energy/texas/" in providers
        assert f"{BASE}/compare/txu-vs-reliant/" in providers


# ===========================================================================
# Documents
# ===========================================================================

class TestEmitSitemaps:

    def test_one_sitemap_per_category(self, emitter, cities, decisions):
        bundle = emitter.emit_sitemaps(cities, decisions)
        assert bundle.names == ["main", "cities", "filters", "providers", "guides"]

    def test_index_references_every_sitemap(self, emitter, cities, decisions):
        bundle = emitter.emit_sitemaps(cities, decisions)
        root = parse(bundle.index_xml)
        assert root.tag == f"{{{SITEMAP_NS}}}sitemapindex"
        index_locs = [el.text for el in root.findall("sm:sitemap/sm:loc", NS)]
        assert index_locs == [f"{BASE}/sitemaps/{name}.xml" for name in bundle.names]
        assert all(el.text == "2024-01-15" for el in root.findall("sm:sitemap/sm:lastmod", NS))

    def test_only_self_canonical_urls(self, emitter, cities, decisions):
        bundle = emitter.emit_sitemaps(cities, decisions)
        urls = locs(bundle.sitemaps["filters"]) + locs(bundle.sitemaps["cities"])
        assert f"{BASE}/texas/dallas/12-month+24-month/" not in urls
        assert f"{BASE}/texas/dallas/time-of-use/" not in urls
        assert f"{BASE}/texas/victoria/12-month+prepaid/" not in urls
        assert len(urls) == len(set(urls))

    def test_urlset_shape(self, emitter, cities, decisions):
        root = parse(emitter.emit_sitemaps(cities, decisions).sitemaps["filters"])
        url = root.find("sm:url", NS)
        assert url.find("sm:loc", NS).text == f"{BASE}/texas/dallas/fixed-rate/"
        assert url.find("sm:changefreq", NS).text == "daily"
        assert url.find("sm:priority", NS).text == "0.9"
        assert url.find("image:image/image:loc", NS).text == f"{BASE}/images/og/dallas-fixed-rate.jpg"

    def test_large_categories_split(self, cities, decisions):
        emitter = SitemapEmitter(base_url=BASE, max_urls_per_sitemap=5, last_modified=date(2024, 1, 15))
        bundle = emitter.emit_sitemaps(cities, decisions)
        assert "main" not in bundle.sitemaps
        assert {"main-1", "main-2", "cities", "filters", "guides-1", "guides-2"} <= set(bundle.names)
        assert [n for n in bundle.names if n.startswith("providers-")] == [
            "providers-1", "providers-2", "providers-3", "providers-4",
        ]
        assert len(locs(bundle.sitemaps["main-1"])) == 5
        assert len(locs(bundle.sitemaps["main-2"])) == len(MAIN_PAGES) - 5

    def test_empty_category_still_emitted(self, emitter, cities):
        bundle = emitter.emit_sitemaps(cities, [])
        assert locs(bundle.sitemaps["filters"]) == []

    def test_render_urlset_empty(self):
        assert parse(render_urlset([])).tag == f"{{{SITEMAP_NS}}}urlset"


class TestLastModified:

    def test_unpinned_date_follows_the_clock(self, monkeypatch, cities, decisions):
        emitter = SitemapEmitter(base_url=BASE)
        monkeypatch.setattr(emitter_module, "utc_today", lambda: date(2024, 3, 1))
        first = emitter.emit_sitemaps(cities, decisions)
        monkeypatch.setattr(emitter_module, "utc_today", lambda: date(2024, 3, 2))
        second = emitter.emit_sitemaps(cities, decisions)
        assert first.last_modified == "2024-03-01"
        assert second.last_modified == "2024-03-02"
        assert "<lastmod>2024-03-02</lastmod>" in second.index_xml
        root = parse(second.sitemaps["cities"])
        assert {el.text for el in root.findall("sm:url/sm:lastmod", NS)} == {"2024-03-02"}

    def test_pinned_date_ignores_the_clock(self, monkeypatch, emitter, cities):
        monkeypatch.setattr(emitter_module, "utc_today", lambda: date(2030, 1, 1))
        assert emitter.build_date() == "2024-01-15"
        assert emitter.emit_sitemaps(cities, []).last_modified == "2024-01-15"


class TestRobotsTxt:

    def test_references_index_and_parts(self, emitter):
        text = emitter.robots_txt(["main", "filters-1", "filters-2"])
        assert "User-agent: *" in text
        assert f"Sitemap: {BASE}/sitemap.xml" in text
        assert f"Sitemap: {BASE}/sitemaps/filters-2.xml" in text
        assert "Disallow: /api/" in text
        assert "User-agent: Googlebot\nCrawl-delay: 0" in text

    def test_defaults_to_categories(self, emitter):
        text = emitter.robots_txt()
        for category in SitemapCategory:
            assert f"Sitemap: {BASE}/sitemaps/{category.value}.xml" in text
