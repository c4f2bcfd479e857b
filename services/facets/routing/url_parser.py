"""
Faceted URL structure.

  /texas/{city}/                       city hub
  /texas/{city}/{f1}+{f2}/             filter combination

Filter tokens inside the segment are joined with "+". Legacy paths that put
each filter in its own path segment (/texas/dallas/12-month/fixed-rate/) are
accepted by parse_path and folded into a single segment.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable

from services.facets.config import settings

FILTER_DELIMITER = "+"


@dataclass(frozen=True)
class ParsedPath:
    city_slug: str
    filter_segment: str


def _prefix(prefix: str | None) -> str:
    return "/" + (prefix if prefix is not None else settings.url_prefix).strip("/")


def parse_path(path: str, prefix: str | None = None) -> ParsedPath | None:
    """
    Split a request path into city slug and raw filter segment.

    Returns None when the path is not under the catalog prefix or names no
    city. Query strings and fragments are ignored.
    """
    path = path.split("?", 1)[0].split("#", 1)[0]
    segments = [s for s in path.split("/") if s]
    prefix_segments = [s for s in _prefix(prefix).split("/") if s]

    if segments[: len(prefix_segments)] != prefix_segments:
        return None
    rest = segments[len(prefix_segments):]
    if not rest:
        return None

    return ParsedPath(
        city_slug=rest[0].lower(),
        filter_segment=FILTER_DELIMITER.join(rest[1:]),
    )


def split_segment(segment: str) -> list[str]:
    """Split a raw segment into stripped, lowercased tokens (empty tokens dropped)."""
    tokens = (t.strip().lower() for t in segment.split(FILTER_DELIMITER))
    return [t for t in tokens if t]


def city_path(city_slug: str, prefix: str | None = None) -> str:
    return f"{_prefix(prefix)}/{city_slug}/"


def build_path(city_slug: str, filters: Iterable[str] = (), prefix: str | None = None) -> str:
    """Path for a city and filters, in the order given. Callers pass normalized filters."""
    filters = list(filters)
    if not filters:
        return city_path(city_slug, prefix)
    return f"{_prefix(prefix)}/{city_slug}/{FILTER_DELIMITER.join(filters)}/"


def absolute_url(path: str, base_url: str | None = None) -> str:
    base = (base_url if base_url is not None else settings.site_base_url).rstrip("/")
    return f"{base}{path}"
