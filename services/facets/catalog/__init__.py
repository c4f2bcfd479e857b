"""
Read-only catalog data: cities, territories and facet filters.

Usage:
    from services.facets.catalog import CityRegistry, texas_registry
"""

from __future__ import annotations

from services.facets.catalog.cities import (
    City,
    CityRegistry,
    Territory,
    UnknownCityError,
    load_registry,
    texas_registry,
)
from services.facets.catalog.filters import FilterCategory, InvalidFilterError

__all__ = [
    "City",
    "CityRegistry",
    "FilterCategory",
    "InvalidFilterError",
    "Territory",
    "UnknownCityError",
    "load_registry",
    "texas_registry",
]
