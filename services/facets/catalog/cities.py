"""
City registry — read-only lookup of every city the catalog serves.

Each city defines:
  - slug, display name
  - tier (1 = major metro, 2 = secondary metro, 3 = small city)
  - priority weight in [0, 1] within its tier
  - population (drives the small-city canonical heuristic)
  - territory id (the TDSP that owns delivery infrastructure)

The registry is loaded once at process start and never mutated. It can be
built from the bundled Texas table below or from a JSON file with the shape:

  {
    "territories": [{"id": "oncor", "name": "...", "duns": "...", "zone": "North"}],
    "cities": [{"slug": "dallas", "name": "Dallas", "tier": 1, ...}]
  }
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from pathlib import Path
from types import MappingProxyType
from typing import Iterator, Mapping

from pydantic import BaseModel, Field

logger = logging.getLogger(__name__)


class UnknownCityError(KeyError):
    """Raised when a slug is not in the registry. Callers route these to a 404."""


@dataclass(frozen=True)
class Territory:
    """Transmission and distribution service provider for an area."""
    id: str
    name: str
    duns: str
    zone: str


@dataclass(frozen=True)
class City:
    """One catalog city. Immutable, referenced by slug everywhere else."""
    slug: str
    name: str
    tier: int
    priority_weight: float
    population: int
    territory_id: str


# ---------------------------------------------------------------------------
# JSON schema for externally supplied registries
# ---------------------------------------------------------------------------

class TerritoryRecord(BaseModel):
    id: str = Field(min_length=1)
    name: str = Field(min_length=1)
    duns: str = ""
    zone: str = ""


class CityRecord(BaseModel):
    slug: str = Field(pattern=r"^[a-z0-9]+(?:-[a-z0-9]+)*$")
    name: str = Field(min_length=1)
    tier: int = Field(ge=1, le=3)
    priority_weight: float = Field(ge=0.0, le=1.0)
    population: int = Field(ge=0)
    territory_id: str = Field(min_length=1)


class RegistryDocument(BaseModel):
    territories: list[TerritoryRecord] = Field(default_factory=list)
    cities: list[CityRecord]


# ---------------------------------------------------------------------------
# Registry
# ---------------------------------------------------------------------------

class CityRegistry:
    """
    Read-only slug -> City mapping.

    Iteration order is tier ascending, then priority weight descending, then
    slug, so every consumer walks cities in the same order.
    """

    def __init__(
        self,
        cities: list[City],
        territories: list[Territory] | None = None,
    ) -> None:
        by_slug: dict[str, City] = {}
        for city in cities:
            if city.slug in by_slug:
                raise ValueError(f"Duplicate city slug: {city.slug}")
            by_slug[city.slug] = city
        ordered = sorted(by_slug.values(), key=lambda c: (c.tier, -c.priority_weight, c.slug))
        self._cities: Mapping[str, City] = MappingProxyType({c.slug: c for c in ordered})
        self._territories: Mapping[str, Territory] = MappingProxyType(
            {t.id: t for t in (territories or [])}
        )

    def __contains__(self, slug: object) -> bool:
        return slug in self._cities

    def __iter__(self) -> Iterator[City]:
        return iter(self._cities.values())

    def __len__(self) -> int:
        return len(self._cities)

    def get(self, slug: str) -> City:
        """Return the city for a slug. Raises UnknownCityError if absent."""
        try:
            return self._cities[slug]
        except KeyError:
            raise UnknownCityError(slug) from None

    def territory(self, territory_id: str) -> Territory | None:
        return self._territories.get(territory_id)

    def territory_name(self, city: City) -> str:
        territory = self.territory(city.territory_id)
        return territory.name if territory else city.territory_id

    def by_tier(self, tier: int) -> list[City]:
        return [c for c in self if c.tier == tier]

    @classmethod
    def from_document(cls, document: RegistryDocument) -> "CityRegistry":
        return cls(
            cities=[City(**record.model_dump()) for record in document.cities],
            territories=[Territory(**record.model_dump()) for record in document.territories],
        )

    @classmethod
    def from_json(cls, path: str | Path) -> "CityRegistry":
        """Load and validate a registry JSON file."""
        raw = json.loads(Path(path).read_text(encoding="utf-8"))
        registry = cls.from_document(RegistryDocument.model_validate(raw))
        logger.info("Loaded city registry from %s (%d cities)", path, len(registry))
        return registry


def format_city_name(slug: str) -> str:
    """'fort-worth' -> 'Fort Worth'."""
    return " ".join(word.capitalize() for word in slug.split("-") if word)


# ---------------------------------------------------------------------------
# Bundled Texas table
# ---------------------------------------------------------------------------

TEXAS_TERRITORIES: list[Territory] = [
    Territory(id="oncor", name="Oncor Electric Delivery", duns="1039940674000", zone="North"),
    Territory(id="centerpoint", name="CenterPoint Energy Houston Electric", duns="957877905", zone="Coast"),
    Territory(id="aep-central", name="AEP Texas Central Company", duns="007924772", zone="South"),
    Territory(id="aep-north", name="AEP Texas North Company", duns="007923311", zone="West"),
    Territory(id="tnmp", name="Texas-New Mexico Power", duns="007929441", zone="Coast"),
]

# (slug, tier, priority weight, population, territory)
_TEXAS_CITIES: list[tuple[str, int, float, int, str]] = [
    # Tier 1: major metros
    ("dallas", 1, 1.0, 1_304_379, "oncor"),
    ("houston", 1, 1.0, 2_304_580, "centerpoint"),
    ("austin", 1, 1.0, 961_855, "aep-central"),
    ("fort-worth", 1, 1.0, 918_915, "oncor"),
    ("arlington", 1, 1.0, 394_266, "oncor"),
    ("plano", 1, 1.0, 285_494, "oncor"),
    ("irving", 1, 0.9, 256_684, "oncor"),
    ("garland", 1, 0.9, 246_018, "oncor"),
    ("frisco", 1, 0.9, 200_509, "oncor"),
    ("mckinney", 1, 0.9, 195_308, "oncor"),
    # Tier 2: secondary metros
    ("corpus-christi", 2, 0.8, 317_863, "aep-central"),
    ("killeen", 2, 0.8, 153_095, "aep-central"),
    ("denton", 2, 0.8, 139_869, "oncor"),
    ("waco", 2, 0.8, 138_486, "aep-central"),
    ("midland", 2, 0.7, 132_524, "oncor"),
    ("pearland", 2, 0.8, 125_828, "centerpoint"),
    ("abilene", 2, 0.7, 125_182, "aep-north"),
    ("round-rock", 2, 0.8, 119_468, "aep-central"),
    ("odessa", 2, 0.7, 114_428, "oncor"),
    ("league-city", 2, 0.8, 114_392, "centerpoint"),
    ("sugar-land", 2, 0.8, 111_026, "centerpoint"),
    ("tyler", 2, 0.7, 105_995, "oncor"),
    ("san-angelo", 2, 0.7, 99_893, "aep-north"),
    ("conroe", 2, 0.8, 89_956, "centerpoint"),
    # Tier 3: small cities
    ("victoria", 3, 0.6, 65_534, "aep-central"),
    ("texas-city", 3, 0.6, 51_898, "tnmp"),
    ("friendswood", 3, 0.6, 41_213, "centerpoint"),
    ("la-porte", 3, 0.6, 35_124, "centerpoint"),
    ("weatherford", 3, 0.5, 30_854, "oncor"),
    ("lake-jackson", 3, 0.5, 28_177, "tnmp"),
    ("alvin", 3, 0.6, 27_098, "centerpoint"),
    ("stephenville", 3, 0.5, 20_897, "oncor"),
    ("angleton", 3, 0.5, 19_429, "tnmp"),
    ("alice", 3, 0.4, 17_891, "aep-central"),
    ("humble", 3, 0.5, 16_795, "centerpoint"),
    ("vernon", 3, 0.4, 10_078, "aep-north"),
]


def texas_registry() -> CityRegistry:
    """Registry built from the bundled Texas table."""
    return CityRegistry(
        cities=[
            City(
                slug=slug,
                name=format_city_name(slug),
                tier=tier,
                priority_weight=weight,
                population=population,
                territory_id=territory,
            )
            for slug, tier, weight, population, territory in _TEXAS_CITIES
        ],
        territories=TEXAS_TERRITORIES,
    )


def load_registry(path: str = "") -> CityRegistry:
    """Registry from a JSON file when a path is configured, else the Texas table."""
    if path:
        return CityRegistry.from_json(path)
    return texas_registry()
