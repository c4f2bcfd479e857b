"""
Canonical decision rules.

Rule priority (first match wins, never combined):
  1. no filters                              -> CITY_HUB           index, 1.0
  2. conflicting categories                  -> CONFLICT_RESOLVED  noindex
  3. high-value single (tier <= 2) or pair
     (tier 1), market volume floor if given  -> HIGH_VALUE         index, tier-scaled
  4. season-suboptimal rate type             -> SEASONAL_OVERRIDE  index, 0.6
  5. more than 2 filters                     -> OPTIMAL_PARENT     noindex
  6. 2 filters on a small tier-3 city        -> SMALL_CITY_PRIMARY noindex
  7. single low-search-volume filter         -> LOW_SEARCH_VOLUME  noindex
  8. default                                 -> DEFAULT            self-canonical

Each rule is a (predicate, action) pair over a RuleContext. Actions either
keep the page self-canonical or name a target filter set (reduced, or with
the off-season rate type swapped); the resolver turns a target set into a
canonical path.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Callable

from services.facets.catalog.cities import City
from services.facets.catalog.filters import (
    FilterCategory,
    filter_category,
    find_conflicts,
    sort_filters,
    top_filters,
)


# ---------------------------------------------------------------------------
# Enums & inputs
# ---------------------------------------------------------------------------

class CanonicalReason(str, Enum):
    CITY_HUB = "city_hub"
    CONFLICT_RESOLVED = "conflict_resolved"
    HIGH_VALUE = "high_value"
    SEASONAL_OVERRIDE = "seasonal_override"
    OPTIMAL_PARENT = "optimal_parent"
    SMALL_CITY_PRIMARY = "small_city_primary"
    LOW_SEARCH_VOLUME = "low_search_volume"
    DEFAULT = "default"


class Season(str, Enum):
    WINTER = "winter"
    SPRING = "spring"
    SUMMER = "summer"
    FALL = "fall"


class SeoValue(str, Enum):
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"

    @property
    def weight(self) -> int:
        return {"high": 3, "medium": 2, "low": 1}[self.value]


@dataclass(frozen=True)
class MarketData:
    """Already-resolved market signals for one city/filter combination."""
    search_volume: int
    competition: float  # 0.0 (none) .. 1.0 (saturated)


class ChangeFrequency(str, Enum):
    DAILY = "daily"
    WEEKLY = "weekly"
    MONTHLY = "monthly"


@dataclass(frozen=True)
class CanonicalDecision:
    """Resolved canonical target for one requested page. Always recomputable."""
    source_path: str
    canonical_path: str
    canonical_filters: tuple[str, ...]
    reason: CanonicalReason
    priority: float
    should_index: bool
    change_frequency: ChangeFrequency

    @property
    def is_self_canonical(self) -> bool:
        return self.source_path == self.canonical_path


def change_frequency_for_depth(depth: int) -> ChangeFrequency:
    """Hub and single-filter pages refresh daily, pairs weekly, deeper monthly."""
    if depth <= 1:
        return ChangeFrequency.DAILY
    if depth == 2:
        return ChangeFrequency.WEEKLY
    return ChangeFrequency.MONTHLY


def season_for_month(month: int) -> Season:
    """Meteorological season for a calendar month (1-12)."""
    if month in (12, 1, 2):
        return Season.WINTER
    if month in (3, 4, 5):
        return Season.SPRING
    if month in (6, 7, 8):
        return Season.SUMMER
    return Season.FALL


# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

HIGH_VALUE_SINGLE_FILTERS: frozenset[str] = frozenset({
    "12-month", "24-month", "fixed-rate", "variable-rate",
    "green-energy", "prepaid", "no-deposit",
})

HIGH_VALUE_PAIRS: frozenset[frozenset[str]] = frozenset({
    frozenset({"12-month", "fixed-rate"}),
    frozenset({"24-month", "fixed-rate"}),
    frozenset({"12-month", "green-energy"}),
    frozenset({"fixed-rate", "green-energy"}),
    frozenset({"prepaid", "no-deposit"}),
    frozenset({"12-month", "autopay-discount"}),
    frozenset({"fixed-rate", "autopay-discount"}),
})

# Filters with too little search demand to deserve their own page
LOW_VALUE_FILTERS: frozenset[str] = frozenset({
    "time-of-use", "business", "spanish-plans", "free-weekends", "smart-meter",
})

# Market-data gates (monthly searches)
HIGH_VALUE_MIN_SEARCH_VOLUME = 100
LOW_SEARCH_VOLUME_FLOOR = 50
STRONG_SEARCH_VOLUME = 1000
HIGH_COMPETITION = 0.8

HIGH_VALUE_TIER_PRIORITY: dict[int, float] = {1: 0.9, 2: 0.7, 3: 0.5}
SEASONAL_PRIORITY = 0.6
NON_CANONICAL_PRIORITY = 0.1
HUB_PRIORITY = 1.0

# Summer favors variable rates, winter favors locking a fixed rate
SEASONAL_SUBOPTIMAL: dict[Season, str] = {
    Season.SUMMER: "fixed-rate",
    Season.WINTER: "variable-rate",
}
SEASONAL_PREFERRED: dict[Season, str] = {
    Season.SUMMER: "variable-rate",
    Season.WINTER: "fixed-rate",
}

SMALL_CITY_POPULATION = 50_000

# Filters kept by the optimal-parent rule, per city tier
OPTIMAL_PARENT_DEPTH: dict[int, int] = {1: 2, 2: 1, 3: 1}


def _clamp(value: float) -> float:
    return round(min(1.0, max(0.0, value)), 2)


# ---------------------------------------------------------------------------
# Shared heuristics
# ---------------------------------------------------------------------------

def is_high_value_combination(tier: int, filters: tuple[str, ...]) -> bool:
    """Allow-list check for rule 3, ignoring market data."""
    if len(filters) == 1:
        return tier <= 2 and filters[0] in HIGH_VALUE_SINGLE_FILTERS
    if len(filters) == 2:
        return tier == 1 and frozenset(filters) in HIGH_VALUE_PAIRS
    return False


def classify_seo_value(tier: int, filters: tuple[str, ...]) -> SeoValue:
    """high / medium / low value of a filter combination for a city tier."""
    if is_high_value_combination(tier, filters):
        return SeoValue.HIGH
    if len(filters) <= 2:
        return SeoValue.MEDIUM
    return SeoValue.LOW


def high_value_priority(tier: int, depth: int, market: MarketData | None) -> float:
    """Tier base, minus 0.1 per filter beyond the first, +/-0.1 for market signals."""
    priority = HIGH_VALUE_TIER_PRIORITY.get(tier, HIGH_VALUE_TIER_PRIORITY[3])
    priority -= 0.1 * max(0, depth - 1)
    if market is not None:
        if market.search_volume >= STRONG_SEARCH_VOLUME:
            priority += 0.1
        if market.competition >= HIGH_COMPETITION:
            priority -= 0.1
    return _clamp(priority)


def default_priority(depth: int) -> float:
    return _clamp(max(0.3, 0.8 - 0.2 * depth))


# ---------------------------------------------------------------------------
# Rule chain
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class RuleContext:
    city: City
    filters: tuple[str, ...]  # normalized
    market: MarketData | None = None
    season: Season | None = None

    @property
    def depth(self) -> int:
        return len(self.filters)


@dataclass(frozen=True)
class RuleOutcome:
    """
    What a rule decided.

    target_filters is None for a self-canonical page; otherwise it is the
    reduced filter set the page should canonicalize to.
    """
    reason: CanonicalReason
    should_index: bool
    priority: float
    target_filters: tuple[str, ...] | None = None


@dataclass(frozen=True)
class CanonicalRule:
    reason: CanonicalReason
    applies: Callable[[RuleContext], bool]
    decide: Callable[[RuleContext], RuleOutcome]


def _resolve_conflicts(ctx: RuleContext) -> RuleOutcome:
    conflicts = find_conflicts(ctx.filters)
    dropped = {f for members in conflicts.values() for f in members[1:]}
    return RuleOutcome(
        reason=CanonicalReason.CONFLICT_RESOLVED,
        should_index=False,
        priority=NON_CANONICAL_PRIORITY,
        target_filters=sort_filters(f for f in ctx.filters if f not in dropped),
    )


def _high_value_applies(ctx: RuleContext) -> bool:
    if not is_high_value_combination(ctx.city.tier, ctx.filters):
        return False
    if ctx.market is not None:
        return ctx.market.search_volume >= HIGH_VALUE_MIN_SEARCH_VOLUME
    return True


def _seasonal_applies(ctx: RuleContext) -> bool:
    if ctx.season is None or ctx.season not in SEASONAL_SUBOPTIMAL:
        return False
    rate_filters = [f for f in ctx.filters if filter_category(f) == FilterCategory.RATE_TYPE]
    return SEASONAL_SUBOPTIMAL[ctx.season] in rate_filters


def _seasonal_swap(ctx: RuleContext) -> tuple[str, ...]:
    """Replace the off-season rate type with the preferred one; other filters stay."""
    suboptimal = SEASONAL_SUBOPTIMAL[ctx.season]
    preferred = SEASONAL_PREFERRED[ctx.season]
    return sort_filters(preferred if f == suboptimal else f for f in ctx.filters)


def _low_volume_applies(ctx: RuleContext) -> bool:
    if ctx.depth != 1:
        return False
    if ctx.filters[0] in LOW_VALUE_FILTERS:
        return True
    return ctx.market is not None and ctx.market.search_volume < LOW_SEARCH_VOLUME_FLOOR


RULES: tuple[CanonicalRule, ...] = (
    CanonicalRule(
        reason=CanonicalReason.CITY_HUB,
        applies=lambda ctx: ctx.depth == 0,
        decide=lambda ctx: RuleOutcome(CanonicalReason.CITY_HUB, True, HUB_PRIORITY),
    ),
    CanonicalRule(
        reason=CanonicalReason.CONFLICT_RESOLVED,
        applies=lambda ctx: bool(find_conflicts(ctx.filters)),
        decide=_resolve_conflicts,
    ),
    CanonicalRule(
        reason=CanonicalReason.HIGH_VALUE,
        applies=_high_value_applies,
        decide=lambda ctx: RuleOutcome(
            CanonicalReason.HIGH_VALUE,
            True,
            high_value_priority(ctx.city.tier, ctx.depth, ctx.market),
        ),
    ),
    CanonicalRule(
        reason=CanonicalReason.SEASONAL_OVERRIDE,
        applies=_seasonal_applies,
        decide=lambda ctx: RuleOutcome(
            CanonicalReason.SEASONAL_OVERRIDE,
            True,
            SEASONAL_PRIORITY,
            target_filters=_seasonal_swap(ctx),
        ),
    ),
    CanonicalRule(
        reason=CanonicalReason.OPTIMAL_PARENT,
        applies=lambda ctx: ctx.depth > 2,
        decide=lambda ctx: RuleOutcome(
            CanonicalReason.OPTIMAL_PARENT,
            False,
            NON_CANONICAL_PRIORITY,
            target_filters=top_filters(ctx.filters, OPTIMAL_PARENT_DEPTH.get(ctx.city.tier, 1)),
        ),
    ),
    CanonicalRule(
        reason=CanonicalReason.SMALL_CITY_PRIMARY,
        applies=lambda ctx: (
            ctx.depth == 2
            and ctx.city.tier == 3
            and ctx.city.population < SMALL_CITY_POPULATION
        ),
        decide=lambda ctx: RuleOutcome(
            CanonicalReason.SMALL_CITY_PRIMARY,
            False,
            NON_CANONICAL_PRIORITY,
            target_filters=top_filters(ctx.filters, 1),
        ),
    ),
    CanonicalRule(
        reason=CanonicalReason.LOW_SEARCH_VOLUME,
        applies=_low_volume_applies,
        decide=lambda ctx: RuleOutcome(
            CanonicalReason.LOW_SEARCH_VOLUME,
            False,
            NON_CANONICAL_PRIORITY,
            target_filters=(),
        ),
    ),
    CanonicalRule(
        reason=CanonicalReason.DEFAULT,
        applies=lambda ctx: True,
        decide=lambda ctx: RuleOutcome(
            CanonicalReason.DEFAULT,
            ctx.depth <= 2 and ctx.city.tier <= 2,
            default_priority(ctx.depth),
        ),
    ),
)


def evaluate_rules(ctx: RuleContext, rules: tuple[CanonicalRule, ...] = RULES) -> RuleOutcome:
    """Run the chain; the first rule whose predicate holds decides."""
    for rule in rules:
        if rule.applies(ctx):
            return rule.decide(ctx)
    raise RuntimeError("Canonical rule chain has no catch-all rule")
