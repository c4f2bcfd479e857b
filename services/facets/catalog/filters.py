"""
Filter registry — every facet token the catalog understands.

Each filter belongs to exactly one category:
  term          contract length (conflict-bearing)
  rate_type     fixed / variable / indexed (conflict-bearing)
  green_energy  renewable percentage tier (conflict-bearing)
  billing       prepaid, deposit and payment features
  other         niche attributes with little search demand

FILTER_RANKING is the single fixed priority order of the catalog. It drives
canonical sort order, conflict resolution, optimal-parent selection and the
choice of a "primary" filter. Categories are contiguous in the ranking, so
sorting by rank also groups filters by category.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Iterable


class InvalidFilterError(ValueError):
    """Raised when an engine call receives a token that is not a known filter."""


class FilterCategory(str, Enum):
    TERM = "term"
    RATE_TYPE = "rate_type"
    GREEN_ENERGY = "green_energy"
    BILLING = "billing"
    OTHER = "other"


# At most one filter from each of these may be canonical in a combination
CONFLICT_CATEGORIES: frozenset[FilterCategory] = frozenset({
    FilterCategory.TERM,
    FilterCategory.RATE_TYPE,
    FilterCategory.GREEN_ENERGY,
})


@dataclass(frozen=True)
class FilterDefinition:
    """One facet token and how it is presented."""
    token: str
    category: FilterCategory
    display_name: str
    rank: int


# (token, category, display name) in canonical priority order
_FILTER_TABLE: list[tuple[str, FilterCategory, str]] = [
    # Contract term
    ("12-month", FilterCategory.TERM, "12-Month"),
    ("24-month", FilterCategory.TERM, "24-Month"),
    ("6-month", FilterCategory.TERM, "6-Month"),
    ("36-month", FilterCategory.TERM, "36-Month"),
    ("month-to-month", FilterCategory.TERM, "Month-to-Month"),
    # Rate type
    ("fixed-rate", FilterCategory.RATE_TYPE, "Fixed Rate"),
    ("variable-rate", FilterCategory.RATE_TYPE, "Variable Rate"),
    ("indexed-rate", FilterCategory.RATE_TYPE, "Market Rate"),
    # Green energy
    ("green-energy", FilterCategory.GREEN_ENERGY, "100% Green Energy"),
    ("partial-green", FilterCategory.GREEN_ENERGY, "50% Green Energy"),
    ("some-green", FilterCategory.GREEN_ENERGY, "10% Green Energy"),
    # Billing
    ("prepaid", FilterCategory.BILLING, "Prepaid"),
    ("no-deposit", FilterCategory.BILLING, "No Deposit"),
    ("autopay-discount", FilterCategory.BILLING, "AutoPay Discount"),
    ("bill-credit", FilterCategory.BILLING, "Bill Credit"),
    # Other
    ("time-of-use", FilterCategory.OTHER, "Time-of-Use"),
    ("free-weekends", FilterCategory.OTHER, "Free Weekends"),
    ("smart-meter", FilterCategory.OTHER, "Smart Meter"),
    ("business", FilterCategory.OTHER, "Business"),
    ("spanish-plans", FilterCategory.OTHER, "Spanish-Language"),
]

FILTER_DEFINITIONS: dict[str, FilterDefinition] = {
    token: FilterDefinition(token=token, category=category, display_name=display, rank=rank)
    for rank, (token, category, display) in enumerate(_FILTER_TABLE)
}

FILTER_RANKING: tuple[str, ...] = tuple(token for token, _, _ in _FILTER_TABLE)

# Default set of filters the planner combines per city
DEFAULT_FILTER_UNIVERSE: tuple[str, ...] = FILTER_RANKING


def is_known_filter(token: str) -> bool:
    return token in FILTER_DEFINITIONS


def get_filter(token: str) -> FilterDefinition:
    """Look up a filter definition. Raises InvalidFilterError for unknown tokens."""
    try:
        return FILTER_DEFINITIONS[token]
    except KeyError:
        raise InvalidFilterError(f"Unknown filter: {token!r}") from None


def filter_rank(token: str) -> int:
    return get_filter(token).rank


def filter_category(token: str) -> FilterCategory:
    return get_filter(token).category


def display_name(token: str) -> str:
    return get_filter(token).display_name


def sort_filters(tokens: Iterable[str]) -> tuple[str, ...]:
    """Deduplicate known tokens and return them in canonical ranking order."""
    return tuple(sorted(set(tokens), key=filter_rank))


def group_by_category(tokens: Iterable[str]) -> dict[FilterCategory, tuple[str, ...]]:
    """Group tokens by category; each group is in ranking order."""
    groups: dict[FilterCategory, list[str]] = {}
    for token in sort_filters(tokens):
        groups.setdefault(filter_category(token), []).append(token)
    return {category: tuple(members) for category, members in groups.items()}


def find_conflicts(tokens: Iterable[str]) -> dict[FilterCategory, tuple[str, ...]]:
    """Return conflict-bearing categories holding more than one token."""
    return {
        category: members
        for category, members in group_by_category(tokens).items()
        if category in CONFLICT_CATEGORIES and len(members) > 1
    }


def top_filters(tokens: Iterable[str], n: int) -> tuple[str, ...]:
    """The n highest-ranked tokens, in ranking order."""
    return sort_filters(tokens)[:n]
