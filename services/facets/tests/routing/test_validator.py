"""
Tests for services/facets/routing/validator.py and url_parser.py

Covers:
- Normalization: order invariance, dedupe, case, empty tokens
- Unknown / malformed tokens with nearest-match suggestions
- Conflicts are reported but do not invalidate
- Path parsing, building and facet navigation helpers
"""

from __future__ import annotations

import pytest

from services.facets.catalog.filters import FilterCategory, is_known_filter
from services.facets.routing.url_parser import (
    ParsedPath,
    absolute_url,
    build_path,
    city_path,
    parse_path,
    split_segment,
)
from services.facets.routing.validator import (
    add_filter,
    levenshtein_distance,
    normalize_filters,
    popular_combinations,
    remove_filter,
    suggest_filters,
    validate_combination,
)


# ===========================================================================
# URL parsing
# ===========================================================================

class TestParsePath:

    def test_city_hub(self):
        assert parse_path("/texas/dallas/") == ParsedPath("dallas", "")

    def test_filter_segment(self):
        assert parse_path("/texas/dallas/12-month+fixed-rate/") == ParsedPath("dallas", "12-month+fixed-rate")

    def test_legacy_segments_are_folded(self):
        assert parse_path("/texas/dallas/12-month/fixed-rate") == ParsedPath("dallas", "12-month+fixed-rate")

    def test_query_and_fragment_ignored(self):
        assert parse_path("/texas/dallas/prepaid/?sort=price#top") == ParsedPath("dallas", "prepaid")

    def test_other_prefix_is_none(self):
        assert parse_path("/oklahoma/tulsa/") is None

    def test_prefix_without_city_is_none(self):
        assert parse_path("/texas/") is None

    def test_city_slug_lowercased(self):
        assert parse_path("/texas/Dallas/").city_slug == "dallas"


class TestPathBuilding:

    def test_city_path(self):
        assert city_path("austin") == "/texas/austin/"

    def test_build_path_without_filters_is_hub(self):
        assert build_path("austin", ()) == "/texas/austin/"

    def test_build_path_with_filters(self):
        assert build_path("austin", ("12-month", "green-energy")) == "/texas/austin/12-month+green-energy/"

    def test_absolute_url(self):
        assert absolute_url("/texas/austin/", "https://example.org/") == "https://example.org/texas/austin/"

    def test_split_segment_drops_empty_tokens(self):
        assert split_segment(" 12-month ++FIXED-RATE+") == ["12-month", "fixed-rate"]


# ===========================================================================
# Validation
# ===========================================================================

class TestValidateCombination:

    def test_order_invariance(self):
        a = validate_combination("dallas", ["green-energy", "12-month"])
        b = validate_combination("dallas", ["12-month", "green-energy"])
        assert a.normalized_filters == b.normalized_filters == ("12-month", "green-energy")
        assert a.normalized_path == b.normalized_path == "/texas/dallas/12-month+green-energy/"

    def test_duplicates_removed(self):
        result = validate_combination("dallas", "fixed-rate+fixed-rate")
        assert result.is_valid
        assert result.normalized_filters == ("fixed-rate",)

    def test_empty_tokens_do_not_invalidate(self):
        result = validate_combination("dallas", "12-month++fixed-rate+")
        assert result.is_valid
        assert result.normalized_filters == ("12-month", "fixed-rate")

    def test_uppercase_tokens_normalized(self):
        result = validate_combination("dallas", "12-MONTH")
        assert result.is_valid
        assert result.normalized_filters == ("12-month",)

    def test_empty_segment_is_valid_hub(self):
        result = validate_combination("dallas", "")
        assert result.is_valid
        assert result.normalized_filters == ()
        assert result.fallback_path == "/texas/dallas/"

    def test_valid_fallback_is_normalized_path(self):
        result = validate_combination("dallas", "prepaid+12-month")
        assert result.fallback_path == "/texas/dallas/12-month+prepaid/"

    def test_unknown_token_scenario(self):
        result = validate_combination("dallas", ["12-moth"])
        assert result.is_valid is False
        assert "12-month" in result.suggestions
        assert result.fallback_path == "/texas/dallas/"
        assert result.rejected == ("12-moth",)

    def test_malformed_token_rejected(self):
        result = validate_combination("dallas", "12_month")
        assert result.is_valid is False
        assert "12-month" in result.suggestions

    def test_one_bad_token_invalidates_the_rest(self):
        result = validate_combination("dallas", "fixed-rate+bogus-filter")
        assert result.is_valid is False
        assert result.normalized_filters == ("fixed-rate",)
        assert result.fallback_path == "/texas/dallas/"

    def test_conflicts_reported_not_invalid(self):
        result = validate_combination("dallas", "24-month+12-month")
        assert result.is_valid is True
        assert result.has_conflicts
        [conflict] = result.conflicts
        assert conflict.category == FilterCategory.TERM
        assert conflict.filters == ("12-month", "24-month")
        assert conflict.kept == "12-month"

    def test_billing_pairs_never_conflict(self):
        result = validate_combination("dallas", "prepaid+no-deposit")
        assert not result.has_conflicts


class TestSuggestions:

    def test_levenshtein(self):
        assert levenshtein_distance("kitten", "sitting") == 3
        assert levenshtein_distance("", "abc") == 3
        assert levenshtein_distance("same", "same") == 0

    def test_suggestions_ranked_by_distance(self):
        suggestions = suggest_filters("fixd-rate")
        assert suggestions[0] == "fixed-rate"

    def test_containment_match(self):
        assert "green-energy" in suggest_filters("green")

    def test_nothing_close(self):
        assert suggest_filters("zzzzzzzzzzzzzzzz") == []

    def test_limit(self):
        assert len(suggest_filters("month", limit=2)) <= 2


class TestNavigationHelpers:

    def test_add_filter_keeps_path_normalized(self):
        assert add_filter("/texas/dallas/fixed-rate/", "12-month") == "/texas/dallas/12-month+fixed-rate/"

    def test_remove_filter(self):
        assert remove_filter("/texas/dallas/12-month+fixed-rate/", "fixed-rate") == "/texas/dallas/12-month/"

    def test_remove_last_filter_gives_hub(self):
        assert remove_filter("/texas/dallas/prepaid/", "prepaid") == "/texas/dallas/"

    def test_unparseable_path_unchanged(self):
        assert add_filter("/about/", "prepaid") == "/about/"

    def test_normalize_filters_drops_unknown(self):
        assert normalize_filters(["prepaid", "bogus", "12-month"]) == ("12-month", "prepaid")

    @pytest.mark.parametrize("tier", [1, 2, 3])
    def test_popular_combinations_are_known_and_sorted(self, tier):
        combos = popular_combinations(tier)
        assert combos
        for combo in combos:
            assert all(is_known_filter(t) for t in combo)
            assert normalize_filters(combo) == combo
