"""
Unit tests for comparison strings.

Tests normalization and the per-kind salient field projections.
"""

from types import SimpleNamespace

import pytest

from fair_directory.schemas.duplicates import DuplicateEntityType
from fair_directory.services.duplicates.comparison import (
    build_comparison_string,
    comparison_fields,
    comparison_string_builder,
    normalize_for_comparison,
)
from fair_directory.services.duplicates.exceptions import DuplicateValidationError


def make_venue(**overrides):
    fields = {"name": "County Fairgrounds", "address": None, "city": None, "state": None}
    fields.update(overrides)
    return SimpleNamespace(**fields)


def make_event(name="Harvest Fair", description=None, venue_name=None, promoter_name=None):
    return SimpleNamespace(
        name=name,
        description=description,
        venue=SimpleNamespace(name=venue_name) if venue_name else None,
        promoter=SimpleNamespace(company_name=promoter_name) if promoter_name else None,
    )


class TestNormalizeForComparison:
    """Tests for normalize_for_comparison."""

    def test_lowercase_conversion(self):
        assert normalize_for_comparison("HELLO World") == "hello world"

    def test_accent_removal(self):
        assert normalize_for_comparison("Café Müller") == "cafe muller"

    def test_composed_and_decomposed_forms_match(self):
        assert normalize_for_comparison("caf\u00e9") == normalize_for_comparison("cafe\u0301")

    def test_punctuation_removal(self):
        assert normalize_for_comparison("Joe's Crafts, Inc.") == "joes crafts inc"
        assert normalize_for_comparison("Arts & Crafts") == "arts crafts"

    def test_whitespace_collapse_and_trim(self):
        assert normalize_for_comparison("  County \t Fair\n Grounds  ") == "county fair grounds"

    def test_empty_and_none(self):
        assert normalize_for_comparison("") == ""
        assert normalize_for_comparison(None) == ""

    def test_punctuation_only_becomes_empty(self):
        assert normalize_for_comparison("!!! ---") == ""


class TestComparisonFields:
    """Tests for per-kind field projection."""

    def test_venue_fields_in_order(self):
        venue = make_venue(address="100 Main St.", city="Springfield", state="IL")
        assert comparison_fields("venues", venue) == {
            "name": "county fairgrounds",
            "address": "100 main st",
            "city": "springfield",
            "state": "il",
        }

    def test_empty_fields_are_omitted(self):
        assert comparison_fields(DuplicateEntityType.VENUES, make_venue()) == {
            "name": "county fairgrounds"
        }

    def test_event_uses_description_prefix(self):
        event = make_event(description="x" * 150 + " tail")
        fields = comparison_fields("events", event)
        assert fields["description"] == "x" * 100

    def test_event_includes_related_names(self):
        event = make_event(venue_name="Expo Hall", promoter_name="Midwest Fairs LLC")
        fields = comparison_fields("events", event)
        assert fields["venue"] == "expo hall"
        assert fields["promoter"] == "midwest fairs llc"

    def test_vendor_fields(self):
        vendor = SimpleNamespace(business_name="Bob's BBQ", vendor_type="Food & Drink")
        assert build_comparison_string("vendors", vendor) == "bobs bbq food drink"

    def test_promoter_uses_company_name_only(self):
        promoter = SimpleNamespace(company_name="Fair Events Co.", description="ignored")
        assert build_comparison_string("promoters", promoter) == "fair events co"

    def test_unknown_kind_raises(self):
        with pytest.raises(DuplicateValidationError):
            comparison_fields("users", make_venue())


class TestBuildComparisonString:
    """Tests for build_comparison_string."""

    def test_differs_only_in_case_and_punctuation(self):
        a = make_venue(name="County Fair-Grounds!", city="Springfield")
        b = make_venue(name="county fairgrounds", city="SPRINGFIELD")
        assert build_comparison_string("venues", a) == build_comparison_string("venues", b)

    def test_stable_for_same_record(self):
        event = make_event(description="Annual harvest celebration", venue_name="Expo Hall")
        assert build_comparison_string("events", event) == build_comparison_string("events", event)

    def test_builder_binds_kind(self):
        to_string = comparison_string_builder("venues")
        assert to_string(make_venue(city="Springfield")) == "county fairgrounds springfield"

    def test_builder_rejects_unknown_kind(self):
        with pytest.raises(DuplicateValidationError):
            comparison_string_builder("tickets")
