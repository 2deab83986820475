"""
Unit tests for list entry classification heuristics.
"""

import pytest
from src.scraper.heuristics import (
    ACCEPT_RULES,
    FILTERS,
    Candidate,
    classify,
    is_list_entry,
    rejected_by,
    select_entries,
)


def visible(text: str) -> Candidate:
    return Candidate(text=text, width=300, height=72)


class TestFilters:
    """Tests for the reject filters."""

    def test_filter_order(self):
        """Test filters are evaluated in a fixed order."""
        assert [r.name for r in FILTERS] == [
            "visible", "min_text_length", "not_chrome_label", "in_list_container",
        ]

    def test_zero_size_rejected(self):
        """Test invisible elements are rejected even with a rating."""
        c = Candidate(text="Joe's Pizza 4.5 (120)", width=0, height=40)
        assert rejected_by(c) == "visible"
        assert classify(c) is None

    def test_short_text_rejected(self):
        """Test text under 10 characters is rejected."""
        assert rejected_by(visible("Cafe 4.5")) == "min_text_length"

    def test_whitespace_padding_does_not_count(self):
        """Test length is measured on stripped text."""
        assert rejected_by(visible("   Photos     ")) == "min_text_length"

    def test_chrome_label_rejected(self):
        """Test an exact action label long enough to pass the length filter."""
        assert rejected_by(visible("Directions")) == "not_chrome_label"

    @pytest.mark.parametrize("label", ["Overview", "Reviews", "Photos", "About", "Share", "Save", "Nearby"])
    def test_short_chrome_labels_never_entries(self, label):
        """Test tab and action labels are never classified as entries."""
        assert classify(visible(label)) is None

    def test_chrome_word_inside_longer_text_allowed(self):
        """Test only an exact label is chrome, not a name containing it."""
        assert rejected_by(visible("Save the Bagels Deli")) is None

    def test_outside_container_rejected(self):
        """Test elements outside the list container are rejected."""
        c = Candidate(text="Joe's Pizza 4.5 (120)", width=300, height=72, in_container=False)
        assert rejected_by(c) == "in_list_container"


class TestAcceptRules:
    """Tests for the ordered accept rules."""

    def test_rule_order(self):
        """Test accept rules are evaluated in a fixed order."""
        assert [r.name for r in ACCEPT_RULES] == [
            "rating_with_count", "rating", "star_and_name", "place_name_fallback",
        ]

    def test_rating_with_count(self):
        """Test the canonical rated entry."""
        assert classify(visible("Joe's Pizza 4.5 (120)")) == "rating_with_count"

    def test_rating_with_thousands_separator(self):
        """Test review counts with commas."""
        assert classify(visible("Katz's Delicatessen 4.6 (21,847)")) == "rating_with_count"

    def test_rating_without_count(self):
        """Test a rating followed by a parenthesis without digits."""
        assert classify(visible("Joe's Pizza 4.5 (no reviews)")) == "rating"

    def test_star_and_name(self):
        """Test star glyph with a capitalized word."""
        assert classify(visible("★ Pizzeria Beddia")) == "star_and_name"

    def test_place_name_fallback(self):
        """Test plain multi-word names are accepted by the fallback."""
        assert classify(visible("Blue Bottle Coffee")) == "place_name_fallback"

    def test_single_long_word_fallback(self):
        """Test one capitalized word of 15+ characters is accepted."""
        assert classify(visible("Supercalifragilistic")) == "place_name_fallback"

    def test_single_short_word_rejected(self):
        """Test one word under 15 characters is not a place name."""
        assert classify(visible("Restaurant")) is None

    def test_numeric_only_rejected(self):
        """Test numbers are not place names."""
        assert classify(visible("123456")) is None
        assert classify(visible("1,234 567.89")) is None

    def test_date_prefix_rejected(self):
        """Test text starting with a date is not a place name."""
        assert classify(visible("12/03/2024 Visited Place")) is None

    def test_lowercase_text_rejected(self):
        """Test text without a capitalized word is not accepted."""
        assert classify(visible("some lowercase words here")) is None


class TestSelectEntries:
    """Tests for select_entries and is_list_entry."""

    def test_examples_from_list_view(self):
        """Test a realistic mix of chrome and entries."""
        candidates = [
            visible("Photos"),
            visible("Directions"),
            visible("Joe's Pizza 4.5 (120)"),
            visible("123456"),
            Candidate(text="Hidden Place 4.1 (9)", width=0, height=0),
            visible("Blue Bottle Coffee"),
        ]
        assert select_entries(candidates) == [
            (2, "rating_with_count"),
            (5, "place_name_fallback"),
        ]

    def test_is_list_entry(self):
        """Test is_list_entry mirrors classify."""
        assert is_list_entry(visible("Joe's Pizza 4.5 (120)"))
        assert not is_list_entry(visible("Photos"))

    def test_from_js_defaults(self):
        """Test Candidate.from_js tolerates missing fields."""
        c = Candidate.from_js({"text": None, "width": 10})
        assert c.text == ""
        assert c.height == 0.0
        assert c.in_container is True
