"""Tests for pattern compilation, escaping, highlighting and search."""

import re

import pytest

from ledger.models.transaction import TransactionRecord
from ledger.search import (
    compile_pattern,
    escape_html,
    highlight_html,
    search_records,
)


def make_record(description, amount, category, date="2025-01-31", record_id=None):
    return TransactionRecord(
        id=record_id or f"txn_{description.lower().replace(' ', '_')}",
        description=description,
        amount=amount,
        category=category,
        date=date,
    )


@pytest.fixture
def records():
    """Two records in insertion order: cafeteria first, bus second."""
    return [
        make_record("Lunch at Cafeteria", 12.5, "Food", record_id="txn_1"),
        make_record("Bus fare", 2.75, "Transport", record_id="txn_2"),
    ]


class TestCompilePattern:
    """Tests for fail-open compilation."""

    def test_empty_pattern_is_inactive(self):
        result = compile_pattern("", True)
        assert result.matcher is None
        assert result.error is None
        assert result.active is False

    def test_valid_pattern(self):
        result = compile_pattern("caf", True)
        assert result.active
        assert result.matcher.flags & re.IGNORECASE

    def test_case_sensitive_flag(self):
        result = compile_pattern("caf", False)
        assert not result.matcher.flags & re.IGNORECASE

    @pytest.mark.parametrize("pattern", ["(", "[a-", "*", "a{2,1}", "(?P<x"])
    def test_invalid_pattern_does_not_raise(self, pattern):
        result = compile_pattern(pattern, True)
        assert result.matcher is None
        assert result.error
        assert result.active is False


class TestEscapeHtml:
    """Tests for HTML escaping."""

    def test_escapes_special_characters(self):
        assert escape_html('<b>"Tom" & Jerry</b>') == (
            "&lt;b&gt;&quot;Tom&quot; &amp; Jerry&lt;/b&gt;"
        )

    def test_single_quote_untouched(self):
        assert escape_html("it's") == "it's"

    def test_none_and_numbers(self):
        assert escape_html(None) == ""
        assert escape_html(12.5) == "12.5"


class TestHighlightHtml:
    """Tests for highlight markup."""

    def test_no_matcher_escapes_only(self):
        markup, count = highlight_html("<i>x</i>", None)
        assert markup == "&lt;i&gt;x&lt;/i&gt;"
        assert count == 0

    def test_marks_every_match_left_to_right(self):
        matcher = re.compile("a")
        markup, count = highlight_html("banana", matcher)
        assert markup == "b<mark>a</mark>n<mark>a</mark>n<mark>a</mark>"
        assert count == 3

    def test_non_overlapping(self):
        markup, count = highlight_html("aaa", re.compile("aa"))
        assert markup == "<mark>aa</mark>a"
        assert count == 1

    def test_matches_inside_escaped_entity(self):
        """Test the escape-then-match quirk: '&' matches inside '&amp;'."""
        markup, count = highlight_html("Fish & Chips", re.compile("&"))
        assert markup == "Fish <mark>&amp;</mark>amp; Chips"
        assert count == 1

    def test_entity_match_is_escaped_again(self):
        markup, _ = highlight_html("A & B", re.compile("&amp;"))
        assert markup == "A <mark>&amp;amp;</mark> B"

    def test_markup_in_text_is_neutralised(self):
        markup, count = highlight_html("<script>", re.compile("script"))
        assert markup == "&lt;<mark>script</mark>&gt;"
        assert count == 1


class TestSearchRecords:
    """Tests for filtering and rendering."""

    def test_cafeteria_example(self, records):
        """Test 'caf' finds only the cafeteria record and highlights Caf."""
        results = search_records(records, "caf", case_insensitive=True)
        assert [r.record.id for r in results] == ["txn_1"]
        assert results[0].description_html == "Lunch at <mark>Caf</mark>eteria"
        assert results[0].highlight_count == 1

    def test_case_sensitive_excludes_other_case(self, records):
        assert search_records(records, "caf", case_insensitive=False) == []

    def test_empty_pattern_returns_all_newest_first(self, records):
        results = search_records(records, "", True)
        assert [r.record.id for r in results] == ["txn_2", "txn_1"]
        assert all(r.highlight_count == 0 for r in results)
        assert all("<mark>" not in r.description_html for r in results)

    @pytest.mark.parametrize("case_insensitive", [True, False])
    def test_invalid_pattern_fails_open(self, records, case_insensitive):
        """Test an unbalanced pattern shows everything with no highlights."""
        results = search_records(records, "(", case_insensitive)
        assert [r.record.id for r in results] == ["txn_2", "txn_1"]
        assert sum(r.highlight_count for r in results) == 0

    def test_matches_category(self, records):
        results = search_records(records, "^trans", True)
        assert [r.record.id for r in results] == ["txn_2"]
        assert results[0].category_html == "<mark>Trans</mark>port"

    def test_matches_amount_text(self, records):
        """Test amounts are searched as plain decimal text."""
        results = search_records(records, r"2\.75", True)
        assert [r.record.id for r in results] == ["txn_2"]
        assert results[0].amount_html == "<mark>2.75</mark>"

    def test_integral_amount_has_no_decimal_point(self):
        record = make_record("Rent", 900.0, "Housing")
        assert search_records([record], r"900\.0", True) == []
        results = search_records([record], "^900$", True)
        assert results[0].amount_html == "<mark>900</mark>"

    def test_date_is_not_searched_or_highlighted(self, records):
        assert search_records(records, "2025", True) == []
        results = search_records(records, "", True)
        assert results[0].date_html == "2025-01-31"

    def test_filter_uses_raw_text_highlight_uses_escaped(self):
        """Test '<' keeps the record but cannot highlight the escaped text."""
        record = make_record("a<b", 1, "Misc")
        results = search_records([record], "<", True)
        assert len(results) == 1
        assert results[0].description_html == "a&lt;b"
        assert results[0].highlight_count == 0

    def test_escaped_entity_text_does_not_filter(self):
        """Test 'amp' does not match raw 'Fish & Chips'."""
        record = make_record("Fish & Chips", 8, "Food")
        assert search_records([record], "amp", True) == []

    def test_does_not_mutate_input_order(self, records):
        search_records(records, "", True)
        assert [r.id for r in records] == ["txn_1", "txn_2"]


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
