"""Tests for dashboard aggregates."""

from decimal import Decimal

import pytest

from ledger.models.transaction import TransactionRecord
from ledger.queries import NO_CATEGORY, cap_status, summarize, top_category, total_amount


def record(amount, category, record_id="txn"):
    return TransactionRecord(
        id=record_id,
        description="Item",
        amount=amount,
        category=category,
        date="2025-01-31",
    )


@pytest.fixture
def records():
    return [
        record(12.5, "Food", "txn_1"),
        record(2.75, "Transport", "txn_2"),
    ]


class TestTotals:
    """Tests for count and total."""

    def test_total_amount(self, records):
        assert total_amount(records) == Decimal("15.25")

    def test_float_drift_is_avoided(self):
        items = [record(0.1, "Food"), record(0.2, "Food")]
        assert total_amount(items) == Decimal("0.30")

    def test_non_numeric_amount_counts_as_zero(self, records):
        imported = TransactionRecord.from_raw({
            "id": "x", "description": "Odd", "amount": "abc",
            "category": "Misc", "date": "2025-01-01",
        })
        assert total_amount(records + [imported]) == Decimal("15.25")

    def test_empty(self):
        assert total_amount([]) == Decimal("0.00")


class TestTopCategory:
    """Tests for the most frequent category."""

    def test_most_frequent_wins(self):
        items = [record(1, "Food"), record(1, "Rent"), record(1, "Rent")]
        assert top_category(items) == "Rent"

    def test_tie_goes_to_first_seen(self):
        items = [record(1, "Transport"), record(1, "Food"), record(1, "Food"), record(1, "Transport")]
        assert top_category(items) == "Transport"

    def test_empty(self):
        assert top_category([]) == NO_CATEGORY


class TestCapStatus:
    """Tests for spending cap text."""

    def test_disabled_when_not_positive(self):
        assert cap_status(Decimal("10"), 0) == ("", False)
        assert cap_status(Decimal("10"), -5) == ("", False)

    def test_remaining(self):
        assert cap_status(Decimal("15.25"), 20) == ("Remaining: $4.75", False)

    def test_exactly_at_cap(self):
        assert cap_status(Decimal("20.00"), 20) == ("Remaining: $0.00", False)

    def test_over_cap(self):
        assert cap_status(Decimal("15.25"), 10) == ("Over cap by $5.25", True)

    def test_currency_symbol(self):
        assert cap_status(Decimal("1"), 2, "€") == ("Remaining: €1.00", False)


class TestSummarize:
    """Tests for the combined summary."""

    def test_summary(self, records):
        summary = summarize(records, cap=10)
        assert summary.total_count == 2
        assert summary.total_amount == Decimal("15.25")
        assert summary.top_category == "Food"
        assert summary.cap_status == "Over cap by $5.25"
        assert summary.over_cap is True

    def test_summary_without_cap(self, records):
        summary = summarize(records)
        assert summary.cap_status == ""
        assert summary.over_cap is False


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
