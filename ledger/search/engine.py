"""
Search Engine

Filters the record collection by a user pattern and prepares highlighted
markup for display.

GUARANTEES:
- Results are newest first (reverse insertion order)
- A record matches when its description, category OR amount text matches
- An empty or invalid pattern shows everything, escaped, with no highlights
- All markup is HTML-escaped
"""

from collections.abc import Iterable
from typing import Optional

from ledger.models.transaction import HighlightedRecord, TransactionRecord, format_amount
from ledger.search.matcher import CompileResult, compile_pattern, escape_html, highlight_html


SEARCH_FIELDS = ("description", "category", "amount")


def _field_text(record: TransactionRecord, field: str) -> str:
    if field == "amount":
        return format_amount(record.amount)
    value = getattr(record, field, "")
    return "" if value is None else str(value)


def record_matches(record: TransactionRecord, compiled: CompileResult) -> bool:
    """True if any searchable field has at least one match."""
    if not compiled.active:
        return True
    return any(
        compiled.matcher.search(_field_text(record, field)) is not None
        for field in SEARCH_FIELDS
    )


def render_record(record: TransactionRecord, compiled: CompileResult) -> HighlightedRecord:
    """Build escaped, highlighted markup for one record. The date is never highlighted."""
    matcher = compiled.matcher
    description_html, d_count = highlight_html(_field_text(record, "description"), matcher)
    category_html, c_count = highlight_html(_field_text(record, "category"), matcher)
    amount_html, a_count = highlight_html(_field_text(record, "amount"), matcher)

    return HighlightedRecord(
        record=record,
        description_html=description_html,
        category_html=category_html,
        amount_html=amount_html,
        date_html=escape_html(record.date),
        highlight_count=d_count + c_count + a_count,
    )


def search_records(
    records: Iterable[TransactionRecord],
    pattern: Optional[str],
    case_insensitive: bool = True,
) -> list[HighlightedRecord]:
    """
    Filter and highlight records.

    Args:
        records: Full collection in insertion order
        pattern: Raw pattern from the search box (may be invalid)
        case_insensitive: State of the case toggle

    Returns:
        Matching records, newest first, with highlighted markup
    """
    compiled = compile_pattern(pattern, case_insensitive)
    newest_first = list(records)[::-1]
    return [
        render_record(record, compiled)
        for record in newest_first
        if record_matches(record, compiled)
    ]
