"""Search and highlight package."""

from ledger.search.engine import record_matches, render_record, search_records
from ledger.search.matcher import (
    CompileResult,
    compile_pattern,
    escape_html,
    highlight_html,
)

__all__ = [
    "CompileResult",
    "compile_pattern",
    "escape_html",
    "highlight_html",
    "record_matches",
    "render_record",
    "search_records",
]
