"""Dashboard query package."""

from ledger.queries.dashboard import (
    NO_CATEGORY,
    cap_status,
    summarize,
    top_category,
    total_amount,
)

__all__ = ["NO_CATEGORY", "cap_status", "summarize", "top_category", "total_amount"]
