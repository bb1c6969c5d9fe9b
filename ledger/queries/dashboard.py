"""
Dashboard Aggregation

DESIGN DECISION: Aggregates are computed from the full collection on
every render. The ledger is personal-sized, so there is no caching or
incremental bookkeeping to get out of sync.

Amounts are summed as Decimal to avoid float drift in the total.
Records with a non-numeric amount (only possible after a lax import)
contribute zero.
"""

from collections.abc import Iterable
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Any

from ledger.models.transaction import DashboardSummary, TransactionRecord


NO_CATEGORY = "—"
_CENTS = Decimal("0.01")


def _amount_to_decimal(amount: Any) -> Decimal:
    if amount is None or isinstance(amount, bool):
        return Decimal("0")
    try:
        value = Decimal(str(amount).strip())
    except InvalidOperation:
        return Decimal("0")
    if not value.is_finite():
        return Decimal("0")
    return value


def total_amount(records: Iterable[TransactionRecord]) -> Decimal:
    """Sum of all amounts, rounded to cents."""
    total = sum((_amount_to_decimal(r.amount) for r in records), Decimal("0"))
    return total.quantize(_CENTS, rounding=ROUND_HALF_UP)


def top_category(records: Iterable[TransactionRecord]) -> str:
    """
    Most frequent category.

    Ties go to the category seen first. Empty collection -> NO_CATEGORY.
    """
    counts: dict[str, int] = {}
    for record in records:
        key = str(record.category)
        counts[key] = counts.get(key, 0) + 1

    if not counts:
        return NO_CATEGORY
    # max() keeps the first of equal maxima, and dicts keep insertion order
    return max(counts.items(), key=lambda item: item[1])[0]


def cap_status(total: Decimal, cap: float, currency_symbol: str = "$") -> tuple[str, bool]:
    """
    Describe spending against a cap.

    Returns:
        (status_text, over_cap). Empty text when cap is not positive.
    """
    if not cap or cap <= 0:
        return "", False

    remaining = Decimal(str(cap)) - total
    if remaining >= 0:
        shown = remaining.quantize(_CENTS, rounding=ROUND_HALF_UP)
        return f"Remaining: {currency_symbol}{shown:.2f}", False
    shown = (-remaining).quantize(_CENTS, rounding=ROUND_HALF_UP)
    return f"Over cap by {currency_symbol}{shown:.2f}", True


def summarize(
    records: Iterable[TransactionRecord],
    cap: float = 0.0,
    currency_symbol: str = "$",
) -> DashboardSummary:
    """Compute every dashboard figure in one pass over a snapshot."""
    snapshot = list(records)
    total = total_amount(snapshot)
    status, over = cap_status(total, cap, currency_symbol)

    return DashboardSummary(
        total_count=len(snapshot),
        total_amount=total,
        top_category=top_category(snapshot),
        cap=cap or 0.0,
        cap_status=status,
        over_cap=over,
    )
