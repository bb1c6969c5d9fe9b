"""
Field Validation for Transactions

DESIGN DECISION: Validation is a set of independent regex checks, one per
field. Each check either passes or contributes exactly one message keyed
by the field name, so the form can show the message next to its input.

BLOCKING vs NON-BLOCKING:
- validate() returns blocking errors. A draft with any error is not saved.
- description_warnings() returns quality hints (repeated words). These are
  shown to the user but never stop a save.

IMPORTANT: Validation NEVER modifies its input. Normalisation (trimming,
collapsing spaces) is a separate, explicit step done by the caller.
"""

import math
import re
from collections.abc import Mapping
from typing import Any, Optional, Union

from ledger.models.transaction import TransactionDraft, ValidationIssue


# Applied with fullmatch; "$" alone would accept a trailing newline.
# re.ASCII keeps \d to 0-9 (Arabic-Indic and other digits are rejected).
PATTERNS = {
    "description": re.compile(r"\S(?:.*\S)?", re.DOTALL),
    "amount": re.compile(r"(0|[1-9]\d*)(\.\d{1,2})?", re.ASCII),
    "date": re.compile(r"\d{4}-(0[1-9]|1[0-2])-(0[1-9]|[12]\d|3[01])", re.ASCII),
    "category": re.compile(r"[A-Za-z]+(?:[ -][A-Za-z]+)*"),
}

MESSAGES = {
    "description": "No leading/trailing spaces allowed.",
    "amount": "Amount must be integer or up to 2 decimals.",
    "date": "Date must be YYYY-MM-DD.",
    "category": "Letters, spaces and hyphens only.",
}

FIELDS = ("description", "amount", "date", "category")

DUPLICATE_WORDS = re.compile(r"\b(\w+)\s+\1\b", re.IGNORECASE)

_MULTI_SPACE = re.compile(r"\s{2,}")


Candidate = Union[TransactionDraft, Mapping[str, Any]]


def _field_value(candidate: Candidate, field: str) -> Any:
    if isinstance(candidate, Mapping):
        return candidate.get(field)
    return getattr(candidate, field, None)


def _as_text(value: Any) -> str:
    """None and other falsy values become "" (a zero number stays "0")."""
    if value is None or isinstance(value, bool):
        return ""
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def validate(candidate: Candidate) -> dict[str, str]:
    """
    Check every field of a candidate transaction.

    Args:
        candidate: TransactionDraft or any mapping with description,
                   amount, category and date. Fields may be missing.

    Returns:
        {field: message} for each failing field; empty when all pass.
    """
    errors = {}
    for field in FIELDS:
        value = _field_value(candidate, field)
        # Non-string descriptions, categories and dates never match
        if field != "amount" and value is not None and not isinstance(value, str):
            errors[field] = MESSAGES[field]
            continue
        text = _as_text(value)
        if not PATTERNS[field].fullmatch(text):
            errors[field] = MESSAGES[field]
        elif field == "amount" and not math.isfinite(float(text)):
            # Hundreds of digits overflow to inf, which JSON cannot carry
            errors[field] = MESSAGES[field]
    return errors


def is_valid(candidate: Candidate) -> bool:
    return not validate(candidate)


def find_duplicate_words(text: Optional[str]) -> Optional[str]:
    """Return the first word repeated back to back (case-insensitive), if any."""
    if not text:
        return None
    match = DUPLICATE_WORDS.search(text)
    return match.group(1) if match else None


def description_warnings(candidate: Candidate) -> list[ValidationIssue]:
    """
    Non-blocking quality checks for the description.

    Currently only flags consecutive duplicate words ("the the").
    """
    description = _field_value(candidate, "description")
    if not isinstance(description, str):
        return []

    word = find_duplicate_words(description)
    if word is None:
        return []
    return [
        ValidationIssue(
            field="description",
            issue_type="duplicate_word",
            message=f'The word "{word}" appears twice in a row.',
            severity="warning",
        )
    ]


def normalize_draft(draft: TransactionDraft) -> TransactionDraft:
    """
    Clean up form input before validation.

    - description: trimmed, runs of 2+ whitespace collapsed to one space
    - category: trimmed
    - amount, date: unchanged

    Returns a new draft; the input is not modified.
    """
    description = draft.description
    if description is not None:
        description = _MULTI_SPACE.sub(" ", description.strip())
    category = draft.category.strip() if draft.category is not None else None
    return draft.model_copy(update={"description": description, "category": category})
