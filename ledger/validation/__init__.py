"""Transaction validation package."""

from ledger.validation.validator import (
    DUPLICATE_WORDS,
    FIELDS,
    MESSAGES,
    PATTERNS,
    description_warnings,
    find_duplicate_words,
    is_valid,
    normalize_draft,
    validate,
)

__all__ = [
    "DUPLICATE_WORDS",
    "FIELDS",
    "MESSAGES",
    "PATTERNS",
    "description_warnings",
    "find_duplicate_words",
    "is_valid",
    "normalize_draft",
    "validate",
]
