"""Configuration package."""

from ledger.config.settings import (
    LedgerSettings,
    get_settings,
    validate_settings,
)

__all__ = [
    "LedgerSettings",
    "get_settings",
    "validate_settings",
]
