"""
Configuration Management for the Finance Ledger

Uses pydantic-settings for type-safe configuration from environment variables.

DESIGN DECISION: All configuration is centralized here.
Every knob the ledger has (where data lives, how imports are checked,
the spending cap) is visible in one place and validated at startup.
"""

import os
from functools import lru_cache
from pathlib import Path

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from ledger.models.transaction import ImportPolicy


class LedgerSettings(BaseSettings):
    """
    Main application settings.

    Loads configuration from LEDGER_* environment variables and .env file.
    """

    model_config = SettingsConfigDict(
        env_prefix="LEDGER_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    # Environment
    debug_mode: bool = Field(
        default=False,
        description="Enable debug logging"
    )

    # Storage
    data_file: Path = Field(
        default=Path("finance_data.json"),
        description="Local file backing the key-value store"
    )
    storage_key: str = Field(
        default="finance:records_v1",
        min_length=1,
        description="Key under which the record array is stored"
    )

    # Import / export
    export_filename: str = Field(
        default="finance_records.json",
        description="File name used when exporting records"
    )
    import_policy: ImportPolicy = Field(
        default=ImportPolicy.LAX,
        description="lax = structural checks only, strict = run field validators too"
    )

    # Search
    case_insensitive_search: bool = Field(
        default=True,
        description="Initial state of the case-insensitive search toggle"
    )

    # Dashboard
    spending_cap: float = Field(
        default=0.0,
        ge=0.0,
        description="Spending cap; 0 disables the cap status"
    )
    currency_symbol: str = Field(
        default="$",
        max_length=5,
        description="Symbol shown before amounts"
    )

    # Validation
    warn_duplicate_words: bool = Field(
        default=True,
        description="Report repeated words in descriptions as warnings"
    )

    @field_validator('export_filename')
    @classmethod
    def validate_export_filename(cls, v: str) -> str:
        """Export name must be a bare file name."""
        if not v or Path(v).name != v:
            raise ValueError(f"export_filename must be a plain file name, got {v!r}")
        return v


@lru_cache()
def get_settings() -> LedgerSettings:
    """
    Get application settings (cached).

    Uses LRU cache to ensure settings are only loaded once.
    Call get_settings.cache_clear() to reload if needed.
    """
    return LedgerSettings()


def validate_settings() -> dict[str, bool]:
    """
    Validate settings are properly configured.

    Returns a dict of {check_name: is_valid}, plus *_error entries.
    Useful for the settings page.
    """
    results = {}

    try:
        settings = get_settings()
        results["settings"] = True
    except Exception as e:
        results["settings"] = False
        results["settings_error"] = str(e)
        return results

    directory = settings.data_file.resolve().parent
    if directory.exists() and os.access(directory, os.W_OK):
        results["data_dir"] = True
    else:
        results["data_dir"] = False
        results["data_dir_error"] = f"Directory not writable: {directory}"

    return results
