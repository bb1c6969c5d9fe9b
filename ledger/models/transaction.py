"""
Core Data Models for the Finance Ledger

These models define the shape of every transaction flowing through the system.
They are designed to:
1. Keep the persisted JSON identical to what the browser version wrote
2. Carry raw form input separately from saved records
3. Be serializable for storage, export and logging

DESIGN DECISION: Saved records use camelCase aliases (createdAt, updatedAt)
so that files exported by earlier versions import without conversion.
"""

import math
import secrets
import string
from datetime import datetime, timezone
from decimal import Decimal
from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field


_BASE36 = string.digits + string.ascii_lowercase


# =============================================================================
# ENUMS
# =============================================================================

class ImportPolicy(str, Enum):
    """
    How strictly imported records are checked.

    LAX: structural presence only (id, description, category, date truthy,
         amount not null). Records are appended as-is.
    STRICT: additionally every record must pass the field validators.
    """
    LAX = "lax"
    STRICT = "strict"


# =============================================================================
# HELPERS
# =============================================================================

def _to_base36(value: int) -> str:
    if value == 0:
        return "0"
    digits = []
    while value:
        value, rem = divmod(value, 36)
        digits.append(_BASE36[rem])
    return "".join(reversed(digits))


def generate_record_id() -> str:
    """
    Create a new transaction id.

    Format: ``txn_`` + base-36 epoch milliseconds + 4 random base-36 chars.
    """
    millis = int(datetime.now(timezone.utc).timestamp() * 1000)
    suffix = "".join(secrets.choice(_BASE36) for _ in range(4))
    return f"txn_{_to_base36(millis)}{suffix}"


def utc_timestamp() -> str:
    """ISO-8601 UTC timestamp with millisecond precision, e.g. 2025-01-31T12:00:00.000Z"""
    now = datetime.now(timezone.utc)
    return now.strftime("%Y-%m-%dT%H:%M:%S.") + f"{now.microsecond // 1000:03d}Z"


def format_amount(amount: Any) -> str:
    """
    Render an amount as a plain decimal string.

    Integral floats lose their fractional part (12.0 -> "12"), other floats
    use the shortest round-tripping form (12.5 -> "12.5"). Anything else
    (possible after a lax import) is rendered with str().
    """
    if isinstance(amount, bool):
        return "true" if amount else "false"
    if isinstance(amount, float):
        if amount.is_integer():
            return str(int(amount))
        return repr(amount)
    if amount is None:
        return ""
    return str(amount)


# =============================================================================
# TRANSACTION MODELS
# =============================================================================

class TransactionDraft(BaseModel):
    """
    Raw form input for a transaction.

    CRITICAL: This is UNVERIFIED data. Every field is an optional string
    because it comes straight from a text input. It must pass the validator
    before a TransactionRecord is built from it.
    """
    model_config = ConfigDict(extra="ignore")

    description: Optional[str] = None
    amount: Optional[str] = None
    category: Optional[str] = None
    date: Optional[str] = None


class TransactionRecord(BaseModel):
    """
    A saved transaction.

    Records are created by the add flow, changed by the edit flow and
    removed by an explicitly confirmed delete. Imported records may carry
    extra keys; they are kept and written back unchanged.
    """
    model_config = ConfigDict(
        extra="allow",
        populate_by_name=True,
    )

    id: str = Field(
        default_factory=generate_record_id,
        description="Opaque unique id, immutable"
    )
    description: str = Field(
        ...,
        description="What the money was spent on"
    )
    amount: float = Field(
        ...,
        ge=0,
        description="Non-negative amount, at most 2 decimals"
    )
    category: str = Field(
        ...,
        description="Letters, single spaces or hyphens"
    )
    date: str = Field(
        ...,
        description="Transaction date as YYYY-MM-DD"
    )
    created_at: Optional[str] = Field(
        default_factory=utc_timestamp,
        alias="createdAt",
    )
    updated_at: Optional[str] = Field(
        default_factory=utc_timestamp,
        alias="updatedAt",
    )

    @property
    def amount_text(self) -> str:
        """Amount as searched and displayed."""
        return format_amount(self.amount)

    def to_json_dict(self) -> dict:
        """
        Convert to the persisted JSON shape.

        Serializer warnings are silenced because lax imports may hold
        values whose type differs from the declared one. A non-finite
        amount (Infinity/NaN in an imported file) is written as null.
        """
        data = self.model_dump(mode="json", by_alias=True, warnings=False)
        amount = data.get("amount")
        if isinstance(amount, float) and not math.isfinite(amount):
            data["amount"] = None
        return data

    @classmethod
    def from_raw(cls, raw: dict) -> "TransactionRecord":
        """
        Build a record from a stored or imported JSON object WITHOUT validation.

        The values are kept exactly as they appear in the JSON. Missing
        text fields become empty strings and a missing amount becomes 0.
        """
        values = dict(raw)
        if "createdAt" in values:
            values["created_at"] = values.pop("createdAt")
        if "updatedAt" in values:
            values["updated_at"] = values.pop("updatedAt")
        for name in ("description", "category", "date"):
            values.setdefault(name, "")
        values.setdefault("amount", 0)
        values.setdefault("created_at", None)
        values.setdefault("updated_at", None)
        return cls.model_construct(**values)


# =============================================================================
# VALIDATION MODELS
# =============================================================================

class ValidationIssue(BaseModel):
    """A single non-blocking finding about a draft."""

    field: str = Field(
        ...,
        description="Field with the issue"
    )
    issue_type: str = Field(
        ...,
        description="Type of issue (e.g., 'duplicate_word')"
    )
    message: str = Field(
        ...,
        description="Human-readable description of the issue"
    )
    severity: str = Field(
        default="warning",
        pattern="^(error|warning|info)$",
        description="Issue severity"
    )


class FlowResult(BaseModel):
    """
    Outcome of an add or edit.

    errors maps field name to message and blocks the change.
    warnings never block.
    """

    ok: bool
    record: Optional[TransactionRecord] = None
    errors: dict[str, str] = Field(default_factory=dict)
    warnings: list[ValidationIssue] = Field(default_factory=list)


# =============================================================================
# IMPORT / SEARCH / DASHBOARD MODELS
# =============================================================================

class ImportResult(BaseModel):
    """Result of parsing an import file."""

    policy: ImportPolicy
    accepted: list[TransactionRecord] = Field(default_factory=list)
    skipped: int = Field(
        default=0,
        ge=0,
        description="Elements that failed the policy checks"
    )

    @property
    def accepted_count(self) -> int:
        return len(self.accepted)


class HighlightedRecord(BaseModel):
    """
    A record prepared for display.

    All markup fields are HTML-escaped; matched spans are wrapped in <mark>.
    """

    record: TransactionRecord
    description_html: str
    category_html: str
    amount_html: str
    date_html: str
    highlight_count: int = Field(default=0, ge=0)


class DashboardSummary(BaseModel):
    """Aggregates shown on the dashboard."""

    total_count: int = Field(ge=0)
    total_amount: Decimal
    top_category: str
    cap: float = 0.0
    cap_status: str = ""
    over_cap: bool = False
