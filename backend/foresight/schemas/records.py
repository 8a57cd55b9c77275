"""Boundary records: strict, immutable input shapes for the analytics engine.

History arrives from the ledger as loosely typed rows (decimal strings, naive
timestamps, blank categories). It is validated here exactly once; the engine
services only ever see these records.
"""

from datetime import datetime, timezone
from decimal import Decimal, InvalidOperation

from pydantic import BaseModel, ConfigDict, field_validator

from foresight.models.goal import GoalStatus
from foresight.models.transaction import TransactionType

UNCATEGORIZED = "Uncategorized"


def parse_amount(value) -> Decimal:
    """Parse a decimal-string amount; anything unparseable becomes zero.

    Signs are dropped: direction is carried by the transaction type.
    """
    if value is None or isinstance(value, bool):
        return Decimal("0")
    try:
        amount = Decimal(str(value).strip())
    except (InvalidOperation, ValueError):
        return Decimal("0")
    if not amount.is_finite():
        return Decimal("0")
    return abs(amount)


def ensure_utc(dt: datetime) -> datetime:
    """Naive datetimes are read as UTC."""
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt


class TransactionRecord(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    user_id: str
    amount: Decimal
    type: TransactionType
    category: str = UNCATEGORIZED
    date: datetime
    description: str | None = None

    @field_validator("id", "user_id", mode="before")
    @classmethod
    def _stringify_id(cls, v):
        return str(v) if v is not None else v

    @field_validator("amount", mode="before")
    @classmethod
    def _parse_amount(cls, v) -> Decimal:
        return parse_amount(v)

    @field_validator("category", mode="before")
    @classmethod
    def _default_category(cls, v) -> str:
        if v is None or not str(v).strip():
            return UNCATEGORIZED
        return str(v)

    @field_validator("date")
    @classmethod
    def _date_utc(cls, v: datetime) -> datetime:
        return ensure_utc(v)

    @property
    def value(self) -> float:
        return float(self.amount)


class GoalRecord(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    user_id: str
    title: str
    target_amount: Decimal
    current_amount: Decimal = Decimal("0")
    target_date: datetime
    status: GoalStatus = GoalStatus.active

    @field_validator("id", "user_id", mode="before")
    @classmethod
    def _stringify_id(cls, v):
        return str(v) if v is not None else v

    @field_validator("target_amount", "current_amount", mode="before")
    @classmethod
    def _parse_amount(cls, v) -> Decimal:
        return parse_amount(v)

    @field_validator("target_date")
    @classmethod
    def _date_utc(cls, v: datetime) -> datetime:
        return ensure_utc(v)


class StatsSnapshot(BaseModel):
    """Coarse per-user aggregate; total_savings seeds the cash-flow projection."""

    model_config = ConfigDict(frozen=True)

    total_savings: Decimal = Decimal("0")

    @field_validator("total_savings", mode="before")
    @classmethod
    def _parse_total(cls, v) -> Decimal:
        if v is None:
            return Decimal("0")
        try:
            total = Decimal(str(v).strip())
        except (InvalidOperation, ValueError):
            return Decimal("0")
        return total if total.is_finite() else Decimal("0")
