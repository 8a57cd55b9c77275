"""Boundary record tests: amount parsing, category defaults, timezone handling."""

from datetime import datetime, timezone
from decimal import Decimal

import pytest
from pydantic import ValidationError

from foresight.models.goal import GoalStatus
from foresight.models.transaction import TransactionType
from foresight.schemas.records import (
    UNCATEGORIZED,
    GoalRecord,
    StatsSnapshot,
    TransactionRecord,
    parse_amount,
)


def _raw_txn(**overrides) -> dict:
    raw = {
        "id": "t1",
        "user_id": "u1",
        "amount": "42.50",
        "type": "expense",
        "category": "Food",
        "date": "2026-03-01T10:00:00+00:00",
    }
    raw.update(overrides)
    return raw


@pytest.mark.parametrize("raw, expected", [
    ("42.50", Decimal("42.50")),
    ("  19.99 ", Decimal("19.99")),
    (12.5, Decimal("12.5")),
    (7, Decimal("7")),
    ("-25.00", Decimal("25.00")),
    ("abc", Decimal("0")),
    ("", Decimal("0")),
    (None, Decimal("0")),
    ("NaN", Decimal("0")),
    ("Infinity", Decimal("0")),
])
def test_parse_amount(raw, expected):
    assert parse_amount(raw) == expected


def test_malformed_amount_becomes_zero():
    record = TransactionRecord.model_validate(_raw_txn(amount="12,34.x"))
    assert record.amount == Decimal("0")
    assert record.value == 0.0


def test_blank_category_defaults():
    assert TransactionRecord.model_validate(_raw_txn(category="   ")).category == UNCATEGORIZED
    assert TransactionRecord.model_validate(_raw_txn(category=None)).category == UNCATEGORIZED
    raw = _raw_txn()
    del raw["category"]
    assert TransactionRecord.model_validate(raw).category == UNCATEGORIZED


def test_category_case_preserved():
    record = TransactionRecord.model_validate(_raw_txn(category="food"))
    assert record.category == "food"


def test_naive_date_read_as_utc():
    record = TransactionRecord.model_validate(_raw_txn(date=datetime(2026, 3, 1, 9, 30)))
    assert record.date.tzinfo == timezone.utc
    assert record.date.hour == 9


def test_type_is_validated():
    assert TransactionRecord.model_validate(_raw_txn(type="income")).type == TransactionType.income
    with pytest.raises(ValidationError):
        TransactionRecord.model_validate(_raw_txn(type="refund"))


def test_records_are_immutable():
    record = TransactionRecord.model_validate(_raw_txn())
    with pytest.raises(ValidationError):
        record.amount = Decimal("1")


def test_numeric_ids_are_stringified():
    record = TransactionRecord.model_validate(_raw_txn(id=17, user_id=3))
    assert record.id == "17"
    assert record.user_id == "3"


def test_goal_record_parsing():
    goal = GoalRecord.model_validate({
        "id": "g1",
        "user_id": "u1",
        "title": "Vacation",
        "target_amount": "3000.00",
        "current_amount": "oops",
        "target_date": "2026-09-01T00:00:00",
        "status": "paused",
    })
    assert goal.target_amount == Decimal("3000.00")
    assert goal.current_amount == Decimal("0")
    assert goal.status == GoalStatus.paused
    assert goal.target_date.tzinfo == timezone.utc


def test_stats_snapshot_keeps_sign():
    assert StatsSnapshot(total_savings="-150.25").total_savings == Decimal("-150.25")
    assert StatsSnapshot(total_savings="garbage").total_savings == Decimal("0")
    assert StatsSnapshot().total_savings == Decimal("0")
