"""Shared statistical folds used by the analytics services.

Each helper is a pure function over plain floats or records so the
individual passes can be tested in isolation.
"""

import math
from collections import defaultdict
from dataclasses import dataclass
from datetime import datetime, timedelta
from statistics import fmean, pstdev

from foresight.models.transaction import TransactionType
from foresight.schemas.analytics import Trend
from foresight.schemas.records import TransactionRecord

SECONDS_PER_DAY = 86400

# Ceiling for a trend change measured against a zero first-half average.
ZERO_BASELINE_TREND_PCT = 100.0


@dataclass(frozen=True)
class CategorySeries:
    """Chronologically ordered amounts and dates of one category."""

    category: str
    amounts: tuple[float, ...]
    dates: tuple[datetime, ...]

    @property
    def count(self) -> int:
        return len(self.amounts)

    @property
    def total(self) -> float:
        return math.fsum(self.amounts)


def mean(values) -> float:
    """Arithmetic mean; 0.0 for an empty sequence."""
    values = list(values)
    if not values:
        return 0.0
    return fmean(values)


def population_stdev(values) -> float:
    """Population standard deviation; 0.0 for an empty sequence."""
    values = list(values)
    if not values:
        return 0.0
    return pstdev(values)


def coefficient_of_variation(values) -> float:
    """Population standard deviation divided by the mean.

    Returns infinity when the mean is zero: no regularity can be claimed.
    """
    values = list(values)
    if not values:
        return math.inf
    avg = fmean(values)
    if avg == 0:
        return math.inf
    return pstdev(values) / avg


def half_split_change(amounts) -> float:
    """Percent change of the second-half mean over the first-half mean.

    The split is at n // 2, so a single sample has an empty first half and
    reports no change.
    """
    amounts = list(amounts)
    midpoint = len(amounts) // 2
    first, second = amounts[:midpoint], amounts[midpoint:]
    if not first or not second:
        return 0.0
    first_avg = fmean(first)
    second_avg = fmean(second)
    if first_avg == 0:
        return ZERO_BASELINE_TREND_PCT if second_avg > 0 else 0.0
    return (second_avg - first_avg) / first_avg * 100


def classify_trend(percent_change: float, threshold_pct: float) -> Trend:
    if percent_change > threshold_pct:
        return Trend.increasing
    if percent_change < -threshold_pct:
        return Trend.decreasing
    return Trend.stable


def group_by_category(transactions: list[TransactionRecord]) -> list[CategorySeries]:
    """Group records by exact category name, each series sorted by date.

    Series are returned in category-name order so downstream output does not
    depend on input order.
    """
    grouped: dict[str, list[TransactionRecord]] = defaultdict(list)
    for txn in transactions:
        grouped[txn.category].append(txn)

    series = []
    for category in sorted(grouped):
        txns = sorted(grouped[category], key=lambda t: t.date)
        series.append(CategorySeries(
            category=category,
            amounts=tuple(t.value for t in txns),
            dates=tuple(t.date for t in txns),
        ))
    return series


def day_span(dates) -> float:
    """Days between the earliest and latest date, never less than one."""
    dates = list(dates)
    if not dates:
        return 0.0
    return max(1.0, (max(dates) - min(dates)).total_seconds() / SECONDS_PER_DAY)


def filter_window(
    transactions: list[TransactionRecord],
    start: datetime,
    end: datetime,
    *,
    txn_type: TransactionType | None = None,
    include_end: bool = True,
) -> list[TransactionRecord]:
    """Records dated in [start, end] (or [start, end) when include_end is False)."""
    result = []
    for txn in transactions:
        if txn_type is not None and txn.type != txn_type:
            continue
        if txn.date < start:
            continue
        if txn.date > end or (not include_end and txn.date == end):
            continue
        result.append(txn)
    return result


def window_total(
    transactions: list[TransactionRecord],
    start: datetime,
    end: datetime,
    txn_type: TransactionType,
    *,
    include_end: bool = True,
) -> float:
    return math.fsum(
        t.value for t in filter_window(
            transactions, start, end, txn_type=txn_type, include_end=include_end,
        )
    )


def trailing_totals(
    transactions: list[TransactionRecord],
    now: datetime,
    days: int,
) -> tuple[float, float]:
    """(income, expense) totals over the trailing `days` ending at now."""
    start = now - timedelta(days=days)
    income = window_total(transactions, start, now, TransactionType.income)
    expense = window_total(transactions, start, now, TransactionType.expense)
    return income, expense


def expenses_only(transactions: list[TransactionRecord]) -> list[TransactionRecord]:
    return [t for t in transactions if t.type == TransactionType.expense]
