"""Shared statistics helpers."""

import math
from datetime import timedelta

import pytest

from foresight.models.transaction import TransactionType
from foresight.schemas.analytics import Trend
from foresight.services import stats
from tests.factories import NOW, income, txn


def test_mean_and_stdev_empty():
    assert stats.mean([]) == 0.0
    assert stats.population_stdev([]) == 0.0


def test_coefficient_of_variation():
    assert stats.coefficient_of_variation([10, 10, 10]) == 0.0
    assert stats.coefficient_of_variation([50, 150]) == pytest.approx(0.5)
    assert stats.coefficient_of_variation([0, 0]) == math.inf
    assert stats.coefficient_of_variation([]) == math.inf


@pytest.mark.parametrize("amounts, expected", [
    ([100], 0.0),
    ([100, 150], 50.0),
    ([100, 100, 150, 150], 50.0),
    ([100, 100, 50, 50], -50.0),
    ([100, 90, 110], 0.0),
    ([0, 0, 40], 100.0),
    ([0, 0], 0.0),
])
def test_half_split_change(amounts, expected):
    assert stats.half_split_change(amounts) == pytest.approx(expected)


def test_classify_trend_band():
    assert stats.classify_trend(10.1, 10) == Trend.increasing
    assert stats.classify_trend(10.0, 10) == Trend.stable
    assert stats.classify_trend(-10.0, 10) == Trend.stable
    assert stats.classify_trend(-10.1, 10) == Trend.decreasing


def test_group_by_category_is_exact_and_chronological():
    records = [
        txn(30, 1, category="Food"),
        txn(10, 5, category="Food"),
        txn(99, 2, category="food"),
        txn(20, 3, category="Food"),
    ]
    series = stats.group_by_category(records)

    assert [s.category for s in series] == ["Food", "food"]
    food = series[0]
    assert food.amounts == (10.0, 20.0, 30.0)
    assert list(food.dates) == sorted(food.dates)
    assert food.total == 60.0


def test_day_span_floor():
    assert stats.day_span([]) == 0.0
    assert stats.day_span([NOW, NOW]) == 1.0
    assert stats.day_span([NOW, NOW - timedelta(days=14)]) == 14.0


def test_filter_window_bounds():
    inside = txn(10, 3)
    edge = txn(20, 7)
    outside = txn(30, 8)
    future = txn(40, -1)
    start = NOW - timedelta(days=7)

    result = stats.filter_window([inside, edge, outside, future], start, NOW)
    assert result == [inside, edge]

    half_open = stats.filter_window([inside, edge], NOW - timedelta(days=10), start, include_end=False)
    assert half_open == []


def test_trailing_totals():
    records = [income(1000, 5), txn(200, 2), txn(50, 40), income(999, 31)]
    assert stats.trailing_totals(records, NOW, 30) == (1000.0, 200.0)
    assert stats.window_total(records, NOW - timedelta(days=30), NOW, TransactionType.expense) == 200.0
