"""Spending pattern analysis: category statistics, recurring expenses,
behavioral profile, unusual transactions and recommendations.

Detection logic for recurring expenses:
1. Group expenses by category (exact match)
2. Sort chronologically and measure day intervals between occurrences
3. Accept the category when the interval coefficient of variation is < 0.3

Below the minimum sample size the analysis returns an empty result with a
single generic recommendation instead of degenerate statistics.
"""

import math
from collections import defaultdict
from datetime import timedelta

from foresight.config import Settings, settings
from foresight.schemas.analytics import (
    CategoryStats,
    ImpulsiveBuying,
    MonthlyPattern,
    RecurringExpense,
    RecurringFrequency,
    SpendingBehavior,
    SpendingFrequency,
    SpendingInsights,
    TimeOfDayPattern,
    TopCategory,
    Trend,
    UnusualTransaction,
    WeekendSpending,
)
from foresight.schemas.records import TransactionRecord
from foresight.services import stats

NO_DATA_RECOMMENDATION = "Start tracking expenses to get personalized insights"
BALANCED_RECOMMENDATION = (
    "Your spending patterns look balanced. Keep tracking to maintain healthy financial habits."
)


def _percentage(part: float, whole: float) -> float:
    return part / whole * 100 if whole > 0 else 0.0


def determine_frequency(count: int, span_days: float) -> SpendingFrequency:
    """Coarse frequency label from transactions per day of span."""
    per_day = count / max(1.0, span_days)
    if per_day >= 0.8:
        return SpendingFrequency.daily
    if per_day >= 0.2:
        return SpendingFrequency.weekly
    if per_day >= 0.05:
        return SpendingFrequency.monthly
    return SpendingFrequency.occasional


# --- Category breakdown ---

def categorize_spending(
    expenses: list[TransactionRecord],
    config: Settings = settings,
) -> list[CategoryStats]:
    """Per-category totals, averages, share, trend and frequency."""
    total_spending = math.fsum(t.value for t in expenses)
    patterns = []

    for series in stats.group_by_category(expenses):
        total = series.total
        patterns.append(CategoryStats(
            category=series.category,
            total_amount=round(total, 2),
            average_amount=round(total / series.count, 2),
            transaction_count=series.count,
            percentage=round(_percentage(total, total_spending), 1),
            trend=stats.classify_trend(
                stats.half_split_change(series.amounts), config.trend_threshold_pct,
            ),
            frequency=determine_frequency(series.count, stats.day_span(series.dates)),
        ))

    return sorted(patterns, key=lambda p: (-p.total_amount, p.category))


def top_categories(patterns: list[CategoryStats], config: Settings = settings) -> list[TopCategory]:
    return [
        TopCategory(category=p.category, amount=p.total_amount, percentage=p.percentage)
        for p in patterns[:config.max_top_categories]
    ]


# --- Recurring expenses ---

def _recurring_frequency(avg_interval: float, config: Settings) -> RecurringFrequency:
    if avg_interval < config.recurring_weekly_max_interval_days:
        return RecurringFrequency.weekly
    if avg_interval > config.recurring_quarterly_min_interval_days:
        return RecurringFrequency.quarterly
    return RecurringFrequency.monthly


def detect_recurring_expenses(
    expenses: list[TransactionRecord],
    config: Settings = settings,
) -> list[RecurringExpense]:
    """Categories whose timing is regular enough to predict the next occurrence."""
    recurring = []

    for series in stats.group_by_category(expenses):
        if series.count < config.recurring_min_occurrences:
            continue

        intervals = [
            (series.dates[i] - series.dates[i - 1]).total_seconds() / stats.SECONDS_PER_DAY
            for i in range(1, series.count)
        ]
        avg_interval = stats.mean(intervals)
        if avg_interval <= 0:
            continue

        cv = stats.coefficient_of_variation(intervals)
        if cv >= config.recurring_max_cv:
            continue

        recurring.append(RecurringExpense(
            category=series.category,
            amount=round(stats.mean(series.amounts), 2),
            frequency=_recurring_frequency(avg_interval, config),
            next_expected_date=series.dates[-1] + timedelta(days=avg_interval),
            confidence=round(max(0.0, 1 - cv), 4),
            average_interval_days=round(avg_interval, 1),
        ))

    return sorted(recurring, key=lambda r: (-r.amount, r.category))


# --- Behavior ---

def _impulsive_buying(expenses: list[TransactionRecord], config: Settings) -> ImpulsiveBuying:
    small = [t for t in expenses if t.value < config.impulse_amount_threshold]
    weeks = max(1.0, stats.day_span(t.date for t in expenses) / 7)
    frequency = len(small) / weeks
    average = stats.mean(t.value for t in small)

    return ImpulsiveBuying(
        detected=frequency > config.impulse_weekly_frequency,
        frequency=round(frequency, 1),
        average_amount=round(average, 2),
        categories=sorted({t.category for t in small}),
    )


def _weekend_spending(expenses: list[TransactionRecord]) -> WeekendSpending:
    weekend = math.fsum(t.value for t in expenses if t.date.weekday() >= 5)
    weekday = math.fsum(t.value for t in expenses if t.date.weekday() < 5)
    total = weekend + weekday
    weekend_pct = _percentage(weekend, total)
    weekday_pct = _percentage(weekday, total)

    return WeekendSpending(
        weekend_percentage=round(weekend_pct, 1),
        weekday_percentage=round(weekday_pct, 1),
        # Two weekend days weighed against five weekdays
        difference=round(weekend_pct - weekday_pct * 2 / 5, 1),
    )


def _time_of_day(expenses: list[TransactionRecord]) -> TimeOfDayPattern:
    buckets: dict[str, float] = defaultdict(float)
    for txn in expenses:
        hour = txn.date.hour
        if 6 <= hour < 12:
            buckets["morning"] += txn.value
        elif 12 <= hour < 18:
            buckets["afternoon"] += txn.value
        elif hour >= 18:
            buckets["evening"] += txn.value
        else:
            buckets["night"] += txn.value
    return TimeOfDayPattern(**{k: round(v, 2) for k, v in buckets.items()})


def _month_phase(expenses: list[TransactionRecord]) -> MonthlyPattern:
    buckets: dict[str, float] = defaultdict(float)
    for txn in expenses:
        day = txn.date.day
        if day <= 10:
            buckets["early_month"] += txn.value
        elif day <= 20:
            buckets["mid_month"] += txn.value
        else:
            buckets["late_month"] += txn.value
    return MonthlyPattern(**{k: round(v, 2) for k, v in buckets.items()})


def analyze_behavior(
    expenses: list[TransactionRecord],
    config: Settings = settings,
) -> SpendingBehavior:
    if not expenses:
        return SpendingBehavior()
    return SpendingBehavior(
        impulsive_buying=_impulsive_buying(expenses, config),
        weekend_spending=_weekend_spending(expenses),
        time_of_day_patterns=_time_of_day(expenses),
        monthly_pattern=_month_phase(expenses),
    )


# --- Unusual transactions ---

def detect_unusual_transactions(
    expenses: list[TransactionRecord],
    config: Settings = settings,
) -> list[UnusualTransaction]:
    """Outliers above mean + 2 sigma, and members of same-day clusters of
    above-average purchases. First reason wins per transaction."""
    if len(expenses) < config.pattern_min_expenses:
        return []

    ordered = sorted(expenses, key=lambda t: (t.date, t.id))
    amounts = [t.value for t in ordered]
    avg = stats.mean(amounts)
    std = stats.population_stdev(amounts)
    outlier_floor = avg + config.unusual_stddev_multiplier * std

    above_average_by_day: dict = defaultdict(int)
    for txn in ordered:
        if txn.value > avg:
            above_average_by_day[txn.date.date()] += 1

    unusual = []
    seen: set[str] = set()
    for txn in ordered:
        reason = None
        if txn.value > outlier_floor:
            reason = f"Unusually large amount (${txn.value:.2f} vs average ${avg:.2f})"
        else:
            cluster = above_average_by_day.get(txn.date.date(), 0)
            if txn.value > avg and cluster > config.same_day_cluster_size:
                reason = f"Multiple large purchases on same day ({cluster} transactions)"

        if reason is None or txn.id in seen:
            continue
        seen.add(txn.id)
        unusual.append(UnusualTransaction(transaction=txn, reason=reason))
        if len(unusual) >= config.max_unusual_transactions:
            break

    return unusual


# --- Recommendations ---

def generate_recommendations(
    patterns: list[CategoryStats],
    behavior: SpendingBehavior,
    config: Settings = settings,
) -> list[str]:
    """Priority-ordered suggestions; falls back to a single balanced message."""
    recommendations = []

    impulsive = behavior.impulsive_buying
    if impulsive.detected:
        recommendations.append(
            f"You make {impulsive.frequency:g} small purchases weekly "
            f"(avg ${impulsive.average_amount:g}). Try the 24-hour rule: wait a day "
            "before buying to reduce impulse spending by 30%."
        )

    weekend_pct = behavior.weekend_spending.weekend_percentage
    if weekend_pct > config.weekend_heavy_pct:
        recommendations.append(
            f"{weekend_pct:g}% of spending happens on weekends. "
            "Plan weekend activities in advance to avoid overspending."
        )

    rising = [p for p in patterns if p.trend == Trend.increasing]
    if rising:
        top = rising[0]
        recommendations.append(
            f"{top.category} spending is increasing ({top.percentage:g}% of budget). "
            f"Set a monthly limit of ${round(top.average_amount * 4)} to control costs."
        )

    if patterns and patterns[0].percentage > config.category_concentration_pct:
        top = patterns[0]
        recommendations.append(
            f"{top.category} takes {top.percentage:g}% of your budget. "
            "Consider finding cheaper alternatives or reducing frequency."
        )

    monthly = behavior.monthly_pattern
    if monthly.late_month > monthly.early_month * config.late_month_ratio:
        recommendations.append(
            "You spend more late in the month. This suggests budget depletion - "
            "try spreading expenses evenly or increasing early-month savings."
        )

    if not recommendations:
        recommendations.append(BALANCED_RECOMMENDATION)

    return recommendations[:config.max_recommendations]


# --- Entry point ---

def analyze_spending_patterns(
    transactions: list[TransactionRecord],
    *,
    config: Settings | None = None,
) -> SpendingInsights:
    """Full spending-pattern analysis over the expense records in `transactions`."""
    cfg = config or settings
    expenses = stats.expenses_only(transactions)

    if len(expenses) < cfg.pattern_min_expenses:
        return SpendingInsights(recommendations=[NO_DATA_RECOMMENDATION])

    patterns = categorize_spending(expenses, cfg)
    behavior = analyze_behavior(expenses, cfg)

    return SpendingInsights(
        patterns=patterns,
        recurring_expenses=detect_recurring_expenses(expenses, cfg),
        behavior=behavior,
        top_categories=top_categories(patterns, cfg),
        unusual_transactions=detect_unusual_transactions(expenses, cfg),
        recommendations=generate_recommendations(patterns, behavior, cfg),
    )
