"""Spending forecast service: per-category spend projection and savings targets.

Implements:
1. Category forecast over a 30- or 90-day horizon from a lookback window of
   3x the horizon (capped at 180 days)
2. Trend adjustment from a half-split comparison of chronological amounts
3. Confidence from the coefficient of variation of per-transaction amounts
4. Savings opportunities for large, rising categories

Categories without expense samples in the window are omitted, never
zero-filled.
"""

from datetime import datetime, timedelta

from foresight.config import Settings, settings
from foresight.schemas.analytics import (
    Difficulty,
    ForecastConfidence,
    SavingsOpportunity,
    SpendingForecast,
    Trend,
)
from foresight.schemas.records import TransactionRecord, ensure_utc
from foresight.services import stats

VALID_HORIZONS = (30, 90)

OPPORTUNITY_CONFIDENCE = {
    ForecastConfidence.high: 0.8,
    ForecastConfidence.medium: 0.6,
    ForecastConfidence.low: 0.4,
}


def lookback_days(horizon_days: int, config: Settings = settings) -> int:
    """Historical window used for a given horizon."""
    return min(horizon_days * config.forecast_lookback_multiplier, config.forecast_max_lookback_days)


def classify_confidence(cv: float, config: Settings = settings) -> ForecastConfidence:
    """Map a coefficient of variation to a confidence tier (lower CV, higher tier)."""
    if cv < config.forecast_high_confidence_cv:
        return ForecastConfidence.high
    if cv < config.forecast_medium_confidence_cv:
        return ForecastConfidence.medium
    return ForecastConfidence.low


def _forecast_category(
    series: stats.CategorySeries,
    horizon_days: int,
    config: Settings,
) -> SpendingForecast:
    historical_average = stats.mean(series.amounts)
    percent_change = stats.half_split_change(series.amounts)
    trend = stats.classify_trend(percent_change, config.trend_threshold_pct)

    trend_multiplier = 1 + percent_change / 100
    predicted = historical_average * trend_multiplier * (horizon_days / 30)

    cv = stats.coefficient_of_variation(series.amounts)

    return SpendingForecast(
        category=series.category,
        historical_average=round(historical_average, 2),
        predicted_amount=round(predicted, 2),
        confidence=classify_confidence(cv, config),
        trend=trend,
        percent_change=round(percent_change, 2),
        sample_count=series.count,
    )


def forecast_spending(
    transactions: list[TransactionRecord],
    horizon_days: int = 30,
    *,
    now: datetime,
    config: Settings | None = None,
) -> list[SpendingForecast]:
    """Forecast spend per category for the next `horizon_days` (30 or 90).

    Sorted by predicted amount, largest first.
    """
    if horizon_days not in VALID_HORIZONS:
        raise ValueError(f"horizon_days must be one of {VALID_HORIZONS}, got {horizon_days}")

    cfg = config or settings
    now = ensure_utc(now)
    cutoff = now - timedelta(days=lookback_days(horizon_days, cfg))
    expenses = stats.expenses_only(stats.filter_window(transactions, cutoff, now))
    if not expenses:
        return []

    forecasts = [
        _forecast_category(series, horizon_days, cfg)
        for series in stats.group_by_category(expenses)
    ]
    return sorted(forecasts, key=lambda f: (-f.predicted_amount, f.category))


def identify_savings_opportunities(
    transactions: list[TransactionRecord],
    *,
    now: datetime,
    config: Settings | None = None,
) -> list[SavingsOpportunity]:
    """Suggest a reduction target for high, rising categories of the 30-day forecast."""
    cfg = config or settings
    opportunities = []

    for forecast in forecast_spending(transactions, 30, now=now, config=cfg):
        if forecast.predicted_amount <= cfg.savings_min_predicted_amount:
            continue
        if forecast.trend != Trend.increasing:
            continue

        potential = forecast.predicted_amount * cfg.savings_reduction_fraction
        reduction_pct = round(cfg.savings_reduction_fraction * 100)
        opportunities.append(SavingsOpportunity(
            category=forecast.category,
            potential_savings=round(potential),
            confidence=OPPORTUNITY_CONFIDENCE[forecast.confidence],
            timeframe="monthly",
            suggestion=(
                f"Reduce {forecast.category} spending by {reduction_pct}% "
                f"to save ${potential:.0f}/month"
            ),
            difficulty=(
                Difficulty.easy
                if forecast.predicted_amount > cfg.savings_easy_predicted_amount
                else Difficulty.medium
            ),
        ))

    return opportunities[:cfg.max_savings_opportunities]
