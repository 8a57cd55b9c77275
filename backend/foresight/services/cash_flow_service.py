"""Cash-flow projection: 90-day balance trajectory with runway risk.

The trailing-30-day average daily income and expense are applied linearly
to the seed balance. The trajectory is sampled on day 1, every 7th day and
the final day to bound output size.
"""

from datetime import datetime, timedelta
from decimal import Decimal

from foresight.config import Settings, settings
from foresight.schemas.analytics import CashFlowForecast, RiskLevel
from foresight.schemas.records import TransactionRecord, ensure_utc
from foresight.services import stats


def classify_runway(
    balance: float,
    avg_daily_expense: float,
    config: Settings = settings,
) -> tuple[float | None, RiskLevel]:
    """Months of expenses the balance covers, and the resulting risk tier.

    With no expenses the runway is unbounded (None); only a negative balance
    is then considered risky.
    """
    if avg_daily_expense <= 0:
        return None, RiskLevel.high if balance < 0 else RiskLevel.low

    months = balance / (avg_daily_expense * config.days_per_month)
    if months < config.cash_flow_high_risk_months:
        return months, RiskLevel.high
    if months < config.cash_flow_medium_risk_months:
        return months, RiskLevel.medium
    return months, RiskLevel.low


def _is_sample_day(day: int, config: Settings) -> bool:
    return (
        day == 1
        or day % config.cash_flow_sample_every_days == 0
        or day == config.cash_flow_horizon_days
    )


def forecast_cash_flow(
    transactions: list[TransactionRecord],
    seed_balance: Decimal | float,
    *,
    now: datetime,
    config: Settings | None = None,
) -> list[CashFlowForecast]:
    """Project the balance forward day by day over the cash-flow horizon."""
    cfg = config or settings
    now = ensure_utc(now)
    window = cfg.savings_capacity_window_days

    income, expense = stats.trailing_totals(transactions, now, window)
    avg_daily_income = income / window
    avg_daily_expense = expense / window

    forecasts = []
    balance = float(seed_balance)

    for day in range(1, cfg.cash_flow_horizon_days + 1):
        balance += avg_daily_income - avg_daily_expense
        if not _is_sample_day(day, cfg):
            continue

        months, risk = classify_runway(balance, avg_daily_expense, cfg)
        forecasts.append(CashFlowForecast(
            day=day,
            date=(now + timedelta(days=day)).date(),
            projected_balance=round(balance, 2),
            projected_income=round(avg_daily_income, 2),
            projected_expenses=round(avg_daily_expense, 2),
            months_of_expenses_covered=round(months, 2) if months is not None else None,
            risk_level=risk,
        ))

    return forecasts
