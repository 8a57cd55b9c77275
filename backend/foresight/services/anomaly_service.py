"""Anomaly detection: early warnings recomputed from scratch on every call.

Rules (independent, any subset may fire):
- spending_spike: last-7-day daily spend vs the preceding 23 days
- income_drop: last-7-day income total vs the preceding 23-day total
- goal_at_risk: off-track goals with low success probability
"""

from datetime import datetime, timedelta

from foresight.config import Settings, settings
from foresight.models.transaction import TransactionType
from foresight.schemas.analytics import Anomaly, AnomalyType, Severity
from foresight.schemas.records import GoalRecord, TransactionRecord, ensure_utc
from foresight.services import goal_prediction_service, stats


def _window_rates(
    transactions: list[TransactionRecord],
    txn_type: TransactionType,
    now: datetime,
    config: Settings,
) -> tuple[float, float, float, float]:
    """(recent_total, recent_daily, baseline_total, baseline_daily) for one type."""
    recent_days = config.anomaly_recent_window_days
    baseline_days = config.anomaly_baseline_window_days - recent_days
    recent_start = now - timedelta(days=recent_days)
    baseline_start = now - timedelta(days=config.anomaly_baseline_window_days)

    recent_total = stats.window_total(transactions, recent_start, now, txn_type)
    baseline_total = stats.window_total(
        transactions, baseline_start, recent_start, txn_type, include_end=False,
    )
    return (
        recent_total,
        recent_total / recent_days,
        baseline_total,
        baseline_total / baseline_days,
    )


def _spending_spike(
    transactions: list[TransactionRecord],
    now: datetime,
    config: Settings,
) -> Anomaly | None:
    recent_total, recent_daily, _, baseline_daily = _window_rates(
        transactions, TransactionType.expense, now, config,
    )
    if recent_total <= config.spike_min_recent_total:
        return None
    if recent_daily <= baseline_daily * config.spike_warning_multiplier:
        return None

    severity = (
        Severity.critical
        if recent_daily > baseline_daily * config.spike_critical_multiplier
        else Severity.warning
    )
    if baseline_daily > 0:
        increase = (recent_daily / baseline_daily - 1) * 100
        description = f"Your spending is {increase:.0f}% higher than usual this week"
    else:
        description = (
            f"You spent ${recent_total:.0f} this week with no comparable spending "
            "in the previous weeks"
        )

    return Anomaly(
        type=AnomalyType.spending_spike,
        severity=severity,
        title="Unusual Spending Detected",
        description=description,
        suggested_action="Review recent transactions and consider adjusting budget",
        detected_at=now,
    )


def _income_drop(
    transactions: list[TransactionRecord],
    now: datetime,
    config: Settings,
) -> Anomaly | None:
    recent_total, recent_daily, baseline_total, baseline_daily = _window_rates(
        transactions, TransactionType.income, now, config,
    )
    if baseline_total <= 0:
        return None
    if config.income_drop_compare_daily_rates:
        recent, baseline = recent_daily, baseline_daily
    else:
        # Raw window totals: 7 days of income against the preceding 23
        recent, baseline = recent_total, baseline_total
    if recent >= baseline * config.income_drop_ratio:
        return None

    return Anomaly(
        type=AnomalyType.income_drop,
        severity=Severity.critical,
        title="Income Drop Detected",
        description="Your income this week is significantly lower than usual",
        suggested_action="Review income sources and consider emergency budget measures",
        detected_at=now,
    )


def _goals_at_risk(
    goals: list[GoalRecord],
    transactions: list[TransactionRecord],
    now: datetime,
    config: Settings,
) -> list[Anomaly]:
    anomalies = []
    predictions = goal_prediction_service.predict_goal_achievement(
        goals, transactions, now=now, config=config,
    )
    for prediction in predictions:
        if prediction.on_track or prediction.probability >= config.goal_risk_probability:
            continue
        anomalies.append(Anomaly(
            type=AnomalyType.goal_at_risk,
            severity=(
                Severity.critical
                if prediction.probability < config.goal_risk_critical_probability
                else Severity.warning
            ),
            title=f"Goal At Risk: {prediction.goal_title}",
            description=f"Only {prediction.probability}% chance of achieving on time",
            suggested_action=prediction.recommended_action,
            detected_at=now,
            goal_id=prediction.goal_id,
        ))
    return anomalies


def detect_anomalies(
    transactions: list[TransactionRecord],
    goals: list[GoalRecord],
    *,
    now: datetime,
    config: Settings | None = None,
) -> list[Anomaly]:
    """Run every rule; results are ordered spike, income drop, then goals."""
    cfg = config or settings
    now = ensure_utc(now)

    anomalies = []
    spike = _spending_spike(transactions, now, cfg)
    if spike:
        anomalies.append(spike)
    drop = _income_drop(transactions, now, cfg)
    if drop:
        anomalies.append(drop)
    anomalies.extend(_goals_at_risk(goals, transactions, now, cfg))
    return anomalies
