"""Goal achievement prediction.

For every active goal:
- required monthly contribution to hit the target date
- probability of success given the trailing-30-day net savings rate
- predicted completion date at that rate ("never" when the rate is not positive)
- a templated recommendation (shortfall, excellent pace, steady state)

Past-due goals that are off track fall through to the steady-state message:
there is no deadline left to extend.
"""

import math
from datetime import datetime, timedelta

from foresight.config import Settings, settings
from foresight.models.goal import GoalStatus
from foresight.schemas.analytics import GoalPrediction
from foresight.schemas.records import GoalRecord, TransactionRecord, ensure_utc
from foresight.services import stats


def monthly_savings_capacity(
    transactions: list[TransactionRecord],
    *,
    now: datetime,
    config: Settings | None = None,
) -> float:
    """Income minus expenses over the trailing savings window."""
    cfg = config or settings
    income, expense = stats.trailing_totals(
        transactions, ensure_utc(now), cfg.savings_capacity_window_days,
    )
    return income - expense


def success_probability(capacity: float, required: float, config: Settings = settings) -> float:
    """Probability (0-100) of meeting `required` per month with `capacity`.

    A zero requirement means nothing is left to save.
    """
    if required <= 0:
        return 100.0
    ratio = capacity / required
    if capacity >= required:
        probability = min(
            config.goal_on_track_max_probability,
            config.goal_on_track_base_probability + ratio * config.goal_on_track_ratio_weight,
        )
    else:
        probability = max(config.goal_min_probability, config.goal_off_track_scale * ratio)
    return min(100.0, max(0.0, probability))


def _recommendation(
    *,
    on_track: bool,
    probability: float,
    remaining: float,
    required: float,
    capacity: float,
    months_remaining: float,
    config: Settings,
) -> str:
    if remaining <= 0:
        return "Goal reached! Consider allocating future savings to your next goal"
    if not on_track and months_remaining > 0:
        shortfall = required - capacity
        if capacity > 0:
            extension = math.ceil(remaining / capacity - months_remaining)
            return (
                f"Increase monthly savings by ${shortfall:.0f} "
                f"or extend deadline by {extension} months"
            )
        return (
            f"Increase monthly savings by ${shortfall:.0f}; "
            "current spending leaves nothing to put toward this goal"
        )
    if on_track and probability > config.goal_excellent_probability:
        return "On excellent track! Consider allocating surplus to other goals"
    return f"Maintain current pace of ${capacity:.0f}/month"


def _predict_goal(
    goal: GoalRecord,
    capacity: float,
    now: datetime,
    config: Settings,
) -> GoalPrediction:
    target = float(goal.target_amount)
    current = float(goal.current_amount)
    remaining = target - current

    seconds_left = (goal.target_date - now).total_seconds()
    months_remaining = max(0.0, seconds_left / (config.days_per_month * stats.SECONDS_PER_DAY))

    if remaining <= 0:
        required = 0.0
    elif months_remaining > 0:
        required = remaining / months_remaining
    else:
        required = remaining

    on_track = remaining <= 0 or capacity >= required
    probability = success_probability(capacity, required, config)

    if remaining <= 0:
        completion = now.date()
    elif capacity > 0 and remaining / capacity <= config.goal_never_months:
        months_to_completion = remaining / capacity
        completion = (now + timedelta(days=months_to_completion * config.days_per_month)).date()
    else:
        completion = None

    progress = current / target * 100 if target > 0 else 100.0

    return GoalPrediction(
        goal_id=goal.id,
        goal_title=goal.title,
        current_progress=round(progress, 1),
        predicted_completion_date=completion,
        on_track=on_track,
        probability=round(probability),
        required_monthly_contribution=round(required, 2),
        monthly_savings_capacity=round(capacity, 2),
        recommended_action=_recommendation(
            on_track=on_track,
            probability=probability,
            remaining=remaining,
            required=required,
            capacity=capacity,
            months_remaining=months_remaining,
            config=config,
        ),
    )


def predict_goal_achievement(
    goals: list[GoalRecord],
    transactions: list[TransactionRecord],
    *,
    now: datetime,
    config: Settings | None = None,
) -> list[GoalPrediction]:
    """Predict completion for each active goal, in input order."""
    cfg = config or settings
    now = ensure_utc(now)
    active = [g for g in goals if g.status == GoalStatus.active]
    if not active:
        return []

    capacity = monthly_savings_capacity(transactions, now=now, config=cfg)
    return [_predict_goal(goal, capacity, now, cfg) for goal in active]
