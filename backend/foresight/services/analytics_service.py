"""Analytics service: fetch a user's history once, then run the engines.

All I/O happens here, before any computation; the engine services below are
synchronous and pure. Nothing computed is stored.
"""

import logging
from datetime import datetime, timezone

from foresight.config import Settings, settings
from foresight.core.middleware import hash_user_id
from foresight.schemas.analytics import AnalyticsReport
from foresight.services import (
    anomaly_service,
    cash_flow_service,
    goal_prediction_service,
    insight_service,
    spending_forecast_service,
    spending_pattern_service,
)
from foresight.services.history_provider import HistoryProvider

logger = logging.getLogger("foresight.analytics")


def _now_utc() -> datetime:
    return datetime.now(timezone.utc)


async def build_report(
    provider: HistoryProvider,
    user_id: str,
    *,
    now: datetime | None = None,
    horizon_days: int = 30,
    config: Settings | None = None,
) -> AnalyticsReport:
    """Compute every analysis for one user from a single history snapshot."""
    cfg = config or settings
    now = now or _now_utc()

    transactions = await provider.get_transactions(user_id)
    goals = await provider.get_goals(user_id)
    stats_snapshot = await provider.get_stats(user_id)
    logger.debug(
        "history fetched user=%s transactions=%d goals=%d",
        hash_user_id(user_id), len(transactions), len(goals),
    )

    forecast = spending_forecast_service.forecast_spending(
        transactions, horizon_days, now=now, config=cfg,
    )
    opportunities = spending_forecast_service.identify_savings_opportunities(
        transactions, now=now, config=cfg,
    )
    predictions = goal_prediction_service.predict_goal_achievement(
        goals, transactions, now=now, config=cfg,
    )
    cash_flow = cash_flow_service.forecast_cash_flow(
        transactions, stats_snapshot.total_savings, now=now, config=cfg,
    )
    anomalies = anomaly_service.detect_anomalies(transactions, goals, now=now, config=cfg)
    insights = spending_pattern_service.analyze_spending_patterns(transactions, config=cfg)

    report = AnalyticsReport(
        user_id=user_id,
        generated_at=now,
        spending_forecast=forecast,
        goal_predictions=predictions,
        cash_flow=cash_flow,
        anomalies=anomalies,
        savings_opportunities=opportunities,
        spending_insights=insights,
        recommendations=insight_service.compose_recommendations(
            insights, opportunities, config=cfg,
        ),
        ai_context=insight_service.build_ai_context(insights, cfg),
    )

    logger.info(
        "analytics report built user=%s categories=%d goals=%d anomalies=%d",
        hash_user_id(user_id), len(forecast), len(predictions), len(anomalies),
    )
    return report
