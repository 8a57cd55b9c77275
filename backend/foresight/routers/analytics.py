"""Analytics router: read-only predictive analytics endpoints.

Endpoints:
- GET /analytics/{user_id}/spending-forecast: Category spend forecast (30 or 90 days)
- GET /analytics/{user_id}/goal-predictions: Goal achievement predictions
- GET /analytics/{user_id}/cash-flow: 90-day balance projection with runway risk
- GET /analytics/{user_id}/anomalies: Spending spikes, income drops, goals at risk
- GET /analytics/{user_id}/savings-opportunities: Reduction targets for rising categories
- GET /analytics/{user_id}/spending-patterns: Category, recurring and behavior insights
- GET /analytics/{user_id}/ai-context: Prompt-ready summary text
- GET /analytics/{user_id}/report: Everything above in one response

Every call recomputes from the stored history; nothing is persisted.
"""

from datetime import datetime, timezone

from fastapi import APIRouter, Depends, HTTPException

from foresight.dependencies import get_history_provider
from foresight.schemas.analytics import (
    AIContextRead,
    AnalyticsReport,
    Anomaly,
    CashFlowForecast,
    GoalPrediction,
    SavingsOpportunity,
    SpendingForecast,
    SpendingInsights,
)
from foresight.services import (
    analytics_service,
    anomaly_service,
    cash_flow_service,
    goal_prediction_service,
    insight_service,
    spending_forecast_service,
    spending_pattern_service,
)
from foresight.services.history_provider import HistoryProvider

router = APIRouter(prefix="/analytics", tags=["analytics"])


def _now() -> datetime:
    return datetime.now(timezone.utc)


def _check_horizon(horizon_days: int) -> None:
    if horizon_days not in spending_forecast_service.VALID_HORIZONS:
        raise HTTPException(status_code=400, detail="horizon_days must be 30 or 90")


@router.get("/{user_id}/spending-forecast", response_model=list[SpendingForecast])
async def get_spending_forecast(
    user_id: str,
    horizon_days: int = 30,
    provider: HistoryProvider = Depends(get_history_provider),
):
    """Forecast spending per category over the next 30 or 90 days."""
    _check_horizon(horizon_days)
    transactions = await provider.get_transactions(user_id)
    return spending_forecast_service.forecast_spending(
        transactions, horizon_days, now=_now(),
    )


@router.get("/{user_id}/goal-predictions", response_model=list[GoalPrediction])
async def get_goal_predictions(
    user_id: str,
    provider: HistoryProvider = Depends(get_history_provider),
):
    goals = await provider.get_goals(user_id)
    transactions = await provider.get_transactions(user_id)
    return goal_prediction_service.predict_goal_achievement(goals, transactions, now=_now())


@router.get("/{user_id}/cash-flow", response_model=list[CashFlowForecast])
async def get_cash_flow(
    user_id: str,
    provider: HistoryProvider = Depends(get_history_provider),
):
    """Project the balance over 90 days, seeded with the user's total savings."""
    transactions = await provider.get_transactions(user_id)
    stats = await provider.get_stats(user_id)
    return cash_flow_service.forecast_cash_flow(
        transactions, stats.total_savings, now=_now(),
    )


@router.get("/{user_id}/anomalies", response_model=list[Anomaly])
async def get_anomalies(
    user_id: str,
    provider: HistoryProvider = Depends(get_history_provider),
):
    transactions = await provider.get_transactions(user_id)
    goals = await provider.get_goals(user_id)
    return anomaly_service.detect_anomalies(transactions, goals, now=_now())


@router.get("/{user_id}/savings-opportunities", response_model=list[SavingsOpportunity])
async def get_savings_opportunities(
    user_id: str,
    provider: HistoryProvider = Depends(get_history_provider),
):
    transactions = await provider.get_transactions(user_id)
    return spending_forecast_service.identify_savings_opportunities(transactions, now=_now())


@router.get("/{user_id}/spending-patterns", response_model=SpendingInsights)
async def get_spending_patterns(
    user_id: str,
    provider: HistoryProvider = Depends(get_history_provider),
):
    transactions = await provider.get_transactions(user_id)
    return spending_pattern_service.analyze_spending_patterns(transactions)


@router.get("/{user_id}/ai-context", response_model=AIContextRead)
async def get_ai_context(
    user_id: str,
    provider: HistoryProvider = Depends(get_history_provider),
):
    """Spending-pattern summary formatted for the chat advisor prompt."""
    transactions = await provider.get_transactions(user_id)
    insights = spending_pattern_service.analyze_spending_patterns(transactions)
    return AIContextRead(context=insight_service.build_ai_context(insights))


@router.get("/{user_id}/report", response_model=AnalyticsReport)
async def get_report(
    user_id: str,
    horizon_days: int = 30,
    provider: HistoryProvider = Depends(get_history_provider),
):
    """Full analytics report computed from a single history snapshot."""
    _check_horizon(horizon_days)
    return await analytics_service.build_report(
        provider, user_id, now=_now(), horizon_days=horizon_days,
    )
