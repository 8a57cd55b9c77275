"""Analytics output schemas: immutable, JSON-serializable engine results."""

import enum
from datetime import date, datetime

from pydantic import BaseModel, ConfigDict

from foresight.schemas.records import TransactionRecord


class Trend(str, enum.Enum):
    increasing = "increasing"
    stable = "stable"
    decreasing = "decreasing"


class ForecastConfidence(str, enum.Enum):
    high = "high"
    medium = "medium"
    low = "low"


class RiskLevel(str, enum.Enum):
    low = "low"
    medium = "medium"
    high = "high"


class AnomalyType(str, enum.Enum):
    spending_spike = "spending_spike"
    income_drop = "income_drop"
    goal_at_risk = "goal_at_risk"


class Severity(str, enum.Enum):
    critical = "critical"
    warning = "warning"
    info = "info"


class SpendingFrequency(str, enum.Enum):
    daily = "daily"
    weekly = "weekly"
    monthly = "monthly"
    occasional = "occasional"


class RecurringFrequency(str, enum.Enum):
    weekly = "weekly"
    monthly = "monthly"
    quarterly = "quarterly"


class Difficulty(str, enum.Enum):
    easy = "easy"
    medium = "medium"
    hard = "hard"


class _Result(BaseModel):
    model_config = ConfigDict(frozen=True)


# --- Forecasting ---

class SpendingForecast(_Result):
    category: str
    historical_average: float
    predicted_amount: float
    confidence: ForecastConfidence
    trend: Trend
    percent_change: float
    sample_count: int


class SavingsOpportunity(_Result):
    category: str
    potential_savings: float
    confidence: float
    timeframe: str = "monthly"
    suggestion: str
    difficulty: Difficulty


class GoalPrediction(_Result):
    goal_id: str
    goal_title: str
    current_progress: float
    predicted_completion_date: date | None
    on_track: bool
    probability: int
    required_monthly_contribution: float
    monthly_savings_capacity: float
    recommended_action: str


class CashFlowForecast(_Result):
    day: int
    date: date
    projected_balance: float
    projected_income: float
    projected_expenses: float
    months_of_expenses_covered: float | None
    risk_level: RiskLevel


class Anomaly(_Result):
    type: AnomalyType
    severity: Severity
    title: str
    description: str
    suggested_action: str
    detected_at: datetime
    affected_category: str | None = None
    goal_id: str | None = None


# --- Spending patterns ---

class CategoryStats(_Result):
    """Aggregate statistics for one spending category."""
    category: str
    total_amount: float
    average_amount: float
    transaction_count: int
    percentage: float
    trend: Trend
    frequency: SpendingFrequency


class TopCategory(_Result):
    category: str
    amount: float
    percentage: float


class RecurringExpense(_Result):
    category: str
    amount: float
    frequency: RecurringFrequency
    next_expected_date: datetime
    confidence: float
    average_interval_days: float


class ImpulsiveBuying(_Result):
    detected: bool = False
    frequency: float = 0.0
    average_amount: float = 0.0
    categories: list[str] = []


class WeekendSpending(_Result):
    weekend_percentage: float = 0.0
    weekday_percentage: float = 0.0
    difference: float = 0.0


class TimeOfDayPattern(_Result):
    morning: float = 0.0  # 06:00-12:00
    afternoon: float = 0.0  # 12:00-18:00
    evening: float = 0.0  # 18:00-24:00
    night: float = 0.0  # 00:00-06:00


class MonthlyPattern(_Result):
    early_month: float = 0.0  # days 1-10
    mid_month: float = 0.0  # days 11-20
    late_month: float = 0.0  # days 21-31


class SpendingBehavior(_Result):
    impulsive_buying: ImpulsiveBuying = ImpulsiveBuying()
    weekend_spending: WeekendSpending = WeekendSpending()
    time_of_day_patterns: TimeOfDayPattern = TimeOfDayPattern()
    monthly_pattern: MonthlyPattern = MonthlyPattern()


class UnusualTransaction(_Result):
    transaction: TransactionRecord
    reason: str


class SpendingInsights(_Result):
    patterns: list[CategoryStats] = []
    recurring_expenses: list[RecurringExpense] = []
    behavior: SpendingBehavior = SpendingBehavior()
    top_categories: list[TopCategory] = []
    unusual_transactions: list[UnusualTransaction] = []
    recommendations: list[str] = []


# --- Aggregate report ---

class AnalyticsReport(_Result):
    user_id: str
    generated_at: datetime
    spending_forecast: list[SpendingForecast]
    goal_predictions: list[GoalPrediction]
    cash_flow: list[CashFlowForecast]
    anomalies: list[Anomaly]
    savings_opportunities: list[SavingsOpportunity]
    spending_insights: SpendingInsights
    recommendations: list[str]
    ai_context: str


class AIContextRead(BaseModel):
    context: str
