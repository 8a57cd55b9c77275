"""Insight composition: recommendation list and the AI-prompt context block.

The context block layout is consumed verbatim by the chat orchestration
layer. Line order is fixed: header, top categories, recurring expenses,
behavior flags, headline insight, closing instruction.
"""

from foresight.config import Settings, settings
from foresight.schemas.analytics import SavingsOpportunity, SpendingInsights

NO_DATA_CONTEXT = "\n💳 SPENDING PATTERNS: No transaction data available yet"
DEFAULT_HEADLINE = "Balanced spending"


def format_number(value: float) -> str:
    """Render a number without a trailing '.0' for whole values."""
    if float(value).is_integer():
        return str(int(value))
    return repr(float(value))


def compose_recommendations(
    insights: SpendingInsights,
    opportunities: list[SavingsOpportunity] | tuple = (),
    *,
    limit: int | None = None,
    config: Settings | None = None,
) -> list[str]:
    """Pattern recommendations first, then savings suggestions; de-duplicated and capped."""
    cfg = config or settings
    cap = limit if limit is not None else cfg.max_recommendations

    combined = list(insights.recommendations)
    combined.extend(o.suggestion for o in opportunities)
    return list(dict.fromkeys(combined))[:cap]


def build_ai_context(insights: SpendingInsights, config: Settings | None = None) -> str:
    """Fixed-format summary block for direct inclusion in an LLM prompt."""
    cfg = config or settings
    if not insights.patterns:
        return NO_DATA_CONTEXT

    top = ", ".join(
        f"{c.category} ({format_number(c.percentage)}%)"
        for c in insights.top_categories[:3]
    )

    recurring_info = ""
    if insights.recurring_expenses:
        items = ", ".join(
            f"{r.category} (${format_number(r.amount)}/{r.frequency.value})"
            for r in insights.recurring_expenses[:2]
        )
        recurring_info = f"\n• Recurring: {items}"

    behavior_notes = []
    impulsive = insights.behavior.impulsive_buying
    if impulsive.detected:
        behavior_notes.append(
            f"⚠️ Impulsive buying detected: {format_number(impulsive.frequency)} small purchases/week"
        )
    weekend_pct = insights.behavior.weekend_spending.weekend_percentage
    if weekend_pct > cfg.weekend_heavy_pct:
        behavior_notes.append(
            f"📅 Weekend heavy spender: {format_number(weekend_pct)}% on weekends"
        )

    headline = insights.recommendations[0] if insights.recommendations else DEFAULT_HEADLINE

    lines = [
        "",
        "💳 SPENDING PATTERN ANALYSIS:",
        f"• Top Categories: {top}{recurring_info}",
        "\n".join(f"• {note}" for note in behavior_notes),
        f"• Key Insights: {headline}",
        "",
        "⚠️ Use these insights to give personalized budgeting advice!",
    ]
    return "\n".join(lines)
