"""Analytics router tests: endpoints over the SQLite-backed history."""

from datetime import datetime, timedelta, timezone
from decimal import Decimal

import pytest
from httpx import AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession

from foresight.dependencies import get_history_provider
from foresight.main import app
from foresight.models.goal import Goal
from foresight.models.transaction import Transaction, TransactionType
from foresight.schemas.records import TransactionRecord

USER = "5f0c6a1e-0000-4000-8000-000000000001"


def _days_ago(days: float) -> datetime:
    return datetime.now(timezone.utc) - timedelta(days=days)


async def _seed_history(db_session: AsyncSession) -> None:
    rows = [
        Transaction(
            user_id=USER,
            amount=Decimal("50.00"),
            transaction_type=TransactionType.expense,
            category="Subscription",
            transaction_date=_days_ago(d),
        )
        for d in (150, 121, 90, 61, 30, 1)
    ]
    rows += [
        Transaction(
            user_id=USER,
            amount=Decimal(amount),
            transaction_type=TransactionType.expense,
            category="Groceries",
            transaction_date=_days_ago(d),
        )
        for amount, d in (("80.00", 3), ("95.00", 10), ("70.00", 17), ("88.00", 24))
    ]
    rows.append(Transaction(
        user_id=USER,
        amount=Decimal("4000.00"),
        transaction_type=TransactionType.income,
        category="Salary",
        transaction_date=_days_ago(2),
    ))
    rows.append(Goal(
        user_id=USER,
        title="Emergency fund",
        target_amount=Decimal("12000.00"),
        current_amount=Decimal("1000.00"),
        target_date=_days_ago(-60),
    ))
    db_session.add_all(rows)
    await db_session.flush()


@pytest.mark.asyncio
async def test_health(client: AsyncClient):
    resp = await client.get("/health")
    assert resp.status_code == 200
    assert resp.json()["status"] == "ok"


@pytest.mark.asyncio
async def test_spending_forecast(client: AsyncClient, db_session: AsyncSession):
    await _seed_history(db_session)

    resp = await client.get(f"/analytics/{USER}/spending-forecast")
    assert resp.status_code == 200
    data = resp.json()
    assert {f["category"] for f in data} == {"Subscription", "Groceries"}
    assert all(f["confidence"] in ("high", "medium", "low") for f in data)

    resp = await client.get(f"/analytics/{USER}/spending-forecast", params={"horizon_days": 90})
    assert resp.status_code == 200


@pytest.mark.asyncio
async def test_invalid_horizon_rejected(client: AsyncClient):
    resp = await client.get(f"/analytics/{USER}/spending-forecast", params={"horizon_days": 60})
    assert resp.status_code == 400
    data = resp.json()
    assert data["error"] is True
    assert data["detail"] == "horizon_days must be 30 or 90"

    resp = await client.get(f"/analytics/{USER}/report", params={"horizon_days": "soon"})
    assert resp.status_code == 422
    assert resp.json()["errors"]


@pytest.mark.asyncio
async def test_goal_predictions(client: AsyncClient, db_session: AsyncSession):
    await _seed_history(db_session)

    resp = await client.get(f"/analytics/{USER}/goal-predictions")
    assert resp.status_code == 200
    [prediction] = resp.json()
    assert prediction["goal_title"] == "Emergency fund"
    assert prediction["on_track"] is False
    assert 0 <= prediction["probability"] <= 100


@pytest.mark.asyncio
async def test_cash_flow_seeded_from_goal_savings(client: AsyncClient, db_session: AsyncSession):
    await _seed_history(db_session)

    resp = await client.get(f"/analytics/{USER}/cash-flow")
    assert resp.status_code == 200
    points = resp.json()
    assert [p["day"] for p in points][:3] == [1, 7, 14]
    assert points[-1]["day"] == 90
    assert points[0]["projected_balance"] > 1000


@pytest.mark.asyncio
async def test_anomalies(client: AsyncClient, db_session: AsyncSession):
    await _seed_history(db_session)

    resp = await client.get(f"/analytics/{USER}/anomalies")
    assert resp.status_code == 200
    assert "goal_at_risk" in {a["type"] for a in resp.json()}


@pytest.mark.asyncio
async def test_savings_opportunities_empty_for_stable_spending(
    client: AsyncClient, db_session: AsyncSession,
):
    await _seed_history(db_session)

    resp = await client.get(f"/analytics/{USER}/savings-opportunities")
    assert resp.status_code == 200
    assert resp.json() == []


@pytest.mark.asyncio
async def test_spending_patterns_and_ai_context(client: AsyncClient, db_session: AsyncSession):
    await _seed_history(db_session)

    resp = await client.get(f"/analytics/{USER}/spending-patterns")
    assert resp.status_code == 200
    insights = resp.json()
    assert insights["top_categories"][0]["category"] == "Groceries"
    assert {r["category"] for r in insights["recurring_expenses"]} == {"Groceries", "Subscription"}

    resp = await client.get(f"/analytics/{USER}/ai-context")
    assert resp.status_code == 200
    assert "• Top Categories: Groceries" in resp.json()["context"]


@pytest.mark.asyncio
async def test_new_user_gets_fallbacks(client: AsyncClient):
    resp = await client.get("/analytics/someone-new/ai-context")
    assert resp.json()["context"] == "\n💳 SPENDING PATTERNS: No transaction data available yet"

    resp = await client.get("/analytics/someone-new/spending-patterns")
    assert resp.json()["recommendations"] == [
        "Start tracking expenses to get personalized insights",
    ]


@pytest.mark.asyncio
async def test_full_report(client: AsyncClient, db_session: AsyncSession):
    await _seed_history(db_session)

    resp = await client.get(f"/analytics/{USER}/report", params={"horizon_days": 90})
    assert resp.status_code == 200
    report = resp.json()
    assert report["user_id"] == USER
    assert len(report["cash_flow"]) == 14
    assert report["goal_predictions"][0]["goal_title"] == "Emergency fund"
    assert report["ai_context"].startswith("\n💳 SPENDING PATTERN ANALYSIS:")


class _CorruptHistoryProvider:
    async def get_transactions(self, user_id):
        return [TransactionRecord.model_validate({
            "id": "bad", "user_id": user_id, "amount": "1", "type": "refund", "date": "2026-01-01",
        })]


@pytest.mark.asyncio
async def test_unreadable_history_returns_structured_500(client: AsyncClient):
    app.dependency_overrides[get_history_provider] = lambda: _CorruptHistoryProvider()
    resp = await client.get(f"/analytics/{USER}/spending-forecast")

    assert resp.status_code == 500
    data = resp.json()
    assert data["detail"] == "Stored history could not be validated"
    assert data["request_id"] == resp.headers["X-Request-ID"]
