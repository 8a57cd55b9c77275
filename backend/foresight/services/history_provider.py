"""History provider: read-only access to a user's transactions, goals and stats.

The analytics engine never queries storage itself. A provider fetches
everything up front and hands back validated boundary records.
"""

from decimal import Decimal
from typing import Protocol

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from foresight.models.goal import Goal, GoalStatus
from foresight.models.transaction import Transaction
from foresight.schemas.records import GoalRecord, StatsSnapshot, TransactionRecord


class HistoryProvider(Protocol):
    """Source of immutable history snapshots for one user."""

    async def get_transactions(self, user_id: str) -> list[TransactionRecord]:  # pragma: no cover - interface
        ...

    async def get_goals(self, user_id: str) -> list[GoalRecord]:  # pragma: no cover - interface
        ...

    async def get_stats(self, user_id: str) -> StatsSnapshot:  # pragma: no cover - interface
        ...


def transaction_to_record(txn: Transaction) -> TransactionRecord:
    return TransactionRecord.model_validate({
        "id": txn.id,
        "user_id": txn.user_id,
        "amount": txn.amount,
        "type": txn.transaction_type,
        "category": txn.category,
        "date": txn.transaction_date,
        "description": txn.description,
    })


def goal_to_record(goal: Goal) -> GoalRecord:
    return GoalRecord.model_validate({
        "id": goal.id,
        "user_id": goal.user_id,
        "title": goal.title,
        "target_amount": goal.target_amount,
        "current_amount": goal.current_amount,
        "target_date": goal.target_date,
        "status": goal.status,
    })


class SqlHistoryProvider:
    """HistoryProvider backed by the ledger database (SQLAlchemy async session)."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def get_transactions(self, user_id: str) -> list[TransactionRecord]:
        """All transactions for a user, oldest first."""
        result = await self.db.execute(
            select(Transaction)
            .where(Transaction.user_id == user_id)
            .order_by(Transaction.transaction_date.asc(), Transaction.id.asc())
        )
        return [transaction_to_record(t) for t in result.scalars().all()]

    async def get_goals(self, user_id: str) -> list[GoalRecord]:
        result = await self.db.execute(
            select(Goal)
            .where(Goal.user_id == user_id)
            .order_by(Goal.created_at.asc(), Goal.id.asc())
        )
        return [goal_to_record(g) for g in result.scalars().all()]

    async def get_stats(self, user_id: str) -> StatsSnapshot:
        """Total savings = money currently held in active goals."""
        result = await self.db.execute(
            select(func.coalesce(func.sum(Goal.current_amount), 0)).where(
                Goal.user_id == user_id,
                Goal.status == GoalStatus.active,
            )
        )
        total = result.scalar_one()
        return StatsSnapshot(total_savings=Decimal(str(total)))
