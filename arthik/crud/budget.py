# arthik/crud/budget.py
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select
from sqlalchemy import func, update
from arthik.models.budget import Budget, BudgetStatus
from arthik.models.expense import Expense, ExpenseStatus
from arthik.schemas.budget import BudgetCreate, BudgetUpdate
from arthik.core.db_utils import with_db_retry
from arthik.core.exceptions import BudgetValidationError
from arthik.crud.aggregates import apply_sort, distinct_values, paginate, text_search
from arthik.utils.dates import as_utc
from arthik.utils.money import safe_float
from collections import defaultdict
from datetime import datetime
from typing import Any, Dict, Iterable, List, Optional, Tuple
import logging
import uuid

logger = logging.getLogger(__name__)

BUDGET_SORT_FIELDS = ("start_date", "end_date", "amount", "name", "category", "created_at")

def _covering(user_id: uuid.UUID, now: datetime) -> list:
    """Budgets whose period contains ``now``"""
    return [
        Budget.user_id == user_id,
        Budget.status != BudgetStatus.cancelled,
        Budget.start_date <= now,
        Budget.end_date >= now,
    ]

async def get_budgets_for_user(
    user_id: uuid.UUID,
    db: AsyncSession,
    page: int = 1,
    limit: int = 10,
    category: Optional[str] = None,
    status: Optional[BudgetStatus] = None,
    period_type: Optional[str] = None,
    sort_by: str = "start_date",
    sort_order: str = "desc",
) -> Tuple[List[Budget], int]:
    conditions = [Budget.user_id == user_id]
    if status is None:
        conditions.append(Budget.status != BudgetStatus.cancelled)
    else:
        conditions.append(Budget.status == status)
    if category:
        conditions.append(Budget.category == category)
    if period_type:
        conditions.append(Budget.period_type == period_type)

    query = apply_sort(select(Budget).where(*conditions), Budget, sort_by, sort_order, BUDGET_SORT_FIELDS, "start_date")
    return await paginate(query, page, limit, db)

async def get_active_budgets(user_id: uuid.UUID, now: datetime, db: AsyncSession) -> List[Budget]:
    result = await db.execute(
        select(Budget)
        .where(
            Budget.user_id == user_id,
            Budget.status == BudgetStatus.active,
            Budget.start_date <= now,
            Budget.end_date >= now,
        )
        .order_by(Budget.end_date)
    )
    return list(result.scalars().all())

async def get_budget_by_id(budget_id: uuid.UUID, user_id: uuid.UUID, db: AsyncSession) -> Optional[Budget]:
    result = await db.execute(
        select(Budget).where(Budget.id == budget_id, Budget.user_id == user_id)
    )
    return result.scalar_one_or_none()

async def create_budget_for_user(user_id: uuid.UUID, budget_in: BudgetCreate, db: AsyncSession) -> Budget:
    new_budget = Budget(**budget_in.model_dump(exclude_none=True), user_id=user_id)
    db.add(new_budget)
    await db.commit()
    await db.refresh(new_budget)
    logger.info(f"Budget {new_budget.id} created for user {user_id}: {new_budget.amount} for {new_budget.category}")
    return new_budget

async def update_budget(budget: Budget, budget_in: BudgetUpdate, db: AsyncSession) -> Budget:
    data = budget_in.model_dump(exclude_unset=True, exclude_none=True)
    start_date = data.get("start_date", budget.start_date)
    end_date = data.get("end_date", budget.end_date)
    if as_utc(end_date) <= as_utc(start_date):
        logger.warning(f"Rejected budget {budget.id} update: end date not after start date")
        raise BudgetValidationError("End date must be after start date")

    for field, value in data.items():
        setattr(budget, field, value)
    db.add(budget)
    await db.commit()
    await db.refresh(budget)
    return budget

async def delete_budget(budget: Budget, db: AsyncSession) -> Budget:
    budget.status = BudgetStatus.cancelled
    db.add(budget)
    await db.commit()
    await db.refresh(budget)
    logger.info(f"Budget {budget.id} cancelled")
    return budget

# ────────────────────────────────────────────────────────────────────────────────
# SPEND
# ────────────────────────────────────────────────────────────────────────────────
async def get_budget_spent(budget: Budget, db: AsyncSession) -> float:
    """Non-cancelled expenses in the budget's category and period"""
    result = await db.execute(
        select(func.coalesce(func.sum(Expense.amount), 0.0)).where(
            Expense.user_id == budget.user_id,
            Expense.category == budget.category,
            Expense.status != ExpenseStatus.cancelled,
            Expense.date >= budget.start_date,
            Expense.date <= budget.end_date,
        )
    )
    return safe_float(result.scalar_one())

async def get_spent_by_budget(budgets: Iterable[Budget], db: AsyncSession) -> Dict[uuid.UUID, float]:
    return {budget.id: await get_budget_spent(budget, db) for budget in budgets}

# ────────────────────────────────────────────────────────────────────────────────
# STATS
# ────────────────────────────────────────────────────────────────────────────────
async def _current_budgets_with_spend(user_id: uuid.UUID, now: datetime, db: AsyncSession) -> List[Tuple[Budget, float]]:
    result = await db.execute(select(Budget).where(*_covering(user_id, now)))
    budgets = list(result.scalars().all())
    spent = await get_spent_by_budget(budgets, db)
    return [(budget, spent[budget.id]) for budget in budgets]

def _utilization(amount: float, spent: float) -> float:
    return round(spent / amount * 100, 2) if amount else 0.0

@with_db_retry()
async def get_budget_stats(user_id: uuid.UUID, now: datetime, db: AsyncSession) -> Dict[str, Any]:
    rows = await _current_budgets_with_spend(user_id, now, db)
    if not rows:
        return {}

    utilizations = [_utilization(b.amount, spent) for b, spent in rows]
    return {
        "total_budgets": len(rows),
        "total_budgeted": sum(b.amount for b, _ in rows),
        "total_spent": sum(spent for _, spent in rows),
        "total_remaining": sum(max(b.amount - spent, 0.0) for b, spent in rows),
        "over_budget_count": sum(1 for b, spent in rows if spent > b.amount),
        "average_utilization": round(sum(utilizations) / len(utilizations), 2),
    }

@with_db_retry()
async def get_budget_category_breakdown(user_id: uuid.UUID, now: datetime, db: AsyncSession) -> List[Dict[str, Any]]:
    rows = await _current_budgets_with_spend(user_id, now, db)

    grouped: Dict[str, Dict[str, Any]] = defaultdict(lambda: {"count": 0, "total_budgeted": 0.0, "total_spent": 0.0})
    for budget, spent in rows:
        entry = grouped[budget.category]
        entry["count"] += 1
        entry["total_budgeted"] += budget.amount
        entry["total_spent"] += spent

    breakdown = [
        {"category": category, **entry, "utilization": _utilization(entry["total_budgeted"], entry["total_spent"])}
        for category, entry in grouped.items()
    ]
    return sorted(breakdown, key=lambda e: e["total_budgeted"], reverse=True)

async def get_budget_categories(user_id: uuid.UUID, db: AsyncSession) -> List[str]:
    return await distinct_values(
        Budget.category,
        [Budget.user_id == user_id, Budget.status != BudgetStatus.cancelled],
        db,
    )

async def search_budgets(
    user_id: uuid.UUID,
    q: str,
    db: AsyncSession,
    page: int = 1,
    limit: int = 10,
) -> Tuple[List[Budget], int]:
    query = (
        select(Budget)
        .where(
            Budget.user_id == user_id,
            Budget.status != BudgetStatus.cancelled,
            text_search(q, Budget.name, Budget.description, Budget.category),
        )
        .order_by(Budget.start_date.desc())
    )
    return await paginate(query, page, limit, db)

async def refresh_budget_statuses(user_id: uuid.UUID, now: datetime, db: AsyncSession) -> int:
    """Active budgets whose period has ended become overdue. Returns how many changed."""
    result = await db.execute(
        update(Budget)
        .where(
            Budget.user_id == user_id,
            Budget.status == BudgetStatus.active,
            Budget.end_date < now,
        )
        .values(status=BudgetStatus.overdue, updated_at=now)
        .execution_options(synchronize_session=False)
    )
    await db.commit()
    if result.rowcount:
        logger.info(f"⏰ {result.rowcount} budget(s) marked overdue for user {user_id}")
    return result.rowcount
