# arthik/crud/expense.py
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select
from arthik.models.expense import Expense, ExpenseStatus
from arthik.schemas.expense import ExpenseCreate, ExpenseUpdate
from arthik.core.db_utils import with_db_retry
from arthik.crud.aggregates import (
    amount_conditions,
    apply_sort,
    date_conditions,
    distinct_values,
    grouped_totals,
    monthly_trends,
    paginate,
    stats_overview,
    text_search,
)
from datetime import datetime
from typing import Any, Dict, List, Optional, Tuple
import logging
import uuid

logger = logging.getLogger(__name__)

EXPENSE_SORT_FIELDS = ("date", "amount", "title", "category", "created_at")

def _counted(user_id: uuid.UUID) -> list:
    """Conditions for expenses that count towards totals (cancelled ones don't)"""
    return [Expense.user_id == user_id, Expense.status != ExpenseStatus.cancelled]

async def get_expenses_for_user(
    user_id: uuid.UUID,
    db: AsyncSession,
    page: int = 1,
    limit: int = 10,
    category: Optional[str] = None,
    status: Optional[ExpenseStatus] = None,
    start_date: Optional[datetime] = None,
    end_date: Optional[datetime] = None,
    min_amount: Optional[float] = None,
    max_amount: Optional[float] = None,
    sort_by: str = "date",
    sort_order: str = "desc",
) -> Tuple[List[Expense], int]:
    conditions = [Expense.user_id == user_id]
    # Cancelled (soft-deleted) expenses only show up when asked for explicitly
    if status is None:
        conditions.append(Expense.status != ExpenseStatus.cancelled)
    else:
        conditions.append(Expense.status == status)
    if category:
        conditions.append(Expense.category == category)
    conditions += date_conditions(Expense.date, start_date, end_date)
    conditions += amount_conditions(Expense.amount, min_amount, max_amount)

    query = apply_sort(select(Expense).where(*conditions), Expense, sort_by, sort_order, EXPENSE_SORT_FIELDS, "date")
    return await paginate(query, page, limit, db)

async def get_expense_by_id(expense_id: uuid.UUID, user_id: uuid.UUID, db: AsyncSession) -> Optional[Expense]:
    result = await db.execute(
        select(Expense).where(Expense.id == expense_id, Expense.user_id == user_id)
    )
    return result.scalar_one_or_none()

async def create_expense_for_user(user_id: uuid.UUID, ex_in: ExpenseCreate, db: AsyncSession) -> Expense:
    new_ex = Expense(**ex_in.model_dump(exclude_none=True), user_id=user_id)
    db.add(new_ex)
    await db.commit()
    await db.refresh(new_ex)
    logger.info(f"Expense {new_ex.id} created for user {user_id}: {new_ex.amount} in {new_ex.category}")
    return new_ex

async def update_expense(expense: Expense, ex_in: ExpenseUpdate, db: AsyncSession) -> Expense:
    for field, value in ex_in.model_dump(exclude_unset=True, exclude_none=True).items():
        setattr(expense, field, value)
    db.add(expense)
    await db.commit()
    await db.refresh(expense)
    return expense

async def delete_expense(expense: Expense, db: AsyncSession) -> Expense:
    """Soft delete: the row stays, marked cancelled"""
    expense.status = ExpenseStatus.cancelled
    db.add(expense)
    await db.commit()
    await db.refresh(expense)
    logger.info(f"Expense {expense.id} cancelled")
    return expense

@with_db_retry()
async def get_expense_stats(
    user_id: uuid.UUID,
    db: AsyncSession,
    start_date: Optional[datetime] = None,
    end_date: Optional[datetime] = None,
) -> Dict[str, Any]:
    conditions = _counted(user_id) + date_conditions(Expense.date, start_date, end_date)
    return await stats_overview(Expense.amount, conditions, db)

@with_db_retry()
async def get_expense_category_breakdown(
    user_id: uuid.UUID,
    db: AsyncSession,
    start_date: Optional[datetime] = None,
    end_date: Optional[datetime] = None,
) -> List[Dict[str, Any]]:
    conditions = _counted(user_id) + date_conditions(Expense.date, start_date, end_date)
    return await grouped_totals(Expense.category, Expense.amount, conditions, db)

@with_db_retry()
async def get_expense_trends(user_id: uuid.UUID, months: int, now: datetime, db: AsyncSession) -> List[Dict[str, Any]]:
    return await monthly_trends(Expense.date, Expense.amount, _counted(user_id), months, now, db)

async def get_expense_categories(user_id: uuid.UUID, db: AsyncSession) -> List[str]:
    return await distinct_values(Expense.category, _counted(user_id), db)

async def search_expenses(
    user_id: uuid.UUID,
    q: str,
    db: AsyncSession,
    page: int = 1,
    limit: int = 10,
) -> Tuple[List[Expense], int]:
    query = (
        select(Expense)
        .where(*_counted(user_id), text_search(q, Expense.title, Expense.description, Expense.category, Expense.location))
        .order_by(Expense.date.desc())
    )
    return await paginate(query, page, limit, db)
