# arthik/crud/income.py
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select
from arthik.models.income import Income, IncomeSource, IncomeStatus
from arthik.schemas.income import IncomeCreate, IncomeUpdate
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

INCOME_SORT_FIELDS = ("date", "amount", "title", "category", "source", "created_at")

def _counted(user_id: uuid.UUID) -> list:
    return [Income.user_id == user_id, Income.status != IncomeStatus.cancelled]

async def get_incomes_for_user(
    user_id: uuid.UUID,
    db: AsyncSession,
    page: int = 1,
    limit: int = 10,
    category: Optional[str] = None,
    source: Optional[IncomeSource] = None,
    status: Optional[IncomeStatus] = None,
    start_date: Optional[datetime] = None,
    end_date: Optional[datetime] = None,
    min_amount: Optional[float] = None,
    max_amount: Optional[float] = None,
    sort_by: str = "date",
    sort_order: str = "desc",
) -> Tuple[List[Income], int]:
    conditions = [Income.user_id == user_id]
    if status is None:
        conditions.append(Income.status != IncomeStatus.cancelled)
    else:
        conditions.append(Income.status == status)
    if category:
        conditions.append(Income.category == category)
    if source:
        conditions.append(Income.source == source)
    conditions += date_conditions(Income.date, start_date, end_date)
    conditions += amount_conditions(Income.amount, min_amount, max_amount)

    query = apply_sort(select(Income).where(*conditions), Income, sort_by, sort_order, INCOME_SORT_FIELDS, "date")
    return await paginate(query, page, limit, db)

async def get_income_by_id(income_id: uuid.UUID, user_id: uuid.UUID, db: AsyncSession) -> Optional[Income]:
    result = await db.execute(
        select(Income).where(Income.id == income_id, Income.user_id == user_id)
    )
    return result.scalar_one_or_none()

async def create_income_for_user(user_id: uuid.UUID, inc_in: IncomeCreate, db: AsyncSession) -> Income:
    new_inc = Income(**inc_in.model_dump(exclude_none=True), user_id=user_id)
    db.add(new_inc)
    await db.commit()
    await db.refresh(new_inc)
    logger.info(f"Income {new_inc.id} created for user {user_id}: {new_inc.amount} from {new_inc.source}")
    return new_inc

async def update_income(income: Income, inc_in: IncomeUpdate, db: AsyncSession) -> Income:
    for field, value in inc_in.model_dump(exclude_unset=True, exclude_none=True).items():
        setattr(income, field, value)
    db.add(income)
    await db.commit()
    await db.refresh(income)
    return income

async def delete_income(income: Income, db: AsyncSession) -> Income:
    income.status = IncomeStatus.cancelled
    db.add(income)
    await db.commit()
    await db.refresh(income)
    logger.info(f"Income {income.id} cancelled")
    return income

@with_db_retry()
async def get_income_stats(
    user_id: uuid.UUID,
    db: AsyncSession,
    start_date: Optional[datetime] = None,
    end_date: Optional[datetime] = None,
) -> Dict[str, Any]:
    conditions = _counted(user_id) + date_conditions(Income.date, start_date, end_date)
    return await stats_overview(Income.amount, conditions, db)

@with_db_retry()
async def get_income_category_breakdown(
    user_id: uuid.UUID,
    db: AsyncSession,
    start_date: Optional[datetime] = None,
    end_date: Optional[datetime] = None,
) -> List[Dict[str, Any]]:
    conditions = _counted(user_id) + date_conditions(Income.date, start_date, end_date)
    return await grouped_totals(Income.category, Income.amount, conditions, db)

@with_db_retry()
async def get_income_source_breakdown(
    user_id: uuid.UUID,
    db: AsyncSession,
    start_date: Optional[datetime] = None,
    end_date: Optional[datetime] = None,
) -> List[Dict[str, Any]]:
    conditions = _counted(user_id) + date_conditions(Income.date, start_date, end_date)
    return await grouped_totals(Income.source, Income.amount, conditions, db, key="source")

@with_db_retry()
async def get_income_trends(user_id: uuid.UUID, months: int, now: datetime, db: AsyncSession) -> List[Dict[str, Any]]:
    return await monthly_trends(Income.date, Income.amount, _counted(user_id), months, now, db)

async def get_income_categories(user_id: uuid.UUID, db: AsyncSession) -> List[str]:
    return await distinct_values(Income.category, _counted(user_id), db)

async def get_income_sources(user_id: uuid.UUID, db: AsyncSession) -> List[IncomeSource]:
    return await distinct_values(Income.source, _counted(user_id), db)

async def search_incomes(
    user_id: uuid.UUID,
    q: str,
    db: AsyncSession,
    page: int = 1,
    limit: int = 10,
) -> Tuple[List[Income], int]:
    query = (
        select(Income)
        .where(*_counted(user_id), text_search(q, Income.title, Income.description, Income.category))
        .order_by(Income.date.desc())
    )
    return await paginate(query, page, limit, db)
