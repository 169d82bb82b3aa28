# arthik/api/v1/routes/incomes.py
from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession
from typing import List, Optional
from datetime import datetime
import uuid

from arthik.schemas.common import MAX_PAGE_SIZE, CategoryBreakdown, MonthlyTrend, Page, StatsOverview
from arthik.schemas.income import IncomeCreate, IncomeRead, IncomeUpdate, SourceBreakdown
from arthik.crud.income import (
    create_income_for_user,
    delete_income,
    get_income_by_id,
    get_income_categories,
    get_income_category_breakdown,
    get_income_source_breakdown,
    get_income_sources,
    get_income_stats,
    get_income_trends,
    get_incomes_for_user,
    search_incomes,
    update_income,
)
from arthik.models.income import IncomeSource, IncomeStatus
from arthik.core.database import get_async_session
from arthik.core.auth import User
from arthik.core.exceptions import ResourceNotFound
from arthik.api.deps import get_current_user
from arthik.utils.budgeting import DEFAULT_TREND_MONTHS, MAX_TREND_MONTHS
from arthik.utils.dates import utcnow
from arthik.utils.money import format_currency

router = APIRouter(prefix="/incomes", tags=["incomes"])

def _page(incomes, total: int, page: int, limit: int, user: User) -> Page[IncomeRead]:
    now = utcnow()
    return Page[IncomeRead].build([IncomeRead.from_income(i, now, user.currency) for i in incomes], total, page, limit)

@router.get("", response_model=Page[IncomeRead])
async def read_incomes(
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=MAX_PAGE_SIZE),
    category: Optional[str] = Query(None, max_length=50),
    source: Optional[IncomeSource] = None,
    status: Optional[IncomeStatus] = None,
    start_date: Optional[datetime] = None,
    end_date: Optional[datetime] = None,
    min_amount: Optional[float] = Query(None, ge=0),
    max_amount: Optional[float] = Query(None, ge=0),
    sort_by: str = Query("date", pattern="^(date|amount|title|category|source|created_at)$"),
    sort_order: str = Query("desc", pattern="^(asc|desc)$"),
    db: AsyncSession = Depends(get_async_session),
    user: User = Depends(get_current_user),
):
    user_id = uuid.UUID(str(user.id))
    incomes, total = await get_incomes_for_user(
        user_id, db,
        page=page, limit=limit,
        category=category, source=source, status=status,
        start_date=start_date, end_date=end_date,
        min_amount=min_amount, max_amount=max_amount,
        sort_by=sort_by, sort_order=sort_order,
    )
    return _page(incomes, total, page, limit, user)

@router.post("", response_model=IncomeRead, status_code=status.HTTP_201_CREATED)
async def create_income(
    inc_in: IncomeCreate,
    db: AsyncSession = Depends(get_async_session),
    user: User = Depends(get_current_user),
):
    user_id = uuid.UUID(str(user.id))
    income = await create_income_for_user(user_id, inc_in, db)
    return IncomeRead.from_income(income, utcnow(), user.currency)

@router.get("/search", response_model=Page[IncomeRead])
async def search_incomes_endpoint(
    q: str = Query(..., min_length=1, max_length=100),
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=MAX_PAGE_SIZE),
    db: AsyncSession = Depends(get_async_session),
    user: User = Depends(get_current_user),
):
    user_id = uuid.UUID(str(user.id))
    incomes, total = await search_incomes(user_id, q, db, page=page, limit=limit)
    return _page(incomes, total, page, limit, user)

@router.get("/categories", response_model=List[str])
async def read_income_categories(
    db: AsyncSession = Depends(get_async_session),
    user: User = Depends(get_current_user),
):
    user_id = uuid.UUID(str(user.id))
    return await get_income_categories(user_id, db)

@router.get("/sources", response_model=List[IncomeSource])
async def read_income_sources(
    db: AsyncSession = Depends(get_async_session),
    user: User = Depends(get_current_user),
):
    user_id = uuid.UUID(str(user.id))
    return await get_income_sources(user_id, db)

@router.get("/stats/overview", response_model=StatsOverview)
async def read_income_stats(
    start_date: Optional[datetime] = None,
    end_date: Optional[datetime] = None,
    db: AsyncSession = Depends(get_async_session),
    user: User = Depends(get_current_user),
):
    user_id = uuid.UUID(str(user.id))
    stats = await get_income_stats(user_id, db, start_date, end_date)
    return StatsOverview(**stats, formatted_total=format_currency(stats["total_amount"], user.currency))

@router.get("/stats/categories", response_model=List[CategoryBreakdown])
async def read_income_category_stats(
    start_date: Optional[datetime] = None,
    end_date: Optional[datetime] = None,
    db: AsyncSession = Depends(get_async_session),
    user: User = Depends(get_current_user),
):
    user_id = uuid.UUID(str(user.id))
    return await get_income_category_breakdown(user_id, db, start_date, end_date)

@router.get("/stats/sources", response_model=List[SourceBreakdown])
async def read_income_source_stats(
    start_date: Optional[datetime] = None,
    end_date: Optional[datetime] = None,
    db: AsyncSession = Depends(get_async_session),
    user: User = Depends(get_current_user),
):
    user_id = uuid.UUID(str(user.id))
    return await get_income_source_breakdown(user_id, db, start_date, end_date)

@router.get("/stats/trends", response_model=List[MonthlyTrend])
async def read_income_trends(
    months: int = Query(DEFAULT_TREND_MONTHS, ge=1, le=MAX_TREND_MONTHS),
    db: AsyncSession = Depends(get_async_session),
    user: User = Depends(get_current_user),
):
    user_id = uuid.UUID(str(user.id))
    return await get_income_trends(user_id, months, utcnow(), db)

@router.get("/{income_id}", response_model=IncomeRead)
async def read_income(
    income_id: uuid.UUID,
    db: AsyncSession = Depends(get_async_session),
    user: User = Depends(get_current_user),
):
    user_id = uuid.UUID(str(user.id))
    income = await get_income_by_id(income_id, user_id, db)
    if not income:
        raise ResourceNotFound("Income")
    return IncomeRead.from_income(income, utcnow(), user.currency)

@router.patch("/{income_id}", response_model=IncomeRead)
async def update_income_endpoint(
    income_id: uuid.UUID,
    inc_in: IncomeUpdate,
    db: AsyncSession = Depends(get_async_session),
    user: User = Depends(get_current_user),
):
    user_id = uuid.UUID(str(user.id))
    income = await get_income_by_id(income_id, user_id, db)
    if not income:
        raise ResourceNotFound("Income")
    income = await update_income(income, inc_in, db)
    return IncomeRead.from_income(income, utcnow(), user.currency)

@router.delete("/{income_id}", response_model=IncomeRead)
async def delete_income_endpoint(
    income_id: uuid.UUID,
    db: AsyncSession = Depends(get_async_session),
    user: User = Depends(get_current_user),
):
    user_id = uuid.UUID(str(user.id))
    income = await get_income_by_id(income_id, user_id, db)
    if not income:
        raise ResourceNotFound("Income")
    income = await delete_income(income, db)
    return IncomeRead.from_income(income, utcnow(), user.currency)
