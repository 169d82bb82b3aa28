# arthik/api/v1/routes/expenses.py
from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession
from typing import List, Optional
from datetime import datetime
import uuid

from arthik.schemas.common import MAX_PAGE_SIZE, CategoryBreakdown, MonthlyTrend, Page, StatsOverview
from arthik.schemas.expense import ExpenseCreate, ExpenseRead, ExpenseUpdate
from arthik.crud.expense import (
    create_expense_for_user,
    delete_expense,
    get_expense_by_id,
    get_expense_categories,
    get_expense_category_breakdown,
    get_expense_stats,
    get_expense_trends,
    get_expenses_for_user,
    search_expenses,
    update_expense,
)
from arthik.models.expense import ExpenseStatus
from arthik.core.database import get_async_session
from arthik.core.auth import User
from arthik.core.exceptions import ResourceNotFound
from arthik.api.deps import get_current_user
from arthik.utils.budgeting import DEFAULT_TREND_MONTHS, MAX_TREND_MONTHS
from arthik.utils.dates import utcnow
from arthik.utils.money import format_currency

router = APIRouter(prefix="/expenses", tags=["expenses"])

def _page(expenses, total: int, page: int, limit: int, user: User) -> Page[ExpenseRead]:
    now = utcnow()
    return Page[ExpenseRead].build([ExpenseRead.from_expense(e, now, user.currency) for e in expenses], total, page, limit)

@router.get("", response_model=Page[ExpenseRead])
async def read_expenses(
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=MAX_PAGE_SIZE),
    category: Optional[str] = Query(None, max_length=50),
    status: Optional[ExpenseStatus] = None,
    start_date: Optional[datetime] = None,
    end_date: Optional[datetime] = None,
    min_amount: Optional[float] = Query(None, ge=0),
    max_amount: Optional[float] = Query(None, ge=0),
    sort_by: str = Query("date", pattern="^(date|amount|title|category|created_at)$"),
    sort_order: str = Query("desc", pattern="^(asc|desc)$"),
    db: AsyncSession = Depends(get_async_session),
    user: User = Depends(get_current_user),
):
    user_id = uuid.UUID(str(user.id))
    expenses, total = await get_expenses_for_user(
        user_id, db,
        page=page, limit=limit,
        category=category, status=status,
        start_date=start_date, end_date=end_date,
        min_amount=min_amount, max_amount=max_amount,
        sort_by=sort_by, sort_order=sort_order,
    )
    return _page(expenses, total, page, limit, user)

@router.post("", response_model=ExpenseRead, status_code=status.HTTP_201_CREATED)
async def create_expense(
    ex_in: ExpenseCreate,
    db: AsyncSession = Depends(get_async_session),
    user: User = Depends(get_current_user),
):
    user_id = uuid.UUID(str(user.id))
    expense = await create_expense_for_user(user_id, ex_in, db)
    return ExpenseRead.from_expense(expense, utcnow(), user.currency)

@router.get("/search", response_model=Page[ExpenseRead])
async def search_expenses_endpoint(
    q: str = Query(..., min_length=1, max_length=100),
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=MAX_PAGE_SIZE),
    db: AsyncSession = Depends(get_async_session),
    user: User = Depends(get_current_user),
):
    user_id = uuid.UUID(str(user.id))
    expenses, total = await search_expenses(user_id, q, db, page=page, limit=limit)
    return _page(expenses, total, page, limit, user)

@router.get("/categories", response_model=List[str])
async def read_expense_categories(
    db: AsyncSession = Depends(get_async_session),
    user: User = Depends(get_current_user),
):
    user_id = uuid.UUID(str(user.id))
    return await get_expense_categories(user_id, db)

@router.get("/stats/overview", response_model=StatsOverview)
async def read_expense_stats(
    start_date: Optional[datetime] = None,
    end_date: Optional[datetime] = None,
    db: AsyncSession = Depends(get_async_session),
    user: User = Depends(get_current_user),
):
    user_id = uuid.UUID(str(user.id))
    stats = await get_expense_stats(user_id, db, start_date, end_date)
    return StatsOverview(**stats, formatted_total=format_currency(stats["total_amount"], user.currency))

@router.get("/stats/categories", response_model=List[CategoryBreakdown])
async def read_expense_category_stats(
    start_date: Optional[datetime] = None,
    end_date: Optional[datetime] = None,
    db: AsyncSession = Depends(get_async_session),
    user: User = Depends(get_current_user),
):
    user_id = uuid.UUID(str(user.id))
    return await get_expense_category_breakdown(user_id, db, start_date, end_date)

@router.get("/stats/trends", response_model=List[MonthlyTrend])
async def read_expense_trends(
    months: int = Query(DEFAULT_TREND_MONTHS, ge=1, le=MAX_TREND_MONTHS),
    db: AsyncSession = Depends(get_async_session),
    user: User = Depends(get_current_user),
):
    user_id = uuid.UUID(str(user.id))
    return await get_expense_trends(user_id, months, utcnow(), db)

@router.get("/{expense_id}", response_model=ExpenseRead)
async def read_expense(
    expense_id: uuid.UUID,
    db: AsyncSession = Depends(get_async_session),
    user: User = Depends(get_current_user),
):
    user_id = uuid.UUID(str(user.id))
    expense = await get_expense_by_id(expense_id, user_id, db)
    if not expense:
        raise ResourceNotFound("Expense")
    return ExpenseRead.from_expense(expense, utcnow(), user.currency)

@router.patch("/{expense_id}", response_model=ExpenseRead)
async def update_expense_endpoint(
    expense_id: uuid.UUID,
    ex_in: ExpenseUpdate,
    db: AsyncSession = Depends(get_async_session),
    user: User = Depends(get_current_user),
):
    user_id = uuid.UUID(str(user.id))
    expense = await get_expense_by_id(expense_id, user_id, db)
    if not expense:
        raise ResourceNotFound("Expense")
    expense = await update_expense(expense, ex_in, db)
    return ExpenseRead.from_expense(expense, utcnow(), user.currency)

@router.delete("/{expense_id}", response_model=ExpenseRead)
async def delete_expense_endpoint(
    expense_id: uuid.UUID,
    db: AsyncSession = Depends(get_async_session),
    user: User = Depends(get_current_user),
):
    user_id = uuid.UUID(str(user.id))
    expense = await get_expense_by_id(expense_id, user_id, db)
    if not expense:
        raise ResourceNotFound("Expense")
    expense = await delete_expense(expense, db)
    return ExpenseRead.from_expense(expense, utcnow(), user.currency)
