# arthik/api/v1/routes/budgets.py
from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession
from typing import List, Optional
import uuid

from arthik.schemas.common import MAX_PAGE_SIZE, Page
from arthik.schemas.budget import (
    BudgetCategoryBreakdown,
    BudgetCreate,
    BudgetRead,
    BudgetRefreshResult,
    BudgetStats,
    BudgetUpdate,
)
from arthik.crud.budget import (
    create_budget_for_user,
    delete_budget,
    get_active_budgets,
    get_budget_by_id,
    get_budget_categories,
    get_budget_category_breakdown,
    get_budget_spent,
    get_budget_stats,
    get_budgets_for_user,
    get_spent_by_budget,
    refresh_budget_statuses,
    search_budgets,
    update_budget,
)
from arthik.models.budget import Budget, BudgetPeriodType, BudgetStatus
from arthik.core.database import get_async_session
from arthik.core.auth import User
from arthik.core.exceptions import ResourceNotFound
from arthik.api.deps import get_current_user
from arthik.utils.dates import utcnow

router = APIRouter(prefix="/budgets", tags=["budgets"])

async def _read_many(budgets: List[Budget], user: User, db: AsyncSession) -> List[BudgetRead]:
    now = utcnow()
    spent = await get_spent_by_budget(budgets, db)
    return [BudgetRead.from_budget(b, spent[b.id], now, user.currency) for b in budgets]

async def _read_one(budget: Budget, user: User, db: AsyncSession) -> BudgetRead:
    return BudgetRead.from_budget(budget, await get_budget_spent(budget, db), utcnow(), user.currency)

@router.get("", response_model=Page[BudgetRead])
async def read_budgets(
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=MAX_PAGE_SIZE),
    category: Optional[str] = Query(None, max_length=50),
    status: Optional[BudgetStatus] = None,
    period_type: Optional[BudgetPeriodType] = None,
    sort_by: str = Query("start_date", pattern="^(start_date|end_date|amount|name|category|created_at)$"),
    sort_order: str = Query("desc", pattern="^(asc|desc)$"),
    db: AsyncSession = Depends(get_async_session),
    user: User = Depends(get_current_user),
):
    user_id = uuid.UUID(str(user.id))
    budgets, total = await get_budgets_for_user(
        user_id, db,
        page=page, limit=limit,
        category=category, status=status, period_type=period_type,
        sort_by=sort_by, sort_order=sort_order,
    )
    return Page[BudgetRead].build(await _read_many(budgets, user, db), total, page, limit)

@router.post("", response_model=BudgetRead, status_code=status.HTTP_201_CREATED)
async def create_budget(
    budget_in: BudgetCreate,
    db: AsyncSession = Depends(get_async_session),
    user: User = Depends(get_current_user),
):
    user_id = uuid.UUID(str(user.id))
    budget = await create_budget_for_user(user_id, budget_in, db)
    return await _read_one(budget, user, db)

@router.get("/active", response_model=List[BudgetRead])
async def read_active_budgets(
    db: AsyncSession = Depends(get_async_session),
    user: User = Depends(get_current_user),
):
    """Active budgets whose period covers today"""
    user_id = uuid.UUID(str(user.id))
    return await _read_many(await get_active_budgets(user_id, utcnow(), db), user, db)

@router.get("/search", response_model=Page[BudgetRead])
async def search_budgets_endpoint(
    q: str = Query(..., min_length=1, max_length=100),
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=MAX_PAGE_SIZE),
    db: AsyncSession = Depends(get_async_session),
    user: User = Depends(get_current_user),
):
    user_id = uuid.UUID(str(user.id))
    budgets, total = await search_budgets(user_id, q, db, page=page, limit=limit)
    return Page[BudgetRead].build(await _read_many(budgets, user, db), total, page, limit)

@router.get("/categories", response_model=List[str])
async def read_budget_categories(
    db: AsyncSession = Depends(get_async_session),
    user: User = Depends(get_current_user),
):
    user_id = uuid.UUID(str(user.id))
    return await get_budget_categories(user_id, db)

@router.get("/stats/overview", response_model=BudgetStats)
async def read_budget_stats(
    db: AsyncSession = Depends(get_async_session),
    user: User = Depends(get_current_user),
):
    user_id = uuid.UUID(str(user.id))
    return BudgetStats(**await get_budget_stats(user_id, utcnow(), db))

@router.get("/stats/categories", response_model=List[BudgetCategoryBreakdown])
async def read_budget_category_stats(
    db: AsyncSession = Depends(get_async_session),
    user: User = Depends(get_current_user),
):
    user_id = uuid.UUID(str(user.id))
    return await get_budget_category_breakdown(user_id, utcnow(), db)

@router.post("/refresh-status", response_model=BudgetRefreshResult)
async def refresh_statuses(
    db: AsyncSession = Depends(get_async_session),
    user: User = Depends(get_current_user),
):
    """Mark active budgets whose period has ended as overdue"""
    user_id = uuid.UUID(str(user.id))
    return BudgetRefreshResult(updated_count=await refresh_budget_statuses(user_id, utcnow(), db))

@router.get("/{budget_id}", response_model=BudgetRead)
async def read_budget(
    budget_id: uuid.UUID,
    db: AsyncSession = Depends(get_async_session),
    user: User = Depends(get_current_user),
):
    user_id = uuid.UUID(str(user.id))
    budget = await get_budget_by_id(budget_id, user_id, db)
    if not budget:
        raise ResourceNotFound("Budget")
    return await _read_one(budget, user, db)

@router.patch("/{budget_id}", response_model=BudgetRead)
async def update_budget_endpoint(
    budget_id: uuid.UUID,
    budget_in: BudgetUpdate,
    db: AsyncSession = Depends(get_async_session),
    user: User = Depends(get_current_user),
):
    user_id = uuid.UUID(str(user.id))
    budget = await get_budget_by_id(budget_id, user_id, db)
    if not budget:
        raise ResourceNotFound("Budget")
    budget = await update_budget(budget, budget_in, db)
    return await _read_one(budget, user, db)

@router.delete("/{budget_id}", response_model=BudgetRead)
async def delete_budget_endpoint(
    budget_id: uuid.UUID,
    db: AsyncSession = Depends(get_async_session),
    user: User = Depends(get_current_user),
):
    user_id = uuid.UUID(str(user.id))
    budget = await get_budget_by_id(budget_id, user_id, db)
    if not budget:
        raise ResourceNotFound("Budget")
    budget = await delete_budget(budget, db)
    return await _read_one(budget, user, db)
