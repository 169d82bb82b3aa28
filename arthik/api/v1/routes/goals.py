# arthik/api/v1/routes/goals.py
from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession
from typing import List, Optional
import uuid

from arthik.schemas.common import MAX_PAGE_SIZE, Page
from arthik.schemas.goal import (
    ContributionCreate,
    ContributionRead,
    GoalCategoryBreakdown,
    GoalCreate,
    GoalRead,
    GoalStats,
    GoalUpdate,
)
from arthik.crud.goal import (
    cancel_goal,
    contribute_to_goal,
    create_goal_for_user,
    get_active_goals,
    get_goal_by_id,
    get_goal_categories,
    get_goal_category_breakdown,
    get_goal_contributions,
    get_goal_stats,
    get_goals_for_user,
    search_goals,
    update_goal,
)
from arthik.models.goal import GoalCategory, GoalPriority, GoalStatus
from arthik.core.database import get_async_session
from arthik.core.auth import User
from arthik.core.exceptions import ResourceNotFound
from arthik.api.deps import get_current_user
from arthik.utils.dates import utcnow

router = APIRouter(prefix="/goals", tags=["goals"])

def _page(goals, total: int, page: int, limit: int, user: User) -> Page[GoalRead]:
    now = utcnow()
    return Page[GoalRead].build([GoalRead.from_goal(g, now, user.currency) for g in goals], total, page, limit)

@router.get("", response_model=Page[GoalRead])
async def read_goals(
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=MAX_PAGE_SIZE),
    category: Optional[GoalCategory] = None,
    priority: Optional[GoalPriority] = None,
    status: Optional[GoalStatus] = Query(None, description="Cancelled goals are only listed when asked for"),
    sort_by: str = Query("target_date", pattern="^(title|target_amount|target_date|priority|status|created_at)$"),
    sort_order: str = Query("asc", pattern="^(asc|desc)$"),
    db: AsyncSession = Depends(get_async_session),
    user: User = Depends(get_current_user),
):
    user_id = uuid.UUID(str(user.id))
    goals, total = await get_goals_for_user(
        user_id, db,
        page=page, limit=limit,
        category=category, priority=priority, status=status,
        sort_by=sort_by, sort_order=sort_order,
    )
    return _page(goals, total, page, limit, user)

@router.post("", response_model=GoalRead, status_code=status.HTTP_201_CREATED)
async def create_goal(
    goal_in: GoalCreate,
    db: AsyncSession = Depends(get_async_session),
    user: User = Depends(get_current_user),
):
    user_id = uuid.UUID(str(user.id))
    now = utcnow()
    goal = await create_goal_for_user(user_id, goal_in, now, db)
    return GoalRead.from_goal(goal, now, user.currency)

@router.get("/active", response_model=List[GoalRead])
async def read_active_goals(
    db: AsyncSession = Depends(get_async_session),
    user: User = Depends(get_current_user),
):
    """Active goals, most urgent and soonest due first"""
    user_id = uuid.UUID(str(user.id))
    now = utcnow()
    return [GoalRead.from_goal(g, now, user.currency) for g in await get_active_goals(user_id, db)]

@router.get("/search", response_model=Page[GoalRead])
async def search_goals_endpoint(
    q: str = Query(..., min_length=1, max_length=100),
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=MAX_PAGE_SIZE),
    db: AsyncSession = Depends(get_async_session),
    user: User = Depends(get_current_user),
):
    user_id = uuid.UUID(str(user.id))
    goals, total = await search_goals(user_id, q, db, page=page, limit=limit)
    return _page(goals, total, page, limit, user)

@router.get("/categories", response_model=List[GoalCategory])
async def read_goal_categories(
    db: AsyncSession = Depends(get_async_session),
    user: User = Depends(get_current_user),
):
    user_id = uuid.UUID(str(user.id))
    return await get_goal_categories(user_id, db)

@router.get("/stats/overview", response_model=GoalStats)
async def read_goal_stats(
    db: AsyncSession = Depends(get_async_session),
    user: User = Depends(get_current_user),
):
    user_id = uuid.UUID(str(user.id))
    return GoalStats(**await get_goal_stats(user_id, db))

@router.get("/stats/categories", response_model=List[GoalCategoryBreakdown])
async def read_goal_category_stats(
    db: AsyncSession = Depends(get_async_session),
    user: User = Depends(get_current_user),
):
    user_id = uuid.UUID(str(user.id))
    return await get_goal_category_breakdown(user_id, db)

@router.get("/{goal_id}", response_model=GoalRead)
async def read_goal(
    goal_id: uuid.UUID,
    db: AsyncSession = Depends(get_async_session),
    user: User = Depends(get_current_user),
):
    user_id = uuid.UUID(str(user.id))
    goal = await get_goal_by_id(goal_id, user_id, db)
    if not goal:
        raise ResourceNotFound("Goal")
    return GoalRead.from_goal(goal, utcnow(), user.currency)

@router.patch("/{goal_id}", response_model=GoalRead)
async def update_goal_endpoint(
    goal_id: uuid.UUID,
    goal_in: GoalUpdate,
    db: AsyncSession = Depends(get_async_session),
    user: User = Depends(get_current_user),
):
    user_id = uuid.UUID(str(user.id))
    goal = await get_goal_by_id(goal_id, user_id, db)
    if not goal:
        raise ResourceNotFound("Goal")
    goal = await update_goal(goal, goal_in, db)
    return GoalRead.from_goal(goal, utcnow(), user.currency)

@router.delete("/{goal_id}", response_model=GoalRead)
async def delete_goal_endpoint(
    goal_id: uuid.UUID,
    db: AsyncSession = Depends(get_async_session),
    user: User = Depends(get_current_user),
):
    """Soft delete: the goal is kept with status cancelled"""
    user_id = uuid.UUID(str(user.id))
    goal = await get_goal_by_id(goal_id, user_id, db)
    if not goal:
        raise ResourceNotFound("Goal")
    goal = await cancel_goal(goal, db)
    return GoalRead.from_goal(goal, utcnow(), user.currency)

@router.post("/{goal_id}/contribute", response_model=GoalRead)
async def contribute(
    goal_id: uuid.UUID,
    contribution: ContributionCreate,
    db: AsyncSession = Depends(get_async_session),
    user: User = Depends(get_current_user),
):
    user_id = uuid.UUID(str(user.id))
    now = utcnow()
    goal = await contribute_to_goal(goal_id, user_id, contribution.amount, contribution.description, now, db)
    return GoalRead.from_goal(goal, now, user.currency)

@router.get("/{goal_id}/contributions", response_model=List[ContributionRead])
async def read_contributions(
    goal_id: uuid.UUID,
    db: AsyncSession = Depends(get_async_session),
    user: User = Depends(get_current_user),
):
    """Contribution log, newest first"""
    user_id = uuid.UUID(str(user.id))
    if not await get_goal_by_id(goal_id, user_id, db):
        raise ResourceNotFound("Goal")
    return await get_goal_contributions(goal_id, user_id, db)
