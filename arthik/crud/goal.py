# arthik/crud/goal.py
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select
from sqlalchemy.orm.exc import StaleDataError
from sqlalchemy import String, case, cast, func
from arthik.models.goal import Goal, GoalCategory, GoalContribution, GoalPriority, GoalStatus
from arthik.schemas.goal import GoalCreate, GoalUpdate
from arthik.core.db_utils import with_db_retry
from arthik.core.exceptions import (
    ConcurrentUpdateError,
    FinanceTrackerError,
    InvalidStatusTransition,
    ResourceNotFound,
)
from arthik.crud.aggregates import paginate, text_search
from arthik.utils.goal_tracking import (
    apply_contribution,
    build_milestones,
    can_transition,
    change_status,
    contributions_total,
    is_reconciled,
    validate_goal_dates,
    validate_target_amount,
)
from arthik.utils.money import safe_float
from datetime import datetime
from typing import Any, Dict, List, Optional, Tuple
import logging
import uuid

logger = logging.getLogger(__name__)

GOAL_SORT_FIELDS = ("title", "target_amount", "target_date", "priority", "status", "created_at")

# Nullable columns a PATCH may clear by sending null
CLEARABLE_FIELDS = ("description", "icon", "notes")

# Urgent first when ordering by priority
PRIORITY_RANK = case(
    {
        GoalPriority.urgent: 0,
        GoalPriority.high: 1,
        GoalPriority.medium: 2,
        GoalPriority.low: 3,
    },
    value=Goal.priority,
    else_=4,
)

# Per-goal progress in percent, capped at 100 (target_amount is always > 0)
PROGRESS_EXPR = case(
    (Goal.current_amount >= Goal.target_amount, 100.0),
    else_=Goal.current_amount * 100.0 / Goal.target_amount,
)

def _not_cancelled(user_id: uuid.UUID) -> list:
    return [Goal.user_id == user_id, Goal.status != GoalStatus.cancelled]

async def get_goals_for_user(
    user_id: uuid.UUID,
    db: AsyncSession,
    page: int = 1,
    limit: int = 10,
    category: Optional[GoalCategory] = None,
    priority: Optional[GoalPriority] = None,
    status: Optional[GoalStatus] = None,
    sort_by: str = "target_date",
    sort_order: str = "asc",
) -> Tuple[List[Goal], int]:
    conditions = [Goal.user_id == user_id]
    if status is None:
        conditions.append(Goal.status != GoalStatus.cancelled)
    else:
        conditions.append(Goal.status == status)
    if category:
        conditions.append(Goal.category == category)
    if priority:
        conditions.append(Goal.priority == priority)

    query = select(Goal).where(*conditions)
    if sort_by == "priority":
        # Ascending rank puts urgent first, so flip the direction
        query = query.order_by(PRIORITY_RANK.desc() if sort_order == "asc" else PRIORITY_RANK.asc())
    else:
        column = getattr(Goal, sort_by if sort_by in GOAL_SORT_FIELDS else "target_date")
        query = query.order_by(column.asc() if sort_order == "asc" else column.desc())
    return await paginate(query, page, limit, db)

async def get_active_goals(user_id: uuid.UUID, db: AsyncSession) -> List[Goal]:
    result = await db.execute(
        select(Goal)
        .where(Goal.user_id == user_id, Goal.status == GoalStatus.active)
        .order_by(PRIORITY_RANK, Goal.target_date.asc())
    )
    return list(result.scalars().all())

async def get_goal_by_id(
    goal_id: uuid.UUID,
    user_id: uuid.UUID,
    db: AsyncSession,
    for_update: bool = False,
) -> Optional[Goal]:
    """Owner-scoped lookup. A goal owned by someone else is simply not found."""
    query = (
        select(Goal)
        .where(Goal.id == goal_id, Goal.user_id == user_id)
        .execution_options(populate_existing=True)
    )
    if for_update:
        # No-op on SQLite; row lock on PostgreSQL
        query = query.with_for_update()
    result = await db.execute(query)
    return result.scalar_one_or_none()

async def _commit_goal(goal: Goal, db: AsyncSession) -> Goal:
    goal_id, user_id = goal.id, goal.user_id
    try:
        await db.commit()
    except StaleDataError:
        await db.rollback()
        logger.warning(f"Concurrent update detected on goal {goal_id}")
        raise ConcurrentUpdateError("Goal")
    # Re-read so milestones/contributions/version reflect what was stored
    return await get_goal_by_id(goal_id, user_id, db)

async def create_goal_for_user(user_id: uuid.UUID, goal_in: GoalCreate, now: datetime, db: AsyncSession) -> Goal:
    data = goal_in.model_dump(exclude={"milestones"}, exclude_none=True)
    data.setdefault("start_date", now)
    validate_goal_dates(data["start_date"], data["target_date"])

    new_goal = Goal(
        **data,
        id=uuid.uuid4(),
        user_id=user_id,
        current_amount=0.0,
        status=GoalStatus.active,
    )
    new_goal.milestones = build_milestones([m.model_dump() for m in goal_in.milestones])
    new_goal.contributions = []
    db.add(new_goal)
    goal = await _commit_goal(new_goal, db)
    logger.info(f"🎯 Goal {goal.id} created for user {user_id}: target {goal.target_amount}")
    return goal

async def update_goal(goal: Goal, goal_in: GoalUpdate, db: AsyncSession) -> Goal:
    """
    Apply a direct edit. Everything is checked before the first attribute is
    set, so a rejected edit leaves the goal as it was.
    """
    data = {
        field: value
        for field, value in goal_in.model_dump(exclude_unset=True).items()
        if value is not None or field in CLEARABLE_FIELDS
    }
    new_status = data.pop("status", None)

    validate_goal_dates(data.get("start_date", goal.start_date), data.get("target_date", goal.target_date))
    if new_status is not None and not can_transition(goal.status, new_status):
        raise InvalidStatusTransition(GoalStatus(goal.status).value, GoalStatus(new_status).value)
    if "target_amount" in data or new_status is not None:
        validate_target_amount(
            data.get("target_amount", goal.target_amount),
            goal.current_amount,
            new_status or goal.status,
        )
    if new_status is not None:
        change_status(goal, new_status)

    for field, value in data.items():
        setattr(goal, field, value)
    db.add(goal)
    return await _commit_goal(goal, db)

async def cancel_goal(goal: Goal, db: AsyncSession) -> Goal:
    """Soft delete"""
    change_status(goal, GoalStatus.cancelled)
    db.add(goal)
    return await _commit_goal(goal, db)

async def contribute_to_goal(
    goal_id: uuid.UUID,
    user_id: uuid.UUID,
    amount: float,
    description: Optional[str],
    now: datetime,
    db: AsyncSession,
) -> Goal:
    """
    Load (row-locked), apply and commit as one unit of work. The version
    column turns a lost race into ConcurrentUpdateError instead of a lost
    update.
    """
    goal = await get_goal_by_id(goal_id, user_id, db, for_update=True)
    if goal is None:
        raise ResourceNotFound("Goal")

    try:
        apply_contribution(goal, amount, description, now)
    except FinanceTrackerError as e:
        await db.rollback()
        logger.warning(f"Rejected contribution to goal {goal_id}: {e.message}")
        raise

    if not is_reconciled(goal):
        logger.warning(
            f"Goal {goal_id} saved amount {goal.current_amount} is out of step "
            f"with its contribution log total {contributions_total(goal)}"
        )

    return await _commit_goal(goal, db)

async def get_goal_contributions(goal_id: uuid.UUID, user_id: uuid.UUID, db: AsyncSession) -> List[GoalContribution]:
    result = await db.execute(
        select(GoalContribution)
        .join(Goal, Goal.id == GoalContribution.goal_id)
        .where(Goal.id == goal_id, Goal.user_id == user_id)
        .order_by(GoalContribution.date.desc())
    )
    return list(result.scalars().all())

# ────────────────────────────────────────────────────────────────────────────────
# STATS
# ────────────────────────────────────────────────────────────────────────────────
def _count_where(condition):
    return func.coalesce(func.sum(case((condition, 1), else_=0)), 0)

@with_db_retry()
async def get_goal_stats(user_id: uuid.UUID, db: AsyncSession) -> Dict[str, Any]:
    result = await db.execute(
        select(
            func.count(Goal.id),
            _count_where(Goal.status == GoalStatus.active),
            _count_where(Goal.status == GoalStatus.completed),
            _count_where(Goal.status == GoalStatus.paused),
            _count_where(Goal.priority == GoalPriority.urgent),
            func.coalesce(func.sum(Goal.target_amount), 0.0),
            func.coalesce(func.sum(Goal.current_amount), 0.0),
            func.avg(PROGRESS_EXPR),
        ).where(*_not_cancelled(user_id))
    )
    total, active, completed, paused, urgent, target, current, progress = result.one()
    return {
        "total_goals": total,
        "active_goals": active,
        "completed_goals": completed,
        "paused_goals": paused,
        "urgent_goals": urgent,
        "total_target_amount": safe_float(target),
        "total_current_amount": safe_float(current),
        "average_progress": round(safe_float(progress), 2),
    }

@with_db_retry()
async def get_goal_category_breakdown(user_id: uuid.UUID, db: AsyncSession) -> List[Dict[str, Any]]:
    total_target = func.sum(Goal.target_amount)
    result = await db.execute(
        select(
            Goal.category,
            func.count(Goal.id),
            total_target,
            func.sum(Goal.current_amount),
            func.avg(PROGRESS_EXPR),
        )
        .where(*_not_cancelled(user_id))
        .group_by(Goal.category)
        .order_by(total_target.desc())
    )
    return [
        {
            "category": category,
            "count": count,
            "total_target_amount": safe_float(target),
            "total_current_amount": safe_float(current),
            "average_progress": round(safe_float(progress), 2),
        }
        for category, count, target, current, progress in result.all()
    ]

async def get_goal_categories(user_id: uuid.UUID, db: AsyncSession) -> List[GoalCategory]:
    result = await db.execute(
        select(Goal.category).where(*_not_cancelled(user_id)).distinct().order_by(Goal.category)
    )
    return list(result.scalars().all())

async def search_goals(
    user_id: uuid.UUID,
    q: str,
    db: AsyncSession,
    page: int = 1,
    limit: int = 10,
) -> Tuple[List[Goal], int]:
    query = (
        select(Goal)
        .where(
            *_not_cancelled(user_id),
            text_search(q, Goal.title, Goal.description, cast(Goal.category, String)),
        )
        .order_by(Goal.created_at.desc())
    )
    return await paginate(query, page, limit, db)
