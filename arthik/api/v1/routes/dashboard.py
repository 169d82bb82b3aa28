# arthik/api/v1/routes/dashboard.py
from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession
from typing import Dict, Any
from enum import Enum
import uuid

from arthik.core.database import get_async_session
from arthik.core.auth import User
from arthik.api.deps import get_current_user
from arthik.crud.budget import get_active_budgets, get_spent_by_budget
from arthik.crud.expense import get_expense_category_breakdown, get_expense_stats
from arthik.crud.goal import get_active_goals
from arthik.crud.income import get_income_stats
from arthik.schemas.budget import BudgetRead
from arthik.schemas.goal import GoalSummary
from arthik.utils.budgeting import period_range, savings_rate
from arthik.utils.dates import utcnow
from arthik.utils.goal_tracking import derive
from arthik.utils.money import format_currency

router = APIRouter(prefix="/dashboard", tags=["dashboard"])

TOP_CATEGORY_COUNT = 5

class TimePeriod(str, Enum):
    daily = "daily"
    weekly = "weekly"
    monthly = "monthly"
    yearly = "yearly"

@router.get("/summary")
async def get_dashboard_summary(
    time_period: TimePeriod = Query(TimePeriod.monthly, description="Period the income/expense cards cover"),
    db: AsyncSession = Depends(get_async_session),
    user: User = Depends(get_current_user),
) -> Dict[str, Any]:
    """
    Everything the dashboard renders in one call:
    - Cards: income, expenses, net balance and savings rate for the period
    - Chart: top expense categories for the period
    - Lists: active goals with progress, active budgets with spend status
    """
    user_id = uuid.UUID(str(user.id))
    currency = user.currency
    now = utcnow()
    start_date, end_date = period_range(time_period.value, now)

    income = await get_income_stats(user_id, db, start_date, end_date)
    expenses = await get_expense_stats(user_id, db, start_date, end_date)
    categories = await get_expense_category_breakdown(user_id, db, start_date, end_date)

    total_income = income["total_amount"]
    total_expenses = expenses["total_amount"]
    net_balance = total_income - total_expenses

    goals = []
    for goal in await get_active_goals(user_id, db):
        progress = derive(goal, now, currency)
        goals.append(GoalSummary(
            id=goal.id,
            title=goal.title,
            target_amount=goal.target_amount,
            current_amount=goal.current_amount,
            priority=goal.priority,
            target_date=goal.target_date,
            progress_percentage=progress.progress_percentage,
            days_remaining=progress.days_remaining,
            progress_status=progress.progress_status,
            priority_color=progress.priority_color,
        ))

    budgets = await get_active_budgets(user_id, now, db)
    spent = await get_spent_by_budget(budgets, db)
    budget_reads = [BudgetRead.from_budget(b, spent[b.id], now, currency) for b in budgets]

    return {
        "period": {
            "type": time_period.value,
            "start_date": start_date,
            "end_date": end_date,
        },
        "cards": {
            "total_income": total_income,
            "total_expenses": total_expenses,
            "net_balance": net_balance,
            "savings_rate": savings_rate(total_income, total_expenses),
            "income_count": income["count"],
            "expense_count": expenses["count"],
            "formatted_total_income": format_currency(total_income, currency),
            "formatted_total_expenses": format_currency(total_expenses, currency),
            "formatted_net_balance": format_currency(net_balance, currency),
        },
        "top_categories": categories[:TOP_CATEGORY_COUNT],
        "goals": [g.model_dump() for g in goals],
        "budgets": [
            {
                "id": b.id,
                "name": b.name,
                "category": b.category,
                "amount": b.amount,
                "spent": b.spent,
                "progress": b.progress,
                "remaining": b.remaining,
                "status_info": b.status_info,
            }
            for b in budget_reads
        ],
    }
