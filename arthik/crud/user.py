# arthik/crud/user.py
from sqlalchemy.ext.asyncio import AsyncSession
from arthik.crud.expense import get_expense_stats
from arthik.crud.income import get_income_stats
from typing import Any, Dict
import uuid

async def get_user_stats(user_id: uuid.UUID, db: AsyncSession) -> Dict[str, Any]:
    """Lifetime totals across incomes and expenses, cancelled records excluded"""
    income = await get_income_stats(user_id, db)
    expenses = await get_expense_stats(user_id, db)
    return {
        "total_income": income["total_amount"],
        "total_expenses": expenses["total_amount"],
        "income_count": income["count"],
        "expense_count": expenses["count"],
        "net_balance": income["total_amount"] - expenses["total_amount"],
    }
