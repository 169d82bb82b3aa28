# arthik/schemas/user.py
# UserRead / UserCreate / UserUpdate live in core/auth.py next to the
# fastapi-users manager; this module holds the extra read shapes.
from typing import Optional
from pydantic import BaseModel

class UserStats(BaseModel):
    total_income: float = 0.0
    total_expenses: float = 0.0
    income_count: int = 0
    expense_count: int = 0
    net_balance: float = 0.0
    formatted_net_balance: Optional[str] = None
