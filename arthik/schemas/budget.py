# arthik/schemas/budget.py
from typing import Dict, List, Optional
from pydantic import BaseModel, Field, constr, model_validator
from datetime import datetime
import uuid

from arthik.models.budget import BudgetPeriodType, BudgetStatus
from arthik.utils.budgeting import derive_budget
from arthik.utils.dates import as_utc

MAX_AMOUNT = 999_999_999
HEX_COLOR = r"^#[0-9A-Fa-f]{6}$"
Tag = constr(strip_whitespace=True, max_length=50)

class BudgetBase(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    amount: float = Field(..., gt=0, le=MAX_AMOUNT)
    category: str = Field(..., min_length=1, max_length=50, description="Matched against expense categories")
    description: Optional[str] = Field(None, max_length=500)
    start_date: datetime
    end_date: datetime
    period_type: BudgetPeriodType = BudgetPeriodType.monthly
    color: str = Field("#3b82f6", pattern=HEX_COLOR)
    icon: Optional[str] = Field("💰", max_length=10)
    alert_threshold: int = Field(80, ge=1, le=100)
    tags: List[Tag] = []
    notes: Optional[str] = Field(None, max_length=1000)

class BudgetCreate(BudgetBase):

    @model_validator(mode="after")
    def check_period(self):
        if as_utc(self.end_date) <= as_utc(self.start_date):
            raise ValueError("End date must be after start date")
        return self

class BudgetUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=100)
    amount: Optional[float] = Field(None, gt=0, le=MAX_AMOUNT)
    category: Optional[str] = Field(None, min_length=1, max_length=50)
    description: Optional[str] = Field(None, max_length=500)
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None
    period_type: Optional[BudgetPeriodType] = None
    status: Optional[BudgetStatus] = None
    color: Optional[str] = Field(None, pattern=HEX_COLOR)
    icon: Optional[str] = Field(None, max_length=10)
    alert_threshold: Optional[int] = Field(None, ge=1, le=100)
    tags: Optional[List[Tag]] = None
    notes: Optional[str] = Field(None, max_length=1000)

class BudgetRead(BudgetBase):
    id: uuid.UUID
    user_id: uuid.UUID
    status: BudgetStatus
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    # Derived at read time from matching expenses
    spent: float = 0.0
    progress: float = 0.0
    remaining: Optional[float] = None
    days_remaining: Optional[int] = None
    daily_limit: Optional[float] = None
    status_info: Optional[Dict[str, str]] = None
    formatted_amount: Optional[str] = None
    formatted_spent: Optional[str] = None
    formatted_remaining: Optional[str] = None
    formatted_daily_limit: Optional[str] = None

    class Config:
        from_attributes = True

    @classmethod
    def from_budget(cls, budget, spent: float, now: datetime, currency: str = "USD") -> "BudgetRead":
        return cls.model_validate(budget).model_copy(
            update=derive_budget(budget, spent, now, currency).as_dict()
        )

class BudgetStats(BaseModel):
    total_budgets: int = 0
    total_budgeted: float = 0.0
    total_spent: float = 0.0
    total_remaining: float = 0.0
    over_budget_count: int = 0
    average_utilization: float = 0.0

class BudgetCategoryBreakdown(BaseModel):
    category: str
    count: int
    total_budgeted: float
    total_spent: float
    utilization: float

class BudgetRefreshResult(BaseModel):
    updated_count: int
