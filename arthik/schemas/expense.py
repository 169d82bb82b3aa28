# arthik/schemas/expense.py
from typing import List, Optional
from pydantic import BaseModel, Field, constr
from datetime import datetime
import uuid

from arthik.models.expense import ExpensePaymentMethod, ExpenseStatus
from arthik.utils.budgeting import relative_time
from arthik.utils.money import format_currency

MAX_AMOUNT = 999_999_999
Tag = constr(strip_whitespace=True, max_length=50)

class ExpenseBase(BaseModel):
    title: str = Field(..., min_length=1, max_length=100, description="E.g. Weekly groceries")
    amount: float = Field(..., gt=0, le=MAX_AMOUNT)
    category: str = Field(..., min_length=1, max_length=50)
    description: Optional[str] = Field(None, max_length=500)
    date: Optional[datetime] = Field(None, description="ISO 8601, defaults to now")
    payment_method: ExpensePaymentMethod = ExpensePaymentMethod.cash
    location: Optional[str] = Field(None, max_length=200)
    tags: List[Tag] = []
    notes: Optional[str] = Field(None, max_length=1000)

class ExpenseCreate(ExpenseBase):
    status: ExpenseStatus = ExpenseStatus.completed

class ExpenseUpdate(BaseModel):
    title: Optional[str] = Field(None, min_length=1, max_length=100)
    amount: Optional[float] = Field(None, gt=0, le=MAX_AMOUNT)
    category: Optional[str] = Field(None, min_length=1, max_length=50)
    description: Optional[str] = Field(None, max_length=500)
    date: Optional[datetime] = None
    payment_method: Optional[ExpensePaymentMethod] = None
    location: Optional[str] = Field(None, max_length=200)
    tags: Optional[List[Tag]] = None
    notes: Optional[str] = Field(None, max_length=1000)
    status: Optional[ExpenseStatus] = None

class ExpenseRead(ExpenseBase):
    id: uuid.UUID
    user_id: uuid.UUID
    date: datetime
    status: ExpenseStatus
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    formatted_amount: Optional[str] = None
    relative_time: Optional[str] = None

    class Config:
        from_attributes = True

    @classmethod
    def from_expense(cls, expense, now: datetime, currency: str = "USD") -> "ExpenseRead":
        return cls.model_validate(expense).model_copy(update={
            "formatted_amount": format_currency(expense.amount, currency),
            "relative_time": relative_time(expense.date, now),
        })
