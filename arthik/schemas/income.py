# arthik/schemas/income.py
from typing import List, Optional
from pydantic import BaseModel, Field, constr
from datetime import datetime
import uuid

from arthik.models.income import IncomePaymentMethod, IncomeSource, IncomeStatus
from arthik.utils.budgeting import relative_time
from arthik.utils.money import format_currency

MAX_AMOUNT = 999_999_999
Tag = constr(strip_whitespace=True, max_length=50)

class IncomeBase(BaseModel):
    title: str = Field(..., min_length=1, max_length=100, description="E.g. March salary")
    amount: float = Field(..., gt=0, le=MAX_AMOUNT)
    category: str = Field(..., min_length=1, max_length=50)
    description: Optional[str] = Field(None, max_length=500)
    date: Optional[datetime] = Field(None, description="ISO 8601, defaults to now")
    source: IncomeSource = IncomeSource.salary
    payment_method: IncomePaymentMethod = IncomePaymentMethod.bank_transfer
    tags: List[Tag] = []
    notes: Optional[str] = Field(None, max_length=1000)

class IncomeCreate(IncomeBase):
    status: IncomeStatus = IncomeStatus.received

class IncomeUpdate(BaseModel):
    title: Optional[str] = Field(None, min_length=1, max_length=100)
    amount: Optional[float] = Field(None, gt=0, le=MAX_AMOUNT)
    category: Optional[str] = Field(None, min_length=1, max_length=50)
    description: Optional[str] = Field(None, max_length=500)
    date: Optional[datetime] = None
    source: Optional[IncomeSource] = None
    payment_method: Optional[IncomePaymentMethod] = None
    tags: Optional[List[Tag]] = None
    notes: Optional[str] = Field(None, max_length=1000)
    status: Optional[IncomeStatus] = None

class IncomeRead(IncomeBase):
    id: uuid.UUID
    user_id: uuid.UUID
    date: datetime
    status: IncomeStatus
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    formatted_amount: Optional[str] = None
    relative_time: Optional[str] = None

    class Config:
        from_attributes = True

    @classmethod
    def from_income(cls, income, now: datetime, currency: str = "USD") -> "IncomeRead":
        return cls.model_validate(income).model_copy(update={
            "formatted_amount": format_currency(income.amount, currency),
            "relative_time": relative_time(income.date, now),
        })

class SourceBreakdown(BaseModel):
    source: IncomeSource
    total_amount: float
    count: int
    average_amount: float
    percentage: float
