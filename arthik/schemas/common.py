# arthik/schemas/common.py
import math
from typing import Generic, List, Optional, TypeVar
from pydantic import BaseModel, Field

T = TypeVar("T")

MAX_PAGE_SIZE = 100

class Page(BaseModel, Generic[T]):
    items: List[T]
    total: int
    page: int
    limit: int
    pages: int

    @classmethod
    def build(cls, items: List[T], total: int, page: int, limit: int) -> "Page[T]":
        return cls(
            items=items,
            total=total,
            page=page,
            limit=limit,
            pages=math.ceil(total / limit) if limit else 0,
        )

class StatsOverview(BaseModel):
    total_amount: float = 0.0
    count: int = 0
    average_amount: float = 0.0
    min_amount: float = 0.0
    max_amount: float = 0.0
    formatted_total: Optional[str] = None

class CategoryBreakdown(BaseModel):
    category: str
    total_amount: float
    count: int
    average_amount: float
    percentage: float = Field(..., description="Share of the grand total, 0-100")

class MonthlyTrend(BaseModel):
    year: int
    month: int
    month_name: str
    total_amount: float
    count: int
