# arthik/schemas/goal.py
from typing import List, Optional
from pydantic import BaseModel, Field, constr, model_validator
from datetime import datetime
import uuid

from arthik.models.goal import GoalCategory, GoalPriority, GoalStatus
from arthik.utils.goal_tracking import (
    MAX_CONTRIBUTION_DESCRIPTION,
    MAX_TARGET_AMOUNT,
    ProgressStatus,
    derive,
)

HEX_COLOR = r"^#[0-9A-Fa-f]{6}$"
Tag = constr(strip_whitespace=True, max_length=50)

class MilestoneCreate(BaseModel):
    amount: float = Field(..., ge=0)
    description: Optional[str] = Field(None, max_length=200)

class MilestoneRead(BaseModel):
    id: uuid.UUID
    amount: float
    description: Optional[str] = None
    achieved: bool
    achieved_at: Optional[datetime] = None

    class Config:
        from_attributes = True

class ContributionCreate(BaseModel):
    # Amount and description length are checked by the goal tracker so that
    # the rejection carries its domain error code
    amount: float = Field(..., description="Must be greater than 0")
    description: Optional[str] = Field(None, description=f"Up to {MAX_CONTRIBUTION_DESCRIPTION} characters")

class ContributionRead(BaseModel):
    id: uuid.UUID
    amount: float
    description: Optional[str] = None
    date: datetime

    class Config:
        from_attributes = True

class GoalBase(BaseModel):
    title: str = Field(..., min_length=1, max_length=100)
    description: Optional[str] = Field(None, max_length=500)
    target_amount: float = Field(..., gt=0, le=MAX_TARGET_AMOUNT)
    category: GoalCategory = GoalCategory.savings
    priority: GoalPriority = GoalPriority.medium
    target_date: datetime
    start_date: Optional[datetime] = None
    color: str = Field("#3b82f6", pattern=HEX_COLOR)
    icon: Optional[str] = Field("🎯", max_length=10)
    alert_threshold: int = Field(80, ge=1, le=100)
    tags: List[Tag] = []
    notes: Optional[str] = Field(None, max_length=1000)

class GoalCreate(GoalBase):
    milestones: List[MilestoneCreate] = []

    @model_validator(mode="after")
    def check_milestones(self):
        for milestone in self.milestones:
            if milestone.amount > self.target_amount:
                raise ValueError("Milestone amount cannot exceed the target amount")
        return self

class GoalUpdate(BaseModel):
    """
    Direct edits. current_amount, milestones and contributions are not
    accepted here; only contributions move the saved amount.
    """
    title: Optional[str] = Field(None, min_length=1, max_length=100)
    description: Optional[str] = Field(None, max_length=500)
    target_amount: Optional[float] = Field(None, gt=0, le=MAX_TARGET_AMOUNT)
    category: Optional[GoalCategory] = None
    priority: Optional[GoalPriority] = None
    status: Optional[GoalStatus] = None
    target_date: Optional[datetime] = None
    start_date: Optional[datetime] = None
    color: Optional[str] = Field(None, pattern=HEX_COLOR)
    icon: Optional[str] = Field(None, max_length=10)
    alert_threshold: Optional[int] = Field(None, ge=1, le=100)
    tags: Optional[List[Tag]] = None
    notes: Optional[str] = Field(None, max_length=1000)

    class Config:
        extra = "forbid"

class GoalRead(BaseModel):
    id: uuid.UUID
    user_id: uuid.UUID
    title: str
    description: Optional[str] = None
    target_amount: float
    current_amount: float
    category: GoalCategory
    priority: GoalPriority
    status: GoalStatus
    start_date: datetime
    target_date: datetime
    color: str
    icon: Optional[str] = None
    alert_threshold: int
    tags: List[str] = []
    notes: Optional[str] = None
    version: int
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    milestones: List[MilestoneRead] = []
    contributions: List[ContributionRead] = []

    # Derived at read time
    remaining_amount: Optional[float] = None
    progress_percentage: Optional[float] = None
    days_remaining: Optional[int] = None
    days_elapsed: Optional[int] = None
    total_days: Optional[int] = None
    daily_contribution_needed: Optional[float] = None
    progress_status: Optional[ProgressStatus] = None
    priority_color: Optional[str] = None
    formatted_target_amount: Optional[str] = None
    formatted_current_amount: Optional[str] = None
    formatted_remaining_amount: Optional[str] = None
    formatted_daily_contribution_needed: Optional[str] = None

    class Config:
        from_attributes = True

    @classmethod
    def from_goal(cls, goal, now: datetime, currency: str = "USD") -> "GoalRead":
        return cls.model_validate(goal).model_copy(update=derive(goal, now, currency).as_dict())

class GoalSummary(BaseModel):
    """Compact goal shape used on the dashboard"""
    id: uuid.UUID
    title: str
    target_amount: float
    current_amount: float
    priority: GoalPriority
    target_date: datetime
    progress_percentage: float
    days_remaining: int
    progress_status: ProgressStatus
    priority_color: str

class GoalStats(BaseModel):
    total_goals: int = 0
    active_goals: int = 0
    completed_goals: int = 0
    paused_goals: int = 0
    urgent_goals: int = 0
    total_target_amount: float = 0.0
    total_current_amount: float = 0.0
    average_progress: float = 0.0

class GoalCategoryBreakdown(BaseModel):
    category: GoalCategory
    count: int
    total_target_amount: float
    total_current_amount: float
    average_progress: float
