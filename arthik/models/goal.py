# arthik/models/goal.py
import uuid
import enum
from sqlalchemy import Column, String, Float, DateTime, ForeignKey, Boolean, Integer, Enum, JSON
from sqlalchemy.dialects.postgresql import UUID as PG_UUID
from sqlalchemy.orm import relationship
from arthik.core.database import Base
from arthik.utils.dates import utcnow

class GoalCategory(str, enum.Enum):
    savings = "savings"
    debt_payoff = "debt_payoff"
    investment = "investment"
    purchase = "purchase"
    emergency_fund = "emergency_fund"
    other = "other"

class GoalPriority(str, enum.Enum):
    low = "low"
    medium = "medium"
    high = "high"
    urgent = "urgent"

class GoalStatus(str, enum.Enum):
    active = "active"
    completed = "completed"
    paused = "paused"
    cancelled = "cancelled"

class Goal(Base):
    __tablename__ = "goals"

    id = Column(PG_UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    user_id = Column(PG_UUID(as_uuid=True), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    title = Column(String(length=100), nullable=False)
    description = Column(String(length=500), nullable=True)
    target_amount = Column(Float, nullable=False)
    # Running sum of the contribution log; only apply_contribution moves it
    current_amount = Column(Float, nullable=False, default=0.0)
    category = Column(Enum(GoalCategory), nullable=False, default=GoalCategory.savings)
    priority = Column(Enum(GoalPriority), nullable=False, default=GoalPriority.medium)
    status = Column(Enum(GoalStatus), nullable=False, default=GoalStatus.active, index=True)
    start_date = Column(DateTime(timezone=True), nullable=False, default=utcnow)
    target_date = Column(DateTime(timezone=True), nullable=False)
    color = Column(String(length=7), nullable=False, default="#3b82f6")
    icon = Column(String(length=10), nullable=True, default="🎯")
    alert_threshold = Column(Integer, nullable=False, default=80)
    tags = Column(JSON, nullable=False, default=list)
    notes = Column(String(length=1000), nullable=True)
    version = Column(Integer, nullable=False)

    created_at = Column(DateTime(timezone=True), default=utcnow)
    updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow)

    milestones = relationship(
        "GoalMilestone",
        back_populates="goal",
        cascade="all, delete-orphan",
        order_by="GoalMilestone.position",
        lazy="selectin",
    )
    contributions = relationship(
        "GoalContribution",
        back_populates="goal",
        cascade="all, delete-orphan",
        order_by="GoalContribution.date",
        lazy="selectin",
    )
    user = relationship("User", back_populates="goals")

    __mapper_args__ = {"version_id_col": version}

    def __repr__(self):
        return f"<Goal title={self.title} target={self.target_amount} status={self.status} user_id={self.user_id}>"

class GoalMilestone(Base):
    __tablename__ = "goal_milestones"

    id = Column(PG_UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    goal_id = Column(PG_UUID(as_uuid=True), ForeignKey("goals.id", ondelete="CASCADE"), nullable=False, index=True)
    position = Column(Integer, nullable=False, default=0)
    amount = Column(Float, nullable=False)
    description = Column(String(length=200), nullable=True)
    # Set once by apply_contribution, never reset
    achieved = Column(Boolean, nullable=False, default=False)
    achieved_at = Column(DateTime(timezone=True), nullable=True)

    goal = relationship("Goal", back_populates="milestones")

    def __repr__(self):
        return f"<GoalMilestone amount={self.amount} achieved={self.achieved}>"

class GoalContribution(Base):
    __tablename__ = "goal_contributions"

    id = Column(PG_UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    goal_id = Column(PG_UUID(as_uuid=True), ForeignKey("goals.id", ondelete="CASCADE"), nullable=False, index=True)
    amount = Column(Float, nullable=False)
    description = Column(String(length=200), nullable=True)
    date = Column(DateTime(timezone=True), nullable=False, default=utcnow)

    goal = relationship("Goal", back_populates="contributions")

    def __repr__(self):
        return f"<GoalContribution amount={self.amount} date={self.date}>"
