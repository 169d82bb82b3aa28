# arthik/models/budget.py
import uuid
from sqlalchemy import Column, String, ForeignKey, Float, Enum, DateTime, Integer, JSON
from sqlalchemy.dialects.postgresql import UUID as PG_UUID
from sqlalchemy.orm import relationship
from arthik.core.database import Base
from arthik.utils.dates import utcnow
import enum

class BudgetPeriodType(str, enum.Enum):
    monthly = "monthly"
    quarterly = "quarterly"
    yearly = "yearly"
    custom = "custom"

class BudgetStatus(str, enum.Enum):
    active = "active"
    completed = "completed"
    cancelled = "cancelled"
    overdue = "overdue"

class Budget(Base):
    __tablename__ = "budgets"

    id = Column(PG_UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    user_id = Column(PG_UUID(as_uuid=True), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    name = Column(String(length=100), nullable=False)
    amount = Column(Float, nullable=False)
    # Matched against Expense.category when computing spend
    category = Column(String(length=50), nullable=False, index=True)
    description = Column(String(length=500), nullable=True)
    start_date = Column(DateTime(timezone=True), nullable=False, default=utcnow)
    end_date = Column(DateTime(timezone=True), nullable=False)
    period_type = Column(Enum(BudgetPeriodType), default=BudgetPeriodType.monthly, nullable=False)
    status = Column(Enum(BudgetStatus), default=BudgetStatus.active, nullable=False, index=True)
    color = Column(String(length=7), nullable=False, default="#3b82f6")
    icon = Column(String(length=10), nullable=True, default="💰")
    alert_threshold = Column(Integer, nullable=False, default=80)
    tags = Column(JSON, nullable=False, default=list)
    notes = Column(String(length=1000), nullable=True)

    created_at = Column(DateTime(timezone=True), default=utcnow)
    updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow)

    user = relationship("User", back_populates="budgets")

    def __repr__(self):
        return f"<Budget name={self.name} amount={self.amount} category={self.category} user_id={self.user_id}>"
