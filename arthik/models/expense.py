# arthik/models/expense.py
import uuid
from sqlalchemy import Column, String, ForeignKey, Float, Enum, DateTime, JSON
from sqlalchemy.dialects.postgresql import UUID as PG_UUID
from sqlalchemy.orm import relationship
from arthik.core.database import Base
from arthik.utils.dates import utcnow
import enum

class ExpensePaymentMethod(str, enum.Enum):
    cash = "cash"
    credit_card = "credit_card"
    debit_card = "debit_card"
    bank_transfer = "bank_transfer"
    digital_wallet = "digital_wallet"
    check = "check"
    other = "other"

class ExpenseStatus(str, enum.Enum):
    pending = "pending"
    completed = "completed"
    cancelled = "cancelled"  # soft delete

class Expense(Base):
    __tablename__ = "expenses"

    id = Column(PG_UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    user_id = Column(PG_UUID(as_uuid=True), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    title = Column(String(length=100), nullable=False)
    amount = Column(Float, nullable=False)
    category = Column(String(length=50), nullable=False, index=True)
    description = Column(String(length=500), nullable=True)
    date = Column(DateTime(timezone=True), nullable=False, default=utcnow, index=True)
    payment_method = Column(Enum(ExpensePaymentMethod), default=ExpensePaymentMethod.cash, nullable=False)
    location = Column(String(length=200), nullable=True)
    tags = Column(JSON, nullable=False, default=list)
    notes = Column(String(length=1000), nullable=True)
    status = Column(Enum(ExpenseStatus), default=ExpenseStatus.completed, nullable=False)

    created_at = Column(DateTime(timezone=True), default=utcnow)
    updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow)

    user = relationship("User", back_populates="expenses")        # see core/auth.py

    def __repr__(self):
        return f"<Expense title={self.title} amount={self.amount} user_id={self.user_id}>"
