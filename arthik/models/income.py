# arthik/models/income.py
import uuid
from sqlalchemy import Column, String, ForeignKey, Float, Enum, DateTime, JSON
from sqlalchemy.dialects.postgresql import UUID as PG_UUID
from sqlalchemy.orm import relationship
from arthik.core.database import Base
from arthik.utils.dates import utcnow
import enum

class IncomeSource(str, enum.Enum):
    salary = "salary"
    freelance = "freelance"
    business = "business"
    investment = "investment"
    gift = "gift"
    refund = "refund"
    other = "other"

class IncomePaymentMethod(str, enum.Enum):
    bank_transfer = "bank_transfer"
    cash = "cash"
    check = "check"
    digital_wallet = "digital_wallet"
    other = "other"

class IncomeStatus(str, enum.Enum):
    pending = "pending"
    received = "received"
    cancelled = "cancelled"  # soft delete

class Income(Base):
    __tablename__ = "incomes"

    id = Column(PG_UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    user_id = Column(PG_UUID(as_uuid=True), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    title = Column(String(length=100), nullable=False)
    amount = Column(Float, nullable=False)
    category = Column(String(length=50), nullable=False, index=True)
    description = Column(String(length=500), nullable=True)
    date = Column(DateTime(timezone=True), nullable=False, default=utcnow, index=True)
    source = Column(Enum(IncomeSource), default=IncomeSource.salary, nullable=False)
    payment_method = Column(Enum(IncomePaymentMethod), default=IncomePaymentMethod.bank_transfer, nullable=False)
    tags = Column(JSON, nullable=False, default=list)
    notes = Column(String(length=1000), nullable=True)
    status = Column(Enum(IncomeStatus), default=IncomeStatus.received, nullable=False)

    created_at = Column(DateTime(timezone=True), default=utcnow)
    updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow)

    user = relationship("User", back_populates="incomes")

    def __repr__(self):
        return f"<Income title={self.title} amount={self.amount} source={self.source} user_id={self.user_id}>"
