# arthik/core/auth.py

import uuid
import enum
import logging
import asyncio
from datetime import datetime
from typing import Optional, Dict, Any

from fastapi import Depends, Request
from fastapi_users import FastAPIUsers, BaseUserManager, UUIDIDMixin
from fastapi_users.authentication import (
    AuthenticationBackend,
    BearerTransport,
    JWTStrategy,
)
from fastapi_users.db import SQLAlchemyUserDatabase
from fastapi_users import schemas
from fastapi_users.exceptions import UserAlreadyVerified, UserInactive

from sqlalchemy import Column, String, Boolean, DateTime, Enum, JSON
from sqlalchemy.dialects.postgresql import UUID as PG_UUID
from sqlalchemy.orm import relationship
from sqlalchemy.ext.asyncio import AsyncSession

import sendgrid
from sendgrid.helpers.mail import Mail

from .database import Base, get_async_session
from .config import settings
from arthik.utils.dates import utcnow

logger = logging.getLogger(__name__)

# Audience baked into every fastapi-users JWT; deps.py must decode with it
TOKEN_AUDIENCE = ["fastapi-users:auth"]

class Currency(str, enum.Enum):
    USD = "USD"
    EUR = "EUR"
    GBP = "GBP"
    CAD = "CAD"
    AUD = "AUD"
    JPY = "JPY"
    INR = "INR"

# 1. User DB model
class User(Base):
    __tablename__ = "users"

    id = Column(PG_UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    email = Column(String, unique=True, index=True, nullable=False)
    hashed_password = Column(String, nullable=False)
    is_active = Column(Boolean, default=True, nullable=False)
    is_superuser = Column(Boolean, default=False, nullable=False)
    is_verified = Column(Boolean, default=False, nullable=False)

    # Profile fields
    first_name = Column(String(length=50), nullable=True)
    last_name = Column(String(length=50), nullable=True)
    currency = Column(Enum(Currency), default=Currency.USD, nullable=False)
    timezone = Column(String(length=64), default="UTC", nullable=False)
    preferences = Column(JSON, nullable=True)
    last_login = Column(DateTime(timezone=True), nullable=True)
    created_at = Column(DateTime(timezone=True), default=utcnow)

    expenses = relationship("Expense", back_populates="user", cascade="all, delete-orphan")
    incomes = relationship("Income", back_populates="user", cascade="all, delete-orphan")
    budgets = relationship("Budget", back_populates="user", cascade="all, delete-orphan")
    goals = relationship("Goal", back_populates="user", cascade="all, delete-orphan")

    @property
    def full_name(self) -> Optional[str]:
        parts = [p for p in (self.first_name, self.last_name) if p]
        return " ".join(parts) or None

# 2. Pydantic schemas
class UserRead(schemas.BaseUser[uuid.UUID]):
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    full_name: Optional[str] = None
    currency: Currency = Currency.USD
    timezone: str = "UTC"
    preferences: Optional[Dict[str, Any]] = None
    last_login: Optional[datetime] = None

    class Config:
        from_attributes = True

class UserCreate(schemas.BaseUserCreate):
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    currency: Currency = Currency.USD

class UserUpdate(schemas.BaseUserUpdate):
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    currency: Optional[Currency] = None
    timezone: Optional[str] = None
    preferences: Optional[Dict[str, Any]] = None

# 3. Outbound email
async def send_email_via_sendgrid(to_email: str, subject: str, body: str) -> bool:
    """
    Send an HTML email through SendGrid. Returns False instead of raising so
    that registration and password resets never fail because of email delivery.
    """
    if not settings.emails_enabled:
        logger.info(f"Email delivery disabled, not sending '{subject}' to {to_email}")
        return False

    try:
        message = Mail(
            from_email=(settings.EMAIL_FROM, settings.EMAIL_FROM_NAME),
            to_emails=to_email,
            subject=subject,
            html_content=body
        )
        message.reply_to = settings.EMAIL_FROM

        sg = sendgrid.SendGridAPIClient(api_key=settings.SENDGRID_API_KEY)
        # The SendGrid client is blocking
        response = await asyncio.to_thread(sg.send, message)

        if response.status_code == 202:
            logger.info(f"✅ Email sent successfully to {to_email}")
            return True
        logger.error(f"❌ Failed to send email. Status code: {response.status_code}")
        return False
    except Exception as e:
        logger.error(f"❌ Exception while sending email to {to_email}: {str(e)}")
        return False

EMAIL_TEMPLATE = """
<!DOCTYPE html>
<html>
<body style="margin: 0; padding: 0; font-family: Arial, sans-serif; background-color: #f4f4f4;">
    <div style="max-width: 600px; margin: 0 auto; background-color: #ffffff; padding: 20px;">
        <h1 style="color: #3b82f6; font-size: 24px;">Arthik</h1>
        <p style="color: #666;">Hello <strong>{user_name}</strong>!</p>
        <p style="color: #666;">{intro}</p>
        <p style="text-align: center; margin: 30px 0;">
            <a href="{link}" style="background-color: #3b82f6; color: #ffffff; padding: 15px 30px; text-decoration: none; border-radius: 5px;">{action}</a>
        </p>
        <p style="color: #999; font-size: 12px; word-break: break-all;">{link}</p>
    </div>
</body>
</html>
"""

def _display_name(user: User) -> str:
    return user.full_name or user.email.split('@')[0]

# 4. User Manager
class UserManager(UUIDIDMixin, BaseUserManager[User, uuid.UUID]):
    reset_password_token_secret = settings.SECRET_KEY
    verification_token_secret = settings.SECRET_KEY

    async def on_after_register(self, user: User, request: Optional[Request] = None):
        logger.info(f"User {user.email} has registered")
        try:
            await self.request_verify(user, request)
        except (UserAlreadyVerified, UserInactive) as e:
            logger.info(f"Skipping verification email for {user.email}: {type(e).__name__}")

    async def on_after_login(self, user: User, request: Optional[Request] = None, response=None):
        await self.user_db.update(user, {"last_login": utcnow()})

    async def on_after_request_verify(self, user: User, token: str, request: Optional[Request] = None):
        logger.info(f"Verification requested for user {user.email}. Token: {token[:10]}...")
        html_body = EMAIL_TEMPLATE.format(
            user_name=_display_name(user),
            intro="Thanks for signing up. Please verify your email address to finish creating your account.",
            action="Verify Email Address",
            link=f"{settings.FRONTEND_URL}/verify-email?token={token}",
        )
        await send_email_via_sendgrid(user.email, "🔐 Verify your Arthik account", html_body)

    async def on_after_forgot_password(self, user: User, token: str, request: Optional[Request] = None):
        logger.info(f"Password reset requested for user {user.email}. Token: {token[:10]}...")
        html_body = EMAIL_TEMPLATE.format(
            user_name=_display_name(user),
            intro="We received a request to reset your password. If you made it, use the button below.",
            action="Reset Password",
            link=f"{settings.FRONTEND_URL}/reset-password?token={token}",
        )
        await send_email_via_sendgrid(user.email, "🔑 Reset your Arthik password", html_body)

    async def on_after_verify(self, user: User, request: Optional[Request] = None):
        logger.info(f"User {user.email} has been verified successfully! 🎉")

    async def on_after_reset_password(self, user: User, request: Optional[Request] = None):
        logger.info(f"Password reset completed for user {user.email}")

# 5. User Database
async def get_user_db(session: AsyncSession = Depends(get_async_session)):
    yield SQLAlchemyUserDatabase(session, User)

async def get_user_manager(user_db: SQLAlchemyUserDatabase = Depends(get_user_db)):
    yield UserManager(user_db)

# 6. Authentication
bearer_transport = BearerTransport(tokenUrl="/api/v1/auth/jwt/login")

def get_jwt_strategy() -> JWTStrategy:
    return JWTStrategy(
        secret=settings.SECRET_KEY,
        lifetime_seconds=settings.ACCESS_TOKEN_EXPIRE_MINUTES * 60,
        token_audience=TOKEN_AUDIENCE,
        algorithm=settings.ALGORITHM,
    )

auth_backend = AuthenticationBackend(
    name="jwt",
    transport=bearer_transport,
    get_strategy=get_jwt_strategy,
)

# 7. FastAPI Users instance
fastapi_users = FastAPIUsers[User, uuid.UUID](get_user_manager, [auth_backend])

current_active_user = fastapi_users.current_user(active=True)

__all__ = [
    "fastapi_users",
    "auth_backend",
    "current_active_user",
    "get_user_db",
    "get_user_manager",
    "User",
    "UserRead",
    "UserCreate",
    "UserUpdate",
    "UserManager",
    "Currency",
]
