# arthik/api/v1/routes/users.py
import uuid

from fastapi import APIRouter, Depends, HTTPException, Request, status
from fastapi_users import BaseUserManager, exceptions
from sqlalchemy.ext.asyncio import AsyncSession

from arthik.core.auth import get_user_manager, User, UserRead, UserUpdate
from arthik.core.database import get_async_session
from arthik.crud.user import get_user_stats
from arthik.schemas.user import UserStats
from arthik.api.deps import get_current_user
from arthik.utils.money import format_currency

router = APIRouter(prefix="/users", tags=["User Management"])

# 1) GET /users/me
@router.get("/me", response_model=UserRead)
async def read_own_profile(user: User = Depends(get_current_user)):
    """Get current user's profile"""
    return user

# 2) PATCH /users/me
@router.patch("/me", response_model=UserRead)
async def update_own_profile(
    user_update: UserUpdate,
    request: Request,
    user: User = Depends(get_current_user),
    user_manager: BaseUserManager[User, uuid.UUID] = Depends(get_user_manager),
):
    """
    Update current user's profile. Goes through the user manager in safe mode
    so passwords get hashed and privilege flags are ignored.
    """
    if not user_update.model_dump(exclude_unset=True):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="No fields provided for update"
        )

    try:
        return await user_manager.update(user_update, user, safe=True, request=request)
    except exceptions.InvalidPasswordException as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=e.reason)
    except exceptions.UserAlreadyExists:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Email already in use")

# 3) GET /users/me/stats
@router.get("/me/stats", response_model=UserStats)
async def read_own_stats(
    db: AsyncSession = Depends(get_async_session),
    user: User = Depends(get_current_user),
):
    """Lifetime income/expense totals and net balance"""
    user_id = uuid.UUID(str(user.id))
    stats = await get_user_stats(user_id, db)
    return UserStats(**stats, formatted_net_balance=format_currency(stats["net_balance"], user.currency))
