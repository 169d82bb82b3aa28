# arthik/api/v1/routes/auth.py
import logging
from typing import Optional

from fastapi import APIRouter, Depends, Response, status

from arthik.core.auth import User
from arthik.api.deps import get_optional_current_user

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["Authentication"])

# Registered before the fastapi-users auth router so this one wins
@router.post("/jwt/logout", status_code=status.HTTP_200_OK)
async def logout(
    response: Response,
    user: Optional[User] = Depends(get_optional_current_user),
):
    """
    Logout never requires a valid token: JWTs are stateless, so all there is
    to do is clear the access token cookie if the client uses one.
    """
    response.delete_cookie(key="access_token")
    if user is not None:
        logger.info(f"User {user.email} logged out")
    return {"detail": "Successfully logged out"}
