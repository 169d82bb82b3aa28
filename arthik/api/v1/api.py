from fastapi import APIRouter

from arthik.core.auth import fastapi_users, auth_backend, UserRead, UserCreate
from arthik.api.v1.routes import auth, users, goals, expenses, incomes, budgets, dashboard

api_router = APIRouter()

# ------------------------------------------------------------
# AUTHENTICATION ROUTES
# ------------------------------------------------------------
# Custom logout first so it shadows the fastapi-users one
api_router.include_router(auth.router)

# JWT Login
api_router.include_router(
    fastapi_users.get_auth_router(auth_backend),
    prefix="/auth/jwt",
    tags=["Authentication"],
)

# Registration
api_router.include_router(
    fastapi_users.get_register_router(UserRead, UserCreate),
    prefix="/auth",
    tags=["Authentication"],
)

# Email verification and password reset
api_router.include_router(
    fastapi_users.get_verify_router(UserRead),
    prefix="/auth",
    tags=["Email Verification"],
)
api_router.include_router(
    fastapi_users.get_reset_password_router(),
    prefix="/auth",
    tags=["Password Reset"],
)

# ------------------------------------------------------------
# BUSINESS LOGIC ROUTES
# ------------------------------------------------------------
api_router.include_router(users.router)
api_router.include_router(goals.router)
api_router.include_router(expenses.router)
api_router.include_router(incomes.router)
api_router.include_router(budgets.router)
api_router.include_router(dashboard.router)
