"""
Domain exceptions raised by crud and utils code.

Routes never build these into responses themselves; the handler registered
in main.py turns them into JSON with the status code carried by the error.
"""
from typing import Optional

from fastapi import status


class FinanceTrackerError(Exception):
    """Base class for all recoverable, caller-facing errors"""

    status_code: int = status.HTTP_400_BAD_REQUEST

    def __init__(self, message: str, status_code: Optional[int] = None):
        self.message = message
        if status_code is not None:
            self.status_code = status_code
        super().__init__(message)

    @property
    def code(self) -> str:
        return type(self).__name__


class InvalidAmount(FinanceTrackerError):
    status_code = status.HTTP_422_UNPROCESSABLE_ENTITY

    def __init__(self, amount):
        self.amount = amount
        super().__init__(f"Contribution amount must be a positive number, got {amount!r}")


class GoalValidationError(FinanceTrackerError):
    status_code = status.HTTP_422_UNPROCESSABLE_ENTITY


class GoalNotActive(FinanceTrackerError):
    status_code = status.HTTP_409_CONFLICT

    def __init__(self, goal_status):
        self.goal_status = goal_status
        super().__init__(f"Contributions are only accepted for active goals (goal is {goal_status})")


class InvalidStatusTransition(FinanceTrackerError):
    status_code = status.HTTP_409_CONFLICT

    def __init__(self, current, requested):
        self.current = current
        self.requested = requested
        super().__init__(f"Cannot change status from {current} to {requested}")


class ResourceNotFound(FinanceTrackerError):
    """Also covers records owned by another user"""

    status_code = status.HTTP_404_NOT_FOUND

    def __init__(self, resource: str):
        self.resource = resource
        super().__init__(f"{resource} not found")


class ConcurrentUpdateError(FinanceTrackerError):
    status_code = status.HTTP_409_CONFLICT

    def __init__(self, resource: str):
        super().__init__(f"{resource} was modified by another request, please retry")


class BudgetValidationError(FinanceTrackerError):
    status_code = status.HTTP_422_UNPROCESSABLE_ENTITY
