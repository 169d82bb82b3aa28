# arthik/models/user.py
# Note: User is already defined in core/auth.py, so we do not redefine it here.
# Importing this module registers every table on Base.metadata.

from arthik.core.auth import User
from arthik.models.budget import Budget
from arthik.models.expense import Expense
from arthik.models.goal import Goal, GoalContribution, GoalMilestone
from arthik.models.income import Income

__all__ = [
    "User",
    "Budget",
    "Expense",
    "Goal",
    "GoalContribution",
    "GoalMilestone",
    "Income",
]
