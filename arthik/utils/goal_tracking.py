# arthik/utils/goal_tracking.py
"""
Goal progress tracking.

Everything here is a plain function over a Goal instance (persisted or
transient) and an explicit ``now``. Nothing in this module touches the
database session; crud/goal.py owns loading, locking and committing.

Contribution flow (apply_contribution):
  1. validate amount, description and goal status, before any mutation
  2. append the contribution record
  3. bump current_amount, clamped to target_amount
  4. mark newly crossed milestones as achieved (stored order, set once)
  5. active -> completed once current_amount reaches target_amount

The log records what the goal absorbed, so the completing contribution is
stored clamped and sum(contributions) == current_amount always holds.
"""
import enum
import logging
import math
from dataclasses import dataclass, asdict
from datetime import datetime
from decimal import Decimal
from numbers import Real
from typing import Dict, FrozenSet, List, Optional

from arthik.core.exceptions import (
    GoalNotActive,
    GoalValidationError,
    InvalidAmount,
    InvalidStatusTransition,
)
from arthik.models.goal import Goal, GoalContribution, GoalMilestone, GoalPriority, GoalStatus
from arthik.utils.dates import as_utc, ceil_days, utcnow
from arthik.utils.money import format_currency

logger = logging.getLogger(__name__)

MAX_TARGET_AMOUNT = 999_999.99
MAX_CONTRIBUTION_DESCRIPTION = 200

# Progress tiers, checked from the top down
ON_TRACK_THRESHOLD = 75
GOOD_PROGRESS_THRESHOLD = 50
MODERATE_PROGRESS_THRESHOLD = 25


class ProgressStatus(str, enum.Enum):
    completed = "completed"
    overdue = "overdue"
    on_track = "on-track"
    good_progress = "good-progress"
    moderate_progress = "moderate-progress"
    needs_attention = "needs-attention"


PRIORITY_COLORS: Dict[GoalPriority, str] = {
    GoalPriority.low: "#6b7280",
    GoalPriority.medium: "#3b82f6",
    GoalPriority.high: "#f59e0b",
    GoalPriority.urgent: "#ef4444",
}

# Automatic transitions only ever go active -> completed; the rest of this
# table is what a user may request through a direct edit.
ALLOWED_STATUS_TRANSITIONS: Dict[GoalStatus, FrozenSet[GoalStatus]] = {
    GoalStatus.active: frozenset({GoalStatus.paused, GoalStatus.completed, GoalStatus.cancelled}),
    GoalStatus.paused: frozenset({GoalStatus.active, GoalStatus.cancelled}),
    GoalStatus.completed: frozenset({GoalStatus.cancelled}),
    GoalStatus.cancelled: frozenset(),
}


@dataclass(frozen=True)
class GoalProgress:
    remaining_amount: float
    progress_percentage: float
    days_remaining: int
    days_elapsed: int
    total_days: int
    daily_contribution_needed: float
    progress_status: ProgressStatus
    priority_color: str
    formatted_target_amount: str
    formatted_current_amount: str
    formatted_remaining_amount: str
    formatted_daily_contribution_needed: str

    def as_dict(self) -> dict:
        return asdict(self)


# ────────────────────────────────────────────────────────────────────────────────
# DERIVED FIELDS
# ────────────────────────────────────────────────────────────────────────────────
def progress_percentage(current_amount: float, target_amount: float) -> float:
    if not target_amount:
        return 0.0
    return max(0.0, min(100.0, current_amount / target_amount * 100))


def remaining_amount(current_amount: float, target_amount: float) -> float:
    return max(0.0, target_amount - current_amount)


def classify_progress(progress: float, days_remaining: int) -> ProgressStatus:
    # Order matters: completed wins over overdue, overdue wins over the tiers
    if progress >= 100:
        return ProgressStatus.completed
    if days_remaining <= 0:
        return ProgressStatus.overdue
    if progress >= ON_TRACK_THRESHOLD:
        return ProgressStatus.on_track
    if progress >= GOOD_PROGRESS_THRESHOLD:
        return ProgressStatus.good_progress
    if progress >= MODERATE_PROGRESS_THRESHOLD:
        return ProgressStatus.moderate_progress
    return ProgressStatus.needs_attention


def derive(goal: Goal, now: datetime, currency: str = "USD") -> GoalProgress:
    """Compute every read-time field of a goal relative to ``now``."""
    target = goal.target_amount or 0.0
    current = goal.current_amount or 0.0
    start_date = goal.start_date or now

    remaining = remaining_amount(current, target)
    progress = progress_percentage(current, target)
    days_remaining = ceil_days(now, goal.target_date)
    daily_needed = remaining / days_remaining if days_remaining > 0 else 0.0

    priority = GoalPriority(goal.priority) if goal.priority else GoalPriority.medium

    return GoalProgress(
        remaining_amount=remaining,
        progress_percentage=progress,
        days_remaining=days_remaining,
        days_elapsed=ceil_days(start_date, now),
        total_days=ceil_days(start_date, goal.target_date),
        daily_contribution_needed=daily_needed,
        progress_status=classify_progress(progress, days_remaining),
        priority_color=PRIORITY_COLORS[priority],
        formatted_target_amount=format_currency(target, currency),
        formatted_current_amount=format_currency(current, currency),
        formatted_remaining_amount=format_currency(remaining, currency),
        formatted_daily_contribution_needed=format_currency(daily_needed, currency),
    )


# ────────────────────────────────────────────────────────────────────────────────
# VALIDATION
# ────────────────────────────────────────────────────────────────────────────────
def validate_contribution_amount(amount) -> float:
    """Return the amount as a float or raise InvalidAmount."""
    if isinstance(amount, bool) or not isinstance(amount, (Real, Decimal)):
        raise InvalidAmount(amount)
    # float() refuses signaling NaN outright
    if isinstance(amount, Decimal) and amount.is_nan():
        raise InvalidAmount(amount)
    value = float(amount)
    if not math.isfinite(value) or value <= 0:
        raise InvalidAmount(amount)
    return value


def validate_goal_dates(start_date: Optional[datetime], target_date: Optional[datetime]) -> None:
    if start_date is None or target_date is None:
        return
    if as_utc(target_date) <= as_utc(start_date):
        raise GoalValidationError("Target date must be after start date")


def validate_target_amount(target_amount: float, current_amount: float, status: GoalStatus) -> None:
    """
    The target can never drop below what is already saved, and an active
    goal must still have something left to save.
    """
    current = current_amount or 0.0
    if target_amount < current:
        raise GoalValidationError("Target amount cannot be lower than the amount already saved")
    if GoalStatus(status) == GoalStatus.active and target_amount == current:
        raise GoalValidationError("Target amount of an active goal must exceed the amount already saved")


def build_milestones(milestones: List[dict]) -> List[GoalMilestone]:
    """Milestones are only defined when the goal is created; keep their given order."""
    return [
        GoalMilestone(
            position=index,
            amount=float(m["amount"]),
            description=m.get("description"),
            achieved=False,
            achieved_at=None,
        )
        for index, m in enumerate(milestones or [])
    ]


# ────────────────────────────────────────────────────────────────────────────────
# CONTRIBUTIONS
# ────────────────────────────────────────────────────────────────────────────────
def apply_contribution(
    goal: Goal,
    amount,
    description: Optional[str] = None,
    now: Optional[datetime] = None,
) -> Goal:
    """
    Apply one contribution to ``goal`` in place and return it.

    All checks run before the first mutation, so a rejected contribution
    leaves the goal exactly as it was.
    """
    value = validate_contribution_amount(amount)
    if description is not None and len(description) > MAX_CONTRIBUTION_DESCRIPTION:
        raise GoalValidationError(
            f"Contribution description cannot exceed {MAX_CONTRIBUTION_DESCRIPTION} characters"
        )
    status = GoalStatus(goal.status)
    if status != GoalStatus.active:
        raise GoalNotActive(status.value)

    now = now or utcnow()

    current = goal.current_amount or 0.0
    remaining = goal.target_amount - current
    reaches_target = value >= remaining
    applied = max(remaining, 0.0) if reaches_target else value
    if applied < value:
        logger.info(f"Contribution of {value} to goal {goal.id} capped at {applied} to stay within target")

    goal.contributions.append(GoalContribution(amount=applied, description=description, date=now))
    # Exactly target_amount on completion
    goal.current_amount = goal.target_amount if reaches_target else current + applied

    for milestone in goal.milestones:
        if not milestone.achieved and goal.current_amount >= milestone.amount:
            milestone.achieved = True
            milestone.achieved_at = now
            logger.info(f"🏁 Milestone {milestone.amount} reached on goal {goal.id}")

    if reaches_target:
        goal.status = GoalStatus.completed
        logger.info(f"🎉 Goal {goal.id} completed at {goal.current_amount} of {goal.target_amount}")

    logger.info(f"Contribution of {value} applied to goal {goal.id}, total {goal.current_amount}")
    return goal


def contributions_total(goal: Goal) -> float:
    return sum(c.amount for c in goal.contributions)


def is_reconciled(goal: Goal, tolerance: float = 0.005) -> bool:
    """True when current_amount matches the contribution log."""
    return abs(contributions_total(goal) - (goal.current_amount or 0.0)) <= tolerance


# ────────────────────────────────────────────────────────────────────────────────
# STATUS
# ────────────────────────────────────────────────────────────────────────────────
def can_transition(current: GoalStatus, requested: GoalStatus) -> bool:
    current, requested = GoalStatus(current), GoalStatus(requested)
    return current == requested or requested in ALLOWED_STATUS_TRANSITIONS[current]


def change_status(goal: Goal, requested: GoalStatus) -> Goal:
    """User-driven status edit, checked against ALLOWED_STATUS_TRANSITIONS."""
    current = GoalStatus(goal.status)
    requested = GoalStatus(requested)
    if not can_transition(current, requested):
        logger.warning(f"Rejected status change on goal {goal.id}: {current.value} -> {requested.value}")
        raise InvalidStatusTransition(current.value, requested.value)
    if current != requested:
        goal.status = requested
        logger.info(f"Goal {goal.id} status changed: {current.value} -> {requested.value}")
    return goal
