"""
Goal progress tracking on transient Goal objects.

No database here: apply_contribution, derive and change_status are plain
functions over the ORM instance.
"""

import math
import uuid
from datetime import datetime, timedelta, timezone
from decimal import Decimal

import pytest

from arthik.core.exceptions import (
    GoalNotActive,
    GoalValidationError,
    InvalidAmount,
    InvalidStatusTransition,
)
from arthik.models.goal import Goal, GoalCategory, GoalMilestone, GoalPriority, GoalStatus
from arthik.utils.goal_tracking import (
    ALLOWED_STATUS_TRANSITIONS,
    ProgressStatus,
    apply_contribution,
    build_milestones,
    can_transition,
    change_status,
    classify_progress,
    contributions_total,
    derive,
    is_reconciled,
    progress_percentage,
    validate_goal_dates,
    validate_target_amount,
)

NOW = datetime(2026, 1, 15, 12, 0, tzinfo=timezone.utc)


def make_goal(
    target=1000.0,
    current=0.0,
    status=GoalStatus.active,
    milestones=(500.0,),
    days_left=30,
    started_days_ago=10,
    priority=GoalPriority.medium,
):
    goal = Goal(
        id=uuid.uuid4(),
        user_id=uuid.uuid4(),
        title="Emergency fund",
        target_amount=target,
        current_amount=current,
        category=GoalCategory.emergency_fund,
        priority=priority,
        status=status,
        start_date=NOW - timedelta(days=started_days_ago),
        target_date=NOW + timedelta(days=days_left),
    )
    goal.milestones = [
        GoalMilestone(position=i, amount=amount, achieved=False) for i, amount in enumerate(milestones)
    ]
    goal.contributions = []
    return goal


def snapshot(goal):
    return (
        goal.current_amount,
        GoalStatus(goal.status),
        len(goal.contributions),
        [(m.achieved, m.achieved_at) for m in goal.milestones],
    )


# ============================================================
# Contribution scenarios
# ============================================================


class TestApplyContribution:
    def test_partial_contribution_reaches_milestone(self):
        """600 of 1000 crosses the 500 milestone but does not complete the goal."""
        goal = make_goal()

        apply_contribution(goal, 600, now=NOW)

        assert goal.current_amount == 600
        assert goal.status == GoalStatus.active
        assert goal.milestones[0].achieved is True
        assert goal.milestones[0].achieved_at == NOW
        assert derive(goal, NOW).progress_percentage == 60

    def test_contribution_completes_goal(self):
        goal = make_goal()
        apply_contribution(goal, 600, now=NOW)

        apply_contribution(goal, 400, now=NOW + timedelta(days=1))

        progress = derive(goal, NOW + timedelta(days=1))
        assert goal.current_amount == 1000
        assert goal.status == GoalStatus.completed
        assert progress.progress_percentage == 100
        assert progress.remaining_amount == 0
        assert progress.progress_status == ProgressStatus.completed

    def test_overshoot_is_capped_at_target(self):
        """900 saved of 1000, then 250: the goal stops at 1000 and logs what it absorbed."""
        goal = make_goal(current=900.0)

        apply_contribution(goal, 250, now=NOW)

        assert goal.current_amount == 1000
        assert goal.status == GoalStatus.completed
        assert goal.contributions[-1].amount == 100
        assert derive(goal, NOW).progress_percentage == 100
        assert derive(goal, NOW).remaining_amount == 0

    def test_overshoot_keeps_log_reconciled(self):
        goal = make_goal(target=500.0, milestones=())

        for amount in (120.5, 200, 300):
            apply_contribution(goal, amount, now=NOW)

        assert goal.current_amount == 500
        assert contributions_total(goal) == pytest.approx(500)
        assert is_reconciled(goal)

    def test_completion_lands_exactly_on_target(self):
        """0.1 + 0.2 style float error must not leave a completed goal a hair off target."""
        goal = make_goal(target=0.3, milestones=())
        apply_contribution(goal, 0.1, now=NOW)

        apply_contribution(goal, 0.2, now=NOW)

        assert goal.status == GoalStatus.completed
        assert goal.current_amount == 0.3

    def test_contribution_record_appended(self):
        goal = make_goal()

        apply_contribution(goal, 75.5, description="Paycheck", now=NOW)

        assert len(goal.contributions) == 1
        record = goal.contributions[0]
        assert record.amount == 75.5
        assert record.description == "Paycheck"
        assert record.date == NOW

    def test_sum_of_contributions_matches_current_amount(self):
        goal = make_goal(target=10_000.0, milestones=())
        amounts = [12.34, 100, 0.01, 250.5, 999.99, 3]

        for amount in amounts:
            apply_contribution(goal, amount, now=NOW)

        assert goal.current_amount == pytest.approx(sum(amounts))
        assert contributions_total(goal) == pytest.approx(goal.current_amount)
        assert is_reconciled(goal)

    def test_integer_amount_accepted(self):
        goal = make_goal()
        apply_contribution(goal, 10, now=NOW)
        assert isinstance(goal.current_amount, float)

    def test_decimal_amount_accepted(self):
        goal = make_goal()

        apply_contribution(goal, Decimal("10.50"), now=NOW)

        assert goal.current_amount == 10.5
        assert isinstance(goal.current_amount, float)
        assert goal.contributions[0].amount == 10.5

    def test_log_out_of_step_is_detected(self):
        goal = make_goal()
        apply_contribution(goal, 100, now=NOW)

        goal.current_amount = 40.0

        assert not is_reconciled(goal)


class TestRejectedContributions:
    @pytest.mark.parametrize(
        "amount",
        [
            0, -5, -10.0, math.nan, math.inf, -math.inf, True, "10", None,
            Decimal("0"), Decimal("-1.5"), Decimal("NaN"), Decimal("sNaN"), Decimal("Infinity"),
        ],
    )
    def test_invalid_amount_leaves_goal_untouched(self, amount):
        goal = make_goal(current=100.0)
        before = snapshot(goal)

        with pytest.raises(InvalidAmount):
            apply_contribution(goal, amount, now=NOW)

        assert snapshot(goal) == before

    def test_negative_amount_on_fresh_goal(self):
        """-10 on a goal at 0 stays at 0 with active status."""
        goal = make_goal()

        with pytest.raises(InvalidAmount) as exc_info:
            apply_contribution(goal, -10, now=NOW)

        assert exc_info.value.code == "InvalidAmount"
        assert goal.current_amount == 0
        assert goal.status == GoalStatus.active
        assert goal.contributions == []

    @pytest.mark.parametrize("status", [GoalStatus.paused, GoalStatus.completed, GoalStatus.cancelled])
    def test_non_active_goal_rejects_contributions(self, status):
        goal = make_goal(status=status)
        before = snapshot(goal)

        with pytest.raises(GoalNotActive):
            apply_contribution(goal, 50, now=NOW)

        assert snapshot(goal) == before

    def test_completed_goal_stays_completed(self):
        goal = make_goal()
        apply_contribution(goal, 1000, now=NOW)

        with pytest.raises(GoalNotActive):
            apply_contribution(goal, 1, now=NOW)

        assert goal.status == GoalStatus.completed
        assert goal.current_amount == 1000

    def test_description_too_long(self):
        goal = make_goal()
        before = snapshot(goal)

        with pytest.raises(GoalValidationError):
            apply_contribution(goal, 10, description="x" * 201, now=NOW)

        assert snapshot(goal) == before

    def test_description_at_limit_accepted(self):
        goal = make_goal()
        apply_contribution(goal, 10, description="x" * 200, now=NOW)
        assert goal.contributions[0].description == "x" * 200


# ============================================================
# Milestones
# ============================================================


class TestMilestones:
    def test_achieved_milestone_is_never_reset(self):
        goal = make_goal(milestones=(100.0, 500.0))
        apply_contribution(goal, 150, now=NOW)
        first_achieved_at = goal.milestones[0].achieved_at

        apply_contribution(goal, 400, now=NOW + timedelta(days=3))

        assert goal.milestones[0].achieved is True
        assert goal.milestones[0].achieved_at == first_achieved_at
        assert goal.milestones[1].achieved is True
        assert goal.milestones[1].achieved_at == NOW + timedelta(days=3)

    def test_unordered_milestones_checked_individually(self):
        goal = make_goal(milestones=(300.0, 100.0))

        apply_contribution(goal, 150, now=NOW)

        assert [m.achieved for m in goal.milestones] == [False, True]

    def test_one_contribution_can_cross_several_milestones(self):
        goal = make_goal(milestones=(100.0, 200.0, 300.0, 900.0))

        apply_contribution(goal, 350, now=NOW)

        assert [m.achieved for m in goal.milestones] == [True, True, True, False]

    def test_build_milestones_keeps_given_order(self):
        milestones = build_milestones([
            {"amount": 750, "description": "Three quarters"},
            {"amount": 250},
        ])

        assert [m.position for m in milestones] == [0, 1]
        assert [m.amount for m in milestones] == [750.0, 250.0]
        assert milestones[0].description == "Three quarters"
        assert all(not m.achieved for m in milestones)


# ============================================================
# Derived fields
# ============================================================


class TestDerive:
    def test_overdue_goal(self):
        """Target date passed with 400 of 1000 saved."""
        goal = make_goal(current=400.0, days_left=-1)

        progress = derive(goal, NOW)

        assert progress.progress_percentage == 40
        assert progress.days_remaining == 0
        assert progress.daily_contribution_needed == 0
        assert progress.progress_status == ProgressStatus.overdue

    def test_zero_target_is_guarded(self):
        goal = make_goal(target=0.0, days_left=0)

        progress = derive(goal, NOW)

        assert progress.progress_percentage == 0
        assert progress.daily_contribution_needed == 0
        assert progress.remaining_amount == 0

    def test_days_remaining_rounds_up(self):
        goal = make_goal(current=0.0)
        goal.target_date = NOW + timedelta(days=1, hours=12)

        progress = derive(goal, NOW)

        assert progress.days_remaining == 2
        assert progress.daily_contribution_needed == pytest.approx(500.0)

    def test_elapsed_and_total_days(self):
        goal = make_goal(days_left=20, started_days_ago=10)

        progress = derive(goal, NOW)

        assert progress.days_elapsed == 10
        assert progress.total_days == 30

    def test_progress_never_exceeds_bounds(self):
        assert progress_percentage(5000, 1000) == 100
        assert progress_percentage(0, 1000) == 0
        assert progress_percentage(-50, 1000) == 0

    def test_priority_color_and_formatting(self):
        goal = make_goal(current=1234.5, priority=GoalPriority.urgent)

        progress = derive(goal, NOW, currency="EUR")

        assert progress.priority_color == "#ef4444"
        assert progress.formatted_current_amount == "€1,234.50"
        assert progress.formatted_target_amount == "€1,000.00"

    def test_as_dict_exposes_every_field(self):
        data = derive(make_goal(), NOW).as_dict()
        assert data["progress_status"] == ProgressStatus.needs_attention
        assert data["remaining_amount"] == 1000


class TestClassifyProgress:
    @pytest.mark.parametrize(
        "progress, days_remaining, expected",
        [
            (100, 0, ProgressStatus.completed),
            (100, 10, ProgressStatus.completed),
            (99.9, 0, ProgressStatus.overdue),
            (75, 10, ProgressStatus.on_track),
            (74.99, 10, ProgressStatus.good_progress),
            (50, 10, ProgressStatus.good_progress),
            (25, 10, ProgressStatus.moderate_progress),
            (24.9, 10, ProgressStatus.needs_attention),
            (0, 10, ProgressStatus.needs_attention),
        ],
    )
    def test_cascade(self, progress, days_remaining, expected):
        assert classify_progress(progress, days_remaining) == expected

    def test_wire_values(self):
        assert ProgressStatus.on_track.value == "on-track"
        assert ProgressStatus.needs_attention.value == "needs-attention"


# ============================================================
# Status edits
# ============================================================

ALL_STATUSES = list(GoalStatus)


class TestStatusTransitions:
    @pytest.mark.parametrize("current", ALL_STATUSES)
    @pytest.mark.parametrize("requested", ALL_STATUSES)
    def test_allow_list(self, current, requested):
        goal = make_goal(status=current)
        allowed = current == requested or requested in ALLOWED_STATUS_TRANSITIONS[current]

        if allowed:
            change_status(goal, requested)
            assert goal.status == requested
        else:
            with pytest.raises(InvalidStatusTransition):
                change_status(goal, requested)
            assert goal.status == current

    def test_completed_cannot_be_reactivated(self):
        assert can_transition(GoalStatus.completed, GoalStatus.active) is False

    def test_cancelled_is_terminal(self):
        assert ALLOWED_STATUS_TRANSITIONS[GoalStatus.cancelled] == frozenset()

    def test_accepts_raw_values(self):
        goal = make_goal()
        change_status(goal, "paused")
        assert goal.status == GoalStatus.paused


class TestGoalDates:
    def test_target_before_start_rejected(self):
        with pytest.raises(GoalValidationError):
            validate_goal_dates(NOW, NOW - timedelta(days=1))

    def test_same_instant_rejected(self):
        with pytest.raises(GoalValidationError):
            validate_goal_dates(NOW, NOW)

    def test_naive_and_aware_compare(self):
        validate_goal_dates(NOW.replace(tzinfo=None), NOW + timedelta(days=1))

    def test_missing_dates_skip_check(self):
        validate_goal_dates(None, NOW)


class TestTargetAmount:
    def test_below_saved_amount_rejected(self):
        with pytest.raises(GoalValidationError):
            validate_target_amount(300.0, 400.0, GoalStatus.paused)

    def test_active_goal_needs_room_left(self):
        with pytest.raises(GoalValidationError):
            validate_target_amount(400.0, 400.0, GoalStatus.active)

    def test_paused_goal_may_sit_at_target(self):
        validate_target_amount(400.0, 400.0, GoalStatus.paused)

    def test_raise_accepted(self):
        validate_target_amount(1500.0, 400.0, GoalStatus.active)
