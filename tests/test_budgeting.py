"""Budget progress, reporting periods and small formatting helpers."""

from datetime import datetime, timedelta, timezone
from types import SimpleNamespace

import pytest

from arthik.utils.budgeting import (
    budget_status_info,
    derive_budget,
    percentage_of,
    period_range,
    relative_time,
    savings_rate,
    trend_window_start,
)
from arthik.utils.money import format_currency, safe_float

NOW = datetime(2026, 1, 15, 12, 30, tzinfo=timezone.utc)  # a Thursday


def make_budget(amount=500.0, days_left=10, alert_threshold=80):
    return SimpleNamespace(
        amount=amount,
        alert_threshold=alert_threshold,
        end_date=NOW + timedelta(days=days_left),
    )


class TestBudgetStatusInfo:
    @pytest.mark.parametrize(
        "progress, expected",
        [(100, "exceeded"), (85, "warning"), (80, "warning"), (60, "moderate"), (50, "moderate"), (10, "good")],
    )
    def test_thresholds(self, progress, expected):
        assert budget_status_info(progress, 80)["status"] == expected

    def test_custom_alert_threshold(self):
        assert budget_status_info(65, 60)["status"] == "warning"

    def test_carries_message_and_color(self):
        info = budget_status_info(120, 80)
        assert info["message"] == "Budget exceeded"
        assert info["color"].startswith("#")


class TestDeriveBudget:
    def test_partial_spend(self):
        progress = derive_budget(make_budget(), 200.0, NOW)

        assert progress.progress == 40
        assert progress.remaining == 300
        assert progress.days_remaining == 10
        assert progress.daily_limit == 30
        assert progress.status_info["status"] == "good"
        assert progress.formatted_spent == "$200.00"

    def test_overspend_caps_progress(self):
        progress = derive_budget(make_budget(), 750.0, NOW)

        assert progress.progress == 100
        assert progress.remaining == 0
        assert progress.status_info["status"] == "exceeded"

    def test_zero_amount_is_guarded(self):
        progress = derive_budget(make_budget(amount=0.0), 25.0, NOW)
        assert progress.progress == 0

    def test_ended_budget_has_no_daily_limit(self):
        progress = derive_budget(make_budget(days_left=-3), 100.0, NOW)

        assert progress.days_remaining == 0
        assert progress.daily_limit == 0


class TestPeriodRange:
    def test_monthly(self):
        start, end = period_range("monthly", NOW)
        assert start == datetime(2026, 1, 1, tzinfo=timezone.utc)
        assert end == datetime(2026, 1, 31, 23, 59, 59, 999999, tzinfo=timezone.utc)

    def test_december_rolls_into_next_year(self):
        start, end = period_range("monthly", datetime(2025, 12, 20, tzinfo=timezone.utc))
        assert start == datetime(2025, 12, 1, tzinfo=timezone.utc)
        assert end.year == 2025 and end.month == 12 and end.day == 31

    def test_weekly_starts_monday(self):
        start, end = period_range("weekly", NOW)
        assert start == datetime(2026, 1, 12, tzinfo=timezone.utc)
        assert start.weekday() == 0
        assert end.date() == datetime(2026, 1, 18).date()

    def test_daily(self):
        start, end = period_range("daily", NOW)
        assert start == datetime(2026, 1, 15, tzinfo=timezone.utc)
        assert end.date() == start.date()

    def test_yearly(self):
        start, end = period_range("yearly", NOW)
        assert start == datetime(2026, 1, 1, tzinfo=timezone.utc)
        assert end == datetime(2026, 12, 31, 23, 59, 59, 999999, tzinfo=timezone.utc)

    def test_unknown_period_falls_back_to_monthly(self):
        assert period_range("fortnightly", NOW) == period_range("monthly", NOW)


class TestTrendWindow:
    def test_twelve_months_back(self):
        assert trend_window_start(12, NOW) == datetime(2025, 2, 1, tzinfo=timezone.utc)

    def test_single_month_is_current_month(self):
        assert trend_window_start(1, NOW) == datetime(2026, 1, 1, tzinfo=timezone.utc)


class TestRelativeTime:
    @pytest.mark.parametrize(
        "days_ago, expected",
        [
            (0, "Today"),
            (1, "Yesterday"),
            (3, "3 days ago"),
            (14, "2 weeks ago"),
            (65, "2 months ago"),
            (800, "2 years ago"),
        ],
    )
    def test_labels(self, days_ago, expected):
        assert relative_time(NOW - timedelta(days=days_ago), NOW) == expected

    def test_naive_datetime_treated_as_utc(self):
        naive = (NOW - timedelta(days=1)).replace(tzinfo=None)
        assert relative_time(naive, NOW) == "Yesterday"

    def test_none(self):
        assert relative_time(None, NOW) is None


class TestRatios:
    def test_savings_rate(self):
        assert savings_rate(4000, 3000) == 25.0

    def test_savings_rate_negative_when_overspending(self):
        assert savings_rate(1000, 1500) == -50.0

    def test_savings_rate_without_income(self):
        assert savings_rate(0, 200) == 0

    def test_percentage_of(self):
        assert percentage_of(1, 3) == 33.33
        assert percentage_of(5, 0) == 0


class TestMoney:
    @pytest.mark.parametrize(
        "amount, currency, expected",
        [
            (1234.5, "USD", "$1,234.50"),
            (0, "GBP", "£0.00"),
            (-12, "EUR", "-€12.00"),
            (1500.7, "JPY", "¥1,501"),
            (99.999, "INR", "₹100.00"),
            (10, "CHF", "CHF 10.00"),
            (None, "USD", "$0.00"),
        ],
    )
    def test_format_currency(self, amount, currency, expected):
        assert format_currency(amount, currency) == expected

    def test_format_currency_accepts_enum(self):
        from arthik.core.auth import Currency

        assert format_currency(5, Currency.CAD) == "CA$5.00"

    @pytest.mark.parametrize("value", [None, "abc", float("nan"), float("inf")])
    def test_safe_float_defaults(self, value):
        assert safe_float(value, default=-1.0) == -1.0

    def test_safe_float_parses_strings(self):
        assert safe_float("12.5") == 12.5
