# arthik/utils/budgeting.py
import calendar
from dataclasses import dataclass, asdict
from datetime import datetime, timedelta
from typing import Any, Dict, Optional, Tuple

from arthik.utils.dates import as_utc, ceil_days
from arthik.utils.money import format_currency

MONTH_NAMES = list(calendar.month_name)[1:]

TIME_PERIODS = ("daily", "weekly", "monthly", "yearly")

DEFAULT_TREND_MONTHS = 12
MAX_TREND_MONTHS = 60


# ────────────────────────────────────────────────────────────────────────────────
# BUDGET PROGRESS
# ────────────────────────────────────────────────────────────────────────────────
@dataclass(frozen=True)
class BudgetProgress:
    spent: float
    progress: float
    remaining: float
    days_remaining: int
    daily_limit: float
    status_info: Dict[str, str]
    formatted_amount: str
    formatted_spent: str
    formatted_remaining: str
    formatted_daily_limit: str

    def as_dict(self) -> Dict[str, Any]:
        return asdict(self)


def budget_status_info(progress: float, alert_threshold: int) -> Dict[str, str]:
    if progress >= 100:
        return {"status": "exceeded", "message": "Budget exceeded", "color": "#ef4444"}
    if progress >= alert_threshold:
        return {"status": "warning", "message": "Approaching budget limit", "color": "#f59e0b"}
    if progress >= 50:
        return {"status": "moderate", "message": "Moderate spending", "color": "#3b82f6"}
    return {"status": "good", "message": "On track", "color": "#10b981"}


def derive_budget(budget, spent: float, now: datetime, currency: str = "USD") -> BudgetProgress:
    """Read-time fields of a budget, given what has been spent against it."""
    amount = budget.amount or 0.0
    progress = min(spent / amount * 100, 100.0) if amount > 0 else 0.0
    remaining = max(amount - spent, 0.0)
    days_remaining = ceil_days(now, budget.end_date)
    daily_limit = remaining / days_remaining if days_remaining > 0 else 0.0

    return BudgetProgress(
        spent=spent,
        progress=progress,
        remaining=remaining,
        days_remaining=days_remaining,
        daily_limit=daily_limit,
        status_info=budget_status_info(progress, budget.alert_threshold or 80),
        formatted_amount=format_currency(amount, currency),
        formatted_spent=format_currency(spent, currency),
        formatted_remaining=format_currency(remaining, currency),
        formatted_daily_limit=format_currency(daily_limit, currency),
    )


# ────────────────────────────────────────────────────────────────────────────────
# PERIODS
# ────────────────────────────────────────────────────────────────────────────────
def period_range(period: str, now: datetime) -> Tuple[datetime, datetime]:
    """Start and end of the calendar period containing ``now`` (UTC)."""
    now = as_utc(now)
    day_start = now.replace(hour=0, minute=0, second=0, microsecond=0)

    if period == "daily":
        start = day_start
        end = start + timedelta(days=1)
    elif period == "weekly":
        start = day_start - timedelta(days=now.weekday())  # Monday
        end = start + timedelta(days=7)
    elif period == "yearly":
        start = day_start.replace(month=1, day=1)
        end = start.replace(year=start.year + 1)
    else:  # default → monthly
        start = day_start.replace(day=1)
        end = _add_months(start, 1)

    return start, end - timedelta(microseconds=1)


def _add_months(moment: datetime, months: int) -> datetime:
    index = moment.year * 12 + (moment.month - 1) + months
    return moment.replace(year=index // 12, month=index % 12 + 1, day=1)


def trend_window_start(months: int, now: datetime) -> datetime:
    """First instant of the month ``months - 1`` months before ``now``."""
    now = as_utc(now)
    month_start = now.replace(day=1, hour=0, minute=0, second=0, microsecond=0)
    return _add_months(month_start, -(months - 1))


# ────────────────────────────────────────────────────────────────────────────────
# MISC
# ────────────────────────────────────────────────────────────────────────────────
def relative_time(when: Optional[datetime], now: datetime) -> Optional[str]:
    if when is None:
        return None
    days = int((as_utc(now) - as_utc(when)).total_seconds() // 86400)

    if days <= 0:
        return "Today"
    if days == 1:
        return "Yesterday"
    if days < 7:
        return f"{days} days ago"
    if days < 30:
        return f"{days // 7} weeks ago"
    if days < 365:
        return f"{days // 30} months ago"
    return f"{days // 365} years ago"


def percentage_of(part: float, whole: float) -> float:
    return round(part / whole * 100, 2) if whole else 0.0


def savings_rate(income: float, expenses: float) -> float:
    # Guarded: no income means no meaningful rate
    if income <= 0:
        return 0.0
    return round((income - expenses) / income * 100, 2)
